"""
Tagger - Service

Use cases behind the command line: registering files, tagging them and
selecting them with filter expressions.
"""
import uuid
from typing import List, Optional

from loguru import logger

from src.core.base_system import BaseSystem
from src.core.config import ConfigManager
from src.tagger.errors import InvalidTagNameError, NoFileError, NoMatchesError
from src.tagger.models import File, PlainTag, Tag, make_tag, parse_value
from src.tagger.query.lexer import is_identifier
from src.tagger.query.parser import parse_filter
from src.tagger.storage import StorageProvider, create_storage

UUID_PREFIX = "uuid:"


class TaggerService(BaseSystem):
    """
    Tag management service.

    Features:
    - File registration with generated ids
    - Move/rename keeping id and tags
    - Setting and unsetting plain or valued tags
    - Filter matching

    Files are addressed by path, or by id with a "uuid:" prefix.
    """

    def __init__(self, config: ConfigManager, storage: Optional[StorageProvider] = None):
        super().__init__(config)
        self.storage = storage if storage is not None else create_storage(config.data)

    async def initialize(self) -> None:
        """Open the storage backend."""
        await self.storage.initialize()
        await super().initialize()

    async def shutdown(self) -> None:
        """Close the storage backend."""
        await self.storage.close()
        await super().shutdown()

    async def resolve(self, arg: str) -> File:
        """
        Look up a file by path or "uuid:<id>".

        Raises:
            NoFileError: No such file, or malformed id
        """
        if arg.startswith(UUID_PREFIX):
            raw = arg[len(UUID_PREFIX):]
            try:
                file_id = uuid.UUID(raw)
            except ValueError:
                raise NoFileError(raw) from None
            return await self.storage.get_file(file_id)
        return await self.storage.get_file_for_path(arg)

    # --- Files ---

    async def add_file(self, path: str) -> File:
        """Register a file under a new id, with no tags."""
        file = File.new(path)
        await self.storage.update_file(file, [])
        logger.info(f"Added file {file.id} at {path}")
        return file

    async def remove_file(self, arg: str) -> File:
        file = await self.resolve(arg)
        await self.storage.remove_file(file)
        logger.info(f"Removed file {file.id}")
        return file

    async def move_file(self, src: str, dst: str) -> File:
        """Point a file at a new path, keeping its id and tags."""
        file = await self.resolve(src)
        tags = await self.storage.get_tags(file)
        moved = file.with_path(dst)
        await self.storage.update_file(moved, tags)
        logger.info(f"Moved file {file.id}: {file.path} -> {dst}")
        return moved

    async def list_files(self) -> List[File]:
        return await self.storage.get_all_files()

    # --- Tags ---

    async def set_tag(self, arg: str, name: str, value: Optional[str] = None) -> Tag:
        """
        Set a plain tag, or a valued tag when value is given.

        Raises:
            InvalidTagNameError: name would not lex as a tag name in filter text
            InvalidValueError: value is not an integer
        """
        if not is_identifier(name):
            raise InvalidTagNameError(name)
        tag = make_tag(name, parse_value(value) if value is not None else None)
        file = await self.resolve(arg)
        await self.storage.update_tag(file, tag)
        logger.debug(f"Set {tag} on {file.id}")
        return tag

    async def unset_tag(self, arg: str, name: str) -> None:
        file = await self.resolve(arg)
        await self.storage.remove_tag(file, PlainTag(name))
        logger.debug(f"Unset {name} on {file.id}")

    async def get_tags(self, arg: str) -> List[Tag]:
        file = await self.resolve(arg)
        return await self.storage.get_tags(file)

    # --- Matching ---

    async def match(self, text: str, allow_empty: bool = True) -> List[File]:
        """
        Files matching filter text.

        The text is parsed before storage is touched, so a syntax error
        never runs a query.

        Raises:
            LexError, ParseError, InvalidValueError: Bad filter text
            NoMatchesError: Nothing matched and allow_empty is False
        """
        node = parse_filter(text)
        logger.debug(f"Parsed filter {text!r} as {node}")
        files = await self.storage.get_matching_files(node)
        if not files and not allow_empty:
            raise NoMatchesError(text.strip())
        return files
