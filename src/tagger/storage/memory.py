"""
Tagger - In-Memory Storage

Dictionary-backed StorageProvider. Used directly for tests and scratch
sessions, and as the working set of JsonFileStorage.
"""
import uuid
from typing import Dict, List, Sequence

from loguru import logger

from src.tagger.errors import NoFileError, NoTagError, StorageError
from src.tagger.models import File, Tag, make_tag
from src.tagger.storage.base import DEFAULT_MATCH_CONCURRENCY, StorageProvider


class MemoryStorage(StorageProvider):
    """
    StorageProvider keeping everything in process memory.

    Dicts preserve insertion order, which gives registration order for
    files and insertion order for tags; replacing a tag keeps its slot.
    """

    def __init__(self, match_concurrency: int = DEFAULT_MATCH_CONCURRENCY):
        super().__init__(match_concurrency)
        self._files: Dict[uuid.UUID, File] = {}
        self._paths: Dict[str, uuid.UUID] = {}
        self._tags: Dict[uuid.UUID, Dict[str, Tag]] = {}

    def __len__(self) -> int:
        return len(self._files)

    def _require(self, file_id: uuid.UUID) -> Dict[str, Tag]:
        if file_id not in self._files:
            raise NoFileError(file_id)
        return self._tags[file_id]

    # --- Files ---

    async def get_file(self, file_id: uuid.UUID) -> File:
        try:
            return self._files[file_id]
        except KeyError:
            raise NoFileError(file_id) from None

    async def get_file_for_path(self, path: str) -> File:
        try:
            return self._files[self._paths[path]]
        except KeyError:
            raise NoFileError(path) from None

    async def get_all_files(self) -> List[File]:
        return list(self._files.values())

    async def update_file(self, file: File, tags: Sequence[Tag]) -> None:
        holder = self._paths.get(file.path)
        if holder is not None and holder != file.id:
            logger.info(f"Path {file.path} taken over from {holder} by {file.id}")
            self._drop(holder)

        previous = self._files.get(file.id)
        if previous is not None and previous.path != file.path:
            del self._paths[previous.path]

        self._files[file.id] = file
        self._paths[file.path] = file.id
        self._tags[file.id] = {tag.name: tag for tag in tags}

    async def remove_file(self, file: File) -> None:
        self._require(file.id)
        self._drop(file.id)

    def _drop(self, file_id: uuid.UUID) -> None:
        removed = self._files.pop(file_id)
        del self._paths[removed.path]
        del self._tags[file_id]

    # --- Tags ---

    async def get_tags(self, file: File) -> List[Tag]:
        return list(self._require(file.id).values())

    async def update_tag(self, file: File, tag: Tag) -> None:
        self._require(file.id)[tag.name] = tag

    async def remove_tag(self, file: File, tag: Tag) -> None:
        tags = self._require(file.id)
        if tag.name not in tags:
            raise NoTagError(tag.name, file.id)
        del tags[tag.name]

    # --- Snapshots ---

    def snapshot(self) -> List[Dict]:
        """Plain-data view of the store, in registration order."""
        return [
            {
                "id": str(file.id),
                "path": file.path,
                "tags": [
                    {"name": tag.name, "value": tag.value if tag.has_value else None}
                    for tag in self._tags[file.id].values()
                ],
            }
            for file in self._files.values()
        ]

    def restore(self, records: List[Dict]) -> None:
        """
        Replace the store's content with a snapshot() result.

        Raises:
            StorageError: Records are malformed
        """
        files: Dict[uuid.UUID, File] = {}
        paths: Dict[str, uuid.UUID] = {}
        tags: Dict[uuid.UUID, Dict[str, Tag]] = {}
        try:
            for record in records:
                file = File(uuid.UUID(record["id"]), record["path"])
                if not isinstance(file.path, str) or file.path in paths or file.id in files:
                    raise ValueError(f"duplicate or invalid file record: {record['id']}")
                files[file.id] = file
                paths[file.path] = file.id
                tags[file.id] = {}
                for item in record.get("tags", []):
                    tag = make_tag(item["name"], item.get("value"))
                    tags[file.id][tag.name] = tag
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StorageError(f"malformed storage snapshot: {e}") from e

        self._files, self._paths, self._tags = files, paths, tags
