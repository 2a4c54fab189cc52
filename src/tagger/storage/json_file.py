"""
Tagger - JSON File Storage

MemoryStorage persisted to a single JSON document.

Document layout:
    {
        "version": 1,
        "files": [
            {"id": "<uuid>", "path": "/a.txt",
             "tags": [{"name": "x", "value": null}, {"name": "y", "value": 3}]}
        ]
    }
"""
import json
import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, Sequence

from loguru import logger

from src.tagger.errors import StorageError
from src.tagger.models import File, Tag
from src.tagger.storage.base import DEFAULT_MATCH_CONCURRENCY
from src.tagger.storage.memory import MemoryStorage

FORMAT_VERSION = 1


class JsonFileStorage(MemoryStorage):
    """
    StorageProvider backed by a JSON file.

    The file is read on initialize() and rewritten after every mutation.
    A missing file means an empty store.
    """

    def __init__(self, path: str, match_concurrency: int = DEFAULT_MATCH_CONCURRENCY):
        super().__init__(match_concurrency)
        self.path = path

    async def initialize(self) -> None:
        if not os.path.isfile(self.path):
            logger.debug(f"No database at {self.path}, starting empty")
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"cannot read database {self.path}: {e}") from e

        if not isinstance(raw, dict) or not isinstance(raw.get("files"), list):
            raise StorageError(f"cannot read database {self.path}: unexpected document layout")
        if raw.get("version", FORMAT_VERSION) != FORMAT_VERSION:
            raise StorageError(f"cannot read database {self.path}: unsupported version {raw['version']}")

        self.restore(raw["files"])
        logger.debug(f"Loaded {len(self)} files from {self.path}")

    def save(self) -> None:
        """Write the store atomically (temp file + rename)."""
        dirname = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(dirname, exist_ok=True)

        document = {"version": FORMAT_VERSION, "files": self.snapshot()}
        fd, tmp_path = tempfile.mkstemp(prefix=".tagger-", suffix=".json", dir=dirname)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    # --- Mutations persist immediately ---

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """Save after the block; on any failure the in-memory store is rolled back."""
        before = self.snapshot()
        try:
            yield
            self.save()
        except BaseException:
            self.restore(before)
            raise

    async def update_file(self, file: File, tags: Sequence[Tag]) -> None:
        with self._transaction():
            await super().update_file(file, tags)

    async def remove_file(self, file: File) -> None:
        with self._transaction():
            await super().remove_file(file)

    async def update_tag(self, file: File, tag: Tag) -> None:
        with self._transaction():
            await super().update_tag(file, tag)

    async def remove_tag(self, file: File, tag: Tag) -> None:
        with self._transaction():
            await super().remove_tag(file, tag)
