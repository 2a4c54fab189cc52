"""
Tagger - MongoDB Storage

StorageProvider on top of pymongo's async client.

Collections:
    files:    {_id: "<uuid>", path: str, registered_seq: int}
    tags:     {file_id: "<uuid>", name: str, value: int | None, position: int}
    counters: {_id: "files", seq: int}

registered_seq comes from an atomic counter, so registration order has no
ties even across processes.

Filtering happens in process through the default get_matching_files; no
filter logic is translated into MongoDB queries.
"""
import uuid
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger
from pymongo import ReturnDocument

from src.core.database.manager import MongoManager
from src.tagger.errors import NoFileError, NoTagError
from src.tagger.models import File, Tag, make_tag
from src.tagger.storage.base import DEFAULT_MATCH_CONCURRENCY, StorageProvider

FILES_COLLECTION = "files"
TAGS_COLLECTION = "tags"
COUNTERS_COLLECTION = "counters"


class MongoStorage(StorageProvider):
    """
    StorageProvider persisting files and tags in MongoDB.

    Args:
        manager: Connection manager; initialized on initialize() and closed
            on close() when owns_manager is True
        owns_manager: Whether close() should close the manager's client
    """

    def __init__(
        self,
        manager: MongoManager,
        match_concurrency: int = DEFAULT_MATCH_CONCURRENCY,
        owns_manager: bool = True
    ):
        super().__init__(match_concurrency)
        self.manager = manager
        self.owns_manager = owns_manager

    @property
    def files(self):
        return self.manager.get_collection(FILES_COLLECTION)

    @property
    def tags(self):
        return self.manager.get_collection(TAGS_COLLECTION)

    @property
    def counters(self):
        return self.manager.get_collection(COUNTERS_COLLECTION)

    async def initialize(self) -> None:
        self.manager.init()
        await self.files.create_index("path", unique=True)
        await self.files.create_index("registered_seq")
        await self.tags.create_index([("file_id", 1), ("name", 1)], unique=True)
        await self.tags.create_index([("file_id", 1), ("position", 1)])
        logger.debug("MongoStorage indexes ensured")

    async def close(self) -> None:
        if self.owns_manager:
            await self.manager.close()

    # --- Conversion ---

    @staticmethod
    def _file_from_doc(doc: Dict[str, Any]) -> File:
        return File(uuid.UUID(doc["_id"]), doc["path"])

    @staticmethod
    def _tag_from_doc(doc: Dict[str, Any]) -> Tag:
        return make_tag(doc["name"], doc.get("value"))

    @staticmethod
    def _tag_value(tag: Tag) -> Optional[int]:
        return tag.value if tag.has_value else None

    async def _require(self, file: File) -> str:
        key = str(file.id)
        if await self.files.find_one({"_id": key}, projection={"_id": 1}) is None:
            raise NoFileError(file.id)
        return key

    async def _next_sequence(self) -> int:
        counter = await self.counters.find_one_and_update(
            {"_id": FILES_COLLECTION},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return counter["seq"]

    # --- Files ---

    async def get_file(self, file_id: uuid.UUID) -> File:
        doc = await self.files.find_one({"_id": str(file_id)})
        if doc is None:
            raise NoFileError(file_id)
        return self._file_from_doc(doc)

    async def get_file_for_path(self, path: str) -> File:
        doc = await self.files.find_one({"path": path})
        if doc is None:
            raise NoFileError(path)
        return self._file_from_doc(doc)

    async def get_all_files(self) -> List[File]:
        cursor = self.files.find({}, sort=[("registered_seq", 1)])
        return [self._file_from_doc(doc) async for doc in cursor]

    async def update_file(self, file: File, tags: Sequence[Tag]) -> None:
        key = str(file.id)

        holder = await self.files.find_one({"path": file.path})
        if holder is not None and holder["_id"] != key:
            logger.info(f"Path {file.path} taken over from {holder['_id']} by {key}")
            await self._drop(holder["_id"])

        # A move keeps the original registration slot
        result = await self.files.update_one({"_id": key}, {"$set": {"path": file.path}})
        if not result.matched_count:
            await self.files.insert_one(
                {"_id": key, "path": file.path, "registered_seq": await self._next_sequence()}
            )

        await self.tags.delete_many({"file_id": key})
        unique: Dict[str, Tag] = {tag.name: tag for tag in tags}
        if unique:
            await self.tags.insert_many([
                {"file_id": key, "name": tag.name, "value": self._tag_value(tag), "position": index}
                for index, tag in enumerate(unique.values())
            ])

    async def remove_file(self, file: File) -> None:
        key = await self._require(file)
        await self._drop(key)

    async def _drop(self, key: str) -> None:
        await self.tags.delete_many({"file_id": key})
        await self.files.delete_one({"_id": key})

    # --- Tags ---

    async def get_tags(self, file: File) -> List[Tag]:
        key = await self._require(file)
        cursor = self.tags.find({"file_id": key}, sort=[("position", 1)])
        return [self._tag_from_doc(doc) async for doc in cursor]

    async def update_tag(self, file: File, tag: Tag) -> None:
        key = await self._require(file)
        value = self._tag_value(tag)

        result = await self.tags.update_one(
            {"file_id": key, "name": tag.name},
            {"$set": {"value": value}}
        )
        if result.matched_count:
            return

        last = await self.tags.find_one({"file_id": key}, sort=[("position", -1)])
        position = last["position"] + 1 if last is not None else 0
        await self.tags.insert_one(
            {"file_id": key, "name": tag.name, "value": value, "position": position}
        )

    async def remove_tag(self, file: File, tag: Tag) -> None:
        key = await self._require(file)
        result = await self.tags.delete_one({"file_id": key, "name": tag.name})
        if result.deleted_count == 0:
            raise NoTagError(tag.name, file.id)
