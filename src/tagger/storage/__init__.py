"""Tagger Storage Package."""
from src.core.config import AppConfig
from src.tagger.storage.base import StorageProvider
from src.tagger.storage.memory import MemoryStorage
from src.tagger.storage.json_file import JsonFileStorage


def create_storage(config: AppConfig) -> StorageProvider:
    """
    Build the storage backend selected by config.storage.backend.

    The Mongo backend is imported lazily so pymongo is only loaded when used.
    """
    settings = config.storage
    if settings.backend == "memory":
        return MemoryStorage(match_concurrency=settings.match_concurrency)
    if settings.backend == "json":
        return JsonFileStorage(settings.database_path, match_concurrency=settings.match_concurrency)
    if settings.backend == "mongo":
        from src.core.database.manager import MongoManager
        from src.tagger.storage.mongo import MongoStorage
        return MongoStorage(MongoManager(config.mongo), match_concurrency=settings.match_concurrency)
    raise ValueError(f"Unknown storage backend: {settings.backend}")


__all__ = ["StorageProvider", "MemoryStorage", "JsonFileStorage", "create_storage"]
