from typing import Optional
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from loguru import logger

from src.core.config import MongoSettings


class MongoManager:
    """
    Owns the async MongoDB client for one database.

    Usage:
        manager = MongoManager(config.data.mongo)
        manager.init()
        files = manager.get_collection("files")
        await manager.close()
    """
    def __init__(self, settings: Optional[MongoSettings] = None):
        self.settings = settings or MongoSettings()
        self.client: Optional[AsyncMongoClient] = None
        self.db: Optional[AsyncDatabase] = None

    @property
    def connection_url(self) -> str:
        return f"mongodb://{self.settings.host}:{self.settings.port}"

    def init(self):
        """Create the client. The connection itself is opened lazily by pymongo."""
        if self.client is not None:
            return
        self.client = AsyncMongoClient(self.connection_url)
        self.db = self.client[self.settings.database_name]
        logger.info(f"Connected to MongoDB (Async): {self.connection_url}/{self.settings.database_name}")

    def get_collection(self, collection_name: str):
        if self.db is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.db[collection_name]

    async def close(self):
        if self.client is not None:
            await self.client.close()
            logger.debug("MongoDB client closed")
        self.client = None
        self.db = None
