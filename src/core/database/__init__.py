"""MongoDB connection management."""
from .manager import MongoManager

__all__ = ["MongoManager"]
