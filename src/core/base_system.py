from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from loguru import logger

if TYPE_CHECKING:
    from .config import ConfigManager

class BaseSystem(ABC):
    """
    Abstract Base Class for long-lived services.
    Ensures consistent initialization and shutdown, and gives access to the
    shared ConfigManager.

    Usage:
        async with MyService(config) as service:
            await service.do_work()
    """
    def __init__(self, config: 'ConfigManager'):
        self.config = config
        self._is_ready = False

    @abstractmethod
    async def initialize(self):
        """
        Async initialization logic (e.g. opening storage, loading cache).
        Subclasses call super().initialize() once they are usable.
        """
        self._is_ready = True
        logger.debug(f"{self.__class__.__name__} ready")

    @abstractmethod
    async def shutdown(self):
        """
        Cleanup logic (e.g. closing connections).
        """
        self._is_ready = False
        logger.debug(f"{self.__class__.__name__} shut down")

    @property
    def is_ready(self) -> bool:
        return self._is_ready

    async def __aenter__(self):
        """Async context manager entry: Initialize system."""
        if not self._is_ready:
            await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit: Shutdown system."""
        if self._is_ready:
            await self.shutdown()
