"""
Tagger Core - Application Infrastructure.

Provides the shared plumbing used by the tagger package:
- BaseSystem: Abstract base for long-lived services
- ConfigManager: Configuration with persistence and change signals
- Signal: Synchronous observer
- setup_logging: Loguru sinks for console and files

Usage:
    from src.core import ConfigManager, setup_logging

    config = ConfigManager("config.json")
    setup_logging(debug_mode=config.data.general.debug_mode)
"""
from .base_system import BaseSystem
from .config import (
    ConfigManager,
    AppConfig,
    GeneralSettings,
    StorageSettings,
    MongoSettings,
)
from .events import Signal
from .logging import setup_logging

__all__ = [
    "BaseSystem",
    "ConfigManager",
    "AppConfig",
    "GeneralSettings",
    "StorageSettings",
    "MongoSettings",
    "Signal",
    "setup_logging",
]
