from typing import Any, Literal, Optional
import json
import os
from pydantic import BaseModel, ConfigDict, Field
from loguru import logger
from .events import Signal

CONFIG_ENV_VAR = "TAGGER_CONFIG"


def default_config_path() -> str:
    return os.path.join(os.path.expanduser("~"), ".tagger", "config.json")


def default_database_path() -> str:
    return os.path.join(os.path.expanduser("~"), ".tagger", "tagger.db.json")


# --- Settings Models ---
class _Section(BaseModel):
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

class GeneralSettings(_Section):
    debug_mode: bool = False
    log_dir: Optional[str] = None  # No file logging when unset

class StorageSettings(_Section):
    backend: Literal["memory", "json", "mongo"] = "json"
    database_path: str = Field(default_factory=default_database_path)
    match_concurrency: int = Field(default=16, ge=1)

class MongoSettings(_Section):
    host: str = 'localhost'
    port: int = Field(default=27017, ge=1, le=65535)
    database_name: str = "tagger"

class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    general: GeneralSettings = Field(default_factory=GeneralSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    mongo: MongoSettings = Field(default_factory=MongoSettings)

# --- Manager ---
class ConfigManager:
    """
    Manages application configuration with persistence and reactivity.

    Args:
        filepath: JSON or TOML file; defaults to $TAGGER_CONFIG or
            ~/.tagger/config.json
        autosave: Write defaults out when the file does not exist yet
    """
    def __init__(self, filepath: Optional[str] = None, autosave: bool = False):
        self.filepath = filepath or os.environ.get(CONFIG_ENV_VAR) or default_config_path()
        self.autosave = autosave
        self._data = AppConfig()
        self.on_changed = Signal("ConfigChanged")
        self._load()

    @property
    def data(self) -> AppConfig:
        return self._data

    @property
    def save_path(self) -> str:
        """Where save() writes; a TOML file is saved as its JSON sibling."""
        if self.filepath.endswith('.toml'):
            # No TOML writer in the standard library
            return self.filepath[:-len('.toml')] + '.json'
        return self.filepath

    def update(self, section: str, key: str, value: Any):
        """
        Update a setting, validate via Pydantic, save, and emit change event.

        Raises:
            ValueError: Unknown section/key, or value rejected by validation
        """
        section_obj = self._section(section)
        if key not in type(section_obj).model_fields:
            raise ValueError(f"Invalid key: {key} in section {section}")

        # pydantic's ValidationError is a ValueError
        setattr(section_obj, key, value)
        self.save()
        self.on_changed.emit(section, key, getattr(section_obj, key))

    def get(self, section: str, key: str) -> Any:
        section_obj = self._section(section)
        if key not in type(section_obj).model_fields:
            raise ValueError(f"Invalid key: {key} in section {section}")
        return getattr(section_obj, key)

    def _section(self, section: str) -> BaseModel:
        if section not in AppConfig.model_fields:
            raise ValueError(f"Invalid section: {section}")
        return getattr(self._data, section)

    def _load(self):
        """
        Load settings from JSON or TOML file if present; otherwise keep defaults.

        Once a TOML config has been saved, its JSON sibling takes precedence.
        """
        path = self.save_path if os.path.isfile(self.save_path) else self.filepath
        if not os.path.isfile(path):
            if self.autosave:
                self.save()
            return

        try:
            if path.endswith('.toml'):
                import tomllib
                with open(path, "rb") as f:
                    raw = tomllib.load(f)
            else:
                with open(path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
            self._data = AppConfig.model_validate(raw)
            logger.debug(f"Loaded config from {path}")
        except (OSError, ValueError) as e:
            # Covers JSON/TOML decode errors and pydantic ValidationError
            logger.error(f"Failed to load config from {path}: {e}")

    def save(self):
        """Persist current config to JSON file."""
        path = self.save_path
        dirname = os.path.dirname(path)
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._data.model_dump(), f, indent=4)
        logger.debug(f"Saved config to {path}")

    def dumps(self) -> str:
        return json.dumps(self._data.model_dump(), indent=4)
