from typing import Any, Literal, Optional
import json
import os
import tomllib
from pydantic import BaseModel, Field
from loguru import logger
from .events import Signal

# --- Runtime Settings Models ---
class GeneralSettings(BaseModel):
    debug_mode: bool = True
    log_dir: str = "logs"

class EnhancerSettings(BaseModel):
    # "subclassing" generates intercepting subclasses, "redefinition" rewrites marked classes in place
    strategy: Literal["subclassing", "redefinition"] = "subclassing"

class ContainerSettings(BaseModel):
    duplicate_ids: Literal["overwrite", "reject"] = "overwrite"
    type_resolution: Literal["most_specific", "registration_order"] = "most_specific"

class ListenerSettings(BaseModel):
    default_delay_ms: int = 200

class EventBusSettings(BaseModel):
    default_priority: int = 1

class RuntimeConfig(BaseModel):
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    enhancer: EnhancerSettings = Field(default_factory=EnhancerSettings)
    container: ContainerSettings = Field(default_factory=ContainerSettings)
    listener: ListenerSettings = Field(default_factory=ListenerSettings)
    event_bus: EventBusSettings = Field(default_factory=EventBusSettings)

# --- Manager ---
class ConfigManager:
    """
    Manages runtime configuration with persistence and reactivity.

    Pass ``filepath=None`` for a purely in-memory configuration.
    """
    def __init__(self, filepath: Optional[str] = "foundation.json"):
        self.filepath = filepath
        self._data = RuntimeConfig()
        self.on_changed = Signal("ConfigChanged")
        self._load()

    @property
    def data(self) -> RuntimeConfig:
        return self._data

    def update(self, section: str, key: str, value: Any):
        """Update a setting, validate via Pydantic, autosave, and emit change event."""
        if not hasattr(self._data, section):
            raise ValueError(f"Invalid section: {section}")

        section_obj = getattr(self._data, section)
        if not hasattr(section_obj, key):
            raise ValueError(f"Invalid key: {key} in section {section}")

        validated = type(section_obj).model_validate({**section_obj.model_dump(), key: value})
        setattr(self._data, section, validated)
        self._save()
        self.on_changed.emit(section, key, getattr(validated, key))

    def get(self, section: str, key: str) -> Any:
        section_obj = getattr(self._data, section)
        return getattr(section_obj, key)

    def _load(self):
        """Load settings from JSON or TOML file if present; otherwise keep defaults."""
        if not self.filepath:
            return
        if os.path.isfile(self.filepath):
            try:
                if self.filepath.endswith('.toml'):
                    with open(self.filepath, "rb") as f:
                        raw = tomllib.load(f)
                else:
                    with open(self.filepath, "r", encoding="utf-8") as f:
                        raw = json.load(f)
                self._data = RuntimeConfig.model_validate(raw)
            except Exception as e:
                logger.error(f"Failed to load config from {self.filepath}: {e}")
                self._save()
        else:
            self._save()

    def _save(self):
        """Persist current config to JSON file."""
        if not self.filepath or self.filepath.endswith('.toml'):
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(), f, indent=4)
        except Exception as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
