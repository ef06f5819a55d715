import json
import pytest
from pydantic import ValidationError

from foundation.core.config import ConfigManager


def test_config_read_default():
    config = ConfigManager(None)
    assert config.data.enhancer.strategy == "subclassing"
    assert config.data.container.duplicate_ids == "overwrite"
    assert config.data.container.type_resolution == "most_specific"
    assert config.data.listener.default_delay_ms == 200
    assert config.data.event_bus.default_priority == 1


def test_config_update_event():
    config = ConfigManager(None)
    received = []

    def on_change(section, key, val):
        received.append((section, key, val))

    config.on_changed.connect(on_change)

    # Update value
    config.update("container", "duplicate_ids", "reject")

    assert config.data.container.duplicate_ids == "reject"
    assert received[-1] == ("container", "duplicate_ids", "reject")


def test_config_update_validated():
    config = ConfigManager(None)

    with pytest.raises(ValidationError):
        config.update("enhancer", "strategy", "weaving")
    with pytest.raises(ValueError):
        config.update("container", "unknown", 1)
    with pytest.raises(ValueError):
        config.update("missing", "key", 1)

    assert config.data.enhancer.strategy == "subclassing"


def test_config_persisted_as_json(tmp_path):
    path = tmp_path / "settings" / "foundation.json"
    config = ConfigManager(str(path))
    config.update("listener", "default_delay_ms", 350)

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["listener"]["default_delay_ms"] == 350

    assert ConfigManager(str(path)).data.listener.default_delay_ms == 350


def test_config_loaded_from_toml(tmp_path):
    path = tmp_path / "foundation.toml"
    path.write_text('[enhancer]\nstrategy = "redefinition"\n\n[event_bus]\ndefault_priority = 4\n')

    config = ConfigManager(str(path))

    assert config.data.enhancer.strategy == "redefinition"
    assert config.data.event_bus.default_priority == 4
    assert config.data.container.duplicate_ids == "overwrite"


def test_invalid_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "foundation.json"
    path.write_text("{not json")

    config = ConfigManager(str(path))

    assert config.data.listener.default_delay_ms == 200
