"""Settings registry with config file persistence."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Union

from dorexport.core.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class FieldBase:
    """Base class for all settings fields."""
    key: str                              # Environment variable / config key
    label: str                            # Short display label
    description: str = ""                 # Help text
    default: Any = None                   # Default value if not set
    required: bool = False                # Whether field must have a value
    env_var: Optional[str] = None         # Override env var name (defaults to key)
    env_supported: bool = True            # Whether this setting can be set via ENV var

    def get_env_var_name(self) -> str:
        """Get the environment variable name for this field."""
        return self.env_var or self.key

    def get_field_type(self) -> str:
        return self.__class__.__name__


@dataclass
class TextField(FieldBase):
    """Single-line text value."""
    placeholder: str = ""


@dataclass
class PasswordField(FieldBase):
    """Secret value, masked when serialized."""
    placeholder: str = ""


@dataclass
class NumberField(FieldBase):
    """Numeric value."""
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    default: float = 0


@dataclass
class SelectField(FieldBase):
    """Single choice from a list of options."""
    # Options can be a list or a callable that returns a list (for lazy evaluation)
    options: Any = field(default_factory=list)  # [{value: "", label: ""}] or callable


SettingsField = Union[TextField, PasswordField, NumberField, SelectField]


@dataclass
class SettingsTab:
    """A named group of settings stored in one config file."""
    name: str
    display_name: str
    fields: List[SettingsField] = field(default_factory=list)
    order: int = 100


_SETTINGS_REGISTRY: Dict[str, SettingsTab] = {}
_REGISTRY_LOCK = Lock()


def register_settings(name: str, display_name: str, order: int = 100):
    def decorator(func: Callable[[], List[SettingsField]]):
        with _REGISTRY_LOCK:
            fields = func()
            _SETTINGS_REGISTRY[name] = SettingsTab(
                name=name,
                display_name=display_name,
                fields=fields,
                order=order,
            )
            logger.debug("Registered settings tab: %s (%d fields)", name, len(fields))
        return func
    return decorator


def get_settings_tab(name: str) -> Optional[SettingsTab]:
    return _SETTINGS_REGISTRY.get(name)


def get_all_settings_tabs() -> List[SettingsTab]:
    """Get all registered settings tabs, sorted by order."""
    return sorted(_SETTINGS_REGISTRY.values(), key=lambda t: (t.order, t.name))


def _get_config_dir() -> Path:
    from dorexport.config.env import CONFIG_DIR
    return Path(CONFIG_DIR)


def _get_config_file_path(tab_name: str) -> Path:
    return _get_config_dir() / "plugins" / f"{tab_name}.json"


def load_config_file(tab_name: str) -> Dict[str, Any]:
    config_path = _get_config_file_path(tab_name)

    if not config_path.exists():
        return {}

    try:
        with open(config_path, 'r') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in config file %s: %s", config_path, e)
        return {}
    except OSError as e:
        logger.error("Cannot read config file %s: %s", config_path, e)
        return {}


def save_config_file(tab_name: str, values: Dict[str, Any]) -> bool:
    from dorexport.config.env import _is_config_dir_writable

    if not _is_config_dir_writable():
        logger.warning("Config directory is not writable: %s", _get_config_dir())
        return False

    try:
        config_path = _get_config_file_path(tab_name)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        # Load existing config and merge
        existing = load_config_file(tab_name)
        existing.update(values)

        with open(config_path, 'w') as f:
            json.dump(existing, f, indent=2)

        logger.info("Saved settings to %s", config_path)
        return True
    except (OSError, TypeError) as e:
        logger.error("Error saving config file for %s: %s", tab_name, e)
        return False


def get_setting_value(field: SettingsField, tab_name: str) -> Any:
    # 1. Check environment variable (if supported for this field)
    if field.env_supported:
        env_value = os.environ.get(field.get_env_var_name())
        if env_value is not None:
            return _parse_env_value(env_value, field)

    # 2. Check config file
    config = load_config_file(tab_name)
    if field.key in config:
        return config[field.key]

    # 3. Return default
    return field.default


def _parse_env_value(value: str, field: SettingsField) -> Any:
    """Parse an environment variable value to the appropriate type."""
    if isinstance(field, NumberField):
        try:
            if '.' in value:
                return float(value)
            return int(value)
        except ValueError:
            logger.warning("Invalid number for %s: %r, using default", field.key, value)
            return field.default
    else:
        return value


def is_value_from_env(field: SettingsField) -> bool:
    if not field.env_supported:
        return False
    return field.get_env_var_name() in os.environ


def serialize_field(field: SettingsField, tab_name: str, include_value: bool = True) -> Dict[str, Any]:
    """Serialize a field for display. Password values are never included."""
    result: Dict[str, Any] = {
        "key": field.key,
        "label": field.label,
        "type": field.get_field_type(),
        "description": field.description,
        "required": field.required,
        "fromEnv": is_value_from_env(field),
    }

    if isinstance(field, NumberField):
        result["min"] = field.min_value
        result["max"] = field.max_value
    elif isinstance(field, SelectField):
        options = field.options() if callable(field.options) else field.options
        result["options"] = options

    if include_value:
        value = get_setting_value(field, tab_name)
        if isinstance(field, PasswordField):
            result["value"] = "********" if value else ""
        else:
            result["value"] = value

    return result


def serialize_tab(tab: SettingsTab, include_values: bool = True) -> Dict[str, Any]:
    return {
        "name": tab.name,
        "displayName": tab.display_name,
        "order": tab.order,
        "fields": [serialize_field(f, tab.name, include_values) for f in tab.fields],
    }
