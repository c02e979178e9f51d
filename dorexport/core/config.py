"""Resolved configuration values.

``config.get(key, default)`` looks a key up across every registered settings
tab (ENV first, then the tab's config file, then the field default). Values
are cached until ``refresh()`` is called.
"""

from threading import Lock
from typing import Any, Dict, Optional

from dorexport.core.logger import setup_logger

logger = setup_logger(__name__)


class Config:
    def __init__(self) -> None:
        self._values: Optional[Dict[str, Any]] = None
        self._lock = Lock()

    def _load(self) -> Dict[str, Any]:
        # Importing settings registers the tabs with the registry.
        import dorexport.config.settings  # noqa: F401
        from dorexport.core.settings_registry import get_all_settings_tabs, get_setting_value

        values: Dict[str, Any] = {}
        for tab in get_all_settings_tabs():
            for field in tab.fields:
                values[field.key] = get_setting_value(field, tab.name)
        logger.debug("Loaded %d configuration values", len(values))
        return values

    def refresh(self) -> None:
        """Re-read ENV and config files."""
        with self._lock:
            self._values = self._load()

    def all(self) -> Dict[str, Any]:
        with self._lock:
            if self._values is None:
                self._values = self._load()
            return dict(self._values)

    def get(self, key: str, default: Any = None) -> Any:
        value = self.all().get(key)
        return default if value is None else value

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        values = self.all()
        if name not in values:
            raise AttributeError(f"Unknown setting: {name}")
        return values[name]


config = Config()
