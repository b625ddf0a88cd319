"""
In-memory shop settings store.

Holds the tiers and per-tier sector weighting for the process lifetime.
Saves replace the whole object (no merge, no versioning); concurrent
writers race and the last write wins. A write that fails validation
leaves the previous settings in place.
"""

import threading
from typing import Any, Dict, Optional

from pydantic import ValidationError

from config.constants import DEFAULT_SHOP_SETTINGS
from core.logging import LoggerMixin
from shop.errors import InvalidSettings
from shop.models import ShopSettings


class SettingsStore(LoggerMixin):
    """
    Thread-safe holder for the current ShopSettings.

    Usage:
        store = SettingsStore()
        settings = store.get()
        store.replace({"tiers": [...], "sectorsByTier": {...}})
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._lock = threading.RLock()
        self._settings = ShopSettings.model_validate(initial or DEFAULT_SHOP_SETTINGS)

    def get(self) -> ShopSettings:
        """Return a deep copy so callers cannot mutate the stored settings."""
        with self._lock:
            return self._settings.model_copy(deep=True)

    def replace(self, payload: Any) -> ShopSettings:
        """
        Validate and swap in a full settings object.

        Args:
            payload: ShopSettings instance or its JSON-shaped dict

        Raises:
            InvalidSettings: The payload is malformed; nothing is changed
        """
        if isinstance(payload, ShopSettings):
            candidate = payload.model_copy(deep=True)
        else:
            try:
                candidate = ShopSettings.model_validate(payload)
            except ValidationError as e:
                self.logger.warning("Rejected settings update", errors=e.error_count())
                raise InvalidSettings(str(e)) from e

        with self._lock:
            self._settings = candidate

        self.logger.info(
            "Settings replaced",
            tiers=[tier.id for tier in candidate.tiers],
        )
        return candidate.model_copy(deep=True)

    def as_dict(self) -> Dict[str, Any]:
        return self.get().model_dump(by_alias=True, exclude_none=True)


# Process-wide store, seeded with the default settings
_store: Optional[SettingsStore] = None


def get_settings_store() -> SettingsStore:
    """Get the settings store singleton."""
    global _store
    if _store is None:
        _store = SettingsStore()
    return _store


def clear_settings_store() -> None:
    """Drop the store so the next access starts from the defaults."""
    global _store
    _store = None
