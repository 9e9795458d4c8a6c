"""
Storage module - local persisted client state.

Factory function for the default on-disk store configured in settings.
"""

from vigilis.core.config import Settings, get_settings

from .identity import DeviceIdentityProvider
from .store import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "DeviceIdentityProvider",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "create_identity_provider",
]


def create_identity_provider(settings: Settings | None = None) -> DeviceIdentityProvider:
    """Build a DeviceIdentityProvider backed by ``settings.device_store_path``."""
    settings = settings or get_settings()
    store = JsonFileStore(settings.device_store_path)
    return DeviceIdentityProvider(store, settings=settings)
