"""Device identity: the locally persisted incident correlation key."""

import logging
import uuid

from vigilis.core.config import Settings, get_settings
from vigilis.services.storage.store import KeyValueStore

logger = logging.getLogger(__name__)


class DeviceIdentityProvider:
    """Reads or lazily creates the installation's device identifier.

    The identifier is a random UUID4 written once under ``key`` and never
    changed afterwards. The resolved value is memoised on the instance.

    Args:
        store: Key-value store holding the identifier.
        key: Storage key (defaults to ``settings.device_id_key``).
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._store = store
        self._key = key or settings.device_id_key
        self._device_id: str | None = None

    async def get_or_create_device_id(self) -> str:
        """Return the persisted identifier, creating it on first use.

        Raises:
            StorageError: If the store is unavailable.
        """
        if self._device_id is not None:
            return self._device_id

        stored = await self._store.get(self._key)
        if not stored:
            stored = str(uuid.uuid4())
            await self._store.set(self._key, stored)
            logger.info("Created new device identity")

        self._device_id = stored
        return stored
