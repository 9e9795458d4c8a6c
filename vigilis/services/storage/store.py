"""Local key-value stores for small pieces of persisted client state.

``JsonFileStore`` keeps the whole mapping in one JSON document and runs its
blocking file I/O in ``asyncio.to_thread()`` to avoid stalling the event loop.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from vigilis.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Interface every local store must implement."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent.

        Raises:
            StorageError: If the backing store cannot be read.
        """

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Persist ``value`` under ``key``.

        Raises:
            StorageError: If the backing store cannot be written.
        """


class MemoryStore(KeyValueStore):
    """Process-local store, used in tests and for throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore(KeyValueStore):
    """Store backed by a single JSON object on disk.

    Args:
        path: Location of the JSON file. Parent directories are created on
            first write.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read {self._path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise StorageError(f"Corrupt store {self._path}: expected a JSON object")
        return raw

    def _dump(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as exc:
            raise StorageError(f"Cannot write {self._path}: {exc}") from exc

    def _set_sync(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._load)
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set_sync, key, value)
        logger.debug("Persisted key %s to %s", key, self._path)
