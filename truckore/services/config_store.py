"""Key/value settings (app_config) on top of the storage interface."""

import logging

from truckore.core.errors import ConstraintViolation
from truckore.core.time_utils import Clock, to_iso, utcnow
from truckore.schemas.serial_number import SerialNumberConfig
from truckore.services.locks import KeyedLocks
from truckore.storage.base import StorageBackend
from truckore.storage.statements import Insert, Select, Update, Where

logger = logging.getLogger(__name__)

TABLE = "app_config"

SETUP_COMPLETED_KEY = "setup_completed"
SERIAL_NUMBER_CONFIG_KEY = "serial_number_config"


class ConfigStore:
    """get/set of opaque string values by key. No backend-specific logic."""

    def __init__(self, store: StorageBackend, clock: Clock = utcnow) -> None:
        self._store = store
        self._clock = clock
        self._locks = KeyedLocks()

    async def get_config(self, key: str) -> str | None:
        rows = await self._store.execute_query(Select(TABLE, Where("key", key)))
        return rows[0]["value"] if rows else None

    async def set_config(self, key: str, value: str) -> None:
        """Upsert by key, always refreshing updated_at."""
        async with self._locks.hold(key):
            await self._upsert(key, value)

    async def set_default(self, key: str, value: str) -> bool:
        """Insert only when the key is absent. Returns True if the value was written."""
        async with self._locks.hold(key):
            if await self.get_config(key) is not None:
                return False
            await self._upsert(key, value)
            return True

    async def seed_defaults(self) -> None:
        """Seed first-run keys without overwriting existing values."""
        if await self.set_default(SETUP_COMPLETED_KEY, "false"):
            logger.info("Seeded %s=false", SETUP_COMPLETED_KEY)
        if await self.set_default(SERIAL_NUMBER_CONFIG_KEY, SerialNumberConfig().to_json()):
            logger.info("Seeded default %s", SERIAL_NUMBER_CONFIG_KEY)

    async def _upsert(self, key: str, value: str) -> None:
        now = to_iso(self._clock())
        if await self.get_config(key) is not None:
            await self._store.execute_non_query(
                Update(TABLE, {"value": value, "updated_at": now}, Where("key", key))
            )
            return
        try:
            await self._store.execute_non_query(
                Insert(TABLE, {"key": key, "value": value, "updated_at": now})
            )
        except ConstraintViolation:
            # Another writer inserted the key first.
            logger.debug("Config key %s appeared during insert; updating instead", key)
            await self._store.execute_non_query(
                Update(TABLE, {"value": value, "updated_at": now}, Where("key", key))
            )
