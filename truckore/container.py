"""
Explicit wiring of the storage handle and services.

Everything that touches storage receives the same BackendSelector at
construction time; there is no module-level backend state.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import Engine

from truckore.core.config import Settings
from truckore.core.database import create_native_engine
from truckore.core.time_utils import Clock, utcnow
from truckore.services.config_store import ConfigStore
from truckore.services.security_log import SecurityAuditLog
from truckore.services.serial_number import SerialNumberGenerator
from truckore.services.setup import SetupService
from truckore.services.user_repository import UserRepository
from truckore.storage import BackendSelector, FallbackStore, NativeStore

logger = logging.getLogger(__name__)


@dataclass
class Container:
    settings: Settings
    store: BackendSelector
    config: ConfigStore
    audit_log: SecurityAuditLog
    users: UserRepository
    serial_numbers: SerialNumberGenerator
    setup: SetupService

    async def initialize(self) -> None:
        """Create the table set on both backends and seed first-run config keys."""
        self.store.init_database()
        await self.config.seed_defaults()
        logger.info(
            "Storage initialized (mode=%s, native_available=%s)",
            self.store.mode,
            self.store.is_native_available(),
        )

    def close(self) -> None:
        if self.store.native is not None:
            engine = self.store.native.detach()
            if engine is not None:
                engine.dispose()


def build_container(
    settings: Settings,
    engine: Engine | None = None,
    clock: Clock = utcnow,
) -> Container:
    """
    Construct all services around one storage handle.

    engine overrides the configured native engine (tests); when
    NATIVE_STORE_ENABLED is false no native store is created.
    """
    native = None
    if settings.NATIVE_STORE_ENABLED:
        native = NativeStore(engine or create_native_engine(settings))
    fallback = FallbackStore(settings.FALLBACK_STORE_DIR, prefix=settings.FALLBACK_STORAGE_PREFIX)
    store = BackendSelector(native, fallback)

    config = ConfigStore(store, clock=clock)
    audit_log = SecurityAuditLog(store, clock=clock)
    users = UserRepository(
        store,
        audit_log,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
        max_failed_attempts=settings.MAX_FAILED_LOGIN_ATTEMPTS,
        lock_duration=timedelta(minutes=settings.LOCKOUT_MINUTES),
        clock=clock,
    )
    return Container(
        settings=settings,
        store=store,
        config=config,
        audit_log=audit_log,
        users=users,
        serial_numbers=SerialNumberGenerator(config, clock=clock),
        setup=SetupService(config, users, audit_log),
    )
