"""First-run setup status and super admin provisioning."""

import logging

from truckore.core.errors import SetupAlreadyCompleted
from truckore.schemas.user import User
from truckore.services.config_store import SETUP_COMPLETED_KEY, ConfigStore
from truckore.services.locks import KeyedLocks
from truckore.services.security_log import SecurityAuditLog
from truckore.services.user_repository import UserRepository

logger = logging.getLogger(__name__)

_SETUP_LOCK = "setup"


class SetupService:
    """Until setup is complete all traffic belongs to the first-run flow."""

    def __init__(
        self,
        config_store: ConfigStore,
        users: UserRepository,
        audit_log: SecurityAuditLog,
    ) -> None:
        self._config_store = config_store
        self._users = users
        self._audit = audit_log
        self._locks = KeyedLocks()

    async def check_setup_status(self) -> bool:
        return await self._config_store.get_config(SETUP_COMPLETED_KEY) == "true"

    async def mark_setup_completed(self) -> None:
        await self._config_store.set_config(SETUP_COMPLETED_KEY, "true")

    async def complete_first_run(
        self, username: str, password: str, email: str | None = None
    ) -> User:
        """
        Create the initial super_admin and mark setup completed.

        Refused with SetupAlreadyCompleted when the flag is set or any user
        already exists. The check, create and mark steps run under one lock.
        """
        async with self._locks.hold(_SETUP_LOCK):
            if await self.check_setup_status():
                raise SetupAlreadyCompleted()
            user = await self._users.create_first_super_admin(username, password, email)
            await self.mark_setup_completed()
        logger.info("First-run setup completed; super admin '%s' created", user.username)
        await self._audit.record("SETUP_COMPLETED", user.id, "Initial super admin account created")
        return user
