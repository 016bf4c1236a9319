"""
User accounts: CRUD, credential verification and brute-force lockout.

The password hash never leaves this module; callers receive schemas.user.User.
Failed-attempt counters are mutated under a per-user lock so concurrent logins
for the same account cannot lose an increment.

Exactly one super_admin exists once setup is complete. It cannot be deleted,
demoted or deactivated, and no second one can be created or promoted; these
changes are serialized under one shared lock.
"""

import asyncio
import logging
import math
import uuid
from datetime import timedelta
from typing import Any

from truckore.core.errors import (
    AccountInactive,
    AccountLocked,
    ConstraintViolation,
    DuplicateUsername,
    IncorrectPassword,
    InvalidCredentials,
    ProtectedAccount,
    SetupAlreadyCompleted,
    StorageError,
    UserNotFound,
    ValidationError,
)
from truckore.core.security import (
    BCRYPT_ROUNDS,
    hash_password,
    validate_password_strength,
    validate_username,
    verify_password,
)
from truckore.core.time_utils import Clock, parse_iso, to_iso, utcnow
from truckore.schemas.user import USER_ROLE_VALUES, User, UserRole
from truckore.services.locks import KeyedLocks
from truckore.services.security_log import SecurityAuditLog
from truckore.storage.base import StorageBackend
from truckore.storage.statements import Delete, Insert, Select, Update, Where

logger = logging.getLogger(__name__)

TABLE = "users"

MAX_FAILED_ATTEMPTS = 5
LOCK_DURATION = timedelta(minutes=30)

SINGLE_SUPER_ADMIN_MESSAGE = "Only one Super Admin account is allowed"

# Lock key for changes that can affect the super_admin invariant.
_SUPER_ADMIN_LOCK = "role:super_admin"


class UserRepository:
    """User CRUD and the authentication state machine."""

    def __init__(
        self,
        store: StorageBackend,
        audit_log: SecurityAuditLog,
        *,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
        max_failed_attempts: int = MAX_FAILED_ATTEMPTS,
        lock_duration: timedelta = LOCK_DURATION,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._audit = audit_log
        self._rounds = bcrypt_rounds
        self._max_failed_attempts = max_failed_attempts
        self._lock_duration = lock_duration
        self._clock = clock
        self._locks = KeyedLocks()

    # Read side

    async def get_user_by_id(self, user_id: str) -> User | None:
        row = await self._row_by_id(user_id)
        return User.from_row(row) if row else None

    async def get_user_by_username(self, username: str) -> User | None:
        row = await self._row_by_username(username)
        return User.from_row(row) if row else None

    async def list_users(self) -> list[User]:
        """All users, newest first."""
        rows = await self._store.execute_query(Select(TABLE))
        users = [User.from_row(row) for row in rows]
        users.sort(key=lambda u: u.created_at, reverse=True)
        return users

    async def has_any_users(self) -> bool:
        rows = await self._store.execute_query(Select(TABLE))
        return len(rows) > 0

    # Write side

    async def create_user(
        self,
        username: str,
        password: str,
        role: UserRole,
        email: str | None = None,
    ) -> User:
        """
        Create a user with a bcrypt-hashed password.

        Raises ValidationError for bad input, DuplicateUsername when the
        storage layer rejects the username as taken, and ProtectedAccount for a
        super_admin when one already exists.
        """
        username = validate_username(username)
        validate_password_strength(password)
        _validate_role(role)
        if role != "super_admin":
            return await self._insert_user(username, password, role, email)
        async with self._locks.hold(_SUPER_ADMIN_LOCK):
            if await self._super_admin_rows():
                raise ProtectedAccount(SINGLE_SUPER_ADMIN_MESSAGE)
            return await self._insert_user(username, password, role, email)

    async def create_first_super_admin(
        self, username: str, password: str, email: str | None = None
    ) -> User:
        """First-run provisioning. Raises SetupAlreadyCompleted once any user exists."""
        username = validate_username(username)
        validate_password_strength(password)
        async with self._locks.hold(_SUPER_ADMIN_LOCK):
            if await self.has_any_users():
                raise SetupAlreadyCompleted()
            return await self._insert_user(username, password, "super_admin", email)

    async def _insert_user(
        self, username: str, password: str, role: UserRole, email: str | None
    ) -> User:
        user_id = str(uuid.uuid4())
        password_hash = await self._hash(password)
        now = to_iso(self._clock())
        try:
            await self._store.execute_non_query(
                Insert(
                    TABLE,
                    {
                        "id": user_id,
                        "username": username,
                        "email": _clean_email(email),
                        "password_hash": password_hash,
                        "role": role,
                        "is_active": True,
                        "failed_login_attempts": 0,
                        "locked_until": None,
                        "last_login_at": None,
                        "created_at": now,
                        "updated_at": now,
                    },
                )
            )
        except ConstraintViolation as e:
            if _is_username_conflict(e):
                raise DuplicateUsername(username) from e
            raise

        row = await self._row_by_id(user_id)
        if row is None:
            raise StorageError("Failed to create user")
        logger.info("Created user %s with role %s", username, role)
        await self._audit.record("USER_CREATED", user_id, f"User '{username}' created with role {role}")
        return User.from_row(row)

    async def verify_credentials(self, username: str, password: str) -> User:
        """
        Authenticate username/password and return the user.

        Order matters: lockout is checked before the password so a locked account
        behaves the same whether or not the password is right.

        Raises InvalidCredentials (unknown user or wrong password), AccountLocked
        (with remaining minutes) or AccountInactive.
        """
        row = await self._row_by_username(username)
        if row is None:
            await self._audit.record("LOGIN_FAILED", None, f"Unknown username '{username}'")
            raise InvalidCredentials()

        user_id = row["id"]
        async with self._locks.hold(user_id):
            row = await self._row_by_id(user_id)
            if row is None:
                raise InvalidCredentials()
            now = self._clock()

            locked_until = parse_iso(row.get("locked_until"))
            if locked_until is not None:
                if locked_until > now:
                    remaining = max(1, math.ceil((locked_until - now).total_seconds() / 60))
                    await self._audit.record("LOGIN_FAILED", user_id, "Login attempt while account locked")
                    raise AccountLocked(remaining)
                await self._update(user_id, {"failed_login_attempts": 0, "locked_until": None})
                row = {**row, "failed_login_attempts": 0, "locked_until": None}

            if not bool(row.get("is_active", True)):
                await self._audit.record("LOGIN_FAILED", user_id, "Login attempt on inactive account")
                raise AccountInactive()

            if not await self._verify(password, row["password_hash"]):
                await self._register_failure(user_id, row, now)
                raise InvalidCredentials()

            await self._update(
                user_id,
                {
                    "failed_login_attempts": 0,
                    "locked_until": None,
                    "last_login_at": to_iso(now),
                },
            )
            row = await self._row_by_id(user_id)

        await self._audit.record("LOGIN_SUCCESS", user_id, f"User '{row['username']}' logged in")
        return User.from_row(row)

    async def update_user(
        self,
        user_id: str,
        *,
        username: str | None = None,
        email: str | None = None,
        role: UserRole | None = None,
        is_active: bool | None = None,
    ) -> User:
        """Update profile fields; omitted (None) fields are left unchanged."""
        values: dict[str, Any] = {}
        if username is not None:
            values["username"] = validate_username(username)
        if email is not None:
            values["email"] = _clean_email(email)
        if role is not None:
            _validate_role(role)
            values["role"] = role
        if is_active is not None:
            values["is_active"] = bool(is_active)

        async with self._locks.hold(_SUPER_ADMIN_LOCK):
            row = await self._require_row(user_id)
            if not values:
                return User.from_row(row)
            promoted = role == "super_admin" and row["role"] != "super_admin"
            if promoted and await self._super_admin_rows():
                raise ProtectedAccount(SINGLE_SUPER_ADMIN_MESSAGE)
            demoted = role is not None and role != "super_admin"
            if (demoted or is_active is False) and await self._is_last_super_admin(row):
                raise ProtectedAccount("Cannot demote or deactivate the last Super Admin account")

            try:
                await self._update(user_id, values)
            except ConstraintViolation as e:
                if _is_username_conflict(e):
                    raise DuplicateUsername(values["username"]) from e
                raise

        changed = ", ".join(sorted(values))
        await self._audit.record("USER_UPDATED", user_id, f"Updated fields: {changed}")
        return User.from_row(await self._require_row(user_id))

    async def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        """Change own password. Raises IncorrectPassword (no mutation) if old_password is wrong."""
        async with self._locks.hold(user_id):
            row = await self._require_row(user_id)
            if not await self._verify(old_password, row["password_hash"]):
                raise IncorrectPassword()
            validate_password_strength(new_password)
            await self._set_password(user_id, new_password)
        await self._audit.record("PASSWORD_CHANGED", user_id, "Password changed by user")

    async def reset_password(self, user_id: str, new_password: str) -> None:
        """Administrative reset; no old-password check."""
        validate_password_strength(new_password)
        async with self._locks.hold(user_id):
            await self._require_row(user_id)
            await self._set_password(user_id, new_password)
        await self._audit.record("PASSWORD_RESET", user_id, "Password reset by administrator")

    async def delete_user(self, user_id: str) -> None:
        """Delete a user. The super_admin account cannot be deleted (ProtectedAccount)."""
        async with self._locks.hold(_SUPER_ADMIN_LOCK):
            row = await self._require_row(user_id)
            if row["role"] == "super_admin":
                raise ProtectedAccount()
            await self._store.execute_non_query(Delete(TABLE, Where("id", user_id)))
        logger.info("Deleted user %s", row["username"])
        await self._audit.record("USER_DELETED", user_id, f"User '{row['username']}' deleted")

    # Internals

    async def _register_failure(self, user_id: str, row: dict[str, Any], now) -> None:
        attempts = int(row.get("failed_login_attempts") or 0) + 1
        values: dict[str, Any] = {"failed_login_attempts": attempts}
        if attempts >= self._max_failed_attempts:
            locked_until = now + self._lock_duration
            values["locked_until"] = to_iso(locked_until)
            await self._update(user_id, values)
            logger.warning("Account %s locked after %s failed attempts", row["username"], attempts)
            await self._audit.record(
                "ACCOUNT_LOCKED",
                user_id,
                f"Locked after {attempts} failed attempts until {to_iso(locked_until)}",
            )
            return
        await self._update(user_id, values)
        await self._audit.record(
            "LOGIN_FAILED",
            user_id,
            f"Invalid password (attempt {attempts} of {self._max_failed_attempts})",
        )

    async def _super_admin_rows(self) -> list[dict[str, Any]]:
        return await self._store.execute_query(Select(TABLE, Where("role", "super_admin")))

    async def _is_last_super_admin(self, row: dict[str, Any]) -> bool:
        if row["role"] != "super_admin":
            return False
        rows = await self._super_admin_rows()
        others = [r for r in rows if r["id"] != row["id"] and bool(r.get("is_active", True))]
        return not others

    async def _set_password(self, user_id: str, new_password: str) -> None:
        password_hash = await self._hash(new_password)
        await self._update(user_id, {"password_hash": password_hash})

    async def _update(self, user_id: str, values: dict[str, Any]) -> None:
        """Every row write, including lockout bookkeeping, refreshes updated_at."""
        values = {**values, "updated_at": to_iso(self._clock())}
        await self._store.execute_non_query(Update(TABLE, values, Where("id", user_id)))

    async def _row_by_id(self, user_id: str) -> dict[str, Any] | None:
        rows = await self._store.execute_query(Select(TABLE, Where("id", user_id)))
        return rows[0] if rows else None

    async def _row_by_username(self, username: str) -> dict[str, Any] | None:
        rows = await self._store.execute_query(Select(TABLE, Where("username", username)))
        return rows[0] if rows else None

    async def _require_row(self, user_id: str) -> dict[str, Any]:
        row = await self._row_by_id(user_id)
        if row is None:
            raise UserNotFound(user_id)
        return row

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(hash_password, password, self._rounds)

    async def _verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(verify_password, password, password_hash)


def _validate_role(role: str) -> None:
    if role not in USER_ROLE_VALUES:
        raise ValidationError(f"role must be one of {sorted(USER_ROLE_VALUES)}, got {role!r}")


def _clean_email(email: str | None) -> str | None:
    email = (email or "").strip()
    return email or None


def _is_username_conflict(error: ConstraintViolation) -> bool:
    if error.column is not None:
        return error.column == "username"
    return "username" in error.message
