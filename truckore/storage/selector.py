"""
Backend selection: native store when the bridge is up, fallback otherwise.

Availability is re-evaluated on every call. When the native store fails with
BackendUnavailable the identical (statement, params) tuple is re-run on the
fallback store. Every transition between modes is logged so degraded
operation is visible to operators. Constraint violations and unsupported
statements are not backend failures and propagate unchanged.
"""

import logging
from collections.abc import Sequence
from typing import Literal

from truckore.core.errors import BackendUnavailable
from truckore.storage.base import StorageBackend
from truckore.storage.fallback import FallbackStore
from truckore.storage.native import NativeStore
from truckore.storage.statements import Row, Scalar, Statement, describe

logger = logging.getLogger(__name__)

StorageMode = Literal["native", "fallback"]


class BackendSelector(StorageBackend):
    """Routes each call to the native store or, on failure, to the fallback store."""

    name = "selector"

    def __init__(self, native: NativeStore | None, fallback: FallbackStore) -> None:
        self.native = native
        self.fallback = fallback
        self._mode: StorageMode | None = None

    @property
    def mode(self) -> StorageMode | None:
        """Backend that served the most recent call (None before the first call)."""
        return self._mode

    def is_native_available(self) -> bool:
        return self.native is not None and self.native.is_available()

    def is_available(self) -> bool:
        return True

    def init_storage(self) -> None:
        self.init_database()

    def init_database(self) -> None:
        """Initialize the fallback table files and, when reachable, the native schema."""
        self.fallback.init_storage()
        if not self.is_native_available():
            self._set_mode("fallback", "native store bridge not attached")
            return
        try:
            self.native.init_storage()
        except BackendUnavailable as e:
            self._set_mode("fallback", e.message)
            return
        self._set_mode("native")

    async def execute_query(self, statement: Statement, params: Sequence[Scalar] = ()) -> list[Row]:
        if self.is_native_available():
            try:
                rows = await self.native.execute_query(statement, params)
            except BackendUnavailable as e:
                self._log_native_failure(statement, e)
            else:
                self._set_mode("native")
                return rows
        else:
            self._set_mode("fallback", "native store bridge not attached")
        return await self.fallback.execute_query(statement, params)

    async def execute_non_query(self, statement: Statement, params: Sequence[Scalar] = ()) -> None:
        if self.is_native_available():
            try:
                await self.native.execute_non_query(statement, params)
            except BackendUnavailable as e:
                self._log_native_failure(statement, e)
            else:
                self._set_mode("native")
                return
        else:
            self._set_mode("fallback", "native store bridge not attached")
        await self.fallback.execute_non_query(statement, params)

    def _log_native_failure(self, statement: Statement, error: BackendUnavailable) -> None:
        logger.warning(
            "Native store failed for %s; running on fallback store: %s",
            describe(statement),
            error.message,
        )
        self._set_mode("fallback", error.message)

    def _set_mode(self, mode: StorageMode, reason: str | None = None) -> None:
        if mode == self._mode:
            return
        previous, self._mode = self._mode, mode
        if mode == "fallback":
            logger.warning(
                "Storage mode %s -> fallback (degraded): %s", previous or "unset", reason
            )
        else:
            logger.info("Storage mode %s -> native", previous or "unset")
