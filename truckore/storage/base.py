"""StorageBackend interface implemented by the native and fallback stores."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from truckore.storage.statements import Row, Scalar, Statement


class StorageBackend(ABC):
    """
    Async query interface shared by both backends.

    statement is either a command from truckore.storage.statements or a raw
    SQL string; params are only used with raw SQL.
    """

    name: str = "backend"

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backend can serve calls right now. Never cached by callers."""

    @abstractmethod
    def init_storage(self) -> None:
        """Create the table set if it does not exist yet."""

    @abstractmethod
    async def execute_query(self, statement: Statement, params: Sequence[Scalar] = ()) -> list[Row]:
        """Run a row-returning statement."""

    @abstractmethod
    async def execute_non_query(self, statement: Statement, params: Sequence[Scalar] = ()) -> None:
        """Run a mutating statement."""
