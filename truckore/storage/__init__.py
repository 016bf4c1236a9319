"""Storage backends: native SQLite store, JSON fallback store and the selector between them."""

from truckore.storage.base import StorageBackend
from truckore.storage.fallback import FallbackStore
from truckore.storage.native import NativeStore
from truckore.storage.selector import BackendSelector
from truckore.storage.statements import (
    Command,
    Delete,
    Insert,
    Select,
    Statement,
    Update,
    Where,
    parse_statement,
)

__all__ = [
    "BackendSelector",
    "Command",
    "Delete",
    "FallbackStore",
    "Insert",
    "NativeStore",
    "Select",
    "Statement",
    "StorageBackend",
    "Update",
    "Where",
    "parse_statement",
]
