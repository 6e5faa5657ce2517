"""
Persistence adapters.

These modules encapsulate how users are stored/retrieved (today a JSON
snapshot on local disk). Services depend on the store's five operations
rather than touching the JSON file.
"""

from .json_storage import (
    AlreadyExistsError,
    JSONUserStore,
    NotFoundError,
    PersistenceError,
    StoreError,
)

__all__ = [
    "AlreadyExistsError",
    "JSONUserStore",
    "NotFoundError",
    "PersistenceError",
    "StoreError",
]
