"""Ports - interfaces/protocols for external dependencies."""

from .collection_store import (
    CollectionStore,
    StorageError,
    StorageNotFound,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    "CollectionStore",
    "StorageError",
    "StorageNotFound",
    "StorageReadError",
    "StorageWriteError",
]
