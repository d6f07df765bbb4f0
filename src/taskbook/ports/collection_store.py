"""Collection storage interface."""

from typing import Protocol


class StorageError(Exception):
    """Base class for storage failures."""

    pass


class StorageNotFound(StorageError):
    """Nothing has been stored under the name yet (first run)."""

    pass


class StorageReadError(StorageError):
    """Stored data exists but could not be read or decoded."""

    pass


class StorageWriteError(StorageError):
    """The collection could not be written."""

    pass


class CollectionStore(Protocol):
    """Interface for loading and saving whole collections of records."""

    def load(self, name: str) -> list[dict]:
        """Load all records stored under a name.

        Raises StorageNotFound if nothing is stored, StorageReadError if the
        stored data is unreadable.
        """
        ...

    def save(self, records: list[dict], name: str) -> None:
        """Replace everything stored under a name. Raises StorageWriteError."""
        ...
