"""File-based JSON collection storage adapter."""

import json
import logging
import os
import tempfile
from pathlib import Path

from taskbook.ports.collection_store import StorageNotFound, StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    JSON file storage.

    Implements CollectionStore protocol. Each collection gets one
    `<name>.json` file in the data directory, rewritten whole on every save.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # load/save report the failure as storage errors
            logger.warning(f"Could not create data directory {self.data_dir}: {e}")

    def path_for(self, name: str) -> Path:
        """Get the file path for a collection name."""
        return self.data_dir / f"{name}.json"

    def load(self, name: str) -> list[dict]:
        """Read and decode a collection."""
        path = self.path_for(name)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise StorageNotFound(f"No stored collection at {path}") from None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Could not read {path}: {e}") from e

        if not raw.strip():
            raise StorageNotFound(f"Stored collection at {path} is empty")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Invalid JSON in {path}: {e}") from e

        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise StorageReadError(f"Expected a list of records in {path}")
        return data

    def save(self, records: list[dict], name: str) -> None:
        """Write a collection atomically: temp file + rename."""
        path = self.path_for(name)
        try:
            payload = json.dumps(records, indent=2, ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Could not encode {name}: {e}") from e

        tmp = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError as e:
            if tmp and os.path.exists(tmp):
                os.unlink(tmp)
            raise StorageWriteError(f"Could not write {path}: {e}") from e
        logger.debug("Saved %d records to %s", len(records), path)
