"""Record stores for persisting encrypted vault records.

A store is an opaque get/set of the ordered record list. The session never
knows where the records live; it only calls load_records() and
save_records().
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Iterable

from ..utils.logging import get_logger
from .exceptions import VaultCorruptedError
from .models import VaultRecord

logger = get_logger(__name__)


class RecordStore:
    """Interface for record persistence."""

    def load_records(self) -> list[VaultRecord]:
        """Return the persisted records in order."""
        raise NotImplementedError

    def save_records(self, records: list[VaultRecord]) -> None:
        """Replace the persisted records with ``records`` in one step."""
        raise NotImplementedError


class MemoryRecordStore(RecordStore):
    """In-process store, used for tests and ephemeral vaults."""

    def __init__(self, records: Iterable[VaultRecord] = ()):
        self._records: list[VaultRecord] = list(records)
        self._lock = threading.Lock()
        self.save_count = 0

    def load_records(self) -> list[VaultRecord]:
        with self._lock:
            return list(self._records)

    def save_records(self, records: list[VaultRecord]) -> None:
        with self._lock:
            self._records = list(records)
            self.save_count += 1


class JsonRecordStore(RecordStore):
    """
    Stores records as a JSON array in a single file.

    Saves write a temp file beside the target and os.replace() it into
    place, so readers see either the old list or the new one.
    """

    def __init__(self, path: Path):
        """
        Initialize the store.

        Args:
            path: JSON file (created on first save)
        """
        self.path = Path(path).expanduser()

    @property
    def exists(self) -> bool:
        return self.path.exists()

    def load_records(self) -> list[VaultRecord]:
        """
        Load records from disk. A missing file is an empty vault.

        Raises:
            VaultCorruptedError: If the file is not a JSON array of records
            OSError: If the file cannot be read
        """
        if not self.path.exists():
            return []

        content = self.path.read_text(encoding="utf-8")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise VaultCorruptedError(f"Invalid vault file {self.path}: {e}")

        if not isinstance(data, list):
            raise VaultCorruptedError(f"Invalid vault file {self.path}: expected a list of records")

        records = [VaultRecord.from_dict(item) for item in data]
        logger.debug(f"Loaded {len(records)} records from {self.path}")
        return records

    def save_records(self, records: list[VaultRecord]) -> None:
        """Atomically write records to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved {len(records)} records to {self.path}")
