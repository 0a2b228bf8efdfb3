import json
import threading
import time
import uuid
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Callable, List, Optional

from loguru import logger

from stargallery.domain.media import MediaRecord, MediaValues
from stargallery.media_store.base import MediaIndex

DEFAULT_RELATIVE_PATH = "Pictures"
DEFAULT_MIME_TYPE = "application/octet-stream"


class LocalMediaIndex(MediaIndex):
    """Local media index that keeps bytes under a root folder and records in a JSON file."""

    def __init__(
        self,
        root: str | Path,
        filepath: str | Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize LocalMediaIndex.

        Args:
            root: Folder the record bytes are written under.
            filepath: Path to the index file. If provided and exists, will auto-load.
                     If provided and doesn't exist, it is written on the first change.
                     If not provided, the index is kept in memory only.
            clock: Source of timestamps for new records.
        """
        self._root = Path(root)
        self._filepath = str(filepath) if filepath else None
        self._clock = clock
        self._lock = threading.RLock()

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
                self._records = {
                    record_id: MediaRecord(**record_data)
                    for record_id, record_data in data["records"].items()
                }
        else:
            self._records = {}

    def insert(self, values: MediaValues) -> Optional[str]:
        """Create a record, returning None when no display name is given."""
        if not values.display_name:
            return None

        relative_path = (values.relative_path or DEFAULT_RELATIVE_PATH).strip("/")
        with self._lock:
            record = MediaRecord(
                id=uuid.uuid4().hex,
                display_name=values.display_name,
                mime_type=values.mime_type or DEFAULT_MIME_TYPE,
                relative_path=relative_path,
                data=self._unique_data_path(relative_path, values.display_name),
                is_pending=bool(values.is_pending),
                date_added=self._clock(),
            )
            self._records[record.id] = record
            self._flush()

        logger.debug(f"Inserted media record {record.id} at {record.data}")
        return record.id

    def open_output(self, record_id: str) -> BinaryIO:
        """Open a write stream over the bytes of a record, truncating what is there."""
        record = self.get_record(record_id)
        path = self._root / record.data
        path.parent.mkdir(parents=True, exist_ok=True)
        return open(path, "wb")

    def update(self, record_id: str, values: MediaValues) -> int:
        """Update the columns set in ``values``, returning the number of rows changed."""
        changes = values.model_dump(exclude_none=True)
        with self._lock:
            if record_id not in self._records:
                return 0
            self._records[record_id] = self._records[record_id].model_copy(update=changes)
            self._flush()
        return 1

    def get_record(self, record_id: str) -> MediaRecord:
        """Get a record by its handle."""
        with self._lock:
            if record_id not in self._records:
                raise KeyError(f"Media record {record_id} not found")
            return self._records[record_id]

    def query(self, include_pending: bool = False) -> List[MediaRecord]:
        """List records ordered by date added, leaving out pending ones unless asked."""
        with self._lock:
            records = list(self._records.values())
        if not include_pending:
            records = [record for record in records if not record.is_pending]
        return sorted(records, key=lambda record: record.date_added)

    def read_bytes(self, record_id: str) -> bytes:
        """Read back the bytes stored for a record."""
        record = self.get_record(record_id)
        return (self._root / record.data).read_bytes()

    def purge_pending(self, max_age: float) -> List[str]:
        """Delete pending records older than ``max_age`` seconds, with their bytes.

        Records are left pending when a save fails halfway; this is the
        collector that reclaims them.

        Returns:
            Handles of the deleted records.
        """
        cutoff = self._clock() - max_age
        with self._lock:
            stale = [
                record
                for record in self._records.values()
                if record.is_pending and record.date_added < cutoff
            ]
            for record in stale:
                del self._records[record.id]
                (self._root / record.data).unlink(missing_ok=True)
            if stale:
                self._flush()

        if stale:
            logger.info(f"Purged {len(stale)} stale pending media records")
        return [record.id for record in stale]

    def save(self, filepath: str | None = None) -> None:
        """Save the index to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        save_path = str(save_path)
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            data = {
                "records": {
                    record_id: record.model_dump() for record_id, record in self._records.items()
                }
            }
        with open(save_path, "w") as f:
            json.dump(data, f)

    def _flush(self) -> None:
        if self._filepath:
            self.save()

    def _unique_data_path(self, relative_path: str, display_name: str) -> str:
        """Pick a file path in the collection, suffixing `` (n)`` on name collisions."""
        taken = {record.data for record in self._records.values()}
        name = PurePosixPath(display_name)
        candidate = str(PurePosixPath(relative_path) / name.name)
        counter = 1
        while candidate in taken or (self._root / candidate).exists():
            candidate = str(PurePosixPath(relative_path) / f"{name.stem} ({counter}){name.suffix}")
            counter += 1
        return candidate
