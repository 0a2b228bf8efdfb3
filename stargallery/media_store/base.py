from typing import BinaryIO, List, Optional, Protocol

from stargallery.domain.media import MediaRecord, MediaValues


class MediaStoreError(Exception):
    """Raised when the media index cannot complete an operation."""


class MediaIndex(Protocol):
    """Protocol for shared media index implementations."""

    def insert(self, values: MediaValues) -> Optional[str]:
        """Create a record and return its handle, or None if it could not be created."""
        ...

    def open_output(self, record_id: str) -> BinaryIO:
        """Open a write stream over the bytes of a record."""
        ...

    def update(self, record_id: str, values: MediaValues) -> int:
        """Update the columns set in ``values``, returning the number of rows changed."""
        ...

    def get_record(self, record_id: str) -> MediaRecord:
        """Get a record by its handle."""
        ...

    def query(self, include_pending: bool = False) -> List[MediaRecord]:
        """List records, leaving out pending ones unless asked."""
        ...

    def read_bytes(self, record_id: str) -> bytes:
        """Read back the bytes stored for a record."""
        ...
