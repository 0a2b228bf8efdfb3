from typing import Protocol

from stargallery.domain.permissions import PermissionState


class PermissionService(Protocol):
    """Protocol for the platform service holding the shared-storage write grant."""

    def check_write_access(self) -> PermissionState:
        """Query the current grant state without prompting."""
        ...

    async def request_write_access(self, request_id: str) -> PermissionState:
        """Ask the user for write access and wait for the decision."""
        ...
