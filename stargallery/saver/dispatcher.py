"""Entry point of the save-image operation."""

from loguru import logger

from stargallery.domain.save import SaveRequest, SaveResult
from stargallery.saver.adapters import PersistenceAdapter
from stargallery.saver.gate import PermissionGate


class ImageSaver:
    """Validates a save request, gates it on write access and persists it.

    Every request goes through the same steps: path validation, adapter
    preparation, the permission gate, then persistence.
    """

    def __init__(self, *, gate: PermissionGate, adapter: PersistenceAdapter) -> None:
        self.gate = gate
        self.adapter = adapter

    async def dispatch(self, source_path: str | None) -> SaveResult:
        """Save the image at ``source_path`` into the shared photo library."""
        if not source_path:
            logger.warning("Rejected save request without an image path")
            return SaveResult.invalid_path()

        request = SaveRequest(source_path=source_path)
        logger.info(f"Received save request {request.id} for {source_path}")

        prepared = await self.adapter.prepare(request)
        if isinstance(prepared, SaveResult):
            return prepared

        return await self.gate.ensure_write_access(
            prepared, on_granted=self.adapter.persist, on_denied=self._denied
        )

    async def _denied(self, request: SaveRequest) -> SaveResult:  # noqa: ARG002
        return SaveResult.permission_denied()
