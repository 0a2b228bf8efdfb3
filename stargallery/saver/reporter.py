"""Delivery of save results back to the host."""

import asyncio
import threading
from typing import Any, Optional

from loguru import logger

from stargallery.domain.channel import MethodResponse
from stargallery.domain.save import SaveOutcome, SaveResult

ERROR_CODES = {
    SaveOutcome.INVALID_PATH: ("INVALID_PATH", "Invalid image path"),
    SaveOutcome.PERMISSION_DENIED: (
        "PERMISSION_DENIED",
        "No permission to write to the photo library",
    ),
    SaveOutcome.SAVE_FAILED: ("SAVE_FAILED", "Failed to save image"),
}


class ReplyAlreadySubmittedError(RuntimeError):
    """Raised when a second response is submitted for the same call."""


class Reply:
    """One-shot response channel for a single method call.

    Responses may be submitted from any thread; they are always handed over
    on the event loop the reply was created on.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._future: "asyncio.Future[MethodResponse]" = self._loop.create_future()
        self._submitted = False
        self._lock = threading.Lock()

    def success(self, result: Any) -> None:
        self._submit(MethodResponse.success(result))

    def error(self, code: str, message: str | None, details: Any = None) -> None:
        self._submit(MethodResponse.failure(code, message, details))

    def not_implemented(self) -> None:
        self._submit(MethodResponse.not_implemented())

    async def wait(self) -> MethodResponse:
        """Wait for the response to be submitted."""
        return await self._future

    def _submit(self, response: MethodResponse) -> None:
        with self._lock:
            if self._submitted:
                raise ReplyAlreadySubmittedError("Reply already submitted")
            self._submitted = True
        self._loop.call_soon_threadsafe(self._future.set_result, response)


class ResultReporter:
    """Maps a save result onto the reply of the call that requested it."""

    def report(self, result: SaveResult, reply: Reply) -> None:
        if result.ok:
            reply.success(True)
            return

        code, message = ERROR_CODES[result.outcome]
        logger.warning(f"Save request failed with {code}: {result.detail or message}")
        reply.error(code, message, result.detail)
