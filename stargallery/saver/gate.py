"""Permission gate in front of every persistence attempt."""

import asyncio
from typing import Awaitable, Callable, Dict, List

from loguru import logger

from stargallery.domain.permissions import PermissionState
from stargallery.domain.save import PendingAuthorization, SaveRequest, SaveResult
from stargallery.permissions.base import PermissionService
from stargallery.platforms.capabilities import PlatformCapabilities

Continuation = Callable[[SaveRequest], Awaitable[SaveResult]]


class PermissionGate:
    """Checks write access and suspends requests until the user decides.

    Suspended requests are keyed by request id, so concurrent saves each wait
    on their own decision.
    """

    def __init__(
        self,
        *,
        capabilities: PlatformCapabilities,
        permissions: PermissionService,
        timeout: float | None = None,
    ) -> None:
        self.capabilities = capabilities
        self.permissions = permissions
        self.timeout = timeout
        self._pending: Dict[str, PendingAuthorization] = {}

    def current_state(self) -> PermissionState:
        """Get the grant state, without asking the OS where no grant is required."""
        if not self.capabilities.requires_explicit_grant:
            return PermissionState.GRANTED
        return self.permissions.check_write_access()

    def pending(self) -> List[PendingAuthorization]:
        """Get the requests currently waiting for a permission decision."""
        return list(self._pending.values())

    async def ensure_write_access(
        self,
        request: SaveRequest,
        on_granted: Continuation,
        on_denied: Continuation,
    ) -> SaveResult:
        """Run ``on_granted`` once access is granted, or ``on_denied`` otherwise.

        When access is not granted yet, the request is suspended until the
        permission decision arrives; exactly one continuation runs.
        """
        if self.current_state() is PermissionState.GRANTED:
            return await on_granted(request)

        self._pending[request.id] = PendingAuthorization(request=request)
        try:
            state = await self._await_decision(request)
        finally:
            pending = self._pending.pop(request.id)

        if state is PermissionState.GRANTED:
            logger.info(f"Write access granted for request {request.id}")
            return await on_granted(pending.request)

        logger.warning(f"Write access denied for request {request.id}")
        return await on_denied(pending.request)

    async def _await_decision(self, request: SaveRequest) -> PermissionState:
        try:
            return await asyncio.wait_for(
                self.permissions.request_write_access(request.id), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            # A decision recorded just before the deadline still counts
            if self.permissions.check_write_access() is PermissionState.GRANTED:
                return PermissionState.GRANTED
            logger.warning(
                f"No permission decision for request {request.id} within {self.timeout}s"
            )
            return PermissionState.DENIED
