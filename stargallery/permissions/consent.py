"""Permission service backed by user consent prompts."""

import asyncio
import threading
from typing import Callable, Dict, List, Optional

from loguru import logger

from stargallery.domain.permissions import AuthorizationStatus, PermissionPrompt, PermissionState
from stargallery.permissions.base import PermissionService

DECISIONS = {
    AuthorizationStatus.AUTHORIZED,
    AuthorizationStatus.LIMITED,
    AuthorizationStatus.DENIED,
    AuthorizationStatus.RESTRICTED,
}


class _OpenPrompt:
    def __init__(
        self,
        prompt: PermissionPrompt,
        loop: asyncio.AbstractEventLoop,
        future: "asyncio.Future[AuthorizationStatus]",
    ) -> None:
        self.prompt = prompt
        self.loop = loop
        self.future = future


def _set_decision(
    future: "asyncio.Future[AuthorizationStatus]", status: AuthorizationStatus
) -> None:
    if not future.done():
        future.set_result(status)


class ConsentPermissionService(PermissionService):
    """Holds the authorization status and raises a prompt whenever access is requested.

    Prompts are answered with :meth:`resolve`, which may be called from any thread.
    """

    def __init__(
        self,
        *,
        status: AuthorizationStatus = AuthorizationStatus.NOT_DETERMINED,
        reprompt_after_denial: bool = True,
        on_prompt: Optional[Callable[[PermissionPrompt], None]] = None,
    ) -> None:
        """Initialize ConsentPermissionService.

        Args:
            status: Authorization status the service starts with.
            reprompt_after_denial: Whether a request prompts again once access was denied.
            on_prompt: Called with each prompt as it is raised.
        """
        self._status = status
        self.reprompt_after_denial = reprompt_after_denial
        self.on_prompt = on_prompt
        self._prompts: Dict[str, _OpenPrompt] = {}
        self._lock = threading.Lock()

    @property
    def status(self) -> AuthorizationStatus:
        return self._status

    def check_write_access(self) -> PermissionState:
        return self._status.to_permission_state()

    async def request_write_access(self, request_id: str) -> PermissionState:
        state = self.check_write_access()
        if state is PermissionState.GRANTED:
            return state
        if state is PermissionState.DENIED and not self.reprompt_after_denial:
            logger.info(f"Access already denied, not prompting again for request {request_id}")
            return state

        loop = asyncio.get_running_loop()
        prompt = PermissionPrompt(request_id=request_id)
        open_prompt = _OpenPrompt(prompt, loop, loop.create_future())
        with self._lock:
            self._prompts[prompt.id] = open_prompt

        logger.info(f"Raised permission prompt {prompt.id} for request {request_id}")
        try:
            if self.on_prompt:
                self.on_prompt(prompt)
            status = await open_prompt.future
        finally:
            with self._lock:
                self._prompts.pop(prompt.id, None)

        return status.to_permission_state()

    def pending_prompts(self) -> List[PermissionPrompt]:
        """Get the prompts still waiting for a decision, oldest first."""
        with self._lock:
            prompts = [open_prompt.prompt for open_prompt in self._prompts.values()]
        return sorted(prompts, key=lambda prompt: prompt.created)

    def resolve(self, prompt_id: str, status: AuthorizationStatus) -> None:
        """Answer a prompt with the user's decision.

        The decision applies to the whole platform, so every other open prompt
        is settled with it as well.

        Raises:
            KeyError: If no open prompt has this id.
            ValueError: If ``status`` is not a decision.
        """
        if status not in DECISIONS:
            raise ValueError(f"{status.value} is not a permission decision")

        with self._lock:
            if prompt_id not in self._prompts:
                raise KeyError(f"Permission prompt {prompt_id} not found")
            settled = list(self._prompts.values())
            self._prompts.clear()
            self._status = status

        logger.info(
            f"Permission prompt {prompt_id} answered with {status.value}, "
            f"settling {len(settled)} open prompt(s)"
        )
        for open_prompt in settled:
            open_prompt.loop.call_soon_threadsafe(_set_decision, open_prompt.future, status)
