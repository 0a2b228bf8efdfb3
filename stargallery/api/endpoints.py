from typing import List

from fastapi import APIRouter, HTTPException, Response
from loguru import logger

from stargallery.domain.channel import MethodCall, MethodResponse
from stargallery.domain.permissions import PermissionDecision, PermissionPrompt
from stargallery.permissions.consent import ConsentPermissionService
from stargallery.saver.channel import ImageSaverChannel


def _create_channel_endpoint(channel: ImageSaverChannel):
    """Create the method channel endpoint handler."""

    async def invoke(name: str, call: MethodCall) -> MethodResponse:
        if name != channel.name:
            raise HTTPException(status_code=404, detail=f"Unknown channel {name}")
        return await channel.handle(call)

    return invoke


def _create_prompts_endpoint(permissions: ConsentPermissionService):
    """Create the endpoint listing permission prompts waiting for the user."""

    async def list_prompts() -> List[PermissionPrompt]:
        return permissions.pending_prompts()

    return list_prompts


def _create_decision_endpoint(permissions: ConsentPermissionService):
    """Create the endpoint answering a permission prompt."""

    async def answer_prompt(prompt_id: str, decision: PermissionDecision) -> Response:
        try:
            permissions.resolve(prompt_id, decision.status)
        except KeyError as err:
            logger.warning(f"Permission prompt {prompt_id} not found")
            raise HTTPException(status_code=404, detail="Permission prompt not found") from err
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return Response(status_code=204)

    return answer_prompt


def get_endpoints_router(
    *,
    channel: ImageSaverChannel,
    permissions: ConsentPermissionService,
) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    router.post("/channels/{name:path}")(_create_channel_endpoint(channel))
    router.get("/permissions/prompts")(_create_prompts_endpoint(permissions))
    router.post("/permissions/prompts/{prompt_id}", status_code=204)(
        _create_decision_endpoint(permissions)
    )

    return router
