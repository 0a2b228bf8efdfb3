"""Permission domain models."""

import time
import uuid
from enum import Enum

from pydantic import BaseModel, Field


class PermissionState(str, Enum):
    """Grant state for writing into shared media storage."""

    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class AuthorizationStatus(str, Enum):
    """Grant level reported by the platform, including partial grants."""

    NOT_DETERMINED = "not_determined"
    RESTRICTED = "restricted"
    DENIED = "denied"
    AUTHORIZED = "authorized"
    LIMITED = "limited"

    def to_permission_state(self) -> PermissionState:
        if self in (AuthorizationStatus.AUTHORIZED, AuthorizationStatus.LIMITED):
            return PermissionState.GRANTED
        if self is AuthorizationStatus.NOT_DETERMINED:
            return PermissionState.UNDETERMINED
        return PermissionState.DENIED


class PermissionPrompt(BaseModel):
    """A consent prompt shown to the user, waiting for a decision.

    Attributes:
        id: Identifier used to answer the prompt.
        request_id: The save request that raised the prompt.
        created: Timestamp the prompt was raised (seconds since epoch).
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    request_id: str
    created: float = Field(default_factory=time.time)


class PermissionDecision(BaseModel):
    status: AuthorizationStatus
