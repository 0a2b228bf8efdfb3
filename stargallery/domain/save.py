"""Save request and result models."""

import time
import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SaveRequest(BaseModel):
    """A single request to persist an image file into the shared library.

    Attributes:
        id: Request identity, used to key suspended authorizations.
        source_path: Path of the image file produced by the host application.
        image: Decoded image, attached when the persistence variant needs one.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    source_path: str
    image: Any = Field(default=None, exclude=True)


class SaveOutcome(str, Enum):
    SUCCESS = "success"
    INVALID_PATH = "invalid_path"
    PERMISSION_DENIED = "permission_denied"
    SAVE_FAILED = "save_failed"


class SaveResult(BaseModel):
    """Outcome of a save request, produced exactly once per request.

    Attributes:
        outcome: Which terminal state the request reached.
        detail: Description of the underlying failure, for ``SAVE_FAILED``.
        record_id: Identifier of the created media record or photo asset.
    """

    model_config = {"frozen": True}

    outcome: SaveOutcome
    detail: str | None = None
    record_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is SaveOutcome.SUCCESS

    @classmethod
    def success(cls, record_id: str | None = None) -> "SaveResult":
        return cls(outcome=SaveOutcome.SUCCESS, record_id=record_id)

    @classmethod
    def invalid_path(cls) -> "SaveResult":
        return cls(outcome=SaveOutcome.INVALID_PATH)

    @classmethod
    def permission_denied(cls) -> "SaveResult":
        return cls(outcome=SaveOutcome.PERMISSION_DENIED)

    @classmethod
    def save_failed(cls, detail: str | None) -> "SaveResult":
        return cls(outcome=SaveOutcome.SAVE_FAILED, detail=detail)


class PendingAuthorization(BaseModel):
    """A save request suspended until the user answers a permission prompt."""

    request: SaveRequest
    created: float = Field(default_factory=time.time)
