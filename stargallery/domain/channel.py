"""Method channel messages exchanged with the host application."""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class MethodCall(BaseModel):
    method: str
    arguments: Any = None

    def argument(self, key: str) -> Any:
        """Get a named argument, or None when absent or when arguments are not a map."""
        if not isinstance(self.arguments, dict):
            return None
        return self.arguments.get(key)


class ChannelError(BaseModel):
    code: str
    message: str | None = None
    details: Any = None


class ResponseStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    NOT_IMPLEMENTED = "not_implemented"


class MethodResponse(BaseModel):
    """Response envelope delivered to the host for a method call."""

    status: ResponseStatus
    result: Any = None
    error: ChannelError | None = None

    @classmethod
    def success(cls, result: Any) -> "MethodResponse":
        return cls(status=ResponseStatus.SUCCESS, result=result)

    @classmethod
    def failure(cls, code: str, message: str | None, details: Any = None) -> "MethodResponse":
        return cls(
            status=ResponseStatus.ERROR,
            error=ChannelError(code=code, message=message, details=details),
        )

    @classmethod
    def not_implemented(cls) -> "MethodResponse":
        return cls(status=ResponseStatus.NOT_IMPLEMENTED)
