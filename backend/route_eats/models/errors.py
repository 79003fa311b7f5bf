"""Error envelope returned by the API."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    INVALID_INPUT = "INVALID_INPUT"
    NO_ROUTE = "NO_ROUTE"
    API_ERROR = "API_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AI_UNAVAILABLE = "AI_UNAVAILABLE"


class RecoveryOption(BaseModel):
    """An action the client can offer the user after an error."""

    label: str
    action: str
    params: Optional[dict] = None


class AppError(BaseModel):
    """Error payload with a developer message and a user-facing message."""

    code: ErrorCode
    message: str
    user_message: str
    recovery_options: list[RecoveryOption] = Field(default_factory=list)
