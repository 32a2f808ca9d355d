"""Error codes and exceptions for the HTTP surface."""
from enum import Enum

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from fairspin.config import settings
from fairspin.logic.errors import (
    CommitmentError,
    CommitmentMismatch,
    EntropyExhaustion,
    EntropySourceError,
    EpochStateError,
    FairnessError,
)


class ErrorCode(str, Enum):
    """Protocol error codes."""

    INVALID_REQUEST = "INVALID_REQUEST"
    ROUND_IN_PROGRESS = "ROUND_IN_PROGRESS"
    IDEMPOTENCY_CONFLICT = "IDEMPOTENCY_CONFLICT"
    RNG_UNAVAILABLE = "RNG_UNAVAILABLE"
    INTEGRITY_ERROR = "INTEGRITY_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.ROUND_IN_PROGRESS: 409,
    ErrorCode.IDEMPOTENCY_CONFLICT: 409,
    ErrorCode.RNG_UNAVAILABLE: 503,
    ErrorCode.INTEGRITY_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Fairness failures are never recoverable by retrying the same request
ERROR_RECOVERABLE: dict[ErrorCode, bool] = {
    ErrorCode.INVALID_REQUEST: False,
    ErrorCode.ROUND_IN_PROGRESS: True,
    ErrorCode.IDEMPOTENCY_CONFLICT: False,
    ErrorCode.RNG_UNAVAILABLE: False,
    ErrorCode.INTEGRITY_ERROR: False,
    ErrorCode.INTERNAL_ERROR: True,
}

FAIRNESS_ERROR_CODES: dict[type[FairnessError], ErrorCode] = {
    EntropySourceError: ErrorCode.RNG_UNAVAILABLE,
    CommitmentError: ErrorCode.RNG_UNAVAILABLE,
    CommitmentMismatch: ErrorCode.INTEGRITY_ERROR,
    EntropyExhaustion: ErrorCode.INTEGRITY_ERROR,
    EpochStateError: ErrorCode.INTEGRITY_ERROR,
}


class ErrorBody(BaseModel):
    """Error body shape."""

    code: str
    message: str
    recoverable: bool


class ErrorResponse(BaseModel):
    """Full error response."""

    protocolVersion: str = settings.protocol_version
    error: ErrorBody


class GameError(Exception):
    """Base service error that maps to protocol error response."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.message = message or f"Error: {code.value}"
        self.status_code = ERROR_HTTP_STATUS[code]
        self.recoverable = ERROR_RECOVERABLE[code]
        super().__init__(self.message)

    @classmethod
    def from_fairness_error(cls, error: FairnessError) -> "GameError":
        """Map a domain failure to its protocol error."""
        code = FAIRNESS_ERROR_CODES.get(type(error), ErrorCode.INTEGRITY_ERROR)
        return cls(code, str(error))

    def to_response(self) -> JSONResponse:
        """Convert to JSONResponse."""
        return JSONResponse(
            status_code=self.status_code,
            content=ErrorResponse(
                error=ErrorBody(
                    code=self.code.value,
                    message=self.message,
                    recoverable=self.recoverable,
                )
            ).model_dump(),
        )
