"""Pre-stream rejections.

These are returned, not raised: a rejection is decided before any response
headers go out, so it maps onto an HTTP status and a JSON body. Faults that
happen after the stream is committed travel in-band as ``error`` events.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from auggie_mcp.schemas.stream import (
    BadRequestResponse,
    FieldError,
    ForbiddenResponse,
    StreamRequest,
    ValidationErrorResponse,
)


@dataclass(frozen=True)
class ExecutionDisabled:
    status_code: int = 403

    def body(self) -> Dict[str, Any]:
        return ForbiddenResponse().model_dump()


@dataclass(frozen=True)
class MalformedBody:
    message: str
    status_code: int = 400

    def body(self) -> Dict[str, Any]:
        return BadRequestResponse(message=self.message).model_dump()


@dataclass(frozen=True)
class ValidationFailed:
    details: List[FieldError] = field(default_factory=list)
    status_code: int = 400

    def body(self) -> Dict[str, Any]:
        return ValidationErrorResponse(details=self.details).model_dump()


ValidationResult = Union[StreamRequest, MalformedBody, ValidationFailed]


class PathEscapesRepository(ValueError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Path escapes repository: {path}")
        self.path = path


class ExecFailed(RuntimeError):
    """A one-shot command exited non-zero, timed out, or could not start."""

    def __init__(self, message: str, stdout: str = "", stderr: str = "") -> None:
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr
