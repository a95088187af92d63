from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class StreamRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    args: List[str] = Field(default_factory=list)
    stdin_text: Optional[str] = Field(default=None, alias="stdinText")


class FieldError(BaseModel):
    field: str
    expected: str
    actual: Any = None


class ForbiddenResponse(BaseModel):
    error: Literal["Forbidden"] = "Forbidden"
    code: Literal["EXEC_DISABLED"] = "EXEC_DISABLED"
    hint: str = "Set AUGGIE_MCP_ALLOW_EXEC=true"


class BadRequestResponse(BaseModel):
    error: Literal["BadRequest"] = "BadRequest"
    message: str


class ValidationErrorResponse(BaseModel):
    error: Literal["ValidationError"] = "ValidationError"
    details: List[FieldError]


class HealthResponse(BaseModel):
    ok: bool = True


class StdoutEvent(BaseModel):
    event: Literal["stdout"] = "stdout"
    chunk: str


class StderrEvent(BaseModel):
    event: Literal["stderr"] = "stderr"
    chunk: str


class ErrorEvent(BaseModel):
    event: Literal["error"] = "error"
    message: str


class EndEvent(BaseModel):
    event: Literal["end"] = "end"
    code: Optional[int] = None


SSEEvent = Union[StdoutEvent, StderrEvent, ErrorEvent, EndEvent]
