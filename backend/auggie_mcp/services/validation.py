import json
from typing import Any, Dict, List

from auggie_mcp.core.errors import MalformedBody, ValidationFailed, ValidationResult
from auggie_mcp.schemas.stream import FieldError, StreamRequest


def json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def parse_stream_request(raw: bytes) -> ValidationResult:
    """Parse and type-check a ``POST /stream`` body.

    Returns a ``StreamRequest`` on success. Otherwise returns
    ``MalformedBody`` when the bytes are not JSON (or are JSON ``null``),
    or ``ValidationFailed`` listing every offending field. Any other
    non-object document simply has no fields.
    """
    try:
        text = raw.decode("utf-8") if raw else ""
        parsed = json.loads(text or "{}")
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return MalformedBody(message=str(exc) or "Invalid JSON")
    if parsed is None:
        return MalformedBody(message="Request body must not be null")
    fields: Dict[str, Any] = parsed if isinstance(parsed, dict) else {}

    errors: List[FieldError] = []

    args = fields.get("args")
    if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
        errors.append(FieldError(field="args", expected="string[]", actual=args))

    has_stdin = "stdinText" in fields
    stdin_text = fields.get("stdinText")
    if has_stdin and not isinstance(stdin_text, str):
        errors.append(
            FieldError(
                field="stdinText",
                expected="string",
                actual=json_type_name(stdin_text),
            )
        )

    if errors:
        return ValidationFailed(details=errors)
    return StreamRequest(args=args, stdin_text=stdin_text)
