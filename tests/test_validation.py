"""
Unit tests for the execution gate and the stream request validator.
"""

import json

import pytest

from auggie_mcp.core.errors import ExecutionDisabled, MalformedBody, ValidationFailed
from auggie_mcp.core.gate import ExecutionGate
from auggie_mcp.schemas.stream import StreamRequest
from auggie_mcp.services.validation import json_type_name, parse_stream_request


def _body(payload) -> bytes:
    return json.dumps(payload).encode()


@pytest.mark.unit
class TestExecutionGate:
    def test_open_gate_passes(self):
        gate = ExecutionGate(allowed=True)

        assert gate.is_allowed() is True
        assert gate.check() is None

    def test_closed_gate_rejects_with_fixed_code(self):
        rejection = ExecutionGate(allowed=False).check()

        assert isinstance(rejection, ExecutionDisabled)
        assert rejection.status_code == 403
        assert rejection.body() == {
            "error": "Forbidden",
            "code": "EXEC_DISABLED",
            "hint": "Set AUGGIE_MCP_ALLOW_EXEC=true",
        }

    def test_from_settings(self, make_settings):
        assert ExecutionGate.from_settings(make_settings(allow_exec=False)).allowed is False
        assert ExecutionGate.from_settings(make_settings(allow_exec=True)).allowed is True


@pytest.mark.unit
class TestParseStreamRequest:
    def test_valid_request(self):
        result = parse_stream_request(_body({"args": ["--print", "hi"], "stdinText": "ctx"}))

        assert isinstance(result, StreamRequest)
        assert result.args == ["--print", "hi"]
        assert result.stdin_text == "ctx"

    def test_empty_args_are_allowed(self):
        result = parse_stream_request(_body({"args": []}))

        assert isinstance(result, StreamRequest)
        assert result.args == []
        assert result.stdin_text is None

    def test_unparsable_body_is_malformed(self):
        result = parse_stream_request(b"{not json")

        assert isinstance(result, MalformedBody)
        assert result.status_code == 400
        assert result.body()["error"] == "BadRequest"
        assert result.body()["message"]

    def test_null_body_is_malformed(self):
        assert isinstance(parse_stream_request(b"null"), MalformedBody)

    def test_non_object_body_reports_missing_args(self):
        for raw in (b"[1, 2]", b"42", b'"x"', b"true"):
            result = parse_stream_request(raw)
            assert isinstance(result, ValidationFailed)
            assert [d.field for d in result.details] == ["args"]
            assert result.details[0].actual is None

    def test_empty_body_reports_missing_args(self):
        result = parse_stream_request(b"")

        assert isinstance(result, ValidationFailed)
        assert [d.field for d in result.details] == ["args"]
        assert result.details[0].expected == "string[]"

    def test_args_must_be_string_list(self):
        for bad in ("--print", [1, 2], ["ok", None], {"a": 1}):
            result = parse_stream_request(_body({"args": bad}))
            assert isinstance(result, ValidationFailed)
            assert result.details[0].field == "args"
            assert result.details[0].actual == bad

    def test_stdin_text_must_be_string(self):
        result = parse_stream_request(_body({"args": [], "stdinText": 5}))

        assert isinstance(result, ValidationFailed)
        assert result.details[0].field == "stdinText"
        assert result.details[0].expected == "string"
        assert result.details[0].actual == "number"

    def test_null_stdin_text_is_rejected(self):
        result = parse_stream_request(_body({"args": [], "stdinText": None}))

        assert isinstance(result, ValidationFailed)
        assert result.details[0].actual == "null"

    def test_all_violations_are_reported(self):
        result = parse_stream_request(_body({"args": "x", "stdinText": ["y"]}))

        assert isinstance(result, ValidationFailed)
        assert [d.field for d in result.details] == ["args", "stdinText"]
        body = result.body()
        assert body["error"] == "ValidationError"
        assert len(body["details"]) == 2

    def test_json_type_names(self):
        assert json_type_name(True) == "boolean"
        assert json_type_name(1.5) == "number"
        assert json_type_name({}) == "object"
        assert json_type_name([]) == "array"
