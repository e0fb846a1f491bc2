"""Tests for the envelope codec."""

from __future__ import annotations

import json

import pytest

from discord_mcp.protocol.codec import decode_request, encode_response, failure, success, tool_call_result
from discord_mcp.protocol.errors import INTERNAL_ERROR, METHOD_NOT_FOUND, DecodeError


class TestDecodeRequest:
    def test_valid_request(self) -> None:
        req = decode_request('{"jsonrpc":"2.0","id":1,"method":"tools/list","params":{}}')
        assert req.id == 1
        assert req.method == "tools/list"
        assert req.params == {}

    def test_missing_params_defaults_to_empty(self) -> None:
        req = decode_request('{"jsonrpc":"2.0","id":1,"method":"ping"}')
        assert req.params == {}

    def test_notification(self) -> None:
        req = decode_request('{"jsonrpc":"2.0","method":"notifications/initialized","params":{}}')
        assert req.is_notification

    def test_invalid_json(self) -> None:
        with pytest.raises(DecodeError, match="invalid JSON"):
            decode_request("{not json")

    def test_non_object(self) -> None:
        with pytest.raises(DecodeError, match="JSON object"):
            decode_request("[1, 2, 3]")

    @pytest.mark.parametrize(
        "line",
        [
            '{"id":1,"method":"ping"}',
            '{"jsonrpc":"1.0","id":1,"method":"ping"}',
            '{"jsonrpc":2.0,"id":1,"method":"ping"}',
        ],
    )
    def test_wrong_version(self, line: str) -> None:
        with pytest.raises(DecodeError, match="jsonrpc"):
            decode_request(line)

    def test_missing_method(self) -> None:
        with pytest.raises(DecodeError, match="method"):
            decode_request('{"jsonrpc":"2.0","id":1}')

    def test_bad_id_type(self) -> None:
        with pytest.raises(DecodeError, match="id"):
            decode_request('{"jsonrpc":"2.0","id":1.5,"method":"ping"}')

    def test_bad_params_type(self) -> None:
        with pytest.raises(DecodeError, match="params"):
            decode_request('{"jsonrpc":"2.0","id":1,"method":"ping","params":"x"}')

    def test_error_keeps_line(self) -> None:
        with pytest.raises(DecodeError) as excinfo:
            decode_request("garbage")
        assert excinfo.value.line == "garbage"


class TestEncodeResponse:
    def test_single_line_without_trailing_newline(self) -> None:
        line = encode_response(success(1, {"text": "line one\nline two"}))
        assert "\n" not in line
        assert json.loads(line)["result"]["text"] == "line one\nline two"

    def test_exactly_one_of_result_or_error(self) -> None:
        ok = json.loads(encode_response(success(1, {"tools": []})))
        err = json.loads(encode_response(failure(2, METHOD_NOT_FOUND, "Method not found")))
        assert "result" in ok and "error" not in ok
        assert "error" in err and "result" not in err
        assert err["error"] == {"code": -32601, "message": "Method not found"}

    def test_failure_with_data(self) -> None:
        wire = json.loads(encode_response(failure("a", INTERNAL_ERROR, "Internal error", {"why": "x"})))
        assert wire["id"] == "a"
        assert wire["error"]["data"] == {"why": "x"}


class TestToolCallResult:
    def test_wraps_payload_as_text(self) -> None:
        result = tool_call_result({"success": True, "value": 1})
        assert result["content"][0]["type"] == "text"
        assert json.loads(result["content"][0]["text"]) == {"success": True, "value": 1}
        assert len(result["content"]) == 1
