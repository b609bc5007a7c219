"""Tests for the JSON-RPC envelope models."""

import pytest
from wire.codec import dumps, loads
from wire.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    http_status_for,
)
from wire.model import decode, encode


class TestJsonRpcRequest:
    def test_to_dict(self):
        req = JsonRpcRequest(jsonrpc="1.0", id="abc", method="getbalance", params=["*", 6])
        assert req.to_dict() == {"jsonrpc": "1.0", "id": "abc", "method": "getbalance", "params": ["*", 6]}

    def test_unset_members_are_omitted(self):
        req = JsonRpcRequest(method="getinfo")
        assert dumps(req) == '{"method":"getinfo","params":[]}'

    def test_from_dict_valid(self):
        raw = {"jsonrpc": "1.0", "method": "getblockhash", "params": [0], "id": "1"}
        req = JsonRpcRequest.from_dict(raw)
        assert req.method == "getblockhash"
        assert req.params == [0]
        assert req.id == "1"

    def test_from_dict_without_params(self):
        req = JsonRpcRequest.from_dict({"method": "getinfo", "id": 7})
        assert req.params == []
        assert req.id == 7

    def test_explicit_null_params_round_trip(self):
        text = '{"method":"getinfo","params":null}'
        req = decode(JsonRpcRequest, text)
        assert req.params == []
        assert encode(req) == text

    def test_from_dict_missing_method(self):
        with pytest.raises(ValueError, match="method"):
            JsonRpcRequest.from_dict({"jsonrpc": "1.0", "params": []})

    def test_from_dict_named_params_rejected(self):
        with pytest.raises(ValueError, match="params"):
            JsonRpcRequest.from_dict({"method": "t", "params": {"a": 1}})

    def test_from_dict_not_dict(self):
        with pytest.raises(ValueError, match="JSON object"):
            JsonRpcRequest.from_dict("hello")  # type: ignore

    def test_unknown_members_are_kept(self):
        req = JsonRpcRequest.from_dict({"method": "t", "params": [], "id": 1, "trace": "x"})
        assert req.other_fields == {"trace": "x"}
        assert encode(req) == '{"id":1,"method":"t","params":[],"trace":"x"}'


class TestJsonRpcResponse:
    def test_success(self):
        resp = JsonRpcResponse.success("1", {"value": 42})
        assert dumps(resp) == '{"result":{"value":42},"error":null,"id":"1"}'

    def test_success_with_null_result(self):
        resp = JsonRpcResponse.success("1", None)
        assert resp.has_result
        assert dumps(resp) == '{"result":null,"error":null,"id":"1"}'

    def test_fail(self):
        resp = JsonRpcResponse.fail("2", METHOD_NOT_FOUND, "Method not found")
        d = loads(dumps(resp))
        assert d["id"] == "2"
        assert d["result"] is None
        assert d["error"] == {"code": METHOD_NOT_FOUND, "message": "Method not found"}

    def test_fail_no_id(self):
        resp = JsonRpcResponse.fail(None, PARSE_ERROR, "Parse error")
        assert dumps(resp) == '{"result":null,"error":{"code":-32700,"message":"Parse error"},"id":null}'

    def test_missing_result_is_not_a_result(self):
        resp = decode(JsonRpcResponse, '{"id":"1"}')
        assert not resp.has_result

    def test_explicit_nulls_round_trip(self):
        text = '{"result":null,"error":null,"id":null}'
        assert encode(decode(JsonRpcResponse, text)) == text

    def test_absent_error_stays_absent(self):
        text = '{"result":{"amount":"1.00000000","confirmations":3},"id":null}'
        assert encode(decode(JsonRpcResponse, text)) == text


class TestJsonRpcError:
    def test_to_wire(self):
        err = JsonRpcError(code=INTERNAL_ERROR, message="oops")
        assert err.to_wire() == {"code": INTERNAL_ERROR, "message": "oops"}

    def test_extra_members_preserved(self):
        err = JsonRpcError.from_wire({"code": -1, "message": "x", "data": {"trace": "..."}})
        assert err.other_fields == {"data": {"trace": "..."}}
        assert err.to_wire()["data"] == {"trace": "..."}


class TestErrorCodes:
    def test_standard_codes(self):
        assert PARSE_ERROR == -32700
        assert INVALID_REQUEST == -32600
        assert METHOD_NOT_FOUND == -32601
        assert INTERNAL_ERROR == -32603

    @pytest.mark.parametrize(
        "code, status",
        [(INVALID_REQUEST, 400), (METHOD_NOT_FOUND, 404), (PARSE_ERROR, 500), (-5, 500), (-15, 500)],
    )
    def test_legacy_status(self, code, status):
        assert http_status_for(code) == status
