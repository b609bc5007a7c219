"""Tests for error classification."""

import pytest
from bitcoind_client.errors import (
    ERROR_CLASSES,
    BitcoindError,
    ClientError,
    ErrorKind,
    InvalidAddressError,
    MethodNotFoundError,
    ProtocolError,
    RemoteError,
    ServerError,
    TransportError,
    WalletStateError,
    classify,
    describe,
    raise_for_response,
    response_text,
)


def _body(code, message="boom"):
    return f'{{"result":null,"error":{{"code":{code},"message":"{message}"}},"id":"1"}}'.encode()


class TestClassify:
    @pytest.mark.parametrize(
        "status, code, kind",
        [
            (500, -5, ErrorKind.INVALID_ADDRESS),
            (500, -15, ErrorKind.WALLET_STATE),
            (500, -9999, ErrorKind.SERVER),
            (503, None, ErrorKind.SERVER),
            (404, -32601, ErrorKind.METHOD_NOT_FOUND),
            (400, -32600, ErrorKind.CLIENT),
            (404, -5, ErrorKind.CLIENT),
            (500, -32601, ErrorKind.SERVER),
            (302, -5, ErrorKind.TRANSPORT),
            (200, -5, ErrorKind.TRANSPORT),
        ],
    )
    def test_table(self, status, code, kind):
        assert classify(status, code) is kind

    def test_every_kind_has_a_class(self):
        assert set(ERROR_CLASSES) == set(ErrorKind)
        for kind, cls in ERROR_CLASSES.items():
            assert cls.kind is kind


class TestHierarchy:
    def test_remote_errors(self):
        assert issubclass(InvalidAddressError, ServerError)
        assert issubclass(WalletStateError, ServerError)
        assert issubclass(MethodNotFoundError, ClientError)
        assert issubclass(ServerError, RemoteError)
        assert issubclass(ClientError, RemoteError)
        assert issubclass(RemoteError, BitcoindError)

    def test_local_errors_are_not_remote(self):
        assert not issubclass(TransportError, RemoteError)
        assert not issubclass(ProtocolError, RemoteError)


class TestRaiseForResponse:
    def test_invalid_address(self):
        with pytest.raises(InvalidAddressError) as exc_info:
            raise_for_response(500, _body(-5, "Invalid Bitcoin address"))
        exc = exc_info.value
        assert exc.code == -5
        assert exc.status == 500
        assert str(exc) == "Invalid Bitcoin address"

    def test_method_not_found(self):
        with pytest.raises(MethodNotFoundError) as exc_info:
            raise_for_response(404, _body(-32601, "Method not found"))
        assert exc_info.value.code == -32601

    def test_wallet_state(self):
        with pytest.raises(WalletStateError) as exc_info:
            raise_for_response(500, _body(-15, "Error: running with an unencrypted wallet"))
        assert exc_info.value.kind is ErrorKind.WALLET_STATE

    def test_unmapped_code_is_generic_server_error(self):
        with pytest.raises(ServerError) as exc_info:
            raise_for_response(500, _body(-9999))
        assert type(exc_info.value) is ServerError
        assert exc_info.value.code == -9999

    def test_unmapped_client_code(self):
        with pytest.raises(ClientError) as exc_info:
            raise_for_response(400, _body(-32600))
        assert type(exc_info.value) is ClientError

    def test_non_json_body_is_protocol_error(self):
        with pytest.raises(ProtocolError) as exc_info:
            raise_for_response(500, b"<html>Internal Server Error</html>")
        assert exc_info.value.status == 500
        assert exc_info.value.body == "<html>Internal Server Error</html>"

    @pytest.mark.parametrize(
        "body",
        [
            b"",
            b"[1,2]",
            b'{"result":null,"error":null,"id":"1"}',
            b'{"error":{"message":"no code"}}',
            b'{"error":{"code":"-5","message":"string code"}}',
        ],
    )
    def test_not_an_error_envelope(self, body):
        with pytest.raises(ProtocolError):
            raise_for_response(401, body)

    def test_other_status_is_transport_error(self):
        with pytest.raises(TransportError) as exc_info:
            raise_for_response(302, b"moved")
        assert exc_info.value.status == 302
        assert exc_info.value.body == "moved"

    def test_message_is_not_parsed(self):
        with pytest.raises(ServerError) as exc_info:
            raise_for_response(500, _body(-1, "Invalid Bitcoin address"))
        assert type(exc_info.value) is ServerError

    def test_warning_is_logged(self, caplog):
        with caplog.at_level("WARNING", logger="bitcoind_client.errors"):
            with pytest.raises(ServerError):
                raise_for_response(500, _body(-4))
        assert "code=-4" in caplog.text


class TestResponseText:
    def test_default_utf8(self):
        assert response_text("æ".encode()) == "æ"

    def test_charset_from_content_type(self):
        body = "æ".encode("latin-1")
        assert response_text(body, {"Content-Type": "application/json; charset=ISO-8859-1"}) == "æ"

    def test_undecodable_bytes_replaced(self):
        assert response_text(b"\xff") == "�"

    def test_unknown_charset_falls_back(self):
        assert response_text(b"ok", {"content-type": "text/plain; charset=bogus"}) == "ok"


def test_describe():
    exc = InvalidAddressError("Invalid Bitcoin address", code=-5, status=500)
    assert describe(exc) == {
        "kind": "invalid_address",
        "code": -5,
        "status": 500,
        "message": "Invalid Bitcoin address",
    }
