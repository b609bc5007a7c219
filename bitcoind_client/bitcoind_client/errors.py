"""Error taxonomy and HTTP/JSON-RPC error classification.

Every failed call surfaces as exactly one ``BitcoindError`` subclass.
Classification is split in two so it can be tested without HTTP:

* ``classify(status, code)`` — pure ``(status, code) -> ErrorKind``
* ``raise_for_response(status, body, headers)`` — parses an error body and
  raises the exception for its kind

An unmapped code inside a status class degrades to that class's generic
error.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import Any, NoReturn

from wire.codec import loads
from wire.jsonrpc import (
    INVALID_ADDRESS_OR_KEY,
    METHOD_NOT_FOUND,
    WALLET_WRONG_ENC_STATE,
    JsonRpcError,
    JsonRpcResponse,
)

log = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    INVALID_PARAMETER = "invalid_parameter"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    RESPONSE_DECODE = "response_decode"
    INVALID_ADDRESS = "invalid_address"
    WALLET_STATE = "wallet_state"
    SERVER = "server"
    METHOD_NOT_FOUND = "method_not_found"
    CLIENT = "client"


class BitcoindError(Exception):
    """Base for every failure of a daemon call.

    ``str(exc)`` is the message; for remote errors that is the daemon's
    message verbatim. Branch on the class or ``code``, never on the text.
    """

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.body = body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, status={self.status!r}, message={self.message!r})"


class InvalidParameterError(BitcoindError):
    """The call was malformed locally; nothing was sent."""

    kind = ErrorKind.INVALID_PARAMETER


class TransportError(BitcoindError):
    """No usable HTTP response, or an HTTP error that is not JSON-RPC."""

    kind = ErrorKind.TRANSPORT


class ProtocolError(BitcoindError):
    """An HTTP error response whose body is not a JSON-RPC error envelope."""

    kind = ErrorKind.PROTOCOL


class ResponseDecodeError(BitcoindError):
    """A successful HTTP response whose body does not fit the expected result shape."""

    kind = ErrorKind.RESPONSE_DECODE


class RemoteError(BitcoindError):
    """The daemon reported an error code and message."""


class ServerError(RemoteError):
    kind = ErrorKind.SERVER


class InvalidAddressError(ServerError):
    kind = ErrorKind.INVALID_ADDRESS


class WalletStateError(ServerError):
    """Wallet encryption state does not allow the call (e.g. passphrase change on an unencrypted wallet)."""

    kind = ErrorKind.WALLET_STATE


class ClientError(RemoteError):
    kind = ErrorKind.CLIENT


class MethodNotFoundError(ClientError):
    kind = ErrorKind.METHOD_NOT_FOUND


ERROR_CLASSES: dict[ErrorKind, type[BitcoindError]] = {
    cls.kind: cls
    for cls in (
        InvalidParameterError,
        TransportError,
        ProtocolError,
        ResponseDecodeError,
        InvalidAddressError,
        WalletStateError,
        ServerError,
        MethodNotFoundError,
        ClientError,
    )
}

# Most specific first; anything else falls back to the class-wide kind.
_SERVER_CODES = {
    INVALID_ADDRESS_OR_KEY: ErrorKind.INVALID_ADDRESS,
    WALLET_WRONG_ENC_STATE: ErrorKind.WALLET_STATE,
}
_CLIENT_CODES = {
    METHOD_NOT_FOUND: ErrorKind.METHOD_NOT_FOUND,
}


def classify(status: int, code: int | None) -> ErrorKind:
    """Map an HTTP status and daemon error code to one ``ErrorKind``."""
    if 500 <= status < 600:
        return _SERVER_CODES.get(code, ErrorKind.SERVER)
    if 400 <= status < 500:
        return _CLIENT_CODES.get(code, ErrorKind.CLIENT)
    return ErrorKind.TRANSPORT


def response_text(body: bytes, headers: Mapping[str, str] | None = None) -> str:
    """Decode *body* with the charset from ``Content-Type`` (UTF-8 by default)."""
    charset = "utf-8"
    for key, value in (headers or {}).items():
        if key.lower() != "content-type":
            continue
        for part in value.split(";")[1:]:
            name, _, param = part.strip().partition("=")
            if name.lower() == "charset" and param:
                charset = param.strip('"')
    try:
        return body.decode(charset, errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def parse_error_body(status: int, text: str) -> JsonRpcError:
    """Extract the ``error`` object; anything else is a ``ProtocolError``."""
    try:
        envelope = JsonRpcResponse.from_wire(loads(text))
    except ValueError as exc:
        raise ProtocolError(
            f"Received HTTP {status} with a body that is not a JSON-RPC error envelope",
            status=status,
            body=text,
        ) from exc
    error = envelope.error
    if error is None or error.code is None:
        raise ProtocolError(
            f"Received HTTP {status} without an error code in the body",
            status=status,
            body=text,
        )
    return error


def error_for(status: int, error: JsonRpcError, body: str | None = None, *, legacy_status: int | None = None) -> BitcoindError:
    """Build the exception for a parsed error object.

    *legacy_status* classifies as if the daemon had sent that status while
    the exception still reports the real one.
    """
    kind = classify(legacy_status if legacy_status is not None else status, error.code)
    cls = ERROR_CLASSES[kind]
    message = error.message if error.message is not None else ""
    log.warning("rpc error %s code=%s status=%d: %s", kind.value, error.code, status, message)
    return cls(message, code=error.code, status=status, body=body)


def raise_for_response(status: int, body: bytes, headers: Mapping[str, str] | None = None) -> NoReturn:
    """Raise the typed exception for a failed HTTP response.

    Statuses outside 4xx/5xx never carry a JSON-RPC error envelope and
    become ``TransportError``.
    """
    text = response_text(body, headers)
    if classify(status, None) is ErrorKind.TRANSPORT:
        raise TransportError(f"Unexpected HTTP {status} from daemon", status=status, body=text)
    error = parse_error_body(status, text)
    raise error_for(status, error, text)


def describe(exc: BitcoindError) -> dict[str, Any]:
    """Flat summary for logs and CLI output."""
    return {"kind": exc.kind.value, "code": exc.code, "status": exc.status, "message": exc.message}
