"""RPC invoker — one synchronous JSON-RPC call per invocation.

* ``call(method, params, shape)``          → decoded result
* ``call_envelope(method, params, shape)`` → full ``JsonRpcResponse``
* ``invoke(rpc_method, *args, **kwargs)``  → build params, then ``call``

Nothing is cached or retried here. Every failure is raised exactly once,
as one of the ``bitcoind_client.errors`` types.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

import httpx
from wire.amounts import to_amount
from wire.codec import dumps, loads
from wire.jsonrpc import JsonRpcRequest, JsonRpcResponse, http_status_for

from bitcoind_client.config import RpcConfig
from bitcoind_client.errors import (
    BitcoindError,
    InvalidParameterError,
    ResponseDecodeError,
    TransportError,
    error_for,
    raise_for_response,
    response_text,
)
from bitcoind_client.params import RpcMethod
from bitcoind_client.transport import HttpResponse, HttpxTransport, Transport

log = logging.getLogger(__name__)

CONTENT_TYPE = "application/json"


def normalize_amounts(value: Any) -> Any:
    """Rescale every ``Decimal`` in *value* to 8 fractional digits, recursing into arrays and objects."""
    if isinstance(value, Decimal):
        return to_amount(value)
    if isinstance(value, (list, tuple)):
        return [normalize_amounts(item) for item in value]
    if isinstance(value, Mapping):
        return {key: normalize_amounts(item) for key, item in value.items()}
    return value


class RpcInvoker:
    """Turns method calls into JSON-RPC requests against one daemon endpoint.

    Parameters
    ----------
    config : RpcConfig
        Endpoint and credentials.
    transport : Transport, optional
        HTTP transport; defaults to an ``HttpxTransport`` built from *config*
        (and closed by ``close()``).
    jsonrpc : str, optional
        Protocol version member to send; ``"1.0"`` selects bitcoind's legacy
        dialect, in which errors come with a 4xx/5xx status. ``None`` omits it.
    """

    def __init__(
        self,
        config: RpcConfig,
        transport: Transport | None = None,
        *,
        jsonrpc: str | None = "1.0",
    ) -> None:
        self.config = config
        self.jsonrpc = jsonrpc
        self._owns_transport = transport is None
        self._transport = transport if transport is not None else HttpxTransport(config)

    # -- Lifecycle -----------------------------------------------------

    def close(self) -> None:
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> "RpcInvoker":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -- Calls -----------------------------------------------------------

    def invoke(self, method: RpcMethod, *args: Any, **kwargs: Any) -> Any:
        return self.call(method.name, method.params(*args, **kwargs), method.result)

    def call(self, method: str, params: Sequence[Any] = (), shape: Any = Any) -> Any:
        """Call *method* and return its result decoded as *shape*."""
        return self.call_envelope(method, params, shape).result

    def call_envelope(self, method: str, params: Sequence[Any] = (), shape: Any = Any) -> JsonRpcResponse:
        request = self._request(method, params)
        try:
            payload = dumps(request).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise InvalidParameterError(f"cannot serialize parameters for {method}: {exc}") from exc

        log.debug("rpc → %s(id=%s)", method, request.id)
        response = self._post(payload)
        log.debug("rpc ← %s status=%d", method, response.status)

        if not 200 <= response.status < 300:
            raise_for_response(response.status, response.body, response.headers)
        return self._decode(response, shape)

    # -- Internals -------------------------------------------------------

    def _request(self, method: str, params: Sequence[Any]) -> JsonRpcRequest:
        if not isinstance(method, str) or not method:
            raise InvalidParameterError("method name must be a non-empty string")
        if isinstance(params, (str, bytes)) or not isinstance(params, Sequence):
            raise InvalidParameterError("params must be a positional sequence")
        try:
            normalized = [normalize_amounts(value) for value in params]
        except ValueError as exc:
            raise InvalidParameterError(f"invalid amount in parameters for {method}: {exc}") from exc
        return JsonRpcRequest(jsonrpc=self.jsonrpc, id=uuid.uuid4().hex, method=method, params=normalized)

    def _post(self, payload: bytes) -> HttpResponse:
        try:
            return self._transport.post(self.config.url, payload, CONTENT_TYPE)
        except BitcoindError:
            raise
        except (httpx.RequestError, httpx.InvalidURL, OSError) as exc:
            raise TransportError(f"No response from {self.config.host}:{self.config.port}: {exc}") from exc

    def _decode(self, response: HttpResponse, shape: Any) -> JsonRpcResponse:
        text = response_text(response.body, response.headers)
        try:
            envelope = JsonRpcResponse.from_wire(loads(response.body), result=shape)
        except ValueError as exc:
            raise ResponseDecodeError(
                f"Cannot decode response: {exc}", status=response.status, body=text
            ) from exc

        if envelope.error is not None:
            # JSON-RPC 2.0 dialect: errors arrive with HTTP 200.
            if envelope.error.code is None:
                raise ResponseDecodeError("Error object without a code", status=response.status, body=text)
            raise error_for(
                response.status,
                envelope.error,
                text,
                legacy_status=http_status_for(envelope.error.code),
            )
        if not envelope.has_result:
            raise ResponseDecodeError("Response carries neither result nor error", status=response.status, body=text)
        return envelope
