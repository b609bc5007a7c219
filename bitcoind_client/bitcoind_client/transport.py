"""HTTP transport seam.

The invoker only needs "POST these bytes, give me status/body/headers";
everything else (pooling, TLS, proxies) belongs to the transport. The
default implementation wraps ``httpx.Client`` with basic auth. Tests inject
``httpx.Client(transport=httpx.MockTransport(...))`` or Starlette's
``TestClient``, both of which are ``httpx.Client`` subclasses.

Contract: return an ``HttpResponse`` for *any* HTTP status, or raise
``httpx.TransportError`` / ``OSError`` when no response was obtained.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from bitcoind_client.config import RpcConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)


class Transport(Protocol):
    def post(self, url: str, body: bytes, content_type: str) -> HttpResponse: ...

    def close(self) -> None: ...


class HttpxTransport:
    """Synchronous ``httpx`` transport with basic-auth credentials.

    Parameters
    ----------
    config : RpcConfig
        Supplies credentials and the request timeout.
    client : httpx.Client, optional
        Pre-built client to use instead of creating one. A supplied client
        is not closed by ``close()``; its owner closes it.
    """

    def __init__(self, config: RpcConfig, client: httpx.Client | None = None) -> None:
        self._auth = httpx.BasicAuth(config.user, config.password or "") if config.user is not None else None
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=httpx.Timeout(config.timeout))

    # -- Lifecycle -----------------------------------------------------

    def close(self) -> None:
        if self._owns_client and not self._client.is_closed:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -- POST ------------------------------------------------------------

    def post(self, url: str, body: bytes, content_type: str) -> HttpResponse:
        kwargs: dict[str, Any] = {"content": body, "headers": {"Content-Type": content_type}}
        if self._auth is not None:
            kwargs["auth"] = self._auth
        resp = self._client.post(url, **kwargs)
        return HttpResponse(status=resp.status_code, body=resp.content, headers=dict(resp.headers))
