"""Stub daemon — Starlette ASGI app that answers like bitcoind.

Single ``/`` POST endpoint speaking bitcoind's legacy JSON-RPC dialect:
HTTP basic auth, positional params, and error envelopes sent with the
HTTP status bitcoind uses for the error code.

Run directly::

    python -m stub_daemon.server
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route
from wire.codec import dumps, loads
from wire.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    PARSE_ERROR,
    JsonRpcRequest,
    JsonRpcResponse,
    http_status_for,
)

from stub_daemon.dispatcher import RpcFault
from stub_daemon.handlers import StubWallet, registry

log = logging.getLogger(__name__)

MEDIA_TYPE = "application/json"


# ── Helpers ──────────────────────────────────────────────────────────


def _json_response(payload: JsonRpcResponse, status: int = 200) -> Response:
    return Response(dumps(payload.to_wire()), status_code=status, media_type=MEDIA_TYPE)


def _error_response(req_id: Any, code: int, msg: str) -> Response:
    """Build a JSON-RPC error response with bitcoind's status for *code*."""
    return _json_response(JsonRpcResponse.fail(req_id, code, msg), http_status_for(code))


def _unauthorized() -> Response:
    return Response(b"", status_code=401, headers={"WWW-Authenticate": 'Basic realm="jsonrpc"'})


def _authorized(request: Request) -> bool:
    credentials = request.app.state.credentials
    if credentials is None:
        return True
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "basic":
        return False
    try:
        decoded = base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return False
    user, _, password = decoded.partition(":")
    return (user, password) == credentials


# ── RPC endpoint ─────────────────────────────────────────────────────


async def rpc_endpoint(request: Request) -> Response:
    """Handle a JSON-RPC POST to ``/``."""
    if not _authorized(request):
        log.warning("rejected unauthenticated request from %s", request.client.host if request.client else "?")
        return _unauthorized()

    try:
        raw = loads(await request.body())
    except ValueError:
        return _error_response(None, PARSE_ERROR, "Parse error")

    try:
        rpc_req = JsonRpcRequest.from_dict(raw)
    except ValueError as exc:
        return _error_response(raw.get("id") if isinstance(raw, dict) else None, INVALID_REQUEST, str(exc))

    req_id = rpc_req.id
    log.info("rpc ← %s(id=%s)", rpc_req.method, req_id)

    try:
        result = await registry.dispatch(rpc_req.method, rpc_req.params, request.app.state.wallet)
    except RpcFault as exc:
        return _error_response(req_id, exc.code, exc.message)
    except Exception as exc:
        log.exception("handler error for %s", rpc_req.method)
        return _error_response(req_id, INTERNAL_ERROR, f"Internal error: {exc}")
    return _json_response(JsonRpcResponse.success(req_id, result))


# ── App factory ──────────────────────────────────────────────────────


def create_app(user: str | None = None, password: str | None = None, wallet: StubWallet | None = None) -> Starlette:
    """Build a stub daemon; credentials are enforced only when *user* is given."""
    app = Starlette(
        debug=False,
        routes=[
            Route("/", rpc_endpoint, methods=["POST"]),
            Route("/wallet/{name}", rpc_endpoint, methods=["POST"]),
        ],
    )
    app.state.credentials = (user, password or "") if user is not None else None
    app.state.wallet = wallet if wallet is not None else StubWallet()
    return app


load_dotenv(os.path.join(Path.cwd(), ".env"))

app = create_app(os.getenv("BITCOIND_USER"), os.getenv("BITCOIND_PASSWORD"))


# ── Runnable entrypoint ──────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "stub_daemon.server:app",
        host="127.0.0.1",
        port=int(os.getenv("BITCOIND_PORT", "18332")),
        log_level="info",
    )
