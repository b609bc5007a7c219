"""JSON-RPC wire-format models as spoken by bitcoind.

Pure data — no I/O, no business logic.  The client and the stub daemon
import these for serialisation only.

bitcoind speaks the positional dialect: ``params`` is always an array,
and the legacy ("1.0") dialect signals errors through the HTTP status as
well as the ``error`` member.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from wire.model import WireModel
from wire.shapes import ShapeError

# ── Standard error codes (JSON-RPC 2.0 §5.1) ────────────────────────
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# ── bitcoind application error codes ────────────────────────────────
MISC_ERROR = -1
TYPE_ERROR = -3
WALLET_ERROR = -4
INVALID_ADDRESS_OR_KEY = -5
WALLET_INSUFFICIENT_FUNDS = -6
INVALID_PARAMETER = -8
WALLET_UNLOCK_NEEDED = -13
WALLET_PASSPHRASE_INCORRECT = -14
WALLET_WRONG_ENC_STATE = -15
WALLET_ALREADY_UNLOCKED = -17


def http_status_for(code: int) -> int:
    """HTTP status the legacy bitcoind dialect sends alongside *code*."""
    if code == INVALID_REQUEST:
        return 400
    if code == METHOD_NOT_FOUND:
        return 404
    return 500


# ── Models ───────────────────────────────────────────────────────────
@dataclass(frozen=True, slots=True)
class JsonRpcError(WireModel):
    """JSON-RPC error object: ``{"code": int, "message": str}``."""

    code: int | None = None
    message: str | None = None


@dataclass(frozen=True, slots=True)
class JsonRpcRequest(WireModel):
    """Positional JSON-RPC request.

    ``jsonrpc`` and ``id`` are optional wire elements; they are emitted
    only when set.
    """

    jsonrpc: str | None = None
    id: Any = None
    method: str | None = None
    params: list[Any] = field(default_factory=list)

    # -- Convenience ---------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        return self.to_wire()

    @classmethod
    def from_dict(cls, raw: Any) -> "JsonRpcRequest":
        """Parse a raw dict into a request — raises ``ValueError`` on bad input."""
        if not isinstance(raw, dict):
            raise ValueError("request must be a JSON object")
        method = raw.get("method")
        if not isinstance(method, str) or not method:
            raise ValueError("missing or invalid 'method' field")
        params = raw.get("params", [])
        if params is not None and not isinstance(params, list):
            raise ValueError("'params' must be a JSON array")
        try:
            return cls.from_wire(raw)
        except ShapeError as exc:
            raise ValueError(str(exc)) from exc


@dataclass(frozen=True, slots=True)
class JsonRpcResponse(WireModel):
    """JSON-RPC response envelope ``{"result", "error", "id"}``.

    ``result`` is decoded with whatever shape the caller supplies to
    ``from_wire(raw, result=<shape>)``; undeclared members land in
    ``other_fields`` like any other model.
    """

    result: Any = None
    error: JsonRpcError | None = None
    id: Any = None

    @property
    def has_result(self) -> bool:
        return self.result is not None or "result" in self.wire_nulls

    # -- Factories -----------------------------------------------------
    @classmethod
    def success(cls, req_id: Any, result: Any) -> "JsonRpcResponse":
        return cls(result=result, id=req_id, wire_nulls=frozenset({"result", "error", "id"}))

    @classmethod
    def fail(cls, req_id: Any, code: int, message: str) -> "JsonRpcResponse":
        return cls(
            error=JsonRpcError(code=code, message=message),
            id=req_id,
            wire_nulls=frozenset({"result", "id"}),
        )
