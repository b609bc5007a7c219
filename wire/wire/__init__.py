"""wire — bitcoind JSON-RPC wire-format models, codec and amounts."""

from wire.amounts import SCALE, Amount, AmountText, format_amount, to_amount, to_amount_map
from wire.codec import dumps, loads
from wire.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_ADDRESS_OR_KEY,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    WALLET_WRONG_ENC_STATE,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    http_status_for,
)
from wire.model import WireModel, decode, encode, json_field, unmapped_fields
from wire.shapes import ShapeError, decode_value, encode_value

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "INVALID_ADDRESS_OR_KEY",
    "WALLET_WRONG_ENC_STATE",
    "http_status_for",
    "WireModel",
    "json_field",
    "decode",
    "encode",
    "unmapped_fields",
    "ShapeError",
    "decode_value",
    "encode_value",
    "dumps",
    "loads",
    "SCALE",
    "Amount",
    "AmountText",
    "to_amount",
    "to_amount_map",
    "format_amount",
]
