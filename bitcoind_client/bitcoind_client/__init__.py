"""bitcoind_client — typed JSON-RPC client for bitcoind."""

from bitcoind_client.config import RpcConfig
from bitcoind_client.errors import (
    BitcoindError,
    ClientError,
    ErrorKind,
    InvalidAddressError,
    InvalidParameterError,
    MethodNotFoundError,
    ProtocolError,
    RemoteError,
    ResponseDecodeError,
    ServerError,
    TransportError,
    WalletStateError,
    classify,
    raise_for_response,
)
from bitcoind_client.invoker import RpcInvoker
from bitcoind_client.methods import BitcoindClient
from bitcoind_client.params import RpcMethod, Slot, build_params, optional, required
from bitcoind_client.results import AddNodeAction, TemplateRequest, TransactionOutputRef
from bitcoind_client.transport import HttpResponse, HttpxTransport, Transport

__all__ = [
    "BitcoindClient",
    "RpcInvoker",
    "RpcConfig",
    "RpcMethod",
    "Slot",
    "required",
    "optional",
    "build_params",
    "Transport",
    "HttpxTransport",
    "HttpResponse",
    "AddNodeAction",
    "TemplateRequest",
    "TransactionOutputRef",
    "ErrorKind",
    "classify",
    "raise_for_response",
    "BitcoindError",
    "InvalidParameterError",
    "TransportError",
    "ProtocolError",
    "ResponseDecodeError",
    "RemoteError",
    "ServerError",
    "InvalidAddressError",
    "WalletStateError",
    "ClientError",
    "MethodNotFoundError",
]
