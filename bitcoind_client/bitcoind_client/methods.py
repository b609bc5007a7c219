"""Typed wrappers around the daemon's RPC methods.

Each method's positional contract lives in one ``RpcMethod`` constant;
``BitcoindClient`` only forwards arguments to ``RpcInvoker.invoke``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Any

from wire.amounts import Amount, to_amount, to_amount_map

from bitcoind_client.invoker import RpcInvoker
from bitcoind_client.params import RpcMethod, optional, required
from bitcoind_client.results import (
    AddNodeAction,
    AddressGrouping,
    GetInfoResult,
    GetMiningInfoResult,
    GetRawTransactionResult,
    GetTransactionResult,
    GetTxOutResult,
    PeerInfo,
    TemplateRequest,
    TransactionData,
    TransactionOutputRef,
    UnspentOutput,
    ValidateAddressResult,
)

log = logging.getLogger(__name__)


def _output_refs(refs: Iterable[Any]) -> list[TransactionOutputRef]:
    out = []
    for ref in refs:
        if isinstance(ref, TransactionOutputRef):
            out.append(ref)
        else:
            txid, vout = ref
            out.append(TransactionOutputRef(txid=txid, vout=vout))
    return out


def _string_list(values: Iterable[str]) -> list[str]:
    if isinstance(values, str):
        raise ValueError("expected a list of strings, got a single string")
    return list(values)


# ── Method contracts ─────────────────────────────────────────────────

ADD_MULTISIG_ADDRESS = RpcMethod(
    "addmultisigaddress",
    required("nrequired", int),
    required("keys", _string_list),
    optional("account"),
    result=str,
)
ADD_NODE = RpcMethod("addnode", required("node"), required("command", AddNodeAction), result=Any)
BACKUP_WALLET = RpcMethod("backupwallet", required("destination"), result=Any)
CREATE_RAW_TRANSACTION = RpcMethod(
    "createrawtransaction",
    required("inputs", _output_refs),
    required("outputs", to_amount_map),
    result=str,
)
DECODE_RAW_TRANSACTION = RpcMethod("decoderawtransaction", required("hex"), result=GetRawTransactionResult)
DUMP_PRIVKEY = RpcMethod("dumpprivkey", required("address"), result=str)
ENCRYPT_WALLET = RpcMethod("encryptwallet", required("passphrase"), result=str)
GET_ACCOUNT = RpcMethod("getaccount", required("address"), result=str)
GET_BALANCE = RpcMethod("getbalance", optional("account", "*"), optional("minconf", 1, int), result=Amount)
GET_BLOCK_COUNT = RpcMethod("getblockcount", result=int)
GET_BLOCK_HASH = RpcMethod("getblockhash", required("index", int), result=str)
GET_BLOCK_TEMPLATE = RpcMethod("getblocktemplate", optional("request"), result=dict[str, Any])
GET_INFO = RpcMethod("getinfo", result=GetInfoResult)
GET_MINING_INFO = RpcMethod("getmininginfo", result=GetMiningInfoResult)
GET_PEER_INFO = RpcMethod("getpeerinfo", result=list[PeerInfo])
GET_RAW_MEMPOOL = RpcMethod("getrawmempool", result=list[str])
GET_RAW_TRANSACTION = RpcMethod("getrawtransaction", required("txid"), result=str)
# verbose=1 must be sent explicitly to get the decoded form.
GET_RAW_TRANSACTION_VERBOSE = RpcMethod(
    "getrawtransaction",
    required("txid"),
    optional("verbose", 1, always=True),
    result=GetRawTransactionResult,
)
GET_TRANSACTION = RpcMethod("gettransaction", required("txid"), result=GetTransactionResult)
GET_TX_OUT = RpcMethod(
    "gettxout",
    required("txid"),
    required("n", int),
    optional("includemempool", True, bool),
    result=GetTxOutResult | None,
)
HELP = RpcMethod("help", optional("command"), result=str)
LIST_ADDRESS_GROUPINGS = RpcMethod("listaddressgroupings", result=list[AddressGrouping])
LIST_TRANSACTIONS = RpcMethod(
    "listtransactions",
    optional("account", "*"),
    optional("count", 10, int),
    optional("skip", 0, int),
    result=list[TransactionData],
)
# bitcoind 0.7 requires all three parameters once addresses are filtered.
LIST_UNSPENT = RpcMethod(
    "listunspent",
    optional("minconf", 1, int, always=True),
    optional("maxconf", 999999, int, always=True),
    optional("addresses", [], _string_list, always=True),
    result=list[UnspentOutput],
)
SEND_MANY = RpcMethod(
    "sendmany",
    required("fromaccount"),
    required("amounts", to_amount_map),
    optional("minconf", 1, int),
    optional("comment"),
    result=str,
)
SEND_TO_ADDRESS = RpcMethod(
    "sendtoaddress",
    required("address"),
    required("amount", to_amount),
    optional("comment", ""),
    optional("comment_to"),
    result=str,
)
SET_TX_FEE = RpcMethod("settxfee", required("amount", to_amount), result=bool)
STOP = RpcMethod("stop", result=str)
VALIDATE_ADDRESS = RpcMethod("validateaddress", required("address"), result=ValidateAddressResult)
WALLET_LOCK = RpcMethod("walletlock", result=Any)
WALLET_PASSPHRASE = RpcMethod("walletpassphrase", required("passphrase"), required("timeout", int), result=Any)
WALLET_PASSPHRASE_CHANGE = RpcMethod(
    "walletpassphrasechange",
    required("oldpassphrase"),
    required("newpassphrase"),
    result=Any,
)


class BitcoindClient(RpcInvoker):
    """One typed method per daemon call.

    Optional arguments default to ``None``, meaning "not supplied"; they
    are then left out of the request, or filled with the daemon's own
    default when a later argument is given.
    """

    # -- Wallet ----------------------------------------------------------

    def add_multisig_address(self, nrequired: int, keys: Sequence[str], account: str | None = None) -> str:
        return self.invoke(ADD_MULTISIG_ADDRESS, nrequired, keys, account)

    def backup_wallet(self, destination: str) -> None:
        self.invoke(BACKUP_WALLET, destination)

    def dump_privkey(self, address: str) -> str:
        return self.invoke(DUMP_PRIVKEY, address)

    def encrypt_wallet(self, passphrase: str) -> str:
        return self.invoke(ENCRYPT_WALLET, passphrase)

    def get_account(self, address: str) -> str:
        return self.invoke(GET_ACCOUNT, address)

    def get_balance(self, account: str | None = None, minconf: int | None = None) -> Decimal:
        return self.invoke(GET_BALANCE, account, minconf)

    def get_transaction(self, txid: str) -> GetTransactionResult:
        return self.invoke(GET_TRANSACTION, txid)

    def list_address_groupings(self) -> list[AddressGrouping]:
        return self.invoke(LIST_ADDRESS_GROUPINGS)

    def list_transactions(
        self, account: str | None = None, count: int | None = None, skip: int | None = None
    ) -> list[TransactionData]:
        return self.invoke(LIST_TRANSACTIONS, account, count, skip)

    def list_unspent(
        self, minconf: int | None = None, maxconf: int | None = None, addresses: Sequence[str] | None = None
    ) -> list[UnspentOutput]:
        return self.invoke(LIST_UNSPENT, minconf, maxconf, addresses)

    def send_many(
        self,
        from_account: str,
        amounts: Mapping[str, Any] | Iterable[tuple[str, Any]],
        minconf: int | None = None,
        comment: str | None = None,
    ) -> str:
        return self.invoke(SEND_MANY, from_account, amounts, minconf, comment)

    def send_to_address(
        self, address: str, amount: Any, comment: str | None = None, comment_to: str | None = None
    ) -> str:
        """Send *amount* (rounded to 8 decimals) and return the txid."""
        return self.invoke(SEND_TO_ADDRESS, address, amount, comment, comment_to)

    def set_tx_fee(self, amount: Any) -> bool:
        return self.invoke(SET_TX_FEE, amount)

    def validate_address(self, address: str) -> ValidateAddressResult:
        return self.invoke(VALIDATE_ADDRESS, address)

    def wallet_lock(self) -> None:
        self.invoke(WALLET_LOCK)

    def wallet_passphrase(self, passphrase: str, timeout: int) -> None:
        """Unlock the wallet for *timeout* seconds."""
        self.invoke(WALLET_PASSPHRASE, passphrase, timeout)

    def wallet_passphrase_change(self, old_passphrase: str, new_passphrase: str) -> None:
        self.invoke(WALLET_PASSPHRASE_CHANGE, old_passphrase, new_passphrase)

    # -- Raw transactions --------------------------------------------------

    def create_raw_transaction(
        self,
        inputs: Iterable[TransactionOutputRef | tuple[str, int]],
        outputs: Mapping[str, Any] | Iterable[tuple[str, Any]],
    ) -> str:
        """Build an unsigned transaction; repeated output addresses are summed."""
        return self.invoke(CREATE_RAW_TRANSACTION, inputs, outputs)

    def decode_raw_transaction(self, hex_string: str) -> GetRawTransactionResult:
        return self.invoke(DECODE_RAW_TRANSACTION, hex_string)

    def get_raw_transaction(self, txid: str) -> str:
        return self.invoke(GET_RAW_TRANSACTION, txid)

    def get_raw_transaction_verbose(self, txid: str) -> GetRawTransactionResult:
        return self.invoke(GET_RAW_TRANSACTION_VERBOSE, txid)

    def get_tx_out(self, txid: str, n: int, include_mempool: bool | None = None) -> GetTxOutResult | None:
        """``None`` when the output is spent or unknown."""
        return self.invoke(GET_TX_OUT, txid, n, include_mempool)

    # -- Node --------------------------------------------------------------

    def add_node(self, node: str, command: AddNodeAction | str) -> None:
        self.invoke(ADD_NODE, node, command)

    def get_block_count(self) -> int:
        return self.invoke(GET_BLOCK_COUNT)

    def get_block_hash(self, index: int) -> str:
        return self.invoke(GET_BLOCK_HASH, index)

    def get_block_template(self, request: TemplateRequest | None = None) -> dict[str, Any]:
        return self.invoke(GET_BLOCK_TEMPLATE, request)

    def get_info(self) -> GetInfoResult:
        return self.invoke(GET_INFO)

    def get_mining_info(self) -> GetMiningInfoResult:
        return self.invoke(GET_MINING_INFO)

    def get_peer_info(self) -> list[PeerInfo]:
        return self.invoke(GET_PEER_INFO)

    def get_raw_mempool(self) -> list[str]:
        return self.invoke(GET_RAW_MEMPOOL)

    def help(self, command: str | None = None) -> str:
        return self.invoke(HELP, command)

    def stop(self) -> str:
        log.info("requesting daemon shutdown at %s:%s", self.config.host, self.config.port)
        return self.invoke(STOP)
