"""Typed results and request objects for bitcoind calls.

Field order is the order the daemon writes; a field the daemon only
sometimes sends is simply omitted on encode when it was absent. Members
not declared here survive in ``other_fields``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from wire.amounts import Amount
from wire.model import WireModel, json_field


class AddNodeAction(enum.Enum):
    """What ``addnode`` should do with the given node."""

    ADD = "add"
    REMOVE = "remove"
    ONE_TRY = "onetry"


# ── Request objects ──────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class TransactionOutputRef(WireModel):
    """Points at one output of an earlier transaction (an input to spend)."""

    txid: str | None = None
    vout: int | None = None


@dataclass(frozen=True, slots=True)
class TemplateRequest(WireModel):
    """Argument of ``getblocktemplate`` (BIP 22). ``mode`` is omitted when unset."""

    capabilities: list[str] = field(default_factory=list)
    mode: str | None = None


# ── Node / network ───────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class GetInfoResult(WireModel):
    version: int | None = None
    protocol_version: int | None = json_field("protocolversion")
    wallet_version: int | None = json_field("walletversion")
    balance: Amount | None = None
    blocks: int | None = None
    time_offset: int | None = json_field("timeoffset")
    connections: int | None = None
    proxy: str | None = None
    difficulty: Decimal | None = None
    testnet: bool | None = None
    key_pool_oldest: datetime | None = json_field("keypoololdest")
    key_pool_size: int | None = json_field("keypoolsize")
    pay_tx_fee: Amount | None = json_field("paytxfee")
    unlocked_until: datetime | None = None
    errors: str | None = None


@dataclass(frozen=True, slots=True)
class GetMiningInfoResult(WireModel):
    blocks: int | None = None
    current_block_size: int | None = json_field("currentblocksize")
    current_block_tx: int | None = json_field("currentblocktx")
    difficulty: Decimal | None = None
    errors: str | None = None
    generate: bool | None = None
    gen_proc_limit: int | None = json_field("genproclimit")
    hashes_per_sec: int | None = json_field("hashespersec")
    pooled_tx: int | None = json_field("pooledtx")
    testnet: bool | None = None


@dataclass(frozen=True, slots=True)
class PeerInfo(WireModel):
    address: str | None = json_field("addr")
    services: str | None = None
    last_send: datetime | None = json_field("lastsend")
    last_recv: datetime | None = json_field("lastrecv")
    conn_time: datetime | None = json_field("conntime")
    version: int | None = None
    sub_version: str | None = json_field("subver")
    inbound: bool | None = None
    release_time: datetime | None = json_field("releasetime")
    starting_height: int | None = json_field("startingheight")
    ban_score: int | None = json_field("banscore")


# ── Wallet ───────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ValidateAddressResult(WireModel):
    valid: bool | None = json_field("isvalid")
    address: str | None = None
    mine: bool | None = json_field("ismine")
    script: bool | None = json_field("isscript")
    pub_key: str | None = json_field("pubkey")
    compressed: bool | None = json_field("iscompressed")
    account: str | None = None


@dataclass(frozen=True, slots=True)
class TransactionDetail(WireModel):
    account: str | None = None
    address: str | None = None
    category: str | None = None
    amount: Amount | None = None
    fee: Amount | None = None


@dataclass(frozen=True, slots=True)
class GetTransactionResult(WireModel):
    amount: Amount | None = None
    fee: Amount | None = None
    confirmations: int | None = None
    generated: bool | None = None
    block_hash: str | None = json_field("blockhash")
    block_index: int | None = json_field("blockindex")
    block_time: datetime | None = json_field("blocktime")
    txid: str | None = None
    time: datetime | None = None
    time_received: datetime | None = json_field("timereceived")
    comment: str | None = None
    to: str | None = None
    details: list[TransactionDetail] | None = None
    hex: str | None = None


@dataclass(frozen=True, slots=True)
class TransactionData(WireModel):
    """One entry of ``listtransactions`` / ``listsinceblock``."""

    account: str | None = None
    address: str | None = None
    category: str | None = None
    amount: Amount | None = None
    fee: Amount | None = None
    confirmations: int | None = None
    generated: bool | None = None
    block_hash: str | None = json_field("blockhash")
    block_index: int | None = json_field("blockindex")
    block_time: datetime | None = json_field("blocktime")
    txid: str | None = None
    time: datetime | None = None
    time_received: datetime | None = json_field("timereceived")
    comment: str | None = None
    to: str | None = None


@dataclass(frozen=True, slots=True)
class UnspentOutput(WireModel):
    """One entry of ``listunspent``."""

    txid: str | None = None
    vout: int | None = None
    address: str | None = None
    account: str | None = None
    script_pub_key: str | None = json_field("scriptPubKey")
    redeem_script: str | None = json_field("redeemScript")
    amount: Amount | None = None
    confirmations: int | None = None


@dataclass(frozen=True, slots=True)
class AddressBalance:
    """One ``[address, amount, account?]`` triple of ``listaddressgroupings``."""

    address: str
    amount: Decimal
    account: str | None = None


class AddressBalanceFormat:
    """Decodes the positional triple into ``AddressBalance`` and back."""

    def decode(self, raw: Any) -> AddressBalance:
        if not isinstance(raw, list) or len(raw) not in (2, 3):
            raise ValueError("expected [address, amount] or [address, amount, account]")
        address, amount = raw[0], raw[1]
        account = raw[2] if len(raw) == 3 else None
        if not isinstance(address, str):
            raise ValueError("address must be a string")
        if isinstance(amount, bool) or not isinstance(amount, (int, Decimal)):
            raise ValueError("amount must be a number")
        if account is not None and not isinstance(account, str):
            raise ValueError("account must be a string")
        return AddressBalance(address, Decimal(amount), account)

    def encode(self, value: AddressBalance) -> list[Any]:
        triple: list[Any] = [value.address, value.amount]
        if value.account is not None:
            triple.append(value.account)
        return triple


AddressGrouping = list[Annotated[AddressBalance, AddressBalanceFormat()]]


# ── Raw transactions ─────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ScriptSig(WireModel):
    asm: str | None = None
    hex: str | None = None


@dataclass(frozen=True, slots=True)
class ScriptPubKey(WireModel):
    asm: str | None = None
    hex: str | None = None
    req_sigs: int | None = json_field("reqSigs")
    type: str | None = None
    addresses: list[str] | None = None


@dataclass(frozen=True, slots=True)
class TransactionInput(WireModel):
    txid: str | None = None
    vout: int | None = None
    coinbase: str | None = None
    script_sig: ScriptSig | None = json_field("scriptSig")
    sequence: int | None = None


@dataclass(frozen=True, slots=True)
class TransactionOutput(WireModel):
    value: Amount | None = None
    n: int | None = None
    script_pub_key: ScriptPubKey | None = json_field("scriptPubKey")


@dataclass(frozen=True, slots=True)
class GetRawTransactionResult(WireModel):
    """Verbose ``getrawtransaction`` / ``decoderawtransaction`` result."""

    hex: str | None = None
    txid: str | None = None
    version: int | None = None
    lock_time: int | None = json_field("locktime")
    inputs: list[TransactionInput] | None = json_field("vin")
    outputs: list[TransactionOutput] | None = json_field("vout")
    block_hash: str | None = json_field("blockhash")
    confirmations: int | None = None
    time: datetime | None = None
    block_time: datetime | None = json_field("blocktime")


@dataclass(frozen=True, slots=True)
class GetTxOutResult(WireModel):
    best_block: str | None = json_field("bestblock")
    confirmations: int | None = None
    value: Amount | None = None
    script_pub_key: ScriptPubKey | None = json_field("scriptPubKey")
    version: int | None = None
    coinbase: bool | None = None
