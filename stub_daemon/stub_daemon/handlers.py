"""In-memory wallet handlers.

A small subset of bitcoind's wallet and chain calls, with the daemon's
error codes and messages, registered on the module-level ``registry``
which the server imports. State lives in a ``StubWallet`` owned by the
application, so every ``create_app()`` starts from a fresh wallet.
"""

from __future__ import annotations

import hashlib
import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from wire.amounts import to_amount
from wire.jsonrpc import (
    INVALID_ADDRESS_OR_KEY,
    MISC_ERROR,
    TYPE_ERROR,
    WALLET_ALREADY_UNLOCKED,
    WALLET_INSUFFICIENT_FUNDS,
    WALLET_PASSPHRASE_INCORRECT,
    WALLET_UNLOCK_NEEDED,
    WALLET_WRONG_ENC_STATE,
)

from stub_daemon.dispatcher import Registry, RpcFault

log = logging.getLogger(__name__)

registry = Registry()

# Base58, testnet (m/n/2) and mainnet (1/3) prefixes.
_ADDRESS = re.compile(r"^[123mn][1-9A-HJ-NP-Za-km-z]{25,34}$")

DEFAULT_ADDRESS = "mj3QxNUyp4Ry2pbbP19tznUAAPqFvDbRFq"


@dataclass
class StubWallet:
    """Mutable daemon state behind one stub application."""

    balance: Decimal = Decimal("10.00000000")
    blocks: int = 227000
    addresses: dict[str, str] = field(default_factory=lambda: {DEFAULT_ADDRESS: ""})
    passphrase: str | None = None
    unlocked_until: int = 0
    transactions: dict[str, dict[str, Any]] = field(default_factory=dict)
    unspent: list[dict[str, Any]] = field(default_factory=list)

    @property
    def encrypted(self) -> bool:
        return self.passphrase is not None

    @property
    def locked(self) -> bool:
        return self.encrypted and self.unlocked_until <= time.time()


def _check_address(address: Any) -> str:
    if not isinstance(address, str) or not _ADDRESS.match(address):
        raise RpcFault(INVALID_ADDRESS_OR_KEY, "Invalid Bitcoin address")
    return address


def _check_amount(value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
        raise RpcFault(TYPE_ERROR, "Amount is not a number")
    amount = to_amount(value)
    if amount <= 0:
        raise RpcFault(TYPE_ERROR, "Invalid amount")
    return amount


def _require_encrypted(wallet: StubWallet, method: str) -> None:
    if not wallet.encrypted:
        raise RpcFault(
            WALLET_WRONG_ENC_STATE,
            f"Error: running with an unencrypted wallet, but {method} was called.",
        )


# ── Chain ────────────────────────────────────────────────────────────


@registry.handler("getblockcount")
async def getblockcount(wallet: StubWallet) -> int:
    return wallet.blocks


@registry.handler("getinfo")
async def getinfo(wallet: StubWallet) -> dict[str, Any]:
    info: dict[str, Any] = {
        "version": 80500,
        "protocolversion": 70001,
        "walletversion": 60000,
        "balance": to_amount(wallet.balance),
        "blocks": wallet.blocks,
        "timeoffset": 0,
        "connections": 0,
        "proxy": "",
        "difficulty": Decimal("1.00000000"),
        "testnet": True,
        "keypoololdest": 1364415420,
        "keypoolsize": 101,
        "paytxfee": to_amount(0),
    }
    if wallet.encrypted:
        info["unlocked_until"] = 0 if wallet.locked else wallet.unlocked_until
    info["errors"] = ""
    return info


@registry.handler("help")
async def help_(wallet: StubWallet, command: str = "") -> str:
    if not command:
        return "\n".join(registry.usage(method) for method in sorted(registry.methods))
    if not registry.is_registered(command):
        return f"help: unknown command: {command}"
    return registry.usage(command)


# ── Wallet ───────────────────────────────────────────────────────────


@registry.handler("getbalance")
async def getbalance(wallet: StubWallet, account: str = "*", minconf: int = 1) -> Decimal:
    return to_amount(wallet.balance)


@registry.handler("validateaddress")
async def validateaddress(wallet: StubWallet, address: str) -> dict[str, Any]:
    if not isinstance(address, str) or not _ADDRESS.match(address):
        return {"isvalid": False}
    result: dict[str, Any] = {"isvalid": True, "address": address, "ismine": address in wallet.addresses}
    if address in wallet.addresses:
        result["isscript"] = False
        result["account"] = wallet.addresses[address]
    return result


@registry.handler("sendtoaddress")
async def sendtoaddress(
    wallet: StubWallet, address: str, amount: Any, comment: str = "", comment_to: str = ""
) -> str:
    _check_address(address)
    value = _check_amount(amount)
    if wallet.locked:
        raise RpcFault(
            WALLET_UNLOCK_NEEDED,
            "Error: Please enter the wallet passphrase with walletpassphrase first.",
        )
    if value > wallet.balance:
        raise RpcFault(WALLET_INSUFFICIENT_FUNDS, "Insufficient funds")

    txid = hashlib.sha256(uuid.uuid4().bytes).hexdigest()
    now = int(time.time())
    wallet.balance -= value
    transaction: dict[str, Any] = {
        "amount": -value,
        "fee": to_amount(0),
        "confirmations": 0,
        "txid": txid,
        "time": now,
        "timereceived": now,
    }
    if comment:
        transaction["comment"] = comment
    if comment_to:
        transaction["to"] = comment_to
    transaction["details"] = [
        {"account": "", "address": address, "category": "send", "amount": -value, "fee": to_amount(0)}
    ]
    wallet.transactions[txid] = transaction
    log.info("sent %s to %s (txid=%s)", value, address, txid)
    return txid


@registry.handler("gettransaction")
async def gettransaction(wallet: StubWallet, txid: str) -> dict[str, Any]:
    transaction = wallet.transactions.get(txid)
    if transaction is None:
        raise RpcFault(INVALID_ADDRESS_OR_KEY, "Invalid or non-wallet transaction id")
    return transaction


@registry.handler("listunspent")
async def listunspent(
    wallet: StubWallet, minconf: int = 1, maxconf: int = 999999, addresses: list[str] | None = None
) -> list[dict[str, Any]]:
    for address in addresses or []:
        _check_address(address)
    return [
        output
        for output in wallet.unspent
        if minconf <= output["confirmations"] <= maxconf
        and (not addresses or output["address"] in addresses)
    ]


# ── Encryption ───────────────────────────────────────────────────────


@registry.handler("encryptwallet")
async def encryptwallet(wallet: StubWallet, passphrase: str) -> str:
    if wallet.encrypted:
        raise RpcFault(
            WALLET_WRONG_ENC_STATE,
            "Error: running with an encrypted wallet, but encryptwallet was called.",
        )
    if not passphrase:
        raise RpcFault(MISC_ERROR, "encryptwallet <passphrase>")
    wallet.passphrase = passphrase
    wallet.unlocked_until = 0
    return "wallet encrypted; Bitcoin server stopping, restart to run with encrypted wallet"


@registry.handler("walletpassphrase")
async def walletpassphrase(wallet: StubWallet, passphrase: str, timeout: int) -> None:
    _require_encrypted(wallet, "walletpassphrase")
    if passphrase != wallet.passphrase:
        raise RpcFault(WALLET_PASSPHRASE_INCORRECT, "Error: The wallet passphrase entered was incorrect.")
    if not wallet.locked:
        raise RpcFault(WALLET_ALREADY_UNLOCKED, "Error: Wallet is already unlocked.")
    wallet.unlocked_until = int(time.time()) + int(timeout)
    return None


@registry.handler("walletlock")
async def walletlock(wallet: StubWallet) -> None:
    _require_encrypted(wallet, "walletlock")
    wallet.unlocked_until = 0
    return None


@registry.handler("walletpassphrasechange")
async def walletpassphrasechange(wallet: StubWallet, oldpassphrase: str, newpassphrase: str) -> None:
    _require_encrypted(wallet, "walletpassphrasechange")
    if oldpassphrase != wallet.passphrase:
        raise RpcFault(WALLET_PASSPHRASE_INCORRECT, "Error: The wallet passphrase entered was incorrect.")
    wallet.passphrase = newpassphrase
    return None
