"""Command-line RPC caller, in the spirit of ``bitcoin-cli``.

    python -m bitcoind_client.cli --user rpc --password secret getbalance "*" 6

Each parameter is parsed as JSON when it is valid JSON and passed as a
string otherwise. The result is printed as canonical JSON.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from wire.codec import dumps, loads

from bitcoind_client.config import RpcConfig
from bitcoind_client.errors import BitcoindError
from bitcoind_client.invoker import RpcInvoker

log = logging.getLogger(__name__)


def parse_param(raw: str) -> Any:
    """``"6"`` -> ``6``, ``"0.1"`` -> ``Decimal("0.1")``, ``"abc"`` -> ``"abc"``."""
    try:
        return loads(raw)
    except ValueError:
        return raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bitcoind-rpc", description="Call a bitcoind JSON-RPC method")
    parser.add_argument("--env-file", type=str, default=None, help="dotenv file with BITCOIND_* settings")
    parser.add_argument("--host", type=str, default=None, help="Daemon host")
    parser.add_argument("--port", type=int, default=None, help="Daemon RPC port")
    parser.add_argument("--user", type=str, default=None, help="RPC user name")
    parser.add_argument("--password", type=str, default=None, help="RPC password")
    parser.add_argument("--wallet", type=str, default=None, help="Wallet name (multi-wallet daemons)")
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.getenv("LOG_LEVEL", "WARNING"),
        help="Logging level",
    )
    parser.add_argument("method", help="RPC method name")
    parser.add_argument("params", nargs="*", help="Positional parameters (JSON or plain strings)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = RpcConfig.from_env(args.env_file).with_overrides(
            host=args.host,
            port=args.port,
            user=args.user,
            password=args.password,
            wallet=args.wallet,
        )
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    params = [parse_param(raw) for raw in args.params]
    log.info("calling %s with %d parameter(s) at %s", args.method, len(params), config.url)
    try:
        with RpcInvoker(config) as invoker:
            result = invoker.call(args.method, params)
    except BitcoindError as exc:
        print(f"error code={exc.code} status={exc.status}: {exc.message}", file=sys.stderr)
        return 1

    print(dumps(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
