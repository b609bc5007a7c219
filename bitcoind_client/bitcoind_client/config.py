"""Daemon connection settings.

Values come from the environment, optionally seeded from dotenv files.
Later sources win:

1. ``.env`` in the working directory
2. the file named by ``BITCOIND_CLIENT_ENV_FILE``
3. an explicit ``env_file`` argument

Recognised variables: ``BITCOIND_HOST``, ``BITCOIND_PORT``,
``BITCOIND_USER``, ``BITCOIND_PASSWORD``, ``BITCOIND_WALLET``,
``BITCOIND_USE_HTTPS`` and ``BITCOIND_TIMEOUT``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any
from urllib.parse import quote

from dotenv import load_dotenv

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 18332  # testnet; mainnet is 8332
DEFAULT_TIMEOUT = 30.0

ENV_FILE_VAR = "BITCOIND_CLIENT_ENV_FILE"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True, slots=True)
class RpcConfig:
    """Where the daemon listens and how to authenticate."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    user: str | None = None
    password: str | None = field(default=None, repr=False)
    wallet: str | None = None
    use_https: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("host must not be empty")
        if not 0 < self.port < 65536:
            raise ValueError(f"port out of range: {self.port}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive: {self.timeout}")

    @property
    def url(self) -> str:
        scheme = "https" if self.use_https else "http"
        path = f"/wallet/{quote(self.wallet, safe='')}" if self.wallet else "/"
        return f"{scheme}://{self.host}:{self.port}{path}"

    def with_overrides(self, **overrides: Any) -> "RpcConfig":
        """Copy with every non-``None`` override applied."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "RpcConfig":
        load_dotenv(Path.cwd() / ".env")
        chained = os.getenv(ENV_FILE_VAR)
        if chained:
            load_dotenv(Path(chained).expanduser(), override=True)
        if env_file is not None:
            path = Path(env_file).expanduser()
            if not path.exists():
                raise ValueError(f"env file {path} not found")
            load_dotenv(path, override=True)

        env = os.environ
        values: dict[str, Any] = {}
        if "BITCOIND_HOST" in env:
            values["host"] = env["BITCOIND_HOST"]
        if "BITCOIND_PORT" in env:
            values["port"] = _int("BITCOIND_PORT", env["BITCOIND_PORT"])
        if "BITCOIND_USER" in env:
            values["user"] = env["BITCOIND_USER"]
        if "BITCOIND_PASSWORD" in env:
            values["password"] = env["BITCOIND_PASSWORD"]
        if env.get("BITCOIND_WALLET"):
            values["wallet"] = env["BITCOIND_WALLET"]
        if "BITCOIND_USE_HTTPS" in env:
            values["use_https"] = _bool("BITCOIND_USE_HTTPS", env["BITCOIND_USE_HTTPS"])
        if "BITCOIND_TIMEOUT" in env:
            values["timeout"] = _float("BITCOIND_TIMEOUT", env["BITCOIND_TIMEOUT"])
        return cls(**values)
