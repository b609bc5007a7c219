"""Canonical JSON text codec.

bitcoind's parameter parser rejects exponent notation, and response
round trips must be byte-exact, so numbers never pass through ``float``:

* ``loads`` parses every fractional number as ``Decimal``.
* ``dumps`` writes ``Decimal`` in plain positional notation and uses
  compact separators with no trailing newline.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name!r} is not valid JSON-RPC")


def loads(text: str | bytes) -> Any:
    """Parse JSON text into plain Python values (``Decimal`` for fractions)."""
    return json.loads(text, parse_float=Decimal, parse_constant=_reject_constant)


def plain_decimal(value: Decimal) -> str:
    if not value.is_finite():
        raise ValueError(f"cannot encode non-finite decimal {value}")
    return format(value, "f")


def dumps(value: Any) -> str:
    """Serialize *value* to canonical JSON text.

    Objects exposing ``to_wire()`` (wire models) are serialized through it.
    """
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Decimal):
        return plain_decimal(value)
    if isinstance(value, Enum):
        return dumps(value.value)
    if isinstance(value, int):
        return int.__repr__(value)
    if isinstance(value, float):
        return plain_decimal(Decimal(repr(value)))
    if hasattr(value, "to_wire"):
        return dumps(value.to_wire())
    if isinstance(value, Mapping):
        members = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"JSON object keys must be str, not {type(key).__name__}")
            members.append(f"{dumps(key)}:{dumps(item)}")
        return "{" + ",".join(members) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(dumps(item) for item in value) + "]"
    raise TypeError(f"{type(value).__name__} is not JSON serializable")
