"""Monetary amounts.

The daemon works in fixed-point amounts with 8 fractional digits and its
numeric parser rejects exponent notation, so every outgoing amount is
rescaled to exactly 8 digits and written in plain positional form.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated, Any

SCALE = 8
QUANTUM = Decimal(1).scaleb(-SCALE)  # 0.00000001


def to_amount(value: Any) -> Decimal:
    """Normalize *value* to a ``Decimal`` with exactly ``SCALE`` fractional digits.

    Floats go through ``str`` so ``0.1`` means one tenth, not its binary
    approximation. Raises ``ValueError`` for booleans, non-numeric strings
    and non-finite values.
    """
    if isinstance(value, bool):
        raise ValueError("a boolean is not an amount")
    if isinstance(value, float):
        value = str(value)
    if not isinstance(value, (Decimal, int, str)):
        raise ValueError(f"{type(value).__name__} is not an amount")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"invalid amount {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"invalid amount {value!r}")
    return amount.quantize(QUANTUM, rounding=ROUND_HALF_UP)


def format_amount(value: Any) -> str:
    """``0.1`` -> ``"0.10000000"``; never exponent notation."""
    return format(to_amount(value), "f")


def to_amount_map(
    recipients: Mapping[str, Any] | Iterable[tuple[str, Any]],
) -> dict[str, Decimal]:
    """Normalize ``{address: amount}``; repeated addresses in a pair list are summed."""
    pairs = recipients.items() if isinstance(recipients, Mapping) else recipients
    out: dict[str, Decimal] = {}
    for address, amount in pairs:
        if not isinstance(address, str) or not address:
            raise ValueError(f"invalid recipient address {address!r}")
        out[address] = out.get(address, Decimal(0)) + to_amount(amount)
    return out


class QuotedDecimal(Decimal):
    """A ``Decimal`` that arrived as a JSON string; it is re-encoded as one."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class AmountFormat:
    """Shape format for amount fields.

    ``quoted=False`` writes a JSON number, ``quoted=True`` a JSON string.
    Either wire form is accepted on decode and a decoded value keeps its
    wire form and scale, so responses re-encode unchanged. Values set in
    code (ints, floats, strings) are rescaled with ``to_amount``.
    """

    quoted: bool = False

    def decode(self, raw: Any) -> Decimal:
        if isinstance(raw, bool) or not isinstance(raw, (int, Decimal, str)):
            raise ValueError(f"expected an amount, got {type(raw).__name__}")
        try:
            amount = QuotedDecimal(raw) if isinstance(raw, str) else Decimal(raw)
        except InvalidOperation:
            raise ValueError(f"invalid amount {raw!r}") from None
        if not amount.is_finite():
            raise ValueError(f"invalid amount {raw!r}")
        return amount

    def encode(self, value: Any) -> Decimal | str:
        amount = value if isinstance(value, Decimal) else to_amount(value)
        if self.quoted or isinstance(value, QuotedDecimal):
            return format(amount, "f")
        return amount


Amount = Annotated[Decimal, AmountFormat()]
AmountText = Annotated[Decimal, AmountFormat(quoted=True)]
