"""Positional parameter lists.

bitcoind reads parameters by position, so an optional argument can only
be left out if every argument after it is left out as well: to pass the
Nth optional argument, arguments 1..N-1 must be sent too. Each method's
contract is data, an ``RpcMethod`` with an ordered list of ``Slot``s::

    LIST_TRANSACTIONS = RpcMethod(
        "listtransactions",
        optional("account", "*"),
        optional("count", 10),
        optional("skip", 0),
        result=list[TransactionData],
    )

    LIST_TRANSACTIONS.params(count=50)    # ["*", 50]
    LIST_TRANSACTIONS.params()            # []

``None`` always means "not supplied".
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from bitcoind_client.errors import InvalidParameterError


@dataclass(frozen=True, slots=True)
class Slot:
    """One positional parameter.

    ``always`` slots are sent even when trailing (with their default),
    for methods whose parser expects fixed placeholders.
    """

    name: str
    required: bool = False
    default: Any = None
    always: bool = False
    convert: Callable[[Any], Any] | None = None


def required(name: str, convert: Callable[[Any], Any] | None = None) -> Slot:
    return Slot(name, required=True, convert=convert)


def optional(
    name: str,
    default: Any = None,
    convert: Callable[[Any], Any] | None = None,
    *,
    always: bool = False,
) -> Slot:
    return Slot(name, default=default, always=always, convert=convert)


def build_params(slots: tuple[Slot, ...], values: dict[str, Any]) -> list[Any]:
    """Ordered parameter list for *values* (slot name -> value, ``None`` = unsupplied).

    Raises ``InvalidParameterError`` for a missing required slot, an
    unknown name, or a value its slot's converter rejects.
    """
    known = {slot.name for slot in slots}
    unknown = sorted(set(values) - known)
    if unknown:
        raise InvalidParameterError(f"unknown parameter(s): {', '.join(unknown)}")

    last = -1
    for index, slot in enumerate(slots):
        supplied = values.get(slot.name) is not None
        if slot.required and not supplied:
            raise InvalidParameterError(f"missing required parameter {slot.name!r}")
        if supplied or slot.required or slot.always:
            last = index

    params: list[Any] = []
    for slot in slots[: last + 1]:
        value = values.get(slot.name)
        if value is None:
            value = copy.deepcopy(slot.default)
        elif slot.convert is not None:
            try:
                value = slot.convert(value)
            except (TypeError, ValueError) as exc:
                raise InvalidParameterError(f"invalid value for {slot.name!r}: {exc}") from exc
        params.append(value)
    return params


@dataclass(frozen=True, slots=True)
class RpcMethod:
    """A remote method's name, positional contract and result shape."""

    name: str
    slots: tuple[Slot, ...]
    result: Any = Any

    def __init__(self, name: str, *slots: Slot, result: Any = Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "slots", tuple(slots))
        object.__setattr__(self, "result", result)

    def params(self, *args: Any, **kwargs: Any) -> list[Any]:
        if len(args) > len(self.slots):
            raise InvalidParameterError(
                f"{self.name} takes at most {len(self.slots)} parameters, got {len(args)}"
            )
        values = dict(kwargs)
        for slot, value in zip(self.slots, args):
            if slot.name in values:
                raise InvalidParameterError(f"{self.name}: parameter {slot.name!r} given twice")
            values[slot.name] = value
        return build_params(self.slots, values)
