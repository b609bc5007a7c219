"""Value shapes: type descriptors that drive decoding of JSON values.

A *shape* is an ordinary type hint:

* ``Any``, ``str``, ``int``, ``bool``, ``Decimal``, ``float``
* ``datetime`` (epoch seconds on the wire)
* ``Enum`` subclasses (by value)
* ``list[X]``, ``dict[str, X]``, ``X | None``
* wire models (anything with ``from_wire`` / ``to_wire``)
* ``Annotated[T, fmt]`` where *fmt* has ``decode(raw)`` / ``encode(value)``

``decode_value`` is strict: a value that does not fit its shape raises
``ShapeError`` naming the JSON path. JSON null is accepted for any shape.
"""

from __future__ import annotations

import types
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Protocol, Union, get_args, get_origin, runtime_checkable


class ShapeError(ValueError):
    """A JSON value is structurally incompatible with its expected shape."""

    def __init__(self, path: str, problem: str) -> None:
        self.path = path
        self.problem = problem
        super().__init__(f"{path}: {problem}")


@runtime_checkable
class ValueFormat(Protocol):
    def decode(self, raw: Any) -> Any: ...

    def encode(self, value: Any) -> Any: ...


def _type_name(raw: Any) -> str:
    if raw is None:
        return "null"
    if isinstance(raw, bool):
        return "boolean"
    if isinstance(raw, (int, Decimal)):
        return "number"
    if isinstance(raw, str):
        return "string"
    if isinstance(raw, list):
        return "array"
    if isinstance(raw, dict):
        return "object"
    return type(raw).__name__


def _value_format(shape: Any) -> ValueFormat | None:
    for meta in get_args(shape)[1:]:
        if isinstance(meta, ValueFormat):
            return meta
    return None


def _optional_args(shape: Any) -> list[Any]:
    return [arg for arg in get_args(shape) if arg is not type(None)]


def decode_value(shape: Any, raw: Any, path: str = "$") -> Any:
    """Decode the parsed JSON value *raw* according to *shape*."""
    if shape is Any or shape is object:
        return raw
    if raw is None:
        return None

    origin = get_origin(shape)
    if origin is Annotated:
        fmt = _value_format(shape)
        if fmt is None:
            return decode_value(get_args(shape)[0], raw, path)
        try:
            return fmt.decode(raw)
        except ValueError as exc:
            raise ShapeError(path, str(exc)) from exc
    if origin is Union or origin is types.UnionType:
        candidates = _optional_args(shape)
        if len(candidates) == 1:
            return decode_value(candidates[0], raw, path)
        for candidate in candidates:
            try:
                return decode_value(candidate, raw, path)
            except ShapeError:
                continue
        raise ShapeError(path, f"{_type_name(raw)} matches none of {shape}")
    if origin is list:
        if not isinstance(raw, list):
            raise ShapeError(path, f"expected array, got {_type_name(raw)}")
        (item_shape,) = get_args(shape) or (Any,)
        return [decode_value(item_shape, item, f"{path}[{i}]") for i, item in enumerate(raw)]
    if origin is dict:
        if not isinstance(raw, dict):
            raise ShapeError(path, f"expected object, got {_type_name(raw)}")
        _, item_shape = get_args(shape) or (str, Any)
        return {key: decode_value(item_shape, item, f"{path}.{key}") for key, item in raw.items()}

    if not isinstance(shape, type):
        raise TypeError(f"unsupported shape {shape!r}")
    if hasattr(shape, "from_wire"):
        if not isinstance(raw, dict):
            raise ShapeError(path, f"expected object for {shape.__name__}, got {_type_name(raw)}")
        return shape.from_wire(raw, path=path)
    if issubclass(shape, Enum):
        try:
            return shape(raw)
        except ValueError:
            raise ShapeError(path, f"{raw!r} is not a valid {shape.__name__}") from None
    if shape is list or shape is dict:
        if not isinstance(raw, shape):
            raise ShapeError(path, f"expected {'array' if shape is list else 'object'}, got {_type_name(raw)}")
        return raw
    if shape is bool:
        if not isinstance(raw, bool):
            raise ShapeError(path, f"expected boolean, got {_type_name(raw)}")
        return raw
    if shape is int:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ShapeError(path, f"expected integer, got {_type_name(raw)}")
        return raw
    if shape is str:
        if not isinstance(raw, str):
            raise ShapeError(path, f"expected string, got {_type_name(raw)}")
        return raw
    if shape is Decimal or shape is float:
        if isinstance(raw, bool) or not isinstance(raw, (int, Decimal)):
            raise ShapeError(path, f"expected number, got {_type_name(raw)}")
        return shape(raw)
    if shape is datetime:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ShapeError(path, f"expected epoch seconds, got {_type_name(raw)}")
        return datetime.fromtimestamp(raw, tz=timezone.utc)
    raise TypeError(f"unsupported shape {shape!r}")


def encode_value(shape: Any, value: Any) -> Any:
    """Inverse of ``decode_value``: turn a decoded value back into plain JSON values."""
    if value is None:
        return None
    if hasattr(value, "to_wire"):
        return value.to_wire()

    origin = get_origin(shape)
    if origin is Annotated:
        fmt = _value_format(shape)
        if fmt is not None:
            return fmt.encode(value)
        return encode_value(get_args(shape)[0], value)
    if origin is Union or origin is types.UnionType:
        candidates = _optional_args(shape)
        return encode_value(candidates[0] if len(candidates) == 1 else Any, value)
    if origin is list or isinstance(value, (list, tuple)):
        item_shape = get_args(shape)[0] if origin is list else Any
        return [encode_value(item_shape, item) for item in value]
    if origin is dict or isinstance(value, dict):
        item_shape = get_args(shape)[1] if origin is dict else Any
        return {key: encode_value(item_shape, item) for key, item in value.items()}

    if isinstance(value, datetime):
        return int(value.timestamp())
    if isinstance(value, Enum):
        return value.value
    return value
