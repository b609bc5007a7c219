"""Extensible wire models.

A ``WireModel`` is a frozen dataclass whose declared fields are decoded
into their annotated shapes, while every JSON member it does not declare
is kept verbatim in ``other_fields``. The daemon's schema evolves
independently of this client, so a new member must survive
decode → encode unchanged even before anyone maps it.

Encoding emits declared fields in declaration order (the canonical
order), then the captured members in their original input order::

    @dataclass(frozen=True, slots=True)
    class PeerInfo(WireModel):
        address: str | None = json_field("addr")
        inbound: bool | None = None

    peer = decode(PeerInfo, '{"addr":"1.2.3.4:8333","inbound":false,"x":1}')
    peer.other_fields    # {"x": 1}
    encode(peer)         # '{"addr":"1.2.3.4:8333","inbound":false,"x":1}'

A declared field holding ``None`` is omitted on encode unless the decoded
input carried it as an explicit ``null`` (tracked in ``wire_nulls``) or the
field is declared with ``emit_null=True``.
"""

from __future__ import annotations

import dataclasses
import functools
from dataclasses import dataclass, field
from typing import Any, TypeVar, get_type_hints

from wire import codec
from wire.shapes import ShapeError, decode_value, encode_value

WIRE_NAME = "wire_name"
EMIT_NULL = "emit_null"

_BOOKKEEPING = frozenset({"other_fields", "wire_nulls", "wire_shapes"})

M = TypeVar("M", bound="WireModel")


def json_field(name: str | None = None, *, default: Any = None, emit_null: bool = False) -> Any:
    """Declare a model field whose JSON member name differs from the attribute."""
    metadata: dict[str, Any] = {}
    if name is not None:
        metadata[WIRE_NAME] = name
    if emit_null:
        metadata[EMIT_NULL] = True
    return field(default=default, metadata=metadata)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    attr: str
    wire_name: str
    shape: Any
    emit_null: bool
    default: Any = None


def _default_of(f: dataclasses.Field) -> Any:
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return None


@functools.cache
def field_specs(cls: type) -> tuple[FieldSpec, ...]:
    """Declared fields of *cls* in canonical order."""
    hints = get_type_hints(cls, include_extras=True)
    return tuple(
        FieldSpec(
            attr=f.name,
            wire_name=f.metadata.get(WIRE_NAME, f.name),
            shape=hints[f.name],
            emit_null=f.metadata.get(EMIT_NULL, False),
            default=_default_of(f),
        )
        for f in dataclasses.fields(cls)
        if f.name not in _BOOKKEEPING
    )


@dataclass(frozen=True, slots=True)
class WireModel:
    """Base for every decoded JSON object: declared fields plus a capture-all map."""

    other_fields: dict[str, Any] = field(default_factory=dict, kw_only=True, repr=False)
    wire_nulls: frozenset[str] = field(default=frozenset(), kw_only=True, repr=False, compare=False)
    wire_shapes: dict[str, Any] = field(default_factory=dict, kw_only=True, repr=False, compare=False)

    @classmethod
    def from_wire(cls: type[M], raw: Any, *, path: str = "$", **shapes: Any) -> M:
        """Decode a parsed JSON object.

        Keyword arguments override the annotated shape of the named fields,
        e.g. ``JsonRpcResponse.from_wire(raw, result=GetInfoResult)``.
        Raises ``ShapeError`` when a declared field does not fit its shape.
        """
        if not isinstance(raw, dict):
            raise ShapeError(path, f"expected object for {cls.__name__}, got {type(raw).__name__}")
        by_wire_name = {spec.wire_name: spec for spec in field_specs(cls)}
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        nulls: set[str] = set()
        for key, item in raw.items():
            spec = by_wire_name.get(key)
            if spec is None:
                extra[key] = item
            elif item is None:
                nulls.add(key)
            else:
                shape = shapes.get(spec.attr, spec.shape)
                values[spec.attr] = decode_value(shape, item, f"{path}.{key}")
        return cls(**values, other_fields=extra, wire_nulls=frozenset(nulls), wire_shapes=shapes)

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for spec in field_specs(type(self)):
            value = getattr(self, spec.attr)
            # an explicit null decodes to the default, so it re-encodes as null
            if spec.wire_name in self.wire_nulls and (value is None or value == spec.default):
                out[spec.wire_name] = None
                continue
            if value is None:
                if spec.emit_null:
                    out[spec.wire_name] = None
                continue
            out[spec.wire_name] = encode_value(self.wire_shapes.get(spec.attr, spec.shape), value)
        for key, item in self.other_fields.items():
            out.setdefault(key, item)
        return out


def decode(cls: type[M], text: str | bytes, **shapes: Any) -> M:
    """Parse JSON text into *cls*. Raises ``ValueError`` (incl. ``ShapeError``)."""
    return cls.from_wire(codec.loads(text), **shapes)


def encode(model: WireModel) -> str:
    return codec.dumps(model.to_wire())


def unmapped_fields(value: Any, path: str = "$") -> dict[str, Any]:
    """Every captured-but-undeclared member below *value*, keyed by JSON path.

    An empty result means the model hierarchy maps the payload completely;
    anything else is schema drift that deserves a declared field.
    """
    found: dict[str, Any] = {}
    if isinstance(value, WireModel):
        for key, item in value.other_fields.items():
            found[f"{path}.{key}"] = item
        for spec in field_specs(type(value)):
            found.update(unmapped_fields(getattr(value, spec.attr), f"{path}.{spec.wire_name}"))
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            found.update(unmapped_fields(item, f"{path}[{i}]"))
    elif isinstance(value, dict):
        for key, item in value.items():
            found.update(unmapped_fields(item, f"{path}.{key}"))
    return found
