"""Scalar value kinds supported by configuration options.

Every option value, or every element of a sequence/mapping option, belongs to
one of the kinds below. A kind knows its zero value, how to coerce a decoded
JSON value, and which Click parameter type parses it from the command line.

User types whose underlying representation is one of the Python scalar types
(``class Port(int)``, ``class Level(str, Enum)``) are bound structurally: the
kind is taken from the type's MRO and parsed values are wrapped with the type.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any

import click
from pydantic import Field, StrictBool, StrictInt, StrictStr, TypeAdapter, ValidationError


class Kind(str, Enum):
    """Scalar value kind."""

    BOOL = "bool"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"

    # Aliases
    INT = "int64"
    UINT = "uint64"

    @property
    def is_integer(self) -> bool:
        return self in _INT_BOUNDS

    @property
    def is_float(self) -> bool:
        return self in (Kind.FLOAT32, Kind.FLOAT64)


_INT_BOUNDS: dict[Kind, tuple[int, int]] = {
    Kind.INT16: (-(2**15), 2**15 - 1),
    Kind.INT32: (-(2**31), 2**31 - 1),
    Kind.INT64: (-(2**63), 2**63 - 1),
    Kind.UINT16: (0, 2**16 - 1),
    Kind.UINT32: (0, 2**32 - 1),
    Kind.UINT64: (0, 2**64 - 1),
}

FLOAT32_MAX = 3.4028234663852886e38

# Checked in order: bool is a subclass of int.
_BASE_TYPES: tuple[tuple[type, Kind], ...] = (
    (bool, Kind.BOOL),
    (int, Kind.INT64),
    (float, Kind.FLOAT64),
    (str, Kind.STRING),
)


def zero_value(kind: Kind) -> Any:
    """Return the zero value of a kind."""
    if kind is Kind.BOOL:
        return False
    if kind.is_integer:
        return 0
    if kind.is_float:
        return 0.0
    return ""


def infer_kind(value_type: type | None = None, sample: Any = None) -> Kind | None:
    """Infer the kind from a declared type, or from a sample value.

    Returns None when neither carries one of the supported representations.
    """
    candidate = value_type if value_type is not None else (type(sample) if sample is not None else None)
    if candidate is None:
        return None
    for base, kind in _BASE_TYPES:
        if candidate is base:
            return kind
    # Structural fallback for wrapper types
    for klass in candidate.__mro__:
        for base, kind in _BASE_TYPES:
            if klass is base:
                return kind
    return None


def _annotation(kind: Kind) -> Any:
    if kind is Kind.BOOL:
        return StrictBool
    if kind.is_integer:
        low, high = _INT_BOUNDS[kind]
        return Annotated[StrictInt, Field(ge=low, le=high)]
    if kind is Kind.FLOAT32:
        return Annotated[float, Field(strict=True, ge=-FLOAT32_MAX, le=FLOAT32_MAX, allow_inf_nan=False)]
    if kind is Kind.FLOAT64:
        return Annotated[float, Field(strict=True, allow_inf_nan=False)]
    return StrictStr


_SCALARS: dict[Kind, TypeAdapter[Any]] = {kind: TypeAdapter(_annotation(kind)) for kind in Kind}
_LISTS: dict[Kind, TypeAdapter[Any]] = {kind: TypeAdapter(list[_annotation(kind)]) for kind in Kind}
_MAPS: dict[Kind, TypeAdapter[Any]] = {kind: TypeAdapter(dict[str, _annotation(kind)]) for kind in Kind}

_RANGE_ERRORS = frozenset({"greater_than_equal", "less_than_equal"})


def _invalid(kind: Kind, value: Any, error: ValidationError) -> ValueError:
    details = error.errors()
    if not details:
        return ValueError(f"invalid {kind.value} value {value!r}")
    first = details[0]
    if first["type"] in _RANGE_ERRORS:
        return ValueError(f"{first['input']} out of range for {kind.value}")
    return ValueError(f"invalid {kind.value} value {value!r}: {first['msg']}")


def _plain(kind: Kind, value: Any) -> Any:
    return float(value) if kind.is_float else value


def coerce(kind: Kind, value: Any, value_type: type | None = None) -> Any:
    """Coerce a decoded JSON value to a kind.

    Raises:
        ValueError: If the value does not belong to the kind.
    """
    try:
        result = _SCALARS[kind].validate_python(value, strict=True)
    except ValidationError as e:
        raise _invalid(kind, value, e) from e
    return wrap(_plain(kind, result), value_type)


def wrap(value: Any, value_type: type | None) -> Any:
    """Convert a plain scalar into the declared wrapper type, if any."""
    if value_type is None or type(value) is value_type:
        return value
    try:
        return value_type(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{value!r} is not a valid {value_type.__name__}") from e


def parse_scalar(kind: Kind, raw: str, value_type: type | None = None) -> Any:
    """Parse a raw annotation string into a scalar.

    Strings are taken verbatim; every other kind must be valid JSON.

    Raises:
        ValueError: If the raw string is not a value of the kind.
    """
    if kind is Kind.STRING:
        return wrap(raw, value_type)
    try:
        result = _SCALARS[kind].validate_json(raw, strict=True)
    except ValidationError as e:
        raise _invalid(kind, raw, e) from e
    return wrap(_plain(kind, result), value_type)


def parse_list(kind: Kind, raw: str) -> list[Any]:
    """Parse a JSON array whose elements all belong to a kind.

    Raises:
        ValueError: If the raw string is not such an array.
    """
    try:
        items = _LISTS[kind].validate_json(raw, strict=True)
    except ValidationError as e:
        raise _invalid(kind, raw, e) from e
    return [_plain(kind, item) for item in items]


def parse_map(kind: Kind, raw: str) -> dict[str, Any]:
    """Parse a JSON object whose values all belong to a kind.

    Raises:
        ValueError: If the raw string is not such an object.
    """
    try:
        pairs = _MAPS[kind].validate_json(raw, strict=True)
    except ValidationError as e:
        raise _invalid(kind, raw, e) from e
    return {key: _plain(kind, value) for key, value in pairs.items()}


def values_equal(a: Any, b: Any) -> bool:
    """Kind aware equality: booleans never equal numbers."""
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    return bool(a == b)


class BoundedNumber(click.ParamType):
    """Click type for numeric kinds, rejecting values outside the kind's range."""

    def __init__(self, kind: Kind) -> None:
        self.kind = kind
        self.name = kind.value

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Any:
        base = click.INT if self.kind.is_integer else click.FLOAT
        number = base.convert(value, param, ctx)
        try:
            return coerce(self.kind, number)
        except ValueError as e:
            self.fail(str(e), param, ctx)


class WrappedType(click.ParamType):
    """Click type that parses with a base type then wraps with a user type."""

    def __init__(self, base: click.ParamType, value_type: type) -> None:
        self.base = base
        self.value_type = value_type
        self.name = value_type.__name__.lower()

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Any:
        if isinstance(value, self.value_type):
            return value
        plain = self.base.convert(value, param, ctx)
        try:
            return wrap(plain, self.value_type)
        except ValueError as e:
            self.fail(str(e), param, ctx)


def click_type(kind: Kind, value_type: type | None = None) -> click.ParamType:
    """Return the Click parameter type parsing one value of the kind."""
    base: click.ParamType
    if kind is Kind.BOOL:
        base = click.BOOL
    elif kind.is_integer or kind.is_float:
        base = BoundedNumber(kind)
    else:
        base = click.STRING
    if value_type is not None and infer_kind(value_type) is not None and value_type not in (bool, int, float, str):
        return WrappedType(base, value_type)
    return base
