"""Configuration options.

An option describes one typed setting of a plugin and where its value may come
from: a command-line flag (``argument``/``shorthand``), an environment variable
(``env``), an event annotation (``path`` under the plugin keyspace) or the
declared ``default``. The resolved value is written into ``value``, a
destination owned by the plugin author.

Three shapes exist:
- ScalarOption: one bool, integer, float or string value.
- SliceOption: a list of scalars.
- MapOption: a string keyed mapping with integer or string values.

Invariants:
- An option with an argument must have a destination when flags are bound.
- If ``allow`` is non-empty, ``restrict`` is ignored.
- The default is always an accepted value, whatever ``allow`` says.
"""

from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

import click

from sensu_plugin_sdk.core import flags
from sensu_plugin_sdk.core.errors import ConfigurationError, ConstraintViolation, ParseError
from sensu_plugin_sdk.core.kinds import (
    Kind,
    click_type,
    infer_kind,
    parse_list,
    parse_map,
    parse_scalar,
    values_equal,
    wrap,
    zero_value,
)
from sensu_plugin_sdk.core.slot import Destination, as_destination

if TYPE_CHECKING:
    from sensu_plugin_sdk.core.event import Event

_MAP_KINDS = (Kind.INT16, Kind.INT32, Kind.INT64, Kind.UINT16, Kind.UINT32, Kind.UINT64, Kind.STRING)


@dataclass(frozen=True, slots=True)
class AnnotationOverride:
    """Result of a successful annotation lookup.

    Attributes:
        key: Fully qualified annotation key that matched.
        value: Raw annotation value.
        source: Where the annotation was found.
    """

    key: str
    value: str
    source: Literal["check", "entity"]


@dataclass(kw_only=True)
class ConfigOption(ABC):
    """Binding metadata shared by every option shape."""

    value: Any = None
    path: str = ""
    env: str = ""
    argument: str = ""
    shorthand: str = ""
    usage: str = ""
    secret: bool = False

    _current: Any = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            self.value = as_destination(self.value)
        except TypeError as e:
            raise ConfigurationError(f"{self.label}: {e}") from e

    @property
    def label(self) -> str:
        """Name used in error messages."""
        return self.argument or self.path or self.env or type(self).__name__

    @property
    def flag_name(self) -> str:
        """Long flag name as shown on the command line."""
        return flags.kebab_case(self.argument)

    @property
    def current(self) -> Any:
        """Last value written into the destination."""
        return self._current

    def _assign(self, value: Any) -> None:
        self._current = value
        destination: Destination | None = self.value
        if destination is not None:
            destination.assign(value)

    def _require_destination(self) -> None:
        if self.value is None:
            raise ConfigurationError(f"{self.label}: option value destination is not set")

    def bind_flag(self, command: click.Command) -> None:
        """Register this option on a command and seed its destination.

        The seed is the parsed environment variable when set, else the
        default. Options without an argument get the seed but no flag.

        Raises:
            ConfigurationError: Argument set without a destination, invalid
                shorthand, or unsupported value type.
            ParseError: Environment variable holds an invalid value.
        """
        if self.argument:
            self._require_destination()
            if len(self.shorthand) > 1:
                raise ConfigurationError(f"{self.label}: shorthand must be a single character, got {self.shorthand!r}")
        elif self.value is None:
            return

        param_type = self._param_type()
        raw_env = flags.read_env(self.env)
        seed = self._default_value() if raw_env is None else self._from_env(raw_env, param_type)
        self._assign(seed)

        if not self.argument:
            return
        command.params.append(
            flags.make_flag(
                argument=self.argument,
                shorthand=self.shorthand,
                usage=self.usage,
                param_type=self._flag_type(param_type),
                seed=seed,
                secret=self.secret,
                on_value=lambda parsed: self._assign(self._from_flag(parsed, seed)),
                multiple=self._multiple,
                is_bool=self._is_bool_flag,
            )
        )

    def set_from_string(self, raw: str) -> None:
        """Parse a raw string, write it to the destination, then validate it.

        Raises:
            ConfigurationError: No destination.
            ParseError: Raw string is not a valid value for this option.
            ConstraintViolation: Value rejected by allow/restrict.
        """
        self._require_destination()
        try:
            parsed = self._parse(raw)
        except ValueError as e:
            raise ParseError(f"{self.label}: invalid value {raw!r}: {e}") from e
        self._assign(parsed)
        self.validate_allow_restrict()

    def annotation_key(self, keyspace: str) -> str:
        """Fully qualified annotation key for this option."""
        joined = f"{keyspace}/{self.path}" if keyspace else self.path
        return posixpath.normpath(joined)

    def apply_annotation(self, keyspace: str, event: Event) -> AnnotationOverride | None:
        """Override the value from the event's annotations, if present.

        The lowercased key is tried before the original key; for each key the
        check annotations are consulted before the entity annotations. The
        first non-empty value wins.

        Returns:
            The override applied, or None when no annotation matched.
        """
        if not self.path:
            return None
        key = self.annotation_key(keyspace)
        candidates = [key.lower()]
        if key != candidates[0]:
            candidates.append(key)
        for candidate in candidates:
            found: AnnotationOverride | None = None
            if event.check is not None and event.check.annotations.get(candidate):
                found = AnnotationOverride(candidate, event.check.annotations[candidate], "check")
            elif event.entity is not None and event.entity.annotations.get(candidate):
                found = AnnotationOverride(candidate, event.entity.annotations[candidate], "entity")
            if found is not None:
                self.set_from_string(found.value)
                return found
        return None

    def _from_env(self, raw: str, param_type: click.ParamType) -> Any:
        return flags.parse_env(self.env, raw, param_type)

    def _from_flag(self, parsed: Any, seed: Any) -> Any:
        return parsed

    def _flag_type(self, param_type: click.ParamType) -> click.ParamType:
        return param_type

    _multiple = False
    _is_bool_flag = False

    @abstractmethod
    def _param_type(self) -> click.ParamType:
        """Click type parsing one flag occurrence or environment value."""

    @abstractmethod
    def _default_value(self) -> Any:
        """Declared default, normalized for this shape."""

    @abstractmethod
    def _parse(self, raw: str) -> Any:
        """Parse a raw annotation string; raise ValueError when invalid."""

    @abstractmethod
    def validate_allow_restrict(self) -> None:
        """Check the current value against allow/restrict.

        Raises:
            ConstraintViolation: If the value is not accepted.
        """


@dataclass(kw_only=True)
class ScalarOption(ConfigOption):
    """Option holding a single bool, integer, float or string.

    The kind is taken from ``kind``, else from ``value_type``, else from the
    type of ``default``. ``value_type`` may be a subclass of a scalar type
    (an ``int`` subclass, a ``str`` Enum); parsed values are converted to it.
    """

    default: Any = None
    kind: Kind | None = None
    value_type: type | None = None
    allow: list[Any] = field(default_factory=list)
    restrict: list[Any] = field(default_factory=list)

    def _resolved_kind(self) -> Kind:
        kind = self.kind or infer_kind(self.value_type, self.default)
        if kind is None:
            raise ConfigurationError(f"setup flag: {self.label}: unknown value type")
        return kind

    @property
    def _is_bool_flag(self) -> bool:  # type: ignore[override]
        return self._resolved_kind() is Kind.BOOL

    def _wrapper(self) -> type | None:
        if self.value_type is not None:
            return self.value_type
        if self.default is not None and type(self.default) not in (bool, int, float, str):
            return type(self.default)
        return None

    def _param_type(self) -> click.ParamType:
        return click_type(self._resolved_kind(), self._wrapper())

    def _default_value(self) -> Any:
        if self.default is None:
            return wrap(zero_value(self._resolved_kind()), self._wrapper())
        return self.default

    def _parse(self, raw: str) -> Any:
        return parse_scalar(self._resolved_kind(), raw, self._wrapper())

    def validate_allow_restrict(self) -> None:
        current = self._current
        if self.allow:
            accepted = [*self.allow, self._default_value()]
            if any(values_equal(candidate, current) for candidate in accepted):
                return
            raise ConstraintViolation(self.label, f"value {current!r} not one of {self.allow!r}")
        for candidate in self.restrict:
            if values_equal(candidate, current):
                raise ConstraintViolation(self.label, f"value not allowed to be {candidate!r}")


@dataclass(kw_only=True)
class SliceOption(ConfigOption):
    """Option holding a list of scalars of one kind.

    On the command line the flag may be repeated; each occurrence is split on
    commas unless ``use_string_array`` is set, in which case every occurrence
    is one element. ``use_string_array`` only applies to string lists.
    """

    default: list[Any] = field(default_factory=list)
    kind: Kind = Kind.STRING
    allow: list[Any] = field(default_factory=list)
    restrict: list[Any] = field(default_factory=list)
    use_string_array: bool = False

    _multiple = True

    @property
    def _string_array(self) -> bool:
        return self.use_string_array and self.kind is Kind.STRING

    def _param_type(self) -> click.ParamType:
        item_type = click_type(self.kind)
        if self._string_array:
            return item_type
        return flags.DelimitedList(item_type)

    def _from_env(self, raw: str, param_type: click.ParamType) -> Any:
        value = super()._from_env(raw, param_type)
        return [value] if self._string_array else value

    def _from_flag(self, parsed: Any, seed: Any) -> Any:
        if not parsed:
            return list(seed)
        if self._string_array:
            return list(parsed)
        return [item for occurrence in parsed for item in occurrence]

    def _default_value(self) -> list[Any]:
        return list(self.default or [])

    def _parse(self, raw: str) -> list[Any]:
        try:
            return parse_list(self.kind, raw)
        except ValueError:
            pass
        # Not an array of the kind: a single element
        if self.kind is Kind.STRING:
            return [raw]
        return [parse_scalar(self.kind, raw)]

    def validate_allow_restrict(self) -> None:
        current = self._current or []
        if self.allow:
            accepted = [*self.allow, *self._default_value()]
            for item in current:
                if not any(values_equal(candidate, item) for candidate in accepted):
                    raise ConstraintViolation(self.label, f"value {item!r} not one of {self.allow!r}")
            return
        for item in current:
            for candidate in self.restrict:
                if values_equal(candidate, item):
                    raise ConstraintViolation(self.label, f"value not allowed to be {candidate!r}")


@dataclass(kw_only=True)
class MapOption(ConfigOption):
    """Option holding a string keyed mapping with integer or string values.

    On the command line the flag takes ``key=value`` pairs, comma separated
    and repeatable. Annotations must hold a JSON object.
    """

    default: dict[str, Any] = field(default_factory=dict)
    kind: Kind = Kind.STRING
    allow: dict[str, Any] = field(default_factory=dict)
    restrict: dict[str, Any] = field(default_factory=dict)

    _multiple = True

    def _param_type(self) -> click.ParamType:
        if self.kind not in _MAP_KINDS:
            raise ConfigurationError(f"setup flag: {self.label}: unsupported map value type {self.kind.value}")
        return flags.KeyValueMap(click_type(self.kind))

    def _from_flag(self, parsed: Any, seed: Any) -> Any:
        if not parsed:
            return dict(seed)
        merged: dict[str, Any] = {}
        for occurrence in parsed:
            merged.update(occurrence)
        return merged

    def _default_value(self) -> dict[str, Any]:
        return dict(self.default or {})

    def _parse(self, raw: str) -> dict[str, Any]:
        return parse_map(self.kind, raw)

    def validate_allow_restrict(self) -> None:
        current = self._current or {}
        default = self._default_value()
        if self.allow:
            for key, item in current.items():
                allowed = key in self.allow and values_equal(self.allow[key], item)
                defaulted = key in default and values_equal(default[key], item)
                if not (allowed or defaulted):
                    raise ConstraintViolation(self.label, f"key {key} = value {item!r} not one of {self.allow!r}")
            return
        for key, item in current.items():
            if key in self.restrict and values_equal(self.restrict[key], item):
                raise ConstraintViolation(self.label, f"key {key} = value {item!r} not allowed")
