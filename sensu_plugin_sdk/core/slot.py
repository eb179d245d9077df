"""Destination slots that options write resolved values into.

An option never owns its value: it writes into a destination provided by the
plugin author. Anything with an ``assign(value)`` method is a destination; plain
callables are accepted as setters.

Example:
    @dataclass
    class Settings:
        url: str = ""

    settings = Settings()
    timeout = Slot(0)
    options = [
        ScalarOption(argument="url", default="http://localhost", value=AttrSlot(settings, "url")),
        ScalarOption(argument="timeout", default=10, value=timeout),
    ]
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Destination(Protocol):
    """Receives the resolved value of an option."""

    def assign(self, value: Any) -> None: ...


class Slot:
    """Standalone holder for an option value."""

    __slots__ = ("value",)

    def __init__(self, value: Any = None) -> None:
        self.value = value

    def assign(self, value: Any) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Slot({self.value!r})"


class AttrSlot:
    """Writes into an attribute of another object."""

    __slots__ = ("target", "attr")

    def __init__(self, target: Any, attr: str) -> None:
        self.target = target
        self.attr = attr

    def assign(self, value: Any) -> None:
        setattr(self.target, self.attr, value)

    @property
    def value(self) -> Any:
        return getattr(self.target, self.attr)


class CallbackSlot:
    """Adapts a setter callable to the Destination protocol."""

    __slots__ = ("setter",)

    def __init__(self, setter: Callable[[Any], None]) -> None:
        self.setter = setter

    def assign(self, value: Any) -> None:
        self.setter(value)


def as_destination(target: Any) -> Destination | None:
    """Normalize a user supplied destination.

    Raises:
        TypeError: If target is neither a destination nor a callable.
    """
    if target is None:
        return None
    if isinstance(target, Destination):
        return target
    if callable(target):
        return CallbackSlot(target)
    raise TypeError(f"unsupported option destination: {target!r}")
