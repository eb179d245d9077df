"""Command-line flag and environment variable binding.

Each option becomes one ``click.Option`` on the plugin's root command. The
environment variable is read once at binding time and its parsed value
becomes the flag default, so the resolution order on the command line is
flag > environment > declared default.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from typing import Any

import click

from sensu_plugin_sdk.core.errors import ParseError


def kebab_case(name: str) -> str:
    """Insert a hyphen before every non-leading uppercase letter, then lowercase.

    >>> kebab_case("apiHostName")
    'api-host-name'
    """
    parts: list[str] = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            parts.append("-")
        parts.append(char.lower())
    return "".join(parts)


class DelimitedList(click.ParamType):
    """Comma separated list of items, each parsed with an item type."""

    def __init__(self, item_type: click.ParamType) -> None:
        self.item_type = item_type
        self.name = f"{item_type.name}s"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> list[Any]:
        if isinstance(value, (list, tuple)):
            return [self.item_type.convert(item, param, ctx) for item in value]
        if value == "":
            return []
        return [self.item_type.convert(item.strip(), param, ctx) for item in str(value).split(",")]


class KeyValueMap(click.ParamType):
    """``key=value[,key=value]`` pairs with values parsed by a value type."""

    name = "key=value"

    def __init__(self, value_type: click.ParamType) -> None:
        self.value_type = value_type

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> dict[str, Any]:
        if isinstance(value, dict):
            return {str(k): self.value_type.convert(v, param, ctx) for k, v in value.items()}
        result: dict[str, Any] = {}
        if value == "":
            return result
        for pair in str(value).split(","):
            key, sep, raw = pair.partition("=")
            if not sep or not key.strip():
                self.fail(f"{pair!r} must be formatted as key=value", param, ctx)
            result[key.strip()] = self.value_type.convert(raw, param, ctx)
        return result


def read_env(name: str) -> str | None:
    """Return the environment variable value, or None if unset or no name."""
    if not name:
        return None
    return os.environ.get(name)


def parse_env(name: str, raw: str, param_type: click.ParamType) -> Any:
    """Parse an environment value with the option's Click type.

    Raises:
        ParseError: If the value cannot be converted.
    """
    try:
        return param_type.convert(raw, None, None)
    except click.BadParameter as e:
        raise ParseError(f"invalid value for environment variable {name}: {e.format_message()}") from e


def display_default(value: Any) -> str:
    """Render a default for help output."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (list, tuple)):
        return ",".join(display_default(v) for v in value)
    if isinstance(value, dict):
        return ",".join(f"{k}={display_default(v)}" for k, v in value.items())
    return str(value)


def help_text(usage: str, seed: Any, secret: bool) -> str:
    """Return the help line, with the default appended unless secret.

    Typer's Rich help panels ignore ``show_default`` on plain Click options.
    """
    shown = "" if secret else display_default(seed)
    if not shown:
        return usage
    suffix = f"(default: {shown})"
    return f"{usage} {suffix}" if usage else suffix


def make_flag(
    *,
    argument: str,
    shorthand: str,
    usage: str,
    param_type: click.ParamType,
    seed: Any,
    secret: bool,
    on_value: Callable[[Any], None],
    multiple: bool = False,
    is_bool: bool = False,
) -> click.Option:
    """Build the Click option for one configuration option.

    Args:
        argument: Long flag name before kebab-case conversion.
        shorthand: Single character short flag, or empty.
        usage: Help text.
        param_type: Click type parsing one occurrence of the flag.
        seed: Resolved initial value (environment, else default).
        secret: Hide the default in help output.
        on_value: Receives the final value after parsing.
        multiple: Flag may be repeated; occurrences are combined by the caller.
        is_bool: ``--flag`` alone means true; ``--flag false`` is accepted.
    """
    long_name = kebab_case(argument)
    decls = [re.sub(r"\W", "_", long_name), f"--{long_name}"]
    if shorthand:
        decls.append(f"-{shorthand}")

    def callback(ctx: click.Context, param: click.Parameter, value: Any) -> Any:
        on_value(value)
        return value

    kwargs: dict[str, Any] = {}
    if multiple:
        # Unset repeatable flags fall back to the seed in on_value
        kwargs["multiple"] = True
    else:
        kwargs["default"] = seed
    if is_bool:
        kwargs["is_flag"] = False
        kwargs["flag_value"] = True

    return click.Option(
        decls,
        type=param_type,
        help=help_text(usage, seed, secret) or None,
        show_default=False,
        expose_value=False,
        callback=callback,
        **kwargs,
    )
