"""Configuration overrides from event annotations."""

from __future__ import annotations

from collections.abc import Sequence

from sensu_plugin_sdk.core.config import PluginConfig
from sensu_plugin_sdk.core.event import Event
from sensu_plugin_sdk.core.logging_setup import get_logger
from sensu_plugin_sdk.core.options import AnnotationOverride, ConfigOption

logger = get_logger(__name__)

REDACTED = "<redacted>"


def apply_overrides(
    config: PluginConfig,
    options: Sequence[ConfigOption],
    event: Event | None,
    verbose: bool = False,
) -> list[AnnotationOverride]:
    """Apply annotation overrides to every option, in declaration order.

    Skipped entirely when the plugin has no keyspace or no event was read.

    Args:
        config: Plugin configuration providing the keyspace.
        options: Options to override.
        event: Event carrying the annotations.
        verbose: Log every override that was applied.

    Returns:
        The overrides that were applied.

    Raises:
        ParseError: An annotation value is invalid for its option.
        ConstraintViolation: An annotation value is rejected by allow/restrict.
    """
    if not config.keyspace or event is None:
        return []

    applied: list[AnnotationOverride] = []
    for option in options:
        result = option.apply_annotation(config.keyspace, event)
        if result is None:
            continue
        applied.append(result)
        if verbose:
            shown = REDACTED if option.secret else result.value
            logger.info(
                'overriding default plugin configuration with value of "%s.annotations.%s" ("%s")',
                result.source,
                result.key,
                shown,
            )
    return applied
