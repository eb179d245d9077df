"""Example threshold check and annotating mutator.

Run as console scripts ``sensu-example-check`` and ``sensu-example-mutator``,
or import the builders to wire them with test streams.

    sensu-example-check --value 93 --warning 80 --critical 90
    echo "$EVENT" | sensu-example-mutator --label team=ops
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import IO, Any

from sensu_plugin_sdk.check import Check, CheckState
from sensu_plugin_sdk.core.config import PluginConfig
from sensu_plugin_sdk.core.errors import CheckError
from sensu_plugin_sdk.core.event import Event
from sensu_plugin_sdk.core.kinds import Kind
from sensu_plugin_sdk.core.options import MapOption, ScalarOption
from sensu_plugin_sdk.core.slot import AttrSlot
from sensu_plugin_sdk.mutator import Mutator

KEYSPACE = "sensu.io/plugins/example/config"


@dataclass
class ThresholdSettings:
    """Settings of the threshold check."""

    metric: str = "usage"
    value: float = 0.0
    warning: float = 80.0
    critical: float = 90.0


@dataclass
class LabelSettings:
    """Settings of the label mutator."""

    labels: dict[str, str] = field(default_factory=dict)
    output_prefix: str = ""


def build_check(settings: ThresholdSettings | None = None, **collaborators: Any) -> Check:
    """Create the threshold check; collaborators are passed to Check."""
    settings = settings or ThresholdSettings()
    options = [
        ScalarOption(
            value=AttrSlot(settings, "metric"),
            path="metric",
            env="EXAMPLE_METRIC",
            argument="metric",
            shorthand="m",
            default=settings.metric,
            usage="Name of the measured metric",
        ),
        ScalarOption(
            value=AttrSlot(settings, "value"),
            argument="value",
            kind=Kind.FLOAT64,
            default=settings.value,
            usage="Measured value",
        ),
        ScalarOption(
            value=AttrSlot(settings, "warning"),
            path="warning",
            env="EXAMPLE_WARNING",
            argument="warning",
            shorthand="w",
            kind=Kind.FLOAT64,
            default=settings.warning,
            usage="Warning threshold",
        ),
        ScalarOption(
            value=AttrSlot(settings, "critical"),
            path="critical",
            env="EXAMPLE_CRITICAL",
            argument="critical",
            shorthand="c",
            kind=Kind.FLOAT64,
            default=settings.critical,
            usage="Critical threshold",
        ),
    ]

    def validate(_event: Event | None) -> None:
        if settings.warning >= settings.critical:
            raise CheckError(
                f"--warning ({settings.warning}) must be lower than --critical ({settings.critical})",
                CheckState.UNKNOWN,
            )

    def execute(_event: Event | None) -> int:
        if settings.value >= settings.critical:
            state = CheckState.CRITICAL
        elif settings.value >= settings.warning:
            state = CheckState.WARNING
        else:
            state = CheckState.OK
        print(f"{settings.metric} {state.name}: {settings.value}")
        return state

    config = PluginConfig(
        name="sensu-example-check",
        short="Compare a value against warning and critical thresholds",
        keyspace=KEYSPACE,
    )
    return Check(config, options, validate, execute, **collaborators)


def build_mutator(settings: LabelSettings | None = None, output_stream: IO[str] | None = None, **collaborators: Any) -> Mutator:
    """Create the label mutator; collaborators are passed to Mutator."""
    settings = settings or LabelSettings()
    options = [
        MapOption(
            value=AttrSlot(settings, "labels"),
            path="labels",
            env="EXAMPLE_LABELS",
            argument="label",
            shorthand="l",
            usage="Labels to add to the entity, as key=value",
        ),
        ScalarOption(
            value=AttrSlot(settings, "output_prefix"),
            path="output-prefix",
            argument="outputPrefix",
            default="",
            usage="Text prepended to the check output",
        ),
    ]

    def validate(event: Event) -> None:
        if event.entity is None:
            raise ValueError("event has no entity")

    def execute(event: Event) -> Event | None:
        if not settings.labels and not settings.output_prefix:
            return event
        mutated = event.model_copy(deep=True)
        if mutated.entity is not None:
            mutated.entity.metadata.labels.update(settings.labels)
        if mutated.check is not None and settings.output_prefix:
            mutated.check.output = settings.output_prefix + mutated.check.output
        return mutated

    config = PluginConfig(
        name="sensu-example-mutator",
        short="Add labels to the entity of an event",
        keyspace=KEYSPACE,
    )
    return Mutator(config, options, validate, execute, output_stream=output_stream, **collaborators)


def check_main() -> None:
    """Entry point for the example check."""
    build_check().execute()


def mutator_main() -> None:
    """Entry point for the example mutator."""
    build_mutator().execute()


if __name__ == "__main__":
    check_main()
