"""Mutator personality: transforms an event and writes the result to stdout."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Mapping, Sequence
from typing import IO, Any

from sensu_plugin_sdk.core.config import PluginConfig
from sensu_plugin_sdk.core.errors import ExecutionError, PluginError, ValidationFailed
from sensu_plugin_sdk.core.event import Event
from sensu_plugin_sdk.core.framework import ErrorLog, ExitFunc, PluginFramework
from sensu_plugin_sdk.core.logging_setup import get_logger
from sensu_plugin_sdk.core.options import ConfigOption

logger = get_logger(__name__)

EMPTY_DOCUMENT = "{}"

MutatorValidate = Callable[[Event], Any]
MutatorExecute = Callable[[Event], Event | Mapping[str, Any] | None]


class Mutator:
    """Framework for writing mutators.

    The event is mandatory and validated. ``execute`` returns the event to
    emit; returning None emits an empty document. Output is written once, to
    ``output_stream`` (stdout by default), only when the workflow succeeds.
    """

    def __init__(
        self,
        config: PluginConfig,
        options: Sequence[ConfigOption],
        validate: MutatorValidate,
        execute: MutatorExecute,
        *,
        event_stream: IO[Any] | None = None,
        output_stream: IO[str] | None = None,
        exit_func: ExitFunc | None = None,
        error_log: ErrorLog | None = None,
    ) -> None:
        self.framework = PluginFramework(
            config,
            options,
            read_event=True,
            event_mandatory=True,
            event_validation=True,
            configuration_overrides=True,
            verbose=True,
            error_exit_status=1,
            event_stream=event_stream,
            exit_func=exit_func,
            error_log=error_log,
        )
        self.output_stream: IO[str] = output_stream if output_stream is not None else sys.stdout
        self.validate_function = validate
        self.execute_function = execute

        self.framework.set_workflow(self._workflow)
        try:
            self.framework.init()
        except PluginError as e:
            logger.error("failed to initialize mutator plugin: %s", e)

    @property
    def event(self) -> Event | None:
        return self.framework.event

    def _workflow(self, _args: list[str]) -> int:
        event = self.framework.event
        try:
            self.validate_function(event)
        except Exception as e:
            raise ValidationFailed(str(e)) from e

        try:
            mutated = self.execute_function(event)
        except Exception as e:
            raise ExecutionError("mutator", str(e)) from e

        document = self._serialize(mutated)
        self.output_stream.write(document)
        self.output_stream.flush()
        return 0

    @staticmethod
    def _serialize(mutated: Event | Mapping[str, Any] | None) -> str:
        if mutated is None:
            return EMPTY_DOCUMENT
        if isinstance(mutated, Event):
            return mutated.to_json()
        try:
            return json.dumps(dict(mutated), separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise ExecutionError("mutator", f"error marshaling output event to json: {e}") from e

    def execute(self, args: Sequence[str] | None = None) -> None:
        """Run the mutator; exits the process."""
        self.framework.execute(args)
