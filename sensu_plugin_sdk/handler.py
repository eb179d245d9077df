"""Handler personality: acts on an event, reports only success or failure."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import IO, Any

from sensu_plugin_sdk.core.config import PluginConfig
from sensu_plugin_sdk.core.errors import ExecutionError, PluginError, ValidationFailed
from sensu_plugin_sdk.core.event import Event
from sensu_plugin_sdk.core.framework import ErrorLog, ExitFunc, PluginFramework
from sensu_plugin_sdk.core.logging_setup import get_logger
from sensu_plugin_sdk.core.options import ConfigOption

logger = get_logger(__name__)

HandlerCallback = Callable[[Event], Any]


class Handler:
    """Framework for writing handlers.

    The event is mandatory and validated. Both callbacks receive the event and
    signal failure by raising; every failure exits with status 1.
    """

    def __init__(
        self,
        config: PluginConfig,
        options: Sequence[ConfigOption],
        validate: HandlerCallback,
        execute: HandlerCallback,
        *,
        event_stream: IO[Any] | None = None,
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
        self.validate_function = validate
        self.execute_function = execute

        self.framework.set_workflow(self._workflow)
        try:
            self.framework.init()
        except PluginError as e:
            logger.error("failed to initialize handler plugin: %s", e)

    @property
    def event(self) -> Event | None:
        return self.framework.event

    def disable_read_event(self) -> None:
        """Run without reading an event from stdin."""
        self.framework.set_event_read(False)

    def disable_event_validation(self) -> None:
        """Accept events that fail structural validation."""
        self.framework.set_event_validation(False)

    def _workflow(self, _args: list[str]) -> int:
        event = self.framework.event
        try:
            self.validate_function(event)
        except Exception as e:
            raise ValidationFailed(str(e)) from e

        try:
            self.execute_function(event)
        except Exception as e:
            raise ExecutionError("handler", str(e)) from e

        return 0

    def execute(self, args: Sequence[str] | None = None) -> None:
        """Run the handler; exits the process."""
        self.framework.execute(args)
