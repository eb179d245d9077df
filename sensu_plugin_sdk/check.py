"""Check personality: runs a check callback and reports a status code."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import IntEnum
from typing import IO, Any

from sensu_plugin_sdk.core.config import PluginConfig
from sensu_plugin_sdk.core.errors import CheckError, ExecutionError, PluginError, ValidationFailed
from sensu_plugin_sdk.core.event import Event
from sensu_plugin_sdk.core.framework import ErrorLog, ExitFunc, PluginFramework
from sensu_plugin_sdk.core.logging_setup import get_logger
from sensu_plugin_sdk.core.options import ConfigOption

logger = get_logger(__name__)


class CheckState(IntEnum):
    """Conventional check exit statuses."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


CheckValidate = Callable[[Event | None], Any]
CheckExecute = Callable[[Event | None], int | None]


def _status_of(error: Exception) -> int:
    if isinstance(error, CheckError):
        return error.status
    return CheckState.UNKNOWN


class Check:
    """Framework for writing checks.

    ``validate`` raises to reject the configuration; ``execute`` returns the
    check status (None means OK). Raise CheckError from either callback to
    fail with a specific status; any other exception exits UNKNOWN.

    Example:
        def execute(event):
            print("disk OK")
            return CheckState.OK

        Check(PluginConfig(name="check-disk"), options, validate, execute).execute()
    """

    def __init__(
        self,
        config: PluginConfig,
        options: Sequence[ConfigOption],
        validate: CheckValidate,
        execute: CheckExecute,
        read_event: bool = False,
        *,
        event_stream: IO[Any] | None = None,
        exit_func: ExitFunc | None = None,
        error_log: ErrorLog | None = None,
    ) -> None:
        self.framework = PluginFramework(
            config,
            options,
            read_event=read_event,
            event_mandatory=False,
            event_validation=False,
            configuration_overrides=True,
            verbose=False,
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
            logger.error("failed to initialize check plugin: %s", e)

    @property
    def event(self) -> Event | None:
        return self.framework.event

    def _workflow(self, _args: list[str]) -> int:
        event = self.framework.event
        try:
            self.validate_function(event)
        except Exception as e:
            raise ValidationFailed(str(e), _status_of(e)) from e

        try:
            status = self.execute_function(event)
        except Exception as e:
            raise ExecutionError("check", str(e), _status_of(e)) from e

        return CheckState.OK if status is None else int(status)

    def execute(self, args: Sequence[str] | None = None) -> None:
        """Run the check; exits the process with the check status."""
        self.framework.execute(args)
