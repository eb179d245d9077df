"""Plugin execution framework shared by checks, handlers and mutators.

A plugin run is a single pass:

    parse flags -> read event -> validate event -> annotation overrides
    -> allow/restrict checks -> workflow -> exit

Any failure short-circuits to exit. Framework failures exit with
``error_exit_status``; workflow failures exit with the status they carry.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from typing import IO, Any

import click
import typer
from rich.console import Console

from sensu_plugin_sdk.core.config import PluginConfig
from sensu_plugin_sdk.core.errors import ConfigurationError, PluginError, ValidationFailed, WorkflowError
from sensu_plugin_sdk.core.event import Event, read_event
from sensu_plugin_sdk.core.logging_setup import get_logger, setup_logging
from sensu_plugin_sdk.core.options import ConfigOption
from sensu_plugin_sdk.core.overrides import apply_overrides
from sensu_plugin_sdk.core.version import version_string

logger = get_logger(__name__)

Workflow = Callable[[list[str]], int]
ExitFunc = Callable[[int], Any]
ErrorLog = Callable[[str], None]

_stderr = Console(stderr=True, highlight=False)


def _default_error_log(message: str) -> None:
    _stderr.print(message, style="red", markup=False, soft_wrap=True)


class PluginFramework:
    """Lifecycle orchestrator for one plugin invocation.

    Args:
        config: Plugin identification and keyspace.
        options: Configuration options, in declaration order.
        read_event: Read an event document from ``event_stream``.
        event_mandatory: Missing input is an error rather than no event.
        event_validation: Enforce timestamp and structural invariants.
        configuration_overrides: Apply annotation overrides from the event.
        verbose: Log applied overrides.
        error_exit_status: Exit status for framework failures.
        event_stream: Input stream, stdin by default.
        exit_func: Called once with the final status, ``sys.exit`` by default.
        error_log: Receives diagnostic lines, stderr by default.
    """

    def __init__(
        self,
        config: PluginConfig,
        options: Sequence[ConfigOption] = (),
        *,
        read_event: bool = False,
        event_mandatory: bool = False,
        event_validation: bool = False,
        configuration_overrides: bool = True,
        verbose: bool = False,
        error_exit_status: int = 1,
        event_stream: IO[Any] | None = None,
        exit_func: ExitFunc | None = None,
        error_log: ErrorLog | None = None,
    ) -> None:
        self.config = config
        self.options = list(options)
        self.read_event = read_event
        self.event_mandatory = event_mandatory
        self.event_validation = event_validation
        self.configuration_overrides = configuration_overrides
        self.verbose = verbose
        self.error_exit_status = error_exit_status
        self.event_stream: IO[Any] = event_stream if event_stream is not None else sys.stdin
        self.exit_func: ExitFunc = exit_func or sys.exit
        self.error_log: ErrorLog = error_log or _default_error_log

        self.event: Event | None = None
        self.exit_status = 0
        self._workflow: Workflow | None = None
        self._command: click.Command | None = None
        self._init_error: PluginError | None = None
        self._usage = ""

    @property
    def command(self) -> click.Command | None:
        """Root command, available after a successful init()."""
        return self._command

    def set_workflow(self, workflow: Workflow) -> None:
        """Install the personality workflow, called with the remaining args."""
        self._workflow = workflow

    def set_event_read(self, enabled: bool) -> None:
        self.read_event = enabled

    def set_event_validation(self, enabled: bool) -> None:
        self.event_validation = enabled

    def init(self) -> None:
        """Build the root command, the version command and every flag.

        Raises:
            ConfigurationError: No workflow installed, duplicate flag, or an
                option that cannot be bound.
            ParseError: An option's environment variable is invalid.
        """
        try:
            self._command = self._build_command()
            self._init_error = None
        except PluginError as e:
            self._command = None
            self._init_error = e
            raise

    def _build_command(self) -> click.Command:
        if self._workflow is None:
            raise ConfigurationError("workflow function is not set")

        app = typer.Typer(name=self.config.name, add_completion=False)

        @app.callback(invoke_without_command=True, help=self.config.short or None)
        def root(ctx: typer.Context) -> None:
            if ctx.invoked_subcommand is not None:
                return
            self._usage = ctx.get_usage()
            self._run(list(ctx.args))

        @app.command("version", help="Print the version number of this plugin")
        def version() -> None:
            typer.echo(version_string())

        command = typer.main.get_command(app)
        # Options are click.Option objects; the group must share their click
        if not isinstance(command, click.Group):
            klass = type(command)
            raise ConfigurationError(
                f"root command {klass.__module__}.{klass.__name__} is not a click.Group; "
                "install typer and click releases that share one click"
            )

        seen: dict[str, ConfigOption] = {}
        for option in self.options:
            if option.argument:
                if option.flag_name in seen:
                    raise ConfigurationError(f"setup flag: {option.argument}: flag --{option.flag_name} defined twice")
                seen[option.flag_name] = option
            option.bind_flag(command)
        return command

    def _run(self, args: list[str]) -> None:
        if self._workflow is None:
            raise ConfigurationError("workflow function is not set")

        if self.read_event:
            self.event = read_event(self.event_stream, self.event_mandatory, self.event_validation)

        if self.event is not None and self.configuration_overrides:
            apply_overrides(self.config, self.options, self.event, self.verbose)

        for option in self.options:
            if option.value is not None:
                option.validate_allow_restrict()

        self.exit_status = int(self._workflow(args))

    def execute(self, args: Sequence[str] | None = None) -> None:
        """Run the plugin and exit with the recorded status.

        Args:
            args: Command-line arguments, ``sys.argv[1:]`` by default.
        """
        name = self.config.name
        if self._command is None:
            reason = self._init_error or "arguments must be initialized"
            self.error_log(f"Error executing {name}: {reason}")
            self.exit_func(self.error_exit_status)
            return

        setup_logging("info" if self.verbose else "warning")

        try:
            self._command.main(
                args=list(args) if args is not None else None,
                prog_name=name,
                standalone_mode=False,
            )
        except click.ClickException as e:
            self.exit_status = self.error_exit_status
            if isinstance(e, click.UsageError) and e.ctx is not None:
                self.error_log(e.ctx.get_usage())
            self.error_log(f"Error executing {name}: {e.format_message()}")
        except click.Abort:
            self.exit_status = self.error_exit_status
            self.error_log(f"Error executing {name}: aborted")
        except PluginError as e:
            self.exit_status = e.status if isinstance(e, WorkflowError) else self.error_exit_status
            if isinstance(e, ValidationFailed) and self._usage:
                self.error_log(self._usage)
            self.error_log(f"Error executing {name}: {e}")
        except Exception as e:
            logger.exception("Unexpected error executing %s", name)
            self.exit_status = self.error_exit_status
            self.error_log(f"Error executing {name}: {e}")

        self.exit_func(self.exit_status)
