"""Error taxonomy for the plugin SDK."""

from __future__ import annotations


class PluginError(Exception):
    """Base exception for all plugin SDK errors."""

    pass


class ConfigurationError(PluginError):
    """Raised when the plugin or one of its options is misconfigured."""

    pass


class EventReadError(PluginError):
    """Raised when a mandatory event cannot be read from the input stream."""

    pass


class ParseError(PluginError):
    """Raised when an event document or an option value cannot be parsed."""

    pass


class EventValidationError(PluginError):
    """Raised when an event fails its structural invariants."""

    pass


class ConstraintViolation(PluginError):
    """Raised when an option value is rejected by its allow/restrict sets."""

    def __init__(self, argument: str, message: str) -> None:
        """Initialize constraint violation.

        Args:
            argument: Argument name of the offending option.
            message: Description of the rejected value.
        """
        self.argument = argument
        super().__init__(f"{argument}: {message}")


class WorkflowError(PluginError):
    """Raised by a personality workflow; carries the exit status to surface."""

    def __init__(self, message: str, status: int = 1) -> None:
        """Initialize workflow error.

        Args:
            message: Human readable description.
            status: Process exit status the framework should report.
        """
        self.status = int(status)
        super().__init__(message)


class ValidationFailed(WorkflowError):
    """Raised when a user validation callback rejects its input."""

    def __init__(self, message: str, status: int = 1) -> None:
        super().__init__(f"error validating input: {message}", status)


class ExecutionError(WorkflowError):
    """Raised when a user execute callback fails."""

    def __init__(self, personality: str, message: str, status: int = 1) -> None:
        self.personality = personality
        super().__init__(f"error executing {personality}: {message}", status)


class CheckError(Exception):
    """Raise from check callbacks to fail with a specific check status."""

    def __init__(self, message: str, status: int) -> None:
        """Initialize check error.

        Args:
            message: Description reported on the error stream.
            status: Check state to exit with (see CheckState).
        """
        self.status = int(status)
        super().__init__(message)
