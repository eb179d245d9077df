"""Plugin SDK for monitoring checks, handlers and mutators.

Plugins declare typed options, resolved from event annotations, command-line
flags, environment variables and defaults, and hand their logic to one of
three personalities that run the standard read/validate/execute lifecycle.
"""

from sensu_plugin_sdk.check import Check, CheckState
from sensu_plugin_sdk.core import (
    AttrSlot,
    CheckError,
    ConfigurationError,
    ConstraintViolation,
    Event,
    EventReadError,
    EventValidationError,
    ExecutionError,
    Kind,
    MapOption,
    ParseError,
    PluginConfig,
    PluginError,
    PluginFramework,
    ScalarOption,
    SliceOption,
    Slot,
    ValidationFailed,
)
from sensu_plugin_sdk.core.version import version as __version__
from sensu_plugin_sdk.handler import Handler
from sensu_plugin_sdk.mutator import Mutator
from sensu_plugin_sdk.security import SecurityConfig, security_options

__all__ = [
    "__version__",
    # Personalities
    "Check",
    "CheckState",
    "Handler",
    "Mutator",
    "PluginFramework",
    # Configuration
    "PluginConfig",
    "Kind",
    "ScalarOption",
    "SliceOption",
    "MapOption",
    "Slot",
    "AttrSlot",
    "SecurityConfig",
    "security_options",
    # Event
    "Event",
    # Errors
    "PluginError",
    "ConfigurationError",
    "EventReadError",
    "ParseError",
    "EventValidationError",
    "ConstraintViolation",
    "ValidationFailed",
    "ExecutionError",
    "CheckError",
]
