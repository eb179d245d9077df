"""Core plugin SDK modules."""

from sensu_plugin_sdk.core.config import PluginConfig
from sensu_plugin_sdk.core.errors import (
    CheckError,
    ConfigurationError,
    ConstraintViolation,
    EventReadError,
    EventValidationError,
    ExecutionError,
    ParseError,
    PluginError,
    ValidationFailed,
    WorkflowError,
)
from sensu_plugin_sdk.core.event import (
    CheckResult,
    Entity,
    Event,
    Metrics,
    ObjectMeta,
    event_key,
    event_summary,
    formatted_message,
    read_event,
    validate_event,
)
from sensu_plugin_sdk.core.framework import PluginFramework
from sensu_plugin_sdk.core.kinds import Kind
from sensu_plugin_sdk.core.options import (
    AnnotationOverride,
    ConfigOption,
    MapOption,
    ScalarOption,
    SliceOption,
)
from sensu_plugin_sdk.core.overrides import apply_overrides
from sensu_plugin_sdk.core.slot import AttrSlot, CallbackSlot, Destination, Slot

__all__ = [
    # Config
    "PluginConfig",
    # Errors
    "PluginError",
    "ConfigurationError",
    "EventReadError",
    "ParseError",
    "EventValidationError",
    "ConstraintViolation",
    "WorkflowError",
    "ValidationFailed",
    "ExecutionError",
    "CheckError",
    # Event
    "Event",
    "Entity",
    "CheckResult",
    "Metrics",
    "ObjectMeta",
    "read_event",
    "validate_event",
    "event_key",
    "event_summary",
    "formatted_message",
    # Options
    "Kind",
    "ConfigOption",
    "ScalarOption",
    "SliceOption",
    "MapOption",
    "AnnotationOverride",
    "apply_overrides",
    # Destinations
    "Destination",
    "Slot",
    "AttrSlot",
    "CallbackSlot",
    # Framework
    "PluginFramework",
]
