"""Event model and ingestion.

The event is the JSON document the agent pipes to a plugin's stdin. Only the
fields the framework addresses are modelled; everything else is kept as extra
data so that mutators can round-trip documents unchanged.
"""

from __future__ import annotations

import re
from typing import IO, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sensu_plugin_sdk.core.errors import EventReadError, EventValidationError, ParseError
from sensu_plugin_sdk.core.logging_setup import get_logger

logger = get_logger(__name__)

NIL = "nil"

_NAME_RE = re.compile(r"^[\w.\-:]+$")

_OPTIONAL_PARTS = ("entity", "check", "metrics")


class ObjectMeta(BaseModel):
    """Metadata shared by entities and checks."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class _Resource(BaseModel):
    model_config = ConfigDict(extra="allow")

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def annotations(self) -> dict[str, str]:
        return self.metadata.annotations


class Entity(_Resource):
    """Monitored entity (host, device, service)."""

    entity_class: str = ""


class CheckResult(_Resource):
    """Check result carried by an event."""

    output: str = ""
    status: int = 0


class Metrics(BaseModel):
    """Metric payload carried by an event."""

    model_config = ConfigDict(extra="allow")

    handlers: list[str] = Field(default_factory=list)
    points: list[dict[str, Any]] = Field(default_factory=list)


class Event(BaseModel):
    """Monitoring event.

    Attributes:
        timestamp: Unix time in seconds.
        entity: Entity the event belongs to.
        check: Check result, if any.
        metrics: Metric payload, if any.
    """

    model_config = ConfigDict(extra="allow")

    timestamp: int = 0
    entity: Entity | None = None
    check: CheckResult | None = None
    metrics: Metrics | None = None

    def ensure_valid(self) -> None:
        """Check the structural invariants of the event.

        Raises:
            EventValidationError: If the entity is missing or invalid, if
                there is neither a check nor metrics, or if the check is
                invalid.
        """
        if self.entity is None:
            raise EventValidationError("event must contain an entity")
        if self.check is None and self.metrics is None:
            raise EventValidationError("event must contain a check or metrics")
        problem = _name_problem(self.entity.name)
        if problem:
            raise EventValidationError(f"entity is invalid: {problem}")
        if self.check is not None:
            problem = _name_problem(self.check.name)
            if problem:
                raise EventValidationError(f"check is invalid: {problem}")

    def to_json(self) -> str:
        """Serialize to a compact JSON document.

        Absent entity, check and metrics are omitted; every other field,
        explicit nulls included, is written back as read.
        """
        absent = {name for name in _OPTIONAL_PARTS if getattr(self, name) is None}
        return self.model_dump_json(exclude=absent)


def _name_problem(name: str) -> str | None:
    if not name:
        return "name must not be empty"
    if not _NAME_RE.match(name):
        return "name cannot contain spaces or special characters"
    return None


def validate_event(event: Event) -> None:
    """Validate timestamp and structure of an event read from stdin.

    Raises:
        EventValidationError: If the event is invalid.
    """
    if event.timestamp <= 0:
        raise EventValidationError("timestamp is missing or must be greater than zero")
    event.ensure_valid()


def read_event(stream: IO[Any], mandatory: bool, validate: bool) -> Event | None:
    """Read and decode a single event document from a stream.

    Args:
        stream: Input stream, consumed entirely.
        mandatory: Whether a missing event is an error.
        validate: Whether to enforce timestamp and structural invariants.

    Returns:
        The decoded event, or None when the input is missing and the event is
        not mandatory.

    Raises:
        EventReadError: Input missing or unreadable while mandatory.
        ParseError: Input is not a valid event document.
        EventValidationError: Event fails validation.
    """
    try:
        data = stream.read()
    except (OSError, ValueError) as e:
        if mandatory:
            raise EventReadError(f"failed to read stdin: {e}") from e
        logger.debug("No event read from stdin: %s", e)
        return None

    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    if not data or not data.strip():
        if mandatory:
            raise EventReadError("failed to read stdin: no event data")
        return None

    try:
        event = Event.model_validate_json(data)
    except ValidationError as e:
        raise ParseError(f"failed to unmarshal stdin event: {_first_error(e)}") from e

    if validate:
        validate_event(event)
    return event


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid document")
    return f"{location}: {message}" if location else message


def event_key(event: Event | None) -> str:
    """Return ``<entity name>/<check name>`` with ``nil`` for missing parts."""
    entity_name = NIL
    if event is not None and event.entity is not None and event.entity.name:
        entity_name = event.entity.name
    check_name = NIL
    if event is not None and event.check is not None and event.check.name:
        check_name = event.check.name
    return f"{entity_name}/{check_name}"


def event_summary(event: Event | None, trim_at: int = 0) -> str:
    """Return the event key and check output, trimming output at trim_at."""
    output = NIL
    if event is not None and event.check is not None and event.check.output:
        output = event.check.output
    if trim_at > 0 and len(output) > trim_at:
        output = output[:trim_at]
    return f"{event_key(event)} : {output}"


def formatted_message(event: Event | None) -> str:
    """Return an ALERT/RESOLVE line suitable for chat notifications."""
    action = "ALERT"
    if event is not None and event.check is not None and event.check.status == 0:
        action = "RESOLVE"
    return f"{action} - {event_summary(event)}"
