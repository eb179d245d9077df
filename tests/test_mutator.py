"""Tests for the mutator personality."""

from __future__ import annotations

import io
import json
from typing import Any

from sensu_plugin_sdk.core.config import PluginConfig
from sensu_plugin_sdk.core.event import Event
from sensu_plugin_sdk.mutator import Mutator
from tests.helpers.harness import ErrorLog, ExitRecorder, event_document, stream_of


def run_mutator(document: Any, execute: Any, validate: Any = None) -> tuple[str, ExitRecorder, ErrorLog]:
    exits = ExitRecorder()
    errors = ErrorLog()
    output = io.StringIO()
    mutator = Mutator(
        PluginConfig(name="mutator-test"),
        [],
        validate or (lambda _event: None),
        execute,
        event_stream=stream_of(document),
        output_stream=output,
        exit_func=exits,
        error_log=errors,
    )
    mutator.execute([])
    return output.getvalue(), exits, errors


def test_mutator_emits_modified_event() -> None:
    document = event_document()
    document["check"]["metadata"]["name"] = "orig"

    def execute(event: Event) -> Event:
        assert event.check is not None
        event.check.metadata.name = "new"
        return event

    output, exits, errors = run_mutator(document, execute)

    assert exits.status == 0
    assert errors.lines == []
    assert '"name":"new"' in output
    assert json.loads(output)["check"]["metadata"]["name"] == "new"


def test_mutator_no_event_emits_empty_document() -> None:
    output, exits, _ = run_mutator(event_document(), lambda _event: None)
    assert exits.status == 0
    assert output == "{}"


def test_mutator_accepts_mapping() -> None:
    output, exits, _ = run_mutator(event_document(), lambda _event: {"summary": "web-01 ok"})
    assert exits.status == 0
    assert output == '{"summary":"web-01 ok"}'


def test_mutator_unserializable_mapping() -> None:
    output, exits, errors = run_mutator(event_document(), lambda _event: {"when": object()})
    assert exits.status == 1
    assert output == ""
    assert "error marshaling output event to json" in errors.text


def test_mutator_preserves_unknown_fields() -> None:
    document = event_document(pipelines=[{"name": "metrics"}])
    output, exits, _ = run_mutator(document, lambda event: event)
    assert exits.status == 0
    assert json.loads(output)["pipelines"] == [{"name": "metrics"}]


def test_mutator_keeps_explicit_nulls() -> None:
    document = event_document()
    document["check"]["hooks"] = None
    document["check"]["subdue"] = None

    output, exits, _ = run_mutator(document, lambda event: event)

    assert exits.status == 0
    assert '"hooks":null' in output
    assert '"subdue":null' in output
    decoded = json.loads(output)
    assert decoded["check"]["hooks"] is None
    assert "metrics" not in decoded


def test_mutator_failure_writes_nothing() -> None:
    def execute(_event: Event) -> Event:
        raise KeyError("labels")

    output, exits, errors = run_mutator(event_document(), execute)

    assert exits.status == 1
    assert output == ""
    assert "error executing mutator" in errors.text


def test_mutator_validate_failure() -> None:
    def validate(_event: Event) -> None:
        raise ValueError("unsupported entity class")

    output, exits, errors = run_mutator(event_document(), lambda event: event, validate)

    assert exits.status == 1
    assert output == ""
    assert "error validating input: unsupported entity class" in errors.text


def test_mutator_requires_valid_event() -> None:
    output, exits, errors = run_mutator(event_document(entity=None), lambda event: event)
    assert exits.status == 1
    assert output == ""
    assert "event must contain an entity" in errors.text
