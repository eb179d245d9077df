"""Tests for the handler personality."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from sensu_plugin_sdk.core.config import PluginConfig
from sensu_plugin_sdk.core.event import Event
from sensu_plugin_sdk.core.options import ScalarOption
from sensu_plugin_sdk.core.slot import Slot
from sensu_plugin_sdk.handler import Handler
from tests.helpers.harness import ErrorLog, ExitRecorder, annotated_event, event_document, stream_of


class Callbacks:
    def __init__(self, fail_validate: bool = False, fail_execute: bool = False) -> None:
        self.fail_validate = fail_validate
        self.fail_execute = fail_execute
        self.validated: list[Event] = []
        self.executed: list[Event] = []

    def validate(self, event: Event) -> None:
        self.validated.append(event)
        if self.fail_validate:
            raise ValueError("webhook url is required")

    def execute(self, event: Event) -> None:
        self.executed.append(event)
        if self.fail_execute:
            raise ConnectionError("webhook returned 500")


def make_handler(
    document: Any, callbacks: Callbacks, options: list[Any] | None = None, keyspace: str = ""
) -> tuple[Handler, ExitRecorder, ErrorLog]:
    exits = ExitRecorder()
    errors = ErrorLog()
    handler = Handler(
        PluginConfig(name="handler-test", keyspace=keyspace),
        options or [],
        callbacks.validate,
        callbacks.execute,
        event_stream=stream_of(document),
        exit_func=exits,
        error_log=errors,
    )
    return handler, exits, errors


def test_handler_happy_path() -> None:
    callbacks = Callbacks()
    handler, exits, errors = make_handler(event_document(), callbacks)
    handler.execute([])

    assert exits.status == 0
    assert errors.lines == []
    assert len(callbacks.executed) == 1
    assert callbacks.executed[0] is handler.event


def test_missing_timestamp_fails_before_callbacks() -> None:
    callbacks = Callbacks()
    handler, exits, errors = make_handler(event_document(timestamp=None), callbacks)
    handler.execute([])

    assert exits.status == 1
    assert "timestamp is missing or must be greater than zero" in errors.text
    assert callbacks.validated == []
    assert callbacks.executed == []


def test_missing_event_fails() -> None:
    callbacks = Callbacks()
    handler, exits, errors = make_handler("", callbacks)
    handler.execute([])

    assert exits.status == 1
    assert "failed to read stdin" in errors.text
    assert callbacks.validated == []


def test_validate_failure_exits_one() -> None:
    callbacks = Callbacks(fail_validate=True)
    handler, exits, errors = make_handler(event_document(), callbacks)
    handler.execute([])

    assert exits.status == 1
    assert "error validating input: webhook url is required" in errors.text
    assert callbacks.executed == []


def test_execute_failure_exits_one() -> None:
    callbacks = Callbacks(fail_execute=True)
    handler, exits, errors = make_handler(event_document(), callbacks)
    handler.execute([])

    assert exits.status == 1
    assert "Error executing handler-test: error executing handler: webhook returned 500" in errors.text


def test_disable_event_validation() -> None:
    callbacks = Callbacks()
    handler, exits, _ = make_handler(event_document(timestamp=None, check=None), callbacks)
    handler.disable_event_validation()
    handler.execute([])

    assert exits.status == 0
    assert callbacks.executed[0].check is None


def test_disable_read_event() -> None:
    callbacks = Callbacks()
    handler, exits, _ = make_handler("", callbacks)
    handler.disable_read_event()
    handler.execute([])

    assert exits.status == 0
    assert callbacks.executed == [None]


def test_handler_logs_overrides(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    channel = Slot()
    option = ScalarOption(argument="channel", path="channel", value=channel, default="#alerts")
    document = annotated_event(entity={"sensu.io/plugins/slack/config/channel": "#ops"})
    callbacks = Callbacks()
    handler, exits, _ = make_handler(document, callbacks, [option], keyspace="sensu.io/plugins/slack/config")
    handler.execute([])

    assert exits.status == 0
    assert channel.value == "#ops"
    assert 'entity.annotations.sensu.io/plugins/slack/config/channel" ("#ops")' in caplog.text


def test_invalid_annotation_fails_handler() -> None:
    option = ScalarOption(argument="retries", path="retries", value=Slot(), default=3)
    document = annotated_event(check={"ns/retries": "lots"})
    callbacks = Callbacks()
    handler, exits, errors = make_handler(document, callbacks, [option], keyspace="ns")
    handler.execute([])

    assert exits.status == 1
    assert "retries" in errors.text
    assert callbacks.executed == []
