"""Tests for the plugin lifecycle shared by every personality."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import click
import pytest
import typer

from sensu_plugin_sdk.core import version as version_module
from sensu_plugin_sdk.core.config import PluginConfig
from sensu_plugin_sdk.core.errors import ConfigurationError, WorkflowError
from sensu_plugin_sdk.core.event import Event
from sensu_plugin_sdk.core.framework import PluginFramework
from sensu_plugin_sdk.core.options import ConfigOption, ScalarOption
from sensu_plugin_sdk.core.overrides import REDACTED, apply_overrides
from sensu_plugin_sdk.core.slot import Slot
from tests.helpers.harness import ErrorLog, ExitRecorder, annotated_event, event_document, stream_of


class Recorder:
    def __init__(self, status: int = 0) -> None:
        self.status = status
        self.calls: list[list[str]] = []

    def __call__(self, args: list[str]) -> int:
        self.calls.append(args)
        return self.status


def make_framework(
    options: Sequence[ConfigOption] = (),
    *,
    keyspace: str = "",
    document: Any = None,
    **kwargs: Any,
) -> tuple[PluginFramework, ExitRecorder, ErrorLog]:
    exits = ExitRecorder()
    errors = ErrorLog()
    framework = PluginFramework(
        PluginConfig(name="test-plugin", keyspace=keyspace),
        options,
        event_stream=stream_of(document) if document is not None else stream_of(""),
        exit_func=exits,
        error_log=errors,
        **kwargs,
    )
    return framework, exits, errors


def test_annotation_override_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    """Check annotation beats entity annotation, flag, env and default."""
    monkeypatch.setenv("TEST_PATH1", "from-env")
    slot = Slot()
    option = ScalarOption(argument="value", env="TEST_PATH1", path="path1", value=slot, default="from-default")
    document = annotated_event(check={"ns/path1": "from-check"}, entity={"ns/path1": "from-entity"})
    framework, exits, _ = make_framework([option], keyspace="ns", document=document, read_event=True)
    framework.set_workflow(Recorder())
    framework.init()

    framework.execute(["--value", "from-flag"])

    assert exits.status == 0
    assert slot.value == "from-check"


def test_flag_beats_env_without_annotation(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_PATH1", "from-env")
    slot = Slot()
    option = ScalarOption(argument="value", env="TEST_PATH1", path="path1", value=slot, default="from-default")
    framework, exits, _ = make_framework([option], keyspace="ns", document=event_document(), read_event=True)
    framework.set_workflow(Recorder())
    framework.init()

    framework.execute(["--value", "from-flag"])

    assert exits.status == 0
    assert slot.value == "from-flag"


def test_overrides_disabled_without_keyspace() -> None:
    slot = Slot()
    option = ScalarOption(argument="value", path="path1", value=slot, default="from-default")
    document = annotated_event(check={"path1": "from-check"})
    framework, exits, _ = make_framework([option], document=document, read_event=True)
    framework.set_workflow(Recorder())
    framework.init()

    framework.execute([])

    assert exits.status == 0
    assert slot.value == "from-default"


def test_override_logging_redacts_secrets(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="sensu_plugin_sdk.core.overrides")
    options = [
        ScalarOption(path="region", value=Slot(), default=""),
        ScalarOption(path="token", value=Slot(), default="", secret=True),
    ]
    event = Event.model_validate(annotated_event(check={"ns/region": "eu-west"}, entity={"ns/token": "hunter2"}))

    applied = apply_overrides(PluginConfig(name="test-plugin", keyspace="ns"), options, event, verbose=True)

    assert [o.source for o in applied] == ["check", "entity"]
    assert 'value of "check.annotations.ns/region" ("eu-west")' in caplog.text
    assert f'value of "entity.annotations.ns/token" ("{REDACTED}")' in caplog.text
    assert "hunter2" not in caplog.text


def test_constraints_checked_after_flags() -> None:
    option = ScalarOption(argument="mode", value=Slot(), default="fast", allow=["slow"])
    framework, exits, errors = make_framework([option])
    workflow = Recorder()
    framework.set_workflow(workflow)
    framework.init()

    framework.execute(["--mode", "medium"])

    assert exits.status == 1
    assert "Error executing test-plugin: mode:" in errors.text
    assert workflow.calls == []


def test_workflow_receives_empty_args_and_sets_status() -> None:
    framework, exits, _ = make_framework()
    workflow = Recorder(status=2)
    framework.set_workflow(workflow)
    framework.init()

    framework.execute([])

    assert workflow.calls == [[]]
    assert exits.status == 2
    assert framework.exit_status == 2


def test_positional_arguments_rejected() -> None:
    framework, exits, errors = make_framework()
    workflow = Recorder()
    framework.set_workflow(workflow)
    framework.init()

    framework.execute(["extra"])

    assert exits.status == 1
    assert workflow.calls == []
    assert "Usage:" in errors.text


def test_workflow_error_status_surfaces() -> None:
    def failing(_args: list[str]) -> int:
        raise WorkflowError("upstream down", status=2)

    framework, exits, errors = make_framework()
    framework.set_workflow(failing)
    framework.init()

    framework.execute([])

    assert exits.status == 2
    assert errors.lines == ["Error executing test-plugin: upstream down"]


def test_unexpected_exception_uses_error_exit_status(caplog: pytest.LogCaptureFixture) -> None:
    def broken(_args: list[str]) -> int:
        raise RuntimeError("boom")

    framework, exits, errors = make_framework(error_exit_status=5)
    framework.set_workflow(broken)
    framework.init()

    framework.execute([])

    assert exits.status == 5
    assert "Error executing test-plugin: boom" in errors.text
    assert "Unexpected error executing test-plugin" in caplog.text


def test_mandatory_event_missing() -> None:
    framework, exits, errors = make_framework(read_event=True, event_mandatory=True)
    workflow = Recorder()
    framework.set_workflow(workflow)
    framework.init()

    framework.execute([])

    assert exits.status == 1
    assert "failed to read stdin" in errors.text
    assert workflow.calls == []


def test_optional_event_missing() -> None:
    framework, exits, _ = make_framework(read_event=True)
    framework.set_workflow(Recorder())
    framework.init()

    framework.execute([])

    assert exits.status == 0
    assert framework.event is None


def test_init_without_workflow() -> None:
    framework, exits, errors = make_framework()
    with pytest.raises(ConfigurationError, match="workflow function is not set"):
        framework.init()

    framework.execute([])

    assert exits.status == 1
    assert errors.lines == ["Error executing test-plugin: workflow function is not set"]


def test_execute_without_init() -> None:
    framework, exits, errors = make_framework()
    framework.set_workflow(Recorder())

    framework.execute([])

    assert exits.status == 1
    assert errors.lines == ["Error executing test-plugin: arguments must be initialized"]


def test_version_subcommand(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(version_module, "version", "1.2.3")
    monkeypatch.setattr(version_module, "commit", "abc1234")
    monkeypatch.setattr(version_module, "date", "2024-01-01")
    framework, exits, _ = make_framework()
    workflow = Recorder()
    framework.set_workflow(workflow)
    framework.init()

    framework.execute(["version"])

    assert exits.status == 0
    assert workflow.calls == []
    assert "1.2.3, commit abc1234, built at 2024-01-01" in capsys.readouterr().out


def test_help_exits_zero(capsys: pytest.CaptureFixture[str]) -> None:
    framework, exits, _ = make_framework(
        [ScalarOption(argument="apiHost", value=Slot(), default="localhost", usage="Backend host")]
    )
    workflow = Recorder()
    framework.set_workflow(workflow)
    framework.init()

    framework.execute(["--help"])

    out = capsys.readouterr().out
    assert exits.status == 0
    assert workflow.calls == []
    assert "--api-host" in out
    assert "version" in out


def test_entity_annotation_beats_flag() -> None:
    slot = Slot()
    option = ScalarOption(argument="value", path="path1", value=slot, default="from-default")
    document = annotated_event(entity={"ns/path1": "from-entity"})
    framework, exits, _ = make_framework([option], keyspace="ns", document=document, read_event=True)
    framework.set_workflow(Recorder())
    framework.init()

    framework.execute(["--value", "from-flag"])

    assert exits.status == 0
    assert slot.value == "from-entity"


def test_root_command_shares_click_with_options() -> None:
    framework, _, _ = make_framework([ScalarOption(argument="host", value=Slot(), default="")])
    framework.set_workflow(Recorder())
    framework.init()

    command = framework.command
    assert isinstance(command, click.Group)
    assert all(isinstance(param, click.Parameter) for param in command.params)
    assert "host" in [param.name for param in command.params]


def test_foreign_root_command_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(typer.main, "get_command", lambda _app: object())
    framework, exits, errors = make_framework()
    framework.set_workflow(Recorder())

    with pytest.raises(ConfigurationError, match="not a click.Group"):
        framework.init()

    framework.execute([])
    assert exits.status == 1
    assert "not a click.Group" in errors.text
