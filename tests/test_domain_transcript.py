"""Tests for transcript domain models."""

import logging

from infrachat.domain.transcript import (
    DecisionOption,
    ExecutionStatus,
    Message,
    ParsedCommand,
    transition_execution_status,
)


def test_parsed_command_from_intent():
    command = ParsedCommand.from_intent(
        {"action": "scale", "resource": "cluster", "tool": "terraform", "params": {"nodes": 3}}
    )

    assert command.action == "scale"
    assert command.resource == "cluster"
    assert command.provider == ""
    assert command.tool == "terraform"
    assert command.parameters == {"nodes": 3}
    assert command.matches("scale", "cluster")
    assert not command.matches("scale", "vm")


def test_parsed_command_ignores_non_mapping_params():
    command = ParsedCommand.from_intent({"action": "list", "resource": "vm", "params": ["x"]})

    assert command.parameters == {}


def test_execution_status_constructors():
    assert ExecutionStatus.running() == ExecutionStatus(True, False, False, "Running...")
    assert ExecutionStatus.cancelled() == ExecutionStatus(False, True, False, "Cancelled")
    assert ExecutionStatus.failed("quota").message == "quota"
    assert ExecutionStatus.completed().is_terminal
    assert not ExecutionStatus.running().is_terminal


def test_transition_allows_forward_moves():
    running = ExecutionStatus.running()
    done = ExecutionStatus.succeeded()

    assert transition_execution_status(None, running) == running
    assert transition_execution_status(running, done) == done
    assert transition_execution_status(done, ExecutionStatus.failed()) == ExecutionStatus.failed()


def test_transition_rejects_terminal_to_running(caplog):
    done = ExecutionStatus.completed()

    with caplog.at_level(logging.WARNING):
        result = transition_execution_status(done, ExecutionStatus.running())

    assert result is done
    assert "status_transition_rejected" in caplog.text


def test_message_defaults_and_accepts_tokens():
    message = Message(content="hi", role="assistant")

    assert message.id
    assert message.timestamp.endswith("Z")
    assert message.accepts_tokens is True

    message.is_decision = True
    assert message.accepts_tokens is False
    assert Message(content="hi", role="user").accepts_tokens is False


def test_message_to_dict_omits_unset_fields():
    message = Message(
        content="",
        role="assistant",
        decision_id="d-1",
        decision_options=(DecisionOption(id="run", label="Run", description="Go"),),
        execution_status=ExecutionStatus.running(),
    )

    payload = message.to_dict()

    assert payload["decision_id"] == "d-1"
    assert payload["decision_options"] == [{"id": "run", "label": "Run", "description": "Go"}]
    assert payload["execution_status"]["is_running"] is True
    assert "parsed_command" not in payload
    assert "summary" not in payload
