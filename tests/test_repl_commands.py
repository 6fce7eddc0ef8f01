"""Tests for REPL command parsing and handlers."""

import json

import pytest

from infrachat.domain.config import ClientConfig
from infrachat.repl.commands import (
    COMMAND_SPECS,
    CommandHandler,
    CommandSignal,
    is_command,
    parse_command,
    parse_param_overrides,
    resolve_message_ref,
)
from infrachat.session.controller import SessionController
from infrachat.session.store import MessageStore

from helpers import DECISION_ID, decision_event, json_response, make_client


def test_is_command_and_parse_command():
    assert is_command("  /show 2")
    assert not is_command("show 2")
    assert parse_command("/choose 3 run") == ("choose", "3 run")
    assert parse_command("/history") == ("history", "")
    assert parse_command("hello") == ("", "")


def test_resolve_message_ref_by_index_and_id():
    store = MessageStore()
    first = store.append("one", "user")
    second = store.append("two", "assistant")

    assert resolve_message_ref(store, "1") is first
    assert resolve_message_ref(store, second.id) is second

    with pytest.raises(ValueError, match="No message #3"):
        resolve_message_ref(store, "3")
    with pytest.raises(ValueError, match="No message #0"):
        resolve_message_ref(store, "0")
    with pytest.raises(ValueError, match="not found"):
        resolve_message_ref(store, "nope")
    with pytest.raises(ValueError, match="required"):
        resolve_message_ref(store, " ")


def test_resolve_message_ref_prefers_all_digit_message_id():
    store = MessageStore()
    store.append("one", "user")
    numeric = store.append("two", "assistant", id="1760700000123000000042")

    assert resolve_message_ref(store, numeric.id) is numeric
    with pytest.raises(ValueError, match="not found"):
        resolve_message_ref(store, "1760700000123999999999")


def test_parse_param_overrides_decodes_json_values():
    overrides = parse_param_overrides('size=large count=3 public=true tags=["a","b"]')

    assert overrides == {"size": "large", "count": 3, "public": True, "tags": ["a", "b"]}


@pytest.mark.parametrize("args", ["", "size", "=large"])
def test_parse_param_overrides_rejects_bad_pairs(args):
    with pytest.raises(ValueError):
        parse_param_overrides(args)


def test_every_spec_maps_to_a_handler_method():
    for spec in COMMAND_SPECS:
        assert callable(getattr(CommandHandler, spec.method_name))


class _Backend:
    def __init__(self):
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return json_response(200, {"status": "ok"})


def _handler(backend):
    controller = SessionController(ClientConfig(), client=make_client(backend))
    return controller, CommandHandler(controller)


@pytest.mark.asyncio
async def test_cancel_command_resolves_decision():
    backend = _Backend()
    controller, commands = _handler(backend)
    controller.handle_event(decision_event())

    result = await commands.execute_command("/cancel 1")

    assert result is None
    request = backend.requests[0]
    assert request.url.path == f"/decisions/{DECISION_ID}/resolve"
    assert json.loads(request.content) == {"option_id": "cancel"}
    assert controller.messages[0].execution_status.is_complete
    await controller.close()


@pytest.mark.asyncio
async def test_choose_and_run_commands():
    backend = _Backend()
    controller, commands = _handler(backend)
    controller.handle_event(decision_event())
    message_id = controller.messages[0].id

    await commands.execute_command(f"/choose {message_id} run")

    assert json.loads(backend.requests[0].content) == {"option_id": "run"}
    assert controller.messages[0].execution_status.is_running

    with pytest.raises(ValueError, match="Usage"):
        await commands.execute_command("/choose 1")
    await controller.close()


@pytest.mark.asyncio
async def test_run_command_requires_decision():
    backend = _Backend()
    controller, commands = _handler(backend)
    controller.context.store.append("plain", "assistant")

    with pytest.raises(ValueError, match="has no decision"):
        await commands.execute_command("/run 1")

    assert backend.requests == []
    await controller.close()


@pytest.mark.asyncio
async def test_edit_command_requires_session():
    controller, commands = _handler(_Backend())

    with pytest.raises(ValueError, match="No active session"):
        await commands.execute_command("/edit intent-1 size=large")
    await controller.close()


@pytest.mark.asyncio
async def test_edit_command_sends_overrides():
    backend = _Backend()
    controller, commands = _handler(backend)
    controller.context.activate("sess-1")

    result = await commands.execute_command("/edit intent-1 size=large count=2")

    assert result == "Sent 2 parameter update(s) for intent-1"
    assert json.loads(backend.requests[0].content) == {
        "mode": "param_update",
        "intent_id": "intent-1",
        "param_overrides": {"size": "large", "count": 2},
    }
    await controller.close()


@pytest.mark.asyncio
async def test_inspection_commands():
    controller, commands = _handler(_Backend())

    assert await commands.execute_command("/history") == "Transcript is empty"
    assert await commands.execute_command("/show") == "Transcript is empty"

    controller.handle_event(decision_event())
    assert "Proceed?" in await commands.execute_command("/show")
    assert (await commands.execute_command("/history")).startswith("#1 🚀 Assistant (decision)")

    status = await commands.execute_command("/status")
    assert "Session:    none (idle)" in status
    assert f"Decision:   {DECISION_ID} (Proceed?)" in status
    await controller.close()


@pytest.mark.asyncio
async def test_help_exit_and_unknown_commands():
    controller, commands = _handler(_Backend())

    help_text = await commands.execute_command("/help")
    assert "/choose <msg> <option>" in help_text
    assert await commands.execute_command("/exit") == CommandSignal(kind="exit")
    assert await commands.execute_command("/quit") == CommandSignal(kind="exit")

    with pytest.raises(ValueError, match="Unknown command"):
        await commands.execute_command("/bogus")
    with pytest.raises(ValueError, match="Empty command"):
        await commands.execute_command("/")
    await controller.close()
