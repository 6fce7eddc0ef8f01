"""Tests for the transcript message store."""

import logging

import pytest

from infrachat.session.store import MessageStore


def test_append_preserves_order_and_lookup():
    store = MessageStore()
    first = store.append("hello", "user")
    second = store.append("hi", "assistant", decision_id="d-1")

    assert len(store) == 2
    assert store.messages == (first, second)
    assert store.last() is second
    assert store.get(first.id) is first
    assert store.index_of(second.id) == 1
    assert store.find_by_decision_id("d-1") is second
    assert store.get("missing") is None
    assert store.index_of("missing") is None


def test_messages_view_is_a_copy():
    store = MessageStore()
    store.append("hello", "user")

    view = store.messages
    store.append("again", "user")

    assert len(view) == 1
    assert len(store) == 2


def test_update_changes_fields_and_notifies():
    store = MessageStore()
    message = store.append("", "assistant")
    changes = []
    store.subscribe(lambda change, msg: changes.append((change, msg)))

    updated = store.update(message.id, content="done", summary="Summary")

    assert updated is message
    assert message.content == "done"
    assert message.summary == "Summary"
    assert changes == [("update", message)]


def test_update_missing_message_returns_none():
    assert MessageStore().update("missing", content="x") is None


@pytest.mark.parametrize("field_name", ["id", "role", "timestamp"])
def test_update_rejects_identity_fields(field_name):
    store = MessageStore()
    message = store.append("hello", "user")

    with pytest.raises(ValueError, match="Cannot update"):
        store.update(message.id, **{field_name: "x"})


def test_update_rejects_unknown_fields():
    store = MessageStore()
    message = store.append("hello", "user")

    with pytest.raises(ValueError, match="Unknown message fields"):
        store.update(message.id, colour="red")


def test_subscribe_and_unsubscribe():
    store = MessageStore()
    changes = []
    unsubscribe = store.subscribe(lambda change, msg: changes.append(change))

    store.append("one", "user")
    store.clear()
    unsubscribe()
    store.append("two", "user")

    assert changes == ["append", "clear"]
    assert len(store) == 1


def test_failing_listener_does_not_break_other_listeners(caplog):
    store = MessageStore()
    seen = []

    def _broken(change, message):
        raise RuntimeError("listener failed")

    store.subscribe(_broken)
    store.subscribe(lambda change, msg: seen.append(change))

    with caplog.at_level(logging.ERROR):
        store.append("hello", "user")

    assert seen == ["append"]
    assert "store_listener_error" in caplog.text
