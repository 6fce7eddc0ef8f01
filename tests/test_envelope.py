"""Tests for envelope normalization."""

import logging

import pytest

from infrachat.events import CanonicalEvent, normalize_envelope


PAYLOAD = {"kind": "intent", "data": {"intent_id": "intent-1"}}


def test_three_envelope_shapes_normalize_to_the_same_event():
    top_level = {"type": "artifact", "payload": PAYLOAD}
    data_wrapped = {"data": {"type": "artifact", "payload": PAYLOAD}}
    payload_typed = {"payload": {"type": "artifact", "payload": PAYLOAD}}

    expected = CanonicalEvent("artifact", PAYLOAD)
    assert normalize_envelope(top_level) == expected
    assert normalize_envelope(data_wrapped) == expected
    assert normalize_envelope(payload_typed) == expected


def test_wrapper_without_inner_payload_uses_wrapper_itself():
    event = normalize_envelope({"data": {"type": "token", "text": "hi"}})

    assert event is not None
    assert event.event_type == "token"
    assert event.payload == {"type": "token", "text": "hi"}


def test_top_level_shape_wins_over_data_wrapper():
    raw = {
        "type": "token",
        "payload": {"text": "top"},
        "data": {"type": "log", "payload": {"text": "inner"}},
    }

    event = normalize_envelope(raw)

    assert event == CanonicalEvent("token", {"text": "top"})


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "token",
        ["type", "token"],
        {},
        {"type": "token"},
        {"type": "token", "payload": "not-a-mapping"},
        {"type": "", "payload": {}},
        {"data": {"payload": {"text": "no type"}}},
    ],
)
def test_unrecognized_envelopes_are_dropped(raw, caplog):
    with caplog.at_level(logging.WARNING):
        assert normalize_envelope(raw) is None

    assert "event_dropped" in caplog.text
