"""Tests for message ID generation."""

from infrachat.message_ids import MESSAGE_ID_SUFFIX_LENGTH, generate_message_id, is_message_id


def test_generated_ids_have_expected_shape():
    message_id = generate_message_id()

    assert is_message_id(message_id)
    assert message_id[:-MESSAGE_ID_SUFFIX_LENGTH].isdigit()


def test_generated_ids_are_unique():
    ids = {generate_message_id() for _ in range(500)}

    assert len(ids) == 500


def test_is_message_id_rejects_other_strings():
    assert not is_message_id("")
    assert not is_message_id("abc")
    assert not is_message_id("123456789")
    assert not is_message_id("17607000001ABCDEFGHI")
    assert not is_message_id("x760700000123k3j9x0q2a")
