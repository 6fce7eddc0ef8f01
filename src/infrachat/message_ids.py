"""Message ID generation for transcript entries.

IDs are created locally without central allocation: the current time in
milliseconds followed by a short random base-36 suffix. Uniqueness is a soft
invariant; it is not cryptographically guaranteed.
"""

import random
import string

from .time_utils import epoch_millis


MESSAGE_ID_SUFFIX_LENGTH = 9
_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase


def _random_suffix(length: int = MESSAGE_ID_SUFFIX_LENGTH) -> str:
    return "".join(random.choice(_SUFFIX_ALPHABET) for _ in range(length))


def generate_message_id() -> str:
    """Generate a new message ID.

    Returns:
        ID string such as ``"1760700000123k3j9x0q2a"``
    """
    return f"{epoch_millis()}{_random_suffix()}"


def is_message_id(value: str) -> bool:
    """Check if a string looks like a generated message ID.

    Args:
        value: String to check

    Returns:
        True when value is a decimal timestamp followed by a base-36 suffix
    """
    if not value or not isinstance(value, str):
        return False

    if len(value) <= MESSAGE_ID_SUFFIX_LENGTH:
        return False

    timestamp = value[:-MESSAGE_ID_SUFFIX_LENGTH]
    suffix = value[-MESSAGE_ID_SUFFIX_LENGTH:]
    if not timestamp.isdigit() or not timestamp.isascii():
        return False
    return all(c in _SUFFIX_ALPHABET for c in suffix)
