"""
Structural pattern matching for bus messages

A pattern is a partial template: a message matches when every key in the
pattern is present in the message with an equal value. Nested mappings are
matched recursively, so a nested pattern is itself a partial template.
Extra keys in the message are ignored and the empty pattern matches anything.
"""

from collections.abc import Mapping
from typing import Any


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _values_equal(message_value: Any, pattern_value: Any) -> bool:
    """Exact equality, applied element-wise inside lists, tuples and mappings"""
    # bool is an int subclass; True must not match 1
    if isinstance(message_value, bool) or isinstance(pattern_value, bool):
        return type(message_value) is type(pattern_value) and message_value == pattern_value

    if isinstance(message_value, (list, tuple)) and isinstance(pattern_value, (list, tuple)):
        return (
            type(message_value) is type(pattern_value)
            and len(message_value) == len(pattern_value)
            and all(map(_values_equal, message_value, pattern_value))
        )

    if is_mapping(message_value) and is_mapping(pattern_value):
        return (
            message_value.keys() == pattern_value.keys()
            and all(_values_equal(message_value[key], pattern_value[key]) for key in pattern_value)
        )

    return message_value == pattern_value


def match(message: Any, pattern: Any) -> bool:
    """
    Check whether a message satisfies a pattern

    Args:
        message: Published message, normally a mapping
        pattern: Partial template to test against

    Returns:
        True if every key of the pattern is satisfied by the message.
        A pattern that is not a mapping never matches.
    """
    if not is_mapping(pattern):
        return False

    if not pattern:
        return True

    if not is_mapping(message):
        return False

    for key, pattern_value in pattern.items():
        if key not in message:
            return False

        message_value = message[key]

        if is_mapping(pattern_value) and is_mapping(message_value):
            if not match(message_value, pattern_value):
                return False
        elif not _values_equal(message_value, pattern_value):
            return False

    return True
