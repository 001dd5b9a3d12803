"""
Name: Argument values.
Description: Classifies the dynamic values found in a tool's argument bag and defines how each kind
is rendered into URLs, headers, form fields, and enum lists.
"""

import json
from enum import Enum
from typing import Any, List


class ValueKind(str, Enum):
    """JSON value kinds an argument can carry."""

    string = "string"
    number = "number"
    boolean = "boolean"
    object = "object"
    array = "array"
    null = "null"


def kind_of(value: Any) -> ValueKind:
    """Classify an argument value.

    Args:
        value: A value decoded from a tool call

    Returns:
        The value's kind

    Raises:
        TypeError: If the value is not a JSON-compatible Python value
    """
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return ValueKind.boolean
    if value is None:
        return ValueKind.null
    if isinstance(value, str):
        return ValueKind.string
    if isinstance(value, (int, float)):
        return ValueKind.number
    if isinstance(value, dict):
        return ValueKind.object
    if isinstance(value, (list, tuple)):
        return ValueKind.array
    raise TypeError(f"Unsupported argument value of type {type(value).__name__}")


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def stringify(value: Any) -> str:
    """Render a value as a single string.

    Strings are used as-is, booleans become ``true``/``false``, numbers drop a
    zero fraction, null becomes an empty string, arrays are comma-joined and
    objects are compact JSON.
    """
    kind = kind_of(value)
    if kind == ValueKind.string:
        return value
    if kind == ValueKind.boolean:
        return "true" if value else "false"
    if kind == ValueKind.number:
        return _format_number(value)
    if kind == ValueKind.null:
        return ""
    if kind == ValueKind.array:
        return ",".join(stringify(item) for item in value)
    return json.dumps(value, separators=(",", ":"))


def expand(value: Any) -> List[str]:
    """Render a value as one string per repeated field.

    Arrays produce one entry per element; everything else a single entry.
    """
    if kind_of(value) == ValueKind.array:
        return [stringify(item) for item in value]
    return [stringify(value)]
