from __future__ import annotations

import json
from typing import Any, Optional
import collections.abc

import yaml

from talk.talk_datatypes import Value, Namespace, EvalError


# --------------------------
# Helpers
# --------------------------

def to_builtin(value: Value | Namespace) -> Any:
    """Converts a Value to plain Python data.

    Objects become dicts with their fields flattened in; scalars play
    themselves. A delegating namespace contributes only its local fields.
    """
    if isinstance(value, Namespace):
        return {k: to_builtin(v) for k, v in value.fields.items()}
    if value.kind == Value.OBJECT:
        return to_builtin(value.data)
    return value.data


def from_builtin(data: Any) -> Value:
    """Converts plain Python data (as loaded from JSON/YAML) to a Value."""
    # bool before int: True is an int too.
    if isinstance(data, bool):
        return Value.new_boolean(data)
    if isinstance(data, int):
        return Value.new_integer(data)
    if isinstance(data, str):
        return Value.new_text(data)
    if isinstance(data, collections.abc.Mapping):
        obj = Value.new_object()
        ns = obj.as_object()
        for k, v in data.items():
            if not isinstance(k, str):
                raise EvalError(f"Object field names must be strings, got {k!r}")
            ns.set(k, from_builtin(v))
        return obj
    raise EvalError(f"Cannot convert {type(data).__name__} to a value")


def detect_format(data_hint: Optional[str] = None) -> str:
    """
    Returns 'json' when the text looks like a JSON document, else 'yaml'
    (YAML is a superset and also loads bare scalars).
    """
    if data_hint is not None and data_hint.lstrip().startswith('{'):
        return 'json'
    return 'yaml'


# --------------------------
# Public API
# --------------------------

def serialize(value: Value | Namespace, *, fmt: str = 'json', pretty: bool = True) -> str:
    """
    Convert a Value into text.
    - fmt: 'json' | 'yaml'
    """
    f = (fmt or '').lower()
    built = to_builtin(value)
    if f == 'json':
        return json.dumps(built, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(built, sort_keys=False, default_flow_style=not pretty)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


def deserialize(data: bytes | bytearray | str, *, fmt: Optional[str] = None) -> Value:
    """
    Convert text (or UTF-8 bytes) into a Value.
    If fmt is None, the format is sniffed from the data.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EvalError(f"Invalid UTF-8: {e}") from e
    else:
        text = data
    f = (fmt or detect_format(text)).lower()
    if f == 'json':
        try:
            built = json.loads(text)
        except json.JSONDecodeError as e:
            raise EvalError(f"Invalid JSON: {e}") from e
    elif f == 'yaml':
        try:
            built = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise EvalError(f"Invalid YAML: {e}") from e
    else:
        raise ValueError(f"Unsupported serialization format: {fmt!r}")
    return from_builtin(built)


__all__ = [
    "to_builtin",
    "from_builtin",
    "detect_format",
    "deserialize",
    "serialize",
]
