"""
A pretty-printer for TALK values.
"""
from talk.talk_datatypes import Value, Namespace


class Printer:
    """Formats TALK values into a readable literal form."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj):
        """Public entry point to format a Value or Namespace."""
        handler = self._get_handler(obj)
        return handler(obj)

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method."""
        if isinstance(obj, Value):
            return self._handlers[obj.kind]
        if isinstance(obj, Namespace):
            return self._pformat_namespace
        # Default to Python's repr for unknown types
        return repr

    def _create_handlers(self):
        return {
            Value.INT: self._pformat_int,
            Value.STRING: self._pformat_str,
            Value.BOOL: self._pformat_bool,
            Value.OBJECT: self._pformat_object,
        }

    def _pformat_int(self, obj):
        return str(obj.data)

    def _pformat_str(self, obj):
        escaped = obj.data.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'

    def _pformat_bool(self, obj):
        return 'true' if obj.data else 'false'

    def _pformat_object(self, obj):
        return self._pformat_namespace(obj.data)

    def _pformat_namespace(self, ns):
        if ns.delegate is not None:
            return f"{{<delegate {type(ns.delegate).__name__}>}}"
        if not ns.fields:
            return "{}"
        parts = [f"{k}: {self.pformat(v)}" for k, v in ns.fields.items()]
        return "{" + ", ".join(parts) + "}"
