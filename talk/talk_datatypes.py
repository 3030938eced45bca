
"""
Defines the core data types for the TALK expression runtime.

This module provides the tagged-union `Value`, the mutable `Namespace`
object model, the `Delegate` capability that lets host structures stand in
for a namespace's own storage, and the `EvalError` raised by all of them.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterator, Optional, Union

logger = logging.getLogger(__name__)

INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


# =================================================================
# Errors
# =================================================================

class EvalError(Exception):
    """The single error kind of the runtime, carrying a human-readable message."""
    def __init__(self, text: str):
        super().__init__(text)
        self.text = text

    def __repr__(self) -> str:
        return f"EvalError({self.text!r})"


class TypeMismatch(EvalError):
    """A caller required one Value kind and got another."""
    def __init__(self, expected: str, actual: str, text: str):
        super().__init__(text)
        self.expected = expected
        self.actual = actual


# =================================================================
# Delegate capability
# =================================================================

class Delegate(ABC):
    """The required base class for any structure that backs a Namespace.

    A host registers an instance as a namespace's delegate to make its own
    state scriptable. `get` must return the live Value held by the host
    (not a copy) so that assignments through the result reach the host.
    """

    @abstractmethod
    def get(self, name: str) -> Optional['Value']: raise NotImplementedError
    @abstractmethod
    def set(self, name: str, value: 'Value') -> None: raise NotImplementedError

    def is_empty(self) -> bool:
        return False


# =================================================================
# Namespace (Object)
# =================================================================

class Namespace(Delegate):
    """A mutable field-name to Value store, optionally routed to a Delegate.

    When a delegate is installed every `get`, `set` and `is_empty` call is
    forwarded to it and the local fields are bypassed (but kept, and visible
    again after `detach_delegate`). The delegate is borrowed: the namespace
    never copies it and never tears it down.
    """
    def __init__(self):
        self.fields: Dict[str, 'Value'] = {}
        self._delegate: Optional[Delegate] = None

    @property
    def delegate(self) -> Optional[Delegate]:
        return self._delegate

    def install_delegate(self, delegate: Delegate):
        if not isinstance(delegate, Delegate):
            raise TypeError(f"Delegate expected, not {type(delegate).__name__}")
        cur = delegate
        while isinstance(cur, Namespace):
            if cur is self:
                raise ValueError("A namespace cannot delegate to itself, directly or through a chain.")
            cur = cur.delegate
        logger.debug("installing delegate %s", type(delegate).__name__)
        self._delegate = delegate

    def detach_delegate(self) -> Optional[Delegate]:
        """Removes the delegate, returning it. Local fields become active again."""
        previous = self._delegate
        self._delegate = None
        if previous is not None:
            logger.debug("detached delegate %s", type(previous).__name__)
        return previous

    def get(self, name: str) -> Optional['Value']:
        if self._delegate is not None:
            return self._delegate.get(name)
        # Undefined fields read as empty objects so partially specified
        # scripts can still load.
        if name not in self.fields:
            logger.debug("auto-vivifying field %r", name)
            self.fields[name] = Value.new_object()
        return self.fields[name]

    def set(self, name: str, value: 'Value') -> None:
        if self._delegate is not None:
            self._delegate.set(name, value)
            return
        if not isinstance(value, Value):
            raise TypeError(f"Namespace values must be Value, not {type(value).__name__}")
        if value.kind == Value.OBJECT and self._encloses(value.data):
            raise EvalError(f"Cannot store an object inside itself (field '{name}')")
        self.fields[name] = value

    def _encloses(self, ns: 'Namespace') -> bool:
        if ns is self:
            return True
        return any(v.kind == Value.OBJECT and v.data is self for _, v in _walk(ns))

    def is_empty(self) -> bool:
        if self._delegate is not None:
            return self._delegate.is_empty()
        return not self.fields

    # Local-storage views. These never consult the delegate.

    def keys(self):
        return self.fields.keys()

    def items(self):
        return self.fields.items()

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def clone(self) -> 'Namespace':
        """Deep-copies the local fields; the delegate reference is shared."""
        copy = Namespace()
        copy.fields = {k: v.clone() for k, v in self.fields.items()}
        copy._delegate = self._delegate
        return copy

    def __eq__(self, other):
        if not isinstance(other, Namespace):
            return NotImplemented
        return self.fields == other.fields

    __hash__ = None

    def __repr__(self) -> str:
        from talk.talk_printer import Printer
        return f"Namespace({Printer().pformat(self)})"


# =================================================================
# Value
# =================================================================

Payload = Union[int, str, bool, Namespace]


class Value:
    """A TALK runtime datum: one of Int, String, Bool or Object.

    A Value is also a storage slot. A Value held by a Namespace is owned by
    it; `Namespace.get` hands out that same instance, and `assign` rewrites
    it in place, which is how `a.b = 1` reaches the real field. Use `clone`
    to copy a value out.
    """
    INT = "Int"
    STRING = "String"
    BOOL = "Bool"
    OBJECT = "Object"

    _PY_TYPES = {INT: int, STRING: str, BOOL: bool, OBJECT: Namespace}

    def __init__(self, kind: str, data: Payload):
        expected = self._PY_TYPES.get(kind)
        if expected is None:
            raise ValueError(f"Unknown value kind: {kind!r}")
        # bool is an int subclass; keep the variants apart.
        if type(data) is not expected and not (kind == Value.OBJECT and isinstance(data, Namespace)):
            raise TypeError(f"{kind} value requires {expected.__name__}, not {type(data).__name__}")
        if kind == Value.INT and not INT_MIN <= data <= INT_MAX:
            raise EvalError(f"Integer out of 64-bit range: {data}")
        self.kind = kind
        self.data = data

    @classmethod
    def new_object(cls) -> 'Value':
        return cls(cls.OBJECT, Namespace())

    @classmethod
    def new_text(cls, s: str) -> 'Value':
        return cls(cls.STRING, s)

    @classmethod
    def new_integer(cls, i: int) -> 'Value':
        return cls(cls.INT, i)

    @classmethod
    def new_boolean(cls, b: bool) -> 'Value':
        return cls(cls.BOOL, b)

    def as_bool(self) -> bool:
        if self.kind == Value.INT:
            return self.data != 0
        if self.kind == Value.STRING:
            return self.data != ""
        if self.kind == Value.BOOL:
            return self.data
        return not self.data.is_empty()

    def as_object(self) -> Namespace:
        """Returns the inner Namespace itself, for mutation in place."""
        if self.kind != Value.OBJECT:
            raise TypeMismatch(Value.OBJECT, self.kind, f"Object expected, got {self.kind}")
        return self.data

    def into_integer(self) -> int:
        match self.kind:
            case Value.INT:
                return self.data
            case Value.STRING:
                detail = f"String {self.data}"
            case Value.BOOL:
                detail = f"Bool {'true' if self.data else 'false'}"
            case _:
                detail = self.kind
        raise TypeMismatch(Value.INT, self.kind, f"Integer value expected, got {detail}")

    def assign(self, other: 'Value'):
        """Overwrites this slot with `other`'s variant and payload.

        The payload is moved, not copied: `other` should not be used
        afterwards unless it was a fresh value.
        """
        if not isinstance(other, Value):
            raise TypeError(f"Value expected, not {type(other).__name__}")
        if other is self:
            return
        if other.kind == Value.OBJECT and any(v is self for _, v in _walk(other.data)):
            raise EvalError("Cannot assign an object into itself")
        self.kind = other.kind
        self.data = other.data

    def clone(self) -> 'Value':
        if self.kind == Value.OBJECT:
            return Value(Value.OBJECT, self.data.clone())
        return Value(self.kind, self.data)

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self.kind == other.kind and self.data == other.data

    __hash__ = None

    def __bool__(self) -> bool:
        return self.as_bool()

    def __repr__(self) -> str:
        from talk.talk_printer import Printer
        return f"Value<{self.kind}>({Printer().pformat(self)})"


def _walk(ns: Namespace) -> Iterator[tuple]:
    """Yields (owner, value) for every value stored beneath `ns`, depth first."""
    stack = [ns]
    while stack:
        cur = stack.pop()
        for v in cur.fields.values():
            yield cur, v
            if v.kind == Value.OBJECT:
                stack.append(v.data)
