"""
The evaluation contract for TALK AST nodes.

A node evaluates against a Namespace and returns a Value. The Value is either
*produced* (fresh, owned by nobody yet) or *borrowed* (the very Value held in
the namespace's storage, or in a delegate's). A borrowed result stays valid
for as long as the caller holds it, however short-lived the node was; mutating
it mutates the namespace.
"""
from abc import ABC, abstractmethod
from typing import List, Sequence

from talk.talk_datatypes import Value, Namespace, EvalError


class Eval(ABC):
    """Abstract base class for all AST nodes that can be evaluated."""

    @abstractmethod
    def eval(self, context: Namespace) -> Value:
        """Evaluates against `context`, raising EvalError on failure."""
        raise NotImplementedError


def evaluate(node: Eval, context: Namespace) -> Value:
    """Entry point for the grammar layer: evaluate `node` against `context`."""
    if not isinstance(node, Eval):
        raise TypeError(f"Cannot evaluate {type(node).__name__}")
    return node.eval(context)


# =================================================================
# Nodes
# =================================================================

class Literal(Eval):
    """A constant. Each evaluation produces a fresh copy of it."""
    def __init__(self, value: Value):
        self.value = value

    def eval(self, context: Namespace) -> Value:
        return self.value.clone()

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"

    def __eq__(self, other):
        return isinstance(other, Literal) and self.value == other.value


class Dummy(Eval):
    """Placeholder expression used before the grammar produces real nodes."""
    def eval(self, context: Namespace) -> Value:
        return Value.new_integer(42)

    def __repr__(self) -> str:
        return "Dummy()"


class FieldPath(Eval):
    """A dotted field reference such as `a.b.c`.

    Evaluates to the borrowed slot of the last name. Intermediate fields must
    be objects; missing local fields are auto-vivified by `Namespace.get`.
    """
    def __init__(self, names: Sequence[str]):
        if not names:
            raise ValueError("FieldPath must have at least one name.")
        self.names: List[str] = list(names)

    def eval(self, context: Namespace) -> Value:
        slot = self._lookup(context, self.names[0])
        for name in self.names[1:]:
            slot = self._lookup(slot.as_object(), name)
        return slot

    @staticmethod
    def _lookup(ns: Namespace, name: str) -> Value:
        slot = ns.get(name)
        if slot is None:
            raise EvalError(f"Field '{name}' not found")
        return slot

    def __repr__(self) -> str:
        return f"FieldPath({'.'.join(self.names)})"

    def __eq__(self, other):
        return isinstance(other, FieldPath) and self.names == other.names


class Assign(Eval):
    """`target = expr`: writes into the field the target names.

    The right-hand side is evaluated first, then the target, so a failing
    expression leaves no auto-vivified field behind. The stored value is a
    copy, never an alias of another slot.

    Local fields are overwritten in place through their slot. When the
    owning namespace delegates, the write goes through its `set` so the host
    sees it (and may reject it); the result is then read back with `get`.
    """
    def __init__(self, target: FieldPath, expr: Eval):
        if not isinstance(target, FieldPath):
            raise TypeError(f"Assignment target must be a FieldPath, not {type(target).__name__}")
        self.target = target
        self.expr = expr

    def eval(self, context: Namespace) -> Value:
        value = self.expr.eval(context).clone()
        owner = context
        for name in self.target.names[:-1]:
            owner = FieldPath._lookup(owner, name).as_object()
        last = self.target.names[-1]
        if owner.delegate is not None:
            owner.set(last, value)
            slot = owner.get(last)
            # write-only host field
            return slot if slot is not None else value
        slot = owner.get(last)
        slot.assign(value)
        return slot

    def __repr__(self) -> str:
        return f"Assign({self.target!r}, {self.expr!r})"
