# talk_runtime.py

import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional

from talk.talk_datatypes import Delegate, EvalError, Namespace
from talk.talk_interpreter import Eval, evaluate

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """The structured result of evaluating one node."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        return f"Error: {self.error_message or 'Unknown error'}"


class TalkRunner:
    """Owns a root namespace and evaluates nodes against it.

    A host makes its own state scriptable by passing it as `host_object`;
    it is installed as the root namespace's delegate, so every field the
    nodes touch at the root is read and written on the host.
    """

    def __init__(self, host_object: Optional[Delegate] = None, root: Optional[Namespace] = None):
        self.root = root if root is not None else Namespace()
        self.host_object = host_object
        if host_object is not None:
            self.root.install_delegate(host_object)

    def handle(self, node: Eval) -> ExecutionResult:
        """The main entry point to evaluate a node against the root namespace."""
        try:
            value = evaluate(node, self.root)
        except EvalError as e:
            logger.debug("evaluation of %r failed: %s", node, e.text)
            return ExecutionResult(status='error', error_message=e.text)
        return ExecutionResult(status='success', value=value)
