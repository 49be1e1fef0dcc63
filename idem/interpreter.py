"""
Idem Interpreter
================
Tree-walking interpreter that executes the AST produced by the Parser.

Evaluation is call-by-value. Every function invocation gets a fresh Frame
holding only its own parameters; frames never see the caller's bindings.
Runtime anomalies raise IdemError so an embedding host can report them and
carry on.
"""
import logging
import sys
from typing import Callable, Optional

from .lexer import Location
from .natives import NATIVE_REGISTRY
from .parser import (
    ASTNode, ProgramNode, FunctionDefinitionNode, FunctionCallNode,
    BranchNode, VariableNode, LiteralNode, EmptyNode,
)
from .tracing import CallObserver


logger = logging.getLogger(__name__)

ENTRY_POINT = "main"

# Upper bound on host stack frames consumed by one level of Idem recursion.
_FRAMES_PER_CALL = 8

# Host recursion limit used when no max_depth is set.
_HOST_RECURSION_LIMIT = 400_000


class IdemError(Exception):
    """Runtime error during Idem execution."""

    def __init__(self, message: str, location: Location | None = None):
        self.message = message
        self.location = location
        super().__init__(message)

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.location} {self.message}"


class Frame:
    """The bindings of a single function invocation."""

    def __init__(self, function: str, bindings: dict[str, int] | None = None):
        self.function = function
        self.bindings: dict[str, int] = dict(bindings or {})

    def get(self, node: VariableNode) -> int:
        if node.name in self.bindings:
            return self.bindings[node.name]
        raise IdemError(
            f'unbound variable "{node.name}" in function "{self.function}"', node.location
        )

    def __repr__(self) -> str:
        return f"Frame({self.function!r}, {self.bindings!r})"


class Interpreter:
    """
    Tree-walking interpreter for Idem programs.

    Usage:
        interp = Interpreter()
        interp.run(ast)

    `output_fn` receives each value written by `print` as a decimal string
    (defaults to the builtin print). `observer` is notified around every call.
    `max_depth` caps nested calls; by default recursion is bounded only by
    the host stack.
    """

    def __init__(
        self,
        output_fn: Callable[[str], None] | None = None,
        observer: CallObserver | None = None,
        max_depth: int | None = None,
    ):
        self.output_fn = output_fn or (lambda s: print(s))
        self.observer = observer or CallObserver()
        self.max_depth = max_depth
        self.functions: dict[str, FunctionDefinitionNode] = {}
        self._depth = 0

    def run(self, ast: ProgramNode) -> Optional[int]:
        """Execute `main`. Returns main's value (None when it yields nothing)."""
        self.functions = ast.functions
        self._depth = 0

        main = self.functions.get(ENTRY_POINT)
        if main is None:
            raise IdemError(f'no "{ENTRY_POINT}" function', ast.location)
        if main.parameters:
            raise IdemError(
                f'function "{ENTRY_POINT}" must not accept arguments '
                f'but declares {len(main.parameters)}',
                main.location,
            )

        logger.debug("running %d function(s)", len(self.functions))
        previous_limit = sys.getrecursionlimit()
        if self.max_depth is None:
            needed = _HOST_RECURSION_LIMIT
        else:
            needed = self.max_depth * _FRAMES_PER_CALL + previous_limit
        if needed > previous_limit:
            sys.setrecursionlimit(needed)
        try:
            result = self.evaluate(main.body, Frame(ENTRY_POINT))
        except RecursionError:
            raise IdemError("maximum call depth exceeded") from None
        finally:
            sys.setrecursionlimit(previous_limit)
        logger.debug("main returned %s", result)
        return result

    def evaluate(self, node: ASTNode, frame: Frame) -> Optional[int]:
        """Evaluate an expression in `frame`."""
        method = f"_exec_{node.node_type.lower()}"
        executor = getattr(self, method, None)
        if executor is None:
            raise IdemError(f"cannot evaluate {node.node_type} node", node.location)
        return executor(node, frame)

    # ─────────────────────────────────────────────────────────
    #  Expressions
    # ─────────────────────────────────────────────────────────

    def _exec_empty(self, node: EmptyNode, frame: Frame) -> None:
        return None

    def _exec_literal(self, node: LiteralNode, frame: Frame) -> int:
        return node.value

    def _exec_variable(self, node: VariableNode, frame: Frame) -> int:
        return frame.get(node)

    def _exec_branch(self, node: BranchNode, frame: Frame) -> Optional[int]:
        """Only the value 1 selects the then-branch."""
        condition = self.evaluate(node.condition, frame)
        if condition is None:
            raise IdemError("branch condition yields no value", node.location)
        if condition == 1:
            return self.evaluate(node.then, frame)
        return self.evaluate(node.otherwise, frame)

    def _exec_functioncall(self, node: FunctionCallNode, frame: Frame) -> Optional[int]:
        arguments = []
        for index, parameter in enumerate(node.parameters, start=1):
            value = self.evaluate(parameter, frame)
            if value is None:
                raise IdemError(
                    f'parameter {index} of "{node.name}" yields no value', parameter.location
                )
            arguments.append(value)

        self._depth += 1
        try:
            if self.max_depth is not None and self._depth > self.max_depth:
                raise IdemError("maximum call depth exceeded", node.location)
            self.observer.enter_call(node, arguments, self._depth)
            if node.name in NATIVE_REGISTRY:
                result = self._call_native(node, arguments)
            else:
                result = self._call_function(node, arguments)
            self.observer.exit_call(node, result, self._depth)
        finally:
            self._depth -= 1
        return result

    # ─────────────────────────────────────────────────────────
    #  Calls
    # ─────────────────────────────────────────────────────────

    def _call_native(self, node: FunctionCallNode, arguments: list[int]) -> Optional[int]:
        native = NATIVE_REGISTRY[node.name]
        self._check_arity(node, native.arity, len(arguments))
        value = native.apply(*arguments)
        if not native.yields:
            self.output_fn(str(value))
            return None
        return value

    def _call_function(self, node: FunctionCallNode, arguments: list[int]) -> Optional[int]:
        function = self.functions.get(node.name)
        if function is None:
            raise IdemError(f'unknown function "{node.name}"', node.location)
        self._check_arity(node, len(function.parameters), len(arguments))

        callee = Frame(
            function.name,
            {p.name: value for p, value in zip(function.parameters, arguments)},
        )
        return self.evaluate(function.body, callee)

    def _check_arity(self, node: FunctionCallNode, expected: int, received: int):
        if expected != received:
            raise IdemError(
                f'function "{node.name}" accepts {expected} arguments '
                f'but received {received} parameters',
                node.location,
            )
