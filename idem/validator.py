"""
Idem Validator
==============
Static analysis pass that runs after parsing (before execution).

Checks:
  1. Function names — repeated definitions and definitions shadowing natives
  2. Parameters — duplicate names within one function
  3. Calls — unknown functions and arity mismatches (user and native)
  4. Variables — references to names that are not parameters
  5. Branches — empty conditions
  6. Usage — parameters never referenced, non-main functions never called

The validator only reports: it never mutates the AST and never stops at the
first problem. Callers decide whether reports block execution.
"""
from dataclasses import dataclass, field

from .lexer import Location
from .natives import NATIVE_REGISTRY
from .parser import (
    ASTNode, ProgramNode, FunctionDefinitionNode, VariableDefinition,
    FunctionCallNode, BranchNode, VariableNode, EmptyNode,
)


ENTRY_POINT = "main"


@dataclass
class Report:
    """A single validation diagnostic."""
    location: Location
    message: str

    def __str__(self) -> str:
        return f"{self.location} {self.message}"


@dataclass
class _Prototype:
    location: Location
    parameters: list[VariableDefinition]
    calls: int = 0


@dataclass
class _Variable:
    location: Location
    uses: int = 0


@dataclass
class _Scope:
    function: FunctionDefinitionNode
    variables: dict[str, _Variable] = field(default_factory=dict)


class Validator:
    """
    Static analysis for Idem programs.

    Usage:
        validator = Validator()
        reports = validator.validate(ast)
        for report in reports:
            print(report)
    """

    def __init__(self):
        self.reports: list[Report] = []
        self._prototypes: dict[str, _Prototype] = {}

    def validate(self, ast: ProgramNode) -> list[Report]:
        """Run all checks on the AST. Returns reports in discovery order."""
        self.reports = []
        self._prototypes = {}

        self._collect_prototypes(ast)

        for function in ast.statements:
            self._check_function(function)

        for name, prototype in self._prototypes.items():
            if name != ENTRY_POINT and prototype.calls == 0:
                self._add(prototype.location, f'function "{name}" is never used')

        return list(self.reports)

    def _add(self, location: Location, message: str):
        self.reports.append(Report(location, message))

    # ─────────────────────────────────────────────────────────
    #  Definitions
    # ─────────────────────────────────────────────────────────

    def _collect_prototypes(self, ast: ProgramNode):
        """Build the global function table. The last definition of a name wins."""
        for function in ast.statements:
            if function.name in self._prototypes:
                self._add(function.location, f'function "{function.name}" is already defined')
            if function.name in NATIVE_REGISTRY:
                self._add(function.location, f'function "{function.name}" shadows a native function')
            self._prototypes[function.name] = _Prototype(function.location, function.parameters)

    def _check_function(self, function: FunctionDefinitionNode):
        scope = _Scope(function)

        for parameter in function.parameters:
            if parameter.name in scope.variables:
                self._add(
                    parameter.location,
                    f'duplicate argument "{parameter.name}" in function "{function.name}"',
                )
            else:
                scope.variables[parameter.name] = _Variable(parameter.location)

        self._check_expression(function.body, scope)

        for name, variable in scope.variables.items():
            if variable.uses == 0:
                self._add(variable.location, f'variable "{name}" is never used')

    # ─────────────────────────────────────────────────────────
    #  Expressions
    # ─────────────────────────────────────────────────────────

    def _check_expression(self, node: ASTNode, scope: _Scope):
        if isinstance(node, FunctionCallNode):
            self._check_call(node, scope)
        elif isinstance(node, BranchNode):
            if isinstance(node.condition, EmptyNode):
                self._add(node.location, "empty branch condition")
            else:
                self._check_expression(node.condition, scope)
            self._check_expression(node.then, scope)
            self._check_expression(node.otherwise, scope)
        elif isinstance(node, VariableNode):
            variable = scope.variables.get(node.name)
            if variable is None:
                self._add(node.location, f'unknown variable "{node.name}"')
            else:
                variable.uses += 1

    def _check_call(self, node: FunctionCallNode, scope: _Scope):
        prototype = self._prototypes.get(node.name)
        if prototype is not None:
            prototype.calls += 1
            self._check_arity(node, len(prototype.parameters))
        elif node.name in NATIVE_REGISTRY:
            self._check_arity(node, NATIVE_REGISTRY[node.name].arity)
        else:
            self._add(node.location, f'unknown function "{node.name}"')

        for parameter in node.parameters:
            self._check_expression(parameter, scope)

    def _check_arity(self, node: FunctionCallNode, expected: int):
        received = len(node.parameters)
        if expected != received:
            self._add(
                node.location,
                f'function "{node.name}" accepts {expected} arguments '
                f'but received {received} parameters',
            )


def validate(ast: ProgramNode) -> list[Report]:
    """Convenience wrapper around Validator().validate()."""
    return Validator().validate(ast)
