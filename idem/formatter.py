"""
Idem Formatter
==============
Renders an AST back to canonical Idem source. Parsing the output yields
a tree equal to the input (locations aside).

Layout: one blank line between functions, bodies indented with one tab,
branches always on several lines, `else` omitted when it is empty.
"""
from .parser import (
    ASTNode, ProgramNode, FunctionDefinitionNode, FunctionCallNode,
    BranchNode, VariableNode, LiteralNode, EmptyNode,
)


INDENT = "\t"


def _indent(text: str) -> str:
    return "\n".join(f"{INDENT}{line}" if line else line for line in text.splitlines())


def _block(text: str) -> str:
    return "{\n" + _indent(text) + "\n}"


def format_expression(node: ASTNode) -> str:
    """Render a single expression."""
    if isinstance(node, EmptyNode):
        return ""
    if isinstance(node, LiteralNode):
        return str(node.value)
    if isinstance(node, VariableNode):
        return node.name
    if isinstance(node, FunctionCallNode):
        params = ", ".join(format_expression(p) for p in node.parameters)
        return f"{node.name}({params})"
    if isinstance(node, BranchNode):
        text = f"if {format_expression(node.condition)} {_block(format_expression(node.then))}"
        if not isinstance(node.otherwise, EmptyNode):
            text += f" else {_block(format_expression(node.otherwise))}"
        return text
    raise TypeError(f"cannot format {node.node_type or type(node).__name__} node")


def format_function(node: FunctionDefinitionNode) -> str:
    """Render a function definition."""
    params = ", ".join(p.name for p in node.parameters)
    return f"{node.name}({params}) {_block(format_expression(node.body))}"


def format_program(ast: ProgramNode) -> str:
    """Render a whole program, without a trailing newline."""
    return "\n\n".join(format_function(stmt) for stmt in ast.statements)
