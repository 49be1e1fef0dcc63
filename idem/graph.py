"""
Idem Call Graph
===============
Extracts caller → callee edges from an AST and renders them in the
Graphviz `digraph` text format.

One node per function definition; one edge per call site, natives included,
so repeated calls produce repeated edges.
"""
from dataclasses import dataclass, field

from .parser import ASTNode, ProgramNode, FunctionCallNode, BranchNode


def _quote(text: str) -> str:
    """Render `text` as a DOT double-quoted identifier."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass
class Node:
    id: str
    label: str

    def __str__(self) -> str:
        return f"{_quote(self.id)} [label={_quote(self.label)}];"


@dataclass
class Edge:
    source: str
    destination: str

    def __str__(self) -> str:
        return f"{_quote(self.source)} -> {_quote(self.destination)};"


@dataclass
class Digraph:
    """A directed graph with a title, rendered by str()."""
    title: str
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def __str__(self) -> str:
        nodes = "\n".join(f"\t{n}" for n in self.nodes)
        edges = "\n".join(f"\t{e}" for e in self.edges)
        return f"digraph {_quote(self.title)} {{\n{nodes}\n{edges}\n}}"


def function_calls_graph(title: str, ast: ProgramNode) -> Digraph:
    """Build the call graph of every function in `ast`."""
    graph = Digraph(title)
    for function in ast.statements:
        graph.nodes.append(Node(function.name, function.name))
        _collect_calls(function.body, function.name, graph)
    return graph


def _collect_calls(node: ASTNode, caller: str, graph: Digraph):
    if isinstance(node, FunctionCallNode):
        graph.edges.append(Edge(caller, node.name))
        for parameter in node.parameters:
            _collect_calls(parameter, caller, graph)
    elif isinstance(node, BranchNode):
        _collect_calls(node.condition, caller, graph)
        _collect_calls(node.then, caller, graph)
        _collect_calls(node.otherwise, caller, graph)
