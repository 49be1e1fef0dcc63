# Idem — a minimal expression language toolchain
"""
Idem: lexer, parser, validator and tree-walking interpreter for a small
expression-based language over unsigned 32-bit integers.
"""
from .lexer import Lexer, Location, Token, TokenType, tokenize
from .parser import (
    Parser, IdemSyntaxError, parse,
    ASTNode, ProgramNode, FunctionDefinitionNode, VariableDefinition,
    FunctionCallNode, BranchNode, VariableNode, LiteralNode, EmptyNode,
)
from .natives import NATIVE_REGISTRY, NativeInfo
from .validator import Validator, Report, validate
from .interpreter import Interpreter, IdemError, Frame
from .tracing import CallObserver, LoggingObserver, RecordingObserver
from .formatter import format_program
from .graph import Digraph, function_calls_graph
from .reader import SourceFileError, read_source
from .config import IdemConfig

__version__ = "0.1.0"
__all__ = [
    "Lexer", "Location", "Token", "TokenType", "tokenize",
    "Parser", "IdemSyntaxError", "parse",
    "ASTNode", "ProgramNode", "FunctionDefinitionNode", "VariableDefinition",
    "FunctionCallNode", "BranchNode", "VariableNode", "LiteralNode", "EmptyNode",
    "NATIVE_REGISTRY", "NativeInfo",
    "Validator", "Report", "validate",
    "Interpreter", "IdemError", "Frame",
    "CallObserver", "LoggingObserver", "RecordingObserver",
    "format_program",
    "Digraph", "function_calls_graph",
    "SourceFileError", "read_source",
    "IdemConfig",
]
