"""
Idem Parser
===========
Recursive-descent parser that builds an Abstract Syntax Tree (AST)
from the token list produced by the Lexer.

Grammar:
    program     := function*
    function    := WORD "(" (WORD ","?)* ")" block
    block       := "{" expression? "}"
    expression  := "if" expression block ("else" block)?
                 | WORD "(" (expression ","?)* ")"
                 | WORD

A bare word is a literal when it reads as an unsigned 32-bit integer and a
variable reference otherwise. Parsing stops at the first error.
"""
import re
from dataclasses import dataclass, field

from .lexer import Location, Token, TokenType


U32_MAX = 0xFFFFFFFF

_NUMBER = re.compile(r"\+?[0-9]+")


# ─────────────────────────────────────────────────────────────
#  AST Node Types
# ─────────────────────────────────────────────────────────────
#
#  Locations are excluded from equality so that two trees parsed from
#  differently laid out sources compare equal when they mean the same thing.

@dataclass
class ASTNode:
    """Base class for all AST nodes."""
    node_type: str = field(default="", compare=False)
    location: Location | None = field(default=None, compare=False)


@dataclass
class EmptyNode(ASTNode):
    """The absence of a value: an empty body, block or omitted else."""

    def __post_init__(self):
        self.node_type = "Empty"


@dataclass
class LiteralNode(ASTNode):
    """An unsigned 32-bit integer literal."""
    value: int = 0

    def __post_init__(self):
        self.node_type = "Literal"


@dataclass
class VariableNode(ASTNode):
    """A reference to a function parameter."""
    name: str = ""

    def __post_init__(self):
        self.node_type = "Variable"


@dataclass
class FunctionCallNode(ASTNode):
    """A call to a user-defined or native function: name(p1, p2)."""
    name: str = ""
    parameters: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "FunctionCall"


@dataclass
class BranchNode(ASTNode):
    """A conditional: if cond { then } else { otherwise }."""
    condition: ASTNode = field(default_factory=EmptyNode)
    then: ASTNode = field(default_factory=EmptyNode)
    otherwise: ASTNode = field(default_factory=EmptyNode)

    def __post_init__(self):
        self.node_type = "Branch"


@dataclass
class VariableDefinition(ASTNode):
    """A function parameter declaration."""
    name: str = ""

    def __post_init__(self):
        self.node_type = "VariableDefinition"


@dataclass
class FunctionDefinitionNode(ASTNode):
    """A top-level function: name(a, b) { body }."""
    name: str = ""
    parameters: list[VariableDefinition] = field(default_factory=list)
    body: ASTNode = field(default_factory=EmptyNode)

    def __post_init__(self):
        self.node_type = "FunctionDefinition"


@dataclass
class ProgramNode(ASTNode):
    """Root node containing all top-level statements."""
    statements: list[FunctionDefinitionNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "Program"

    @property
    def functions(self) -> dict[str, FunctionDefinitionNode]:
        """Name → definition table. A repeated name keeps the last definition."""
        return {stmt.name: stmt for stmt in self.statements}


# ─────────────────────────────────────────────────────────────
#  Syntax Error
# ─────────────────────────────────────────────────────────────

class IdemSyntaxError(SyntaxError):
    """A located syntax error. Renders as `path:line:column message`."""

    def __init__(self, message: str, location: Location):
        self.message = message
        self.location = location
        super().__init__(f"{location} {message}")

    def __str__(self) -> str:
        return f"{self.location} {self.message}"


# ─────────────────────────────────────────────────────────────
#  Parser
# ─────────────────────────────────────────────────────────────

class Parser:
    """
    Recursive-descent parser for Idem source.

    Usage:
        parser = Parser(tokens)
        ast = parser.parse()
    """

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    def _current(self) -> Token | None:
        if self.pos >= len(self.tokens):
            return None
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self._require()
        self.pos += 1
        return token

    def _require(self) -> Token:
        """Return the current token, failing if the input is exhausted."""
        token = self._current()
        if token is None:
            raise self._error("unexpected end of input")
        return token

    def _check(self, token_type: TokenType) -> bool:
        token = self._current()
        return token is not None and token.type == token_type

    def _expect(self, token_type: TokenType, description: str) -> Token:
        token = self._require()
        if token.type != token_type:
            raise self._error(f"expected {description}", token)
        return self._advance()

    def _error(self, message: str, token: Token | None = None) -> IdemSyntaxError:
        if token is None:
            token = self._current()
        if token is None:
            location = self.tokens[-1].location if self.tokens else Location("<input>", 1, 1)
        else:
            location = token.location
        return IdemSyntaxError(message, location)

    # ─────────────────────────────────────────────────────────
    #  Top-Level Parsing
    # ─────────────────────────────────────────────────────────

    def parse(self) -> ProgramNode:
        """Parse the token list into a ProgramNode."""
        first = self.tokens[0].location if self.tokens else None
        program = ProgramNode(location=first)

        while self._current() is not None:
            program.statements.append(self._parse_function_definition())

        return program

    def _parse_function_definition(self) -> FunctionDefinitionNode:
        """Parse: name(a, b) { body }"""
        name_token = self._expect(TokenType.WORD, "a function name")
        self._expect(TokenType.LPAREN, "an opening parenthesis")

        parameters = []
        while not self._check(TokenType.RPAREN):
            token = self._require()
            if not token.is_word:
                raise self._error("expected a closing parenthesis or a word", token)
            self._advance()
            parameters.append(VariableDefinition(name=token.value, location=token.location))
            if self._check(TokenType.COMMA):
                self._advance()
        self._advance()  # consume )

        body = self._parse_block()
        return FunctionDefinitionNode(
            name=name_token.value,
            parameters=parameters,
            body=body,
            location=name_token.location,
        )

    def _parse_block(self) -> ASTNode:
        """Parse: { expression } or {} (Empty)."""
        open_token = self._expect(TokenType.LBRACE, "an opening brace")
        if self._check(TokenType.RBRACE):
            self._advance()
            return EmptyNode(location=open_token.location)

        expression = self._parse_expression()
        self._expect(TokenType.RBRACE, "a closing brace")
        return expression

    # ─────────────────────────────────────────────────────────
    #  Expressions
    # ─────────────────────────────────────────────────────────

    def _parse_expression(self) -> ASTNode:
        """Parse a branch, a call, a literal or a variable reference."""
        token = self._require()
        if not token.is_word:
            raise self._error("expected a word", token)

        if token.value == "if":
            return self._parse_branch()

        self._advance()

        if self._check(TokenType.LPAREN):
            return self._parse_call(token)

        if _NUMBER.fullmatch(token.value):
            value = int(token.value)
            if value <= U32_MAX:
                return LiteralNode(value=value, location=token.location)

        return VariableNode(name=token.value, location=token.location)

    def _parse_branch(self) -> BranchNode:
        """Parse: if cond { then } [else { otherwise }]"""
        if_token = self._advance()  # consume 'if'
        condition = self._parse_expression()
        then = self._parse_block()

        current = self._current()
        if current is not None and current.is_word and current.value == "else":
            self._advance()
            otherwise = self._parse_block()
        else:
            otherwise = EmptyNode(location=if_token.location)

        return BranchNode(
            condition=condition,
            then=then,
            otherwise=otherwise,
            location=if_token.location,
        )

    def _parse_call(self, name_token: Token) -> FunctionCallNode:
        """Parse the parameter list of: name(p1, p2)"""
        self._advance()  # consume (
        parameters = []
        while not self._check(TokenType.RPAREN):
            parameters.append(self._parse_expression())
            if self._check(TokenType.COMMA):
                self._advance()
        self._advance()  # consume )

        return FunctionCallNode(
            name=name_token.value,
            parameters=parameters,
            location=name_token.location,
        )


def parse(tokens: list[Token]) -> ProgramNode:
    """Convenience wrapper: parse a token list into a ProgramNode."""
    return Parser(tokens).parse()
