"""
Idem Lexer
==========
Tokenizes Idem source code into a flat list of located tokens.

The lexer is context-free: it only knows words and symbols. Deciding whether
a word is a keyword, a number, a variable or a function name is left to the
parser.
"""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator


class TokenType(Enum):
    """All token types produced by the lexer."""
    WORD        = auto()   # any run of non-delimiter characters

    # Symbols
    LPAREN      = auto()   # (
    RPAREN      = auto()   # )
    LBRACE      = auto()   # {
    RBRACE      = auto()   # }
    LBRACKET    = auto()   # [
    RBRACKET    = auto()   # ]
    COMMA       = auto()   # ,
    COLON       = auto()   # :


@dataclass(frozen=True)
class Location:
    """A position in a source file (1-based line and column)."""
    path: str
    line: int
    col: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.col}"


@dataclass(frozen=True)
class Token:
    """A single token from the Idem source."""
    type: TokenType
    value: str
    location: Location

    @property
    def is_word(self) -> bool:
        return self.type == TokenType.WORD

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, L{self.location.line}:{self.location.col})"


SYMBOLS = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
}

TAB_WIDTH = 4


class Lexer:
    """
    Tokenizes Idem source code.

    Usage:
        lexer = Lexer(source_code, "hello.id")
        tokens = lexer.tokenize()
    """

    def __init__(self, source: str, path: str = "<input>"):
        self.source = source
        self.path = path
        self.line = 1
        self.col = 1
        self._word: list[str] = []
        self._word_start: Location | None = None
        self._in_comment = False

    def _location(self) -> Location:
        return Location(self.path, self.line, self.col)

    def _flush_word(self) -> Iterator[Token]:
        """Emit the pending word, if any, and advance past it."""
        if not self._word:
            return
        word = "".join(self._word)
        yield Token(TokenType.WORD, word, self._word_start)
        self.col += len(word)
        self._word = []
        self._word_start = None

    def _newline(self):
        self.line += 1
        self.col = 1

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source into a list of tokens."""
        return list(self._iter_tokens())

    def _iter_tokens(self) -> Iterator[Token]:
        """Generate tokens one at a time."""
        for ch in self.source:
            if self._in_comment:
                if ch == "\n":
                    self._in_comment = False
                    self._newline()
                else:
                    self.col += 1
                continue

            if ch in SYMBOLS:
                yield from self._flush_word()
                yield Token(SYMBOLS[ch], ch, self._location())
                self.col += 1
            elif ch == "#":
                yield from self._flush_word()
                self._in_comment = True
                self.col += 1
            elif ch == "\n":
                yield from self._flush_word()
                self._newline()
            elif ch == "\t":
                yield from self._flush_word()
                self.col += TAB_WIDTH
            elif ch == " ":
                yield from self._flush_word()
                self.col += 1
            elif ch == "\r":
                yield from self._flush_word()
            else:
                if not self._word:
                    self._word_start = self._location()
                self._word.append(ch)

        yield from self._flush_word()


def tokenize(source: str, path: str = "<input>") -> list[Token]:
    """Convenience wrapper: tokenize `source` read from `path`."""
    return Lexer(source, path).tokenize()
