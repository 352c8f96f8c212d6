"""
Token Types for the jswalk parser

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Literals
    NUMBER = auto()
    STRING = auto()
    TEMPLATE = auto()
    REGEX = auto()
    IDENT = auto()

    # Keywords
    VAR = auto()
    LET = auto()
    CONST = auto()
    FUNCTION = auto()
    RETURN = auto()
    IF = auto()
    ELSE = auto()
    NEW = auto()
    THIS = auto()
    TYPEOF = auto()
    VOID = auto()
    DELETE = auto()
    IN = auto()
    INSTANCEOF = auto()
    RESERVED = auto()

    # Keyword literals
    TRUE = auto()
    FALSE = auto()
    NULL = auto()

    # Operators
    OP = auto()
    ASSIGN = auto()
    INCR = auto()
    DECR = auto()
    ARROW = auto()
    SPREAD = auto()

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LSQB = auto()
    RSQB = auto()
    LBRACE = auto()
    RBRACE = auto()
    DOT = auto()
    COMMA = auto()
    COLON = auto()
    SEMI = auto()
    QMARK = auto()

    # Special
    EOF = auto()


# Tokens that are spelled like identifiers; all of them are valid after `.`
# and as object literal keys.
WORD_TYPES = frozenset({
    TT.IDENT, TT.VAR, TT.LET, TT.CONST, TT.FUNCTION, TT.RETURN, TT.IF,
    TT.ELSE, TT.NEW, TT.THIS, TT.TYPEOF, TT.VOID, TT.DELETE, TT.IN,
    TT.INSTANCEOF, TT.RESERVED, TT.TRUE, TT.FALSE, TT.NULL,
})


@dataclass
class Tok:
    """Token with position info"""
    type: TT
    value: Any
    line: int
    column: int
    nl_before: bool = False

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
