"""prompt_toolkit lexer for live syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable, Dict, List

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as SourceLexer, LexError
from .token_types import TT, WORD_TYPES, Tok

GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "regex": "ansiyellow",
    "function": "bold ansiyellow",
    "reserved": "bold ansired",
}

_VALUE_GROUPS = {
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NULL: "constant",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.TEMPLATE: "string",
    TT.REGEX: "regex",
    TT.RESERVED: "reserved",
}


def token_group(tokens: List[Tok], idx: int) -> str:
    """Highlight group for ``tokens[idx]``; empty string means unstyled."""
    tok = tokens[idx]

    if tok.type in _VALUE_GROUPS:
        return _VALUE_GROUPS[tok.type]

    if tok.type == TT.IDENT:
        follow = tokens[idx + 1] if idx + 1 < len(tokens) else None
        if follow is not None and follow.type == TT.LPAR:
            return "function"
        return ""

    # remaining word tokens are the statement and operator keywords
    return "keyword" if tok.type in WORD_TYPES else ""


def _source_text(tok: Tok) -> str:
    if tok.type == TT.TEMPLATE:
        return f"`{tok.value}`"
    return "" if tok.value is None else str(tok.value)


def highlight_line(text: str) -> StyleAndTextTuples:
    """Split one line into ``(style, text)`` fragments that join back to *text*."""
    if not text:
        return [("", "")]

    try:
        tokens = SourceLexer(text).tokenize()
    except LexError:
        return [("", text)]

    fragments: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type == TT.EOF:
            break

        start = tok.column - 1
        end = start + len(_source_text(tok))
        if start < pos or end <= start:
            continue

        if start > pos:
            fragments.append(("", text[pos:start]))
        fragments.append((GROUP_STYLE.get(token_group(tokens, i), ""), text[start:end]))
        pos = end

    if pos < len(text):
        fragments.append(("", text[pos:]))

    return fragments


class JsLexer(Lexer):
    """Highlights each document line independently, caching per line number."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        cache: Dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                cache[lineno] = highlight_line(lines[lineno]) if lineno < len(lines) else [("", "")]
            return cache[lineno]

        return get_line
