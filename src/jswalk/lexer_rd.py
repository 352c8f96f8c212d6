"""
Lexer for jswalk - Recursive Descent Parser

Tokenizes JavaScript-like source code into a stream of tokens.

Features:
- Single-pass tokenization
- Newline tracking for automatic semicolon insertion (Tok.nl_before)
- Position tracking (line, column)
- Regex-vs-division disambiguation from the previous token
- Template literal bodies kept raw; split later by split_template()
"""

from typing import List, Optional, Tuple

from .token_types import TT, Tok

WHITESPACE = frozenset(' \t\v\f\u00a0\ufeff')
LINE_TERMINATORS = frozenset('\n\r\u2028\u2029')

_SIMPLE_ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    'b': '\b',
    'f': '\f',
    'v': '\v',
    '0': '\0',
}

_HEX_DIGITS = frozenset('0123456789abcdefABCDEF')

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    jswalk lexer.

    Line terminators are not emitted as tokens; the next token records
    nl_before=True instead so the parser can apply semicolon insertion.
    """

    # Keyword mapping
    KEYWORDS = {
        'var': TT.VAR,
        'let': TT.LET,
        'const': TT.CONST,
        'function': TT.FUNCTION,
        'return': TT.RETURN,
        'if': TT.IF,
        'else': TT.ELSE,
        'new': TT.NEW,
        'this': TT.THIS,
        'typeof': TT.TYPEOF,
        'void': TT.VOID,
        'delete': TT.DELETE,
        'in': TT.IN,
        'instanceof': TT.INSTANCEOF,
        'true': TT.TRUE,
        'false': TT.FALSE,
        'null': TT.NULL,
    }

    # Words the language reserves but the parser has no productions for
    RESERVED_WORDS = frozenset({
        'while', 'for', 'do', 'break', 'continue', 'switch', 'case',
        'default', 'throw', 'try', 'catch', 'finally', 'class', 'extends',
        'super', 'import', 'export', 'yield', 'await', 'with', 'debugger',
    })

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Four-character operators
        ('>>>=', TT.ASSIGN),

        # Three-character operators
        ('...', TT.SPREAD),
        ('===', TT.OP),
        ('!==', TT.OP),
        ('**=', TT.ASSIGN),
        ('<<=', TT.ASSIGN),
        ('>>=', TT.ASSIGN),
        ('>>>', TT.OP),
        ('&&=', TT.ASSIGN),
        ('||=', TT.ASSIGN),
        ('??=', TT.ASSIGN),

        # Two-character operators
        ('=>', TT.ARROW),
        ('==', TT.OP),
        ('!=', TT.OP),
        ('<=', TT.OP),
        ('>=', TT.OP),
        ('&&', TT.OP),
        ('||', TT.OP),
        ('??', TT.OP),
        ('++', TT.INCR),
        ('--', TT.DECR),
        ('+=', TT.ASSIGN),
        ('-=', TT.ASSIGN),
        ('*=', TT.ASSIGN),
        ('/=', TT.ASSIGN),
        ('%=', TT.ASSIGN),
        ('&=', TT.ASSIGN),
        ('|=', TT.ASSIGN),
        ('^=', TT.ASSIGN),
        ('**', TT.OP),
        ('<<', TT.OP),
        ('>>', TT.OP),

        # Single-character operators
        ('+', TT.OP),
        ('-', TT.OP),
        ('*', TT.OP),
        ('/', TT.OP),
        ('%', TT.OP),
        ('&', TT.OP),
        ('|', TT.OP),
        ('^', TT.OP),
        ('!', TT.OP),
        ('~', TT.OP),
        ('<', TT.OP),
        ('>', TT.OP),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ('.', TT.DOT),
        (',', TT.COMMA),
        (':', TT.COLON),
        (';', TT.SEMI),
        ('?', TT.QMARK),
    ]

    # A `/` after one of these is division; anywhere else it opens a regex.
    _REGEX_BLOCKERS = frozenset({
        TT.NUMBER, TT.STRING, TT.TEMPLATE, TT.REGEX, TT.IDENT, TT.THIS,
        TT.TRUE, TT.FALSE, TT.NULL, TT.RPAR, TT.RSQB, TT.RBRACE,
        TT.INCR, TT.DECR,
    })

    def __init__(self, source: str, line: int = 1):
        self.source = source
        self.pos = 0
        self.line = line
        self.column = 1
        self.tokens: List[Tok] = []

        self.tok_line = line
        self.tok_column = 1
        self.nl_pending = False

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark_start()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        ch = self.peek()

        if ch in LINE_TERMINATORS:
            self.advance()
            self.nl_pending = True
            return

        if ch in WHITESPACE:
            self.advance()
            return

        if ch == '/' and self.peek(1) == '/':
            self.skip_line_comment()
            return

        if ch == '/' and self.peek(1) == '*':
            self.skip_block_comment()
            return

        self.mark_start()

        if ch in ('"', "'"):
            self.scan_string()
            return

        if ch == '`':
            self.scan_template()
            return

        if ch.isdigit() or (ch == '.' and self.peek(1).isdigit()):
            self.scan_number()
            return

        if _is_ident_start(ch):
            self.scan_identifier()
            return

        if ch == '/' and self.regex_allowed():
            self.scan_regex()
            return

        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self):
        """Scan string literal: "..." or '...' (raw text, quotes kept)"""
        end = _string_end(self.source, self.pos)
        if end < 0:
            raise self.error("Invalid or unexpected token")

        value = self.source[self.pos:end + 1]
        self.consume_to(end + 1)
        self.emit(TT.STRING, value)

    def scan_template(self):
        """Scan template literal `...`; the token value is the raw body."""
        end = template_end(self.source, self.pos + 1)
        if end < 0:
            raise self.error("Unterminated template literal")

        value = self.source[self.pos + 1:end]
        self.consume_to(end + 1)
        self.emit(TT.TEMPLATE, value)

    def scan_number(self):
        """Scan decimal, exponent and 0x/0o/0b literals"""
        start = self.pos

        if self.peek() == '0' and self.peek(1) in ('x', 'X', 'o', 'O', 'b', 'B'):
            self.advance(2)
            while self.peek().isalnum():
                self.advance()
            try:
                int(self.source[start:self.pos], 0)
            except ValueError:
                raise self.error("Invalid or unexpected token") from None
        else:
            while self.peek().isdigit():
                self.advance()

            if self.peek() == '.':
                self.advance()
                while self.peek().isdigit():
                    self.advance()

            if self.peek() in ('e', 'E'):
                sign = self.peek(1) in ('+', '-')
                if self.peek(2 if sign else 1).isdigit():
                    self.advance(2 if sign else 1)
                    while self.peek().isdigit():
                        self.advance()

        if _is_ident_start(self.peek()):
            raise self.error("Invalid or unexpected token")

        self.emit(TT.NUMBER, self.source[start:self.pos])

    def scan_identifier(self):
        """Scan identifier or keyword"""
        start = self.pos
        while _is_ident_part(self.peek()):
            self.advance()

        word = self.source[start:self.pos]

        if word in self.KEYWORDS:
            self.emit(self.KEYWORDS[word], word)
        elif word in self.RESERVED_WORDS:
            self.emit(TT.RESERVED, word)
        else:
            self.emit(TT.IDENT, word)

    def scan_regex(self):
        """Scan regex literal /body/flags (raw text kept)"""
        start = self.pos
        self.advance()  # opening slash
        in_class = False

        while True:
            ch = self.peek()

            if self.pos >= len(self.source) or ch in LINE_TERMINATORS:
                raise self.error("Invalid regular expression: missing /")

            if ch == '\\':
                self.advance(2)
                continue

            if ch == '[':
                in_class = True
            elif ch == ']':
                in_class = False
            elif ch == '/' and not in_class:
                break

            self.advance()

        self.advance()  # closing slash
        while _is_ident_part(self.peek()):
            self.advance()

        self.emit(TT.REGEX, self.source[start:self.pos])

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)
                return

        raise self.error("Invalid or unexpected token")

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        result = self.source[self.pos:self.pos + n]

        for ch in result:
            if ch in ('\n', '\u2028', '\u2029'):
                self.line += 1
                self.column = 1
            else:
                self.column += 1

        self.pos += n
        return result

    def consume_to(self, end: int) -> str:
        return self.advance(end - self.pos)

    def skip_line_comment(self):
        """Skip // comment until end of line"""
        while self.pos < len(self.source) and self.peek() not in LINE_TERMINATORS:
            self.advance()

    def skip_block_comment(self):
        """Skip /* ... */; a newline inside counts as a line terminator"""
        end = self.source.find('*/', self.pos + 2)
        if end < 0:
            self.mark_start()
            raise self.error("Unterminated comment")

        text = self.consume_to(end + 2)
        if any(ch in LINE_TERMINATORS for ch in text):
            self.nl_pending = True

    def regex_allowed(self) -> bool:
        if not self.tokens:
            return True

        return self.tokens[-1].type not in self._REGEX_BLOCKERS

    def mark_start(self):
        self.tok_line = self.line
        self.tok_column = self.column

    def emit(self, token_type: TT, value):
        """Emit a token"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.tok_line,
            column=self.tok_column,
            nl_before=self.nl_pending,
        )
        self.nl_pending = False
        self.tokens.append(tok)

    def error(self, message: str) -> 'LexError':
        return LexError(message, self.tok_line, self.tok_column)

class LexError(Exception):
    """Lexical analysis error"""
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"Line {line}: {message}" if line is not None else message)

# ============================================================================
# Scanning helpers shared with the parser
# ============================================================================

def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch in ('_', '$')

def _is_ident_part(ch: str) -> bool:
    return ch.isalnum() or ch in ('_', '$')

def _string_end(src: str, pos: int) -> int:
    """Index of the quote closing the string opened at src[pos], or -1."""
    quote = src[pos]
    i = pos + 1

    while i < len(src):
        ch = src[i]
        if ch == '\\':
            i += 2
            continue
        if ch == quote:
            return i
        if ch == '\n':
            return -1
        i += 1

    return -1

def template_end(src: str, pos: int) -> int:
    """Index of the backtick closing a template whose body starts at pos, or -1."""
    i = pos

    while i < len(src):
        ch = src[i]

        if ch == '\\':
            i += 2
            continue

        if ch == '`':
            return i

        if ch == '$' and src.startswith('{', i + 1):
            i = _brace_end(src, i + 2)
            if i < 0:
                return -1

        i += 1

    return -1

def _brace_end(src: str, pos: int) -> int:
    """Index of the `}` closing a `${` whose expression starts at pos, or -1."""
    depth = 1
    i = pos

    while i < len(src):
        ch = src[i]

        if ch in ('"', "'"):
            i = _string_end(src, i)
            if i < 0:
                return -1
        elif ch == '`':
            i = template_end(src, i + 1)
            if i < 0:
                return -1
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return i

        i += 1

    return -1

def split_template(raw: str) -> Tuple[List[str], List[Tuple[str, int]]]:
    """
    Split a raw template body into cooked text chunks and interpolated
    expression sources. Returns (chunks, [(expr_source, offset), ...]) with
    len(chunks) == len(exprs) + 1.
    """
    chunks: List[str] = []
    exprs: List[Tuple[str, int]] = []
    chunk_start = 0
    i = 0

    while i < len(raw):
        ch = raw[i]

        if ch == '\\':
            i += 2
            continue

        if ch == '$' and raw.startswith('{', i + 1):
            end = _brace_end(raw, i + 2)
            if end < 0:
                raise LexError("Unterminated template literal")

            chunks.append(cook_escapes(raw[chunk_start:i]))
            exprs.append((raw[i + 2:end], i + 2))
            i = end + 1
            chunk_start = i
            continue

        i += 1

    chunks.append(cook_escapes(raw[chunk_start:]))
    return chunks, exprs

def _hex_value(text: str, width: int) -> Optional[int]:
    if len(text) != width or not all(ch in _HEX_DIGITS for ch in text):
        return None
    return int(text, 16)

def cook_escapes(raw: str) -> str:
    """Decode backslash escapes of a string or template chunk."""
    if '\\' not in raw:
        return raw

    out: List[str] = []
    i = 0

    while i < len(raw):
        ch = raw[i]

        if ch != '\\':
            out.append(ch)
            i += 1
            continue

        nxt = raw[i + 1:i + 2]

        if nxt == '':
            out.append('\\')
            break

        if nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
            continue

        if nxt == 'x':
            code = _hex_value(raw[i + 2:i + 4], 2)
            if code is not None:
                out.append(chr(code))
                i += 4
                continue

        if nxt == 'u':
            if raw.startswith('{', i + 2):
                close = raw.find('}', i + 3)
                digits = raw[i + 3:close] if close > 0 else ''
                if digits and all(c in _HEX_DIGITS for c in digits) and int(digits, 16) <= 0x10FFFF:
                    out.append(chr(int(digits, 16)))
                    i = close + 1
                    continue
            else:
                code = _hex_value(raw[i + 2:i + 6], 4)
                if code is not None:
                    i += 6
                    # combine a surrogate pair into one code point
                    if 0xD800 <= code < 0xDC00 and raw.startswith('\\u', i):
                        low = _hex_value(raw[i + 2:i + 6], 4)
                        if low is not None and 0xDC00 <= low < 0xE000:
                            code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                            i += 6
                    out.append(chr(code))
                    continue

        if nxt == '\r':
            i += 3 if raw.startswith('\n', i + 2) else 2
            continue

        if nxt in ('\n', '\u2028', '\u2029'):
            i += 2
            continue

        out.append(nxt)
        i += 2

    return ''.join(out)

def tokenize(source: str, line: int = 1) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, line=line)
    return lexer.tokenize()
