"""
Recursive Descent Parser for jswalk

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: Recursive descent for statements, precedence climbing for
  binary operators
- AST: lark Tree/Token nodes; Tree.data is the node kind the evaluator
  dispatches on
"""

from typing import List, Optional

from lark import Tree, Token

from .lexer_rd import split_template, tokenize
from .token_types import TT, Tok, WORD_TYPES
from .tree import tree_label

# ============================================================================
# Parser
# ============================================================================

# Binary operator precedence (higher binds tighter)
BINARY_PRECEDENCE = {
    '??': 1,
    '||': 2,
    '&&': 3,
    '|': 4,
    '^': 5,
    '&': 6,
    '==': 7, '!=': 7, '===': 7, '!==': 7,
    '<': 8, '>': 8, '<=': 8, '>=': 8, 'in': 8, 'instanceof': 8,
    '<<': 9, '>>': 9, '>>>': 9,
    '+': 10, '-': 10,
    '*': 11, '/': 11, '%': 11,
    '**': 12,
}

LOGICAL_OPS = frozenset({'&&', '||', '??'})
RIGHT_ASSOC_OPS = frozenset({'**'})
PREFIX_OPS = frozenset({'!', '~', '+', '-'})

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else None
        self.column = token.column if token else None
        super().__init__(f"Line {token.line}: {message}" if token else message)

class Parser:
    """
    Recursive descent parser.

    Expression precedence (lowest to highest):
    1. assignment (=, +=, ...) and arrow functions
    2. conditional (? :)
    3. binary operators by BINARY_PRECEDENCE (?? || && | ^ & equality
       relational shift additive multiplicative **)
    4. unary (! ~ + - typeof void delete, prefix ++/--)
    5. postfix ++/--
    6. call / member / new / tagged template
    7. primary (literals, identifiers, parens, array/object/function literals)
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None, 1, 1)

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        self.current = self.tokens[self.pos]
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def check_value(self, token_type: TT, value: str) -> bool:
        return self.current.type == token_type and self.current.value == value

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            raise self.unexpected()
        return self.advance()

    def unexpected(self, tok: Optional[Tok] = None) -> ParseError:
        tok = tok or self.current

        if tok.type == TT.EOF:
            return ParseError("Unexpected end of input", tok)
        if tok.type == TT.NUMBER:
            return ParseError("Unexpected number", tok)
        if tok.type == TT.STRING:
            return ParseError("Unexpected string", tok)
        if tok.type == TT.TEMPLATE:
            return ParseError("Unexpected template string", tok)
        if tok.type == TT.IDENT:
            return ParseError("Unexpected identifier", tok)

        return ParseError(f"Unexpected token {tok.value}", tok)

    def node(self, kind: str, children: list, tok: Tok) -> Tree:
        """Build a Tree carrying the position of its first token"""
        tree = Tree(kind, children)
        tree.meta.line = tok.line
        tree.meta.column = tok.column
        tree.meta.empty = False
        return tree

    def leaf(self, kind: str, tok: Tok, value: Optional[str] = None) -> Token:
        text = tok.value if value is None else value
        return Token(kind, text, line=tok.line, column=tok.column)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire program"""
        first = self.current
        stmts = []

        while not self.check(TT.EOF):
            stmts.append(self.parse_statement())

        return self.node('program', stmts, first)

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        if self.check(TT.LBRACE):
            return self.parse_block()
        if self.check(TT.SEMI):
            tok = self.advance()
            return self.node('empty', [], tok)
        if self.check(TT.VAR, TT.LET, TT.CONST):
            return self.parse_var_decl()
        if self.check(TT.FUNCTION):
            return self.parse_function_decl()
        if self.check(TT.IF):
            return self.parse_if_stmt()
        if self.check(TT.RETURN):
            return self.parse_return_stmt()

        tok = self.current
        expr = self.parse_expression()
        self.consume_semicolon()
        return self.node('expr_stmt', [expr], tok)

    def consume_semicolon(self):
        """Statement terminator with automatic semicolon insertion"""
        if self.match(TT.SEMI):
            return

        if self.check(TT.RBRACE, TT.EOF) or self.current.nl_before:
            return

        raise self.unexpected()

    def parse_block(self) -> Tree:
        """{ statement* }"""
        tok = self.expect(TT.LBRACE)
        stmts = []

        while not self.check(TT.RBRACE):
            if self.check(TT.EOF):
                raise self.unexpected()
            stmts.append(self.parse_statement())

        self.expect(TT.RBRACE)
        return self.node('block', stmts, tok)

    def parse_var_decl(self) -> Tree:
        """var|let|const name [= expr] (, name [= expr])*"""
        kind_tok = self.advance()
        children: list = [self.leaf('KIND', kind_tok)]

        while True:
            name_tok = self.expect(TT.IDENT)
            decl_children: list = [self.leaf('IDENT', name_tok)]

            if self.check_value(TT.ASSIGN, '='):
                self.advance()
                decl_children.append(self.parse_assignment())

            children.append(self.node('declarator', decl_children, name_tok))

            if not self.match(TT.COMMA):
                break

        self.consume_semicolon()
        return self.node('var_decl', children, kind_tok)

    def parse_function_decl(self) -> Tree:
        """function name(params) { body }"""
        tok = self.advance()
        name_tok = self.expect(TT.IDENT)
        params = self.parse_params()
        body = self.parse_block()
        return self.node('function_decl', [self.leaf('IDENT', name_tok), params, body], tok)

    def parse_if_stmt(self) -> Tree:
        """if (test) statement [else statement]"""
        tok = self.advance()
        self.expect(TT.LPAR)
        test = self.parse_expression()
        self.expect(TT.RPAR)
        consequent = self.parse_statement()
        children = [test, consequent]

        if self.match(TT.ELSE):
            children.append(self.parse_statement())

        return self.node('if', children, tok)

    def parse_return_stmt(self) -> Tree:
        """return [expr]; a newline right after `return` ends the statement"""
        tok = self.advance()

        if self.check(TT.SEMI, TT.RBRACE, TT.EOF) or self.current.nl_before:
            self.consume_semicolon()
            return self.node('return', [], tok)

        value = self.parse_expression()
        self.consume_semicolon()
        return self.node('return', [value], tok)

    # ========================================================================
    # Functions
    # ========================================================================

    def parse_params(self) -> Tree:
        """( [ident (, ident)* [,]] )"""
        tok = self.expect(TT.LPAR)
        names = []

        while not self.check(TT.RPAR):
            name_tok = self.expect(TT.IDENT)
            names.append(self.leaf('IDENT', name_tok))
            if not self.match(TT.COMMA):
                break

        self.expect(TT.RPAR)
        return self.node('params', names, tok)

    def parse_function_expr(self) -> Tree:
        """function [name](params) { body }"""
        tok = self.advance()
        name_tok = self.advance() if self.check(TT.IDENT) else None
        params = self.parse_params()
        body = self.parse_block()
        children: list = [params, body]

        if name_tok is not None:
            children.append(self.leaf('IDENT', name_tok))

        return self.node('function', children, tok)

    def arrow_ahead(self) -> bool:
        """At `(`: does the matching `)` precede `=>`?"""
        depth = 0
        offset = 0

        while True:
            tok = self.peek(offset)
            if tok.type == TT.EOF:
                return False
            if tok.type in (TT.LPAR, TT.LSQB, TT.LBRACE):
                depth += 1
            elif tok.type in (TT.RPAR, TT.RSQB, TT.RBRACE):
                depth -= 1
                if depth == 0:
                    nxt = self.peek(offset + 1)
                    return nxt.type == TT.ARROW and not nxt.nl_before
            offset += 1

    def parse_arrow(self) -> Tree:
        """x => body | (a, b) => body"""
        tok = self.current

        if self.check(TT.IDENT):
            name_tok = self.advance()
            params = self.node('params', [self.leaf('IDENT', name_tok)], name_tok)
        else:
            params = self.parse_params()

        self.expect(TT.ARROW)

        if self.check(TT.LBRACE):
            body = self.parse_block()
        else:
            body = self.parse_assignment()

        return self.node('arrow', [params, body], tok)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expression(self) -> Tree:
        return self.parse_assignment()

    def parse_assignment(self) -> Tree:
        """Assignment, arrow function, or conditional"""
        if self.check(TT.IDENT) and self.peek(1).type == TT.ARROW:
            return self.parse_arrow()
        if self.check(TT.LPAR) and self.arrow_ahead():
            return self.parse_arrow()

        start = self.current
        left = self.parse_conditional()

        if not self.check(TT.ASSIGN):
            return left

        if tree_label(left) not in ('identifier', 'member'):
            raise ParseError("Invalid left-hand side in assignment", start)

        op_tok = self.advance()
        value = self.parse_assignment()
        return self.node('assign', [left, self.leaf('OP', op_tok), value], start)

    def parse_conditional(self) -> Tree:
        """test ? consequent : alternate"""
        start = self.current
        test = self.parse_binary(1)

        if not self.match(TT.QMARK):
            return test

        consequent = self.parse_assignment()
        self.expect(TT.COLON)
        alternate = self.parse_assignment()
        return self.node('conditional', [test, consequent, alternate], start)

    def binary_op(self) -> Optional[str]:
        if self.check(TT.OP, TT.IN, TT.INSTANCEOF) and self.current.value in BINARY_PRECEDENCE:
            return self.current.value
        return None

    def parse_binary(self, min_prec: int) -> Tree:
        """Precedence climbing over BINARY_PRECEDENCE"""
        start = self.current
        left = self.parse_unary()

        while True:
            op = self.binary_op()
            if op is None:
                break

            prec = BINARY_PRECEDENCE[op]
            if prec < min_prec:
                break

            op_tok = self.advance()
            right = self.parse_binary(prec if op in RIGHT_ASSOC_OPS else prec + 1)
            kind = 'logical' if op in LOGICAL_OPS else 'binary'
            left = self.node(kind, [left, self.leaf('OP', op_tok), right], start)

        return left

    def parse_unary(self) -> Tree:
        """Prefix operators"""
        tok = self.current

        if (self.check(TT.OP) and tok.value in PREFIX_OPS) or self.check(TT.TYPEOF, TT.VOID, TT.DELETE):
            self.advance()
            operand = self.parse_unary()
            return self.node('unary', [self.leaf('OP', tok), operand], tok)

        if self.check(TT.INCR, TT.DECR):
            self.advance()
            target = self.parse_unary()
            if tree_label(target) not in ('identifier', 'member'):
                raise ParseError("Invalid left-hand side expression in prefix operation", tok)
            return self.node('update', [self.leaf('OP', tok), target], tok)

        return self.parse_postfix()

    def parse_postfix(self) -> Tree:
        """expr++ / expr-- (no line break before the operator)"""
        start = self.current
        expr = self.parse_call_member()

        if self.check(TT.INCR, TT.DECR) and not self.current.nl_before:
            if tree_label(expr) not in ('identifier', 'member'):
                raise ParseError("Invalid left-hand side expression in postfix operation", start)
            op_tok = self.advance()
            return self.node('update', [self.leaf('OP', op_tok), expr], start)

        return expr

    def parse_call_member(self) -> Tree:
        """Primary followed by .name, [expr], (args) and tagged templates"""
        start = self.current
        expr = self.parse_new() if self.check(TT.NEW) else self.parse_primary()

        while True:
            if self.check(TT.DOT):
                expr = self.parse_dot_member(expr, start)
            elif self.check(TT.LSQB):
                expr = self.parse_computed_member(expr, start)
            elif self.check(TT.LPAR):
                args = self.parse_arguments()
                expr = self.node('call', [expr, args], start)
            elif self.check(TT.TEMPLATE):
                template = self.parse_template(self.advance())
                expr = self.node('tagged_template', [expr, template], start)
            else:
                break

        return expr

    def parse_new(self) -> Tree:
        """new Callee[.member...][(args)]"""
        tok = self.advance()
        callee_start = self.current
        callee = self.parse_new() if self.check(TT.NEW) else self.parse_primary()

        while True:
            if self.check(TT.DOT):
                callee = self.parse_dot_member(callee, callee_start)
            elif self.check(TT.LSQB):
                callee = self.parse_computed_member(callee, callee_start)
            else:
                break

        if self.check(TT.LPAR):
            args = self.parse_arguments()
        else:
            args = self.node('arguments', [], tok)

        return self.node('new', [callee, args], tok)

    def parse_dot_member(self, obj: Tree, start: Tok) -> Tree:
        self.expect(TT.DOT)
        if self.current.type not in WORD_TYPES:
            raise self.unexpected()
        name_tok = self.advance()
        return self.node('member', [obj, self.leaf('IDENT', name_tok)], start)

    def parse_computed_member(self, obj: Tree, start: Tok) -> Tree:
        self.expect(TT.LSQB)
        prop = self.parse_expression()
        self.expect(TT.RSQB)
        return self.node('member', [obj, prop], start)

    def parse_arguments(self) -> Tree:
        """( [arg (, arg)* [,]] ) where arg may be ...spread"""
        tok = self.expect(TT.LPAR)
        args = []

        while not self.check(TT.RPAR):
            args.append(self.parse_spread_or_expr())
            if not self.match(TT.COMMA):
                break

        self.expect(TT.RPAR)
        return self.node('arguments', args, tok)

    def parse_spread_or_expr(self) -> Tree:
        if self.check(TT.SPREAD):
            tok = self.advance()
            return self.node('spread', [self.parse_assignment()], tok)
        return self.parse_assignment()

    # ========================================================================
    # Primary Expressions
    # ========================================================================

    def parse_primary(self) -> Tree:
        tok = self.current

        if self.check(TT.NUMBER, TT.STRING, TT.REGEX):
            self.advance()
            return self.node('literal', [self.leaf(tok.type.name, tok)], tok)

        if self.check(TT.TRUE, TT.FALSE, TT.NULL):
            self.advance()
            return self.node('literal', [self.leaf(tok.type.name, tok)], tok)

        if self.check(TT.TEMPLATE):
            return self.parse_template(self.advance())

        if self.check(TT.IDENT):
            self.advance()
            return self.node('identifier', [self.leaf('IDENT', tok)], tok)

        if self.check(TT.THIS):
            self.advance()
            return self.node('this', [], tok)

        if self.check(TT.LPAR):
            self.advance()
            expr = self.parse_expression()
            self.expect(TT.RPAR)
            return expr

        if self.check(TT.LSQB):
            return self.parse_array()

        if self.check(TT.LBRACE):
            return self.parse_object()

        if self.check(TT.FUNCTION):
            return self.parse_function_expr()

        raise self.unexpected()

    def parse_array(self) -> Tree:
        """[ elem, , ...spread ]"""
        tok = self.expect(TT.LSQB)
        elements = []

        while not self.check(TT.RSQB):
            if self.check(TT.COMMA):
                hole_tok = self.advance()
                elements.append(self.node('hole', [], hole_tok))
                continue

            elements.append(self.parse_spread_or_expr())

            if not self.check(TT.RSQB):
                self.expect(TT.COMMA)

        self.expect(TT.RSQB)
        return self.node('array', elements, tok)

    def parse_object(self) -> Tree:
        """{ key: value, [computed]: value, shorthand, method() {} }"""
        tok = self.expect(TT.LBRACE)
        props = []

        while not self.check(TT.RBRACE):
            props.append(self.parse_property())
            if not self.check(TT.RBRACE):
                self.expect(TT.COMMA)

        self.expect(TT.RBRACE)
        return self.node('object', props, tok)

    def parse_property(self) -> Tree:
        tok = self.current

        if self.check(TT.LSQB):
            self.advance()
            key = self.node('computed_key', [self.parse_assignment()], tok)
            self.expect(TT.RSQB)
        elif self.check(TT.STRING, TT.NUMBER):
            key = self.leaf(tok.type.name, self.advance())
        elif tok.type in WORD_TYPES:
            key = self.leaf('IDENT', self.advance())
        else:
            raise self.unexpected()

        if self.match(TT.COLON):
            return self.node('property', [key, self.parse_assignment()], tok)

        if self.check(TT.LPAR):
            params = self.parse_params()
            body = self.parse_block()
            method = self.node('function', [params, body], tok)
            return self.node('property', [key, method], tok)

        # shorthand {a} reads the identifier a
        if tok.type == TT.IDENT and self.check(TT.COMMA, TT.RBRACE):
            value = self.node('identifier', [self.leaf('IDENT', tok)], tok)
            return self.node('property', [key, value], tok)

        raise self.unexpected()

    def parse_template(self, tok: Tok) -> Tree:
        """Template literal: alternating template_chunk and expression nodes"""
        chunks, exprs = split_template(tok.value)
        children: list = []

        for idx, chunk in enumerate(chunks):
            children.append(self.node('template_chunk', [self.leaf('CHUNK', tok, chunk)], tok))

            if idx < len(exprs):
                source, offset = exprs[idx]
                line = tok.line + tok.value.count('\n', 0, offset)
                children.append(parse_expr_fragment(source, line=line))

        return self.node('template', children, tok)

# ============================================================================
# Public entry points
# ============================================================================

def parse_source(source: str) -> Tree:
    """Parse program source into a `program` tree"""
    parser = Parser(tokenize(source))
    return parser.parse()

def parse_expr_fragment(source: str, line: int = 1) -> Tree:
    """Parse a single expression, e.g. a template interpolation"""
    parser = Parser(tokenize(source, line=line))
    expr = parser.parse_expression()

    if not parser.check(TT.EOF):
        raise parser.unexpected()

    return expr
