"""Logo abstract syntax tree and line parser.

The parser resolves expression structure (grouping, lists, operator trees) but deliberately leaves every procedure
call without arguments: `FD 50` parses to `Line([Call("FD"), Num(50.0)])`. How many of the following expressions a
call consumes is only known when it runs (see evaluator.py).

Expressions are parsed by precedence climbing:

```
<expr>    ::= <primary> (<infix-op> <expr>)*          ; the right operand binds tighter than the operator
<primary> ::= <number> | <var> | <word> | <call>
            | "(" <expr>* ")"                        ; Group
            | "(" ("+" | "*") <expr>* ")"            ; Nary: variadic prefix form, only right after "("
            | "[" <expr>* "]"                        ; ListLit
            | "-" <primary>                          ; Negation: "-" directly followed by a number, "(" or var
            | <op> <expr> <expr>                     ; prefix Binary: - 5 3
```

Precedence: negation > * / % > + - > comparisons.
"""

from dataclasses import dataclass, field

from pclogo.core.lexical import COMPARISON, OPERATORS, TokenType
from pclogo.lang.error import ParseError


class Node:
    """Superclass of every AST node."""

    def __str__(self):
        return show(self)


@dataclass
class Negation(Node):
    expr: Node


@dataclass
class Binary(Node):
    op: TokenType
    left: Node
    right: Node


@dataclass
class Nary(Node):
    op: TokenType
    exprs: list


@dataclass
class Num(Node):
    value: float

    def __post_init__(self):
        self.value = float(self.value)


@dataclass
class Call(Node):
    name: str


@dataclass
class Return(Node):
    value: Node


@dataclass
class VarRef(Node):
    name: str


@dataclass
class WordLit(Node):
    value: str


@dataclass
class ListLit(Node):
    items: list = field(default_factory=list)


@dataclass
class Group(Node):
    items: list


@dataclass
class Line(Node):
    items: list


@dataclass
class Empty(Node):
    """Nothing was produced by a feed (continued line, or a line collected into a procedure definition)."""


EMPTY = Empty()

NEGATION = 3
PRECEDENCE = {
    TokenType.MULTIPLY: 2,
    TokenType.DIVIDE: 2,
    TokenType.MODULO: 2,
    TokenType.PLUS: 1,
    TokenType.MINUS: 1,
    **{op: 0 for op in COMPARISON},
}
OPEN = -1  # precedence of a fresh sub-expression: any operator binds to it

SPACES = (TokenType.WHITESPACE, TokenType.LINE_CONT)
CLOSERS = {TokenType.RPAREN: TokenType.LPAREN, TokenType.RBRACKET: TokenType.LBRACKET}
VARIADIC = (TokenType.PLUS, TokenType.MULTIPLY)


def format_number(value):
    """42.0 -> '42', 0.5 -> '0.5'."""
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def show(node, top=True):
    """Returns Logo source text for node. Words are shown bare when top, since that is how a Word value prints."""
    if isinstance(node, Num):
        return format_number(node.value)
    elif isinstance(node, WordLit):
        return node.value if top else '"' + node.value
    elif isinstance(node, ListLit):
        return "[" + " ".join(show(item, top=True) for item in node.items) + "]"
    elif isinstance(node, VarRef):
        return ":" + node.name
    elif isinstance(node, Call):
        return node.name
    elif isinstance(node, Negation):
        return "-" + show(node.expr, top=False)
    elif isinstance(node, Binary):
        return f"{show(node.left, top=False)} {node.op.value} {show(node.right, top=False)}"
    elif isinstance(node, Nary):
        return " ".join([node.op.value] + [show(expr, top=False) for expr in node.exprs])
    elif isinstance(node, Group):
        return "(" + " ".join(show(item, top=False) for item in node.items) + ")"
    elif isinstance(node, Line):
        return " ".join(show(item, top=False) for item in node.items)
    elif isinstance(node, Return):
        return show(node.value, top)
    return ""


class Parser:
    """Parses the tokens of exactly one (logical) line. LINE_CONT tokens inside the line count as whitespace."""

    def __init__(self, tokens):
        self.tokens = tokens
        self.pos = 0

    def _peek(self, offset=0):
        """Returns the token offset positions ahead, or None past the end."""
        pos = self.pos + offset
        return self.tokens[pos] if pos < len(self.tokens) else None

    def _kind(self, offset=0):
        token = self._peek(offset)
        return token.kind if token is not None else None

    def _advance(self):
        token = self._peek()
        self.pos += 1
        return token

    def _skip_spaces(self):
        while self._kind() in SPACES:
            self.pos += 1

    def _col(self):
        token = self._peek()
        return token.col if token is not None else (self.tokens[-1].col if self.tokens else 0)

    def _at_line_end(self):
        return self._kind() in (None, TokenType.LINE_END)

    def parse_line(self):
        """line ::= <expr>* LINE_END. Anything after LINE_END is an error: a line is parsed on its own."""
        items = []
        while True:
            self._skip_spaces()
            if self._at_line_end():
                break
            if self._kind() in CLOSERS:
                raise ParseError("unexpected '{}' without a matching '{}'",
                                 [self._peek(), CLOSERS[self._kind()].value], col=self._col())
            items.append(self.parse_expression(OPEN))

        self.pos += 1  # LINE_END
        self._skip_spaces()
        if self._peek() is not None:
            raise ParseError("unexpected input after the end of the line", col=self._col())

        return Line(items)

    def parse_expression(self, precedence):
        """Precedence climbing. Calls are leaves that never take part in infix expressions."""
        self._skip_spaces()
        start = self._kind()
        left = self.parse_primary()
        if start is TokenType.FUNCTION:
            return left

        while True:
            if self._starts_unary_minus():
                return left

            self._skip_spaces()
            kind = self._kind()
            if kind not in PRECEDENCE or PRECEDENCE[kind] <= precedence:
                return left  # end of line, a new expression, a closer, or an operator for the caller

            op = self._advance()
            if self._ends_operand():
                raise ParseError("'{}' needs more inputs", [op], col=op.col)
            right = self.parse_expression(PRECEDENCE[kind])
            left = Binary(kind, left, right)

    def _starts_unary_minus(self):
        """WHITESPACE, MINUS, non-whitespace: a new negated expression, not a subtraction."""
        return (self._kind() in SPACES
                and self._kind(1) is TokenType.MINUS
                and self._kind(2) not in SPACES + (TokenType.LINE_END, None))

    def _ends_operand(self):
        """Whether nothing that could start an operand follows (skipping whitespace)."""
        self._skip_spaces()
        return self._at_line_end() or self._kind() in CLOSERS

    def parse_primary(self):
        """Parses a leaf, a bracketed sequence, a negation or a prefix operator form."""
        self._skip_spaces()
        token = self._peek()
        if token is None or token.kind is TokenType.LINE_END:
            raise ParseError("unexpected end of line", col=self._col())

        kind = token.kind
        if kind in (TokenType.INTEGER, TokenType.FLOAT):
            self.pos += 1
            return Num(token.value)
        elif kind is TokenType.VAR:
            self.pos += 1
            return VarRef(token.value)
        elif kind is TokenType.WORD:
            self.pos += 1
            return WordLit(token.value)
        elif kind is TokenType.FUNCTION:
            self.pos += 1
            return Call(token.value)
        elif kind is TokenType.LPAREN:
            return self.parse_group()
        elif kind is TokenType.LBRACKET:
            self.pos += 1
            return ListLit(self.parse_sequence(token))
        elif kind is TokenType.MINUS and self._kind(1) in (
                TokenType.INTEGER, TokenType.FLOAT, TokenType.LPAREN, TokenType.VAR):
            self.pos += 1
            return Negation(self.parse_primary())
        elif kind in OPERATORS:
            return self.parse_prefix()
        elif kind in CLOSERS:
            raise ParseError("unexpected '{}'", [token], col=token.col)

        raise ParseError("'{}' is not supported", [token], col=token.col)

    def parse_group(self):
        """( <expr>* ) as a Group, or (+ <expr>*) / (* <expr>*) as a Group holding one variadic Nary."""
        opener = self._advance()
        self._skip_spaces()

        if self._kind() in VARIADIC:
            op = self._advance()
            return Group([Nary(op.kind, self.parse_sequence(opener))])
        return Group(self.parse_sequence(opener))

    def parse_prefix(self):
        """<op> <expr> <expr>: a prefix operator outside of the variadic position takes exactly two operands."""
        op = self._advance()
        operands = []
        for __ in range(2):
            if self._ends_operand():
                raise ParseError("'{}' needs more inputs", [op], col=op.col)
            operands.append(self.parse_expression(OPEN))
        return Binary(op.kind, *operands)

    def parse_sequence(self, opener):
        """Parses expressions up to and including the closer matching opener (which was already consumed)."""
        closer = TokenType.RPAREN if opener.kind is TokenType.LPAREN else TokenType.RBRACKET
        items = []
        while True:
            self._skip_spaces()
            kind = self._kind()
            if kind is closer:
                self.pos += 1
                return items
            elif kind in CLOSERS:
                raise ParseError("expected '{}' but got '{}'", [closer.value, self._peek()], col=self._col())
            elif self._at_line_end():
                raise ParseError("'{}' is missing its '{}'", [opener, closer.value], col=opener.col)
            items.append(self.parse_expression(OPEN))


def parse_line(tokens):
    """Parses one line of tokens into a Line. Raises ParseError."""
    return Parser(tokens).parse_line()
