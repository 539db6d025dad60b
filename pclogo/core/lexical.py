"""Lexical analysis for Logo. Converts a single line of source text into a flat list of Tokens; knows nothing about
procedures or operator precedence, only how to classify punctuation.

Token grammar can be loosely defined as follows:

```
<word_char>  ::= [A-Za-z0-9_.?] | "\\" <char>   ; an escaped char is injected into the word as-is (upper-cased)
<function>   ::= <word_char>+                   ; not a number: procedure name, e.g. FD or SHOWN?
<var>        ::= ":" <word_char>*               ; variable reference, e.g. :SIZE
<word>       ::= '"' <word_char>*               ; literal word, e.g. "SIZE
<integer>    ::= [0-9]+
<float>      ::= [0-9]+ "." [0-9]* | "." [0-9]+ ; optionally followed by an E exponent
<whitespace> ::= [ \\t]+                        ; not emitted at the beginning of a line
<line_cont>  ::= "\\" "\\n" | "\\" <end>
<line_end>   ::= "\\n"                          ; appended when the line has no terminator
<comment>    ::= ";" <char>*                    ; discarded
```

Whitespace is kept as a token so the parser can tell `1 - 2` (subtraction) from `1 -2` (two expressions).
"""

from dataclasses import dataclass, field
from enum import Enum
import re

from pclogo.lang.error import LexError


class TokenType(Enum):
    LINE_END = "\\n"
    LINE_CONT = "\\"
    WHITESPACE = " "

    FUNCTION = "function"
    VAR = ":"
    WORD = '"'
    INTEGER = "integer"
    FLOAT = "float"

    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"

    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"

    LESS = "<"
    LESS_EQ = "<="
    GREATER = ">"
    GREATER_EQ = ">="
    EQUAL = "="


ARITHMETIC = (TokenType.PLUS, TokenType.MINUS, TokenType.MULTIPLY, TokenType.DIVIDE, TokenType.MODULO)
COMPARISON = (TokenType.LESS, TokenType.LESS_EQ, TokenType.GREATER, TokenType.GREATER_EQ, TokenType.EQUAL)
OPERATORS = ARITHMETIC + COMPARISON


@dataclass(frozen=True)
class Token:
    """A single lexeme. value holds the (upper-cased) name for FUNCTION/VAR/WORD and the number for INTEGER/FLOAT.
    col is only used for error messages and is ignored by ==.
    """
    kind: TokenType
    value: object = None
    col: int = field(default=0, compare=False)

    def __repr__(self):
        if self.value is None:
            return f"Token({self.kind.name})"
        return f"Token({self.kind.name}, {self.value!r})"

    def __str__(self):
        if self.kind is TokenType.FUNCTION or self.kind in (TokenType.INTEGER, TokenType.FLOAT):
            return str(self.value)
        if self.kind in (TokenType.VAR, TokenType.WORD):
            return self.kind.value + self.value
        return self.kind.value


class Lexer:
    """Single left-to-right scan with one character of lookahead."""
    SPACES = " \t"
    WORD_CHARS = re.compile(r"[A-Za-z0-9_.?]")
    INTEGER = re.compile(r"[0-9]+")
    FLOAT = re.compile(r"([0-9]+\.[0-9]*|\.[0-9]+)(E[0-9]+)?|[0-9]+E[0-9]+")

    SINGLE = {
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "*": TokenType.MULTIPLY,
        "/": TokenType.DIVIDE,
        "%": TokenType.MODULO,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        "[": TokenType.LBRACKET,
        "]": TokenType.RBRACKET,
        "{": TokenType.LBRACE,
        "}": TokenType.RBRACE,
        "=": TokenType.EQUAL,
    }
    DOUBLE = {
        "<": (TokenType.LESS, TokenType.LESS_EQ),
        ">": (TokenType.GREATER, TokenType.GREATER_EQ),
    }

    def __init__(self, line):
        self.line = line
        self.pos = 0
        self.tokens = []

    def _peek(self, offset=0):
        """Returns the char offset positions ahead, or None past the end of input."""
        pos = self.pos + offset
        return self.line[pos] if pos < len(self.line) else None

    def _skip_spaces(self):
        """Skips a run of spaces/tabs. Returns whether anything was skipped."""
        start = self.pos
        while self._peek() is not None and self._peek() in Lexer.SPACES:
            self.pos += 1
        return self.pos > start

    def _next_word(self):
        """Consumes a run of word characters (and escapes) and returns it upper-cased."""
        word = ""
        while self._peek() is not None:
            char = self._peek()
            if char == "\\":
                escaped = self._peek(1)
                if escaped is None or escaped == "\n":
                    break  # leave the backslash: it is a line continuation
                word += escaped.upper()
                self.pos += 2
            elif Lexer.WORD_CHARS.match(char):
                word += char.upper()
                self.pos += 1
            else:
                break
        return word

    def _word_token(self, col):
        """Classifies a bare word as an integer, float or procedure name."""
        word = self._next_word()
        if not word:
            raise LexError(self._peek(), col, self.line.rstrip("\n"))

        if Lexer.INTEGER.fullmatch(word):
            return Token(TokenType.INTEGER, int(word), col)
        elif Lexer.FLOAT.fullmatch(word):
            return Token(TokenType.FLOAT, float(word), col)
        return Token(TokenType.FUNCTION, word, col)

    def _is_continuation(self):
        """Whether the current char is a backslash that ends the physical line."""
        return self._peek() == "\\" and self._peek(1) in (None, "\n")

    def tokenize(self):
        """Returns the list of Tokens in self.line. The list always ends with LINE_END or LINE_CONT."""
        line_begin = True

        while True:
            # whitespace at the beginning of a line is never significant to the parser
            start = self.pos
            if self._skip_spaces() and not line_begin:
                self.tokens.append(Token(TokenType.WHITESPACE, col=start))
            line_begin = False

            char = self._peek()
            if char is None:
                break

            col = self.pos
            if char == "\n":
                self.pos += 1
                token = Token(TokenType.LINE_END, col=col)
                line_begin = True

            elif self._is_continuation():
                self.pos += 2 if self._peek(1) == "\n" else 1
                token = Token(TokenType.LINE_CONT, col=col)
                line_begin = True

            elif char == ";":
                while self._peek() not in (None, "\n"):
                    self.pos += 1
                continue

            elif char in Lexer.SINGLE:
                self.pos += 1
                token = Token(Lexer.SINGLE[char], col=col)

            elif char in Lexer.DOUBLE:
                self.pos += 1
                single, double = Lexer.DOUBLE[char]
                if self._peek() == "=":
                    self.pos += 1
                    token = Token(double, col=col)
                else:
                    token = Token(single, col=col)

            elif char == ":":
                self.pos += 1
                token = Token(TokenType.VAR, self._next_word(), col)

            elif char == '"':
                self.pos += 1
                token = Token(TokenType.WORD, self._next_word(), col)

            else:
                token = self._word_token(col)

            self.tokens.append(token)

        if not self.tokens or self.tokens[-1].kind not in (TokenType.LINE_END, TokenType.LINE_CONT):
            self.tokens.append(Token(TokenType.LINE_END, col=self.pos))

        return self.tokens


def tokenize(line):
    """Tokenizes one line of Logo source. Raises LexError on an unrecognized character."""
    return Lexer(line).tokenize()
