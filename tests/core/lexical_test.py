import unittest

from pclogo.core.lexical import Token, TokenType, tokenize
from pclogo.lang.error import LexError


def F(name):
    return Token(TokenType.FUNCTION, name)


def I(value):
    return Token(TokenType.INTEGER, value)


def T(kind, value=None):
    return Token(kind, value)


WS = Token(TokenType.WHITESPACE)
END = Token(TokenType.LINE_END)
CONT = Token(TokenType.LINE_CONT)


class TokenizeTestCase(unittest.TestCase):

    def test_tokenize(self):
        should_pass = {
            "TO FOO :A\n": [F("TO"), WS, F("FOO"), WS, T(TokenType.VAR, "A"), END],
            'MAKE "ASD "SOMETHING\n': [F("MAKE"), WS, T(TokenType.WORD, "ASD"), WS, T(TokenType.WORD, "SOMETHING"), END],
            "shown? []\n": [F("SHOWN?"), WS, T(TokenType.LBRACKET), T(TokenType.RBRACKET), END],
            "fOrWaRd 10": [F("FORWARD"), WS, I(10), END],
            "4": [I(4), END],
            "4\\": [I(4), CONT],
            "": [END],
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, tokenize(case), case)

    def test_numbers(self):
        tokens = tokenize("bk 50.5 rt  .5 fd 19.\n")
        self.assertEqual([
            F("BK"), WS, T(TokenType.FLOAT, 50.5), WS, F("RT"), WS, T(TokenType.FLOAT, 0.5), WS,
            F("FD"), WS, T(TokenType.FLOAT, 19.0), END,
        ], tokens)
        self.assertIsInstance(tokenize("10")[0].value, int)

        should_be_functions = ["1.2.3", "E5", "INF", "NAN", "."]
        for case in should_be_functions:
            self.assertEqual(TokenType.FUNCTION, tokenize(case)[0].kind, case)

    def test_operators(self):
        tokens = tokenize("1<=2>3<4>=5=6+7-8*9/1%2")
        kinds = [token.kind for token in tokens if token.kind not in (TokenType.INTEGER, TokenType.LINE_END)]
        self.assertEqual([
            TokenType.LESS_EQ, TokenType.GREATER, TokenType.LESS, TokenType.GREATER_EQ, TokenType.EQUAL,
            TokenType.PLUS, TokenType.MINUS, TokenType.MULTIPLY, TokenType.DIVIDE, TokenType.MODULO,
        ], kinds)

        brackets = [token.kind for token in tokenize("()[]{}")[:-1]]
        self.assertEqual([
            TokenType.LPAREN, TokenType.RPAREN, TokenType.LBRACKET, TokenType.RBRACKET, TokenType.LBRACE,
            TokenType.RBRACE,
        ], brackets)

    def test_whitespace(self):
        # no whitespace token at the beginning of a line, one per run elsewhere
        self.assertEqual([I(4), WS, I(5), WS, END, I(6), END], tokenize("  4 5 \n 6\n"))
        self.assertEqual([I(1), WS, T(TokenType.MINUS), I(3), END], tokenize("1 \t -3"))

    def test_line_continuation(self):
        self.assertEqual([
            F("REPEAT"), WS, I(4), WS, T(TokenType.LBRACKET), F("FD"), WS, I(40), CONT,
            F("RT"), WS, I(90), T(TokenType.RBRACKET), F("FD"), WS, I(50), END,
        ], tokenize("REPEAT 4 [FD 40\\\nRT 90]fd 50\n"))

    def test_escape(self):
        should_pass = {
            'PRINT "A\\ B': T(TokenType.WORD, "A B"),
            'PRINT "\\[X\\]': T(TokenType.WORD, "[X]"),
            "PRINT \\(": F("("),
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, tokenize(case)[2], case)

    def test_comments(self):
        self.assertEqual([F("FD"), WS, I(10), WS, END], tokenize("FD 10 ; go up\n"))
        self.assertEqual([END], tokenize("; nothing but a comment"))

    def test_columns(self):
        tokens = tokenize("FD 50 RT 90")
        self.assertEqual([0, 2, 3, 5, 6, 8, 9], [token.col for token in tokens[:-1]])

    def test_unknown_char(self):
        should_raise = {"fd 20`~": ("`", 5), "PRINT 1 & 2": ("&", 8), "@": ("@", 0)}
        for case, (char, col) in should_raise.items():
            with self.assertRaises(LexError, msg=case) as context:
                tokenize(case)
            self.assertEqual(char, context.exception.char)
            self.assertEqual(col, context.exception.col)


if __name__ == '__main__':
    unittest.main()
