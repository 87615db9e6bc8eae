"""Lexical analysis for lox: converts raw source text into a flat list of Tokens.

Lexical grammar:

```
NUMBER     ::= DIGIT+ ( "." DIGIT+ )?          ; always a float, no separate integer type
STRING     ::= "\"" <any char except "\"">* "\""  ; may span lines, no escapes
IDENTIFIER ::= ALPHA ( ALPHA | DIGIT )*        ; keywords are identifiers found in KEYWORDS
ALPHA      ::= "a" ... "z" | "A" ... "Z" | "_"
DIGIT      ::= "0" ... "9"

<comment>  ::= "//" <char>*                    ; discarded up to end of line
```

Two-character operators are matched greedily (maximal munch): "!=" is one BANG_EQUAL token, never BANG then EQUAL.

Source: https://craftinginterpreters.com/scanning.html
"""

from lox.core.tokens import KEYWORDS, Token, TokenType
from lox.lang.numerical import number


class Scanner:
    """Single-use scanner over one source text. Never raises: errors go to error_handler and scanning continues."""
    SINGLE = {
        "(": TokenType.LEFT_PAREN,
        ")": TokenType.RIGHT_PAREN,
        "{": TokenType.LEFT_BRACE,
        "}": TokenType.RIGHT_BRACE,
        ",": TokenType.COMMA,
        ".": TokenType.DOT,
        "-": TokenType.MINUS,
        "+": TokenType.PLUS,
        ";": TokenType.SEMICOLON,
        "*": TokenType.STAR,
    }
    # char: (type if followed by "=", type otherwise)
    DOUBLE = {
        "!": (TokenType.BANG_EQUAL, TokenType.BANG),
        "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
        "<": (TokenType.LESS_EQUAL, TokenType.LESS),
        ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
    }
    WHITESPACE = " \r\t"

    def __init__(self, source, error_handler):
        self.source = source
        self.error_handler = error_handler
        self.tokens = []

        self.start = 0       # first char of the lexeme being scanned
        self.current = 0     # char about to be consumed
        self.line = 1
        self.line_start = 0  # offset of the first char of the current line, for columns

        self._start_line = 1
        self._start_column = 1

    def scan_tokens(self):
        """Scans the whole source. The returned list always ends with an EOF token."""
        while not self.is_at_end():
            self.start = self.current
            self._start_line = self.line
            self._start_column = self.current - self.line_start + 1
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line, self.current - self.line_start + 1))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in Scanner.SINGLE:
            self.add_token(Scanner.SINGLE[char])

        elif char in Scanner.DOUBLE:
            matched, unmatched = Scanner.DOUBLE[char]
            self.add_token(matched if self.match("=") else unmatched)

        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)

        elif char in Scanner.WHITESPACE:
            pass

        elif char == "\n":
            self.newline()

        elif char == "\"":
            self.string()

        elif self.is_digit(char):
            self.number()

        elif self.is_alpha(char):
            self.identifier()

        else:
            self.error_handler.error(self.line, f"Unexpected character: {char}")

    def string(self):
        while self.peek() != "\"" and not self.is_at_end():
            if self.peek() == "\n":
                self.advance()
                self.newline()
            else:
                self.advance()

        if self.is_at_end():
            self.error_handler.error(self.line, "Unterminated string.")
            return

        self.advance()  # closing quote
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while self.is_digit(self.peek()):
            self.advance()

        # a fraction needs digits on both sides of the "."
        if self.peek() == "." and self.is_digit(self.peek_next()):
            self.advance()
            while self.is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, number(self.source[self.start:self.current]))

    def identifier(self):
        while self.is_alpha_numeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def newline(self):
        self.line += 1
        self.line_start = self.current

    @staticmethod
    def is_digit(char):
        return "0" <= char <= "9"

    @staticmethod
    def is_alpha(char):
        return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"

    def is_alpha_numeric(self, char):
        return self.is_alpha(char) or self.is_digit(char)

    def is_at_end(self):
        return self.current >= len(self.source)

    def advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected):
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        if self.is_at_end():
            return "\0"
        return self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return "\0"
        return self.source[self.current + 1]

    def add_token(self, token_type, literal=None):
        text = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, text, literal, self._start_line, self._start_column))


def scan(source, error_handler):
    """Convenience wrapper: returns the token list for source."""
    return Scanner(source, error_handler).scan_tokens()
