"""Session control for lox. Wires scanner, parser, resolver and interpreter together to run a script file or the
lines typed at the interactive prompt.

A run goes scan -> parse -> resolve -> interpret. Any syntax or resolution error stops the run before a single
statement executes; a runtime error stops it midway.
"""

import sys

from lox.core.interpreter import Interpreter
from lox.core.lexical import Scanner
from lox.core.parser import Parser
from lox.core.resolver import Resolver
from lox.lang.error import SourceError


class Session:
    """Governs a lox session. The interpreter, and therefore every global definition, persists across runs."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, stdout=None, recursion_limit=None):
        self.error_handler = error_handler
        self.interpreter = Interpreter(error_handler, stdout)

        if recursion_limit is not None and recursion_limit > sys.getrecursionlimit():
            sys.setrecursionlimit(recursion_limit)

    @staticmethod
    def preprocess_line(line):
        """Strips trailing whitespace and returns (line, whether the input continues on the next line). Input
        continues while braces or parentheses are open or a string is unterminated.
        """
        line = line.rstrip()

        depth, in_string, i = 0, False, 0
        while i < len(line):
            char = line[i]
            if in_string:
                in_string = char != "\""
            elif char == "\"":
                in_string = True
            elif line.startswith("//", i):
                i = line.find("\n", i)  # comments run to the end of their line
                if i == -1:
                    break
            elif char in "({":
                depth += 1
            elif char in ")}":
                depth -= 1
            i += 1

        return line, in_string or depth > 0

    @staticmethod
    def is_expression(line):
        """Whether a complete prompt input should be evaluated as a bare expression rather than run as statements."""
        line = line.strip()
        return bool(line) and not line.endswith(";") and not line.endswith("}")

    def tokens(self, source, path=SH_FILE):
        """Scans source only. Used to dump the token stream."""
        self.error_handler.register_source(path, source)
        return Scanner(source, self.error_handler).scan_tokens()

    def run(self, source, path=SH_FILE):
        """Runs source as a program. Returns whether it ran to completion without any error."""
        self.error_handler.register_source(path, source)

        tokens = Scanner(source, self.error_handler).scan_tokens()
        statements = Parser(tokens, self.error_handler).parse()
        if self.error_handler.had_error:
            return False

        Resolver(self.interpreter, self.error_handler).resolve(statements)
        if self.error_handler.had_error:
            return False

        self.interpreter.interpret(statements)
        return not self.error_handler.had_runtime_error

    @staticmethod
    def read(path):
        """Returns the text of the script at path."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                return file.read()
        except (OSError, UnicodeDecodeError):
            raise SourceError(path)

    def run_file(self, path):
        return self.run(self.read(path), path)

    def evaluate(self, source, path=SH_FILE):
        """Evaluates source as one expression and returns the text of its value, or None if an error was reported."""
        self.error_handler.register_source(path, source)

        tokens = Scanner(source, self.error_handler).scan_tokens()
        expr = Parser(tokens, self.error_handler).parse_expression()
        if expr is None or self.error_handler.had_error:
            return None

        Resolver(self.interpreter, self.error_handler).resolve_expression(expr)
        if self.error_handler.had_error:
            return None

        return self.interpreter.interpret_expression(expr)
