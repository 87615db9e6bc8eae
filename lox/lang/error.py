"""Error handling for the lox language. Scanner, parser and resolver report through an ErrorHandler and keep going, so
one pass can surface several independent problems. The interpreter raises LoxRuntimeErrors, which are reported once
and end the current run. If any other Python exception makes it all the way to ErrorHandler, it is assumed to be an
internal issue.
"""

import sys
from dataclasses import dataclass

from termcolor import colored

from lox.core.tokens import TokenType


class LoxError(Exception):
    """Base class for every error raised by the interpreter itself."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ParseError(LoxError):
    """Local parse failure. Raised to unwind to the enclosing declaration, where the parser resynchronizes."""

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token


class LoxRuntimeError(LoxError):
    """Failure during evaluation, tied to the token whose evaluation failed."""

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token


class StackOverflowError(LoxRuntimeError):
    """The host call stack was exhausted by deeply nested lox calls."""

    def __init__(self, token):
        super().__init__(token, "Stack overflow.")


class SourceError(LoxError):
    """A script file could not be read."""

    def __init__(self, path):
        super().__init__(f"'{path}' could not be opened")
        self.path = path


@dataclass(frozen=True)
class Diagnostic:
    """A single report. str() gives the canonical uncolored text."""
    SYNTAX = "syntax"      # lexical, parse and resolution errors
    RUNTIME = "runtime"
    INTERNAL = "internal"
    IO = "io"
    WARNING = "warning"

    kind: str
    message: str
    line: int = None
    where: str = ""
    column: int = 0
    lexeme: str = ""

    def __str__(self):
        if self.kind == Diagnostic.RUNTIME:
            return self.message if self.line is None else f"{self.message}\n[line {self.line}]"
        if self.kind == Diagnostic.WARNING:
            return f"Warning: {self.message}"
        if self.line is None:
            return f"Error: {self.message}"
        return f"[line {self.line}] Error{self.where}: {self.message}"


class ErrorHandler:
    """Diagnostic collector shared by every stage of a session. Also a context manager that reports escaping
    exceptions instead of letting them crash the host.
    """
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, stream=None, fatal=True, color=True):
        self.stream = stream or sys.stderr
        self.fatal = fatal  # whether internal faults end the process
        self.color = color

        self.path = None
        self.sources = {}  # dict of path: source lines, used to quote offending lines
        self.diagnostics = []

        self.had_error = False
        self.had_runtime_error = False

    def register_source(self, path, source):
        """Registers source text under path so diagnoses can quote it. Should be called prior to Session run."""
        self.path = path
        self.sources[path] = source.split("\n")

    def reset(self):
        """Clears error state between independent runs (REPL inputs)."""
        self.diagnostics = []
        self.had_error = False
        self.had_runtime_error = False

    def error(self, line, message):
        """Reports a lexical error that has no offending token, only a line."""
        self._report(Diagnostic(Diagnostic.SYNTAX, message, line))

    def error_at(self, token, message):
        """Reports a syntax or resolution error at token."""
        where = " at end" if token.type == TokenType.EOF else f" at '{token.lexeme}'"
        self._report(Diagnostic(Diagnostic.SYNTAX, message, token.line, where, token.column, token.lexeme))

    def runtime_error(self, error):
        """Reports a LoxRuntimeError. The run that raised it has already stopped."""
        self.had_runtime_error = True

        token = error.token
        if token is None:
            self._emit(Diagnostic(Diagnostic.RUNTIME, error.message))
        else:
            self._emit(Diagnostic(Diagnostic.RUNTIME, error.message, token.line, "", token.column, token.lexeme))

    def warn(self, message):
        """Prints a notice that does not affect the session's error state."""
        self._emit(Diagnostic(Diagnostic.WARNING, message))

    def io_error(self, error):
        self._emit(Diagnostic(Diagnostic.IO, error.message))

    def internal(self, message):
        self.had_runtime_error = True
        self._emit(Diagnostic(Diagnostic.INTERNAL, message))

    @property
    def had_io_error(self):
        return any(diagnostic.kind == Diagnostic.IO for diagnostic in self.diagnostics)

    def _report(self, diagnostic):
        self.had_error = True
        self._emit(diagnostic)

    def _emit(self, diagnostic):
        self.diagnostics.append(diagnostic)
        print(self.render(diagnostic), file=self.stream)

        diagnosis = self.diagnose(diagnostic)
        if diagnosis:
            print(diagnosis, file=self.stream)

    def _colored(self, text, color=None, attrs=None):
        if not self.color:
            return text
        return colored(text, color, attrs=attrs)

    def render(self, diagnostic):
        """Returns str(diagnostic) with terminal colors applied."""
        if diagnostic.kind == Diagnostic.RUNTIME:
            message = self._colored(diagnostic.message, ErrorHandler.ERROR, attrs=["bold"])
            if diagnostic.line is None:
                return message
            return message + "\n" + self._colored(f"[line {diagnostic.line}]", attrs=["bold"])

        if diagnostic.kind == Diagnostic.WARNING:
            return self._colored("Warning: ", ErrorHandler.WARNING, attrs=["bold"]) + diagnostic.message

        if diagnostic.kind == Diagnostic.INTERNAL:
            tag = self._colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
            return tag + self._colored("Error: ", ErrorHandler.ERROR, attrs=["bold"]) + diagnostic.message

        if diagnostic.line is None:
            return self._colored("Error: ", ErrorHandler.ERROR, attrs=["bold"]) + diagnostic.message

        result = self._colored(f"[line {diagnostic.line}]", attrs=["bold"])
        result += self._colored(" Error", ErrorHandler.ERROR, attrs=["bold"])
        return result + f"{diagnostic.where}: {diagnostic.message}"

    def diagnose(self, diagnostic):
        """Returns the offending source line with the offending lexeme highlighted, or None if there is nothing to
        point at.
        """
        lines = self.sources.get(self.path)
        if not lines or not diagnostic.line or diagnostic.line > len(lines):
            return None

        line = lines[diagnostic.line - 1]
        if not diagnostic.lexeme or diagnostic.column < 1:
            return None

        start = diagnostic.column - 1
        lexeme = diagnostic.lexeme.split("\n")[0]
        if not line.startswith(lexeme, start):
            return None  # token scanned from an earlier source, e.g. a function defined at a previous prompt

        color = ErrorHandler.WARNING if diagnostic.kind == Diagnostic.WARNING else ErrorHandler.ERROR
        end = start + len(lexeme)

        result = "  " + line[:start]
        result += self._colored(line[start:end], color, attrs=["bold"])
        result += line[end:] + "\n"

        result += "  " + " " * start
        result += self._colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return result

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or exc_type is SystemExit:
            return False

        if issubclass(exc_type, KeyboardInterrupt):
            self.had_runtime_error = True  # the interrupted run did not complete
            self.warn("keyboard interrupt")
        elif issubclass(exc_type, RecursionError):
            self._report(Diagnostic(Diagnostic.SYNTAX, "Program is nested too deeply."))
        elif issubclass(exc_type, LoxRuntimeError):
            self.runtime_error(exc_val)
        elif issubclass(exc_type, SourceError):
            self.io_error(exc_val)
        elif issubclass(exc_type, LoxError):
            self.internal(exc_val.message)
        else:
            self.internal(f"unknown error: '{exc_type.__name__}: {exc_val}'")
            if self.fatal:
                raise SystemExit(70)

        return True
