"""Runs the lox interpreter on a script file, or in command-line mode when no file is given. Also uses the error
handling context manager. Called from the lox console script.

Exit codes follow sysexits(3): 64 for a bad invocation, 65 when a syntax or resolution error kept the script from
running, 66 when the script could not be read and 70 when it failed at run time.
"""

import argparse
import sys

from lox import __version__
from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell

EX_OK = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70

RECURSION_LIMIT = 100000  # host frames; one nested lox call takes about ten


class ArgumentParser(argparse.ArgumentParser):
    """argparse exits with 2 on bad arguments; lox uses 64."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EX_USAGE, f"{self.prog}: error: {message}\n")


def build_parser():
    parser = ArgumentParser(prog="lox", description="Tree-walking interpreter for the lox scripting language.")
    parser.add_argument("script", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--tokens", action="store_true", help="only scan the script and print its tokens")
    parser.add_argument("--no-color", action="store_true", help="disable colors in error messages")
    parser.add_argument("--recursion-limit", type=int, default=RECURSION_LIMIT, metavar="N",
                        help="host recursion limit; lox calls nest to about a tenth of it (default: %(default)s)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def exit_status(error_handler):
    """Maps the errors a session reported to a process exit code."""
    if error_handler.had_io_error:
        return EX_NOINPUT
    if error_handler.had_error:
        return EX_DATAERR
    if error_handler.had_runtime_error:
        return EX_SOFTWARE
    return EX_OK


def main(argv=None):
    """Runs lox interpreter. Called from lox console script."""
    args = build_parser().parse_args(argv)

    if args.tokens and args.script is None:
        build_parser().error("--tokens requires a script")

    error_handler = ErrorHandler(fatal=args.script is not None, color=not args.no_color)
    sess = Session(error_handler, recursion_limit=args.recursion_limit)

    with error_handler:
        if args.tokens:
            for token in sess.tokens(sess.read(args.script), args.script):
                print(token)

        elif args.script is not None:
            sess.run_file(args.script)

        else:
            Shell(sess).cmdloop()
            error_handler.reset()  # the prompt's last error says nothing about the session as a whole

    return exit_status(error_handler)


if __name__ == "__main__":
    sys.exit(main())
