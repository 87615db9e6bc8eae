"""Handles interactive/command-line mode for the lox interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lox interpreter shell."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Runs arbitrary lox input. A bare expression is evaluated and its value echoed."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = self.sess.preprocess_line(self._tmp_line + line)

            if add_to_prev:
                self._tmp_line = line + "\n"
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.sess.error_handler.reset()  # errors never carry over to the next input
            if self.sess.is_expression(line):
                result = self.sess.evaluate(line)
                if result is not None:
                    print(result, file=self.stdout)
            else:
                self.sess.run(line)

    def onecmd(self, line):
        """Sends everything but the shell's own commands to default, so lox keywords are never taken as commands."""
        command = line.strip()
        if line == "EOF" and self._tmp_line:
            # input ran out mid-construct, the unfinished text is run once and reports its error
            pending, self._tmp_line = self._tmp_line, ""
            self.prompt = self._tmp_prompt
            with self.sess.error_handler:
                self.sess.error_handler.reset()
                self.sess.run(pending)
            return self.do_EOF(line)
        if not self._tmp_line and command in ("help", "exit", "EOF"):
            return super().onecmd(command)
        if not command and not self._tmp_line:
            return self.emptyline()
        return self.default(line)

    def do_help(self, arg):
        """Prints a short introduction to lox instead of per-command docs."""
        print("Welcome to the lox interpreter!\n\n"
              "Lox is a small dynamically-typed scripting language with first-class functions, \n"
              "closures and classes. Statements end with ';', for example 'var a = 1;' or \n"
              "'print a + 2;'. Type an expression without the ';' to see its value. \n"
              "Unclosed braces continue the input on the next line. Type 'exit' to leave.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
