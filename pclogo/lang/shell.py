"""Handles interactive/command-line mode for the Logo interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Logo interpreter shell."""
    intro = "PC Logo interpreter :: Python backend\nType 'help' for more information, 'exit' to quit."
    prompt = "? "
    secondary_prompt = "~ "  # used for line continuations and procedure definitions
    _tmp_prompt = "? "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

    def onecmd(self, line):
        """Only the bare shell words below are commands; every other line is Logo, including ones starting with '?'."""
        if line.strip() in ("help", "exit", "EOF"):
            return super().onecmd(line.strip())
        if not line.strip():
            return self.emptyline()
        return self.default(line)

    def default(self, line):
        """Executes an arbitrary Logo line."""
        self.sess.add(line)
        self.prompt = self.secondary_prompt if self.sess.continuing else self._tmp_prompt

    def do_help(self, arg):
        """Prints a short Logo primer instead of the cmd help listing."""
        print("Welcome to the PC Logo interpreter!\n\n"
              "Logo drives a turtle that draws as it moves. Try 'REPEAT 4 [FD 50 RT 90]' to\n"
              "draw a square. Arithmetic works infix ('PRINT 1 + 2 * 3') or prefix\n"
              "('PRINT (+ 1 2 3)'). Define your own procedures with\n\n"
              "    TO SQUARE :SIZE\n"
              "    REPEAT 4 [FD :SIZE RT 90]\n"
              "    END\n\n"
              "and end a line with '\\' to continue it on the next one.")

    def emptyline(self):
        """An empty line is a no-op in Logo, so the last line is not repeated."""
        return ""

    def do_EOF(self, arg):
        """Ctrl-D leaves the shell."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
