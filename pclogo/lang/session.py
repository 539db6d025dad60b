"""Session control for Logo. Feeds source lines to an Evaluator, either from a file or from the command line, and
reports errors through an ErrorHandler so that a bad line never stops the session.
"""

from pclogo.core.evaluator import Evaluator
from pclogo.core.syntax import show
from pclogo.lang.error import LoadError


class Session:
    """Governs a Logo session: one evaluator, the file its lines come from and the error handler reporting on them."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path=SH_FILE, evaluator=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path  # used for error messages
        self.evaluator = evaluator if evaluator is not None else Evaluator()
        self.line_num = 0
        self.results = []  # every value produced by a line, in order

    @property
    def continuing(self):
        """Whether the next line continues the previous one (open continuation or procedure definition)."""
        return bool(self.evaluator.continued) or self.evaluator.definition is not None

    def add(self, line, line_num=None):
        """Feeds line to the evaluator and prints the value it produces, if any. Errors are reported by the error
        handler and swallowed. Returns the value or None.
        """
        self.line_num = line_num if line_num is not None else self.line_num + 1
        self.error_handler.register_line(self.path, line.rstrip("\n"), self.line_num)  # in case error is raised

        with self.error_handler:
            result = self.evaluator.feed(line)
            self.error_handler.remove_line(self.path)  # error was not raised

            if result is not None:
                self.results.append(result)
                self.evaluator.print(show(result))
            return result

        return None

    def run(self, commands=()):
        """Feeds commands, then every line of self.path (unless this is a command-line session)."""
        for command in commands:
            self.add(command)

        if self.path == Session.SH_FILE:
            return

        with self.error_handler:
            try:
                with open(self.path, "r", encoding="utf-8") as file:
                    lines = file.readlines()
            except (OSError, UnicodeDecodeError):
                raise LoadError("'{}' could not be opened", self.path)

            for line_num, line in enumerate(lines, 1):
                self.add(line, line_num)

        if self.continuing:
            self.error_handler.warn("'{}' ended before its last line was finished", self.path, diagnosis=False)

    def pop(self):
        """Removes and returns the latest result."""
        return self.results.pop()
