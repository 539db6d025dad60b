"""Error handling for the Logo interpreter. Only LogoErrors should be encountered during running: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Error taxonomy:
    LogoError
     |- LexError            ; unrecognized character
     |- ParseError          ; unmatched bracket, missing operand, stray tokens
     `- LogoRuntimeError
         |- UnknownNameError  ; unknown procedure or variable
         |- ArityError        ; procedure ran out of inputs, or an output was left unused
         |- LogoTypeError     ; input did not reduce to the kind of value required
         |- DefinitionError   ; TO/END misuse, redefining a builtin
         `- LoadError         ; LOAD could not read its file
"""

import sys

from termcolor import colored


class LogoError(Exception):
    """Templates an error message so that it can be used to throw a Logo error. exprs fill the '{}' placeholders of
    msg and are bolded when displayed; expr is the offending source line and start/end delimit the offending part.
    """

    def __init__(self, msg, exprs=None, expr="", start=0, end=-1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.plain = msg.format(*exprs)
        self.msg = msg.format(*(colored(str(part), attrs=["bold"]) for part in exprs))
        super().__init__(self.plain)

        self.expr = expr
        self.start = start
        self.end = end if end != -1 else start + 1

        self.diagnosis = diagnosis
        self.internal = internal
        self.trace = []  # (path, line_num, line) of every LOAD the error passed through, innermost first

    def locate(self, expr, start=None, end=None):
        """Attaches the source line (and optionally the offending columns) if not already known. Returns self."""
        if not self.expr:
            self.expr = expr.rstrip("\n")
            if start is not None:
                self.start = start
                self.end = end if end is not None else start + 1
        return self


class LexError(LogoError):
    """Raised by the lexer for a character that cannot start any token."""

    def __init__(self, char, col, line=""):
        super().__init__("I don't know what to do with the character '{}'", char, expr=line, start=col)
        self.char = char
        self.col = col


class ParseError(LogoError):
    """Raised by the parser; col points at the offending token when known."""

    def __init__(self, msg, exprs=None, col=None):
        super().__init__(msg, exprs, start=col or 0, diagnosis=col is not None)
        self.col = col


class LogoRuntimeError(LogoError):
    """Raised while evaluating a line. Runtime errors have no column, so no caret is drawn."""

    def __init__(self, msg, exprs=None):
        super().__init__(msg, exprs, diagnosis=False)


class UnknownNameError(LogoRuntimeError):
    ...


class ArityError(LogoRuntimeError):
    ...


class LogoTypeError(LogoRuntimeError):
    ...


class DefinitionError(LogoRuntimeError):
    ...


class LoadError(LogoRuntimeError):
    ...


class ErrorHandler:
    """Context manager that will report Logo errors and suppress them, so the driver can go on with the next line."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdout
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to feeding the line."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after a line was fed successfully."""
        self.traceback[path] = (None, None)

    @staticmethod
    def diagnose(error, warning=False):
        """Returns error.expr with the offending part highlighted and underlined."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        end = min(max(error.end, error.start + 1), max(len(error.expr), error.start + 1))

        diagnosis = "  " + error.expr[:error.start]
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def _print(self, text):
        print(text, file=self.stream)

    def warn(self, *args, **kwargs):
        """Generates and prints a warning message based on args (same signature as LogoError)."""
        error = LogoError(*args, **kwargs)

        location = ""
        for file, (line, line_num) in self.traceback.items():
            if line is not None:
                location = f"{file}:{line_num}: "

        warning_msg = colored(location, attrs=["bold"])
        warning_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg
        self._print(warning_msg)

        if not error.internal and error.expr and error.diagnosis:
            self._print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error):
        """Prints error using error.trace and self.traceback. error must be a LogoError, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        frames = [(file, line_num, line) for file, (line, line_num) in self.traceback.items() if line]
        frames += reversed(error.trace)

        error_msg = ""
        for file, line_num, line in frames:
            error_msg += f"  File '{file}', line {line_num}:\n"
            error_msg += f"    {line.rstrip()}\n"

        if len(frames) > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        self._print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            self._print(ErrorHandler.diagnose(error))

        for path in self.traceback:  # if error occurred, forget the failed lines
            self.traceback[path] = (None, None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(LogoError("keyboard interrupt", diagnosis=False))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(LogoError("stack overflow: too many nested procedure calls", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, LogoError):
            self.throw(exc_val)
        elif exc_type is not None and getattr(exc_val, "reported", False):
            do_exit = True  # already reported by an inner handler
        elif exc_type is not None:
            exc_val.reported = True
            self.throw(LogoError("unknown error: '{}: {}'", [exc_type.__name__, exc_val], internal=True))
            do_exit = True

        return not do_exit
