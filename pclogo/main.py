"""Runs the Logo interpreter on a .lgo file, or in command-line mode. Also uses the error handling context manager.
Called from the pclogo console script.
"""

import argparse
import sys

from pclogo.core.evaluator import Evaluator
from pclogo.draw.graphics import RecordingGraphics, ScreenGraphics
from pclogo.draw.turtle import Turtle
from pclogo.lang.error import ErrorHandler
from pclogo.lang.session import Session
from pclogo.lang.shell import Shell

INJECTED_COMMANDS = [
    "REPEAT 6 [FD 50 LT 120 REPEAT 6 [FD 10 RT 60] RT 120 RT 60]",
]
RECURSION_LIMIT = 6000  # each Logo procedure call takes about ten Python frames


def main():
    """Runs the Logo interpreter. Called from the pclogo console script."""
    assert sys.version_info >= (3, 8), "pclogo cannot be run with python < 3.8"

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(description="PC Logo style interpreter with turtle graphics.")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--screen", action="store_true", help="draw in a window instead of headless")
        parser.add_argument("--inject", action="store_true", help="run a demo drawing before anything else")
        args = parser.parse_args()

        graphics = ScreenGraphics() if args.screen else RecordingGraphics()
        evaluator = Evaluator(Turtle(graphics))
        commands = INJECTED_COMMANDS if args.inject else []

        if args.file is not None:
            sess = Session(error_handler, args.file, evaluator)
            sess.run(commands)

            if args.screen:
                graphics.wait()

        else:
            sess = Session(error_handler, Session.SH_FILE, evaluator)
            sess.run(commands)
            Shell(sess).cmdloop()


if __name__ == "__main__":
    main()
