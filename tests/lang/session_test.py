import io
import os
import tempfile
import unittest

from pclogo.core.evaluator import Evaluator
from pclogo.core.syntax import Num
from pclogo.draw.graphics import RecordingGraphics
from pclogo.draw.turtle import Turtle
from pclogo.lang.builtins import BUILTINS
from pclogo.lang.error import ErrorHandler, LogoError, ParseError
from pclogo.lang.session import Session
from pclogo.lang.shell import Shell


def boom(evaluator, name):
    raise ValueError("boom")


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.errors = io.StringIO()
        self.output = io.StringIO()
        self.graphics = RecordingGraphics()
        self.evaluator = Evaluator(Turtle(self.graphics), output=self.output, builtins=dict(BUILTINS, BOOM=boom))

        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)
        cwd = os.getcwd()
        os.chdir(self.directory.name)
        self.addCleanup(os.chdir, cwd)

    def session(self, path=Session.SH_FILE):
        return Session(ErrorHandler(stream=self.errors), path, self.evaluator)

    def write(self, name, text):
        with open(name, "w") as file:
            file.write(text)

    def test_add(self):
        sess = self.session()
        self.assertEqual(Num(2), sess.add("1 + 1"))
        self.assertIsNone(sess.add("FD 10"))
        self.assertEqual(["2"], self.output.getvalue().splitlines())
        self.assertEqual(Num(2), sess.pop())
        self.assertEqual("", self.errors.getvalue())

    def test_errors_do_not_stop_session(self):
        sess = self.session()
        sess.add("FD 10")
        self.assertIsNone(sess.add("NOPE"))
        sess.add("FD 10")

        errors = self.errors.getvalue()
        self.assertIn("File '<in>', line 2", errors)
        self.assertIn("I don't know how to", errors)
        self.assertIn("NOPE", errors)
        self.assertNotIn("Traceback", errors)
        self.assertEqual(2, len(self.graphics.lines()))
        self.assertTrue(self.evaluator.is_idle())

    def test_continuing(self):
        sess = self.session()
        sess.add("TO FOO")
        self.assertTrue(sess.continuing)
        sess.add("END")
        self.assertFalse(sess.continuing)
        sess.add("FD \\")
        self.assertTrue(sess.continuing)
        sess.add("10")
        self.assertFalse(sess.continuing)

    def test_run_file(self):
        self.write("main.lgo", "FD 10\nNOPE\nTO DOUBLE :X\nOP :X * 2\nEND\nDOUBLE 4\n")
        sess = self.session("main.lgo")
        sess.run()

        self.assertIn("File 'main.lgo', line 2", self.errors.getvalue())
        self.assertEqual(["8"], self.output.getvalue().splitlines())
        self.assertEqual(1, len(self.graphics.lines()))

    def test_run_commands_first(self):
        self.write("main.lgo", "FD :SIZE\n")
        self.session("main.lgo").run(['MAKE "SIZE 30'])
        self.assertEqual([((0, 0), (0, 30))], self.graphics.lines())

    def test_run_missing_file(self):
        self.session("missing.lgo").run()
        self.assertIn("could not be opened", self.errors.getvalue())

    def test_undecodable_file(self):
        with open("latin.lgo", "wb") as file:
            file.write(b"FD 10 \xe9\n")
        sess = self.session()
        self.assertIsNone(sess.add('LOAD "latin.lgo'))
        self.assertIn("can't read the file", self.errors.getvalue())

        self.session("latin.lgo").run()
        self.assertIn("could not be opened", self.errors.getvalue())
        self.assertEqual([], self.graphics.commands)

    def test_run_unfinished_file(self):
        self.write("open.lgo", "TO FOREVER\nFD 10\n")
        self.session("open.lgo").run()
        self.assertIn("warning: ", self.errors.getvalue())

    def test_nested_load_traceback(self):
        self.write("inner.lgo", "FD 10\nNOPE\n")
        self.write("main.lgo", 'LOAD "inner.lgo\n')
        self.session("main.lgo").run()

        errors = self.errors.getvalue()
        self.assertIn("Traceback:", errors)
        self.assertLess(errors.index("File 'main.lgo', line 1"), errors.index("File 'inner.lgo', line 2"))

    def test_internal_error(self):
        sess = self.session()
        self.assertRaises(ValueError, sess.add, "BOOM")
        self.assertIn("[internal]", self.errors.getvalue())
        self.assertTrue(self.evaluator.is_idle())

    def test_stack_overflow(self):
        sess = self.session()
        sess.add("TO LOOP")
        sess.add("FD 1 LOOP")
        sess.add("END")
        self.assertIsNone(sess.add("LOOP"))
        self.assertIn("stack overflow", self.errors.getvalue())
        self.assertTrue(self.evaluator.is_idle())


class ErrorHandlerTestCase(unittest.TestCase):

    def test_diagnose(self):
        error = ParseError("unexpected '{}'", ")", col=6).locate("FD 50 )")
        lines = ErrorHandler.diagnose(error).splitlines()
        self.assertEqual(2, len(lines))
        self.assertTrue(lines[0].startswith("  FD 50 "))
        self.assertTrue(lines[1].startswith("  " + " " * 6))

    def test_suppresses_logo_errors(self):
        stream = io.StringIO()
        with ErrorHandler(stream=stream):
            raise LogoError("{} went wrong", "SOMETHING")
        self.assertIn("went wrong", stream.getvalue())


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.output = io.StringIO()
        evaluator = Evaluator(output=self.output)
        self.errors = io.StringIO()
        self.shell = Shell(Session(ErrorHandler(stream=self.errors), evaluator=evaluator), stdout=io.StringIO())

    def test_prompt_swap(self):
        self.assertEqual("? ", self.shell.prompt)
        self.shell.onecmd("TO FOO")
        self.assertEqual("~ ", self.shell.prompt)
        self.shell.onecmd("OP 5")
        self.shell.onecmd("END")
        self.assertEqual("? ", self.shell.prompt)

        self.shell.onecmd("FOO")
        self.assertEqual(["5"], self.output.getvalue().splitlines())

    def test_logo_lines_are_not_shell_commands(self):
        self.assertIsNone(self.shell.onecmd("?"))
        self.assertIn("I don't know how to", self.errors.getvalue())

        self.shell.onecmd("TO HELP")
        self.shell.onecmd("OP 2")
        self.shell.onecmd("END")
        self.shell.onecmd("PRINT HELP")
        self.assertEqual(["2"], self.output.getvalue().splitlines())

    def test_exit(self):
        self.assertFalse(self.shell.onecmd(""))
        self.assertTrue(self.shell.onecmd("exit"))


if __name__ == '__main__':
    unittest.main()
