"""Tree-walking evaluator for Logo.

Calls are parsed without arguments, so a procedure gets its inputs by pulling them off the remainder of the line it
appears in: evaluating `FD 10 + 5 RT 90` pushes the queue [FD, 10 + 5, RT, 90]; FD pops `10 + 5` and evaluates it,
then RT pops 90. Every Line, Group, list body and user procedure call pushes its own queue on self.pending (and a
procedure call also pushes a frame of locals on self.frames); both are popped on the way out, error or not.

Values are the self-evaluating nodes Num, WordLit and ListLit. A ListLit holds unevaluated nodes until it is run as a
REPEAT/FOR body.
"""

from collections import deque
from dataclasses import dataclass, field
import math
import os
import sys

from pclogo.core.lexical import COMPARISON, TokenType, tokenize
from pclogo.core.syntax import (EMPTY, Binary, Call, Group, Line, ListLit, Nary, Negation, Num, Return, VarRef,
                                WordLit, format_number, parse_line, show)
from pclogo.draw.graphics import RecordingGraphics
from pclogo.draw.turtle import Turtle
from pclogo.lang.builtins import BUILTINS
from pclogo.lang.error import (ArityError, DefinitionError, LoadError, LogoError, LogoRuntimeError, LogoTypeError,
                               UnknownNameError)


@dataclass
class Procedure:
    """A user procedure: TO name :formals... body... END. source keeps the body lines as they were typed."""
    name: str
    formals: list
    lines: list = field(default_factory=list)
    source: list = field(default_factory=list)

    def title(self):
        return " ".join(["TO", self.name] + [":" + formal for formal in self.formals])


class Evaluator:
    """Governs one running Logo program: variables, procedures and the turtle."""
    SUFFIX = ".lgo"  # tried by LOAD when the file name has no extension

    def __init__(self, turtle=None, output=None, builtins=None):
        self.turtle = turtle if turtle is not None else Turtle(RecordingGraphics())
        self.output = output if output is not None else sys.stdout

        self.globals = {}  # name: value
        self.frames = []   # locals of the running procedures, innermost last
        self.pending = []  # remaining expressions of every open line/list/call, innermost last

        self.builtins = dict(BUILTINS if builtins is None else builtins)
        self.procedures = {}    # name: Procedure
        self.definition = None  # Procedure being defined between TO and END

        self.continued = []       # tokens of a line ending with a continuation
        self.continued_text = ""

    # ---------------------------------------------------------------------------------------------------------------
    # Feeding lines
    #

    def feed(self, line):
        """Lexes, parses and evaluates one line. Returns the value the line produced, or None. Lines of a procedure
        definition are collected instead of evaluated.
        """
        text, node = self.read(line)
        if node is EMPTY:
            return None

        if self.definition is not None:
            self._collect(text, node)
            return None

        if self._is_call(node, "TO"):
            self.begin_definition(node)
            return None

        result = self.eval(node)
        if isinstance(result, Return):
            raise LogoRuntimeError("Can only use {} inside a procedure", "OUTPUT")
        return result

    def read(self, line):
        """Returns (text, Line) for line, or (text, EMPTY) if line ends with a continuation (its tokens are then
        prepended to the next line).
        """
        buffered, text = self.continued, self.continued_text + line
        self.continued, self.continued_text = [], ""

        try:
            tokens = buffered + tokenize(line)
            if tokens[-1].kind is TokenType.LINE_CONT:
                self.continued, self.continued_text = tokens, text
                return text, EMPTY
            return text, parse_line(tokens)
        except LogoError as error:
            if buffered:
                error.diagnosis = False  # columns refer to a single physical line
            raise error.locate(text)

    def is_idle(self):
        """Whether no procedure frame or pending expression is left over (true between top-level lines)."""
        return not self.frames and not self.pending

    @staticmethod
    def _is_call(line, name):
        return bool(line.items) and isinstance(line.items[0], Call) and line.items[0].name == name

    # ---------------------------------------------------------------------------------------------------------------
    # Procedure definitions
    #

    def begin_definition(self, line):
        """Handles `TO name :a :b`: validates the title line and starts collecting body lines."""
        title = line.items[1:]
        if not title:
            raise DefinitionError("{} needs more inputs", "TO")

        name, *formals = title
        if not isinstance(name, Call):
            raise DefinitionError("{} needs a name as its first input, not {}", ["TO", show(name, top=False)])
        if name.name in self.builtins:
            raise DefinitionError("{} is already in use. Try a different name.", name.name)

        for formal in formals:
            if not isinstance(formal, VarRef):
                raise DefinitionError("{} doesn't like {} as input", ["TO", show(formal, top=False)])

        self.definition = Procedure(name.name, [formal.name for formal in formals])

    def _collect(self, text, line):
        """Adds line to the procedure being defined, or finishes it on END."""
        if self._is_call(line, "TO"):
            raise DefinitionError("Can't use TO inside the definition of {}", self.definition.name)

        if self._is_call(line, "END"):
            procedure, self.definition = self.definition, None
            self.define(procedure)
            return

        if not line.items:
            return
        self.definition.lines.append(line)
        self.definition.source.append(text.strip())

    def define(self, procedure):
        """Adds procedure to the procedure table, replacing any previous definition with the same name."""
        if procedure.name in self.builtins:
            raise DefinitionError("{} is already in use. Try a different name.", procedure.name)
        self.procedures[procedure.name] = procedure

    # ---------------------------------------------------------------------------------------------------------------
    # Evaluation
    #

    def eval(self, node):
        """Evaluates node. Returns a value, a Return (OUTPUT was run), or None if nothing was output."""
        if isinstance(node, (Num, WordLit, ListLit)):
            return node
        elif isinstance(node, VarRef):
            return self.lookup(node.name)
        elif isinstance(node, Call):
            return self.call(node.name)
        elif isinstance(node, Line):
            return self.eval_line(node.items)
        elif isinstance(node, Group):
            return self.eval_group(node.items)
        elif isinstance(node, Negation):
            return Num(-self.number(node.expr, "-"))
        elif isinstance(node, Binary):
            return self.eval_binary(node)
        elif isinstance(node, Nary):
            return self.eval_nary(node)
        elif isinstance(node, Return):
            return node

        raise LogoRuntimeError("I don't know how to evaluate {}", repr(node))

    def eval_line(self, items):
        """Evaluates statements until one of them produces something. Anything left over after a value is an error
        since nothing can use the value.
        """
        queue = deque(items)
        self.pending.append(queue)
        try:
            result = None
            while queue and result is None:
                result = self.eval(queue.popleft())

            if queue and result is not None and not isinstance(result, Return):
                raise ArityError("You don't say what to do with {}", show(result, top=False))
            return result
        finally:
            self.pending.pop()

    def eval_group(self, items):
        """( ... ) evaluates its first element, which may pull its inputs from the rest. The rest is discarded."""
        queue = deque(items)
        self.pending.append(queue)
        try:
            if not queue:
                return None
            return self.eval(queue.popleft())
        finally:
            self.pending.pop()

    def run(self, block):
        """Runs the instructions of a list (REPEAT/FOR body). Returns a Return if OUTPUT was run, else None.
        An instruction that produces a value is an error, as in a procedure body.
        """
        queue = deque(block.items)
        self.pending.append(queue)
        try:
            while queue:
                result = self.eval(queue.popleft())
                if isinstance(result, Return):
                    return result
                elif result is not None:
                    raise ArityError("You don't say what to do with {}", show(result, top=False))
            return None
        finally:
            self.pending.pop()

    def eval_binary(self, node):
        """Infix and prefix two-operand operators. The left operand is evaluated first."""
        symbol = node.op.value
        if node.op in COMPARISON:
            left = self.value(node.left, symbol)
            right = self.value(node.right, symbol)
            return self.compare(node.op, left, right)

        left = self.number(node.left, symbol)
        right = self.number(node.right, symbol)
        return Num(self.arithmetic(node.op, left, right))

    def eval_nary(self, node):
        """(+ a b c ...) and (* a b c ...). The operands are a queue of their own, so a call among them pulls its
        inputs from the operands that follow it.
        """
        queue = deque(node.exprs)
        self.pending.append(queue)
        try:
            numbers = []
            while queue:
                numbers.append(self.number(queue.popleft(), node.op.value))
        finally:
            self.pending.pop()

        if node.op is TokenType.PLUS:
            return Num(sum(numbers))
        return Num(math.prod(numbers))

    @staticmethod
    def arithmetic(op, left, right):
        if op is TokenType.PLUS:
            return left + right
        elif op is TokenType.MINUS:
            return left - right
        elif op is TokenType.MULTIPLY:
            return left * right

        if right == 0:
            raise LogoRuntimeError("Can't divide by zero")
        elif op is TokenType.DIVIDE:
            return left / right

        if not math.isfinite(left):
            raise LogoTypeError("{} doesn't like {} as input", [op.value, format_number(left)])
        return math.fmod(left, right)  # remainder takes the sign of the dividend

    @staticmethod
    def compare(op, left, right):
        """Numbers compare numerically; if either side is a word both compare as text. Outputs "TRUE or "FALSE."""
        for value in (left, right):
            if isinstance(value, ListLit):
                raise LogoTypeError("{} doesn't like {} as input", [op.value, show(value, top=False)])

        if isinstance(left, Num) and isinstance(right, Num):
            left, right = left.value, right.value
        else:
            left, right = show(left), show(right)

        result = {
            TokenType.LESS: left < right,
            TokenType.LESS_EQ: left <= right,
            TokenType.GREATER: left > right,
            TokenType.GREATER_EQ: left >= right,
            TokenType.EQUAL: left == right,
        }[op]
        return WordLit("TRUE" if result else "FALSE")

    # ---------------------------------------------------------------------------------------------------------------
    # Variables
    #

    def lookup(self, name):
        """Looks name up in the running procedure's locals, then in the globals."""
        if self.frames and name in self.frames[-1]:
            return self.frames[-1][name]
        if name in self.globals:
            return self.globals[name]
        raise UnknownNameError(":{} is not a known name", name)

    def assign(self, name, value):
        """MAKE: updates the running procedure's local if there is one, else the global."""
        if self.frames and name in self.frames[-1]:
            self.frames[-1][name] = value
        else:
            self.globals[name] = value

    # ---------------------------------------------------------------------------------------------------------------
    # Procedure calls and inputs
    #

    def call(self, name):
        """Runs a builtin or user procedure. Its inputs are pulled from the current remainder."""
        builtin = self.builtins.get(name)
        if builtin is not None:
            return builtin(self, name)

        procedure = self.procedures.get(name)
        if procedure is None:
            raise UnknownNameError("I don't know how to {}", name)
        return self.call_procedure(procedure)

    def call_procedure(self, procedure):
        """Binds one input per formal (pulled from the caller's remainder), then runs the body lines. Returns the
        OUTPUT value, or None if the procedure stopped without one.
        """
        frame = {}
        for formal in procedure.formals:
            frame[formal] = self.pull_value(procedure.name)

        self.frames.append(frame)
        self.pending.append(deque())
        try:
            for line in procedure.lines:
                result = self.eval(line)
                if isinstance(result, Return):
                    return result.value
                elif result is not None:
                    raise ArityError("You don't say what to do with {} in {}",
                                     [show(result, top=False), procedure.name])
            return None
        finally:
            self.pending.pop()
            self.frames.pop()

    def remainder(self):
        """The queue the running procedure pulls its inputs from."""
        if not self.pending:
            raise LogoRuntimeError("No line is being evaluated")
        return self.pending[-1]

    def expect(self, result, kinds, caller, node):
        """Checks that evaluating node gave a value of one of kinds (any value if kinds is None)."""
        if result is None or isinstance(result, Return):
            raise LogoTypeError("{} didn't output to {}", [show(node, top=False), caller])
        if kinds is not None and not isinstance(result, kinds):
            raise LogoTypeError("{} doesn't like {} as input", [caller, show(result, top=False)])
        return result

    def pull(self, caller, kinds=None):
        """Pops the next expression off the remainder and evaluates it. Raises ArityError if there is none."""
        queue = self.remainder()
        if not queue:
            raise ArityError("{} needs more inputs", caller)
        node = queue.popleft()
        return self.expect(self.eval(node), kinds, caller, node)

    def pull_value(self, caller):
        return self.pull(caller)

    def pull_number(self, caller):
        return self.pull(caller, Num).value

    def pull_word(self, caller):
        return self.pull(caller, WordLit).value

    def pull_list(self, caller):
        return self.pull(caller, ListLit)

    def value(self, node, caller):
        """Evaluates an operand that must produce a value."""
        return self.expect(self.eval(node), None, caller, node)

    def number(self, node, caller):
        """Evaluates an operand that must produce a number."""
        return self.expect(self.eval(node), Num, caller, node).value

    # ---------------------------------------------------------------------------------------------------------------
    # Output and files
    #

    def print(self, text):
        print(text, file=self.output)

    def resolve(self, name):
        """Returns the path LOAD should read for name: as given, lower-cased, then with SUFFIX added."""
        candidates = [name, name.lower()]
        if not os.path.splitext(name)[1]:
            candidates += [candidate + Evaluator.SUFFIX for candidate in candidates]

        for candidate in candidates:
            if os.path.isfile(candidate):
                return candidate
        raise LoadError("I can't find the file {}", name)

    def load(self, name):
        """Feeds every line of a file. Values produced by its lines are printed. A definition left open at the end of
        the file is discarded with an error.
        """
        path = self.resolve(name)
        continued, self.continued = self.continued, []
        continued_text, self.continued_text = self.continued_text, ""
        try:
            with open(path, "r", encoding="utf-8") as file:
                for line_num, line in enumerate(file, 1):
                    try:
                        result = self.feed(line)
                    except LogoError as error:
                        error.trace.append((path, line_num, line))
                        raise

                    if result is not None:
                        self.print(show(result))
        except (OSError, UnicodeDecodeError):
            self.definition = None
            raise LoadError("I can't read the file {}", path)
        except LogoError:
            self.definition = None  # a definition opened by the file must not swallow the lines typed next
            raise
        finally:
            self.continued, self.continued_text = continued, continued_text

        if self.definition is not None:
            name, self.definition = self.definition.name, None
            raise DefinitionError("{} has no END in {}", [name, path])
