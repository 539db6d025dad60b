"""Builtin procedures. Each one is a plain function taking (evaluator, name), where name is the name it was called by
(so FD and FORWARD report errors under the name the user typed). A builtin pulls exactly the inputs it needs with
evaluator.pull_number/pull_word/pull_list/pull_value and returns a value, a Return, or None.
"""

import math

from pclogo.core.syntax import Call, ListLit, Num, Return, VarRef, WordLit, format_number, show
from pclogo.lang.error import DefinitionError, LogoTypeError


def as_value(node):
    """Turns a list element into a value: words and numbers stay as they are, FD becomes the word FD."""
    if isinstance(node, (Num, WordLit, ListLit)):
        return node
    elif isinstance(node, (Call, VarRef)):
        return WordLit(show(node))
    return WordLit(show(node, top=False))


# -- turtle motion ---------------------------------------------------------------------------------------------------

def forward(evaluator, name):
    evaluator.turtle.forward(evaluator.pull_number(name))


def back(evaluator, name):
    evaluator.turtle.back(evaluator.pull_number(name))


def right(evaluator, name):
    evaluator.turtle.right(evaluator.pull_number(name))


def left(evaluator, name):
    evaluator.turtle.left(evaluator.pull_number(name))


def setxy(evaluator, name):
    x = evaluator.pull_number(name)
    y = evaluator.pull_number(name)
    evaluator.turtle.set_position(x, y)


def setx(evaluator, name):
    __, y = evaluator.turtle.get_position()
    evaluator.turtle.set_position(evaluator.pull_number(name), y)


def sety(evaluator, name):
    x, __ = evaluator.turtle.get_position()
    evaluator.turtle.set_position(x, evaluator.pull_number(name))


def setheading(evaluator, name):
    evaluator.turtle.set_heading(evaluator.pull_number(name))


def home(evaluator, name):
    evaluator.turtle.home()


def clearscreen(evaluator, name):
    """Sends the turtle home, then clears the canvas."""
    evaluator.turtle.home()
    evaluator.turtle.clear()


def clean(evaluator, name):
    evaluator.turtle.clear()


def pendown(evaluator, name):
    evaluator.turtle.pen_down()


def penup(evaluator, name):
    evaluator.turtle.pen_up()


# -- turtle queries --------------------------------------------------------------------------------------------------

def getxy(evaluator, name):
    x, y = evaluator.turtle.get_position()
    return ListLit([Num(x), Num(y)])


def xcor(evaluator, name):
    return Num(evaluator.turtle.get_position()[0])


def ycor(evaluator, name):
    return Num(evaluator.turtle.get_position()[1])


def heading(evaluator, name):
    return Num(evaluator.turtle.get_heading())


# -- variables and control -------------------------------------------------------------------------------------------

def make(evaluator, name):
    var = evaluator.pull_word(name)
    evaluator.assign(var, evaluator.pull_value(name))


def output(evaluator, name):
    return Return(evaluator.pull_value(name))


def finite(name, number):
    """Counts and loop bounds must be real numbers: inf/nan cannot be iterated over."""
    if not math.isfinite(number):
        raise LogoTypeError("{} doesn't like {} as input", [name, format_number(number)])
    return number


def repeat(evaluator, name):
    count = finite(name, evaluator.pull_number(name))
    block = evaluator.pull_list(name)
    for __ in range(int(count)):
        result = evaluator.run(block)
        if result is not None:
            return result  # OUTPUT inside the body stops the procedure that is running
    return None


def for_(evaluator, name):
    """FOR "I 1 5 [...]: counts towards the end value by 1 (up or down), inclusive."""
    var = evaluator.pull_word(name)
    start = finite(name, evaluator.pull_number(name))
    end = finite(name, evaluator.pull_number(name))
    block = evaluator.pull_list(name)

    step = 1 if end >= start else -1
    current = start
    while (current <= end) if step > 0 else (current >= end):
        evaluator.assign(var, Num(current))
        result = evaluator.run(block)
        if result is not None:
            return result
        current += step
    return None


# -- lists -----------------------------------------------------------------------------------------------------------

def list_(evaluator, name):
    first = evaluator.pull_value(name)
    second = evaluator.pull_value(name)
    return ListLit([first, second])


def lput(evaluator, name):
    item = evaluator.pull_value(name)
    target = evaluator.pull_list(name)
    return ListLit(target.items + [item])


def item(evaluator, name):
    """ITEM index thing: 1-indexed element of a list, or character of a word."""
    index = evaluator.pull_number(name)
    thing = evaluator.pull_value(name)

    if isinstance(thing, ListLit):
        elements = thing.items
    elif isinstance(thing, WordLit):
        elements = [WordLit(char) for char in thing.value]
    else:
        elements = [WordLit(char) for char in format_number(thing.value)]

    if not index.is_integer() or not 1 <= index <= len(elements):
        raise LogoTypeError("{} doesn't like {} as input", [name, format_number(index)])
    return as_value(elements[int(index) - 1])


# -- printing and workspace ------------------------------------------------------------------------------------------

def print_(evaluator, name):
    """Prints a value. Lists are printed without their outer brackets."""
    value = evaluator.pull_value(name)
    if isinstance(value, ListLit):
        evaluator.print(" ".join(show(element) for element in value.items))
    else:
        evaluator.print(show(value))


def pops(evaluator, name):
    """Prints the definition of every user procedure."""
    for procedure in evaluator.procedures.values():
        evaluator.print(procedure.title())
        for line in procedure.source:
            evaluator.print("  " + line)
        evaluator.print("END")


def pons(evaluator, name):
    """Prints the local variables of the running procedure, then the globals, as MAKE instructions."""
    scopes = [("Locals", evaluator.frames[-1] if evaluator.frames else {}), ("Globals", evaluator.globals)]
    for title, scope in scopes:
        evaluator.print(f"{title}:")
        for var, value in scope.items():
            evaluator.print(f'MAKE "{var} {show(value, top=False)}')


def load(evaluator, name):
    evaluator.load(evaluator.pull_word(name))


def to(evaluator, name):
    raise DefinitionError("{} can only be used at the start of a line typed at top level", name)


def end(evaluator, name):
    raise DefinitionError("{} without a matching TO", name)


BUILTINS = {
    "FD": forward,
    "FORWARD": forward,
    "BK": back,
    "BACK": back,
    "RT": right,
    "RIGHT": right,
    "LT": left,
    "LEFT": left,
    "CS": clearscreen,
    "CLEARSCREEN": clearscreen,
    "HOME": home,
    "CLEAN": clean,
    "PD": pendown,
    "PENDOWN": pendown,
    "PU": penup,
    "PENUP": penup,
    "SETXY": setxy,
    "GETXY": getxy,
    "SETX": setx,
    "SETY": sety,
    "SETHEADING": setheading,
    "SETH": setheading,
    "HEADING": heading,
    "XCOR": xcor,
    "YCOR": ycor,
    "MAKE": make,
    "OP": output,
    "OUTPUT": output,
    "REPEAT": repeat,
    "FOR": for_,
    "LIST": list_,
    "LPUT": lput,
    "ITEM": item,
    "PR": print_,
    "PRINT": print_,
    "POPS": pops,
    "PONS": pons,
    "LOAD": load,
    "TO": to,
    "END": end,
}
