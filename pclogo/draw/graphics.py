"""Graphics backends the turtle draws on. Points use the window center as origin (0, 0), with the x-axis growing
left->right and the y-axis growing down->up. Translating to screen coordinates is the backend's job.
"""

from abc import ABC, abstractmethod


class Graphics(ABC):
    """Interface between the turtle and whatever draws its lines."""

    @abstractmethod
    def draw_line(self, p1, p2):
        """Draws a line from p1 to p2, both (x, y) tuples."""

    @abstractmethod
    def clear_canvas(self):
        """Clears everything drawn so far."""


class RecordingGraphics(Graphics):
    """Keeps every command it receives: ("line", p1, p2) or ("clear",). Used by tests and in headless mode."""

    def __init__(self):
        self.commands = []

    def draw_line(self, p1, p2):
        self.commands.append(("line", tuple(p1), tuple(p2)))

    def clear_canvas(self):
        self.commands.append(("clear",))

    def lines(self):
        """Returns (p1, p2) for every line drawn, in order."""
        return [command[1:] for command in self.commands if command[0] == "line"]


class ScreenGraphics(Graphics):
    """Draws in a window using Python's turtle module, whose coordinates already match ours."""
    TITLE = "PC Logo"
    WIDTH = 400
    HEIGHT = 400
    COLOR = "green"

    def __init__(self):
        import turtle  # imported lazily so that headless runs never need tkinter

        self._screen = turtle.Screen()
        self._screen.setup(ScreenGraphics.WIDTH, ScreenGraphics.HEIGHT)
        self._screen.title(ScreenGraphics.TITLE)
        self._screen.bgcolor("black")
        self._screen.tracer(0)

        self._pen = turtle.RawTurtle(self._screen)
        self._pen.hideturtle()
        self._pen.color(ScreenGraphics.COLOR)

    def draw_line(self, p1, p2):
        self._pen.penup()
        self._pen.goto(*p1)
        self._pen.pendown()
        self._pen.goto(*p2)
        self._screen.update()

    def clear_canvas(self):
        self._pen.clear()
        self._screen.update()

    def wait(self):
        """Keeps the window open until it is closed."""
        self._screen.mainloop()
