"""Turtle state: a position and a heading, turned into draw_line calls on a Graphics backend.

Heading 0 points up (north) and headings grow clockwise, so RIGHT 90 faces east.
"""

import math


def direction(heading):
    """Returns the unit vector (dx, dy) for heading. Exact for multiples of 90 degrees."""
    quadrant, rest = divmod(heading, 90)
    if rest == 0:
        return ((0.0, 1.0), (1.0, 0.0), (0.0, -1.0), (-1.0, 0.0))[int(quadrant) % 4]

    radians = math.radians(heading)
    return math.sin(radians), math.cos(radians)


class Turtle:
    """Position/heading state machine. Moving with the pen down draws exactly one line."""

    def __init__(self, graphics):
        self.graphics = graphics
        self.x = 0.0
        self.y = 0.0
        self.heading = 0.0
        self.pen_is_down = True

    def set_position(self, x, y):
        if self.pen_is_down:
            self.graphics.draw_line((self.x, self.y), (x, y))
        self.x = float(x)
        self.y = float(y)

    def get_position(self):
        return self.x, self.y

    def set_heading(self, degrees):
        self.heading = float(degrees) % 360

    def get_heading(self):
        return self.heading

    def forward(self, distance):
        dx, dy = direction(self.heading)
        self.set_position(self.x + distance * dx, self.y + distance * dy)

    def back(self, distance):
        self.forward(-distance)

    def right(self, degrees):
        self.set_heading(self.heading + degrees)

    def left(self, degrees):
        self.right(-degrees)

    def pen_up(self):
        self.pen_is_down = False

    def pen_down(self):
        self.pen_is_down = True

    def home(self):
        """Goes back to the origin facing north (drawing a line if the pen is down)."""
        self.set_position(0.0, 0.0)
        self.set_heading(0.0)

    def clear(self):
        """Clears the canvas but leaves the turtle where it is."""
        self.graphics.clear_canvas()
