# src/simpleclock/display/canvas.py
import math
from contextlib import contextmanager

from PIL import ImageDraw

IDENTITY = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

# textAlign / textBaseline -> PIL anchor characters
_ALIGN_ANCHORS = {"start": "l", "left": "l", "center": "m", "right": "r", "end": "r"}
_BASELINE_ANCHORS = {"top": "t", "middle": "m", "alphabetic": "s", "bottom": "d"}


class Canvas:
    """
    A small canvas-style 2D context drawn onto a PIL image.

    It keeps the same kind of state an HTML canvas does (an affine transform,
    fill/stroke styles, line width and cap, font and text alignment) and
    offers save()/restore() plus path building with move_to/line_to/arc.
    Paths are flattened to device coordinates as they are built, then handed
    to ImageDraw on fill() or stroke().

    Rotation is clockwise on screen because the y axis points down.
    """

    _STATE_FIELDS = (
        "transform", "fill_style", "stroke_style", "line_width",
        "line_cap", "font", "text_align", "text_baseline",
    )

    def __init__(self, image, background="white"):
        """
        :param image:       The PIL image to draw on (normally RGB).
        :param background:  Colour used by clear_rect().
        """
        self.image = image
        self.width, self.height = image.size
        self.background = background

        self._draw = ImageDraw.Draw(image)
        self._stack = []
        self._subpaths = []

        self.transform = IDENTITY
        self.fill_style = "#000"
        self.stroke_style = "#000"
        self.line_width = 1.0
        self.line_cap = "butt"
        self.font = None
        self.text_align = "start"
        self.text_baseline = "alphabetic"

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def save(self):
        self._stack.append({name: getattr(self, name) for name in self._STATE_FIELDS})

    def restore(self):
        # Unbalanced restore() is ignored, same as a browser canvas.
        if not self._stack:
            return
        for name, value in self._stack.pop().items():
            setattr(self, name, value)

    @contextmanager
    def saved_state(self):
        """
        Save the drawing state, yield the canvas, and restore the state on the
        way out, including when the drawing code raises.
        """
        self.save()
        try:
            yield self
        finally:
            self.restore()

    @property
    def depth(self):
        """Number of saved states currently on the stack."""
        return len(self._stack)

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------
    def translate(self, x, y):
        a, b, c, d, e, f = self.transform
        self.transform = (a, b, c, d, a * x + c * y + e, b * x + d * y + f)

    def rotate(self, angle):
        a, b, c, d, e, f = self.transform
        cos, sin = math.cos(angle), math.sin(angle)
        self.transform = (
            a * cos + c * sin,
            b * cos + d * sin,
            c * cos - a * sin,
            d * cos - b * sin,
            e,
            f,
        )

    def reset_transform(self):
        self.transform = IDENTITY

    def to_device(self, x, y):
        """Map a point from user space to image pixels."""
        a, b, c, d, e, f = self.transform
        return a * x + c * y + e, b * x + d * y + f

    def _scale(self):
        a, b = self.transform[0], self.transform[1]
        return math.hypot(a, b)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def begin_path(self):
        self._subpaths = []

    def move_to(self, x, y):
        self._subpaths.append([self.to_device(x, y)])

    def line_to(self, x, y):
        if not self._subpaths:
            self.move_to(x, y)
            return
        self._subpaths[-1].append(self.to_device(x, y))

    def arc(self, x, y, radius, start_angle, end_angle, anticlockwise=False):
        """
        Add a circular arc to the current subpath, flattened into short
        segments. A negative radius draws nothing.
        """
        if radius < 0:
            return

        sweep = end_angle - start_angle
        if anticlockwise:
            sweep = -sweep
        if sweep >= 2 * math.pi:
            sweep = 2 * math.pi
        else:
            sweep = sweep % (2 * math.pi)
        if anticlockwise:
            sweep = -sweep

        # Roughly one segment per two pixels of arc length
        steps = int(math.ceil(abs(sweep) * max(radius, 1.0) * self._scale() / 2.0))
        steps = min(max(steps, 8), 1440)

        points = []
        for i in range(steps + 1):
            angle = start_angle + sweep * i / steps
            points.append(self.to_device(x + math.cos(angle) * radius, y + math.sin(angle) * radius))

        if self._subpaths:
            self._subpaths[-1].extend(points)
        else:
            self._subpaths.append(points)

    def fill(self):
        for points in self._subpaths:
            if len(points) >= 3:
                self._draw.polygon(points, fill=self.fill_style)

    def stroke(self):
        width = max(1, int(round(self.line_width * self._scale())))
        for points in self._subpaths:
            if len(points) < 2:
                continue
            self._draw.line(points, fill=self.stroke_style, width=width, joint="curve")
            if self.line_cap == "round":
                half = width / 2.0
                for px, py in (points[0], points[-1]):
                    self._draw.ellipse((px - half, py - half, px + half, py + half), fill=self.stroke_style)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------
    def fill_text(self, text, x, y):
        """
        Draw text anchored at (x, y). The anchor follows the transform, the
        glyphs themselves stay upright.
        """
        anchor = _ALIGN_ANCHORS.get(self.text_align, "l") + _BASELINE_ANCHORS.get(self.text_baseline, "s")
        self._draw.text(self.to_device(x, y), text, fill=self.fill_style, font=self.font, anchor=anchor)

    # ------------------------------------------------------------------
    # Clearing
    # ------------------------------------------------------------------
    def clear_rect(self, x, y, width, height):
        corners = [
            self.to_device(x, y),
            self.to_device(x + width, y),
            self.to_device(x + width, y + height),
            self.to_device(x, y + height),
        ]
        self._draw.polygon(corners, fill=self.background)
