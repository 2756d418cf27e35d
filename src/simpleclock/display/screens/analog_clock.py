# src/simpleclock/display/screens/analog_clock.py
import logging
import math
from collections import namedtuple
from contextlib import contextmanager

TWO_PI = 2 * math.pi

# Space kept free around the dial, split between both sides
DIAL_MARGIN = 100

# Angle 0 is the 3 o'clock direction, so the labels start at "3"
HOUR_LABELS = ("3", "4", "5", "6", "7", "8", "9", "10", "11", "12", "1", "2")

BRAND_TITLE = "Simple-Clock"
BRAND_SUBTITLE = "Time is life..."
PROJECT_URL = "https://github.com/hellofun-github/Kotlin-JS-Clock"

EMPHASIS_COLOR = "#000"
MUTED_COLOR = "#ccc"
SECOND_HAND_COLOR = "#f00"
CENTER_COLOR = "#666"
LABEL_FONT_SIZE = 35


def dial_radius(width, height):
    return (min(width, height) - DIAL_MARGIN) / 2


def hour_angle(hour, minute):
    """Clockwise angle of the hour hand from 12 o'clock, creeping forward with the minutes."""
    return TWO_PI / 12 * hour + TWO_PI / 12 / 60 * minute


def minute_angle(minute):
    return TWO_PI / 60 * minute


def second_angle(second):
    return TWO_PI / 60 * second


def dot_angle(index):
    return TWO_PI / 60 * index


def label_angle(index):
    return TWO_PI / 12 * index


class RenderContext(namedtuple("RenderContext", ["width", "height", "radius"])):
    """Surface size and dial radius, fixed when the clock is created."""
    __slots__ = ()

    @classmethod
    def from_size(cls, width, height):
        return cls(width, height, dial_radius(width, height))

    @property
    def center(self):
        return self.width / 2.0, self.height / 2.0


class AnalogClock:
    """
    An analogue clock face: dial, 60 dots, hour numerals, three hands and a
    centre cap, redrawn from scratch on every render().
    The dial radius is worked out once from the display size and never changes.
    """

    def __init__(self, display_manager):
        """
        :param display_manager:  The DisplayManager providing the surface and fonts.
        """
        self.display_manager = display_manager
        self.logger = logging.getLogger(self.__class__.__name__)

        self.context = display_manager.get_context()
        self.layout = RenderContext.from_size(*display_manager.size)
        self.radius = self.layout.radius

        display_manager.clicked.connect(self._on_click)
        display_manager.pointer_moved.connect(self._on_pointer_move)

        self.logger.debug(f"AnalogClock radius {self.radius} for {self.layout.width}x{self.layout.height}.")

    def is_supported(self):
        return self.context is not None

    def _on_click(self, sender, **kwargs):
        self.display_manager.open_link(PROJECT_URL)

    def _on_pointer_move(self, sender, **kwargs):
        self.display_manager.set_cursor("pointer")

    @contextmanager
    def _centered(self):
        """Saved drawing state with the origin moved to the dial centre."""
        with self.context.saved_state() as ctx:
            ctx.translate(*self.layout.center)
            yield ctx

    def render(self, now):
        """
        Draw one full frame for `now` (anything with hour, minute and second)
        and show it. Later steps paint over earlier ones.
        """
        self.clear_all()
        self.draw_background()
        self.draw_brand()
        self.draw_dots()
        self.draw_hour_text()
        self.draw_hour_line(now.hour, now.minute)
        self.draw_minute_line(now.minute)
        self.draw_second_line(now.second)
        self.draw_center()
        self.display_manager.present()

    def clear_all(self):
        if self.context is None:
            return
        with self.context.saved_state() as ctx:
            ctx.reset_transform()
            ctx.clear_rect(0, 0, self.layout.width, self.layout.height)

    def draw_background(self):
        """Dial outline. Sets up the convention the other parts use: origin at the centre, y down."""
        if self.context is None:
            return
        with self._centered() as ctx:
            ctx.begin_path()
            ctx.line_width = 10
            ctx.arc(0, 0, self.radius, 0, TWO_PI)
            ctx.stroke()

    def draw_brand(self):
        if self.context is None:
            return
        with self._centered() as ctx:
            ctx.text_baseline = "middle"
            ctx.text_align = "center"

            ctx.font = self.display_manager.font(self.radius / 10)
            ctx.fill_text(BRAND_TITLE, 0, -(self.radius / 2))

            ctx.font = self.display_manager.font(self.radius / 15)
            ctx.fill_text(BRAND_SUBTITLE, 0, -(self.radius / 3))

    def draw_dots(self):
        """60 dots, one per minute; the 12 on the hours are darker."""
        if self.context is None:
            return
        for i in range(60):
            with self._centered() as ctx:
                ctx.begin_path()
                rad = dot_angle(i)
                x = math.cos(rad) * (self.radius - 16)
                y = math.sin(rad) * (self.radius - 16)
                ctx.arc(x, y, 4, 0, TWO_PI)
                ctx.fill_style = EMPHASIS_COLOR if i % 5 == 0 else MUTED_COLOR
                ctx.fill()

    def draw_hour_text(self):
        if self.context is None:
            return
        font = self.display_manager.font(LABEL_FONT_SIZE)
        for index, label in enumerate(HOUR_LABELS):
            with self._centered() as ctx:
                rad = label_angle(index)
                ctx.font = font
                ctx.text_align = "center"
                ctx.text_baseline = "middle"
                # 3, 6, 9 and 12
                ctx.fill_style = EMPHASIS_COLOR if index % 3 == 0 else MUTED_COLOR
                ctx.fill_text(label, math.cos(rad) * (self.radius - 50), math.sin(rad) * (self.radius - 50))

    def draw_hour_line(self, hour, minute):
        if self.context is None:
            return
        with self._centered() as ctx:
            ctx.begin_path()
            ctx.rotate(hour_angle(hour, minute))
            ctx.line_cap = "round"
            ctx.line_width = 10
            ctx.move_to(0, 15)
            ctx.line_to(0, -self.radius / 2)
            ctx.stroke()

    def draw_minute_line(self, minute):
        if self.context is None:
            return
        with self._centered() as ctx:
            ctx.begin_path()
            ctx.rotate(minute_angle(minute))
            ctx.line_cap = "round"
            ctx.line_width = 8
            ctx.move_to(0, 15)
            ctx.line_to(0, -self.radius / 4 * 3)
            ctx.stroke()

    def draw_second_line(self, second):
        """Tapered red hand with a short tail behind the pivot."""
        if self.context is None:
            return
        with self._centered() as ctx:
            ctx.begin_path()
            ctx.rotate(second_angle(second))
            ctx.fill_style = SECOND_HAND_COLOR
            ctx.move_to(0, 30)
            ctx.line_to(-5, 0)
            ctx.line_to(0, -self.radius + 50)
            ctx.line_to(5, 0)
            ctx.line_to(0, 30)
            ctx.fill()

    def draw_center(self):
        if self.context is None:
            return
        with self._centered() as ctx:
            ctx.begin_path()
            ctx.arc(0, 0, 6, 0, TWO_PI)
            ctx.fill_style = CENTER_COLOR
            ctx.fill()
