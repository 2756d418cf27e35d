import math

import pytest

from simpleclock.display.canvas import IDENTITY
from simpleclock.display.display_manager import DisplayManager
from simpleclock.display.screens.analog_clock import (
    HOUR_LABELS, PROJECT_URL, AnalogClock, RenderContext, dial_radius, dot_angle,
    hour_angle, label_angle, minute_angle, second_angle,
)
from simpleclock.time_source import ClockTime

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
LIGHT = (204, 204, 204)
RED = (255, 0, 0)


@pytest.fixture
def clock(display_manager):
    return AnalogClock(display_manager)


def frame(clock, hour, minute, second):
    clock.render(ClockTime(hour, minute, second))
    return clock.display_manager.device.image


def darkness_range(image, box):
    """(darkest, lightest) grey level inside box."""
    return image.crop(box).convert("L").getextrema()


# ----------------------------------------------------------------------
# Geometry
# ----------------------------------------------------------------------
def test_radius_for_800x600_viewport():
    assert dial_radius(800, 600) == 250
    layout = RenderContext.from_size(800, 600)
    assert layout.radius == 250
    assert layout.center == (400.0, 300.0)


def test_radius_can_go_negative_on_tiny_viewports():
    assert dial_radius(256, 64) == -18


@pytest.mark.parametrize("hour,minute,expected", [
    (0, 0, 0.0),
    (0, 30, math.pi / 12),
    (3, 0, math.pi / 2),
    (6, 0, math.pi),
    (9, 45, 9 * math.pi / 6 + 45 * math.pi / 360),
])
def test_hour_angle(hour, minute, expected):
    assert hour_angle(hour, minute) == pytest.approx(expected)


def test_minute_and_second_angles():
    assert minute_angle(0) == 0
    assert minute_angle(15) == pytest.approx(math.pi / 2)
    assert second_angle(30) == pytest.approx(math.pi)
    assert second_angle(59) == pytest.approx(59 * 2 * math.pi / 60)


def test_afternoon_hours_are_a_full_turn_ahead():
    assert hour_angle(15, 20) == pytest.approx(hour_angle(3, 20) + 2 * math.pi)


def test_dot_angles():
    for i in range(60):
        assert dot_angle(i) == pytest.approx(i * 2 * math.pi / 60)


def test_twelve_label_sits_at_the_top():
    index = HOUR_LABELS.index("12")
    assert index == 9
    rad = label_angle(index)
    assert math.cos(rad) == pytest.approx(0, abs=1e-9)
    assert math.sin(rad) == pytest.approx(-1)


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------
def test_background_is_cleared_to_white(clock):
    image = frame(clock, 6, 30, 45)
    assert image.getpixel((10, 10)) == WHITE


def test_dial_outline_drawn_at_radius(clock):
    image = frame(clock, 6, 30, 45)
    assert image.getpixel((650, 300)) == BLACK
    assert image.getpixel((400, 50)) == BLACK
    assert image.getpixel((400, 40)) == WHITE


def test_hour_dots_are_darker_than_minute_dots(clock):
    image = frame(clock, 6, 30, 45)
    # dot 0 (3 o'clock) and dot 1, both on the radius - 16 ring
    assert image.getpixel((634, 300)) == BLACK
    assert image.getpixel((633, 324)) == LIGHT


def test_numeral_twelve_is_dark_at_the_top(clock):
    image = frame(clock, 6, 30, 45)
    darkest, _ = darkness_range(image, (380, 85, 420, 115))
    assert darkest < 80


def test_numeral_one_is_light(clock):
    image = frame(clock, 6, 30, 45)
    darkest, lightest = darkness_range(image, (480, 107, 520, 147))
    assert 190 <= darkest < 255


def test_minute_hand_sweeps_clockwise(clock):
    image = frame(clock, 0, 0, 30)
    assert image.getpixel((400, 250)) == BLACK
    assert image.getpixel((480, 300)) == WHITE

    image = frame(clock, 0, 15, 30)
    assert image.getpixel((480, 300)) == BLACK


def hour_hand_point(hour, minute, length):
    """Pixel `length` along the hour hand from the 800x600 dial centre."""
    rad = hour_angle(hour, minute)
    return round(400 + math.sin(rad) * length), round(300 - math.cos(rad) * length)


@pytest.mark.parametrize("hour", [0, 12])
def test_hands_point_to_twelve_on_the_hour(clock, hour):
    # second hand parked at 6 o'clock so it stays out of the way
    image = frame(clock, hour, 0, 30)
    assert image.getpixel((400, 250)) == BLACK
    assert image.getpixel((400, 140)) == BLACK
    assert image.getpixel((480, 300)) == WHITE
    assert image.getpixel((320, 300)) == WHITE


def test_three_oclock_hour_hand_points_right(clock):
    image = frame(clock, 3, 0, 30)
    assert image.getpixel((500, 300)) == BLACK
    assert image.getpixel((300, 300)) == WHITE
    # minute hand still at 12
    assert image.getpixel((400, 250)) == BLACK


def test_half_past_midnight_hour_hand_between_twelve_and_one(clock):
    point = hour_hand_point(0, 30, 60)
    assert point == (416, 242)
    assert frame(clock, 0, 30, 0).getpixel(point) == BLACK
    # on the hour the hand is upright and misses that spot
    assert frame(clock, 0, 0, 30).getpixel(point) == WHITE


def test_afternoon_hours_draw_like_morning_hours(clock):
    afternoon = frame(clock, 15, 20, 0).tobytes()
    morning = frame(clock, 3, 20, 0).tobytes()
    assert afternoon == morning


def test_second_hand_is_red(clock):
    image = frame(clock, 6, 30, 15)
    assert image.getpixel((450, 300)) == RED


def test_center_cap_drawn_over_hands(clock):
    image = frame(clock, 6, 30, 15)
    assert image.getpixel((400, 300)) == (102, 102, 102)


def test_clear_all_covers_surface_whatever_the_transform(clock):
    frame(clock, 6, 30, 45)
    ctx = clock.context
    ctx.translate(1000, 1000)
    ctx.rotate(1.0)
    clock.clear_all()
    assert ctx.image.convert("L").getextrema() == (255, 255)
    # the stray transform is still there afterwards
    assert ctx.transform != IDENTITY


def test_render_is_repeatable(clock):
    first = frame(clock, 10, 8, 42).tobytes()
    frame(clock, 4, 51, 3)
    again = frame(clock, 10, 8, 42).tobytes()
    assert first == again


def test_render_leaves_no_saved_state_behind(clock):
    frame(clock, 1, 2, 3)
    assert clock.context.depth == 0
    assert clock.context.transform == IDENTITY


def test_failing_part_does_not_leak_state(clock, monkeypatch):
    def broken_fill():
        raise RuntimeError("fill failed")

    monkeypatch.setattr(clock.context, "fill", broken_fill)
    with pytest.raises(RuntimeError):
        clock.draw_center()
    assert clock.context.depth == 0
    assert clock.context.transform == IDENTITY


def test_radius_fixed_after_creation(clock, display_manager):
    radius = clock.radius
    display_manager.config['width'] = 2000
    frame(clock, 1, 2, 3)
    assert clock.radius == radius == 250


def test_unsupported_display_skips_drawing():
    display_manager = DisplayManager({'driver': 'no-such-driver', 'width': 800, 'height': 600})
    clock = AnalogClock(display_manager)
    assert not clock.is_supported()
    clock.render(ClockTime(1, 2, 3))


# ----------------------------------------------------------------------
# Pointer handlers
# ----------------------------------------------------------------------
def test_click_opens_project_link(clock, display_manager, monkeypatch):
    opened = []
    monkeypatch.setattr(display_manager, "open_link", opened.append)
    display_manager.emit_click()
    assert opened == [PROJECT_URL]


def test_pointer_move_sets_pointer_cursor(clock, display_manager):
    assert display_manager.cursor == "default"
    display_manager.emit_pointer_move(1)
    assert display_manager.cursor == "pointer"
