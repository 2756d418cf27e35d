import pytest

from simpleclock.display.display_manager import DisplayManager


@pytest.fixture
def display_config():
    # No TrueType file, so fonts come from Pillow's built-in default
    return {'driver': 'dummy', 'width': 800, 'height': 600, 'font_path': '/nonexistent/font.ttf'}


@pytest.fixture
def display_manager(display_config):
    return DisplayManager(display_config)
