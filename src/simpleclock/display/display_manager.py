# src/simpleclock/display/display_manager.py
import logging
import threading
import time
import webbrowser

from blinker import Signal
from PIL import Image, ImageFont

# Luma imports:
import luma.core.error
from luma.core.device import dummy, linux_framebuffer
from luma.core.interface.serial import spi
from luma.oled.device import ssd1322

from simpleclock.display.canvas import Canvas

DEFAULT_FONT_PATH = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"

# Errors luma (and the GPIO/SPI layers under it) raise when a display can't be opened
DEVICE_ERRORS = (luma.core.error.Error, OSError, RuntimeError, ImportError)


class DisplayManager:
    def __init__(self, config):
        """
        Opens the output device named by config['driver'] and sets up a single
        drawing surface the same size as the device.
        :param config: A dictionary with driver, width/height, rotate, font_path, etc.
        """
        self.config = config
        self.driver = config.get('driver', 'framebuffer')
        self.rotate = config.get('rotate', 0)
        self.font_path = config.get('font_path', DEFAULT_FONT_PATH)

        # Only used by the ssd1322 driver, default 25
        self.reset_gpio_pin = config.get('reset_gpio_pin', 25)
        self._gpio = None

        self.lock = threading.Lock()

        # Logging
        self.logger = logging.getLogger(self.__class__.__name__)

        # Pointer signals, sent by whatever input device is wired up
        self.clicked = Signal('clicked')
        self.pointer_moved = Signal('pointer_moved')
        self.cursor = "default"

        self.fonts = {}
        self._font_warning_logged = False

        self.device = self._create_device()
        self.surface = None
        self._context = None
        if self.device is not None:
            self.surface = Image.new("RGB", self.device.size, "white")
            self._context = Canvas(self.surface)
            self.logger.info(f"DisplayManager initialized ({self.driver}, {self.device.width}x{self.device.height}).")

    def _create_device(self):
        """
        Build the luma device for the configured driver.
        Returns None (and logs why) if the display can't be opened.
        """
        try:
            if self.driver == 'dummy':
                return dummy(
                    width=self.config.get('width', 800),
                    height=self.config.get('height', 600),
                    rotate=self.rotate,
                    mode="RGB"
                )
            if self.driver == 'framebuffer':
                return linux_framebuffer(
                    self.config.get('framebuffer_device', '/dev/fb0'),
                    rotate=self.rotate
                )
            if self.driver == 'ssd1322':
                return self._create_oled()
            self.logger.error(f"Unknown display driver '{self.driver}'.")
        except DEVICE_ERRORS as e:
            self.logger.error(f"Could not open '{self.driver}' display: {e}")
        return None

    def _create_oled(self):
        """SPI + SSD1322 setup, with the reset pin held high so the panel runs."""
        import RPi.GPIO as GPIO

        serial = spi(device=self.config.get('spi_device', 0), port=self.config.get('spi_port', 0))
        device = ssd1322(
            serial,
            width=self.config.get('width', 256),
            height=self.config.get('height', 64),
            rotate=self.rotate
        )

        GPIO.setmode(GPIO.BCM)
        GPIO.setup(self.reset_gpio_pin, GPIO.OUT)
        GPIO.output(self.reset_gpio_pin, GPIO.HIGH)
        self._gpio = GPIO
        return device

    def is_supported(self):
        """True when a 2D drawing context is available."""
        return self._context is not None

    def get_context(self):
        """The Canvas for the device-sized surface, or None if unsupported."""
        return self._context

    @property
    def size(self):
        if self.device is not None:
            return self.device.size
        return self.config.get('width', 0), self.config.get('height', 0)

    def font(self, size):
        """
        TrueType font from font_path at `size` pixels, cached per size.
        Falls back to Pillow's built-in font if the file can't be loaded.
        """
        size = max(1, int(round(size)))
        if size not in self.fonts:
            try:
                self.fonts[size] = ImageFont.truetype(self.font_path, size=size)
            except OSError as e:
                if not self._font_warning_logged:
                    self.logger.warning(f"Font '{self.font_path}' not loaded ({e}), using default font.")
                    self._font_warning_logged = True
                self.fonts[size] = ImageFont.load_default(size=size)
        return self.fonts[size]

    def present(self):
        """Push the current surface to the device."""
        if self.device is None:
            return
        with self.lock:
            self.device.display(self.surface.convert(self.device.mode))

    def clear_screen(self):
        """Clears the device by displaying a solid black image."""
        if self.device is None:
            return
        with self.lock:
            blank_image = Image.new("RGB", self.device.size, "black").convert(self.device.mode)
            self.device.display(blank_image)
            self.logger.info("Screen cleared.")

    def shutdown_display(self):
        """
        1) Clear screen in software (all black).
        2) On the OLED, drive RESET low to hold the panel off.
        """
        self.clear_screen()
        if self._gpio is not None:
            time.sleep(0.05)  # small delay so user sees it go black
            self._gpio.output(self.reset_gpio_pin, self._gpio.LOW)
            self.logger.info(f"Display pinned to reset via GPIO {self.reset_gpio_pin} (LOW).")

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------
    def emit_click(self):
        self.clicked.send(self)

    def emit_pointer_move(self, direction=0):
        self.pointer_moved.send(self, direction=direction)

    def set_cursor(self, style):
        if style != self.cursor:
            self.cursor = style
            self.logger.debug(f"Cursor style set to '{style}'.")

    def open_link(self, url):
        self.logger.info(f"Opening {url}")
        webbrowser.open(url)
