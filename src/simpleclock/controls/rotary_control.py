# src/simpleclock/controls/rotary_control.py
import logging
import threading
import time

# (previous, current) encoder states for one quarter step in each direction
CLOCKWISE_STEPS = {(0b00, 0b10), (0b10, 0b11), (0b11, 0b01), (0b01, 0b00)}
COUNTER_CLOCKWISE_STEPS = {(0b00, 0b01), (0b01, 0b11), (0b11, 0b10), (0b10, 0b00)}


class RotaryControl:
    def __init__(
        self,
        clk_pin=13,
        dt_pin=5,
        sw_pin=6,
        rotation_callback=None,
        button_callback=None,
        long_press_callback=None,
        long_press_threshold=2.5,  # Long press threshold in seconds
        gpio=None,
        clock=time.monotonic
    ):
        """
        Sets the encoder pins up as pulled-up inputs (BCM numbering) and
        reads their starting state.
        :param gpio:  GPIO module to use, RPi.GPIO unless one is passed in.
        """
        self.logger = logging.getLogger(self.__class__.__name__)

        if gpio is None:
            import RPi.GPIO as gpio
        self.gpio = gpio
        self.clock = clock

        self.CLK_PIN = clk_pin
        self.DT_PIN = dt_pin
        self.SW_PIN = sw_pin

        self.rotation_callback = rotation_callback
        self.button_callback = button_callback
        self.long_press_callback = long_press_callback
        self.long_press_threshold = long_press_threshold

        # Check current GPIO mode. If None, set to BCM; if something else, clean up and reset.
        current_mode = self.gpio.getmode()
        if current_mode is None:
            self.gpio.setmode(self.gpio.BCM)
        elif current_mode != self.gpio.BCM:
            self.gpio.cleanup()
            self.gpio.setmode(self.gpio.BCM)

        for pin in (self.CLK_PIN, self.DT_PIN, self.SW_PIN):
            self.gpio.setup(pin, self.gpio.IN, pull_up_down=self.gpio.PUD_UP)

        # Variables for rotary state
        self.last_encoded = self._read_encoder()
        self.full_cycle = 0
        self.button_last_state = self._read_button_state()
        self._press_started = None
        self._long_press_sent = False

        self._stop_event = threading.Event()
        self._thread = None

        self.logger.debug("RotaryControl initialized.")

    def _read_encoder(self):
        """Read the current state of the rotary encoder."""
        clk_state = self.gpio.input(self.CLK_PIN)
        dt_state = self.gpio.input(self.DT_PIN)
        return (clk_state << 1) | dt_state  # Encode as a 2-bit integer

    def _read_button_state(self):
        return self.gpio.input(self.SW_PIN)

    def poll(self):
        """Read the encoder and button once and fire any callbacks that are due."""
        current_encoded = self._read_encoder()
        if current_encoded != self.last_encoded:
            step = (self.last_encoded, current_encoded)
            if step in CLOCKWISE_STEPS:
                self.full_cycle += 1
            elif step in COUNTER_CLOCKWISE_STEPS:
                self.full_cycle -= 1

            # Register a single detent after a full quadrature cycle
            if abs(self.full_cycle) == 4:
                direction = 1 if self.full_cycle > 0 else -1
                self.logger.debug(f"Rotation in direction: {direction}")
                if self.rotation_callback:
                    self.rotation_callback(direction)
                self.full_cycle = 0

            self.last_encoded = current_encoded

        button_state = self._read_button_state()
        if button_state == self.gpio.LOW and self.button_last_state == self.gpio.HIGH:
            self._press_started = self.clock()
            self._long_press_sent = False
        elif button_state == self.gpio.LOW and self._press_started is not None:
            if not self._long_press_sent and self.clock() - self._press_started > self.long_press_threshold:
                self._long_press_sent = True
                if self.long_press_callback:
                    self.long_press_callback()
        elif button_state == self.gpio.HIGH and self.button_last_state == self.gpio.LOW:
            if self._press_started is not None and not self._long_press_sent:
                if self.button_callback:
                    self.button_callback()
            self._press_started = None

        self.button_last_state = button_state

    def start(self, poll_interval=0.01):
        """Start polling on a background thread if not already running."""
        if self._thread is not None:
            return
        self._stop_event.clear()
        self.last_encoded = self._read_encoder()
        self._thread = threading.Thread(target=self._run, args=(poll_interval,), daemon=True)
        self._thread.start()
        self.logger.debug("RotaryControl started listening to rotary events.")

    def _run(self, poll_interval):
        while not self._stop_event.is_set():
            self.poll()
            self._stop_event.wait(poll_interval)

    def stop(self):
        """
        Stop polling, wait for the polling thread, then release the encoder pins.
        Other pins (e.g. the OLED reset line) and the numbering mode are left alone.
        """
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        self.gpio.cleanup((self.CLK_PIN, self.DT_PIN, self.SW_PIN))
        self.logger.info("GPIO cleanup complete.")
