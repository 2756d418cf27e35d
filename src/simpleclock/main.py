#!/usr/bin/env python3
import logging
import os
import sys
import threading

import yaml

from simpleclock.display.display_manager import DisplayManager
from simpleclock.display.screens.analog_clock import AnalogClock
from simpleclock.display.ticker import Ticker
from simpleclock.time_source import local_time, wait_for_correct_time

RENDER_INTERVAL = 1.0  # seconds
UNSUPPORTED_NOTICE = "Display does not support 2D drawing"


def default_config_path():
    """SIMPLECLOCK_CONFIG if set, otherwise config.yaml at the project root."""
    env_path = os.environ.get('SIMPLECLOCK_CONFIG')
    if env_path:
        return env_path
    script_dir = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(script_dir, '..', '..', 'config.yaml')


def load_config(config_path):
    """
    Load a YAML-based configuration file.
    """
    config = {}
    if os.path.isfile(config_path):
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f) or {}
            logging.debug(f"Configuration loaded from {config_path}.")
        except yaml.YAMLError as e:
            logging.error(f"Error loading config file {config_path}: {e}")
    else:
        logging.warning(f"Config file {config_path} not found. Using default configuration.")
    return config


def setup_logging(level_name='INFO'):
    logging.basicConfig(
        level=getattr(logging, str(level_name).upper(), logging.INFO),
        force=True,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def start_controls(controls_config, display_manager, stop_event):
    """
    Start the rotary encoder on its own thread if enabled. Turning it moves the
    pointer, a press clicks, a long press quits.
    """
    if not controls_config.get('enabled', False):
        return None

    from simpleclock.controls.rotary_control import RotaryControl

    logger = logging.getLogger("Main")
    try:
        rotary = RotaryControl(
            clk_pin=controls_config.get('clk_pin', 13),
            dt_pin=controls_config.get('dt_pin', 5),
            sw_pin=controls_config.get('sw_pin', 6),
            rotation_callback=lambda direction: display_manager.emit_pointer_move(direction),
            button_callback=display_manager.emit_click,
            long_press_callback=stop_event.set
        )
    except (ImportError, RuntimeError) as e:
        logger.warning(f"Rotary control not available: {e}")
        return None

    rotary.start()
    logger.info("Rotary control started.")
    return rotary


def shutdown(ticker, rotary, display_manager):
    """
    Stop drawing, blank the display (holding an OLED in reset), then release
    the encoder pins. The display goes first so its reset pin is still set up.
    """
    ticker.stop()
    display_manager.shutdown_display()
    if rotary is not None:
        rotary.stop()


def run(config, stop_event=None):
    """
    Build the display, clock and ticker from `config` and run until
    `stop_event` is set or Ctrl-C. Returns the process exit status.
    """
    logger = logging.getLogger("Main")

    time_config = config.get('time', {})
    if time_config.get('wait_for_correct_time', True):
        wait_for_correct_time(
            threshold_year=time_config.get('threshold_year', 2023),
            timeout=time_config.get('timeout', 60)
        )

    display_manager = DisplayManager(config.get('display', {}))
    clock = AnalogClock(display_manager)
    if not clock.is_supported():
        logger.error(UNSUPPORTED_NOTICE)
        print(UNSUPPORTED_NOTICE, file=sys.stderr)
        return 1

    if stop_event is None:
        stop_event = threading.Event()

    ticker = Ticker(lambda: clock.render(local_time()), interval=RENDER_INTERVAL)
    rotary = start_controls(config.get('controls', {}), display_manager, stop_event)
    ticker.start()

    try:
        # Short waits so Ctrl-C is noticed promptly
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    finally:
        shutdown(ticker, rotary, display_manager)
    return 0


def main():
    setup_logging()
    config = load_config(default_config_path())
    # Re-apply with the configured level
    setup_logging(config.get('logging', {}).get('level', 'INFO'))
    return run(config)


if __name__ == "__main__":
    sys.exit(main())
