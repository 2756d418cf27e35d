# src/simpleclock/display/ticker.py
import logging
import threading


class Ticker:
    """
    Calls `callback` once straight away and then every `interval` seconds on a
    background thread, until stop() is called.
    Each call runs to completion before the next wait begins, so calls never overlap.
    """

    def __init__(self, callback, interval=1.0):
        self.callback = callback
        self.interval = interval

        self.is_running = False
        self._thread = None
        self._stop_event = threading.Event()

        self.logger = logging.getLogger(self.__class__.__name__)

    def start(self):
        """
        Start ticking if not already running.
        """
        if self.is_running:
            return
        self.is_running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        self.logger.info(f"Ticker started ({self.interval}s interval).")

    def stop(self):
        """
        Stop ticking, setting the stop event and joining the thread.
        """
        if not self.is_running:
            return
        self.is_running = False
        self._stop_event.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        self.logger.info("Ticker stopped.")

    def tick(self):
        """Run the callback once. A failing callback is logged and the next tick still happens."""
        try:
            self.callback()
        except Exception:
            self.logger.exception("Tick callback failed.")

    def _run(self):
        self.tick()
        # wait() returns True as soon as stop() sets the event
        while not self._stop_event.wait(self.interval):
            self.tick()
