# src/simpleclock/time_source.py
import datetime
import logging
import time
from collections import namedtuple

logger = logging.getLogger("TimeSource")

ClockTime = namedtuple("ClockTime", ["hour", "minute", "second"])


def local_time(now=None):
    """
    Return the current local wall-clock time as a ClockTime
    (hour 0-23, minute 0-59, second 0-59).
    """
    if now is None:
        now = datetime.datetime.now()
    return ClockTime(now.hour, now.minute, now.second)


def wait_for_correct_time(threshold_year=2023, timeout=60, now_func=datetime.datetime.now, sleep=time.sleep):
    """
    Polls system time once a second until the year is at least `threshold_year`
    or about `timeout` seconds pass. Boards without an RTC start at 1970 until
    NTP catches up, and a clock drawn from that would be wrong.
    """
    for _ in range(max(1, int(timeout))):
        now = now_func()
        if now.year >= threshold_year:
            logger.info(f"System time is now {now}, considered 'correct'.")
            return True
        sleep(1)

    now = now_func()
    if now.year >= threshold_year:
        logger.info(f"System time is now {now}, considered 'correct'.")
        return True
    logger.warning(f"Time did not reach year {threshold_year} within {timeout} seconds.")
    return False
