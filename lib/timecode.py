"""Clip time parsing and display formatting."""

import math
import re

MAX_SECONDS = 86400  # 24 hours
MAX_MINUTES = 1440

_DIGITS = re.compile(r"^[0-9]+$")


class InvalidTimeFormat(ValueError):
    """Raised when a clip time cannot be turned into whole seconds."""


def parse_time_to_seconds(value) -> int:
    """Convert seconds, mm:ss or hh:mm:ss into an integer count of seconds.

    Accepts a non-negative whole number or a string in one of:
        "123"      plain seconds
        "12:34"    minutes:seconds (minutes up to 1440)
        "1:23:45"  hours:minutes:seconds

    Minutes and seconds after the first component must be below 60 and the
    total may not exceed 24 hours.
    """
    if isinstance(value, bool) or (isinstance(value, float) and not math.isfinite(value)):
        raise InvalidTimeFormat("Numeric input must be a non-negative integer")
    if isinstance(value, (int, float)):
        if value < 0 or value != int(value):
            raise InvalidTimeFormat("Numeric input must be a non-negative integer")
        return int(value)

    trimmed = (value or "").strip() if isinstance(value, str) else ""
    if not trimmed:
        raise InvalidTimeFormat("Time input cannot be empty")

    if _DIGITS.match(trimmed):
        return int(trimmed)

    if ":" not in trimmed:
        raise InvalidTimeFormat("Use format: seconds (123), mm:ss (12:34), or hh:mm:ss (1:23:45)")

    parts = trimmed.split(":")
    if len(parts) not in (2, 3):
        raise InvalidTimeFormat("Use format: mm:ss or hh:mm:ss")

    numbers = []
    for index, part in enumerate(parts):
        part = part.strip()
        if not _DIGITS.match(part):
            raise InvalidTimeFormat(f'Invalid time component: "{part}"')
        num = int(part)
        if index > 0 and num >= 60:
            raise InvalidTimeFormat(f"Minutes and seconds must be less than 60, got: {num}")
        if index == 0 and len(parts) == 2 and num > MAX_MINUTES:
            raise InvalidTimeFormat(f"Minutes cannot exceed {MAX_MINUTES} (24 hours), got: {num}")
        numbers.append(num)

    if len(numbers) == 3:
        total = numbers[0] * 3600 + numbers[1] * 60 + numbers[2]
    else:
        total = numbers[0] * 60 + numbers[1]

    if total > MAX_SECONDS:
        raise InvalidTimeFormat("Time cannot exceed 24 hours")
    return total


def format_time_for_display(seconds: int) -> str:
    """Format seconds as m:ss, or h:mm:ss once past the hour."""
    seconds = max(0, int(seconds))
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"
