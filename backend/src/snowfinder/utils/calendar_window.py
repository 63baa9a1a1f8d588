"""Month-day validation and calendar window normalization.

Month-day values are year-agnostic ``MM-DD`` labels. February always has
29 days here: a window is about calendar shape, not a concrete year, so
``02-29`` is accepted regardless of which seasons had a leap day.
"""

from ..models.calendar import CalendarWindow, MonthDay

# Indexed by month - 1
DAYS_IN_MONTH: tuple[int, ...] = (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class InvalidMonthDayError(ValueError):
    """Raised when a value is not a valid MM-DD calendar day."""


def days_in_month(month: int) -> int:
    """Return the number of days in a month, February fixed at 29."""
    if month < 1 or month > 12:
        raise InvalidMonthDayError(f"Month out of range: {month}")
    return DAYS_IN_MONTH[month - 1]


def _split(value: str) -> tuple[int, int] | None:
    if not isinstance(value, str) or len(value) != 5 or value[2] != "-":
        return None
    month_part, day_part = value[:2], value[3:]
    # str.isdigit accepts non-ASCII digits, which int() would also parse
    if not (month_part.isascii() and month_part.isdigit()):
        return None
    if not (day_part.isascii() and day_part.isdigit()):
        return None
    return int(month_part), int(day_part)


def is_valid_month_day(value: str) -> bool:
    """Check that a string is a valid MM-DD calendar day.

    Examples:
        >>> is_valid_month_day("02-29")
        True
        >>> is_valid_month_day("02-30")
        False
        >>> is_valid_month_day("2-08")
        False
    """
    parts = _split(value)
    if parts is None:
        return False
    month, day = parts
    if month < 1 or month > 12:
        return False
    return 1 <= day <= DAYS_IN_MONTH[month - 1]


def parse_month_day(value: str) -> MonthDay:
    """Parse an MM-DD string.

    Raises:
        InvalidMonthDayError: If the value is not a valid calendar day
    """
    if not is_valid_month_day(value):
        raise InvalidMonthDayError(f"Invalid month-day: {value!r}")
    month, day = _split(value)
    return MonthDay(month=month, day=day)


def normalize_window(
    start: MonthDay | str, end: MonthDay | str | None = None
) -> CalendarWindow:
    """Build a calendar window; a missing end makes a single-day window."""
    if isinstance(start, str):
        start = parse_month_day(start)
    if end is None:
        end = start
    elif isinstance(end, str):
        end = parse_month_day(end)

    return CalendarWindow(
        start_month=start.month,
        start_day=start.day,
        end_month=end.month,
        end_day=end.day,
    )


def season_year(window: CalendarWindow, year: int, month: int, day: int) -> int:
    """Season a dated observation belongs to for a given window.

    Seasons are labelled by the year in which the window ends, so for a
    wrapping window the December part counts toward the following year.
    """
    if window.wraps_year and (month, day) >= (window.start_month, window.start_day):
        return year + 1
    return year
