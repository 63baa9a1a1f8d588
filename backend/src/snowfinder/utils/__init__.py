"""Utility functions for SnowFinder."""

from .calendar_window import (
    InvalidMonthDayError,
    days_in_month,
    is_valid_month_day,
    normalize_window,
    parse_month_day,
)
from .deadline import Deadline, DeadlineExceededError, OperationCancelledError
from .dynamodb_utils import decimal_to_python, parse_from_dynamodb

__all__ = [
    "InvalidMonthDayError",
    "days_in_month",
    "is_valid_month_day",
    "normalize_window",
    "parse_month_day",
    "Deadline",
    "DeadlineExceededError",
    "OperationCancelledError",
    "decimal_to_python",
    "parse_from_dynamodb",
]
