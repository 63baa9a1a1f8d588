"""Data models for SnowFinder."""

from .calendar import CalendarWindow, MonthDay
from .resort import (
    ConfidenceLevel,
    PeakPeriod,
    Resort,
    ResortOption,
    ResortWithPeaks,
)
from .snowfall import RankedResort, ResortSnowfallStats

__all__ = [
    "CalendarWindow",
    "MonthDay",
    "ConfidenceLevel",
    "PeakPeriod",
    "Resort",
    "ResortOption",
    "ResortWithPeaks",
    "RankedResort",
    "ResortSnowfallStats",
]
