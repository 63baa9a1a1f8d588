"""Calendar window data models."""

from pydantic import BaseModel, ConfigDict, Field


class MonthDay(BaseModel):
    """A year-agnostic calendar day such as Feb-08."""

    month: int = Field(..., ge=1, le=12, description="Month number (1-12)")
    day: int = Field(..., ge=1, le=31, description="Day of month")

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> tuple[int, int]:
        """Sort key in calendar order (month, then day)."""
        return (self.month, self.day)

    def __str__(self) -> str:
        return f"{self.month:02d}-{self.day:02d}"


class CalendarWindow(BaseModel):
    """A closed, recurring window of calendar days.

    When the end falls before the start in calendar order the window wraps
    the year boundary, e.g. Dec-28 to Jan-05.
    """

    start_month: int = Field(..., ge=1, le=12)
    start_day: int = Field(..., ge=1, le=31)
    end_month: int = Field(..., ge=1, le=12)
    end_day: int = Field(..., ge=1, le=31)

    model_config = ConfigDict(frozen=True)

    @property
    def start(self) -> str:
        """Window start as MM-DD."""
        return f"{self.start_month:02d}-{self.start_day:02d}"

    @property
    def end(self) -> str:
        """Window end as MM-DD."""
        return f"{self.end_month:02d}-{self.end_day:02d}"

    @property
    def wraps_year(self) -> bool:
        """True if the window crosses New Year's Eve."""
        return (self.start_month, self.start_day) > (self.end_month, self.end_day)

    def contains(self, month: int, day: int) -> bool:
        """Check whether a month/day falls inside the window."""
        candidate = (month, day)
        start = (self.start_month, self.start_day)
        end = (self.end_month, self.end_day)
        if start <= end:
            return start <= candidate <= end
        return candidate >= start or candidate <= end

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"
