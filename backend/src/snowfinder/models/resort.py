"""Resort and peak period data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ConfidenceLevel(str, Enum):
    """How much history backs a peak period."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Resort(BaseModel):
    """Ski resort reference data."""

    id: str = Field(..., description="Unique identifier for the resort")
    name: str = Field(..., description="Resort display name")
    prefecture: str = Field(..., description="Administrative region")
    top_elevation_m: int | None = Field(None, description="Summit elevation in meters")
    base_elevation_m: int | None = Field(None, description="Base elevation in meters")
    vertical_m: int | None = Field(None, description="Vertical drop in meters")
    num_courses: int | None = Field(None, description="Number of courses")
    longest_course_km: float | None = Field(
        None, description="Length of the longest course in kilometers"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def vertical_drop_m(self) -> int | None:
        """Stored vertical drop, or top minus base when both are known."""
        if self.vertical_m is not None:
            return self.vertical_m
        if self.top_elevation_m is not None and self.base_elevation_m is not None:
            return self.top_elevation_m - self.base_elevation_m
        return None


class PeakPeriod(BaseModel):
    """A resort's typical high-snowfall period within the season."""

    resort_id: str
    peak_rank: int = Field(..., ge=1, description="1 for the snowiest period")
    start_date: str = Field(..., description="Period start (MM-DD)")
    end_date: str = Field(..., description="Period end (MM-DD), may wrap the year")
    total_period_snowfall: float = Field(
        ..., description="Average total snowfall over the period in cm"
    )
    avg_daily_snowfall: float = Field(..., description="Average cm per day")
    years_analyzed: int | None = Field(
        None, description="Number of seasons the period was derived from"
    )
    confidence_level: ConfidenceLevel = ConfidenceLevel.LOW

    model_config = ConfigDict(use_enum_values=True, frozen=True)


class ResortWithPeaks(BaseModel):
    """A resort together with its peak periods, best first."""

    resort: Resort
    peaks: list[PeakPeriod] = Field(default_factory=list)


class ResortOption(BaseModel):
    """Minimal resort projection for selector widgets."""

    id: str
    name: str
