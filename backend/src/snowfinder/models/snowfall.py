"""Snowfall ranking data models."""

from pydantic import BaseModel, Field


class ResortSnowfallStats(BaseModel):
    """One resort's aggregated snowfall for a calendar window.

    Every metric is optional: None means nothing was recorded, and must
    not be read as zero.
    """

    name: str
    prefecture: str
    avg_snowfall_cm: int | None = Field(
        None, description="Average window snowfall per season with data"
    )
    years_with_data: int | None = Field(
        None, description="Seasons with at least one measurement in the window"
    )
    top_elevation_m: int | None = None
    base_elevation_m: int | None = None
    vertical_drop_m: int | None = None
    num_courses: int | None = None
    longest_course_km: float | None = None


class RankedResort(ResortSnowfallStats):
    """Aggregated stats with their 1-based position in the ranking."""

    rank: int = Field(..., ge=1)
