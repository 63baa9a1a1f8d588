"""Seasonal snowfall ranking and resort metadata lookups."""

import logging
from typing import Iterable

from ..models.calendar import CalendarWindow
from ..models.resort import ResortOption, ResortWithPeaks
from ..models.snowfall import RankedResort, ResortSnowfallStats
from ..utils.constants import ALL_SENTINEL, DEFAULT_SEARCH_LIMIT
from ..utils.deadline import Deadline

logger = logging.getLogger(__name__)


def resolve_limit(raw: str | int | None) -> int:
    """Parse a requested result count.

    Missing, unparsable and non-positive values fall back to the default.
    There is no upper cap here.
    """
    if raw is None or raw == "":
        return DEFAULT_SEARCH_LIMIT
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_SEARCH_LIMIT
    return limit if limit > 0 else DEFAULT_SEARCH_LIMIT


def is_unfiltered(prefecture: str | None) -> bool:
    """True when a prefecture value means "every prefecture"."""
    return prefecture is None or prefecture == "" or prefecture == ALL_SENTINEL


class SnowfallRankingService:
    """Answers snowfall ranking and resort metadata queries.

    Holds no per-request state; the repository does all aggregation.
    """

    def __init__(self, repository):
        self.repository = repository

    def rank(
        self,
        window: CalendarWindow,
        prefecture: str | None = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
        deadline: Deadline | None = None,
    ) -> list[ResortSnowfallStats]:
        """Fetch ranked aggregation rows for a window.

        The prefecture is passed through verbatim; matching is the
        repository's concern.
        """
        if limit is None or limit <= 0:
            limit = DEFAULT_SEARCH_LIMIT

        if is_unfiltered(prefecture):
            rows = self.repository.rank_by_window(window, limit, deadline=deadline)
        else:
            rows = self.repository.rank_by_window_and_region(
                window, prefecture, limit, deadline=deadline
            )
        return list(rows)[:limit]

    @staticmethod
    def assemble(rows: Iterable[ResortSnowfallStats]) -> list[RankedResort]:
        """Number rows 1..N in the order given, keeping missing metrics as None."""
        return [
            RankedResort(rank=position, **row.model_dump())
            for position, row in enumerate(rows, start=1)
        ]

    def search(
        self,
        window: CalendarWindow,
        prefecture: str | None = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
        deadline: Deadline | None = None,
    ) -> list[RankedResort]:
        """Rank resorts for a window and assign presentation ranks."""
        rows = self.rank(window, prefecture, limit, deadline=deadline)
        logger.info(
            "Ranked %d resorts for %s (prefecture=%s, limit=%d)",
            len(rows),
            window,
            prefecture or ALL_SENTINEL,
            limit,
        )
        return self.assemble(rows)

    # MARK: - Metadata

    def list_resorts_with_peaks(
        self, deadline: Deadline | None = None
    ) -> list[ResortWithPeaks]:
        return self.repository.get_all_resorts_with_peaks(deadline=deadline)

    def list_resort_options(self, deadline: Deadline | None = None) -> list[ResortOption]:
        """Project the full listing down to id/name pairs."""
        return [
            ResortOption(id=rp.resort.id, name=rp.resort.name)
            for rp in self.list_resorts_with_peaks(deadline=deadline)
        ]

    def get_resort_peaks(
        self, resort_id: str, deadline: Deadline | None = None
    ) -> ResortWithPeaks:
        """Resolve one resort and its peak periods.

        Raises:
            ResortNotFoundError: If the resort does not exist
            StorageError: If a storage call fails
        """
        resort = self.repository.get_resort_by_id(resort_id, deadline=deadline)
        peaks = self.repository.get_peak_periods_for_resort(resort.id, deadline=deadline)
        return ResortWithPeaks(resort=resort, peaks=peaks)
