"""DynamoDB-backed storage for resorts, snowfall history and peak periods.

Tables:
    resorts: HASH resort_id, GSI PrefectureIndex on prefecture
    snowfall history: HASH resort_id, RANGE date (YYYY-MM-DD), with a
        month_day (MM-DD) attribute so calendar windows can be filtered
        server side
    peak periods: HASH resort_id, RANGE peak_rank
"""

import logging
import math
from collections import defaultdict
from datetime import date
from typing import Any, Iterable

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError
from pydantic import ValidationError

from ..models.calendar import CalendarWindow
from ..models.resort import PeakPeriod, Resort, ResortWithPeaks
from ..models.snowfall import ResortSnowfallStats
from ..utils.calendar_window import season_year
from ..utils.deadline import Deadline, DeadlineExceededError
from ..utils.dynamodb_utils import parse_from_dynamodb
from .errors import ResortNotFoundError, StorageError, StorageTimeoutError

logger = logging.getLogger(__name__)

PREFECTURE_INDEX = "PrefectureIndex"


def window_filter(window: CalendarWindow):
    """DynamoDB filter selecting measured days inside a calendar window.

    MM-DD strings sort in calendar order, so the window maps onto a
    string range; a wrapping window becomes the union of its two tails.
    """
    month_day = Attr("month_day")
    if window.wraps_year:
        in_window = month_day.gte(window.start) | month_day.lte(window.end)
    else:
        in_window = month_day.between(window.start, window.end)
    return in_window & Attr("snowfall_cm").exists()


def aggregate_window_snowfall(
    resorts: Iterable[Resort],
    history_items: Iterable[dict[str, Any]],
    window: CalendarWindow,
    limit: int | None = None,
) -> list[ResortSnowfallStats]:
    """Aggregate daily snowfall into per-resort window statistics.

    For each resort, the snowfall of every measured day inside the window
    is summed per season. The average is taken over seasons that have at
    least one measurement (not over calendar years), rounded half up.
    Resorts without any such season are left out.

    Rows are ordered by average snowfall descending, then by seasons with
    data descending, then by name.

    Args:
        resorts: Resorts eligible for the ranking
        history_items: Daily records with resort_id, date and snowfall_cm
        window: Calendar window to aggregate over
        limit: Maximum number of rows to return, None for all

    Returns:
        Ranked list of ResortSnowfallStats
    """
    by_id = {resort.id: resort for resort in resorts}
    season_totals: dict[str, dict[int, float]] = defaultdict(
        lambda: defaultdict(float)
    )

    for item in history_items:
        resort_id = item.get("resort_id")
        snowfall = item.get("snowfall_cm")
        if resort_id not in by_id or snowfall is None:
            continue
        try:
            day = date.fromisoformat(item["date"])
            amount = float(snowfall)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(
                f"Invalid snowfall record for {resort_id} {item.get('date')!r}: {e}"
            ) from e
        if not window.contains(day.month, day.day):
            continue
        season = season_year(window, day.year, day.month, day.day)
        season_totals[resort_id][season] += amount

    rows = []
    for resort_id, seasons in season_totals.items():
        resort = by_id[resort_id]
        average = sum(seasons.values()) / len(seasons)
        rows.append(
            ResortSnowfallStats(
                name=resort.name,
                prefecture=resort.prefecture,
                avg_snowfall_cm=math.floor(average + 0.5),
                years_with_data=len(seasons),
                top_elevation_m=resort.top_elevation_m,
                base_elevation_m=resort.base_elevation_m,
                vertical_drop_m=resort.vertical_drop_m,
                num_courses=resort.num_courses,
                longest_course_km=resort.longest_course_km,
            )
        )

    rows.sort(key=lambda r: (-r.avg_snowfall_cm, -r.years_with_data, r.name))
    if limit is not None:
        return rows[:limit]
    return rows


class SnowfallRepository:
    """Read-only access to resort and snowfall data in DynamoDB."""

    def __init__(self, resorts_table, history_table, peaks_table):
        self.resorts_table = resorts_table
        self.history_table = history_table
        self.peaks_table = peaks_table

    # MARK: - Rankings

    def rank_by_window(
        self, window: CalendarWindow, limit: int, deadline: Deadline | None = None
    ) -> list[ResortSnowfallStats]:
        """Rank every resort by average snowfall inside the window."""
        resorts = self._load_resorts(deadline=deadline)
        history = self._paginate(
            self.history_table.scan,
            deadline,
            f"snowfall scan {window}",
            FilterExpression=window_filter(window),
        )
        return aggregate_window_snowfall(resorts, history, window, limit)

    def rank_by_window_and_region(
        self,
        window: CalendarWindow,
        prefecture: str,
        limit: int,
        deadline: Deadline | None = None,
    ) -> list[ResortSnowfallStats]:
        """Rank the resorts of one prefecture (exact match) inside the window."""
        resorts = self._load_resorts(prefecture=prefecture, deadline=deadline)

        history: list[dict[str, Any]] = []
        for resort in resorts:
            history.extend(
                self._paginate(
                    self.history_table.query,
                    deadline,
                    f"snowfall query {resort.id} {window}",
                    KeyConditionExpression=Key("resort_id").eq(resort.id),
                    FilterExpression=window_filter(window),
                )
            )
        return aggregate_window_snowfall(resorts, history, window, limit)

    # MARK: - Metadata

    def get_all_resorts_with_peaks(
        self, deadline: Deadline | None = None
    ) -> list[ResortWithPeaks]:
        """All resorts that have at least one peak period, sorted by name."""
        resorts = self._load_resorts(deadline=deadline)
        items = self._paginate(self.peaks_table.scan, deadline, "peak period scan")

        peaks_by_resort: dict[str, list[PeakPeriod]] = defaultdict(list)
        for item in items:
            peak = self._to_model(PeakPeriod, item)
            peaks_by_resort[peak.resort_id].append(peak)

        results = []
        for resort in resorts:
            peaks = peaks_by_resort.get(resort.id)
            if not peaks:
                continue
            results.append(
                ResortWithPeaks(
                    resort=resort, peaks=sorted(peaks, key=lambda p: p.peak_rank)
                )
            )
        return sorted(results, key=lambda rp: rp.resort.name)

    def get_resort_by_id(
        self, resort_id: str, deadline: Deadline | None = None
    ) -> Resort:
        """Get a resort by ID.

        Raises:
            ResortNotFoundError: If no resort has this ID
            StorageError: If the lookup itself fails
        """
        self._check_deadline(deadline, f"resort lookup {resort_id}")
        try:
            response = self.resorts_table.get_item(Key={"resort_id": resort_id})
        except ClientError as e:
            logger.error("Failed to retrieve resort %s: %s", resort_id, e)
            raise StorageError(f"Failed to retrieve resort {resort_id}: {e}") from e

        item = response.get("Item")
        if not item:
            raise ResortNotFoundError(resort_id)
        return self._to_resort(item)

    def get_peak_periods_for_resort(
        self, resort_id: str, deadline: Deadline | None = None
    ) -> list[PeakPeriod]:
        """Peak periods of one resort ordered by peak rank."""
        items = self._paginate(
            self.peaks_table.query,
            deadline,
            f"peak period query {resort_id}",
            KeyConditionExpression=Key("resort_id").eq(resort_id),
            ScanIndexForward=True,
        )
        return [self._to_model(PeakPeriod, item) for item in items]

    # MARK: - Helpers

    def _load_resorts(
        self, prefecture: str | None = None, deadline: Deadline | None = None
    ) -> list[Resort]:
        if prefecture is None:
            items = self._paginate(self.resorts_table.scan, deadline, "resort scan")
        else:
            items = self._paginate(
                self.resorts_table.query,
                deadline,
                f"resort query {prefecture}",
                IndexName=PREFECTURE_INDEX,
                KeyConditionExpression=Key("prefecture").eq(prefecture),
            )
        return [self._to_resort(item) for item in items]

    def _paginate(
        self, operation, deadline: Deadline | None, description: str, **kwargs
    ) -> list[dict[str, Any]]:
        """Run a scan or query to completion, following LastEvaluatedKey.

        The deadline is checked before every page so an abandoned request
        stops issuing round trips.
        """
        items: list[dict[str, Any]] = []
        while True:
            self._check_deadline(deadline, description)
            try:
                response = operation(**kwargs)
            except ClientError as e:
                logger.error("DynamoDB %s failed: %s", description, e)
                raise StorageError(f"Failed {description}: {e}") from e

            items.extend(parse_from_dynamodb(item) for item in response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    @staticmethod
    def _check_deadline(deadline: Deadline | None, description: str) -> None:
        if deadline is None:
            return
        try:
            deadline.check(description)
        except DeadlineExceededError as e:
            raise StorageTimeoutError(str(e)) from e

    def _to_resort(self, item: dict[str, Any]) -> Resort:
        item = parse_from_dynamodb(item)
        item["id"] = item.pop("resort_id", item.get("id"))
        return self._to_model(Resort, item)

    @staticmethod
    def _to_model(model, item: dict[str, Any]):
        try:
            return model(**item)
        except ValidationError as e:
            raise StorageError(f"Invalid {model.__name__} record: {e}") from e
