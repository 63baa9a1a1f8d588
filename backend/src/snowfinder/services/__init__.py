"""Services for the SnowFinder backend."""

from .errors import ResortNotFoundError, StorageError, StorageTimeoutError
from .ranking_service import SnowfallRankingService, is_unfiltered, resolve_limit
from .snowfall_repository import SnowfallRepository, aggregate_window_snowfall

__all__ = [
    "ResortNotFoundError",
    "StorageError",
    "StorageTimeoutError",
    "SnowfallRankingService",
    "SnowfallRepository",
    "aggregate_window_snowfall",
    "is_unfiltered",
    "resolve_limit",
]
