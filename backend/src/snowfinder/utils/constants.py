"""Shared constants for the SnowFinder backend."""

# Result count used when the caller omits limit or sends a non-positive one
DEFAULT_SEARCH_LIMIT: int = 10

# Query value meaning "no prefecture filter" / "every resort"
ALL_SENTINEL: str = "all"

# Bounded waits for storage calls, in seconds
SEARCH_TIMEOUT_SECONDS: float = 10.0
LISTING_TIMEOUT_SECONDS: float = 10.0
PEAK_LOOKUP_TIMEOUT_SECONDS: float = 30.0

# Slow request threshold for the access log middleware
SLOW_REQUEST_MS: float = 1000.0

DEFAULT_AWS_REGION: str = "us-west-2"
DEFAULT_RESORTS_TABLE: str = "snowfinder-resorts-dev"
DEFAULT_SNOWFALL_HISTORY_TABLE: str = "snowfinder-snowfall-history-dev"
DEFAULT_PEAK_PERIODS_TABLE: str = "snowfinder-peak-periods-dev"
