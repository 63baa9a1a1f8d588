"""FastAPI application handler for Lambda deployment."""

import asyncio
import functools
import logging
import os
import time
from datetime import UTC, datetime

import boto3
from botocore.config import Config
from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mangum import Mangum

from .. import __version__
from ..models.resort import ResortOption, ResortWithPeaks
from ..models.snowfall import RankedResort
from ..services.errors import ResortNotFoundError, StorageError, StorageTimeoutError
from ..services.ranking_service import SnowfallRankingService, resolve_limit
from ..services.snowfall_repository import SnowfallRepository
from ..utils.calendar_window import is_valid_month_day, normalize_window
from ..utils.constants import (
    ALL_SENTINEL,
    DEFAULT_AWS_REGION,
    DEFAULT_PEAK_PERIODS_TABLE,
    DEFAULT_RESORTS_TABLE,
    DEFAULT_SNOWFALL_HISTORY_TABLE,
    LISTING_TIMEOUT_SECONDS,
    PEAK_LOOKUP_TIMEOUT_SECONDS,
    SEARCH_TIMEOUT_SECONDS,
    SLOW_REQUEST_MS,
)
from ..utils.deadline import Deadline, DeadlineExceededError, OperationCancelledError

logger = logging.getLogger(__name__)

app = FastAPI(
    title="SnowFinder API",
    description="Historical snowfall rankings for ski resorts",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log slow and failed requests with timing."""
    start = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000

    path = request.url.path
    if duration_ms > SLOW_REQUEST_MS:
        logger.warning(
            "[SLOW] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )
    elif response.status_code >= 500:
        logger.error(
            "[ERROR] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )
    elif response.status_code >= 400:
        logger.info(
            "[CLIENT_ERROR] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )

    return response


# Lazy-initialized AWS resources and services, created once per process
_dynamodb = None
_snowfall_repository = None
_ranking_service = None


def reset_services():
    """Reset all lazy-initialized services. Useful for testing.

    Also resets boto3's default session so that subsequent calls to
    boto3.resource() pick up moto's mock_aws context.
    """
    global _dynamodb, _snowfall_repository, _ranking_service
    _dynamodb = None
    _snowfall_repository = None
    _ranking_service = None
    boto3.DEFAULT_SESSION = None


def get_dynamodb():
    """Get or create the DynamoDB resource."""
    global _dynamodb
    if _dynamodb is None:
        region = os.environ.get("AWS_DEFAULT_REGION", DEFAULT_AWS_REGION)
        # Single attempt: a failed query fails the request, no retries
        config = Config(
            connect_timeout=5,
            read_timeout=PEAK_LOOKUP_TIMEOUT_SECONDS,
            retries={"total_max_attempts": 1, "mode": "standard"},
        )
        _dynamodb = boto3.resource("dynamodb", region_name=region, config=config)
    return _dynamodb


def get_snowfall_repository() -> SnowfallRepository:
    """Get or create the SnowfallRepository."""
    global _snowfall_repository
    if _snowfall_repository is None:
        dynamodb = get_dynamodb()
        _snowfall_repository = SnowfallRepository(
            resorts_table=dynamodb.Table(
                os.environ.get("RESORTS_TABLE", DEFAULT_RESORTS_TABLE)
            ),
            history_table=dynamodb.Table(
                os.environ.get("SNOWFALL_HISTORY_TABLE", DEFAULT_SNOWFALL_HISTORY_TABLE)
            ),
            peaks_table=dynamodb.Table(
                os.environ.get("PEAK_PERIODS_TABLE", DEFAULT_PEAK_PERIODS_TABLE)
            ),
        )
    return _snowfall_repository


def get_ranking_service() -> SnowfallRankingService:
    """Get or create the SnowfallRankingService."""
    global _ranking_service
    if _ranking_service is None:
        _ranking_service = SnowfallRankingService(get_snowfall_repository())
    return _ranking_service


async def run_with_deadline(func, *args, timeout_seconds: float, **kwargs):
    """Run a blocking storage call in a worker thread under a bounded wait.

    The call receives a ``deadline`` keyword argument. If the wait times
    out or the request task is cancelled, the deadline is cancelled so the
    storage call stops at its next checkpoint.

    Raises:
        StorageTimeoutError: If the call does not finish in time
    """
    deadline = Deadline(timeout_seconds)
    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(
        None, functools.partial(func, *args, deadline=deadline, **kwargs)
    )
    try:
        return await asyncio.wait_for(future, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        deadline.cancel()
        raise StorageTimeoutError(
            f"Storage call timed out after {timeout_seconds:g}s"
        ) from None
    except asyncio.CancelledError:
        deadline.cancel()
        raise


# MARK: - Info


@app.get("/")
async def index():
    """Describe the service and its endpoints."""
    return {
        "name": "SnowFinder",
        "version": __version__,
        "endpoints": {
            "search": "/api/search?start_date=MM-DD&end_date=MM-DD&prefecture=all&limit=10",
            "peaks": "/api/peaks?resort_id=all",
            "resorts": "/api/resorts",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": __version__,
    }


# MARK: - Search


@app.get("/api/search", response_model=list[RankedResort])
async def search_snowiest_resorts(
    start_date: str | None = Query(None, description="Window start (MM-DD)"),
    end_date: str | None = Query(
        None, description="Window end (MM-DD), defaults to start_date"
    ),
    prefecture: str | None = Query(
        None, description="Prefecture to filter by; empty or 'all' for every one"
    ),
    limit: str | None = Query(None, description="Maximum results (default 10)"),
    service: SnowfallRankingService = Depends(get_ranking_service),  # noqa: B008
):
    """Rank resorts by historical snowfall in a recurring calendar window.

    The window may wrap the year boundary, e.g. start_date=12-28 and
    end_date=01-05.
    """
    if not start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date is required in MM-DD format",
        )
    if not is_valid_month_day(start_date):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must be in MM-DD format (e.g., 02-08)",
        )
    if not end_date:
        end_date = start_date
    elif not is_valid_month_day(end_date):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must be in MM-DD format (e.g., 02-14)",
        )

    window = normalize_window(start_date, end_date)

    return await run_with_deadline(
        service.search,
        window,
        prefecture,
        resolve_limit(limit),
        timeout_seconds=SEARCH_TIMEOUT_SECONDS,
    )


# MARK: - Resort Metadata


@app.get("/api/resorts", response_model=list[ResortOption])
async def get_resort_options(
    service: SnowfallRankingService = Depends(get_ranking_service),  # noqa: B008
):
    """Resort id/name pairs for selector widgets."""
    return await run_with_deadline(
        service.list_resort_options, timeout_seconds=LISTING_TIMEOUT_SECONDS
    )


@app.get("/api/peaks")
async def get_peak_info(
    resort_id: str | None = Query(
        None, description="Resort ID; omitted or 'all' for every resort"
    ),
    service: SnowfallRankingService = Depends(get_ranking_service),  # noqa: B008
) -> ResortWithPeaks | list[ResortWithPeaks]:
    """Peak snowfall periods for one resort or for all of them."""
    if not resort_id or resort_id == ALL_SENTINEL:
        return await run_with_deadline(
            service.list_resorts_with_peaks, timeout_seconds=LISTING_TIMEOUT_SECONDS
        )

    try:
        return await run_with_deadline(
            service.get_resort_peaks,
            resort_id,
            timeout_seconds=PEAK_LOOKUP_TIMEOUT_SECONDS,
        )
    except ResortNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Resort not found",
        )


# MARK: - Error Handlers


@app.exception_handler(StorageTimeoutError)
@app.exception_handler(DeadlineExceededError)
async def storage_timeout_handler(request, exc: DeadlineExceededError):
    """Handle storage calls that exceeded their bounded wait."""
    logger.error("Storage timeout on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT, content={"detail": str(exc)}
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request, exc: StorageError):
    """Handle storage failures."""
    logger.error("Storage failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


@app.exception_handler(OperationCancelledError)
async def cancelled_handler(request, exc: OperationCancelledError):
    """Handle storage work abandoned by its request."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    """Handle value errors."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
    )


# MARK: - Lambda Handler

api_handler = Mangum(app, lifespan="off")


# For local development
if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8080")))
