"""Pytest configuration and shared fixtures."""

from decimal import Decimal
from typing import Any
from unittest.mock import Mock

import boto3
import pytest
from moto import mock_aws

from snowfinder.models.resort import PeakPeriod, Resort
from snowfinder.models.snowfall import ResortSnowfallStats

AWS_REGION = "us-west-2"
RESORTS_TABLE = "snowfinder-resorts-test"
HISTORY_TABLE = "snowfinder-snowfall-history-test"
PEAKS_TABLE = "snowfinder-peak-periods-test"


def prepare_for_dynamodb(obj: Any) -> Any:
    """Convert int and float values to Decimal for DynamoDB writes."""
    if isinstance(obj, float):
        return Decimal(str(round(obj, 6)))
    elif isinstance(obj, int) and not isinstance(obj, bool):
        return Decimal(obj)
    elif isinstance(obj, dict):
        return {key: prepare_for_dynamodb(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [prepare_for_dynamodb(item) for item in obj]
    return obj


@pytest.fixture
def aws_env(monkeypatch):
    """Fake credentials and table names for moto-backed tests."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", AWS_REGION)
    monkeypatch.setenv("RESORTS_TABLE", RESORTS_TABLE)
    monkeypatch.setenv("SNOWFALL_HISTORY_TABLE", HISTORY_TABLE)
    monkeypatch.setenv("PEAK_PERIODS_TABLE", PEAKS_TABLE)


@pytest.fixture
def dynamodb_tables(aws_env):
    """Create the three SnowFinder tables inside a moto mock."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name=AWS_REGION)

        resorts_table = dynamodb.create_table(
            TableName=RESORTS_TABLE,
            KeySchema=[{"AttributeName": "resort_id", "KeyType": "HASH"}],
            AttributeDefinitions=[
                {"AttributeName": "resort_id", "AttributeType": "S"},
                {"AttributeName": "prefecture", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "PrefectureIndex",
                    "KeySchema": [{"AttributeName": "prefecture", "KeyType": "HASH"}],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        history_table = dynamodb.create_table(
            TableName=HISTORY_TABLE,
            KeySchema=[
                {"AttributeName": "resort_id", "KeyType": "HASH"},
                {"AttributeName": "date", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "resort_id", "AttributeType": "S"},
                {"AttributeName": "date", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        peaks_table = dynamodb.create_table(
            TableName=PEAKS_TABLE,
            KeySchema=[
                {"AttributeName": "resort_id", "KeyType": "HASH"},
                {"AttributeName": "peak_rank", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "resort_id", "AttributeType": "S"},
                {"AttributeName": "peak_rank", "AttributeType": "N"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        yield {
            "resorts_table": resorts_table,
            "history_table": history_table,
            "peaks_table": peaks_table,
        }


def put_resort(table, resort: Resort):
    """Store a resort the way the ingestion side writes it."""
    item = resort.model_dump(exclude_none=True)
    item["resort_id"] = item.pop("id")
    table.put_item(Item=prepare_for_dynamodb(item))


def put_snowfall(table, resort_id: str, day: str, snowfall_cm: float | None):
    """Store one daily snowfall record; None leaves the measurement out."""
    item = {"resort_id": resort_id, "date": day, "month_day": day[5:]}
    if snowfall_cm is not None:
        item["snowfall_cm"] = snowfall_cm
    table.put_item(Item=prepare_for_dynamodb(item))


def put_peak(table, peak: PeakPeriod):
    table.put_item(Item=prepare_for_dynamodb(peak.model_dump(exclude_none=True)))


@pytest.fixture
def niseko():
    return Resort(
        id="niseko-united",
        name="Niseko United",
        prefecture="hokkaido",
        top_elevation_m=1308,
        base_elevation_m=255,
        num_courses=61,
        longest_course_km=5.6,
    )


@pytest.fixture
def hakuba():
    return Resort(
        id="hakuba-happo-one",
        name="Hakuba Happo-one",
        prefecture="nagano",
        top_elevation_m=1831,
        base_elevation_m=760,
        vertical_m=1071,
        num_courses=16,
    )


@pytest.fixture
def nozawa():
    """A resort with no course metadata at all."""
    return Resort(id="nozawa-onsen", name="Nozawa Onsen", prefecture="nagano")


@pytest.fixture
def sample_rows():
    """Aggregation rows as storage would return them, best first."""
    return [
        ResortSnowfallStats(
            name="Niseko United",
            prefecture="hokkaido",
            avg_snowfall_cm=320,
            years_with_data=8,
            top_elevation_m=1308,
            base_elevation_m=255,
            vertical_drop_m=1053,
            num_courses=61,
            longest_course_km=5.6,
        ),
        ResortSnowfallStats(
            name="Hakuba Happo-one",
            prefecture="nagano",
            avg_snowfall_cm=290,
            years_with_data=7,
            top_elevation_m=1831,
            base_elevation_m=760,
            vertical_drop_m=1071,
            num_courses=16,
        ),
        ResortSnowfallStats(
            name="Nozawa Onsen",
            prefecture="nagano",
            avg_snowfall_cm=150,
            years_with_data=2,
        ),
    ]


@pytest.fixture
def mock_repository():
    """Test double for the storage collaborator."""
    repository = Mock()
    repository.rank_by_window.return_value = []
    repository.rank_by_window_and_region.return_value = []
    repository.get_all_resorts_with_peaks.return_value = []
    repository.get_peak_periods_for_resort.return_value = []
    return repository
