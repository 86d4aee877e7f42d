"""
Time bucket helpers for traffic-over-time aggregation.

Visits are grouped into daily or monthly buckets; the bucket label is built
by MongoDB with ``$dateToString`` so grouping happens in the database.
"""

from enum import Enum
from typing import Any, Dict


class TimeBucketStrategy(Enum):
    """Enumeration of available time bucketing strategies"""

    DAILY = "daily"
    MONTHLY = "monthly"


class TimeBucketConfig:
    """Configuration for time bucket aggregation"""

    def __init__(self, strategy: TimeBucketStrategy, mongo_format: str):
        self.strategy = strategy
        self.mongo_format = mongo_format


BUCKET_CONFIGS = {
    TimeBucketStrategy.DAILY: TimeBucketConfig(
        strategy=TimeBucketStrategy.DAILY,
        mongo_format="%Y-%m-%d",
    ),
    TimeBucketStrategy.MONTHLY: TimeBucketConfig(
        strategy=TimeBucketStrategy.MONTHLY,
        mongo_format="%Y-%m",
    ),
}


def get_bucket_config(period: str) -> TimeBucketConfig:
    """Bucket configuration for a ``daily`` / ``monthly`` period name."""
    return BUCKET_CONFIGS[TimeBucketStrategy(period)]


def create_mongo_time_bucket_expr(
    bucket_config: TimeBucketConfig,
    time_field: str = "timestamp",
    timezone: str = "UTC",
) -> Dict[str, Any]:
    """
    Build the ``$dateToString`` expression that labels a document's bucket.

    Args:
        bucket_config: The bucket configuration to use
        time_field: Name of the datetime field in the collection
        timezone: IANA timezone for bucketing (default: UTC)
    """
    return {
        "$dateToString": {
            "format": bucket_config.mongo_format,
            "date": f"${time_field}",
            "timezone": timezone,
        }
    }
