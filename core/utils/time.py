"""
Time Utilities

All timestamps in the aggregation layer are timezone-aware UTC datetimes.
Cache validity compares these directly, so every clock used by the
aggregator (including fake clocks in tests) must return aware UTC values.
"""

from datetime import datetime, timezone


def current_utc_datetime() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        datetime: Current time as timezone-aware datetime in UTC

    Example:
        >>> current_utc_datetime()
        datetime.datetime(2024, 1, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)
    """
    return datetime.now(timezone.utc)


def format_utc(dt: datetime) -> str:
    """
    Format a datetime as "YYYY-MM-DD HH:MM:SS" in UTC.

    Naive datetimes are assumed to already be UTC.

    Example:
        >>> format_utc(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))
        '2024-01-01 12:00:00'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
