"""UTC timestamps for entities and their persisted rows.

SQLite returns datetimes without tzinfo; ``ensure_tz_aware`` puts UTC back.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_tz_aware(value: datetime) -> datetime:
    """Treat a naive datetime as UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
