"""날짜/시간 유틸리티 — 업무 타임존 기준 "오늘" 계산.

Datetime helpers. Timestamps are stored in UTC; business dates ("today",
shift start/end) are evaluated in ``settings.TIMEZONE``.
"""

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from app.config import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def business_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def ensure_utc(value: datetime) -> datetime:
    """naive 값은 UTC로 간주 — Treat naive datetimes (e.g. from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime) -> datetime:
    return ensure_utc(value).astimezone(business_tz())


def local_date(value: datetime | None = None) -> date:
    """업무 타임존 기준 날짜 — Business-local calendar date of ``value`` (default: now)."""
    return to_local(value or utc_now()).date()


def local_datetime(day: date, at: time) -> datetime:
    """업무 날짜 + 시각을 tz-aware datetime으로 결합 — Combine a business date and wall time."""
    return datetime.combine(day, at, tzinfo=business_tz())
