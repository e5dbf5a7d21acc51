from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

import globals as config


def get_timezone(tz_name: Optional[str] = None) -> tzinfo:
    """Resolve the configured analytics timezone"""
    name = tz_name or config.get_analytics_config()["timezone"]
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(ts: datetime) -> datetime:
    """Naive timestamps are stored as UTC"""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def to_local_date(ts: datetime, tz: tzinfo) -> date:
    """Calendar date of a timestamp as seen in tz"""
    return ensure_aware(ts).astimezone(tz).date()


def local_today(now: datetime, tz: tzinfo) -> date:
    return to_local_date(now, tz)


def day_bounds(day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """[midnight, next midnight) of a calendar day in tz"""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def format_date_key(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def format_locale_date(ts: datetime, tz: tzinfo) -> str:
    """Short US-style date, e.g. 3/7/2024"""
    day = to_local_date(ts, tz)
    return f"{day.month}/{day.day}/{day.year}"
