"""Time utilities (configured application timezone)."""

from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from app.config import settings

APP_TZ = ZoneInfo(settings.TIMEZONE)


def now_local_naive() -> datetime:
    """
    Current time in the app timezone, returned as naive datetime for DB storage.
    """
    return datetime.now(APP_TZ).replace(tzinfo=None)


def today_local() -> date:
    """Calendar date in the app timezone. Used as the sweep reference date."""
    return datetime.now(APP_TZ).date()


def to_local(dt: datetime, naive_assumed_tz: tzinfo = timezone.utc) -> datetime:
    """Convert datetime to the app timezone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=naive_assumed_tz)
    return dt.astimezone(APP_TZ)


def to_local_iso_db(dt: datetime) -> str:
    """
    Convert a DB timestamp to an ISO string with offset.

    DB timestamps are stored as naive local time, so naive values are
    interpreted in the app timezone (not UTC) here.
    """
    return to_local(dt, naive_assumed_tz=APP_TZ).isoformat()
