import logging
from datetime import datetime, date, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_timezone(tz_name: str | None, fallback: str) -> ZoneInfo:
    """Return ZoneInfo for tz_name, or for fallback when it is empty or unknown."""
    name = (tz_name or "").strip()
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {name!r}, falling back to {fallback}")
    return ZoneInfo(fallback)


def local_date_for(instant: datetime, tz: ZoneInfo) -> date:
    """Calendar date the instant falls on in tz. Naive instants are read as UTC."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz).date()


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def parse_date(value: str | date) -> date:
    """Parse a YYYY-MM-DD string. Date objects pass through unchanged."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, DATE_FORMAT).date()


def start_of_week(d: date) -> date:
    """Return Monday of the week containing d."""
    return d - timedelta(days=d.weekday())


def week_start_date_string(today: str | date) -> str:
    """Monday on/before an already-localized calendar date, as YYYY-MM-DD."""
    return format_date(start_of_week(parse_date(today)))
