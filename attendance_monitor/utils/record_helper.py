from datetime import datetime, date as calendar_date, time, timezone
from typing import Optional, Tuple

DISPLAY_DATE_FORMAT = "%d/%m/%Y"


def split_full_name(full_name: Optional[str]) -> Tuple[str, str]:
    """
    Split a student's full name into (first, last).

    The first whitespace-delimited token is the first name, the remaining
    tokens joined by a single space are the last name. A missing name gives
    two empty strings.
    """
    if not full_name:
        return "", ""
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def is_blank(value: Optional[str]) -> bool:
    return value is None or str(value).strip() == ""


def to_naive_utc(value: datetime) -> datetime:
    """Stored timestamps are naive; aware inputs are converted to UTC first"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 date or datetime string ("Z" suffix accepted)"""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_naive_utc(datetime.fromisoformat(text))


def format_display_date(value: datetime) -> str:
    """dd/mm/yyyy, the form the dashboard sends for single-day filters"""
    return value.strftime(DISPLAY_DATE_FORMAT)


def day_bounds(day: calendar_date) -> Tuple[datetime, datetime]:
    """First and last millisecond of a calendar day"""
    start = datetime.combine(day, time(0, 0, 0, 0))
    end = datetime.combine(day, time(23, 59, 59, 999000))
    return start, end
