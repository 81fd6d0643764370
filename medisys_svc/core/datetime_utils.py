"""
Date helpers for patient records.

Birth dates are calendar dates without a time zone. They are stored in
SQLite as ISO 8601 TEXT ("YYYY-MM-DD") and compared against the local
calendar day, which is what a practice means by "today".

Usage:
    from core.datetime_utils import today, is_future_date, parse_date

    is_future_date(parse_date("2999-01-01"))   # True
"""
import logging
from datetime import date, datetime
from typing import Optional, Union

logger = logging.getLogger(__name__)

# Accepted input formats besides ISO, in order of preference
_DATE_FORMATS = (
    "%d.%m.%Y",   # 01.05.1990
    "%d/%m/%Y",   # 01/05/1990
    "%d-%m-%Y",   # 01-05-1990
)


def today() -> date:
    """Current local calendar date."""
    return date.today()


def is_future_date(value: date, reference: Optional[date] = None) -> bool:
    """
    Check whether a date lies strictly after the reference day.

    Args:
        value: Date to check.
        reference: Day to compare against. Defaults to today().

    Returns:
        bool: True if value is later than reference.
    """
    return value > (reference or today())


def parse_date(value: Union[str, date, datetime]) -> date:
    """
    Parse a date value.

    Accepts date/datetime objects, ISO strings ("1990-05-01") and the
    day-first formats used on Swiss forms ("01.05.1990").

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected date or string, got {type(value).__name__}")

    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    raise ValueError(f"Cannot parse date: '{value}'")


def parse_date_safe(value: Union[str, date, None]) -> Optional[date]:
    """Parse a date, returning None for empty or unparseable input."""
    if value is None or value == "":
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        logger.warning(f"Failed to parse date '{value}': {e}")
        return None


def to_db_string(value: Optional[date]) -> Optional[str]:
    """Convert a date to its SQLite TEXT representation."""
    return value.isoformat() if value is not None else None


def from_db_string(value: Optional[str]) -> Optional[date]:
    """Parse a date stored as TEXT in SQLite."""
    return parse_date_safe(value)
