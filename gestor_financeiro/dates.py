"""
Date utilities for Gestor Financeiro.

Dates travel through the app as YYYY-MM-DD strings and months as
YYYY-MM strings, so month membership is a plain prefix check.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/Sao_Paulo"

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")


def is_valid_iso_date(value: object) -> bool:
    """True when value is YYYY-MM-DD and names a real calendar day."""
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_valid_month(value: object) -> bool:
    """True when value is YYYY-MM with a month between 01 and 12."""
    if not isinstance(value, str) or not MONTH_PATTERN.match(value):
        return False
    return 1 <= int(value[5:]) <= 12


def month_of(iso_date: str) -> str:
    """YYYY-MM prefix of a YYYY-MM-DD date."""
    return iso_date[:7]


def today_in(tz_name: str = DEFAULT_TIMEZONE, now: Optional[datetime] = None) -> date:
    """
    Today's date in the given timezone.

    Args:
        tz_name: IANA timezone name.
        now: Aware instant to use instead of the clock (for tests).
            A naive value is taken as UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name)).date()


def current_month(tz_name: str = DEFAULT_TIMEZONE, now: Optional[datetime] = None) -> str:
    """
    Current month (YYYY-MM) in a fixed timezone.

    The host's local zone is never consulted, so the month boundary
    is the same wherever the process runs.
    """
    return today_in(tz_name, now).strftime("%Y-%m")
