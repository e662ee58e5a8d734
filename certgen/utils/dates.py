"""Resolution of relative and absolute date expressions."""

import re
from datetime import datetime, timezone
from typing import Optional, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_UNITS = {
    "sec": "seconds",
    "second": "seconds",
    "min": "minutes",
    "minute": "minutes",
    "hour": "hours",
    "day": "days",
    "week": "weeks",
    "fortnight": "fortnights",
    "month": "months",
    "year": "years",
}

_NAMED_DAYS = {"now": 0, "today": 0, "yesterday": -1, "tomorrow": 1}

_RELATIVE_ITEM = re.compile(r"([+-]?\d+)?\s*(sec|second|min|minute|hour|day|week|fortnight|month|year)s?\b", re.I)
_RELATIVE_EXPR = re.compile(
    r"^\s*(?:[+-]?\d+\s*)?(?:sec|second|min|minute|hour|day|week|fortnight|month|year)s?"
    r"(?:\s+(?:[+-]?\d+\s*)?(?:sec|second|min|minute|hour|day|week|fortnight|month|year)s?)*"
    r"(?:\s+ago)?\s*$",
    re.I,
)
_GENERALIZED_TIME = re.compile(r"^\d{14}Z$")
_SHORT_GENERALIZED_TIME = re.compile(r"^\d{12}Z$")


def resolve_date(value: Union[str, datetime], now: Optional[datetime] = None) -> datetime:
    """
    Resolve a date expression into an aware UTC datetime.

    Accepts the same vocabulary people use with date(1): ``now``, ``today``,
    ``1 year``, ``5 years ago``, ``3 months 2 days``, ``-2 weeks``, absolute
    timestamps like ``20300101000000Z`` or ``203001011235Z`` (no seconds) and
    anything dateutil can parse (``2030-01-01``, ``Jan 1 2030 12:00``).

    Args:
        value: Date expression or datetime (naive datetimes are taken as UTC)
        now: Reference point for relative expressions, current time by default

    Returns:
        Resolved datetime in UTC

    Raises:
        ValueError: If the expression can't be understood
    """
    if isinstance(value, datetime):
        return _as_utc(value)

    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    expr = value.strip()
    lowered = expr.lower()

    if not expr:
        raise ValueError("Empty date expression")

    if lowered in _NAMED_DAYS:
        return now + relativedelta(days=_NAMED_DAYS[lowered])

    if _RELATIVE_EXPR.match(expr):
        return now + _parse_relative(lowered)

    if _GENERALIZED_TIME.match(expr):
        return datetime.strptime(expr, "%Y%m%d%H%M%SZ").replace(tzinfo=timezone.utc)

    if _SHORT_GENERALIZED_TIME.match(expr):
        return datetime.strptime(expr, "%Y%m%d%H%MZ").replace(tzinfo=timezone.utc)

    try:
        parsed = date_parser.parse(expr, default=now.replace(hour=0, minute=0, second=0, microsecond=0))
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid date expression {value!r}: {e}")

    return _as_utc(parsed)


def format_date(value: datetime, date_format: str) -> str:
    """Format a datetime in UTC the way openssl expects it in its config file."""
    return _as_utc(value).strftime(date_format)


def _parse_relative(expr: str) -> relativedelta:
    delta = relativedelta()
    for count, unit in _RELATIVE_ITEM.findall(expr):
        amount = int(count) if count else 1
        name = _UNITS[unit.lower()]
        if name == "fortnights":
            delta += relativedelta(weeks=2 * amount)
        else:
            delta += relativedelta(**{name: amount})

    if expr.rstrip().endswith("ago"):
        delta = -delta

    return delta


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
