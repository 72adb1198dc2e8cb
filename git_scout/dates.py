"""Turn human-entered date strings into instants and back.

Recognized inputs for :func:`parse_date`:

- ``today``, ``yesterday``: local midnight of that day
- ``now``: the current instant
- ``7d``, ``30d``: midnight N days before today (out-of-range N is rejected)
- ``today 09:30``, ``yesterday 18:00``: a local wall-clock time on that day
- anything ``dateutil`` understands (``2025-09-29``, ISO-8601 timestamps, ...)

Every function takes an optional ``now`` so callers and tests can pin the
reference instant; its tzinfo is then treated as the local zone.
"""

from __future__ import annotations

import re
import time as _time
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from dateutil import parser as date_parser

from .errors import InvalidDateFormat, InvalidRange
from .models import DateRange

_DAYS_AGO = re.compile(r"^(\d+)d$")
_DAY_AT_TIME = re.compile(r"^(today|yesterday)\s+(\d{1,2}):(\d{2})$")


def _now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now().astimezone()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def _local_zone(now: datetime | None) -> tzinfo | None:
    # None means "the system zone", resolved per date so DST shifts are honoured
    if now is None or now.tzinfo is None:
        return None
    return now.tzinfo


def _at(day: date, zone: tzinfo | None, hour: int = 0, minute: int = 0) -> datetime:
    moment = datetime.combine(day, time(hour, minute))
    if zone is None:
        return moment.astimezone()
    return moment.replace(tzinfo=zone)


def parse_date(text: str, now: datetime | None = None) -> datetime:
    """Resolve ``text`` to a timezone-aware datetime.

    Raises InvalidDateFormat when nothing matches.
    """
    current = _now(now)
    zone = _local_zone(now)
    today = current.date()
    value = text.strip()

    if value == "today":
        return _at(today, zone)
    if value == "yesterday":
        return _at(today - timedelta(days=1), zone)
    if value == "now":
        return current

    match = _DAYS_AGO.match(value)
    if match:
        try:
            return _at(today - timedelta(days=int(match.group(1))), zone)
        except (OverflowError, ValueError) as e:
            raise InvalidDateFormat(text) from e

    match = _DAY_AT_TIME.match(value)
    if match:
        day = today if match.group(1) == "today" else today - timedelta(days=1)
        try:
            return _at(day, zone, int(match.group(2)), int(match.group(3)))
        except ValueError as e:
            raise InvalidDateFormat(text) from e

    try:
        parsed = date_parser.parse(value, default=datetime.combine(today, time()))
    except (ValueError, OverflowError) as e:
        raise InvalidDateFormat(text) from e

    if parsed.tzinfo is None:
        if zone is None:
            return parsed.astimezone()
        return parsed.replace(tzinfo=zone)
    return parsed


def parse_date_range(
    since: str | None = None,
    until: str | None = None,
    now: datetime | None = None,
) -> DateRange:
    """Resolve both bounds and reject a range that runs backwards."""
    since_dt = parse_date(since, now) if since else None
    until_dt = parse_date(until, now) if until else None

    if since_dt is not None and until_dt is not None and since_dt > until_dt:
        raise InvalidRange()

    return DateRange(since_dt, until_dt)


def format_for_git(dt: datetime) -> str:
    """UTC with millisecond precision, e.g. ``2025-09-30T12:00:00.000Z``."""
    utc = dt.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S") + f".{utc.microsecond // 1000:03d}Z"


def format_for_display(dt: datetime) -> str:
    return dt.astimezone().strftime("%m/%d/%Y %H:%M")


def start_of_today(now: datetime | None = None) -> datetime:
    return _at(_now(now).date(), _local_zone(now))


def end_of_today(now: datetime | None = None) -> datetime:
    return start_of_today(now) + timedelta(days=1, microseconds=-1000)


def default_since(days: int, now: datetime | None = None) -> datetime:
    return _at(_now(now).date() - timedelta(days=days), _local_zone(now))


def is_today(dt: datetime, now: datetime | None = None) -> bool:
    return start_of_today(now) <= dt <= end_of_today(now)


def local_date(dt: datetime, now: datetime | None = None) -> date:
    """Calendar day of ``dt`` in the local zone (``now``'s zone when given)."""
    zone = _local_zone(now)
    return dt.astimezone(zone).date()


def local_timezone_name() -> str:
    return datetime.now().astimezone().tzname() or _time.tzname[0]
