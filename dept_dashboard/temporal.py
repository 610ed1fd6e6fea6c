"""
Calendar helpers: ISO week numbering, week bucketing, and the "1h 20m 5s"
duration format used by the IT helpdesk sheet.

All functions are pure. Unparseable dates and durations never raise:
dates fall into the NO_DATE_BUCKET, durations count as zero seconds.
"""

import logging
import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Iterable, NamedTuple, Union

from .loaders.utils import normalise_date

logger = logging.getLogger(__name__)

NO_DATE_BUCKET = "No Date"

_HOURS = re.compile(r"(\d+)\s*h", re.IGNORECASE)
_MINUTES = re.compile(r"(\d+)\s*m(?!s)", re.IGNORECASE)
_SECONDS = re.compile(r"(\d+)\s*s", re.IGNORECASE)


class WeekKey(NamedTuple):
    """ISO week number and the ISO year that week belongs to.

    The year is the ISO year (the year of the week's Thursday), not the
    calendar year of the date: 2023-01-01 is ``Week 52, 2022`` and
    2024-12-30 is ``Week 1, 2025``.
    """

    week: int
    year: int

    @property
    def label(self) -> str:
        return f"Week {self.week}, {self.year}"


# ---------------------------------------------------------------------------
# ISO weeks
# ---------------------------------------------------------------------------

def _utc_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def iso_week_year(value: date | datetime) -> WeekKey:
    """Return (week, year) for a date using ISO-8601 numbering.

    The date is shifted to the Thursday of its Monday-Sunday week; that
    Thursday's year is the week's year, so 2023-01-01 is week 52 of 2022.
    """
    d = _utc_date(value)
    thursday = d + timedelta(days=4 - d.isoweekday())
    year_start = date(thursday.year, 1, 1)
    week = math.ceil(((thursday - year_start).days + 1) / 7)
    return WeekKey(week, thursday.year)


def iso_week(value: date | datetime) -> int:
    """ISO-8601 week number (1-53) of a date."""
    return iso_week_year(value).week


def current_week(today: date | datetime | None = None) -> WeekKey:
    return iso_week_year(today or datetime.now(timezone.utc))


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------

def parse_duration(text: Any) -> int:
    """Parse "1h 20m 5s" (any subset, any order) into total seconds.

    Missing units count as zero; empty or unrecognised input yields 0.
    """
    if text is None:
        return 0
    s = str(text).strip()
    if not s:
        return 0

    total = 0
    for pattern, factor in ((_HOURS, 3600), (_MINUTES, 60), (_SECONDS, 1)):
        match = pattern.search(s)
        if match:
            total += int(match.group(1)) * factor
    return total


def format_duration(seconds: int) -> str:
    """Format seconds as "1h 20m 5s", omitting zero units.

    Zero formats as "0s"; seconds are shown whenever no larger unit is.
    """
    seconds = max(int(seconds), 0)
    if seconds == 0:
        return "0s"

    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts).strip()


# ---------------------------------------------------------------------------
# Bucketing
# ---------------------------------------------------------------------------

DateSelector = Union[Callable[[dict], Any], str]


def _selector(date_selector: DateSelector) -> Callable[[dict], Any]:
    if isinstance(date_selector, str):
        field_name = date_selector
        return lambda record: record.get(field_name)
    return date_selector


def record_week(record: dict, date_selector: DateSelector) -> WeekKey | None:
    """WeekKey of a record, or None when its date does not parse."""
    parsed = normalise_date(_selector(date_selector)(record))
    if parsed is None:
        return None
    return iso_week_year(parsed)


def bucket_by_week(
    records: Iterable[dict],
    date_selector: DateSelector,
    include_undated: bool = True,
) -> dict[WeekKey | str, list[dict]]:
    """Group records by ISO week.

    Records whose date does not parse go to NO_DATE_BUCKET so the union
    of all buckets is the input; pass include_undated=False to drop them.
    Weeks come out oldest first with the undated bucket last.
    """
    buckets: dict[WeekKey, list[dict]] = {}
    undated: list[dict] = []

    for record in records:
        key = record_week(record, date_selector)
        if key is None:
            undated.append(record)
            continue
        buckets.setdefault(key, []).append(record)

    result: dict[WeekKey | str, list[dict]] = {
        key: buckets[key] for key in sorted(buckets, key=lambda k: (k.year, k.week))
    }
    if undated:
        logger.debug("%d records without a parseable date", len(undated))
        if include_undated:
            result[NO_DATE_BUCKET] = undated
    return result


def available_weeks(
    records: Iterable[dict],
    date_selector: DateSelector,
    today: date | datetime | None = None,
) -> list[dict]:
    """Week options for a selector, newest first, current week flagged."""
    now = current_week(today)
    keys = {record_week(r, date_selector) for r in records}
    keys.discard(None)

    options = []
    for key in sorted(keys, key=lambda k: (k.year, k.week), reverse=True):
        is_current = key == now
        options.append({
            "week": key.week,
            "year": key.year,
            "label": f"{key.label} (Current)" if is_current else key.label,
            "is_current": is_current,
        })
    return options


def filter_to_week(
    records: Iterable[dict],
    date_selector: DateSelector,
    week: WeekKey,
) -> list[dict]:
    """Records whose date falls in the given ISO week."""
    return [r for r in records if record_week(r, date_selector) == week]
