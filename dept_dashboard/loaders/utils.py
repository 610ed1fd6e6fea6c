"""
Shared utilities for data ingestion: lenient number parsing, date
normalisation, cell cleanup.
"""

import logging
import re
from datetime import datetime
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_US_DATE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})")

# Literals pandas resolves against the wall clock
_RELATIVE_DATE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


def clean_cell(val: Any) -> str:
    """Strip whitespace and stray wrapping quotes from a cell value."""
    if val is None:
        return ""
    s = str(val).strip()
    if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
        s = s[1:-1]
    return s.replace('""', '"').strip()


def lenient_int(val: Any) -> int:
    """Coerce a cell to int the way a spreadsheet user would expect.

    Leading digits win ("12 pts" -> 12), thousands separators are ignored,
    and anything else yields 0. Never raises.
    """
    if val is None:
        return 0
    if isinstance(val, bool):
        return int(val)
    if isinstance(val, int):
        return val
    if isinstance(val, float):
        return 0 if pd.isna(val) else int(val)
    match = _LEADING_INT.match(str(val).replace(",", ""))
    if not match:
        return 0
    return int(match.group(1))


def safe_float(val: Any) -> float:
    """Coerce a value to float, returning 0.0 for non-numeric values.

    Handles thousands separators, currency-style quotes and "78%".
    """
    if val is None:
        return 0.0
    if isinstance(val, str):
        val = val.replace(",", "").replace('"', "").strip()
        if not val:
            return 0.0
        if val.endswith("%"):
            val = val[:-1]
    try:
        result = float(val)
    except (ValueError, TypeError):
        return 0.0
    return 0.0 if pd.isna(result) else result


def normalise_date(val: Any) -> datetime | None:
    """Parse a free-form sheet date ("10/17/2025 1:38:05", "October 5, 2025").

    Returns a naive datetime, or None for blank and unparseable values.
    """
    if val is None:
        return None
    if isinstance(val, datetime):
        return val
    text = str(val).strip()
    if not text or text.lower() in _RELATIVE_DATE_WORDS:
        return None
    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        logger.debug("Could not parse date value: %s", text)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert(None)
    return parsed.to_pydatetime()


def format_us_date(val: Any) -> str:
    """Normalise a date cell to MM/DD/YYYY, or return it unchanged.

    Years outside 2000-2100 are treated as garbage and the original text
    is kept. A leading m/d/y pattern is tried before giving up.
    """
    text = str(val or "").strip()
    if not text:
        return ""
    parsed = normalise_date(text)
    if parsed is None or not 2000 <= parsed.year <= 2100:
        match = _US_DATE.match(text)
        if not match:
            return text
        month, day, year = match.groups()
        year = f"20{year}" if len(year) == 2 else year
        try:
            parsed = datetime(int(year), int(month), int(day))
        except ValueError:
            return text
    return parsed.strftime("%m/%d/%Y")


def date_part(val: Any) -> str:
    """Return the date part of a timestamp cell as MM/DD/YYYY, or ""."""
    text = str(val or "").strip()
    if not text:
        return ""
    parsed = normalise_date(text)
    if parsed is not None and 2000 <= parsed.year <= 2100:
        return parsed.strftime("%m/%d/%Y")
    match = _US_DATE.match(text)
    if match:
        return format_us_date(match.group(0))
    return ""
