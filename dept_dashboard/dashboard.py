"""
Dashboard-ready output functions.

These are the entry points the Streamlit app calls. Each returns plain
dicts or DataFrames suitable for rendering cards, charts and selectors.
"""

import logging
from datetime import date, datetime
from typing import Callable

import pandas as pd

from .config import HIGH_SCORE_THRESHOLD, WEEKLY_GOALS
from .loaders.schemas import DPO_TASK, IT_TASK, IT_TICKET, PAYROLL_CONCERN, SALES_LEAD
from .stats import compute_stats, is_resolved
from .temporal import (
    DateSelector,
    WeekKey,
    available_weeks,
    bucket_by_week,
    current_week,
    filter_to_week,
)

logger = logging.getLogger(__name__)

# Field holding the date each record is bucketed by; kinds without one
# (bonus profiles, WIG tracker, laptop inventory, client payments) are
# not week-filtered.
DATE_FIELDS: dict[str, str] = {
    SALES_LEAD: "date",
    IT_TICKET: "timestamp",
    IT_TASK: "start_date",
    DPO_TASK: "start_date",
    PAYROLL_CONCERN: "payroll_date",
}

TREND_COLUMNS = ["week", "year", "label", "total", "resolved"]


def get_weekly_overview(
    kind: str,
    records: list[dict],
    week: WeekKey | None = None,
    today: date | datetime | None = None,
) -> dict:
    """Statistics for one department, restricted to one ISO week.

    Parameters
    ----------
    kind : schema kind of the records.
    records : mapped records for that kind.
    week : week to show; defaults to the current week.
    today : reference date for "current week" (tests pin this).

    Returns
    -------
    Dict with keys: kind, week, label, weeks (selector options),
    record_count, stats.
    """
    date_field = DATE_FIELDS.get(kind)
    if date_field is None:
        return {
            "kind": kind,
            "week": None,
            "label": "All records",
            "weeks": [],
            "record_count": len(records),
            "stats": compute_stats(kind, records),
        }

    if week is None:
        week = current_week(today)

    selected = filter_to_week(records, date_field, week)
    if not selected:
        logger.info("No %s records in %s", kind, week.label)

    return {
        "kind": kind,
        "week": week,
        "label": week.label,
        "weeks": available_weeks(records, date_field, today=today),
        "record_count": len(selected),
        "stats": compute_stats(kind, selected),
    }


def get_weekly_trend(
    records: list[dict],
    date_selector: DateSelector,
    is_done: Callable[[dict], bool] = is_resolved,
) -> pd.DataFrame:
    """Week-by-week totals for a trend chart.

    Returns
    -------
    DataFrame with columns: week, year, label, total, resolved.
    Rows are chronological; records without a parseable date are left out.
    """
    buckets = bucket_by_week(records, date_selector, include_undated=False)
    rows = [
        {
            "week": key.week,
            "year": key.year,
            "label": key.label,
            "total": len(items),
            "resolved": sum(1 for r in items if is_done(r)),
        }
        for key, items in buckets.items()
    ]
    return pd.DataFrame(rows, columns=TREND_COLUMNS)


def get_weekly_progress(count: int, goal: int) -> float:
    """Percentage of a weekly goal reached, capped at 100."""
    if goal <= 0:
        return 0.0
    return min(count / goal * 100, 100.0)


def get_goal_cards(kind: str, records: list[dict]) -> list[dict]:
    """Weekly goal progress cards for the departments that track goals.

    Returns
    -------
    List of dicts: name, actual, goal, progress.
    """
    if kind == SALES_LEAD:
        actuals = {
            "sales_leads": len(records),
            "sales_ready_to_engage": sum(1 for r in records if r.get("fit_level") == "Ready to Engage"),
            "sales_high_score": sum(1 for r in records if r.get("score", 0) >= HIGH_SCORE_THRESHOLD),
        }
    elif kind == IT_TICKET:
        actuals = {"it_resolved_tickets": sum(1 for r in records if is_resolved(r))}
    else:
        return []

    return [
        {
            "name": name,
            "actual": actual,
            "goal": WEEKLY_GOALS[name],
            "progress": get_weekly_progress(actual, WEEKLY_GOALS[name]),
        }
        for name, actual in actuals.items()
    ]
