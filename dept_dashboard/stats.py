"""
Dashboard statistics: pure functions with no side effects.

Every function takes a list of mapped records and returns a fresh plain
dict, so calling twice on the same input gives identical output. Rates
are whole percentages and are 0 when there is nothing to divide by.
"""

import logging
from datetime import date, datetime
from typing import Iterable

from .config import (
    HIGH_SCORE_THRESHOLD,
    IT_TASK_STATUSES,
    LAPTOP_STATUSES,
    PAYMENT_EARLY_CLASS,
    PAYMENT_EARLY_MARKERS,
    PAYMENT_LATE_CLASSES,
    PAYMENT_NOT_YET_PAID,
    PAYMENT_ON_TIME_MARKERS,
    SALES_FIT_LEVELS,
    TASK_COMPLETED,
    TASK_OVERDUE,
    TASK_PENDING,
)
from .loaders.schemas import (
    CLIENT_PAYMENT,
    DPO_TASK,
    EMPLOYEE_BONUS,
    IT_TASK,
    IT_TICKET,
    LAPTOP_INVENTORY,
    MARKETING_WIG,
    PAYROLL_CONCERN,
    SALES_LEAD,
)
from .loaders.utils import normalise_date
from .temporal import format_duration, parse_duration

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def rate(matching: int, total: int) -> int:
    """Return round(matching / total * 100), or 0 when total is 0."""
    if total <= 0:
        return 0
    return round((matching / total) * 100)


def _value(record: dict, field: str) -> str:
    return str(record.get(field) or "").strip()


def count_status(records: Iterable[dict], field: str, vocabulary: Iterable[str]) -> int:
    """Count records whose field matches the vocabulary, case-insensitively."""
    wanted = {v.lower() for v in vocabulary}
    return sum(1 for r in records if _value(r, field).lower() in wanted)


def group_by(
    records: Iterable[dict],
    field: str,
    unknown_label: str | None = None,
) -> dict[str, int]:
    """Count records per category label.

    Empty values are left out unless unknown_label is given, in which case
    they are counted under that label.
    """
    counts: dict[str, int] = {}
    for record in records:
        label = _value(record, field) or unknown_label
        if not label:
            continue
        counts[label] = counts.get(label, 0) + 1
    return counts


def top_category(counts: dict[str, int]) -> str:
    """Most frequent label; the first one seen wins a tie. "" if empty."""
    best = ""
    best_count = 0
    for label, count in counts.items():
        if count > best_count:
            best, best_count = label, count
    return best


# ---------------------------------------------------------------------------
# IT tickets
# ---------------------------------------------------------------------------

def is_resolved(ticket: dict) -> bool:
    """Status "resolved" or the "is problem solved" answer "yes"."""
    return (
        _value(ticket, "status").lower() == "resolved"
        or _value(ticket, "is_problem_solved").lower() == "yes"
    )


def resolution_text(ticket: dict) -> str:
    """Calculated resolution time, falling back to the manual entry."""
    return _value(ticket, "calculated_resolution_time") or _value(ticket, "time_resolved")


def average_resolution_seconds(tickets: Iterable[dict]) -> int:
    """Mean resolution time over resolved tickets that carry a duration.

    A duration that does not parse contributes 0 seconds but still counts.
    Returns 0 when no resolved ticket has a duration.
    """
    durations = [
        parse_duration(resolution_text(t))
        for t in tickets
        if is_resolved(t) and resolution_text(t)
    ]
    if not durations:
        return 0
    return round(sum(durations) / len(durations))


def _is_satisfied(response: str) -> bool:
    response = response.lower()
    return "satisfied" in response and "dissatisfied" not in response


def compute_it_ticket_stats(tickets: list[dict]) -> dict:
    """Helpdesk summary cards.

    Returns
    -------
    Dict with total/resolved/unresolved counts, average resolution time
    (seconds and formatted), satisfaction and excellent-rating rates,
    top account and troubleshooting type, laptop/peripheral releases.
    """
    total = len(tickets)
    resolved = sum(1 for t in tickets if is_resolved(t))
    avg_seconds = average_resolution_seconds(tickets)

    responses = [_value(t, "response") for t in tickets if _value(t, "response")]
    satisfied = sum(1 for r in responses if _is_satisfied(r))

    ratings = [_value(t, "employee_rating").lower() for t in tickets if _value(t, "employee_rating")]
    excellent = sum(1 for r in ratings if r == "excellent")

    # A ticket may list several troubleshooting types, comma separated
    type_counts: dict[str, int] = {}
    for ticket in tickets:
        for kind in _value(ticket, "troubleshooting_type").split(","):
            kind = kind.strip()
            if kind:
                type_counts[kind] = type_counts.get(kind, 0) + 1

    types_lower = [_value(t, "troubleshooting_type").lower() for t in tickets]
    account_counts = group_by(tickets, "account")

    return {
        "total_tickets": total,
        "resolved_tickets": resolved,
        "unresolved_tickets": total - resolved,
        "avg_resolution_seconds": avg_seconds,
        "avg_resolution_time": format_duration(avg_seconds),
        "satisfaction_rate": rate(satisfied, len(responses)),
        "employee_rating": rate(excellent, len(ratings)),
        "completion_rate": rate(resolved, total),
        "top_account": top_category(account_counts),
        "top_troubleshooting_type": top_category(type_counts),
        "laptop_releases": sum(1 for t in types_lower if "laptop release" in t),
        "peripheral_releases": sum(1 for t in types_lower if "peripheral release" in t),
        "tickets_by_status": group_by(tickets, "status"),
        "tickets_by_assignee": group_by(tickets, "assigned"),
        "tickets_by_account": account_counts,
    }


# ---------------------------------------------------------------------------
# Sales leads
# ---------------------------------------------------------------------------

def compute_sales_stats(leads: list[dict]) -> dict:
    """Lead pipeline summary: fit levels, average score, sources."""
    fit_counts = {level: 0 for level in SALES_FIT_LEVELS}
    for lead in leads:
        level = _value(lead, "fit_level")
        if level in fit_counts:
            fit_counts[level] += 1

    scores = [lead.get("score", 0) for lead in leads if lead.get("score", 0) > 0]
    average_score = round(sum(scores) / len(scores), 1) if scores else 0
    by_source = group_by(leads, "source")

    return {
        "total_leads": len(leads),
        "ready_to_engage": fit_counts["Ready to Engage"],
        "develop_qualify": fit_counts["Develop & Qualify"],
        "unqualified": fit_counts["Unqualified"],
        "high_score_leads": sum(1 for s in scores if s >= HIGH_SCORE_THRESHOLD),
        "average_score": average_score,
        "top_source": top_category(by_source),
        "leads_by_source": by_source,
        "leads_by_status": group_by(leads, "lead_status"),
    }


# ---------------------------------------------------------------------------
# Task trackers
# ---------------------------------------------------------------------------

def compute_task_stats(tasks: list[dict], today: date | None = None) -> dict:
    """DPO task tracker summary.

    Logic
    -----
    - completed: status "completed"/"resolved", or a completion date is set
    - pending:   status "pending"/"in progress"/"overdue" (and not completed)
    - overdue:   status "overdue", or pending with a target date before today
    """
    if today is None:
        today = datetime.now().date()
    if isinstance(today, datetime):
        today = today.date()

    completed = pending = overdue = 0
    for task in tasks:
        status = _value(task, "status").lower()
        if status in TASK_COMPLETED or _value(task, "date_completed"):
            completed += 1
        elif status in TASK_OVERDUE:
            pending += 1
            overdue += 1
        elif status in TASK_PENDING:
            pending += 1
            target = normalise_date(task.get("target_date"))
            if target is not None and target.date() < today:
                overdue += 1

    total = len(tasks)
    return {
        "total_tasks": total,
        "completed_tasks": completed,
        "pending_tasks": pending,
        "overdue_tasks": overdue,
        "completion_rate": rate(completed, total),
        "tasks_by_status": group_by(tasks, "status"),
        "tasks_by_assignee": group_by(tasks, "submitted_to"),
    }


def compute_it_task_stats(tasks: list[dict]) -> dict:
    """IT task board: dropdown statuses and per-assignee counts."""
    counts = {key: 0 for key in IT_TASK_STATUSES.values()}
    for task in tasks:
        key = IT_TASK_STATUSES.get(_value(task, "status").lower())
        if key:
            counts[key] += 1

    total = len(tasks)
    return {
        "total_tasks": total,
        **counts,
        "completion_rate": rate(counts["completed"], total),
        "tasks_by_status": group_by(tasks, "status"),
        "assignee_counts": group_by(tasks, "assignee"),
    }


# ---------------------------------------------------------------------------
# Finance
# ---------------------------------------------------------------------------

def compute_payroll_stats(concerns: list[dict]) -> dict:
    total = len(concerns)
    resolved = count_status(concerns, "status", ["resolved"])
    return {
        "total_concerns": total,
        "resolved_concerns": resolved,
        "pending_concerns": count_status(concerns, "status", ["pending"]),
        "on_process_concerns": count_status(concerns, "status", ["on process", "onprocess"]),
        "resolution_rate": rate(resolved, total),
        "concerns_by_type": group_by(concerns, "concern_type"),
        "concerns_by_status": group_by(concerns, "status"),
        "undated_concerns": sum(1 for c in concerns if not _value(c, "payroll_date")),
    }


def compute_bonus_stats(profiles: list[dict]) -> dict:
    total = len(profiles)
    qualified = sum(1 for p in profiles if p.get("qualified_for_perfect_presence"))
    return {
        "total_employees": total,
        "qualified_for_perfect_presence": qualified,
        "perfect_presence_rate": rate(qualified, total),
        "total_quarterly_bonus": round(sum(p.get("total_quarterly_bonus", 0.0) for p in profiles), 2),
        "employees_by_account": group_by(profiles, "account"),
    }


def payment_status(payment: dict) -> str:
    """Classify one client payment row.

    Logic
    -----
    - "Not Yet Paid": days-after-due or class reads "not yet paid"
    - "Paid On Time": days-after-due reads "paid on time"
    - "Paid Early":   days-after-due reads "paid before due date", or class A
    - "Paid Late":    class B, C or D
    - "Paid":         anything else (a payment with no class yet)
    """
    days_after_due = _value(payment, "days_after_due").lower()
    payment_class = _value(payment, "payment_class")

    if PAYMENT_NOT_YET_PAID in (days_after_due, payment_class.lower()):
        return "Not Yet Paid"
    if days_after_due in PAYMENT_ON_TIME_MARKERS:
        return "Paid On Time"
    if days_after_due in PAYMENT_EARLY_MARKERS or payment_class.upper() == PAYMENT_EARLY_CLASS:
        return "Paid Early"
    if payment_class.upper() in PAYMENT_LATE_CLASSES:
        return "Paid Late"
    return "Paid"


def compute_client_payment_stats(payments: list[dict]) -> dict:
    """Client payment summary plus a per-client payment history.

    Returns
    -------
    Dict with the payment counts per status and ``client_history``
    mapping each client name to its payments in sheet order.
    """
    history: dict[str, list[dict]] = {}
    counts = {"Paid Early": 0, "Paid On Time": 0, "Paid Late": 0, "Not Yet Paid": 0}

    for payment in payments:
        status = payment_status(payment)
        if status in counts:
            counts[status] += 1
        history.setdefault(_value(payment, "client_name"), []).append({
            "coverage_date": _value(payment, "coverage_date"),
            "payment_date": _value(payment, "payment_date") or "Pending",
            "due_date": _value(payment, "due_date"),
            "status": status,
            "payment_class": _value(payment, "payment_class"),
            "days_after_due": _value(payment, "days_after_due"),
        })

    total = len(payments)
    paid_in_time = counts["Paid Early"] + counts["Paid On Time"]
    return {
        "total_clients": len(history),
        "total_payments": total,
        "paid_early": counts["Paid Early"],
        "paid_on_time": counts["Paid On Time"],
        "paid_late": counts["Paid Late"],
        "not_yet_paid": counts["Not Yet Paid"],
        "on_time_rate": rate(paid_in_time, total),
        "client_history": history,
    }


# ---------------------------------------------------------------------------
# IT laptop inventory
# ---------------------------------------------------------------------------

def compute_laptop_stats(laptops: list[dict]) -> dict:
    counts = {
        f"{status.lower()}_laptops": count_status(laptops, "status", [status])
        for status in LAPTOP_STATUSES
    }
    by_brand = group_by(laptops, "brand")
    return {
        "total_laptops": len(laptops),
        **counts,
        "laptops_by_brand": by_brand,
        "top_brand": top_category(by_brand),
        "laptops_by_account": group_by(laptops, "account"),
    }


# ---------------------------------------------------------------------------
# Marketing WIG tracker
# ---------------------------------------------------------------------------

def compute_wig_stats(leads: list[dict]) -> dict:
    """Lead measures and their activities; missing status counts as Unknown."""
    activities = [a for lead in leads for a in lead.get("activities", [])]
    completed = count_status(activities, "status", ["completed", "approved"])
    return {
        "total_leads": len(leads),
        "total_activities": len(activities),
        "completed_activities": completed,
        "completion_rate": rate(completed, len(activities)),
        "leads_by_status": group_by(leads, "status", unknown_label="Unknown"),
        "activities_by_status": group_by(activities, "status", unknown_label="Unknown"),
    }


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

STATS_BY_KIND = {
    SALES_LEAD: compute_sales_stats,
    IT_TICKET: compute_it_ticket_stats,
    IT_TASK: compute_it_task_stats,
    DPO_TASK: compute_task_stats,
    PAYROLL_CONCERN: compute_payroll_stats,
    EMPLOYEE_BONUS: compute_bonus_stats,
    MARKETING_WIG: compute_wig_stats,
    LAPTOP_INVENTORY: compute_laptop_stats,
    CLIENT_PAYMENT: compute_client_payment_stats,
}


def compute_stats(kind: str, records: list[dict]) -> dict:
    """Aggregate statistics for one department's records."""
    try:
        func = STATS_BY_KIND[kind]
    except KeyError:
        raise KeyError(f"No statistics defined for '{kind}'") from None
    stats = func(records)
    logger.info("Computed %s statistics over %d records", kind, len(records))
    return stats
