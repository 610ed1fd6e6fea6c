"""
Declarative column tables for every department sheet.

Each Schema maps semantic field names to a column position (and optionally
to header labels, tried first) plus the parser applied to the raw cell.
When a sheet's columns move, this is the only file that changes.

Column letters in the comments refer to the published sheet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from ..config import PAYROLL_STATUS_CANONICAL
from .csv_line import parse_line, parse_line_trimmed
from .utils import clean_cell, date_part, format_us_date, lenient_int, safe_float

SALES_LEAD = "sales_lead"
IT_TICKET = "it_ticket"
IT_TASK = "it_task"
DPO_TASK = "dpo_task"
PAYROLL_CONCERN = "payroll_concern"
EMPLOYEE_BONUS = "employee_bonus"
MARKETING_WIG = "marketing_wig"
LAPTOP_INVENTORY = "laptop_inventory"
CLIENT_PAYMENT = "client_payment"


# ---------------------------------------------------------------------------
# Cell parsers
# ---------------------------------------------------------------------------

def text(val: Any) -> str:
    return clean_cell(val)


def yes_no(val: Any) -> bool:
    return clean_cell(val).lower() == "yes"


def true_false(val: Any) -> bool:
    return clean_cell(val).upper() == "TRUE"


_DEFAULTS: dict[Callable, Any] = {
    text: "",
    lenient_int: 0,
    safe_float: 0.0,
    yes_no: False,
    true_false: False,
}


@dataclass(frozen=True)
class FieldSpec:
    """One output field: where to read it and how to parse it."""

    name: str
    column: int
    parser: Callable[[Any], Any] = text
    headers: tuple[str, ...] = ()

    @property
    def default(self) -> Any:
        return _DEFAULTS.get(self.parser, "")


@dataclass(frozen=True)
class Schema:
    """
    Layout of one department sheet.

    key_column holds the mandatory identifying field; a row whose key cell
    is blank is skipped. header_labels maps a column to lower-cased labels
    that mark a (repeated) header row. skip_prefixes drops footer and
    survey rows whose key cell starts with one of the given words
    ("Very satisfied", "Total"); a word inside a task name does not count.
    """

    kind: str
    key_column: int
    fields: tuple[FieldSpec, ...]
    header_labels: dict[int, frozenset[str]] = field(default_factory=dict)
    skip_labels: frozenset[str] = frozenset()
    skip_prefixes: tuple[str, ...] = ()
    min_columns: int = 1
    trimmed: bool = True
    multiline: bool = False
    grouped: bool = False
    post_process: Callable[[dict, list[str]], dict | None] | None = None

    def parse(self, line: str) -> list[str]:
        return parse_line_trimmed(line) if self.trimmed else parse_line(line)


# ---------------------------------------------------------------------------
# Post-processing hooks
# ---------------------------------------------------------------------------

def _normalise_payroll_concern(record: dict, row: list[str]) -> dict | None:
    """Canonicalise status and payroll date; drop rows with no identity."""
    if not (record["name"] or record["email"] or record["concern_type"]):
        return None

    payroll_date = format_us_date(record["payroll_date"])
    if not payroll_date:
        payroll_date = date_part(record["timestamp"])
    record["payroll_date"] = payroll_date

    status = record["status"]
    if status:
        record["status"] = PAYROLL_STATUS_CANONICAL.get(
            status.lower(), status[:1].upper() + status[1:].lower()
        )
    return record


BONUS_WEEK_LABELS = (
    "Aug. 03 - 09",
    "Aug. 10 - 16",
    "Aug. 17- 23",
    "Aug. 24 - 30",
    "Aug. 31 - Sept. 06",
    "Sept. 07 - 13",
    "Sept. 14 - 20",
    "Sept. 21 - 27",
    "Sept. 28 -Oct. 04",
    "Oct. 05 - 11",
    "Oct. 12 - 18",
    "Oct. 19 - 25",
    "Oct. 26 - Nov. 01",
)
_BONUS_WEEK_START_COL = 5


def _attach_weekly_attendance(record: dict, row: list[str]) -> dict | None:
    weeks = []
    for offset, label in enumerate(BONUS_WEEK_LABELS):
        col = _BONUS_WEEK_START_COL + offset
        weeks.append({
            "week": label,
            "present": true_false(row[col]) if col < len(row) else False,
        })
    record["weekly_attendance"] = weeks
    return record


# ---------------------------------------------------------------------------
# Schema registry
# ---------------------------------------------------------------------------

SCHEMAS: dict[str, Schema] = {
    SALES_LEAD: Schema(
        kind=SALES_LEAD,
        key_column=1,
        min_columns=16,
        trimmed=False,
        header_labels={
            0: frozenset({"date"}),
            1: frozenset({"firm name", "contact person"}),
        },
        fields=(
            FieldSpec("date", 0),
            FieldSpec("firm_name", 1),
            FieldSpec("contact_person", 2),
            FieldSpec("email_phone", 3),
            FieldSpec("source", 4),
            FieldSpec("profile", 5, lenient_int),
            FieldSpec("cultural", 6, lenient_int),
            FieldSpec("engagement", 7, lenient_int),
            FieldSpec("stability", 8, lenient_int),
            FieldSpec("retention", 9, lenient_int),
            FieldSpec("references", 10, lenient_int),
            FieldSpec("score", 11, lenient_int),
            FieldSpec("fit_level", 12),
            FieldSpec("touch_point", 13),
            FieldSpec("lead_response", 14),
            FieldSpec("lead_status", 15),  # Cold / Warm / Hot
        ),
    ),
    IT_TICKET: Schema(
        kind=IT_TICKET,
        key_column=0,
        min_columns=7,
        trimmed=False,
        header_labels={0: frozenset({"timestamp"})},
        fields=(
            FieldSpec("timestamp", 0),
            FieldSpec("full_name", 1),
            FieldSpec("account", 2),
            FieldSpec("troubleshooting_type", 3),
            FieldSpec("response", 4),
            FieldSpec("is_problem_solved", 5),
            FieldSpec("status", 6),
            FieldSpec("assigned", 7),
            FieldSpec("status_change", 8),
            FieldSpec("time_resolved", 9),
            FieldSpec("employee_rating", 10),
            FieldSpec("remarks", 11),
            FieldSpec("calculated_resolution_time", 12),  # M, Apps Script output
        ),
    ),
    IT_TASK: Schema(
        kind=IT_TASK,
        key_column=0,
        header_labels={0: frozenset({"task name"})},
        skip_prefixes=("satisfaction", "very", "total", "overall"),
        fields=(
            FieldSpec("task_name", 0),
            FieldSpec("start_date", 1),
            FieldSpec("deadline", 2),
            FieldSpec("assignee", 3),
            FieldSpec("status", 4),
            FieldSpec("date_completed", 5),
        ),
    ),
    DPO_TASK: Schema(
        kind=DPO_TASK,
        key_column=0,
        min_columns=6,
        header_labels={0: frozenset({"task name"})},
        fields=(
            FieldSpec("task_name", 0),
            FieldSpec("start_date", 1),
            FieldSpec("status", 2),
            FieldSpec("submitted_to", 3),
            FieldSpec("target_date", 4),
            FieldSpec("date_completed", 5),
        ),
    ),
    PAYROLL_CONCERN: Schema(
        kind=PAYROLL_CONCERN,
        key_column=0,
        multiline=True,
        header_labels={0: frozenset({"timestamp"})},
        fields=(
            FieldSpec("timestamp", 0, headers=("timestamp",)),
            FieldSpec("email", 1, headers=("email address", "email")),
            FieldSpec("name", 2, headers=("name",)),
            FieldSpec("payroll_date", 3, headers=("payroll date",)),
            FieldSpec("concern_type", 4, headers=("type of concern",)),
            FieldSpec("details", 5, headers=("details/explanation", "details")),
            FieldSpec("attachments", 6, headers=("attach",)),
            # The status column is titled "Resolve" in the response sheet
            FieldSpec("status", 7, headers=("resolve", "status")),
            FieldSpec("date_resolved", 8, headers=("date resolved",)),
        ),
        post_process=_normalise_payroll_concern,
    ),
    EMPLOYEE_BONUS: Schema(
        kind=EMPLOYEE_BONUS,
        key_column=0,
        min_columns=5,
        header_labels={0: frozenset({"employee id"})},
        skip_labels=frozenset({"total"}),
        fields=(
            FieldSpec("employee_id", 0),
            FieldSpec("name", 1),
            FieldSpec("account", 2),
            FieldSpec("date_hired", 3),
            FieldSpec("required_weeks", 4, safe_float),
            # F-R: weekly attendance flags, see _attach_weekly_attendance
            FieldSpec("attendance_weeks", 18, safe_float),
            FieldSpec("paid_leaves", 19, safe_float),
            FieldSpec("qualified_for_perfect_presence", 20, yes_no),
            FieldSpec("attendance_bonus_per_qtr", 21, safe_float),
            FieldSpec("attendance_bonus_per_wk", 22, safe_float),
            FieldSpec("perfect_presence_award", 23, safe_float),
            FieldSpec("attendance_related_bonus", 24, safe_float),
            FieldSpec("onsite_wfh", 25),
            FieldSpec("client_satisfaction", 26, safe_float),
            FieldSpec("team_continuity", 27, safe_float),
            FieldSpec("supervisor_award", 28, safe_float),
            FieldSpec("total_quarterly_bonus", 29, safe_float),
            FieldSpec("status", 30),
        ),
        post_process=_attach_weekly_attendance,
    ),
    MARKETING_WIG: Schema(
        kind=MARKETING_WIG,
        key_column=0,
        grouped=True,
        header_labels={0: frozenset({"key activities", "key of activities"})},
        fields=(),
    ),
    LAPTOP_INVENTORY: Schema(
        kind=LAPTOP_INVENTORY,
        key_column=3,
        header_labels={3: frozenset({"laptop id"})},
        fields=(
            FieldSpec("date_bought", 0),
            FieldSpec("account", 1),
            FieldSpec("bitlocker", 2),
            FieldSpec("laptop_id", 3),
            FieldSpec("brand", 4),
            FieldSpec("status", 5),  # Active / Inactive / Temporary / Vacant
            FieldSpec("handler", 6),
            FieldSpec("prev_handler", 7),
            # I: remote desktop ID, not mapped
            FieldSpec("laptop_sn", 9),
            FieldSpec("laptop_model", 10),
            FieldSpec("charger_model", 11),
            FieldSpec("charger_sn", 12),
            FieldSpec("charger_brand", 13),
            FieldSpec("mouse_brand", 14),
            FieldSpec("mouse_model", 15),
            FieldSpec("mouse_sn", 16),
            FieldSpec("headset_brand", 17),
            FieldSpec("headset_model", 18),
            FieldSpec("headset_sn", 19),
            FieldSpec("backpack", 20),
            FieldSpec("pw_version", 21),
            FieldSpec("repaired", 22),
            FieldSpec("ram", 23),
            FieldSpec("team_viewer", 24),
            FieldSpec("replaced_item", 25),
        ),
    ),
    CLIENT_PAYMENT: Schema(
        kind=CLIENT_PAYMENT,
        key_column=0,
        min_columns=8,
        header_labels={0: frozenset({"client name", "client"})},
        fields=(
            FieldSpec("client_name", 0),
            FieldSpec("coverage_date", 1),
            FieldSpec("date_invoice_sent", 2),
            FieldSpec("payment_date", 3),
            FieldSpec("due_date", 4),
            FieldSpec("days_after_invoice", 5),
            # G: a day count, or "Not yet paid" / "Paid before due date"
            FieldSpec("days_after_due", 6),
            FieldSpec("payment_class", 7),  # A (early) through D
        ),
    ),
}


def get_schema(kind: str) -> Schema:
    """Look up a schema by kind, raising KeyError with the known kinds."""
    try:
        return SCHEMAS[kind]
    except KeyError:
        raise KeyError(f"Unknown schema kind '{kind}'. Known: {sorted(SCHEMAS)}") from None
