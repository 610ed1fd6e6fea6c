"""
Configuration: sheet source URLs, cache TTL, status vocabularies, constants.

Every source URL can be overridden with an environment variable so a
republished sheet does not need a code change.
"""

import os

# ---------------------------------------------------------------------------
# Source URLs: published Google Sheets CSV exports
# ---------------------------------------------------------------------------
_PUB_BASE = "https://docs.google.com/spreadsheets/d/e"

_DEFAULT_SOURCE_URLS: dict[str, str] = {
    "sales_lead": f"{_PUB_BASE}/2PACX-sales-lead-tracker/pub?gid=0&single=true&output=csv",
    "it_ticket": f"{_PUB_BASE}/2PACX-it-helpdesk-responses/pub?gid=0&single=true&output=csv",
    "it_task": f"{_PUB_BASE}/2PACX-it-task-board/pub?gid=297970600&single=true&output=csv",
    "dpo_task": f"{_PUB_BASE}/2PACX-dpo-task-tracker/pub?output=csv",
    "payroll_concern": f"{_PUB_BASE}/2PACX-finance-payroll/pub?gid=222330370&single=true&output=csv",
    "employee_bonus": f"{_PUB_BASE}/2PACX-finance-payroll/pub?gid=1628066319&single=true&output=csv",
    "marketing_wig": f"{_PUB_BASE}/2PACX-marketing-wig/pub?gid=1083366093&single=true&output=csv",
    "laptop_inventory": f"{_PUB_BASE}/2PACX-it-laptop-inventory/pub?gid=0&single=true&output=csv",
    "client_payment": f"{_PUB_BASE}/2PACX-finance-client-payments/pub?gid=0&single=true&output=csv",
}

# Environment variable names per source, e.g. DASHBOARD_SALES_LEAD_URL
SOURCE_URLS: dict[str, str] = {
    kind: os.getenv(f"DASHBOARD_{kind.upper()}_URL", default)
    for kind, default in _DEFAULT_SOURCE_URLS.items()
}

# Endpoint accepting IT asset requests (JSON POST)
SUBMIT_URL = os.getenv("DASHBOARD_SUBMIT_URL", "http://localhost:3000/api/submit-it-asset-request")

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
REQUEST_HEADERS: dict[str, str] = {
    "Accept": "text/csv",
    "Cache-Control": "no-cache",
    "User-Agent": "Mozilla/5.0 (compatible; Dashboard/1.0)",
}

# Markers that identify an HTML page served in place of a CSV export
HTML_MARKERS = ("<!doctype", "<html", "<head>")

# How many leading characters to inspect for HTML markers
HTML_SNIFF_CHARS = 512

# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------
def _get_int_env(name: str, default: int) -> int:
    """Read an integer from the environment, falling back on bad input."""
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


DEFAULT_CACHE_TTL_MS = _get_int_env("DASHBOARD_CACHE_TTL_MS", 5 * 60 * 1000)

# ---------------------------------------------------------------------------
# Status vocabularies (lower-cased)
# ---------------------------------------------------------------------------
SALES_FIT_LEVELS = ("Ready to Engage", "Develop & Qualify", "Unqualified")

TASK_COMPLETED = {"completed", "resolved"}
TASK_PENDING = {"pending", "in progress"}
TASK_OVERDUE = {"overdue"}

IT_TASK_STATUSES: dict[str, str] = {
    "completed": "completed",
    "in progress": "in_progress",
    "to do": "to_do",
    "ongoing": "ongoing",
}

LAPTOP_STATUSES = ("Active", "Inactive", "Temporary", "Vacant")

# Client payments: "days after due" markers and late payment classes
PAYMENT_NOT_YET_PAID = "not yet paid"
PAYMENT_EARLY_MARKERS = {"paid before due date"}
PAYMENT_ON_TIME_MARKERS = {"paid on time"}
PAYMENT_EARLY_CLASS = "A"
PAYMENT_LATE_CLASSES = {"B", "C", "D"}

PAYROLL_STATUS_CANONICAL: dict[str, str] = {
    "resolved": "Resolved",
    "pending": "Pending",
    "in review": "In Review",
    "inreview": "In Review",
    "on process": "On Process",
    "onprocess": "On Process",
}

# ---------------------------------------------------------------------------
# Dashboard goals (weekly)
# ---------------------------------------------------------------------------
WEEKLY_GOALS: dict[str, int] = {
    "sales_leads": 5,
    "sales_ready_to_engage": 8,
    "sales_high_score": 10,
    "it_resolved_tickets": 10,
}

HIGH_SCORE_THRESHOLD = 70
