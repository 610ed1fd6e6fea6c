"""
Simulated sheet exports for the department dashboard.

Generates CSV text shaped like the published Google Sheets, including the
clutter real sheets carry (repeated header rows, blank rows, footer rows),
so the whole pipeline can run offline. All values are synthetic.
"""

import numpy as np
import pandas as pd
import requests
from requests.adapters import BaseAdapter

from .loaders.schemas import (
    CLIENT_PAYMENT,
    DPO_TASK,
    IT_TICKET,
    LAPTOP_INVENTORY,
    MARKETING_WIG,
    SALES_LEAD,
)

# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------
_FIRMS = [
    "Harbor Logistics", "Pinecrest Dental", "Northwind Legal", "Bluepeak Realty",
    "Sunrise Clinics", "Apex Accounting", "Summit Insurance", "Lakeside Builders",
]
_CONTACTS = ["Ana Cruz", "Mark Reyes", "Joy Santos", "Paul Lim", "Kim Tan", "Ria Lopez"]
_SOURCES = ["LinkedIn", "Referral", "Website", "Cold Email", "Webinar"]
_FIT_LEVELS = ["Ready to Engage", "Develop & Qualify", "Unqualified"]
_LEAD_STATUS = ["Cold", "Warm", "Hot"]

_EMPLOYEES = ["J. Dela Cruz", "M. Garcia", "A. Ramos", "L. Mendoza", "C. Bautista"]
_ACCOUNTS = ["Operations", "Finance", "Sales", "Client Services", "HR"]
_TROUBLESHOOTING = [
    "Network", "Software Install", "Laptop Release", "Peripheral Release",
    "Email", "Laptop Release, Network",
]
_RESPONSES = ["Very Satisfied", "Satisfied", "Neutral", "Dissatisfied"]
_RATINGS = ["Excellent", "Good", "Fair"]
_IT_STAFF = ["Rey", "Carlo", "Jen"]

_DPO_TASKS = [
    "Privacy notice review", "Breach drill", "Consent form update", "Vendor DPA audit",
    "Data inventory refresh", "Retention schedule", "Staff privacy training", "DPIA for CRM",
]
_DPO_OWNERS = ["Legal", "Compliance", "HR", "IT"]

_WIG_LEADS = [
    ("Grow qualified inbound leads by 20%", ["Publish weekly blog", "Run LinkedIn campaign", "Refresh landing page"]),
    ("Launch two client case studies", ["Interview clients", "Draft case study", "Design layout"]),
    ("Raise newsletter open rate to 35%", ["A/B test subject lines", "Clean mailing list"]),
]
_WIG_STATUS = ["Completed", "In Progress", "Approved", "Not Started"]

_LAPTOP_BRANDS = ["Lenovo", "Dell", "HP", "Acer"]
_LAPTOP_STATUS = ["Active", "Inactive", "Temporary", "Vacant"]


def _csv_cell(value) -> str:
    s = str(value)
    return f'"{s}"' if "," in s else s


def _csv(rows: list[list]) -> str:
    return "\n".join(",".join(_csv_cell(v) for v in row) for row in rows) + "\n"


def _dates(start: str, n: int, rng: np.random.Generator) -> list[pd.Timestamp]:
    """n dates spread over the weeks after start, oldest first."""
    offsets = np.sort(rng.integers(0, 56, size=n))
    base = pd.Timestamp(start)
    return [base + pd.Timedelta(days=int(d)) for d in offsets]


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------

def generate_sales_csv(n_rows: int = 40, start: str = "2025-09-01", seed: int = 42) -> str:
    """Generate a sales lead tracker export (16 columns)."""
    rng = np.random.default_rng(seed)
    header = [
        "Date", "Firm Name", "Contact Person", "Email/Phone", "Source",
        "Profile", "Cultural", "Engagement", "Stability", "Retention", "References",
        "Score", "Fit Level", "Touch Point", "Lead Response", "Lead Status",
    ]
    rows = [header]

    for i, day in enumerate(_dates(start, n_rows, rng)):
        parts = rng.integers(5, 18, size=6)
        score = int(parts.sum())
        fit = _FIT_LEVELS[0] if score >= 70 else _FIT_LEVELS[1] if score >= 55 else _FIT_LEVELS[2]
        rows.append([
            day.strftime("%m/%d/%Y"),
            rng.choice(_FIRMS),
            rng.choice(_CONTACTS),
            f"lead{i}@example.com",
            rng.choice(_SOURCES),
            *[int(p) for p in parts],
            score,
            fit,
            f"Touch {int(rng.integers(1, 4))}",
            rng.choice(["Replied", "No reply", "Meeting set"]),
            rng.choice(_LEAD_STATUS),
        ])
        # Hand-maintained sheets repeat the header and leave gaps
        if i == n_rows // 2:
            rows.append(header)
            rows.append([""] * len(header))

    return _csv(rows)


def generate_it_ticket_csv(n_rows: int = 60, start: str = "2025-09-01", seed: int = 42) -> str:
    """Generate an IT helpdesk form response export (13 columns)."""
    rng = np.random.default_rng(seed)
    rows = [[
        "Timestamp", "Full Name", "Account", "Troubleshooting Type", "Response",
        "Is the problem solved?", "Status", "Assigned", "Status Change",
        "Time Resolved", "Employee Rating", "Remarks", "Calculated Resolution Time",
    ]]

    for day in _dates(start, n_rows, rng):
        stamp = day + pd.Timedelta(minutes=int(rng.integers(480, 1080)))
        resolved = rng.random() < 0.7
        duration = ""
        if resolved:
            seconds = int(rng.integers(300, 3 * 3600))
            hours, rem = divmod(seconds, 3600)
            duration = f"{hours}h {rem // 60}m {rem % 60}s" if hours else f"{rem // 60}m {rem % 60}s"
        rows.append([
            f"{stamp.month}/{stamp.day}/{stamp.year} {stamp.strftime('%H:%M:%S')}",
            rng.choice(_EMPLOYEES),
            rng.choice(_ACCOUNTS),
            rng.choice(_TROUBLESHOOTING),
            rng.choice(_RESPONSES) if resolved else "",
            "Yes" if resolved else "No",
            "Resolved" if resolved else rng.choice(["Pending", "In Progress"]),
            rng.choice(_IT_STAFF),
            "",
            "",
            rng.choice(_RATINGS) if resolved else "",
            "",
            duration,
        ])

    return _csv(rows)


def generate_dpo_csv(n_rows: int = 12, start: str = "2025-09-01", seed: int = 42) -> str:
    """Generate a DPO task tracker export (6 columns)."""
    rng = np.random.default_rng(seed)
    rows = [["Task Name", "Start Date", "Status", "Submitted To", "Target Date", "Date Completed"]]

    for i, day in enumerate(_dates(start, n_rows, rng)):
        status = rng.choice(["Completed", "Pending", "In Progress"])
        target = day + pd.Timedelta(days=int(rng.integers(7, 30)))
        done = target - pd.Timedelta(days=2) if status == "Completed" else None
        rows.append([
            f"{_DPO_TASKS[i % len(_DPO_TASKS)]} {i // len(_DPO_TASKS) + 1}",
            day.strftime("%m/%d/%Y"),
            status,
            rng.choice(_DPO_OWNERS),
            target.strftime("%m/%d/%Y"),
            done.strftime("%m/%d/%Y") if done is not None else "",
        ])

    return _csv(rows)


def generate_wig_csv(seed: int = 42) -> str:
    """Generate a marketing WIG tracker export (LEAD markers + numbered activities)."""
    rng = np.random.default_rng(seed)
    rows = [["Key Activities", "Owner", "Notes", "Status"]]

    for number, (statement, activities) in enumerate(_WIG_LEADS, start=1):
        rows.append([f"LEAD {number}", "", "", ""])
        rows.append([statement, "Marketing", "", rng.choice(["On Track", "At Risk"])])
        for idx, activity in enumerate(activities, start=1):
            rows.append([
                f"{idx}. {activity}",
                rng.choice(_CONTACTS),
                rng.choice(["", "Week 2 draft", "Awaiting approval"]),
                rng.choice(_WIG_STATUS),
            ])
        rows.append(["", "", "", ""])

    return _csv(rows)


def generate_laptop_inventory_csv(n_rows: int = 25, start: str = "2023-01-09", seed: int = 42) -> str:
    """Generate an IT laptop inventory export (26 columns, A-Z)."""
    rng = np.random.default_rng(seed)
    rows = [[
        "Date Bought", "Account", "Bitlocker", "Laptop ID", "Brand", "Status",
        "Handler", "Prev Handler", "Anydesk", "Laptop SN", "Laptop Model",
        "Charger Model", "Charger SN", "Charger Brand", "Mouse Brand", "Mouse Model",
        "Mouse SN", "Headset Brand", "Headset Model", "Headset SN", "Backpack",
        "PW Version", "Repaired", "RAM", "TeamViewer", "Replaced Item",
    ]]
    base = pd.Timestamp(start)

    for i in range(n_rows):
        bought = base + pd.Timedelta(days=int(rng.integers(0, 700)))
        brand = rng.choice(_LAPTOP_BRANDS)
        status = rng.choice(_LAPTOP_STATUS, p=[0.7, 0.1, 0.1, 0.1])
        rows.append([
            bought.strftime("%m/%d/%Y"),
            rng.choice(_ACCOUNTS),
            rng.choice(["Yes", "No"]),
            f"LT-{i + 1:03d}",
            brand,
            status,
            "" if status == "Vacant" else rng.choice(_EMPLOYEES),
            rng.choice(["", *_EMPLOYEES]),
            f"{int(rng.integers(100_000_000, 999_999_999))}",
            f"SN{int(rng.integers(10**7, 10**8))}",
            f"{brand} {rng.choice(['14', '15', 'Pro'])}",
            "65W USB-C", f"CH{i + 1:04d}", brand,
            "Logitech", "M90", f"MS{i + 1:04d}",
            "Jabra", "Evolve 20", f"HS{i + 1:04d}",
            rng.choice(["Yes", "No"]),
            "v2",
            rng.choice(["", "", "Keyboard"]),
            rng.choice(["8GB", "16GB"]),
            "",
            "",
        ])
    # Spare unit with no laptop ID yet
    rows.append(["", "Operations", "", "", "Lenovo"] + [""] * 21)

    return _csv(rows)


def generate_client_payment_csv(n_clients: int = 6, start: str = "2025-07-01", seed: int = 42) -> str:
    """Generate a client payment log export (8 columns), one row per client per month."""
    rng = np.random.default_rng(seed)
    rows = [[
        "Client Name", "Coverage Date", "Date Invoice Sent", "Payment Date",
        "Due Date", "Days After Invoice", "Days After Due", "Class",
    ]]
    clients = _FIRMS[:n_clients]

    for month in range(3):
        coverage = pd.Timestamp(start) + pd.DateOffset(months=month)
        invoice = coverage + pd.Timedelta(days=2)
        due = invoice + pd.Timedelta(days=15)
        for client in clients:
            if month == 2 and rng.random() < 0.3:
                rows.append([
                    client, coverage.strftime("%B %Y"), invoice.strftime("%m/%d/%Y"),
                    "", due.strftime("%m/%d/%Y"), "", "Not yet paid", "Not yet paid",
                ])
                continue
            days_after_invoice = int(rng.integers(3, 40))
            paid = invoice + pd.Timedelta(days=days_after_invoice)
            days_after_due = (paid - due).days
            rows.append([
                client,
                coverage.strftime("%B %Y"),
                invoice.strftime("%m/%d/%Y"),
                paid.strftime("%m/%d/%Y"),
                due.strftime("%m/%d/%Y"),
                days_after_invoice,
                "Paid before due date" if days_after_due <= 0 else days_after_due,
                _payment_class(days_after_due),
            ])

    return _csv(rows)


def _payment_class(days_after_due: int) -> str:
    if days_after_due <= 0:
        return "A"
    if days_after_due <= 7:
        return "B"
    return "C" if days_after_due <= 15 else "D"


SAMPLE_GENERATORS = {
    SALES_LEAD: generate_sales_csv,
    IT_TICKET: generate_it_ticket_csv,
    DPO_TASK: generate_dpo_csv,
    MARKETING_WIG: generate_wig_csv,
    LAPTOP_INVENTORY: generate_laptop_inventory_csv,
    CLIENT_PAYMENT: generate_client_payment_csv,
}


# ---------------------------------------------------------------------------
# Offline transport
# ---------------------------------------------------------------------------

class SampleAdapter(BaseAdapter):
    """Transport adapter serving fixed CSV bodies by URL prefix; 404 otherwise."""

    def __init__(self, bodies: dict[str, str]):
        super().__init__()
        self.bodies = bodies

    def send(self, request, **kwargs):
        matches = [url for url in self.bodies if request.url.startswith(url)]
        response = requests.Response()
        response.request = request
        response.url = request.url
        if matches:
            body = self.bodies[max(matches, key=len)]
            response.status_code = 200
            response.reason = "OK"
            response.headers["Content-Type"] = "text/csv; charset=utf-8"
            response.encoding = "utf-8"
            response._content = body.encode("utf-8")
        else:
            response.status_code = 404
            response.reason = "Not Found"
            response._content = b""
        return response

    def close(self):
        pass


def sample_session(source_urls: dict[str, str], seed: int = 42) -> requests.Session:
    """A requests Session answering each source URL with simulated CSV.

    Kinds without a generator are left unmapped and answer 404.
    """
    bodies = {
        url: SAMPLE_GENERATORS[kind](seed=seed)
        for kind, url in source_urls.items()
        if kind in SAMPLE_GENERATORS
    }
    session = requests.Session()
    adapter = SampleAdapter(bodies)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session
