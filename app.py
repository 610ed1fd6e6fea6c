"""
Department Dashboard: Interactive Dashboard

Run with:  streamlit run app.py
"""

import sys
from pathlib import Path

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

sys.path.insert(0, str(Path(__file__).resolve().parent))

from dept_dashboard.cache import TTLCache, fetch_with_cache
from dept_dashboard.config import SOURCE_URLS, SUBMIT_URL
from dept_dashboard.dashboard import (
    DATE_FIELDS,
    get_goal_cards,
    get_weekly_overview,
    get_weekly_trend,
)
from dept_dashboard.loaders import fetch_and_parse, find_employee
from dept_dashboard.loaders.schemas import (
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
from dept_dashboard.simulator import SAMPLE_GENERATORS, sample_session
from dept_dashboard.submission import AssetRequest, submit_asset_request
from dept_dashboard.temporal import WeekKey, available_weeks, filter_to_week

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Department Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

PAGES = {
    "Sales": SALES_LEAD,
    "IT Helpdesk": IT_TICKET,
    "IT Tasks": IT_TASK,
    "DPO": DPO_TASK,
    "Payroll Concerns": PAYROLL_CONCERN,
    "Employee Bonus": EMPLOYEE_BONUS,
    "Marketing WIG": MARKETING_WIG,
    "Laptop Inventory": LAPTOP_INVENTORY,
    "Client Payments": CLIENT_PAYMENT,
}

STATUS_COLORS = {
    "Resolved": "#2ecc71",
    "Completed": "#2ecc71",
    "Pending": "#f39c12",
    "In Progress": "#3498db",
    "Active": "#2ecc71",
    "Vacant": "#f39c12",
    "Paid Early": "#2ecc71",
    "Paid On Time": "#3498db",
    "Paid Late": "#e74c3c",
    "Not Yet Paid": "#f39c12",
    "Unknown": "#95a5a6",
}


# ---------------------------------------------------------------------------
# Data loading (cached per process, cleared by the Refresh button)
# ---------------------------------------------------------------------------
@st.cache_resource
def get_cache() -> TTLCache:
    return TTLCache()


@st.cache_resource
def get_offline_session():
    return sample_session(SOURCE_URLS)


def load(kind: str, offline: bool):
    session = get_offline_session() if offline else None
    return fetch_with_cache(
        SOURCE_URLS[kind],
        kind,
        get_cache(),
        key=f"{kind}:{'offline' if offline else 'live'}",
        fetcher=lambda url, k: fetch_and_parse(url, k, session=session),
    )


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("Department Dashboard")
st.sidebar.markdown("Weekly department overview")
st.sidebar.divider()

page = st.sidebar.radio("Navigate", [*PAGES, "IT Asset Request"])
offline = st.sidebar.toggle("Offline sample data", value=False)

if st.sidebar.button("Refresh data"):
    if page in PAGES:
        get_cache().clear(f"{PAGES[page]}:{'offline' if offline else 'live'}")
    else:
        get_cache().clear_all()

st.sidebar.divider()
st.sidebar.caption("Data: published Google Sheets, cached for 5 minutes")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def stat_card(label: str, value, caption: str = "", color: str = "#3498db"):
    st.markdown(
        f"""
        <div style="background: linear-gradient(135deg, {color}22, {color}11);
                    border-left: 4px solid {color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;">
            <div style="font-size: 13px; color: #888; font-weight: 600; text-transform: uppercase;">{label}</div>
            <div style="font-size: 28px; font-weight: 700; color: #222; margin: 4px 0;">{value}</div>
            <div style="font-size: 13px; color: #666;">{caption}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def card_row(items: list[tuple[str, object, str]]):
    cols = st.columns(len(items))
    for col, (label, value, caption) in zip(cols, items):
        with col:
            stat_card(label, value, caption)


def status_chart(counts: dict[str, int], title: str):
    if not counts:
        st.info("No records for this selection.")
        return
    df = pd.DataFrame({"status": list(counts), "count": list(counts.values())})
    fig = px.bar(
        df, x="status", y="count", title=title,
        color="status", color_discrete_map=STATUS_COLORS,
    )
    fig.update_layout(height=350, showlegend=False, plot_bgcolor="rgba(0,0,0,0)")
    st.plotly_chart(fig, use_container_width=True)


def trend_chart(records: list[dict], date_field: str):
    trend = get_weekly_trend(records, date_field)
    if trend.empty:
        return
    fig = go.Figure()
    fig.add_trace(go.Bar(x=trend["label"], y=trend["total"], name="Total", marker_color="#3498db"))
    fig.add_trace(go.Scatter(
        x=trend["label"], y=trend["resolved"], name="Resolved",
        mode="lines+markers", line=dict(color="#2ecc71", width=2),
    ))
    fig.update_layout(title="Weekly trend", height=350, plot_bgcolor="rgba(0,0,0,0)")
    st.plotly_chart(fig, use_container_width=True)


def week_selector(records: list[dict], kind: str) -> WeekKey | None:
    options = available_weeks(records, DATE_FIELDS[kind])
    if not options:
        return None
    labels = [o["label"] for o in options]
    choice = st.selectbox("Week", labels, index=0)
    picked = options[labels.index(choice)]
    return WeekKey(picked["week"], picked["year"])


# ===========================================================================
# PAGE: IT Asset Request
# ===========================================================================
if page == "IT Asset Request":
    st.title("IT Asset Request")
    with st.form("asset_request"):
        name = st.text_input("Name")
        department = st.text_input("Department")
        asset = st.text_input("Asset")
        reason = st.text_area("Reason")
        signature = st.text_input("Signature (data URL)")
        submitted = st.form_submit_button("Submit")

    if submitted:
        result = submit_asset_request(
            AssetRequest(name, department, asset, reason, signature), url=SUBMIT_URL
        )
        if result.success:
            st.success(f"Request submitted successfully! Request ID: {result.request_id}")
        else:
            st.error(result.message)
    st.stop()


kind = PAGES[page]
st.title(page)

if offline and kind not in SAMPLE_GENERATORS:
    st.warning("No sample data for this department; switch off offline mode.")
    st.stop()

result = load(kind, offline)
if not result.ok:
    st.error(result.message)
    st.stop()

records = result.records
st.caption(f"{len(records)} records · fetched {result.fetched_at:%H:%M:%S} UTC")

date_field = DATE_FIELDS.get(kind)
week = week_selector(records, kind) if date_field else None
overview = get_weekly_overview(kind, records, week=week)
stats = overview["stats"]
st.subheader(overview["label"])


# ===========================================================================
# PAGE bodies
# ===========================================================================
if kind == SALES_LEAD:
    card_row([
        ("Leads", stats["total_leads"], f"Top source: {stats['top_source'] or 'N/A'}"),
        ("Ready to Engage", stats["ready_to_engage"], ""),
        ("High Score", stats["high_score_leads"], f"Average score {stats['average_score']}"),
    ])
    week_records = filter_to_week(records, date_field, overview["week"])
    for card in get_goal_cards(kind, week_records):
        st.progress(card["progress"] / 100, text=f"{card['name']}: {card['actual']}/{card['goal']}")
    status_chart(stats["leads_by_status"], "Leads by status")

elif kind == IT_TICKET:
    card_row([
        ("Tickets", stats["total_tickets"], f"{stats['unresolved_tickets']} unresolved"),
        ("Resolved", stats["resolved_tickets"], f"{stats['completion_rate']}% completion"),
        ("Avg resolution", stats["avg_resolution_time"], ""),
        ("Satisfaction", f"{stats['satisfaction_rate']}%", f"Excellent ratings {stats['employee_rating']}%"),
    ])
    for card in get_goal_cards(kind, filter_to_week(records, date_field, overview["week"])):
        st.progress(card["progress"] / 100, text=f"{card['name']}: {card['actual']}/{card['goal']}")
    status_chart(stats["tickets_by_status"], "Tickets by status")

elif kind == IT_TASK:
    card_row([
        ("Tasks", stats["total_tasks"], ""),
        ("Completed", stats["completed"], f"{stats['completion_rate']}%"),
        ("In progress", stats["in_progress"], ""),
        ("To do", stats["to_do"], ""),
    ])
    status_chart(stats["tasks_by_status"], "Tasks by status")

elif kind == DPO_TASK:
    card_row([
        ("Tasks", stats["total_tasks"], ""),
        ("Completed", stats["completed_tasks"], f"{stats['completion_rate']}%"),
        ("Pending", stats["pending_tasks"], f"{stats['overdue_tasks']} overdue"),
    ])
    status_chart(stats["tasks_by_status"], "Tasks by status")

elif kind == PAYROLL_CONCERN:
    card_row([
        ("Concerns", stats["total_concerns"], f"{stats['undated_concerns']} without payroll date"),
        ("Resolved", stats["resolved_concerns"], f"{stats['resolution_rate']}%"),
        ("Pending", stats["pending_concerns"], f"{stats['on_process_concerns']} on process"),
    ])
    status_chart(stats["concerns_by_status"], "Concerns by status")

elif kind == EMPLOYEE_BONUS:
    card_row([
        ("Employees", stats["total_employees"], ""),
        ("Perfect presence", stats["qualified_for_perfect_presence"], f"{stats['perfect_presence_rate']}%"),
        ("Quarterly bonus", f"{stats['total_quarterly_bonus']:,.2f}", ""),
    ])
    employee_id = st.text_input("Look up employee ID")
    if employee_id:
        profile = find_employee(records, employee_id)
        if profile is None:
            st.warning("Employee not found")
        else:
            st.dataframe(pd.DataFrame(profile["weekly_attendance"]), hide_index=True)

elif kind == MARKETING_WIG:
    card_row([
        ("Lead measures", stats["total_leads"], ""),
        ("Activities", stats["total_activities"], f"{stats['completed_activities']} completed"),
        ("Completion", f"{stats['completion_rate']}%", ""),
    ])
    for lead in records:
        with st.expander(f"{lead['lead_number']}: {lead['lead_statement']} ({lead['status']})"):
            st.dataframe(pd.DataFrame(lead["activities"]), hide_index=True)

elif kind == LAPTOP_INVENTORY:
    card_row([
        ("Laptops", stats["total_laptops"], f"Top brand: {stats['top_brand'] or 'N/A'}"),
        ("Active", stats["active_laptops"], f"{stats['temporary_laptops']} temporary"),
        ("Vacant", stats["vacant_laptops"], f"{stats['inactive_laptops']} inactive"),
    ])
    status_chart(stats["laptops_by_brand"], "Laptops by brand")
    search = st.text_input("Search laptop ID or handler")
    if search:
        needle = search.strip().lower()
        matches = [r for r in records if needle in r["laptop_id"].lower() or needle in r["handler"].lower()]
        st.dataframe(pd.DataFrame(matches), hide_index=True)

elif kind == CLIENT_PAYMENT:
    card_row([
        ("Clients", stats["total_clients"], f"{stats['total_payments']} payments"),
        ("Paid early / on time", stats["paid_early"] + stats["paid_on_time"], f"{stats['on_time_rate']}%"),
        ("Paid late", stats["paid_late"], ""),
        ("Not yet paid", stats["not_yet_paid"], ""),
    ])
    status_chart(
        {
            "Paid Early": stats["paid_early"],
            "Paid On Time": stats["paid_on_time"],
            "Paid Late": stats["paid_late"],
            "Not Yet Paid": stats["not_yet_paid"],
        },
        "Payments by status",
    )
    client = st.selectbox("Client history", sorted(stats["client_history"]))
    if client:
        st.dataframe(pd.DataFrame(stats["client_history"][client]), hide_index=True)

if date_field:
    trend_chart(records, date_field)
