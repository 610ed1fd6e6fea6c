from datetime import date

from dept_dashboard.dashboard import (
    TREND_COLUMNS,
    get_goal_cards,
    get_weekly_overview,
    get_weekly_progress,
    get_weekly_trend,
)
from dept_dashboard.loaders.schemas import DPO_TASK, EMPLOYEE_BONUS, IT_TICKET, SALES_LEAD
from dept_dashboard.temporal import WeekKey

TICKETS = [
    {"timestamp": "12/28/2023 9:15:00", "status": "Resolved"},
    {"timestamp": "1/2/2024 10:00:00", "status": "Resolved"},
    {"timestamp": "1/3/2024 11:30:00", "status": "Pending"},
    {"timestamp": "1/4/2024 14:00:00", "status": "Pending", "is_problem_solved": "Yes"},
    {"timestamp": "", "status": "Resolved"},
]


class TestWeeklyProgress:
    def test_progress(self):
        assert get_weekly_progress(5, 10) == 50.0
        assert get_weekly_progress(20, 10) == 100.0
        assert get_weekly_progress(3, 0) == 0.0


class TestWeeklyTrend:
    def test_chronological_and_undated_excluded(self):
        trend = get_weekly_trend(TICKETS, "timestamp")

        assert list(trend.columns) == TREND_COLUMNS
        assert trend["label"].tolist() == ["Week 52, 2023", "Week 1, 2024"]
        assert trend["total"].tolist() == [1, 3]
        assert trend["resolved"].tolist() == [1, 2]

    def test_empty_records(self):
        trend = get_weekly_trend([], "timestamp")
        assert trend.empty
        assert list(trend.columns) == TREND_COLUMNS

    def test_custom_done_predicate(self):
        trend = get_weekly_trend(TICKETS, "timestamp", is_done=lambda r: r["status"] == "Pending")
        assert trend["resolved"].tolist() == [0, 2]


class TestWeeklyOverview:
    def test_defaults_to_current_week(self):
        overview = get_weekly_overview(IT_TICKET, TICKETS, today=date(2024, 1, 5))

        assert overview["week"] == WeekKey(1, 2024)
        assert overview["record_count"] == 3
        assert overview["stats"]["resolved_tickets"] == 2
        assert overview["weeks"][0]["label"] == "Week 1, 2024 (Current)"

    def test_explicit_week(self):
        overview = get_weekly_overview(IT_TICKET, TICKETS, week=WeekKey(52, 2023), today=date(2024, 1, 5))
        assert overview["label"] == "Week 52, 2023"
        assert overview["stats"]["total_tickets"] == 1

    def test_empty_week(self):
        overview = get_weekly_overview(DPO_TASK, [], week=WeekKey(10, 2024))
        assert overview["record_count"] == 0
        assert overview["stats"]["completion_rate"] == 0

    def test_kind_without_dates_uses_all_records(self):
        overview = get_weekly_overview(EMPLOYEE_BONUS, [{"employee_id": "1"}])
        assert overview["week"] is None
        assert overview["stats"]["total_employees"] == 1


class TestGoalCards:
    def test_sales_goals(self):
        leads = [
            {"fit_level": "Ready to Engage", "score": 80},
            {"fit_level": "Unqualified", "score": 20},
        ]
        cards = {c["name"]: c for c in get_goal_cards(SALES_LEAD, leads)}
        assert cards["sales_leads"]["actual"] == 2
        assert cards["sales_leads"]["progress"] == 40.0
        assert cards["sales_high_score"]["actual"] == 1

    def test_departments_without_goals(self):
        assert get_goal_cards(DPO_TASK, [{"status": "Completed"}]) == []
