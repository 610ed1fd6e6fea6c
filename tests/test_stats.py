from datetime import date

import pytest

from dept_dashboard.loaders.schemas import DPO_TASK, IT_TICKET, LAPTOP_INVENTORY
from dept_dashboard.stats import (
    average_resolution_seconds,
    compute_client_payment_stats,
    compute_it_task_stats,
    compute_it_ticket_stats,
    compute_laptop_stats,
    compute_payroll_stats,
    compute_sales_stats,
    compute_stats,
    compute_task_stats,
    compute_wig_stats,
    group_by,
    payment_status,
    rate,
    top_category,
)


class TestBuildingBlocks:
    def test_rate(self):
        assert rate(0, 0) == 0
        assert rate(3, 5) == 60
        assert rate(1, 3) == 33
        assert rate(2, 3) == 67

    def test_group_by_counts_labels(self):
        records = [{"status": s} for s in ["Resolved"] * 3 + ["Pending"] * 2]
        assert group_by(records, "status") == {"Resolved": 3, "Pending": 2}

    def test_group_by_empty_values(self):
        records = [{"status": "Done"}, {"status": ""}, {}]
        assert group_by(records, "status") == {"Done": 1}
        assert group_by(records, "status", unknown_label="Unknown") == {"Done": 1, "Unknown": 2}

    def test_top_category_first_seen_wins_tie(self):
        assert top_category({"B": 2, "A": 2, "C": 1}) == "B"
        assert top_category({}) == ""


TICKETS = [
    {
        "status": "Resolved", "calculated_resolution_time": "1h",
        "response": "Very Satisfied", "employee_rating": "Excellent",
        "account": "Finance", "troubleshooting_type": "Laptop Release, Network",
    },
    {
        "status": "Pending", "is_problem_solved": "Yes", "time_resolved": "30m",
        "response": "Dissatisfied", "employee_rating": "Good",
        "account": "Finance", "troubleshooting_type": "Network",
    },
    {
        "status": "Pending", "is_problem_solved": "No", "response": "",
        "account": "HR", "troubleshooting_type": "Peripheral Release",
    },
    {
        "status": "Resolved", "calculated_resolution_time": "n/a",
        "account": "HR", "troubleshooting_type": "Email",
    },
]


class TestItTicketStats:
    def test_summary(self):
        stats = compute_it_ticket_stats(TICKETS)
        assert stats["total_tickets"] == 4
        assert stats["resolved_tickets"] == 3
        assert stats["unresolved_tickets"] == 1
        assert stats["completion_rate"] == 75
        assert stats["satisfaction_rate"] == 50
        assert stats["employee_rating"] == 50
        assert stats["top_account"] == "Finance"
        assert stats["top_troubleshooting_type"] == "Network"
        assert stats["laptop_releases"] == 1
        assert stats["peripheral_releases"] == 1

    def test_unparseable_duration_counts_as_zero(self):
        # (3600 + 1800 + 0) / 3
        assert average_resolution_seconds(TICKETS) == 1800
        assert compute_it_ticket_stats(TICKETS)["avg_resolution_time"] == "30m"

    def test_calculated_time_preferred_over_manual(self):
        ticket = {"status": "Resolved", "calculated_resolution_time": "10m", "time_resolved": "2h"}
        assert average_resolution_seconds([ticket]) == 600

    def test_no_resolved_tickets(self):
        stats = compute_it_ticket_stats([{"status": "Pending"}])
        assert stats["avg_resolution_seconds"] == 0
        assert stats["avg_resolution_time"] == "0s"

    def test_idempotent(self):
        assert compute_it_ticket_stats(TICKETS) == compute_it_ticket_stats(TICKETS)

    def test_empty(self):
        stats = compute_it_ticket_stats([])
        assert stats["total_tickets"] == 0
        assert stats["completion_rate"] == 0
        assert stats["satisfaction_rate"] == 0


class TestSalesStats:
    def test_summary(self):
        leads = [
            {"score": 80, "fit_level": "Ready to Engage", "source": "Referral", "lead_status": "Hot"},
            {"score": 60, "fit_level": "Develop & Qualify", "source": "LinkedIn", "lead_status": "Warm"},
            {"score": 0, "fit_level": "Unqualified", "source": "Referral", "lead_status": "Cold"},
        ]
        stats = compute_sales_stats(leads)
        assert stats["total_leads"] == 3
        assert stats["ready_to_engage"] == 1
        assert stats["develop_qualify"] == 1
        assert stats["unqualified"] == 1
        assert stats["high_score_leads"] == 1
        assert stats["average_score"] == 70.0
        assert stats["top_source"] == "Referral"

    def test_empty(self):
        stats = compute_sales_stats([])
        assert stats["average_score"] == 0
        assert stats["top_source"] == ""


class TestTaskStats:
    def test_three_resolved_two_pending(self):
        tasks = [{"status": "Resolved"}] * 3 + [{"status": "Pending"}] * 2
        stats = compute_task_stats(tasks, today=date(2024, 1, 1))
        assert stats["tasks_by_status"] == {"Resolved": 3, "Pending": 2}
        assert stats["completed_tasks"] == 3
        assert stats["pending_tasks"] == 2
        assert stats["completion_rate"] == 60

    def test_overdue_and_completion_date(self):
        tasks = [
            {"status": "Pending", "target_date": "01/01/2024"},
            {"status": "In Progress", "target_date": "03/01/2024"},
            {"status": "", "date_completed": "01/05/2024"},
        ]
        stats = compute_task_stats(tasks, today=date(2024, 2, 1))
        assert stats["overdue_tasks"] == 1
        assert stats["pending_tasks"] == 2
        assert stats["completed_tasks"] == 1

    def test_overdue_status_counts_whatever_the_target_date(self):
        tasks = [
            {"status": "Overdue", "target_date": "01/01/2024"},
            {"status": "overdue", "target_date": "12/31/2024"},
            {"status": "Overdue", "target_date": ""},
        ]
        stats = compute_task_stats(tasks, today=date(2024, 2, 1))
        assert stats["overdue_tasks"] == 3
        assert stats["pending_tasks"] == 3
        assert stats["completed_tasks"] == 0
        assert stats["completion_rate"] == 0

    def test_it_task_board(self):
        tasks = [{"status": s, "assignee": "Rey"} for s in ["Completed", "In Progress", "To Do", "Ongoing", "Blocked"]]
        stats = compute_it_task_stats(tasks)
        assert stats["completed"] == 1
        assert stats["in_progress"] == 1
        assert stats["to_do"] == 1
        assert stats["ongoing"] == 1
        assert stats["completion_rate"] == 20
        assert stats["assignee_counts"] == {"Rey": 5}


class TestOtherDepartments:
    def test_payroll(self):
        concerns = [
            {"status": "Resolved", "concern_type": "Overtime", "payroll_date": "10/15/2025"},
            {"status": "Pending", "concern_type": "Overtime", "payroll_date": ""},
            {"status": "On Process", "concern_type": "Leave", "payroll_date": "10/30/2025"},
        ]
        stats = compute_payroll_stats(concerns)
        assert stats["resolution_rate"] == 33
        assert stats["on_process_concerns"] == 1
        assert stats["undated_concerns"] == 1
        assert stats["concerns_by_type"] == {"Overtime": 2, "Leave": 1}

    def test_wig(self):
        leads = [
            {"status": "On Track", "activities": [{"status": "Completed"}, {"status": "Approved"}]},
            {"status": "", "activities": [{"status": ""}, {"status": "In Progress"}]},
        ]
        stats = compute_wig_stats(leads)
        assert stats["total_activities"] == 4
        assert stats["completed_activities"] == 2
        assert stats["completion_rate"] == 50
        assert stats["leads_by_status"] == {"On Track": 1, "Unknown": 1}
        assert stats["activities_by_status"]["Unknown"] == 1


class TestDispatcher:
    def test_dispatch_by_kind(self):
        assert compute_stats(IT_TICKET, TICKETS)["total_tickets"] == 4
        assert compute_stats(DPO_TASK, [])["total_tasks"] == 0

    def test_unknown_kind(self):
        with pytest.raises(KeyError):
            compute_stats("warehouse", [])


class TestClientPayments:
    PAYMENTS = [
        {"client_name": "Harbor", "coverage_date": "July 2025", "payment_date": "07/10/2025",
         "days_after_due": "Paid before due date", "payment_class": "A"},
        {"client_name": "Harbor", "coverage_date": "August 2025", "payment_date": "08/25/2025",
         "days_after_due": "5", "payment_class": "B"},
        {"client_name": "Pinecrest", "coverage_date": "July 2025", "payment_date": "",
         "days_after_due": "Not yet paid", "payment_class": "Not yet paid"},
        {"client_name": "Northwind", "coverage_date": "July 2025", "payment_date": "07/18/2025",
         "days_after_due": "Paid on time", "payment_class": ""},
        {"client_name": "Northwind", "coverage_date": "August 2025", "payment_date": "08/30/2025",
         "days_after_due": "20", "payment_class": "D"},
    ]

    def test_payment_status(self):
        assert [payment_status(p) for p in self.PAYMENTS] == [
            "Paid Early", "Paid Late", "Not Yet Paid", "Paid On Time", "Paid Late",
        ]
        assert payment_status({"payment_class": "a"}) == "Paid Early"
        assert payment_status({"days_after_due": "3"}) == "Paid"

    def test_summary_and_history(self):
        stats = compute_client_payment_stats(self.PAYMENTS)
        assert stats["total_clients"] == 3
        assert stats["total_payments"] == 5
        assert stats["paid_early"] == 1
        assert stats["paid_on_time"] == 1
        assert stats["paid_late"] == 2
        assert stats["not_yet_paid"] == 1
        assert stats["on_time_rate"] == 40
        assert list(stats["client_history"]) == ["Harbor", "Pinecrest", "Northwind"]
        assert stats["client_history"]["Pinecrest"][0]["payment_date"] == "Pending"
        assert [h["status"] for h in stats["client_history"]["Harbor"]] == ["Paid Early", "Paid Late"]

    def test_empty(self):
        stats = compute_client_payment_stats([])
        assert stats["total_clients"] == 0
        assert stats["on_time_rate"] == 0
        assert stats["client_history"] == {}


class TestLaptopInventory:
    def test_summary(self):
        laptops = [
            {"laptop_id": "LT-001", "brand": "Lenovo", "status": "Active", "account": "HR"},
            {"laptop_id": "LT-002", "brand": "Lenovo", "status": "active", "account": "HR"},
            {"laptop_id": "LT-003", "brand": "Dell", "status": "Vacant", "account": ""},
            {"laptop_id": "LT-004", "brand": "", "status": "Temporary", "account": "Sales"},
            {"laptop_id": "LT-005", "brand": "HP", "status": "Inactive", "account": "Sales"},
        ]
        stats = compute_stats(LAPTOP_INVENTORY, laptops)
        assert stats["total_laptops"] == 5
        assert stats["active_laptops"] == 2
        assert stats["inactive_laptops"] == 1
        assert stats["temporary_laptops"] == 1
        assert stats["vacant_laptops"] == 1
        assert stats["laptops_by_brand"] == {"Lenovo": 2, "Dell": 1, "HP": 1}
        assert stats["top_brand"] == "Lenovo"

    def test_empty(self):
        stats = compute_laptop_stats([])
        assert stats["total_laptops"] == 0
        assert stats["laptops_by_brand"] == {}
