from datetime import datetime

from dept_dashboard.loaders.utils import (
    clean_cell,
    date_part,
    format_us_date,
    lenient_int,
    normalise_date,
    safe_float,
)


class TestNumbers:
    def test_lenient_int(self):
        assert lenient_int("85") == 85
        assert lenient_int("12 pts") == 12
        assert lenient_int("1,200") == 1200
        assert lenient_int("") == 0
        assert lenient_int("n/a") == 0
        assert lenient_int(None) == 0

    def test_safe_float(self):
        assert safe_float('"1,500.50"') == 1500.5
        assert safe_float("78%") == 78.0
        assert safe_float("") == 0.0
        assert safe_float("abc") == 0.0


class TestCells:
    def test_clean_cell(self):
        assert clean_cell('  "quoted"  ') == "quoted"
        assert clean_cell(None) == ""


class TestDates:
    def test_normalise_date(self):
        assert normalise_date("10/17/2025 1:38:05") == datetime(2025, 10, 17, 1, 38, 5)
        assert normalise_date("") is None
        assert normalise_date("someday") is None

    def test_relative_words_are_not_dates(self):
        for word in ("Today", "now", " NOW ", "tomorrow"):
            assert normalise_date(word) is None

    def test_format_us_date(self):
        assert format_us_date("2025-10-05") == "10/05/2025"
        assert format_us_date("10/5/25") == "10/05/2025"
        assert format_us_date("next payroll") == "next payroll"
        assert format_us_date("") == ""

    def test_date_part(self):
        assert date_part("10/17/2025 1:38:05") == "10/17/2025"
        assert date_part("") == ""
