from datetime import date, datetime, timedelta, timezone

from dept_dashboard.temporal import (
    NO_DATE_BUCKET,
    WeekKey,
    available_weeks,
    bucket_by_week,
    filter_to_week,
    format_duration,
    iso_week,
    iso_week_year,
    parse_duration,
)


class TestIsoWeek:
    def test_first_monday_of_2024_is_week_one(self):
        assert iso_week(date(2024, 1, 1)) == 1

    def test_new_year_sunday_belongs_to_previous_year(self):
        assert iso_week(date(2023, 1, 1)) == 52
        assert iso_week_year(date(2023, 1, 1)) == WeekKey(52, 2022)

    def test_week_53(self):
        assert iso_week_year(date(2020, 12, 31)) == WeekKey(53, 2020)
        assert iso_week_year(date(2021, 1, 3)) == WeekKey(53, 2020)

    def test_matches_isocalendar(self):
        start = date(2019, 1, 1)
        for offset in range(0, 1200):
            d = start + timedelta(days=offset)
            iso = d.isocalendar()
            assert iso_week_year(d) == WeekKey(iso[1], iso[0]), d

    def test_aware_datetime_is_read_in_utc(self):
        # 01:00 on Jan 1 in UTC+8 is still Dec 31 in UTC
        moment = datetime(2024, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=8)))
        assert iso_week_year(moment) == WeekKey(52, 2023)

    def test_label(self):
        assert WeekKey(7, 2025).label == "Week 7, 2025"
        assert iso_week_year(date(2024, 12, 30)).label == "Week 1, 2025"


class TestDurations:
    def test_parse_full(self):
        assert parse_duration("1h 20m 5s") == 4805

    def test_parse_partial_and_reordered(self):
        assert parse_duration("45m") == 2700
        assert parse_duration("30s") == 30
        assert parse_duration("5s 2h") == 7205
        assert parse_duration("2 h 3 m") == 7380

    def test_parse_garbage_is_zero(self):
        assert parse_duration("") == 0
        assert parse_duration(None) == 0
        assert parse_duration("pending") == 0

    def test_format(self):
        assert format_duration(0) == "0s"
        assert format_duration(60) == "1m"
        assert format_duration(3600) == "1h"
        assert format_duration(3661) == "1h 1m 1s"
        assert format_duration(4805) == "1h 20m 5s"

    def test_round_trip(self):
        for seconds in range(0, 100_001):
            assert parse_duration(format_duration(seconds)) == seconds


RECORDS = [
    {"id": 1, "date": "01/02/2024"},
    {"id": 2, "date": "01/03/2024"},
    {"id": 3, "date": "12/31/2023"},
    {"id": 4, "date": ""},
    {"id": 5, "date": "not a date"},
]


class TestBucketing:
    def test_buckets_sorted_with_undated_last(self):
        buckets = bucket_by_week(RECORDS, "date")
        assert list(buckets) == [WeekKey(52, 2023), WeekKey(1, 2024), NO_DATE_BUCKET]
        assert [r["id"] for r in buckets[WeekKey(1, 2024)]] == [1, 2]
        assert [r["id"] for r in buckets[NO_DATE_BUCKET]] == [4, 5]

    def test_union_of_buckets_is_input(self):
        buckets = bucket_by_week(RECORDS, "date")
        ids = sorted(r["id"] for items in buckets.values() for r in items)
        assert ids == [1, 2, 3, 4, 5]

    def test_today_cell_is_undated(self):
        buckets = bucket_by_week([{"id": 1, "date": "Today"}, {"id": 2, "date": "now"}], "date")
        assert list(buckets) == [NO_DATE_BUCKET]
        assert len(buckets[NO_DATE_BUCKET]) == 2

    def test_exclude_undated(self):
        buckets = bucket_by_week(RECORDS, "date", include_undated=False)
        assert NO_DATE_BUCKET not in buckets
        assert sum(len(v) for v in buckets.values()) == 3

    def test_callable_selector(self):
        buckets = bucket_by_week(RECORDS, lambda r: r["date"], include_undated=False)
        assert list(buckets) == [WeekKey(52, 2023), WeekKey(1, 2024)]

    def test_available_weeks_newest_first_with_current_flag(self):
        weeks = available_weeks(RECORDS, "date", today=date(2024, 1, 3))
        assert [w["label"] for w in weeks] == ["Week 1, 2024 (Current)", "Week 52, 2023"]
        assert weeks[0]["is_current"] is True
        assert weeks[1]["is_current"] is False

    def test_filter_to_week(self):
        selected = filter_to_week(RECORDS, "date", WeekKey(52, 2023))
        assert [r["id"] for r in selected] == [3]
