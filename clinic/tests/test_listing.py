"""
Unit tests for the in-memory filter / sort predicate.
"""
from datetime import date, datetime, timezone as dt_timezone
from itertools import product

import pytest

from clinic.listing import (
    IN_TREATMENT,
    date_key,
    filter_records,
    sort_by_recent_activity,
    sort_records,
)


def records():
    return [
        {"id": 1, "name": "김민수", "consultant": "이실장", "treatment_status": "진행 중",
         "created_at": "2024-03-01T09:00:00", "consultation_date": date(2024, 3, 1)},
        {"id": 2, "name": "Lee Jin", "consultant": "최실장", "treatment_status": "종결",
         "created_at": "2024-03-10T09:00:00", "consultation_date": date(2024, 3, 10)},
        {"id": 3, "name": "박서연", "consultant": "이실장", "treatment_status": "중단 중",
         "created_at": "2024-03-20T09:00:00", "consultation_date": None},
        {"id": 4, "name": "정하늘", "consultant": "", "treatment_status": "",
         "created_at": "2024-03-31T14:59:59Z", "consultation_date": date(2024, 3, 31)},
    ]


def ids(rows):
    return [r["id"] for r in rows]


class TestDateKey:

    def test_string_prefix(self):
        assert date_key("2024-03-15T10:00:00Z") == "2024-03-15"
        assert date_key("2024-03-15") == "2024-03-15"

    def test_timestamp_string_is_local_date(self):
        # same instant as the aware datetime below, passed as text
        assert date_key("2024-03-15T16:00:00Z") == "2024-03-16"
        assert date_key("2024-03-15T16:00:00+00:00") == "2024-03-16"

    def test_date(self):
        assert date_key(date(2024, 3, 15)) == "2024-03-15"

    def test_aware_datetime_is_local_date(self):
        # 2024-03-15 16:00 UTC is already 2024-03-16 in Seoul
        assert date_key(datetime(2024, 3, 15, 16, 0, tzinfo=dt_timezone.utc)) == "2024-03-16"

    def test_missing(self):
        assert date_key(None) is None
        assert date_key("") is None


class TestFilterRecords:

    def test_no_criteria_keeps_everything_in_order(self):
        assert ids(filter_records(records())) == [1, 2, 3, 4]

    def test_text_query_case_insensitive(self):
        assert ids(filter_records(records(), "lee jin")) == [2]

    def test_text_query_restricted_to_fields(self):
        assert ids(filter_records(records(), "이실장", search_fields=("name",))) == []
        assert ids(filter_records(records(), "이실장", search_fields=("consultant",))) == [1, 3]

    def test_date_range_inclusive(self):
        rows = filter_records(records(), date_from="2024-03-10", date_to="2024-03-31")
        assert ids(rows) == [2, 3, 4]

    def test_missing_date_fails_active_filter(self):
        rows = filter_records(records(), date_from="2024-03-01", date_field="consultation_date")
        assert ids(rows) == [1, 2, 4]

    def test_date_objects_as_bounds(self):
        rows = filter_records(records(), date_to=date(2024, 3, 1))
        assert ids(rows) == [1]

    def test_staff(self):
        assert ids(filter_records(records(), staff="이실장")) == [1, 3]

    def test_in_treatment_excludes_terminal_statuses(self):
        assert ids(filter_records(records(), status=IN_TREATMENT)) == [1, 4]

    def test_exact_status(self):
        assert ids(filter_records(records(), status="종결")) == [2]

    def test_conjunction_of_independent_criteria(self):
        data = records()
        options = {
            "query": [None, "실장"],
            "date_from": [None, "2024-03-05"],
            "staff": [None, "이실장"],
            "status": [None, IN_TREATMENT],
        }
        for query, date_from, staff, status in product(*options.values()):
            rows = filter_records(data, query, date_from=date_from, staff=staff, status=status)
            expected = [
                r["id"] for r in data
                if filter_records([r], query) and filter_records([r], date_from=date_from)
                and filter_records([r], staff=staff) and filter_records([r], status=status)
            ]
            assert ids(rows) == expected


class TestSortRecords:

    def test_strings_ascending_and_descending(self):
        rows = [{"id": 1, "v": "b"}, {"id": 2, "v": "A"}, {"id": 3, "v": "c"}]
        assert ids(sort_records(rows, "v")) == [2, 1, 3]
        assert ids(sort_records(rows, "v", "desc")) == [3, 1, 2]

    def test_booleans_false_first(self):
        rows = [{"id": 1, "v": True}, {"id": 2, "v": False}]
        assert ids(sort_records(rows, "v")) == [2, 1]

    def test_nulls_first_ascending_last_descending(self):
        rows = [{"id": 1, "v": 5}, {"id": 2, "v": None}, {"id": 3, "v": 1}]
        assert ids(sort_records(rows, "v")) == [2, 3, 1]
        assert ids(sort_records(rows, "v", "desc")) == [1, 3, 2]

    def test_stable_for_ties(self):
        rows = [{"id": i, "v": "same"} for i in range(5)]
        assert ids(sort_records(rows, "v")) == [0, 1, 2, 3, 4]

    def test_mixed_types_do_not_raise(self):
        rows = [{"id": 1, "v": "text"}, {"id": 2, "v": 3}, {"id": 3, "v": None}, {"id": 4, "v": False}]
        assert ids(sort_records(rows, "v")) == [3, 4, 2, 1]

    def test_dates(self):
        rows = [{"id": 1, "v": date(2024, 3, 2)}, {"id": 2, "v": date(2024, 3, 1)}]
        assert ids(sort_records(rows, "v")) == [2, 1]

    def test_hangul(self):
        rows = [{"id": 1, "v": "박서연"}, {"id": 2, "v": "김민수"}, {"id": 3, "v": "정하늘"}]
        assert ids(sort_records(rows, "v")) == [2, 1, 3]


class TestSortByRecentActivity:

    def test_edit_time_wins_over_creation(self):
        rows = [
            {"id": 1, "created_at": "2024-03-01T00:00:00", "last_modified_at": "2024-03-30T00:00:00"},
            {"id": 2, "created_at": "2024-03-20T00:00:00", "last_modified_at": None},
            {"id": 3, "created_at": None, "last_modified_at": None},
            {"id": 4, "created_at": "2024-03-25T00:00:00"},
        ]
        assert ids(sort_by_recent_activity(rows)) == [1, 4, 2, 3]
