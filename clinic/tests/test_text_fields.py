"""
Unit tests for free-text helpers.
"""
import pytest

from clinic.dates import format_date_text
from clinic.text_fields import (
    EMERGENCY_CONTACT_PARTS,
    REFERRER_PARTS,
    format_won,
    summarize_areas,
    summarize_text,
    unpack_slash_field,
)


class TestUnpackSlashField:

    def test_three_parts(self):
        result = unpack_slash_field("홍길동 / 010-1111-2222 / 1985", REFERRER_PARTS)
        assert result == {
            "referrer_name": "홍길동",
            "referrer_phone": "010-1111-2222",
            "referrer_birth_year": "1985",
        }

    def test_two_parts_fill_first_two(self):
        result = unpack_slash_field("김영희/010-9876-5432", EMERGENCY_CONTACT_PARTS)
        assert result["emergency_contact_name"] == "김영희"
        assert result["emergency_contact_phone"] == "010-9876-5432"
        assert result["emergency_contact_relation"] == ""

    def test_one_part(self):
        assert unpack_slash_field("홍길동", REFERRER_PARTS)["referrer_name"] == "홍길동"

    def test_extra_parts_ignored_and_blanks_kept_in_place(self):
        result = unpack_slash_field("a / / b / c / d", ("x", "y", "z"))
        assert result == {"x": "a", "y": "", "z": "b"}

    def test_missing_leading_segment(self):
        result = unpack_slash_field("/ 010-1234-5678 / 1980", REFERRER_PARTS)
        assert result == {
            "referrer_name": "",
            "referrer_phone": "010-1234-5678",
            "referrer_birth_year": "1980",
        }

    def test_trailing_blanks_dropped(self):
        result = unpack_slash_field("김영희 / 010-9876-5432 / ", EMERGENCY_CONTACT_PARTS)
        assert result["emergency_contact_phone"] == "010-9876-5432"
        assert result["emergency_contact_relation"] == ""

    @pytest.mark.parametrize("value", [None, "", " / "])
    def test_empty(self, value):
        assert unpack_slash_field(value, ("x", "y")) == {"x": "", "y": ""}


class TestSummarizeText:

    def test_short_text_whole(self):
        result = summarize_text("서울시 강남구")
        assert result == {"full": "서울시 강남구", "first_line": "서울시 강남구", "second_line": "", "truncated": False}

    def test_empty_shows_dash(self):
        assert summarize_text(None)["first_line"] == "-"

    def test_multi_line(self):
        result = summarize_text("첫째 줄입니다 아주 길게 길게 길게 씁니다\n둘째 줄\n셋째 줄")
        assert result["first_line"] == "첫째 줄입니다 아주 길게 길게 길게 씁니다"
        assert result["second_line"] == "둘째 줄..."
        assert result["truncated"] is True

    def test_breaks_at_separator(self):
        text = "서울특별시 강남구 테헤란로 123, 삼성빌딩 10층 1001호 (역삼동) 주차 가능"
        result = summarize_text(text, width=30)
        assert result["truncated"] is True
        assert text.startswith(result["first_line"])
        assert len(result["first_line"]) <= 30
        assert result["first_line"] + " " + result["second_line"] == text or result["second_line"].endswith("...")

    def test_long_second_line_truncated(self):
        text = "a" * 100
        result = summarize_text(text, width=30)
        assert result["first_line"] == "a" * 30
        assert result["second_line"] == "a" * 27 + "..."


class TestSummarizeAreas:

    def test_two_or_fewer_joined(self):
        assert summarize_areas("앞니, 어금니")["summary"] == "앞니, 어금니"

    def test_more_than_two(self):
        result = summarize_areas("앞니, 어금니, 잇몸, 사랑니")
        assert result["items"] == ["앞니", "어금니", "잇몸", "사랑니"]
        assert result["summary"] == "앞니, 어금니 +2개"

    def test_empty(self):
        assert summarize_areas("")["summary"] == "-"


class TestFormatting:

    def test_format_won(self):
        assert format_won(1234000) == "1,234,000원"
        assert format_won(0) == "0원"
        assert format_won(None) == "-"

    def test_format_date_text(self):
        assert format_date_text("2024-03-05") == "2024년 03월 05일"
        assert format_date_text(None) == ""
