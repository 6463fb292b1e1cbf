"""Tests for date keys."""

from datetime import date, datetime
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from tagdiary.core.dates import (
    is_today,
    is_valid_date_key,
    normalize_date_key,
    offset_date,
    parse_date_key,
    resolve_date,
    sort_date_keys,
    to_date_key,
    today_in,
)
from tagdiary.errors import MalformedDate


@pytest.fixture
def today():
    return date(2025, 1, 15)


class TestDateKeys:
    def test_to_date_key_is_zero_padded(self):
        assert to_date_key(date(2024, 1, 5)) == "2024-01-05"

    def test_to_date_key_accepts_datetime(self):
        assert to_date_key(datetime(2024, 1, 5, 23, 59)) == "2024-01-05"

    def test_parse_padded(self):
        assert parse_date_key("2024-01-05") == date(2024, 1, 5)

    def test_parse_unpadded(self):
        assert parse_date_key("2024-1-5") == date(2024, 1, 5)

    @pytest.mark.parametrize("key", ["", "2024/01/05", "20240105", "2024-13-01", "2024-02-30", "yesterday"])
    def test_malformed(self, key):
        with pytest.raises(MalformedDate):
            parse_date_key(key)

    def test_malformed_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_date_key("nope")

    def test_non_string(self):
        with pytest.raises(MalformedDate, match="must be a string"):
            parse_date_key(20240105)

    def test_normalize(self):
        assert normalize_date_key("2024-1-5") == "2024-01-05"
        assert normalize_date_key(date(2024, 1, 5)) == "2024-01-05"

    def test_is_valid(self):
        assert is_valid_date_key("2024-01-05")
        assert not is_valid_date_key("notes")

    def test_sort_is_chronological_not_lexicographic(self):
        keys = ["2024-10-1", "2024-9-30", "2024-1-15"]
        assert sorted(keys) == ["2024-1-15", "2024-10-1", "2024-9-30"]
        assert sort_date_keys(keys) == ["2024-1-15", "2024-9-30", "2024-10-1"]


class TestNavigation:
    def test_offset_date(self, today):
        assert offset_date(today, -1) == date(2025, 1, 14)
        assert offset_date(today, 17) == date(2025, 2, 1)

    def test_resolve_relative(self, today):
        assert resolve_date("today", as_of=today) == today
        assert resolve_date("Yesterday", as_of=today) == date(2025, 1, 14)
        assert resolve_date("tomorrow", as_of=today) == date(2025, 1, 16)

    def test_resolve_key(self, today):
        assert resolve_date("2024-02-29", as_of=today) == date(2024, 2, 29)

    def test_resolve_malformed(self, today):
        with pytest.raises(MalformedDate):
            resolve_date("someday", as_of=today)

    def test_today_in_timezone(self):
        with patch("tagdiary.core.dates.datetime") as mock_datetime:
            mock_datetime.now.return_value = datetime(2025, 1, 16, 1, 30)
            assert today_in("Asia/Tokyo") == date(2025, 1, 16)

        assert mock_datetime.now.call_args[0][0] == ZoneInfo("Asia/Tokyo")

    def test_today_in_without_timezone_is_local(self):
        assert today_in("") == date.today()

    def test_today_in_unknown_timezone_falls_back(self, caplog):
        assert today_in("Nowhere/Special") == date.today()
        assert "Nowhere/Special" in caplog.text

    def test_is_today(self, today):
        assert is_today(today, as_of=today)
        assert is_today("2025-1-15", as_of=today)
        assert not is_today("2025-01-16", as_of=today)
