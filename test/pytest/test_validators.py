# test/pytest/test_validators.py
import pytest
from datetime import datetime, timezone

from app.core import validators
from conftest import oid


def test_bounded_string_trims_and_truncates():
    assert validators.bounded_string("  hello  ") == "hello"
    assert validators.bounded_string("abcdef", 3) == "abc"
    assert validators.bounded_string("   ") is None
    assert validators.bounded_string("   ", required=False) == ""
    assert validators.bounded_string(42) is None


def test_identifier():
    value = oid()
    assert validators.identifier(value) == value
    assert validators.identifier(value.upper()) == value
    assert validators.identifier("not-an-id") is None
    assert validators.identifier({"$ne": None}) is None


def test_parse_date_is_utc_aware():
    parsed = validators.parse_date("2024-03-01T10:00:00Z")
    assert parsed == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)
    assert validators.parse_date("2024-03-01").tzinfo is not None
    assert validators.parse_date("yesterday") is None
    assert validators.parse_date(None) is None


def test_role_accepts_alias():
    assert validators.role("Teacher") == "teacher"
    assert validators.role("college_admin") == "admin"
    assert validators.role("janitor") is None


def test_day_and_time():
    assert validators.day_of_week("monday") == "Monday"
    assert validators.day_of_week("Mon") is None
    assert validators.time_of_day("9:05") == "09:05"
    assert validators.time_of_day("23:59") == "23:59"
    assert validators.time_of_day("24:00") is None
    assert validators.time_of_day("9:5") is None
    assert validators.time_to_minutes("10:30") == 630


def test_hex_color():
    assert validators.hex_color("#fff") == "#fff"
    assert validators.hex_color("#4F46E5") == "#4F46E5"
    assert validators.hex_color("red") is None
    assert validators.hex_color("#12345") is None


@pytest.mark.parametrize(
    "value,expected",
    [(0, 0), (100, 100), ("85", 85), (85.0, 85), (85.5, None), (101, None), (-1, None), (True, None), ("x", None)],
)
def test_bounded_int(value, expected):
    assert validators.bounded_int(value, 0, 100) == expected


def test_email_username_password():
    assert validators.email(" User@Example.COM ") == "user@example.com"
    assert validators.email("no-at-sign") is None
    assert validators.username("jane_doe") == "jane_doe"
    assert validators.username("ab") is None
    assert validators.username("has space") is None
    assert validators.password("12345") is None
    assert validators.password("123456") == "123456"
    assert validators.password("x" * 129) is None


def test_tags_dedup_and_limit():
    assert validators.tags("math, algebra,math,, ") == ["math", "algebra"]
    assert validators.tags(["a", "b", "a"]) == ["a", "b"]
    assert len(validators.tags([str(i) for i in range(30)])) == 20
    assert validators.tags(None) == []
