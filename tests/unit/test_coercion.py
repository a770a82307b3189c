"""
Unit tests for raw value coercion.
"""

from datetime import date, datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.core.transforms.coercion import compact_int_to_date, to_date, to_float, to_int, to_text


class TestToText:

    def test_trims(self):
        assert to_text("  Jon ") == "Jon"

    def test_blank_is_none(self):
        assert to_text("   ") is None
        assert to_text(None) is None

    def test_non_string_is_stringified(self):
        assert to_text(42) == "42"


class TestToInt:

    @pytest.mark.parametrize("raw,expected", [
        ("42", 42), (" 7 ", 7), ("42.0", 42), (42.0, 42), (5, 5), ("", None), (None, None),
    ])
    def test_valid_values(self, raw, expected):
        assert to_int(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "4.5", 4.5])
    def test_invalid_values_raise(self, raw):
        with pytest.raises(ValueError):
            to_int(raw)

    @given(st.integers())
    def test_property_integer_strings_roundtrip(self, value):
        assert to_int(str(value)) == value


class TestToFloat:

    def test_numeric_string(self):
        assert to_float("13.5") == 13.5

    def test_blank_is_none(self):
        assert to_float("") is None

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            to_float("n/a")


class TestToDate:

    @pytest.mark.parametrize("raw", [
        "2011-01-01", "2011-01-01 00:00:00", "2011-01-01T12:30:00", date(2011, 1, 1),
        datetime(2011, 1, 1, 8, 0),
    ])
    def test_accepted_formats(self, raw):
        assert to_date(raw) == date(2011, 1, 1)

    def test_blank_is_none(self):
        assert to_date(" ") is None

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            to_date("01/01/2011")


class TestCompactIntToDate:

    def test_valid(self):
        assert compact_int_to_date("20101229") == date(2010, 12, 29)
        assert compact_int_to_date(20101229) == date(2010, 12, 29)

    @pytest.mark.parametrize("raw", [0, "0", "5489", "201012290", "20101332", None, "", "garbage", -20101229])
    def test_invalid_yield_none(self, raw):
        assert compact_int_to_date(raw) is None
