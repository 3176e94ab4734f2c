"""
Tests for cell value parsing used by pattern sniffing and import coercion.
"""

from datetime import date, datetime

import pandas as pd
import pytest

from asset_import_hub.utils.value_parser import (
    classify_sample_values,
    is_empty_value,
    parse_boolean_value,
    parse_date_or_none,
    parse_date_value,
    parse_number_value,
)


class TestIsEmptyValue:
    """Missing-value detection."""

    @pytest.mark.parametrize("value", [None, "", "   ", float("nan"), pd.NaT, pd.NA])
    def test_empty(self, value):
        assert is_empty_value(value) is True

    @pytest.mark.parametrize("value", [0, False, "0", [], {"a": 1}, date(2024, 1, 1)])
    def test_not_empty(self, value):
        assert is_empty_value(value) is False


class TestParseDateValue:
    """Date parsing for ISO and US-style inputs."""

    def test_date_object_passthrough(self):
        assert parse_date_value(date(2024, 11, 15)) == date(2024, 11, 15)

    def test_datetime_and_timestamp(self):
        assert parse_date_value(datetime(2024, 11, 15, 9, 0)) == date(2024, 11, 15)
        assert parse_date_value(pd.Timestamp("2024-11-15 09:00")) == date(2024, 11, 15)

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2024-11-15", date(2024, 11, 15)),
            (" 2024-11-15 ", date(2024, 11, 15)),
            ("2024-11-15T08:30", date(2024, 11, 15)),
            ("2024-11-15T08:30:00.123Z", date(2024, 11, 15)),
            ("2024-11-15T08:30:00.5", date(2024, 11, 15)),
            ("2024-11-15 23:59:59.12345+02:00", date(2024, 11, 15)),
            ("2024-11-15 23:59:59+05:30", date(2024, 11, 15)),
            ("11/15/2024", date(2024, 11, 15)),
            ("1/5/2024", date(2024, 1, 5)),
        ],
    )
    def test_supported_strings(self, raw, expected):
        assert parse_date_value(raw) == expected

    @pytest.mark.parametrize(
        "raw", ["", None, "2024-13-01", "15/11/2024", "Nov 15 2024", "20241115", 20241115]
    )
    def test_unsupported_values_raise(self, raw):
        with pytest.raises(ValueError) as exc_info:
            parse_date_value(raw)
        assert "Supported formats" in str(exc_info.value)

    def test_lenient_wrapper(self):
        assert parse_date_or_none("not a date") is None
        assert parse_date_or_none("2024-01-02") == date(2024, 1, 2)


class TestParseNumberValue:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("42", 42),
            ("-3.5", -3.5),
            ("1,234,567", 1234567),
            ("1,234.50", 1234.5),
            (".5", 0.5),
            ("1e3", 1000.0),
            (7, 7),
            (2.25, 2.25),
        ],
    )
    def test_numbers(self, raw, expected):
        assert parse_number_value(raw) == expected

    def test_integer_strings_stay_int(self):
        assert isinstance(parse_number_value("12"), int)

    @pytest.mark.parametrize("raw", [True, "", "12 kg", "1,23", "abc", None, [1]])
    def test_non_numbers_raise(self, raw):
        with pytest.raises(ValueError):
            parse_number_value(raw)


class TestParseBooleanValue:
    @pytest.mark.parametrize("raw", [True, "true", "YES", " y ", "T", 1, "1"])
    def test_true_values(self, raw):
        assert parse_boolean_value(raw) is True

    @pytest.mark.parametrize("raw", [False, "False", "no", "N", "f", 0, "0"])
    def test_false_values(self, raw):
        assert parse_boolean_value(raw) is False

    def test_numeric_can_be_disabled(self):
        with pytest.raises(ValueError):
            parse_boolean_value("1", allow_numeric=False)
        with pytest.raises(ValueError):
            parse_boolean_value(0, allow_numeric=False)

    @pytest.mark.parametrize("raw", ["maybe", 2, "", None])
    def test_invalid_raise(self, raw):
        with pytest.raises(ValueError):
            parse_boolean_value(raw)


class TestClassifySampleValues:
    def test_dates(self):
        assert classify_sample_values(["2024-01-01", "02/03/2024", date(2024, 1, 1)]) == "date"

    def test_numbers(self):
        assert classify_sample_values(["1", "2.5", 3, "4,000"]) == "number"

    def test_zero_one_columns_are_numbers(self):
        assert classify_sample_values(["0", "1", "1", "0"]) == "number"

    def test_booleans(self):
        assert classify_sample_values(["yes", "no", "Y", True]) == "boolean"

    def test_ratio_threshold(self):
        values = ["1", "2", "3", "4", "x"]

        assert classify_sample_values(values, min_ratio=0.8) == "number"
        assert classify_sample_values(values, min_ratio=0.9) is None

    def test_text_and_empty(self):
        assert classify_sample_values(["pump", "valve"]) is None
        assert classify_sample_values([]) is None
