"""
Unit tests for MISMO datatype formatting.

Each case asserts both halves of the result: the formatted MISMO text and
whether the value is acceptable for the datatype.
"""

from datetime import date, datetime, timezone

import pytest

from mismo_ldd.config.config_manager import ConfigManager
from mismo_ldd.mapping.datatype_formatter import DatatypeFormatter, FormatResult


@pytest.fixture(scope="module")
def formatter():
    return DatatypeFormatter(ConfigManager().load_ldd_contract())


@pytest.mark.parametrize("datatype,value,expected", [
    # Amount: 2 places, half up
    ("Amount", "350000", ("350000.00", True)),
    ("Amount", 1234.565, ("1234.57", True)),
    ("Amount", "-12.5", ("-12.50", True)),
    ("Amount", "abc", (None, False)),
    ("Amount", True, (None, False)),
    # Percent and RatePercent: 4 places with range checks
    ("Percent", 80, ("80.0000", True)),
    ("Percent", 0, ("0.0000", True)),
    ("Percent", "150", ("150.0000", False)),
    ("Percent", "-1", ("-1.0000", False)),
    ("RatePercent", "7.125", ("7.1250", True)),
    ("RatePercent", 55, ("55.0000", False)),
    ("Ratio", "1.25", ("1.2500", True)),
    ("Ratio", "1.23456", ("1.2346", True)),
    # Integer, Count, CreditScore
    ("Integer", "1985", ("1985", True)),
    ("Integer", "12.7", ("12", False)),
    ("Integer", "twelve", (None, False)),
    ("Count", "3", ("3", True)),
    ("Count", "-1", (None, False)),
    ("CreditScore", 720, ("720", True)),
    ("CreditScore", "900", (None, False)),
    ("CreditScore", 299, (None, False)),
    # Digit-only identifiers
    ("Phone", "(512) 555-0142", ("5125550142", True)),
    ("Phone", "1-512-555-0142", ("5125550142", True)),
    ("Phone", "555-0142", (None, False)),
    ("SSN", "123-45-6789", ("123456789", True)),
    ("SSN", "12345", (None, False)),
    ("EIN", "12-3456789", ("123456789", True)),
    ("PostalCode", "78701", ("78701", True)),
    ("PostalCode", "78701-1234", ("787011234", True)),
    ("PostalCode", "7870", (None, False)),
    # StateCode through the StateType vocabulary
    ("StateCode", " tx ", ("TX", True)),
    ("StateCode", "AE", ("AE", True)),
    ("StateCode", "ZZ", (None, False)),
    # String
    ("String", "  Austin  ", ("Austin", True)),
    # YesNo
    ("YesNo", True, ("Y", True)),
    ("YesNo", False, ("N", True)),
    ("YesNo", "yes", ("Y", True)),
    ("YesNo", "0", ("N", True)),
    ("YesNo", "N", ("N", True)),
    ("YesNo", None, ("N", True)),
])
def test_format_value(formatter, datatype, value, expected):
    result = formatter.format_value(value, datatype)
    assert (result.formatted, result.valid) == expected


class TestDates:

    @pytest.mark.parametrize("value", ["2024-03-15", "03/15/2024", "2024/03/15", date(2024, 3, 15)])
    def test_date_formats(self, formatter, value):
        assert formatter.format_value(value, "Date") == FormatResult("2024-03-15", True)

    def test_unparseable_date(self, formatter):
        assert formatter.format_value("not a date", "Date") == FormatResult(None, False)

    def test_datetime_is_utc_with_milliseconds(self, formatter):
        result = formatter.format_value("2024-03-15T10:30:00Z", "DateTime")
        assert result == FormatResult("2024-03-15T10:30:00.000Z", True)

    def test_datetime_offset_is_converted_to_utc(self, formatter):
        result = formatter.format_value("2024-03-15T22:30:00.250-05:00", "DateTime")
        assert result.formatted == "2024-03-16T03:30:00.250Z"

    def test_datetime_object(self, formatter):
        value = datetime(2024, 3, 15, 8, 0, tzinfo=timezone.utc)
        assert formatter.format_value(value, "DateTime").formatted == "2024-03-15T08:00:00.000Z"


class TestFormatterEdges:

    @pytest.mark.parametrize("datatype", ["Amount", "Date", "Phone", "StateCode", "String", "CreditScore"])
    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_values_are_valid_and_unformatted(self, formatter, datatype, value):
        assert formatter.format_value(value, datatype) == FormatResult(None, True)

    def test_unknown_datatype_passes_through(self, formatter):
        value = {"lat": 30.27}
        assert formatter.format_value(value, "GeoPoint") == FormatResult(value, True)

    def test_string_truncation(self, formatter):
        assert formatter.format_value("x" * 300, "String").formatted == "x" * 255
        assert formatter.format_value("Rivera", "String", {"max_length": 3}).formatted == "Riv"

    def test_result_serialization(self, formatter):
        assert formatter.format_value("78701", "PostalCode").to_dict() == {"formatted": "78701", "valid": True}


class TestOutOfRangeMagnitudes:
    """Values that parse but cannot be represented are reported invalid, never raised."""

    @pytest.mark.parametrize("datatype,value", [
        ("Amount", "12345678901234567890123456789"),
        ("Percent", "1e40"),
        ("RatePercent", "9" * 40),
        ("Ratio", "1e30"),
        ("Integer", "1e5000"),
        ("Count", "1e5000"),
        ("CreditScore", "-1e5000"),
    ])
    def test_huge_numbers_are_invalid(self, formatter, datatype, value):
        assert formatter.format_value(value, datatype) == FormatResult(None, False)

    def test_largest_representable_amount_still_formats(self, formatter):
        value = "1" * 26
        assert formatter.format_value(value, "Amount") == FormatResult(value + ".00", True)

    @pytest.mark.parametrize("datatype", ["Date", "DateTime"])
    @pytest.mark.parametrize("value", ["0001-01-01T00:00:00+05:00", "9999-12-31T23:00:00-05:00"])
    def test_offset_outside_year_range_is_invalid(self, formatter, datatype, value):
        assert formatter.format_value(value, datatype) == FormatResult(None, False)


class TestStringOptions:

    def test_zero_max_length_is_honoured(self, formatter):
        assert formatter.format_value("Rivera", "String", {"max_length": 0}) == FormatResult("", True)

    def test_max_length_takes_precedence_over_camel_case(self, formatter):
        result = formatter.format_value("Rivera", "String", {"max_length": 4, "maxLength": 2})
        assert result.formatted == "Rive"

    @pytest.mark.parametrize("max_length", ["wide", -1, True])
    def test_unusable_max_length_is_invalid(self, formatter, max_length):
        assert formatter.format_value("Rivera", "String", {"max_length": max_length}) == FormatResult(None, False)
