"""Tests for date expression resolution."""

from datetime import datetime, timezone

import pytest
from dateutil.relativedelta import relativedelta

from certgen.utils.dates import format_date, resolve_date

NOW = datetime(2024, 3, 15, 12, 30, 0, tzinfo=timezone.utc)


@pytest.mark.unit
class TestResolveDate:
    """Test resolving relative and absolute date expressions."""

    def test_now(self):
        assert resolve_date("now", now=NOW) == NOW

    def test_named_days(self):
        assert resolve_date("tomorrow", now=NOW) == NOW + relativedelta(days=1)
        assert resolve_date("yesterday", now=NOW) == NOW - relativedelta(days=1)

    def test_relative_future(self):
        assert resolve_date("1 year", now=NOW) == datetime(2025, 3, 15, 12, 30, tzinfo=timezone.utc)
        assert resolve_date("10 years", now=NOW) == datetime(2034, 3, 15, 12, 30, tzinfo=timezone.utc)

    def test_relative_past(self):
        assert resolve_date("5 years ago", now=NOW) == datetime(2019, 3, 15, 12, 30, tzinfo=timezone.utc)

    def test_relative_sequence(self):
        expected = NOW + relativedelta(months=3, days=2)
        assert resolve_date("3 months 2 days", now=NOW) == expected

    def test_negative_and_fortnight(self):
        assert resolve_date("-2 weeks", now=NOW) == NOW - relativedelta(weeks=2)
        assert resolve_date("fortnight", now=NOW) == NOW + relativedelta(weeks=2)

    def test_generalized_time(self):
        assert resolve_date("20300101000000Z") == datetime(2030, 1, 1, tzinfo=timezone.utc)

    def test_generalized_time_without_seconds(self):
        assert resolve_date("203001011235Z") == datetime(2030, 1, 1, 12, 35, tzinfo=timezone.utc)

    def test_iso_date(self):
        assert resolve_date("2030-06-01", now=NOW) == datetime(2030, 6, 1, tzinfo=timezone.utc)

    def test_naive_datetime_is_utc(self):
        assert resolve_date(datetime(2030, 1, 1)) == datetime(2030, 1, 1, tzinfo=timezone.utc)

    def test_invalid_expression(self):
        with pytest.raises(ValueError):
            resolve_date("banana", now=NOW)

    def test_empty_expression(self):
        with pytest.raises(ValueError):
            resolve_date("  ", now=NOW)


@pytest.mark.unit
def test_format_date():
    assert format_date(NOW, "%Y%m%d%H%M%SZ") == "20240315123000Z"
    assert format_date(NOW, "%y%m%d%H%M%SZ") == "240315123000Z"
