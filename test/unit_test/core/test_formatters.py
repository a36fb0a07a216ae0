"""Unit tests for date and currency formatting."""

from datetime import date, datetime, timedelta, timezone

import pytest

from mis_compras.core.formatters import (
    INVALID_DATE,
    NOT_AVAILABLE,
    format_currency,
    format_date,
    format_date_long,
    format_datetime,
    format_month_year,
    format_relative_time,
)


class TestDateFormatting:
    """Test the date formatters."""

    def test_format_date_from_values(self):
        assert format_date(date(2024, 1, 15)) == "15/01/2024"
        assert format_date(datetime(2024, 1, 15, 14, 30)) == "15/01/2024"
        assert format_date("2024-01-15T14:30:00Z") == "15/01/2024"

    def test_format_datetime(self):
        assert format_datetime(datetime(2024, 1, 15, 14, 30)) == "15/01/2024 14:30"

    def test_aware_datetimes_are_shown_in_utc(self):
        bogota = timezone(timedelta(hours=-5))
        assert format_datetime(datetime(2024, 1, 15, 21, 0, tzinfo=bogota)) == "16/01/2024 02:00"

    def test_format_date_long(self):
        assert format_date_long(date(2024, 1, 15)) == "Lunes, 15 de Enero de 2024"

    def test_format_month_year(self):
        assert format_month_year("2024-12-01") == "Diciembre 2024"

    @pytest.mark.parametrize("formatter", [format_date, format_datetime, format_date_long, format_month_year])
    def test_missing_and_invalid_values(self, formatter):
        assert formatter(None) == NOT_AVAILABLE
        assert formatter("") == NOT_AVAILABLE
        assert formatter("not a date") == INVALID_DATE


class TestRelativeTime:
    """Test the relative time descriptions."""

    NOW = datetime(2024, 6, 10, 12, 0, 0)

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=30), "Hace un momento"),
            (timedelta(minutes=1), "Hace 1 minuto"),
            (timedelta(minutes=45), "Hace 45 minutos"),
            (timedelta(hours=1), "Hace 1 hora"),
            (timedelta(hours=5), "Hace 5 horas"),
            (timedelta(days=1), "Hace 1 día"),
            (timedelta(days=6), "Hace 6 días"),
        ],
    )
    def test_recent_moments(self, delta, expected):
        assert format_relative_time(self.NOW - delta, now=self.NOW) == expected

    def test_older_than_a_week_shows_the_date(self):
        assert format_relative_time(self.NOW - timedelta(days=8), now=self.NOW) == "02/06/2024"

    def test_invalid(self):
        assert format_relative_time(None) == NOT_AVAILABLE
        assert format_relative_time("yesterday") == INVALID_DATE


class TestCurrency:
    """Test Colombian peso formatting."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1_500_000, "$ 1.500.000"),
            (0, "$ 0"),
            (999, "$ 999"),
            (1234.6, "$ 1.235"),
            ("2500000", "$ 2.500.000"),
            (-45_000, "-$ 45.000"),
        ],
    )
    def test_amounts(self, value, expected):
        assert format_currency(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", float("nan"), True])
    def test_garbage_renders_zero(self, value):
        assert format_currency(value) == "$0"
