"""
Tests for display formatters - deterministic number, percent, price and date strings.
"""

import math
import pytest
from datetime import date, datetime

from reports.formatters import (
    format_currency,
    format_date_display,
    format_number,
    format_percentage,
    format_price,
    FormatterError,
    NOT_AVAILABLE
)


class TestFormatNumber:
    """Tests for format_number()."""

    @pytest.mark.parametrize('value,expected', [
        (1500000, '1.50M'),
        (950, '950.00'),
        (2500, '2.50K'),
        (3200000000, '3.20B'),
        (0, '0.00'),
    ])
    def test_suffixes(self, value, expected):
        assert format_number(value) == expected

    def test_missing_and_non_finite(self):
        assert format_number(None) == NOT_AVAILABLE
        assert format_number(math.nan) == NOT_AVAILABLE
        assert format_number(math.inf) == NOT_AVAILABLE

    def test_rejects_non_numeric(self):
        with pytest.raises(FormatterError):
            format_number('1000')
        with pytest.raises(FormatterError):
            format_number(True)


class TestFormatPercentage:
    """Tests for format_percentage()."""

    def test_signs(self):
        assert format_percentage(12.5) == '+12.50%'
        assert format_percentage(-3.1) == '-3.10%'
        assert format_percentage(0) == '+0.00%'

    def test_missing(self):
        assert format_percentage(None) == NOT_AVAILABLE
        assert format_percentage(math.nan) == NOT_AVAILABLE


class TestFormatCurrencyAndPrice:
    """Tests for format_currency() and format_price()."""

    def test_currency(self):
        assert format_currency(1500000) == '$1.50M'
        assert format_currency(None) == NOT_AVAILABLE

    def test_price_precision_scales(self):
        assert format_price(1234.5) == '$1,234.5000'
        assert format_price(0.05) == '$0.050000'
        assert format_price(0.00001234) == '$0.00001234'
        assert format_price(None) == NOT_AVAILABLE


class TestFormatDateDisplay:
    """Tests for format_date_display()."""

    def test_inputs(self):
        assert format_date_display('2025-07-15') == 'July 15, 2025'
        assert format_date_display('2025-07-15T09:30:00Z') == 'July 15, 2025'
        assert format_date_display(date(2025, 7, 5)) == 'July 05, 2025'
        assert format_date_display(datetime(2025, 12, 1, 8, 0)) == 'December 01, 2025'

    def test_invalid(self):
        with pytest.raises(FormatterError):
            format_date_display('not-a-date')
        with pytest.raises(FormatterError):
            format_date_display(20250715)
