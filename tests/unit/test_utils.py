"""
Tests for core utility functions.
"""

import pytest


class TestParseAmount:

    @pytest.mark.parametrize("value,expected", [
        ("12.50", 12.5),
        (7, 7.0),
        ("  3.10 ", 3.1),
        ("n/a", 0.0),
        (None, 0.0),
        ("nan", 0.0),
        ("inf", 0.0),
    ])
    def test_parse_amount(self, value, expected):
        from core.utils import parse_amount

        assert parse_amount(value) == expected


class TestFormatAmount:

    @pytest.mark.parametrize("value,expected", [
        (0, "0,00"),
        (9.5, "9,50"),
        (1234.5, "1.234,50"),
        (1234567.891, "1.234.567,89"),
    ])
    def test_italian_format(self, value, expected):
        from core.utils import format_amount

        assert format_amount(value) == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
