"""Tests for shared utilities."""

import logging

import pytest

from slabnest.utils import cm_to_mm, format_number, get_logger, mm_to_cm, round_cm


class TestLogging:
    """Tests for logger helpers."""

    def test_logger_namespace(self):
        """Test module loggers live under the package logger."""
        logger = get_logger("nesting.optimizer")

        assert isinstance(logger, logging.Logger)
        assert logger.name == "slabnest.nesting.optimizer"


class TestFormatNumber:
    """Tests for format_number()."""

    @pytest.mark.parametrize("value,expected", [
        (10.0, "10"),
        (12.5, "12.5"),
        (0.1234567, "0.123457"),
        (-0.0000001, "0"),
        (0, "0"),
    ])
    def test_trims_zeros(self, value, expected):
        """Test trailing zeros and negative zero are dropped."""
        assert format_number(value) == expected

    def test_precision(self):
        """Test custom precision."""
        assert format_number(1.23456, precision=2) == "1.23"


class TestUnits:
    """Tests for unit conversion."""

    def test_conversions(self):
        """Test centimeter and millimeter conversion."""
        assert cm_to_mm(8.5) == 85
        assert mm_to_cm(85) == 8.5

    def test_round_cm(self):
        """Test rounding to the nearest millimeter."""
        assert round_cm(12.3456) == pytest.approx(12.3)
        assert round_cm(12.36) == pytest.approx(12.4)
