"""Shared utilities for Slab Nest."""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Log records go to stderr so command output stays machine-readable
err_console = Console(stderr=True)

# Centimeters (model units) to millimeters (interchange units)
CM_TO_MM = 10.0


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Set up logging with Rich handler."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
    )
    return logging.getLogger("slabnest")


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module."""
    return logging.getLogger(f"slabnest.{name}")


def format_number(value: float, precision: int = 6) -> str:
    """Format a coordinate without trailing zeros (``10.0`` -> ``10``)."""
    text = f"{value:.{precision}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def cm_to_mm(value: float) -> float:
    """Convert model centimeters to interchange millimeters."""
    return value * CM_TO_MM


def mm_to_cm(value: float) -> float:
    """Convert interchange millimeters to model centimeters."""
    return value / CM_TO_MM


def round_cm(value: float) -> float:
    """Round a length to the nearest millimeter, expressed in centimeters."""
    return round(value * 10) / 10
