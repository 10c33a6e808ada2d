"""Command-line interface for Slab Nest."""

from slabnest.cli.main import cli

__all__ = ["cli"]
