"""Slab Nest - cut-piece nesting for rectangular stock slabs."""

__version__ = "0.1.0"
