"""Nesting module for placing cut pieces on a stock slab.

Provides collision checks, a quick row packer, a max-rects bin packer and
the multi-strategy optimizer.
"""

from slabnest.nesting.geometry import (
    BoundingBox,
    bounding_box,
    outline_polygon,
    shape_area,
    shape_size,
)
from slabnest.nesting.collision import (
    collides,
    find_collisions,
    is_valid_arrangement,
    out_of_bounds,
    within_bounds,
)
from slabnest.nesting.arrange import arrange
from slabnest.nesting.bin_packer import PackResult, pack_shapes
from slabnest.nesting.optimizer import (
    STRATEGIES,
    OptimizationResult,
    OptimizationStep,
    iter_optimize,
    optimize,
    optimize_async,
)
from slabnest.nesting.nester import (
    NestingConfig,
    NestingResult,
    NestingStrategy,
    SlabNester,
    create_nester,
    nest_shapes,
)

__all__ = [
    "BoundingBox",
    "bounding_box",
    "outline_polygon",
    "shape_area",
    "shape_size",
    "collides",
    "find_collisions",
    "is_valid_arrangement",
    "out_of_bounds",
    "within_bounds",
    "arrange",
    "PackResult",
    "pack_shapes",
    "STRATEGIES",
    "OptimizationResult",
    "OptimizationStep",
    "iter_optimize",
    "optimize",
    "optimize_async",
    "NestingConfig",
    "NestingResult",
    "NestingStrategy",
    "SlabNester",
    "create_nester",
    "nest_shapes",
]
