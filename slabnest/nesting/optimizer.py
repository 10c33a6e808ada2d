"""Multi-strategy nesting optimizer.

Runs the bin packer over a fixed menu of sort orders, each with rotation on
and off, validates every candidate and keeps the best one. A candidate wins
if it places more shapes, or the same number with higher efficiency.

The search is deterministic and bounded: ``2 * len(STRATEGIES)`` iterations,
no randomness, no early exit. ``iter_optimize`` yields after every
iteration; that is the point where a host can repaint, sleep or stop.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from slabnest.nesting.bin_packer import MIN_SPACING, pack_shapes
from slabnest.nesting.collision import MARGIN, is_valid_arrangement
from slabnest.nesting.geometry import shape_area, shape_size
from slabnest.shapes.model import Shape, Slab
from slabnest.utils import get_logger

logger = get_logger("nesting.optimizer")


def _area(shape: Shape) -> float:
    return shape_area(shape)


def _width(shape: Shape) -> float:
    return shape_size(shape)[0]


def _height(shape: Shape) -> float:
    return shape_size(shape)[1]


def _perimeter(shape: Shape) -> float:
    width, height = shape_size(shape)
    return 2 * (width + height)


def _aspect_ratio(shape: Shape) -> float:
    width, height = shape_size(shape)
    short = min(width, height)
    if short <= 0:
        return 0.0
    return max(width, height) / short


def _mixed(shape: Shape) -> float:
    width, height = shape_size(shape)
    return width * height + (width + height)


@dataclass(frozen=True)
class SortStrategy:
    """A named sort order applied before packing."""
    name: str
    key: Callable[[Shape], float]
    descending: bool = True

    def apply(self, shapes: Sequence[Shape]) -> List[Shape]:
        # sorted() is stable, also with reverse=True
        return sorted(shapes, key=self.key, reverse=self.descending)


STRATEGIES: Tuple[SortStrategy, ...] = (
    SortStrategy("area-desc", _area),
    SortStrategy("area-asc", _area, descending=False),
    SortStrategy("width-desc", _width),
    SortStrategy("height-desc", _height),
    SortStrategy("perimeter-desc", _perimeter),
    SortStrategy("aspect-ratio", _aspect_ratio),
    SortStrategy("mixed-strategy", _mixed),
)

ROTATION_MODES = (True, False)


@dataclass
class OptimizationResult:
    """Best layout found by the optimizer."""
    shapes: List[Shape] = field(default_factory=list)
    efficiency: float = 0.0  # Percentage of slab area covered
    used_area: float = 0.0
    total_area: float = 0.0
    iteration: int = 0  # Iteration that produced this layout (0 = none)
    strategy: Optional[str] = None
    allow_rotation: Optional[bool] = None

    @property
    def placed_count(self) -> int:
        return len(self.shapes)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "shapes": [s.to_dict() for s in self.shapes],
            "efficiency": self.efficiency,
            "used_area": self.used_area,
            "total_area": self.total_area,
            "iteration": self.iteration,
            "strategy": self.strategy,
            "allow_rotation": self.allow_rotation,
            "placed_count": self.placed_count,
        }


@dataclass
class OptimizationStep:
    """Progress snapshot yielded after each iteration."""
    iteration: int
    total: int
    strategy: str
    allow_rotation: bool
    candidate_count: int
    valid: bool
    best: OptimizationResult

    @property
    def percent(self) -> float:
        return self.iteration / self.total * 100


ProgressCallback = Callable[[float, OptimizationResult], None]


def used_area(shapes: Sequence[Shape]) -> float:
    """Sum of the bounding-box areas of ``shapes``."""
    return sum(shape_area(s) for s in shapes)


def calculate_efficiency(shapes: Sequence[Shape], slab: Slab) -> float:
    """Percentage of the slab covered by the shapes' bounding boxes."""
    slab_area = slab.width * slab.height
    if slab_area <= 0:
        return 0.0
    return used_area(shapes) / slab_area * 100


def _is_better(candidate: List[Shape], efficiency: float, best: OptimizationResult) -> bool:
    if len(candidate) != len(best.shapes):
        return len(candidate) > len(best.shapes)
    return efficiency > best.efficiency


def _empty_result(slab: Slab) -> OptimizationResult:
    return OptimizationResult(total_area=slab.width * slab.height)


def total_iterations(strategies: Sequence[SortStrategy] = STRATEGIES) -> int:
    return len(strategies) * len(ROTATION_MODES)


def iter_optimize(
    shapes: Sequence[Shape],
    spacing: float,
    slab: Slab,
    margin: float = MARGIN,
    min_spacing: float = MIN_SPACING,
    strategies: Sequence[SortStrategy] = STRATEGIES,
) -> Iterator[OptimizationStep]:
    """
    Run the search one iteration at a time.

    Yields an OptimizationStep after every strategy/rotation combination.
    The ``best`` of the final step is the overall result; stopping the
    iteration early abandons the search. Empty input yields nothing.
    """
    if not shapes:
        return

    gap = max(spacing, min_spacing)
    total = total_iterations(strategies)
    best = _empty_result(slab)
    iteration = 0

    for strategy in strategies:
        for allow_rotation in ROTATION_MODES:
            iteration += 1
            candidate: List[Shape] = []
            valid = False

            try:
                ordered = strategy.apply(shapes)
                packed = pack_shapes(
                    ordered,
                    spacing,
                    slab,
                    allow_rotation=allow_rotation,
                    margin=margin,
                    min_spacing=min_spacing,
                )
                candidate = packed.placed
                valid = bool(candidate) and is_valid_arrangement(candidate, slab, gap, margin)
            except Exception as e:
                logger.warning(f"Strategy {strategy.name} (rotation={allow_rotation}) failed: {e}")
                valid = False

            if valid:
                efficiency = calculate_efficiency(candidate, slab)
                if _is_better(candidate, efficiency, best):
                    best = OptimizationResult(
                        shapes=candidate,
                        efficiency=efficiency,
                        used_area=used_area(candidate),
                        total_area=slab.width * slab.height,
                        iteration=iteration,
                        strategy=strategy.name,
                        allow_rotation=allow_rotation,
                    )
                    logger.debug(
                        f"New best from {strategy.name} (rotation={allow_rotation}): "
                        f"{len(candidate)} shapes, {efficiency:.1f}%"
                    )
            elif candidate:
                logger.debug(f"Rejected {strategy.name} (rotation={allow_rotation}): invalid arrangement")

            yield OptimizationStep(
                iteration=iteration,
                total=total,
                strategy=strategy.name,
                allow_rotation=allow_rotation,
                candidate_count=len(candidate),
                valid=valid,
                best=best,
            )


def optimize(
    shapes: Sequence[Shape],
    spacing: float,
    slab: Slab,
    on_progress: Optional[ProgressCallback] = None,
    delay: float = 0.0,
    margin: float = MARGIN,
    min_spacing: float = MIN_SPACING,
) -> OptimizationResult:
    """
    Find the best packing of ``shapes`` on ``slab``.

    Args:
        shapes: Shapes to place
        spacing: Requested gap between shapes (cm)
        slab: Target slab
        on_progress: Called as ``on_progress(percent, best_so_far)`` after
            every iteration
        delay: Seconds to sleep between iterations
        margin: Clearance from the slab edges (cm)
        min_spacing: Lower bound applied to ``spacing``

    Returns:
        The best validated layout; shapes that did not fit are absent, so
        compare ``placed_count`` with the input length.
    """
    best = _empty_result(slab)
    start = time.monotonic()

    for step in iter_optimize(shapes, spacing, slab, margin=margin, min_spacing=min_spacing):
        best = step.best
        if on_progress:
            on_progress(step.percent, best)
        if delay > 0 and step.iteration < step.total:
            time.sleep(delay)

    if shapes:
        logger.info(
            f"Placed {best.placed_count}/{len(shapes)} shapes, "
            f"efficiency {best.efficiency:.1f}% ({time.monotonic() - start:.2f}s)"
        )
    return best


async def optimize_async(
    shapes: Sequence[Shape],
    spacing: float,
    slab: Slab,
    on_progress: Optional[ProgressCallback] = None,
    delay: float = 0.0,
    margin: float = MARGIN,
    min_spacing: float = MIN_SPACING,
) -> OptimizationResult:
    """Same search as ``optimize``, yielding to the event loop between iterations."""
    best = _empty_result(slab)

    for step in iter_optimize(shapes, spacing, slab, margin=margin, min_spacing=min_spacing):
        best = step.best
        if on_progress:
            on_progress(step.percent, best)
        if step.iteration < step.total:
            await asyncio.sleep(delay)

    return best
