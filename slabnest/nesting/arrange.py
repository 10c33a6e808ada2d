"""Quick arrange: deterministic left-to-right, top-to-bottom shelf packing."""

from typing import List, Sequence

from slabnest.nesting.collision import MARGIN
from slabnest.nesting.geometry import shape_size
from slabnest.shapes.model import Shape, Slab
from slabnest.utils import get_logger

logger = get_logger("nesting.arrange")

# Smallest gap left between neighbouring shapes (cm)
MIN_SPACING = 0.5


def arrange(
    shapes: Sequence[Shape],
    spacing: float,
    slab: Slab,
    margin: float = MARGIN,
    min_spacing: float = MIN_SPACING,
) -> List[Shape]:
    """
    Lay shapes out in rows, in input order.

    A row wraps when the next shape would cross the right margin. Shapes are
    never rotated and nothing is re-checked: spacing is enforced by the
    cursor arithmetic. Shapes that run past the bottom of the slab are still
    placed and a warning is logged, so callers must compare the result with
    the slab themselves.

    Args:
        shapes: Shapes to place
        spacing: Requested gap between shapes (cm)
        slab: Target slab
        margin: Clearance from the slab edges (cm)
        min_spacing: Lower bound applied to ``spacing``

    Returns:
        New shape values moved to their row positions
    """
    if not shapes:
        return []

    gap = max(spacing, min_spacing)
    right_edge = slab.width - margin
    bottom_edge = slab.height - margin

    arranged = []
    x = margin
    y = margin
    row_height = 0.0
    row_count = 0

    for shape in shapes:
        width, height = shape_size(shape)

        # Wrap to a new row
        if row_count > 0 and x + width + margin > right_edge:
            x = margin
            y += row_height + gap
            row_height = 0.0
            row_count = 0

        if y + height > bottom_edge:
            logger.warning(
                f"Shape {shape.id} runs past the slab bottom at y={y:.1f}cm; "
                f"consider a larger slab or fewer shapes"
            )

        arranged.append(shape.moved_to(x, y))

        x += width + gap
        row_height = max(row_height, height)
        row_count += 1

    return arranged
