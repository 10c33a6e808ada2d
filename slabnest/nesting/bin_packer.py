"""Max-rects bin packing of shape bounding boxes via rectpack.

Each shape is reduced to its bounding box, padded, and packed into a single
bin the size of the usable slab area. Placements are turned back into shapes;
a rotated rectangle or triangle comes back with its dimensions swapped.
"""

import decimal
from dataclasses import dataclass, field
from typing import List, Sequence

import rectpack

from slabnest.nesting.collision import MARGIN
from slabnest.nesting.geometry import shape_size
from slabnest.shapes.model import Shape, Slab
from slabnest.utils import get_logger

logger = get_logger("nesting.bin_packer")

# Smallest padding left between packed rectangles (cm)
MIN_SPACING = 0.5

# Decimal digits kept when handing lengths to rectpack
PRECISION = 3

PACK_ALGORITHMS = {
    "bssf": rectpack.MaxRectsBssf,
    "baf": rectpack.MaxRectsBaf,
    "blsf": rectpack.MaxRectsBlsf,
    "bl": rectpack.MaxRectsBl,
}

_QUANTUM = decimal.Decimal(1).scaleb(-PRECISION)


@dataclass
class PackResult:
    """Outcome of one packing run."""
    placed: List[Shape] = field(default_factory=list)
    rotated_ids: List[str] = field(default_factory=list)
    unplaced_ids: List[str] = field(default_factory=list)

    @property
    def placed_count(self) -> int:
        return len(self.placed)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "placed": [s.to_dict() for s in self.placed],
            "rotated_ids": self.rotated_ids,
            "unplaced_ids": self.unplaced_ids,
        }


def _bin_length(value: float) -> decimal.Decimal:
    """Bin sides round down so nothing is placed past the usable area."""
    return decimal.Decimal(value).quantize(_QUANTUM, rounding=decimal.ROUND_DOWN)


def _new_packer(allow_rotation: bool, algorithm: str):
    pack_algo = PACK_ALGORITHMS.get(algorithm)
    if pack_algo is None:
        raise ValueError(f"Unknown packing algorithm: {algorithm}")

    # Offline mode with the caller's order kept: the optimizer sorts first
    return rectpack.newPacker(
        mode=rectpack.PackingMode.Offline,
        bin_algo=rectpack.PackingBin.BBF,
        pack_algo=pack_algo,
        sort_algo=rectpack.SORT_NONE,
        rotation=allow_rotation,
    )


def pack_shapes(
    shapes: Sequence[Shape],
    spacing: float,
    slab: Slab,
    allow_rotation: bool = True,
    margin: float = MARGIN,
    min_spacing: float = MIN_SPACING,
    algorithm: str = "bssf",
) -> PackResult:
    """
    Pack shapes onto the slab with a max-rects bin packer.

    Args:
        shapes: Shapes to pack, in the order the packer should see them
        spacing: Requested gap between shapes (cm)
        slab: Target slab
        allow_rotation: Let the packer turn rectangles by 90 degrees
        margin: Clearance from the slab edges (cm)
        min_spacing: Lower bound applied to ``spacing``
        algorithm: Max-rects placement rule (``bssf``, ``baf``, ``blsf``, ``bl``)

    Returns:
        PackResult with placed shapes; shapes that did not fit are listed
        in ``unplaced_ids`` and left out of ``placed``.
    """
    result = PackResult()
    if not shapes:
        return result

    padding = max(spacing, min_spacing)
    usable_width = slab.width - 2 * margin
    usable_height = slab.height - 2 * margin

    if usable_width <= 0 or usable_height <= 0:
        logger.warning(f"Slab {slab.width}x{slab.height}cm leaves no usable area")
        result.unplaced_ids = [s.id for s in shapes]
        return result

    packer = _new_packer(allow_rotation, algorithm)

    # Padding is added to the bin too, so it only ever separates rectangles
    packer.add_bin(_bin_length(usable_width + padding), _bin_length(usable_height + padding))

    sizes = {}
    for index, shape in enumerate(shapes):
        width, height = shape_size(shape)
        rect_w = rectpack.float2dec(width + padding, PRECISION)
        rect_h = rectpack.float2dec(height + padding, PRECISION)
        if rect_w <= 0 or rect_h <= 0:
            logger.debug(f"Skipping zero-size shape {shape.id}")
            continue
        sizes[index] = (rect_w, rect_h)
        packer.add_rect(rect_w, rect_h, rid=index)

    packer.pack()

    placed_indices = set()
    for _bin, x, y, w, h, rid in packer.rect_list():
        shape = shapes[rid]
        rect_w, rect_h = sizes[rid]
        turned = rect_w != rect_h and w != rect_w

        px = float(x) + margin
        py = float(y) + margin

        if turned and shape.can_rotate:
            placed = shape.rotated().moved_to(px, py)
            result.rotated_ids.append(shape.id)
        else:
            if turned:
                logger.debug(f"Ignoring packer rotation for {shape.type.value} {shape.id}")
            placed = shape.moved_to(px, py)

        result.placed.append(placed)
        placed_indices.add(rid)

    result.unplaced_ids = [s.id for i, s in enumerate(shapes) if i not in placed_indices]
    if result.unplaced_ids:
        logger.debug(f"{len(result.unplaced_ids)} of {len(shapes)} shapes did not fit")

    return result
