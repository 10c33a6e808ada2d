"""
DXF Import for slab layouts.

Reads closed polylines and circles from a DXF drawing (millimeters) and turns
them back into shapes (centimeters). Outlines are classified by vertex
count: three is a triangle, four a rectangle, six an L-shape. The slab is
the polyline on the SLAB layer, or failing that the first large outline
anchored at the origin.
"""

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ezdxf import recover
from ezdxf.lldxf.const import DXFStructureError

from slabnest.shapes.model import Circle, LShape, Rectangle, Shape, Slab, Triangle
from slabnest.utils import get_logger, mm_to_cm, round_cm

logger = get_logger("export.dxf_import")

Point = Tuple[float, float]

# Outlines wider and taller than this (cm) at the origin are taken as the slab
SLAB_MIN_SIZE = 50.0

SLAB_LAYER = "SLAB"

# Coordinate tolerance when matching vertices (cm)
TOLERANCE = 0.05

# Bounding-box corner missing from an L outline -> corner the legs meet at
_NOTCH_TO_CORNER = {
    ("max", "max"): "tl",
    ("min", "max"): "tr",
    ("max", "min"): "bl",
    ("min", "min"): "br",
}


class DXFImportError(Exception):
    """Raised when DXF content cannot be read at all."""


@dataclass
class ImportResult:
    """Shapes and slab recovered from a DXF drawing."""
    shapes: List[Shape] = field(default_factory=list)
    slab: Optional[Slab] = None
    skipped: int = 0  # Entities that could not be converted

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "slab": self.slab.to_dict() if self.slab else None,
            "shapes": [s.to_dict() for s in self.shapes],
            "skipped": self.skipped,
        }


def _normalize(points: Sequence[Point]) -> List[Point]:
    """Convert to cm, drop the closing vertex and repeated neighbours."""
    result: List[Point] = []
    for x, y in points:
        point = (round_cm(mm_to_cm(x)), round_cm(mm_to_cm(y)))
        if result and _same(point, result[-1]):
            continue
        result.append(point)
    if len(result) > 1 and _same(result[0], result[-1]):
        result.pop()
    return result


def _same(a: Point, b: Point) -> bool:
    return abs(a[0] - b[0]) <= TOLERANCE and abs(a[1] - b[1]) <= TOLERANCE


def _bounds(points: Sequence[Point]) -> Tuple[float, float, float, float]:
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def _lshape_from_outline(shape_id: str, points: Sequence[Point]) -> Optional[LShape]:
    """
    Recover an L-shape from its six corners.

    The bounding-box corner that is not a vertex is the notch; the one
    vertex strictly inside the box is the inner elbow, and its distance
    from the box edges gives the leg sizes.
    """
    min_x, min_y, max_x, max_y = _bounds(points)
    width = round_cm(max_x - min_x)
    height = round_cm(max_y - min_y)

    missing = [
        (sx, sy)
        for sx, cx in (("min", min_x), ("max", max_x))
        for sy, cy in (("min", min_y), ("max", max_y))
        if not any(_same(p, (cx, cy)) for p in points)
    ]
    inner = [
        p for p in points
        if min_x + TOLERANCE < p[0] < max_x - TOLERANCE
        and min_y + TOLERANCE < p[1] < max_y - TOLERANCE
    ]
    if len(missing) != 1 or len(inner) != 1:
        return None

    corner = _NOTCH_TO_CORNER[missing[0]]
    ix, iy = inner[0]
    leg_width = ix - min_x if corner in ("tl", "bl") else max_x - ix
    leg_height = iy - min_y if corner in ("tl", "tr") else max_y - iy

    return LShape(
        id=shape_id,
        width=width,
        height=height,
        leg_width=round_cm(leg_width),
        leg_height=round_cm(leg_height),
        corner=corner,
        x=min_x,
        y=min_y,
    )


def _shape_from_outline(shape_id: str, points: Sequence[Point]) -> Shape:
    min_x, min_y, max_x, max_y = _bounds(points)
    width = round_cm(max_x - min_x)
    height = round_cm(max_y - min_y)

    if len(points) == 3:
        return Triangle(id=shape_id, base=width, height=height, x=min_x, y=min_y)

    if len(points) == 6:
        lshape = _lshape_from_outline(shape_id, points)
        if lshape is not None:
            return lshape
        logger.debug(f"{shape_id}: six vertices but not an L outline, using its bounding box")
    elif len(points) != 4:
        logger.debug(f"{shape_id}: {len(points)} vertices, using its bounding box")

    return Rectangle(id=shape_id, width=width, height=height, x=min_x, y=min_y)


def _is_slab_candidate(points: Sequence[Point]) -> bool:
    min_x, min_y, max_x, max_y = _bounds(points)
    return (
        abs(min_x) <= TOLERANCE
        and abs(min_y) <= TOLERANCE
        and max_x - min_x > SLAB_MIN_SIZE
        and max_y - min_y > SLAB_MIN_SIZE
    )


def _polyline_points(entity) -> List[Point]:
    if entity.dxftype() == "LWPOLYLINE":
        return [(x, y) for x, y in entity.get_points("xy")]
    return [(p[0], p[1]) for p in entity.points()]


def _read_document(content: Union[str, bytes]):
    data = content.encode("utf-8") if isinstance(content, str) else content
    try:
        doc, auditor = recover.read(io.BytesIO(data))
    except DXFStructureError as e:
        raise DXFImportError(f"Invalid DXF structure: {e}")
    except Exception as e:
        raise DXFImportError(f"Could not read DXF: {e}")

    if auditor.has_errors:
        logger.warning(f"DXF recovered with {len(auditor.errors)} errors")
    return doc


def import_dxf(content: Union[str, bytes]) -> ImportResult:
    """
    Read shapes from DXF content.

    Args:
        content: DXF text (or raw bytes)

    Returns:
        Imported shapes and the slab, if one was found

    Raises:
        DXFImportError: if the content is not a readable DXF drawing
    """
    if not content or not content.strip():
        raise DXFImportError("Empty DXF content")

    doc = _read_document(content)
    msp = doc.modelspace()
    result = ImportResult()
    count = 0

    for entity in msp.query("LWPOLYLINE POLYLINE CIRCLE"):
        try:
            if entity.dxftype() == "CIRCLE":
                radius = round_cm(mm_to_cm(entity.dxf.radius))
                if radius <= 0:
                    continue
                cx = round_cm(mm_to_cm(entity.dxf.center.x))
                cy = round_cm(mm_to_cm(entity.dxf.center.y))
                count += 1
                result.shapes.append(
                    Circle(id=f"dxf-{count}", radius=radius,
                           x=round_cm(cx - radius), y=round_cm(cy - radius))
                )
                continue

            points = _normalize(_polyline_points(entity))
            if len(points) < 3:
                continue

            on_slab_layer = entity.dxf.layer.upper() == SLAB_LAYER
            if result.slab is None and (on_slab_layer or _is_slab_candidate(points)):
                min_x, min_y, max_x, max_y = _bounds(points)
                result.slab = Slab(
                    id="slab",
                    width=round_cm(max_x - min_x),
                    height=round_cm(max_y - min_y),
                )
                continue

            count += 1
            result.shapes.append(_shape_from_outline(f"dxf-{count}", points))

        except Exception as e:
            result.skipped += 1
            logger.warning(f"Skipping {entity.dxftype()} entity: {e}")

    logger.info(
        f"Imported {len(result.shapes)} shapes"
        + (f" and a {result.slab.width:g}x{result.slab.height:g}cm slab" if result.slab else "")
    )
    return result


def import_dxf_file(filepath: Union[str, Path]) -> ImportResult:
    """
    Read shapes from a DXF file.

    Raises:
        DXFImportError: if the file is missing or unreadable
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise DXFImportError(f"File not found: {filepath}")
    return import_dxf(filepath.read_bytes())
