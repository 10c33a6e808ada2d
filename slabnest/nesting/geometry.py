"""Bounding boxes and outline polygons for every shape type.

These are the geometric primitives shared by the collision detector, the
packers and the exporters. All functions are pure; degenerate dimensions
(negative, NaN, infinite) are treated as zero so callers always get finite
numbers back.
"""

import math
from dataclasses import dataclass
from typing import List, Tuple

from slabnest.shapes.model import (
    AnyShape,
    Circle,
    LShape,
    Rectangle,
    Slab,
    Triangle,
)

Point = Tuple[float, float]

# Samples used to approximate a circle outline
CIRCLE_SAMPLES = 16


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box, ``min`` corner top-left in screen coordinates."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    def expanded(self, amount: float) -> "BoundingBox":
        """Grow the box by ``amount`` on every side."""
        return BoundingBox(
            self.min_x - amount,
            self.min_y - amount,
            self.max_x + amount,
            self.max_y + amount,
        )

    def intersects(self, other: "BoundingBox") -> bool:
        """True unless the boxes are strictly apart (touching counts)."""
        return not (
            self.max_x < other.min_x
            or other.max_x < self.min_x
            or self.max_y < other.min_y
            or other.max_y < self.min_y
        )

    def contains(self, other: "BoundingBox") -> bool:
        return (
            other.min_x >= self.min_x
            and other.min_y >= self.min_y
            and other.max_x <= self.max_x
            and other.max_y <= self.max_y
        )


def _length(value: float) -> float:
    """Clamp a dimension to a finite, non-negative number."""
    if value is None or not math.isfinite(value) or value < 0:
        return 0.0
    return float(value)


def _coord(value: float) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return float(value)


def shape_size(shape: AnyShape) -> Tuple[float, float]:
    """Width and height of the shape's bounding box."""
    if isinstance(shape, (Rectangle, LShape, Slab)):
        return _length(shape.width), _length(shape.height)
    if isinstance(shape, Triangle):
        return _length(shape.base), _length(shape.height)
    if isinstance(shape, Circle):
        diameter = 2 * _length(shape.radius)
        return diameter, diameter
    raise TypeError(f"Unsupported shape: {shape!r}")


def shape_area(shape: AnyShape) -> float:
    """Area of the shape's bounding box (the unit efficiency is measured in)."""
    width, height = shape_size(shape)
    return width * height


def bounding_box(shape: AnyShape) -> BoundingBox:
    """Axis-aligned bounding box of a shape."""
    x, y = _coord(shape.x), _coord(shape.y)
    width, height = shape_size(shape)
    return BoundingBox(x, y, x + width, y + height)


def _lshape_outline(shape: LShape) -> List[Point]:
    w, h = shape_size(shape)
    lw = min(_length(shape.leg_width), w)
    lh = min(_length(shape.leg_height), h)

    if shape.corner == "tr":
        local = [(0, 0), (w, 0), (w, h), (w - lw, h), (w - lw, lh), (0, lh)]
    elif shape.corner == "bl":
        local = [(0, 0), (lw, 0), (lw, h - lh), (w, h - lh), (w, h), (0, h)]
    elif shape.corner == "br":
        local = [(w, 0), (w, h), (0, h), (0, h - lh), (w - lw, h - lh), (w - lw, 0)]
    else:
        local = [(0, 0), (w, 0), (w, lh), (lw, lh), (lw, h), (0, h)]

    x, y = _coord(shape.x), _coord(shape.y)
    return [(x + px, y + py) for px, py in local]


def outline_polygon(shape: AnyShape, circle_samples: int = CIRCLE_SAMPLES) -> List[Point]:
    """
    Exact outline of a shape as an ordered vertex list (not closed).

    Args:
        shape: Shape to outline
        circle_samples: Number of points used to approximate a circle

    Returns:
        Vertices in drawing order: rectangle 4 corners, L-shape 6 corners,
        triangle apex then bottom-right then bottom-left, circle evenly
        spaced samples starting at angle 0.
    """
    if isinstance(shape, LShape):
        return _lshape_outline(shape)

    x, y = _coord(shape.x), _coord(shape.y)

    if isinstance(shape, (Rectangle, Slab)):
        w, h = shape_size(shape)
        return [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]

    if isinstance(shape, Triangle):
        b, h = shape_size(shape)
        return [(x + b / 2, y), (x + b, y + h), (x, y + h)]

    if isinstance(shape, Circle):
        r = _length(shape.radius)
        cx, cy = x + r, y + r
        points = []
        for i in range(circle_samples):
            angle = (i / circle_samples) * math.pi * 2
            points.append((cx + math.cos(angle) * r, cy + math.sin(angle) * r))
        return points

    raise TypeError(f"Unsupported shape: {shape!r}")


def closed_outline(shape: AnyShape) -> List[Point]:
    """Outline with the first vertex repeated at the end (polyline form)."""
    points = outline_polygon(shape)
    return points + points[:1]
