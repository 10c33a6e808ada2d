"""Collision and bounds checks for placed shapes.

``collides`` rejects far-apart pairs with an expanded bounding-box test,
then falls back to exact outline tests: vertex containment in both
directions plus edge crossing. Two circles are compared by center distance.

The ``buffer`` only widens the bounding-box pre-check. The exact outline
tests ignore it, so ``buffer`` behaves as packing clearance rather than as a
dilation of the shapes.
"""

import math
from typing import List, Sequence, Tuple

from slabnest.nesting.geometry import Point, bounding_box, outline_polygon
from slabnest.shapes.model import AnyShape, Circle, Shape, Slab

# Clearance between shapes and slab edges (cm)
MARGIN = 1.0

# Slack for float noise when comparing packed coordinates to slab edges
EPSILON = 1e-9


def _on_segment(point: Point, a: Point, b: Point) -> bool:
    """True if ``point`` lies on segment a-b."""
    if abs(_orientation(a, b, point)) > EPSILON:
        return False
    return (
        min(a[0], b[0]) - EPSILON <= point[0] <= max(a[0], b[0]) + EPSILON
        and min(a[1], b[1]) - EPSILON <= point[1] <= max(a[1], b[1]) + EPSILON
    )


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Ray-casting test for a point strictly inside; boundary points are outside."""
    if any(_on_segment(point, p1, p2) for p1, p2 in _edges(polygon)):
        return False

    px, py = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside


def _orientation(a: Point, b: Point, c: Point) -> float:
    """Cross product of ab x ac: >0 counter-clockwise, <0 clockwise, 0 collinear."""
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def segments_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    """True when segments p1-p2 and q1-q2 properly cross.

    Touching at an endpoint or overlapping collinearly does not count.
    """
    d1 = _orientation(q1, q2, p1)
    d2 = _orientation(q1, q2, p2)
    d3 = _orientation(p1, p2, q1)
    d4 = _orientation(p1, p2, q2)
    return (d1 * d2 < 0) and (d3 * d4 < 0)


def _edges(polygon: Sequence[Point]) -> List[Tuple[Point, Point]]:
    return [(polygon[i], polygon[(i + 1) % len(polygon)]) for i in range(len(polygon))]


def _sample_points(polygon: Sequence[Point]) -> List[Point]:
    """Vertices, edge midpoints and interior points of a polygon.

    Outlines that share edges have no vertex strictly inside each other and
    no proper edge crossing, so midpoints and the centroids of the fan
    triangles that fall inside the polygon are tested as well.
    """
    points = list(polygon)
    points.extend(((p1[0] + p2[0]) / 2, (p1[1] + p2[1]) / 2) for p1, p2 in _edges(polygon))

    origin = polygon[0]
    for i in range(1, len(polygon) - 1):
        b, c = polygon[i], polygon[i + 1]
        centroid = ((origin[0] + b[0] + c[0]) / 3, (origin[1] + b[1] + c[1]) / 3)
        if point_in_polygon(centroid, polygon):
            points.append(centroid)
    return points


def polygons_overlap(a: Sequence[Point], b: Sequence[Point]) -> bool:
    """Point containment both ways, then pairwise edge crossing.

    Outlines that only touch along an edge or at a vertex do not overlap.
    """
    if len(a) < 3 or len(b) < 3:
        return False

    if any(point_in_polygon(p, b) for p in _sample_points(a)):
        return True
    if any(point_in_polygon(p, a) for p in _sample_points(b)):
        return True

    edges_b = _edges(b)
    for p1, p2 in _edges(a):
        for q1, q2 in edges_b:
            if segments_intersect(p1, p2, q1, q2):
                return True
    return False


def collides(shape_a: AnyShape, shape_b: AnyShape, buffer: float = 0.0) -> bool:
    """
    Check whether two shapes overlap.

    Args:
        shape_a: First shape
        shape_b: Second shape
        buffer: Clearance applied to the bounding-box pre-check (cm)

    Returns:
        True if the shapes overlap
    """
    if isinstance(shape_a, Circle) and isinstance(shape_b, Circle):
        ax, ay = shape_a.center
        bx, by = shape_b.center
        distance = math.hypot(ax - bx, ay - by)
        return distance < shape_a.radius + shape_b.radius + buffer

    box_a = bounding_box(shape_a).expanded(buffer)
    box_b = bounding_box(shape_b).expanded(buffer)
    if not box_a.intersects(box_b):
        return False

    return polygons_overlap(outline_polygon(shape_a), outline_polygon(shape_b))


def within_bounds(shape: AnyShape, slab: Slab, margin: float = 0.0) -> bool:
    """True if the shape's bounding box sits inside the slab minus ``margin``."""
    box = bounding_box(shape)
    return (
        box.min_x >= margin - EPSILON
        and box.min_y >= margin - EPSILON
        and box.max_x <= slab.width - margin + EPSILON
        and box.max_y <= slab.height - margin + EPSILON
    )


def is_valid_arrangement(
    shapes: Sequence[Shape],
    slab: Slab,
    spacing: float,
    margin: float = MARGIN,
) -> bool:
    """
    Check that every shape is in bounds and no two shapes collide.

    Pairs are compared with a buffer of ``spacing / 2``. Quadratic in the
    number of shapes.
    """
    for shape in shapes:
        if not within_bounds(shape, slab, margin):
            return False

    buffer = spacing / 2
    for i in range(len(shapes)):
        for j in range(i + 1, len(shapes)):
            if collides(shapes[i], shapes[j], buffer):
                return False
    return True


def find_collisions(shapes: Sequence[Shape], spacing: float) -> List[Tuple[str, str]]:
    """Return the id pairs of all colliding shapes."""
    buffer = spacing / 2
    pairs = []
    for i in range(len(shapes)):
        for j in range(i + 1, len(shapes)):
            if collides(shapes[i], shapes[j], buffer):
                pairs.append((shapes[i].id, shapes[j].id))
    return pairs


def out_of_bounds(shapes: Sequence[Shape], slab: Slab, margin: float = MARGIN) -> List[str]:
    """Return the ids of shapes that leave the usable slab area."""
    return [s.id for s in shapes if not within_bounds(s, slab, margin)]
