"""Shape data model for slab nesting.

Every placeable piece is a frozen dataclass. Positions and dimensions are in
centimeters and ``(x, y)`` is always the top-left corner of the shape's
bounding box (circles included). Operations never mutate a shape; they
return a new value carrying the same ``id``.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple, Union


class ShapeValidationError(ValueError):
    """Raised when a shape has unusable dimensions or a malformed record."""


class ShapeType(str, Enum):
    """Type tags, matching the serialized ``type`` field."""
    RECTANGLE = "rectangle"
    L_SHAPE_TL = "l-shape-tl"
    L_SHAPE_TR = "l-shape-tr"
    L_SHAPE_BL = "l-shape-bl"
    L_SHAPE_BR = "l-shape-br"
    TRIANGLE = "triangle"
    CIRCLE = "circle"
    SLAB = "slab"


L_CORNERS = ("tl", "tr", "bl", "br")


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangular piece."""
    id: str
    width: float
    height: float
    x: float = 0.0
    y: float = 0.0

    @property
    def type(self) -> ShapeType:
        return ShapeType.RECTANGLE

    @property
    def can_rotate(self) -> bool:
        return True

    def moved_to(self, x: float, y: float) -> "Rectangle":
        return replace(self, x=x, y=y)

    def rotated(self) -> "Rectangle":
        """Quarter turn: width and height swap."""
        return replace(self, width=self.height, height=self.width)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class LShape:
    """L-shaped piece.

    The shape is the union of a vertical leg ``leg_width`` wide and a
    horizontal leg ``leg_height`` tall that meet at ``corner`` (one of
    ``tl``, ``tr``, ``bl``, ``br``). The notch missing from the bounding
    box sits in the opposite corner.
    """
    id: str
    width: float
    height: float
    leg_width: float
    leg_height: float
    corner: str = "tl"
    x: float = 0.0
    y: float = 0.0

    @property
    def type(self) -> ShapeType:
        return ShapeType(f"l-shape-{self.corner}")

    @property
    def can_rotate(self) -> bool:
        return False

    def moved_to(self, x: float, y: float) -> "LShape":
        return replace(self, x=x, y=y)

    def rotated(self) -> "LShape":
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "legWidth": self.leg_width,
            "legHeight": self.leg_height,
        }


@dataclass(frozen=True)
class Triangle:
    """Isosceles triangle, apex centered above the base."""
    id: str
    base: float
    height: float
    x: float = 0.0
    y: float = 0.0

    @property
    def type(self) -> ShapeType:
        return ShapeType.TRIANGLE

    @property
    def can_rotate(self) -> bool:
        return True

    def moved_to(self, x: float, y: float) -> "Triangle":
        return replace(self, x=x, y=y)

    def rotated(self) -> "Triangle":
        """Quarter turn of the bounding box: base and height swap."""
        return replace(self, base=self.height, height=self.base)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "x": self.x,
            "y": self.y,
            "base": self.base,
            "height": self.height,
        }


@dataclass(frozen=True)
class Circle:
    """Circular piece; ``(x, y)`` is the top-left of its bounding box."""
    id: str
    radius: float
    x: float = 0.0
    y: float = 0.0

    @property
    def type(self) -> ShapeType:
        return ShapeType.CIRCLE

    @property
    def can_rotate(self) -> bool:
        return False

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.radius, self.y + self.radius)

    def moved_to(self, x: float, y: float) -> "Circle":
        return replace(self, x=x, y=y)

    def rotated(self) -> "Circle":
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "x": self.x,
            "y": self.y,
            "radius": self.radius,
        }


@dataclass(frozen=True)
class Slab:
    """The stock slab: the single bin shapes are packed into."""
    id: str
    width: float
    height: float
    x: float = 0.0
    y: float = 0.0

    @property
    def type(self) -> ShapeType:
        return ShapeType.SLAB

    @property
    def can_rotate(self) -> bool:
        return False

    @property
    def area(self) -> float:
        return self.width * self.height

    def moved_to(self, x: float, y: float) -> "Slab":
        return replace(self, x=x, y=y)

    def rotated(self) -> "Slab":
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


# Placeable pieces
Shape = Union[Rectangle, LShape, Triangle, Circle]
AnyShape = Union[Rectangle, LShape, Triangle, Circle, Slab]

DEFAULT_SLAB = Slab(id="slab", width=80.0, height=60.0)


def _number(data: Dict[str, Any], key: str, default: Any = None) -> float:
    value = data.get(key, default)
    if value is None:
        raise ShapeValidationError(f"Missing field '{key}' in {data.get('type', 'shape')} record")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ShapeValidationError(f"Field '{key}' is not a number: {value!r}")


def shape_from_dict(data: Dict[str, Any]) -> AnyShape:
    """Create a shape (or slab) from its serialized form."""
    if not isinstance(data, dict):
        raise ShapeValidationError(f"Shape record must be an object, got {data!r}")
    raw_type = data.get("type")
    try:
        shape_type = ShapeType(raw_type)
    except ValueError:
        raise ShapeValidationError(f"Unknown shape type: {raw_type!r}")

    shape_id = str(data.get("id") or shape_type.value)
    x = _number(data, "x", 0.0)
    y = _number(data, "y", 0.0)

    if shape_type == ShapeType.RECTANGLE:
        return Rectangle(shape_id, _number(data, "width"), _number(data, "height"), x, y)
    if shape_type == ShapeType.TRIANGLE:
        return Triangle(shape_id, _number(data, "base"), _number(data, "height"), x, y)
    if shape_type == ShapeType.CIRCLE:
        return Circle(shape_id, _number(data, "radius"), x, y)
    if shape_type == ShapeType.SLAB:
        return Slab(shape_id, _number(data, "width"), _number(data, "height"), x, y)

    return LShape(
        shape_id,
        _number(data, "width"),
        _number(data, "height"),
        _number(data, "legWidth"),
        _number(data, "legHeight"),
        corner=shape_type.value.rsplit("-", 1)[-1],
        x=x,
        y=y,
    )


def _check_positive(shape: AnyShape, name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0:
        raise ShapeValidationError(f"Shape '{shape.id}': {name} must be a positive number, got {value!r}")


def validate_shape(shape: AnyShape) -> None:
    """Check dimensions of a single shape.

    Raises:
        ShapeValidationError: on non-finite or non-positive dimensions, or
            on L-shape legs that are not strictly inside the outer box.
    """
    for name in ("x", "y"):
        value = getattr(shape, name)
        if not math.isfinite(value):
            raise ShapeValidationError(f"Shape '{shape.id}': {name} must be finite, got {value!r}")

    if isinstance(shape, (Rectangle, Slab)):
        _check_positive(shape, "width", shape.width)
        _check_positive(shape, "height", shape.height)
    elif isinstance(shape, Triangle):
        _check_positive(shape, "base", shape.base)
        _check_positive(shape, "height", shape.height)
    elif isinstance(shape, Circle):
        _check_positive(shape, "radius", shape.radius)
    elif isinstance(shape, LShape):
        if shape.corner not in L_CORNERS:
            raise ShapeValidationError(f"Shape '{shape.id}': unknown L-shape corner {shape.corner!r}")
        for name in ("width", "height", "leg_width", "leg_height"):
            _check_positive(shape, name, getattr(shape, name))
        if shape.leg_width >= shape.width:
            raise ShapeValidationError(
                f"Shape '{shape.id}': leg width {shape.leg_width} must be smaller than width {shape.width}"
            )
        if shape.leg_height >= shape.height:
            raise ShapeValidationError(
                f"Shape '{shape.id}': leg height {shape.leg_height} must be smaller than height {shape.height}"
            )
    else:
        raise ShapeValidationError(f"Unsupported shape value: {shape!r}")


def validate_shapes(shapes: Iterable[Shape]) -> List[Shape]:
    """Validate a collection of placeable shapes and return it as a list.

    Slabs are rejected here; a collection holds pieces only.
    """
    seen = set()
    result = []
    for shape in shapes:
        if isinstance(shape, Slab):
            raise ShapeValidationError(f"Slab '{shape.id}' cannot be packed as a shape")
        validate_shape(shape)
        if shape.id in seen:
            raise ShapeValidationError(f"Duplicate shape id: {shape.id}")
        seen.add(shape.id)
        result.append(shape)
    return result
