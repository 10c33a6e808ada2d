"""Shape model and layout files.

Provides the immutable shape variants placed on a slab.
"""

from slabnest.shapes.model import (
    AnyShape,
    Circle,
    DEFAULT_SLAB,
    LShape,
    Rectangle,
    Shape,
    ShapeType,
    ShapeValidationError,
    Slab,
    Triangle,
    shape_from_dict,
    validate_shape,
    validate_shapes,
)
from slabnest.shapes.layout import (
    Layout,
    LayoutError,
    load_layout,
    save_layout,
)

__all__ = [
    "AnyShape",
    "Circle",
    "DEFAULT_SLAB",
    "LShape",
    "Rectangle",
    "Shape",
    "ShapeType",
    "ShapeValidationError",
    "Slab",
    "Triangle",
    "shape_from_dict",
    "validate_shape",
    "validate_shapes",
    "Layout",
    "LayoutError",
    "load_layout",
    "save_layout",
]
