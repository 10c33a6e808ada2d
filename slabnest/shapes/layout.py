"""Layout files: a slab, a spacing and the shapes placed on it.

Stored as JSON::

    {
      "slab": {"id": "slab", "type": "slab", "x": 0, "y": 0, "width": 80, "height": 60},
      "spacing": 1.0,
      "shapes": [{"id": "a", "type": "rectangle", "x": 1, "y": 1, "width": 10, "height": 10}]
    }
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from slabnest.shapes.model import (
    Shape,
    Slab,
    ShapeValidationError,
    shape_from_dict,
    validate_shape,
    validate_shapes,
)
from slabnest.utils import get_logger

logger = get_logger("shapes.layout")


class LayoutError(Exception):
    """Raised when a layout file cannot be read or written."""


@dataclass
class Layout:
    """A slab together with the shapes arranged on it."""
    slab: Slab
    shapes: List[Shape] = field(default_factory=list)
    spacing: float = 1.0

    def with_shapes(self, shapes: List[Shape]) -> "Layout":
        """Return a copy holding a different shape list."""
        return Layout(slab=self.slab, shapes=list(shapes), spacing=self.spacing)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "slab": self.slab.to_dict(),
            "spacing": self.spacing,
            "shapes": [s.to_dict() for s in self.shapes],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        default_slab: Optional[Slab] = None,
        default_spacing: float = 1.0,
    ) -> "Layout":
        """Create from dictionary.

        A missing slab falls back to ``default_slab`` (or the configured
        default size). A ``slab`` entry inside ``shapes`` is accepted too.

        Raises:
            LayoutError: If the document is not shaped like a layout
            ShapeValidationError: If a shape record or its dimensions are bad
        """
        slab = None
        raw_slab = data.get("slab")
        if raw_slab:
            if not isinstance(raw_slab, dict):
                raise LayoutError(f"'slab' must be an object, got {raw_slab!r}")
            slab = shape_from_dict(dict(raw_slab, type="slab"))

        records = data.get("shapes", [])
        if not isinstance(records, list):
            raise LayoutError(f"'shapes' must be a list, got {records!r}")

        shapes: List[Shape] = []
        for record in records:
            shape = shape_from_dict(record)
            if isinstance(shape, Slab):
                if slab is None:
                    slab = shape
                continue
            shapes.append(shape)

        if slab is None:
            slab = default_slab or _configured_slab()
        validate_shape(slab)
        validate_shapes(shapes)

        try:
            spacing = float(data.get("spacing", default_spacing))
        except (TypeError, ValueError):
            raise LayoutError(f"'spacing' is not a number: {data.get('spacing')!r}")

        return cls(slab=slab, shapes=shapes, spacing=spacing)


def _configured_slab() -> Slab:
    from slabnest.config import get_settings

    settings = get_settings()
    return Slab(id="slab", width=settings.slab_width, height=settings.slab_height)


def load_layout(path: Union[str, Path], default_spacing: float = 1.0) -> Layout:
    """
    Load a layout from a JSON file.

    Args:
        path: Layout file path
        default_spacing: Spacing used when the file does not set one

    Returns:
        Parsed layout

    Raises:
        LayoutError: If the file is missing, not JSON or holds bad shapes
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise LayoutError(f"Layout file not found: {path}")
    except json.JSONDecodeError as e:
        raise LayoutError(f"Layout file is not valid JSON: {path} ({e})")

    if not isinstance(data, dict):
        raise LayoutError(f"Layout file must hold a JSON object: {path}")

    try:
        layout = Layout.from_dict(data, default_spacing=default_spacing)
    except ShapeValidationError as e:
        raise LayoutError(f"Invalid shape in {path}: {e}")
    except LayoutError as e:
        raise LayoutError(f"Invalid layout in {path}: {e}")

    logger.debug(f"Loaded {len(layout.shapes)} shapes from {path}")
    return layout


def save_layout(layout: Layout, path: Union[str, Path]) -> Path:
    """Write a layout as JSON and return the path written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(layout.to_dict(), indent=2), encoding="utf-8")
    logger.debug(f"Saved {len(layout.shapes)} shapes to {path}")
    return path
