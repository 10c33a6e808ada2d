"""
SVG Export for nested slab layouts.

Writes a millimeter-scaled SVG: the slab as a dashed outline at the origin
and the shapes to the right of it, one element per shape.
"""

from pathlib import Path
from typing import Optional, Sequence

from slabnest.nesting.geometry import bounding_box, outline_polygon
from slabnest.shapes.model import Circle, Rectangle, Shape, Slab
from slabnest.utils import CM_TO_MM, format_number, get_logger

logger = get_logger("export.svg")

# Gap between the slab and the exported shapes (mm)
SLAB_GAP = 50.0

# Border around the drawing (mm)
PADDING = 10.0


class SVGExporter:
    """
    Exports placed shapes to SVG.

    Usage:
        exporter = SVGExporter()
        svg_content = exporter.shapes_to_svg(shapes, slab=slab)
        exporter.save(shapes, 'layout.svg', slab=slab)
    """

    def __init__(self, stroke: str = "black", stroke_width: float = 0.5, precision: int = 3):
        """
        Initialize SVG exporter.

        Args:
            stroke: Stroke color for shapes
            stroke_width: Stroke width in mm
            precision: Decimal precision for coordinates
        """
        self.stroke = stroke
        self.stroke_width = stroke_width
        self.precision = precision

    def _num(self, value: float) -> str:
        return format_number(value, self.precision)

    def shapes_to_svg(self, shapes: Sequence[Shape], slab: Optional[Slab] = None) -> str:
        """
        Convert shapes to an SVG document.

        Args:
            shapes: Placed shapes (cm)
            slab: Optional slab drawn at the origin

        Returns:
            SVG content as string
        """
        offset_x = slab.width * CM_TO_MM + SLAB_GAP if slab is not None else 0.0

        max_x = 0.0
        max_y = 0.0
        if slab is not None:
            max_x = slab.width * CM_TO_MM
            max_y = slab.height * CM_TO_MM
        for shape in shapes:
            box = bounding_box(shape)
            max_x = max(max_x, offset_x + box.max_x * CM_TO_MM)
            max_y = max(max_y, box.max_y * CM_TO_MM)

        width = max_x + 2 * PADDING
        height = max_y + 2 * PADDING
        n = self._num

        lines = [
            '<?xml version="1.0" encoding="UTF-8" standalone="no"?>',
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{n(width)}mm" height="{n(height)}mm" '
            f'viewBox="{n(-PADDING)} {n(-PADDING)} {n(width)} {n(height)}">',
            f'  <g id="shapes" fill="none" stroke="{self.stroke}" stroke-width="{n(self.stroke_width)}">',
        ]

        if slab is not None:
            lines.append(
                f'    <rect id="slab" x="0" y="0" width="{n(slab.width * CM_TO_MM)}" '
                f'height="{n(slab.height * CM_TO_MM)}" stroke="red" stroke-dasharray="5,5" />'
            )

        for index, shape in enumerate(shapes):
            lines.append('    ' + self._shape_to_element(shape, index, offset_x))

        lines.append('  </g>')
        lines.append('</svg>')
        return '\n'.join(lines) + '\n'

    def _shape_to_element(self, shape: Shape, index: int, offset_x: float) -> str:
        n = self._num
        x = offset_x + shape.x * CM_TO_MM
        y = shape.y * CM_TO_MM

        if isinstance(shape, Rectangle):
            return (
                f'<rect id="rect-{index}" data-shape-id="{shape.id}" x="{n(x)}" y="{n(y)}" '
                f'width="{n(shape.width * CM_TO_MM)}" height="{n(shape.height * CM_TO_MM)}" />'
            )

        if isinstance(shape, Circle):
            cx, cy = shape.center
            return (
                f'<circle id="circle-{index}" data-shape-id="{shape.id}" '
                f'cx="{n(offset_x + cx * CM_TO_MM)}" cy="{n(cy * CM_TO_MM)}" r="{n(shape.radius * CM_TO_MM)}" />'
            )

        prefix = "triangle" if shape.type.value == "triangle" else "lshape"
        points = " ".join(
            f"{n(offset_x + px * CM_TO_MM)},{n(py * CM_TO_MM)}" for px, py in outline_polygon(shape)
        )
        return f'<polygon id="{prefix}-{index}" data-shape-id="{shape.id}" points="{points}" />'

    def save(self, shapes: Sequence[Shape], filepath: str, slab: Optional[Slab] = None) -> Path:
        """Save shapes to SVG file."""
        content = self.shapes_to_svg(shapes, slab=slab)

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w') as f:
            f.write(content)

        logger.info(f"Wrote {len(shapes)} shapes to {filepath}")
        return filepath


def export_to_svg(shapes: Sequence[Shape], filepath: str, slab: Optional[Slab] = None) -> Path:
    """Convenience function to export shapes to SVG file."""
    return SVGExporter().save(shapes, filepath, slab=slab)


def shapes_to_svg(shapes: Sequence[Shape], slab: Optional[Slab] = None) -> str:
    """Convenience function to convert shapes to SVG string."""
    return SVGExporter().shapes_to_svg(shapes, slab=slab)
