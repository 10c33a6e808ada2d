"""
DXF Export for nested slab layouts.

Generates DXF (AutoCAD Drawing Exchange Format) files from placed shapes.
DXF is read by nesting tools, CNC/waterjet software and CAD programs.
Model units are centimeters; the file is written in millimeters.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from slabnest.nesting.geometry import closed_outline
from slabnest.shapes.model import Circle, Shape, Slab
from slabnest.utils import CM_TO_MM, get_logger

logger = get_logger("export.dxf")


# DXF layer colors (ACI - AutoCAD Color Index)
DXF_COLORS = {
    'red': 1,
    'yellow': 2,
    'green': 3,
    'cyan': 4,
    'blue': 5,
    'magenta': 6,
    'white': 7,
}

# Layer names and colors
DXF_LAYERS = {
    'shapes': ('SHAPES', DXF_COLORS['white']),
    'slab': ('SLAB', DXF_COLORS['red']),
}


class DXFExporter:
    """
    Exports placed shapes to DXF format.

    The slab, if given, is drawn at the origin on its own layer and the
    shapes are shifted to the right of it. Outlines are the same vertex
    lists the collision checks use, closed by repeating the first vertex.

    Usage:
        exporter = DXFExporter()
        dxf_content = exporter.shapes_to_dxf(shapes, spacing=1.0, slab=slab)
        exporter.save(shapes, 'layout.dxf', spacing=1.0, slab=slab)
    """

    def __init__(self, precision: int = 6):
        """
        Initialize DXF exporter.

        Args:
            precision: Decimal precision for coordinates
        """
        self.precision = precision

    def shapes_to_dxf(self, shapes: Sequence[Shape], spacing: float = 0.0,
                      slab: Optional[Slab] = None) -> str:
        """
        Convert shapes to DXF string.

        Args:
            shapes: Placed shapes (cm)
            spacing: Layout spacing, widens the gap between slab and shapes
            slab: Optional slab drawn at the origin

        Returns:
            DXF content as string
        """
        shape_layer, _ = DXF_LAYERS['shapes']
        slab_layer, _ = DXF_LAYERS['slab']

        lines = []

        # DXF Header
        lines.extend(self._dxf_header())

        # Tables section (layers)
        lines.extend(self._dxf_tables(list(DXF_LAYERS.values())))

        # Entities section
        lines.append('0')
        lines.append('SECTION')
        lines.append('2')
        lines.append('ENTITIES')

        offset = (0.0, 0.0)
        if slab is not None:
            lines.extend(self._outline_to_polyline(slab, slab_layer, (0.0, 0.0)))
            # Shapes go to the right of the slab
            offset = (slab.width * CM_TO_MM + spacing * 20, 0.0)

        for shape in shapes:
            lines.extend(self._shape_to_entity(shape, shape_layer, offset))

        # End entities section
        lines.append('0')
        lines.append('ENDSEC')

        # End of file
        lines.append('0')
        lines.append('EOF')

        return '\n'.join(lines) + '\n'

    def save(self, shapes: Sequence[Shape], filepath: str, spacing: float = 0.0,
             slab: Optional[Slab] = None) -> Path:
        """
        Save shapes to DXF file.

        Args:
            shapes: Placed shapes
            filepath: Output file path
            spacing: Layout spacing
            slab: Optional slab

        Returns:
            Path written
        """
        dxf_content = self.shapes_to_dxf(shapes, spacing=spacing, slab=slab)

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w') as f:
            f.write(dxf_content)

        logger.info(f"Wrote {len(shapes)} shapes to {filepath}")
        return filepath

    def _dxf_header(self) -> List[str]:
        """Generate DXF header section."""
        return [
            '0', 'SECTION',
            '2', 'HEADER',
            '9', '$ACADVER',
            '1', 'AC1015',  # AutoCAD 2000
            '9', '$INSUNITS',
            '70', '4',  # Millimeters
            '9', '$MEASUREMENT',
            '70', '1',  # Metric
            '0', 'ENDSEC',
        ]

    def _dxf_tables(self, layers: List[Tuple[str, int]]) -> List[str]:
        """Generate DXF tables section with layers."""
        lines = [
            '0', 'SECTION',
            '2', 'TABLES',
            '0', 'TABLE',
            '2', 'LAYER',
            '100', 'AcDbSymbolTable',
            '70', str(len(layers)),
        ]

        for layer_name, color in layers:
            lines.extend([
                '0', 'LAYER',
                '100', 'AcDbSymbolTableRecord',
                '100', 'AcDbLayerTableRecord',
                '2', layer_name,
                '70', '0',  # Layer state (0 = on)
                '62', str(color),  # Color number
                '6', 'CONTINUOUS',  # Linetype
            ])

        lines.extend([
            '0', 'ENDTAB',
            '0', 'ENDSEC',
        ])

        return lines

    def _shape_to_entity(self, shape: Shape, layer: str,
                         offset: Tuple[float, float]) -> List[str]:
        """Circles become CIRCLE entities, everything else a closed polyline."""
        if isinstance(shape, Circle):
            cx, cy = shape.center
            return self._circle_to_dxf(
                cx * CM_TO_MM + offset[0],
                cy * CM_TO_MM + offset[1],
                shape.radius * CM_TO_MM,
                layer,
            )
        return self._outline_to_polyline(shape, layer, offset)

    def _outline_to_polyline(self, shape, layer: str,
                             offset: Tuple[float, float]) -> List[str]:
        """Convert a shape outline to a closed DXF LWPOLYLINE entity."""
        points = closed_outline(shape)
        lines = [
            '0', 'LWPOLYLINE',
            '100', 'AcDbEntity',
            '8', layer,  # Layer name
            '100', 'AcDbPolyline',
            '90', str(len(points)),  # Number of vertices
            '70', '1',  # Closed flag
        ]

        # Add vertices
        for x, y in points:
            lines.extend([
                '10', f'{x * CM_TO_MM + offset[0]:.{self.precision}f}',
                '20', f'{y * CM_TO_MM + offset[1]:.{self.precision}f}',
            ])

        return lines

    def _circle_to_dxf(self, x: float, y: float, radius: float, layer: str) -> List[str]:
        """Create a circle entity."""
        return [
            '0', 'CIRCLE',
            '100', 'AcDbEntity',
            '8', layer,
            '100', 'AcDbCircle',
            '10', f'{x:.{self.precision}f}',
            '20', f'{y:.{self.precision}f}',
            '40', f'{radius:.{self.precision}f}',
        ]


def export_to_dxf(shapes: Sequence[Shape], filepath: str, spacing: float = 0.0,
                  slab: Optional[Slab] = None) -> Path:
    """
    Convenience function to export shapes to DXF file.

    Args:
        shapes: Placed shapes
        filepath: Output file path
        spacing: Layout spacing
        slab: Optional slab
    """
    exporter = DXFExporter()
    return exporter.save(shapes, filepath, spacing=spacing, slab=slab)


def shapes_to_dxf(shapes: Sequence[Shape], spacing: float = 0.0,
                  slab: Optional[Slab] = None) -> str:
    """
    Convenience function to convert shapes to DXF string.

    Args:
        shapes: Placed shapes
        spacing: Layout spacing
        slab: Optional slab

    Returns:
        DXF content string
    """
    exporter = DXFExporter()
    return exporter.shapes_to_dxf(shapes, spacing=spacing, slab=slab)
