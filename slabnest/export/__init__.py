"""
Export Module for slab layouts.

Writes placed shapes to DXF and SVG, and reads shapes back from DXF
drawings produced by CAD tools or by this module.
"""

from .dxf_export import (
    DXFExporter,
    export_to_dxf,
    shapes_to_dxf,
)
from .svg_export import (
    SVGExporter,
    export_to_svg,
    shapes_to_svg,
)
from .dxf_import import (
    DXFImportError,
    ImportResult,
    import_dxf,
    import_dxf_file,
)

__all__ = [
    # DXF Export
    "DXFExporter",
    "export_to_dxf",
    "shapes_to_dxf",
    # SVG Export
    "SVGExporter",
    "export_to_svg",
    "shapes_to_svg",
    # DXF Import
    "DXFImportError",
    "ImportResult",
    "import_dxf",
    "import_dxf_file",
]
