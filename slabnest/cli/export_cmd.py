"""CLI commands for DXF/SVG export and DXF import."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.command("export")
@click.argument("layout_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("output", type=click.Path(dir_okay=False))
@click.option("--format", "-f", "fmt", type=click.Choice(["dxf", "svg"]), default=None,
              help="Output format (default: from the file extension, else dxf)")
@click.pass_context
def export_cmd(ctx: click.Context, layout_path: str, output: str, fmt: str) -> None:
    """Export a layout to DXF or SVG.

    Example: slabnest export best.json best.dxf
    """
    from slabnest.config import get_settings
    from slabnest.export import export_to_dxf, export_to_svg
    from slabnest.shapes import LayoutError, load_layout

    try:
        layout = load_layout(layout_path, default_spacing=get_settings().default_spacing)
    except LayoutError as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    if fmt is None:
        fmt = "svg" if Path(output).suffix.lower() == ".svg" else "dxf"

    if fmt == "svg":
        path = export_to_svg(layout.shapes, output, slab=layout.slab)
    else:
        path = export_to_dxf(layout.shapes, output, spacing=layout.spacing, slab=layout.slab)

    console.print(f"[green]Exported {len(layout.shapes)} shapes to {path}[/green] ({fmt.upper()})")


@click.command("import")
@click.argument("dxf_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("output", type=click.Path(dir_okay=False))
@click.option("--spacing", "-s", type=float, default=None, help="Spacing stored in the layout (cm)")
@click.pass_context
def import_cmd(ctx: click.Context, dxf_path: str, output: str, spacing: float) -> None:
    """Convert a DXF drawing into a layout file.

    Example: slabnest import drawing.dxf pieces.json
    """
    from slabnest.config import get_settings
    from slabnest.export import DXFImportError, import_dxf_file
    from slabnest.shapes import Layout, Slab, save_layout

    settings = get_settings()

    try:
        result = import_dxf_file(dxf_path)
    except DXFImportError as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    slab = result.slab
    if slab is None:
        slab = Slab(id="slab", width=settings.slab_width, height=settings.slab_height)
        console.print(f"[yellow]No slab found, using {slab.width:g} x {slab.height:g} cm[/yellow]")

    layout = Layout(
        slab=slab,
        shapes=result.shapes,
        spacing=spacing if spacing is not None else settings.default_spacing,
    )
    path = save_layout(layout, output)

    table = Table(title=f"Imported from {Path(dxf_path).name}")
    table.add_column("Type", style="cyan")
    table.add_column("Count", justify="right")

    counts = {}
    for shape in result.shapes:
        counts[shape.type.value] = counts.get(shape.type.value, 0) + 1
    for shape_type, count in sorted(counts.items()):
        table.add_row(shape_type, str(count))
    if result.skipped:
        table.add_row("[yellow]skipped[/yellow]", str(result.skipped))

    console.print(table)
    console.print(f"[green]Saved layout to {path}[/green]")
