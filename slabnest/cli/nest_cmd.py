"""CLI commands for arranging and checking slab layouts."""

import json

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

console = Console()


def _load(ctx: click.Context, layout_path: str):
    """Load a layout file or exit with an error."""
    from slabnest.config import get_settings
    from slabnest.shapes import LayoutError, load_layout

    try:
        return load_layout(layout_path, default_spacing=get_settings().default_spacing)
    except LayoutError as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)


def _config_for(layout, strategy, **overrides):
    from slabnest.config import get_settings
    from slabnest.nesting import NestingConfig

    return NestingConfig.from_settings(
        get_settings(),
        slab_width=layout.slab.width,
        slab_height=layout.slab.height,
        spacing=layout.spacing,
        strategy=strategy,
        **overrides,
    )


def _print_result(layout, result, title: str) -> None:
    """Print a nesting result as a table with a summary panel."""
    from slabnest.nesting.geometry import shape_size

    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Type")
    table.add_column("Position (cm)", justify="right")
    table.add_column("Size (cm)", justify="right", style="dim")

    for shape in result.placed_shapes:
        width, height = shape_size(shape)
        table.add_row(
            shape.id,
            shape.type.value,
            f"{shape.x:.1f}, {shape.y:.1f}",
            f"{width:g} x {height:g}",
        )
    for shape_id in result.unplaced_ids:
        table.add_row(shape_id, "[yellow]unplaced[/yellow]", "-", "-")

    console.print(table)

    placed = len(result.placed_shapes)
    total = placed + len(result.unplaced_ids)
    summary = f"""[bold cyan]Slab:[/bold cyan] {layout.slab.width:g} x {layout.slab.height:g} cm
[bold cyan]Placed:[/bold cyan] {placed}/{total}
[bold green]Efficiency:[/bold green] {result.efficiency:.1f}%
[bold]Valid:[/bold] {'[green]yes[/green]' if result.valid else '[red]no[/red]'}"""
    if result.strategy:
        summary += f"\n[bold]Strategy:[/bold] {result.strategy}"

    console.print(Panel(summary, title="Summary"))


def _finish(ctx: click.Context, layout, result, output, as_json: bool, title: str) -> None:
    from slabnest.shapes import save_layout

    if not result.success:
        console.print(f"[red]Error: {result.error_message}[/red]")
        ctx.exit(1)

    if output:
        path = save_layout(layout.with_shapes(result.placed_shapes), output)
        if not as_json:
            console.print(f"[green]Saved layout to {path}[/green]")

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    _print_result(layout, result, title)


@click.command("arrange")
@click.argument("layout_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the arranged layout here")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def arrange_cmd(ctx: click.Context, layout_path: str, output: str, as_json: bool) -> None:
    """Arrange shapes row by row, in file order.

    Example: slabnest arrange pieces.json -o arranged.json
    """
    from slabnest.nesting import NestingStrategy, SlabNester

    layout = _load(ctx, layout_path)
    nester = SlabNester(_config_for(layout, NestingStrategy.QUICK))
    result = nester.nest(layout.shapes)

    _finish(ctx, layout, result, output, as_json, "Quick Arrangement")


@click.command("optimize")
@click.argument("layout_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the optimized layout here")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--delay", type=float, default=None, help="Seconds to pause between iterations")
@click.pass_context
def optimize_cmd(ctx: click.Context, layout_path: str, output: str, as_json: bool, delay: float) -> None:
    """Search sort orders and rotation for the densest packing.

    Example: slabnest optimize pieces.json -o best.json
    """
    from slabnest.nesting import NestingStrategy, SlabNester

    layout = _load(ctx, layout_path)
    nester = SlabNester(_config_for(layout, NestingStrategy.OPTIMIZE, iteration_delay=delay))

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        disable=as_json,
    ) as progress:
        task = progress.add_task("Optimizing...", total=100)

        def on_progress(percent, best):
            progress.update(
                task,
                completed=percent,
                description=f"Optimizing... best {best.placed_count} shapes, {best.efficiency:.1f}%",
            )

        result = nester.nest(layout.shapes, on_progress=on_progress)

    _finish(ctx, layout, result, output, as_json, "Optimized Arrangement")


@click.command("check")
@click.argument("layout_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def check_cmd(ctx: click.Context, layout_path: str, as_json: bool) -> None:
    """Report colliding and out-of-bounds shapes in a layout.

    Exits with status 1 when the layout has problems.
    """
    from slabnest.config import get_settings
    from slabnest.nesting import find_collisions, out_of_bounds

    layout = _load(ctx, layout_path)
    margin = get_settings().margin
    collisions = find_collisions(layout.shapes, layout.spacing)
    outside = out_of_bounds(layout.shapes, layout.slab, margin)
    ok = not collisions and not outside

    if as_json:
        click.echo(json.dumps({
            "valid": ok,
            "collisions": [list(pair) for pair in collisions],
            "out_of_bounds": outside,
        }, indent=2))
    elif ok:
        console.print(f"[green]Layout OK: {len(layout.shapes)} shapes, no collisions[/green]")
    else:
        if collisions:
            table = Table(title="Collisions")
            table.add_column("Shape", style="cyan")
            table.add_column("Overlaps", style="red")
            for a, b in collisions:
                table.add_row(a, b)
            console.print(table)
        if outside:
            console.print(f"[red]Outside the slab (margin {margin:g} cm):[/red]")
            for shape_id in outside:
                console.print(f"  [red]•[/red] {shape_id}")

    if not ok:
        ctx.exit(1)
