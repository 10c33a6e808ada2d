"""Main CLI entry point for Slab Nest."""

import click
from rich.console import Console

from slabnest import __version__
from slabnest.utils import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="Slab Nest")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Slab Nest - arrange cut pieces on a stock slab.

    Packs rectangles, L-shapes, triangles and circles onto a slab with a
    guaranteed gap between them, and exports the layout for CNC and CAD.
    """
    from slabnest.config import get_settings

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging("DEBUG" if verbose else get_settings().log_level)


# Import and register commands
from slabnest.cli.nest_cmd import arrange_cmd, optimize_cmd, check_cmd
from slabnest.cli.export_cmd import export_cmd, import_cmd

cli.add_command(arrange_cmd)
cli.add_command(optimize_cmd)
cli.add_command(check_cmd)
cli.add_command(export_cmd)
cli.add_command(import_cmd)


@cli.command()
def status() -> None:
    """Show configuration."""
    from slabnest.config import get_settings

    settings = get_settings()

    console.print("[bold]Slab Nest Status[/bold]")
    console.print(f"Version: {__version__}")
    console.print()
    console.print("[bold]Configuration:[/bold]")
    console.print(f"  Output Directory: {settings.output_dir}")
    console.print(f"  Log Level: {settings.log_level}")
    console.print()
    console.print("[bold]Slab:[/bold]")
    console.print(f"  Size: {settings.slab_width:g} x {settings.slab_height:g} cm")
    console.print(f"  Edge Margin: {settings.margin:g} cm")
    console.print()
    console.print("[bold]Packing:[/bold]")
    console.print(f"  Default Spacing: {settings.default_spacing:g} cm")
    console.print(f"  Minimum Spacing: {settings.min_spacing:g} cm")
    if settings.iteration_delay > 0:
        console.print(f"  Iteration Delay: {settings.iteration_delay:g} s")
    else:
        console.print("  Iteration Delay: [dim]none[/dim]")


if __name__ == "__main__":
    cli()
