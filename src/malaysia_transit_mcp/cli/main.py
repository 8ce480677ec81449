"""CLI main entry point for Malaysia transit."""

import asyncio
import sys

import click
from rich.console import Console

from .. import __version__
from ..core import ConfigurationError, Settings, build_resolver
from .formatters import (
    format_area_mapping_json,
    format_area_mapping_table,
    format_resolution_json,
    format_resolution_table,
    format_unresolved,
)

console = Console()
error_console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Malaysia Transit - Resolve places to transit service areas and serve MCP tools."""
    pass


@cli.command()
@click.argument("location")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option(
    "--no-geocode",
    is_flag=True,
    help="Only use the offline gazetteer, never call the geocoding provider",
)
def detect(location: str, output_format: str, no_geocode: bool) -> None:
    """Detect which service area a place belongs to.

    Examples:
        malaysia-transit detect "Komtar"
        malaysia-transit detect "KTM Alor Setar" --format json
        malaysia-transit detect "Pavilion KL" --no-geocode
    """
    try:
        resolver = build_resolver(Settings.from_env(), use_geocoding=not no_geocode)
    except ConfigurationError as e:
        error_console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    with console.status(f"[bold green]Detecting service area for {location}..."):
        result = asyncio.run(resolver.detect(location))

    mapping = resolver.get_area_state_mapping()

    if output_format == "json":
        click.echo(format_resolution_json(location, result, mapping))
    elif result is None:
        format_unresolved(location, mapping)
    else:
        format_resolution_table(result)

    if result is None:
        sys.exit(2)


@cli.command()
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
def areas(output_format: str) -> None:
    """Show the service areas and the states each one covers."""
    try:
        resolver = build_resolver(Settings.from_env(), use_geocoding=False)
    except ConfigurationError as e:
        error_console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    mapping = resolver.get_area_state_mapping()
    if output_format == "json":
        click.echo(format_area_mapping_json(mapping))
    else:
        format_area_mapping_table(mapping)


@cli.command()
def serve() -> None:
    """Run the MCP server on stdio."""
    from ..mcp.server import main_sync

    main_sync()


if __name__ == "__main__":
    cli()
