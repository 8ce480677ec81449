"""Output formatters for CLI display."""

import json

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.models import ResolutionResult
from ..core.resolver import detection_payload

console = Console()

_CONFIDENCE_STYLES = {"high": "green", "medium": "yellow", "low": "red"}


def format_resolution_table(result: ResolutionResult) -> None:
    """Display a resolution result as a rich table."""
    table = Table(
        title=f"Service Area: {result.area}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    style = _CONFIDENCE_STYLES.get(result.confidence, "white")
    table.add_row("Area", result.area)
    table.add_row("Confidence", f"[{style}]{result.confidence}[/{style}]")
    table.add_row("Source", result.source)
    table.add_row("Location", result.location)

    console.print(table)


def format_resolution_json(
    location: str, result: ResolutionResult | None, mapping: dict[str, list[str]]
) -> str:
    """Format a resolution outcome as JSON, matching the MCP tool payload."""
    data = detection_payload(location, result, mapping)
    return json.dumps(data, ensure_ascii=False, indent=2)


def format_unresolved(location: str, mapping: dict[str, list[str]]) -> None:
    """Explain a failed resolution and show the areas to choose from."""
    console.print(
        Panel(
            f'Could not automatically detect service area for "{location}".\n'
            "Please specify the area manually.",
            title="No match",
            border_style="yellow",
        )
    )
    format_area_mapping_table(mapping)


def format_area_mapping_table(mapping: dict[str, list[str]]) -> None:
    """Display the area → states mapping as a table."""
    table = Table(title="Service Areas", show_header=True, header_style="bold magenta")
    table.add_column("Area", style="cyan", no_wrap=True)
    table.add_column("States", style="green")

    for area_id, states in mapping.items():
        table.add_row(area_id, ", ".join(states))

    console.print(table)


def format_area_mapping_json(mapping: dict[str, list[str]]) -> str:
    """Format the area → states mapping as JSON."""
    return json.dumps(mapping, ensure_ascii=False, indent=2)
