"""Unit tests for CLI formatters."""

import json
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from malaysia_transit_mcp.cli.formatters import (
    format_area_mapping_json,
    format_area_mapping_table,
    format_resolution_json,
    format_resolution_table,
    format_unresolved,
)
from malaysia_transit_mcp.core.config import Settings
from malaysia_transit_mcp.core.gazetteer import GazetteerMatcher
from malaysia_transit_mcp.core.geocoder import GeocodeResolver
from malaysia_transit_mcp.core.models import ResolutionResult
from malaysia_transit_mcp.core.resolver import LocationResolver
from malaysia_transit_mcp.mcp.server import MalaysiaTransitMCPServer

MAPPING = {"klang-valley": ["Kuala Lumpur", "Selangor"], "penang": ["Penang"]}


def capture(func, *args):
    """Run a formatter against an in-memory console and return its output."""
    buffer = StringIO()
    with patch(
        "malaysia_transit_mcp.cli.formatters.console",
        Console(file=buffer, width=120, force_terminal=False),
    ):
        func(*args)
    return buffer.getvalue()


class TestFormatters:
    """Test output formatting."""

    def setup_method(self):
        """Set up test fixtures."""
        self.result = ResolutionResult(
            area="kedah",
            confidence="medium",
            location="Alor Setar, Kedah, Malaysia",
            source="geocode",
        )

    def test_resolution_table(self):
        """The table shows every field."""
        output = capture(format_resolution_table, self.result)

        assert "Service Area: kedah" in output
        assert "medium" in output
        assert "geocode" in output
        assert "Alor Setar, Kedah, Malaysia" in output

    def test_resolution_json(self):
        """JSON output mirrors the tool payload."""
        data = json.loads(format_resolution_json("shoplot", self.result, MAPPING))

        assert data["success"] is True
        assert data["area"] == "kedah"
        assert data["message"] == 'Location "shoplot" detected in service area: kedah'
        assert "availableAreas" not in data

    def test_unresolved_json(self):
        """Unresolved JSON carries the mapping."""
        data = json.loads(format_resolution_json("qqzx", None, MAPPING))

        assert data == {
            "success": False,
            "message": (
                'Could not automatically detect service area for "qqzx". '
                "Please specify the area manually."
            ),
            "availableAreas": MAPPING,
        }

    def test_unresolved_panel(self):
        """Unresolved output explains and lists areas."""
        output = capture(format_unresolved, "qqzx", MAPPING)

        assert 'Could not automatically detect service area for "qqzx"' in output
        assert "Kuala Lumpur, Selangor" in output

    def test_area_mapping(self):
        """The mapping renders as a table and as JSON."""
        output = capture(format_area_mapping_table, MAPPING)
        assert "klang-valley" in output
        assert "Penang" in output

        assert json.loads(format_area_mapping_json(MAPPING)) == MAPPING

    @pytest.mark.asyncio
    @pytest.mark.parametrize("location", ["Komtar", "qqzxnonsense"])
    async def test_json_matches_tool_payload(self, service_area_table, location):
        """CLI JSON and the detect_location_area tool agree on both outcomes."""
        resolver = LocationResolver(
            service_area_table,
            GazetteerMatcher(service_area_table),
            GeocodeResolver(service_area_table, None),
        )
        server = MalaysiaTransitMCPServer(
            Settings(), resolver=resolver, client=MagicMock()
        )

        result = await resolver.detect(location)
        tool_result = await server.call_tool("detect_location_area", {"location": location})

        cli_data = json.loads(
            format_resolution_json(location, result, resolver.get_area_state_mapping())
        )
        assert cli_data == json.loads(tool_result.content[0].text)
