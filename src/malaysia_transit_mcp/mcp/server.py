"""MCP Server for Malaysia Transit.

This module implements a Model Context Protocol (MCP) server that exposes the
Malaysia transit middleware (service areas, stops, routes, live vehicles) and
local location-to-service-area detection.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.types import (
    CallToolResult,
    TextContent,
    Tool,
)

from ..core.config import Settings
from ..core.exceptions import MiddlewareError, TransitMCPError, ValidationError
from ..core.middleware import MiddlewareClient
from ..core.resolver import LocationResolver, build_resolver, detection_payload

logger = logging.getLogger(__name__)

SERVER_NAME = "malaysia-transit"

VEHICLE_TYPES = ("bus", "rail")

ARRIVALS_DISCLAIMER = """\
ABOUT THESE ARRIVAL PREDICTIONS:

Our middleware calculates bus arrival times using custom-made algorithms:

1. Shape-Based Distance (Preferred):
   - Uses actual route geometry from GTFS data
   - Follows the real road path with curves and turns
   - Accuracy: +/-2-4 minutes compared to Google Maps/Moovit
   - Indicated by: "calculationMethod": "shape-based", "confidence": "high" or "medium"

2. Straight-Line Distance (Fallback):
   - Used when shape data unavailable or vehicle position uncertain
   - Applies 1.4x multiplier to account for road curves
   - More conservative (may show longer ETAs)
   - Indicated by: "calculationMethod": "straight-line", "confidence": "low"

Key Features:
   - GPS Speed Validation: Rejects unrealistic speeds (>40 km/h for city buses)
   - Time-of-Day Adjustments: Rush hour predictions are 40-45% longer
   - Stop Dwell Time: Adds ~30 seconds per intermediate stop
   - Ghost Bus Filtering: Removes vehicles that have passed the stop

Confidence Levels:
   - High: Shape-based, vehicle within 50m of route
   - Medium: Shape-based, vehicle 50-200m from route
   - Low: Straight-line fallback (no shape data available)

Important Notes:
   - Predictions are conservative - buses may arrive earlier than estimated
   - Real-time traffic conditions (accidents, roadworks) are not factored in
   - Operator-provided predictions (TripUpdates) are not yet available from
     Malaysia's GTFS API

---

ARRIVAL DATA:
"""

_ID_TYPES = ["string", "number"]
_COORD_TYPES = ["number", "string"]

_AREA_PROPERTY = {
    "type": _ID_TYPES,
    "description": 'Service area ID (e.g., "penang", "klang-valley")',
}

ToolHandler = Callable[[dict[str, Any]], Awaitable[CallToolResult]]


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _success(data: Any, prefix: str = "") -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=prefix + _to_json(data))])


def _failure(error: str, message: str) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=_to_json({"error": error, "message": message}))],
        isError=True,
    )


def _require(arguments: dict[str, Any], name: str) -> str:
    """Get a required argument coerced to a non-empty string."""
    value = arguments.get(name)
    if value is None or not str(value).strip():
        raise ValidationError(f"Missing required argument: {name}")
    return str(value).strip()


def _require_float(arguments: dict[str, Any], name: str, default: float | None = None) -> float:
    """Get a numeric argument, accepting numeric strings."""
    value = arguments.get(name, default)
    if value is None or value == "":
        raise ValidationError(f"Missing required argument: {name}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Argument {name} must be a number, got {value!r}") from e


class MalaysiaTransitMCPServer:
    """MCP Server for Malaysia transit functionality."""

    def __init__(
        self,
        settings: Settings | None = None,
        resolver: LocationResolver | None = None,
        client: MiddlewareClient | None = None,
    ) -> None:
        """Initialize the Malaysia Transit MCP Server.

        Args:
            settings: Runtime settings; read from the environment when omitted
            resolver: Location resolver; built from settings when omitted
            client: Middleware client; built from settings when omitted
        """
        self.settings = settings or Settings.from_env()
        self.server = Server(SERVER_NAME)
        self.resolver = resolver or build_resolver(self.settings)
        self.client = client or MiddlewareClient(
            self.settings.middleware_url, timeout=self.settings.middleware_timeout
        )

        self._handlers: dict[str, ToolHandler] = {
            "list_service_areas": self._list_service_areas,
            "detect_location_area": self._detect_location_area,
            "get_area_info": self._get_area_info,
            "search_stops": self._search_stops,
            "get_stop_details": self._get_stop_details,
            "get_stop_arrivals": self._get_stop_arrivals,
            "find_nearby_stops": self._find_nearby_stops,
            "list_routes": self._list_routes,
            "get_route_details": self._get_route_details,
            "get_route_geometry": self._get_route_geometry,
            "get_live_vehicles": self._get_live_vehicles,
            "get_provider_status": self._get_provider_status,
        }

        # Register handlers
        self._register_handlers()

    def tool_definitions(self) -> list[Tool]:
        """List the tools exposed by this server."""
        return [
            Tool(
                name="list_service_areas",
                description="List all available transit service areas in Malaysia (e.g., Klang Valley, Penang, Kuantan)",
                inputSchema={"type": "object", "properties": {}},
            ),
            Tool(
                name="detect_location_area",
                description=(
                    "Automatically detect which transit service area a location belongs to using geocoding. "
                    "Use this when the user mentions a place name without specifying the area "
                    '(e.g., "KTM Alor Setar", "Komtar", "KLCC")'
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "location": {
                            "type": _ID_TYPES,
                            "description": 'Location name or place (e.g., "KTM Alor Setar", "Komtar", "Pavilion KL")',
                        }
                    },
                    "required": ["location"],
                },
            ),
            Tool(
                name="get_area_info",
                description="Get detailed information about a specific transit service area",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "areaId": {
                            "type": _ID_TYPES,
                            "description": 'Service area ID (e.g., "penang", "klang-valley", "kuantan")',
                        }
                    },
                    "required": ["areaId"],
                },
            ),
            Tool(
                name="search_stops",
                description=(
                    "Search for bus or train stops by name in a specific area. IMPORTANT: If you are unsure "
                    "which area a location belongs to, use detect_location_area first to automatically "
                    "determine the correct area."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "area": {
                            "type": _ID_TYPES,
                            "description": 'Service area ID (e.g., "penang", "klang-valley"). Use detect_location_area if unsure.',
                        },
                        "query": {
                            "type": _ID_TYPES,
                            "description": 'Search query (e.g., "Komtar", "KLCC")',
                        },
                    },
                    "required": ["area", "query"],
                },
            ),
            Tool(
                name="get_stop_details",
                description="Get detailed information about a specific bus or train stop",
                inputSchema=self._area_and_id_schema("stopId", "Stop ID from search results"),
            ),
            Tool(
                name="get_stop_arrivals",
                description="Get real-time arrival predictions for buses/trains at a specific stop",
                inputSchema=self._area_and_id_schema("stopId", "Stop ID from search results"),
            ),
            Tool(
                name="find_nearby_stops",
                description="Find bus or train stops near a specific location",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "area": _AREA_PROPERTY,
                        "lat": {"type": _COORD_TYPES, "description": "Latitude coordinate"},
                        "lon": {"type": _COORD_TYPES, "description": "Longitude coordinate"},
                        "radius": {
                            "type": _COORD_TYPES,
                            "description": "Search radius in meters (default: 500)",
                            "default": 500,
                        },
                    },
                    "required": ["area", "lat", "lon"],
                },
            ),
            Tool(
                name="list_routes",
                description="List all available bus or train routes in a specific area",
                inputSchema={
                    "type": "object",
                    "properties": {"area": _AREA_PROPERTY},
                    "required": ["area"],
                },
            ),
            Tool(
                name="get_route_details",
                description="Get detailed information about a specific route including stops and geometry",
                inputSchema=self._area_and_id_schema("routeId", "Route ID from list_routes"),
            ),
            Tool(
                name="get_route_geometry",
                description="Get the geographic path and stops for a specific route (for map visualization)",
                inputSchema=self._area_and_id_schema("routeId", "Route ID from list_routes"),
            ),
            Tool(
                name="get_live_vehicles",
                description="Get real-time positions of all buses and trains in a specific area",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "area": _AREA_PROPERTY,
                        "type": {
                            "type": "string",
                            "enum": list(VEHICLE_TYPES),
                            "description": "Filter by transit type (optional)",
                        },
                    },
                    "required": ["area"],
                },
            ),
            Tool(
                name="get_provider_status",
                description="Check the operational status of transit providers in a specific area",
                inputSchema={
                    "type": "object",
                    "properties": {"area": _AREA_PROPERTY},
                    "required": ["area"],
                },
            ),
        ]

    @staticmethod
    def _area_and_id_schema(id_name: str, id_description: str) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "area": _AREA_PROPERTY,
                id_name: {"type": _ID_TYPES, "description": id_description},
            },
            "required": ["area", id_name],
        }

    def _register_handlers(self) -> None:
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            """List available tools."""
            return self.tool_definitions()

        # Handlers coerce and check their own arguments.
        @self.server.call_tool(validate_input=False)
        async def handle_call_tool(
            name: str, arguments: dict[str, Any]
        ) -> CallToolResult:
            """Handle tool calls."""
            return await self.call_tool(name, arguments)

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None
    ) -> CallToolResult:
        """Dispatch a tool call, turning every failure into an error payload."""
        handler = self._handlers.get(name)
        if handler is None:
            return _failure("Unknown tool", f"Unknown tool: {name}")

        try:
            return await handler(arguments or {})
        except ValidationError as e:
            return _failure(f"Invalid arguments for {name}", str(e))
        except Exception as e:
            logger.error(f"Error in tool {name}: {e}")
            return _failure(f"Tool {name} failed", str(e))

    async def _proxy(
        self,
        error: str,
        path: str,
        params: dict[str, Any] | None = None,
        prefix: str = "",
    ) -> CallToolResult:
        """Fetch a middleware endpoint and return its body verbatim as JSON text."""
        try:
            data = await asyncio.to_thread(self.client.get, path, params)
        except MiddlewareError as e:
            logger.error(f"{error}: {e}")
            return _failure(error, str(e))
        return _success(data, prefix=prefix)

    async def _list_service_areas(self, arguments: dict[str, Any]) -> CallToolResult:
        """List service areas known to the middleware."""
        return await self._proxy("Failed to fetch service areas", "/api/areas")

    async def _detect_location_area(self, arguments: dict[str, Any]) -> CallToolResult:
        """Detect which service area a place name belongs to."""
        location = _require(arguments, "location")

        try:
            result = await self.resolver.detect(location)
        except TransitMCPError as e:
            return _failure("Failed to detect location area", str(e))

        return _success(
            detection_payload(location, result, self.resolver.get_area_state_mapping())
        )

    async def _get_area_info(self, arguments: dict[str, Any]) -> CallToolResult:
        area_id = _require(arguments, "areaId")
        return await self._proxy(
            f"Failed to fetch area info for {area_id}", f"/api/areas/{area_id}"
        )

    async def _search_stops(self, arguments: dict[str, Any]) -> CallToolResult:
        area = _require(arguments, "area")
        query = _require(arguments, "query")
        return await self._proxy(
            f"Failed to search stops in {area}",
            "/api/stops/search",
            {"area": area, "q": query},
        )

    async def _get_stop_details(self, arguments: dict[str, Any]) -> CallToolResult:
        area = _require(arguments, "area")
        stop_id = _require(arguments, "stopId")
        return await self._proxy(
            f"Failed to fetch stop details for {stop_id}",
            f"/api/stops/{stop_id}",
            {"area": area},
        )

    async def _get_stop_arrivals(self, arguments: dict[str, Any]) -> CallToolResult:
        """Get arrival predictions, prefixed with how they are calculated."""
        area = _require(arguments, "area")
        stop_id = _require(arguments, "stopId")
        return await self._proxy(
            f"Failed to fetch arrivals for stop {stop_id}",
            f"/api/stops/{stop_id}/arrivals",
            {"area": area},
            prefix=ARRIVALS_DISCLAIMER,
        )

    async def _find_nearby_stops(self, arguments: dict[str, Any]) -> CallToolResult:
        area = _require(arguments, "area")
        lat = _require_float(arguments, "lat")
        lon = _require_float(arguments, "lon")
        radius = _require_float(arguments, "radius", default=500)
        return await self._proxy(
            "Failed to find nearby stops",
            "/api/stops/nearby",
            {"area": area, "lat": lat, "lon": lon, "radius": radius},
        )

    async def _list_routes(self, arguments: dict[str, Any]) -> CallToolResult:
        area = _require(arguments, "area")
        return await self._proxy(
            f"Failed to fetch routes for {area}", "/api/routes", {"area": area}
        )

    async def _get_route_details(self, arguments: dict[str, Any]) -> CallToolResult:
        area = _require(arguments, "area")
        route_id = _require(arguments, "routeId")
        return await self._proxy(
            f"Failed to fetch route details for {route_id}",
            f"/api/routes/{route_id}",
            {"area": area},
        )

    async def _get_route_geometry(self, arguments: dict[str, Any]) -> CallToolResult:
        area = _require(arguments, "area")
        route_id = _require(arguments, "routeId")
        return await self._proxy(
            f"Failed to fetch route geometry for {route_id}",
            f"/api/routes/{route_id}/geometry",
            {"area": area},
        )

    async def _get_live_vehicles(self, arguments: dict[str, Any]) -> CallToolResult:
        area = _require(arguments, "area")
        vehicle_type = arguments.get("type")
        if vehicle_type is not None and vehicle_type not in VEHICLE_TYPES:
            raise ValidationError(
                f"type must be one of {', '.join(VEHICLE_TYPES)}, got {vehicle_type!r}"
            )
        return await self._proxy(
            f"Failed to fetch live vehicles for {area}",
            "/api/realtime",
            {"area": area, "type": vehicle_type},
        )

    async def _get_provider_status(self, arguments: dict[str, Any]) -> CallToolResult:
        area = _require(arguments, "area")
        return await self._proxy(
            f"Failed to fetch provider status for {area}",
            f"/api/areas/{area}/providers/status",
        )


async def main() -> None:
    """Main entry point for the MCP server."""
    settings = Settings.from_env()

    # Configure logging; stdout carries the MCP stream
    logging.basicConfig(level=settings.log_level)
    logger.info("Starting Malaysia Transit MCP Server")
    logger.info(f"Middleware URL: {settings.middleware_url}")

    # Create the server
    server_instance = MalaysiaTransitMCPServer(settings)

    # Run the server with stdio transport
    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        logger.info("MCP Server running with stdio transport")
        await server_instance.server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=SERVER_NAME,
                server_version="0.1.0",
                capabilities=server_instance.server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


def main_sync() -> None:
    """Synchronous wrapper for the async main function - used as entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    main_sync()
