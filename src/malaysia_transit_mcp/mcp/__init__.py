"""MCP (Model Context Protocol) server module for Malaysia transit.

This module provides the MCP server implementation that exposes the transit
middleware and service area detection through the Model Context Protocol.
"""

from .server import MalaysiaTransitMCPServer, main

__all__ = ["MalaysiaTransitMCPServer", "main"]
