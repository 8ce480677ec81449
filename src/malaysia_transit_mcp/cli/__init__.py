"""Command line interface for malaysia-transit-mcp."""
