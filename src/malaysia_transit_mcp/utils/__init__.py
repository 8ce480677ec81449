"""Utility modules for malaysia-transit-mcp."""

from .text import contains_phrase, normalize_place_name, normalize_state_name

__all__ = [
    "contains_phrase",
    "normalize_place_name",
    "normalize_state_name",
]
