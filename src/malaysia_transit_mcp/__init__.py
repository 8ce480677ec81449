"""Malaysia Transit MCP Package

Exposes a Malaysian transit middleware as Model Context Protocol tools and
resolves free-text place names to transit service areas.
"""

__version__ = "0.1.0"

from .core.models import ResolutionResult, ServiceArea
from .core.resolver import detect_area_from_location, get_area_state_mapping

__all__ = [
    "ResolutionResult",
    "ServiceArea",
    "detect_area_from_location",
    "get_area_state_mapping",
]
