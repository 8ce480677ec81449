"""Static service area and gazetteer tables.

The tables are loaded once per source file and are immutable afterwards, so
any number of concurrent resolutions can read them without locking.
"""

import json
import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..utils.text import normalize_place_name, normalize_state_name
from .exceptions import ConfigurationError
from .models import GazetteerEntry, ServiceArea

logger = logging.getLogger(__name__)

AreaStateMapping = dict[str, list[str]]


class ServiceAreaTable(BaseModel):
    """Ordered service areas plus the gazetteer that points into them.

    Area order is the priority order used when several areas claim the same
    state. Gazetteer entries are ordered most specific first.
    """

    model_config = ConfigDict(frozen=True)

    areas: tuple[ServiceArea, ...]
    gazetteer: tuple[GazetteerEntry, ...]

    def get_area(self, area_id: str) -> ServiceArea | None:
        """Get a service area by ID."""
        for area in self.areas:
            if area.id == area_id:
                return area
        return None

    def area_for_state(self, state: str) -> ServiceArea | None:
        """Find the highest-priority area covering a state."""
        wanted = normalize_state_name(state)
        if not wanted:
            return None
        for area in self.areas:
            if any(normalize_state_name(s) == wanted for s in area.states):
                return area
        return None

    def area_state_mapping(self) -> AreaStateMapping:
        """Get a fresh copy of the area ID → state list mapping."""
        return {area.id: list(area.states) for area in self.areas}


def build_table(data: dict[str, Any]) -> ServiceAreaTable:
    """Validate raw table data and order the gazetteer.

    Args:
        data: Mapping with an ``areas`` list and a ``gazetteer`` mapping of
            area ID → keyword patterns

    Returns:
        Immutable service area table

    Raises:
        ConfigurationError: If the data is malformed, an area ID repeats, or
            a gazetteer pattern references an unknown area
    """
    try:
        areas = tuple(ServiceArea.model_validate(a) for a in data.get("areas", []))
        raw_gazetteer = data.get("gazetteer", {})
        entries = [
            GazetteerEntry(pattern=pattern, area=area_id)
            for area_id, patterns in raw_gazetteer.items()
            for pattern in patterns
        ]
    except (PydanticValidationError, AttributeError, TypeError) as e:
        raise ConfigurationError(f"Malformed service area table: {e}") from e

    if not areas:
        raise ConfigurationError("Service area table defines no areas")

    area_ids = [area.id for area in areas]
    duplicates = sorted({a for a in area_ids if area_ids.count(a) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate service area IDs: {', '.join(duplicates)}")

    unknown = sorted({e.area for e in entries if e.area not in area_ids})
    if unknown:
        raise ConfigurationError(
            f"Gazetteer references unknown service areas: {', '.join(unknown)}"
        )

    empty = [e.pattern for e in entries if not normalize_place_name(e.pattern)]
    if empty:
        raise ConfigurationError(f"Gazetteer patterns normalize to nothing: {empty}")

    # Longer patterns are more specific; sorted() is stable so file order
    # breaks ties.
    entries.sort(key=lambda e: -len(normalize_place_name(e.pattern)))

    return ServiceAreaTable(areas=areas, gazetteer=tuple(entries))


@lru_cache(maxsize=None)
def load_service_area_table(path: str | None = None) -> ServiceAreaTable:
    """Load a service area table, once per source.

    Args:
        path: Optional JSON file; the packaged table is used when omitted

    Returns:
        Immutable service area table

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    try:
        if path:
            logger.info(f"Loading service areas from {path}")
            text = Path(path).read_text(encoding="utf-8")
        else:
            text = (
                resources.files("malaysia_transit_mcp.data")
                .joinpath("service_areas.json")
                .read_text(encoding="utf-8")
            )
        data = json.loads(text)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to load service area table: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError("Service area table must be a JSON object")

    table = build_table(data)
    logger.debug(
        f"Loaded {len(table.areas)} service areas and "
        f"{len(table.gazetteer)} gazetteer entries"
    )
    return table
