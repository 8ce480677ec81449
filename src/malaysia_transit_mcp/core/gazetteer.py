"""Offline place-name matching against the static gazetteer."""

import logging

from ..utils.text import contains_phrase, normalize_place_name
from .models import GazetteerEntry, ResolutionResult
from .tables import ServiceAreaTable

logger = logging.getLogger(__name__)


class GazetteerMatcher:
    """Match free-text locations against known landmark and city names."""

    def __init__(self, table: ServiceAreaTable, word_boundary: bool = True):
        """Initialize the matcher.

        Args:
            table: Service area table; its gazetteer order decides ties
            word_boundary: Only match patterns on token boundaries
        """
        self.table = table
        self.word_boundary = word_boundary
        self._patterns: tuple[tuple[str, GazetteerEntry], ...] = tuple(
            (normalize_place_name(entry.pattern), entry) for entry in table.gazetteer
        )

    def find_entry(self, location: str) -> GazetteerEntry | None:
        """Get the first gazetteer entry contained in the location."""
        text = normalize_place_name(location)
        if not text:
            return None

        for pattern, entry in self._patterns:
            if contains_phrase(text, pattern, word_boundary=self.word_boundary):
                return entry
        return None

    def match(self, location: str) -> ResolutionResult | None:
        """Resolve a location through the gazetteer.

        Args:
            location: Free-text place name

        Returns:
            High-confidence result, or None if no pattern matches
        """
        entry = self.find_entry(location)
        if entry is None:
            return None

        logger.debug(f"Gazetteer matched '{location}' on '{entry.pattern}'")
        return ResolutionResult(
            area=entry.area,
            confidence="high",
            location=location,
            source="gazetteer",
        )
