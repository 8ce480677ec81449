"""Location to service area resolution.

Resolution tries an ordered chain of attempts and stops at the first result:
the offline gazetteer first, then the geocoding provider. When every attempt
misses, callers present the area/state mapping for manual selection.
"""

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import Any

from .config import Settings
from .gazetteer import GazetteerMatcher
from .geocoder import GeocodeResolver, GoogleGeocoder
from .models import ResolutionResult
from .tables import AreaStateMapping, ServiceAreaTable, load_service_area_table

logger = logging.getLogger(__name__)

Attempt = Callable[[str], Awaitable[ResolutionResult | None]]


class LocationResolver:
    """Resolve free-text locations to service areas."""

    def __init__(
        self,
        table: ServiceAreaTable,
        matcher: GazetteerMatcher,
        geocode_resolver: GeocodeResolver,
        geocode_timeout: float = 10.0,
    ):
        """Initialize the resolver.

        Args:
            table: Service area table shared by both attempts
            matcher: Offline gazetteer matcher
            geocode_resolver: Network fallback
            geocode_timeout: Upper bound in seconds on the geocoding attempt
        """
        self.table = table
        self.matcher = matcher
        self.geocode_resolver = geocode_resolver
        self.geocode_timeout = geocode_timeout
        self._attempts: tuple[Attempt, ...] = (self._match_gazetteer, self._geocode)

    async def detect(self, location: str) -> ResolutionResult | None:
        """Detect the service area of a location.

        Args:
            location: Free-text place name

        Returns:
            The first attempt's result, or None if every attempt misses
        """
        if not location or not location.strip():
            return None

        for attempt in self._attempts:
            result = await attempt(location)
            if result is not None:
                return result

        logger.info(f"Could not resolve service area for '{location}'")
        return None

    def get_area_state_mapping(self) -> AreaStateMapping:
        """Get the full area → states mapping."""
        return self.table.area_state_mapping()

    async def _match_gazetteer(self, location: str) -> ResolutionResult | None:
        return self.matcher.match(location)

    async def _geocode(self, location: str) -> ResolutionResult | None:
        if not self.geocode_resolver.enabled:
            return None

        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.geocode_resolver.resolve, location),
                timeout=self.geocode_timeout,
            )
        except asyncio.TimeoutError:
            # The worker thread keeps running until the HTTP timeout, which uses
            # the same bound, so abandoned lookups stay within the default executor.
            logger.warning(
                f"Geocoding '{location}' timed out after {self.geocode_timeout}s"
            )
            return None


def build_resolver(
    settings: Settings, use_geocoding: bool = True
) -> LocationResolver:
    """Build a resolver from settings.

    Args:
        settings: Runtime settings
        use_geocoding: If false, the geocoding fallback is disabled even
            when a credential is configured

    Raises:
        ConfigurationError: If the service area table is invalid
    """
    table = load_service_area_table(settings.service_areas_file)
    matcher = GazetteerMatcher(table, word_boundary=settings.gazetteer_word_boundary)

    geocoder = None
    if use_geocoding and settings.geocoding_enabled:
        geocoder = GoogleGeocoder(
            settings.google_maps_api_key, timeout=settings.geocode_timeout
        )
    else:
        logger.info("Geocoding fallback disabled; using gazetteer only")

    return LocationResolver(
        table,
        matcher,
        GeocodeResolver(table, geocoder),
        geocode_timeout=settings.geocode_timeout,
    )


# Thread-safe singleton implementation
_resolver: LocationResolver | None = None
_resolver_lock = threading.Lock()


def get_resolver() -> LocationResolver:
    """Get a thread-safe singleton resolver configured from the environment."""
    global _resolver
    if _resolver is None:
        with _resolver_lock:
            if _resolver is None:  # Double-check locking pattern
                _resolver = build_resolver(Settings.from_env())
    return _resolver


def reset_resolver() -> None:
    """Drop the singleton so the next call re-reads the environment."""
    global _resolver
    with _resolver_lock:
        _resolver = None


async def detect_area_from_location(location: str) -> ResolutionResult | None:
    """Detect which service area a location belongs to."""
    return await get_resolver().detect(location)


def get_area_state_mapping() -> AreaStateMapping:
    """Get the full area → states mapping."""
    return get_resolver().get_area_state_mapping()


def detection_payload(
    location: str, result: ResolutionResult | None, mapping: AreaStateMapping
) -> dict[str, Any]:
    """Build the ``detect_location_area`` response for a resolution outcome.

    Unresolved locations carry the full area mapping so the caller can pick
    an area manually.
    """
    if result is not None:
        return {
            "success": True,
            "area": result.area,
            "confidence": result.confidence,
            "location": result.location,
            "source": result.source,
            "message": f'Location "{location}" detected in service area: {result.area}',
        }

    return {
        "success": False,
        "message": (
            f'Could not automatically detect service area for "{location}". '
            "Please specify the area manually."
        ),
        "availableAreas": mapping,
    }
