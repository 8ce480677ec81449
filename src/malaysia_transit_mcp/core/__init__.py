"""Core service area resolution functionality."""

from .config import Settings
from .exceptions import (
    ConfigurationError,
    GeocodingError,
    GeocodingQuotaError,
    GeocodingUnavailableError,
    MiddlewareError,
    NetworkError,
    NoGeocodeCandidateError,
    TransitMCPError,
    ValidationError,
)
from .gazetteer import GazetteerMatcher
from .geocoder import GeocodeResolver, GoogleGeocoder
from .middleware import MiddlewareClient
from .models import GazetteerEntry, GeocodeCandidate, ResolutionResult, ServiceArea
from .resolver import (
    LocationResolver,
    build_resolver,
    detect_area_from_location,
    detection_payload,
    get_area_state_mapping,
    get_resolver,
)
from .tables import ServiceAreaTable, build_table, load_service_area_table

__all__ = [
    "ConfigurationError",
    "GazetteerEntry",
    "GazetteerMatcher",
    "GeocodeCandidate",
    "GeocodeResolver",
    "GeocodingError",
    "GeocodingQuotaError",
    "GeocodingUnavailableError",
    "GoogleGeocoder",
    "LocationResolver",
    "MiddlewareClient",
    "MiddlewareError",
    "NetworkError",
    "NoGeocodeCandidateError",
    "ResolutionResult",
    "ServiceArea",
    "ServiceAreaTable",
    "Settings",
    "TransitMCPError",
    "ValidationError",
    "build_resolver",
    "build_table",
    "detect_area_from_location",
    "detection_payload",
    "get_area_state_mapping",
    "get_resolver",
    "load_service_area_table",
]
