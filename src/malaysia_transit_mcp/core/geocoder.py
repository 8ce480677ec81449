"""Geocoding fallback for locations the gazetteer does not know."""

import logging

import requests
from pydantic import ValidationError as PydanticValidationError

from .exceptions import (
    GeocodingError,
    GeocodingQuotaError,
    GeocodingUnavailableError,
    NoGeocodeCandidateError,
)
from .models import GeocodeCandidate, ResolutionResult
from .tables import ServiceAreaTable

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


class GoogleGeocoder:
    """Client for the Google Geocoding API, restricted to Malaysia."""

    def __init__(
        self,
        api_key: str | None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        """Initialize the geocoder.

        Args:
            api_key: Google Maps API key; requests fail without one
            timeout: Request timeout in seconds
            session: Optional HTTP session shared by every lookup; without one
                each lookup opens and closes its own
        """
        self.api_key = api_key
        self.timeout = timeout
        self.session = session

    def geocode(self, address: str) -> GeocodeCandidate:
        """Look up the best single candidate for an address.

        Args:
            address: Free-text place description

        Returns:
            The first candidate returned by the provider

        Raises:
            GeocodingUnavailableError: If no API key is configured
            GeocodingQuotaError: If the provider rejects the key or quota
            NoGeocodeCandidateError: If the provider finds nothing
            GeocodingError: On network errors or unexpected responses
        """
        if not self.api_key:
            raise GeocodingUnavailableError("No geocoding API key configured")

        params = {
            "address": address,
            "key": self.api_key,
            "region": "my",
            "components": "country:MY",
        }
        session = self.session if self.session is not None else requests.Session()
        try:
            response = session.get(GOOGLE_GEOCODE_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            raise GeocodingError(f"Geocoding request failed: {str(e)}") from e
        except ValueError as e:
            raise GeocodingError("Geocoding response was not valid JSON") from e
        finally:
            if session is not self.session:
                session.close()

        if not isinstance(payload, dict):
            raise GeocodingError("Geocoding response was not a JSON object")

        status = payload.get("status")
        results = payload.get("results") or []
        if not isinstance(results, list):
            raise GeocodingError("Geocoding results were not a list")

        if status in ("OVER_QUERY_LIMIT", "OVER_DAILY_LIMIT", "REQUEST_DENIED"):
            message = payload.get("error_message") or status
            raise GeocodingQuotaError(f"Geocoding rejected: {message}")
        if status == "ZERO_RESULTS" or (status == "OK" and not results):
            raise NoGeocodeCandidateError(f"No geocoding candidates for '{address}'")
        if status != "OK":
            raise GeocodingError(f"Unexpected geocoding status: {status}")

        if not isinstance(results[0], dict):
            raise GeocodingError("Geocoding candidate was not a JSON object")
        try:
            return GeocodeCandidate.from_google_result(results[0])
        except PydanticValidationError as e:
            raise GeocodingError(f"Malformed geocoding candidate: {e}") from e


class GeocodeResolver:
    """Infer a service area from the state of a geocoded location."""

    def __init__(self, table: ServiceAreaTable, geocoder: GoogleGeocoder | None):
        self.table = table
        self.geocoder = geocoder

    @property
    def enabled(self) -> bool:
        """Whether a credential is available for the geocoding path."""
        return self.geocoder is not None and bool(self.geocoder.api_key)

    def resolve(self, location: str) -> ResolutionResult | None:
        """Resolve a location via geocoding.

        Provider failures, empty results and states without a service area
        all produce None; nothing is raised to the caller.

        Args:
            location: Free-text place name

        Returns:
            Medium-confidence result, or None
        """
        if not self.enabled or self.geocoder is None:
            logger.debug("Geocoding disabled, skipping lookup")
            return None

        try:
            candidate = self.geocoder.geocode(location)
        except NoGeocodeCandidateError:
            logger.info(f"No geocoding candidates for '{location}'")
            return None
        except GeocodingError as e:
            logger.warning(f"Geocoding failed for '{location}': {e}")
            return None

        if not candidate.state:
            logger.info(f"Geocoding result for '{location}' has no state")
            return None

        area = self.table.area_for_state(candidate.state)
        if area is None:
            logger.info(f"State '{candidate.state}' is not served by any area")
            return None

        return ResolutionResult(
            area=area.id,
            confidence="medium",
            location=candidate.formatted_address or location,
            source="geocode",
        )
