"""Custom exceptions for Malaysia transit MCP."""


class TransitMCPError(Exception):
    """Base exception for Malaysia transit MCP errors."""

    pass


class ConfigurationError(TransitMCPError):
    """Raised when settings or the static service area table are invalid."""

    pass


class ValidationError(TransitMCPError):
    """Raised when tool or CLI input validation fails."""

    pass


class GeocodingError(TransitMCPError):
    """Raised when the geocoding provider cannot produce a usable result."""

    pass


class GeocodingUnavailableError(GeocodingError):
    """Raised when no geocoding credential is configured."""

    pass


class GeocodingQuotaError(GeocodingError):
    """Raised when the provider rejects the request (quota or auth)."""

    pass


class NoGeocodeCandidateError(GeocodingError):
    """Raised when the provider returns zero candidates."""

    pass


class MiddlewareError(TransitMCPError):
    """Raised when a request to the transit middleware fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkError(MiddlewareError):
    """Raised when there's a network-related error talking to the middleware."""

    pass
