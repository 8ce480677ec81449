"""HTTP client for the Malaysia transit middleware REST API."""

from typing import Any

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import DEFAULT_MIDDLEWARE_URL
from .exceptions import MiddlewareError, NetworkError


class MiddlewareClient:
    """Thin JSON client for the transit middleware."""

    def __init__(
        self,
        base_url: str = DEFAULT_MIDDLEWARE_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Middleware base URL
            timeout: Request timeout in seconds
            session: Optional HTTP session to reuse
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Issue a GET request and decode the JSON body.

        Args:
            path: Endpoint path starting with ``/``
            params: Optional query parameters; None values are dropped

        Returns:
            Decoded JSON response body

        Raises:
            MiddlewareError: If the middleware answers with an error status
            NetworkError: If the middleware cannot be reached after retries
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        return self._fetch(f"{self.base_url}{path}", query)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception_type(NetworkError),
        reraise=True,
    )
    def _fetch(self, url: str, params: dict[str, Any]) -> Any:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            raise NetworkError(f"Failed to reach middleware: {str(e)}") from e
        except requests.exceptions.RequestException as e:
            raise MiddlewareError(f"Middleware request failed: {str(e)}") from e

        if not response.ok:
            raise MiddlewareError(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MiddlewareError("Middleware returned invalid JSON") from e
