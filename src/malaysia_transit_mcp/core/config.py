"""Runtime settings loaded from environment variables."""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError

DEFAULT_MIDDLEWARE_URL = "http://localhost:3000"


def _env_bool(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Immutable settings shared by the MCP server and the CLI."""

    model_config = ConfigDict(frozen=True)

    middleware_url: str = Field(DEFAULT_MIDDLEWARE_URL, description="Middleware base URL")
    middleware_timeout: float = Field(30.0, gt=0, description="Middleware timeout (s)")
    google_maps_api_key: str | None = Field(
        None, description="Geocoding credential; geocoding is disabled without it"
    )
    geocode_timeout: float = Field(10.0, gt=0, description="Geocode call bound (s)")
    service_areas_file: str | None = Field(
        None, description="Alternative service area table (JSON)"
    )
    gazetteer_word_boundary: bool = Field(
        True, description="Match gazetteer patterns on token boundaries only"
    )
    log_level: str = Field("INFO", description="Logging level")

    @property
    def geocoding_enabled(self) -> bool:
        return bool(self.google_maps_api_key)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Environment to read; defaults to ``os.environ``

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        env = os.environ if environ is None else environ

        values: dict[str, object] = {
            "middleware_url": (env.get("MIDDLEWARE_URL") or DEFAULT_MIDDLEWARE_URL).rstrip("/"),
            "google_maps_api_key": env.get("GOOGLE_MAPS_API_KEY") or None,
            "service_areas_file": env.get("SERVICE_AREAS_FILE") or None,
            "gazetteer_word_boundary": _env_bool(env.get("GAZETTEER_WORD_BOUNDARY"), True),
            "log_level": (env.get("LOG_LEVEL") or "INFO").upper(),
        }
        if env.get("MIDDLEWARE_TIMEOUT"):
            values["middleware_timeout"] = env["MIDDLEWARE_TIMEOUT"]
        if env.get("GEOCODE_TIMEOUT"):
            values["geocode_timeout"] = env["GEOCODE_TIMEOUT"]

        try:
            return cls.model_validate(values)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid settings: {e}") from e
