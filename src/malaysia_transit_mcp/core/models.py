"""Data models for service area resolution."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Confidence = Literal["high", "medium", "low"]
ResolutionSource = Literal["gazetteer", "geocode"]


class ServiceArea(BaseModel):
    """A transit service area served independently by the middleware."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable short key (e.g. 'penang')")
    name: str = Field(..., description="Display name")
    states: tuple[str, ...] = Field(
        default_factory=tuple, description="Malaysian states covered by the area"
    )

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class GazetteerEntry(BaseModel):
    """A known place-name keyword pointing at a service area."""

    model_config = ConfigDict(frozen=True)

    pattern: str = Field(..., min_length=1, description="Case-insensitive keyword")
    area: str = Field(..., description="Service area ID")

    def __str__(self) -> str:
        return f"{self.pattern} → {self.area}"


class ResolutionResult(BaseModel):
    """Outcome of resolving a free-text location to a service area."""

    model_config = ConfigDict(frozen=True)

    area: str = Field(..., description="Resolved service area ID")
    confidence: Confidence = Field(..., description="Reliability of the match")
    location: str = Field(
        ..., description="Original input or the geocoder's formatted address"
    )
    source: ResolutionSource = Field(..., description="Method that produced the match")

    def __str__(self) -> str:
        return f"{self.location} → {self.area} ({self.confidence}, {self.source})"


class GeocodeCandidate(BaseModel):
    """The parts of a geocoding result needed for state-level inference."""

    formatted_address: str | None = Field(None, description="Provider-normalized address")
    state: str | None = Field(None, description="Administrative area level 1 name")
    country: str | None = Field(None, description="ISO country code")

    @classmethod
    def from_google_result(cls, result: dict[str, Any]) -> "GeocodeCandidate":
        """Build a candidate from one entry of a Google Geocoding ``results`` list."""
        state = None
        country = None
        components = result.get("address_components")
        for component in components if isinstance(components, list) else []:
            if not isinstance(component, dict):
                continue
            types = component.get("types") or []
            if "administrative_area_level_1" in types and state is None:
                state = component.get("long_name") or component.get("short_name")
            elif "country" in types:
                country = component.get("short_name")

        return cls(
            formatted_address=result.get("formatted_address"),
            state=state,
            country=country,
        )
