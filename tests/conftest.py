"""Test configuration and fixtures."""

import pytest

from malaysia_transit_mcp.core.tables import build_table, load_service_area_table


@pytest.fixture
def service_area_table():
    """The packaged service area table."""
    return load_service_area_table()


@pytest.fixture
def overlapping_table_data():
    """Raw table where two areas claim Selangor and patterns overlap."""
    return {
        "areas": [
            {"id": "metro", "name": "Metro", "states": ["Kuala Lumpur", "Selangor"]},
            {"id": "coast", "name": "Coast", "states": ["Selangor", "Pahang"]},
            {"id": "north", "name": "North", "states": ["Kedah"]},
        ],
        "gazetteer": {
            "metro": ["central"],
            "coast": ["central station", "beach"],
            "north": ["paddy"],
        },
    }


@pytest.fixture
def overlapping_table(overlapping_table_data):
    """Table built from ``overlapping_table_data``."""
    return build_table(overlapping_table_data)


def make_geocode_payload(
    state: str | None = "Kedah",
    formatted_address: str = "Jalan Sultan Badlishah, 05000 Alor Setar, Kedah, Malaysia",
    status: str = "OK",
) -> dict:
    """Build a Google Geocoding API response body."""
    if status != "OK":
        return {"status": status, "results": []}

    components = [
        {"long_name": "Alor Setar", "short_name": "Alor Setar", "types": ["locality", "political"]},
        {"long_name": "Malaysia", "short_name": "MY", "types": ["country", "political"]},
    ]
    if state is not None:
        components.insert(
            1,
            {
                "long_name": state,
                "short_name": state,
                "types": ["administrative_area_level_1", "political"],
            },
        )

    return {
        "status": "OK",
        "results": [
            {
                "formatted_address": formatted_address,
                "address_components": components,
                "geometry": {"location": {"lat": 6.1248, "lng": 100.3678}},
            }
        ],
    }


@pytest.fixture
def geocode_payload():
    """Factory for Google Geocoding API response bodies."""
    return make_geocode_payload
