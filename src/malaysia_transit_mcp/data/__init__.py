"""Static service area and gazetteer data."""
