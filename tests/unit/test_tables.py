"""Tests for the static service area tables."""

import json

import pytest

from malaysia_transit_mcp.core.exceptions import ConfigurationError
from malaysia_transit_mcp.core.tables import build_table, load_service_area_table
from malaysia_transit_mcp.utils.text import normalize_place_name


class TestPackagedTable:
    """Test the table shipped with the package."""

    def test_loads(self, service_area_table):
        """The packaged table loads with known areas."""
        ids = [area.id for area in service_area_table.areas]
        assert ids[0] == "klang-valley"
        assert {"penang", "kuantan", "kedah", "johor"} <= set(ids)

    def test_every_gazetteer_area_exists(self, service_area_table):
        """Every gazetteer entry points at a defined area."""
        ids = {area.id for area in service_area_table.areas}
        assert service_area_table.gazetteer
        assert all(entry.area in ids for entry in service_area_table.gazetteer)

    def test_gazetteer_ordered_most_specific_first(self, service_area_table):
        """Entries are sorted by descending normalized pattern length."""
        lengths = [
            len(normalize_place_name(e.pattern)) for e in service_area_table.gazetteer
        ]
        assert lengths == sorted(lengths, reverse=True)

    def test_loaded_once(self):
        """Repeated loads return the same immutable table."""
        assert load_service_area_table() is load_service_area_table()

    def test_mapping_is_a_copy(self, service_area_table):
        """Mutating the returned mapping leaves the table untouched."""
        mapping = service_area_table.area_state_mapping()
        mapping["penang"].append("Atlantis")
        mapping.pop("kedah")

        fresh = service_area_table.area_state_mapping()
        assert "Atlantis" not in fresh["penang"]
        assert fresh["kedah"] == ["Kedah"]

    def test_mapping_order_follows_areas(self, service_area_table):
        """Mapping keys follow table priority order."""
        mapping = service_area_table.area_state_mapping()
        assert list(mapping) == [area.id for area in service_area_table.areas]

    def test_table_is_frozen(self, service_area_table):
        """The table cannot be reassigned at runtime."""
        with pytest.raises(Exception):
            service_area_table.areas = ()

    def test_get_area(self, service_area_table):
        """Areas are looked up by ID."""
        area = service_area_table.get_area("penang")
        assert area is not None
        assert area.name == "Penang"
        assert service_area_table.get_area("atlantis") is None


class TestAreaForState:
    """Test the state → area inverse lookup."""

    def test_known_states(self, service_area_table):
        """States resolve to their owning area."""
        assert service_area_table.area_for_state("Kedah").id == "kedah"
        assert service_area_table.area_for_state("Pulau Pinang").id == "penang"
        assert service_area_table.area_for_state("Pahang").id == "kuantan"

    def test_federal_territory(self, service_area_table):
        """Federal territory names from the geocoder map to the Klang Valley."""
        area = service_area_table.area_for_state("Wilayah Persekutuan Kuala Lumpur")
        assert area.id == "klang-valley"

    def test_case_insensitive(self, service_area_table):
        """Lookup ignores case."""
        assert service_area_table.area_for_state("KEDAH").id == "kedah"

    def test_unmapped_state(self, service_area_table):
        """States no area covers resolve to nothing."""
        assert service_area_table.area_for_state("Sabah") is None
        assert service_area_table.area_for_state("") is None

    def test_shared_state_precedence(self, overlapping_table):
        """A state claimed by two areas goes to the earlier one."""
        for _ in range(5):
            assert overlapping_table.area_for_state("Selangor").id == "metro"
        assert overlapping_table.area_for_state("Pahang").id == "coast"


class TestBuildTable:
    """Test table validation."""

    def test_unknown_gazetteer_area(self, overlapping_table_data):
        """Gazetteer entries for undefined areas are a configuration defect."""
        overlapping_table_data["gazetteer"]["atlantis"] = ["lost city"]
        with pytest.raises(ConfigurationError, match="atlantis"):
            build_table(overlapping_table_data)

    def test_duplicate_area_ids(self, overlapping_table_data):
        """Area IDs must be unique."""
        overlapping_table_data["areas"].append(
            {"id": "metro", "name": "Metro again", "states": []}
        )
        with pytest.raises(ConfigurationError, match="Duplicate"):
            build_table(overlapping_table_data)

    def test_no_areas(self):
        """A table needs at least one area."""
        with pytest.raises(ConfigurationError):
            build_table({"areas": [], "gazetteer": {}})

    def test_malformed_area(self):
        """Areas missing required fields are rejected."""
        with pytest.raises(ConfigurationError, match="Malformed"):
            build_table({"areas": [{"name": "No ID"}], "gazetteer": {}})

    def test_blank_pattern(self, overlapping_table_data):
        """Patterns that normalize to nothing are rejected."""
        overlapping_table_data["gazetteer"]["metro"].append("!!!")
        with pytest.raises(ConfigurationError):
            build_table(overlapping_table_data)

    def test_ties_keep_file_order(self):
        """Equal-length patterns keep their original order."""
        table = build_table(
            {
                "areas": [
                    {"id": "a", "name": "A", "states": []},
                    {"id": "b", "name": "B", "states": []},
                ],
                "gazetteer": {"a": ["abc"], "b": ["xyz", "longer one"]},
            }
        )
        assert [e.pattern for e in table.gazetteer] == ["longer one", "abc", "xyz"]


class TestLoadFromFile:
    """Test loading alternative tables from disk."""

    def test_load_custom_file(self, tmp_path, overlapping_table_data):
        """A JSON file on disk can replace the packaged table."""
        path = tmp_path / "areas.json"
        path.write_text(json.dumps(overlapping_table_data), encoding="utf-8")

        table = load_service_area_table(str(path))
        assert [a.id for a in table.areas] == ["metro", "coast", "north"]

    def test_missing_file(self, tmp_path):
        """Unreadable files raise a configuration error."""
        with pytest.raises(ConfigurationError):
            load_service_area_table(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        """Invalid JSON raises a configuration error."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_service_area_table(str(path))

    def test_non_object_json(self, tmp_path):
        """The top level must be an object."""
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_service_area_table(str(path))
