"""
Unit tests for severity_resolver.
"""
import pytest

from conftest import feature, square
from droughtwatch.exceptions import InvalidCoordinateError, InvalidGeometryError
from droughtwatch.schemas.statistics import StatRecord
from droughtwatch.services.severity_resolver import (
	NO_DROUGHT,
	classify,
	extract_distinct_severities,
	latest_statistics_record,
	resolve_at_point,
)

BOULDER = (40.0150, -105.2705)


class TestClassify:
	"""Test cases for classify."""

	@pytest.mark.parametrize("value,expected", [
		(0, "D0"),
		(1, "D1"),
		(2, "D2"),
		(3, "D3"),
		(4, "D4"),
		(3.0, "D3"),
		("D2", "D2"),
		("d4", "D4"),
		(" D1 ", "D1"),
	])
	def test_known_values(self, value, expected):
		"""Test that DM integers and codes map to their descriptor."""
		assert classify(value).code == expected

	@pytest.mark.parametrize("value", [None, 5, -1, 2.5, "D5", "None", "severe", True, float("nan")])
	def test_unknown_values_map_to_no_drought(self, value):
		"""Test that anything else maps to the no-drought descriptor."""
		assert classify(value) == NO_DROUGHT

	def test_levels_follow_dm(self):
		"""Test that the descriptor level is DM + 1."""
		assert classify(0).level == 1
		assert classify(4).level == 5
		assert NO_DROUGHT.level == 0
		assert classify(4).name == "Exceptional Drought"


class TestResolveAtPoint:
	"""Test cases for resolve_at_point."""

	def test_nested_polygons_resolve_to_maximum(self, nested_feature_collection):
		"""Test that the point takes the highest DM among all covering polygons."""
		result = resolve_at_point(*BOULDER, nested_feature_collection)

		assert result.severity.code == "D2"
		assert result.dm == 2
		assert result.matched_polygon_count == 3
		assert result.in_drought
		assert result.location.latitude == BOULDER[0]

	def test_feature_order_does_not_matter(self, nested_feature_collection):
		"""Test that reversing the feature list gives the same answer."""
		reversed_fc = {
			"type": "FeatureCollection",
			"features": list(reversed(nested_feature_collection["features"]))
		}

		forward = resolve_at_point(*BOULDER, nested_feature_collection)
		backward = resolve_at_point(*BOULDER, reversed_fc)

		assert forward.dm == backward.dm
		assert forward.matched_polygon_count == backward.matched_polygon_count

	def test_no_matching_polygon(self, nested_feature_collection):
		"""Test that a point outside every polygon is not in drought."""
		# Miami, FL
		result = resolve_at_point(25.7617, -80.1918, nested_feature_collection)

		assert result.severity == NO_DROUGHT
		assert result.dm is None
		assert result.matched_polygon_count == 0
		assert not result.in_drought

	def test_empty_feature_collection(self):
		result = resolve_at_point(*BOULDER, {"type": "FeatureCollection", "features": []})

		assert result.severity.code == "None"

	def test_point_on_boundary_counts_as_inside(self):
		"""Test that a point on a polygon edge is covered."""
		fc = {"type": "FeatureCollection", "features": [feature(3, square(-106.0, 39.0, -104.0, 41.0))]}

		edge = resolve_at_point(40.0, -104.0, fc)
		corner = resolve_at_point(41.0, -106.0, fc)

		assert edge.dm == 3
		assert corner.dm == 3

	def test_multipolygon_feature(self):
		"""Test that MultiPolygon features are matched on any part."""
		fc = {
			"type": "FeatureCollection",
			"features": [{
				"type": "Feature",
				"properties": {"DM": 4},
				"geometry": {
					"type": "MultiPolygon",
					"coordinates": [
						square(0.0, 0.0, 1.0, 1.0)["coordinates"],
						square(-106.0, 39.0, -104.0, 41.0)["coordinates"]
					]
				}
			}]
		}

		result = resolve_at_point(*BOULDER, fc)

		assert result.severity.code == "D4"

	def test_malformed_feature_is_skipped(self, nested_feature_collection):
		"""Test that one broken feature does not fail the whole query."""
		nested_feature_collection["features"].insert(0, {"type": "Feature", "properties": {"DM": 4}, "geometry": {"type": "Polygon", "coordinates": [[[0.0, 0.0], [1.0, 1.0]]]}})
		nested_feature_collection["features"].append({"type": "Feature", "properties": {"DM": 4}, "geometry": None})
		nested_feature_collection["features"].append("not a feature")

		result = resolve_at_point(*BOULDER, nested_feature_collection)

		assert result.dm == 2
		assert result.skipped_feature_count == 3

	def test_self_intersecting_polygon_is_repaired(self):
		"""Test that an invalid bow-tie ring still resolves."""
		bow_tie = {
			"type": "Polygon",
			"coordinates": [[[0.0, 0.0], [2.0, 2.0], [2.0, 0.0], [0.0, 2.0], [0.0, 0.0]]]
		}
		fc = {"type": "FeatureCollection", "features": [feature(1, bow_tie)]}

		result = resolve_at_point(1.0, 1.8, fc)

		assert result.dm == 1
		assert result.skipped_feature_count == 0

	def test_feature_without_dm_matches_but_does_not_raise_severity(self):
		fc = {
			"type": "FeatureCollection",
			"features": [{"type": "Feature", "properties": {}, "geometry": square(-106.0, 39.0, -104.0, 41.0)}]
		}

		result = resolve_at_point(*BOULDER, fc)

		assert result.matched_polygon_count == 1
		assert result.severity == NO_DROUGHT

	def test_string_dm_property(self):
		fc = {"type": "FeatureCollection", "features": [feature("3", square(-106.0, 39.0, -104.0, 41.0))]}

		assert resolve_at_point(*BOULDER, fc).dm == 3

	@pytest.mark.parametrize("latitude,longitude", [(91, 0), (0, 181), (-90.5, 0), (0, -180.01)])
	def test_out_of_range_coordinates(self, latitude, longitude, nested_feature_collection):
		"""Test that out of range coordinates are rejected."""
		with pytest.raises(InvalidCoordinateError):
			resolve_at_point(latitude, longitude, nested_feature_collection)

	def test_range_limits_are_valid(self, nested_feature_collection):
		result = resolve_at_point(90, 180, nested_feature_collection)

		assert result.severity == NO_DROUGHT

	@pytest.mark.parametrize("payload", [
		None,
		[],
		{"type": "Feature"},
		{"type": "FeatureCollection"},
		{"type": "FeatureCollection", "features": "nope"},
	])
	def test_invalid_feature_collection(self, payload):
		"""Test that a payload that is not a FeatureCollection is rejected."""
		with pytest.raises(InvalidGeometryError):
			resolve_at_point(*BOULDER, payload)


class TestExtractDistinctSeverities:
	"""Test cases for extract_distinct_severities."""

	def test_distinct_sorted_by_dm(self, nested_feature_collection):
		nested_feature_collection["features"].append(feature(1, square(0.0, 0.0, 1.0, 1.0)))

		result = extract_distinct_severities(nested_feature_collection)

		assert [severity.code for severity in result] == ["D0", "D1", "D2", "D3"]

	def test_unknown_dm_values_are_ignored(self):
		fc = {"type": "FeatureCollection", "features": [feature(7, None), feature(None, None), feature(4, None)]}

		assert [severity.code for severity in extract_distinct_severities(fc)] == ["D4"]

	def test_non_collection_yields_empty_list(self):
		assert extract_distinct_severities(None) == []
		assert extract_distinct_severities({"features": None}) == []


class TestLatestStatisticsRecord:
	"""Test cases for latest_statistics_record."""

	def test_empty(self):
		assert latest_statistics_record([]) is None

	def test_newest_date_wins_regardless_of_order(self, sample_state_rows):
		records = [StatRecord.model_validate(row) for row in reversed(sample_state_rows)]

		assert latest_statistics_record(records).map_date == "20240109"

	def test_mixed_date_formats(self):
		records = [
			StatRecord.model_validate({"MapDate": "2024-01-16T00:00:00", "D1": 1.0}),
			StatRecord.model_validate({"MapDate": 20240109, "D1": 2.0}),
		]

		assert latest_statistics_record(records).d1 == 1.0

	def test_falls_back_to_last_row_without_dates(self):
		records = [
			StatRecord.model_validate({"MapDate": "garbage", "D1": 1.0}),
			StatRecord.model_validate({"D1": 2.0}),
		]

		assert latest_statistics_record(records).d1 == 2.0
