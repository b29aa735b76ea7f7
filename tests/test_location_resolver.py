"""
Unit tests for location_resolver.
"""
import pytest

from droughtwatch.exceptions import InvalidCoordinateError, InvalidStateError, LocationResolutionError
from droughtwatch.utils.location_resolver import is_valid_state, resolve_location, validate_coordinates


class TestValidateCoordinates:
	"""Test cases for validate_coordinates."""

	@pytest.mark.parametrize("latitude,longitude", [(0, 0), (90, 180), (-90, -180), (40.015, -105.2705)])
	def test_valid(self, latitude, longitude):
		validate_coordinates(latitude, longitude)

	@pytest.mark.parametrize("latitude,longitude", [
		(91, 0),
		(0, 181),
		(-90.0001, 0),
		(0, -181),
		(float("nan"), 0),
		(0, float("nan")),
		("40", 0),
		(True, 0),
		(None, 0),
	])
	def test_invalid(self, latitude, longitude):
		with pytest.raises(InvalidCoordinateError):
			validate_coordinates(latitude, longitude)

	def test_error_is_a_validation_error(self):
		"""Test that coordinate errors map to a 400 response."""
		with pytest.raises(InvalidCoordinateError) as exc_info:
			validate_coordinates(91, 0)

		assert exc_info.value.status_code == 400
		assert exc_info.value.code == "INVALID_COORDINATE"


class TestIsValidState:
	"""Test cases for is_valid_state."""

	@pytest.mark.parametrize("state", ["CO", "co", " tx ", "DC", "PR"])
	def test_known(self, state):
		assert is_valid_state(state)

	@pytest.mark.parametrize("state", ["XX", "", None, "Colorado"])
	def test_unknown(self, state):
		assert not is_valid_state(state)


class TestResolveLocation:
	"""Test cases for resolve_location."""

	def test_coordinates(self):
		result = resolve_location(latitude=40.015, longitude=-105.2705)

		assert result.source == "coordinates"
		assert result.has_coordinates
		assert result.label == "40.0150, -105.2705"
		assert result.state is None

	def test_coordinates_take_precedence(self):
		"""Test that coordinates win when a state is also supplied."""
		result = resolve_location(latitude=40.0, longitude=-105.0, state="TX")

		assert result.source == "coordinates"

	def test_out_of_range_coordinates(self):
		with pytest.raises(InvalidCoordinateError):
			resolve_location(latitude=95, longitude=0)

	def test_single_coordinate_falls_through_to_state(self):
		result = resolve_location(latitude=40.0, state="CO")

		assert result.source == "state"
		assert not result.has_coordinates

	def test_state(self):
		result = resolve_location(state="co")

		assert result.source == "state"
		assert result.state == "CO"
		assert result.state_name == "Colorado"
		assert result.label == "Colorado"

	def test_state_with_county(self):
		result = resolve_location(state="CO", county="Boulder")

		assert result.label == "Boulder County, Colorado"
		assert result.county == "Boulder"

	def test_invalid_state(self):
		with pytest.raises(InvalidStateError) as exc_info:
			resolve_location(state="ZZ")

		assert exc_info.value.code == "INVALID_STATE"

	def test_location_string(self):
		result = resolve_location(location="Boulder County, CO")

		assert result.source == "location_string"
		assert result.state == "CO"
		assert result.label == "Boulder County, CO"

	def test_location_string_skips_non_state_tokens(self):
		result = resolve_location(location="Near US Route 36 in CO")

		assert result.state == "CO"

	def test_unresolvable_location_string(self):
		with pytest.raises(LocationResolutionError):
			resolve_location(location="Boulder, Colorado")

	def test_nothing_supplied(self):
		with pytest.raises(LocationResolutionError) as exc_info:
			resolve_location()

		assert exc_info.value.status_code == 400
