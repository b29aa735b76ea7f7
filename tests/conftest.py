"""
Pytest configuration and fixtures.
"""
import pytest
from unittest.mock import AsyncMock

from droughtwatch.cache import SeverityCache


def square(min_lon, min_lat, max_lon, max_lat):
	"""GeoJSON polygon geometry for an axis aligned box."""
	return {
		"type": "Polygon",
		"coordinates": [[
			[min_lon, min_lat],
			[max_lon, min_lat],
			[max_lon, max_lat],
			[min_lon, max_lat],
			[min_lon, min_lat]
		]]
	}


def feature(dm, geometry):
	return {"type": "Feature", "properties": {"DM": dm}, "geometry": geometry}


class FakeClock:
	"""Manually advanced monotonic clock."""

	def __init__(self, start=1000.0):
		self.now = start

	def __call__(self):
		return self.now

	def advance(self, seconds):
		self.now += seconds


@pytest.fixture
def clock():
	return FakeClock()


@pytest.fixture
def cache(clock):
	"""Cache on a fake clock with the background sweep not started."""
	return SeverityCache(max_size=500, default_ttl=86400, cleanup_interval=3600, clock=clock)


@pytest.fixture
def nested_feature_collection():
	"""
	Nested USDM style polygons around Boulder, CO (40.0150, -105.2705):
	D0 covers Colorado, D1 and D2 shrink towards Boulder, D3 sits elsewhere.
	"""
	return {
		"type": "FeatureCollection",
		"features": [
			feature(0, square(-109.0, 37.0, -102.0, 41.0)),
			feature(1, square(-106.0, 39.0, -104.0, 41.0)),
			feature(2, square(-105.5, 39.8, -105.0, 40.2)),
			feature(3, square(-103.0, 37.0, -102.0, 38.0))
		]
	}


@pytest.fixture
def mock_usdm_client():
	"""Mock USDM client."""
	client = AsyncMock()
	client.fetch_current_geojson = AsyncMock()
	client.fetch_historical_geojson = AsyncMock()
	client.close = AsyncMock()
	return client


@pytest.fixture
def mock_ndmc_client():
	"""Mock NDMC client."""
	client = AsyncMock()
	client.fetch_state_statistics = AsyncMock()
	client.fetch_county_statistics = AsyncMock()
	client.close = AsyncMock()
	return client


@pytest.fixture
def sample_state_rows():
	"""NDMC state rows as returned by the API, oldest first."""
	return [
		{"MapDate": "20240102", "StateAbbreviation": "CO", "None": 40.0, "D0": 60.0, "D1": 35.0, "D2": 10.0, "D3": 2.0, "D4": 0.0},
		{"MapDate": "20240109", "StateAbbreviation": "CO", "None": 38.0, "D0": 62.0, "D1": 36.5, "D2": 12.0, "D3": 2.5, "D4": 0.0}
	]
