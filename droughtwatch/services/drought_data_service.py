"""
Data access layer for drought datasets.

Every fetch consults the cache first and only populates it after a successful,
well-formed upstream response. Cache keys and per-dataset TTLs live here:

- current USDM map: fixed "current" key, 24h TTL
- historical USDM map: date key, never expires; a 404 is DataNotFoundError and is not cached
- NDMC state/county statistics: state + date range key, 24h TTL

Concurrent misses for the same key each fetch upstream independently.

GeoJSON maps are large: copying them in and out of the cache and scanning their
polygons run on worker threads so the event loop keeps serving other requests.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from droughtwatch.cache import CacheKeys, INFINITE_TTL, SeverityCache
from droughtwatch.config import settings
from droughtwatch.exceptions import DataNotFoundError, UpstreamFetchError, ValidationError
from droughtwatch.http_client.ndmc_client import NDMCClient
from droughtwatch.http_client.usdm_client import USDMClient
from droughtwatch.logging_config import log_fields
from droughtwatch.schemas.severity import PointSeverityResult, SeverityDescriptor
from droughtwatch.schemas.statistics import CountyStatRecord, StatRecord
from droughtwatch.services import severity_resolver
from droughtwatch.utils.datetime_utils import is_usdm_date
from droughtwatch.utils.location_resolver import validate_coordinates

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=StatRecord)


def _is_feature_collection(payload: Any) -> bool:
	return (
		isinstance(payload, dict)
		and payload.get("type") == "FeatureCollection"
		and isinstance(payload.get("features"), list)
	)


class DroughtDataService:
	"""Cache-mediated access to USDM maps and NDMC statistics."""

	def __init__(
		self,
		cache: SeverityCache,
		usdm_client: USDMClient,
		ndmc_client: NDMCClient,
		current_ttl: float = settings.current_drought_ttl_seconds,
		statistics_ttl: float = settings.statistics_ttl_seconds
	):
		self.cache = cache
		self.usdm_client = usdm_client
		self.ndmc_client = ndmc_client
		self.current_ttl = current_ttl
		self.statistics_ttl = statistics_ttl

	async def get_current_geojson(self) -> Dict[str, Any]:
		"""
		Current week's USDM FeatureCollection.

		The key does not carry a date, so a new weekly release is picked up only
		once the cached copy ages out.
		"""
		cache_key = CacheKeys.usdm_current()
		cached = await asyncio.to_thread(self.cache.get, cache_key)
		if cached is not None:
			logger.info("Returning cached current drought GeoJSON", extra=log_fields(cache_key=cache_key))
			return cached

		geojson = await self.usdm_client.fetch_current_geojson()
		if not _is_feature_collection(geojson):
			raise UpstreamFetchError(
				"Failed to fetch current drought data from USDM",
				detail="Invalid GeoJSON response: missing FeatureCollection or features array"
			)

		logger.info(
			f"Current drought GeoJSON fetched with {len(geojson['features'])} features",
			extra=log_fields(cache_key=cache_key, feature_count=len(geojson["features"]))
		)
		await asyncio.to_thread(self.cache.set, cache_key, geojson, self.current_ttl)
		return geojson

	async def get_historical_geojson(self, date_str: str) -> Dict[str, Any]:
		"""
		USDM FeatureCollection for a published map date. Cached permanently.

		Args:
			date_str: Date in YYYYMMDD format

		Raises:
			ValidationError: Malformed date
			DataNotFoundError: No map published for that date
			UpstreamFetchError: Any other upstream failure
		"""
		if not is_usdm_date(date_str):
			raise ValidationError("Date must be in YYYYMMDD format", detail=f"Received: {date_str}")

		cache_key = CacheKeys.usdm_historical(date_str)
		cached = await asyncio.to_thread(self.cache.get, cache_key)
		if cached is not None:
			logger.info(f"Returning cached historical drought GeoJSON for {date_str}", extra=log_fields(cache_key=cache_key))
			return cached

		try:
			geojson = await self.usdm_client.fetch_historical_geojson(date_str)
		except UpstreamFetchError as e:
			if e.upstream_status == 404:
				logger.warning(f"Historical drought data not found for date {date_str}")
				raise DataNotFoundError(date_str)
			raise

		if not _is_feature_collection(geojson):
			raise UpstreamFetchError(
				f"Failed to fetch drought data for date {date_str}",
				detail="Invalid GeoJSON response: missing FeatureCollection or features array"
			)

		logger.info(
			f"Historical drought GeoJSON for {date_str} fetched with {len(geojson['features'])} features",
			extra=log_fields(cache_key=cache_key, feature_count=len(geojson["features"]))
		)
		await asyncio.to_thread(self.cache.set, cache_key, geojson, INFINITE_TTL)
		return geojson

	async def get_state_statistics(self, state: str, start_date: str, end_date: str) -> List[StatRecord]:
		"""
		NDMC area percentages for a state over a date range (M/D/YYYY dates).
		Empty results are cached like any other.
		"""
		state = state.upper()
		return await self._get_statistics(
			cache_key=CacheKeys.state_stats(state, CacheKeys.date_range(start_date, end_date)),
			fetch=lambda: self.ndmc_client.fetch_state_statistics(state, start_date, end_date),
			record_class=StatRecord,
			description=f"state statistics for {state}"
		)

	async def get_county_statistics(self, state: str, start_date: str, end_date: str) -> List[CountyStatRecord]:
		"""NDMC county statistics for a state over a date range (M/D/YYYY dates)."""
		state = state.upper()
		return await self._get_statistics(
			cache_key=CacheKeys.county_stats(state, CacheKeys.date_range(start_date, end_date)),
			fetch=lambda: self.ndmc_client.fetch_county_statistics(state, start_date, end_date),
			record_class=CountyStatRecord,
			description=f"county statistics for {state}"
		)

	async def _get_statistics(
		self,
		cache_key: str,
		fetch: Callable[[], Awaitable[Any]],
		record_class: Type[R],
		description: str
	) -> List[R]:
		rows = self.cache.get(cache_key)
		if rows is not None:
			logger.info(f"Returning cached {description}", extra=log_fields(cache_key=cache_key))
			return [record_class.model_validate(row) for row in rows]

		rows = await fetch()
		if not isinstance(rows, list):
			raise UpstreamFetchError(
				f"Failed to fetch {description}",
				detail="Invalid response: expected array of statistics"
			)
		try:
			records = [record_class.model_validate(row) for row in rows]
		except PydanticValidationError as e:
			raise UpstreamFetchError(f"Failed to parse {description}", detail=str(e))

		logger.info(f"Fetched {description}: {len(records)} records", extra=log_fields(cache_key=cache_key, record_count=len(records)))
		self.cache.set(cache_key, rows, self.statistics_ttl)
		return records

	async def resolve_current(self, latitude: float, longitude: float) -> PointSeverityResult:
		"""Severity at a point according to the current USDM map."""
		validate_coordinates(latitude, longitude)
		geojson = await self.get_current_geojson()
		return await asyncio.to_thread(severity_resolver.resolve_at_point, latitude, longitude, geojson)

	async def resolve_historical(self, latitude: float, longitude: float, date_str: str) -> PointSeverityResult:
		"""Severity at a point according to the USDM map of ``date_str`` (YYYYMMDD)."""
		validate_coordinates(latitude, longitude)
		geojson = await self.get_historical_geojson(date_str)
		return await asyncio.to_thread(severity_resolver.resolve_at_point, latitude, longitude, geojson)

	async def current_severities(self) -> List[SeverityDescriptor]:
		"""Distinct severities present in the current USDM map."""
		geojson = await self.get_current_geojson()
		return severity_resolver.extract_distinct_severities(geojson)
