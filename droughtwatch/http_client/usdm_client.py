"""
HTTP client for US Drought Monitor GeoJSON maps.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from droughtwatch.config import settings
from droughtwatch.http_client.base_client import BaseHTTPClient

logger = logging.getLogger(__name__)


class USDMClient(BaseHTTPClient):
	"""Fetches the weekly USDM drought polygons."""

	def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
		super().__init__(
			base_url=base_url or settings.usdm_gis_data_url,
			default_headers={"User-Agent": settings.http_user_agent},
			timeout=settings.http_timeout_seconds,
			max_retries=settings.http_max_retries,
			retry_delay=settings.http_retry_delay_seconds,
			transport=transport
		)

	async def fetch_current_geojson(self) -> Dict[str, Any]:
		"""
		Fetch the current week's drought map.

		Returns:
			Parsed GeoJSON FeatureCollection
		"""
		logger.info(f"Fetching current drought GeoJSON from {self.base_url}")
		return await self.get("/usdm_current.json")

	async def fetch_historical_geojson(self, date_str: str) -> Dict[str, Any]:
		"""
		Fetch the drought map published for a specific date.

		Args:
			date_str (str): Date in 'YYYYMMDD' format (e.g., '20240102')

		Returns:
			Parsed GeoJSON FeatureCollection

		Raises:
			UpstreamFetchError: With upstream_status 404 when no map exists for the date
		"""
		logger.info(f"Fetching historical drought GeoJSON for {date_str}")
		return await self.get(f"/usdm_{date_str}.json")
