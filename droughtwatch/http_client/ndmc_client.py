"""
HTTP client for the NDMC (National Drought Mitigation Center) data services.
Dates are passed in M/D/YYYY format.
"""
import logging
from typing import Any, List, Optional

import httpx

from droughtwatch.config import settings
from droughtwatch.http_client.base_client import BaseHTTPClient

logger = logging.getLogger(__name__)


class NDMCClient(BaseHTTPClient):
	"""Fetches tabular drought statistics for states and counties."""

	def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
		super().__init__(
			base_url=base_url or settings.usdm_api_base_url,
			default_headers={"User-Agent": settings.http_user_agent},
			timeout=settings.http_timeout_seconds,
			max_retries=settings.http_max_retries,
			retry_delay=settings.http_retry_delay_seconds,
			transport=transport
		)

	async def fetch_state_statistics(self, state: str, start_date: str, end_date: str) -> List[Any]:
		"""
		Drought category area percentages for a state.

		Args:
			state: State abbreviation (e.g., 'CO')
			start_date: Start date, M/D/YYYY
			end_date: End date, M/D/YYYY
		"""
		logger.info(f"Fetching state drought statistics for {state} ({start_date} - {end_date})")
		return await self.get(
			"/StateStatistics/GetDroughtSeverityStatisticsByAreaPercent",
			params={
				"aoi": state.upper(),
				"startdate": start_date,
				"enddate": end_date,
				"statisticsType": "1"
			}
		)

	async def fetch_county_statistics(self, state: str, start_date: str, end_date: str) -> List[Any]:
		"""
		Per-county drought statistics, including DSCI, for a state.
		"""
		logger.info(f"Fetching county drought statistics for {state} ({start_date} - {end_date})")
		return await self.get(
			"/CountyStatistics/GetDSCI",
			params={
				"aoi": state.upper(),
				"startdate": start_date,
				"enddate": end_date
			}
		)
