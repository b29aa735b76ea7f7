"""
Process-wide service wiring.

The cache and upstream clients are built once at application startup and torn
down at shutdown; routes receive them through FastAPI dependencies.
"""
import logging
from dataclasses import dataclass

from fastapi import Request

from droughtwatch.cache import SeverityCache
from droughtwatch.config import Settings, settings
from droughtwatch.http_client.ndmc_client import NDMCClient
from droughtwatch.http_client.usdm_client import USDMClient
from droughtwatch.services.drought_data_service import DroughtDataService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
	cache: SeverityCache
	usdm_client: USDMClient
	ndmc_client: NDMCClient
	drought_data_service: DroughtDataService

	async def shutdown(self) -> None:
		"""Stop the cache sweep and close upstream connections."""
		self.cache.shutdown()
		await self.usdm_client.close()
		await self.ndmc_client.close()
		logger.info("Service container shut down")


def build_container(config: Settings = settings) -> ServiceContainer:
	"""Construct the cache, clients and data service, and start the cache sweep."""
	cache = SeverityCache(
		max_size=config.cache_max_size,
		default_ttl=config.cache_ttl_seconds,
		cleanup_interval=config.cache_cleanup_interval,
		copy_on_read=config.cache_copy_on_read
	)
	cache.start_cleanup()

	usdm_client = USDMClient()
	ndmc_client = NDMCClient()
	service = DroughtDataService(
		cache=cache,
		usdm_client=usdm_client,
		ndmc_client=ndmc_client,
		current_ttl=config.current_drought_ttl_seconds,
		statistics_ttl=config.statistics_ttl_seconds
	)
	return ServiceContainer(
		cache=cache,
		usdm_client=usdm_client,
		ndmc_client=ndmc_client,
		drought_data_service=service
	)


def get_container(request: Request) -> ServiceContainer:
	return request.app.state.container


def get_drought_data_service(request: Request) -> DroughtDataService:
	return get_container(request).drought_data_service


def get_cache(request: Request) -> SeverityCache:
	return get_container(request).cache
