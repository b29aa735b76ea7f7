from contextlib import asynccontextmanager
import asyncio
import logging
import os
import time

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from droughtwatch.cache import SeverityCache
from droughtwatch.config import settings
from droughtwatch.controllers import drought_controller
from droughtwatch.dependencies import build_container, get_cache
from droughtwatch.logging_config import setup_logging

# Setup structured JSON logging to stdout
setup_logging(level=settings.log_level, service=settings.server_name, version=settings.server_version)
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
	for problem in settings.validate():
		logger.warning(f"Configuration problem: {problem}")

	container = build_container(settings)
	app.state.container = container
	logger.info(f"{settings.server_name} {settings.server_version} started")
	try:
		yield
	finally:
		await container.shutdown()


app = FastAPI(
	title="DroughtWatch API",
	description=settings.server_description,
	version=settings.server_version,
	lifespan=lifespan
)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=False,
	allow_methods=["GET"],
	allow_headers=["*"],
)

app.include_router(drought_controller.router)

@app.get("/")
async def root():
	return {
		"message": "Welcome to DroughtWatch API!",
		"endpoints": {
			"current": "/drought/current",
			"historical_point": "/drought/historical/point",
			"area": "/drought/area",
			"historical": "/drought/historical",
			"statistics": "/drought/statistics",
			"severities": "/drought/severities",
			"health": "/health"
		}
	}

@app.get("/health")
async def health(cache: SeverityCache = Depends(get_cache)):
	"""Health check endpoint with cache statistics."""
	return {
		"status": "healthy",
		"server_name": settings.server_name,
		"server_version": settings.server_version,
		"uptime_seconds": round(time.monotonic() - STARTED_AT, 1),
		"configuration": {
			"log_level": settings.log_level,
			"cache_ttl_seconds": settings.cache_ttl_seconds,
			"cache_max_size": settings.cache_max_size,
			"cache_cleanup_interval": settings.cache_cleanup_interval
		},
		"endpoints": {
			"usdm_api": settings.usdm_api_base_url,
			"usdm_gis_data": settings.usdm_gis_data_url
		},
		"cache": {
			**cache.stats(),
			"cleanup_running": cache.is_running
		}
	}


def run():
	"""Serve the API with Hypercorn on $PORT (default 8000)."""
	import hypercorn.asyncio
	from hypercorn.config import Config

	port = os.getenv("PORT", "8000")
	logger.info(f"Starting Hypercorn on port {port}...")

	config = Config()
	config.bind = [f"[::]:{port}"]
	asyncio.run(hypercorn.asyncio.serve(app, config))


if __name__ == "__main__":
	run()
