import os
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
	return os.getenv(name, default).strip().lower() not in ("0", "false", "no", "off")


class Settings:
	# Logging configuration
	log_level: str = os.getenv("LOG_LEVEL", "INFO")

	# Cache configuration
	cache_ttl_seconds: int = int(os.getenv("CACHE_TTL_SECONDS", "86400"))  # 24 hours default
	cache_max_size: int = int(os.getenv("CACHE_MAX_SIZE", "500"))
	cache_cleanup_interval: int = int(os.getenv("CACHE_CLEANUP_INTERVAL", "3600"))
	cache_copy_on_read: bool = _env_bool("CACHE_COPY_ON_READ", "true")

	# Per-dataset TTLs. Historical USDM maps are immutable and are cached without expiry.
	current_drought_ttl_seconds: int = int(os.getenv("CURRENT_DROUGHT_TTL_SECONDS", "86400"))
	statistics_ttl_seconds: int = int(os.getenv("STATISTICS_TTL_SECONDS", "86400"))

	# Upstream data sources
	usdm_gis_data_url: str = os.getenv("USDM_GIS_DATA_URL", "https://droughtmonitor.unl.edu/data/json")
	usdm_api_base_url: str = os.getenv("USDM_API_BASE_URL", "https://usdmdataservices.unl.edu/api")

	# HTTP client configuration
	http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
	http_max_retries: int = int(os.getenv("HTTP_MAX_RETRIES", "3"))
	http_retry_delay_seconds: float = float(os.getenv("HTTP_RETRY_DELAY_SECONDS", "1.0"))
	http_user_agent: str = os.getenv("HTTP_USER_AGENT", "DroughtWatch/1.0 (Wildfire Risk Assessment)")

	# Geographic data handling
	coordinate_precision: int = int(os.getenv("COORDINATE_PRECISION", "4"))

	# Server metadata
	server_name: str = "droughtwatch"
	server_version: str = "1.0.0"
	server_description: str = "US Drought Monitor API for wildfire risk assessment"

	def validate(self) -> List[str]:
		"""
		Check the loaded configuration for values the service cannot run with.

		Returns:
			List of human readable problems, empty when the configuration is valid
		"""
		errors = []
		if self.cache_ttl_seconds < 0:
			errors.append("CACHE_TTL_SECONDS must be non-negative")
		if self.cache_max_size < 1:
			errors.append("CACHE_MAX_SIZE must be at least 1")
		if self.cache_cleanup_interval <= 0:
			errors.append("CACHE_CLEANUP_INTERVAL must be positive")
		if self.http_max_retries < 1:
			errors.append("HTTP_MAX_RETRIES must be at least 1")
		if self.coordinate_precision < 1 or self.coordinate_precision > 10:
			errors.append("COORDINATE_PRECISION must be between 1 and 10")
		return errors

settings = Settings()
