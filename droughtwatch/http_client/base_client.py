import asyncio
import logging
import time
from typing import Optional, Dict, Any
import httpx
from abc import ABC

from droughtwatch.exceptions import UpstreamFetchError
from droughtwatch.logging_config import log_fields

logger = logging.getLogger(__name__)

class BaseHTTPClient(ABC):
	"""
	Base HTTP client class for the upstream drought data providers.
	GET requests are retried with exponential backoff; 4xx responses other than
	429 are final and are raised immediately.
	"""

	def __init__(
		self,
		base_url: str,
		default_headers: Optional[Dict[str, str]] = None,
		timeout: float = 30.0,
		max_retries: int = 3,
		retry_delay: float = 1.0,
		transport: Optional[httpx.AsyncBaseTransport] = None
	):
		self.base_url = base_url.rstrip('/')
		self.default_headers = {"Accept": "application/json", **(default_headers or {})}
		self.timeout = timeout
		self.max_retries = max(1, max_retries)
		self.retry_delay = retry_delay
		self.client = httpx.AsyncClient(
			base_url=self.base_url,
			headers=self.default_headers,
			timeout=self.timeout,
			transport=transport
		)

	async def get(
		self,
		endpoint: str,
		params: Optional[Dict[str, Any]] = None,
		headers: Optional[Dict[str, str]] = None
	) -> Any:
		"""
		Perform a GET request.

		Args:
			endpoint: API endpoint (relative to base_url)
			params: Query parameters
			headers: Additional headers (merged with default_headers)

		Returns:
			Parsed response JSON

		Raises:
			UpstreamFetchError: Final failure, with the upstream status (0 if no response)
		"""
		merged_headers = {**self.default_headers, **(headers or {})}
		full_url = f"{self.base_url}{endpoint}"
		last_error: Optional[UpstreamFetchError] = None

		for attempt in range(1, self.max_retries + 1):
			started = time.monotonic()
			try:
				response = await self.client.get(
					endpoint,
					params=params,
					headers=merged_headers
				)
				response.raise_for_status()
				elapsed_ms = round((time.monotonic() - started) * 1000)
				logger.info(
					f"GET {full_url} -> {response.status_code} in {elapsed_ms}ms",
					extra=log_fields(url=full_url, status=response.status_code, elapsed_ms=elapsed_ms, attempt=attempt)
				)
				return response.json()
			except httpx.HTTPStatusError as e:
				status_code = e.response.status_code
				last_error = UpstreamFetchError(
					f"HTTP {status_code}: {e.response.reason_phrase}",
					detail=f"GET {full_url}",
					upstream_status=status_code
				)
				if 400 <= status_code < 500 and status_code != 429:
					raise last_error
			except httpx.RequestError as e:
				last_error = UpstreamFetchError(
					"No response received from server",
					detail=f"GET {full_url}: {e}",
					upstream_status=0
				)
			except ValueError as e:
				# Body was not JSON, not retried
				raise UpstreamFetchError(
					"Invalid JSON response",
					detail=f"GET {full_url}: {e}",
					upstream_status=0
				)

			if attempt < self.max_retries:
				delay = self.retry_delay * (2 ** (attempt - 1))
				logger.warning(f"Request to {full_url} failed ({last_error.message}), retrying in {delay}s (attempt {attempt}/{self.max_retries})")
				await asyncio.sleep(delay)

		logger.error(
			f"Request to {full_url} failed after {self.max_retries} attempts: {last_error.message}",
			extra=log_fields(url=full_url, status=last_error.upstream_status, attempts=self.max_retries)
		)
		raise last_error

	async def close(self):
		"""Close the HTTP client."""
		await self.client.aclose()

	async def __aenter__(self):
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		await self.close()
