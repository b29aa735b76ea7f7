"""
In-memory TTL cache that sits in front of every upstream drought dataset.

Entries are kept in insertion order. When the cache is full the oldest inserted
entry is evicted before the new one is stored, whatever its remaining TTL or how
often it was read. Expired entries are removed lazily on read and by a periodic
sweep running on a background thread.
"""
import copy
import logging
import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

# TTL sentinel for entries that never expire (published historical maps)
INFINITE_TTL = math.inf


@dataclass(frozen=True)
class CacheEntry:
	"""A cached value together with the time it was stored and its TTL in seconds."""
	value: Any
	stored_at: float
	ttl: float

	def is_expired(self, now: float) -> bool:
		# inf never compares below a finite age
		return now - self.stored_at > self.ttl


class SeverityCache:
	"""
	Bounded, insertion-ordered TTL cache.

	One instance is created per process and handed to the data access layer.
	All operations are serialized on a single lock so the store can be shared by
	concurrent requests and the sweep thread. None of the operations raise; a
	missing or expired key reads as ``None``.
	"""

	def __init__(
		self,
		max_size: int = 500,
		default_ttl: float = 86400,
		cleanup_interval: float = 3600,
		copy_on_read: bool = True,
		clock: Callable[[], float] = time.monotonic
	):
		"""
		Args:
			max_size: Maximum number of entries held at once
			default_ttl: TTL in seconds used when ``set`` is called without one
			cleanup_interval: Seconds between background sweeps
			copy_on_read: Hand out deep copies so callers never share cached objects
			clock: Monotonic time source, injectable for tests
		"""
		self.max_size = max(1, int(max_size))
		self.default_ttl = default_ttl
		self.cleanup_interval = cleanup_interval
		self.copy_on_read = copy_on_read
		self._clock = clock
		self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
		self._lock = threading.RLock()
		self._hits = 0
		self._misses = 0
		self._stop_event = threading.Event()
		self._cleanup_thread: Optional[threading.Thread] = None

	def get(self, key: str) -> Optional[Any]:
		"""
		Get a value from the cache.

		Args:
			key: Cache key

		Returns:
			The cached value, or None if the key is missing or expired
		"""
		with self._lock:
			entry = self._entries.get(key)
			if entry is None:
				self._misses += 1
				logger.debug(f"Cache miss: {key}")
				return None

			if entry.is_expired(self._clock()):
				del self._entries[key]
				self._misses += 1
				logger.debug(f"Cache miss (expired): {key}")
				return None

			self._hits += 1
			logger.debug(f"Cache hit: {key}")
			value = entry.value

		return copy.deepcopy(value) if self.copy_on_read else value

	def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
		"""
		Store a value, evicting the oldest inserted entry first if the cache is full.

		Args:
			key: Cache key
			value: Value to cache
			ttl: Time to live in seconds, INFINITE_TTL to never expire,
				or None for the default TTL
		"""
		entry_ttl = self.default_ttl if ttl is None else ttl
		stored_value = copy.deepcopy(value) if self.copy_on_read else value

		with self._lock:
			# An overwrite counts as a fresh insertion
			self._entries.pop(key, None)

			if len(self._entries) >= self.max_size:
				evicted_key, _ = self._entries.popitem(last=False)
				logger.debug(f"Cache full, removed oldest entry: {evicted_key}")

			self._entries[key] = CacheEntry(
				value=stored_value,
				stored_at=self._clock(),
				ttl=entry_ttl
			)

		logger.debug(f"Cache set: {key} (ttl={entry_ttl})")

	def delete(self, key: str) -> bool:
		"""
		Delete a key from the cache.

		Returns:
			True if the key was present
		"""
		with self._lock:
			deleted = self._entries.pop(key, None) is not None
		if deleted:
			logger.debug(f"Cache entry deleted: {key}")
		return deleted

	def clear(self) -> None:
		"""Remove every entry and reset the hit/miss counters."""
		with self._lock:
			removed = len(self._entries)
			self._entries.clear()
			self._hits = 0
			self._misses = 0
		logger.debug(f"Cache cleared, {removed} entries removed")

	def stats(self) -> Dict[str, Any]:
		"""
		Snapshot of cache statistics.

		Returns:
			Dictionary with size, hits, misses, hit_rate (0.0 - 1.0) and max_size
		"""
		with self._lock:
			total = self._hits + self._misses
			return {
				"size": len(self._entries),
				"hits": self._hits,
				"misses": self._misses,
				"hit_rate": self._hits / total if total > 0 else 0.0,
				"max_size": self.max_size
			}

	def __len__(self) -> int:
		with self._lock:
			return len(self._entries)

	def __contains__(self, key: str) -> bool:
		"""Presence check that neither touches the counters nor expires the entry."""
		with self._lock:
			return key in self._entries

	def cleanup(self) -> int:
		"""
		Remove every expired entry. Hit/miss counters are not affected.

		Returns:
			Number of entries removed
		"""
		with self._lock:
			now = self._clock()
			expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
			for key in expired:
				del self._entries[key]

		if expired:
			logger.debug(f"Cache cleanup completed, {len(expired)} entries removed")
		return len(expired)

	def start_cleanup(self) -> None:
		"""Start the periodic sweep thread. Calling it twice is a no-op."""
		if self._cleanup_thread is not None and self._cleanup_thread.is_alive():
			return

		self._stop_event.clear()
		self._cleanup_thread = threading.Thread(
			target=self._run_cleanup,
			name="severity-cache-cleanup",
			daemon=True
		)
		self._cleanup_thread.start()
		logger.info(f"Cache cleanup scheduled every {self.cleanup_interval}s")

	def _run_cleanup(self) -> None:
		while not self._stop_event.wait(self.cleanup_interval):
			try:
				self.cleanup()
			except Exception:
				# Keep the sweeper alive, the next pass retries
				logger.exception("Cache cleanup pass failed")

	def shutdown(self, timeout: Optional[float] = 5.0) -> None:
		"""Stop the sweep thread so the process can exit cleanly."""
		self._stop_event.set()
		thread = self._cleanup_thread
		if thread is not None:
			thread.join(timeout)
			self._cleanup_thread = None
			logger.info("Cache cleanup stopped")

	@property
	def is_running(self) -> bool:
		return self._cleanup_thread is not None and self._cleanup_thread.is_alive()


class CacheKeys:
	"""Builders for the stable cache key formats."""

	@staticmethod
	def usdm_current() -> str:
		return "usdm:geojson:current"

	@staticmethod
	def usdm_historical(date_str: str) -> str:
		"""Key for a historical USDM map, ``date_str`` in YYYYMMDD format."""
		return f"usdm:geojson:{date_str}"

	@staticmethod
	def state_stats(state: str, date_range: str) -> str:
		return f"ndmc:state:{state}:{date_range}"

	@staticmethod
	def county_stats(state: str, date_range: str) -> str:
		return f"ndmc:county:{state}:{date_range}"

	@staticmethod
	def date_range(start_date: str, end_date: str) -> str:
		return f"{start_date}_{end_date}"
