"""
Structured JSON logging configuration.

Every record is written to stdout as one JSON object stamped with the service name
and version. Call sites attach structured context (cache keys, upstream status,
timings) with ``extra=log_fields(...)`` and it is merged into the payload.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Loggers raised to WARNING so request-level chatter does not drown service logs
NOISY_LOGGERS = ("httpx", "httpcore", "hypercorn.access")


def log_fields(**fields: Any) -> Dict[str, Dict[str, Any]]:
	"""
	Build the ``extra`` argument for a logging call.

	Usage:
		logger.info("Cache hit", extra=log_fields(cache_key=key))
	"""
	return {"extra_fields": fields}


class JSONFormatter(logging.Formatter):
	"""
	Formats a record as a single JSON line.

	Args:
		static_fields: Fields stamped on every record (service name, version)
	"""

	def __init__(self, static_fields: Optional[Dict[str, Any]] = None):
		super().__init__()
		self.static_fields = dict(static_fields or {})

	def format(self, record: logging.LogRecord) -> str:
		log_data: Dict[str, Any] = {
			"timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
			"level": record.levelname,
			"logger": record.name,
			"message": record.getMessage(),
			**self.static_fields
		}

		if record.exc_info:
			log_data["exception"] = self.formatException(record.exc_info)

		extra_fields = getattr(record, "extra_fields", None)
		if isinstance(extra_fields, dict):
			log_data.update(extra_fields)

		if record.module:
			log_data["module"] = record.module
		if record.funcName:
			log_data["function"] = record.funcName
		if record.lineno:
			log_data["line"] = record.lineno

		return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", service: Optional[str] = None, version: Optional[str] = None) -> None:
	"""
	Configure application-wide logging to use structured JSON output to stdout.

	Args:
		level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
		service: Service name stamped on every record
		version: Service version stamped on every record

	Note:
		If PYTHONDEBUG is set, the root logger is left alone so a developer's
		own logging configuration takes precedence.
	"""
	resolved_level = getattr(logging, level.upper(), logging.INFO)

	if os.getenv("PYTHONDEBUG", "").lower() in ("1", "true"):
		logging.getLogger("droughtwatch").setLevel(resolved_level)
		return

	static_fields = {}
	if service:
		static_fields["service"] = service
	if version:
		static_fields["version"] = version

	root_logger = logging.getLogger()
	root_logger.setLevel(resolved_level)
	root_logger.handlers.clear()

	# stdout, not stderr: log shippers treat stderr as errors
	stdout_handler = logging.StreamHandler(sys.stdout)
	stdout_handler.setLevel(resolved_level)
	stdout_handler.setFormatter(JSONFormatter(static_fields))
	root_logger.addHandler(stdout_handler)

	for name in NOISY_LOGGERS:
		logging.getLogger(name).setLevel(logging.WARNING)
