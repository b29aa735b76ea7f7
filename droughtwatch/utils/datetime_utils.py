"""
Datetime utility functions.
"""
from typing import Any, Optional
from datetime import date, datetime, timezone, timedelta, time
import logging
import re
import zoneinfo

from droughtwatch.exceptions import ValidationError

logger = logging.getLogger(__name__)

EASTERN_TZ = zoneinfo.ZoneInfo("America/New_York")

# USDM maps are released on Thursday at 8:30 AM Eastern for the week ending the previous Tuesday
USDM_RELEASE_DELAY = timedelta(days=2)
USDM_RELEASE_TIME = time(8, 30)

_USDM_DATE_PATTERN = re.compile(r"^\d{8}$")


def get_last_tuesday_date(now: Optional[datetime] = None) -> str:
	"""
	Get the date string (YYYYMMDD) of the most recently published USDM map.

	Maps are dated on Tuesdays but only published on the following Thursday at
	8:30 AM Eastern, so on Tuesday, Wednesday and early Thursday the latest
	available map is still the one from two Tuesdays ago.

	Args:
		now: Reference time, defaults to the current time

	Returns:
		Date string in YYYYMMDD format
	"""
	if now is None:
		now = datetime.now(timezone.utc)
	elif now.tzinfo is None:
		now = now.replace(tzinfo=timezone.utc)
	now_eastern = now.astimezone(EASTERN_TZ)

	# Tuesday = 1
	days_since_tuesday = (now_eastern.weekday() - 1) % 7
	last_tuesday = now_eastern.date() - timedelta(days=days_since_tuesday)

	release = datetime.combine(last_tuesday + USDM_RELEASE_DELAY, USDM_RELEASE_TIME, tzinfo=EASTERN_TZ)
	if now_eastern < release:
		last_tuesday = last_tuesday - timedelta(days=7)

	return last_tuesday.strftime("%Y%m%d")


def parse_request_date(value: str) -> date:
	"""
	Parse a date supplied by a caller. Accepts ISO 8601 (``2024-01-02``, with or
	without a time part) and the compact USDM form ``20240102``.

	Raises:
		ValidationError: If the value is not a recognizable date
	"""
	try:
		return _parse_date_text(value)
	except ValueError:
		raise ValidationError(f"Invalid date: {value}", detail="Expected YYYY-MM-DD or YYYYMMDD")


def _parse_date_text(value: Any) -> date:
	text = str(value).strip()
	if _USDM_DATE_PATTERN.match(text):
		return datetime.strptime(text, "%Y%m%d").date()
	return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def is_usdm_date(value: str) -> bool:
	"""True if ``value`` is an 8 digit YYYYMMDD string naming a real calendar day."""
	if not isinstance(value, str) or not _USDM_DATE_PATTERN.match(value):
		return False
	try:
		datetime.strptime(value, "%Y%m%d")
	except ValueError:
		return False
	return True


def format_usdm_date(value: date) -> str:
	"""Format a date as YYYYMMDD for USDM map URLs."""
	return value.strftime("%Y%m%d")


def format_ndmc_date(value: date) -> str:
	"""Format a date as M/D/YYYY (no zero padding) for NDMC queries."""
	return f"{value.month}/{value.day}/{value.year}"


def usdm_date_to_iso(date_str: str) -> str:
	"""Convert YYYYMMDD to an ISO 8601 UTC midnight timestamp."""
	return f"{date_str[0:4]}-{date_str[4:6]}-{date_str[6:8]}T00:00:00Z"


def parse_map_date(value: Any) -> Optional[date]:
	"""
	Parse an NDMC ``MapDate`` value.

	Handles formats like:
	- 20240102
	- 2024-01-02
	- 2024-01-02T00:00:00

	Returns:
		date, or None if the value cannot be parsed
	"""
	if value is None:
		return None
	try:
		return _parse_date_text(value)
	except ValueError:
		logger.warning(f"Failed to parse map date '{value}'")
		return None
