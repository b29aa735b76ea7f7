from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple
import logging
import time

from fastapi import APIRouter, Depends, Query

from droughtwatch.exceptions import NotFoundError, ValidationError, handle_service_exceptions
from droughtwatch.services import report_service
from droughtwatch.services.drought_data_service import DroughtDataService
from droughtwatch.services.severity_resolver import latest_statistics_record
from droughtwatch.dependencies import get_drought_data_service
from droughtwatch.utils.datetime_utils import (
	format_ndmc_date,
	format_usdm_date,
	get_last_tuesday_date,
	parse_request_date,
	usdm_date_to_iso,
)
from droughtwatch.utils.location_resolver import resolve_location

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/drought", tags=["drought"])

USDM_DATA_SOURCE = "USDM GeoJSON"
NDMC_DATA_SOURCE = "NDMC Data Services API"

# NDMC rows are weekly; a two week window holds the latest published row
STATISTICS_LOOKBACK = timedelta(days=13)


def _envelope(tool: str, started: float, data: Any, **metadata: Any) -> Dict[str, Any]:
	return {
		"success": True,
		"data": data,
		"metadata": {
			"tool": tool,
			"execution_time_ms": round((time.monotonic() - started) * 1000, 1),
			"timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
			**metadata
		}
	}


def _require_state(state: str) -> Tuple[str, str]:
	resolved = resolve_location(state=state)
	return resolved.state, resolved.state_name


def _statistics_window(end: date) -> Tuple[str, str]:
	return format_ndmc_date(end - STATISTICS_LOOKBACK), format_ndmc_date(end)


@router.get("/current")
@handle_service_exceptions
async def get_drought_current(
	latitude: Optional[float] = Query(default=None, description="Latitude (-90 to 90)"),
	longitude: Optional[float] = Query(default=None, description="Longitude (-180 to 180)"),
	state: Optional[str] = Query(default=None, description="State abbreviation (e.g., CO)"),
	county: Optional[str] = Query(default=None, description="County name"),
	location: Optional[str] = Query(default=None, description="Location name (e.g., Boulder County, CO)"),
	format: str = Query(default="wildfire_schema", pattern="^(json|wildfire_schema)$"),
	service: DroughtDataService = Depends(get_drought_data_service)
):
	"""
	Current drought conditions for a location.

	Coordinates are resolved against the current USDM polygons and include the
	wildfire risk contribution. A state (or a location string naming one) returns
	the latest NDMC statistics row for that state instead.
	"""
	started = time.monotonic()
	resolved = resolve_location(
		latitude=latitude,
		longitude=longitude,
		state=state,
		county=county,
		location=location
	)

	if resolved.has_coordinates:
		result = await service.resolve_current(resolved.latitude, resolved.longitude)
		data_date = get_last_tuesday_date()
		if format == "wildfire_schema":
			data = report_service.transform_to_wildfire_report(
				result,
				location_name=resolved.label,
				data_date=usdm_date_to_iso(data_date)
			).to_dict()
		else:
			data = {**result.to_dict(), "in_drought": result.in_drought}
		return _envelope("get_drought_current", started, data, data_source=USDM_DATA_SOURCE, data_date=data_date)

	start_date, end_date = _statistics_window(datetime.now(timezone.utc).date())
	records = await service.get_state_statistics(resolved.state, start_date, end_date)
	latest = latest_statistics_record(records)
	data = {
		"state": resolved.state_name,
		"state_code": resolved.state,
		"location": resolved.label,
		"statistics": report_service.snapshot(latest).to_dict() if latest else None,
		"note": "For precise point-based drought severity, provide latitude/longitude coordinates."
	}
	return _envelope("get_drought_current", started, data, data_source=NDMC_DATA_SOURCE)


@router.get("/historical/point")
@handle_service_exceptions
async def get_drought_at_date(
	latitude: float = Query(..., description="Latitude (-90 to 90)"),
	longitude: float = Query(..., description="Longitude (-180 to 180)"),
	map_date: str = Query(..., alias="date", description="USDM map date (YYYY-MM-DD or YYYYMMDD, a Tuesday)"),
	service: DroughtDataService = Depends(get_drought_data_service)
):
	"""
	Drought severity at a point on a published USDM map date.
	Published maps never change and are cached permanently.
	"""
	started = time.monotonic()
	date_str = format_usdm_date(parse_request_date(map_date))
	result = await service.resolve_historical(latitude, longitude, date_str)
	data = report_service.transform_to_wildfire_report(result, data_date=usdm_date_to_iso(date_str)).to_dict()
	return _envelope("get_drought_at_date", started, data, data_source=USDM_DATA_SOURCE, data_date=date_str)


@router.get("/area")
@handle_service_exceptions
async def get_drought_by_area(
	state: str = Query(..., min_length=2, max_length=2, description="State abbreviation (e.g., CO)"),
	include_counties: bool = Query(default=False, description="Include county-level breakdown"),
	as_of: Optional[str] = Query(default=None, alias="date", description="Specific date (ISO 8601), defaults to latest"),
	service: DroughtDataService = Depends(get_drought_data_service)
):
	"""
	Drought category area percentages (D0-D4) for a state, optionally per county.
	"""
	started = time.monotonic()
	state_code, state_name = _require_state(state)
	target = parse_request_date(as_of) if as_of else datetime.now(timezone.utc).date()
	start_date, end_date = _statistics_window(target)

	logger.info(f"Getting drought by area for {state_code} (include_counties={include_counties})")
	records = await service.get_state_statistics(state_code, start_date, end_date)
	if not records:
		raise NotFoundError(f"No drought statistics available for {state_code}", detail=f"{start_date} - {end_date}")

	summary = report_service.transform_statistics(records, state_code, state_name)
	if include_counties:
		county_records = await service.get_county_statistics(state_code, start_date, end_date)
		summary.counties = report_service.summarize_counties(county_records)

	return _envelope("get_drought_by_area", started, summary.to_dict(), data_source=NDMC_DATA_SOURCE)


@router.get("/historical")
@handle_service_exceptions
async def get_drought_historical(
	state: str = Query(..., min_length=2, max_length=2, description="State abbreviation"),
	start_date: str = Query(..., description="Start date (ISO 8601)"),
	end_date: str = Query(..., description="End date (ISO 8601)"),
	aggregation: str = Query(default="weekly", pattern="^(weekly|monthly)$"),
	service: DroughtDataService = Depends(get_drought_data_service)
):
	"""
	Drought severity progression for a state over a date range, with trend.
	"""
	started = time.monotonic()
	state_code, state_name = _require_state(state)
	start = parse_request_date(start_date)
	end = parse_request_date(end_date)
	if start > end:
		raise ValidationError("start_date must not be after end_date", detail=f"{start_date} > {end_date}")

	records = await service.get_state_statistics(state_code, format_ndmc_date(start), format_ndmc_date(end))
	timeline = report_service.build_timeline(
		records,
		state_code=state_code,
		state_name=state_name,
		start_date=start.isoformat(),
		end_date=end.isoformat(),
		aggregation=aggregation
	)
	return _envelope("get_drought_historical", started, timeline.to_dict(), data_source=NDMC_DATA_SOURCE)


@router.get("/statistics")
@handle_service_exceptions
async def get_drought_statistics(
	state: str = Query(..., min_length=2, max_length=2, description="State abbreviation"),
	compare_to: Optional[str] = Query(default=None, pattern="^last_year$", description="Comparison period"),
	service: DroughtDataService = Depends(get_drought_data_service)
):
	"""
	Current drought statistics for a state, optionally compared to a year earlier.
	"""
	started = time.monotonic()
	state_code, state_name = _require_state(state)
	today = datetime.now(timezone.utc).date()

	start_date, end_date = _statistics_window(today)
	current = latest_statistics_record(await service.get_state_statistics(state_code, start_date, end_date))
	if current is None:
		raise NotFoundError(f"No drought statistics available for {state_code}", detail=f"{start_date} - {end_date}")

	previous = None
	if compare_to == "last_year":
		last_start, last_end = _statistics_window(today - timedelta(days=365))
		previous = latest_statistics_record(await service.get_state_statistics(state_code, last_start, last_end))

	result = report_service.compare_statistics(current, previous, state_code, state_name)
	return _envelope("get_drought_statistics", started, result.to_dict(), data_source=NDMC_DATA_SOURCE)


@router.get("/severities")
@handle_service_exceptions
async def get_current_severities(
	service: DroughtDataService = Depends(get_drought_data_service)
):
	"""Drought categories present anywhere on the current USDM map."""
	started = time.monotonic()
	severities = await service.current_severities()
	data = {"severities": [severity.to_dict() for severity in severities]}
	return _envelope("get_current_severities", started, data, data_source=USDM_DATA_SOURCE)
