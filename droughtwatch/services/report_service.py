"""
Turns resolver output and NDMC statistics into caller facing reports.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import pandas as pd

from droughtwatch.config import settings
from droughtwatch.schemas.report import DroughtConditions, WildfireDroughtReport
from droughtwatch.schemas.severity import PointSeverityResult
from droughtwatch.schemas.statistics import (
	CATEGORY_CODES,
	ComparisonAnalysis,
	CountyStatRecord,
	CountySummary,
	DataSource,
	DroughtStatistics,
	DroughtSummary,
	HistoricalTimeline,
	StateDroughtSummary,
	StatisticsSnapshot,
	StatRecord,
	TimelineEntry,
	TrendAnalysis,
)
from droughtwatch.services import risk_mapper
from droughtwatch.services.severity_resolver import latest_statistics_record

logger = logging.getLogger(__name__)

USDM_SOURCE = DataSource(
	name="US Drought Monitor",
	type="drought",
	url="https://droughtmonitor.unl.edu/",
	update_frequency="Weekly (Thursdays)"
)

NDMC_SOURCE = DataSource(
	name="NDMC Data Services",
	url="https://usdmdataservices.unl.edu/api/"
)

# Percentage point change in severe-or-worse area treated as noise
TREND_STABLE_THRESHOLD = 5.0


def _utc_now_iso() -> str:
	return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _format_coordinates(latitude: float, longitude: float) -> str:
	precision = settings.coordinate_precision
	lat_hemisphere = "N" if latitude >= 0 else "S"
	lon_hemisphere = "E" if longitude >= 0 else "W"
	return f"{abs(latitude):.{precision}f}°{lat_hemisphere}, {abs(longitude):.{precision}f}°{lon_hemisphere}"


def transform_to_wildfire_report(
	result: PointSeverityResult,
	location_name: Optional[str] = None,
	data_date: Optional[str] = None
) -> WildfireDroughtReport:
	"""
	Build the wildfire-schema report for a point severity result.

	Args:
		result: Output of the severity resolver
		location_name: Label to show instead of the raw coordinates
		data_date: ISO 8601 as-of timestamp of the map used, defaults to now
	"""
	severity = result.severity
	return WildfireDroughtReport(
		location=location_name or _format_coordinates(result.location.latitude, result.location.longitude),
		as_of=data_date or _utc_now_iso(),
		drought_conditions=DroughtConditions(
			severity=severity.code,
			severity_name=severity.name,
			severity_level=severity.level,
			description=severity.description,
			dm=result.dm,
			matched_polygon_count=result.matched_polygon_count
		),
		risk_assessment=risk_mapper.assess(severity.code),
		data_sources=[USDM_SOURCE],
		notes="USDM data updated weekly on Thursdays. Current data reflects week ending on the most recent Tuesday."
	)


def _summary(record: StatRecord) -> DroughtSummary:
	return DroughtSummary(
		drought_categories=record.category_percents,
		abnormally_dry_or_worse_percent=record.abnormally_dry_or_worse_percent,
		in_drought_percent=record.in_drought_percent,
		severe_or_worse_percent=record.severe_or_worse_percent
	)


def snapshot(record: StatRecord) -> StatisticsSnapshot:
	return StatisticsSnapshot(
		date=record.map_date,
		drought_categories=record.category_percents,
		in_drought_percent=record.in_drought_percent,
		severe_or_worse_percent=record.severe_or_worse_percent
	)


def transform_statistics(records: Sequence[StatRecord], state_code: str, state_name: Optional[str] = None) -> StateDroughtSummary:
	"""
	Summarize the most recent NDMC row for a state. Raw percentages are passed
	through untouched.

	Raises:
		ValueError: If ``records`` is empty
	"""
	latest = latest_statistics_record(records)
	if latest is None:
		raise ValueError("Invalid statistics data: no records")

	return StateDroughtSummary(
		state=state_name or state_code,
		state_code=state_code,
		as_of=latest.map_date,
		summary=_summary(latest),
		data_source=NDMC_SOURCE
	)


def summarize_counties(records: Sequence[CountyStatRecord]) -> List[CountySummary]:
	return [
		CountySummary(
			name=record.county,
			fips=record.fips,
			drought_categories={"None": record.none, **record.category_percents},
			dsci=record.dsci
		)
		for record in records
	]


def statistics_frame(records: Sequence[StatRecord]) -> pd.DataFrame:
	"""
	DataFrame of NDMC rows ordered by map date, one column per category.
	Rows whose date cannot be parsed keep their relative order at the end.
	"""
	frame = pd.DataFrame(
		[
			{"map_date": record.map_date, "parsed_date": record.parsed_date, **record.category_percents}
			for record in records
		],
		columns=["map_date", "parsed_date", *CATEGORY_CODES]
	)
	frame["parsed_date"] = pd.to_datetime(frame["parsed_date"], errors="coerce")
	return frame.sort_values("parsed_date", kind="stable", na_position="last").reset_index(drop=True)


def aggregate_monthly(frame: pd.DataFrame) -> pd.DataFrame:
	"""Keep the last weekly reading of each calendar month."""
	dated = frame.dropna(subset=["parsed_date"])
	if dated.empty:
		return dated
	return dated.groupby(dated["parsed_date"].dt.to_period("M"), sort=True).tail(1).reset_index(drop=True)


def analyze_trend(frame: pd.DataFrame) -> TrendAnalysis:
	"""
	Compare the severe-or-worse (D2+) share between the first and the last row.
	"""
	if len(frame) < 2:
		return TrendAnalysis(direction="insufficient_data", description="Not enough data points to analyze trend")

	change = float(frame["D2"].iloc[-1]) - float(frame["D2"].iloc[0])
	if abs(change) < TREND_STABLE_THRESHOLD:
		return TrendAnalysis(
			direction="stable",
			description="Drought conditions have remained relatively stable",
			severity_change=change
		)
	if change > 0:
		return TrendAnalysis(
			direction="worsening",
			description=f"Drought has intensified (+{change:.1f}% in severe+ drought)",
			severity_change=change
		)
	return TrendAnalysis(
		direction="improving",
		description=f"Drought has lessened ({change:.1f}% in severe+ drought)",
		severity_change=change
	)


def build_timeline(
	records: Sequence[StatRecord],
	state_code: str,
	state_name: str,
	start_date: str,
	end_date: str,
	aggregation: str = "weekly"
) -> HistoricalTimeline:
	"""
	Historical drought timeline and trend for a state.

	Args:
		aggregation: 'weekly' keeps every row, 'monthly' keeps the last row per month
	"""
	frame = statistics_frame(records)
	if aggregation == "monthly":
		frame = aggregate_monthly(frame)

	timeline = [
		TimelineEntry(
			date=row["map_date"],
			drought_categories={code: float(row[code]) for code in CATEGORY_CODES}
		)
		for row in frame.to_dict("records")
	]
	logger.debug(f"Built {aggregation} timeline for {state_code} with {len(timeline)} points")

	return HistoricalTimeline(
		location=state_name,
		state_code=state_code,
		start_date=start_date,
		end_date=end_date,
		aggregation=aggregation,
		trend=analyze_trend(frame),
		timeline=timeline,
		data_points=len(timeline)
	)


def compare_statistics(
	current: StatRecord,
	previous: Optional[StatRecord],
	state_code: str,
	state_name: str
) -> DroughtStatistics:
	"""
	Current statistics, optionally compared with an earlier snapshot. A change in
	drought (D1+) area beyond 5 points either way is reported as a trend.
	"""
	result = DroughtStatistics(state=state_name, state_code=state_code, current=snapshot(current))
	if previous is None:
		return result

	result.comparison = snapshot(previous)
	change = current.in_drought_percent - previous.in_drought_percent
	if change > TREND_STABLE_THRESHOLD:
		trend = "worsening"
	elif change < -TREND_STABLE_THRESHOLD:
		trend = "improving"
	else:
		trend = "stable"
	result.analysis = ComparisonAnalysis(change=round(change, 1), trend=trend)
	return result
