"""
Unit tests for report_service.
"""
import pytest

from droughtwatch.schemas.location import Coordinate
from droughtwatch.schemas.severity import PointSeverityResult
from droughtwatch.schemas.statistics import CountyStatRecord, StatRecord
from droughtwatch.services import report_service
from droughtwatch.services.severity_resolver import DM_TO_SEVERITY, NO_DROUGHT


def _records(rows):
	return [StatRecord.model_validate(row) for row in rows]


def _weekly_rows(d2_values, start_day=2):
	"""Weekly January/February 2024 rows with the given D2 percentages."""
	rows = []
	for week, d2 in enumerate(d2_values):
		day = start_day + 7 * week
		month, day = (1, day) if day <= 31 else (2, day - 31)
		rows.append({"MapDate": f"2024{month:02d}{day:02d}", "D0": 80.0, "D1": 50.0, "D2": d2, "D3": 0.0, "D4": 0.0})
	return rows


class TestTransformToWildfireReport:
	"""Test cases for report_service.transform_to_wildfire_report."""

	def test_drought_report(self):
		result = PointSeverityResult(
			location=Coordinate(latitude=40.015, longitude=-105.2705),
			severity=DM_TO_SEVERITY[3],
			dm=3,
			matched_polygon_count=4
		)

		report = report_service.transform_to_wildfire_report(result, location_name="Boulder, CO", data_date="2024-01-09T00:00:00Z")

		assert report.location == "Boulder, CO"
		assert report.as_of == "2024-01-09T00:00:00Z"
		assert report.drought_conditions.severity == "D3"
		assert report.drought_conditions.severity_level == 4
		assert report.drought_conditions.matched_polygon_count == 4
		assert report.risk_assessment.points == 40
		assert report.risk_assessment.level == "Very High"
		assert report.data_sources[0].name == "US Drought Monitor"

	def test_location_defaults_to_formatted_coordinates(self):
		result = PointSeverityResult(
			location=Coordinate(latitude=40.015, longitude=-105.2705),
			severity=NO_DROUGHT
		)

		report = report_service.transform_to_wildfire_report(result)

		assert report.location == "40.0150°N, 105.2705°W"
		assert report.drought_conditions.severity == "None"
		assert report.risk_assessment.level == "None"
		assert report.as_of.endswith("Z")

	def test_to_dict_is_json_compatible(self):
		result = PointSeverityResult(location=Coordinate(latitude=-33.9, longitude=18.4), severity=NO_DROUGHT)

		data = report_service.transform_to_wildfire_report(result).to_dict()

		assert data["location"] == "33.9000°S, 18.4000°E"
		assert data["drought_conditions"]["dm"] is None
		assert data["risk_assessment"]["level_key"] == "NONE"


class TestTransformStatistics:
	"""Test cases for report_service.transform_statistics."""

	def test_uses_latest_record(self, sample_state_rows):
		summary = report_service.transform_statistics(_records(sample_state_rows), "CO", "Colorado")

		assert summary.state == "Colorado"
		assert summary.as_of == "20240109"
		assert summary.summary.in_drought_percent == 36.5
		assert summary.summary.severe_or_worse_percent == 12.0
		assert summary.summary.abnormally_dry_or_worse_percent == 62.0
		assert summary.summary.drought_categories == {"D0": 62.0, "D1": 36.5, "D2": 12.0, "D3": 2.5, "D4": 0.0}
		assert summary.counties is None

	def test_state_name_defaults_to_code(self, sample_state_rows):
		summary = report_service.transform_statistics(_records(sample_state_rows), "CO")

		assert summary.state == "CO"

	def test_empty_records(self):
		with pytest.raises(ValueError):
			report_service.transform_statistics([], "CO")


class TestSummarizeCounties:
	"""Test cases for report_service.summarize_counties."""

	def test_county_rows(self):
		records = [CountyStatRecord.model_validate({
			"MapDate": "20240109",
			"County": "Boulder County",
			"FIPS": 8013,
			"None": 10.0,
			"D0": 90.0,
			"D1": 40.0,
			"D2": 5.0,
			"D3": 0.0,
			"D4": 0.0,
			"DSCI": 135
		})]

		counties = report_service.summarize_counties(records)

		assert counties[0].name == "Boulder County"
		assert counties[0].fips == "8013"
		assert counties[0].dsci == 135.0
		assert counties[0].drought_categories["None"] == 10.0
		assert counties[0].drought_categories["D1"] == 40.0


class TestBuildTimeline:
	"""Test cases for report_service.build_timeline."""

	def test_weekly_keeps_every_row_in_date_order(self):
		rows = _weekly_rows([10.0, 12.0, 30.0])

		timeline = report_service.build_timeline(
			_records(list(reversed(rows))),
			state_code="CO",
			state_name="Colorado",
			start_date="2024-01-01",
			end_date="2024-01-31"
		)

		assert timeline.data_points == 3
		assert [entry.date for entry in timeline.timeline] == ["20240102", "20240109", "20240116"]
		assert timeline.trend.direction == "worsening"
		assert timeline.trend.severity_change == 20.0

	def test_monthly_keeps_last_row_per_month(self):
		rows = _weekly_rows([10.0, 12.0, 14.0, 16.0, 18.0, 20.0])

		timeline = report_service.build_timeline(
			_records(rows),
			state_code="CO",
			state_name="Colorado",
			start_date="2024-01-01",
			end_date="2024-02-29",
			aggregation="monthly"
		)

		assert [entry.date for entry in timeline.timeline] == ["20240130", "20240206"]
		assert timeline.aggregation == "monthly"
		assert timeline.trend.direction == "stable"

	def test_improving_trend(self):
		timeline = report_service.build_timeline(_records(_weekly_rows([40.0, 20.0])), "CO", "Colorado", "2024-01-01", "2024-01-31")

		assert timeline.trend.direction == "improving"
		assert "-20.0%" in timeline.trend.description

	def test_single_point_is_insufficient(self):
		timeline = report_service.build_timeline(_records(_weekly_rows([40.0])), "CO", "Colorado", "2024-01-01", "2024-01-31")

		assert timeline.trend.direction == "insufficient_data"
		assert timeline.trend.severity_change is None

	def test_no_records(self):
		timeline = report_service.build_timeline([], "CO", "Colorado", "2024-01-01", "2024-01-31", aggregation="monthly")

		assert timeline.data_points == 0
		assert timeline.timeline == []
		assert timeline.trend.direction == "insufficient_data"


class TestCompareStatistics:
	"""Test cases for report_service.compare_statistics."""

	def _record(self, d1):
		return StatRecord.model_validate({"MapDate": "20240109", "D0": 80.0, "D1": d1, "D2": 5.0})

	def test_without_previous(self):
		result = report_service.compare_statistics(self._record(30.0), None, "CO", "Colorado")

		assert result.current.in_drought_percent == 30.0
		assert result.comparison is None
		assert result.analysis is None

	@pytest.mark.parametrize("current,previous,trend", [
		(40.0, 30.0, "worsening"),
		(20.0, 30.0, "improving"),
		(33.0, 30.0, "stable"),
		(35.0, 30.0, "stable"),
	])
	def test_trend(self, current, previous, trend):
		result = report_service.compare_statistics(self._record(current), self._record(previous), "CO", "Colorado")

		assert result.analysis.trend == trend
		assert result.analysis.change == round(current - previous, 1)
		assert result.comparison.in_drought_percent == previous
