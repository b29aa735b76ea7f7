from datetime import date
from typing import Any, Dict, List, Optional
from pydantic import ConfigDict, Field, field_validator
from droughtwatch.schemas.base import BaseSchema
from droughtwatch.utils.datetime_utils import parse_map_date

CATEGORY_CODES = ("D0", "D1", "D2", "D3", "D4")

class StatRecord(BaseSchema):
	"""
	One NDMC row of drought category area percentages for a region and map date.

	Percentages are cumulative as published (D1 includes D2-D4 area) and are kept
	exactly as received.
	"""
	model_config = ConfigDict(extra="allow")

	map_date: Optional[str] = Field(default=None, alias="MapDate")
	none: float = Field(default=0.0, alias="None")
	d0: float = Field(default=0.0, alias="D0")
	d1: float = Field(default=0.0, alias="D1")
	d2: float = Field(default=0.0, alias="D2")
	d3: float = Field(default=0.0, alias="D3")
	d4: float = Field(default=0.0, alias="D4")

	@field_validator("map_date", mode="before")
	@classmethod
	def _map_date_to_str(cls, value: Any) -> Optional[str]:
		if value is None:
			return None
		return str(value)

	@field_validator("none", "d0", "d1", "d2", "d3", "d4", mode="before")
	@classmethod
	def _missing_percent_to_zero(cls, value: Any) -> Any:
		return 0.0 if value is None or value == "" else value

	@property
	def parsed_date(self) -> Optional[date]:
		return parse_map_date(self.map_date)

	@property
	def category_percents(self) -> Dict[str, float]:
		return {
			"D0": self.d0,
			"D1": self.d1,
			"D2": self.d2,
			"D3": self.d3,
			"D4": self.d4
		}

	@property
	def abnormally_dry_or_worse_percent(self) -> float:
		return self.d0

	@property
	def in_drought_percent(self) -> float:
		"""Area in D1 or worse."""
		return self.d1

	@property
	def severe_or_worse_percent(self) -> float:
		"""Area in D2 or worse."""
		return self.d2

class CountyStatRecord(StatRecord):
	"""County level NDMC row, carrying the Drought Severity and Coverage Index."""
	county: Optional[str] = Field(default=None, alias="County")
	fips: Optional[str] = Field(default=None, alias="FIPS")
	dsci: float = Field(default=0.0, alias="DSCI")

	@field_validator("fips", mode="before")
	@classmethod
	def _fips_to_str(cls, value: Any) -> Optional[str]:
		return None if value is None else str(value)

	@field_validator("dsci", mode="before")
	@classmethod
	def _missing_dsci_to_zero(cls, value: Any) -> Any:
		return 0.0 if value is None or value == "" else value

class DataSource(BaseSchema):
	name: str
	url: str
	type: Optional[str] = None
	update_frequency: Optional[str] = None

class DroughtSummary(BaseSchema):
	drought_categories: Dict[str, float]
	abnormally_dry_or_worse_percent: float
	in_drought_percent: float
	severe_or_worse_percent: float

class CountySummary(BaseSchema):
	name: Optional[str] = None
	fips: Optional[str] = None
	drought_categories: Dict[str, float]
	dsci: float = 0.0

class StateDroughtSummary(BaseSchema):
	"""Latest drought category breakdown for a state."""
	state: str
	state_code: str
	as_of: Optional[str] = None
	summary: DroughtSummary
	data_source: DataSource
	counties: Optional[List[CountySummary]] = None

class TimelineEntry(BaseSchema):
	date: Optional[str] = None
	drought_categories: Dict[str, float]

class TrendAnalysis(BaseSchema):
	direction: str  # worsening, improving, stable, insufficient_data
	description: str
	severity_change: Optional[float] = None

class HistoricalTimeline(BaseSchema):
	location: str
	state_code: str
	start_date: str
	end_date: str
	aggregation: str
	trend: TrendAnalysis
	timeline: List[TimelineEntry]
	data_points: int

class StatisticsSnapshot(BaseSchema):
	date: Optional[str] = None
	drought_categories: Dict[str, float] = Field(default_factory=dict)
	in_drought_percent: float
	severe_or_worse_percent: float

class ComparisonAnalysis(BaseSchema):
	change: float
	trend: str

class DroughtStatistics(BaseSchema):
	"""Current state statistics with an optional year-over-year comparison."""
	state: str
	state_code: str
	current: StatisticsSnapshot
	comparison: Optional[StatisticsSnapshot] = None
	analysis: Optional[ComparisonAnalysis] = None
