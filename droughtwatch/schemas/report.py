from typing import List, Optional
from droughtwatch.schemas.base import BaseSchema
from droughtwatch.schemas.risk import RiskAssessment
from droughtwatch.schemas.statistics import DataSource

class DroughtConditions(BaseSchema):
	severity: str
	severity_name: str
	severity_level: int
	description: str
	dm: Optional[int] = None
	matched_polygon_count: int = 0

class WildfireDroughtReport(BaseSchema):
	"""Caller facing drought report with its wildfire risk contribution."""
	location: str
	as_of: str
	drought_conditions: DroughtConditions
	risk_assessment: RiskAssessment
	data_sources: List[DataSource]
	notes: str
