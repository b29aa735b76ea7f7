from typing import Optional
from pydantic import ConfigDict
from droughtwatch.schemas.base import BaseSchema

class RiskLevel(BaseSchema):
	"""A named bucket of wildfire risk points. ``max_points`` is None for the open-ended top bucket."""
	model_config = ConfigDict(frozen=True)

	key: str
	name: str
	min_points: int
	max_points: Optional[int] = None
	color: str

class RiskAssessment(BaseSchema):
	"""Wildfire risk contribution derived from a drought severity code."""
	points: int  # 0-50
	level: str  # None, Low, Moderate, High, Very High, Extreme
	level_key: str
	notes: str
