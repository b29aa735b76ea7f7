from typing import Optional
from pydantic import ConfigDict
from droughtwatch.schemas.base import BaseSchema
from droughtwatch.schemas.location import Coordinate

class SeverityDescriptor(BaseSchema):
	"""Canonical description of one USDM drought category."""
	model_config = ConfigDict(frozen=True)

	code: str  # None, D0-D4
	level: int  # 0-5
	name: str
	description: str

class PointSeverityResult(BaseSchema):
	"""Maximum drought severity found at a coordinate."""
	location: Coordinate
	severity: SeverityDescriptor
	dm: Optional[int] = None
	matched_polygon_count: int = 0
	skipped_feature_count: int = 0

	@property
	def in_drought(self) -> bool:
		return self.dm is not None
