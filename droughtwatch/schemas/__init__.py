from droughtwatch.schemas.location import Coordinate, ResolvedLocation
from droughtwatch.schemas.severity import SeverityDescriptor, PointSeverityResult
from droughtwatch.schemas.risk import RiskLevel, RiskAssessment
from droughtwatch.schemas.statistics import StatRecord, CountyStatRecord
from droughtwatch.schemas.report import WildfireDroughtReport

__all__ = [
	"Coordinate",
	"ResolvedLocation",
	"SeverityDescriptor",
	"PointSeverityResult",
	"RiskLevel",
	"RiskAssessment",
	"StatRecord",
	"CountyStatRecord",
	"WildfireDroughtReport"
]
