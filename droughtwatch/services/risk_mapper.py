"""
Maps drought severity (None, D0-D4) to a wildfire risk contribution.
"""
import math
from typing import Dict, Tuple

from droughtwatch.schemas.risk import RiskAssessment, RiskLevel

DROUGHT_RISK_POINTS: Dict[str, int] = {
	"None": 0,
	"D0": 10,
	"D1": 20,
	"D2": 30,
	"D3": 40,
	"D4": 50
}

# Contiguous buckets over [0, inf), checked in order against max_points
RISK_LEVELS: Tuple[RiskLevel, ...] = (
	RiskLevel(key="NONE", name="None", min_points=0, max_points=0, color="green"),
	RiskLevel(key="LOW", name="Low", min_points=1, max_points=15, color="yellow"),
	RiskLevel(key="MODERATE", name="Moderate", min_points=16, max_points=25, color="orange"),
	RiskLevel(key="HIGH", name="High", min_points=26, max_points=35, color="red"),
	RiskLevel(key="VERY_HIGH", name="Very High", min_points=36, max_points=45, color="darkred"),
	RiskLevel(key="EXTREME", name="Extreme", min_points=46, max_points=None, color="purple"),
)

RISK_NOTES: Dict[str, str] = {
	"None": "No drought conditions. Normal fire risk from drought perspective.",
	"D0": "Abnormally dry conditions. Slight increase in fire risk. Monitor fuel moisture.",
	"D1": "Moderate drought. Elevated fire risk. Vegetation stress beginning. Exercise caution with fire activities.",
	"D2": "Severe drought. High fire risk. Significant fuel moisture deficits. Limit burning activities.",
	"D3": "Extreme drought. Very high fire risk. Widespread vegetation stress creates highly flammable conditions. Extreme caution advised.",
	"D4": "Exceptional drought. Extreme fire risk. Maximum fuel moisture depletion. Exceptional fire behavior potential. Severe restrictions recommended."
}


def score_for(severity_code: str) -> int:
	"""Wildfire risk points for a severity code; unknown codes score 0."""
	return DROUGHT_RISK_POINTS.get(severity_code, 0)


def risk_level_for(points: float) -> RiskLevel:
	"""
	Bucket risk points. Values at or below 0 are None, anything of 46 or more
	is Extreme with no upper bound. NaN is None.
	"""
	if math.isnan(points):
		return RISK_LEVELS[0]
	for level in RISK_LEVELS[:-1]:
		if points <= level.max_points:
			return level
	return RISK_LEVELS[-1]


def level_for(points: float) -> str:
	return risk_level_for(points).name


def assess(severity_code: str) -> RiskAssessment:
	"""
	Full wildfire risk assessment for a drought severity code.

	Args:
		severity_code: Drought severity code (None, D0-D4)

	Returns:
		RiskAssessment with points, level name, level key and notes
	"""
	points = score_for(severity_code)
	level = risk_level_for(points)
	return RiskAssessment(
		points=points,
		level=level.name,
		level_key=level.key,
		notes=RISK_NOTES.get(severity_code, RISK_NOTES["None"])
	)
