"""
Drought severity classification and point-in-polygon resolution.

USDM polygons nest: every D4 area is also covered by D3, D2, D1 and D0 polygons.
A point therefore usually falls in several features at once and its severity is
the maximum DM among them. Points on a polygon boundary count as inside.
"""
import logging
import math
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Union

import shapely
from shapely.geometry import Point, shape

from droughtwatch.exceptions import InvalidGeometryError
from droughtwatch.schemas.location import Coordinate
from droughtwatch.schemas.severity import PointSeverityResult, SeverityDescriptor
from droughtwatch.schemas.statistics import StatRecord
from droughtwatch.utils.location_resolver import validate_coordinates

logger = logging.getLogger(__name__)

NO_DROUGHT = SeverityDescriptor(
	code="None",
	level=0,
	name="No Drought",
	description="No drought conditions"
)

# DM integer to severity descriptor
DM_TO_SEVERITY: Dict[int, SeverityDescriptor] = {
	0: SeverityDescriptor(code="D0", level=1, name="Abnormally Dry", description="Going into drought or coming out of drought"),
	1: SeverityDescriptor(code="D1", level=2, name="Moderate Drought", description="Some damage to crops, pastures; water shortages developing"),
	2: SeverityDescriptor(code="D2", level=3, name="Severe Drought", description="Crop/pasture losses likely; water shortages common; restrictions imposed"),
	3: SeverityDescriptor(code="D3", level=4, name="Extreme Drought", description="Major crop/pasture losses; widespread water shortages; increased fire danger"),
	4: SeverityDescriptor(code="D4", level=5, name="Exceptional Drought", description="Exceptional crop/pasture losses; water emergencies; extreme fire danger"),
}

CODE_TO_SEVERITY: Dict[str, SeverityDescriptor] = {descriptor.code: descriptor for descriptor in DM_TO_SEVERITY.values()}

SeverityInput = Union[int, float, str, None]


def _to_dm(value: Any) -> Optional[int]:
	"""Normalize a numeric magnitude to an int DM in 0-4, or None."""
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		return None
	if isinstance(value, float) and (math.isnan(value) or not value.is_integer()):
		return None
	dm = int(value)
	return dm if dm in DM_TO_SEVERITY else None


def classify(code: SeverityInput) -> SeverityDescriptor:
	"""
	Map a DM magnitude (0-4) or a severity code ('D0'-'D4', any case) to its descriptor.

	Anything else maps to the no-drought descriptor; this never raises.
	"""
	if isinstance(code, str):
		return CODE_TO_SEVERITY.get(code.strip().upper(), NO_DROUGHT)

	dm = _to_dm(code)
	return DM_TO_SEVERITY[dm] if dm is not None else NO_DROUGHT


def _feature_dm(feature: Mapping) -> Optional[int]:
	"""DM property of a feature as an int 0-4, numeric strings included."""
	properties = feature.get("properties") or {}
	if not isinstance(properties, Mapping):
		return None
	raw = properties.get("DM")
	if isinstance(raw, str):
		try:
			raw = float(raw.strip())
		except ValueError:
			return None
	return _to_dm(raw)


def _validate_feature_collection(feature_collection: Any) -> Sequence:
	if not isinstance(feature_collection, Mapping) or feature_collection.get("type") != "FeatureCollection":
		raise InvalidGeometryError(
			"Invalid GeoJSON: must be a FeatureCollection with features array",
			detail=f"Received type: {type(feature_collection).__name__}"
		)
	features = feature_collection.get("features")
	if not isinstance(features, list):
		raise InvalidGeometryError("Invalid GeoJSON: must be a FeatureCollection with features array")
	return features


def _build_geometry(feature: Any):
	"""
	Build a shapely geometry from a GeoJSON feature, repairing invalid rings.

	Raises whatever shapely raises for malformed input; callers skip such features.
	"""
	if not isinstance(feature, Mapping):
		raise TypeError(f"Feature is not an object: {type(feature).__name__}")
	geometry = feature.get("geometry")
	if not geometry:
		raise ValueError("Feature has no geometry")

	geom = shape(geometry)
	if not geom.is_valid:
		geom = shapely.make_valid(geom)
	return geom


def resolve_at_point(latitude: float, longitude: float, feature_collection: Dict[str, Any]) -> PointSeverityResult:
	"""
	Resolve the drought severity at a coordinate from a USDM FeatureCollection.

	Args:
		latitude: Latitude (-90 to 90)
		longitude: Longitude (-180 to 180)
		feature_collection: Parsed GeoJSON FeatureCollection with DM properties

	Returns:
		PointSeverityResult carrying the maximum DM among all features covering the point

	Raises:
		InvalidCoordinateError: Coordinates out of range
		InvalidGeometryError: The payload is not a FeatureCollection
	"""
	validate_coordinates(latitude, longitude)
	features = _validate_feature_collection(feature_collection)

	logger.debug(f"Querying drought at ({latitude}, {longitude}) across {len(features)} features")

	point = Point(longitude, latitude)
	max_dm: Optional[int] = None
	matched = 0
	skipped = 0

	for index, feature in enumerate(features):
		try:
			geom = _build_geometry(feature)
			is_inside = geom.covers(point)
		except Exception as e:
			skipped += 1
			logger.debug(f"Skipping invalid feature {index}: {e}")
			continue

		if not is_inside:
			continue

		matched += 1
		dm = _feature_dm(feature)
		if dm is not None and (max_dm is None or dm > max_dm):
			max_dm = dm

	if skipped:
		logger.warning(f"Skipped {skipped} malformed features while resolving ({latitude}, {longitude})")

	severity = DM_TO_SEVERITY[max_dm] if max_dm is not None else NO_DROUGHT
	logger.debug(f"Drought query complete: severity={severity.code}, polygons_found={matched}, max_dm={max_dm}")

	return PointSeverityResult(
		location=Coordinate(latitude=latitude, longitude=longitude),
		severity=severity,
		dm=max_dm,
		matched_polygon_count=matched,
		skipped_feature_count=skipped
	)


def extract_distinct_severities(feature_collection: Any) -> List[SeverityDescriptor]:
	"""
	Distinct severities present in a FeatureCollection, ascending by DM.
	Used for summary display; anything that is not a collection yields an empty list.
	"""
	if not isinstance(feature_collection, Mapping) or not isinstance(feature_collection.get("features"), list):
		return []

	dms = set()
	for feature in feature_collection["features"]:
		if isinstance(feature, Mapping):
			dm = _feature_dm(feature)
			if dm is not None:
				dms.add(dm)

	return [DM_TO_SEVERITY[dm] for dm in sorted(dms)]


def latest_statistics_record(records: Sequence[StatRecord]) -> Optional[StatRecord]:
	"""
	Most recent statistics row by map date. Falls back to the last row when no
	row has a parseable date.
	"""
	if not records:
		return None

	dated = [(record.parsed_date, index) for index, record in enumerate(records) if record.parsed_date is not None]
	if not dated:
		return records[-1]

	# Later position wins ties
	_, index = max(dated)
	return records[index]
