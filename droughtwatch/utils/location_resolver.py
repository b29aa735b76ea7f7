"""
Resolves request parameters (coordinates, state/county, free-form location string)
into a ResolvedLocation.
"""
import logging
import math
import re
from typing import Optional

from droughtwatch.config import settings
from droughtwatch.exceptions import InvalidCoordinateError, InvalidStateError, LocationResolutionError
from droughtwatch.schemas.location import ResolvedLocation, US_STATES

logger = logging.getLogger(__name__)

_STATE_TOKEN = re.compile(r"\b([A-Z]{2})\b")


def is_valid_state(state: Optional[str]) -> bool:
	return state is not None and str(state).strip().upper() in US_STATES


def validate_coordinates(latitude: float, longitude: float) -> None:
	"""
	Raises:
		InvalidCoordinateError: If either value is not a finite number in range
	"""
	for label, value, bound in (("latitude", latitude, 90), ("longitude", longitude, 180)):
		if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
			raise InvalidCoordinateError(f"Invalid {label}: {value!r} (must be a number)")
		if value < -bound or value > bound:
			raise InvalidCoordinateError(f"Invalid {label}: {value} (must be between -{bound} and {bound})")


def resolve_location(
	latitude: Optional[float] = None,
	longitude: Optional[float] = None,
	state: Optional[str] = None,
	county: Optional[str] = None,
	location: Optional[str] = None
) -> ResolvedLocation:
	"""
	Resolve location parameters. Coordinates win over a state code, which wins
	over a free-form location string.

	Args:
		latitude: Latitude (-90 to 90)
		longitude: Longitude (-180 to 180)
		state: State abbreviation (e.g., "CO")
		county: County name, only used for labelling
		location: Location string (e.g., "Boulder County, CO")

	Returns:
		ResolvedLocation

	Raises:
		InvalidCoordinateError: Coordinates out of range
		InvalidStateError: Unknown state code
		LocationResolutionError: Nothing usable was supplied
	"""
	if latitude is not None and longitude is not None:
		validate_coordinates(latitude, longitude)
		precision = settings.coordinate_precision
		return ResolvedLocation(
			source="coordinates",
			label=f"{latitude:.{precision}f}, {longitude:.{precision}f}",
			latitude=latitude,
			longitude=longitude
		)

	if state:
		state_code = state.strip().upper()
		if not is_valid_state(state_code):
			raise InvalidStateError(state)

		state_name = US_STATES[state_code]
		label = f"{county} County, {state_name}" if county else state_name
		logger.debug(f"Resolved state location {state_code} (county={county})")
		return ResolvedLocation(
			source="state",
			label=label,
			state=state_code,
			state_name=state_name,
			county=county
		)

	if location:
		# Only the state is extracted from free text, no geocoding
		for token in _STATE_TOKEN.findall(location):
			if is_valid_state(token):
				return ResolvedLocation(
					source="location_string",
					label=location,
					state=token,
					state_name=US_STATES[token]
				)

		raise LocationResolutionError(
			"Unable to resolve location. Please provide coordinates or state code.",
			detail=f"Location string: {location}"
		)

	raise LocationResolutionError(
		"No location provided. Specify either coordinates (latitude/longitude), state, or location string."
	)
