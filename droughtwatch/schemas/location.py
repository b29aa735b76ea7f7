from typing import Optional
from droughtwatch.schemas.base import BaseSchema

# Two-letter postal codes handled by the USDM / NDMC services
US_STATES = {
	'AL': 'Alabama', 'AK': 'Alaska', 'AZ': 'Arizona', 'AR': 'Arkansas', 'CA': 'California',
	'CO': 'Colorado', 'CT': 'Connecticut', 'DE': 'Delaware', 'FL': 'Florida', 'GA': 'Georgia',
	'HI': 'Hawaii', 'ID': 'Idaho', 'IL': 'Illinois', 'IN': 'Indiana', 'IA': 'Iowa',
	'KS': 'Kansas', 'KY': 'Kentucky', 'LA': 'Louisiana', 'ME': 'Maine', 'MD': 'Maryland',
	'MA': 'Massachusetts', 'MI': 'Michigan', 'MN': 'Minnesota', 'MS': 'Mississippi', 'MO': 'Missouri',
	'MT': 'Montana', 'NE': 'Nebraska', 'NV': 'Nevada', 'NH': 'New Hampshire', 'NJ': 'New Jersey',
	'NM': 'New Mexico', 'NY': 'New York', 'NC': 'North Carolina', 'ND': 'North Dakota', 'OH': 'Ohio',
	'OK': 'Oklahoma', 'OR': 'Oregon', 'PA': 'Pennsylvania', 'RI': 'Rhode Island', 'SC': 'South Carolina',
	'SD': 'South Dakota', 'TN': 'Tennessee', 'TX': 'Texas', 'UT': 'Utah', 'VT': 'Vermont',
	'VA': 'Virginia', 'WA': 'Washington', 'WV': 'West Virginia', 'WI': 'Wisconsin', 'WY': 'Wyoming',
	'DC': 'District of Columbia', 'PR': 'Puerto Rico'
}

class Coordinate(BaseSchema):
	"""Coordinate with latitude and longitude."""
	latitude: float
	longitude: float

class ResolvedLocation(BaseSchema):
	"""
	Outcome of location resolution. Either ``latitude``/``longitude`` are set for
	point queries, or ``state`` is set for area queries.
	"""
	source: str  # coordinates, state, location_string
	label: str
	latitude: Optional[float] = None
	longitude: Optional[float] = None
	state: Optional[str] = None
	state_name: Optional[str] = None
	county: Optional[str] = None

	@property
	def has_coordinates(self) -> bool:
		return self.latitude is not None and self.longitude is not None

