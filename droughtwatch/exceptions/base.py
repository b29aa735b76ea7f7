from fastapi import status
from typing import Any, Dict, Optional

class DroughtWatchException(Exception):
	"""
	Base exception class for all DroughtWatch custom exceptions.
	Carries a stable machine readable ``code`` next to the human message so the
	route layer can map it to a structured error response.
	"""
	code: str = "INTERNAL_ERROR"

	def __init__(
		self,
		message: str,
		status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail: Optional[str] = None,
		code: Optional[str] = None
	):
		self.message = message
		self.status_code = status_code
		self.detail = detail or message
		if code:
			self.code = code
		super().__init__(self.message)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"code": self.code,
			"message": self.message,
			"details": self.detail
		}

class ValidationError(DroughtWatchException):
	"""
	Exception raised when request validation fails.
	Maps to HTTP 400.
	"""
	code = "VALIDATION_ERROR"

	def __init__(self, message: str, detail: Optional[str] = None):
		super().__init__(
			message=message,
			status_code=status.HTTP_400_BAD_REQUEST,
			detail=detail
		)

class InvalidCoordinateError(ValidationError):
	"""Latitude or longitude outside the valid WGS84 range."""
	code = "INVALID_COORDINATE"

class InvalidStateError(ValidationError):
	"""Unknown two-letter state code."""
	code = "INVALID_STATE"

	def __init__(self, state: str):
		super().__init__(message=f"Invalid state code: {state}")

class LocationResolutionError(ValidationError):
	"""The request did not carry enough information to locate a point or region."""
	code = "LOCATION_RESOLUTION_FAILED"

class InvalidGeometryError(DroughtWatchException):
	"""
	Exception raised when a payload is not a well-formed GeoJSON FeatureCollection.
	Maps to HTTP 422.
	"""
	code = "INVALID_GEOMETRY"

	def __init__(self, message: str, detail: Optional[str] = None):
		super().__init__(
			message=message,
			status_code=422,
			detail=detail
		)

class NotFoundError(DroughtWatchException):
	"""
	Exception raised when a resource is not found.
	Maps to HTTP 404.
	"""
	code = "NOT_FOUND"

	def __init__(self, message: str, detail: Optional[str] = None):
		super().__init__(
			message=message,
			status_code=status.HTTP_404_NOT_FOUND,
			detail=detail
		)

class DataNotFoundError(NotFoundError):
	"""
	No drought map is published for the requested date.
	This is a permanent outcome and must not be retried or cached.
	"""
	code = "DROUGHT_DATA_NOT_FOUND"

	def __init__(self, date_str: str):
		self.date = date_str
		super().__init__(
			message=f"No drought data available for date {date_str}",
			detail="USDM data is available from January 4, 2000 to present, released weekly for Tuesdays"
		)

class ServiceError(DroughtWatchException):
	"""
	Exception raised when a service operation fails.
	Maps to HTTP 500 by default, but can be customized.
	"""
	code = "SERVICE_ERROR"

	def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR, detail: Optional[str] = None):
		super().__init__(
			message=message,
			status_code=status_code,
			detail=detail
		)

class UpstreamFetchError(ServiceError):
	"""
	An upstream data provider failed or returned an unusable payload.
	``upstream_status`` is the provider's HTTP status, or 0 when no response arrived.
	"""
	code = "UPSTREAM_FETCH_ERROR"

	def __init__(self, message: str, detail: Optional[str] = None, upstream_status: int = 0):
		self.upstream_status = upstream_status
		super().__init__(
			message=message,
			status_code=status.HTTP_502_BAD_GATEWAY,
			detail=detail
		)
