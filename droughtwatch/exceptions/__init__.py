from droughtwatch.exceptions.base import (
	DroughtWatchException,
	ValidationError,
	InvalidCoordinateError,
	InvalidStateError,
	LocationResolutionError,
	InvalidGeometryError,
	NotFoundError,
	DataNotFoundError,
	ServiceError,
	UpstreamFetchError
)
from droughtwatch.exceptions.handler import handle_service_exceptions

__all__ = [
	"DroughtWatchException",
	"ValidationError",
	"InvalidCoordinateError",
	"InvalidStateError",
	"LocationResolutionError",
	"InvalidGeometryError",
	"NotFoundError",
	"DataNotFoundError",
	"ServiceError",
	"UpstreamFetchError",
	"handle_service_exceptions"
]
