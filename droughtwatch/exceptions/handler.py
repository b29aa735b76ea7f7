import logging
from functools import wraps
from fastapi import HTTPException, status
from droughtwatch.exceptions.base import DroughtWatchException

logger = logging.getLogger(__name__)

def handle_service_exceptions(func):
    """
    Decorator to handle service layer exceptions uniformly.
    Converts DroughtWatchException to HTTPException with a structured detail
    of the form {"code": ..., "message": ..., "details": ...}.

    Usage:
        @handle_service_exceptions
        async def my_endpoint():
            # Service calls that may raise DroughtWatchException
            result = await service.do_something()
            return result
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except DroughtWatchException as e:
            logger.warning(f"{func.__name__} failed with {e.code}: {e.message}")
            raise HTTPException(
                status_code=e.status_code,
                detail=e.to_dict()
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error in {func.__name__}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "details": str(e)
                }
            )
    return wrapper
