"""
Diagram error handling utilities.

Provides a decorator mapping pipeline exceptions to HTTP responses for
diagram and modification endpoints. The exception message is returned
verbatim as the response detail.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from gridviz.core.exceptions import (
    MissingGeoDataError,
    NotFoundError,
    PipelineIOError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_diagram_errors(func: F) -> F:
    """
    Decorator to transform pipeline errors into HTTPExceptions.

    - ValidationError, MissingGeoDataError: 400
    - NotFoundError: 404
    - PipelineIOError and anything unclassified: 500
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except NotFoundError as e:
            logger.warning(
                "Resource not found",
                extra={"resource": e.resource, "identifier": e.identifier},
            )
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

        except (ValidationError, MissingGeoDataError) as e:
            logger.warning(
                "Invalid diagram request",
                extra={"error": e.message, "details": e.details},
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except PipelineIOError as e:
            logger.exception(
                "Diagram pipeline failed",
                extra={"error": e.message, "details": e.details},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message
            )

        except Exception as e:
            logger.exception(
                "Unexpected failure in diagram operation",
                extra={"error": str(e)},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"An internal error occurred during diagram operation: {str(e)}",
            )

    return wrapper  # type: ignore
