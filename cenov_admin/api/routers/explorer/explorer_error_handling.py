"""
Explorer error handling utilities.

Decorator mapping explorer domain errors to HTTP responses.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status
from pydantic import ValidationError as PydanticValidationError

from cenov_admin.core.exceptions import (
    RecordNotFoundError,
    TableNotFoundError,
    UnknownDatabaseError,
    ValidationError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _validation_detail(e: ValidationError) -> Any:
    errors = e.details.get("errors")
    if errors:
        return {"message": e.message, "errors": errors}
    return e.message


def handle_explorer_errors(func: F) -> F:
    """
    Decorator to transform explorer errors into HTTPExceptions.

    - TableNotFoundError, RecordNotFoundError: 404
    - ValidationError (including invalid identifiers), UnknownDatabaseError: 400
    - pydantic ValidationError: 422
    - anything else: 500
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except (TableNotFoundError, RecordNotFoundError) as e:
            logger.warning("Explorer resource not found", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

        except ValidationError as e:
            logger.warning("Invalid explorer request", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_validation_detail(e))

        except UnknownDatabaseError as e:
            logger.warning("Unknown database", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except PydanticValidationError as e:
            logger.warning("Pydantic validation error", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors())

        except Exception as e:
            logger.exception("Unexpected failure in explorer operation", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Erreur serveur: {str(e)}",
            )

    return wrapper  # type: ignore
