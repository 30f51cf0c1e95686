"""
Import error handling utilities.

Decorator mapping import errors to HTTP responses.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status
from pydantic import ValidationError as PydanticValidationError

from cenov_admin.core.exceptions import (
    AuthenticationRequiredError,
    CategoryNotFoundError,
    DatabaseAccessDeniedError,
    ImportProcessError,
    UnknownDatabaseError,
    ValidationError,
)
from cenov_admin.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_import_errors(func: F) -> F:
    """
    Decorator to transform import errors into HTTPExceptions.

    - missing or invalid file, failed validation, unknown database: 400
    - anonymous user on another database than cenov_dev: 403
    - missing authentication: 401
    - unknown category: 404
    - failed import transaction or unexpected error: 500
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except (ValidationError, UnknownDatabaseError) as e:
            logger.warning("Invalid import request", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except AuthenticationRequiredError as e:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)

        except DatabaseAccessDeniedError as e:
            logger.warning("Import database access denied", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)

        except CategoryNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

        except ImportProcessError as e:
            logger.error("Import failed", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

        except PydanticValidationError as e:
            logger.warning("Pydantic validation error", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors())

        except Exception as e:
            log_exception_with_context(logger, "Unexpected failure in import operation", e, endpoint=func.__name__)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Erreur d'importation: {str(e)}",
            )

    return wrapper  # type: ignore
