"""
Export error handling utilities.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status
from pydantic import ValidationError as PydanticValidationError

from cenov_admin.core.exceptions import (
    ExportError,
    TableNotFoundError,
    UnknownDatabaseError,
    ValidationError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_export_errors(func: F) -> F:
    """
    Decorator to transform export errors into HTTPExceptions.

    An export where no table could be extracted answers 500 with the
    per-table errors.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except ExportError as e:
            logger.error("Export failed", extra={"error": e.message, "errors": e.errors})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"message": e.message, "errors": e.errors},
            )

        except TableNotFoundError as e:
            logger.warning("Export source not found", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

        except (UnknownDatabaseError, ValidationError) as e:
            logger.warning("Invalid export request", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except PydanticValidationError as e:
            logger.warning("Pydantic validation error", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors())

        except Exception as e:
            logger.exception("Unexpected failure in export operation", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Erreur lors de l'export: {str(e)}",
            )

    return wrapper  # type: ignore
