"""
WordPress export error handling utilities.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from cenov_admin.core.exceptions import AuthenticationRequiredError, ExportError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_wordpress_errors(func: F) -> F:
    """Decorator to transform WordPress export errors into HTTPExceptions."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except AuthenticationRequiredError as e:
            logger.warning("Anonymous WordPress export refused")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)

        except ExportError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

        except Exception as e:
            logger.exception("Unexpected failure in WordPress export", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Erreur lors de la génération du CSV",
            )

    return wrapper  # type: ignore
