"""
Exception hierarchy for the CENOV admin application.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class CenovAdminException(Exception):
    """Base exception for all CENOV admin application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(CenovAdminException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class InvalidIdentifierError(ValidationError):
    """Raised when a schema, table or column name is not a plain SQL identifier."""

    def __init__(self, identifier: str, kind: str = "identifier") -> None:
        super().__init__(
            f"Nom de {kind} invalide: {identifier}",
            field=kind,
            details={"identifier": identifier},
        )


class UnknownDatabaseError(CenovAdminException):
    """Raised when a database name is not one of the configured databases."""

    def __init__(self, database: str) -> None:
        super().__init__(f"Base de données inconnue: {database}", {"database": database})


class TableNotFoundError(CenovAdminException):
    """Raised when a table cannot be found in a database."""

    def __init__(self, table: str, database: str | None = None) -> None:
        details: dict[str, Any] = {"table": table}
        message = f"Table {table} introuvable"
        if database:
            details["database"] = database
            message = f"{message} dans la base {database}"
        super().__init__(message, details)


class RecordNotFoundError(CenovAdminException):
    """Raised when no row matches a primary key."""

    def __init__(self, table: str, primary_key: Any) -> None:
        super().__init__(
            f"Enregistrement {primary_key} introuvable dans {table}",
            {"table": table, "primary_key": str(primary_key)},
        )


class CategoryNotFoundError(CenovAdminException):
    """Raised when a category code does not exist."""

    def __init__(self, cat_code: str) -> None:
        super().__init__(f"Catégorie {cat_code} introuvable", {"cat_code": cat_code})


class CategoryAmbiguityError(CenovAdminException):
    """Raised when several categories share the same code."""

    def __init__(self, cat_code: str, cat_ids: list[int]) -> None:
        super().__init__(
            f"Ambiguïté BDD : {len(cat_ids)} catégories trouvées avec le code {cat_code}. "
            f"IDs: {', '.join(str(i) for i in cat_ids)}. "
            "Corrigez les doublons en base avant import.",
            {"cat_code": cat_code, "cat_ids": cat_ids},
        )


class ImportProcessError(CenovAdminException):
    """Raised when the catalog import transaction fails."""

    pass


class ExportError(CenovAdminException):
    """Raised when no data could be exported."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message, {"errors": errors} if errors else None)
        self.errors = errors or []


class AuthenticationRequiredError(CenovAdminException):
    """Raised when an operation requires a signed-in user."""

    def __init__(self, message: str = "Authentification requise") -> None:
        super().__init__(message)


class DatabaseAccessDeniedError(CenovAdminException):
    """Raised when an anonymous user targets a database other than cenov_dev."""

    def __init__(self, database: str) -> None:
        super().__init__(
            "Seule la base cenov_dev est accessible sans connexion.",
            {"database": database},
        )
