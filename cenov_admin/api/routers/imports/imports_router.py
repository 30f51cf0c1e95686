"""
Catalog import API endpoints.

Routes:
- GET /imports - Import configuration and categories per allowed database
- POST /imports/validate - Validate a catalog CSV (form fields csv, database)
- POST /imports/process - Validate then import a catalog CSV
- GET /imports/template - Empty CSV template of a category

Anonymous users may only validate and import into cenov_dev.

Dependencies: cenov_admin.application.services, cenov_admin.models
System role: Import HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Form, Query
from fastapi.responses import Response

from cenov_admin.api.deps.dependencies import get_import_service, is_authenticated
from cenov_admin.application.services import ImportService
from cenov_admin.core.import_config import DEFAULT_IMPORT_DATABASE
from cenov_admin.models.imports import ImportPageResponse, ProcessResponse, ValidateResponse

from .imports_error_handling import handle_import_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/imports", tags=["imports"])


@router.get("", response_model=ImportPageResponse)
@handle_import_errors
async def get_import_page(
    authenticated: bool = Depends(is_authenticated),
    import_service: ImportService = Depends(get_import_service),
) -> ImportPageResponse:
    return await import_service.get_page_data(authenticated)


@router.post("/validate", response_model=ValidateResponse)
@handle_import_errors
async def validate_csv(
    csv: str | None = Form(default=None),
    database: str = Form(default=DEFAULT_IMPORT_DATABASE),
    authenticated: bool = Depends(is_authenticated),
    import_service: ImportService = Depends(get_import_service),
) -> ValidateResponse:
    """
    Validate a catalog CSV without writing anything.

    The report lists errors and warnings with their line numbers; an
    invalid file still answers 200 with success false.

    Raises:
        HTTPException(400): Missing, empty or unparsable file
        HTTPException(403): Anonymous user on another database than cenov_dev
    """
    report = await import_service.validate(database, csv, authenticated)
    return ValidateResponse(validation=report)


@router.post("/process", response_model=ProcessResponse)
@handle_import_errors
async def process_csv(
    csv: str | None = Form(default=None),
    database: str = Form(default=DEFAULT_IMPORT_DATABASE),
    authenticated: bool = Depends(is_authenticated),
    import_service: ImportService = Depends(get_import_service),
) -> ProcessResponse:
    """
    Validate then import a catalog CSV in a single transaction.

    Raises:
        HTTPException(400): Validation errors
        HTTPException(403): Anonymous user on another database than cenov_dev
        HTTPException(500): Import transaction failed
    """
    logger.info("Import requested", extra={"database": database, "authenticated": authenticated})
    result = await import_service.process(database, csv, authenticated)
    return ProcessResponse(result=result)


@router.get("/template")
@handle_import_errors
async def download_template(
    cat_code: str | None = Query(default=None),
    database: str = Query(default=DEFAULT_IMPORT_DATABASE),
    import_service: ImportService = Depends(get_import_service),
) -> Response:
    """
    CSV template: business headers followed by the category attribute codes.

    Raises:
        HTTPException(400): No category given
        HTTPException(404): Unknown category
    """
    file_name, content = await import_service.generate_template(database, cat_code)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
