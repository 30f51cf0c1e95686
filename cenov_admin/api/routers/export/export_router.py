"""
Export API endpoints.

Routes:
- GET /export - Exportable tables, totals and formats
- POST /export/preview - First rows of the selected sources
- POST /export - Export result with the base64 encoded file
- POST /export/download - Export file streamed as an attachment

Dependencies: cenov_admin.application.services, cenov_admin.models
System role: Export HTTP API
"""

import io
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from cenov_admin.api.deps.dependencies import get_export_service
from cenov_admin.application.services import ExportService
from cenov_admin.models.export import (
    ExportPageResponse,
    ExportRequest,
    ExportResult,
    PreviewResponse,
)

from .export_error_handling import handle_export_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/export", tags=["export"])


@router.get("", response_model=ExportPageResponse)
@handle_export_errors
async def get_export_page(
    export_service: ExportService = Depends(get_export_service),
) -> ExportPageResponse:
    """Importable tables with row counts and the available formats."""
    return await export_service.get_page_data()


@router.post("/preview", response_model=PreviewResponse)
@handle_export_errors
async def preview_export(
    request: ExportRequest,
    export_service: ExportService = Depends(get_export_service),
) -> PreviewResponse:
    """
    Preview the selected sources.

    Sources that cannot be read preview as an empty list.
    """
    logger.info("Export preview requested", extra={"sources": len(request.selected_sources)})
    return await export_service.preview(request)


@router.post("", response_model=ExportResult)
@handle_export_errors
async def export_data(
    request: ExportRequest,
    export_service: ExportService = Depends(get_export_service),
) -> ExportResult:
    """
    Export the selected sources.

    Raises:
        HTTPException(422): No source selected or invalid row limit
        HTTPException(500): No table could be extracted
    """
    logger.info(
        "Export requested",
        extra={"sources": len(request.selected_sources), "format": request.format, "row_limit": request.row_limit},
    )
    return await export_service.export(request)


@router.post("/download")
@handle_export_errors
async def download_export(
    request: ExportRequest,
    export_service: ExportService = Depends(get_export_service),
) -> StreamingResponse:
    """Same export as POST /export, returned as the raw file."""
    export_file, result = await export_service.build_file(request)
    return StreamingResponse(
        io.BytesIO(export_file.content),
        media_type=export_file.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{export_file.file_name}"',
            "X-Exported-Rows": str(result.exported_rows),
        },
    )
