"""
WordPress export API endpoints.

Routes:
- GET /wordpress - Stats, product list (filters supplier, category) and filter options
- GET /wordpress/export - WooCommerce CSV download (authenticated)

Dependencies: cenov_admin.application.services, cenov_admin.models
System role: WordPress export HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from cenov_admin.api.deps.dependencies import get_wordpress_service, require_user
from cenov_admin.application.services import WordPressService
from cenov_admin.models.wordpress import WordPressPageResponse

from .wordpress_error_handling import handle_wordpress_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wordpress", tags=["wordpress"])


@router.get("", response_model=WordPressPageResponse)
@handle_wordpress_errors
async def get_wordpress_page(
    supplier: int | None = Query(default=None),
    category: int | None = Query(default=None),
    wordpress_service: WordPressService = Depends(get_wordpress_service),
) -> WordPressPageResponse:
    return await wordpress_service.get_page_data(supplier_id=supplier, category_id=category)


@router.get("/export")
@handle_wordpress_errors
async def export_wordpress_csv(
    database: str | None = Query(default=None),
    ids: str | None = Query(default=None),
    user: str = Depends(require_user),
    wordpress_service: WordPressService = Depends(get_wordpress_service),
) -> Response:
    """
    Download the WooCommerce CSV.

    Args:
        database: cenov_preprod, anything else exports from cenov_dev
        ids: Comma-separated pro_id list; all exportable products when omitted

    Raises:
        HTTPException(401): Anonymous request
        HTTPException(500): CSV generation failed
    """
    logger.info("WordPress export requested", extra={"user": user, "database": database})
    file_name, content = await wordpress_service.export(database, ids)
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
