"""
Database explorer API endpoints.

Routes:
- GET /explorer/tables - Tables of every database, grouped
- GET /explorer/{database}/{table_name} - One page of rows with metadata
- POST /explorer/{database}/{table_name}/records - Create row
- PUT /explorer/{database}/{table_name}/records - Update row
- POST /explorer/{database}/{table_name}/records/delete - Delete row (confirmed)
- POST /explorer/update-cell - Inline edition of one cell

Dependencies: cenov_admin.application.services, cenov_admin.models
System role: Explorer HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query

from cenov_admin.api.deps.dependencies import get_explorer_service
from cenov_admin.application.services import ExplorerService
from cenov_admin.core.exceptions import ValidationError
from cenov_admin.models.explorer import (
    DeleteRecordRequest,
    RecordRequest,
    RecordResponse,
    TableDataResponse,
    TableListResponse,
    UpdateCellRequest,
    UpdateRecordRequest,
)

from .explorer_error_handling import handle_explorer_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/explorer", tags=["explorer"])


@router.get("/tables", response_model=TableListResponse)
@handle_explorer_errors
async def list_tables(
    explorer_service: ExplorerService = Depends(get_explorer_service),
) -> TableListResponse:
    """List tables and views of every database, grouped by database and schema."""
    return TableListResponse(**await explorer_service.list_tables())


@router.post("/update-cell", response_model=RecordResponse)
@handle_explorer_errors
async def update_cell(
    request: UpdateCellRequest,
    explorer_service: ExplorerService = Depends(get_explorer_service),
) -> RecordResponse:
    """
    Update one cell.

    Raises:
        HTTPException(400): Missing parameter or invalid identifier
        HTTPException(404): Unknown table or row
    """
    missing = request.missing_parameters()
    if missing:
        raise ValidationError(f"Paramètres manquants: {', '.join(missing)}", field=missing[0])

    record = await explorer_service.update_cell(
        request.database,
        request.table_name,
        request.primary_key_value,
        request.field_name,
        request.new_value,
        request.schema_name,
    )
    return RecordResponse(message="Cellule mise à jour", record=record)


@router.get("/{database}/{table_name}", response_model=TableDataResponse)
@handle_explorer_errors
async def load_table(
    database: str,
    table_name: str,
    page: int = Query(default=1),
    limit: int = Query(default=500),
    schema: str | None = None,
    explorer_service: ExplorerService = Depends(get_explorer_service),
) -> TableDataResponse:
    """
    Load one page of a table ordered by primary key.

    Args:
        database: Database name
        table_name: Table name
        page: 1-based page (1..10000)
        limit: Rows per page (1..10000, default 500)
        schema: Schema name, searched public first when omitted

    Raises:
        HTTPException(400): Invalid identifier, page or limit
        HTTPException(404): Unknown table
    """
    result = await explorer_service.load_table(database, table_name, page, limit, schema)
    return TableDataResponse(**result)


@router.post("/{database}/{table_name}/records", response_model=RecordResponse, status_code=201)
@handle_explorer_errors
async def create_record(
    database: str,
    table_name: str,
    request: RecordRequest,
    explorer_service: ExplorerService = Depends(get_explorer_service),
) -> RecordResponse:
    """
    Create a row from raw form values.

    Raises:
        HTTPException(400): Values do not match the column types
        HTTPException(404): Unknown table
    """
    record = await explorer_service.create_record(database, table_name, request.values, request.schema_name)
    return RecordResponse(message="Enregistrement créé avec succès", record=record)


@router.put("/{database}/{table_name}/records", response_model=RecordResponse)
@handle_explorer_errors
async def update_record(
    database: str,
    table_name: str,
    request: UpdateRecordRequest,
    explorer_service: ExplorerService = Depends(get_explorer_service),
) -> RecordResponse:
    record = await explorer_service.update_record(
        database, table_name, request.primary_key_value, request.values, request.schema_name
    )
    return RecordResponse(message="Enregistrement mis à jour avec succès", record=record)


@router.post("/{database}/{table_name}/records/delete", response_model=RecordResponse)
@handle_explorer_errors
async def delete_record(
    database: str,
    table_name: str,
    request: DeleteRecordRequest,
    explorer_service: ExplorerService = Depends(get_explorer_service),
) -> RecordResponse:
    """
    Delete a row; the request must carry confirmation "SUPPRIMER".

    Raises:
        HTTPException(400): Wrong confirmation
        HTTPException(404): Unknown table or row
    """
    summary = await explorer_service.delete_record(
        database, table_name, request.primary_key_value, request.confirmation, request.schema_name
    )
    logger.info("Record deleted via API", extra={"database": database, "table": table_name})
    return RecordResponse(message=f"Enregistrement supprimé: {summary}")
