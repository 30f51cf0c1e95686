"""
API tests for the database explorer routes.

The explorer service is replaced through dependency overrides.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from cenov_admin.api.deps.dependencies import get_explorer_service
from cenov_admin.core.exceptions import (
    InvalidIdentifierError,
    RecordNotFoundError,
    TableNotFoundError,
    ValidationError,
)

BASE = "/api/v1/explorer"


@pytest.fixture
def explorer_service(app) -> MagicMock:
    service = MagicMock()
    app.dependency_overrides[get_explorer_service] = lambda: service
    return service


def _metadata() -> dict:
    return {
        "name": "supplier",
        "schema": "produit",
        "fields": [
            {"name": "sup_id", "type": "Int", "is_required": True, "is_id": True},
            {"name": "sup_label", "type": "String"},
        ],
        "primary_key": "sup_id",
    }


def test_list_tables(client, explorer_service):
    explorer_service.list_tables = AsyncMock(
        return_value={
            "tables": [],
            "hierarchy": {},
            "databases": [{"name": "cenov_dev", "label": "Dev", "badge": "DEV"}],
        }
    )

    response = client.get(f"{BASE}/tables")

    assert response.status_code == 200
    assert response.json()["databases"][0]["badge"] == "DEV"


def test_load_table_passes_paging(client, explorer_service):
    explorer_service.load_table = AsyncMock(
        return_value={"data": [{"sup_id": 1, "sup_label": "ACME"}], "total": 1, "metadata": _metadata()}
    )

    response = client.get(f"{BASE}/cenov_dev/supplier", params={"page": 2, "limit": 50, "schema": "produit"})

    assert response.status_code == 200
    assert response.json()["total"] == 1
    explorer_service.load_table.assert_awaited_once_with("cenov_dev", "supplier", 2, 50, "produit")


def test_unknown_table_is_404(client, explorer_service):
    explorer_service.load_table = AsyncMock(side_effect=TableNotFoundError("inexistante", "cenov_dev"))

    response = client.get(f"{BASE}/cenov_dev/inexistante")

    assert response.status_code == 404
    assert response.json()["detail"] == "Table inexistante introuvable dans la base cenov_dev"


def test_invalid_identifier_is_400(client, explorer_service):
    explorer_service.load_table = AsyncMock(side_effect=InvalidIdentifierError("a-b", "table"))

    response = client.get(f"{BASE}/cenov_dev/a-b")

    assert response.status_code == 400


def test_create_record(client, explorer_service):
    explorer_service.create_record = AsyncMock(return_value={"sup_id": 7, "sup_label": "ACME"})

    response = client.post(f"{BASE}/cenov_dev/supplier/records", json={"values": {"sup_label": "ACME"}})

    assert response.status_code == 201
    assert response.json()["record"] == {"sup_id": 7, "sup_label": "ACME"}
    explorer_service.create_record.assert_awaited_once_with("cenov_dev", "supplier", {"sup_label": "ACME"}, None)


def test_create_record_field_errors(client, explorer_service):
    errors = [{"field": "sup_code", "message": "sup_code est obligatoire"}]
    explorer_service.create_record = AsyncMock(
        side_effect=ValidationError("Données invalides", details={"errors": errors})
    )

    response = client.post(f"{BASE}/cenov_dev/supplier/records", json={"values": {}})

    assert response.status_code == 400
    assert response.json()["detail"]["errors"] == errors


def test_update_record_not_found(client, explorer_service):
    explorer_service.update_record = AsyncMock(side_effect=RecordNotFoundError("supplier", 99))

    response = client.put(
        f"{BASE}/cenov_dev/supplier/records",
        json={"primaryKeyValue": 99, "values": {"sup_label": "x"}},
    )

    assert response.status_code == 404


def test_delete_requires_confirmation(client, explorer_service):
    explorer_service.delete_record = AsyncMock(side_effect=ValidationError("Confirmation invalide"))

    response = client.post(
        f"{BASE}/cenov_dev/supplier/records/delete",
        json={"primaryKeyValue": 3, "confirmation": "oui"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Confirmation invalide"


def test_delete_record(client, explorer_service):
    explorer_service.delete_record = AsyncMock(return_value="supplier #3 - ACME")

    response = client.post(
        f"{BASE}/cenov_dev/supplier/records/delete",
        json={"primaryKeyValue": 3, "confirmation": "SUPPRIMER", "schema": "produit"},
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Enregistrement supprimé: supplier #3 - ACME"
    explorer_service.delete_record.assert_awaited_once_with("cenov_dev", "supplier", 3, "SUPPRIMER", "produit")


def test_update_cell_missing_parameters(client, explorer_service):
    explorer_service.update_cell = AsyncMock()

    response = client.post(f"{BASE}/update-cell", json={"database": "cenov_dev", "tableName": "supplier"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Paramètres manquants: primaryKeyValue, fieldName"
    explorer_service.update_cell.assert_not_awaited()


def test_update_cell(client, explorer_service):
    explorer_service.update_cell = AsyncMock(return_value={"sup_id": 3, "sup_label": "Bolt"})

    response = client.post(
        f"{BASE}/update-cell",
        json={
            "database": "cenov_dev",
            "tableName": "supplier",
            "primaryKeyValue": 3,
            "fieldName": "sup_label",
            "newValue": "Bolt",
        },
    )

    assert response.status_code == 200
    assert response.json()["record"]["sup_label"] == "Bolt"
