from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable

import pytest
from openpyxl import Workbook

from salon_import.catalog import Catalogs, load_catalogs
from salon_import.integrations.blind_index import make_blind_index
from salon_import.integrations.in_memory import (
    InMemoryCatalogSource,
    InMemoryCustomerDirectory,
    seed_reference_data,
)
from salon_import.models.rows import SOURCE_COLUMNS
from salon_import.services.ports import BlindIndex

TENANT = "salon-1"
BLIND_INDEX_KEY = "pytest-blind-index-key"
HEADERS = list(SOURCE_COLUMNS)


def seed_payload() -> dict[str, Any]:
    """Reference data shared by resolver, reconstruction and job tests."""

    return {
        "services": [
            {"id": "svc-haircut", "name": "Haircut"},
            {"id": "svc-colour", "name": "Hair Colour"},
        ],
        "products": [
            {"id": "prd-shampoo", "name": "Argan Oil Shampoo", "sku": "SH-001"},
        ],
        "staff": [
            {"id": "stf-priyanka", "name": "Priyanka", "staff_id_number": "E-07"},
            {"id": "stf-rahul", "name": "Rahul"},
        ],
        "customers": [
            {"id": "cus-asha", "name": "Asha", "phone": "98765 43210"},
            {"id": "cus-meera", "name": "Meera", "phone": "90000-11111"},
        ],
    }


def sheet_row(**overrides: Any) -> dict[str, Any]:
    """One header-keyed history row; keyword names map to field names."""

    values: dict[str, Any] = {
        "transaction_type": "Service",
        "item_name": "Haircut",
        "item_sku": None,
        "quantity": 1,
        "unit_price": 500,
        "staff_name": "Priyanka",
        "staff_id_number": None,
        "customer_phone": "9876543210",
        "total_amount": 700,
        "payment_mode": "Cash",
        "transaction_date": "15-03-2024 14:30",
        "invoice_number": "INV-100",
    }
    values.update(overrides)
    return {header: values[field] for header, field in SOURCE_COLUMNS.items()}


def write_sheet(path: Path, rows: list[dict[str, Any]], *, headers: list[str] | None = None) -> Path:
    """Write header-keyed rows into a single-sheet workbook."""

    headers = headers or HEADERS
    wb = Workbook()
    ws = wb.active
    ws.append(headers)
    for row in rows:
        ws.append([row.get(h) for h in headers])
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


@pytest.fixture
def blind_index() -> BlindIndex:
    return make_blind_index(BLIND_INDEX_KEY)


@pytest.fixture
def reference_data(blind_index: BlindIndex) -> tuple[InMemoryCatalogSource, InMemoryCustomerDirectory]:
    return seed_reference_data(seed_payload(), tenant_id=TENANT, blind_index=blind_index)


@pytest.fixture
def catalogs(reference_data: tuple[InMemoryCatalogSource, InMemoryCustomerDirectory]) -> Catalogs:
    catalog, _ = reference_data
    return asyncio.run(load_catalogs(TENANT, catalog))


@pytest.fixture
def make_sheet(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a workbook under the test's temp directory."""

    def _make(rows: list[dict[str, Any]], *, name: str = "history.xlsx", headers: list[str] | None = None) -> Path:
        return write_sheet(tmp_path / name, rows, headers=headers)

    return _make
