from __future__ import annotations
"""Contract tests for the v1 import API."""

import asyncio
import io
import os
from uuid import uuid4

import pytest
from openpyxl import Workbook, load_workbook

from conftest import HEADERS, sheet_row
from salon_import.models.catalog import Customer, ProductItem, ServiceItem, StaffMember
from salon_import.models.rows import SOURCE_COLUMNS

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _get_test_client_and_app():
    """Lazily import FastAPI app to allow model-only tests without web deps."""

    pytest.importorskip("fastapi")
    from fastapi.testclient import TestClient

    os.environ["RUN_INLINE_WORKER"] = "false"
    os.environ.setdefault("SALON_IMPORT_UPLOAD_DIR", os.path.join("outputs", "pytest_tmp", "uploads"))
    from salon_import.config import get_settings

    get_settings.cache_clear()
    from salon_import.api.main import app, container

    return TestClient, app, container


def _seed_tenant(container, tenant_id: str) -> None:
    container.catalog.services.append(ServiceItem(id=f"{tenant_id}-svc", tenant_id=tenant_id, name="Haircut"))
    container.catalog.products.append(
        ProductItem(id=f"{tenant_id}-prd", tenant_id=tenant_id, name="Argan Oil Shampoo", sku="SH-001")
    )
    container.catalog.staff.append(StaffMember(id=f"{tenant_id}-stf", tenant_id=tenant_id, name="Priyanka"))
    container.customers.add(
        Customer(
            id=f"{tenant_id}-cus",
            tenant_id=tenant_id,
            name="Asha",
            phone_hash=container.blind_index("9876543210"),
        )
    )


def _workbook_bytes(rows: list[dict]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.append(HEADERS)
    for row in rows:
        ws.append([row.get(h) for h in HEADERS])
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _drain(container) -> None:
    async def _go() -> None:
        while container.queue.qsize() > 0:
            await container.worker.run_once()

    asyncio.run(_go())


def test_healthz() -> None:
    TestClient, app, _ = _get_test_client_and_app()
    with TestClient(app) as client:
        res = client.get("/healthz")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_upload_requires_tenant_and_xlsx() -> None:
    """Requests without tenant or with other file types are rejected."""

    TestClient, app, _ = _get_test_client_and_app()
    content = _workbook_bytes([sheet_row()])
    with TestClient(app) as client:
        no_tenant = client.post("/v1/import-jobs/upload", files={"file": ("h.xlsx", content, XLSX)})
        csv = client.post(
            "/v1/import-jobs/upload",
            files={"file": ("h.csv", b"a,b\n1,2\n", "text/csv")},
            headers={"X-Tenant-Id": "salon-api"},
        )
    assert no_tenant.status_code == 400
    assert csv.status_code == 400


def test_unknown_job_is_404() -> None:
    TestClient, app, _ = _get_test_client_and_app()
    with TestClient(app) as client:
        res = client.get(f"/v1/import-jobs/{uuid4()}", headers={"X-Tenant-Id": "salon-api"})
    assert res.status_code == 404


def test_upload_process_and_query_flow() -> None:
    """Upload, run the queued task, then poll job and customer history."""

    TestClient, app, container = _get_test_client_and_app()
    tenant_id = f"salon-{uuid4().hex[:8]}"
    _seed_tenant(container, tenant_id)
    content = _workbook_bytes(
        [
            sheet_row(),
            sheet_row(transaction_type="Product", item_name="Argan Oil Shampoo", item_sku="SH-001", unit_price=200),
            sheet_row(invoice_number="INV-101", staff_name="Priya"),
        ]
    )
    headers = {"X-Tenant-Id": tenant_id}

    with TestClient(app) as client:
        create_res = client.post(
            "/v1/import-jobs/upload",
            files={"file": ("history.xlsx", content, XLSX)},
            headers=headers,
        )
        assert create_res.status_code == 200
        created = create_res.json()
        assert created["schema_version"] == "v1"
        assert created["status"] == "queued"
        assert created["task_type"] == "process_import"
        job_id = created["job_id"]

        _drain(container)

        job_res = client.get(f"/v1/import-jobs/{job_id}", headers=headers)
        assert job_res.status_code == 200
        job = job_res.json()
        assert job["status"] == "completed"
        assert job["progress"] == {"total": 2, "processed": 1, "failed": 1}
        assert job["percent_complete"] == 100
        assert job["report_message"] == "Import finished. 1 successful, 1 failed."
        assert job["error_log"][0]["group_key"] == "INV-101"
        assert "Did you mean 'Priyanka'?" in job["error_log"][0]["message"]
        assert job["original_filename"] == "history.xlsx"
        assert job["error"] is None

        foreign = client.get(f"/v1/import-jobs/{job_id}", headers={"X-Tenant-Id": "someone-else"})
        assert foreign.status_code == 404

        list_res = client.get("/v1/import-jobs", headers=headers)
        assert list_res.status_code == 200
        assert [item["job_id"] for item in list_res.json()["items"]] == [job_id]

        for bad in (0, -1):
            bad_list = client.get("/v1/import-jobs", params={"limit": bad}, headers=headers)
            assert bad_list.status_code == 400

        history_res = client.get(f"/v1/customers/{tenant_id}-cus/imported-invoices", headers=headers)
        assert history_res.status_code == 200
        history = history_res.json()
        assert history["total"] == 1
        invoice = history["items"][0]
        assert invoice["invoice_number"] == "INV-100"
        assert invoice["grand_total"] == 700
        assert invoice["payment_details"]["cash"] == 700
        assert invoice["is_imported"] is True

        bad_limit = client.get(
            f"/v1/customers/{tenant_id}-cus/imported-invoices",
            params={"limit": 0},
            headers=headers,
        )
        assert bad_limit.status_code == 400


def test_template_download() -> None:
    TestClient, app, _ = _get_test_client_and_app()
    with TestClient(app) as client:
        res = client.get("/v1/import-jobs/template")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith(XLSX)
    wb = load_workbook(io.BytesIO(res.content))
    assert [c.value for c in wb.active[1]] == list(SOURCE_COLUMNS)


def test_openapi_contract_lists_v1_routes() -> None:
    TestClient, app, _ = _get_test_client_and_app()
    paths = set(app.openapi()["paths"])
    assert {
        "/healthz",
        "/v1/import-jobs/upload",
        "/v1/import-jobs",
        "/v1/import-jobs/{job_id}",
        "/v1/import-jobs/template",
        "/v1/customers/{customer_id}/imported-invoices",
    } <= paths
