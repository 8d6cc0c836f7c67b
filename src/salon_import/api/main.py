from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from uuid import uuid4

from fastapi import FastAPI, File, Header, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from salon_import.integrations.container import AppContainer, build_container
from salon_import.integrations.excel_reader import write_template
from salon_import.models.api_responses import (
    CreateImportJobResponse,
    ImportedInvoiceListResponse,
    ImportJobListResponse,
    ImportJobResponse,
)

container: AppContainer = build_container()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup/shutdown lifecycle and inline worker task."""

    if container.settings.run_inline_worker:
        app.state.worker_task = asyncio.create_task(container.worker.run_forever())
    try:
        yield
    finally:
        task = getattr(app.state, "worker_task", None)
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task


app = FastAPI(title="salon history import", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=container.settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_tenant(x_tenant_id: str | None) -> str:
    """Tenant id from the X-Tenant-Id header; resolution itself happens upstream."""

    tenant_id = (x_tenant_id or "").strip()
    if not tenant_id:
        raise HTTPException(status_code=400, detail="X-Tenant-Id header is required")
    return tenant_id


def _validate_excel_upload(file: UploadFile, *, field_name: str) -> None:
    """Validate filename extension and content type for uploaded Excel files."""

    filename = (file.filename or "").strip().lower()
    if not filename or not filename.endswith(".xlsx"):
        raise HTTPException(status_code=400, detail=f"{field_name} must be an .xlsx file")
    if file.content_type:
        content_type = file.content_type.lower()
        if (
            "spreadsheetml" not in content_type
            and "excel" not in content_type
            and content_type != "application/octet-stream"
        ):
            raise HTTPException(status_code=400, detail=f"{field_name} must be an Excel file")


async def _save_upload_file(file: UploadFile, *, dest_dir: Path) -> Path:
    """Persist one UploadFile to disk and return the saved file path."""

    dest_dir.mkdir(parents=True, exist_ok=True)
    safe_name = Path(file.filename or "").name or "upload.xlsx"
    dest_path = dest_dir / f"upload_{uuid4().hex}_{safe_name}"
    content = await file.read()
    dest_path.write_bytes(content)
    await file.close()
    return dest_path


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Lightweight health endpoint for liveness checks."""

    return {"status": "ok"}


@app.post("/v1/import-jobs/upload", response_model=CreateImportJobResponse)
async def upload_history_file(
    file: UploadFile = File(...),
    x_tenant_id: str | None = Header(None),
) -> CreateImportJobResponse:
    """Store an uploaded history spreadsheet and enqueue its import job."""

    tenant_id = _require_tenant(x_tenant_id)
    _validate_excel_upload(file, field_name="file")
    saved_path = await _save_upload_file(file, dest_dir=container.settings.upload_dir / tenant_id)
    try:
        job, task = await container.service.create_job_with_task(
            tenant_id=tenant_id,
            source_path=str(saved_path),
            original_filename=file.filename,
        )
    except ValueError as exc:
        saved_path.unlink(missing_ok=True)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return CreateImportJobResponse.from_job_and_task(job=job, task=task)


@app.get("/v1/import-jobs/template")
async def download_template() -> FileResponse:
    """Serve the history import template workbook."""

    path = write_template(container.settings.upload_dir / "templates" / "customer_history_import_template.xlsx")
    return FileResponse(path=path, media_type=XLSX_MEDIA_TYPE, filename=path.name)


@app.get("/v1/import-jobs", response_model=ImportJobListResponse)
async def list_import_jobs(
    limit: int = 100,
    x_tenant_id: str | None = Header(None),
) -> ImportJobListResponse:
    """List the tenant's import jobs, newest first."""

    tenant_id = _require_tenant(x_tenant_id)
    try:
        records = await container.service.list_jobs(tenant_id=tenant_id, limit=limit)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    items = [ImportJobResponse.from_record(r) for r in records]
    return ImportJobListResponse(total=len(items), items=items)


@app.get("/v1/import-jobs/{job_id}", response_model=ImportJobResponse)
async def get_import_job(job_id: str, x_tenant_id: str | None = Header(None)) -> ImportJobResponse:
    """Fetch one job's status, progress and error log."""

    tenant_id = _require_tenant(x_tenant_id)
    job = await container.service.get_job(job_id, tenant_id=tenant_id)
    if job is None:
        raise HTTPException(status_code=404, detail="import job not found")
    return ImportJobResponse.from_record(job)


@app.get(
    "/v1/customers/{customer_id}/imported-invoices",
    response_model=ImportedInvoiceListResponse,
)
async def list_imported_invoices(
    customer_id: str,
    limit: int = 50,
    x_tenant_id: str | None = Header(None),
) -> ImportedInvoiceListResponse:
    """Imported history invoices of one customer (at most 50, newest first)."""

    tenant_id = _require_tenant(x_tenant_id)
    try:
        items = await container.service.list_imported_invoices(
            tenant_id=tenant_id,
            customer_id=customer_id,
            limit=limit,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ImportedInvoiceListResponse(customer_id=customer_id, total=len(items), items=items)


def run() -> None:
    """Local API entrypoint used by script/console command."""

    import uvicorn

    uvicorn.run(
        "salon_import.api.main:app",
        host=container.settings.host,
        port=container.settings.port,
        reload=False,
    )


if __name__ == "__main__":
    run()
