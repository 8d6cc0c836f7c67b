from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from salon_import.models.common import ErrorInfo, StrictModel
from salon_import.models.enums import JobStatus, JobType, TaskType
from salon_import.models.internal import ErrorLogEntry, ImportJob, JobProgress, QueueTask
from salon_import.models.invoice import StoredInvoice
from salon_import.models.version import SCHEMA_VERSION


class ImportJobResponse(StrictModel):
    """Public job response polled by the upload screen."""

    schema_version: Literal["v1"] = SCHEMA_VERSION
    job_id: str
    tenant_id: str
    job_type: JobType
    status: JobStatus
    progress: JobProgress
    percent_complete: int = Field(ge=0, le=100)
    error_log: list[ErrorLogEntry] = Field(default_factory=list)
    report_message: str | None = None
    original_filename: str | None = None
    error: ErrorInfo | None = None
    created_at: datetime
    updated_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @classmethod
    def from_record(cls, record: ImportJob) -> "ImportJobResponse":
        """Map internal storage model to stable public response shape."""

        error_obj = None
        if record.status is JobStatus.FAILED and record.report_message:
            error_obj = ErrorInfo(code="IMPORT_FAILED", message=record.report_message)
        total = record.progress.total
        if total > 0:
            percent = round(record.progress.attempted * 100 / total)
        else:
            percent = 100 if record.is_terminal else 0
        return cls(
            job_id=record.job_id,
            tenant_id=record.tenant_id,
            job_type=record.job_type,
            status=record.status,
            progress=record.progress,
            percent_complete=percent,
            error_log=record.error_log,
            report_message=record.report_message,
            original_filename=record.original_filename,
            error=error_obj,
            created_at=record.created_at,
            updated_at=record.updated_at,
            started_at=record.started_at,
            finished_at=record.finished_at,
        )


class ImportJobListResponse(StrictModel):
    """List response wrapper for job query endpoint."""

    schema_version: Literal["v1"] = SCHEMA_VERSION
    total: int
    items: list[ImportJobResponse]


class CreateImportJobResponse(StrictModel):
    """Response returned after a spreadsheet upload is accepted."""

    schema_version: Literal["v1"] = SCHEMA_VERSION
    task_id: str
    job_id: str
    task_type: TaskType
    status: JobStatus
    created_at: datetime

    @classmethod
    def from_job_and_task(cls, *, job: ImportJob, task: QueueTask) -> "CreateImportJobResponse":
        """Map created job/task objects to upload response payload."""

        return cls(
            task_id=task.task_id,
            job_id=job.job_id,
            task_type=task.task_type,
            status=job.status,
            created_at=task.created_at,
        )


class ImportedInvoiceListResponse(StrictModel):
    """Imported invoices of one customer."""

    schema_version: Literal["v1"] = SCHEMA_VERSION
    customer_id: str
    total: int
    items: list[StoredInvoice] = Field(default_factory=list)
