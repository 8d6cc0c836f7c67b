from __future__ import annotations

from salon_import.models.enums import TaskType
from salon_import.models.internal import ImportJob, QueueTask
from salon_import.models.invoice import StoredInvoice
from salon_import.services.ports import ImportJobRepository, InvoiceStore, TaskQueue


class ImportService:
    """Application service for creating and querying history import jobs."""

    def __init__(self, repo: ImportJobRepository, queue: TaskQueue, invoices: InvoiceStore) -> None:
        """Bind repository, queue and invoice store implementations."""

        self.repo = repo
        self.queue = queue
        self.invoices = invoices

    async def create_job(
        self,
        *,
        tenant_id: str,
        source_path: str,
        original_filename: str | None = None,
    ) -> ImportJob:
        """Persist a new job and enqueue processing task."""

        job, _ = await self.create_job_with_task(
            tenant_id=tenant_id,
            source_path=source_path,
            original_filename=original_filename,
        )
        return job

    async def create_job_with_task(
        self,
        *,
        tenant_id: str,
        source_path: str,
        original_filename: str | None = None,
    ) -> tuple[ImportJob, QueueTask]:
        """Persist a queued job and return the corresponding process task."""

        if not tenant_id.strip():
            raise ValueError("tenant_id is required")
        job = ImportJob.new(
            tenant_id=tenant_id,
            source_path=source_path,
            original_filename=original_filename,
        )
        task = QueueTask.new(job_id=job.job_id, task_type=TaskType.PROCESS_IMPORT)
        await self.repo.create(job)
        await self.queue.enqueue(task)
        return job, task

    async def get_job(self, job_id: str, *, tenant_id: str | None = None) -> ImportJob | None:
        """Load a job by id; jobs of other tenants are treated as missing."""

        job = await self.repo.get(job_id)
        if job is None or (tenant_id is not None and job.tenant_id != tenant_id):
            return None
        return job

    async def list_jobs(self, *, tenant_id: str | None = None, limit: int = 100) -> list[ImportJob]:
        """List latest jobs for API query."""

        if limit < 1:
            raise ValueError("limit must be positive")
        return await self.repo.list(tenant_id=tenant_id, limit=limit)

    async def list_imported_invoices(
        self,
        *,
        tenant_id: str,
        customer_id: str,
        limit: int = 50,
    ) -> list[StoredInvoice]:
        """Imported invoices of one customer, newest first."""

        if limit < 1:
            raise ValueError("limit must be positive")
        return await self.invoices.list_imported(tenant_id, customer_id, limit=min(limit, 50))
