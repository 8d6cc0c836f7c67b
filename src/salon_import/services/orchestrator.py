from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable

from salon_import.catalog import load_catalogs
from salon_import.cleanup import cleanup_paths
from salon_import.config import Settings, get_settings
from salon_import.errors import ReconstructionError
from salon_import.grouping import group_rows
from salon_import.integrations.excel_reader import read_source_rows
from salon_import.models.enums import JobStatus
from salon_import.models.internal import ErrorLogEntry, ImportJob, JobProgress
from salon_import.models.rows import InvoiceGroup, SourceRow
from salon_import.reconstruct import InvoiceReconstructor
from salon_import.services.ports import (
    BlindIndex,
    CatalogSource,
    CustomerDirectory,
    ImportJobRepository,
    InvoiceStore,
)

logger = logging.getLogger(__name__)

RowReader = Callable[[Path], list[SourceRow]]


class HistoryImportOrchestrator:
    """Drives one import job: queued -> processing -> completed | failed.

    Groups are processed strictly in order. The job record is saved after every
    group so pollers see live progress; one bad group is logged in the job's
    error log and never stops the batch.
    """

    def __init__(
        self,
        *,
        jobs: ImportJobRepository,
        catalog_source: CatalogSource,
        customers: CustomerDirectory,
        invoices: InvoiceStore,
        blind_index: BlindIndex,
        settings: Settings | None = None,
        read_rows: RowReader = read_source_rows,
    ) -> None:
        """Bind repositories, collaborators and settings."""

        self.jobs = jobs
        self.catalog_source = catalog_source
        self.customers = customers
        self.invoices = invoices
        self.blind_index = blind_index
        self.settings = settings or get_settings()
        self.read_rows = read_rows

    async def run(self, job_id: str) -> ImportJob | None:
        """Run a queued job to its terminal state and return the final record."""

        job = await self.jobs.get(job_id)
        if job is None:
            logger.error("[Importer] Job %s not found. Aborting.", job_id)
            return None
        if job.status is not JobStatus.QUEUED:
            logger.warning("[Importer] Job %s is %s; only queued jobs are run.", job_id, job.status.value)
            return job

        source = Path(job.source_path)
        logger.info("[Importer] Starting job %s for file: %s", job_id, source)
        try:
            job.status = JobStatus.PROCESSING
            job.started_at = datetime.now(UTC)
            await self._save(job)
            await self._process(job, source)
            job.status = JobStatus.COMPLETED
            job.report_message = (
                f"Import finished. {job.progress.processed} successful, {job.progress.failed} failed."
            )
            logger.info("[Importer] Job %s completed: %s", job_id, job.report_message)
        except Exception as exc:
            job.status = JobStatus.FAILED
            job.report_message = f"A fatal error occurred: {exc}"
            logger.exception("[Importer] Job %s failed with fatal error", job_id)
        finally:
            try:
                job.finished_at = datetime.now(UTC)
                await self._save(job)
            finally:
                if self.settings.delete_source_after_import:
                    cleanup_paths([source])
        return job

    async def _process(self, job: ImportJob, source: Path) -> None:
        rows = await asyncio.to_thread(self.read_rows, source)
        catalogs = await load_catalogs(job.tenant_id, self.catalog_source)
        groups = group_rows(rows, job.job_id)
        job.progress = JobProgress(total=len(groups))
        await self._save(job)
        logger.info("[Importer] Job %s: %d rows in %d invoice groups.", job.job_id, len(rows), len(groups))

        reconstructor = InvoiceReconstructor(
            catalogs=catalogs,
            customers=self.customers,
            blind_index=self.blind_index,
            fuzzy_threshold=self.settings.fuzzy_threshold,
            accept_fuzzy=self.settings.accept_fuzzy,
        )
        for group in groups:
            await self._import_group(job, reconstructor, group)
            await self._save(job)

    async def _import_group(
        self,
        job: ImportJob,
        reconstructor: InvoiceReconstructor,
        group: InvoiceGroup,
    ) -> None:
        try:
            invoice = await reconstructor.reconstruct(group, job.tenant_id)
            await self.invoices.insert(invoice)
        except ReconstructionError as exc:
            self._record_failure(job, group, exc.message)
        except Exception as exc:
            logger.exception("[Importer] Job %s: group %s could not be saved", job.job_id, group.group_key)
            self._record_failure(job, group, f"Could not save invoice: {exc}")
        else:
            job.progress.processed += 1

    def _record_failure(self, job: ImportJob, group: InvoiceGroup, message: str) -> None:
        logger.warning("[Importer] Job %s: group %s failed: %s", job.job_id, group.group_key, message)
        job.progress.failed += 1
        job.error_log.append(
            ErrorLogEntry(group_key=group.group_key, message=message, raw_group_data=group.raw_data())
        )

    async def _save(self, job: ImportJob) -> None:
        job.touch()
        await self.jobs.save(job)
