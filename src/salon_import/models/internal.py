from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import Field

from salon_import.models.common import StrictModel
from salon_import.models.enums import JobStatus, JobType, TaskType


class JobProgress(StrictModel):
    """Group counters polled by the UI while a job runs."""

    total: int = 0
    processed: int = 0
    failed: int = 0

    @property
    def attempted(self) -> int:
        """Number of groups that reached a final outcome."""

        return self.processed + self.failed


class ErrorLogEntry(StrictModel):
    """One failed invoice group captured without stopping the job."""

    group_key: str
    message: str
    raw_group_data: list[dict[str, Any]] = Field(default_factory=list)


class ImportJob(StrictModel):
    """Internal persisted state for one history import upload."""

    job_id: str
    tenant_id: str
    job_type: JobType = JobType.CUSTOMER_HISTORY
    status: JobStatus
    progress: JobProgress = Field(default_factory=JobProgress)
    error_log: list[ErrorLogEntry] = Field(default_factory=list)
    report_message: str | None = None
    original_filename: str | None = None
    source_path: str
    created_at: datetime
    updated_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @classmethod
    def new(
        cls,
        *,
        tenant_id: str,
        source_path: str,
        original_filename: str | None = None,
    ) -> "ImportJob":
        """Build an initial queued job record for an uploaded spreadsheet."""

        now = datetime.now(UTC)
        return cls(
            job_id=str(uuid4()),
            tenant_id=tenant_id,
            status=JobStatus.QUEUED,
            original_filename=original_filename,
            source_path=source_path,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_terminal(self) -> bool:
        """Whether the job reached completed or failed."""

        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)

    def touch(self) -> None:
        """Refresh the update timestamp before persisting."""

        self.updated_at = datetime.now(UTC)


class QueueTask(StrictModel):
    """Internal queue message format consumed by worker."""

    task_id: str
    job_id: str
    task_type: TaskType
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @classmethod
    def new(
        cls,
        *,
        job_id: str,
        task_type: TaskType,
        payload: dict[str, Any] | None = None,
    ) -> "QueueTask":
        """Construct a queue task with generated id and timestamp."""

        return cls(
            task_id=str(uuid4()),
            job_id=job_id,
            task_type=task_type,
            payload=payload or {},
            created_at=datetime.now(UTC),
        )
