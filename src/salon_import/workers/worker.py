from __future__ import annotations

import asyncio
import logging

from salon_import.models.enums import TaskType
from salon_import.services.orchestrator import HistoryImportOrchestrator
from salon_import.services.ports import TaskQueue

logger = logging.getLogger(__name__)


class ImportWorker:
    """Queue worker that runs import jobs one task at a time."""

    def __init__(
        self,
        *,
        queue: TaskQueue,
        orchestrator: HistoryImportOrchestrator,
    ) -> None:
        """Bind queue and orchestrator."""

        self.queue = queue
        self.orchestrator = orchestrator

    async def run_forever(self) -> None:
        """Continuously consume queue tasks."""

        while True:
            await self.run_once()

    async def run_once(self) -> None:
        """Process a single queue task; job state lives on the job record."""

        task = await self.queue.dequeue()
        try:
            if task.task_type == TaskType.PROCESS_IMPORT:
                await self.orchestrator.run(task.job_id)
            else:
                logger.warning("Ignoring unknown task type %s for job %s", task.task_type, task.job_id)
        except Exception:  # pragma: no cover - orchestrator records its own failures
            logger.exception("Worker crashed while running job %s", task.job_id)
        finally:
            self.queue.task_done()


async def run_worker(worker: ImportWorker) -> None:
    """Async entrypoint for external runner integration."""

    await worker.run_forever()


def run_worker_sync(worker: ImportWorker) -> None:
    """Sync entrypoint for local scripts/CLI."""

    asyncio.run(run_worker(worker))
