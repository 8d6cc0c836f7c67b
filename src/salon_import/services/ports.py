from __future__ import annotations

from typing import Callable, Protocol

from salon_import.models.catalog import Customer, ProductItem, ServiceItem, StaffMember
from salon_import.models.internal import ImportJob, QueueTask
from salon_import.models.invoice import ReconstructedInvoice, StoredInvoice

# One-way phone token function: blind_index(digits) -> token.
BlindIndex = Callable[[str], str]


class ImportJobRepository(Protocol):
    """Persistence contract for import job records."""

    async def create(self, job: ImportJob) -> None:
        """Persist a new job record."""

        ...

    async def get(self, job_id: str) -> ImportJob | None:
        """Load one job by id."""

        ...

    async def save(self, job: ImportJob) -> None:
        """Update an existing job record."""

        ...

    async def list(self, *, tenant_id: str | None = None, limit: int = 100) -> list[ImportJob]:
        """List latest job records, optionally for one tenant."""

        ...


class CatalogSource(Protocol):
    """Bulk tenant-scoped reads of the reference entities."""

    async def list_services(self, tenant_id: str) -> list[ServiceItem]:
        ...

    async def list_products(self, tenant_id: str) -> list[ProductItem]:
        ...

    async def list_staff(self, tenant_id: str) -> list[StaffMember]:
        ...


class CustomerDirectory(Protocol):
    """Customer lookup by blind-indexed phone number."""

    async def find_by_blind_index(self, tenant_id: str, token: str) -> Customer | None:
        """Return the tenant's customer with this phone token, if any."""

        ...


class InvoiceStore(Protocol):
    """Persistence contract for imported invoices."""

    async def insert(self, invoice: ReconstructedInvoice) -> str:
        """Store one invoice and return its id; assigns a number when missing."""

        ...

    async def list_imported(
        self,
        tenant_id: str,
        customer_id: str,
        *,
        limit: int = 50,
    ) -> list[StoredInvoice]:
        """Imported invoices of one customer, newest transaction first."""

        ...


class TaskQueue(Protocol):
    """Queue abstraction used by service and worker."""

    async def enqueue(self, task: QueueTask) -> None:
        """Push one task into queue."""

        ...

    async def dequeue(self) -> QueueTask:
        """Pop one task from queue."""

        ...

    def task_done(self) -> None:
        """Mark one consumed task as complete."""

        ...
