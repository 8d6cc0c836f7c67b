from __future__ import annotations

import asyncio
from typing import Any
from uuid import uuid4

from salon_import.models.catalog import Customer, ProductItem, ServiceItem, StaffMember
from salon_import.models.internal import ImportJob, QueueTask
from salon_import.models.invoice import ReconstructedInvoice, StoredInvoice
from salon_import.normalize import digits_only
from salon_import.services.ports import BlindIndex


class InMemoryImportJobRepository:
    """In-memory repository implementation for local development."""

    def __init__(self) -> None:
        """Initialize lock-guarded in-memory store."""

        self._items: dict[str, ImportJob] = {}
        self._lock = asyncio.Lock()

    async def create(self, job: ImportJob) -> None:
        """Insert a new job record."""

        async with self._lock:
            self._items[job.job_id] = job.model_copy(deep=True)

    async def get(self, job_id: str) -> ImportJob | None:
        """Get one job by id."""

        async with self._lock:
            job = self._items.get(job_id)
            return job.model_copy(deep=True) if job is not None else None

    async def save(self, job: ImportJob) -> None:
        """Upsert job record."""

        async with self._lock:
            self._items[job.job_id] = job.model_copy(deep=True)

    async def list(self, *, tenant_id: str | None = None, limit: int = 100) -> list[ImportJob]:
        """Return latest jobs ordered by creation time."""

        async with self._lock:
            values = [
                job for job in self._items.values() if tenant_id is None or job.tenant_id == tenant_id
            ]
            values.sort(key=lambda x: x.created_at, reverse=True)
            return [job.model_copy(deep=True) for job in values[:limit]]


class InMemoryCatalogSource:
    """Tenant-scoped services, products and staff held in lists."""

    def __init__(
        self,
        *,
        services: list[ServiceItem] | None = None,
        products: list[ProductItem] | None = None,
        staff: list[StaffMember] | None = None,
    ) -> None:
        self.services = list(services or [])
        self.products = list(products or [])
        self.staff = list(staff or [])

    async def list_services(self, tenant_id: str) -> list[ServiceItem]:
        return [s for s in self.services if s.tenant_id == tenant_id]

    async def list_products(self, tenant_id: str) -> list[ProductItem]:
        return [p for p in self.products if p.tenant_id == tenant_id]

    async def list_staff(self, tenant_id: str) -> list[StaffMember]:
        return [s for s in self.staff if s.tenant_id == tenant_id]


class InMemoryCustomerDirectory:
    """Customers indexed by (tenant, phone token)."""

    def __init__(self, customers: list[Customer] | None = None) -> None:
        self._by_token: dict[tuple[str, str], Customer] = {}
        for customer in customers or []:
            self.add(customer)

    def add(self, customer: Customer) -> None:
        self._by_token[(customer.tenant_id, customer.phone_hash)] = customer

    async def find_by_blind_index(self, tenant_id: str, token: str) -> Customer | None:
        return self._by_token.get((tenant_id, token))


class InMemoryInvoiceStore:
    """Imported invoices kept in insertion order."""

    def __init__(self, *, number_prefix: str = "IMP") -> None:
        self._items: dict[str, StoredInvoice] = {}
        self._lock = asyncio.Lock()
        self._sequence = 0
        self.number_prefix = number_prefix

    async def insert(self, invoice: ReconstructedInvoice) -> str:
        """Store one invoice, assigning a sequential number when it has none."""

        async with self._lock:
            self._sequence += 1
            invoice_id = str(uuid4())
            number = invoice.invoice_number or f"{self.number_prefix}-{self._sequence:06d}"
            payload = invoice.model_dump()
            payload["invoice_number"] = number
            self._items[invoice_id] = StoredInvoice(invoice_id=invoice_id, **payload)
            return invoice_id

    async def get(self, invoice_id: str) -> StoredInvoice | None:
        async with self._lock:
            return self._items.get(invoice_id)

    async def list_imported(
        self,
        tenant_id: str,
        customer_id: str,
        *,
        limit: int = 50,
    ) -> list[StoredInvoice]:
        async with self._lock:
            matches = [
                inv
                for inv in self._items.values()
                if inv.tenant_id == tenant_id and inv.customer_id == customer_id and inv.is_imported
            ]
        matches.sort(key=lambda x: x.occurred_at, reverse=True)
        return matches[:limit]

    async def all(self) -> list[StoredInvoice]:
        async with self._lock:
            return list(self._items.values())


class InMemoryTaskQueue:
    """In-memory queue implementation for local async worker."""

    def __init__(self) -> None:
        """Initialize queue instance."""

        self._queue: asyncio.Queue[QueueTask] = asyncio.Queue()

    async def enqueue(self, task: QueueTask) -> None:
        """Push one task into queue."""

        await self._queue.put(task)

    async def dequeue(self) -> QueueTask:
        """Pop one task from queue."""

        return await self._queue.get()

    def task_done(self) -> None:
        """Mark one dequeued task as processed."""

        self._queue.task_done()

    def qsize(self) -> int:
        return self._queue.qsize()


def seed_reference_data(
    payload: dict[str, Any],
    *,
    tenant_id: str,
    blind_index: BlindIndex,
) -> tuple[InMemoryCatalogSource, InMemoryCustomerDirectory]:
    """Build catalog and customer adapters from a JSON fixture.

    Customers carry a plaintext `phone` in the fixture; only its blind-index
    token is kept.
    """

    def _items(key: str) -> list[dict[str, Any]]:
        items = payload.get(key) or []
        if not isinstance(items, list):
            raise ValueError(f"seed '{key}' must be a list")
        return [{**item, "tenant_id": tenant_id} for item in items]

    customers: list[Customer] = []
    for index, item in enumerate(_items("customers"), start=1):
        phone = digits_only(item.pop("phone", None))
        if not phone:
            raise ValueError(f"seed customers[{index}] needs a phone")
        customers.append(Customer(phone_hash=blind_index(phone), **item))

    catalog = InMemoryCatalogSource(
        services=[ServiceItem(**item) for item in _items("services")],
        products=[ProductItem(**item) for item in _items("products")],
        staff=[StaffMember(**item) for item in _items("staff")],
    )
    return catalog, InMemoryCustomerDirectory(customers)
