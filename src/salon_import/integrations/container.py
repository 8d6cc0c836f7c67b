from __future__ import annotations

from dataclasses import dataclass

from salon_import.config import Settings, get_settings
from salon_import.integrations.blind_index import make_blind_index
from salon_import.integrations.in_memory import (
    InMemoryCatalogSource,
    InMemoryCustomerDirectory,
    InMemoryImportJobRepository,
    InMemoryInvoiceStore,
    InMemoryTaskQueue,
)
from salon_import.services.import_service import ImportService
from salon_import.services.orchestrator import HistoryImportOrchestrator
from salon_import.services.ports import BlindIndex
from salon_import.workers.worker import ImportWorker


@dataclass
class AppContainer:
    """Runtime dependency container for API/service/worker wiring."""

    settings: Settings
    repo: InMemoryImportJobRepository
    queue: InMemoryTaskQueue
    catalog: InMemoryCatalogSource
    customers: InMemoryCustomerDirectory
    invoices: InMemoryInvoiceStore
    blind_index: BlindIndex
    service: ImportService
    orchestrator: HistoryImportOrchestrator
    worker: ImportWorker


def build_container(
    *,
    settings: Settings | None = None,
    catalog: InMemoryCatalogSource | None = None,
    customers: InMemoryCustomerDirectory | None = None,
) -> AppContainer:
    """Create default in-memory runtime container for local execution."""

    if settings is None:
        settings = get_settings()
    repo = InMemoryImportJobRepository()
    queue = InMemoryTaskQueue()
    if catalog is None:
        catalog = InMemoryCatalogSource()
    if customers is None:
        customers = InMemoryCustomerDirectory()
    invoices = InMemoryInvoiceStore()
    blind_index = make_blind_index(settings.blind_index_key)
    service = ImportService(repo, queue, invoices)
    orchestrator = HistoryImportOrchestrator(
        jobs=repo,
        catalog_source=catalog,
        customers=customers,
        invoices=invoices,
        blind_index=blind_index,
        settings=settings,
    )
    worker = ImportWorker(queue=queue, orchestrator=orchestrator)
    return AppContainer(
        settings=settings,
        repo=repo,
        queue=queue,
        catalog=catalog,
        customers=customers,
        invoices=invoices,
        blind_index=blind_index,
        service=service,
        orchestrator=orchestrator,
        worker=worker,
    )
