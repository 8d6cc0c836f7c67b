from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable

from salon_import.normalize import normalize
from salon_import.services.ports import CatalogSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupTable:
    """Normalized-key index of one entity type, plus display names for ranking."""

    entity: str
    exact: dict[str, str] = field(default_factory=dict)
    names: dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        entity: str,
        entries: Iterable[tuple[str | None, str, str]],
        *,
        rank_names: bool = True,
    ) -> "LookupTable":
        """Index (key text, entity id, display name) entries; first key wins."""

        exact: dict[str, str] = {}
        names: dict[str, str] = {}
        for key_text, entity_id, display in entries:
            key = normalize(key_text)
            if not key:
                continue
            exact.setdefault(key, entity_id)
            if rank_names:
                names.setdefault(entity_id, display)
        return cls(entity=entity, exact=exact, names=names)

    def __len__(self) -> int:
        return len(self.exact)


@dataclass(frozen=True)
class Catalogs:
    """Per-job reference data for resolving services, products and staff."""

    services_by_name: LookupTable
    products_by_name: LookupTable
    products_by_sku: LookupTable
    staff_by_name: LookupTable
    staff_by_id: LookupTable


async def load_catalogs(tenant_id: str, source: CatalogSource) -> Catalogs:
    """Bulk-load the tenant's services, products and staff into lookup tables."""

    services, products, staff = await asyncio.gather(
        source.list_services(tenant_id),
        source.list_products(tenant_id),
        source.list_staff(tenant_id),
    )
    catalogs = Catalogs(
        services_by_name=LookupTable.build("service", ((s.name, s.id, s.name) for s in services)),
        products_by_name=LookupTable.build("product", ((p.name, p.id, p.name) for p in products)),
        products_by_sku=LookupTable.build(
            "product SKU", ((p.sku, p.id, p.name) for p in products), rank_names=False
        ),
        staff_by_name=LookupTable.build("staff", ((s.name, s.id, s.name) for s in staff)),
        staff_by_id=LookupTable.build(
            "staff ID", ((s.staff_id_number, s.id, s.name) for s in staff), rank_names=False
        ),
    )
    logger.info(
        "Loaded catalogs for tenant %s: %d services, %d products, %d staff",
        tenant_id,
        len(catalogs.services_by_name),
        len(catalogs.products_by_name),
        len(catalogs.staff_by_name),
    )
    return catalogs
