from __future__ import annotations

from pydantic import Field

from salon_import.models.common import StrictModel


class ServiceItem(StrictModel):
    """Canonical salon service offered by a tenant."""

    id: str
    tenant_id: str
    name: str = Field(min_length=1)


class ProductItem(StrictModel):
    """Canonical retail product with optional SKU."""

    id: str
    tenant_id: str
    name: str = Field(min_length=1)
    sku: str | None = None


class StaffMember(StrictModel):
    """Staff member who can be credited with a sale."""

    id: str
    tenant_id: str
    name: str = Field(min_length=1)
    staff_id_number: str | None = None


class Customer(StrictModel):
    """Customer record; the phone is only stored as a blind-index token."""

    id: str
    tenant_id: str
    name: str | None = None
    phone_hash: str
