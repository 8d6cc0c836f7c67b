from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import Field, model_validator

from salon_import.models.common import StrictModel
from salon_import.models.enums import PaymentBucket, TransactionType


class LineItem(StrictModel):
    """One sold service or product on a reconstructed invoice."""

    item_type: TransactionType
    item_id: str
    name: str
    quantity: float = Field(gt=0)
    unit_price: float = Field(ge=0)
    final_price: float
    staff_id: str


class PaymentDetails(StrictModel):
    """Amount paid per payment bucket."""

    cash: float = 0.0
    card: float = 0.0
    upi: float = 0.0
    other: float = 0.0

    @classmethod
    def single(cls, bucket: PaymentBucket, amount: float) -> "PaymentDetails":
        """Breakdown with the whole amount in one bucket."""

        return cls(**{bucket.value: amount})


class ReconstructedInvoice(StrictModel):
    """Normalized invoice rebuilt from one group of legacy rows."""

    tenant_id: str
    invoice_number: str | None = None
    customer_id: str
    primary_staff_id: str
    line_items: list[LineItem] = Field(min_length=1)
    service_total: float
    product_total: float
    subtotal: float
    grand_total: float
    payment_details: PaymentDetails
    payment_status: Literal["Paid"] = "Paid"
    is_imported: Literal[True] = True
    occurred_at: datetime
    source_group_key: str

    @model_validator(mode="after")
    def _check_totals(self) -> "ReconstructedInvoice":
        if round(self.service_total + self.product_total, 2) != round(self.subtotal, 2):
            raise ValueError("subtotal must equal service_total + product_total")
        buckets = self.payment_details.model_dump()
        paid = [amount for amount in buckets.values() if amount]
        if len(paid) > 1:
            raise ValueError("a legacy invoice carries exactly one payment mode")
        if round(sum(paid), 2) != round(self.grand_total, 2):
            raise ValueError("payment breakdown must equal grand_total")
        return self


class StoredInvoice(ReconstructedInvoice):
    """Imported invoice as kept by the invoice store."""

    invoice_id: str
    invoice_number: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
