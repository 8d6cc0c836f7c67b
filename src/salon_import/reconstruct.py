from __future__ import annotations

from datetime import datetime

from pydantic import ValidationError

from salon_import.catalog import Catalogs
from salon_import.dates import parse_transaction_date
from salon_import.errors import InvalidDateError, ReconstructionError
from salon_import.models.enums import PaymentBucket, TransactionType
from salon_import.models.invoice import LineItem, PaymentDetails, ReconstructedInvoice
from salon_import.models.rows import InvoiceGroup, SourceRow
from salon_import.normalize import digits_only, normalize
from salon_import.resolver import (
    DEFAULT_FUZZY_THRESHOLD,
    Resolved,
    resolve,
    resolve_product,
    resolve_staff,
)
from salon_import.services.ports import BlindIndex, CustomerDirectory

PAYMENT_KEYWORDS: tuple[tuple[PaymentBucket, tuple[str, ...]], ...] = (
    (PaymentBucket.CASH, ("cash",)),
    (PaymentBucket.CARD, ("card",)),
    (PaymentBucket.UPI, ("upi", "gpay", "phonepe")),
)


def payment_bucket(mode: object) -> PaymentBucket:
    """Map a free-text payment mode to its bucket; unknown modes go to `other`."""

    compact = normalize(mode).replace(" ", "")
    for bucket, keywords in PAYMENT_KEYWORDS:
        if any(keyword in compact for keyword in keywords):
            return bucket
    return PaymentBucket.OTHER


class InvoiceReconstructor:
    """Builds one ReconstructedInvoice per invoice group, or raises ReconstructionError."""

    def __init__(
        self,
        *,
        catalogs: Catalogs,
        customers: CustomerDirectory,
        blind_index: BlindIndex,
        fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
        accept_fuzzy: bool = False,
    ) -> None:
        self.catalogs = catalogs
        self.customers = customers
        self.blind_index = blind_index
        self.fuzzy_threshold = fuzzy_threshold
        self.accept_fuzzy = accept_fuzzy

    async def reconstruct(self, group: InvoiceGroup, tenant_id: str) -> ReconstructedInvoice:
        """Resolve every reference in the group and assemble the invoice.

        The first hard failure aborts the group; nothing partial is returned.
        """

        customer_id = await self._resolve_customer(group, tenant_id)
        self._validate_rows(group)
        line_items, service_total, product_total = self._build_line_items(group)
        occurred_at = self._transaction_date(group)
        grand_total, payment_details = self._payment(group)

        try:
            return ReconstructedInvoice(
                tenant_id=tenant_id,
                invoice_number=None if group.synthesized else group.group_key,
                customer_id=customer_id,
                primary_staff_id=line_items[0].staff_id,
                line_items=line_items,
                service_total=service_total,
                product_total=product_total,
                subtotal=round(service_total + product_total, 2),
                grand_total=grand_total,
                payment_details=payment_details,
                occurred_at=occurred_at,
                source_group_key=group.group_key,
            )
        except ValidationError as exc:
            raise ReconstructionError(group.group_key, f"Invalid invoice data: {exc}") from exc

    async def _resolve_customer(self, group: InvoiceGroup, tenant_id: str) -> str:
        phone = digits_only(group.first_value("customer_phone"))
        if not phone:
            raise ReconstructionError(
                group.group_key, "Customer not found: 'Customer Phone' is missing."
            )
        customer = await self.customers.find_by_blind_index(tenant_id, self.blind_index(phone))
        if customer is None:
            raise ReconstructionError(group.group_key, f"Customer not found for phone '{phone}'.")
        return customer.id

    def _validate_rows(self, group: InvoiceGroup) -> None:
        problems = [
            f"Row {row.row_number}: {'; '.join(row_problems)}"
            for row in group.rows
            if (row_problems := row.line_problems())
        ]
        if problems:
            raise ReconstructionError(group.group_key, " | ".join(problems))

    def _resolve_item(self, group: InvoiceGroup, row: SourceRow) -> tuple[TransactionType, str]:
        kind = normalize(row.transaction_type)
        if kind == TransactionType.SERVICE.value:
            result = resolve(
                row.item_name,
                self.catalogs.services_by_name,
                threshold=self.fuzzy_threshold,
                accept_fuzzy=self.accept_fuzzy,
            )
            item_type = TransactionType.SERVICE
        elif kind == TransactionType.PRODUCT.value:
            result = resolve_product(
                row.item_name,
                row.item_sku,
                self.catalogs,
                threshold=self.fuzzy_threshold,
                accept_fuzzy=self.accept_fuzzy,
            )
            item_type = TransactionType.PRODUCT
        else:
            raise ReconstructionError(
                group.group_key,
                f"Row {row.row_number}: unsupported transaction type "
                f"'{row.transaction_type}'. Use 'Service' or 'Product'.",
            )
        if not isinstance(result, Resolved):
            raise ReconstructionError(group.group_key, f"Row {row.row_number}: {result.message}")
        return item_type, result.entity_id

    def _resolve_staff(self, group: InvoiceGroup, row: SourceRow) -> str:
        result = resolve_staff(
            row.staff_name,
            row.staff_id_number,
            self.catalogs,
            threshold=self.fuzzy_threshold,
            accept_fuzzy=self.accept_fuzzy,
        )
        if not isinstance(result, Resolved):
            raise ReconstructionError(group.group_key, f"Row {row.row_number}: {result.message}")
        return result.entity_id

    def _build_line_items(self, group: InvoiceGroup) -> tuple[list[LineItem], float, float]:
        line_items: list[LineItem] = []
        service_total = 0.0
        product_total = 0.0
        for row in group.rows:
            staff_id = self._resolve_staff(group, row)
            item_type, item_id = self._resolve_item(group, row)
            # line_problems() guarantees both numbers are present here.
            quantity = float(row.quantity or 0)
            unit_price = float(row.unit_price or 0)
            final_price = round(quantity * unit_price, 2)
            if item_type is TransactionType.SERVICE:
                service_total += final_price
            else:
                product_total += final_price
            line_items.append(
                LineItem(
                    item_type=item_type,
                    item_id=item_id,
                    name=row.item_name or "",
                    quantity=quantity,
                    unit_price=unit_price,
                    final_price=final_price,
                    staff_id=staff_id,
                )
            )
        return line_items, round(service_total, 2), round(product_total, 2)

    def _transaction_date(self, group: InvoiceGroup) -> datetime:
        try:
            return parse_transaction_date(group.first_value("transaction_date"))
        except InvalidDateError as exc:
            raise ReconstructionError(group.group_key, str(exc)) from exc

    def _payment(self, group: InvoiceGroup) -> tuple[float, PaymentDetails]:
        # line_problems() guarantees total and mode on every row.
        total = float(group.first_value("total_amount"))
        mode = group.first_value("payment_mode")
        grand_total = round(total, 2)
        return grand_total, PaymentDetails.single(payment_bucket(mode), grand_total)
