from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_core import to_jsonable_python

from salon_import.models.common import StrictModel
from salon_import.normalize import clean_text, normalize_header, to_float

# Sheet header -> SourceRow field. Headers are matched after normalize_header,
# so "(Optional)" suffixes and case/spacing differences are ignored.
SOURCE_COLUMNS: dict[str, str] = {
    "Transaction Type": "transaction_type",
    "Item Name": "item_name",
    "Item SKU (Optional)": "item_sku",
    "Quantity": "quantity",
    "Unit Price": "unit_price",
    "Staff Name": "staff_name",
    "Staff ID Number (Optional)": "staff_id_number",
    "Customer Phone": "customer_phone",
    "Total Amount": "total_amount",
    "Payment Mode": "payment_mode",
    "Transaction Date": "transaction_date",
    "Original Invoice Number (Optional)": "invoice_number",
}

REQUIRED_COLUMNS: tuple[str, ...] = tuple(
    header for header in SOURCE_COLUMNS if not header.endswith("(Optional)")
)

# Accepted legacy spellings for a few headers.
HEADER_ALIASES: dict[str, str] = {
    "total amount paid": "total_amount",
    "staff id number": "staff_id_number",
    "invoice number": "invoice_number",
    "sku": "item_sku",
}

_FIELD_BY_HEADER: dict[str, str] = {
    **{normalize_header(header): field for header, field in SOURCE_COLUMNS.items()},
    **HEADER_ALIASES,
}

_LABEL_BY_FIELD: dict[str, str] = {field: header for header, field in SOURCE_COLUMNS.items()}

_NUMBER_FIELDS = ("quantity", "unit_price", "total_amount")


def field_for_header(header: Any) -> str | None:
    """Map a raw sheet header to a SourceRow field name."""

    return _FIELD_BY_HEADER.get(normalize_header(header))


def missing_required_columns(headers: list[Any]) -> list[str]:
    """Return required column labels that no header maps to."""

    present = {field_for_header(h) for h in headers}
    return [label for label in REQUIRED_COLUMNS if SOURCE_COLUMNS[label] not in present]


def _is_blank(value: Any) -> bool:
    return clean_text(value) is None


class SourceRow(StrictModel):
    """One parsed legacy point-of-sale row, before reference resolution."""

    row_number: int
    transaction_type: str | None = None
    item_name: str | None = None
    item_sku: str | None = None
    quantity: float | None = None
    unit_price: float | None = None
    staff_name: str | None = None
    staff_id_number: str | None = None
    customer_phone: str | None = None
    total_amount: float | None = None
    payment_mode: str | None = None
    transaction_date: Any = None
    invoice_number: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_sheet(cls, row_number: int, values: dict[str, Any]) -> "SourceRow":
        """Parse one header-keyed sheet row into typed fields."""

        parsed: dict[str, Any] = {}
        for header, value in values.items():
            field = field_for_header(header)
            if field is None or field in parsed:
                continue
            if field in _NUMBER_FIELDS:
                parsed[field] = to_float(value)
            elif field == "transaction_date":
                parsed[field] = None if _is_blank(value) else value
            else:
                parsed[field] = clean_text(value)
        return cls(
            row_number=row_number,
            raw={str(k): to_jsonable_python(v) for k, v in values.items() if k is not None},
            **parsed,
        )

    def raw_value(self, field: str) -> Any:
        """Original cell value for a field, looked up through the header map."""

        for header, value in self.raw.items():
            if field_for_header(header) == field:
                return value
        return None

    def line_problems(self) -> list[str]:
        """Describe missing or malformed line-level fields on this row."""

        problems: list[str] = []
        for field in ("transaction_type", "item_name"):
            if getattr(self, field) is None:
                problems.append(f"'{_LABEL_BY_FIELD[field]}' is missing")
        if self.staff_name is None and self.staff_id_number is None:
            problems.append(f"'{_LABEL_BY_FIELD['staff_name']}' is missing")
        for field in ("customer_phone", "payment_mode", "transaction_date"):
            if getattr(self, field) is None:
                problems.append(f"'{_LABEL_BY_FIELD[field]}' is missing")
        for field in ("quantity", "unit_price", "total_amount"):
            label = _LABEL_BY_FIELD[field]
            value = getattr(self, field)
            if value is None:
                raw = self.raw_value(field)
                if _is_blank(raw):
                    problems.append(f"'{label}' is missing")
                else:
                    problems.append(f"'{label}' is not a number: {raw!r}")
        if self.quantity is not None and self.quantity <= 0:
            problems.append("'Quantity' must be greater than zero")
        if self.unit_price is not None and self.unit_price < 0:
            problems.append("'Unit Price' must not be negative")
        return problems


class InvoiceGroup(StrictModel):
    """Rows that together describe one legacy invoice."""

    group_key: str
    synthesized: bool = False
    rows: list[SourceRow] = Field(min_length=1)

    def first_value(self, field: str) -> Any:
        """First non-blank value of an invoice-level field across the rows."""

        for row in self.rows:
            value = getattr(row, field)
            if value is not None:
                return value
        return None

    def raw_data(self) -> list[dict[str, Any]]:
        """Original cell values of every row, for the job error log."""

        return [dict(row.raw) for row in self.rows]
