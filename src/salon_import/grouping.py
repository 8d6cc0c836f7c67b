from __future__ import annotations

from typing import Iterable

from salon_import.models.rows import InvoiceGroup, SourceRow
from salon_import.normalize import normalize


def synthesized_key(job_id: str, row: SourceRow) -> str:
    return f"auto-{job_id}-{row.row_number}"


def group_rows(rows: Iterable[SourceRow], job_id: str) -> list[InvoiceGroup]:
    """Partition rows into invoice groups by original invoice number.

    Groups come out in order of first appearance and keep row order. Rows
    without an invoice number become single-row groups with a synthesized key.
    """

    groups: list[InvoiceGroup] = []
    by_key: dict[str, InvoiceGroup] = {}
    for row in rows:
        key = normalize(row.invoice_number)
        if not key:
            groups.append(
                InvoiceGroup(group_key=synthesized_key(job_id, row), synthesized=True, rows=[row])
            )
            continue
        group = by_key.get(key)
        if group is None:
            group = InvoiceGroup(group_key=row.invoice_number or key, rows=[row])
            by_key[key] = group
            groups.append(group)
        else:
            group.rows.append(row)
    return groups
