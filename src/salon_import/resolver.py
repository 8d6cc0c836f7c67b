"""Resolve free-text references from legacy rows to canonical record ids.

Exact (normalized) matches succeed. Otherwise the closest display name is
ranked with rapidfuzz; a close candidate is reported back as a suggestion
instead of being used, so a sale is never silently credited to the wrong
service, product or staff member.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from rapidfuzz import fuzz, process

from salon_import.catalog import Catalogs, LookupTable
from salon_import.models.enums import MatchKind
from salon_import.normalize import clean_text, normalize

DEFAULT_FUZZY_THRESHOLD = 0.7


@dataclass(frozen=True)
class Resolved:
    entity_id: str
    match_kind: MatchKind
    matched_name: str | None = None


@dataclass(frozen=True)
class Unresolved:
    message: str
    suggestion: str | None = None
    score: float | None = None


Resolution = Resolved | Unresolved


def _label(entity: str) -> str:
    return entity[:1].upper() + entity[1:]


def closest_name(text: str, table: LookupTable, *, threshold: float) -> tuple[str, float, str] | None:
    """Best (display name, 0-1 score, entity id) at or above threshold."""

    if not table.names:
        return None
    best = process.extractOne(
        text,
        table.names,
        scorer=fuzz.ratio,
        processor=normalize,
        score_cutoff=threshold * 100,
    )
    if best is None:
        return None
    name, score, entity_id = best
    return name, score / 100, entity_id


def resolve(
    raw_text: Any,
    table: LookupTable,
    *,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
    accept_fuzzy: bool = False,
) -> Resolution:
    key = normalize(raw_text)
    shown = clean_text(raw_text) or ""
    if not key:
        return Unresolved(f"{_label(table.entity)} reference is empty.")

    entity_id = table.exact.get(key)
    if entity_id is not None:
        return Resolved(entity_id, MatchKind.EXACT)

    candidate = closest_name(key, table, threshold=threshold)
    if candidate is not None:
        name, score, candidate_id = candidate
        if accept_fuzzy:
            return Resolved(candidate_id, MatchKind.FUZZY, matched_name=name)
        return Unresolved(
            f"{_label(table.entity)} '{shown}' not found. Did you mean '{name}'?",
            suggestion=name,
            score=score,
        )
    return Unresolved(f"{_label(table.entity)} '{shown}' not found.")


def resolve_product(
    name: Any,
    sku: Any,
    catalogs: Catalogs,
    *,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
    accept_fuzzy: bool = False,
) -> Resolution:
    """SKU lookup first (exact only), then product name resolution."""

    sku_key = normalize(sku)
    if sku_key:
        entity_id = catalogs.products_by_sku.exact.get(sku_key)
        if entity_id is not None:
            return Resolved(entity_id, MatchKind.EXACT)
    result = resolve(name, catalogs.products_by_name, threshold=threshold, accept_fuzzy=accept_fuzzy)
    if isinstance(result, Unresolved) and sku_key:
        return replace(result, message=f"SKU '{clean_text(sku)}' matched no product. {result.message}")
    return result


def resolve_staff(
    name: Any,
    staff_id_number: Any,
    catalogs: Catalogs,
    *,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
    accept_fuzzy: bool = False,
) -> Resolution:
    """A given staff ID number must match exactly; the name is used only without one."""

    id_key = normalize(staff_id_number)
    if id_key:
        entity_id = catalogs.staff_by_id.exact.get(id_key)
        if entity_id is None:
            return Unresolved(f"Staff ID '{clean_text(staff_id_number)}' not found.")
        return Resolved(entity_id, MatchKind.EXACT)
    return resolve(name, catalogs.staff_by_name, threshold=threshold, accept_fuzzy=accept_fuzzy)
