from __future__ import annotations
"""Reference resolution against tenant catalogs."""

import asyncio

from salon_import.catalog import Catalogs, LookupTable, load_catalogs
from salon_import.integrations.in_memory import InMemoryCatalogSource
from salon_import.models.catalog import ServiceItem, StaffMember
from salon_import.models.enums import MatchKind
from salon_import.resolver import Resolved, Unresolved, resolve, resolve_product, resolve_staff


def test_exact_match_is_case_and_space_insensitive(catalogs: Catalogs) -> None:
    """Normalized exact matches resolve directly."""

    result = resolve("  hair   COLOUR ", catalogs.services_by_name)
    assert result == Resolved("svc-colour", MatchKind.EXACT)


def test_close_staff_name_is_suggested_not_used(catalogs: Catalogs) -> None:
    """A near miss fails the reference and names the closest candidate."""

    result = resolve_staff("Priya", None, catalogs)
    assert isinstance(result, Unresolved)
    assert result.message == "Staff 'Priya' not found. Did you mean 'Priyanka'?"
    assert result.suggestion == "Priyanka"
    assert result.score is not None and 0.7 <= result.score < 1.0


def test_close_match_accepted_when_enabled(catalogs: Catalogs) -> None:
    """Opt-in fuzzy acceptance credits the suggested record."""

    result = resolve_staff("Priya", None, catalogs, accept_fuzzy=True)
    assert result == Resolved("stf-priyanka", MatchKind.FUZZY, matched_name="Priyanka")


def test_candidate_below_threshold_is_plain_not_found(catalogs: Catalogs) -> None:
    """Raising the threshold drops the suggestion."""

    result = resolve_staff("Priya", None, catalogs, threshold=0.9)
    assert result == Unresolved("Staff 'Priya' not found.")
    assert resolve("Zed", catalogs.staff_by_name) == Unresolved("Staff 'Zed' not found.")


def test_empty_reference(catalogs: Catalogs) -> None:
    """Blank cells never match anything."""

    result = resolve("   ", catalogs.services_by_name)
    assert result == Unresolved("Service reference is empty.")


def test_product_sku_takes_precedence(catalogs: Catalogs) -> None:
    """A known SKU resolves even when the name is wrong."""

    result = resolve_product("Some Shampoo", "sh-001", catalogs)
    assert result == Resolved("prd-shampoo", MatchKind.EXACT)


def test_unknown_sku_falls_back_to_name(catalogs: Catalogs) -> None:
    """An unknown SKU does not block an exact name match."""

    assert resolve_product("Argan Oil Shampoo", "XX-9", catalogs) == Resolved("prd-shampoo", MatchKind.EXACT)

    result = resolve_product("Conditioner", "XX-9", catalogs)
    assert isinstance(result, Unresolved)
    assert result.message.startswith("SKU 'XX-9' matched no product. Product 'Conditioner' not found")


def test_staff_id_number_lookup(catalogs: Catalogs) -> None:
    """Staff can be referenced by their ID number alone."""

    assert resolve_staff(None, "e-07", catalogs) == Resolved("stf-priyanka", MatchKind.EXACT)
    assert resolve_staff(None, "E-99", catalogs) == Unresolved("Staff ID 'E-99' not found.")
    assert resolve_staff("Rahul", "E-99", catalogs) == Unresolved("Staff ID 'E-99' not found.")
    assert resolve_staff("Rahul", None, catalogs) == Resolved("stf-rahul", MatchKind.EXACT)


def test_transposed_service_name_is_suggested_not_resolved(catalogs: Catalogs) -> None:
    """A swapped-letter typo is never credited silently."""

    result = resolve("Hiarcut", catalogs.services_by_name)
    assert isinstance(result, Unresolved)
    assert result.suggestion == "Haircut"
    assert result.message == "Service 'Hiarcut' not found. Did you mean 'Haircut'?"


def test_catalogs_are_tenant_scoped() -> None:
    """Records of another tenant are invisible to resolution."""

    source = InMemoryCatalogSource(
        services=[ServiceItem(id="svc-other", tenant_id="salon-2", name="Haircut")],
        staff=[StaffMember(id="stf-other", tenant_id="salon-2", name="Priyanka")],
    )
    catalogs = asyncio.run(load_catalogs("salon-1", source))
    assert resolve("Haircut", catalogs.services_by_name) == Unresolved("Service 'Haircut' not found.")
    assert len(catalogs.staff_by_name) == 0


def test_lookup_table_first_entry_wins() -> None:
    """Duplicate names keep the first record."""

    table = LookupTable.build("service", [("Haircut", "a", "Haircut"), ("haircut ", "b", "haircut"), (None, "c", "")])
    assert table.exact == {"haircut": "a"}
