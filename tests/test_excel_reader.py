from __future__ import annotations
"""Workbook reading and template generation."""

from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from conftest import HEADERS, sheet_row, write_sheet
from salon_import.errors import ImportPipelineError
from salon_import.integrations.excel_reader import read_source_rows, write_template
from salon_import.models.rows import SOURCE_COLUMNS


def test_template_round_trips_through_reader(tmp_path: Path) -> None:
    """The downloadable template is itself a valid import file."""

    path = write_template(tmp_path / "template.xlsx")
    wb = load_workbook(path)
    ws = wb.active
    assert [c.value for c in ws[1]] == list(SOURCE_COLUMNS)
    assert ws[1][0].font.bold
    wb.close()

    rows = read_source_rows(path)
    assert [r.row_number for r in rows] == [2, 3]
    assert {r.invoice_number for r in rows} == {"INV-100"}
    assert rows[1].item_sku == "SH-001"
    assert rows[0].quantity == 1.0
    assert rows[0].customer_phone == "9876543210"


def test_template_without_examples_has_only_header(tmp_path: Path) -> None:
    path = write_template(tmp_path / "blank.xlsx", with_examples=False)
    assert read_source_rows(path) == []


def test_blank_rows_are_skipped_and_numbering_follows_sheet(tmp_path: Path) -> None:
    """Row numbers refer to the sheet, blank rows included."""

    path = write_sheet(tmp_path / "gaps.xlsx", [sheet_row(), {}, sheet_row(invoice_number="INV-7")])
    rows = read_source_rows(path)
    assert [r.row_number for r in rows] == [2, 4]
    assert rows[1].invoice_number == "INV-7"
    assert rows[0].raw["Total Amount"] == 700


def test_headers_are_matched_loosely(tmp_path: Path) -> None:
    """Case, spacing and legacy aliases in headers are tolerated."""

    headers = [h.upper() for h in HEADERS]
    headers[HEADERS.index("Total Amount")] = "Total Amount Paid"
    values = sheet_row()
    row = {headers[i]: values[h] for i, h in enumerate(HEADERS)}
    path = write_sheet(tmp_path / "aliases.xlsx", [row], headers=headers)

    rows = read_source_rows(path)
    assert rows[0].total_amount == 700
    assert rows[0].staff_name == "Priyanka"


def test_missing_required_columns_fail(tmp_path: Path) -> None:
    headers = [h for h in HEADERS if h not in {"Payment Mode", "Customer Phone"}]
    path = write_sheet(tmp_path / "partial.xlsx", [sheet_row()], headers=headers)

    with pytest.raises(ImportPipelineError) as exc_info:
        read_source_rows(path)
    assert str(exc_info.value) == "Missing required column(s): Customer Phone, Payment Mode."


def test_unreadable_file_fails(tmp_path: Path) -> None:
    path = tmp_path / "not_a_workbook.xlsx"
    path.write_bytes(b"plain text, not a zip archive")

    with pytest.raises(ImportPipelineError) as exc_info:
        read_source_rows(path)
    assert "Could not read workbook 'not_a_workbook.xlsx'" in str(exc_info.value)


def test_sheet_without_header_fails(tmp_path: Path) -> None:
    path = tmp_path / "empty.xlsx"
    Workbook().save(path)

    with pytest.raises(ImportPipelineError):
        read_source_rows(path)
