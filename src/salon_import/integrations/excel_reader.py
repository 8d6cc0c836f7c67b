from __future__ import annotations

from pathlib import Path
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException

from salon_import.errors import ImportPipelineError
from salon_import.models.rows import SOURCE_COLUMNS, SourceRow, missing_required_columns
from salon_import.normalize import clean_text

TEMPLATE_EXAMPLE_ROWS: list[list[object]] = [
    [
        "Service", "Haircut", None, 1, 500, "Priyanka", None,
        "9876543210", 700, "Cash", "15-03-2024 14:30", "INV-100",
    ],
    [
        "Product", "Argan Oil Shampoo", "SH-001", 1, 200, "Priyanka", None,
        "9876543210", 700, "Cash", "15-03-2024 14:30", "INV-100",
    ],
]


def read_source_rows(path: Path) -> list[SourceRow]:
    """Read the first sheet of an .xlsx upload into parsed source rows.

    Row numbers follow the sheet (header is row 1). Fully blank rows are
    skipped. Unreadable files, an empty sheet or missing required columns
    raise ImportPipelineError.
    """

    try:
        wb = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError) as exc:
        raise ImportPipelineError(f"Could not read workbook '{Path(path).name}': {exc}") from exc

    try:
        ws = wb.worksheets[0]
        values = ws.iter_rows(values_only=True)
        header = next(values, None)
        if header is None:
            raise ImportPipelineError("The first sheet is empty.")
        headers = [clean_text(cell) for cell in header]
        missing = missing_required_columns(headers)
        if missing:
            raise ImportPipelineError(f"Missing required column(s): {', '.join(missing)}.")

        rows: list[SourceRow] = []
        for row_number, cells in enumerate(values, start=2):
            if all(clean_text(cell) is None for cell in cells):
                continue
            record = {h: cell for h, cell in zip(headers, cells) if h is not None}
            rows.append(SourceRow.from_sheet(row_number, record))
        return rows
    finally:
        wb.close()


def write_template(path: Path, *, with_examples: bool = True) -> Path:
    """Write the import template workbook (header row plus optional examples)."""

    wb = Workbook()
    ws = wb.active
    ws.title = "History Import"
    ws.append(list(SOURCE_COLUMNS))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    if with_examples:
        for row in TEMPLATE_EXAMPLE_ROWS:
            ws.append(row)
    for column_cells in ws.columns:
        width = max(len(str(c.value or "")) for c in column_cells)
        ws.column_dimensions[column_cells[0].column_letter].width = min(width + 2, 40)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path
