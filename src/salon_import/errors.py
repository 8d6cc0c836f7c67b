"""Exception types shared by the import pipeline."""

from __future__ import annotations

from typing import Any


class ImportPipelineError(RuntimeError):
    """The whole job cannot continue (unreadable workbook, missing columns)."""


class ReconstructionError(Exception):
    """One invoice group cannot be imported; the job moves on to the next group."""

    def __init__(self, group_key: str, message: str) -> None:
        super().__init__(message)
        self.group_key = group_key
        self.message = message


class InvalidDateError(ValueError):
    """A transaction date cell could not be interpreted."""

    def __init__(self, raw_value: Any, reason: str | None = None) -> None:
        detail = f"Invalid 'Transaction Date' value {raw_value!r}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(f"{detail}. Use DD-MM-YYYY or DD-MM-YYYY HH:mm.")
        self.raw_value = raw_value
