from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Base model that rejects unknown fields to keep schema strict."""

    model_config = ConfigDict(extra="forbid")


class ErrorInfo(StrictModel):
    """Normalized API error payload for job-level failures."""

    code: str
    message: str
    details: dict[str, Any] | None = None
