from __future__ import annotations

import math
import re
from typing import Any

_WHITESPACE = re.compile(r"\s+")


def cell_text(value: Any) -> str:
    """Render a sheet cell as text; integral floats drop their `.0` suffix."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def normalize(value: Any) -> str:
    """Canonical lookup key: lower-cased, whitespace collapsed, stripped."""

    return _WHITESPACE.sub(" ", cell_text(value)).strip().lower()


def normalize_header(text: Any) -> str:
    if text is None:
        return ""
    s = normalize(text)
    s = s.replace("?", "")
    s = re.sub(r"\s*\(optional\)$", "", s)
    return s


def digits_only(value: Any) -> str:
    return re.sub(r"\D", "", cell_text(value))


def clean_text(value: Any) -> str | None:
    """Stripped display text, or None for blank cells."""

    text = cell_text(value).strip()
    return text or None


def to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return float(value)
    text = str(value).strip()
    if not text or text.lower() == "none":
        return None
    text = re.sub(r"[^\d,.\-]", "", text)
    if not text or text in {"-", ".", ","}:
        return None
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "")
            text = text.replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text and (text.count(",") > 1 or len(text) - text.rfind(",") == 4):
        # Thousands separators only, e.g. "1,200" or "1,20,000".
        text = text.replace(",", "")
    else:
        text = text.replace(",", ".")
    try:
        return float(text)
    except ValueError:
        return None
