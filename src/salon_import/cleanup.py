from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def cleanup_paths(paths: Iterable[Path], *, dry_run: bool = False) -> list[Path]:
    """Delete uploaded source files (or directories); return what was removed.

    Failures are logged and skipped so a terminal job state is never undone
    by a cleanup problem.
    """

    deleted: list[Path] = []
    for path in paths:
        if not path.exists():
            continue
        if dry_run:
            deleted.append(path)
            continue
        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as exc:
            logger.error("Failed to delete temp file %s: %s", path, exc)
            continue
        deleted.append(path)
    return deleted
