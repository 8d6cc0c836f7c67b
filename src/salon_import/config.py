from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Runtime settings read from the environment (and an optional .env file)."""

    fuzzy_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    accept_fuzzy: bool = False
    blind_index_key: str = "local-dev-blind-index-key"
    upload_dir: Path = Path("outputs") / "uploads"
    delete_source_after_import: bool = True
    run_inline_worker: bool = True
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://127.0.0.1:5173"])

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from SALON_IMPORT_* and server environment variables."""

        load_dotenv()
        origins = os.getenv("CORS_ORIGINS", "http://127.0.0.1:5173,http://localhost:5173")
        return cls(
            fuzzy_threshold=float(os.getenv("SALON_IMPORT_FUZZY_THRESHOLD", "0.7")),
            accept_fuzzy=_env_bool("SALON_IMPORT_ACCEPT_FUZZY", False),
            blind_index_key=os.getenv("SALON_IMPORT_BLIND_INDEX_KEY", "local-dev-blind-index-key"),
            upload_dir=Path(os.getenv("SALON_IMPORT_UPLOAD_DIR", str(Path("outputs") / "uploads"))),
            delete_source_after_import=_env_bool("SALON_IMPORT_DELETE_SOURCE", True),
            run_inline_worker=_env_bool("RUN_INLINE_WORKER", True),
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "8000")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings instance."""

    return Settings.from_env()
