"""
Environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ENV_FILES = (".env", ".env.local")


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if key.startswith("export "):
        key = key[len("export "):].strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files(project_root: Path | None = None) -> None:
    """
    Load KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    root = project_root or _PROJECT_ROOT
    for filename in _ENV_FILES:
        env_path = root / filename
        if not env_path.exists():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is None:
                continue
            key, value = parsed
            os.environ.setdefault(key, value)


def normalize_postgres_url(url: str) -> str:
    """
    Normalize postgres URLs to SQLAlchemy's psycopg driver form.
    """

    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def resolve_database_url() -> str:
    """
    Resolve the catalog database URL.

    Priority:
    1) DATABASE_URL
    2) COVERAGE_DATABASE_URL
    """

    load_env_files()

    for name in ("DATABASE_URL", "COVERAGE_DATABASE_URL"):
        url = os.getenv(name, "").strip()
        if url:
            return normalize_postgres_url(url)

    raise RuntimeError(
        "No database URL configured. Set DATABASE_URL or COVERAGE_DATABASE_URL."
    )
