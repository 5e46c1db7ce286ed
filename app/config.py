"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list, dropping blank items.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    items = tuple(item.strip() for item in raw_value.split(",") if item.strip())
    return items if items else default


def _get_int_list_env(name: str, default: tuple[int, ...]) -> tuple[int, ...]:
    """
    Read a comma-separated list of integers; invalid items are ignored.
    """

    values: list[int] = []
    for item in _get_list_env(name, ()):
        try:
            values.append(int(item))
        except ValueError:
            continue
    return tuple(values) if values else default


@dataclass(frozen=True)
class CoverageSettings:
    """
    Defaults for coverage and policy analysis.
    """

    priority_tiers: tuple[str, ...] = ("AA", "A", "B", "C")
    policy_category: str = "AA"
    no_filter: str = "ALL"
    excluded_supplier_codes: tuple[int, ...] = (3,)


@dataclass(frozen=True)
class UploadSettings:
    """
    Runtime settings for fleet/product snapshot uploads.
    """

    batch_size: int = 500
    page_size: int = 1000
    max_validation_errors: int = 500


@dataclass(frozen=True)
class AnnotationSettings:
    """
    Teams that may own a model annotation.
    """

    teams: tuple[str, ...] = ("Sales", "Purchasing", "Product", "Logistics")


@lru_cache(maxsize=1)
def get_coverage_settings() -> CoverageSettings:
    """
    Return cached coverage settings from environment variables.
    """

    tiers = _get_list_env("COVERAGE_PRIORITY_TIERS", ("AA", "A", "B", "C"))
    return CoverageSettings(
        priority_tiers=tiers,
        policy_category=_get_str_env("COVERAGE_POLICY_CATEGORY", tiers[0]),
        no_filter=_get_str_env("COVERAGE_NO_FILTER", "ALL"),
        excluded_supplier_codes=_get_int_list_env("COVERAGE_EXCLUDED_SUPPLIERS", (3,)),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload settings from environment variables.
    """

    return UploadSettings(
        batch_size=max(1, _get_int_env("UPLOAD_BATCH_SIZE", 500)),
        page_size=max(1, _get_int_env("UPLOAD_PAGE_SIZE", 1000)),
        max_validation_errors=max(1, _get_int_env("UPLOAD_MAX_VALIDATION_ERRORS", 500)),
    )


@lru_cache(maxsize=1)
def get_annotation_settings() -> AnnotationSettings:
    """
    Return cached annotation settings from environment variables.
    """

    return AnnotationSettings(
        teams=_get_list_env("ANNOTATION_TEAMS", ("Sales", "Purchasing", "Product", "Logistics")),
    )
