"""
policy/quality.py

Supplier-based quality tier inference.
"""

from __future__ import annotations

import math
from enum import Enum


class QualityTier(str, Enum):
    ORIGINAL = "ORIGINAL"
    PREMIUM = "PREMIUM"
    STANDARD = "STANDARD"


_ORIGINAL_MARKERS: tuple[str, ...] = ("ORIGINAL", "OEM")

PREMIUM_SUPPLIERS: frozenset[str] = frozenset({"1", "2", "BOSCH", "SKF", "VALEO"})

# Documented economic suppliers. STANDARD is already the fallback tier, so this
# list is not consulted by classify().
STANDARD_SUPPLIERS: frozenset[str] = frozenset({"3", "4", "GENERIC"})


def normalize_supplier(value: object) -> str:
    """
    Render a supplier identifier as uppercase text.

    Integral floats (as produced by spreadsheet readers) are rendered
    without the fractional part so ``1.0`` and ``"1"`` normalize the same.
    ``None`` and NaN normalize to an empty string.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip().upper()


def classify(supplier: object) -> QualityTier:
    """
    Map a raw supplier code or name to a quality tier.

    Never raises: unrecognised, empty or non-string input yields STANDARD.
    """
    text = normalize_supplier(supplier)
    if any(marker in text for marker in _ORIGINAL_MARKERS):
        return QualityTier.ORIGINAL
    if text in PREMIUM_SUPPLIERS:
        return QualityTier.PREMIUM
    return QualityTier.STANDARD
