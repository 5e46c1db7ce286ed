"""
Typed payloads shared between repositories and services.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class AnnotationRecord:
    model_name: str
    text: str
    team: str
    noted_on: date

    def describe(self) -> str:
        """Render as ``[team] text (date)``."""
        return f"[{self.team}] {self.text} ({self.noted_on.isoformat()})"
