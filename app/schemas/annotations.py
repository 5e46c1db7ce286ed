"""
app/schemas/annotations.py

Request and response schemas for model annotations.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class AnnotationRequest(BaseModel):
    """
    Body of ``PUT /annotations/{model_name}``; blank text deletes the annotation.
    """

    text: str = Field(default="", max_length=4000)
    team: str = Field(..., min_length=1)
    noted_on: date | None = None


class AnnotationResponse(BaseModel):
    model_name: str
    text: str
    team: str
    noted_on: date


class AnnotationListResponse(BaseModel):
    teams: list[str]
    annotations: list[AnnotationResponse] = Field(default_factory=list)
