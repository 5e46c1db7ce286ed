"""
db/repositories/annotation_repository.py

Persistence for model annotations (strategic comments keyed by model name).
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from db.models.model_annotation import ModelAnnotation
from db.repositories.errors import AnnotationNotFoundError
from db.repositories.types import AnnotationRecord


def _to_record(row: ModelAnnotation) -> AnnotationRecord:
    return AnnotationRecord(
        model_name=row.model_name,
        text=row.text,
        team=row.team,
        noted_on=row.noted_on,
    )


class AnnotationRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_all(self) -> list[AnnotationRecord]:
        stmt = select(ModelAnnotation).order_by(ModelAnnotation.model_name.asc())
        return [_to_record(row) for row in self._session.scalars(stmt)]

    def get(self, model_name: str) -> AnnotationRecord:
        row = self._session.get(ModelAnnotation, model_name)
        if row is None:
            raise AnnotationNotFoundError(f"No annotation for model {model_name!r}.")
        return _to_record(row)

    def save(self, *, model_name: str, text: str, team: str, noted_on: date) -> AnnotationRecord:
        """Insert or overwrite the annotation for *model_name*."""
        stmt = insert(ModelAnnotation).values(
            model_name=model_name,
            text=text,
            team=team,
            noted_on=noted_on,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ModelAnnotation.model_name],
            set_={
                "text": stmt.excluded.text,
                "team": stmt.excluded.team,
                "noted_on": stmt.excluded.noted_on,
                "updated_at": func.now(),
            },
        ).returning(ModelAnnotation)
        row: ModelAnnotation = self._session.scalars(stmt).one()
        return _to_record(row)

    def delete(self, model_name: str) -> bool:
        """Remove the annotation; returns False when none existed."""
        result = self._session.execute(
            delete(ModelAnnotation).where(ModelAnnotation.model_name == model_name)
        )
        return bool(result.rowcount)
