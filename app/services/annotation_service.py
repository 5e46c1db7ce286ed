"""
app/services/annotation_service.py

Strategic comments attached to fleet models by name.

Saving blank text removes the annotation. The owning team must be one of
the configured teams.
"""

from __future__ import annotations

import logging
from datetime import date
from functools import lru_cache
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_annotation_settings
from db.repositories.annotation_repository import AnnotationRepository
from db.repositories.errors import CatalogRepositoryError
from db.repositories.types import AnnotationRecord

logger = logging.getLogger(__name__)


class AnnotationValidationError(ValueError):
    """
    Raised when an annotation names an unknown team or a blank model.
    """


class AnnotationPersistenceError(CatalogRepositoryError):
    """
    Raised when an annotation cannot be written; the session has been rolled back.
    """


class AnnotationService:
    def __init__(self, *, teams: Sequence[str]) -> None:
        self._teams = tuple(teams)

    @property
    def teams(self) -> tuple[str, ...]:
        return self._teams

    def list_all(self, db: Session) -> list[AnnotationRecord]:
        return AnnotationRepository(db).list_all()

    def get(self, db: Session, model_name: str) -> AnnotationRecord:
        """
        Raises
        ------
        AnnotationNotFoundError
            When the model has no annotation.
        """
        return AnnotationRepository(db).get(model_name)

    def save(
        self,
        db: Session,
        *,
        model_name: str,
        text: str,
        team: str,
        noted_on: date | None = None,
    ) -> AnnotationRecord | None:
        """
        Store the annotation for *model_name*; blank *text* deletes it.

        Returns the stored record, or ``None`` when the call deleted it.

        Raises
        ------
        AnnotationValidationError
            For a blank model name or an unknown team.
        AnnotationPersistenceError
            When the database rejects the write.
        """
        name = model_name.strip()
        if not name:
            raise AnnotationValidationError("Model name is required.")

        body = text.strip()
        if not body:
            self.delete(db, name)
            return None

        if team not in self._teams:
            raise AnnotationValidationError(
                f"Unknown team {team!r}. Valid teams: {list(self._teams)}"
            )

        repository = AnnotationRepository(db)
        try:
            record = repository.save(
                model_name=name,
                text=body,
                team=team,
                noted_on=noted_on or date.today(),
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise AnnotationPersistenceError(f"Unable to save annotation for {name!r}.") from exc

        logger.info("Annotation saved model=%r team=%s", name, team)
        return record

    def delete(self, db: Session, model_name: str) -> bool:
        """
        Raises
        ------
        AnnotationPersistenceError
            When the database rejects the delete.
        """
        try:
            removed = AnnotationRepository(db).delete(model_name)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise AnnotationPersistenceError(
                f"Unable to delete annotation for {model_name!r}."
            ) from exc

        if removed:
            logger.info("Annotation deleted model=%r", model_name)
        return removed


@lru_cache(maxsize=1)
def get_annotation_service() -> AnnotationService:
    return AnnotationService(teams=get_annotation_settings().teams)
