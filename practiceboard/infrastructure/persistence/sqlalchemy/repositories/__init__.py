"""SQLAlchemy repository implementations."""

from practiceboard.infrastructure.persistence.sqlalchemy.repositories.assessment_store import (
    SQLAlchemyAssessmentStore,
)

__all__ = ["SQLAlchemyAssessmentStore"]
