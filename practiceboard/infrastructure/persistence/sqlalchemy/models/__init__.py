"""
SQLAlchemy ORM models for the assessment store.
"""

from practiceboard.infrastructure.persistence.sqlalchemy.models.assessment_instance import (
    AssessmentInstanceModel,
)
from practiceboard.infrastructure.persistence.sqlalchemy.models.assessment_score import (
    AssessmentScoreModel,
)
from practiceboard.infrastructure.persistence.sqlalchemy.models.assessment_template import (
    AssessmentTemplateModel,
)
from practiceboard.infrastructure.persistence.sqlalchemy.models.base import Base, TimestampMixin
from practiceboard.infrastructure.persistence.sqlalchemy.models.profile import ProfileModel

__all__ = [
    "AssessmentInstanceModel",
    "AssessmentScoreModel",
    "AssessmentTemplateModel",
    "Base",
    "ProfileModel",
    "TimestampMixin",
]
