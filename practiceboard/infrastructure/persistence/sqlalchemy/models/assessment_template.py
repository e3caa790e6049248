"""
SQLAlchemy model for assessment templates.
"""

from typing import Any

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from practiceboard.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
    new_id,
)


class AssessmentTemplateModel(Base, TimestampMixin):
    """Maps to the 'assessment_templates' table."""

    __tablename__ = "assessment_templates"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    abbreviation: Mapped[str | None] = mapped_column(String(50), nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="general")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[str] = mapped_column(String(20), nullable=False, default="1.0")
    questions: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    scoring_config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    interpretation_rules: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    clinical_cutoffs: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    evidence_level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    def __repr__(self) -> str:
        return f"<AssessmentTemplate(id={self.id}, name={self.name!r})>"
