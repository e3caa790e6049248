"""
SQLAlchemy model for assessment scores.

Rows are written by the external scoring process; the assessment engine only
reads them.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from practiceboard.domain.utils.datetime_utils import now_utc
from practiceboard.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
    new_id,
)


class AssessmentScoreModel(Base, TimestampMixin):
    """Maps to the 'assessment_scores' table."""

    __tablename__ = "assessment_scores"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    instance_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    raw_score: Mapped[float] = mapped_column(Float, nullable=False)
    scaled_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    percentile: Mapped[float | None] = mapped_column(Float, nullable=True)
    t_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    z_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    interpretation_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    interpretation_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    clinical_significance: Mapped[str | None] = mapped_column(String(50), nullable=True)
    severity_level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    recommendations: Mapped[str | None] = mapped_column(Text, nullable=True)
    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now_utc, index=True
    )

    def __repr__(self) -> str:
        return f"<AssessmentScore(id={self.id}, instance_id={self.instance_id})>"
