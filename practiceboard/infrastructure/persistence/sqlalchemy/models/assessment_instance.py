"""
SQLAlchemy model for assessment instances.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from practiceboard.domain.utils.datetime_utils import now_utc
from practiceboard.infrastructure.persistence.sqlalchemy.models.assessment_template import (
    AssessmentTemplateModel,
)
from practiceboard.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
    new_id,
)
from practiceboard.infrastructure.persistence.sqlalchemy.models.profile import ProfileModel


class AssessmentInstanceModel(Base, TimestampMixin):
    """
    Maps to the 'assessment_instances' table.

    ``template_id`` and ``client_id`` are not enforced foreign keys: rows may
    outlive the template or profile they reference, and readers treat such
    references as unresolved.
    """

    __tablename__ = "assessment_instances"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    template_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    therapist_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    client_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    case_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="assigned")
    reminder_frequency: Mapped[str] = mapped_column(String(20), nullable=False, default="none")
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now_utc
    )
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )

    template: Mapped[AssessmentTemplateModel | None] = relationship(
        AssessmentTemplateModel,
        primaryjoin="foreign(AssessmentInstanceModel.template_id) == AssessmentTemplateModel.id",
        viewonly=True,
        lazy="raise",
    )
    client: Mapped[ProfileModel | None] = relationship(
        ProfileModel,
        primaryjoin="foreign(AssessmentInstanceModel.client_id) == ProfileModel.id",
        viewonly=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<AssessmentInstance(id={self.id}, status={self.status})>"
