"""
SQLAlchemy model for client profiles.

Only the columns the assessment engine reads are mapped.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from practiceboard.infrastructure.persistence.sqlalchemy.models.base import Base, new_id


class ProfileModel(Base):
    """Maps to the 'profiles' table."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Profile(id={self.id})>"
