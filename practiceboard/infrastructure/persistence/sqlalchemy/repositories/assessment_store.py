"""
SQLAlchemy implementation of the assessment store.

Each call opens its own session from the session factory, so independent
reads may run concurrently. Database errors are classified into
``StoreErrorKind`` here and nowhere else.
"""

import logging
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import joinedload

from practiceboard.domain.entities import (
    AssessmentInstance,
    AssessmentScore,
    AssessmentTemplate,
    ClientSummary,
    InstanceStatus,
    InstanceSummary,
    NewAssessmentInstance,
)
from practiceboard.domain.exceptions import StoreError, StoreErrorKind
from practiceboard.domain.repositories import (
    ChangeEvent,
    ChangeType,
    IAssessmentStore,
    IChangeFeed,
)
from practiceboard.domain.utils.datetime_utils import ensure_utc
from practiceboard.infrastructure.persistence.sqlalchemy.mappers import (
    map_draft_to_model,
    map_instance_model_to_entity,
    map_profile_model_to_client,
    map_score_model_to_entity,
    map_template_model_to_entity,
)
from practiceboard.infrastructure.persistence.sqlalchemy.models import (
    AssessmentInstanceModel,
    AssessmentScoreModel,
    AssessmentTemplateModel,
    ProfileModel,
)

logger = logging.getLogger(__name__)

DEFAULT_RECURSION_MARKERS = ("infinite recursion",)

# Instance attributes that may be changed through update_instance
_UPDATABLE_COLUMNS = {
    "status": "status",
    "started_at": "started_at",
    "completed_at": "completed_at",
    "expires_at": "expires_at",
    "due_date": "due_date",
    "instructions": "instructions",
    "title": "title",
    "reminder_frequency": "reminder_frequency",
    "metadata": "metadata_",
}


def _error_message(error: Exception) -> str:
    original = getattr(error, "orig", None)
    return str(original) if original is not None else str(error)


def classify_store_error(
    error: Exception, recursion_markers: Sequence[str] = DEFAULT_RECURSION_MARKERS
) -> StoreErrorKind:
    """Map a database error onto a ``StoreErrorKind``."""
    message = _error_message(error).lower()
    if any(marker.lower() in message for marker in recursion_markers):
        return StoreErrorKind.RECURSION
    if isinstance(error, IntegrityError):
        return StoreErrorKind.CONSTRAINT
    if isinstance(error, NoResultFound):
        return StoreErrorKind.NOT_FOUND
    return StoreErrorKind.TRANSIENT


class SQLAlchemyAssessmentStore(IAssessmentStore):
    """
    Assessment store backed by an async SQLAlchemy engine.

    Args:
        session_factory: Factory producing ``AsyncSession`` objects
        change_feed: Optional feed notified after every committed write
        recursion_markers: Message fragments that identify policy recursion
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        change_feed: IChangeFeed | None = None,
        recursion_markers: Sequence[str] = DEFAULT_RECURSION_MARKERS,
    ) -> None:
        self._session_factory = session_factory
        self._change_feed = change_feed
        self._recursion_markers = tuple(recursion_markers)

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                kind = classify_store_error(e, self._recursion_markers)
                logger.error(f"Database error during {operation} ({kind.value}): {e}")
                raise StoreError(
                    _error_message(e),
                    kind=kind,
                    operation=operation,
                    original_exception=e,
                ) from e
            except (ValueError, KeyError, TypeError) as e:
                logger.error(f"Unreadable row during {operation}: {e}")
                raise StoreError(
                    f"Unreadable row: {e}",
                    kind=StoreErrorKind.TRANSIENT,
                    operation=operation,
                    original_exception=e,
                ) from e

    async def _publish(self, change_type: ChangeType, therapist_id: str, record_id: str) -> None:
        if self._change_feed is None:
            return
        await self._change_feed.publish(
            ChangeEvent(change_type=change_type, therapist_id=therapist_id, record_id=record_id)
        )

    # ------------------------------------------------------------------
    # Templates and clients
    # ------------------------------------------------------------------

    async def list_active_templates(self) -> list[AssessmentTemplate]:
        stmt = (
            select(AssessmentTemplateModel)
            .where(AssessmentTemplateModel.is_active.is_(True))
            .order_by(AssessmentTemplateModel.name)
        )
        async with self._session("list_active_templates") as session:
            result = await session.execute(stmt)
            return [map_template_model_to_entity(m) for m in result.scalars().all()]

    async def fetch_templates_by_ids(self, template_ids: Iterable[str]) -> list[AssessmentTemplate]:
        ids = set(template_ids)
        if not ids:
            return []
        stmt = select(AssessmentTemplateModel).where(AssessmentTemplateModel.id.in_(ids))
        async with self._session("fetch_templates_by_ids") as session:
            result = await session.execute(stmt)
            return [map_template_model_to_entity(m) for m in result.scalars().all()]

    async def fetch_clients_by_ids(self, client_ids: Iterable[str]) -> list[ClientSummary]:
        ids = set(client_ids)
        if not ids:
            return []
        stmt = select(ProfileModel).where(ProfileModel.id.in_(ids))
        async with self._session("fetch_clients_by_ids") as session:
            result = await session.execute(stmt)
            return [map_profile_model_to_client(m) for m in result.scalars().all()]

    # ------------------------------------------------------------------
    # Instances
    # ------------------------------------------------------------------

    def _instances_for(self, therapist_id: str):
        return (
            select(AssessmentInstanceModel)
            .where(AssessmentInstanceModel.therapist_id == therapist_id)
            .order_by(AssessmentInstanceModel.assigned_at.desc())
        )

    async def fetch_instances_with_relations(self, therapist_id: str) -> list[AssessmentInstance]:
        stmt = self._instances_for(therapist_id).options(
            joinedload(AssessmentInstanceModel.template),
            joinedload(AssessmentInstanceModel.client),
        )
        async with self._session("fetch_instances_with_relations") as session:
            result = await session.execute(stmt)
            return [
                map_instance_model_to_entity(m, with_relations=True)
                for m in result.scalars().all()
            ]

    async def fetch_instances(self, therapist_id: str) -> list[AssessmentInstance]:
        async with self._session("fetch_instances") as session:
            result = await session.execute(self._instances_for(therapist_id))
            return [map_instance_model_to_entity(m) for m in result.scalars().all()]

    async def get_instance(self, instance_id: str) -> AssessmentInstance | None:
        async with self._session("get_instance") as session:
            model = await session.get(AssessmentInstanceModel, instance_id)
            return map_instance_model_to_entity(model) if model else None

    async def insert_instances(
        self, drafts: list[NewAssessmentInstance]
    ) -> list[AssessmentInstance]:
        if not drafts:
            return []
        models = [map_draft_to_model(draft) for draft in drafts]
        async with self._session("insert_instances") as session:
            session.add_all(models)
            await session.commit()
            created = [map_instance_model_to_entity(m) for m in models]

        logger.debug(f"Inserted {len(created)} assessment instance(s)")
        for instance in created:
            await self._publish(ChangeType.INSERT, instance.therapist_id, instance.id)
        return created

    async def update_instance(
        self, instance_id: str, changes: dict[str, Any]
    ) -> AssessmentInstance | None:
        unknown = [key for key in changes if key not in _UPDATABLE_COLUMNS]
        if unknown:
            raise ValueError(f"Column {unknown[0]!r} cannot be updated")

        async with self._session("update_instance") as session:
            model = await session.get(AssessmentInstanceModel, instance_id)
            if model is None:
                logger.warning(f"Instance {instance_id} not found for update")
                return None
            for key, value in changes.items():
                if hasattr(value, "value"):
                    value = value.value
                setattr(model, _UPDATABLE_COLUMNS[key], value)
            await session.commit()
            await session.refresh(model)
            updated = map_instance_model_to_entity(model)

        await self._publish(ChangeType.UPDATE, updated.therapist_id, updated.id)
        return updated

    async def delete_instance(self, instance_id: str) -> bool:
        async with self._session("delete_instance") as session:
            model = await session.get(AssessmentInstanceModel, instance_id)
            if model is None:
                logger.warning(f"Instance {instance_id} not found for deletion")
                return False
            therapist_id = model.therapist_id
            await session.delete(model)
            await session.commit()

        await self._publish(ChangeType.DELETE, therapist_id, instance_id)
        return True

    # ------------------------------------------------------------------
    # Latest-score projection
    # ------------------------------------------------------------------

    async def fetch_latest_score(self, instance_id: str) -> AssessmentScore | None:
        stmt = (
            select(AssessmentScoreModel)
            .where(AssessmentScoreModel.instance_id == instance_id)
            .order_by(AssessmentScoreModel.calculated_at.desc())
            .limit(1)
        )
        async with self._session("fetch_latest_score") as session:
            model = (await session.execute(stmt)).scalars().first()
            return map_score_model_to_entity(model) if model else None

    async def list_instance_summaries(
        self,
        therapist_id: str | None = None,
        client_id: str | None = None,
        status: InstanceStatus | None = None,
    ) -> list[InstanceSummary]:
        latest = (
            select(
                AssessmentScoreModel.instance_id,
                func.max(AssessmentScoreModel.calculated_at).label("latest_at"),
            )
            .group_by(AssessmentScoreModel.instance_id)
            .subquery()
        )
        stmt = (
            select(
                AssessmentInstanceModel,
                AssessmentTemplateModel.name,
                AssessmentTemplateModel.abbreviation,
                AssessmentScoreModel,
            )
            .outerjoin(
                AssessmentTemplateModel,
                AssessmentTemplateModel.id == AssessmentInstanceModel.template_id,
            )
            .outerjoin(latest, latest.c.instance_id == AssessmentInstanceModel.id)
            .outerjoin(
                AssessmentScoreModel,
                and_(
                    AssessmentScoreModel.instance_id == latest.c.instance_id,
                    AssessmentScoreModel.calculated_at == latest.c.latest_at,
                ),
            )
            .order_by(AssessmentInstanceModel.assigned_at.desc())
        )
        if therapist_id:
            stmt = stmt.where(AssessmentInstanceModel.therapist_id == therapist_id)
        if client_id:
            stmt = stmt.where(AssessmentInstanceModel.client_id == client_id)
        if status:
            stmt = stmt.where(AssessmentInstanceModel.status == InstanceStatus(status).value)

        summaries: dict[str, InstanceSummary] = {}
        async with self._session("list_instance_summaries") as session:
            result = await session.execute(stmt)
            for instance, name, abbreviation, score in result.all():
                # Two scores sharing the latest timestamp yield two rows; keep the first
                if instance.id in summaries:
                    continue
                summaries[instance.id] = InstanceSummary(
                    instance_id=instance.id,
                    template_id=instance.template_id,
                    therapist_id=instance.therapist_id,
                    client_id=instance.client_id,
                    title=instance.title,
                    status=InstanceStatus(instance.status),
                    assigned_at=ensure_utc(instance.assigned_at),
                    due_date=ensure_utc(instance.due_date),
                    completed_at=ensure_utc(instance.completed_at),
                    template_name=name or "Unknown template",
                    template_abbreviation=abbreviation,
                    score=map_score_model_to_entity(score) if score else None,
                )
        return list(summaries.values())
