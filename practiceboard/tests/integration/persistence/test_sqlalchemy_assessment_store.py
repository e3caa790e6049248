"""
Integration tests for the SQLAlchemy assessment store on aiosqlite.
"""

from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError, OperationalError

from practiceboard.application.services import compose_instances
from practiceboard.domain.entities import InstanceStatus, NewAssessmentInstance
from practiceboard.domain.exceptions import StoreError, StoreErrorKind
from practiceboard.domain.repositories import ChangeType
from practiceboard.domain.utils.datetime_utils import UTC
from practiceboard.infrastructure.persistence.sqlalchemy.database import create_session_factory
from practiceboard.infrastructure.persistence.sqlalchemy.models import (
    AssessmentInstanceModel,
    AssessmentScoreModel,
)
from practiceboard.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyAssessmentStore,
)
from practiceboard.infrastructure.persistence.sqlalchemy.repositories.assessment_store import (
    classify_store_error,
)
from practiceboard.tests.helpers import THERAPIST_ID


class TestTemplates:
    @pytest.mark.asyncio
    async def test_active_templates_by_name(self, sql_store, phq9_template):
        templates = await sql_store.list_active_templates()

        assert [t.id for t in templates] == ["tpl_2", "tpl_1"]
        phq9 = templates[1]
        assert phq9.interpretation_rules == phq9_template.interpretation_rules
        assert phq9.scoring_config == phq9_template.scoring_config
        assert phq9.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_lookups_by_ids(self, sql_store):
        templates = await sql_store.fetch_templates_by_ids(["tpl_1", "tpl_deleted"])
        clients = await sql_store.fetch_clients_by_ids(["c1", "c2", "c_deleted"])

        assert [t.id for t in templates] == ["tpl_1"]
        assert sorted(c.id for c in clients) == ["c1", "c2"]
        assert await sql_store.fetch_clients_by_ids([]) == []


class TestInstances:
    @pytest.mark.asyncio
    async def test_joined_fetch_newest_first_with_relations(self, sql_store):
        instances = await sql_store.fetch_instances_with_relations(THERAPIST_ID)

        assert [i.id for i in instances] == ["inst_3", "inst_2", "inst_1"]
        assert instances[0].template is None
        assert instances[0].client is None
        assert instances[1].template.name == "GAD-7 (Generalized Anxiety Disorder)"
        assert instances[2].client.display_name == "Jane Doe"
        assert instances[1].status is InstanceStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_multi_fetch_composition_matches_joined_fetch(self, sql_store):
        joined = await sql_store.fetch_instances_with_relations(THERAPIST_ID)

        rows = await sql_store.fetch_instances(THERAPIST_ID)
        templates = await sql_store.fetch_templates_by_ids({r.template_id for r in rows})
        clients = await sql_store.fetch_clients_by_ids({r.client_id for r in rows})
        composed = compose_instances(
            rows, {t.id: t for t in templates}, {c.id: c for c in clients}
        )

        assert composed == joined

    @pytest.mark.asyncio
    async def test_timestamps_come_back_as_utc(self, sql_store, clock):
        instance = await sql_store.get_instance("inst_1")

        assert instance.assigned_at == clock.now - timedelta(days=10)
        assert instance.assigned_at.tzinfo == UTC

    @pytest.mark.asyncio
    async def test_insert_batch_publishes_events(self, sql_store, feed):
        drafts = [
            NewAssessmentInstance(
                template_id="tpl_1", therapist_id=THERAPIST_ID, client_id=client_id,
                title="PHQ-9 (Patient Health Questionnaire)",
            )
            for client_id in ("c1", "c2")
        ]

        created = await sql_store.insert_instances(drafts)

        assert len({i.id for i in created}) == 2
        assert all(i.assigned_at is not None for i in created)
        assert all(i.reminder_frequency.value == "none" for i in created)
        assert [e.change_type for e in feed.published] == [ChangeType.INSERT] * 2
        assert len(await sql_store.fetch_instances(THERAPIST_ID)) == 5

    @pytest.mark.asyncio
    async def test_update_writes_status_and_timestamp(self, sql_store, feed, clock):
        updated = await sql_store.update_instance(
            "inst_2", {"status": InstanceStatus.COMPLETED, "completed_at": clock.now}
        )

        assert updated.status is InstanceStatus.COMPLETED
        assert updated.completed_at == clock.now
        assert (await sql_store.get_instance("inst_2")).status is InstanceStatus.COMPLETED
        assert feed.published[-1].change_type is ChangeType.UPDATE

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, sql_store):
        assert await sql_store.update_instance("missing", {"status": "completed"}) is None

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_column(self, sql_store):
        with pytest.raises(ValueError):
            await sql_store.update_instance("inst_1", {"therapist_id": "someone_else"})

    @pytest.mark.asyncio
    async def test_delete(self, sql_store, feed):
        assert await sql_store.delete_instance("inst_1") is True
        assert await sql_store.delete_instance("inst_1") is False
        assert await sql_store.get_instance("inst_1") is None
        assert [e.change_type for e in feed.published] == [ChangeType.DELETE]


class TestScores:
    @pytest_asyncio.fixture
    async def scored(self, session_factory, clock):
        async with session_factory() as session:
            session.add_all(
                [
                    AssessmentScoreModel(
                        id=f"s{days}", instance_id="inst_1", raw_score=raw,
                        interpretation_category=label,
                        calculated_at=clock.now - timedelta(days=days),
                    )
                    for days, raw, label in ((3, 12, "Moderate"), (1, 6, "Mild"), (2, 9, "Mild"))
                ]
            )
            await session.commit()

    @pytest.mark.asyncio
    async def test_latest_score(self, sql_store, scored, clock):
        score = await sql_store.fetch_latest_score("inst_1")

        assert score.id == "s1"
        assert score.raw_score == 6
        assert score.calculated_at == clock.now - timedelta(days=1)

    @pytest.mark.asyncio
    async def test_no_score(self, sql_store, scored):
        assert await sql_store.fetch_latest_score("inst_2") is None

    @pytest.mark.asyncio
    async def test_summaries_carry_latest_score(self, sql_store, scored):
        summaries = await sql_store.list_instance_summaries(therapist_id=THERAPIST_ID)

        assert [s.instance_id for s in summaries] == ["inst_3", "inst_2", "inst_1"]
        by_id = {s.instance_id: s for s in summaries}
        assert by_id["inst_1"].score.id == "s1"
        assert by_id["inst_1"].template_name == "PHQ-9 (Patient Health Questionnaire)"
        assert by_id["inst_2"].score is None
        assert by_id["inst_3"].template_name == "Unknown template"

    @pytest.mark.asyncio
    async def test_summary_filters(self, sql_store, scored):
        in_progress = await sql_store.list_instance_summaries(
            therapist_id=THERAPIST_ID, status=InstanceStatus.IN_PROGRESS
        )
        for_client = await sql_store.list_instance_summaries(client_id="c3")

        assert [s.instance_id for s in in_progress] == ["inst_2"]
        assert [s.instance_id for s in for_client] == ["inst_4"]


class TestErrorClassification:
    def test_recursion_marker(self):
        error = OperationalError(
            "SELECT 1", {}, Exception('infinite recursion detected in policy for relation "profiles"')
        )

        assert classify_store_error(error) is StoreErrorKind.RECURSION

    def test_integrity_error(self):
        error = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        assert classify_store_error(error) is StoreErrorKind.CONSTRAINT

    def test_other_errors_are_transient(self):
        error = OperationalError("SELECT 1", {}, Exception("database is locked"))

        assert classify_store_error(error) is StoreErrorKind.TRANSIENT

    @pytest.mark.asyncio
    async def test_database_failure_raises_store_error(self, tmp_path):
        engine, factory = create_session_factory(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        store = SQLAlchemyAssessmentStore(factory)
        try:
            with pytest.raises(StoreError) as exc_info:
                await store.list_active_templates()
        finally:
            await engine.dispose()

        assert exc_info.value.kind is StoreErrorKind.TRANSIENT
        assert exc_info.value.operation == "list_active_templates"
        assert "no such table" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_configured_markers_drive_recursion(self, tmp_path):
        engine, factory = create_session_factory(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        store = SQLAlchemyAssessmentStore(factory, recursion_markers=["no such table"])
        try:
            with pytest.raises(StoreError) as exc_info:
                await store.fetch_instances(THERAPIST_ID)
        finally:
            await engine.dispose()

        assert exc_info.value.is_recursion

    @pytest.mark.asyncio
    async def test_unreadable_row_raises_store_error(self, sql_store, session_factory):
        async with session_factory() as session:
            instance = await session.get(AssessmentInstanceModel, "inst_1")
            instance.status = "archived"
            await session.commit()

        with pytest.raises(StoreError) as exc_info:
            await sql_store.fetch_instances(THERAPIST_ID)

        assert exc_info.value.kind is StoreErrorKind.TRANSIENT
        assert exc_info.value.operation == "fetch_instances"
        assert isinstance(exc_info.value.original_exception, ValueError)
