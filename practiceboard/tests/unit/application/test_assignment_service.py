"""
Tests for bulk assignment of templates to clients.
"""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from practiceboard.application.services import (
    AssessmentAssignmentService,
    AssignmentOptions,
    TemplateCatalogService,
)
from practiceboard.domain.entities import InstanceStatus, ReminderFrequency
from practiceboard.domain.exceptions import (
    AssessmentConfigurationError,
    AssignmentFailedError,
    InvalidAssignmentError,
    StoreError,
    StoreErrorKind,
    TemplateNotFoundError,
)
from practiceboard.domain.repositories import ChangeType
from practiceboard.domain.utils.datetime_utils import UTC
from practiceboard.tests.helpers import THERAPIST_ID


@pytest.fixture
def refresh():
    return AsyncMock()


@pytest_asyncio.fixture
async def service(store, refresh):
    catalog = TemplateCatalogService(store)
    await catalog.list_active_templates()
    return AssessmentAssignmentService(store, catalog, refresh)


class TestBuildDrafts:
    @pytest.mark.asyncio
    async def test_one_draft_per_distinct_client(self, service):
        drafts = service.build_drafts(THERAPIST_ID, "tpl_1", ["c1", "c2", "c1", ""])

        assert [d.client_id for d in drafts] == ["c1", "c2"]

    @pytest.mark.asyncio
    async def test_defaults_come_from_template(self, service, phq9_template):
        (draft,) = service.build_drafts(THERAPIST_ID, "tpl_1", ["c1"])

        assert draft.title == "PHQ-9 (Patient Health Questionnaire)"
        assert draft.instructions == phq9_template.instructions
        assert draft.reminder_frequency is ReminderFrequency.NONE
        assert draft.status is InstanceStatus.ASSIGNED
        assert draft.due_date is None

    @pytest.mark.asyncio
    async def test_options_override_template(self, service):
        options = AssignmentOptions(
            due_date="2025-02-01",
            instructions="Complete before session",
            reminder_frequency="weekly",
            title_override="Intake PHQ-9",
            case_id="case_9",
        )

        (draft,) = service.build_drafts(THERAPIST_ID, "tpl_1", ["c1"], options)

        assert draft.title == "Intake PHQ-9"
        assert draft.instructions == "Complete before session"
        assert draft.reminder_frequency is ReminderFrequency.WEEKLY
        assert draft.due_date == datetime(2025, 2, 1, tzinfo=UTC)
        assert draft.case_id == "case_9"

    @pytest.mark.asyncio
    async def test_template_without_instructions_leaves_none(self, service):
        (draft,) = service.build_drafts(THERAPIST_ID, "tpl_2", ["c1"])

        assert draft.instructions is None

    @pytest.mark.asyncio
    async def test_blank_due_date_means_no_due_date(self, service):
        (draft,) = service.build_drafts(
            THERAPIST_ID, "tpl_1", ["c1"], AssignmentOptions(due_date="  ")
        )

        assert draft.due_date is None

    @pytest.mark.asyncio
    async def test_empty_client_list_rejected(self, service):
        with pytest.raises(InvalidAssignmentError):
            service.build_drafts(THERAPIST_ID, "tpl_1", [])

    @pytest.mark.asyncio
    async def test_bad_due_date_rejected(self, service):
        with pytest.raises(InvalidAssignmentError):
            service.build_drafts(
                THERAPIST_ID, "tpl_1", ["c1"], AssignmentOptions(due_date="soon")
            )

    @pytest.mark.asyncio
    async def test_bad_reminder_frequency_rejected(self, service):
        with pytest.raises(InvalidAssignmentError):
            service.build_drafts(
                THERAPIST_ID, "tpl_1", ["c1"], AssignmentOptions(reminder_frequency="hourly")
            )

    @pytest.mark.asyncio
    async def test_inactive_template_rejected(self, service):
        with pytest.raises(TemplateNotFoundError):
            service.build_drafts(THERAPIST_ID, "tpl_old", ["c1"])


class TestAssignTemplate:
    @pytest.mark.asyncio
    async def test_phq9_assigned_to_two_clients(self, service, store, feed, refresh, clock):
        created = await service.assign_template(
            THERAPIST_ID, "tpl_1", ["c1", "c2"], AssignmentOptions(due_date="2025-01-15")
        )

        assert len(created) == 2
        assert {i.client_id for i in created} == {"c1", "c2"}
        for instance in created:
            assert instance.status is InstanceStatus.ASSIGNED
            assert instance.title == "PHQ-9 (Patient Health Questionnaire)"
            assert instance.therapist_id == THERAPIST_ID
            assert instance.assigned_at == clock.now
            assert instance.due_date == datetime(2025, 1, 15, tzinfo=UTC)
        assert set(store.instances) == {i.id for i in created}
        refresh.assert_awaited_once_with(THERAPIST_ID)
        assert [e.change_type for e in feed.published] == [ChangeType.INSERT, ChangeType.INSERT]

    @pytest.mark.asyncio
    async def test_store_failure_creates_nothing(self, service, store, refresh):
        store.fail_on("insert_instances", StoreError("duplicate key", kind=StoreErrorKind.CONSTRAINT))

        with pytest.raises(AssignmentFailedError) as exc_info:
            await service.assign_template(THERAPIST_ID, "tpl_1", ["c1", "c2"])

        assert exc_info.value.user_message.startswith("Failed to assign assessment:")
        assert store.instances == {}
        refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recursion_is_configuration_error(self, service, store):
        store.fail_on(
            "insert_instances",
            StoreError("infinite recursion detected", kind=StoreErrorKind.RECURSION),
        )

        with pytest.raises(AssessmentConfigurationError):
            await service.assign_template(THERAPIST_ID, "tpl_1", ["c1"])

    @pytest.mark.asyncio
    async def test_validation_happens_before_insert(self, service, store):
        with pytest.raises(InvalidAssignmentError):
            await service.assign_template(THERAPIST_ID, "tpl_1", [])

        assert "insert_instances" not in store.calls
