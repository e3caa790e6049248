"""
Shared fixtures for the assessment engine test suite.

Provides a fixed clock, a small template catalog (PHQ-9, GAD-7), client
profiles, and an in-memory store wired to an in-process change feed.
"""

from datetime import datetime, timedelta

import pytest

from practiceboard.domain.entities import (
    AssessmentCategory,
    AssessmentInstance,
    AssessmentTemplate,
    ClientSummary,
    InstanceStatus,
    InterpretationRange,
    ScoringConfig,
)
from practiceboard.domain.utils.datetime_utils import UTC
from practiceboard.infrastructure.realtime import InMemoryChangeFeed
from practiceboard.infrastructure.repositories.memory import InMemoryAssessmentStore
from practiceboard.tests.helpers import THERAPIST_ID, FixedClock


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 15, 12, 0, tzinfo=UTC))


@pytest.fixture
def phq9_template() -> AssessmentTemplate:
    return AssessmentTemplate(
        id="tpl_1",
        name="PHQ-9 (Patient Health Questionnaire)",
        abbreviation="PHQ-9",
        category=AssessmentCategory.DEPRESSION,
        description="Nine-item depression screening questionnaire.",
        questions=tuple({"id": f"q{i}", "text": f"Question {i}"} for i in range(1, 10)),
        scoring_config=ScoringConfig(max_score=27),
        interpretation_rules=(
            InterpretationRange(min=0, max=4, label="Minimal"),
            InterpretationRange(min=5, max=9, label="Mild"),
            InterpretationRange(min=10, max=14, label="Moderate"),
            InterpretationRange(min=15, max=19, label="Moderately severe"),
            InterpretationRange(min=20, max=27, label="Severe"),
        ),
        instructions="Over the last 2 weeks, how often have you been bothered by the following?",
        estimated_duration_minutes=5,
    )


@pytest.fixture
def gad7_template() -> AssessmentTemplate:
    return AssessmentTemplate(
        id="tpl_2",
        name="GAD-7 (Generalized Anxiety Disorder)",
        abbreviation="GAD-7",
        category=AssessmentCategory.ANXIETY,
        scoring_config=ScoringConfig(max_score=21),
    )


@pytest.fixture
def inactive_template() -> AssessmentTemplate:
    return AssessmentTemplate(id="tpl_old", name="Retired Scale", is_active=False)


@pytest.fixture
def clients() -> list[ClientSummary]:
    return [
        ClientSummary(id="c1", first_name="Jane", last_name="Doe", email="jane@example.com"),
        ClientSummary(id="c2", first_name="John", last_name="Roe", email="john@example.com"),
        ClientSummary(id="c3", email="pat@example.com"),
    ]


@pytest.fixture
def feed() -> InMemoryChangeFeed:
    return InMemoryChangeFeed()


@pytest.fixture
def store(feed, clock, phq9_template, gad7_template, inactive_template, clients):
    store = InMemoryAssessmentStore(change_feed=feed, clock=clock)
    for template in (phq9_template, gad7_template, inactive_template):
        store.add_template(template)
    for client in clients:
        store.add_client(client)
    return store


@pytest.fixture
def make_instance(clock):
    """Factory for stored-looking instances; later calls are assigned later."""
    counter = {"n": 0}

    def _make(
        template_id: str = "tpl_1",
        client_id: str = "c1",
        therapist_id: str = THERAPIST_ID,
        status: InstanceStatus = InstanceStatus.ASSIGNED,
        **kwargs,
    ) -> AssessmentInstance:
        counter["n"] += 1
        kwargs.setdefault("id", f"inst_{counter['n']}")
        kwargs.setdefault("assigned_at", clock.now - timedelta(days=10) + timedelta(hours=counter["n"]))
        kwargs.setdefault("title", "Assessment")
        return AssessmentInstance(
            template_id=template_id,
            client_id=client_id,
            therapist_id=therapist_id,
            status=status,
            **kwargs,
        )

    return _make
