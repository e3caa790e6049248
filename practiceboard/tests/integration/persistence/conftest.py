"""
Fixtures for SQLAlchemy store tests against a temporary SQLite database.
"""

from datetime import timedelta

import pytest_asyncio

from practiceboard.infrastructure.persistence.sqlalchemy.database import (
    create_session_factory,
    init_schema,
)
from practiceboard.infrastructure.persistence.sqlalchemy.models import (
    AssessmentInstanceModel,
    AssessmentTemplateModel,
    ProfileModel,
)
from practiceboard.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyAssessmentStore,
)
from practiceboard.tests.helpers import OTHER_THERAPIST_ID, THERAPIST_ID


def template_model(template) -> AssessmentTemplateModel:
    data = template.to_dict()
    return AssessmentTemplateModel(
        id=data["id"],
        name=data["name"],
        abbreviation=data["abbreviation"],
        category=data["category"],
        description=data["description"],
        version=data["version"],
        questions=data["questions"],
        scoring_config=data["scoring_config"],
        interpretation_rules=data["interpretation_rules"],
        clinical_cutoffs=data["clinical_cutoffs"],
        instructions=data["instructions"],
        estimated_duration_minutes=data["estimated_duration_minutes"],
        is_active=data["is_active"],
    )


@pytest_asyncio.fixture
async def db(tmp_path):
    engine, session_factory = create_session_factory(
        f"sqlite+aiosqlite:///{tmp_path / 'assessments.db'}"
    )
    await init_schema(engine)
    yield engine, session_factory
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db, phq9_template, gad7_template, inactive_template, clients, clock):
    _, factory = db
    async with factory() as session:
        session.add_all(
            [template_model(t) for t in (phq9_template, gad7_template, inactive_template)]
        )
        session.add_all(
            [
                ProfileModel(id=c.id, first_name=c.first_name, last_name=c.last_name, email=c.email)
                for c in clients
            ]
        )
        base = clock.now - timedelta(days=10)
        session.add_all(
            [
                AssessmentInstanceModel(
                    id="inst_1", template_id="tpl_1", therapist_id=THERAPIST_ID,
                    client_id="c1", title="PHQ-9", assigned_at=base,
                ),
                AssessmentInstanceModel(
                    id="inst_2", template_id="tpl_2", therapist_id=THERAPIST_ID,
                    client_id="c2", title="GAD-7", assigned_at=base + timedelta(days=1),
                    status="in_progress", started_at=base + timedelta(days=2),
                ),
                AssessmentInstanceModel(
                    id="inst_3", template_id="tpl_deleted", therapist_id=THERAPIST_ID,
                    client_id="c_deleted", title="Retired", assigned_at=base + timedelta(days=2),
                ),
                AssessmentInstanceModel(
                    id="inst_4", template_id="tpl_1", therapist_id=OTHER_THERAPIST_ID,
                    client_id="c3", title="PHQ-9", assigned_at=base + timedelta(days=3),
                ),
            ]
        )
        await session.commit()
    return factory


@pytest_asyncio.fixture
async def sql_store(session_factory, feed):
    return SQLAlchemyAssessmentStore(session_factory, change_feed=feed)
