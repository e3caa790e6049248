"""
Assessment mappers.

Translate between the SQLAlchemy models of the assessment store and the
domain entities. SQLite returns naive datetimes, so every timestamp passes
through ``ensure_utc``.
"""

from practiceboard.domain.entities import (
    AssessmentCategory,
    AssessmentInstance,
    AssessmentScore,
    AssessmentTemplate,
    ClientSummary,
    EvidenceLevel,
    InstanceStatus,
    NewAssessmentInstance,
    ReminderFrequency,
    ScoringConfig,
)
from practiceboard.domain.entities.assessment_template import parse_interpretation_ranges
from practiceboard.domain.utils.datetime_utils import ensure_utc
from practiceboard.infrastructure.persistence.sqlalchemy.models import (
    AssessmentInstanceModel,
    AssessmentScoreModel,
    AssessmentTemplateModel,
    ProfileModel,
)


def map_template_model_to_entity(model: AssessmentTemplateModel) -> AssessmentTemplate:
    try:
        evidence_level = EvidenceLevel(model.evidence_level) if model.evidence_level else None
    except ValueError:
        evidence_level = None
    return AssessmentTemplate(
        id=model.id,
        name=model.name,
        abbreviation=model.abbreviation or "",
        category=AssessmentCategory.parse(model.category),
        description=model.description or "",
        version=model.version,
        questions=tuple(model.questions or ()),
        scoring_config=ScoringConfig.from_dict(model.scoring_config),
        interpretation_rules=parse_interpretation_ranges(model.interpretation_rules),
        clinical_cutoffs=dict(model.clinical_cutoffs or {}),
        instructions=model.instructions,
        estimated_duration_minutes=model.estimated_duration_minutes,
        evidence_level=evidence_level,
        is_active=model.is_active,
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def map_profile_model_to_client(model: ProfileModel) -> ClientSummary:
    return ClientSummary(
        id=model.id,
        first_name=model.first_name,
        last_name=model.last_name,
        email=model.email,
    )


def map_instance_model_to_entity(
    model: AssessmentInstanceModel, with_relations: bool = False
) -> AssessmentInstance:
    """
    Map an instance row. Relations are only read when ``with_relations`` is
    set, i.e. when the query eagerly loaded them.
    """
    template = client = None
    if with_relations:
        template = map_template_model_to_entity(model.template) if model.template else None
        client = map_profile_model_to_client(model.client) if model.client else None
    return AssessmentInstance(
        id=model.id,
        template_id=model.template_id,
        therapist_id=model.therapist_id,
        client_id=model.client_id,
        case_id=model.case_id,
        title=model.title,
        instructions=model.instructions,
        status=InstanceStatus(model.status),
        reminder_frequency=ReminderFrequency(model.reminder_frequency),
        assigned_at=ensure_utc(model.assigned_at),
        due_date=ensure_utc(model.due_date),
        started_at=ensure_utc(model.started_at),
        completed_at=ensure_utc(model.completed_at),
        expires_at=ensure_utc(model.expires_at),
        metadata=dict(model.metadata_ or {}),
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
        template=template,
        client=client,
    )


def map_draft_to_model(draft: NewAssessmentInstance) -> AssessmentInstanceModel:
    return AssessmentInstanceModel(
        template_id=draft.template_id,
        therapist_id=draft.therapist_id,
        client_id=draft.client_id,
        case_id=draft.case_id,
        title=draft.title,
        instructions=draft.instructions,
        status=draft.status.value,
        reminder_frequency=draft.reminder_frequency.value,
        due_date=draft.due_date,
        metadata_=dict(draft.metadata),
    )


def map_score_model_to_entity(model: AssessmentScoreModel) -> AssessmentScore:
    return AssessmentScore(
        id=model.id,
        instance_id=model.instance_id,
        raw_score=model.raw_score,
        scaled_score=model.scaled_score,
        percentile=model.percentile,
        t_score=model.t_score,
        z_score=model.z_score,
        interpretation_category=model.interpretation_category,
        interpretation_description=model.interpretation_description,
        clinical_significance=model.clinical_significance,
        severity_level=model.severity_level,
        recommendations=model.recommendations,
        calculated_at=ensure_utc(model.calculated_at),
    )
