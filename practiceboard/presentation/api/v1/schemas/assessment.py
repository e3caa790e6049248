"""
API schemas for assessment endpoints.

Pydantic models for request and response serialization. Responses are built
from domain entities with ``from_attributes``.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from practiceboard.domain.entities import (
    AssessmentCategory,
    AssessmentInstance,
    EvidenceLevel,
    InstanceStatus,
    InstanceSummary,
    ReminderFrequency,
    ScoringMethod,
)
from practiceboard.domain.exceptions import AssessmentError

UNKNOWN_TEMPLATE = "Unknown template"
UNKNOWN_CLIENT = "Unknown client"


class ApiModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ======== Errors ========


class ErrorRead(ApiModel):
    error: str = Field(..., description="Stable error kind")
    message: str = Field(..., description="Message suitable for display")
    retryable: bool = Field(False, description="Whether retrying the action can help")

    @classmethod
    def from_error(cls, error: AssessmentError) -> "ErrorRead":
        return cls(**error.to_dict())


# ======== Templates ========


class ScoringConfigRead(ApiModel):
    method: ScoringMethod
    max_score: float
    min_score: float


class InterpretationRangeRead(ApiModel):
    min: float
    max: float
    label: str
    description: str = ""
    severity: str | None = None


class TemplateRead(ApiModel):
    id: str
    name: str
    abbreviation: str = ""
    category: AssessmentCategory
    description: str = ""
    version: str
    questions: list[dict[str, Any]] = Field(default_factory=list)
    scoring_config: ScoringConfigRead
    interpretation_rules: list[InterpretationRangeRead] = Field(default_factory=list)
    instructions: str | None = None
    estimated_duration_minutes: int | None = None
    evidence_level: EvidenceLevel | None = None


class TemplateListResponse(ApiModel):
    """Active templates; ``error`` is set when the catalog is degraded."""

    templates: list[TemplateRead]
    error: ErrorRead | None = None


class TemplateSummaryRead(ApiModel):
    id: str
    name: str
    abbreviation: str = ""
    category: AssessmentCategory


# ======== Instances ========


class ClientRead(ApiModel):
    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    display_name: str


class InstanceRead(ApiModel):
    id: str
    template_id: str
    therapist_id: str
    client_id: str
    case_id: str | None = None
    title: str
    instructions: str | None = None
    status: InstanceStatus
    effective_status: InstanceStatus = Field(
        ..., description="Status at response time; overdue instances read as expired"
    )
    is_overdue: bool
    reminder_frequency: ReminderFrequency
    assigned_at: datetime | None = None
    due_date: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    expires_at: datetime | None = None
    template: TemplateSummaryRead | None = None
    client: ClientRead | None = None
    template_name: str = Field(..., description="Template name or a placeholder")
    client_name: str = Field(..., description="Client display name or a placeholder")

    @classmethod
    def from_entity(cls, instance: AssessmentInstance, now: datetime) -> "InstanceRead":
        return cls(
            id=instance.id,
            template_id=instance.template_id,
            therapist_id=instance.therapist_id,
            client_id=instance.client_id,
            case_id=instance.case_id,
            title=instance.title,
            instructions=instance.instructions,
            status=instance.status,
            effective_status=instance.effective_status(now),
            is_overdue=instance.is_overdue(now),
            reminder_frequency=instance.reminder_frequency,
            assigned_at=instance.assigned_at,
            due_date=instance.due_date,
            started_at=instance.started_at,
            completed_at=instance.completed_at,
            expires_at=instance.expires_at,
            template=(
                TemplateSummaryRead.model_validate(instance.template) if instance.template else None
            ),
            client=ClientRead.model_validate(instance.client) if instance.client else None,
            template_name=instance.template.name if instance.template else UNKNOWN_TEMPLATE,
            client_name=instance.client.display_name if instance.client else UNKNOWN_CLIENT,
        )


class AssignmentRequest(BaseModel):
    """Assign one template to one or more clients."""

    template_id: str = Field(..., description="Active template to assign")
    client_ids: list[str] = Field(..., description="Clients receiving one instance each")
    due_date: str | None = Field(None, description="ISO date or datetime")
    instructions: str | None = None
    reminder_frequency: ReminderFrequency = ReminderFrequency.NONE
    title_override: str | None = None
    case_id: str | None = None


class StatusUpdateRequest(BaseModel):
    status: str = Field(..., description="Target lifecycle status")


# ======== Scores and results ========


class ScoreRead(ApiModel):
    id: str
    instance_id: str
    raw_score: float
    scaled_score: float | None = None
    percentile: float | None = None
    t_score: float | None = None
    z_score: float | None = None
    interpretation_category: str | None = None
    interpretation_description: str | None = None
    clinical_significance: str | None = None
    severity_level: str | None = None
    recommendations: str | None = None
    calculated_at: datetime


class ResultRead(ApiModel):
    instance_id: str
    template_id: str
    therapist_id: str
    client_id: str
    title: str | None = None
    status: InstanceStatus
    assigned_at: datetime | None = None
    due_date: datetime | None = None
    completed_at: datetime | None = None
    template_name: str
    template_abbreviation: str | None = None
    score: ScoreRead | None = None

    @classmethod
    def from_summary(cls, summary: InstanceSummary) -> "ResultRead":
        return cls.model_validate(summary)
