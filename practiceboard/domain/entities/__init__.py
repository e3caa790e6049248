"""
Domain entities for the assessment engine.
"""

from practiceboard.domain.entities.assessment_instance import (
    TERMINAL_STATUSES,
    AssessmentInstance,
    InstanceStatus,
    NewAssessmentInstance,
    ReminderFrequency,
)
from practiceboard.domain.entities.assessment_score import (
    AssessmentScore,
    InstanceSummary,
    select_latest_score,
)
from practiceboard.domain.entities.assessment_template import (
    AssessmentCategory,
    AssessmentTemplate,
    EvidenceLevel,
    InterpretationRange,
    ScoringConfig,
    ScoringMethod,
)
from practiceboard.domain.entities.client import ClientSummary

__all__ = [
    "TERMINAL_STATUSES",
    "AssessmentCategory",
    "AssessmentInstance",
    "AssessmentScore",
    "AssessmentTemplate",
    "ClientSummary",
    "EvidenceLevel",
    "InstanceStatus",
    "InstanceSummary",
    "InterpretationRange",
    "NewAssessmentInstance",
    "ReminderFrequency",
    "ScoringConfig",
    "ScoringMethod",
    "select_latest_score",
]
