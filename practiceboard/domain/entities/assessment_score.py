"""
Assessment score entities.

Scores are produced by an external scoring process. Many scores may exist
per instance over time; the current one is the most recently calculated.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from practiceboard.domain.entities.assessment_instance import InstanceStatus


@dataclass(frozen=True)
class AssessmentScore:
    """Computed result for one instance at one point in time."""

    id: str
    instance_id: str
    raw_score: float
    calculated_at: datetime
    scaled_score: float | None = None
    percentile: float | None = None
    t_score: float | None = None
    z_score: float | None = None
    interpretation_category: str | None = None
    interpretation_description: str | None = None
    clinical_significance: str | None = None
    severity_level: str | None = None
    recommendations: str | None = None


def select_latest_score(scores: Iterable[AssessmentScore]) -> AssessmentScore | None:
    """Return the score with the greatest ``calculated_at``, or None."""
    return max(scores, key=lambda score: score.calculated_at, default=None)


@dataclass(frozen=True)
class InstanceSummary:
    """
    One row of the latest-score projection.

    Instance identity and dates joined with the template name and the
    instance's current score, if any. Score fields are None until the
    external scoring process has produced a result.
    """

    instance_id: str
    template_id: str
    therapist_id: str
    client_id: str
    title: str | None
    status: InstanceStatus
    assigned_at: datetime | None
    due_date: datetime | None
    completed_at: datetime | None
    template_name: str
    template_abbreviation: str | None = None
    score: AssessmentScore | None = None

    @property
    def has_score(self) -> bool:
        return self.score is not None
