"""
Assessment template entities.

A template is a reusable assessment definition (questions, scoring rules and
interpretation ranges). Templates are maintained by catalog administration
and are read-only to the assessment engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from practiceboard.domain.utils.datetime_utils import parse_datetime


class AssessmentCategory(str, Enum):
    """Clinical area an assessment belongs to."""

    ANXIETY = "anxiety"
    DEPRESSION = "depression"
    TRAUMA = "trauma"
    STRESS = "stress"
    WELLBEING = "wellbeing"
    PERSONALITY = "personality"
    SUBSTANCE = "substance"
    EATING = "eating"
    SLEEP = "sleep"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: "str | AssessmentCategory | None") -> "AssessmentCategory":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or cls.GENERAL.value).lower())
        except ValueError:
            return cls.GENERAL


class ScoringMethod(str, Enum):
    SUM = "sum"
    AVERAGE = "average"
    WEIGHTED_SUM = "weighted_sum"
    CUSTOM = "custom"


class EvidenceLevel(str, Enum):
    RESEARCH_BASED = "research_based"
    CLINICAL_CONSENSUS = "clinical_consensus"
    EXPERT_OPINION = "expert_opinion"


@dataclass(frozen=True)
class ScoringConfig:
    """How raw answers map to scores. Evaluated by the external scoring process."""

    method: ScoringMethod = ScoringMethod.SUM
    max_score: float = 0
    min_score: float = 0
    reverse_scored_items: tuple[str, ...] = ()
    weighted_items: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ScoringConfig":
        data = data or {}
        try:
            method = ScoringMethod(data.get("method", ScoringMethod.SUM.value))
        except ValueError:
            method = ScoringMethod.CUSTOM
        return cls(
            method=method,
            max_score=data.get("max_score", 0) or 0,
            min_score=data.get("min_score", 0) or 0,
            reverse_scored_items=tuple(data.get("reverse_scored_items") or ()),
            weighted_items=dict(data.get("weighted_items") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method.value,
            "max_score": self.max_score,
            "min_score": self.min_score,
            "reverse_scored_items": list(self.reverse_scored_items),
            "weighted_items": dict(self.weighted_items),
        }


@dataclass(frozen=True)
class InterpretationRange:
    """One band of an interpretation table, e.g. PHQ-9 10-14 "Moderate"."""

    min: float
    max: float
    label: str
    description: str = ""
    severity: str | None = None
    clinical_significance: str | None = None
    recommendations: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InterpretationRange":
        return cls(
            min=data["min"],
            max=data["max"],
            label=data.get("label", ""),
            description=data.get("description", ""),
            severity=data.get("severity"),
            clinical_significance=data.get("clinical_significance"),
            recommendations=data.get("recommendations"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "label": self.label,
            "description": self.description,
            "severity": self.severity,
            "clinical_significance": self.clinical_significance,
            "recommendations": self.recommendations,
        }


def parse_interpretation_ranges(rules: Any) -> tuple[InterpretationRange, ...]:
    # Stored either as {"ranges": [...]} or as a bare list of ranges
    if isinstance(rules, dict):
        rules = rules.get("ranges") or []
    return tuple(InterpretationRange.from_dict(r) for r in rules or [])


@dataclass(frozen=True)
class AssessmentTemplate:
    """Reusable assessment definition."""

    id: str
    name: str
    abbreviation: str = ""
    category: AssessmentCategory = AssessmentCategory.GENERAL
    description: str = ""
    version: str = "1.0"
    questions: tuple[dict[str, Any], ...] = ()
    scoring_config: ScoringConfig = field(default_factory=ScoringConfig)
    interpretation_rules: tuple[InterpretationRange, ...] = ()
    clinical_cutoffs: dict[str, Any] = field(default_factory=dict)
    instructions: str | None = None
    estimated_duration_minutes: int | None = None
    evidence_level: EvidenceLevel | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssessmentTemplate":
        """Create a template from a store row."""
        evidence = data.get("evidence_level")
        try:
            evidence_level = EvidenceLevel(evidence) if evidence else None
        except ValueError:
            evidence_level = None
        return cls(
            id=str(data["id"]),
            name=data["name"],
            abbreviation=data.get("abbreviation") or "",
            category=AssessmentCategory.parse(data.get("category")),
            description=data.get("description") or "",
            version=data.get("version") or "1.0",
            questions=tuple(data.get("questions") or ()),
            scoring_config=ScoringConfig.from_dict(data.get("scoring_config")),
            interpretation_rules=parse_interpretation_ranges(data.get("interpretation_rules")),
            clinical_cutoffs=dict(data.get("clinical_cutoffs") or {}),
            instructions=data.get("instructions"),
            estimated_duration_minutes=data.get("estimated_duration_minutes"),
            evidence_level=evidence_level,
            is_active=bool(data.get("is_active", True)),
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "abbreviation": self.abbreviation,
            "category": self.category.value,
            "description": self.description,
            "version": self.version,
            "questions": list(self.questions),
            "scoring_config": self.scoring_config.to_dict(),
            "interpretation_rules": {"ranges": [r.to_dict() for r in self.interpretation_rules]},
            "clinical_cutoffs": dict(self.clinical_cutoffs),
            "instructions": self.instructions,
            "estimated_duration_minutes": self.estimated_duration_minutes,
            "evidence_level": self.evidence_level.value if self.evidence_level else None,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
