from practiceboard.infrastructure.repositories.memory.assessment_store import (
    InMemoryAssessmentStore,
)

__all__ = ["InMemoryAssessmentStore"]
