"""Repository and channel interfaces."""

from practiceboard.domain.repositories.assessment_store import IAssessmentStore
from practiceboard.domain.repositories.change_feed import (
    ChangeCallback,
    ChangeEvent,
    ChangeType,
    IChangeFeed,
    IChangeSubscription,
    therapist_channel,
)

__all__ = [
    "ChangeCallback",
    "ChangeEvent",
    "ChangeType",
    "IAssessmentStore",
    "IChangeFeed",
    "IChangeSubscription",
    "therapist_channel",
]
