"""
Assessment instance lifecycle rules.

Pure functions over ``InstanceStatus``: which transitions are allowed and
which timestamp columns a transition writes. Persistence is handled by the
lifecycle controller in the application layer.
"""

from datetime import datetime
from typing import Any

from practiceboard.domain.entities import AssessmentInstance, InstanceStatus
from practiceboard.domain.exceptions import InvalidStatusTransitionError

ALLOWED_TRANSITIONS: dict[InstanceStatus, frozenset[InstanceStatus]] = {
    InstanceStatus.ASSIGNED: frozenset(
        {
            InstanceStatus.IN_PROGRESS,
            InstanceStatus.COMPLETED,
            InstanceStatus.CANCELLED,
            InstanceStatus.EXPIRED,
        }
    ),
    InstanceStatus.IN_PROGRESS: frozenset(
        {
            InstanceStatus.COMPLETED,
            InstanceStatus.CANCELLED,
            InstanceStatus.EXPIRED,
        }
    ),
    # Terminal
    InstanceStatus.COMPLETED: frozenset(),
    InstanceStatus.CANCELLED: frozenset(),
    InstanceStatus.EXPIRED: frozenset(),
}


def can_transition(current: InstanceStatus, requested: InstanceStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS[current]


def plan_transition(
    instance: AssessmentInstance,
    requested: InstanceStatus | str,
    now: datetime,
) -> dict[str, Any]:
    """
    Return the column changes for moving ``instance`` to ``requested``.

    Raises:
        InvalidStatusTransitionError: if the transition is not allowed,
            including any transition out of a terminal state.
    """
    try:
        requested = InstanceStatus(requested)
    except ValueError:
        raise InvalidStatusTransitionError(instance.status.value, str(requested)) from None
    if not can_transition(instance.status, requested):
        raise InvalidStatusTransitionError(instance.status.value, requested.value)

    changes: dict[str, Any] = {"status": requested}
    if requested is InstanceStatus.IN_PROGRESS:
        changes["started_at"] = now
    elif requested is InstanceStatus.COMPLETED:
        changes["completed_at"] = now
    return changes
