"""
Exception classes for the assessment engine.

Every store failure is converted into one of these at the application
boundary. Each carries a stable ``kind``, whether retrying the triggering
action can help, and a message suitable for display.
"""

from enum import Enum

from practiceboard.domain.exceptions.base_exceptions import (
    BaseApplicationError,
    ConfigurationError,
    ValidationError,
)


class AssessmentErrorKind(str, Enum):
    CATALOG_UNAVAILABLE = "catalog_unavailable"
    CONFIGURATION = "configuration"
    FETCH_FAILED = "fetch_failed"
    TEMPLATE_NOT_FOUND = "template_not_found"
    NOT_FOUND = "not_found"
    ASSIGNMENT_FAILED = "assignment_failed"
    INVALID_TRANSITION = "invalid_transition"
    INVALID_REQUEST = "invalid_request"


class AssessmentError(BaseApplicationError):
    """Base class for assessment engine errors."""

    kind: AssessmentErrorKind = AssessmentErrorKind.FETCH_FAILED
    retryable: bool = False
    default_message: str = "Assessment operation failed."

    def __init__(self, message: str | None = None, user_message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.user_message = user_message or self.default_message

    def to_dict(self) -> dict:
        return {
            "error": self.kind.value,
            "message": self.user_message,
            "retryable": self.retryable,
        }


class CatalogUnavailableError(AssessmentError):
    """Template listing failed; callers degrade to an empty catalog."""

    kind = AssessmentErrorKind.CATALOG_UNAVAILABLE
    retryable = True
    default_message = "Failed to load assessment templates."


class AssessmentConfigurationError(AssessmentError, ConfigurationError):
    """Backend authorization policy evaluation failed (recursive policy)."""

    kind = AssessmentErrorKind.CONFIGURATION
    retryable = False
    default_message = (
        "Assessment data is unavailable because of a server configuration problem. "
        "Please contact support."
    )


class FetchFailedError(AssessmentError):
    kind = AssessmentErrorKind.FETCH_FAILED
    retryable = True
    default_message = "Failed to load assessment instances. Please try again."


class TemplateNotFoundError(AssessmentError):
    kind = AssessmentErrorKind.TEMPLATE_NOT_FOUND
    default_message = "Template not found."

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template {template_id} is not a loaded active template")
        self.template_id = template_id


class InstanceNotFoundError(AssessmentError):
    kind = AssessmentErrorKind.NOT_FOUND
    default_message = "Assessment not found."

    def __init__(self, instance_id: str) -> None:
        super().__init__(f"Assessment instance {instance_id} not found")
        self.instance_id = instance_id


class AssignmentFailedError(AssessmentError):
    """The batch insert failed; no instance of the batch is assumed created."""

    kind = AssessmentErrorKind.ASSIGNMENT_FAILED
    retryable = True
    default_message = "Failed to assign assessment."

    def __init__(self, message: str) -> None:
        super().__init__(message, user_message=f"Failed to assign assessment: {message}")


class InvalidStatusTransitionError(AssessmentError):
    kind = AssessmentErrorKind.INVALID_TRANSITION
    default_message = "This status change is not allowed."

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            f"Cannot move assessment from '{current}' to '{requested}'",
            user_message=f"Cannot change an assessment from {current} to {requested}.",
        )
        self.current = current
        self.requested = requested


class InvalidAssignmentError(AssessmentError, ValidationError):
    kind = AssessmentErrorKind.INVALID_REQUEST
    default_message = "Invalid assignment request."

    def __init__(self, message: str) -> None:
        super().__init__(message, user_message=message)
