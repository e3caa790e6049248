"""
Exception classes for the application domain.

This module exports common exceptions used throughout the application.
"""

from practiceboard.domain.exceptions.assessment_exceptions import (
    AssessmentConfigurationError,
    AssessmentError,
    AssessmentErrorKind,
    AssignmentFailedError,
    CatalogUnavailableError,
    FetchFailedError,
    InstanceNotFoundError,
    InvalidAssignmentError,
    InvalidStatusTransitionError,
    TemplateNotFoundError,
)
from practiceboard.domain.exceptions.base_exceptions import (
    BaseApplicationError,
    ConfigurationError,
    ValidationError,
)
from practiceboard.domain.exceptions.persistence_exceptions import (
    PersistenceError,
    StoreError,
    StoreErrorKind,
)

__all__ = [
    "AssessmentConfigurationError",
    "AssessmentError",
    "AssessmentErrorKind",
    "AssignmentFailedError",
    "BaseApplicationError",
    "CatalogUnavailableError",
    "ConfigurationError",
    "FetchFailedError",
    "InstanceNotFoundError",
    "InvalidAssignmentError",
    "InvalidStatusTransitionError",
    "PersistenceError",
    "StoreError",
    "StoreErrorKind",
    "TemplateNotFoundError",
    "ValidationError",
]
