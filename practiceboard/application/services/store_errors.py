"""
Conversion of classified store failures into assessment errors.
"""

import logging

from practiceboard.domain.exceptions import (
    AssessmentConfigurationError,
    AssessmentError,
    FetchFailedError,
    StoreError,
)

logger = logging.getLogger(__name__)


def to_assessment_error(
    error: StoreError | TimeoutError,
    fallback: type[AssessmentError] = FetchFailedError,
    user_message: str | None = None,
) -> AssessmentError:
    """
    Map a store failure to the stable error taxonomy.

    Policy recursion always becomes ``AssessmentConfigurationError``; anything
    else becomes ``fallback``.
    """
    if isinstance(error, StoreError) and error.is_recursion:
        return AssessmentConfigurationError(str(error))
    if isinstance(error, TimeoutError):
        return fallback("Store call timed out", user_message=user_message)
    return fallback(str(error), user_message=user_message)
