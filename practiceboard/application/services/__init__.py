"""
Application services for the assessment engine.
"""

from practiceboard.application.services.assessment_workspace import AssessmentWorkspace
from practiceboard.application.services.assignment_service import (
    AssessmentAssignmentService,
    AssignmentOptions,
)
from practiceboard.application.services.change_bridge import ChangeNotificationBridge
from practiceboard.application.services.instance_accessor import (
    InstanceStoreAccessor,
    compose_instances,
)
from practiceboard.application.services.instance_cache import FetchToken, InstanceCache
from practiceboard.application.services.lifecycle_controller import (
    AssessmentLifecycleController,
)
from practiceboard.application.services.score_resolver import ScoreResolver
from practiceboard.application.services.template_catalog import (
    TemplateCatalogService,
    TemplateListing,
)

__all__ = [
    "AssessmentAssignmentService",
    "AssessmentLifecycleController",
    "AssessmentWorkspace",
    "AssignmentOptions",
    "ChangeNotificationBridge",
    "FetchToken",
    "InstanceCache",
    "InstanceStoreAccessor",
    "ScoreResolver",
    "TemplateCatalogService",
    "TemplateListing",
    "compose_instances",
]
