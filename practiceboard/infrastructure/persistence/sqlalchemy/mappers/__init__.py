"""Mapping between ORM models and domain entities."""

from practiceboard.infrastructure.persistence.sqlalchemy.mappers.assessment_mapper import (
    map_draft_to_model,
    map_instance_model_to_entity,
    map_profile_model_to_client,
    map_score_model_to_entity,
    map_template_model_to_entity,
)

__all__ = [
    "map_draft_to_model",
    "map_instance_model_to_entity",
    "map_profile_model_to_client",
    "map_score_model_to_entity",
    "map_template_model_to_entity",
]
