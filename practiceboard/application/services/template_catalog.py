"""
Template Catalog Service.

Read-only registry of active assessment templates. The last loaded listing is
kept so that assignment can validate template ids against what the therapist
was shown.
"""

import logging
from dataclasses import dataclass, field

from practiceboard.domain.entities import AssessmentCategory, AssessmentTemplate
from practiceboard.domain.exceptions import (
    CatalogUnavailableError,
    StoreError,
    TemplateNotFoundError,
)
from practiceboard.domain.repositories import IAssessmentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateListing:
    """Result of a catalog load; ``error`` is set when the catalog is degraded."""

    templates: list[AssessmentTemplate] = field(default_factory=list)
    error: CatalogUnavailableError | None = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


class TemplateCatalogService:
    """Service for loading and looking up active assessment templates."""

    def __init__(self, store: IAssessmentStore) -> None:
        self._store = store
        self._templates: list[AssessmentTemplate] = []

    @property
    def templates(self) -> list[AssessmentTemplate]:
        return list(self._templates)

    async def list_active_templates(self) -> TemplateListing:
        """
        Load active templates ordered by name.

        Returns:
            TemplateListing. When the backend's access policies recurse the
            listing is empty and carries a degraded-service error instead of
            raising, so dependent screens can still render.

        Raises:
            CatalogUnavailableError: If the store fails for any other reason.
        """
        try:
            templates = await self._store.list_active_templates()
        except StoreError as e:
            self._templates = []
            if e.is_recursion:
                logger.error(f"Policy recursion while listing templates: {e}")
                return TemplateListing(
                    templates=[],
                    error=CatalogUnavailableError(
                        str(e),
                        user_message="Assessment templates are temporarily unavailable.",
                    ),
                )
            logger.error(f"Failed to list assessment templates: {e}")
            raise CatalogUnavailableError(str(e)) from e

        self._templates = sorted(templates, key=lambda t: t.name)
        logger.debug(f"Loaded {len(self._templates)} active templates")
        return TemplateListing(templates=self.templates)

    def find(self, template_id: str) -> AssessmentTemplate | None:
        return next((t for t in self._templates if t.id == template_id), None)

    def get(self, template_id: str) -> AssessmentTemplate:
        """Return a loaded template or raise ``TemplateNotFoundError``."""
        template = self.find(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def by_category(self, category: AssessmentCategory | str) -> list[AssessmentTemplate]:
        category = AssessmentCategory.parse(category)
        return [t for t in self._templates if t.category is category]

    def clear(self) -> None:
        self._templates = []
