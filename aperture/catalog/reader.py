"""Parse entity documents into models."""

from __future__ import annotations

import logging
from typing import Any

import yaml

from ..models import Component, Group
from ..models.base import EntityKind

logger = logging.getLogger(__name__)

Entity = Component | Group


class EntityReader:
    """Parse entity documents into Component and Group models."""

    ENTITY_CLASSES = {
        EntityKind.COMPONENT: Component,
        EntityKind.GROUP: Group,
    }

    def parse_entity(self, data: dict[str, Any]) -> Entity | None:
        """Parse dict to the appropriate entity type."""
        kind_str = data.get("kind")
        if not kind_str:
            return None

        try:
            kind = EntityKind(kind_str)
        except ValueError:
            logger.warning(f"Unknown entity kind: {kind_str}")
            return None

        entity_class = self.ENTITY_CLASSES[kind]
        try:
            return entity_class.model_validate(data)
        except ValueError as e:
            logger.warning(f"Failed to validate entity: {e}")
            return None

    def parse_component(self, content: str) -> Component | None:
        """Parse descriptor text holding a single Component document.

        Returns None when the document is not a Component or does not
        validate.
        """
        data = yaml.safe_load(content)
        if not isinstance(data, dict) or data.get("kind") != EntityKind.COMPONENT.value:
            return None
        entity = self.parse_entity(data)
        return entity if isinstance(entity, Component) else None
