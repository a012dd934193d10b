"""Attribute scoping for entity schemas.

Two filters compose in a fixed order: solution scoping first, then
system-field exclusion. Custom entities are exempt from scoping since
all of their columns ship with the solution.
"""

import logging
from typing import Any, Iterable

from dataverse_blueprint.domain.constants import SYSTEM_FIELDS
from dataverse_blueprint.utils.ids import normalize_id

logger = logging.getLogger(__name__)


def is_system_field(logical_name: str | None) -> bool:
    return bool(logical_name) and logical_name.lower() in SYSTEM_FIELDS


def scope_attributes(
    attributes: list[dict[str, Any]],
    is_custom_entity: bool,
    attribute_ids: Iterable[str] | None,
) -> list[dict[str, Any]]:
    """Keep the attributes that ship in the solution.

    Args:
        attributes: Attribute definitions with a ``MetadataId``.
        is_custom_entity: Custom entities keep every attribute.
        attribute_ids: Solution attribute ids, or None when the scope
            carries no attribute selection.

    Returns:
        The subset of ``attributes`` in scope, in original order.
    """
    if is_custom_entity or attribute_ids is None:
        return list(attributes)
    wanted = {normalize_id(a) for a in attribute_ids}
    return [
        attr for attr in attributes
        if attr.get('MetadataId') and normalize_id(attr['MetadataId']) in wanted
    ]


def exclude_system_fields(attributes: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [a for a in attributes if not is_system_field(a.get('LogicalName'))]


class AttributeFilter:
    """Applies scoping and system-field exclusion to entity schemas."""

    def __init__(self, attribute_ids: Iterable[str] | None, exclude_system: bool = False):
        self.attribute_ids = None if attribute_ids is None else frozenset(
            normalize_id(a) for a in attribute_ids
        )
        self.exclude_system = exclude_system

    def apply(self, entity: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of ``entity`` with its ``Attributes`` filtered."""
        attributes = entity.get('Attributes') or []
        kept = scope_attributes(
            attributes, bool(entity.get('IsCustomEntity')), self.attribute_ids,
        )
        if self.exclude_system:
            kept = exclude_system_fields(kept)
        if len(kept) != len(attributes):
            logger.debug(
                "%s: kept %d of %d attributes",
                entity.get('LogicalName'), len(kept), len(attributes),
            )
        return {**entity, 'Attributes': kept}
