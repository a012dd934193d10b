"""Component inventory discovery for solution scopes."""

import logging
from typing import Any

from dataverse_blueprint.client.base import MetadataClient
from dataverse_blueprint.domain.enums import ComponentType
from dataverse_blueprint.domain.models import ComponentInventory
from dataverse_blueprint.utils.ids import normalize_id

logger = logging.getLogger(__name__)

# ComponentInventory field for each component type code
_INVENTORY_FIELDS = {
    ComponentType.ENTITY: 'entity_ids',
    ComponentType.ATTRIBUTE: 'attribute_ids',
    ComponentType.SDK_MESSAGE_PROCESSING_STEP: 'plugin_ids',
    ComponentType.WORKFLOW: 'workflow_ids',
    ComponentType.WEB_RESOURCE: 'web_resource_ids',
    ComponentType.CUSTOM_API: 'custom_api_ids',
    ComponentType.ENVIRONMENT_VARIABLE_DEFINITION: 'environment_variable_ids',
    ComponentType.CONNECTION_REFERENCE: 'connection_reference_ids',
    ComponentType.OPTION_SET: 'global_choice_ids',
    ComponentType.CONNECTOR: 'custom_connector_ids',
    ComponentType.CANVAS_APP: 'canvas_app_ids',
    ComponentType.CUSTOM_PAGE: 'custom_page_ids',
    ComponentType.SECURITY_ROLE: 'security_role_ids',
    ComponentType.FIELD_SECURITY_PROFILE: 'field_security_profile_ids',
}


def build_inventory(components: list[dict[str, Any]]) -> ComponentInventory:
    """Partition solution component rows into a ComponentInventory.

    Ids are normalized and de-duplicated in first-seen order. Component
    types without an inventory category are ignored, but every component
    still counts toward its solution's membership.
    """
    buckets: dict[str, dict[str, None]] = {name: {} for name in _INVENTORY_FIELDS.values()}
    members: dict[str, set[str]] = {}
    skipped: dict[Any, int] = {}
    for component in components:
        object_id = normalize_id(component.get('objectid'))
        solution_id = normalize_id(component.get('solutionid'))
        if object_id and solution_id:
            members.setdefault(solution_id, set()).add(object_id)
        try:
            field_name = _INVENTORY_FIELDS[ComponentType(component.get('componenttype'))]
        except (ValueError, KeyError):
            code = component.get('componenttype')
            skipped[code] = skipped.get(code, 0) + 1
            continue
        if object_id:
            buckets[field_name].setdefault(object_id, None)

    if skipped:
        logger.debug("Ignored component types: %s", dict(sorted(skipped.items(), key=str)))
    return ComponentInventory(
        **{name: tuple(ids) for name, ids in buckets.items()},
        solution_members={sid: frozenset(ids) for sid, ids in members.items()},
    )


class SolutionComponentDiscovery:
    """Resolves solution ids into a component inventory."""

    def __init__(self, client: MetadataClient):
        self.client = client

    async def get_inventory(self, solution_ids) -> ComponentInventory:
        components = await self.client.get_solution_components(list(solution_ids))
        inventory = build_inventory(components)
        logger.info(
            "Discovered %d entities, %d attributes, %d plugin steps, %d workflows, %d web resources",
            len(inventory.entity_ids), len(inventory.attribute_ids),
            len(inventory.plugin_ids), len(inventory.workflow_ids),
            len(inventory.web_resource_ids),
        )
        return inventory
