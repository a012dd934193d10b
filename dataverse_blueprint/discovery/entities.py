"""Entity discovery and schema retrieval."""

import logging
from typing import Any

from dataverse_blueprint.client.base import MetadataClient
from dataverse_blueprint.discovery.base_fetcher import BaseFetcher
from dataverse_blueprint.utils.ids import normalize_id

logger = logging.getLogger(__name__)


def display_name(entity: dict[str, Any]) -> str:
    return BaseFetcher.label(entity.get('DisplayName')) or entity.get('LogicalName', '')


def _by_logical_name(entities: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(entities, key=lambda e: e.get('LogicalName', ''))


class EntityDiscovery:
    """Finds the entities in scope and loads their full schemas."""

    def __init__(self, client: MetadataClient):
        self.client = client

    async def get_entities_by_ids(self, entity_ids, include_system: bool = True) -> list[dict[str, Any]]:
        wanted = {normalize_id(e) for e in entity_ids}
        if not wanted:
            return []
        entities = [
            e for e in await self.client.list_entity_definitions()
            if normalize_id(e.get('MetadataId')) in wanted
        ]
        if not include_system:
            entities = [e for e in entities if e.get('IsCustomEntity')]
        return _by_logical_name(entities)

    async def get_entities_by_publisher(self, prefixes) -> list[dict[str, Any]]:
        """Return custom entities whose logical name starts with ``{prefix}_``."""
        starts = tuple(f"{p.lower().rstrip('_')}_" for p in prefixes)
        entities = [
            e for e in await self.client.list_entity_definitions()
            if e.get('IsCustomEntity') and e.get('LogicalName', '').lower().startswith(starts)
        ]
        return _by_logical_name(entities)

    async def get_schema(self, logical_name: str) -> dict[str, Any]:
        schema = await self.client.get_entity_schema(logical_name)
        logger.debug("Loaded schema for %s (%d attributes)",
                     logical_name, len(schema.get('Attributes') or []))
        return schema
