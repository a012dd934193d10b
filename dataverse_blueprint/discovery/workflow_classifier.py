"""Workflow classification into typed buckets."""

import logging
from typing import Any

from dataverse_blueprint.client.base import MetadataClient
from dataverse_blueprint.domain.enums import WorkflowCategory
from dataverse_blueprint.domain.models import WorkflowInventory
from dataverse_blueprint.utils.ids import normalize_id, unique_ids

logger = logging.getLogger(__name__)

_BUCKETS = {
    WorkflowCategory.MODERN_FLOW: 'flow_ids',
    WorkflowCategory.BUSINESS_RULE: 'business_rule_ids',
    WorkflowCategory.BUSINESS_PROCESS_FLOW: 'business_process_flow_ids',
    WorkflowCategory.CLASSIC_WORKFLOW: 'classic_workflow_ids',
}

# Unrecognized or missing categories are legacy process types
DEFAULT_BUCKET = 'classic_workflow_ids'

MODERN_CATEGORIES = frozenset({
    WorkflowCategory.MODERN_FLOW,
    WorkflowCategory.BUSINESS_RULE,
    WorkflowCategory.BUSINESS_PROCESS_FLOW,
})


def coerce_category(value) -> WorkflowCategory | None:
    """Return the workflow category for a raw column value such as 5 or "5"."""
    try:
        return WorkflowCategory(int(value))
    except (TypeError, ValueError):
        return None


def _bucket_for(category) -> str | None:
    return _BUCKETS.get(coerce_category(category))


def partition_workflows(workflow_ids, rows: list[dict[str, Any]]) -> WorkflowInventory:
    """Assign every id to exactly one bucket.

    Ids whose category is unrecognized, or which the classification rows
    do not mention, fall into the legacy workflow bucket.
    """
    categories = {normalize_id(r.get('workflowid')): r.get('category') for r in rows}
    buckets: dict[str, list[str]] = {name: [] for name in _BUCKETS.values()}
    for workflow_id in unique_ids(workflow_ids):
        bucket = _bucket_for(categories.get(workflow_id))
        if bucket is None:
            logger.warning(
                "Workflow %s has unrecognized category %r; treating as legacy workflow",
                workflow_id, categories.get(workflow_id),
            )
            bucket = DEFAULT_BUCKET
        buckets[bucket].append(workflow_id)
    return WorkflowInventory(**{name: tuple(ids) for name, ids in buckets.items()})


class WorkflowClassifier:
    """Classifies generic workflow ids with one batched category query."""

    def __init__(self, client: MetadataClient):
        self.client = client

    async def classify(self, workflow_ids) -> WorkflowInventory:
        ids = unique_ids(workflow_ids)
        if not ids:
            return WorkflowInventory()
        rows = await self.client.get_workflow_categories(list(ids))
        inventory = partition_workflows(ids, rows)
        logger.info(
            "Classified %d workflows: %d flows, %d business rules, %d legacy, %d process flows",
            len(ids), len(inventory.flow_ids), len(inventory.business_rule_ids),
            len(inventory.classic_workflow_ids), len(inventory.business_process_flow_ids),
        )
        return inventory
