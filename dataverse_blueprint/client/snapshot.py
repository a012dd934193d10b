"""Metadata client backed by a point-in-time JSON snapshot."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

from dataverse_blueprint.client.base import MetadataClient
from dataverse_blueprint.domain.constants import FORM_TYPE_NAMES, RECORD_KEY_COLUMNS
from dataverse_blueprint.domain.enums import RecordTable
from dataverse_blueprint.domain.errors import MetadataClientError
from dataverse_blueprint.utils.ids import normalize_id

ENTITY_DEFINITIONS_KEY = 'EntityDefinitions'
SOLUTION_COMPONENTS_KEY = 'solutioncomponents'
FORMS_KEY = 'systemforms'


class SnapshotClient(MetadataClient):
    """Serves metadata from a snapshot document.

    The document holds one list of rows per table, keyed by the table
    name (``workflows``, ``sdkmessageprocessingsteps``, ...), plus
    ``EntityDefinitions``, ``solutioncomponents`` and ``systemforms``.
    """

    def __init__(self, data: dict[str, Any], environment: str | None = None):
        if not isinstance(data, dict):
            raise MetadataClientError('Snapshot must be a JSON object')
        self._data = data
        self._environment = environment or data.get('environment') or 'snapshot'

    @classmethod
    def from_file(cls, path: str) -> SnapshotClient:
        p = Path(path)
        if not p.is_file():
            raise MetadataClientError(f"Snapshot not found: {path}")
        try:
            with open(p, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise MetadataClientError(f"Failed to read snapshot: {e}") from e
        return cls(data)

    @property
    def environment_url(self) -> str:
        return self._environment

    def _rows(self, key: str) -> list[dict[str, Any]]:
        return self._data.get(key) or []

    async def get_solution_components(self, solution_ids):
        wanted = {normalize_id(s) for s in solution_ids}
        return [
            copy.deepcopy(row) for row in self._rows(SOLUTION_COMPONENTS_KEY)
            if normalize_id(row.get('solutionid')) in wanted
        ]

    async def get_workflow_categories(self, workflow_ids):
        wanted = {normalize_id(w) for w in workflow_ids}
        return [
            {'workflowid': row.get('workflowid'), 'category': row.get('category')}
            for row in self._rows(RecordTable.WORKFLOWS.value)
            if normalize_id(row.get('workflowid')) in wanted
        ]

    async def list_entity_definitions(self):
        return [
            {k: copy.deepcopy(v) for k, v in row.items() if k != 'Attributes'}
            for row in self._rows(ENTITY_DEFINITIONS_KEY)
        ]

    async def get_entity_schema(self, logical_name):
        for row in self._rows(ENTITY_DEFINITIONS_KEY):
            if row.get('LogicalName') == logical_name:
                return copy.deepcopy(row)
        raise MetadataClientError(f"Entity not found: {logical_name}")

    async def get_records(self, table, ids):
        if not isinstance(table, RecordTable):
            raise MetadataClientError(f"Unknown table: {table!r}")
        key_column = RECORD_KEY_COLUMNS[table]
        wanted = {normalize_id(i) for i in ids}
        return [
            copy.deepcopy(row) for row in self._rows(table.value)
            if normalize_id(row.get(key_column)) in wanted
        ]

    async def list_records(self, table):
        if not isinstance(table, RecordTable):
            raise MetadataClientError(f"Unknown table: {table!r}")
        return copy.deepcopy(self._rows(table.value))

    async def get_forms(self, entity_names):
        wanted = set(entity_names)
        return [
            copy.deepcopy(row) for row in self._rows(FORMS_KEY)
            if row.get('objecttypecode') in wanted and row.get('type') in FORM_TYPE_NAMES
        ]
