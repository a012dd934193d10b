"""Base class for detail fetchers."""

from abc import ABC, abstractmethod
from typing import Any

from dataverse_blueprint.client.base import MetadataClient
from dataverse_blueprint.discovery.workflow_classifier import coerce_category
from dataverse_blueprint.domain.constants import DEFAULT_BATCH_SIZE, FORMATTED_VALUE
from dataverse_blueprint.domain.enums import RecordTable
from dataverse_blueprint.utils.ids import chunked, unique_ids


class BaseFetcher(ABC):
    """Resolves an id list into mapped records from one table.

    Ids are normalized and queried in batches; rows are filtered with
    ``accepts`` and converted with ``map_record``.
    """

    table: RecordTable

    def __init__(self, client: MetadataClient, batch_size: int = DEFAULT_BATCH_SIZE):
        self.client = client
        self.batch_size = batch_size

    async def fetch(self, ids) -> list:
        ids = unique_ids(ids)
        if not ids:
            return []
        rows = await self.fetch_rows(self.table, ids)
        return await self.build([r for r in rows if self.accepts(r)])

    async def fetch_rows(self, table: RecordTable, ids) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for batch in chunked(ids, self.batch_size):
            rows.extend(await self.client.get_records(table, batch))
        return rows

    def accepts(self, row: dict[str, Any]) -> bool:
        return True

    async def build(self, rows: list[dict[str, Any]]) -> list:
        return [self.map_record(row) for row in rows]

    @abstractmethod
    def map_record(self, row: dict[str, Any]) -> Any:
        """Convert one row into a component record."""

    # ── Row helpers ──────────────────────────────────────────────────────

    @staticmethod
    def formatted(row: dict[str, Any], column: str) -> str | None:
        return row.get(f"{column}{FORMATTED_VALUE}")

    @staticmethod
    def expanded(row: dict[str, Any], navigation: str, column: str) -> Any:
        value = row.get(navigation)
        return value.get(column) if isinstance(value, dict) else None

    def owner_of(self, row: dict[str, Any]) -> str:
        return (self.expanded(row, 'ownerid', 'fullname')
                or self.formatted(row, '_ownerid_value')
                or 'Unknown')

    @staticmethod
    def label(value: Any) -> str | None:
        """Return the user-localized text of a metadata Label."""
        if isinstance(value, dict):
            localized = value.get('UserLocalizedLabel') or {}
            return localized.get('Label')
        return value


class WorkflowRecordFetcher(BaseFetcher):
    """Fetcher over the shared workflow table, restricted to some categories."""

    table = RecordTable.WORKFLOWS
    categories: frozenset = frozenset()

    def accepts(self, row: dict[str, Any]) -> bool:
        return coerce_category(row.get('category')) in self.categories
