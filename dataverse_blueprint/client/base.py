"""Metadata client contract.

The generator reads the platform only through this interface. All
operations are read-only coroutines returning plain ``dict`` rows shaped
like Web API responses.
"""

from abc import ABC, abstractmethod
from typing import Any

from dataverse_blueprint.domain.enums import RecordTable


class MetadataClient(ABC):
    """Abstract read-only access to environment metadata."""

    @property
    def environment_url(self) -> str:
        """Label of the environment being documented."""
        return 'current'

    @abstractmethod
    async def get_solution_components(self, solution_ids: list[str]) -> list[dict[str, Any]]:
        """Return ``{objectid, componenttype, solutionid}`` rows for the solutions."""

    @abstractmethod
    async def get_workflow_categories(self, workflow_ids: list[str]) -> list[dict[str, Any]]:
        """Return ``{workflowid, category}`` rows in one batched query."""

    @abstractmethod
    async def list_entity_definitions(self) -> list[dict[str, Any]]:
        """Return entity definitions without their attribute lists."""

    @abstractmethod
    async def get_entity_schema(self, logical_name: str) -> dict[str, Any]:
        """Return one entity definition including ``Attributes``."""

    @abstractmethod
    async def get_records(self, table: RecordTable, ids: list[str]) -> list[dict[str, Any]]:
        """Return rows of ``table`` whose key column is one of ``ids``."""

    @abstractmethod
    async def get_forms(self, entity_names: list[str]) -> list[dict[str, Any]]:
        """Return ``systemform`` rows for the given entity logical names."""

    @abstractmethod
    async def list_records(self, table: RecordTable) -> list[dict[str, Any]]:
        """Return every row of an environment-wide table."""
