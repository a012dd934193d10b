"""Cloud flow fetcher."""

from dataverse_blueprint.discovery.base_fetcher import WorkflowRecordFetcher
from dataverse_blueprint.domain.components import Flow
from dataverse_blueprint.domain.constants import FLOW_SCOPE_NAMES, FLOW_STATE_NAMES
from dataverse_blueprint.domain.enums import WorkflowCategory
from dataverse_blueprint.parsers import FlowDefinitionParser


class FlowFetcher(WorkflowRecordFetcher):
    categories = frozenset({WorkflowCategory.MODERN_FLOW})

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.parser = FlowDefinitionParser()

    def map_record(self, row) -> Flow:
        entity = row.get('primaryentity')
        return Flow(
            id=row.get('workflowid', ''),
            name=row.get('name', ''),
            description=row.get('description'),
            state=FLOW_STATE_NAMES.get(row.get('statecode'), 'Draft'),
            entity=entity if entity and entity != 'none' else None,
            scope_name=FLOW_SCOPE_NAMES.get(row.get('scope'), 'Unknown'),
            owner=self.owner_of(row),
            modified_on=row.get('modifiedon'),
            definition=self.parser.parse(row.get('clientdata')),
        )
