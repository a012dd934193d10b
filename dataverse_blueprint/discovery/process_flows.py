"""Business process flow fetcher."""

from dataverse_blueprint.discovery.base_fetcher import WorkflowRecordFetcher
from dataverse_blueprint.domain.components import BusinessProcessFlow
from dataverse_blueprint.domain.enums import WorkflowCategory
from dataverse_blueprint.parsers import ProcessFlowParser


class ProcessFlowFetcher(WorkflowRecordFetcher):
    categories = frozenset({WorkflowCategory.BUSINESS_PROCESS_FLOW})

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.parser = ProcessFlowParser()

    def map_record(self, row) -> BusinessProcessFlow:
        return BusinessProcessFlow(
            id=row.get('workflowid', ''),
            name=row.get('name', ''),
            description=row.get('description'),
            primary_entity=row.get('primaryentity') or 'none',
            state='Active' if row.get('statecode') == 1 else 'Draft',
            unique_name=row.get('uniquename'),
            owner=self.owner_of(row),
            modified_on=row.get('modifiedon'),
            definition=self.parser.parse(row.get('xaml')),
        )
