"""Legacy workflow fetcher."""

from dataverse_blueprint.analyzers.workflow_migration import WorkflowMigrationAnalyzer
from dataverse_blueprint.discovery.base_fetcher import WorkflowRecordFetcher
from dataverse_blueprint.discovery.workflow_classifier import MODERN_CATEGORIES, coerce_category
from dataverse_blueprint.domain.components import ClassicWorkflow
from dataverse_blueprint.domain.constants import (
    CLASSIC_MODE_NAMES, CLASSIC_SCOPE_NAMES, CLASSIC_TYPE_NAMES,
)

_STATE_NAMES = {1: 'Active', 2: 'Suspended'}


class ClassicWorkflowFetcher(WorkflowRecordFetcher):
    """Fetches every workflow record outside the modern categories.

    Each record is annotated with migration guidance.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.analyzer = WorkflowMigrationAnalyzer()

    def accepts(self, row) -> bool:
        return coerce_category(row.get('category')) not in MODERN_CATEGORIES

    def map_record(self, row) -> ClassicWorkflow:
        mode = row.get('mode') or 0
        category = coerce_category(row.get('category'))
        workflow = ClassicWorkflow(
            id=row.get('workflowid', ''),
            name=row.get('name', ''),
            description=row.get('description'),
            category=row.get('category') if category is None else int(category),
            type_name=CLASSIC_TYPE_NAMES.get(row.get('type'), 'Unknown'),
            mode=mode,
            mode_name=CLASSIC_MODE_NAMES.get(mode, 'Unknown'),
            scope_name=CLASSIC_SCOPE_NAMES.get(row.get('scope'), 'Unknown'),
            entity=row.get('primaryentity') or 'none',
            state=_STATE_NAMES.get(row.get('statecode'), 'Draft'),
            trigger_on_create=bool(row.get('triggeroncreate')),
            trigger_on_update=bool(row.get('triggeronupdate')),
            trigger_on_delete=bool(row.get('triggerondelete')),
            on_demand=bool(row.get('ondemand')),
            owner=self.owner_of(row),
            modified_on=row.get('modifiedon'),
            xaml=row.get('xaml') or '',
        )
        workflow.migration = self.analyzer.analyze(workflow)
        return workflow
