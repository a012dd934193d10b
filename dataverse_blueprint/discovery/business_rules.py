"""Business rule fetcher."""

from dataverse_blueprint.discovery.base_fetcher import WorkflowRecordFetcher
from dataverse_blueprint.domain.components import BusinessRule
from dataverse_blueprint.domain.constants import RULE_SCOPE_NAMES
from dataverse_blueprint.domain.enums import WorkflowCategory
from dataverse_blueprint.parsers import BusinessRuleParser

_RULE_SCOPES = {1: 'AllForms', 2: 'SpecificForm'}


class BusinessRuleFetcher(WorkflowRecordFetcher):
    categories = frozenset({WorkflowCategory.BUSINESS_RULE})

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.parser = BusinessRuleParser()

    def map_record(self, row) -> BusinessRule:
        scope = row.get('scope')
        return BusinessRule(
            id=row.get('workflowid', ''),
            name=row.get('name', ''),
            description=row.get('description'),
            state='Active' if row.get('statecode') == 1 else 'Draft',
            scope=_RULE_SCOPES.get(scope, 'Entity'),
            scope_name=RULE_SCOPE_NAMES.get(scope, 'Entity'),
            entity=row.get('primaryentity') or 'unknown',
            owner=self.owner_of(row),
            modified_on=row.get('modifiedon'),
            definition=self.parser.parse(row.get('xaml')),
        )
