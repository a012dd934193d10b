"""Tests for solution distribution analysis."""

from dataverse_blueprint.analyzers.solution_distribution import (
    SolutionDistributionAnalyzer, publisher_prefix,
)
from dataverse_blueprint.domain.components import SolutionInfo
from dataverse_blueprint.domain.models import EntityBlueprint


class _Component:
    def __init__(self, component_id):
        self.id = component_id


def _solution(solution_id, name, prefix, unique_publisher=None):
    return SolutionInfo(
        id=solution_id, unique_name=name.replace(' ', ''), friendly_name=name, version='1.0',
        is_managed=False, publisher_name=name.split()[0],
        publisher_unique_name=unique_publisher or prefix, publisher_prefix=prefix,
    )


def _entity(metadata_id, schema_name, lookups=()):
    return EntityBlueprint(entity={
        'MetadataId': metadata_id,
        'LogicalName': schema_name.lower(),
        'SchemaName': schema_name,
        'ManyToOneRelationships': [{'ReferencedEntity': target} for target in lookups],
    })


class TestSolutionDistributionAnalyzer:
    """Tests for SolutionDistributionAnalyzer."""

    def setup_method(self):
        self.analyzer = SolutionDistributionAnalyzer()
        self.core = _solution('{S-CORE}', 'Contoso Core', 'new')
        self.sales = _solution('s-sales', 'Contoso Sales', 'cr8a')
        self.collections = {
            'entities': [_entity('E1', 'new_Project'), _entity('E2', 'cr8a_Quote', lookups=['new_project'])],
            'flows': [_Component('F1'), _Component('F2')],
            'plugins': [_Component('P1')],
        }
        self.members = {
            's-core': frozenset({'e1', 'f1', 'p1'}),
            's-sales': frozenset({'e2', 'f1', 'f2'}),
        }

    def test_counts_use_membership(self):
        core, sales = self.analyzer.analyze([self.sales, self.core], self.collections, self.members)
        assert core.solution_name == 'Contoso Core'
        assert core.component_counts['entities'] == 1
        assert core.component_counts['flows'] == 1
        assert core.component_counts['plugins'] == 1
        assert core.component_counts['total'] == 3
        assert sales.component_counts['flows'] == 2
        assert sales.component_counts['total'] == 3

    def test_counts_without_membership_use_overall_totals(self):
        [core] = self.analyzer.analyze([self.core], self.collections)
        assert core.component_counts['entities'] == 2
        assert core.component_counts['flows'] == 2
        assert core.component_counts['custom_apis'] == 0
        assert core.component_counts['total'] == 5
        assert core.shared_components == []

    def test_shared_components(self):
        core, sales = self.analyzer.analyze([self.core, self.sales], self.collections, self.members)
        [shared] = core.shared_components
        assert shared.component_id == 'f1'
        assert shared.component_type == 'Flow'
        assert shared.solutions == ['Contoso Core', 'Contoso Sales']
        assert [s.component_id for s in sales.shared_components] == ['f1']

    def test_dependencies_by_prefix_and_lookup(self):
        core, sales = self.analyzer.analyze([self.core, self.sales], self.collections, self.members)

        [on_sales] = core.dependencies
        assert on_sales.depends_on_solution == 'Contoso Sales'
        assert on_sales.reason == 'References entities from this solution'
        assert on_sales.component_references == ['cr8a_quote']

        [on_core] = sales.dependencies
        assert on_core.depends_on_solution == 'Contoso Core'
        assert on_core.reason == 'References entities from this solution'
        assert on_core.component_references == ['new_project', 'cr8a_quote -> new_project']

    def test_publisher_unique_name_when_prefix_missing(self):
        core = _solution('s-core', 'Contoso Core', None, unique_publisher='new')
        sales = _solution('s-sales', 'Contoso Sales', 'cr8a')
        [_, sales] = self.analyzer.analyze([core, sales], self.collections, self.members)
        assert sales.dependencies[0].depends_on_solution == 'Contoso Core'

    def test_single_solution_has_no_dependencies(self):
        [core] = self.analyzer.analyze([self.core], self.collections, self.members)
        assert core.dependencies == []

    def test_publisher_prefix(self):
        assert publisher_prefix('new_Project') == 'new'
        assert publisher_prefix('account') is None
        assert publisher_prefix(None) is None
