"""How the documented components are spread across the selected solutions."""

from __future__ import annotations

from typing import Any

from dataverse_blueprint.domain.components import (
    SharedComponent, SolutionDependency, SolutionDistribution, SolutionInfo,
)
from dataverse_blueprint.domain.constants import PUBLISHER_PREFIX_RE
from dataverse_blueprint.utils.ids import normalize_id

# Result collection counted per solution, and the component type named for shared components
COUNTED_COLLECTIONS = (
    ('entities', 'Entity'),
    ('plugins', 'Plugin'),
    ('flows', 'Flow'),
    ('business_rules', 'BusinessRule'),
    ('classic_workflows', 'ClassicWorkflow'),
    ('business_process_flows', 'BusinessProcessFlow'),
    ('web_resources', 'WebResource'),
    ('custom_apis', 'CustomAPI'),
    ('environment_variables', 'EnvironmentVariable'),
    ('connection_references', 'ConnectionReference'),
    ('global_choices', 'GlobalChoice'),
)


def _component_id(component: Any) -> str:
    entity = getattr(component, 'entity', None)
    if isinstance(entity, dict):
        return normalize_id(entity.get('MetadataId'))
    return normalize_id(getattr(component, 'id', None))


def publisher_prefix(name: str | None) -> str | None:
    m = PUBLISHER_PREFIX_RE.match(name or '')
    return m.group(1).lower() if m else None


class SolutionDistributionAnalyzer:
    """Counts, shared components and cross-solution dependencies per solution.

    ``members`` maps a normalized solution id to the normalized ids of
    its components. Without it every solution is credited with the
    overall counts and no component is reported as shared.
    """

    def analyze(self, solutions: list[SolutionInfo], collections: dict[str, list],
                members: dict[str, frozenset[str]] | None = None) -> list[SolutionDistribution]:
        distributions = []
        for solution in solutions:
            distributions.append(SolutionDistribution(
                solution_name=solution.friendly_name,
                solution_id=solution.id,
                publisher=solution.publisher_name,
                version=solution.version,
                is_managed=solution.is_managed,
                component_counts=self.component_counts(solution, collections, members),
                shared_components=self.shared_components(solution, solutions, collections, members),
                dependencies=self.dependencies(solution, solutions, collections.get('entities', [])),
            ))
        return sorted(distributions, key=lambda d: d.solution_name.lower())

    @staticmethod
    def component_counts(solution: SolutionInfo, collections: dict[str, list],
                         members: dict[str, frozenset[str]] | None) -> dict[str, int]:
        in_solution = None if members is None else members.get(normalize_id(solution.id), frozenset())
        counts = {}
        for key, _ in COUNTED_COLLECTIONS:
            items = collections.get(key, [])
            if in_solution is None:
                counts[key] = len(items)
            else:
                counts[key] = sum(1 for item in items if _component_id(item) in in_solution)
        counts['total'] = sum(counts.values())
        return counts

    @staticmethod
    def shared_components(solution: SolutionInfo, solutions: list[SolutionInfo],
                          collections: dict[str, list],
                          members: dict[str, frozenset[str]] | None) -> list[SharedComponent]:
        if not members:
            return []
        own_id = normalize_id(solution.id)
        own = members.get(own_id, frozenset())
        shared = []
        for key, type_name in COUNTED_COLLECTIONS:
            for item in collections.get(key, []):
                component_id = _component_id(item)
                if component_id not in own:
                    continue
                holders = [
                    s.friendly_name for s in solutions
                    if component_id in members.get(normalize_id(s.id), frozenset())
                ]
                if len(holders) > 1:
                    shared.append(SharedComponent(component_id, type_name, holders))
        return shared

    @staticmethod
    def dependencies(solution: SolutionInfo, solutions: list[SolutionInfo],
                     blueprints: list) -> list[SolutionDependency]:
        """Find other solutions whose publisher prefix the entities use.

        Both an entity's own schema name and the targets of its
        many-to-one relationships are checked.
        """
        def prefix_of(s: SolutionInfo) -> str:
            return (s.publisher_prefix or s.publisher_unique_name).lower()

        current = prefix_of(solution)
        found: dict[str, SolutionDependency] = {}

        def add(prefix: str | None, reason: str, reference: str) -> None:
            if not prefix or prefix == current:
                return
            other = next((s for s in solutions if prefix_of(s) == prefix), None)
            if other is None or normalize_id(other.id) == normalize_id(solution.id):
                return
            dependency = found.setdefault(
                other.friendly_name, SolutionDependency(other.friendly_name, reason))
            if reference not in dependency.component_references:
                dependency.component_references.append(reference)

        for blueprint in blueprints:
            entity = blueprint.entity
            logical_name = entity.get('LogicalName', '')
            add(publisher_prefix(entity.get('SchemaName')),
                'References entities from this solution', logical_name)
            for relationship in entity.get('ManyToOneRelationships') or []:
                target = relationship.get('ReferencedEntity') or ''
                add(publisher_prefix(target),
                    'Has lookup relationships to entities in this solution',
                    f"{logical_name} -> {target}")
        return list(found.values())
