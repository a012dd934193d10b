"""Blueprint generation pipeline.

Sequences discovery, per-entity schema retrieval, detail fetches for every
component category, and cross-referencing into a single BlueprintResult.
The run is a single sequential coroutine: entities are processed one at a
time with a fixed pause after each schema fetch.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from dataverse_blueprint.aggregation.cross_reference import (
    group_business_rules_by_entity, group_classic_workflows_by_entity,
    group_flows_by_entity, group_forms_by_entity, group_plugins_by_entity,
    group_process_flows_by_entity, group_web_resources_by_type,
)
from dataverse_blueprint.analyzers.cross_entity import CrossEntityMapper
from dataverse_blueprint.analyzers.external_dependencies import ExternalDependencyAggregator
from dataverse_blueprint.analyzers.solution_distribution import SolutionDistributionAnalyzer
from dataverse_blueprint.client.base import MetadataClient
from dataverse_blueprint.discovery.business_rules import BusinessRuleFetcher
from dataverse_blueprint.discovery.classic_workflows import ClassicWorkflowFetcher
from dataverse_blueprint.discovery.components import (
    ConnectionReferenceFetcher, CustomAPIFetcher, CustomConnectorFetcher,
    EnvironmentVariableFetcher, GlobalChoiceFetcher,
)
from dataverse_blueprint.discovery.entities import EntityDiscovery, display_name
from dataverse_blueprint.discovery.flows import FlowFetcher
from dataverse_blueprint.discovery.forms import FormFetcher
from dataverse_blueprint.discovery.plugins import PluginFetcher
from dataverse_blueprint.discovery.process_flows import ProcessFlowFetcher
from dataverse_blueprint.discovery.security import (
    ColumnSecurityDiscovery, FieldPermissionFetcher, FieldSecurityProfileFetcher,
    SecurityRoleFetcher,
)
from dataverse_blueprint.discovery.solution_components import SolutionComponentDiscovery
from dataverse_blueprint.discovery.solutions import SolutionFetcher
from dataverse_blueprint.discovery.web_resources import WebResourceFetcher
from dataverse_blueprint.discovery.workflow_classifier import WorkflowClassifier
from dataverse_blueprint.domain.enums import CategoryPolicy, ProgressPhase, ScopeType
from dataverse_blueprint.domain.errors import GenerationCancelled, GenerationFailed
from dataverse_blueprint.domain.models import (
    BlueprintMetadata, BlueprintResult, ComponentInventory, DegradedCategory,
    EntityBlueprint, GeneratorOptions, ProgressSnapshot, Scope, WorkflowInventory,
)
from dataverse_blueprint.domain.outcome import Degraded, run_fetch, unwrap
from dataverse_blueprint.filters.attribute_filter import AttributeFilter
from dataverse_blueprint.utils.ids import unique_ids

logger = logging.getLogger(__name__)

# Core categories abort the run on failure; peripheral ones degrade to []
CATEGORY_POLICIES = {
    'plugin steps': CategoryPolicy.CORE,
    'flows': CategoryPolicy.CORE,
    'business rules': CategoryPolicy.CORE,
    'classic workflows': CategoryPolicy.PERIPHERAL,
    'business process flows': CategoryPolicy.PERIPHERAL,
    'web resources': CategoryPolicy.CORE,
    'custom APIs': CategoryPolicy.CORE,
    'environment variables': CategoryPolicy.CORE,
    'connection references': CategoryPolicy.CORE,
    'global choices': CategoryPolicy.CORE,
    'custom connectors': CategoryPolicy.CORE,
    'security roles': CategoryPolicy.CORE,
    'field security profiles': CategoryPolicy.CORE,
    'field permissions': CategoryPolicy.CORE,
    'attribute masking rules': CategoryPolicy.PERIPHERAL,
    'column security profiles': CategoryPolicy.PERIPHERAL,
    'forms': CategoryPolicy.PERIPHERAL,
    'solutions': CategoryPolicy.PERIPHERAL,
}


def build_discovery_message(inventory: ComponentInventory, workflows: WorkflowInventory) -> str:
    counts = (
        (len(inventory.entity_ids), 'entities'),
        (len(inventory.plugin_ids), 'plugins'),
        (len(workflows.flow_ids), 'flows'),
        (len(workflows.business_rule_ids), 'business rules'),
        (len(workflows.classic_workflow_ids), 'classic workflows'),
        (len(workflows.business_process_flow_ids), 'business process flows'),
        (len(inventory.web_resource_ids), 'web resources'),
        (len(inventory.custom_api_ids), 'custom APIs'),
        (len(inventory.environment_variable_ids), 'environment variables'),
        (len(inventory.connection_reference_ids), 'connection references'),
        (len(inventory.global_choice_ids), 'global choices'),
        (len(inventory.custom_connector_ids), 'custom connectors'),
        (len(inventory.canvas_app_ids), 'canvas apps'),
        (len(inventory.custom_page_ids), 'custom pages'),
        (len(inventory.security_role_ids), 'security roles'),
        (len(inventory.field_security_profile_ids), 'field security profiles'),
    )
    parts = [f"{count} {label}" for count, label in counts if count]
    if not parts:
        return 'No components found in selected scope'
    return f"Found: {', '.join(parts)}"


class BlueprintGenerator:
    """Generates an entity blueprint for one scope.

    Args:
        client: Read-only metadata client.
        scope: Publisher or solution scope; validated here, before any I/O.
        options: Progress sink, cancellation signal, and pacing.
    """

    def __init__(self, client: MetadataClient, scope: Scope, options: GeneratorOptions | None = None):
        scope.validate()
        self.client = client
        self.scope = scope
        self.options = options or GeneratorOptions()
        include = self.options.include_system_entities
        self.include_system_entities = scope.include_system_entities if include is None else include

    async def generate(self) -> BlueprintResult:
        """Run every phase and return the assembled result.

        Raises:
            GenerationCancelled: The signal was set during the schema phase.
            GenerationFailed: Any other unrecovered error, chained as the cause.
        """
        try:
            return await self._run()
        except GenerationCancelled as e:
            logger.info("Blueprint generation cancelled after %d entities", len(e.blueprints))
            raise
        except Exception as e:
            logger.error("Blueprint generation failed: %s", e)
            raise GenerationFailed(e) from e

    async def _run(self) -> BlueprintResult:
        started = datetime.now(timezone.utc).isoformat()
        degraded: list[DegradedCategory] = []
        bs = self.options.batch_size

        # ── Discovery ────────────────────────────────────────────────────
        inventory, workflows, entities, attribute_ids = await self._discover()

        # ── Entity schemas ───────────────────────────────────────────────
        attribute_filter = AttributeFilter(attribute_ids, self.scope.exclude_system_fields)
        blueprints = await self._process_entities(entities, attribute_filter)

        # ── Detail fetches ───────────────────────────────────────────────
        plugins = await self._category_phase(
            ProgressPhase.TRIGGERS, 'plugin steps', inventory.plugin_ids,
            PluginFetcher(self.client, bs).fetch, degraded)
        flows = await self._category_phase(
            ProgressPhase.FLOWS, 'flows', workflows.flow_ids,
            FlowFetcher(self.client, bs).fetch, degraded)
        rules = await self._category_phase(
            ProgressPhase.RULES, 'business rules', workflows.business_rule_ids,
            BusinessRuleFetcher(self.client, bs).fetch, degraded)
        classic = await self._category_phase(
            ProgressPhase.LEGACY_WORKFLOWS, 'classic workflows', workflows.classic_workflow_ids,
            ClassicWorkflowFetcher(self.client, bs).fetch, degraded)
        process_flows = await self._category_phase(
            ProgressPhase.PROCESSES, 'business process flows', workflows.business_process_flow_ids,
            ProcessFlowFetcher(self.client, bs).fetch, degraded)
        web_resources = await self._category_phase(
            ProgressPhase.FILES, 'web resources', inventory.web_resource_ids,
            WebResourceFetcher(self.client, bs).fetch, degraded)
        components = await self._components_phase(inventory, degraded)
        entity_names = [bp.logical_name for bp in blueprints]
        security, field_security = await self._security_phase(inventory, entity_names, degraded)
        forms = await self._category_phase(
            ProgressPhase.FORMS, 'forms', entity_names,
            FormFetcher(self.client, bs).fetch, degraded)

        # ── Cross-reference ──────────────────────────────────────────────
        plugins_by_entity = group_plugins_by_entity(plugins)
        flows_by_entity = group_flows_by_entity(flows)
        rules_by_entity = group_business_rules_by_entity(rules)
        forms_by_entity = group_forms_by_entity(forms)
        secured_by_entity = {fs.entity_logical_name.lower(): fs for fs in field_security}
        for blueprint in blueprints:
            key = blueprint.logical_name.lower()
            blueprint.attach(
                plugins_by_entity.get(key, []),
                flows_by_entity.get(key, []),
                rules_by_entity.get(key, []),
                forms_by_entity.get(key, []),
                field_security=secured_by_entity.get(key),
            )
        cross_entity_links = CrossEntityMapper().map(blueprints)
        logger.info("Mapped %d cross-entity automation links", len(cross_entity_links))

        collections = {
            'entities': blueprints, 'plugins': plugins, 'flows': flows,
            'business_rules': rules, 'classic_workflows': classic,
            'business_process_flows': process_flows, 'web_resources': web_resources,
            **components,
        }
        distribution = await self._solution_distribution(inventory, collections, degraded)

        result = BlueprintResult(
            metadata=BlueprintMetadata(
                generated_at=started,
                environment=self.client.environment_url,
                scope_type=self.scope.scope_type.value,
                scope_description=self.scope.description,
                entity_count=len(blueprints),
            ),
            summary=self._summary(blueprints, plugins, flows, rules, classic, process_flows,
                                  web_resources, components, security, inventory),
            entities=blueprints,
            plugins=plugins,
            plugins_by_entity=plugins_by_entity,
            flows=flows,
            flows_by_entity=flows_by_entity,
            business_rules=rules,
            business_rules_by_entity=rules_by_entity,
            classic_workflows=classic,
            classic_workflows_by_entity=group_classic_workflows_by_entity(classic),
            business_process_flows=process_flows,
            business_process_flows_by_entity=group_process_flows_by_entity(process_flows),
            web_resources=web_resources,
            web_resources_by_type=group_web_resources_by_type(web_resources),
            forms=forms,
            forms_by_entity=forms_by_entity,
            external_endpoints=ExternalDependencyAggregator().aggregate(flows, web_resources),
            cross_entity_links=cross_entity_links,
            solution_distribution=distribution,
            warnings=self._warnings(inventory, blueprints, plugins, flows, rules, classic, web_resources),
            degraded=degraded,
            **components,
            **security,
        )

        self._report(ProgressPhase.COMPLETE, len(blueprints), len(blueprints),
                     'Blueprint generation complete!')
        return result

    # ── Phases ───────────────────────────────────────────────────────────

    async def _discover(self):
        self._report(ProgressPhase.DISCOVERING, 0, 0, 'Discovering components in selected scope...')
        entity_discovery = EntityDiscovery(self.client)

        if self.scope.scope_type is ScopeType.PUBLISHER:
            entities = await entity_discovery.get_entities_by_publisher(self.scope.publisher_prefixes)
            inventory = ComponentInventory(entity_ids=unique_ids(e.get('MetadataId') for e in entities))
            workflows = WorkflowInventory()
            attribute_ids = None
        else:
            inventory = await SolutionComponentDiscovery(self.client).get_inventory(self.scope.solution_ids)
            workflows = await WorkflowClassifier(self.client).classify(inventory.workflow_ids)
            entities = await entity_discovery.get_entities_by_ids(
                inventory.entity_ids, include_system=self.include_system_entities)
            attribute_ids = inventory.attribute_ids

        self._report(ProgressPhase.DISCOVERING, len(entities), len(entities),
                     build_discovery_message(inventory, workflows))
        return inventory, workflows, entities, attribute_ids

    async def _process_entities(self, entities, attribute_filter: AttributeFilter) -> list[EntityBlueprint]:
        total = len(entities)
        entity_discovery = EntityDiscovery(self.client)
        signal = self.options.signal
        self._report(ProgressPhase.SCHEMA, 0, total, f"Retrieving schema for {total} entities...")

        blueprints: list[EntityBlueprint] = []
        for index, entity in enumerate(entities, start=1):
            if signal is not None and signal.aborted:
                raise GenerationCancelled(blueprints)

            logical_name = entity.get('LogicalName', '')
            self._report(
                ProgressPhase.SCHEMA, index, total,
                f"Processing {display_name(entity)} ({index}/{total})...",
                entity_name=logical_name,
            )
            schema = await entity_discovery.get_schema(logical_name)
            blueprints.append(EntityBlueprint(entity=attribute_filter.apply(schema)))
            await asyncio.sleep(self.options.schema_delay)

        self._report(ProgressPhase.SCHEMA, total, total, f"Retrieved {total} entity schemas")
        return blueprints

    async def _category_phase(
        self,
        phase: ProgressPhase,
        category: str,
        ids,
        fetch: Callable[[Any], Awaitable[list]],
        degraded: list[DegradedCategory],
    ) -> list:
        total = len(ids)
        self._report(phase, 0, total, f"Retrieving {total} {category}...")
        records = await self._fetch(category, lambda: fetch(ids), degraded)
        self._report(phase, len(records), total, f"Found {len(records)} {category}")
        return records

    async def _components_phase(self, inventory: ComponentInventory, degraded) -> dict[str, list]:
        bs = self.options.batch_size
        sources = (
            ('custom_apis', 'custom APIs', inventory.custom_api_ids, CustomAPIFetcher),
            ('environment_variables', 'environment variables',
             inventory.environment_variable_ids, EnvironmentVariableFetcher),
            ('connection_references', 'connection references',
             inventory.connection_reference_ids, ConnectionReferenceFetcher),
            ('global_choices', 'global choices', inventory.global_choice_ids, GlobalChoiceFetcher),
            ('custom_connectors', 'custom connectors',
             inventory.custom_connector_ids, CustomConnectorFetcher),
        )
        total = sum(len(ids) for _, _, ids, _ in sources)
        self._report(ProgressPhase.COMPONENTS, 0, total, f"Retrieving {total} solution components...")

        components = {}
        for field_name, category, ids, fetcher_cls in sources:
            fetcher = fetcher_cls(self.client, bs)
            components[field_name] = await self._fetch(
                category, lambda f=fetcher, i=ids: f.fetch(i), degraded)

        found = sum(len(v) for v in components.values())
        self._report(ProgressPhase.COMPONENTS, found, total, f"Found {found} solution components")
        return components

    async def _security_phase(self, inventory: ComponentInventory, entity_names: list[str], degraded):
        """Fetch roles, field security, and column security.

        Returns the BlueprintResult security fields and the secured
        columns per entity. Field permissions are only read when the
        scope holds at least one field security profile.
        """
        bs = self.options.batch_size
        total = len(inventory.security_role_ids) + len(inventory.field_security_profile_ids)
        self._report(ProgressPhase.COMPONENTS, 0, total, f"Retrieving {total} security components...")

        roles = await self._fetch(
            'security roles',
            lambda: SecurityRoleFetcher(self.client, bs).fetch(inventory.security_role_ids),
            degraded)
        profiles = await self._fetch(
            'field security profiles',
            lambda: FieldSecurityProfileFetcher(self.client, bs).fetch(
                inventory.field_security_profile_ids),
            degraded)
        field_security = []
        if inventory.field_security_profile_ids:
            field_security = await self._fetch(
                'field permissions',
                lambda: FieldPermissionFetcher(self.client, bs).fetch(entity_names),
                degraded)

        column_security = ColumnSecurityDiscovery(self.client)
        masking_rules = await self._fetch(
            'attribute masking rules', column_security.get_attribute_masking_rules, degraded)
        column_profiles = await self._fetch(
            'column security profiles', column_security.get_column_security_profiles, degraded)

        self._report(ProgressPhase.COMPONENTS, len(roles) + len(profiles), total,
                     f"Found {len(roles)} security roles, {len(profiles)} field security profiles")
        security = {
            'security_roles': roles,
            'field_security_profiles': profiles,
            'attribute_masking_rules': masking_rules,
            'column_security_profiles': column_profiles,
        }
        return security, field_security

    async def _solution_distribution(self, inventory: ComponentInventory, collections, degraded):
        if self.scope.scope_type is not ScopeType.SOLUTION:
            return []
        solutions = await self._fetch(
            'solutions',
            lambda: SolutionFetcher(self.client, self.options.batch_size).fetch(self.scope.solution_ids),
            degraded)
        if not solutions:
            return []
        distribution = SolutionDistributionAnalyzer().analyze(
            solutions, collections, inventory.solution_members or None)
        logger.info("Analyzed component distribution across %d solutions", len(distribution))
        return distribution

    async def _fetch(self, category: str, fetch, degraded: list[DegradedCategory]) -> list:
        outcome = await run_fetch(category, CATEGORY_POLICIES[category], fetch)
        if isinstance(outcome, Degraded):
            degraded.append(DegradedCategory(category, str(outcome.error)))
        return unwrap(outcome)

    # ── Result assembly ──────────────────────────────────────────────────

    @staticmethod
    def _summary(blueprints, plugins, flows, rules, classic, process_flows,
                 web_resources, components, security, inventory) -> dict[str, int]:
        return {
            'total_entities': len(blueprints),
            'total_attributes': sum(len(bp.entity.get('Attributes') or []) for bp in blueprints),
            'total_plugins': len(plugins),
            'total_flows': len(flows),
            'total_business_rules': len(rules),
            'total_classic_workflows': len(classic),
            'total_business_process_flows': len(process_flows),
            'total_web_resources': len(web_resources),
            'total_custom_apis': len(components['custom_apis']),
            'total_environment_variables': len(components['environment_variables']),
            'total_connection_references': len(components['connection_references']),
            'total_global_choices': len(components['global_choices']),
            'total_custom_connectors': len(components['custom_connectors']),
            'total_canvas_apps': len(inventory.canvas_app_ids),
            'total_custom_pages': len(inventory.custom_page_ids),
            'total_security_roles': len(security['security_roles']),
            'total_field_security_profiles': len(security['field_security_profiles']),
            'total_attribute_masking_rules': len(security['attribute_masking_rules']),
            'total_column_security_profiles': len(security['column_security_profiles']),
        }

    @staticmethod
    def _warnings(inventory, blueprints, plugins, flows, rules, classic, web_resources) -> list[str]:
        warnings = []
        if inventory.is_empty():
            warnings.append('No components found in selected scope')
        if not blueprints:
            warnings.append('No entities found in selected scope')
        if not plugins:
            warnings.append('No plugins found')
        if not flows:
            warnings.append('No flows found')
        if not rules:
            warnings.append('No business rules found')
        if classic:
            warnings.append(
                f"{len(classic)} classic workflow(s) detected - "
                f"migration to Power Automate recommended"
            )
        if not web_resources:
            warnings.append('No web resources found')
        return warnings

    # ── Progress ─────────────────────────────────────────────────────────

    def _report(self, phase: ProgressPhase, current: int, total: int,
                message: str, entity_name: str = '') -> None:
        if phase is ProgressPhase.SCHEMA and entity_name:
            logger.debug(message)
        else:
            logger.info("[%s] %s", phase.value, message)

        callback = self.options.on_progress
        if callback is None:
            return
        try:
            callback(ProgressSnapshot(phase, current, total, entity_name, message))
        except Exception as e:
            logger.warning("Progress callback raised: %s", e)
