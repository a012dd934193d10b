"""Value types shared across the generation pipeline."""

import os
from dataclasses import dataclass, field
from typing import Any, Callable

from dataverse_blueprint.domain.components import (
    AttributeMaskingRule, BusinessProcessFlow, BusinessRule, ClassicWorkflow,
    ColumnSecurityProfile, ConnectionReference, CrossEntityLink, CustomAPI,
    CustomConnector, EntityFieldSecurity, EnvironmentVariable, ExternalEndpoint,
    FieldSecurityProfile, Flow, FormDefinition, GlobalChoice, PluginStep,
    SecurityRole, SolutionDistribution, WebResource,
)
from dataverse_blueprint.domain.constants import (
    DEFAULT_BATCH_SIZE, DEFAULT_SCHEMA_DELAY, SCHEMA_DELAY_ENV,
)
from dataverse_blueprint.domain.enums import ProgressPhase, ScopeType
from dataverse_blueprint.domain.errors import ScopeConfigurationError


@dataclass(frozen=True)
class Scope:
    """Boundary of one run: publisher prefixes or explicit solution ids."""

    scope_type: ScopeType | None
    publisher_prefixes: tuple[str, ...] = ()
    solution_ids: tuple[str, ...] = ()
    include_system_entities: bool = True
    exclude_system_fields: bool = False

    @classmethod
    def publisher(cls, prefixes, **flags) -> 'Scope':
        return cls(ScopeType.PUBLISHER, publisher_prefixes=tuple(prefixes), **flags)

    @classmethod
    def solution(cls, solution_ids, **flags) -> 'Scope':
        return cls(ScopeType.SOLUTION, solution_ids=tuple(solution_ids), **flags)

    def validate(self) -> None:
        """Raise ScopeConfigurationError unless the scope is usable."""
        if self.scope_type is ScopeType.PUBLISHER:
            if not self.publisher_prefixes:
                raise ScopeConfigurationError('Publisher scope requires at least one prefix')
        elif self.scope_type is ScopeType.SOLUTION:
            if not self.solution_ids:
                raise ScopeConfigurationError('Solution scope requires at least one solution id')
        else:
            raise ScopeConfigurationError(f"Invalid scope configuration: {self.scope_type!r}")

    @property
    def description(self) -> str:
        if self.scope_type is ScopeType.PUBLISHER:
            return f"Publishers: {', '.join(self.publisher_prefixes)}"
        return f"Solutions: {len(self.solution_ids)} selected"


@dataclass(frozen=True)
class ComponentInventory:
    """Identifiers in scope, partitioned by component category."""

    entity_ids: tuple[str, ...] = ()
    attribute_ids: tuple[str, ...] = ()
    plugin_ids: tuple[str, ...] = ()
    workflow_ids: tuple[str, ...] = ()
    web_resource_ids: tuple[str, ...] = ()
    custom_api_ids: tuple[str, ...] = ()
    environment_variable_ids: tuple[str, ...] = ()
    connection_reference_ids: tuple[str, ...] = ()
    global_choice_ids: tuple[str, ...] = ()
    custom_connector_ids: tuple[str, ...] = ()
    canvas_app_ids: tuple[str, ...] = ()
    custom_page_ids: tuple[str, ...] = ()
    security_role_ids: tuple[str, ...] = ()
    field_security_profile_ids: tuple[str, ...] = ()
    # normalized solution id -> normalized ids of its components
    solution_members: dict[str, frozenset[str]] = field(default_factory=dict, compare=False)

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in self.__dataclass_fields__
                       if name.endswith('_ids'))


@dataclass(frozen=True)
class WorkflowInventory:
    """Generic workflow ids split into typed buckets."""

    flow_ids: tuple[str, ...] = ()
    business_rule_ids: tuple[str, ...] = ()
    classic_workflow_ids: tuple[str, ...] = ()
    business_process_flow_ids: tuple[str, ...] = ()

    def all_ids(self) -> tuple[str, ...]:
        return (self.flow_ids + self.business_rule_ids
                + self.classic_workflow_ids + self.business_process_flow_ids)


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time progress notification."""

    phase: ProgressPhase
    current: int
    total: int
    entity_name: str = ''
    message: str = ''


class CancellationSignal:
    """Cooperative cancellation flag polled by the generator."""

    def __init__(self):
        self._aborted = False

    @property
    def aborted(self) -> bool:
        return self._aborted

    def abort(self) -> None:
        self._aborted = True


def _default_schema_delay() -> float:
    return float(os.getenv(SCHEMA_DELAY_ENV, DEFAULT_SCHEMA_DELAY))


@dataclass
class GeneratorOptions:
    """Options controlling one generation run.

    ``include_system_entities`` overrides the scope flag when set.
    """

    include_system_entities: bool | None = None
    on_progress: Callable[[ProgressSnapshot], Any] | None = None
    signal: CancellationSignal | None = None
    schema_delay: float = field(default_factory=_default_schema_delay)
    batch_size: int = DEFAULT_BATCH_SIZE


@dataclass
class EntityBlueprint:
    """Schema of one entity plus the automation that targets it."""

    entity: dict[str, Any]
    plugins: list[PluginStep] = field(default_factory=list)
    flows: list[Flow] = field(default_factory=list)
    business_rules: list[BusinessRule] = field(default_factory=list)
    forms: list[FormDefinition] = field(default_factory=list)
    field_security: EntityFieldSecurity | None = None
    attached: bool = False

    @property
    def logical_name(self) -> str:
        return self.entity.get('LogicalName', '')

    def attach(self, plugins, flows, business_rules, forms, field_security=None) -> None:
        """Fill the automation lists. Allowed once per blueprint."""
        if self.attached:
            raise RuntimeError(f"Automation already attached to {self.logical_name}")
        self.plugins = list(plugins)
        self.flows = list(flows)
        self.business_rules = list(business_rules)
        self.forms = list(forms)
        self.field_security = field_security
        self.attached = True


@dataclass(frozen=True)
class BlueprintMetadata:
    """Provenance of a generated blueprint."""

    generated_at: str
    environment: str
    scope_type: str
    scope_description: str
    entity_count: int


@dataclass(frozen=True)
class DegradedCategory:
    """A peripheral category that was replaced by an empty list."""

    category: str
    error: str


@dataclass(frozen=True)
class BlueprintResult:
    """Everything one run discovered, fetched, and cross-referenced.

    The freeze is shallow: fields cannot be reassigned, but the lists and
    dicts they hold are the live collections built during the run. Copy
    them before mutating if the result is shared.
    """

    metadata: BlueprintMetadata
    summary: dict[str, int]
    entities: list[EntityBlueprint]
    plugins: list[PluginStep]
    plugins_by_entity: dict[str, list[PluginStep]]
    flows: list[Flow]
    flows_by_entity: dict[str, list[Flow]]
    business_rules: list[BusinessRule]
    business_rules_by_entity: dict[str, list[BusinessRule]]
    classic_workflows: list[ClassicWorkflow]
    classic_workflows_by_entity: dict[str, list[ClassicWorkflow]]
    business_process_flows: list[BusinessProcessFlow]
    business_process_flows_by_entity: dict[str, list[BusinessProcessFlow]]
    web_resources: list[WebResource]
    web_resources_by_type: dict[str, list[WebResource]]
    forms: list[FormDefinition]
    forms_by_entity: dict[str, list[FormDefinition]]
    custom_apis: list[CustomAPI] = field(default_factory=list)
    environment_variables: list[EnvironmentVariable] = field(default_factory=list)
    connection_references: list[ConnectionReference] = field(default_factory=list)
    global_choices: list[GlobalChoice] = field(default_factory=list)
    custom_connectors: list[CustomConnector] = field(default_factory=list)
    external_endpoints: list[ExternalEndpoint] = field(default_factory=list)
    security_roles: list[SecurityRole] = field(default_factory=list)
    field_security_profiles: list[FieldSecurityProfile] = field(default_factory=list)
    attribute_masking_rules: list[AttributeMaskingRule] = field(default_factory=list)
    column_security_profiles: list[ColumnSecurityProfile] = field(default_factory=list)
    cross_entity_links: list[CrossEntityLink] = field(default_factory=list)
    solution_distribution: list[SolutionDistribution] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    degraded: list[DegradedCategory] = field(default_factory=list)
