"""Component records produced by the detail fetchers and parsers."""

from dataclasses import dataclass, field
from typing import Any

from dataverse_blueprint.domain.enums import (
    ActionType, Complexity, Confidence, ExecutionContext, RiskLevel,
)


# ── Triggers ─────────────────────────────────────────────────────────────

@dataclass
class ImageDefinition:
    """A pre- or post-image registered on a plugin step."""

    id: str
    name: str
    image_type: str
    attributes: list[str] = field(default_factory=list)
    message_property_name: str | None = None


@dataclass
class PluginStep:
    """A record-change trigger registered in the event pipeline."""

    id: str
    name: str
    stage: int
    stage_name: str
    mode: int
    mode_name: str
    rank: int
    message: str
    entity: str
    assembly_name: str
    type_name: str
    filtering_attributes: list[str] = field(default_factory=list)
    description: str | None = None
    custom_configuration: str | None = None
    impersonating_user: str | None = None
    pre_image: ImageDefinition | None = None
    post_image: ImageDefinition | None = None


# ── Flows ────────────────────────────────────────────────────────────────

@dataclass
class ExternalCall:
    """An outbound HTTP call detected in a flow or script."""

    url: str
    domain: str
    method: str | None
    action_name: str
    confidence: Confidence


@dataclass
class DataverseAction:
    """A flow action that reads or writes rows through the Dataverse connector."""

    action_name: str
    operation: str
    target_entity: str


@dataclass
class FlowDefinition:
    """Decoded flow client data."""

    trigger_type: str = 'Other'
    trigger_event: str = 'Unknown'
    trigger_conditions: str | None = None
    scope_type: str | None = None
    action_count: int = 0
    external_calls: list[ExternalCall] = field(default_factory=list)
    connection_references: list[str] = field(default_factory=list)
    dataverse_actions: list[DataverseAction] = field(default_factory=list)
    parse_error: str | None = None


@dataclass
class Flow:
    """A modern cloud flow."""

    id: str
    name: str
    description: str | None
    state: str
    entity: str | None
    scope_name: str
    owner: str
    modified_on: str | None
    definition: FlowDefinition


# ── Business Rules ───────────────────────────────────────────────────────

@dataclass
class Condition:
    """One comparison clause of a business rule."""

    field: str
    operator: str
    value: str
    logic_operator: str = 'AND'
    raw_operator: str = ''


@dataclass
class Action:
    """One action clause of a business rule."""

    type: ActionType
    field: str | None = None
    value: str | None = None
    message: str | None = None


@dataclass
class BusinessRuleDefinition:
    """Structured form of a business rule's markup."""

    conditions: list[Condition] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    execution_context: ExecutionContext = ExecutionContext.CLIENT
    condition_logic: str = ''
    parse_error: str | None = None


@dataclass
class BusinessRule:
    """A declarative condition/action rule."""

    id: str
    name: str
    description: str | None
    state: str
    scope: str
    scope_name: str
    entity: str
    owner: str
    modified_on: str | None
    definition: BusinessRuleDefinition


# ── Legacy Workflows ─────────────────────────────────────────────────────

@dataclass
class MigrationFeature:
    """A workflow capability that needs a counterpart after migration."""

    feature: str
    recommendation: str
    migration_path: str


@dataclass
class MigrationRecommendation:
    """Migration guidance for one legacy workflow."""

    complexity: Complexity
    effort: str
    approach: str
    challenges: list[str] = field(default_factory=list)
    features: list[MigrationFeature] = field(default_factory=list)
    advisory: str = ''
    documentation_link: str = ''


@dataclass
class ClassicWorkflow:
    """A legacy workflow record."""

    id: str
    name: str
    description: str | None
    category: int
    type_name: str
    mode: int
    mode_name: str
    scope_name: str
    entity: str
    state: str
    trigger_on_create: bool = False
    trigger_on_update: bool = False
    trigger_on_delete: bool = False
    on_demand: bool = False
    owner: str = 'Unknown'
    modified_on: str | None = None
    xaml: str = ''
    migration: MigrationRecommendation | None = None


# ── Guided Processes ─────────────────────────────────────────────────────

@dataclass
class ProcessStage:
    """One stage of a business process flow."""

    id: str
    name: str
    entity: str


@dataclass
class ProcessDefinition:
    """Structured form of a business process flow's markup."""

    stages: list[ProcessStage] = field(default_factory=list)
    total_steps: int = 0
    entities: list[str] = field(default_factory=list)
    cross_entity_flow: bool = False
    parse_error: str | None = None


@dataclass
class BusinessProcessFlow:
    """A multi-stage guided process."""

    id: str
    name: str
    description: str | None
    primary_entity: str
    state: str
    unique_name: str | None
    owner: str
    modified_on: str | None
    definition: ProcessDefinition


# ── Files ────────────────────────────────────────────────────────────────

@dataclass
class ScriptAnalysis:
    """Static analysis of a JavaScript file."""

    lines_of_code: int = 0
    xrm_namespaces: list[str] = field(default_factory=list)
    uses_deprecated_xrm_page: bool = False
    frameworks: list[str] = field(default_factory=list)
    external_calls: list[ExternalCall] = field(default_factory=list)
    complexity: Complexity = Complexity.LOW
    parse_error: str | None = None


@dataclass
class WebResource:
    """A web resource file."""

    id: str
    name: str
    display_name: str
    type: int
    type_name: str
    content: str | None
    content_size: int
    description: str | None = None
    analysis: ScriptAnalysis | None = None
    modified_on: str | None = None


# ── Forms ────────────────────────────────────────────────────────────────

@dataclass
class FormEventHandler:
    """A script function bound to a form event."""

    event: str
    library_name: str
    function_name: str
    enabled: bool = True
    attribute: str | None = None
    parameters: str | None = None


@dataclass
class FormDefinition:
    """A form with its script libraries and event handlers."""

    id: str
    name: str
    type: int
    type_name: str
    entity: str
    libraries: list[str] = field(default_factory=list)
    event_handlers: list[FormEventHandler] = field(default_factory=list)


# ── Other Components ─────────────────────────────────────────────────────

@dataclass
class CustomAPIParameter:
    """A request parameter or response property of a custom API."""

    id: str
    unique_name: str
    display_name: str
    type_name: str
    is_optional: bool = False
    logical_entity_name: str | None = None
    description: str | None = None


@dataclass
class CustomAPI:
    """A custom message exposed through the Web API."""

    id: str
    unique_name: str
    display_name: str
    binding_type: str
    bound_entity: str | None
    is_function: bool
    is_private: bool
    allowed_step_type: str
    execute_privilege: str | None = None
    description: str | None = None
    request_parameters: list[CustomAPIParameter] = field(default_factory=list)
    response_properties: list[CustomAPIParameter] = field(default_factory=list)


@dataclass
class EnvironmentVariable:
    """An environment variable definition with its current value."""

    id: str
    schema_name: str
    display_name: str
    type_name: str
    default_value: str | None
    current_value: str | None
    is_required: bool = False
    description: str | None = None


@dataclass
class ConnectionReference:
    """A solution-aware pointer to a connection."""

    id: str
    logical_name: str
    display_name: str
    connector_id: str | None
    connector_name: str | None
    connection_id: str | None
    description: str | None = None


@dataclass
class ChoiceOption:
    """One option of a global choice."""

    value: int
    label: str
    description: str | None = None
    color: str | None = None


@dataclass
class GlobalChoice:
    """A global option set."""

    id: str
    name: str
    display_name: str
    options: list[ChoiceOption] = field(default_factory=list)
    is_managed: bool = False
    description: str | None = None


@dataclass
class CustomConnector:
    """A custom connector definition."""

    id: str
    name: str
    display_name: str
    connector_type: str
    capabilities: list[str] = field(default_factory=list)
    connection_parameters: list[str] = field(default_factory=list)
    description: str | None = None


# ── Security ─────────────────────────────────────────────────────────────

@dataclass
class PrivilegeDetail:
    """One entity privilege granted by a role, at its widest depth."""

    type: str
    depth: str
    depth_value: int


@dataclass
class EntityPermission:
    """Privileges a role grants on one entity."""

    entity_logical_name: str
    privileges: list[PrivilegeDetail] = field(default_factory=list)


@dataclass
class SecurityRole:
    """A security role with its entity and miscellaneous privileges."""

    id: str
    name: str
    business_unit_id: str | None
    business_unit_name: str
    description: str | None = None
    is_customizable: bool = True
    is_managed: bool = False
    component_state: int = 0
    entity_permissions: list[EntityPermission] = field(default_factory=list)
    total_entities: int = 0
    has_system_admin_privileges: bool = False
    special_permissions: dict[str, bool] = field(default_factory=dict)


@dataclass
class FieldSecurityProfile:
    """A field security profile."""

    id: str
    name: str
    description: str | None = None


@dataclass
class FieldProfilePermission:
    """What one profile may do with a secured column."""

    profile_id: str
    profile_name: str
    can_read: bool
    can_create: bool
    can_update: bool


@dataclass
class SecuredField:
    """A secured column and the profiles that grant access to it."""

    attribute_logical_name: str
    profiles: list[FieldProfilePermission] = field(default_factory=list)


@dataclass
class EntityFieldSecurity:
    """Secured columns of one entity."""

    entity_logical_name: str
    secured_fields: list[SecuredField] = field(default_factory=list)


@dataclass
class AttributeMaskingRule:
    """A masking rule assigned to a column."""

    id: str
    entity_name: str
    attribute_logical_name: str
    unique_name: str
    masking_rule_name: str
    is_managed: bool = False


@dataclass
class ColumnSecurityProfile:
    """A column-level security profile."""

    id: str
    name: str
    description: str | None = None
    is_managed: bool = False
    organization_id: str | None = None


# ── External Dependencies ────────────────────────────────────────────────

@dataclass
class ExternalEndpoint:
    """An external domain called from flows or scripts."""

    domain: str
    url: str
    protocol: str
    risk_level: RiskLevel = RiskLevel.UNKNOWN
    call_count: int = 0
    detected_in: list[dict[str, Any]] = field(default_factory=list)


# ── Cross-Entity Automation ──────────────────────────────────────────────

@dataclass
class CrossEntityLink:
    """Automation on one entity that touches rows of another."""

    source_entity: str
    source_entity_display_name: str
    target_entity: str
    target_entity_display_name: str
    automation_type: str
    automation_name: str
    automation_id: str
    operation: str
    description: str
    is_asynchronous: bool


# ── Solutions ────────────────────────────────────────────────────────────

@dataclass
class SolutionInfo:
    """A solution and its publisher."""

    id: str
    unique_name: str
    friendly_name: str
    version: str | None
    is_managed: bool
    publisher_name: str
    publisher_unique_name: str
    publisher_prefix: str | None = None


@dataclass
class SharedComponent:
    """A component that belongs to more than one selected solution."""

    component_id: str
    component_type: str
    solutions: list[str] = field(default_factory=list)


@dataclass
class SolutionDependency:
    """Components of one solution that reference another solution."""

    depends_on_solution: str
    reason: str
    component_references: list[str] = field(default_factory=list)


@dataclass
class SolutionDistribution:
    """Per-solution component counts, shared components and dependencies."""

    solution_name: str
    solution_id: str
    publisher: str
    version: str | None
    is_managed: bool
    component_counts: dict[str, int] = field(default_factory=dict)
    shared_components: list[SharedComponent] = field(default_factory=list)
    dependencies: list[SolutionDependency] = field(default_factory=list)
