"""Shared constants, lookup tables, and regex patterns.

Centralizes the code-to-name tables and markup patterns used by the
detail fetchers, definition parsers, and analyzers.
"""

import re

from dataverse_blueprint.domain.enums import ActionType, ProgressPhase, RecordTable

# ── Pipeline ─────────────────────────────────────────────────────────────

PHASE_ORDER: tuple[ProgressPhase, ...] = tuple(ProgressPhase)

DEFAULT_SCHEMA_DELAY = 0.1
SCHEMA_DELAY_ENV = 'DATAVERSE_BLUEPRINT_SCHEMA_DELAY'
DEFAULT_BATCH_SIZE = 20

FORMATTED_VALUE = '@OData.Community.Display.V1.FormattedValue'

# Key column each record table is filtered on
RECORD_KEY_COLUMNS: dict[RecordTable, str] = {
    RecordTable.PLUGIN_STEPS: 'sdkmessageprocessingstepid',
    RecordTable.PLUGIN_STEP_IMAGES: '_sdkmessageprocessingstepid_value',
    RecordTable.WORKFLOWS: 'workflowid',
    RecordTable.WEB_RESOURCES: 'webresourceid',
    RecordTable.CUSTOM_APIS: 'customapiid',
    RecordTable.CUSTOM_API_REQUEST_PARAMETERS: '_customapiid_value',
    RecordTable.CUSTOM_API_RESPONSE_PROPERTIES: '_customapiid_value',
    RecordTable.ENVIRONMENT_VARIABLE_DEFINITIONS: 'environmentvariabledefinitionid',
    RecordTable.ENVIRONMENT_VARIABLE_VALUES: '_environmentvariabledefinitionid_value',
    RecordTable.CONNECTION_REFERENCES: 'connectionreferenceid',
    RecordTable.GLOBAL_CHOICES: 'MetadataId',
    RecordTable.CONNECTORS: 'connectorid',
    RecordTable.SOLUTIONS: 'solutionid',
    RecordTable.ROLES: 'roleid',
    RecordTable.ROLE_PRIVILEGES: 'roleid',
    RecordTable.PRIVILEGES: 'privilegeid',
    RecordTable.FIELD_SECURITY_PROFILES: 'fieldsecurityprofileid',
    RecordTable.FIELD_PERMISSIONS: 'entityname',
    RecordTable.ATTRIBUTE_MASKING_RULES: 'attributemaskingruleid',
    RecordTable.COLUMN_SECURITY_PROFILES: 'columnsecurityprofileid',
}

# ── Attribute Filtering ──────────────────────────────────────────────────

# Framework-owned audit, ownership, and versioning columns
SYSTEM_FIELDS = frozenset({
    'createdon', 'createdby', 'createdbyname', 'createdbyyominame',
    'createdonbehalfby', 'createdonbehalfbyname', 'createdonbehalfbyyominame',
    'modifiedon', 'modifiedby', 'modifiedbyname', 'modifiedbyyominame',
    'modifiedonbehalfby', 'modifiedonbehalfbyname', 'modifiedonbehalfbyyominame',
    'ownerid', 'owneridname', 'owneridtype', 'owneridyominame',
    'owningbusinessunit', 'owningbusinessunitname', 'owninguser', 'owningteam',
    'statecode', 'statuscode',
    'importsequencenumber', 'overriddencreatedon',
    'timezoneruleversionnumber', 'utcconversiontimezonecode',
    'versionnumber',
    'exchangerate', 'transactioncurrencyid', 'transactioncurrencyidname',
})

IDENTIFIER_DELIMITERS_RE = re.compile(r'[{}()\s]')

OWNERSHIP_TYPE_NAMES = {
    1: 'User or Team Owned',
    2: 'Team Owned',
    4: 'Organization Owned',
    8: 'Business Owned',
}

# ── Business Rules ───────────────────────────────────────────────────────

OPERATOR_DISPLAY_NAMES = {
    'eq': 'equals',
    'ne': 'not equals',
    'gt': 'greater than',
    'ge': 'greater than or equals',
    'lt': 'less than',
    'le': 'less than or equals',
    'contains': 'contains',
    'not-contains': 'does not contain',
    'begins-with': 'begins with',
    'ends-with': 'ends with',
}

ACTION_TYPES = {
    'show': ActionType.SHOW_FIELD,
    'hide': ActionType.HIDE_FIELD,
    'setvalue': ActionType.SET_VALUE,
    'setrequired': ActionType.SET_REQUIRED,
    'lock': ActionType.LOCK_FIELD,
    'unlock': ActionType.UNLOCK_FIELD,
    'showerror': ActionType.SHOW_ERROR,
}

NO_CONDITIONS_LOGIC = 'No conditions defined'
UNPARSEABLE_CONDITIONS_LOGIC = 'Unable to parse conditions'

RULE_CONDITION_RE = re.compile(
    r'<condition[^>]*attribute="([^"]*)"[^>]*operator="([^"]*)"[^>]*>.*?<value[^>]*>([^<]*)</value>',
    re.I | re.S,
)
RULE_ACTION_RE = re.compile(
    r'<action[^>]*actiontype="([^"]*)"[^>]*>(.*?)</action>',
    re.I | re.S,
)
RULE_PARAMETER_PATTERN = r'<parameter[^>]*name="{name}"[^>]*>([^<]*)</parameter>'
RULE_GROUP_TAG_RE = re.compile(r'<(/?)(and|or)\b[^>]*>', re.I)

# ── Plugin Steps ─────────────────────────────────────────────────────────

STAGE_NAMES = {
    10: 'PreValidation',
    20: 'PreOperation',
    30: 'MainOperation',
    40: 'PostOperation',
    50: 'Asynchronous',
}

MODE_NAMES = {0: 'Synchronous', 1: 'Asynchronous'}

# ── Workflows ────────────────────────────────────────────────────────────

FLOW_STATE_NAMES = {1: 'Active', 2: 'Suspended'}
FLOW_SCOPE_NAMES = {1: 'User', 2: 'Business Unit', 4: 'Organization'}
FLOW_RUN_AS_SCOPES = {0: 'User', 1: 'BusinessUnit', 2: 'Organization'}

RULE_SCOPE_NAMES = {1: 'All Forms', 2: 'Specific Form'}

CLASSIC_TYPE_NAMES = {1: 'Definition', 2: 'Activation', 3: 'Template'}
CLASSIC_MODE_NAMES = {0: 'Background', 1: 'Real-time'}
CLASSIC_SCOPE_NAMES = {
    1: 'User',
    2: 'Business Unit',
    4: 'Parent-Child Business Units',
    8: 'Organization',
}

# Trigger connector kinds
DATAVERSE_TRIGGER_MARKERS = ('commondataservice', 'dataverse')
HTTP_ACTION_TYPES = frozenset({'http', 'openapiconnection', 'apiconnection'})

FLOW_MESSAGE_EVENTS = {
    1: 'Create',
    2: 'Delete',
    3: 'Update',
    4: 'CreateOrUpdate',
}

# ── Business Process Flows ───────────────────────────────────────────────

PROCESS_STAGE_TAG_RE = re.compile(r'<mxswa:Stage\b[^>]*>', re.I)
PROCESS_STEP_TAG_RE = re.compile(r'<mxswa:Step\b[^>]*>', re.I)
XML_ATTRIBUTE_PATTERN = r'\b{name}="([^"]*)"'

# ── Forms ────────────────────────────────────────────────────────────────

FORM_TYPE_NAMES = {2: 'Main', 7: 'Quick Create', 8: 'Quick View', 11: 'Card'}

FORM_LIBRARY_RE = re.compile(r'<Library\s+name="([^"]+)"', re.I)
FORM_EVENT_RE = re.compile(r'<event\b([^>]*?)(?<!/)>(.*?)</event>', re.I | re.S)
FORM_CONTROL_RE = re.compile(r'<control\b([^>]*?)(?<!/)>(.*?)</control>', re.I | re.S)
FORM_HANDLER_RE = re.compile(r'<Handler\b([^>]*?)/?>', re.I)

FORM_EVENT_NAMES = {
    'onload': 'OnLoad',
    'onsave': 'OnSave',
    'onchange': 'OnChange',
    'tabstatechange': 'TabStateChange',
}

# ── Web Resources ────────────────────────────────────────────────────────

WEB_RESOURCE_TYPE_NAMES = {
    1: 'HTML',
    2: 'CSS',
    3: 'JavaScript',
    4: 'XML',
    5: 'PNG',
    6: 'JPG',
    7: 'GIF',
    8: 'XAP',
    9: 'XSL',
    10: 'ICO',
    11: 'SVG',
    12: 'RESX',
}

TEXT_WEB_RESOURCE_TYPES = frozenset({1, 2, 3, 4, 9, 11, 12})
JAVASCRIPT_WEB_RESOURCE_TYPE = 3

XRM_USAGE_RE = re.compile(r'\bXrm\.([A-Za-z]+)')
DEPRECATED_XRM_PAGE_RE = re.compile(r'\bXrm\.Page\b')

FRAMEWORK_MARKERS = {
    'jQuery': (re.compile(r'\bjQuery\b|\$\(|\$\.ajax'),),
    'React': (re.compile(r'\bReact\.|from [\'"]react[\'"]'),),
    'Angular': (re.compile(r'\bangular\.module\b|@angular/'),),
    'Vue': (re.compile(r'\bnew Vue\(|from [\'"]vue[\'"]'),),
    'Knockout': (re.compile(r'\bko\.observable\b'),),
}

FETCH_CALL_RE = re.compile(
    r'fetch\s*\(\s*[\'"`]([^\'"`]+)[\'"`](?:\s*,\s*\{[^}]*method\s*:\s*[\'"`]([^\'"`]+)[\'"`])?',
    re.I,
)
XHR_CALL_RE = re.compile(r'\.open\s*\(\s*[\'"`](\w+)[\'"`]\s*,\s*[\'"`]([^\'"`]+)[\'"`]', re.I)
AXIOS_CALL_RE = re.compile(
    r'axios\s*\.\s*(get|post|put|delete|patch)\s*\(\s*[\'"`]([^\'"`]+)[\'"`]', re.I,
)
JQUERY_AJAX_RE = re.compile(
    r'\$\.ajax\s*\(\s*\{[^}]*url\s*:\s*[\'"`]([^\'"`]+)[\'"`][^}]*(?:method|type)\s*:\s*[\'"`]([^\'"`]+)[\'"`]',
    re.I,
)
URL_LITERAL_RE = re.compile(r'https?://[a-zA-Z0-9\-._~:/?#\[\]@!$&\'()*+,;=%]+')

INTERNAL_URL_MARKERS = ('/api/data/', 'dynamics.com', 'Xrm.WebApi')

# ── External Dependencies ────────────────────────────────────────────────

TRUSTED_DOMAINS = (
    'microsoft.com', 'dynamics.com', 'azure.com', 'office.com', 'office365.com',
    'microsoftonline.com', 'windows.net', 'powerapps.com', 'powerplatform.com',
)

KNOWN_DOMAINS = (
    'stripe.com', 'twilio.com', 'sendgrid.com', 'mailchimp.com', 'slack.com',
    'github.com', 'googleapis.com', 'cloudinary.com', 'auth0.com', 'okta.com',
    'salesforce.com', 'hubspot.com', 'zendesk.com', 'intercom.io',
    'segment.com', 'amplitude.com',
)

# ── Components ───────────────────────────────────────────────────────────

CUSTOM_API_BINDING_TYPES = {0: 'Global', 1: 'Entity', 2: 'EntityCollection'}
CUSTOM_API_STEP_TYPES = {0: 'None', 1: 'AsyncOnly', 2: 'SyncAndAsync'}
CUSTOM_API_PARAMETER_TYPES = {
    0: 'Boolean', 1: 'DateTime', 2: 'Decimal', 3: 'Entity',
    4: 'EntityCollection', 5: 'EntityReference', 6: 'Float', 7: 'Integer',
    8: 'Money', 9: 'Picklist', 10: 'String', 11: 'StringArray', 12: 'Guid',
}

ENVIRONMENT_VARIABLE_TYPES = {
    100000000: 'String',
    100000001: 'Number',
    100000002: 'Boolean',
    100000003: 'JSON',
    100000004: 'DataSource',
}

CONNECTOR_TYPE_NAMES = {0: 'NotSpecified', 1: 'Custom', 2: 'Certified', 3: 'Shared'}
CONNECTOR_NAME_RE = re.compile(r'/apis/([^/]+)')

# ── Security ─────────────────────────────────────────────────────────────

# Access-right bit for each entity privilege type, in display order
PRIVILEGE_TYPES = {
    'Create': 1,
    'Read': 2,
    'Write': 4,
    'Delete': 8,
    'Append': 16,
    'AppendTo': 32,
    'Assign': 64,
    'Share': 128,
}
# AppendTo precedes Append so prvAppendToX is not read as Append on 'tox'
PRIVILEGE_NAME_RE = re.compile(r'^prv(Create|Read|Write|Delete|AppendTo|Append|Assign|Share)(.+)$')

# Depth bits checked widest first
PRIVILEGE_DEPTHS = ((8, 'Global'), (4, 'Deep'), (2, 'Local'), (1, 'Basic'))
ADMIN_PRIVILEGE_TYPES = frozenset({'Create', 'Write', 'Delete'})

# Privilege lookups are small batches; roles can hold hundreds of privileges
PRIVILEGE_BATCH_SIZE = 10

SPECIAL_PRIVILEGE_NAMES = {
    'document_generation': 'prvDocumentGeneration',
    'dynamics365_for_mobile': 'prvMobileOfflineSync',
    'export_to_excel': 'prvExportToExcel',
    'go_offline_in_outlook': 'prvGoOffline',
    'mail_merge': 'prvMailMerge',
    'print': 'prvPrint',
    'sync_to_outlook': 'prvSyncToOutlook',
    'use_dynamics365_app_for_outlook': 'prvUseTabletApp',
    'activate_realtime_processes': 'prvActivateBusinessProcessFlow',
    'execute_workflow_job': 'prvWorkflowExecution',
    'run_flows': 'prvRunFlows',
    'bulk_delete': 'prvBulkDelete',
    'bulk_edit': 'prvBulkEdit',
    'write_rollup_fields': 'prvWriteRollupField',
    'override_created_on_modified_on': 'prvOverrideCreatedOnCreatedBy',
    'activate_business_rules': 'prvActivateBusinessRule',
    'publish_customizations': 'prvPublishCustomization',
    'publish_reports': 'prvPublishReport',
    'use_internet_marketing': 'prvUseInternetMarketing',
    'act_on_behalf_of_another_user': 'prvActOnBehalfOfAnotherUser',
    'approve_knowledge_articles': 'prvApproveKnowledgeArticle',
    'configure_yammer': 'prvConfigureYammer',
    'delegate_access': 'prvDelegateAccess',
    'merge_records': 'prvMerge',
    'turn_on_tracing': 'prvTurnOnTracing',
    'view_audit_history': 'prvReadAuditHistory',
    'view_audit_summary': 'prvReadAuditSummary',
}

# ── Cross-Entity Automation ──────────────────────────────────────────────

# Dataverse connector operation ids and the record operation they perform
DATAVERSE_OPERATIONS = {
    'createrecord': 'Create',
    'updaterecord': 'Update',
    'updateonlyrecord': 'Update',
    'upsertrecord': 'Update',
    'deleterecord': 'Delete',
    'getitem': 'Read',
    'listrecords': 'Read',
}
DATAVERSE_CONNECTOR_MARKER = 'commondataservice'

TRIGGER_EVENT_DESCRIPTIONS = {
    'Create': 'created',
    'Update': 'updated',
    'Delete': 'deleted',
    'CreateOrUpdate': 'created or updated',
}

# Name keywords checked in order; the first operation with a hit wins
PLUGIN_OPERATION_KEYWORDS = (
    ('Create', ('create', 'insert', 'add')),
    ('Update', ('update', 'modify', 'change', 'sync')),
    ('Delete', ('delete', 'remove')),
)

# ── Solution Distribution ────────────────────────────────────────────────

PUBLISHER_PREFIX_RE = re.compile(r'^([a-z]+)_', re.I)

# ── Workflow Migration ───────────────────────────────────────────────────

# feature -> (xaml markers, recommendation, migration path), in detection order
MIGRATION_FEATURES: dict[str, tuple[tuple[str, ...], str, str]] = {
    'Field Updates': (
        ('<UpdateEntity', 'SetState'),
        'Use Update Record action in Power Automate',
        'Direct mapping - straightforward',
    ),
    'Wait Conditions': (
        ('<Wait', 'WaitCondition'),
        'Use Delay Until or Delay actions',
        'Medium complexity - requires date/time logic',
    ),
    'Child Workflows': (
        ('<CallChildWorkflow',),
        'Use nested flows or child flows',
        'Complex - requires restructuring',
    ),
    'Custom Workflow Activities': (
        ('CustomAssemblyActivity', 'CustomWorkflowActivity'),
        'Requires custom connector or plugin conversion',
        'Critical - may need code rewrite',
    ),
    'Send Email': (
        ('SendEmail', '<Email'),
        'Use Send Email action',
        'Direct mapping - straightforward',
    ),
    'Create Record': (
        ('<CreateEntity',),
        'Use Create Record action',
        'Direct mapping - straightforward',
    ),
    'Conditional Logic': (
        ('<Condition', 'ConditionalBranch'),
        'Use Condition actions',
        'Medium complexity - requires expression mapping',
    ),
    'Assign Record': (
        ('<Assign', 'AssignEntity'),
        'Use Assign Record or Update Record (owner field)',
        'Direct mapping - straightforward',
    ),
    'Status Changes': (
        ('SetState', 'SetStatus'),
        'Use Change Status action',
        'Direct mapping - straightforward',
    ),
    'Process/Stage Changes': (
        ('SetProcess', 'SetStage'),
        'Use Change Stage or Switch Process actions',
        'Medium complexity - BPF logic',
    ),
    'Deprecated Features': (
        ('Deprecated', 'Obsolete'),
        'Find alternative approach in Power Automate',
        'Critical - no direct equivalent',
    ),
}

BASIC_OPERATIONS_FEATURE = ('Basic Operations', 'Standard Power Automate actions', 'Low complexity')

MIGRATION_EFFORT = {
    'Critical': '1+ weeks',
    'High': '1-2 days',
    'Medium': '4-8 hours',
    'Low': '1-2 hours',
}

# Feature-name fragments that each add one migration challenge
MIGRATION_CHALLENGES = (
    ('Custom', 'Custom workflow activities require code migration to custom connectors or plugins'),
    ('Wait', 'Wait conditions may behave differently in Power Automate '
             '(timezone handling, duration limits)'),
    ('Child', 'Child workflow logic needs to be reorganized as nested or child flows'),
    ('Stage', 'Business process flow stage changes require careful testing'),
)
DEFAULT_MIGRATION_CHALLENGE = 'Standard workflow - migration should be straightforward'

REAL_TIME_ADVISORY = (
    'Advisory: Real-time workflows cannot be fully migrated to Power Automate cloud flows '
    'due to their synchronous nature. Consider using Dataverse plugins for synchronous '
    'business logic, or migrate to Power Automate with the understanding that flows are '
    'asynchronous and cannot block user operations.'
)
BACKGROUND_ADVISORY = (
    'Advisory: This async workflow can be migrated to Power Automate cloud flows. Classic '
    'workflows are deprecated, and migration is recommended to ensure continued support '
    'and access to modern features.'
)

MIGRATION_DOCS_URL = (
    'https://learn.microsoft.com/en-us/power-automate/migrate-from-classic-workflows'
)
