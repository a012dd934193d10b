"""Domain enums for the blueprint generator."""
from enum import Enum, IntEnum


class ScopeType(Enum):
    """How the set of in-play components is selected."""
    PUBLISHER = "publisher"
    SOLUTION = "solution"


class ComponentType(IntEnum):
    """Solution component type codes."""
    ENTITY = 1
    ATTRIBUTE = 2
    OPTION_SET = 9
    SECURITY_ROLE = 20
    WORKFLOW = 29
    WEB_RESOURCE = 61
    FIELD_SECURITY_PROFILE = 70
    SDK_MESSAGE_PROCESSING_STEP = 92
    CANVAS_APP = 300
    CONNECTION_REFERENCE = 371
    CONNECTOR = 372
    ENVIRONMENT_VARIABLE_DEFINITION = 380
    CUSTOM_PAGE = 10004
    CUSTOM_API = 10076


class WorkflowCategory(IntEnum):
    """Category discriminator on workflow records."""
    CLASSIC_WORKFLOW = 0
    DIALOG = 1
    BUSINESS_RULE = 2
    ACTION = 3
    BUSINESS_PROCESS_FLOW = 4
    MODERN_FLOW = 5
    DESKTOP_FLOW = 6


class ProgressPhase(Enum):
    """Ordered phases of one generation run."""
    DISCOVERING = "discovering"
    SCHEMA = "schema"
    TRIGGERS = "triggers"
    FLOWS = "flows"
    RULES = "rules"
    LEGACY_WORKFLOWS = "legacy-workflows"
    PROCESSES = "processes"
    FILES = "files"
    COMPONENTS = "components"
    FORMS = "forms"
    COMPLETE = "complete"


class CategoryPolicy(Enum):
    """Failure policy for a fetch category."""
    CORE = "core"
    PERIPHERAL = "peripheral"


class ExecutionContext(Enum):
    """Where a business rule executes."""
    CLIENT = "Client"
    SERVER = "Server"
    BOTH = "Both"


class ActionType(Enum):
    """Business rule action kinds."""
    SHOW_FIELD = "ShowField"
    HIDE_FIELD = "HideField"
    SET_VALUE = "SetValue"
    SET_REQUIRED = "SetRequired"
    LOCK_FIELD = "LockField"
    UNLOCK_FIELD = "UnlockField"
    SHOW_ERROR = "ShowError"

    @property
    def is_visual(self) -> bool:
        return self in _VISUAL_ACTIONS


_VISUAL_ACTIONS = frozenset({
    ActionType.SHOW_FIELD, ActionType.HIDE_FIELD,
    ActionType.LOCK_FIELD, ActionType.UNLOCK_FIELD,
})


class RecordTable(Enum):
    """Tables the detail fetchers read from the metadata client."""
    PLUGIN_STEPS = "sdkmessageprocessingsteps"
    PLUGIN_STEP_IMAGES = "sdkmessageprocessingstepimages"
    WORKFLOWS = "workflows"
    WEB_RESOURCES = "webresourceset"
    CUSTOM_APIS = "customapis"
    CUSTOM_API_REQUEST_PARAMETERS = "customapirequestparameters"
    CUSTOM_API_RESPONSE_PROPERTIES = "customapiresponseproperties"
    ENVIRONMENT_VARIABLE_DEFINITIONS = "environmentvariabledefinitions"
    ENVIRONMENT_VARIABLE_VALUES = "environmentvariablevalues"
    CONNECTION_REFERENCES = "connectionreferences"
    GLOBAL_CHOICES = "GlobalOptionSetDefinitions"
    CONNECTORS = "connectors"
    SOLUTIONS = "solutions"
    ROLES = "roles"
    ROLE_PRIVILEGES = "roleprivilegescollection"
    PRIVILEGES = "privileges"
    FIELD_SECURITY_PROFILES = "fieldsecurityprofiles"
    FIELD_PERMISSIONS = "fieldpermissions"
    ATTRIBUTE_MASKING_RULES = "attributemaskingrules"
    COLUMN_SECURITY_PROFILES = "columnsecurityprofiles"


class Complexity(Enum):
    """Migration or script complexity grade."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class Confidence(Enum):
    """Confidence of a detected external call."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class RiskLevel(Enum):
    """Trust grade of an external domain."""
    TRUSTED = "Trusted"
    KNOWN = "Known"
    UNKNOWN = "Unknown"
