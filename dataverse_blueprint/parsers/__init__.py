"""Definition parsers for embedded markup, JSON and script content."""

from dataverse_blueprint.parsers.business_rule_parser import BusinessRuleParser
from dataverse_blueprint.parsers.flow_definition_parser import FlowDefinitionParser
from dataverse_blueprint.parsers.process_flow_parser import ProcessFlowParser
from dataverse_blueprint.parsers.form_parser import FormParser
from dataverse_blueprint.parsers.javascript_parser import JavaScriptParser

__all__ = [
    'BusinessRuleParser',
    'FlowDefinitionParser',
    'ProcessFlowParser',
    'FormParser',
    'JavaScriptParser',
]
