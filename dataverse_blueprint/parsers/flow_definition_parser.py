"""Parser for cloud flow client data.

A flow's ``clientdata`` column holds the Logic Apps style definition as
JSON: ``properties.definition.triggers`` and ``properties.definition.actions``.
"""

import json
import logging
from typing import Any

from dataverse_blueprint.domain.components import DataverseAction, ExternalCall, FlowDefinition
from dataverse_blueprint.domain.constants import (
    DATAVERSE_CONNECTOR_MARKER, DATAVERSE_OPERATIONS, DATAVERSE_TRIGGER_MARKERS,
    FLOW_MESSAGE_EVENTS, FLOW_RUN_AS_SCOPES, HTTP_ACTION_TYPES,
)
from dataverse_blueprint.domain.enums import Confidence
from dataverse_blueprint.parsers.urls import extract_domain

logger = logging.getLogger(__name__)


class FlowDefinitionParser:
    """Extracts trigger, action and connection details from client data."""

    def parse(self, clientdata: str | None) -> FlowDefinition:
        if not clientdata:
            return FlowDefinition()

        try:
            data = json.loads(clientdata)
            properties = data.get('properties') or {}
            definition = properties.get('definition') or {}
            result = FlowDefinition(scope_type=self._scope_type(properties.get('runAs')))
            self._read_trigger(definition.get('triggers') or {}, result)
            self._read_actions(definition.get('actions') or {}, result)
            return result
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Failed to parse flow client data: %s", e)
            return FlowDefinition(parse_error=str(e))

    def _read_trigger(self, triggers: dict[str, Any], result: FlowDefinition) -> None:
        if not triggers:
            return
        trigger = next(iter(triggers.values())) or {}
        kind = str(trigger.get('type', '')).lower()
        inputs = trigger.get('inputs') or {}
        parameters = inputs.get('parameters') or {}
        api = str((inputs.get('host') or {}).get('apiId', '')).lower()

        if (any(m in kind or m in api for m in DATAVERSE_TRIGGER_MARKERS)
                or 'subscriptionRequest/message' in parameters):
            result.trigger_type = 'Dataverse'
            result.trigger_event = self._dataverse_event(kind, inputs, parameters)
            result.trigger_conditions = (
                inputs.get('filterExpression')
                or parameters.get('subscriptionRequest/filterexpression')
            )
        elif 'manual' in kind or 'request' in kind:
            result.trigger_type = 'Manual'
            result.trigger_event = 'Manual'
        elif 'recurrence' in kind or 'schedule' in kind:
            result.trigger_type = 'Scheduled'
            result.trigger_event = 'Scheduled'

    @staticmethod
    def _dataverse_event(kind: str, inputs: dict, parameters: dict) -> str:
        message = parameters.get('subscriptionRequest/message')
        if message is not None:
            try:
                return FLOW_MESSAGE_EVENTS.get(int(message), 'Unknown')
            except (TypeError, ValueError):
                return 'Unknown'
        if 'create' in kind:
            return 'CreateOrUpdate' if inputs.get('message') == 'Update' else 'Create'
        if 'update' in kind:
            return 'Update'
        if 'delete' in kind:
            return 'Delete'
        return 'Unknown'

    def _read_actions(self, actions: dict[str, Any], result: FlowDefinition) -> None:
        references: dict[str, None] = dict.fromkeys(result.connection_references)
        for name, action in self._walk(actions):
            result.action_count += 1
            inputs = action.get('inputs') or {}
            if not isinstance(inputs, dict):
                continue
            call = self._external_call(name, action, inputs)
            if call:
                result.external_calls.append(call)
            dataverse = self._dataverse_action(name, inputs)
            if dataverse:
                result.dataverse_actions.append(dataverse)
            connection = (inputs.get('host') or {}).get('connectionName')
            if connection:
                references.setdefault(connection, None)
        result.connection_references = list(references)

    def _walk(self, actions: dict[str, Any]):
        """Yield (name, action) for every action, including nested branches."""
        for name, action in actions.items():
            if not isinstance(action, dict):
                continue
            yield name, action
            yield from self._walk(action.get('actions') or {})
            yield from self._walk((action.get('else') or {}).get('actions') or {})
            for case in (action.get('cases') or {}).values():
                yield from self._walk(case.get('actions') or {})
            yield from self._walk((action.get('default') or {}).get('actions') or {})

    @staticmethod
    def _external_call(name: str, action: dict, inputs: dict) -> ExternalCall | None:
        action_type = str(action.get('type', ''))
        if action_type.lower() not in HTTP_ACTION_TYPES:
            return None
        url = inputs.get('uri') or inputs.get('path')
        if not url or not isinstance(url, str):
            return None
        if action_type.lower() == 'http' and inputs.get('uri'):
            confidence = Confidence.HIGH
        elif inputs.get('path'):
            confidence = Confidence.MEDIUM
        else:
            confidence = Confidence.LOW
        return ExternalCall(
            url=url,
            domain=extract_domain(url),
            method=inputs.get('method'),
            action_name=name,
            confidence=confidence,
        )

    @staticmethod
    def _dataverse_action(name: str, inputs: dict) -> DataverseAction | None:
        host = inputs.get('host') or {}
        connector = f"{host.get('apiId', '')} {host.get('connectionName', '')}".lower()
        if DATAVERSE_CONNECTOR_MARKER not in connector:
            return None
        operation = DATAVERSE_OPERATIONS.get(str(host.get('operationId', '')).lower())
        entity = (inputs.get('parameters') or {}).get('entityName')
        if not operation or not entity or not isinstance(entity, str):
            return None
        return DataverseAction(action_name=name, operation=operation, target_entity=entity)

    @staticmethod
    def _scope_type(run_as) -> str | None:
        if run_as is None or run_as == '':
            return None
        try:
            return FLOW_RUN_AS_SCOPES.get(int(run_as))
        except (TypeError, ValueError):
            return None
