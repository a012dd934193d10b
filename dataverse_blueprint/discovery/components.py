"""Fetchers for custom APIs, environment variables, connection references,
global choices, and custom connectors."""

import json
from typing import Any

from dataverse_blueprint.discovery.base_fetcher import BaseFetcher
from dataverse_blueprint.domain.components import (
    ChoiceOption, ConnectionReference, CustomAPI, CustomAPIParameter, CustomConnector,
    EnvironmentVariable, GlobalChoice,
)
from dataverse_blueprint.domain.constants import (
    CONNECTOR_NAME_RE, CONNECTOR_TYPE_NAMES, CUSTOM_API_BINDING_TYPES,
    CUSTOM_API_PARAMETER_TYPES, CUSTOM_API_STEP_TYPES, ENVIRONMENT_VARIABLE_TYPES,
)
from dataverse_blueprint.domain.enums import RecordTable
from dataverse_blueprint.utils.ids import normalize_id


def _group_by_parent(rows: list[dict[str, Any]], column: str) -> dict[str, list[dict[str, Any]]]:
    grouped: dict[str, list[dict[str, Any]]] = {}
    for row in rows:
        grouped.setdefault(normalize_id(row.get(column)), []).append(row)
    return grouped


def _json_value(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return None
    return value


# ── Custom APIs ──────────────────────────────────────────────────────────

class CustomAPIFetcher(BaseFetcher):
    table = RecordTable.CUSTOM_APIS

    async def build(self, rows):
        api_ids = [r.get('customapiid') for r in rows]
        requests = _group_by_parent(
            await self.fetch_rows(RecordTable.CUSTOM_API_REQUEST_PARAMETERS, api_ids),
            '_customapiid_value',
        )
        responses = _group_by_parent(
            await self.fetch_rows(RecordTable.CUSTOM_API_RESPONSE_PROPERTIES, api_ids),
            '_customapiid_value',
        )
        apis = []
        for row in rows:
            api = self.map_record(row)
            key = normalize_id(api.id)
            api.request_parameters = [
                self._parameter(p, 'customapirequestparameterid') for p in requests.get(key, [])
            ]
            api.response_properties = [
                self._parameter(p, 'customapiresponsepropertyid') for p in responses.get(key, [])
            ]
            apis.append(api)
        return apis

    def map_record(self, row) -> CustomAPI:
        return CustomAPI(
            id=row.get('customapiid', ''),
            unique_name=row.get('uniquename', ''),
            display_name=row.get('displayname') or row.get('uniquename', ''),
            binding_type=CUSTOM_API_BINDING_TYPES.get(row.get('bindingtype'), 'Global'),
            bound_entity=row.get('boundentitylogicalname'),
            is_function=bool(row.get('isfunction')),
            is_private=bool(row.get('isprivate')),
            allowed_step_type=CUSTOM_API_STEP_TYPES.get(
                row.get('allowedcustomprocessingsteptype'), 'None'),
            execute_privilege=row.get('executeprivilegename'),
            description=row.get('description'),
        )

    @staticmethod
    def _parameter(row, id_column: str) -> CustomAPIParameter:
        return CustomAPIParameter(
            id=row.get(id_column, ''),
            unique_name=row.get('uniquename', ''),
            display_name=row.get('displayname') or row.get('uniquename', ''),
            type_name=CUSTOM_API_PARAMETER_TYPES.get(row.get('type'), 'Unknown'),
            is_optional=bool(row.get('isoptional')),
            logical_entity_name=row.get('logicalentityname'),
            description=row.get('description'),
        )


# ── Environment Variables ────────────────────────────────────────────────

class EnvironmentVariableFetcher(BaseFetcher):
    table = RecordTable.ENVIRONMENT_VARIABLE_DEFINITIONS

    async def build(self, rows):
        values = _group_by_parent(
            await self.fetch_rows(
                RecordTable.ENVIRONMENT_VARIABLE_VALUES,
                [r.get('environmentvariabledefinitionid') for r in rows],
            ),
            '_environmentvariabledefinitionid_value',
        )
        variables = []
        for row in rows:
            variable = self.map_record(row)
            current = values.get(normalize_id(variable.id))
            if current:
                variable.current_value = current[0].get('value')
            variables.append(variable)
        return variables

    def map_record(self, row) -> EnvironmentVariable:
        return EnvironmentVariable(
            id=row.get('environmentvariabledefinitionid', ''),
            schema_name=row.get('schemaname', ''),
            display_name=self.label(row.get('displayname')) or row.get('schemaname', ''),
            type_name=ENVIRONMENT_VARIABLE_TYPES.get(row.get('type'), 'String'),
            default_value=row.get('defaultvalue'),
            current_value=None,
            is_required=bool(row.get('isrequired')),
            description=self.label(row.get('description')),
        )


# ── Connection References ────────────────────────────────────────────────

class ConnectionReferenceFetcher(BaseFetcher):
    table = RecordTable.CONNECTION_REFERENCES

    def map_record(self, row) -> ConnectionReference:
        connector_id = row.get('connectorid')
        connector_name = None
        if connector_id:
            m = CONNECTOR_NAME_RE.search(connector_id)
            connector_name = m.group(1) if m else connector_id
        logical_name = row.get('connectionreferencelogicalname', '')
        return ConnectionReference(
            id=row.get('connectionreferenceid', ''),
            logical_name=logical_name,
            display_name=row.get('connectionreferencedisplayname') or logical_name,
            connector_id=connector_id,
            connector_name=connector_name,
            connection_id=row.get('connectionid'),
            description=row.get('description'),
        )


# ── Global Choices ───────────────────────────────────────────────────────

class GlobalChoiceFetcher(BaseFetcher):
    table = RecordTable.GLOBAL_CHOICES

    def map_record(self, row) -> GlobalChoice:
        raw_options = row.get('Options') or (row.get('OptionSet') or {}).get('Options') or []
        options = [
            ChoiceOption(
                value=opt.get('Value'),
                label=self.label(opt.get('Label')) or f"Option {opt.get('Value')}",
                description=self.label(opt.get('Description')),
                color=opt.get('Color'),
            )
            for opt in raw_options
        ]
        return GlobalChoice(
            id=row.get('MetadataId', ''),
            name=row.get('Name', ''),
            display_name=self.label(row.get('DisplayName')) or row.get('Name', ''),
            options=options,
            is_managed=bool(row.get('IsManaged')),
            description=self.label(row.get('Description')),
        )


# ── Custom Connectors ────────────────────────────────────────────────────

class CustomConnectorFetcher(BaseFetcher):
    table = RecordTable.CONNECTORS

    def map_record(self, row) -> CustomConnector:
        capabilities = _json_value(row.get('capabilities'))
        if isinstance(capabilities, dict):
            capabilities = list(capabilities)
        parameters = _json_value(row.get('connectionparameters'))
        return CustomConnector(
            id=row.get('connectorid', ''),
            name=row.get('name', ''),
            display_name=row.get('displayname') or row.get('name', ''),
            connector_type=CONNECTOR_TYPE_NAMES.get(row.get('connectortype', 1), 'Custom'),
            capabilities=list(capabilities) if isinstance(capabilities, list) else [],
            connection_parameters=list(parameters) if isinstance(parameters, dict) else [],
            description=row.get('description'),
        )
