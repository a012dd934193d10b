"""Tests for the detail fetchers."""

import pytest

from dataverse_blueprint.client.snapshot import SnapshotClient
from dataverse_blueprint.discovery.business_rules import BusinessRuleFetcher
from dataverse_blueprint.discovery.classic_workflows import ClassicWorkflowFetcher
from dataverse_blueprint.discovery.components import (
    ConnectionReferenceFetcher, CustomAPIFetcher, CustomConnectorFetcher,
    EnvironmentVariableFetcher, GlobalChoiceFetcher,
)
from dataverse_blueprint.discovery.flows import FlowFetcher
from dataverse_blueprint.discovery.forms import FormFetcher
from dataverse_blueprint.discovery.plugins import PluginFetcher, split_attributes
from dataverse_blueprint.discovery.process_flows import ProcessFlowFetcher
from dataverse_blueprint.discovery.web_resources import WebResourceFetcher, decode_content
from dataverse_blueprint.domain.enums import Complexity, ExecutionContext
from tests.conftest import (
    ACCOUNT_SCRIPT, BPF_ID, CHOICE_ID, CLASSIC_ID, CONN_REF_ID, CONNECTOR_ID,
    CUSTOM_API_ID, DIALOG_ID, ENV_VAR_ID, FLOW_ID, MISSING_WORKFLOW_ID,
    PLUGIN_POST_ID, PLUGIN_PREVAL_1_ID, RULE_ID, WEB_RESOURCE_ID,
)

ALL_WORKFLOWS = [FLOW_ID, RULE_ID, CLASSIC_ID, BPF_ID, DIALOG_ID, MISSING_WORKFLOW_ID]


class TestPluginFetcher:
    """Tests for PluginFetcher."""

    @pytest.mark.asyncio
    async def test_maps_steps(self, snapshot_client):
        steps = await PluginFetcher(snapshot_client).fetch([PLUGIN_POST_ID, PLUGIN_PREVAL_1_ID])
        post = next(s for s in steps if s.id == PLUGIN_POST_ID)
        assert post.stage_name == 'PostOperation'
        assert post.mode_name == 'Synchronous'
        assert post.message == 'Update'
        assert post.entity == 'account'
        assert post.type_name == 'Contoso.Plugins.AccountSync'
        assert post.filtering_attributes == ['name', 'revenue']

    @pytest.mark.asyncio
    async def test_attaches_images(self, snapshot_client):
        steps = await PluginFetcher(snapshot_client).fetch([PLUGIN_POST_ID, PLUGIN_PREVAL_1_ID])
        post = next(s for s in steps if s.id == PLUGIN_POST_ID)
        assert post.pre_image.attributes == ['name', 'revenue']
        assert post.post_image is None
        other = next(s for s in steps if s.id == PLUGIN_PREVAL_1_ID)
        assert other.pre_image is None

    @pytest.mark.asyncio
    async def test_image_failure_keeps_steps(self, snapshot_client, monkeypatch):
        fetcher = PluginFetcher(snapshot_client)
        original = fetcher.fetch_rows

        async def fetch_rows(table, ids):
            if table.value == 'sdkmessageprocessingstepimages':
                raise RuntimeError('images offline')
            return await original(table, ids)

        monkeypatch.setattr(fetcher, 'fetch_rows', fetch_rows)
        steps = await fetcher.fetch([PLUGIN_POST_ID])
        assert len(steps) == 1
        assert steps[0].pre_image is None

    @pytest.mark.asyncio
    async def test_batches_requests(self, snapshot_client):
        steps = await PluginFetcher(snapshot_client, batch_size=1).fetch(
            [PLUGIN_POST_ID, PLUGIN_PREVAL_1_ID])
        assert len(steps) == 2

    @pytest.mark.asyncio
    async def test_no_ids(self, snapshot_client):
        assert await PluginFetcher(snapshot_client).fetch([]) == []

    def test_split_attributes(self):
        assert split_attributes(' a, ,b ') == ['a', 'b']
        assert split_attributes(None) == []


class TestWorkflowFetchers:
    """Tests for fetchers over the workflow table."""

    @pytest.mark.asyncio
    async def test_flow_fetcher_keeps_only_flows(self, snapshot_client):
        flows = await FlowFetcher(snapshot_client).fetch(ALL_WORKFLOWS)
        assert [f.id for f in flows] == [FLOW_ID]
        assert flows[0].state == 'Active'
        assert flows[0].scope_name == 'Organization'
        assert flows[0].owner == 'Dana Admin'
        assert flows[0].definition.trigger_type == 'Dataverse'

    @pytest.mark.asyncio
    async def test_business_rule_fetcher(self, snapshot_client):
        rules = await BusinessRuleFetcher(snapshot_client).fetch(ALL_WORKFLOWS)
        assert [r.id for r in rules] == [RULE_ID]
        assert rules[0].scope == 'AllForms'
        assert rules[0].definition.execution_context is ExecutionContext.BOTH

    @pytest.mark.asyncio
    async def test_classic_fetcher_takes_non_modern_categories(self, snapshot_client):
        workflows = await ClassicWorkflowFetcher(snapshot_client).fetch(ALL_WORKFLOWS)
        assert sorted(w.id for w in workflows) == sorted([CLASSIC_ID, DIALOG_ID])

    @pytest.mark.asyncio
    async def test_classic_fetcher_adds_migration(self, snapshot_client):
        workflows = await ClassicWorkflowFetcher(snapshot_client).fetch([CLASSIC_ID, DIALOG_ID])
        classic = next(w for w in workflows if w.id == CLASSIC_ID)
        assert classic.mode_name == 'Background'
        assert classic.migration.complexity is Complexity.LOW
        assert {f.feature for f in classic.migration.features} == {'Field Updates', 'Send Email'}
        dialog = next(w for w in workflows if w.id == DIALOG_ID)
        assert [f.feature for f in dialog.migration.features] == ['Basic Operations']
        assert dialog.migration.complexity is Complexity.LOW

    @pytest.mark.asyncio
    async def test_string_categories_match_their_bucket(self, snapshot_data):
        for row in snapshot_data['workflows']:
            row['category'] = str(row['category'])
        client = SnapshotClient(snapshot_data)

        assert [f.id for f in await FlowFetcher(client).fetch(ALL_WORKFLOWS)] == [FLOW_ID]
        assert [r.id for r in await BusinessRuleFetcher(client).fetch(ALL_WORKFLOWS)] == [RULE_ID]
        assert [p.id for p in await ProcessFlowFetcher(client).fetch(ALL_WORKFLOWS)] == [BPF_ID]
        classic = await ClassicWorkflowFetcher(client).fetch(ALL_WORKFLOWS)
        assert sorted(w.id for w in classic) == sorted([CLASSIC_ID, DIALOG_ID])
        assert {w.category for w in classic} == {0, 1}

    @pytest.mark.asyncio
    async def test_process_flow_fetcher(self, snapshot_client):
        processes = await ProcessFlowFetcher(snapshot_client).fetch(ALL_WORKFLOWS)
        assert [p.id for p in processes] == [BPF_ID]
        assert processes[0].primary_entity == 'lead'
        assert processes[0].definition.cross_entity_flow is True


class TestWebResourceFetcher:
    """Tests for WebResourceFetcher."""

    @pytest.mark.asyncio
    async def test_decodes_and_analyzes_script(self, snapshot_client):
        resources = await WebResourceFetcher(snapshot_client).fetch([WEB_RESOURCE_ID])
        resource = resources[0]
        assert resource.type_name == 'JavaScript'
        assert resource.content == ACCOUNT_SCRIPT
        assert resource.analysis.uses_deprecated_xrm_page is True

    def test_binary_content_is_not_decoded(self):
        assert decode_content('iVBORw0KGgo=', 5) is None

    def test_invalid_base64(self):
        assert decode_content('not base64!', 3) is None


class TestFormFetcher:
    """Tests for FormFetcher."""

    @pytest.mark.asyncio
    async def test_fetches_supported_form_types(self, snapshot_client):
        forms = await FormFetcher(snapshot_client).fetch(['account', 'new_project'])
        assert [f.name for f in forms] == ['Account Main']
        assert forms[0].type_name == 'Main'
        assert forms[0].libraries == ['new_/scripts/account.js']
        assert len(forms[0].event_handlers) == 4


class TestComponentFetchers:
    """Tests for custom APIs, variables, references, choices and connectors."""

    @pytest.mark.asyncio
    async def test_custom_api(self, snapshot_client):
        apis = await CustomAPIFetcher(snapshot_client).fetch([CUSTOM_API_ID])
        api = apis[0]
        assert api.binding_type == 'Entity'
        assert api.bound_entity == 'account'
        assert api.allowed_step_type == 'SyncAndAsync'
        assert [(p.unique_name, p.type_name, p.is_optional) for p in api.request_parameters] == [
            ('Weight', 'Integer', True),
        ]
        assert [p.type_name for p in api.response_properties] == ['Decimal']

    @pytest.mark.asyncio
    async def test_environment_variable_current_value(self, snapshot_client):
        variables = await EnvironmentVariableFetcher(snapshot_client).fetch([ENV_VAR_ID])
        assert variables[0].type_name == 'String'
        assert variables[0].default_value == 'https://erp.example.com'
        assert variables[0].current_value == 'https://erp-test.example.com'

    @pytest.mark.asyncio
    async def test_connection_reference_connector_name(self, snapshot_client):
        references = await ConnectionReferenceFetcher(snapshot_client).fetch([CONN_REF_ID])
        assert references[0].connector_name == 'shared_commondataserviceforapps'
        assert references[0].display_name == 'new_sharedcommondataservice'

    @pytest.mark.asyncio
    async def test_global_choice_options(self, snapshot_client):
        choices = await GlobalChoiceFetcher(snapshot_client).fetch([CHOICE_ID])
        assert choices[0].display_name == 'Priority'
        assert [(o.value, o.label) for o in choices[0].options] == [(1, 'High'), (2, 'Low')]

    @pytest.mark.asyncio
    async def test_custom_connector(self, snapshot_client):
        connectors = await CustomConnectorFetcher(snapshot_client).fetch([CONNECTOR_ID])
        assert connectors[0].connector_type == 'Custom'
        assert connectors[0].capabilities == ['actions']
        assert connectors[0].connection_parameters == ['api_key']
