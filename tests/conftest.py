"""Shared test fixtures."""

import base64
import json

import pytest

from dataverse_blueprint.client.snapshot import SnapshotClient
from dataverse_blueprint.domain.models import GeneratorOptions, Scope


# ── Identifiers ──────────────────────────────────────────────────────────

SOLUTION_ID = 'aaaaaaaa-0000-0000-0000-000000000001'

ACCOUNT_ID = 'e1e1e1e1-0000-0000-0000-00000000000a'
PROJECT_ID = 'e1e1e1e1-0000-0000-0000-00000000000b'
CONTACT_ID = 'e1e1e1e1-0000-0000-0000-00000000000c'

ATTR_ACCOUNTID_ID = 'a1b2c3d4-0000-0000-0000-00000000000a'
ATTR_NAME_ID = 'a1b2c3d4-0000-0000-0000-00000000000b'
ATTR_REVENUE_ID = 'a1b2c3d4-0000-0000-0000-00000000000c'
ATTR_CREATEDON_ID = 'a1b2c3d4-0000-0000-0000-00000000000d'

PLUGIN_POST_ID = 'bbbbbbbb-0000-0000-0000-000000000001'
PLUGIN_PREVAL_5_ID = 'bbbbbbbb-0000-0000-0000-000000000002'
PLUGIN_PREVAL_1_ID = 'bbbbbbbb-0000-0000-0000-000000000003'

FLOW_ID = 'cccccccc-0000-0000-0000-000000000001'
RULE_ID = 'cccccccc-0000-0000-0000-000000000002'
CLASSIC_ID = 'cccccccc-0000-0000-0000-000000000003'
BPF_ID = 'cccccccc-0000-0000-0000-000000000004'
DIALOG_ID = 'cccccccc-0000-0000-0000-000000000005'
MISSING_WORKFLOW_ID = 'cccccccc-0000-0000-0000-000000000006'

WEB_RESOURCE_ID = 'dddddddd-0000-0000-0000-000000000001'
CUSTOM_API_ID = 'ffffffff-0000-0000-0000-000000000001'
ENV_VAR_ID = 'ffffffff-0000-0000-0000-000000000002'
CONN_REF_ID = 'ffffffff-0000-0000-0000-000000000003'
CHOICE_ID = 'ffffffff-0000-0000-0000-000000000004'
CONNECTOR_ID = 'ffffffff-0000-0000-0000-000000000005'

ROLE_ID = '77777777-0000-0000-0000-000000000001'
BUSINESS_UNIT_ID = '77777777-0000-0000-0000-0000000000b1'
PRV_CREATE_ACCOUNT_ID = '77777777-1111-0000-0000-000000000001'
PRV_READ_ACCOUNT_ID = '77777777-1111-0000-0000-000000000002'
PRV_APPEND_TO_PROJECT_ID = '77777777-1111-0000-0000-000000000003'
PRV_EXPORT_ID = '77777777-1111-0000-0000-000000000004'
FIELD_PROFILE_ID = '88888888-0000-0000-0000-000000000001'


# ── Sample Markup ────────────────────────────────────────────────────────

RULE_XAML = """\
<rule>
  <conditions>
    <and>
      <condition attribute="revenue" operator="gt"><value>1000</value></condition>
      <or>
        <condition attribute="industrycode" operator="eq"><value>5</value></condition>
        <condition attribute="name" operator="begins-with"><value>Contoso</value></condition>
      </or>
    </and>
  </conditions>
  <actions>
    <action actiontype="setrequired"><parameter name="field">telephone1</parameter></action>
    <action actiontype="hide"><parameter name="field">fax</parameter></action>
  </actions>
</rule>
"""

BPF_XAML = """\
<Activity>
  <mxswa:Workflow>
    <mxswa:Stage EntityName="lead" StageName="Qualify" StageId="s1" StageCategory="0">
      <mxswa:Step DisplayName="Budget" />
      <mxswa:Step DisplayName="Timeline" />
    </mxswa:Stage>
    <mxswa:Stage StageId="s2" EntityName="opportunity" StageName="Develop">
      <mxswa:Step DisplayName="Proposal" />
    </mxswa:Stage>
  </mxswa:Workflow>
</Activity>
"""

FORM_XML = """\
<form>
  <formLibraries>
    <Library name="new_/scripts/account.js" libraryUniqueId="{1}" />
  </formLibraries>
  <events>
    <event name="onload" application="false" active="false">
      <Handlers>
        <Handler functionName="Contoso.onLoad" libraryName="new_/scripts/account.js" handlerUniqueId="{2}" enabled="true" parameters="" passExecutionContext="true" />
      </Handlers>
    </event>
    <event name="onchange" application="false" active="false" attribute="revenue">
      <Handlers>
        <Handler functionName="Contoso.onRevenueChange" libraryName="new_/scripts/account.js" handlerUniqueId="{3}" enabled="false" />
      </Handlers>
    </event>
  </events>
  <tabs>
    <tab name="general">
      <events>
        <event name="TabStateChange">
          <Handlers>
            <Handler functionName="Contoso.onTab" libraryName="new_/scripts/account.js" enabled="true" />
          </Handlers>
        </event>
      </events>
      <control id="name" datafieldname="name">
        <events>
          <event name="onchange">
            <Handlers>
              <Handler functionName="Contoso.onNameChange" library="new_/scripts/account.js" enabled="true" parameters="'primary'" />
            </Handlers>
          </event>
        </events>
      </control>
    </tab>
  </tabs>
</form>
"""

FLOW_CLIENTDATA = json.dumps({
    'properties': {
        'runAs': 2,
        'definition': {
            'triggers': {
                'When_a_row_is_added_or_modified': {
                    'type': 'OpenApiConnectionWebhook',
                    'inputs': {
                        'host': {
                            'apiId': '/providers/Microsoft.PowerApps/apis/shared_commondataserviceforapps',
                            'connectionName': 'shared_commondataserviceforapps',
                        },
                        'parameters': {
                            'subscriptionRequest/message': 4,
                            'subscriptionRequest/entityname': 'account',
                            'subscriptionRequest/filterexpression': 'statecode eq 0',
                        },
                    },
                },
            },
            'actions': {
                'Call_ERP': {
                    'type': 'Http',
                    'inputs': {'method': 'POST', 'uri': 'https://api.example.com/orders'},
                },
                'Check_status': {
                    'type': 'If',
                    'actions': {
                        'Update_row': {
                            'type': 'OpenApiConnection',
                            'inputs': {
                                'host': {
                                    'connectionName': 'shared_commondataserviceforapps',
                                    'operationId': 'UpdateRecord',
                                },
                                'parameters': {'entityName': 'new_project', 'recordId': '@{triggerBody()}'},
                            },
                        },
                    },
                    'else': {
                        'actions': {'Compose_note': {'type': 'Compose', 'inputs': 'skipped'}},
                    },
                },
            },
        },
    },
})

ACCOUNT_SCRIPT = """\
var Contoso = Contoso || {};
Contoso.onLoad = function (ctx) {
    var formContext = ctx.getFormContext();
    var name = Xrm.Page.getAttribute("name");
    Xrm.WebApi.retrieveRecord("account", formContext.data.entity.getId());
    fetch("https://api.example.com/score", { method: "post" });
};
"""


# ── Snapshot Builders ────────────────────────────────────────────────────

def _label(text):
    return {'UserLocalizedLabel': {'Label': text}}


def _attribute(metadata_id, logical_name):
    return {'MetadataId': metadata_id, 'LogicalName': logical_name}


def _component(object_id, component_type):
    return {'solutionid': SOLUTION_ID, 'objectid': object_id, 'componenttype': component_type}


def _braced(guid):
    return '{' + guid.upper() + '}'


def _plugin_step(step_id, name, stage, rank):
    return {
        'sdkmessageprocessingstepid': step_id,
        'name': name,
        'stage': stage,
        'mode': 0,
        'rank': rank,
        'filteringattributes': 'name, revenue',
        'sdkmessageid': {'name': 'Update'},
        'sdkmessagefilterid': {'primaryobjecttypecode': 'account'},
        'plugintypeid': {'assemblyname': 'Contoso.Plugins', 'typename': 'Contoso.Plugins.AccountSync'},
    }


def build_snapshot() -> dict:
    """Return a fresh snapshot with one solution covering every category."""
    return {
        'environment': 'https://contoso.crm.dynamics.com',
        'solutioncomponents': [
            _component(_braced(ACCOUNT_ID), 1),
            _component(PROJECT_ID, 1),
            _component(PROJECT_ID, 1),
            _component(_braced(ATTR_NAME_ID), 2),
            _component(ATTR_REVENUE_ID, 2),
            _component(ATTR_CREATEDON_ID, 2),
            _component(PLUGIN_POST_ID, 92),
            _component(PLUGIN_PREVAL_5_ID, 92),
            _component(PLUGIN_PREVAL_1_ID, 92),
            _component(FLOW_ID, 29),
            _component(RULE_ID, 29),
            _component(CLASSIC_ID, 29),
            _component(BPF_ID, 29),
            _component(DIALOG_ID, 29),
            _component(MISSING_WORKFLOW_ID, 29),
            _component(WEB_RESOURCE_ID, 61),
            _component(CUSTOM_API_ID, 10076),
            _component(ENV_VAR_ID, 380),
            _component(CONN_REF_ID, 371),
            _component(CHOICE_ID, 9),
            _component(CONNECTOR_ID, 372),
            _component(ROLE_ID, 20),
            _component(FIELD_PROFILE_ID, 70),
            _component('99999999-0000-0000-0000-000000000001', 300),
            _component('99999999-0000-0000-0000-000000000002', 60),
        ],
        'EntityDefinitions': [
            {
                'MetadataId': ACCOUNT_ID,
                'LogicalName': 'account',
                'DisplayName': _label('Account'),
                'IsCustomEntity': False,
                'Attributes': [
                    _attribute(ATTR_ACCOUNTID_ID, 'accountid'),
                    _attribute(ATTR_NAME_ID, 'name'),
                    _attribute(ATTR_REVENUE_ID, 'revenue'),
                    _attribute(ATTR_CREATEDON_ID, 'createdon'),
                ],
            },
            {
                'MetadataId': PROJECT_ID,
                'LogicalName': 'new_project',
                'DisplayName': _label('Project'),
                'IsCustomEntity': True,
                'Attributes': [
                    _attribute('a1b2c3d4-0000-0000-0000-0000000000f1', 'new_projectid'),
                    _attribute('a1b2c3d4-0000-0000-0000-0000000000f2', 'new_name'),
                    _attribute('a1b2c3d4-0000-0000-0000-0000000000f3', 'createdon'),
                    _attribute('a1b2c3d4-0000-0000-0000-0000000000f4', 'ownerid'),
                ],
            },
            {
                'MetadataId': CONTACT_ID,
                'LogicalName': 'contact',
                'DisplayName': _label('Contact'),
                'IsCustomEntity': False,
                'Attributes': [_attribute('a1b2c3d4-0000-0000-0000-0000000000e1', 'fullname')],
            },
        ],
        'sdkmessageprocessingsteps': [
            _plugin_step(PLUGIN_POST_ID, 'Post 2', 40, 2),
            _plugin_step(PLUGIN_PREVAL_5_ID, 'PreValidation 5', 10, 5),
            _plugin_step(PLUGIN_PREVAL_1_ID, 'PreValidation 1', 10, 1),
        ],
        'sdkmessageprocessingstepimages': [
            {
                'sdkmessageprocessingstepimageid': 'bbbbbbbb-1111-0000-0000-000000000001',
                '_sdkmessageprocessingstepid_value': _braced(PLUGIN_POST_ID),
                'imagetype': 0,
                'name': 'PreImage',
                'attributes': 'name,revenue',
                'messagepropertyname': 'Target',
            },
        ],
        'workflows': [
            {
                'workflowid': FLOW_ID, 'category': 5, 'name': 'Sync account to ERP',
                'primaryentity': 'account', 'statecode': 1, 'scope': 4,
                'clientdata': FLOW_CLIENTDATA,
                '_ownerid_value@OData.Community.Display.V1.FormattedValue': 'Dana Admin',
            },
            {
                'workflowid': RULE_ID, 'category': 2, 'name': 'Require phone for large accounts',
                'primaryentity': 'account', 'statecode': 1, 'scope': 1, 'xaml': RULE_XAML,
            },
            {
                'workflowid': CLASSIC_ID, 'category': 0, 'name': 'Notify owner',
                'primaryentity': 'account', 'statecode': 1, 'type': 1, 'mode': 0, 'scope': 4,
                'triggeroncreate': True, 'xaml': '<Activity><UpdateEntity /><SendEmail /></Activity>',
            },
            {
                'workflowid': BPF_ID, 'category': 4, 'name': 'Lead to Opportunity',
                'primaryentity': 'lead', 'statecode': 1, 'uniquename': 'new_leadtoopportunity',
                'xaml': BPF_XAML,
            },
            {
                'workflowid': DIALOG_ID, 'category': 1, 'name': 'Legacy dialog',
                'primaryentity': 'account', 'statecode': 0, 'xaml': '<mcwc:Dialog />',
            },
        ],
        'webresourceset': [
            {
                'webresourceid': WEB_RESOURCE_ID,
                'name': 'new_/scripts/account.js',
                'displayname': 'Account script',
                'webresourcetype': 3,
                'content': base64.b64encode(ACCOUNT_SCRIPT.encode('utf-8')).decode('ascii'),
            },
        ],
        'customapis': [
            {
                'customapiid': CUSTOM_API_ID, 'uniquename': 'new_CalculateScore',
                'displayname': 'Calculate Score', 'bindingtype': 1,
                'boundentitylogicalname': 'account', 'isfunction': False,
                'allowedcustomprocessingsteptype': 2,
            },
        ],
        'customapirequestparameters': [
            {
                'customapirequestparameterid': 'ffffffff-1111-0000-0000-000000000001',
                '_customapiid_value': CUSTOM_API_ID, 'uniquename': 'Weight', 'type': 7,
                'isoptional': True,
            },
        ],
        'customapiresponseproperties': [
            {
                'customapiresponsepropertyid': 'ffffffff-2222-0000-0000-000000000001',
                '_customapiid_value': CUSTOM_API_ID, 'uniquename': 'Score', 'type': 2,
            },
        ],
        'environmentvariabledefinitions': [
            {
                'environmentvariabledefinitionid': ENV_VAR_ID, 'schemaname': 'new_ErpBaseUrl',
                'displayname': 'ERP Base URL', 'type': 100000000,
                'defaultvalue': 'https://erp.example.com',
            },
        ],
        'environmentvariablevalues': [
            {
                'environmentvariablevalueid': 'ffffffff-3333-0000-0000-000000000001',
                '_environmentvariabledefinitionid_value': ENV_VAR_ID,
                'value': 'https://erp-test.example.com',
            },
        ],
        'connectionreferences': [
            {
                'connectionreferenceid': CONN_REF_ID,
                'connectionreferencelogicalname': 'new_sharedcommondataservice',
                'connectorid': '/providers/Microsoft.PowerApps/apis/shared_commondataserviceforapps',
            },
        ],
        'GlobalOptionSetDefinitions': [
            {
                'MetadataId': CHOICE_ID, 'Name': 'new_priority', 'DisplayName': _label('Priority'),
                'Options': [
                    {'Value': 1, 'Label': _label('High')},
                    {'Value': 2, 'Label': _label('Low')},
                ],
            },
        ],
        'connectors': [
            {
                'connectorid': CONNECTOR_ID, 'name': 'new_erp', 'displayname': 'ERP',
                'connectortype': 1, 'capabilities': '["actions"]',
                'connectionparameters': '{"api_key": {"type": "securestring"}}',
            },
        ],
        'roles': [
            {
                'roleid': ROLE_ID, 'name': 'Project Manager',
                '_businessunitid_value': BUSINESS_UNIT_ID, 'businessunitid': {'name': 'Contoso'},
                'description': 'Runs projects', 'iscustomizable': {'Value': True},
                'ismanaged': False, 'componentstate': 0,
            },
        ],
        'roleprivilegescollection': [
            {'roleid': ROLE_ID, 'privilegeid': PRV_CREATE_ACCOUNT_ID, 'privilegedepthmask': 8},
            {'roleid': ROLE_ID, 'privilegeid': _braced(PRV_READ_ACCOUNT_ID), 'privilegedepthmask': 2},
            {'roleid': ROLE_ID, 'privilegeid': PRV_APPEND_TO_PROJECT_ID, 'privilegedepthmask': 1},
            {'roleid': ROLE_ID, 'privilegeid': PRV_EXPORT_ID, 'privilegedepthmask': 8},
        ],
        'privileges': [
            {'privilegeid': PRV_CREATE_ACCOUNT_ID, 'name': 'prvCreateAccount', 'accessright': 1},
            {'privilegeid': PRV_READ_ACCOUNT_ID, 'name': 'prvReadAccount', 'accessright': 2},
            {'privilegeid': PRV_APPEND_TO_PROJECT_ID, 'name': 'prvAppendTonew_project',
             'accessright': 32},
            {'privilegeid': PRV_EXPORT_ID, 'name': 'prvExportToExcel', 'accessright': 0},
        ],
        'fieldsecurityprofiles': [
            {'fieldsecurityprofileid': FIELD_PROFILE_ID, 'name': 'Finance',
             'description': 'Revenue access'},
        ],
        'fieldpermissions': [
            {
                'fieldpermissionid': '88888888-1111-0000-0000-000000000001',
                'entityname': 'account', 'attributelogicalname': 'revenue',
                'canread': 4, 'cancreate': 4, 'canupdate': 0,
                '_fieldsecurityprofileid_value': FIELD_PROFILE_ID,
                '_fieldsecurityprofileid_value@OData.Community.Display.V1.FormattedValue': 'Finance',
            },
            {
                'fieldpermissionid': '88888888-1111-0000-0000-000000000002',
                'entityname': 'contact', 'attributelogicalname': 'fullname',
                'canread': 4, 'cancreate': 0, 'canupdate': 0,
                '_fieldsecurityprofileid_value': FIELD_PROFILE_ID,
            },
        ],
        'attributemaskingrules': [
            {
                'attributemaskingruleid': '99999999-1111-0000-0000-000000000002',
                'entityname': 'contact', 'attributelogicalname': 'governmentid',
                'uniquename': 'new_contact_governmentid', 'ismanaged': False,
                '_maskingruleid_value': '99999999-2222-0000-0000-000000000001',
                '_maskingruleid_value@OData.Community.Display.V1.FormattedValue': 'SocialSecurityNumber',
            },
            {
                'attributemaskingruleid': '99999999-1111-0000-0000-000000000001',
                'entityname': 'account', 'attributelogicalname': 'new_taxid',
                'uniquename': 'new_account_taxid', 'ismanaged': True,
                '_maskingruleid_value': '99999999-2222-0000-0000-000000000002',
            },
        ],
        'columnsecurityprofiles': [
            {'columnsecurityprofileid': '99999999-3333-0000-0000-000000000001', 'name': 'Auditors',
             'description': 'Read-only audit access', 'ismanaged': True,
             '_organizationid_value': '99999999-4444-0000-0000-000000000001'},
        ],
        'solutions': [
            {
                'solutionid': SOLUTION_ID, 'uniquename': 'ContosoCore', 'friendlyname': 'Contoso Core',
                'version': '1.0.0.0', 'ismanaged': False,
                'publisherid': {'friendlyname': 'Contoso', 'uniquename': 'contoso',
                                'customizationprefix': 'new'},
            },
        ],
        'systemforms': [
            {'formid': 'eeeeeeee-0000-0000-0000-000000000001', 'name': 'Account Main',
             'type': 2, 'objecttypecode': 'account', 'formxml': FORM_XML},
            {'formid': 'eeeeeeee-0000-0000-0000-000000000002', 'name': 'Account Lookup',
             'type': 6, 'objecttypecode': 'account', 'formxml': '<form />'},
        ],
    }


# ── Fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def snapshot_data():
    return build_snapshot()


@pytest.fixture
def snapshot_client(snapshot_data):
    return SnapshotClient(snapshot_data)


@pytest.fixture
def snapshot_file(tmp_path, snapshot_data):
    """Write the sample snapshot to disk and return its path."""
    path = tmp_path / 'snapshot.json'
    path.write_text(json.dumps(snapshot_data), encoding='utf-8')
    return str(path)


@pytest.fixture
def solution_scope():
    return Scope.solution([SOLUTION_ID])


@pytest.fixture
def fast_options():
    return GeneratorOptions(schema_delay=0)
