"""Tests for cross-entity automation mapping."""

from dataverse_blueprint.analyzers.cross_entity import CrossEntityMapper
from dataverse_blueprint.domain.components import DataverseAction, Flow, FlowDefinition, PluginStep
from dataverse_blueprint.domain.models import EntityBlueprint


def _blueprint(logical_name, label=None, flows=(), plugins=()):
    entity = {'LogicalName': logical_name}
    if label:
        entity['DisplayName'] = {'UserLocalizedLabel': {'Label': label}}
    blueprint = EntityBlueprint(entity=entity)
    blueprint.attach(plugins, flows, [], [])
    return blueprint


def _flow(name, actions, event='Create'):
    return Flow(
        id=f'id-{name}', name=name, description=None, state='Active', entity=None,
        scope_name='Organization', owner='Dana', modified_on=None,
        definition=FlowDefinition(trigger_event=event, dataverse_actions=actions),
    )


def _plugin(name, mode=0, description=None):
    return PluginStep(
        id=f'id-{name}', name=name, stage=40, stage_name='PostOperation', mode=mode,
        mode_name='', rank=1, message='Update', entity='account',
        assembly_name='Contoso.Plugins', type_name='Contoso.Plugins.Step', description=description,
    )


class TestCrossEntityMapper:
    """Tests for CrossEntityMapper."""

    def setup_method(self):
        self.mapper = CrossEntityMapper()

    def test_flow_action_on_other_entity(self):
        flow = _flow('Open project', [DataverseAction('Add_row', 'Create', 'new_project')])
        links = self.mapper.map([
            _blueprint('account', 'Account', flows=[flow]),
            _blueprint('new_project', 'Project'),
        ])
        assert len(links) == 1
        link = links[0]
        assert link.source_entity_display_name == 'Account'
        assert link.target_entity_display_name == 'Project'
        assert link.automation_type == 'Flow'
        assert link.is_asynchronous is True
        assert link.description == 'Flow "Open project" creates records in new_project when account is created'

    def test_same_entity_action_is_skipped(self):
        flow = _flow('Touch', [DataverseAction('Update_row', 'Update', 'Account')])
        assert self.mapper.map([_blueprint('account', flows=[flow])]) == []

    def test_unknown_target_keeps_logical_name(self):
        flow = _flow('Log', [DataverseAction('Add_row', 'Create', 'new_log')], event='Scheduled')
        [link] = self.mapper.map([_blueprint('account', flows=[flow])])
        assert link.target_entity_display_name == 'new_log'
        assert link.description.endswith('when account is triggered')

    def test_plugin_naming_hint(self):
        plugin = _plugin('Create new_project for account', mode=1)
        links = self.mapper.map([
            _blueprint('account', plugins=[plugin]),
            _blueprint('new_project', 'Project'),
        ])
        [link] = links
        assert (link.target_entity, link.operation) == ('new_project', 'Create')
        assert link.is_asynchronous is True
        assert link.description == 'Plugin "Create new_project for account" may create new_project (detected from naming)'

    def test_plugin_hint_defaults_to_update(self):
        plugin = _plugin('Recalculate', description='Rolls totals into new_project')
        [link] = self.mapper.map([
            _blueprint('account', plugins=[plugin]),
            _blueprint('new_project'),
        ])
        assert link.operation == 'Update'
        assert link.is_asynchronous is False

    def test_plugin_hint_needs_whole_word(self):
        plugin = _plugin('Sync new_projects')
        links = self.mapper.map([
            _blueprint('account', plugins=[plugin]),
            _blueprint('new_project'),
        ])
        assert links == []

    def test_sorted_by_source_then_target(self):
        contact_flow = _flow('C', [DataverseAction('a', 'Update', 'account')])
        account_flow = _flow('A', [
            DataverseAction('b', 'Create', 'new_task'),
            DataverseAction('c', 'Create', 'contact'),
        ])
        links = self.mapper.map([
            _blueprint('contact', flows=[contact_flow]),
            _blueprint('account', flows=[account_flow]),
        ])
        assert [(link.source_entity, link.target_entity) for link in links] == [
            ('account', 'contact'), ('account', 'new_task'), ('contact', 'account'),
        ]
