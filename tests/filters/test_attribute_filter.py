"""Tests for attribute scoping."""

from dataverse_blueprint.filters.attribute_filter import (
    AttributeFilter, exclude_system_fields, is_system_field, scope_attributes,
)


def _attributes(*pairs):
    return [{'MetadataId': mid, 'LogicalName': name} for mid, name in pairs]


ATTRIBUTES = _attributes(
    ('a1', 'accountid'),
    ('b2', 'name'),
    ('c3', 'createdon'),
    ('d4', 'revenue'),
)


class TestScopeAttributes:
    """Tests for scope_attributes."""

    def test_custom_entity_keeps_everything(self):
        assert scope_attributes(ATTRIBUTES, True, []) == ATTRIBUTES

    def test_no_selection_keeps_everything(self):
        assert scope_attributes(ATTRIBUTES, False, None) == ATTRIBUTES

    def test_empty_selection_keeps_nothing(self):
        assert scope_attributes(ATTRIBUTES, False, []) == []

    def test_subset_keeps_original_order(self):
        kept = scope_attributes(ATTRIBUTES, False, ['d4', 'b2'])
        assert [a['LogicalName'] for a in kept] == ['name', 'revenue']

    def test_identifiers_are_normalized(self):
        attributes = _attributes(('4a1b0000-aaaa-bbbb-cccc-00000000000f', 'name'))
        kept = scope_attributes(attributes, False, ['{4A1B0000-AAAA-BBBB-CCCC-00000000000F}'])
        assert len(kept) == 1

    def test_attribute_without_metadata_id_is_dropped(self):
        attributes = [{'LogicalName': 'orphan'}] + _attributes(('b2', 'name'))
        kept = scope_attributes(attributes, False, ['b2'])
        assert [a['LogicalName'] for a in kept] == ['name']


class TestSystemFields:
    """Tests for system field exclusion."""

    def test_is_system_field(self):
        assert is_system_field('createdon')
        assert is_system_field('OwnerId')
        assert not is_system_field('name')
        assert not is_system_field(None)

    def test_exclude_system_fields(self):
        kept = exclude_system_fields(ATTRIBUTES)
        assert [a['LogicalName'] for a in kept] == ['accountid', 'name', 'revenue']


class TestAttributeFilter:
    """Tests for AttributeFilter."""

    def test_scoping_runs_before_exclusion(self):
        entity = {'LogicalName': 'account', 'IsCustomEntity': False, 'Attributes': ATTRIBUTES}
        result = AttributeFilter(['b2', 'c3'], exclude_system=True).apply(entity)
        assert [a['LogicalName'] for a in result['Attributes']] == ['name']

    def test_custom_entity_only_excludes_system_fields(self):
        entity = {'LogicalName': 'new_project', 'IsCustomEntity': True, 'Attributes': ATTRIBUTES}
        result = AttributeFilter([], exclude_system=True).apply(entity)
        assert [a['LogicalName'] for a in result['Attributes']] == ['accountid', 'name', 'revenue']

    def test_apply_does_not_mutate_input(self):
        entity = {'LogicalName': 'account', 'IsCustomEntity': False, 'Attributes': list(ATTRIBUTES)}
        AttributeFilter(['b2']).apply(entity)
        assert len(entity['Attributes']) == 4

    def test_missing_attributes_key(self):
        result = AttributeFilter(None).apply({'LogicalName': 'account'})
        assert result['Attributes'] == []
