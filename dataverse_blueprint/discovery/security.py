"""Fetchers for security roles, field security, and column security."""

import logging
from typing import Any

from dataverse_blueprint.discovery.base_fetcher import BaseFetcher
from dataverse_blueprint.domain.components import (
    AttributeMaskingRule, ColumnSecurityProfile, EntityFieldSecurity, EntityPermission,
    FieldProfilePermission, FieldSecurityProfile, PrivilegeDetail, SecuredField, SecurityRole,
)
from dataverse_blueprint.domain.constants import (
    ADMIN_PRIVILEGE_TYPES, PRIVILEGE_BATCH_SIZE, PRIVILEGE_DEPTHS, PRIVILEGE_NAME_RE,
    PRIVILEGE_TYPES, SPECIAL_PRIVILEGE_NAMES,
)
from dataverse_blueprint.domain.enums import RecordTable
from dataverse_blueprint.utils.ids import chunked, normalize_id, unique_ids

logger = logging.getLogger(__name__)

_PRIVILEGE_ORDER = {name: i for i, name in enumerate(PRIVILEGE_TYPES)}


def privilege_depth(depth_mask: int) -> tuple[str, int]:
    """Return the widest depth set in a privilege depth mask."""
    for value, name in PRIVILEGE_DEPTHS:
        if depth_mask & value:
            return name, value
    return 'None', 0


# ── Security Roles ───────────────────────────────────────────────────────

class SecurityRoleFetcher(BaseFetcher):
    """Resolves role ids into roles with their privilege matrix.

    Entity privileges come from ``prv<Type><Entity>`` names; any other
    privilege name can still switch on a miscellaneous permission.
    """

    table = RecordTable.ROLES

    async def build(self, rows):
        roles = []
        for row in sorted(rows, key=lambda r: r.get('name') or ''):
            role = self.map_record(row)
            privileges = await self.role_privileges(role.id)
            self.apply_privileges(role, privileges)
            logger.debug("Role %s grants access to %d entities", role.name, role.total_entities)
            roles.append(role)
        return roles

    def map_record(self, row) -> SecurityRole:
        customizable = row.get('iscustomizable')
        if isinstance(customizable, dict):
            customizable = customizable.get('Value')
        return SecurityRole(
            id=row.get('roleid', ''),
            name=row.get('name', ''),
            business_unit_id=row.get('_businessunitid_value'),
            business_unit_name=(self.expanded(row, 'businessunitid', 'name')
                                or self.formatted(row, '_businessunitid_value')
                                or 'Unknown'),
            description=row.get('description'),
            is_customizable=True if customizable is None else bool(customizable),
            is_managed=bool(row.get('ismanaged')),
            component_state=row.get('componentstate') or 0,
        )

    async def role_privileges(self, role_id: str) -> list[dict[str, Any]]:
        """Join a role's privilege grants with the privilege definitions.

        Each result carries ``name``, ``accessright`` and ``depthmask``.
        """
        grants = await self.client.get_records(RecordTable.ROLE_PRIVILEGES, [role_id])
        if not grants:
            return []
        privilege_ids = unique_ids(g.get('privilegeid') for g in grants)
        definitions: dict[str, dict[str, Any]] = {}
        for batch in chunked(privilege_ids, PRIVILEGE_BATCH_SIZE):
            for row in await self.client.get_records(RecordTable.PRIVILEGES, batch):
                definitions[normalize_id(row.get('privilegeid'))] = row
        joined = []
        for grant in grants:
            definition = definitions.get(normalize_id(grant.get('privilegeid')), {})
            joined.append({
                'name': definition.get('name') or '',
                'accessright': definition.get('accessright') or 0,
                'depthmask': grant.get('privilegedepthmask') or 0,
            })
        return joined

    @staticmethod
    def apply_privileges(role: SecurityRole, privileges: list[dict[str, Any]]) -> None:
        names = {p['name'] for p in privileges}
        role.special_permissions = {
            key: name in names for key, name in SPECIAL_PRIVILEGE_NAMES.items()
        }

        by_entity: dict[str, dict[str, PrivilegeDetail]] = {}
        for privilege in privileges:
            m = PRIVILEGE_NAME_RE.match(privilege['name'])
            if not m:
                continue
            privilege_type, entity = m.group(1), m.group(2).lower()
            if not privilege['accessright'] & PRIVILEGE_TYPES[privilege_type]:
                continue
            depth, depth_value = privilege_depth(privilege['depthmask'])
            if depth == 'Global' and privilege_type in ADMIN_PRIVILEGE_TYPES:
                role.has_system_admin_privileges = True
            held = by_entity.setdefault(entity, {})
            current = held.get(privilege_type)
            if current is None or depth_value > current.depth_value:
                held[privilege_type] = PrivilegeDetail(privilege_type, depth, depth_value)

        role.entity_permissions = [
            EntityPermission(
                entity_logical_name=entity,
                privileges=sorted(held.values(), key=lambda p: _PRIVILEGE_ORDER[p.type]),
            )
            for entity, held in sorted(by_entity.items())
        ]
        role.total_entities = len(role.entity_permissions)


# ── Field Security ───────────────────────────────────────────────────────

class FieldSecurityProfileFetcher(BaseFetcher):
    table = RecordTable.FIELD_SECURITY_PROFILES

    async def build(self, rows):
        profiles = [self.map_record(row) for row in rows]
        return sorted(profiles, key=lambda p: p.name)

    def map_record(self, row) -> FieldSecurityProfile:
        return FieldSecurityProfile(
            id=row.get('fieldsecurityprofileid', ''),
            name=row.get('name', ''),
            description=row.get('description'),
        )


class FieldPermissionFetcher(BaseFetcher):
    """Resolves entity logical names into their secured columns.

    ``fetch`` returns one EntityFieldSecurity per entity that has at
    least one secured column, in the order the entities were given.
    """

    table = RecordTable.FIELD_PERMISSIONS

    async def fetch(self, entity_names) -> list[EntityFieldSecurity]:
        names = list(dict.fromkeys(n for n in entity_names if n))
        if not names:
            return []
        rows = await self.fetch_rows(self.table, names)

        fields: dict[str, dict[str, list[FieldProfilePermission]]] = {}
        for row in rows:
            entity = (row.get('entityname') or '').lower()
            attribute = row.get('attributelogicalname') or ''
            fields.setdefault(entity, {}).setdefault(attribute, []).append(self.map_record(row))

        secured = []
        for name in names:
            by_attribute = fields.get(name.lower())
            if not by_attribute:
                continue
            secured.append(EntityFieldSecurity(
                entity_logical_name=name,
                secured_fields=[SecuredField(a, p) for a, p in by_attribute.items()],
            ))
        logger.debug("Found secured columns on %d of %d entities", len(secured), len(names))
        return secured

    def map_record(self, row) -> FieldProfilePermission:
        return FieldProfilePermission(
            profile_id=row.get('_fieldsecurityprofileid_value') or '',
            profile_name=(self.expanded(row, 'fieldsecurityprofileid', 'name')
                          or self.formatted(row, '_fieldsecurityprofileid_value')
                          or 'Unknown Profile'),
            can_read=bool(row.get('canread')),
            can_create=bool(row.get('cancreate')),
            can_update=bool(row.get('canupdate')),
        )


# ── Column Security ──────────────────────────────────────────────────────

class ColumnSecurityDiscovery:
    """Lists attribute masking rules and column security profiles.

    Both tables are environment-wide; nothing here is scoped to a
    solution.
    """

    def __init__(self, client):
        self.client = client

    async def get_attribute_masking_rules(self) -> list[AttributeMaskingRule]:
        rows = await self.client.list_records(RecordTable.ATTRIBUTE_MASKING_RULES)
        rules = [
            AttributeMaskingRule(
                id=row.get('attributemaskingruleid', ''),
                entity_name=row.get('entityname') or '',
                attribute_logical_name=row.get('attributelogicalname') or '',
                unique_name=row.get('uniquename') or '',
                masking_rule_name=(BaseFetcher.formatted(row, '_maskingruleid_value')
                                   or row.get('_maskingruleid_value')
                                   or 'Unknown'),
                is_managed=bool(row.get('ismanaged')),
            )
            for row in rows
        ]
        return sorted(rules, key=lambda r: (r.entity_name, r.attribute_logical_name))

    async def get_column_security_profiles(self) -> list[ColumnSecurityProfile]:
        rows = await self.client.list_records(RecordTable.COLUMN_SECURITY_PROFILES)
        profiles = [
            ColumnSecurityProfile(
                id=row.get('columnsecurityprofileid', ''),
                name=row.get('name') or '',
                description=row.get('description'),
                is_managed=bool(row.get('ismanaged')),
                organization_id=row.get('_organizationid_value') or row.get('organizationid'),
            )
            for row in rows
        ]
        return sorted(profiles, key=lambda p: p.name)
