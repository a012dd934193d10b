"""Cross-reference aggregation.

Groups fetched records by the lower-cased logical name of the entity
they belong to, with a category-specific ordering inside each group.
Keys are returned in sorted order.
"""

from collections import defaultdict
from typing import Any, Callable, Iterable, TypeVar

T = TypeVar('T')


def _name_key(name: str | None) -> tuple[str, str]:
    name = name or ''
    return (name.casefold(), name)


def group_by(
    records: Iterable[T],
    key_of: Callable[[T], str | None],
    sort_key: Callable[[T], Any],
) -> dict[str, list[T]]:
    """Group records under a lower-cased key, dropping records with no key."""
    groups: dict[str, list[T]] = defaultdict(list)
    for record in records:
        key = key_of(record)
        if key:
            groups[key.lower()].append(record)
    return {k: sorted(groups[k], key=sort_key) for k in sorted(groups)}


def group_plugins_by_entity(plugins):
    """Order by pipeline stage, then execution rank."""
    return group_by(plugins, lambda p: p.entity, lambda p: (p.stage, p.rank))


def group_flows_by_entity(flows):
    return group_by(flows, lambda f: f.entity, lambda f: _name_key(f.name))


def group_business_rules_by_entity(rules):
    return group_by(rules, lambda r: r.entity, lambda r: _name_key(r.name))


def group_classic_workflows_by_entity(workflows):
    return group_by(workflows, lambda w: w.entity, lambda w: _name_key(w.name))


def group_process_flows_by_entity(process_flows):
    """Group by primary entity only, even for multi-entity processes."""
    return group_by(process_flows, lambda b: b.primary_entity, lambda b: _name_key(b.name))


def group_forms_by_entity(forms):
    return group_by(forms, lambda f: f.entity, lambda f: _name_key(f.name))


def group_web_resources_by_type(web_resources):
    """Group files under their type name, keeping the type name's casing."""
    groups: dict[str, list] = defaultdict(list)
    for resource in web_resources:
        groups[resource.type_name].append(resource)
    return {
        k: sorted(groups[k], key=lambda r: _name_key(r.name))
        for k in sorted(groups)
    }
