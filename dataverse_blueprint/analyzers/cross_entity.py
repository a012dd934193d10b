"""Links between automation on one entity and rows of another."""

import re

from dataverse_blueprint.domain.components import CrossEntityLink
from dataverse_blueprint.domain.constants import PLUGIN_OPERATION_KEYWORDS, TRIGGER_EVENT_DESCRIPTIONS
from dataverse_blueprint.domain.models import EntityBlueprint

ASYNC_PLUGIN_MODE = 1


def _display_name(entity: dict) -> str:
    label = ((entity.get('DisplayName') or {}).get('UserLocalizedLabel') or {}).get('Label')
    return label or entity.get('LogicalName', '')


class CrossEntityMapper:
    """Finds automation attached to one entity that acts on another.

    Flows contribute links from their Dataverse connector actions. Plugin
    steps only contribute naming hints: an entity logical name appearing
    in the step name or description.
    """

    def map(self, blueprints: list[EntityBlueprint]) -> list[CrossEntityLink]:
        display_names = {
            bp.logical_name.lower(): _display_name(bp.entity) for bp in blueprints
        }
        links: list[CrossEntityLink] = []
        for blueprint in blueprints:
            source = blueprint.logical_name
            source_display = display_names.get(source.lower(), source)
            for flow in blueprint.flows:
                event = TRIGGER_EVENT_DESCRIPTIONS.get(flow.definition.trigger_event, 'triggered')
                for action in flow.definition.dataverse_actions:
                    target = action.target_entity
                    if target.lower() == source.lower():
                        continue
                    links.append(CrossEntityLink(
                        source_entity=source,
                        source_entity_display_name=source_display,
                        target_entity=target,
                        target_entity_display_name=display_names.get(target.lower(), target),
                        automation_type='Flow',
                        automation_name=flow.name,
                        automation_id=flow.id,
                        operation=action.operation,
                        description=(f'Flow "{flow.name}" {action.operation.lower()}s records in '
                                     f'{target} when {source} is {event}'),
                        is_asynchronous=True,
                    ))
            for plugin in blueprint.plugins:
                for target, operation in self.plugin_hints(plugin, source, display_names):
                    links.append(CrossEntityLink(
                        source_entity=source,
                        source_entity_display_name=source_display,
                        target_entity=target,
                        target_entity_display_name=display_names[target],
                        automation_type='Plugin',
                        automation_name=plugin.name,
                        automation_id=plugin.id,
                        operation=operation,
                        description=(f'Plugin "{plugin.name}" may {operation.lower()} '
                                     f'{target} (detected from naming)'),
                        is_asynchronous=plugin.mode == ASYNC_PLUGIN_MODE,
                    ))
        return sorted(links, key=lambda link: (link.source_entity, link.target_entity))

    @staticmethod
    def plugin_hints(plugin, source: str, display_names: dict[str, str]) -> list[tuple[str, str]]:
        """Return (target entity, operation) pairs guessed from a step's name."""
        text = f"{plugin.name or ''} {plugin.description or ''}".lower()
        operation = next(
            (op for op, keywords in PLUGIN_OPERATION_KEYWORDS
             if any(keyword in text for keyword in keywords)),
            'Update',
        )
        return [
            (entity, operation) for entity in display_names
            if entity != source.lower() and re.search(rf'\b{re.escape(entity)}\b', text)
        ]
