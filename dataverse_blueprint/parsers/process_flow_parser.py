"""Parser for business process flow XAML."""

import logging
import re

from dataverse_blueprint.domain.components import ProcessDefinition, ProcessStage
from dataverse_blueprint.domain.constants import (
    PROCESS_STAGE_TAG_RE, PROCESS_STEP_TAG_RE, XML_ATTRIBUTE_PATTERN,
)

logger = logging.getLogger(__name__)


def _attribute(tag: str, name: str) -> str | None:
    m = re.search(XML_ATTRIBUTE_PATTERN.format(name=name), tag)
    return m.group(1) if m else None


class ProcessFlowParser:
    """Extracts stages and step counts from a process definition."""

    def parse(self, xaml: str | None) -> ProcessDefinition:
        if not xaml:
            return ProcessDefinition()

        try:
            stages = []
            for m in PROCESS_STAGE_TAG_RE.finditer(xaml):
                tag = m.group(0)
                entity = _attribute(tag, 'EntityName')
                name = _attribute(tag, 'StageName')
                stage_id = _attribute(tag, 'StageId')
                if entity and name and stage_id:
                    stages.append(ProcessStage(id=stage_id, name=name, entity=entity))

            entities = list(dict.fromkeys(s.entity for s in stages))
            return ProcessDefinition(
                stages=stages,
                total_steps=len(PROCESS_STEP_TAG_RE.findall(xaml)),
                entities=entities,
                cross_entity_flow=len(entities) > 1,
            )
        except Exception as e:
            logger.warning("Failed to parse process flow definition: %s", e)
            return ProcessDefinition(parse_error=str(e) or type(e).__name__)
