"""Plugin step (trigger) fetcher."""

import logging
from typing import Any

from dataverse_blueprint.discovery.base_fetcher import BaseFetcher
from dataverse_blueprint.domain.components import ImageDefinition, PluginStep
from dataverse_blueprint.domain.constants import MODE_NAMES, STAGE_NAMES
from dataverse_blueprint.domain.enums import RecordTable
from dataverse_blueprint.utils.ids import normalize_id

logger = logging.getLogger(__name__)


def split_attributes(value: str | None) -> list[str]:
    if not value:
        return []
    return [a.strip() for a in value.split(',') if a.strip()]


class PluginFetcher(BaseFetcher):
    """Fetches plugin steps together with their pre/post images."""

    table = RecordTable.PLUGIN_STEPS

    async def build(self, rows):
        images = await self._images_by_step([r.get('sdkmessageprocessingstepid') for r in rows])
        steps = []
        for row in rows:
            step = self.map_record(row)
            for image in images.get(normalize_id(step.id), []):
                if image.image_type == 'PreImage':
                    step.pre_image = image
                else:
                    step.post_image = image
            steps.append(step)
        return steps

    async def _images_by_step(self, step_ids) -> dict[str, list[ImageDefinition]]:
        step_ids = [s for s in step_ids if s]
        if not step_ids:
            return {}
        try:
            rows = await self.fetch_rows(RecordTable.PLUGIN_STEP_IMAGES, step_ids)
        except Exception as e:
            logger.warning("Failed to retrieve plugin images: %s", e)
            return {}

        images: dict[str, list[ImageDefinition]] = {}
        for row in rows:
            step_id = normalize_id(row.get('_sdkmessageprocessingstepid_value'))
            if not step_id:
                continue
            images.setdefault(step_id, []).append(ImageDefinition(
                id=row.get('sdkmessageprocessingstepimageid', ''),
                name=row.get('name', ''),
                image_type='PreImage' if row.get('imagetype') == 0 else 'PostImage',
                attributes=split_attributes(row.get('attributes')),
                message_property_name=row.get('messagepropertyname'),
            ))
        return images

    def map_record(self, row: dict[str, Any]) -> PluginStep:
        stage = row.get('stage') or 0
        mode = row.get('mode') or 0
        return PluginStep(
            id=row.get('sdkmessageprocessingstepid', ''),
            name=row.get('name', ''),
            stage=stage,
            stage_name=STAGE_NAMES.get(stage, 'Unknown'),
            mode=mode,
            mode_name=MODE_NAMES.get(mode, 'Unknown'),
            rank=row.get('rank') or 0,
            message=self.expanded(row, 'sdkmessageid', 'name') or 'Unknown',
            entity=self.expanded(row, 'sdkmessagefilterid', 'primaryobjecttypecode') or 'none',
            assembly_name=self.expanded(row, 'plugintypeid', 'assemblyname') or 'Unknown',
            type_name=self.expanded(row, 'plugintypeid', 'typename') or 'Unknown',
            filtering_attributes=split_attributes(row.get('filteringattributes')),
            description=row.get('description'),
            custom_configuration=row.get('configuration'),
            impersonating_user=self.expanded(row, 'impersonatinguserid', 'fullname'),
        )
