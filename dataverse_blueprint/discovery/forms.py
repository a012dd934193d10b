"""Form fetcher."""

from dataverse_blueprint.client.base import MetadataClient
from dataverse_blueprint.domain.components import FormDefinition
from dataverse_blueprint.domain.constants import DEFAULT_BATCH_SIZE, FORM_TYPE_NAMES
from dataverse_blueprint.parsers import FormParser
from dataverse_blueprint.utils.ids import chunked


class FormFetcher:
    """Fetches forms per entity and decodes their script handlers."""

    def __init__(self, client: MetadataClient, batch_size: int = DEFAULT_BATCH_SIZE):
        self.client = client
        self.batch_size = batch_size
        self.parser = FormParser()

    async def fetch(self, entity_names) -> list[FormDefinition]:
        names = list(dict.fromkeys(n for n in entity_names if n))
        forms = []
        for batch in chunked(names, self.batch_size):
            for row in await self.client.get_forms(batch):
                forms.append(self.map_record(row))
        return forms

    def map_record(self, row) -> FormDefinition:
        form_xml = row.get('formxml')
        return FormDefinition(
            id=row.get('formid', ''),
            name=row.get('name', ''),
            type=row.get('type'),
            type_name=FORM_TYPE_NAMES.get(row.get('type'), 'Unknown'),
            entity=row.get('objecttypecode', ''),
            libraries=self.parser.parse_libraries(form_xml),
            event_handlers=self.parser.parse_handlers(form_xml),
        )
