"""Web resource (file) fetcher."""

import base64
import binascii
import logging

from dataverse_blueprint.discovery.base_fetcher import BaseFetcher
from dataverse_blueprint.domain.components import WebResource
from dataverse_blueprint.domain.constants import (
    JAVASCRIPT_WEB_RESOURCE_TYPE, TEXT_WEB_RESOURCE_TYPES, WEB_RESOURCE_TYPE_NAMES,
)
from dataverse_blueprint.domain.enums import RecordTable
from dataverse_blueprint.parsers import JavaScriptParser

logger = logging.getLogger(__name__)


def decode_content(encoded: str | None, resource_type: int) -> str | None:
    """Decode base64 content of text resources; binary types yield None."""
    if not encoded or resource_type not in TEXT_WEB_RESOURCE_TYPES:
        return None
    try:
        return base64.b64decode(encoded).decode('utf-8', errors='replace')
    except (binascii.Error, ValueError) as e:
        logger.warning("Could not decode web resource content: %s", e)
        return None


class WebResourceFetcher(BaseFetcher):
    """Fetches web resources and analyses JavaScript content."""

    table = RecordTable.WEB_RESOURCES

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.parser = JavaScriptParser()

    def map_record(self, row) -> WebResource:
        resource_type = row.get('webresourcetype') or 0
        encoded = row.get('content')
        content = decode_content(encoded, resource_type)
        analysis = None
        if resource_type == JAVASCRIPT_WEB_RESOURCE_TYPE and content:
            analysis = self.parser.analyze(content)
        return WebResource(
            id=row.get('webresourceid', ''),
            name=row.get('name', ''),
            display_name=row.get('displayname') or row.get('name', ''),
            type=resource_type,
            type_name=WEB_RESOURCE_TYPE_NAMES.get(resource_type, 'Unknown'),
            content=content,
            content_size=len(encoded) if encoded else 0,
            description=row.get('description'),
            analysis=analysis,
            modified_on=row.get('modifiedon'),
        )
