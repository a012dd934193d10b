"""Fetcher for solution records and their publishers."""

from dataverse_blueprint.discovery.base_fetcher import BaseFetcher
from dataverse_blueprint.domain.components import SolutionInfo
from dataverse_blueprint.domain.enums import RecordTable


class SolutionFetcher(BaseFetcher):
    table = RecordTable.SOLUTIONS

    def map_record(self, row) -> SolutionInfo:
        unique_name = row.get('uniquename', '')
        return SolutionInfo(
            id=row.get('solutionid', ''),
            unique_name=unique_name,
            friendly_name=row.get('friendlyname') or unique_name,
            version=row.get('version'),
            is_managed=bool(row.get('ismanaged')),
            publisher_name=(self.expanded(row, 'publisherid', 'friendlyname')
                            or self.formatted(row, '_publisherid_value')
                            or 'Unknown'),
            publisher_unique_name=self.expanded(row, 'publisherid', 'uniquename') or '',
            publisher_prefix=self.expanded(row, 'publisherid', 'customizationprefix'),
        )
