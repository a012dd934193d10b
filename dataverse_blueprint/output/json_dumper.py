"""JSON output generation.

Writes a generated blueprint, its summary, per-entity files, and any
degraded categories to a structured JSON directory.
"""

import dataclasses
import json
import os
import re
from enum import Enum
from typing import Any

from dataverse_blueprint.domain.models import BlueprintResult, DegradedCategory, EntityBlueprint


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses and enums into plain JSON-compatible values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def _sanitize_filename(name: str) -> str:
    sanitized = re.sub(r'[^\w\-]', '_', name or 'unknown')[:80]
    return f"{sanitized}.json"


class JSONDumper:
    """Writes a blueprint result to a JSON directory.

    Output structure:
        output_dir/
        ├── blueprint.json
        ├── summary.json
        ├── degraded.json (only if a category degraded)
        └── entities/{logical_name}.json

    Args:
        output_dir: Root directory for output files.
        pretty: Whether to pretty-print JSON (default True).
    """

    def __init__(self, output_dir: str, pretty: bool = True) -> None:
        self._output_dir = output_dir
        self._indent = 2 if pretty else None

    def write_all(self, result: BlueprintResult) -> None:
        self.write_blueprint(result)
        self.write_summary(result)
        self.write_entities(result.entities)
        self.write_degraded(result.degraded)

    def write_blueprint(self, result: BlueprintResult) -> None:
        """Write the complete result."""
        os.makedirs(self._output_dir, exist_ok=True)
        self._write_json(os.path.join(self._output_dir, 'blueprint.json'), to_jsonable(result))

    def write_summary(self, result: BlueprintResult) -> None:
        """Write metadata, counts, and warnings."""
        os.makedirs(self._output_dir, exist_ok=True)
        data = {
            '_metadata': to_jsonable(result.metadata),
            'summary': result.summary,
            'warnings': result.warnings,
            'entities': [
                {
                    'logical_name': bp.logical_name,
                    'attributes': len(bp.entity.get('Attributes') or []),
                    'plugins': len(bp.plugins),
                    'flows': len(bp.flows),
                    'business_rules': len(bp.business_rules),
                    'forms': len(bp.forms),
                    'secured_fields': (len(bp.field_security.secured_fields)
                                       if bp.field_security else 0),
                }
                for bp in result.entities
            ],
        }
        self._write_json(os.path.join(self._output_dir, 'summary.json'), data)

    def write_entities(self, blueprints: list[EntityBlueprint]) -> None:
        """Write each entity blueprint as an individual JSON file."""
        dir_path = os.path.join(self._output_dir, 'entities')
        os.makedirs(dir_path, exist_ok=True)
        for bp in blueprints:
            path = os.path.join(dir_path, _sanitize_filename(bp.logical_name))
            self._write_json(path, to_jsonable(bp))

    def write_degraded(self, degraded: list[DegradedCategory]) -> None:
        """Write degraded categories (only if any exist)."""
        if not degraded:
            return
        os.makedirs(self._output_dir, exist_ok=True)
        data = [{'category': d.category, 'error': d.error} for d in degraded]
        self._write_json(os.path.join(self._output_dir, 'degraded.json'), data)

    def _write_json(self, path: str, data: Any) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=self._indent, ensure_ascii=False, default=str)
