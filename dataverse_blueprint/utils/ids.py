"""Identifier normalization."""

from dataverse_blueprint.domain.constants import IDENTIFIER_DELIMITERS_RE


def normalize_id(value) -> str:
    """Lower-case an identifier and strip brace/paren decoration.

    ``{4A1B...}`` and ``4a1b...`` normalize to the same value.
    """
    if value is None:
        return ''
    return IDENTIFIER_DELIMITERS_RE.sub('', str(value)).lower()


def unique_ids(values) -> tuple[str, ...]:
    """Normalize and de-duplicate ids, keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        key = normalize_id(value)
        if key:
            seen.setdefault(key, None)
    return tuple(seen)


def chunked(items, size: int):
    """Yield consecutive slices of ``items`` holding at most ``size`` elements."""
    items = list(items)
    for start in range(0, len(items), size):
        yield items[start:start + size]
