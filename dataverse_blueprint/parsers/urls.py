"""URL helpers shared by the flow and script parsers."""

import re
from urllib.parse import urlparse

from dataverse_blueprint.domain.constants import INTERNAL_URL_MARKERS

_HOST_RE = re.compile(r'^(?:https?://)?([^/\s:?#]+)', re.I)


def extract_domain(url: str) -> str:
    try:
        host = urlparse(url).hostname if '://' in url else None
    except ValueError:
        return 'unknown'
    if host:
        return host
    m = _HOST_RE.match(url)
    return m.group(1) if m else 'unknown'


def is_external_url(url: str) -> bool:
    """True for absolute http(s) URLs that do not point back at the platform."""
    if any(marker in url for marker in INTERNAL_URL_MARKERS):
        return False
    return url.startswith(('http://', 'https://'))
