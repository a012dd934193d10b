"""Static analysis of JavaScript web resources."""

import logging

from dataverse_blueprint.domain.components import ExternalCall, ScriptAnalysis
from dataverse_blueprint.domain.constants import (
    AXIOS_CALL_RE, DEPRECATED_XRM_PAGE_RE, FETCH_CALL_RE, FRAMEWORK_MARKERS,
    JQUERY_AJAX_RE, URL_LITERAL_RE, XHR_CALL_RE, XRM_USAGE_RE,
)
from dataverse_blueprint.domain.enums import Complexity, Confidence
from dataverse_blueprint.parsers.urls import extract_domain, is_external_url

logger = logging.getLogger(__name__)


class JavaScriptParser:
    """Detects platform API usage, frameworks and outbound calls."""

    def analyze(self, content: str | None) -> ScriptAnalysis:
        if not content:
            return ScriptAnalysis()

        try:
            lines = [line for line in content.splitlines() if line.strip()]
            frameworks = [
                name for name, patterns in FRAMEWORK_MARKERS.items()
                if any(p.search(content) for p in patterns)
            ]
            calls = self.find_external_calls(content)
            return ScriptAnalysis(
                lines_of_code=len(lines),
                xrm_namespaces=sorted(set(XRM_USAGE_RE.findall(content))),
                uses_deprecated_xrm_page=bool(DEPRECATED_XRM_PAGE_RE.search(content)),
                frameworks=frameworks,
                external_calls=calls,
                complexity=self.complexity(len(lines), len(calls), len(frameworks)),
            )
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Failed to analyze script: %s", e)
            return ScriptAnalysis(parse_error=str(e))

    def find_external_calls(self, content: str) -> list[ExternalCall]:
        calls: list[ExternalCall] = []
        seen: set[str] = set()

        def add(url, method, action_name, confidence):
            if url in seen or not is_external_url(url):
                return
            seen.add(url)
            calls.append(ExternalCall(
                url=url, domain=extract_domain(url), method=method,
                action_name=action_name, confidence=confidence,
            ))

        for m in FETCH_CALL_RE.finditer(content):
            add(m.group(1), (m.group(2) or 'GET').upper(), 'fetch', Confidence.HIGH)
        for m in XHR_CALL_RE.finditer(content):
            add(m.group(2), m.group(1).upper(), 'XMLHttpRequest', Confidence.HIGH)
        for m in AXIOS_CALL_RE.finditer(content):
            add(m.group(2), m.group(1).upper(), 'axios', Confidence.HIGH)
        for m in JQUERY_AJAX_RE.finditer(content):
            add(m.group(1), m.group(2).upper(), '$.ajax', Confidence.MEDIUM)
        for m in URL_LITERAL_RE.finditer(content):
            add(m.group(0), None, 'URL in string', Confidence.LOW)
        return calls

    @staticmethod
    def complexity(lines_of_code: int, external_calls: int, frameworks: int) -> Complexity:
        score = 0
        if lines_of_code > 500:
            score += 2
        elif lines_of_code > 200:
            score += 1
        if external_calls > 3:
            score += 2
        elif external_calls > 0:
            score += 1
        if frameworks > 1:
            score += 1

        if score >= 4:
            return Complexity.HIGH
        if score >= 2:
            return Complexity.MEDIUM
        return Complexity.LOW
