"""Aggregation of external endpoints called by flows and scripts."""

from dataverse_blueprint.domain.components import ExternalEndpoint, Flow, WebResource
from dataverse_blueprint.domain.constants import KNOWN_DOMAINS, TRUSTED_DOMAINS
from dataverse_blueprint.domain.enums import RiskLevel

_RISK_ORDER = {RiskLevel.UNKNOWN: 0, RiskLevel.KNOWN: 1, RiskLevel.TRUSTED: 2}


def risk_level(domain: str) -> RiskLevel:
    domain = domain.lower()
    if any(domain == d or domain.endswith('.' + d) for d in TRUSTED_DOMAINS):
        return RiskLevel.TRUSTED
    if any(domain == d or domain.endswith('.' + d) for d in KNOWN_DOMAINS):
        return RiskLevel.KNOWN
    return RiskLevel.UNKNOWN


class ExternalDependencyAggregator:
    """Merges external calls into one endpoint per domain."""

    def aggregate(self, flows: list[Flow], web_resources: list[WebResource]) -> list[ExternalEndpoint]:
        endpoints: dict[str, ExternalEndpoint] = {}

        for flow in flows:
            for call in flow.definition.external_calls:
                self._add(endpoints, call.domain, call.url, {
                    'type': 'Flow', 'name': flow.name, 'id': flow.id,
                    'entity': flow.entity, 'mode': 'Async',
                    'confidence': call.confidence.value,
                })

        for resource in web_resources:
            if not resource.analysis:
                continue
            for call in resource.analysis.external_calls:
                self._add(endpoints, call.domain, call.url, {
                    'type': 'JavaScript', 'name': resource.name, 'id': resource.id,
                    'entity': None, 'mode': 'Client',
                    'confidence': call.confidence.value,
                })

        for endpoint in endpoints.values():
            endpoint.risk_level = risk_level(endpoint.domain)
        return sorted(
            endpoints.values(),
            key=lambda e: (_RISK_ORDER[e.risk_level], e.domain),
        )

    @staticmethod
    def _add(endpoints: dict[str, ExternalEndpoint], domain: str, url: str, source: dict) -> None:
        key = domain.lower()
        endpoint = endpoints.get(key)
        if endpoint is None:
            endpoint = endpoints[key] = ExternalEndpoint(
                domain=key,
                url=url,
                protocol='https' if url.startswith('https://') else 'http',
            )
        elif url.startswith('https://'):
            endpoint.protocol = 'https'
        endpoint.detected_in.append(source)
        endpoint.call_count += 1
