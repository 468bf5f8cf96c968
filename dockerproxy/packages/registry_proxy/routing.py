"""Hostname based routing to upstream registries.

Every routed hostname is ``<label>.<domain>`` where the label selects the
upstream registry, e.g. ``quay.example.com`` fronts ``https://quay.io``.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

PRIMARY_REGISTRY_URL = "https://registry-1.docker.io"

DEFAULT_ROUTES: Mapping[str, str] = MappingProxyType(
    {
        "docker": PRIMARY_REGISTRY_URL,
        "quay": "https://quay.io",
        "gcr": "https://gcr.io",
        "k8s-gcr": "https://k8s.gcr.io",
        "k8s": "https://registry.k8s.io",
        "ghcr": "https://ghcr.io",
        "cloudsmith": "https://docker.cloudsmith.io",
        "ecr": "https://public.ecr.aws",
        # staging route for testing
        "docker-staging": PRIMARY_REGISTRY_URL,
    }
)


@dataclass(frozen=True)
class Route:
    hostname: str
    upstream_url: str


class RouteTable:
    """Read-only mapping from request hostname to upstream base URL.

    Lookups are exact and case-sensitive. When a fallback upstream is given
    (debug mode) it answers every hostname that is not mapped.
    """

    def __init__(
        self,
        routes: Iterable[Route],
        fallback_upstream: Optional[str] = None,
    ):
        table: dict[str, str] = {}
        for route in routes:
            if route.hostname in table:
                raise ValueError(f"Duplicate route for hostname {route.hostname!r}")
            table[route.hostname] = route.upstream_url.rstrip("/")

        self._routes = MappingProxyType(table)
        self._fallback_upstream = (
            fallback_upstream.rstrip("/") if fallback_upstream else None
        )

    @classmethod
    def from_domain(
        cls,
        domain: str,
        labels: Mapping[str, str] = DEFAULT_ROUTES,
        fallback_upstream: Optional[str] = None,
    ) -> "RouteTable":
        """Build the table by prefixing ``domain`` with every subdomain label."""
        return cls(
            (Route(f"{label}.{domain}", upstream) for label, upstream in labels.items()),
            fallback_upstream=fallback_upstream,
        )

    @property
    def hostnames(self) -> list[str]:
        return list(self._routes)

    @property
    def fallback_upstream(self) -> Optional[str]:
        return self._fallback_upstream

    def __contains__(self, hostname: object) -> bool:
        return hostname in self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def lookup(self, hostname: str) -> Optional[str]:
        upstream = self._routes.get(hostname)
        if upstream is not None:
            return upstream
        return self._fallback_upstream

    @staticmethod
    def is_primary(upstream_url: str) -> bool:
        return upstream_url.rstrip("/") == PRIMARY_REGISTRY_URL

    def __repr__(self):
        return (
            f"RouteTable(routes={len(self._routes)}, "
            f"fallback_upstream={self._fallback_upstream})"
        )


@dataclass(frozen=True)
class ProxyConfig:
    """Immutable proxy configuration shared by every request.

    Attributes:
        routes: Hostname routing table
        debug: Debug mode, advertises plain http token realms
        service_name: Service name advertised in the proxy's own challenge
        project_url: Link shown on the welcome page
    """

    routes: RouteTable
    debug: bool = False
    service_name: str = "docker-registry-proxy"
    project_url: str = ""

    @property
    def scheme(self) -> str:
        return "http" if self.debug else "https"
