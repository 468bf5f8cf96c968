from functools import lru_cache

import httpx

from dockerproxy.packages.registry_proxy import ProxyConfig, RouteTable
from dockerproxy.settings import settings


@lru_cache
def proxy_config_factory() -> ProxyConfig:
    return ProxyConfig(
        routes=RouteTable.from_domain(
            settings.CUSTOM_DOMAIN,
            labels=settings.ROUTES,
            fallback_upstream=settings.FALLBACK_UPSTREAM,
        ),
        debug=settings.DEBUG,
        service_name=settings.PROXY_SERVICE_NAME,
        project_url=settings.PROJECT_URL,
    )


def http_client_factory() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=settings.UPSTREAM_CONNECT_TIMEOUT,
            read=settings.UPSTREAM_READ_TIMEOUT,
            write=settings.UPSTREAM_WRITE_TIMEOUT,
            pool=settings.UPSTREAM_POOL_TIMEOUT,
        ),
        headers={"User-Agent": "docker-registry-proxy"},
    )
