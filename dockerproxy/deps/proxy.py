from typing import Annotated

import httpx
from fastapi import Depends, Request

from dockerproxy.factories import proxy_config_factory
from dockerproxy.packages.registry_proxy import ProxyConfig


def get_proxy_config() -> ProxyConfig:
    return proxy_config_factory()


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared upstream client, opened in the application lifespan."""
    return request.app.state.http_client


ProxyConfigDep = Annotated[ProxyConfig, Depends(get_proxy_config)]
HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]
