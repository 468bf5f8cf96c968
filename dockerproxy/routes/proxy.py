"""Docker Registry v2 API Proxy.

Every inbound request lands here. The request hostname selects the
upstream registry, the path selects what the proxy does with it.

See: https://distribution.github.io/distribution/spec/api/
"""

import httpx
import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from dockerproxy.deps.proxy import HttpClientDep, ProxyConfigDep
from dockerproxy.packages.registry_proxy import (
    ProxyConfig,
    ProxyRequest,
    RequestKind,
    RouteNotFound,
    RouteTable,
    classify_path,
    forward,
    probe_api_root,
    relay_token,
)
from dockerproxy.packages.registry_proxy.upstream import BODY_METHODS

logger = structlog.stdlib.get_logger(__name__)

router = APIRouter(tags=["Registry Proxy"])

ALL_METHODS = [
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
    "OPTIONS",
    "TRACE",
    "CONNECT",
]


def root_response(config: ProxyConfig, url: httpx.URL) -> Response:
    """Send routed hosts to the API root, list the routes everywhere else."""
    if url.host in config.routes:
        return RedirectResponse(url=str(url.copy_with(path="/v2/")), status_code=301)

    return JSONResponse(
        status_code=200,
        content={
            "message": "Welcome to the Docker registry proxy!",
            "routes": config.routes.hostnames,
            "repository": config.project_url,
        },
    )


@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def handle_request(
    request: Request,
    config: ProxyConfigDep,
    client: HttpClientDep,
):
    url = httpx.URL(str(request.url))
    kind = classify_path(url.path)

    if kind is RequestKind.ROOT:
        return root_response(config, url)

    upstream_url = config.routes.lookup(url.host)
    if upstream_url is None:
        raise RouteNotFound(url.host, config.routes.hostnames)

    structlog.contextvars.bind_contextvars(upstream=upstream_url)
    logger.debug("Dispatching registry request", kind=kind.value, method=request.method)

    proxy_request = ProxyRequest(
        method=request.method,
        url=url,
        headers=httpx.Headers(request.headers.items()),
        upstream_url=upstream_url,
        is_primary=RouteTable.is_primary(upstream_url),
        body=request.stream() if request.method in BODY_METHODS else None,
    )

    if kind is RequestKind.API_ROOT:
        return await probe_api_root(client, config, proxy_request)
    elif kind is RequestKind.TOKEN:
        return await relay_token(client, proxy_request)
    elif kind is RequestKind.DATA:
        return await forward(client, config, proxy_request)
    else:
        raise ValueError(f"Unhandled request kind: {kind}")
