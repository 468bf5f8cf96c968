"""Generic HTTP proxy utilities for Docker Registry API.

This module turns a ProxyRequest into the response sent back to the
client. It handles:
- The API root probe and token endpoint
- The library/ redirect for unqualified Docker Hub names
- Streaming request bodies (for uploads)
- Streaming response bodies (for downloads)
- Header forwarding and filtering
- Docker Hub blob redirects, which are re-fetched by the proxy
- Replacing upstream auth challenges with the proxy's own

No dependencies on dockerproxy.* modules to maintain independence and reusability.
"""

from typing import Optional

import httpx
import structlog
from fastapi.responses import (
    JSONResponse,
    RedirectResponse,
    Response,
    StreamingResponse,
)
from starlette.background import BackgroundTask

from .auth import exchange_token, probe_upstream
from .paths import library_redirect_path
from .routing import ProxyConfig
from .types import ProxyRequest, ProxyState
from .upstream import (
    forwardable_headers,
    is_redirect,
    is_unauthorized,
    send_upstream,
)

logger = structlog.stdlib.get_logger(__name__)


def unauthorized_response(config: ProxyConfig, hostname: str) -> JSONResponse:
    """Challenge pointing the client at this proxy's own token endpoint.

    Clients always obtain tokens through the proxy, never straight from the
    upstream's identity realm.
    """
    realm = f"{config.scheme}://{hostname}/v2/auth"
    return JSONResponse(
        status_code=401,
        content={"message": "UNAUTHORIZED"},
        headers={
            "Www-Authenticate": f'Bearer realm="{realm}",service="{config.service_name}"',
        },
    )


def stream_response(upstream: httpx.Response) -> StreamingResponse:
    """Pass an upstream response through to the client unmodified.

    The body is relayed as raw bytes, so content-encoding and content-length
    stay valid. The upstream response is closed once the client response
    finishes or the client goes away. Repeated headers such as ``Link`` or
    ``Set-Cookie`` keep every value.
    """
    response = StreamingResponse(
        content=upstream.aiter_raw(),
        status_code=upstream.status_code,
        background=BackgroundTask(upstream.aclose),
    )
    response.raw_headers = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in forwardable_headers(upstream.headers.multi_items())
    ]
    return response


async def probe_api_root(
    client: httpx.AsyncClient,
    config: ProxyConfig,
    request: ProxyRequest,
) -> Response:
    """Answer ``GET /v2/`` by checking whether the upstream wants a token."""
    request.transition(ProxyState.PROBING)
    response = await probe_upstream(client, request.upstream_url, request.authorization)

    if is_unauthorized(response):
        await response.aclose()
        request.transition(ProxyState.DONE)
        return unauthorized_response(config, request.hostname)

    request.transition(ProxyState.DONE)
    return stream_response(response)


async def relay_token(
    client: httpx.AsyncClient,
    request: ProxyRequest,
) -> Response:
    response = await exchange_token(client, request, request.scope)
    return stream_response(response)


def _redirect_to_library(request: ProxyRequest) -> Optional[RedirectResponse]:
    if not request.is_primary:
        return None

    new_path = library_redirect_path(request.path)
    if new_path is None:
        return None

    redirect_url = request.url.copy_with(path=new_path)
    logger.info(
        "Redirecting to library namespace",
        path=request.path,
        redirect_path=new_path,
    )
    return RedirectResponse(url=str(redirect_url), status_code=301)


async def forward(
    client: httpx.AsyncClient,
    config: ProxyConfig,
    request: ProxyRequest,
) -> Response:
    """Proxy a manifest, blob or tag request to the upstream registry.

    Args:
        client: Shared outbound HTTP client
        config: Proxy configuration
        request: Proxy context of the inbound request

    Returns:
        A library/ redirect, the proxy's own challenge, or the streamed
        upstream response

    Raises:
        httpx.HTTPError: If the proxied request fails
    """
    redirect = _redirect_to_library(request)
    if redirect is not None:
        request.transition(ProxyState.DONE)
        return redirect

    target_url = request.upstream_url + request.url.raw_path.decode("ascii")
    headers = forwardable_headers(request.headers.multi_items())

    logger.info(
        "Proxying request",
        method=request.method,
        target_url=target_url,
        upstream=request.upstream_url,
    )

    request.transition(ProxyState.FORWARDING)
    response = await send_upstream(
        client,
        request.method,
        target_url,
        headers=headers,
        content=request.body,
        # don't follow redirect to dockerhub blob upstream
        follow_redirects=not request.is_primary,
    )

    if is_unauthorized(response):
        await response.aclose()
        request.transition(ProxyState.DONE)
        return unauthorized_response(config, request.hostname)

    # handle dockerhub blob redirect manually
    location = response.headers.get("Location")
    if request.is_primary and is_redirect(response) and location:
        await response.aclose()
        request.transition(ProxyState.REDIRECTING)
        blob_url = response.url.join(location)
        logger.info("Following blob redirect", location=str(blob_url))

        response = await send_upstream(
            client,
            "GET",
            blob_url,
            headers=headers,
            follow_redirects=True,
        )

    request.transition(ProxyState.DONE)
    return stream_response(response)
