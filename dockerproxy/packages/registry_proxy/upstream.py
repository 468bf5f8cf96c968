"""Low level helpers for talking to upstream registries."""

from typing import AsyncIterator, Iterable, Optional

import httpx
import structlog

logger = structlog.stdlib.get_logger(__name__)

# Hop-by-hop headers are never forwarded, neither upstream nor back to the client.
# The inbound host header names the proxy, not the upstream.
HOP_BY_HOP_HEADERS = frozenset(
    [
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "host",
    ]
)

BODY_METHODS = frozenset(["POST", "PUT", "PATCH"])


def forwardable_headers(
    headers: Iterable[tuple[str, str]],
) -> list[tuple[str, str]]:
    return [
        (name, value)
        for name, value in headers
        if name.lower() not in HOP_BY_HOP_HEADERS
    ]


def is_unauthorized(response: httpx.Response) -> bool:
    return response.status_code == 401


def is_redirect(response: httpx.Response) -> bool:
    return 300 <= response.status_code < 400


async def send_upstream(
    client: httpx.AsyncClient,
    method: str,
    url: str | httpx.URL,
    *,
    headers: Optional[Iterable[tuple[str, str]]] = None,
    params: Optional[dict[str, str]] = None,
    content: Optional[AsyncIterator[bytes]] = None,
    follow_redirects: bool = True,
) -> httpx.Response:
    """Send a request upstream and return the response with an unread body.

    The caller owns the returned response and has to close it, either by
    streaming it back to the client or with ``aclose()``.

    Raises:
        httpx.HTTPError: if the upstream call fails
    """
    request = client.build_request(
        method,
        url,
        headers=list(headers) if headers is not None else None,
        params=params,
        content=content,
    )

    try:
        response = await client.send(
            request, stream=True, follow_redirects=follow_redirects
        )
    except httpx.TimeoutException as e:
        logger.error(
            "Timeout while calling upstream",
            error=str(e),
            method=method,
            target_url=str(request.url),
        )
        raise
    except httpx.HTTPError as e:
        logger.error(
            "HTTP error while calling upstream",
            error=str(e),
            method=method,
            target_url=str(request.url),
        )
        raise

    logger.info(
        "Upstream response received",
        method=method,
        status_code=response.status_code,
        target_url=str(request.url),
    )
    return response
