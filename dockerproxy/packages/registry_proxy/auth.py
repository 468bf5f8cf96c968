"""Bearer token relay.

Registry clients that hit the proxy without a token are told (by the
proxy's own challenge) to fetch one from ``/v2/auth`` on the proxy. This
module answers that call: it asks the real upstream which token realm it
uses and relays the token request there, returning the realm's answer
untouched.
"""

from typing import Optional

import httpx
import structlog

from .challenge import parse_authenticate
from .paths import rewrite_scope
from .types import AuthChallenge, ProxyRequest, ProxyState
from .upstream import is_unauthorized, send_upstream

logger = structlog.stdlib.get_logger(__name__)


async def probe_upstream(
    client: httpx.AsyncClient,
    upstream_url: str,
    authorization: Optional[str] = None,
) -> httpx.Response:
    """GET the upstream API root, optionally with the client's credentials."""
    headers = []
    if authorization:
        headers.append(("Authorization", authorization))

    return await send_upstream(
        client,
        "GET",
        f"{upstream_url}/v2/",
        headers=headers,
        follow_redirects=True,
    )


async def fetch_token(
    client: httpx.AsyncClient,
    challenge: AuthChallenge,
    scope: Optional[str],
    authorization: Optional[str] = None,
) -> httpx.Response:
    """Request a token from the realm named in an upstream challenge."""
    params = {}
    if challenge.service:
        params["service"] = challenge.service
    if scope:
        params["scope"] = scope

    headers = []
    if authorization:
        headers.append(("Authorization", authorization))

    return await send_upstream(
        client,
        "GET",
        challenge.realm,
        headers=headers,
        params=params,
    )


async def exchange_token(
    client: httpx.AsyncClient,
    request: ProxyRequest,
    scope: Optional[str],
) -> httpx.Response:
    """Relay a token request to the upstream's token realm.

    Args:
        client: Shared outbound HTTP client
        request: Proxy context of the inbound token request
        scope: Requested scope (e.g., "repository:busybox:pull")

    Returns:
        The upstream response with an unread body: the realm's token
        response, or the probe response when the upstream does not
        challenge.

    Raises:
        ChallengeParseError: if the upstream challenge is malformed
        httpx.HTTPError: if an upstream call fails
    """
    request.transition(ProxyState.PROBING)
    probe = await probe_upstream(client, request.upstream_url)

    if not is_unauthorized(probe):
        request.transition(ProxyState.DONE)
        return probe

    authenticate = probe.headers.get("WWW-Authenticate")
    if authenticate is None:
        request.transition(ProxyState.DONE)
        return probe

    await probe.aclose()
    challenge = parse_authenticate(authenticate)
    request.transition(ProxyState.CHALLENGE_RECEIVED)

    # autocomplete repo part into scope for DockerHub library images
    if scope and request.is_primary:
        scope = rewrite_scope(scope)

    logger.info(
        "Relaying token request",
        upstream=request.upstream_url,
        realm=challenge.realm,
        service=challenge.service,
        scope=scope,
    )

    request.transition(ProxyState.TOKEN_REQUESTED)
    response = await fetch_token(client, challenge, scope, request.authorization)
    request.transition(ProxyState.DONE)
    return response
