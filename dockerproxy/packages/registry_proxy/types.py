"""Registry proxy types and data structures.

This module contains shared types used across the registry proxy package.
No dependencies on dockerproxy.* modules to maintain independence.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Optional

import httpx
import structlog

logger = structlog.stdlib.get_logger(__name__)


@dataclass(frozen=True)
class AuthChallenge:
    """Bearer challenge advertised by an upstream registry.

    Attributes:
        realm: URL of the token endpoint (e.g., "https://auth.docker.io/token")
        service: Service name the token is issued for (may be empty)
    """

    realm: str
    service: str = ""


class RequestKind(str, Enum):
    """Closed set of inbound request shapes the proxy understands."""

    ROOT = "root"
    API_ROOT = "api_root"
    TOKEN = "token"
    DATA = "data"


class ProxyState(str, Enum):
    RECEIVED = "received"
    PROBING = "probing"
    CHALLENGE_RECEIVED = "challenge_received"
    TOKEN_REQUESTED = "token_requested"
    FORWARDING = "forwarding"
    REDIRECTING = "redirecting"
    DONE = "done"


@dataclass
class ProxyRequest:
    """Per-request proxying context.

    Built once for every inbound request and discarded when the response
    has been produced. Never shared between requests.

    Attributes:
        method: Inbound HTTP method
        url: Full inbound URL as seen by the proxy
        headers: Inbound request headers
        upstream_url: Base URL of the resolved upstream registry
        is_primary: Whether the upstream is the primary (Docker Hub) registry
        body: Streamed request body for methods that carry one
    """

    method: str
    url: httpx.URL
    headers: httpx.Headers
    upstream_url: str
    is_primary: bool = False
    body: Optional[AsyncIterator[bytes]] = None
    state: ProxyState = field(default=ProxyState.RECEIVED)

    @property
    def hostname(self) -> str:
        return self.url.host

    @property
    def path(self) -> str:
        return self.url.path

    @property
    def authorization(self) -> Optional[str]:
        return self.headers.get("authorization")

    @property
    def scope(self) -> Optional[str]:
        return self.url.params.get("scope")

    def transition(self, state: ProxyState) -> None:
        logger.debug(
            "Proxy state transition",
            upstream=self.upstream_url,
            path=self.path,
            from_state=self.state.value,
            to_state=state.value,
        )
        self.state = state
