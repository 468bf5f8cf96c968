"""Registry proxy package for Docker Registry v2 API.

This package provides hostname routing, Docker Hub path normalization,
token relaying and request forwarding for fronting several upstream
registries behind one proxy.
"""

from .auth import exchange_token
from .challenge import parse_authenticate
from .exceptions import ChallengeParseError, ProxyError, RouteNotFound
from .paths import classify_path, library_redirect_path, rewrite_scope
from .proxy import forward, probe_api_root, relay_token, unauthorized_response
from .routing import (
    DEFAULT_ROUTES,
    PRIMARY_REGISTRY_URL,
    ProxyConfig,
    Route,
    RouteTable,
)
from .types import AuthChallenge, ProxyRequest, ProxyState, RequestKind

__all__ = [
    # Types
    "AuthChallenge",
    "ProxyConfig",
    "ProxyRequest",
    "ProxyState",
    "RequestKind",
    "Route",
    "RouteTable",
    "DEFAULT_ROUTES",
    "PRIMARY_REGISTRY_URL",
    # Errors
    "ProxyError",
    "RouteNotFound",
    "ChallengeParseError",
    # Utilities
    "classify_path",
    "rewrite_scope",
    "library_redirect_path",
    "parse_authenticate",
    "exchange_token",
    "probe_api_root",
    "relay_token",
    "forward",
    "unauthorized_response",
]
