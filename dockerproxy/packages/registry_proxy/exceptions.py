"""Errors raised while proxying registry requests."""

from typing import Sequence


class ProxyError(Exception):
    """Base class for every registry proxy error."""


class RouteNotFound(ProxyError):
    """No upstream registry is configured for the requested hostname."""

    def __init__(self, hostname: str, routes: Sequence[str]):
        super().__init__(f"no route configured for hostname {hostname!r}")
        self.hostname = hostname
        self.routes = list(routes)


class ChallengeParseError(ProxyError):
    """An upstream WWW-Authenticate header could not be parsed."""

    def __init__(self, header: str):
        super().__init__(f"invalid Www-Authenticate Header: {header}")
        self.header = header
