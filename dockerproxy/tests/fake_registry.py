"""In-memory stand-in for upstream registries and their token realms."""

from json import dumps
from typing import Any, AsyncIterator, Optional, Union

import httpx

DOCKER_HUB = "https://registry-1.docker.io"
DOCKER_HUB_CHALLENGE = (
    'Bearer realm="https://auth.docker.io/token",service="registry.docker.io"'
)
QUAY = "https://quay.io"
QUAY_CHALLENGE = 'Bearer realm="https://quay.io/v2/auth",service="quay.io"'

HeadersArg = Union[dict[str, str], list[tuple[str, str]], None]


class UnreadBody(httpx.AsyncByteStream):
    """Body that is only produced when the caller iterates it.

    Real transports hand back unread streams; ``httpx.Response(content=...)``
    reads its body eagerly, which a proxy relaying raw bytes cannot consume.
    """

    def __init__(self, body: bytes):
        self._body = body

    async def __aiter__(self) -> AsyncIterator[bytes]:
        if self._body:
            yield self._body


def _stream_response(
    status_code: int, headers: HeadersArg, body: bytes
) -> httpx.Response:
    return httpx.Response(status_code, headers=headers, stream=UnreadBody(body))


class FakeRegistry:
    """Answers requests sent through ``httpx.MockTransport``.

    Responses are registered per method and URL (scheme, host and path;
    the query string is ignored). Every request that reaches the fake is
    recorded so tests can assert on what the proxy sent upstream.
    """

    def __init__(self):
        self._responses: dict[tuple[str, str], dict[str, Any]] = {}
        self._errors: dict[tuple[str, str], str] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        url: str,
        status_code: int = 200,
        headers: HeadersArg = None,
        json: Any = None,
        content: Optional[bytes] = None,
    ) -> None:
        response_headers = httpx.Headers(headers)
        body = content or b""
        if json is not None:
            body = dumps(json).encode("utf-8")
            response_headers.setdefault("Content-Type", "application/json")

        self._responses[(method, self._key(httpx.URL(url)))] = {
            "status_code": status_code,
            "headers": response_headers.multi_items(),
            "body": body,
        }

    def add_challenge(self, upstream: str, challenge: Optional[str]) -> None:
        """Make the upstream API root demand a bearer token."""
        headers = {"WWW-Authenticate": challenge} if challenge else {}
        self.add("GET", f"{upstream}/v2/", status_code=401, headers=headers)

    def add_connect_error(
        self, method: str, url: str, message: str = "connection refused"
    ) -> None:
        self._errors[(method, self._key(httpx.URL(url)))] = message

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        error = self._errors.get((request.method, self._key(request.url)))
        if error is not None:
            raise httpx.ConnectError(error, request=request)

        stub = self._responses.get((request.method, self._key(request.url)))
        if stub is None:
            return _stream_response(
                404,
                [("Content-Type", "application/json")],
                b'{"errors": [{"code": "NOT_FOUND"}]}',
            )

        return _stream_response(stub["status_code"], stub["headers"], stub["body"])

    def requests_to(self, url: str) -> list[httpx.Request]:
        key = self._key(httpx.URL(url))
        return [request for request in self.requests if self._key(request.url) == key]

    @staticmethod
    def _key(url: httpx.URL) -> str:
        return f"{url.scheme}://{url.host}{url.path}"
