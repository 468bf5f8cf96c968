"""Registry API v2 path handling.

Docker Hub serves official images under the implicit ``library/``
namespace: ``busybox`` really is ``library/busybox``. Clients are allowed
to omit it, so requests for the primary registry are normalized here.
"""

from typing import Optional

from .types import RequestKind

DEFAULT_NAMESPACE = "library"


def classify_path(path: str) -> RequestKind:
    if path == "/":
        return RequestKind.ROOT
    if path == "/v2/":
        return RequestKind.API_ROOT
    if path.endswith("/v2/auth") or path.endswith("/token"):
        return RequestKind.TOKEN
    return RequestKind.DATA


def rewrite_scope(scope: str) -> str:
    """Prefix the default namespace onto an unqualified repository scope.

    Example: repository:busybox:pull => repository:library/busybox:pull

    Scopes that do not have exactly three parts (including requests for
    several resources at once) are returned unchanged.
    """
    parts = scope.split(":")
    if len(parts) != 3 or "/" in parts[1]:
        return scope

    parts[1] = f"{DEFAULT_NAMESPACE}/{parts[1]}"
    return ":".join(parts)


def library_redirect_path(path: str) -> Optional[str]:
    """Return the namespaced path a client should be redirected to.

    Example: /v2/busybox/manifests/latest => /v2/library/busybox/manifests/latest

    Returns None when the path is not a ``/v2/<name>/<resource>/<ref>`` path
    or when the name already carries the namespace.
    """
    parts = path.split("/")
    if len(parts) != 5 or parts[0] != "" or parts[1] != "v2":
        return None
    if DEFAULT_NAMESPACE in parts[2]:
        return None

    parts[2] = f"{DEFAULT_NAMESPACE}/{parts[2]}"
    return "/".join(parts)
