"""WWW-Authenticate challenge parsing."""

import re

from .exceptions import ChallengeParseError
from .types import AuthChallenge

# Every value between =" and the next unescaped "
_QUOTED_VALUE = re.compile(r'(?<==")(?:\\.|[^"\\])*(?=")')


def parse_authenticate(header: str) -> AuthChallenge:
    """Parse a bearer challenge into its realm and service.

    sample: Bearer realm="https://auth.docker.io/token",service="registry.docker.io"

    The realm has to come before the service. Some registries leave out
    the service, in which case it is returned empty.

    Raises:
        ChallengeParseError: if the header holds no quoted values
    """
    matches = _QUOTED_VALUE.findall(header)
    if not matches:
        raise ChallengeParseError(header)
    if len(matches) == 1:
        return AuthChallenge(realm=matches[0], service="")
    return AuthChallenge(realm=matches[0], service=matches[1])
