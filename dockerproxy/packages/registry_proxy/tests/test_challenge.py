import pytest

from dockerproxy.packages.registry_proxy.challenge import parse_authenticate
from dockerproxy.packages.registry_proxy.exceptions import ChallengeParseError
from dockerproxy.packages.registry_proxy.types import AuthChallenge


def test_parse_realm_and_service():
    challenge = parse_authenticate('Bearer realm="https://a.b/token",service="c"')

    assert challenge == AuthChallenge(realm="https://a.b/token", service="c")


def test_parse_realm_only():
    challenge = parse_authenticate('Bearer realm="https://a.b/token"')

    assert challenge == AuthChallenge(realm="https://a.b/token", service="")


def test_parse_ignores_extra_attributes():
    challenge = parse_authenticate(
        'Bearer realm="https://auth.docker.io/token",service="registry.docker.io",'
        'scope="repository:library/busybox:pull"'
    )

    assert challenge.realm == "https://auth.docker.io/token"
    assert challenge.service == "registry.docker.io"


def test_parse_keeps_escaped_quotes_inside_value():
    challenge = parse_authenticate(r'Bearer realm="https://a.b/t\"x",service="c"')

    assert challenge.realm == r"https://a.b/t\"x"
    assert challenge.service == "c"


@pytest.mark.parametrize("header", ["Bearer", "Basic realm=registry", ""])
def test_parse_failure_carries_header(header):
    with pytest.raises(ChallengeParseError) as exc_info:
        parse_authenticate(header)

    assert exc_info.value.header == header
