"""Tests for caller identity resolution."""

from starlette.requests import Request

from typoscale.gateway.identity import client_identity, get_client_ip


def make_request(headers: dict[str, str] | None = None, client: tuple[str, int] | None = ("10.0.0.1", 5000)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/v1/analyze",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestClientIdentity:
    def test_forwarded_for_takes_first_address(self) -> None:
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.2, 10.0.0.3"})

        assert get_client_ip(request) == "203.0.113.7"
        assert client_identity(request) == "ip:203.0.113.7"

    def test_real_ip_when_no_forwarded_for(self) -> None:
        request = make_request({"X-Real-IP": " 198.51.100.4 "})

        assert client_identity(request) == "ip:198.51.100.4"

    def test_forwarded_for_wins_over_real_ip(self) -> None:
        request = make_request({"X-Forwarded-For": "203.0.113.7", "X-Real-IP": "198.51.100.4"})

        assert client_identity(request) == "ip:203.0.113.7"

    def test_falls_back_to_socket_address(self) -> None:
        assert client_identity(make_request()) == "ip:10.0.0.1"

    def test_unknown_caller_shares_bucket(self) -> None:
        """No headers and no socket peer map to one shared identity."""
        assert client_identity(make_request(client=None)) == "ip:unknown"

    def test_empty_forwarded_for_is_ignored(self) -> None:
        request = make_request({"X-Forwarded-For": " , 10.0.0.2"})

        assert client_identity(request) == "ip:10.0.0.1"
