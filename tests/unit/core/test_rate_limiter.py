"""Unit tests for the rate limiter key function."""

from fastapi import Request

from core.rate_limiter import get_client_identifier


def make_request(headers=None, client=("198.51.100.4", 5000)):
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    })


class TestClientIdentifier:
    """Which address a request is counted against."""

    def test_first_forwarded_address(self):
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        assert get_client_identifier(request) == "203.0.113.7"

    def test_remote_address_without_proxy(self):
        assert get_client_identifier(make_request()) == "198.51.100.4"

    def test_other_proxy_headers_are_ignored(self):
        request = make_request({"CF-Connecting-IP": "192.0.2.1"})
        assert get_client_identifier(request) == "198.51.100.4"
