"""Tests for client IP extraction and route template resolution."""

from types import SimpleNamespace

import pytest
from starlette.requests import Request

from app.api.dependencies import route_template
from app.config import settings
from app.core.auth import get_client_ip


def make_request(
    headers: dict[str, str] | None = None,
    client: tuple[str, int] | None = ("127.0.0.1", 50000),
    path: str = "/api/v1/posts",
    route: object | None = None,
) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
        "server": ("testserver", 80),
        "scheme": "http",
    }
    if route is not None:
        scope["route"] = route
    return Request(scope)


@pytest.mark.unit
class TestGetClientIP:
    def test_direct_client_without_header(self):
        assert get_client_ip(make_request(client=("198.51.100.7", 1234))) == "198.51.100.7"

    def test_header_honoured_from_trusted_proxy(self):
        request = make_request(headers={"X-Forwarded-For": "203.0.113.9"})
        assert get_client_ip(request) == "203.0.113.9"

    def test_header_ignored_from_untrusted_peer(self):
        request = make_request(
            headers={"X-Forwarded-For": "203.0.113.9"}, client=("198.51.100.7", 1234)
        )
        assert get_client_ip(request) == "198.51.100.7"

    def test_spoofed_left_entries_ignored(self):
        """A client-supplied entry ahead of the proxy's own one is not trusted."""
        request = make_request(headers={"X-Forwarded-For": "10.9.9.9, 203.0.113.9"})
        assert get_client_ip(request) == "203.0.113.9"

    def test_chained_trusted_proxies_skipped(self, monkeypatch):
        monkeypatch.setattr(settings, "TRUSTED_PROXIES", ["127.0.0.1", "10.0.0.2"])
        request = make_request(headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.2"})
        assert get_client_ip(request) == "203.0.113.9"

    def test_no_client(self):
        assert get_client_ip(make_request(client=None)) == "unknown"


@pytest.mark.unit
class TestRouteTemplate:
    def test_router_local_template_gets_prefix(self):
        request = make_request(route=SimpleNamespace(path="/posts/{post_id}"))
        assert route_template(request) == "/api/v1/posts/{post_id}"

    def test_full_template_unchanged(self):
        request = make_request(route=SimpleNamespace(path="/api/v1/posts"))
        assert route_template(request) == "/api/v1/posts"

    def test_no_route_falls_back_to_path(self):
        request = make_request(path="/api/v1/posts/5")
        assert route_template(request) == "/api/v1/posts/5"
