import pytest

from jupyter_gateway.server_settings import DEFAULT_BASE_URL, RequestInit, derive_ws_url, make_settings, url_path_join


class TestUrlPathJoin:
    """Tests for url_path_join."""

    @pytest.mark.parametrize(
        "pieces,expected",
        [
            (("http://host:8888", "api", "kernels"), "http://host:8888/api/kernels"),
            (("http://host:8888/", "/api/", "kernels/"), "http://host:8888/api/kernels/"),
            (("/base", "api"), "/base/api"),
            (("http://host/prefix/", "login?"), "http://host/prefix/login?"),
            ((), ""),
        ],
    )
    def test_join(self, pieces, expected):
        assert url_path_join(*pieces) == expected


class TestMakeSettings:
    """Tests for make_settings."""

    def test_defaults(self):
        settings = make_settings()
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.ws_url == "ws://localhost:8888/"
        assert settings.init == RequestInit(cache="default", credentials="same-origin")
        assert settings.headers() == {}

    def test_explicit_ws_url_wins(self):
        settings = make_settings(base_url="http://host/", ws_url="ws://other/")
        assert settings.ws_api_url("kernels") == "ws://other/api/kernels"

    def test_request_headers_are_copied(self):
        extra = {"Cookie": "a=b"}
        settings = make_settings(token="t", request_headers=extra)
        extra["Cookie"] = "changed"
        assert settings.headers() == {"Cookie": "a=b", "Authorization": "token t"}


class TestDeriveWsUrl:
    """Tests for derive_ws_url."""

    @pytest.mark.parametrize("base_url,expected", [
        ("http://host:8888", "ws://host:8888"),
        ("https://host:8888", "wss://host:8888"),
        ("http://httpbin/http/", "ws://httpbin/http/"),
    ])
    def test_first_http_replaced(self, base_url, expected):
        assert derive_ws_url(base_url) == expected

    def test_make_settings_uses_same_derivation(self):
        assert make_settings(base_url="https://httphost/").ws_url == derive_ws_url("https://httphost/")
