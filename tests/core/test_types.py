"""Tests for core.types module."""

import pytest

from core.types import ErrorCategory, RawHttpClient, RequestTarget, StreamingRequestHelper


class TestErrorCategory:
    def test_all_members(self):
        expected = {"TRANSIENT", "AUTH", "PERMANENT", "UNKNOWN"}
        assert set(ErrorCategory.__members__.keys()) == expected

    def test_from_value(self):
        assert ErrorCategory("transient") is ErrorCategory.TRANSIENT


class TestRequestTarget:
    def test_https_default_port(self):
        target = RequestTarget.from_url("https://example.com/files/a.zip")
        assert target == RequestTarget("https", "example.com", 443, "/files/a.zip")

    def test_http_explicit_port_and_query(self):
        target = RequestTarget.from_url("http://example.com:8080/get?id=1&sig=abc")
        assert target.port == 8080
        assert target.path == "/get?id=1&sig=abc"

    def test_empty_path_becomes_root(self):
        assert RequestTarget.from_url("https://example.com").path == "/"

    def test_url_omits_default_port(self):
        assert RequestTarget.from_url("https://example.com:443/a").url == "https://example.com/a"

    def test_url_keeps_custom_port(self):
        url = "http://127.0.0.1:9000/a?b=c"
        assert RequestTarget.from_url(url).url == url

    def test_ipv6_host_is_bracketed(self):
        target = RequestTarget.from_url("http://[::1]:8080/a")
        assert target.hostname == "::1"
        assert target.url == "http://[::1]:8080/a"

    @pytest.mark.parametrize("url", ["ftp://example.com/a", "example.com/a", ""])
    def test_unsupported_scheme(self, url):
        with pytest.raises(ValueError, match="Unsupported URL scheme"):
            RequestTarget.from_url(url)

    def test_missing_host(self):
        with pytest.raises(ValueError, match="Invalid URL"):
            RequestTarget.from_url("https:///path")


class TestProtocols:
    def test_protocols_expose_request(self):
        assert hasattr(RawHttpClient, "request")
        assert hasattr(StreamingRequestHelper, "request")
