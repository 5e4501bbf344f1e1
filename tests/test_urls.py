"""Tests for link resolution and seed URL validation."""

import pytest

from linkcrawler.crawler.urls import coerce_seed_url, normalize_url, resolve_url, InvalidURLError


class TestResolveUrl:
    """Test cases for resolve_url."""

    @pytest.mark.parametrize("link, expected", [
        ("/about", "http://example.com/about"),
        ("z.html", "http://example.com/x/z.html"),
        ("../top", "http://example.com/top"),
        ("//cdn.example.org/lib", "http://cdn.example.org/lib"),
        ("?page=2", "http://example.com/x/y?page=2"),
        ("https://Other.Example.com", "https://other.example.com/"),
        ("  /padded  ", "http://example.com/padded"),
    ])
    def test_standard_resolution(self, link, expected):
        assert resolve_url("http://example.com/x/y", link) == expected

    def test_fragment_is_kept(self):
        assert resolve_url("http://example.com/x/y", "/a#section") == "http://example.com/a#section"
        assert resolve_url("http://example.com/x/y", "#top") == "http://example.com/x/y#top"
        assert normalize_url("HTTP://Example.com#Top") == "http://example.com/#Top"

    def test_non_web_schemes_are_kept(self):
        assert resolve_url("http://example.com/", "javascript:void(0)") == "javascript:void(0)"

    def test_malformed_link_raises(self):
        with pytest.raises(InvalidURLError):
            resolve_url("http://example.com/", "http://[broken/")


class TestNormalizeUrl:
    """Test cases for normalize_url."""

    def test_default_port_removed(self):
        assert normalize_url("http://Example.com:80/a") == "http://example.com/a"
        assert normalize_url("https://example.com:443") == "https://example.com/"

    def test_other_port_kept(self):
        assert normalize_url("http://example.com:8080/a") == "http://example.com:8080/a"

    def test_path_case_preserved(self):
        assert normalize_url("HTTP://EXAMPLE.COM/Path/File.HTML") == "http://example.com/Path/File.HTML"

    def test_relative_url_rejected(self):
        with pytest.raises(InvalidURLError):
            normalize_url("/just/a/path")


class TestCoerceSeedUrl:
    """Test cases for coerce_seed_url."""

    def test_bare_host_gets_http(self):
        assert coerce_seed_url("example.com") == "http://example.com/"

    def test_https_kept(self):
        assert coerce_seed_url(" https://example.com/start ") == "https://example.com/start"

    @pytest.mark.parametrize("raw", ["", "   ", "http://", "exa mple.com", "http://exa mple.com/"])
    def test_invalid_input(self, raw):
        with pytest.raises(InvalidURLError):
            coerce_seed_url(raw)
