"""Tests for the static site client."""

import hashlib

import pytest
import requests

from planlog.deploy.exceptions import (
    SiteConfigError,
    SiteConnectionError,
    SiteTimeoutError,
)
from planlog.deploy.site_client import SiteCheck, StaticSiteClient

URL = "https://example.github.io/svg2gcode/"
PAGE = "<html><head><title>svg2gcode</title></head><body></body></html>"


class TestStaticSiteClient:
    """Test static site client functionality."""

    @pytest.fixture
    def client(self):
        return StaticSiteClient(timeout=5)

    def test_fetch_success(self, requests_mock, client):
        requests_mock.get(URL, text=PAGE, headers={"Content-Type": "text/html"})

        check = client.fetch(URL)

        assert check.status_code == 200
        assert check.is_live
        assert check.content_type == "text/html"
        assert check.digest == hashlib.sha256(PAGE.encode()).hexdigest()

    def test_check_expected_text_found(self, requests_mock, client):
        requests_mock.get(URL, text=PAGE)
        check = client.check(URL, "svg2gcode")
        assert check.contains_expected
        assert check.is_live

    def test_check_expected_text_missing(self, requests_mock, client):
        requests_mock.get(URL, text="<html>Site not found</html>")
        check = client.check(URL, "svg2gcode")
        assert check.status_code == 200
        assert not check.contains_expected
        assert not check.is_live
        assert "expected text not found" in check.describe()

    def test_http_error_is_reported_not_raised(self, requests_mock, client):
        requests_mock.get(URL, status_code=404, text="Not Found")
        check = client.check(URL)
        assert check.status_code == 404
        assert not check.is_live
        assert check.describe() == "HTTP 404"

    def test_sends_user_agent_and_no_cache(self, requests_mock, client):
        requests_mock.get(URL, text=PAGE)
        client.fetch(URL)
        headers = requests_mock.last_request.headers
        assert headers["User-Agent"].startswith("planlog/")
        assert headers["Cache-Control"] == "no-cache"

    def test_connection_error(self, requests_mock, client):
        requests_mock.get(URL, exc=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(SiteConnectionError, match="refused"):
            client.fetch(URL)

    def test_timeout(self, requests_mock, client):
        requests_mock.get(URL, exc=requests.exceptions.ConnectTimeout("slow"))
        with pytest.raises(SiteTimeoutError):
            client.fetch(URL)

    @pytest.mark.parametrize("url", ["", "ftp://example.com", "example.com"])
    def test_invalid_url(self, client, url):
        with pytest.raises(SiteConfigError):
            client.fetch(url)

    def test_is_reachable(self, requests_mock, client):
        requests_mock.get(URL, text=PAGE)
        assert client.is_reachable(URL)

    def test_is_reachable_never_raises(self, requests_mock, client):
        requests_mock.get(URL, exc=requests.exceptions.ConnectionError("down"))
        assert not client.is_reachable(URL)
        assert not client.is_reachable("not a url")


class TestSiteCheck:
    """Test SiteCheck properties."""

    def test_live_requires_200(self):
        assert not SiteCheck(URL, 500, 0.1, "abc").is_live
        assert SiteCheck(URL, 200, 0.1, "abc").is_live
