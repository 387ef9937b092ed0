"""
Tests for the remote KMZ source integration.

Tests cover:
- URL resolution from url / b64u / b64 parameters
- Downloading with fallback between candidate URLs
- Upstream failures and timeouts
"""

import base64

import httpx
import pytest
import respx

from lightsurvey.core.errors import FetchError, ValidationError
from lightsurvey.integrations.kmz_source import (
    KMZSourceClient,
    KMZSourceConfig,
    resolve_url_candidates,
)

KMZ_URL = "https://storage.example.com/maps/survey.kmz"


def b64url(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode()).decode().rstrip("=")


class TestResolveUrlCandidates:
    """Tests for resolve_url_candidates."""

    def test_plain_url(self):
        assert resolve_url_candidates(url=KMZ_URL) == [KMZ_URL]

    def test_url_is_stripped(self):
        assert resolve_url_candidates(url=f"  {KMZ_URL}\n") == [KMZ_URL]

    def test_percent_encoded_url_adds_decoded_candidate(self):
        encoded = "https://storage.example.com/maps/Survey%20Blok%20A.kmz"

        assert resolve_url_candidates(url=encoded) == [
            encoded,
            "https://storage.example.com/maps/Survey Blok A.kmz",
        ]

    def test_fully_encoded_url(self):
        encoded = "https%3A%2F%2Fstorage.example.com%2Fmaps%2Fsurvey.kmz"

        assert resolve_url_candidates(url=encoded) == [KMZ_URL]

    def test_base64url(self):
        assert resolve_url_candidates(b64u=b64url(KMZ_URL)) == [KMZ_URL]

    def test_standard_base64(self):
        encoded = base64.b64encode(KMZ_URL.encode()).decode()

        assert resolve_url_candidates(b64=encoded) == [KMZ_URL]

    def test_b64u_holding_plain_url(self):
        assert resolve_url_candidates(b64u=KMZ_URL) == [KMZ_URL]

    def test_url_takes_precedence(self):
        other = "https://other.example.com/x.kmz"

        assert resolve_url_candidates(url=KMZ_URL, b64u=b64url(other)) == [KMZ_URL]

    def test_b64u_preferred_over_b64(self):
        other = "https://other.example.com/x.kmz"
        result = resolve_url_candidates(
            b64u=b64url(KMZ_URL), b64=base64.b64encode(other.encode()).decode()
        )

        assert result == [KMZ_URL]

    def test_undecodable_b64u_falls_back_to_b64(self):
        encoded = base64.b64encode(KMZ_URL.encode()).decode()

        assert resolve_url_candidates(b64u="!!!not-base64!!!", b64=encoded) == [KMZ_URL]

    def test_missing_parameters(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve_url_candidates()

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Parameter url, b64u or b64 is required"

    def test_blank_url(self):
        with pytest.raises(ValidationError):
            resolve_url_candidates(url="   ")

    @pytest.mark.parametrize(
        "url", ["ftp://example.com/survey.kmz", "/maps/survey.kmz", "survey.kmz", "https://"]
    )
    def test_non_http_url_rejected(self, url):
        with pytest.raises(ValidationError) as exc_info:
            resolve_url_candidates(url=url)

        assert "http(s)" in exc_info.value.message


class TestKMZSourceClient:
    """Tests for KMZSourceClient.fetch."""

    @respx.mock
    async def test_fetch_success(self):
        route = respx.get(KMZ_URL).mock(
            return_value=httpx.Response(200, content=b"PK\x03\x04archive")
        )

        async with KMZSourceClient() as client:
            data = await client.fetch([KMZ_URL])

        assert data == b"PK\x03\x04archive"
        request = route.calls.last.request
        assert request.headers["Accept"] == "application/octet-stream"
        assert request.headers["Cache-Control"] == "no-cache"

    @respx.mock
    async def test_follows_redirects(self):
        respx.get(KMZ_URL).mock(
            return_value=httpx.Response(
                302, headers={"Location": "https://cdn.example.com/survey.kmz"}
            )
        )
        respx.get("https://cdn.example.com/survey.kmz").mock(
            return_value=httpx.Response(200, content=b"kmz-bytes")
        )

        async with KMZSourceClient() as client:
            assert await client.fetch([KMZ_URL]) == b"kmz-bytes"

    @respx.mock
    async def test_falls_back_to_next_candidate(self):
        respx.get("https://storage.example.com/first.kmz").mock(
            return_value=httpx.Response(403)
        )
        second = respx.get("https://storage.example.com/second.kmz").mock(
            return_value=httpx.Response(200, content=b"second")
        )

        async with KMZSourceClient() as client:
            data = await client.fetch(
                [
                    "https://storage.example.com/first.kmz",
                    "https://storage.example.com/second.kmz",
                ]
            )

        assert data == b"second"
        assert second.call_count == 1

    @respx.mock
    async def test_upstream_status_mirrored(self):
        respx.get(KMZ_URL).mock(return_value=httpx.Response(404))

        async with KMZSourceClient() as client:
            with pytest.raises(FetchError) as exc_info:
                await client.fetch([KMZ_URL])

        error = exc_info.value
        assert error.status_code == 404
        assert error.upstream_status == 404
        assert error.details["url"] == KMZ_URL
        assert error.details["reason"] == "HTTP 404"

    @respx.mock
    async def test_last_upstream_status_reported(self):
        respx.get("https://storage.example.com/a.kmz").mock(return_value=httpx.Response(404))
        respx.get("https://storage.example.com/b.kmz").mock(return_value=httpx.Response(403))

        async with KMZSourceClient() as client:
            with pytest.raises(FetchError) as exc_info:
                await client.fetch(
                    ["https://storage.example.com/a.kmz", "https://storage.example.com/b.kmz"]
                )

        assert exc_info.value.status_code == 403

    @respx.mock
    async def test_timeout(self):
        respx.get(KMZ_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        async with KMZSourceClient(KMZSourceConfig(timeout=5.0)) as client:
            with pytest.raises(FetchError) as exc_info:
                await client.fetch([KMZ_URL])

        error = exc_info.value
        assert error.status_code == 502
        assert error.upstream_status is None
        assert error.details["reason"] == "Timed out after 5.0s"

    @respx.mock
    async def test_unreachable_host(self):
        respx.get(KMZ_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        async with KMZSourceClient() as client:
            with pytest.raises(FetchError) as exc_info:
                await client.fetch([KMZ_URL])

        assert exc_info.value.status_code == 502
        assert "connection refused" in exc_info.value.details["reason"]

    async def test_injected_client_left_open(self):
        http_client = httpx.AsyncClient()

        async with KMZSourceClient(client=http_client):
            pass

        assert not http_client.is_closed
        await http_client.aclose()
