"""
Remote KMZ download client.

Resolves the URL forms accepted by the API (plain, percent-encoded or
base64-encoded) and downloads archive bytes over HTTP.
"""

import base64
import binascii
import logging
import re
from typing import Any, List, Optional, Sequence
from urllib.parse import unquote, urlparse

import httpx
from pydantic import BaseModel, Field

from lightsurvey.core.errors import FetchError, ValidationError

logger = logging.getLogger(__name__)

_HTTP_URL = re.compile(r"^https?:", re.IGNORECASE)


class KMZSourceConfig(BaseModel):
    """Configuration for the KMZ download client."""

    timeout: float = Field(default=20.0, description="Request timeout in seconds", gt=0, le=300)
    accept: str = Field(default="application/octet-stream", description="Accept header value")


def _decode_base64(value: str) -> Optional[str]:
    """Decode base64url or standard base64 text, tolerating missing padding."""
    normalized = value.strip().replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        decoded = base64.b64decode(normalized, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    return decoded.strip() or None


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme.lower() in ("http", "https") and bool(parsed.netloc)


def resolve_url_candidates(
    url: Optional[str] = None,
    b64u: Optional[str] = None,
    b64: Optional[str] = None,
) -> List[str]:
    """
    Work out which URLs to try for a KMZ request.

    ``url`` is used as given. Otherwise ``b64u`` / ``b64`` are used directly
    when they already look like http(s) URLs, or decoded from base64. The
    percent-decoded form of the URL is added as a second candidate when it
    differs, so both over- and under-encoded links can be fetched.

    Args:
        url: Plain or percent-encoded URL
        b64u: base64url-encoded URL
        b64: base64-encoded URL

    Returns:
        Candidate URLs in the order they should be tried

    Raises:
        ValidationError: If no usable http(s) URL can be resolved
    """
    raw = url.strip() if url and url.strip() else None

    if raw is None:
        for encoded in (b64u, b64):
            if not encoded:
                continue
            if _HTTP_URL.match(encoded.strip()):
                raw = encoded.strip()
            else:
                raw = _decode_base64(encoded)
            if raw:
                break

    if not raw:
        logger.warning(f"Missing KMZ url, params: b64u={b64u!r}, b64={b64!r}")
        raise ValidationError("Parameter url, b64u or b64 is required", field="url")

    candidates = [raw]
    decoded = unquote(raw)
    if decoded != raw:
        candidates.append(decoded)

    usable = [candidate for candidate in candidates if _is_http_url(candidate)]
    if not usable:
        raise ValidationError(
            "KMZ url must be an absolute http(s) URL",
            field="url",
            details={"url": raw},
        )

    return usable


class KMZSourceClient:
    """
    HTTP client for downloading KMZ archives.

    Requests are never cached and redirects are followed.
    """

    def __init__(
        self,
        config: Optional[KMZSourceConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Client configuration
            client: Pre-built httpx client (owned by the caller)
        """
        self.config = config or KMZSourceConfig()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout),
            follow_redirects=True,
        )

    async def __aenter__(self) -> "KMZSourceClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def fetch(self, candidates: Sequence[str]) -> bytes:
        """
        Download a KMZ archive, trying each candidate URL in turn.

        Args:
            candidates: URLs to try, in order

        Returns:
            Archive bytes from the first candidate that answers 2xx

        Raises:
            FetchError: If every candidate fails; carries the last upstream
                status code when one was received
        """
        last_status: Optional[int] = None
        last_reason = "unknown"

        for url in candidates:
            try:
                response = await self.client.get(
                    url,
                    headers={"Accept": self.config.accept, "Cache-Control": "no-cache"},
                )
            except httpx.TimeoutException as e:
                logger.warning(f"Timed out fetching KMZ from {url}: {e}")
                last_reason = f"Timed out after {self.config.timeout}s"
                continue
            except httpx.HTTPError as e:
                logger.warning(f"Failed to fetch KMZ from {url}: {e}")
                last_reason = str(e) or type(e).__name__
                continue

            if not response.is_success:
                logger.warning(f"KMZ fetch from {url} returned HTTP {response.status_code}")
                last_status = response.status_code
                last_reason = f"HTTP {response.status_code}"
                continue

            logger.info(f"Fetched KMZ from {url}: {len(response.content)} bytes")
            return response.content

        raise FetchError(
            "Failed to fetch KMZ file",
            url=candidates[-1] if candidates else None,
            upstream_status=last_status,
            details={"reason": last_reason},
        )
