"""
KMZ pipeline service.

Runs the fetch -> unzip -> parse pipeline for a remote KMZ file. The steps
of one request run strictly in sequence.
"""

import copy
import logging
from typing import Any, Dict, Optional, Sequence

from lightsurvey.core.cache import ExpiringCache
from lightsurvey.core.config import Settings, settings
from lightsurvey.core.parsers import KMZParser, ParseResult
from lightsurvey.integrations.kmz_source import KMZSourceClient, KMZSourceConfig

logger = logging.getLogger(__name__)


class KMZService:
    """
    Fetch and parse remote KMZ archives.

    Attributes:
        source: Client used to download archives
        cache: Optional cache of parse results keyed by URL
    """

    def __init__(
        self,
        source: KMZSourceClient,
        cache: Optional[ExpiringCache[ParseResult]] = None,
        parser: Optional[KMZParser] = None,
    ) -> None:
        self.source = source
        self.cache = cache
        self.parser = parser or KMZParser()

    async def close(self) -> None:
        """Release the download client."""
        await self.source.close()

    async def fetch_archive(self, candidates: Sequence[str]) -> bytes:
        """
        Download the raw archive bytes.

        Args:
            candidates: URLs to try, in order

        Returns:
            Archive bytes
        """
        return await self.source.fetch(candidates)

    async def parse(self, candidates: Sequence[str]) -> ParseResult:
        """
        Fetch a KMZ archive and parse its KML document.

        Args:
            candidates: URLs to try, in order

        Returns:
            ParseResult for the archive

        Raises:
            FetchError: If the archive cannot be downloaded
            ArchiveError: If the download is not a ZIP archive
            NoKmlFoundError: If the archive holds no KML document
            MalformedDocumentError: If the KML is not well-formed
        """

        async def fetch_and_parse() -> ParseResult:
            data = await self.fetch_archive(candidates)
            return self.parser.parse(data)

        if self.cache is None:
            return await fetch_and_parse()

        # Callers own their result; the cached instance is never handed out
        cached = await self.cache.get_or_fetch(candidates[0], fetch_and_parse)
        return copy.deepcopy(cached)

    async def summarize(self, candidates: Sequence[str]) -> Dict[str, Any]:
        """
        Describe a KMZ archive: geometry counts, extent and archive entries.

        Args:
            candidates: URLs to try, in order

        Returns:
            Dictionary matching KMZSummaryResponse
        """
        data = await self.fetch_archive(candidates)
        contents = self.parser.list_contents(data)
        result = self.parser.parse(data)

        bounds = result.bounds()
        center = result.center()

        return {
            "point_count": len(result.coordinates),
            "polygon_count": len(result.polygons),
            "line_count": len(result.lines),
            "bounds": (
                dict(zip(("min_lat", "min_lng", "max_lat", "max_lng"), bounds))
                if bounds
                else None
            ),
            "center": {"lat": center[0], "lng": center[1]} if center else None,
            "kml_files": [entry["name"] for entry in contents["kml_files"]],
            "image_files": [entry["name"] for entry in contents["image_files"]],
            "archive": {
                "total_files": contents["total_files"],
                "total_size": contents["total_size"],
            },
        }


def build_kmz_service(config: Optional[Settings] = None) -> KMZService:
    """
    Build a KMZService from application settings.

    Args:
        config: Settings to use (defaults to the global settings)

    Returns:
        KMZService with a parse cache when caching is enabled
    """
    config = config or settings

    source = KMZSourceClient(KMZSourceConfig(timeout=config.kmz_fetch_timeout_seconds))

    cache: Optional[ExpiringCache[ParseResult]] = None
    if config.parse_cache_enabled:
        cache = ExpiringCache(
            ttl_seconds=config.parse_cache_ttl_seconds,
            max_entries=config.parse_cache_max_entries,
        )

    logger.info(
        f"KMZ service configured: timeout={config.kmz_fetch_timeout_seconds}s, "
        f"cache={'on' if cache else 'off'}"
    )
    return KMZService(source=source, cache=cache)
