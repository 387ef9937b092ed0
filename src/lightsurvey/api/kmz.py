"""
KMZ API endpoints: parse a remote KMZ into geometry, summarize it, or proxy
the raw archive.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from lightsurvey.core.kmz_service import KMZService, build_kmz_service
from lightsurvey.integrations.kmz_source import resolve_url_candidates
from lightsurvey.models.errors import ErrorResponse
from lightsurvey.models.geometry import (
    KMZSummaryResponse,
    ParseResultResponse,
    StyledParseResultResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kmz", tags=["kmz"])

KMZ_MEDIA_TYPE = "application/vnd.google-earth.kmz"

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid URL, or no KML in archive"},
    500: {"model": ErrorResponse, "description": "Corrupt archive or malformed KML"},
    502: {"model": ErrorResponse, "description": "KMZ host unreachable"},
}


def get_kmz_service(request: Request) -> KMZService:
    """Return the application's KMZService, creating it on first use."""
    service = getattr(request.app.state, "kmz_service", None)
    if service is None:
        service = build_kmz_service()
        request.app.state.kmz_service = service
    return service


def url_candidates(
    url: Optional[str] = Query(None, description="KMZ URL, plain or percent-encoded"),
    b64u: Optional[str] = Query(None, description="base64url-encoded KMZ URL"),
    b64: Optional[str] = Query(None, description="base64-encoded KMZ URL"),
) -> List[str]:
    return resolve_url_candidates(url=url, b64u=b64u, b64=b64)


@router.get(
    "/parse",
    response_model=ParseResultResponse,
    responses=_ERROR_RESPONSES,
    summary="Parse a remote KMZ file",
    description="Fetch a KMZ file and extract its points, polygons and lines",
)
async def parse_kmz(
    candidates: List[str] = Depends(url_candidates),
    service: KMZService = Depends(get_kmz_service),
):
    """
    Fetch, unzip and parse a remote KMZ file.

    Returns:
        Points, polygon outer rings and lines in document order
    """
    result = await service.parse(candidates)
    logger.info(
        f"Parsed KMZ: {len(result.coordinates)} points, "
        f"{len(result.polygons)} polygons, {len(result.lines)} lines"
    )
    return result.to_dict()


@router.get(
    "/features",
    response_model=StyledParseResultResponse,
    responses=_ERROR_RESPONSES,
    summary="Parse a remote KMZ file with styles",
    description="Like /parse, with each polygon and line carrying its description and style",
)
async def parse_kmz_features(
    candidates: List[str] = Depends(url_candidates),
    service: KMZService = Depends(get_kmz_service),
):
    result = await service.parse(candidates)
    return result.to_dict(include_styles=True)


@router.get(
    "/summary",
    response_model=KMZSummaryResponse,
    responses=_ERROR_RESPONSES,
    summary="Summarize a remote KMZ file",
    description="Geometry counts, bounding box, center and archive contents",
)
async def summarize_kmz(
    candidates: List[str] = Depends(url_candidates),
    service: KMZService = Depends(get_kmz_service),
):
    return await service.summarize(candidates)


@router.get(
    "/fetch",
    response_class=Response,
    responses={
        200: {"content": {KMZ_MEDIA_TYPE: {}}, "description": "Raw KMZ archive"},
        **_ERROR_RESPONSES,
    },
    summary="Proxy a remote KMZ file",
    description="Download a KMZ file and return its bytes unchanged",
)
async def fetch_kmz(
    candidates: List[str] = Depends(url_candidates),
    service: KMZService = Depends(get_kmz_service),
) -> Response:
    data = await service.fetch_archive(candidates)
    return Response(
        content=data,
        media_type=KMZ_MEDIA_TYPE,
        headers={"Cache-Control": "no-store, max-age=0"},
    )
