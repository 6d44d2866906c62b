"""SVG badge routes."""

import hashlib
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import Response

from ...coverage import coverage_color, format_coverage_text
from ...errors import CoverageError, ErrorCode
from ...models.repository import RepositoryCoordinate
from ...utils.logger_utils import LoggerUtils

router = APIRouter()
logger = LoggerUtils.get_logger(__name__)

SVG_MEDIA_TYPE = "image/svg+xml"
DEFAULT_LABEL = "i18n coverage"

# HTTP status per error code; anything unlisted is a 500
ERROR_STATUS = {
    ErrorCode.INVALID_PATH: 400,
    ErrorCode.REPO_NOT_FOUND: 404,
    ErrorCode.NO_I18N_FILES: 404,
    ErrorCode.LANGUAGE_NOT_FOUND: 404,
    ErrorCode.NO_BASE_LANGUAGE: 404,
    ErrorCode.INVALID_STRUCTURE: 404,
    ErrorCode.FILE_NOT_FOUND: 404,
    ErrorCode.RATE_LIMITED: 429,
}


def error_status(err: CoverageError) -> int:
    return ERROR_STATUS.get(err.code, 500)


def svg_response(request: Request, svg: str, status_code: int = 200) -> Response:
    """Wrap an SVG document with caching headers."""
    headers = {"ETag": f'"{hashlib.md5(svg.encode("utf-8")).hexdigest()}"'}
    if status_code == 200:
        max_age = request.app.state.settings.badge_max_age
        headers["Cache-Control"] = f"public, max-age={max_age}"
    else:
        headers["Cache-Control"] = "no-cache"
    return Response(content=svg, media_type=SVG_MEDIA_TYPE, status_code=status_code, headers=headers)


def error_badge(request: Request, err: CoverageError, style: Optional[str]) -> Response:
    status_code = error_status(err)
    if status_code >= 500:
        logger.error("Badge generation failed: %s", err)
    else:
        logger.info("Badge request rejected (%s): %s", err.code.value, err)
    svg = request.app.state.badge_generator.generate_error_badge(err.code.value, style=style)
    return svg_response(request, svg, status_code)


@router.get("/{owner}/{repo}")
async def overall_badge(
    request: Request,
    owner: str,
    repo: str,
    path: Optional[str] = None,
    style: Optional[str] = None,
    logo: Optional[str] = None,
    label: Optional[str] = None,
):
    """
    Overall badge: "N/N+1 languages".

    The color follows the mean coverage of the non-base languages.
    """
    calculator = request.app.state.calculator
    coordinate = RepositoryCoordinate(owner=owner, repo=repo, custom_path=path)

    try:
        coverage = await calculator.repository_coverage(coordinate)
    except CoverageError as err:
        return error_badge(request, err, style)

    svg = request.app.state.badge_generator.generate_svg(
        label or DEFAULT_LABEL,
        format_coverage_text(coverage),
        coverage_color(coverage.overall.coverage),
        style=style,
        logo=logo,
    )
    return svg_response(request, svg)


@router.get("/{owner}/{repo}/{lang}")
async def language_badge(
    request: Request,
    owner: str,
    repo: str,
    lang: str,
    path: Optional[str] = None,
    style: Optional[str] = None,
    logo: Optional[str] = None,
    label: Optional[str] = None,
):
    """Per-language badge: "NN.N%" colored by coverage."""
    calculator = request.app.state.calculator
    coordinate = RepositoryCoordinate(owner=owner, repo=repo, custom_path=path)

    try:
        result = await calculator.language_coverage(coordinate, lang)
    except CoverageError as err:
        return error_badge(request, err, style)

    svg = request.app.state.badge_generator.generate_svg(
        label or lang,
        format_coverage_text(result, lang),
        coverage_color(result.coverage),
        style=style,
        logo=logo,
    )
    return svg_response(request, svg)
