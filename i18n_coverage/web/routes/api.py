"""JSON API routes."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...coverage import coverage_status
from ...errors import CoverageError
from ...models.repository import RepositoryCoordinate
from ...utils.logger_utils import LoggerUtils
from .badges import error_status

router = APIRouter()
logger = LoggerUtils.get_logger(__name__)


# Response models
class OverallSummary(BaseModel):
    coverage: float
    completion: float
    languages: int
    total_keys: int


class LanguageSummary(BaseModel):
    language: str
    coverage: float
    completion: float
    translated: int
    total: int
    missing: int
    todo_count: int = 0
    is_fully_parsed: bool = True
    status: str


class CoverageSummary(BaseModel):
    repository: str
    base_language: str
    overall: OverallSummary
    languages: List[LanguageSummary]
    structure: Dict[str, Any]
    is_fallback: bool = False
    last_updated: Optional[str] = None
    generated_at: str


class ErrorResponse(BaseModel):
    error: str
    code: str


# Health
@router.get("/health")
async def health(request: Request):
    """Liveness plus cache and credential bookkeeping."""
    calculator = request.app.state.calculator
    pool = getattr(calculator.gateway, "pool", None)
    return {
        "status": "ok",
        "credentials": len(pool) if pool is not None else 0,
        "authenticated": bool(pool and pool.is_authenticated),
        "cache": calculator.store.stats(),
    }


# Coverage
@router.get(
    "/{owner}/{repo}/all",
    response_model=CoverageSummary,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def all_languages(request: Request, owner: str, repo: str, path: Optional[str] = None):
    """Coverage of every language of a repository as JSON."""
    calculator = request.app.state.calculator
    coordinate = RepositoryCoordinate(owner=owner, repo=repo, custom_path=path)

    try:
        coverage = await calculator.repository_coverage(coordinate)
    except CoverageError as err:
        status_code = error_status(err)
        if status_code >= 500:
            logger.error("API error for %s: %s", coordinate.full_name, err)
        return JSONResponse(
            status_code=status_code,
            content={"error": err.message, "code": err.code.value},
        )

    summary = CoverageSummary(
        repository=coordinate.full_name,
        base_language=coverage.base_language,
        overall=OverallSummary(**coverage.overall.to_dict()),
        languages=[
            LanguageSummary(
                language=language,
                coverage=result.coverage,
                completion=result.completion,
                translated=result.translated,
                total=result.total,
                missing=result.missing,
                todo_count=result.todo_count,
                is_fully_parsed=result.is_fully_parsed,
                status=coverage_status(result.coverage),
            )
            for language, result in coverage.languages.items()
        ],
        structure=coverage.structure.to_dict(),
        is_fallback=coverage.is_fallback,
        last_updated=coverage.last_updated,
        generated_at=datetime.now(timezone.utc).isoformat(),
    )
    max_age = request.app.state.settings.badge_max_age
    return JSONResponse(
        content=summary.model_dump(),
        headers={"Cache-Control": f"public, max-age={max_age}"},
    )


# Cache
@router.delete("/{owner}/{repo}/cache", responses={400: {"model": ErrorResponse}})
async def invalidate_cache(request: Request, owner: str, repo: str):
    """Forget cached results of a repository; fallback snapshots are kept."""
    coordinate = RepositoryCoordinate(owner=owner, repo=repo)
    try:
        removed = request.app.state.calculator.invalidate(coordinate)
    except CoverageError as err:
        return JSONResponse(
            status_code=error_status(err),
            content={"error": err.message, "code": err.code.value},
        )
    return {"repository": coordinate.full_name, "removed": removed}
