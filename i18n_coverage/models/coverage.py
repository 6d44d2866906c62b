"""Data models for computed coverage results."""

from dataclasses import dataclass, asdict
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .repository import I18nStructure


@dataclass(frozen=True)
class CoverageResult:
    """Coverage of one language relative to the base language."""

    language: str
    coverage: float     # 0-100, one decimal
    completion: float   # 0-100, one decimal, excludes TODO placeholders
    total: int
    translated: int
    actual_translated: int
    missing: int
    todo_count: int = 0
    is_fully_parsed: bool = True
    is_fallback: bool = False
    last_updated: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OverallCoverage:
    """Repository-wide aggregate over non-base languages."""

    coverage: float
    completion: float
    languages: int    # number of non-base languages
    total_keys: int   # base language key count

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RepositoryCoverage:
    """Coverage of every detected language of a repository."""

    overall: OverallCoverage
    languages: Mapping[str, CoverageResult]
    structure: I18nStructure
    base_language: str
    is_fallback: bool = False
    last_updated: Optional[str] = None

    def __post_init__(self):
        # Shared through the cache; callers get a read-only view
        object.__setattr__(self, "languages", MappingProxyType(dict(self.languages)))
