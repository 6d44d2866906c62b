"""Data models for the coverage engine."""

from .repository import (
    RepositoryCoordinate,
    EntryType,
    DirEntry,
    I18nPattern,
    I18nStructure,
    Unchanged,
    Updated,
    FileSnapshot,
)
from .translation import (
    FlatTranslation,
    NamespacedTranslation,
    ParsedLanguage,
    BaseLanguageIndex,
    KeyCount,
)
from .coverage import CoverageResult, OverallCoverage, RepositoryCoverage

__all__ = [
    "RepositoryCoordinate",
    "EntryType",
    "DirEntry",
    "I18nPattern",
    "I18nStructure",
    "Unchanged",
    "Updated",
    "FileSnapshot",
    "FlatTranslation",
    "NamespacedTranslation",
    "ParsedLanguage",
    "BaseLanguageIndex",
    "KeyCount",
    "CoverageResult",
    "OverallCoverage",
    "RepositoryCoverage",
]
