"""Per-language and repository-wide coverage computation."""

import asyncio
from dataclasses import replace
from typing import Any, Dict, List, Optional, Union

from ..cache.content_source import CachedContentSource
from ..cache.store import CacheKind, CacheStore
from ..config import Config, config as default_config
from ..detection.structure_detector import StructureDetector, select_base_language
from ..errors import (
    GatewayError,
    InvalidRequestError,
    LanguageNotFoundError,
    NoBaseLanguageError,
    RateLimitedError,
)
from ..gateway.interface import ContentGateway
from ..models.coverage import CoverageResult, OverallCoverage, RepositoryCoverage
from ..models.repository import I18nPattern, I18nStructure, RepositoryCoordinate
from ..models.translation import BaseLanguageIndex, KeyCount
from ..parsing.translation_parser import TranslationParser
from ..utils.logger_utils import LoggerUtils
from .status import coverage_color, coverage_status, round_one, round_percent

logger = LoggerUtils.get_logger(__name__)

# key_counts entry holding the parsed base language of a repository
BASE_INDEX_KEY = "@base"


def is_base_language(language: str, base_languages=None) -> bool:
    """Check whether a language code is one of the preferred base languages."""
    return language in (base_languages or default_config.BASE_LANGUAGES)


def format_coverage_text(coverage: Any, language: Optional[str] = None) -> str:
    """
    Badge message for a coverage figure.

    With a language (or a CoverageResult or bare percentage) the message is
    the percentage with at most one decimal, e.g. "95.5%" or "100%". An
    OverallCoverage or RepositoryCoverage renders as "N/N+1 languages",
    non-base languages over all languages.
    """
    if isinstance(coverage, (int, float)):
        return f"{round_one(coverage):g}%"
    if language is not None or isinstance(coverage, CoverageResult):
        return f"{round_one(coverage.coverage):g}%"

    overall = coverage.overall if isinstance(coverage, RepositoryCoverage) else coverage
    return f"{overall.languages}/{overall.languages + 1} languages"


class CoverageCalculator:
    """
    Computes translation coverage of a repository against its base language.

    Wires the content source, structure detector and translation parser to a
    shared cache store. Fresh results go to the coverage tier and to the
    fallback tier; when the upstream is rate limited or unreachable the last
    good result is served instead, flagged with is_fallback.
    """

    def __init__(
        self,
        gateway: Union[ContentGateway, CachedContentSource],
        store: Optional[CacheStore] = None,
        settings: Optional[Config] = None,
    ):
        self.settings = settings or default_config
        if isinstance(gateway, CachedContentSource):
            self.source = gateway
        else:
            self.source = CachedContentSource(gateway, store or CacheStore(self.settings))
        self.store = self.source.store
        self.detector = StructureDetector(self.source, self.settings)
        self.parser = TranslationParser(self.source, self.settings)

    @property
    def gateway(self) -> ContentGateway:
        return self.source.gateway

    async def close(self) -> None:
        await self.gateway.close()

    def invalidate(self, coordinate: RepositoryCoordinate) -> int:
        """Drop cached state of a repository so the next request recomputes it."""
        self._validate(coordinate)
        return self.store.invalidate_repository(coordinate.owner, coordinate.repo)

    def is_base_language(self, language: str) -> bool:
        return is_base_language(language, self.settings.BASE_LANGUAGES)

    @staticmethod
    def coverage_color(percentage: float) -> str:
        return coverage_color(percentage)

    @staticmethod
    def coverage_status(percentage: float) -> str:
        return coverage_status(percentage)

    format_coverage_text = staticmethod(format_coverage_text)

    async def language_coverage(
        self,
        coordinate: RepositoryCoordinate,
        language: str,
        custom_path: Optional[str] = None,
    ) -> CoverageResult:
        """
        Coverage of one language.

        Args:
            coordinate: Repository to measure
            language: Target language code as detected in the repository
            custom_path: Explicit i18n root (overrides coordinate.custom_path)

        Returns:
            CoverageResult, possibly a fallback snapshot

        Raises:
            InvalidRequestError: Missing owner, repo or language
            LanguageNotFoundError: Language not among the detected languages
            NoBaseLanguageError: Base language has no keys
            RateLimitedError: Quota exhausted and no fallback available
        """
        self._validate(coordinate, language)
        path_key = self._path_key(coordinate, custom_path)
        owner, repo = coordinate.owner, coordinate.repo

        cached = self.store.get(CacheKind.COVERAGE, owner, repo, path_key, language)
        if cached is not None:
            logger.debug("Using cached coverage for %s %s", coordinate.full_name, language)
            return cached

        try:
            result = await self._compute_language(coordinate, language, path_key)
        except (RateLimitedError, GatewayError) as err:
            entry = self.store.get_fallback_entry(
                CacheKind.COVERAGE, owner, repo, path_key, language
            )
            if entry is None:
                raise
            logger.warning(
                "Serving fallback coverage for %s %s: %s", coordinate.full_name, language, err
            )
            return replace(entry.value, is_fallback=True, last_updated=entry.updated_at)

        self._remember(coordinate, path_key, result, language)
        return result

    async def repository_coverage(
        self,
        coordinate: RepositoryCoordinate,
        custom_path: Optional[str] = None,
    ) -> RepositoryCoverage:
        """
        Coverage of every detected language plus the overall aggregate.

        The overall figure is the unweighted mean over non-base languages and
        is 0.0 when the repository holds only its base language.
        """
        self._validate(coordinate)
        path_key = self._path_key(coordinate, custom_path)
        owner, repo = coordinate.owner, coordinate.repo

        cached = self.store.get(CacheKind.COVERAGE, owner, repo, path_key)
        if cached is not None:
            return cached

        try:
            result = await self._compute_repository(coordinate, path_key)
        except (RateLimitedError, GatewayError) as err:
            entry = self.store.get_fallback_entry(CacheKind.COVERAGE, owner, repo, path_key)
            if entry is None:
                raise
            logger.warning(
                "Serving fallback repository coverage for %s: %s", coordinate.full_name, err
            )
            return replace(entry.value, is_fallback=True, last_updated=entry.updated_at)

        self._remember(coordinate, path_key, result)
        # Each language figure is also the latest result for its own badge
        for language, language_result in result.languages.items():
            self._remember(coordinate, path_key, language_result, language)
        return result

    def _remember(
        self,
        coordinate: RepositoryCoordinate,
        path_key: str,
        result: Union[CoverageResult, RepositoryCoverage],
        language: Optional[str] = None,
    ) -> None:
        owner, repo = coordinate.owner, coordinate.repo
        self.store.set(CacheKind.COVERAGE, owner, repo, result, path=path_key, language=language)
        self.store.set_fallback(
            CacheKind.COVERAGE, owner, repo, result, path=path_key, language=language
        )

    async def _compute_language(
        self,
        coordinate: RepositoryCoordinate,
        language: str,
        path_key: str,
    ) -> CoverageResult:
        structure = await self.detector.detect(coordinate, path_key or None)
        if language not in structure.languages:
            raise LanguageNotFoundError(
                f"Language '{language}' not found in {coordinate.full_name}"
            )

        base = await self._base_index(coordinate, structure, path_key)
        counts = await self._key_count(coordinate, structure, base, language, path_key)
        return self._build_result(language, base, counts)

    async def _compute_repository(
        self,
        coordinate: RepositoryCoordinate,
        path_key: str,
    ) -> RepositoryCoverage:
        structure = await self.detector.detect(coordinate, path_key or None)
        base = await self._base_index(coordinate, structure, path_key)

        languages: Dict[str, CoverageResult] = {}
        batch_size = max(1, self.settings.language_batch_size)
        for start in range(0, len(structure.languages), batch_size):
            batch = structure.languages[start:start + batch_size]
            counts = await asyncio.gather(
                *(self._key_count(coordinate, structure, base, language, path_key)
                  for language in batch),
                return_exceptions=True,
            )

            # Let the whole batch settle before failing, rate limits first
            failures = [count for count in counts if isinstance(count, BaseException)]
            if failures:
                raise next(
                    (err for err in failures if isinstance(err, RateLimitedError)), failures[0]
                )
            for language, count in zip(batch, counts):
                languages[language] = self._build_result(language, base, count)

        others: List[CoverageResult] = [
            result for language, result in languages.items() if language != base.language
        ]
        if others:
            overall_coverage = round_one(sum(r.coverage for r in others) / len(others))
            overall_completion = round_one(sum(r.completion for r in others) / len(others))
        else:
            overall_coverage = overall_completion = 0.0

        logger.info(
            "Coverage for %s: %.1f%% across %d languages",
            coordinate.full_name, overall_coverage, len(others),
        )
        return RepositoryCoverage(
            overall=OverallCoverage(
                coverage=overall_coverage,
                completion=overall_completion,
                languages=len(others),
                total_keys=base.key_count,
            ),
            languages=languages,
            structure=structure,
            base_language=base.language,
        )

    async def _base_index(
        self,
        coordinate: RepositoryCoordinate,
        structure: I18nStructure,
        path_key: str,
    ) -> BaseLanguageIndex:
        owner, repo = coordinate.owner, coordinate.repo
        base = self.store.get(CacheKind.KEY_COUNTS, owner, repo, path_key, BASE_INDEX_KEY)
        if base is None:
            language = select_base_language(structure.languages, self.settings.BASE_LANGUAGES)
            if language is None:
                raise NoBaseLanguageError(f"No languages detected in {coordinate.full_name}")
            parsed = await self.parser.parse_language(coordinate, structure, language)
            base = self.parser.build_base_index(parsed)
            self.store.set(
                CacheKind.KEY_COUNTS, owner, repo, base, path=path_key, language=BASE_INDEX_KEY
            )

        if base.key_count == 0:
            raise NoBaseLanguageError(
                f"Base language '{base.language}' of {coordinate.full_name} has no keys"
            )
        return base

    async def _key_count(
        self,
        coordinate: RepositoryCoordinate,
        structure: I18nStructure,
        base: BaseLanguageIndex,
        language: str,
        path_key: str,
    ) -> KeyCount:
        if language == base.language:
            return self.parser.base_key_count(base)

        owner, repo = coordinate.owner, coordinate.repo
        cached = self.store.get(CacheKind.KEY_COUNTS, owner, repo, path_key, language)
        if cached is not None and cached.base_fingerprint == base.fingerprint:
            return cached
        if cached is not None:
            logger.debug(
                "Key counts of %s %s predate the current base language, recounting",
                coordinate.full_name, language,
            )

        base_namespaces = None
        if structure.pattern == I18nPattern.LANG_DIRECTORY:
            base_namespaces = set(base.namespaces)
        parsed = await self.parser.parse_language(coordinate, structure, language, base_namespaces)
        counts = self.parser.count_keys(base, parsed)
        if not counts.is_fully_parsed:
            logger.warning(
                "%s %s parsed partially, degraded namespaces: %s",
                coordinate.full_name, language, ", ".join(parsed.degraded),
            )
        self.store.set(CacheKind.KEY_COUNTS, owner, repo, counts, path=path_key, language=language)
        return counts

    @staticmethod
    def _build_result(language: str, base: BaseLanguageIndex, counts: KeyCount) -> CoverageResult:
        total = base.key_count
        result = CoverageResult(
            language=language,
            coverage=round_percent(counts.key_count, total),
            completion=round_percent(counts.actual_translated, total),
            total=total,
            translated=counts.key_count,
            actual_translated=counts.actual_translated,
            missing=max(0, total - counts.key_count),
            todo_count=counts.todo_count,
            is_fully_parsed=counts.is_fully_parsed,
        )
        if counts.total_keys != counts.key_count:
            logger.debug(
                "%s has %d keys, %d match the base language",
                language, counts.total_keys, counts.key_count,
            )
        return result

    @staticmethod
    def _path_key(coordinate: RepositoryCoordinate, custom_path: Optional[str]) -> str:
        path = custom_path if custom_path is not None else coordinate.custom_path
        return (path or "").strip("/")

    @staticmethod
    def _validate(coordinate: RepositoryCoordinate, *languages: str) -> None:
        if not coordinate.owner or not coordinate.repo:
            raise InvalidRequestError("Owner and repository are required")
        for language in languages:
            if not language or not language.strip():
                raise InvalidRequestError("Language is required")
