"""Detection of a repository's i18n file layout."""

from typing import List, Optional, Sequence

from ..cache.content_source import CachedContentSource
from ..cache.store import CacheKind
from ..config import Config, config as default_config
from ..errors import (
    GatewayError,
    InvalidStructureError,
    NoI18nFilesFoundError,
    RateLimitedError,
    RepoNotFoundError,
)
from ..models.repository import DirEntry, I18nPattern, I18nStructure, RepositoryCoordinate
from ..utils.logger_utils import LoggerUtils

logger = LoggerUtils.get_logger(__name__)


def classify_listing(entries: Sequence[DirEntry], base_path: str) -> I18nStructure:
    """
    Classify a directory listing into one of the canonical layouts.

    Subdirectories only -> one directory per language.
    JSON files only -> one file per language.
    Anything else (both, or neither) is invalid.
    """
    lang_dirs = [entry for entry in entries if entry.is_dir]
    json_files = [entry for entry in entries if entry.is_json]

    if lang_dirs and not json_files:
        return I18nStructure(
            base_path=base_path,
            pattern=I18nPattern.LANG_DIRECTORY,
            languages=tuple(entry.name for entry in lang_dirs),
        )
    if json_files and not lang_dirs:
        return I18nStructure(
            base_path=base_path,
            pattern=I18nPattern.LANG_FILE,
            languages=tuple(entry.name[: -len(".json")] for entry in json_files),
        )
    return I18nStructure(base_path=base_path)


def select_base_language(languages: Sequence[str], preferred: Sequence[str]) -> Optional[str]:
    """First preferred base language present, else the first detected language."""
    for candidate in preferred:
        if candidate in languages:
            return candidate
    return languages[0] if languages else None


class StructureDetector:
    """
    Finds where a repository keeps its translation files.

    Candidate roots are tried in priority order and the first one whose
    listing classifies as a valid layout wins. Results are cached for a long
    time and kept as a fallback for upstream outages.
    """

    def __init__(self, source: CachedContentSource, settings: Optional[Config] = None):
        self.source = source
        self.store = source.store
        self.settings = settings or default_config

    def candidate_paths(self, custom_path: Optional[str] = None) -> List[str]:
        if custom_path:
            return [custom_path.strip("/")]
        return list(self.settings.search_paths)

    async def detect(
        self,
        coordinate: RepositoryCoordinate,
        custom_path: Optional[str] = None,
    ) -> I18nStructure:
        """
        Detect the i18n layout of a repository.

        Args:
            coordinate: Repository to inspect
            custom_path: Explicit i18n root; disables the candidate search

        Returns:
            A valid I18nStructure

        Raises:
            NoI18nFilesFoundError: No candidate path holds a valid layout
            RepoNotFoundError: The repository itself does not exist
            RateLimitedError: Quota exhausted and no fallback structure known
        """
        custom_path = custom_path if custom_path is not None else coordinate.custom_path
        path_key = custom_path or ""
        owner, repo = coordinate.owner, coordinate.repo

        cached = self.store.get(CacheKind.STRUCTURE, owner, repo, path_key)
        if cached is not None:
            logger.debug("Using cached i18n structure for %s", coordinate.full_name)
            return cached

        try:
            structure = await self._search_candidates(coordinate, self.candidate_paths(custom_path))
        except (RateLimitedError, GatewayError) as err:
            fallback = self.store.get_fallback(CacheKind.STRUCTURE, owner, repo, path_key)
            if fallback is None:
                raise
            logger.warning(
                "Using fallback i18n structure for %s after upstream failure: %s",
                coordinate.full_name, err,
            )
            return fallback

        self.store.set(CacheKind.STRUCTURE, owner, repo, structure, path=path_key)
        self.store.set_fallback(CacheKind.STRUCTURE, owner, repo, structure, path=path_key)
        return structure

    async def _search_candidates(
        self,
        coordinate: RepositoryCoordinate,
        search_paths: List[str],
    ) -> I18nStructure:
        missing = 0
        for base_path in search_paths:
            try:
                entries = await self.source.list_directory(coordinate, base_path)
            except (RepoNotFoundError, InvalidStructureError) as err:
                missing += 1
                logger.debug("Failed to check %s/%s: %s", coordinate.full_name, base_path, err)
                continue

            structure = classify_listing(entries, base_path)
            if not structure.is_valid_i18n:
                logger.info(
                    "Invalid i18n structure at %s/%s - continuing search",
                    coordinate.full_name, base_path,
                )
                continue

            logger.info(
                "Found valid i18n structure at %s/%s with %d languages",
                coordinate.full_name, base_path, len(structure.languages),
            )
            return await self._with_namespaces(coordinate, structure)

        if missing == len(search_paths):
            # Tells a missing repository apart from one without i18n files
            await self.source.list_directory(coordinate, "")

        logger.warning(
            "No i18n files found in %s after checking paths: %s",
            coordinate.full_name, ", ".join(search_paths),
        )
        raise NoI18nFilesFoundError(f"No i18n files found in {coordinate.full_name}")

    async def _with_namespaces(
        self,
        coordinate: RepositoryCoordinate,
        structure: I18nStructure,
    ) -> I18nStructure:
        """Fill namespaces from the base language directory of a lang-dir layout."""
        if structure.pattern != I18nPattern.LANG_DIRECTORY:
            return structure

        base = select_base_language(structure.languages, self.settings.BASE_LANGUAGES)
        try:
            entries = await self.source.list_directory(coordinate, structure.language_path(base))
        except (RepoNotFoundError, InvalidStructureError) as err:
            logger.debug("Could not list namespaces of %s: %s", base, err)
            return structure

        namespaces = frozenset(
            entry.name[: -len(".json")] for entry in entries if entry.is_json
        )
        return I18nStructure(
            base_path=structure.base_path,
            pattern=structure.pattern,
            languages=structure.languages,
            namespaces=namespaces,
        )
