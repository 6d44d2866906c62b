"""Fetching and flattening of JSON translation files."""

import asyncio
import hashlib
import json
import re
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union

from ..cache.content_source import CachedContentSource
from ..config import Config, config as default_config
from ..errors import CoverageError, GatewayError, RateLimitedError, RemoteFileNotFoundError
from ..models.repository import DirEntry, I18nPattern, I18nStructure, RepositoryCoordinate
from ..models.translation import (
    BaseLanguageIndex,
    FlatTranslation,
    KeyCount,
    ParsedLanguage,
)
from ..utils.logger_utils import LoggerUtils
from .plural_rules import expand_plural_map

logger = LoggerUtils.get_logger(__name__)

TODO_PATTERN = re.compile(r"^todo\s*:\s*translate", re.IGNORECASE)


def flatten(obj: Any, prefix: str = "") -> FlatTranslation:
    """
    Flatten a nested JSON object into dotted key paths.

    Arrays and primitives are leaves and are kept as-is. A non-object
    document flattens to an empty mapping.
    """
    flattened: FlatTranslation = {}
    if not isinstance(obj, dict):
        return flattened

    for key, value in obj.items():
        new_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flattened.update(flatten(value, new_key))
        else:
            flattened[new_key] = value
    return flattened


def unflatten(flat: FlatTranslation) -> Dict[str, Any]:
    """Rebuild a nested object from dotted key paths (inverse of flatten)."""
    nested: Dict[str, Any] = {}
    for key, value in flat.items():
        parts = key.split(".")
        node = nested
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return nested


def parse_json_content(content: Union[str, bytes]) -> FlatTranslation:
    """Parse and flatten a JSON payload; malformed input yields an empty mapping."""
    try:
        return flatten(_decode_json(content))
    except ValueError:
        return {}


def is_todo_placeholder(value: Any) -> bool:
    """Check whether a leaf is an untranslated 'TODO: translate' marker."""
    return isinstance(value, str) and bool(TODO_PATTERN.match(value.strip()))


def key_fingerprint(keys: Iterable[str]) -> str:
    """Order-independent digest of a key universe."""
    digest = hashlib.sha1()
    for key in sorted(keys):
        digest.update(key.encode("utf-8"))
        digest.update(b"\0")
    return digest.hexdigest()


def expand_translation(flat: FlatTranslation, language: str) -> Dict[str, bool]:
    """
    Expand plural families of a flat translation.

    Returns expanded key -> True if any source key behind it holds a real
    (non-placeholder) value.
    """
    expanded = expand_plural_map(flat.keys(), language)
    return {
        key: any(not is_todo_placeholder(flat[source]) for source in sources)
        for key, sources in expanded.items()
    }


def _decode_json(content: Union[str, bytes]) -> Any:
    if isinstance(content, bytes):
        content = content.decode("utf-8-sig")
    return json.loads(content)


def _is_outage(err: CoverageError) -> bool:
    """Upstream unavailable (quota or retries exhausted), as opposed to a bad file."""
    return isinstance(err, (RateLimitedError, GatewayError)) and not isinstance(
        err, RemoteFileNotFoundError
    )


class TranslationParser:
    """
    Pulls a language's translation files through the cache and flattens them.

    Namespace files of one language are fetched in bounded batches. A file
    that is missing or cannot be decoded degrades to an empty namespace; it is
    logged and recorded on the ParsedLanguage so its missing keys stay
    attributable. Upstream outages (rate limit, exhausted retries) abort the
    parse so the caller can fall back to an earlier result.
    """

    def __init__(self, source: CachedContentSource, settings: Optional[Config] = None):
        self.source = source
        self.settings = settings or default_config
        self.batch_size = max(1, self.settings.namespace_batch_size)
        self.batch_pause = self.settings.batch_pause

    async def parse_language(
        self,
        coordinate: RepositoryCoordinate,
        structure: I18nStructure,
        language: str,
        base_namespaces: Optional[Set[str]] = None,
    ) -> ParsedLanguage:
        """
        Fetch and flatten every translation file of one language.

        Args:
            coordinate: Repository to read from
            structure: Detected layout
            language: Language code to parse
            base_namespaces: Namespaces of the base language; when given, only
                these namespaces are fetched (lang-dir layout)

        Returns:
            ParsedLanguage with one flat mapping per namespace
        """
        if structure.pattern == I18nPattern.LANG_FILE:
            return await self._parse_language_file(coordinate, structure, language)
        return await self._parse_language_directory(
            coordinate, structure, language, base_namespaces
        )

    async def _parse_language_file(
        self,
        coordinate: RepositoryCoordinate,
        structure: I18nStructure,
        language: str,
    ) -> ParsedLanguage:
        parsed = ParsedLanguage(language=language, namespaced=False)
        path = structure.language_path(language)
        flat = await self._load_namespace(coordinate, path, parsed, namespace=language)
        parsed.namespaces[language] = flat
        return parsed

    async def _parse_language_directory(
        self,
        coordinate: RepositoryCoordinate,
        structure: I18nStructure,
        language: str,
        base_namespaces: Optional[Set[str]],
    ) -> ParsedLanguage:
        parsed = ParsedLanguage(language=language, namespaced=True)
        entries = await self.source.list_directory(coordinate, structure.language_path(language))

        files: List[Tuple[str, DirEntry]] = []
        for entry in entries:
            if not entry.is_json:
                continue
            namespace = entry.name[: -len(".json")]
            if base_namespaces is not None and namespace not in base_namespaces:
                parsed.skipped.append(namespace)
                continue
            files.append((namespace, entry))

        if parsed.skipped:
            logger.debug(
                "%s: skipping namespaces absent from base language: %s",
                language, ", ".join(parsed.skipped),
            )

        for start in range(0, len(files), self.batch_size):
            if start:
                await asyncio.sleep(self.batch_pause)
            batch = files[start:start + self.batch_size]
            results = await asyncio.gather(
                *(self._load_namespace(coordinate, entry.path, parsed, namespace)
                  for namespace, entry in batch),
                return_exceptions=True,
            )

            # Siblings have all settled; an upstream outage still aborts the parse
            failures = [result for result in results if isinstance(result, BaseException)]
            if failures:
                raise next(
                    (err for err in failures if isinstance(err, RateLimitedError)), failures[0]
                )
            for (namespace, _), result in zip(batch, results):
                parsed.namespaces[namespace] = result

        return parsed

    async def _load_namespace(
        self,
        coordinate: RepositoryCoordinate,
        path: str,
        parsed: ParsedLanguage,
        namespace: str,
    ) -> FlatTranslation:
        """Fetch and flatten one file, degrading to empty on failure."""
        try:
            text = await self.source.read_text(coordinate, path)
        except CoverageError as err:
            if _is_outage(err):
                raise
            logger.warning("Failed to load %s/%s: %s", coordinate.full_name, path, err)
            parsed.degraded.append(namespace)
            return {}

        try:
            return flatten(_decode_json(text))
        except ValueError as err:
            logger.warning("Malformed JSON in %s/%s: %s", coordinate.full_name, path, err)
            parsed.degraded.append(namespace)
            return {}

    def build_base_index(self, parsed: ParsedLanguage) -> BaseLanguageIndex:
        """Reduce a parsed base language to its expanded key universe."""
        expanded = expand_translation(parsed.qualified(), parsed.language)
        return BaseLanguageIndex(
            language=parsed.language,
            keys=frozenset(expanded),
            translated_keys=frozenset(key for key, real in expanded.items() if real),
            namespaces=tuple(sorted(parsed.namespaces)),
            degraded=tuple(parsed.degraded),
            fingerprint=key_fingerprint(expanded),
        )

    def count_keys(self, base: BaseLanguageIndex, parsed: ParsedLanguage) -> KeyCount:
        """Measure a parsed target language against the base key universe."""
        expanded = expand_translation(parsed.qualified(), parsed.language)
        matching = [key for key in expanded if key in base.keys]
        actual = sum(1 for key in matching if expanded[key])
        return KeyCount(
            key_count=len(matching),
            actual_translated=actual,
            total_keys=len(expanded),
            todo_count=len(matching) - actual,
            is_fully_parsed=parsed.is_fully_parsed,
            base_fingerprint=base.fingerprint,
        )

    @staticmethod
    def base_key_count(base: BaseLanguageIndex) -> KeyCount:
        """Key count of the base language against itself."""
        actual = len(base.translated_keys)
        return KeyCount(
            key_count=base.key_count,
            actual_translated=actual,
            total_keys=base.key_count,
            todo_count=base.key_count - actual,
            is_fully_parsed=not base.degraded,
            base_fingerprint=base.fingerprint,
        )
