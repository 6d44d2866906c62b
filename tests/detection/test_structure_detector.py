import pytest

from i18n_coverage.cache.content_source import CachedContentSource
from i18n_coverage.config import Config
from i18n_coverage.detection.structure_detector import (
    StructureDetector,
    classify_listing,
    select_base_language,
)
from i18n_coverage.errors import GatewayError, NoI18nFilesFoundError, RateLimitedError, RepoNotFoundError
from i18n_coverage.models.repository import DirEntry, EntryType, I18nPattern, RepositoryCoordinate

from ..conftest import FakeGateway

APP = RepositoryCoordinate("acme", "app")
WEB = RepositoryCoordinate("acme", "web")


def _file(name: str) -> DirEntry:
    return DirEntry(name=name, path=f"i18n/{name}", type=EntryType.FILE)


def _dir(name: str) -> DirEntry:
    return DirEntry(name=name, path=f"i18n/{name}", type=EntryType.DIR)


@pytest.fixture
def detector(source: CachedContentSource, settings: Config) -> StructureDetector:
    return StructureDetector(source, settings)


def test_classify_directories_only() -> None:
    structure = classify_listing([_dir("en"), _dir("ko"), _file("README.md")], "i18n")
    assert structure.pattern == I18nPattern.LANG_DIRECTORY
    assert structure.languages == ("en", "ko")
    assert structure.is_valid_i18n


def test_classify_json_files_only() -> None:
    structure = classify_listing([_file("en.json"), _file("ja.JSON")], "i18n")
    assert structure.pattern == I18nPattern.LANG_FILE
    assert structure.languages == ("en", "ja")


@pytest.mark.parametrize(
    "entries",
    [
        [_dir("en"), _file("ko.json")],
        [_file("README.md")],
        [],
    ],
)
def test_classify_invalid(entries) -> None:
    structure = classify_listing(entries, "i18n")
    assert structure.pattern == I18nPattern.INVALID
    assert not structure.is_valid_i18n


def test_select_base_language() -> None:
    preferred = ("en", "en-US", "en_US")
    assert select_base_language(("ko", "en_US", "en-US"), preferred) == "en-US"
    assert select_base_language(("ko", "fr"), preferred) == "ko"
    assert select_base_language((), preferred) is None


@pytest.mark.asyncio
async def test_detect_lang_file(detector: StructureDetector) -> None:
    structure = await detector.detect(WEB)

    assert structure.base_path == "public/locales"
    assert structure.pattern == I18nPattern.LANG_FILE
    assert structure.languages == ("en", "ko", "fr")


@pytest.mark.asyncio
async def test_detect_lang_directory_fills_namespaces(detector: StructureDetector) -> None:
    structure = await detector.detect(APP)

    assert structure.base_path == "src/locales"
    assert structure.pattern == I18nPattern.LANG_DIRECTORY
    assert structure.namespaces == frozenset({"common", "errors"})


@pytest.mark.asyncio
async def test_mixed_listing_continues_search(gateway: FakeGateway, detector: StructureDetector) -> None:
    files = gateway.repos["acme/web"]
    files["public/i18n/en.json"] = {"a": "A"}
    files["public/i18n/legacy/en.json"] = {"a": "A"}

    structure = await detector.detect(WEB)

    assert structure.base_path == "public/locales"
    assert ("list", "acme/web", "public/i18n") in gateway.calls


@pytest.mark.asyncio
async def test_custom_path_disables_search(gateway: FakeGateway, detector: StructureDetector) -> None:
    gateway.repos["acme/web"]["docs/lang/en.json"] = {"a": "A"}

    structure = await detector.detect(WEB, custom_path="/docs/lang/")

    assert structure.base_path == "docs/lang"
    assert structure.languages == ("en",)
    assert gateway.count("list") == 1


@pytest.mark.asyncio
async def test_custom_path_without_layout(gateway: FakeGateway, detector: StructureDetector) -> None:
    gateway.repos["acme/web"]["docs/README.md"] = "# docs"

    with pytest.raises(NoI18nFilesFoundError):
        await detector.detect(WEB, custom_path="docs")


@pytest.mark.asyncio
async def test_missing_repository(detector: StructureDetector) -> None:
    with pytest.raises(RepoNotFoundError):
        await detector.detect(RepositoryCoordinate("acme", "missing"))


@pytest.mark.asyncio
async def test_repository_without_i18n(gateway: FakeGateway, detector: StructureDetector) -> None:
    gateway.repos["acme/empty"] = {"README.md": "# empty"}

    with pytest.raises(NoI18nFilesFoundError):
        await detector.detect(RepositoryCoordinate("acme", "empty"))


@pytest.mark.asyncio
async def test_structure_is_cached(gateway: FakeGateway, detector: StructureDetector) -> None:
    first = await detector.detect(WEB)
    calls = len(gateway.calls)

    assert await detector.detect(WEB) == first
    assert len(gateway.calls) == calls


@pytest.mark.asyncio
@pytest.mark.parametrize("failure", [RateLimitedError(), GatewayError("retries exhausted")])
async def test_fallback_structure_on_upstream_failure(
    gateway: FakeGateway,
    detector: StructureDetector,
    failure: Exception,
) -> None:
    first = await detector.detect(WEB)
    detector.store.flush_all()
    gateway.fail_with = failure

    assert await detector.detect(WEB) == first


@pytest.mark.asyncio
async def test_rate_limit_without_fallback_propagates(gateway: FakeGateway, detector: StructureDetector) -> None:
    gateway.fail_with = RateLimitedError()

    with pytest.raises(RateLimitedError):
        await detector.detect(WEB)
