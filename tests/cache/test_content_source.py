import pytest

from i18n_coverage.cache.content_source import CachedContentSource
from i18n_coverage.cache.store import CacheKind
from i18n_coverage.models.repository import RepositoryCoordinate

from ..conftest import FakeGateway

WEB = RepositoryCoordinate("acme", "web")


@pytest.mark.asyncio
async def test_fresh_file_is_served_from_cache(gateway: FakeGateway, source: CachedContentSource) -> None:
    first = await source.read_file(WEB, "public/locales/en.json")
    second = await source.read_file(WEB, "public/locales/en.json")

    assert first == second
    assert gateway.count("read") == 1


@pytest.mark.asyncio
async def test_expired_file_is_revalidated_by_etag(gateway: FakeGateway, source: CachedContentSource) -> None:
    first = await source.read_file(WEB, "public/locales/en.json")
    source.store.flush_all()

    second = await source.read_file(WEB, "public/locales/en.json")

    assert second is first
    assert gateway.calls[-1] == ("read", "acme/web", "public/locales/en.json", first.etag)


@pytest.mark.asyncio
async def test_changed_file_replaces_snapshot(gateway: FakeGateway, source: CachedContentSource) -> None:
    await source.read_file(WEB, "public/locales/ko.json")
    source.store.flush_all()
    gateway.repos["acme/web"]["public/locales/ko.json"] = {"title": "새 제목"}

    text = await source.read_text(WEB, "public/locales/ko.json")

    assert "title" in text
    snapshot = source.store.get_fallback(CacheKind.FILE, "acme", "web", "public/locales/ko.json")
    assert snapshot.text == text


@pytest.mark.asyncio
async def test_listing_is_deduplicated(gateway: FakeGateway, source: CachedContentSource) -> None:
    first = await source.list_directory(WEB, "public/locales")
    second = await source.list_directory(WEB, "public/locales")

    assert first == second
    assert gateway.count("list") == 1
