"""HTTP surface tests using FastAPI's TestClient over the in-memory gateway."""

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from i18n_coverage.cache.store import CacheStore
from i18n_coverage.config import Config
from i18n_coverage.coverage import CoverageCalculator
from i18n_coverage.errors import RateLimitedError
from i18n_coverage.web.app import create_app

from ..conftest import FakeGateway


@pytest.fixture
def client(gateway: FakeGateway, settings: Config) -> Iterator[TestClient]:
    calculator = CoverageCalculator(gateway, CacheStore(settings), settings)
    with TestClient(create_app(calculator=calculator, settings=settings)) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["credentials"] == 0
    assert data["authenticated"] is False
    assert "coverage" in data["cache"]


def test_overall_badge(client: TestClient, settings: Config) -> None:
    response = client.get("/api/acme/web")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert response.headers["cache-control"] == f"public, max-age={settings.badge_max_age}"
    assert response.headers["etag"]
    assert "2/3 languages" in response.text
    assert "i18n coverage" in response.text


def test_language_badge(client: TestClient) -> None:
    response = client.get("/api/acme/web/ko")

    assert response.status_code == 200
    assert "66.7%" in response.text
    assert ">ko<" in response.text
    assert 'fill="#fe7d37"' in response.text


def test_badge_options(client: TestClient) -> None:
    response = client.get("/api/acme/web/fr", params={"label": "French", "style": "plastic", "logo": "github"})

    assert response.status_code == 200
    assert "French" in response.text
    assert "100%" in response.text
    assert 'rx="3"' in response.text
    assert "data:image/svg+xml;base64," in response.text


def test_custom_path_query(client: TestClient, gateway: FakeGateway) -> None:
    gateway.repos["acme/web"]["docs/i18n/en.json"] = {"a": "A", "b": "B"}
    gateway.repos["acme/web"]["docs/i18n/ko.json"] = {"a": "가"}

    response = client.get("/api/acme/web/ko", params={"path": "docs/i18n"})

    assert response.status_code == 200
    assert "50%" in response.text


def test_identical_badges_share_etag(client: TestClient) -> None:
    first = client.get("/api/acme/web/ko")
    second = client.get("/api/acme/web/ko")

    assert first.headers["etag"] == second.headers["etag"]


def test_all_languages(client: TestClient) -> None:
    response = client.get("/api/acme/app/all")

    assert response.status_code == 200
    assert response.headers["cache-control"].startswith("public")
    data = response.json()
    assert data["repository"] == "acme/app"
    assert data["base_language"] == "en"
    assert data["overall"]["coverage"] == 50.0
    assert data["overall"]["languages"] == 2
    assert data["is_fallback"] is False
    assert data["structure"]["pattern"] == "lang-dir"
    assert data["generated_at"]

    languages = {entry["language"]: entry for entry in data["languages"]}
    assert languages["de"]["coverage"] == 75.0
    assert languages["de"]["status"] == "fair"
    assert languages["ru"]["missing"] == 3
    assert languages["ru"]["status"] == "poor"


def test_unknown_language_is_404_badge(client: TestClient) -> None:
    response = client.get("/api/acme/web/xx")

    assert response.status_code == 404
    assert response.headers["cache-control"] == "no-cache"
    assert "language not found" in response.text
    assert "#e05d44" in response.text


def test_missing_repository_badge(client: TestClient) -> None:
    response = client.get("/api/acme/missing")

    assert response.status_code == 404
    assert "repository not found" in response.text


def test_rate_limited_badge(client: TestClient, gateway: FakeGateway) -> None:
    gateway.fail_with = RateLimitedError()

    response = client.get("/api/acme/web/ko")

    assert response.status_code == 429
    assert "rate limited" in response.text


def test_rate_limited_serves_fallback(client: TestClient, gateway: FakeGateway) -> None:
    assert client.get("/api/acme/web/ko").status_code == 200
    client.app.state.calculator.store.flush_all()
    gateway.fail_with = RateLimitedError()

    response = client.get("/api/acme/web/ko")

    assert response.status_code == 200
    assert "66.7%" in response.text


def test_all_languages_missing_repository(client: TestClient) -> None:
    response = client.get("/api/acme/missing/all")

    assert response.status_code == 404
    data = response.json()
    assert data["code"] == "REPO_NOT_FOUND"
    assert "acme/missing" in data["error"]


def test_lifespan_closes_calculator(gateway: FakeGateway, settings: Config) -> None:
    calculator = CoverageCalculator(gateway, CacheStore(settings), settings)

    with TestClient(create_app(calculator=calculator, settings=settings)):
        assert not gateway.closed

    assert gateway.closed


def test_invalidate_cache_forces_recompute(client: TestClient, gateway: FakeGateway) -> None:
    assert "66.7%" in client.get("/api/acme/web/ko").text
    gateway.repos["acme/web"]["public/locales/ko.json"]["description"] = "설명"

    assert "66.7%" in client.get("/api/acme/web/ko").text

    response = client.delete("/api/acme/web/cache")

    assert response.status_code == 200
    assert response.json()["repository"] == "acme/web"
    assert response.json()["removed"] > 0
    assert "100%" in client.get("/api/acme/web/ko").text
