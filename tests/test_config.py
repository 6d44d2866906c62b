import pytest

from i18n_coverage.config import Config

TOKEN_VARS = ["GITHUB_TOKENS", "GITHUB_TOKEN"] + [f"GITHUB_TOKEN_{i}" for i in range(2, 6)]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in TOKEN_VARS:
        monkeypatch.delenv(name, raising=False)


def test_token_pool_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKENS", "a, b,,c")
    monkeypatch.setenv("GITHUB_TOKEN", "b")
    monkeypatch.setenv("GITHUB_TOKEN_3", "d")

    assert Config().github_tokens == ["a", "b", "c", "d"]


def test_no_tokens_warns() -> None:
    settings = Config()

    assert settings.github_tokens == []
    assert any("GITHUB_TOKEN" in warning for warning in settings.validate())


def test_numeric_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COVERAGE_TTL", "60")
    monkeypatch.setenv("RETRY_BACKOFF", "0.5")
    monkeypatch.setenv("LANGUAGE_BATCH_SIZE", "5")

    settings = Config()

    assert settings.coverage_ttl == 60
    assert settings.retry_backoff == 0.5
    assert settings.language_batch_size == 5


def test_invalid_values_are_reported() -> None:
    settings = Config(github_tokens=["t"], max_attempts=0, namespace_batch_size=0)

    warnings = settings.validate()

    assert len(warnings) == 2
