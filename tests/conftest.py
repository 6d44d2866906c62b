"""Shared fixtures: an in-memory content gateway and deterministic settings."""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, List, Optional

import pytest

from i18n_coverage.cache.content_source import CachedContentSource
from i18n_coverage.cache.store import CacheStore
from i18n_coverage.config import Config
from i18n_coverage.coverage.calculator import CoverageCalculator
from i18n_coverage.errors import InvalidStructureError, RemoteFileNotFoundError, RepoNotFoundError
from i18n_coverage.gateway.interface import ContentGateway
from i18n_coverage.models.repository import (
    DirEntry,
    EntryType,
    RepositoryCoordinate,
    Unchanged,
    Updated,
)


class FakeGateway(ContentGateway):
    """
    Serves repositories from dicts of path -> content.

    Content may be a JSON-able object, a str or bytes. Directories exist
    implicitly as prefixes of file paths. Setting `fail_with` makes every
    call raise that exception.
    """

    def __init__(self, repos: Dict[str, Dict[str, Any]]):
        self.repos = repos
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None
        self.closed = False

    def _files(self, coordinate: RepositoryCoordinate) -> Dict[str, Any]:
        files = self.repos.get(coordinate.full_name)
        if files is None:
            raise RepoNotFoundError(f"{coordinate.full_name} not found")
        return files

    async def list_directory(self, coordinate: RepositoryCoordinate, path: str) -> List[DirEntry]:
        self.calls.append(("list", coordinate.full_name, path))
        if self.fail_with is not None:
            raise self.fail_with

        files = self._files(coordinate)
        path = path.strip("/")
        if path in files:
            raise InvalidStructureError(f"{path} is a file")

        prefix = f"{path}/" if path else ""
        entries: Dict[str, DirEntry] = {}
        for file_path in files:
            if not file_path.startswith(prefix):
                continue
            name, _, rest = file_path[len(prefix):].partition("/")
            kind = EntryType.DIR if rest else EntryType.FILE
            entries.setdefault(name, DirEntry(name=name, path=f"{prefix}{name}", type=kind))

        if not entries and path:
            raise RepoNotFoundError(f"{coordinate.full_name}/{path} not found")
        return list(entries.values())

    async def read_file(
        self,
        coordinate: RepositoryCoordinate,
        path: str,
        etag: Optional[str] = None,
    ):
        self.calls.append(("read", coordinate.full_name, path, etag))
        if self.fail_with is not None:
            raise self.fail_with

        files = self._files(coordinate)
        if path not in files:
            raise RemoteFileNotFoundError(f"{path} not found")

        content = files[path]
        if isinstance(content, str):
            content = content.encode("utf-8")
        elif not isinstance(content, bytes):
            content = json.dumps(content).encode("utf-8")

        current = f'"{hashlib.sha1(content).hexdigest()}"'
        if etag == current:
            return Unchanged()
        return Updated(content=content, etag=current)

    async def close(self) -> None:
        self.closed = True

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


@pytest.fixture
def settings() -> Config:
    """Settings independent of the environment, without pauses."""
    return Config(
        github_tokens=[],
        batch_pause=0.0,
        retry_backoff=0.0,
        namespace_batch_size=2,
        language_batch_size=2,
    )


@pytest.fixture
def store(settings: Config) -> CacheStore:
    return CacheStore(settings)


@pytest.fixture
def lang_file_repo() -> Dict[str, Any]:
    """One JSON file per language under public/locales."""
    return {
        "README.md": "# app",
        "public/locales/en.json": {
            "title": "Title",
            "description": "Description",
            "message_other": "{{count}} messages",
        },
        "public/locales/ko.json": {
            "title": "제목",
            "message_other": "메시지 {{count}}개",
        },
        "public/locales/fr.json": {
            "title": "Titre",
            "description": "TODO: translate",
            "message_other": "{{count}} messages",
        },
    }


@pytest.fixture
def lang_dir_repo() -> Dict[str, Any]:
    """One directory per language under src/locales, one file per namespace."""
    return {
        "src/locales/en/common.json": {"save": "Save", "nav": {"home": "Home", "back": "Back"}},
        "src/locales/en/errors.json": {"save": "Could not save"},
        "src/locales/de/common.json": {"save": "Speichern", "nav": {"home": "Start"}},
        "src/locales/de/errors.json": {"save": "Speichern fehlgeschlagen"},
        "src/locales/de/extra.json": {"only": "Nur hier"},
        "src/locales/ru/common.json": {"save": "Сохранить"},
    }


@pytest.fixture
def gateway(lang_file_repo: Dict[str, Any], lang_dir_repo: Dict[str, Any]) -> FakeGateway:
    return FakeGateway({"acme/web": lang_file_repo, "acme/app": lang_dir_repo})


@pytest.fixture
def source(gateway: FakeGateway, store: CacheStore) -> CachedContentSource:
    return CachedContentSource(gateway, store)


@pytest.fixture
def calculator(source: CachedContentSource, settings: Config) -> CoverageCalculator:
    return CoverageCalculator(source, settings=settings)
