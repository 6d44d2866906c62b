"""Data models describing a remote repository and its i18n layout."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, FrozenSet, Any


@dataclass(frozen=True)
class RepositoryCoordinate:
    """Identifies the unit of caching and computation."""

    owner: str
    repo: str
    custom_path: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def parse(cls, slug: str, custom_path: Optional[str] = None) -> "RepositoryCoordinate":
        """Build a coordinate from an 'owner/repo' string."""
        owner, _, repo = slug.strip().strip("/").partition("/")
        return cls(owner=owner, repo=repo, custom_path=custom_path or None)


class EntryType(str, Enum):
    """Kind of a directory listing entry."""
    FILE = "file"
    DIR = "dir"


@dataclass(frozen=True)
class DirEntry:
    """A single entry of a remote directory listing."""

    name: str
    path: str
    type: EntryType

    @property
    def is_dir(self) -> bool:
        return self.type == EntryType.DIR

    @property
    def is_json(self) -> bool:
        return self.type == EntryType.FILE and self.name.lower().endswith(".json")


class I18nPattern(str, Enum):
    """Canonical layouts of translation files."""
    LANG_DIRECTORY = "lang-dir"    # locales/en/common.json
    LANG_FILE = "lang-file"        # locales/en.json
    INVALID = "invalid"


@dataclass(frozen=True)
class I18nStructure:
    """Detected i18n layout of a repository."""

    base_path: str
    pattern: I18nPattern = I18nPattern.INVALID
    languages: Tuple[str, ...] = ()
    namespaces: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_valid_i18n(self) -> bool:
        return self.pattern != I18nPattern.INVALID and len(self.languages) > 0

    def language_path(self, language: str) -> str:
        """Path of a language's directory (lang-dir) or file (lang-file)."""
        if self.pattern == I18nPattern.LANG_FILE:
            return f"{self.base_path}/{language}.json"
        return f"{self.base_path}/{language}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "basePath": self.base_path,
            "isValidI18n": self.is_valid_i18n,
            "pattern": self.pattern.value,
            "languages": list(self.languages),
            "namespaces": sorted(self.namespaces),
        }


@dataclass(frozen=True)
class Unchanged:
    """Conditional fetch result: the stored revision is still current."""


@dataclass(frozen=True)
class Updated:
    """Conditional fetch result: new content and its revision tag."""

    content: bytes
    etag: Optional[str] = None


@dataclass(frozen=True)
class FileSnapshot:
    """File content as held by the cache, with the tag used to revalidate it."""

    content: bytes
    etag: Optional[str] = None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8-sig", errors="replace")
