"""Data models for parsed translation content and key counts."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Tuple

# Dotted key path -> leaf value (str, number, bool, list or None)
FlatTranslation = Dict[str, Any]

# Namespace name -> flat translation
NamespacedTranslation = Dict[str, FlatTranslation]


@dataclass
class ParsedLanguage:
    """Translations of one language as fetched from the repository."""

    language: str
    namespaces: NamespacedTranslation = field(default_factory=dict)
    namespaced: bool = True
    degraded: List[str] = field(default_factory=list)  # namespaces that failed to load
    skipped: List[str] = field(default_factory=list)   # target-only namespaces not fetched

    @property
    def is_fully_parsed(self) -> bool:
        return not self.degraded

    def qualified(self) -> FlatTranslation:
        """
        Merge all namespaces into one mapping.

        Keys of namespaced languages are prefixed with 'namespace:' so that
        identical keys in different files stay distinct.
        """
        if not self.namespaced:
            merged: FlatTranslation = {}
            for flat in self.namespaces.values():
                merged.update(flat)
            return merged

        return {
            f"{namespace}:{key}": value
            for namespace, flat in self.namespaces.items()
            for key, value in flat.items()
        }


@dataclass(frozen=True)
class BaseLanguageIndex:
    """Parsed intermediate state of the base language, shared across requests."""

    language: str
    keys: FrozenSet[str]
    translated_keys: FrozenSet[str]
    namespaces: Tuple[str, ...] = ()
    degraded: Tuple[str, ...] = ()
    fingerprint: str = ""  # digest of keys, stamped on KeyCounts measured against it

    @property
    def key_count(self) -> int:
        return len(self.keys)


@dataclass(frozen=True)
class KeyCount:
    """Per-language aggregate measured against the base language."""

    key_count: int          # keys matching the base language
    actual_translated: int  # matching keys that are not TODO placeholders
    total_keys: int         # all keys found, matching or not
    todo_count: int = 0
    is_fully_parsed: bool = True
    base_fingerprint: str = ""  # BaseLanguageIndex.fingerprint this was measured against
