"""Translation file parsing and plural reconciliation."""

from .plural_rules import expand_plural_keys, plural_suffixes
from .translation_parser import (
    TranslationParser,
    flatten,
    is_todo_placeholder,
    parse_json_content,
    unflatten,
)

__all__ = [
    "TranslationParser",
    "expand_plural_keys",
    "flatten",
    "is_todo_placeholder",
    "parse_json_content",
    "plural_suffixes",
    "unflatten",
]
