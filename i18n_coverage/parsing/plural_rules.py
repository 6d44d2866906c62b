"""CLDR plural categories per language, expressed as i18next-style key suffixes."""

import re
from typing import Dict, Iterable, List, Tuple

# Every suffix a plural key family may use, in CLDR order
PLURAL_SUFFIXES: Tuple[str, ...] = ("_zero", "_one", "_two", "_few", "_many", "_other")

DEFAULT_SUFFIXES: Tuple[str, ...] = ("_other",)

PLURAL_RULES: Dict[str, Tuple[str, ...]] = {
    "ar": ("_zero", "_one", "_two", "_few", "_many", "_other"),
    "cs": ("_one", "_few", "_many", "_other"),
    "pl": ("_one", "_few", "_many", "_other"),
    "ru": ("_one", "_few", "_many", "_other"),
    "lt": ("_one", "_few", "_many", "_other"),
    "lv": ("_zero", "_one", "_other"),
    "ro": ("_one", "_few", "_other"),
    "sk": ("_one", "_few", "_many", "_other"),
    "sl": ("_one", "_two", "_few", "_other"),
    "uk": ("_one", "_few", "_many", "_other"),
    "be": ("_one", "_few", "_many", "_other"),
    "hr": ("_one", "_few", "_other"),
    "sr": ("_one", "_few", "_other"),
    "bs": ("_one", "_few", "_other"),
    "mk": ("_one", "_other"),
    "mt": ("_one", "_few", "_many", "_other"),
    "ga": ("_one", "_two", "_few", "_many", "_other"),
    "gd": ("_one", "_two", "_few", "_other"),
    "cy": ("_zero", "_one", "_two", "_few", "_many", "_other"),
    "br": ("_one", "_two", "_few", "_many", "_other"),
}

_SUFFIX_PATTERN = re.compile(r"(_zero|_one|_two|_few|_many|_other)$")


def plural_suffixes(language: str) -> Tuple[str, ...]:
    """
    Plural suffixes used by a language.

    Regional variants ('sr-Latn', 'pt_BR') fall back to their primary subtag;
    unlisted languages use only '_other'.
    """
    if language in PLURAL_RULES:
        return PLURAL_RULES[language]
    primary = re.split(r"[-_]", language, maxsplit=1)[0].lower()
    return PLURAL_RULES.get(primary, DEFAULT_SUFFIXES)


def split_plural(key: str) -> Tuple[str, str]:
    """Split a key into (stem, suffix); suffix is '' for non-plural keys."""
    match = _SUFFIX_PATTERN.search(key)
    if not match:
        return key, ""
    return key[: match.start()], match.group(1)


def expand_plural_keys(keys: Iterable[str], language: str) -> List[str]:
    """
    Expand plural key families to the language's own plural categories.

    A key ending with any known plural suffix is replaced by one key per
    suffix of the language. A key that has a sibling 'key + suffix' is
    expanded the same way. Other keys pass through. Output order follows
    first appearance and contains no duplicates.
    """
    return list(expand_plural_map(keys, language))


def expand_plural_map(keys: Iterable[str], language: str) -> Dict[str, List[str]]:
    """
    Like expand_plural_keys, but map each expanded key to its source keys.

    Used to carry per-key properties (e.g. placeholder status) through the
    expansion.
    """
    keys = list(keys)
    key_set = set(keys)
    forms = plural_suffixes(language)
    expanded: Dict[str, List[str]] = {}

    for key in keys:
        stem, suffix = split_plural(key)
        if not suffix:
            has_plural_sibling = any(f"{key}{form}" in key_set for form in PLURAL_SUFFIXES)
            if not has_plural_sibling:
                expanded.setdefault(key, []).append(key)
                continue
            stem = key

        for form in forms:
            expanded.setdefault(f"{stem}{form}", []).append(key)

    return expanded
