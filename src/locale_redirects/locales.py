# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Fixed set of recognized locales.

Keys are the lowercase form used for folder names on disk, values are the
canonical casing that must appear in URLs.
"""

from typing import Dict, FrozenSet, Iterable, Optional

VALID_LOCALES: Dict[str, str] = {
    "ar": "ar",
    "bg": "bg",
    "bn": "bn",
    "ca": "ca",
    "de": "de",
    "el": "el",
    "en-us": "en-US",
    "es": "es",
    "fa": "fa",
    "fi": "fi",
    "fr": "fr",
    "he": "he",
    "hi-in": "hi-IN",
    "hu": "hu",
    "id": "id",
    "it": "it",
    "ja": "ja",
    "kab": "kab",
    "ko": "ko",
    "ms": "ms",
    "my": "my",
    "nl": "nl",
    "pl": "pl",
    "pt-br": "pt-BR",
    "pt-pt": "pt-PT",
    "ru": "ru",
    "sv-se": "sv-SE",
    "th": "th",
    "tr": "tr",
    "uk": "uk",
    "vi": "vi",
    "zh-cn": "zh-CN",
    "zh-tw": "zh-TW",
}

VALID_LOCALE_CODES: FrozenSet[str] = frozenset(VALID_LOCALES.values())

DEFAULT_LOCALE = "en-US"

# Legacy locale prefixes still seen in inbound links
LOCALE_ALIASES: Dict[str, str] = {
    "en": "en-US",
    "cn": "zh-CN",
    "zh": "zh-CN",
    "zh_cn": "zh-CN",
    "zh-hans": "zh-CN",
    "zh_tw": "zh-TW",
    "zh-hant": "zh-TW",
    "pt": "pt-PT",
    "jp": "ja",
}


def canonical_locale(locale: str) -> Optional[str]:
    """Return the canonical casing of a locale code, or None if unknown."""
    return VALID_LOCALES.get(locale.lower())


def is_vanity_url(url: str, locales: Iterable[str] = VALID_LOCALE_CODES) -> bool:
    """Whether url is a bare locale root such as ``/en-US/``."""
    return url in {f"/{locale}/" for locale in locales}
