# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Fixed, built-in URL rewrites applied before any per-locale lookup.

These rewrites are structural (legacy locale prefixes, wrong locale casing,
sections that moved wholesale) and independent of the persisted redirect
tables. Bump FUNDAMENTAL_REDIRECTS_VERSION whenever the table changes.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

from locale_redirects.locales import LOCALE_ALIASES, VALID_LOCALE_CODES, canonical_locale

FUNDAMENTAL_REDIRECTS_VERSION = 1

PERMANENT = 301

# (pattern, replacement template); first match wins
FUNDAMENTAL_PATTERNS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"^/(?P<locale>[^/]+)/docs/?$"), "/{locale}/docs/Web"),
    (
        re.compile(r"^/(?P<locale>[^/]+)/docs/JavaScript(?P<rest>/.*)?$"),
        "/{locale}/docs/Web/JavaScript{rest}",
    ),
    (
        re.compile(r"^/(?P<locale>[^/]+)/docs/CSS(?P<rest>/.*)?$"),
        "/{locale}/docs/Web/CSS{rest}",
    ),
    (
        re.compile(r"^/(?P<locale>[^/]+)/docs/HTML(?P<rest>/.*)?$"),
        "/{locale}/docs/Web/HTML{rest}",
    ),
    (
        re.compile(r"^/(?P<locale>[^/]+)/docs/DOM(?P<rest>/.*)?$"),
        "/{locale}/docs/Web/API{rest}",
    ),
]


@dataclass(frozen=True)
class FundamentalRedirect:
    """Outcome of a fundamental lookup; url is None when nothing applies."""

    url: Optional[str] = None
    status: Optional[int] = None


def _fix_locale(url: str) -> str:
    parts = url.split("/", 2)
    if len(parts) < 3 or parts[0] or not parts[1]:
        return url

    locale = parts[1]
    if locale in VALID_LOCALE_CODES:
        return url

    fixed = LOCALE_ALIASES.get(locale.lower()) or canonical_locale(locale)
    if fixed is None:
        return url
    return f"/{fixed}/{parts[2]}"


def resolve_fundamental(url: str) -> FundamentalRedirect:
    """Apply the fixed rewrite table to url."""
    fixed = _fix_locale(url)

    for pattern, template in FUNDAMENTAL_PATTERNS:
        match = pattern.match(fixed)
        if match:
            groups = {key: value or "" for key, value in match.groupdict().items()}
            return FundamentalRedirect(url=template.format(**groups), status=PERMANENT)

    if fixed != url:
        return FundamentalRedirect(url=fixed, status=PERMANENT)
    return FundamentalRedirect()
