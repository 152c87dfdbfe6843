# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Document locators: map a decoded URL to the document it names.

Components:
- DocumentLocator: Protocol consumed by the validator and orphan cleanup
- ContentTreeLocator: Looks documents up in the on-disk content roots
- KnownDocumentsLocator: Answers from an in-memory set of URLs

Vanity URLs (bare locale roots) always locate to themselves.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Protocol

from locale_redirects.locales import VALID_LOCALE_CODES, is_vanity_url
from locale_redirects.slugs import slug_to_folder

logger = logging.getLogger(__name__)

DOCUMENT_FILENAMES = ("index.html", "index.md")

ARCHIVED_MARKER = "$ARCHIVED"
TRANSLATED_MARKER = "$TRANSLATED"


class DocumentLocator(Protocol):
    """Anything that can tell whether a URL names a real document."""

    def locate(self, url: str) -> Optional[str]:
        """Return the document path for url, or None if there is none."""
        ...


class ContentTreeLocator:
    """Locate documents inside the content roots.

    ``/<locale>/docs/<slug>`` maps to
    ``<root>/<locale-lowercase>/<slug-folder>/index.html`` (or ``index.md``).
    en-US documents live under content_root, every other locale under
    translated_root. Documents found under archived_root are reported with an
    ``$ARCHIVED/`` prefix. Without a translated root, non en-US lookups are
    assumed to exist and reported with a ``$TRANSLATED/`` prefix.
    """

    def __init__(
        self,
        content_root: Optional[Path],
        translated_root: Optional[Path] = None,
        archived_root: Optional[Path] = None,
        locales: Iterable[str] = VALID_LOCALE_CODES,
    ):
        """Initialize locator.

        Args:
            content_root: Root holding en-US documents.
            translated_root: Root holding every other locale.
            archived_root: Root holding archived documents.
            locales: Locale codes whose bare roots count as vanity URLs.
        """
        self.content_root = Path(content_root) if content_root else None
        self.translated_root = Path(translated_root) if translated_root else None
        self.archived_root = Path(archived_root) if archived_root else None
        self._locales = frozenset(locales)

    def _existing_document(self, folder: Path) -> Optional[Path]:
        for filename in DOCUMENT_FILENAMES:
            candidate = folder / filename
            if candidate.exists():
                return candidate
        return None

    def locate(self, url: str) -> Optional[str]:
        if is_vanity_url(url, self._locales):
            return url

        bare_url = url.split("#")[0]
        parts = bare_url.lower().split("/")
        if len(parts) < 4:
            return None
        locale = parts[1]
        relative_folder = Path(locale) / slug_to_folder("/".join(parts[3:]))

        if self.archived_root is not None:
            archived = self._existing_document(self.archived_root / relative_folder)
            if archived is not None:
                return f"{ARCHIVED_MARKER}/{archived.relative_to(self.archived_root)}"

        if locale == "en-us":
            root = self.content_root
            if root is None:
                return None
        else:
            root = self.translated_root
        if root is None:
            relative_path = relative_folder / DOCUMENT_FILENAMES[0]
            logger.debug(f"No content root for {url}, assuming {relative_path} exists")
            return f"{TRANSLATED_MARKER}/{relative_path}"

        found = self._existing_document(root / relative_folder)
        return str(found) if found is not None else None


class KnownDocumentsLocator:
    """Locator backed by a fixed set of document URLs.

    URLs are matched case-insensitively, like the folder lookup on disk.
    Useful when the caller already knows the document inventory.
    """

    def __init__(self, urls: Iterable[str], locales: Iterable[str] = VALID_LOCALE_CODES):
        self._urls = {url.lower(): url for url in urls}
        self._locales = frozenset(locales)

    def add(self, url: str) -> None:
        self._urls[url.lower()] = url

    def remove(self, url: str) -> None:
        self._urls.pop(url.lower(), None)

    def locate(self, url: str) -> Optional[str]:
        if is_vanity_url(url, self._locales):
            return url
        return self._urls.get(url.split("#")[0].lower())
