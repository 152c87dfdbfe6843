# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Validation rules for redirect source and target URLs.

Source (from-URL) rules:
- Starts with /, contains /docs/, locale prefix in the valid set (case-sensitive)
- No newline or tab characters
- Must not name an existing document
- Optionally: must not already be a redirect source

Target (to-URL) rules:
- Vanity URLs (bare locale roots) always pass
- External URLs must use https
- Internal URLs follow the source shape, must not redirect again and
  must name an existing document

Every violation raises RedirectError carrying the URL and a ValidationRule.
"""

from typing import Iterable, Optional, Protocol
from urllib.parse import urlparse

from locale_redirects.documents import DocumentLocator
from locale_redirects.locales import VALID_LOCALE_CODES, is_vanity_url
from locale_redirects.models import RedirectError, RedirectPair, ValidationRule

FORBIDDEN_URL_SYMBOLS = ("\n", "\t")


class Resolver(Protocol):
    """Anything that maps a URL to its redirect target (or itself)."""

    def resolve(self, url: str) -> str:
        ...


class RedirectValidator:
    """Checks the shape and legality of redirect URLs.

    Document existence is delegated to an injected DocumentLocator and
    "already redirected" checks to an optional Resolver, so the rules can be
    exercised without a content tree.

    Usage:
        validator = RedirectValidator(locator, resolver=resolver)
        validator.validate_from_url("/en-US/docs/Old")
        validator.validate_to_url("/en-US/docs/New")
    """

    def __init__(
        self,
        locator: DocumentLocator,
        locales: Iterable[str] = VALID_LOCALE_CODES,
        resolver: Optional[Resolver] = None,
    ):
        """Initialize validator.

        Args:
            locator: Resolves URLs to documents.
            locales: Valid locale codes, in their canonical casing.
            resolver: Used for resolve-checking. When None, resolve checks pass.
        """
        self.locator = locator
        self.resolver = resolver
        self._locales = frozenset(locales)

    def check_invalid_symbols(self, url: str) -> None:
        for character in FORBIDDEN_URL_SYMBOLS:
            if character in url:
                raise RedirectError(
                    f"URL contains invalid character {character!r}: {url!r}",
                    url=url,
                    rule=ValidationRule.FORBIDDEN_CHARACTER,
                )

    def validate_url_locale(self, url: str) -> None:
        """Require ``/{locale}/docs/...`` with a known locale."""
        parts = url.split("/")
        nothing = parts[0]
        locale = parts[1] if len(parts) > 1 else ""
        docs = parts[2] if len(parts) > 2 else ""
        if nothing or not locale or docs != "docs":
            raise RedirectError(
                f"The URL is expected to start with /$locale/docs/: {url}",
                url=url,
                rule=ValidationRule.MALFORMED_URL,
            )
        if locale not in self._locales:
            raise RedirectError(
                f"'{locale}' not in {sorted(self._locales)}",
                url=url,
                rule=ValidationRule.UNKNOWN_LOCALE,
            )

    def _check_not_redirected(self, url: str) -> None:
        if self.resolver is None:
            return
        resolved = self.resolver.resolve(url)
        if resolved != url:
            raise RedirectError(
                f"{url} is already matched as a redirect (to: '{resolved}')",
                url=url,
                rule=ValidationRule.ALREADY_REDIRECTED,
            )

    def validate_from_url(
        self, url: str, check_resolve: bool = True, check_path: bool = True
    ) -> None:
        """Raise RedirectError if url can't be a redirect source.

        Args:
            url: Candidate from-URL.
            check_resolve: Reject URLs that already redirect somewhere.
            check_path: Reject URLs that name an existing document.
        """
        if not url.startswith("/"):
            raise RedirectError(
                f"From-URL must start with a / was {url}",
                url=url,
                rule=ValidationRule.MALFORMED_URL,
            )
        if "/docs/" not in url:
            raise RedirectError(
                f"From-URL must contain '/docs/' was {url}",
                url=url,
                rule=ValidationRule.MALFORMED_URL,
            )
        if url.split("/")[1] not in self._locales:
            raise RedirectError(
                f"The locale prefix is not valid or wrong case was {url}",
                url=url,
                rule=ValidationRule.UNKNOWN_LOCALE,
            )
        self.check_invalid_symbols(url)
        self.validate_url_locale(url)

        if check_path:
            path = self.locator.locate(url)
            if path:
                raise RedirectError(
                    f"From-URL resolves to a file ({path})",
                    url=url,
                    rule=ValidationRule.SOURCE_IS_DOCUMENT,
                )
        if check_resolve:
            self._check_not_redirected(url)

    def validate_to_url(
        self, url: str, check_resolve: bool = True, check_path: bool = True
    ) -> None:
        """Raise RedirectError if url can't be a redirect target.

        Args:
            url: Candidate to-URL.
            check_resolve: Reject internal URLs that themselves redirect.
            check_path: Require internal URLs to name an existing document.
        """
        if is_vanity_url(url, self._locales):
            return

        if "://" in url:
            parsed = urlparse(url)
            if not parsed.scheme or not parsed.netloc:
                raise RedirectError(
                    f"To-URL is not a valid URL ({url})",
                    url=url,
                    rule=ValidationRule.MALFORMED_URL,
                )
            if parsed.scheme != "https":
                raise RedirectError(
                    f"We only redirect to https:// ({url})",
                    url=url,
                    rule=ValidationRule.INSECURE_TARGET,
                )
        elif url.startswith("/"):
            self.check_invalid_symbols(url)
            self.validate_url_locale(url)

            if check_resolve:
                self._check_not_redirected(url)
            if check_path and not self.locator.locate(url):
                raise RedirectError(
                    f"To-URL has to resolve to a file ({url})",
                    url=url,
                    rule=ValidationRule.UNRESOLVABLE_TARGET,
                )
        else:
            raise RedirectError(
                f"To-URL has to be external or start with / ({url})",
                url=url,
                rule=ValidationRule.MALFORMED_URL,
            )

    def validate_pairs(self, pairs: Iterable[RedirectPair], check_path: bool = True) -> None:
        """Validate every pair without resolve-checking.

        Args:
            pairs: Pairs to validate.
            check_path: Apply the document-existence rules to both ends.
        """
        for from_url, to_url in pairs:
            self.validate_from_url(from_url, check_resolve=False, check_path=check_path)
            self.validate_to_url(to_url, check_resolve=False, check_path=check_path)
