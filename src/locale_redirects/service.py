# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""RedirectService - entry points for maintaining and querying redirect tables.

Write path (add):
1. Load the locale's existing table (strict, or relaxed in repair mode)
2. Drop old pairs that conflict with the updates
3. Append the updates and flatten every chain
4. In repair mode, drop orphaned pairs
5. Validate everything and rewrite the table atomically

Read path (resolve):
- A RedirectResolver built from every locale's table answers each lookup
  with one dictionary access after the fundamental rewrites.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from locale_redirects.cleanup import remove_conflicting_old_redirects, remove_orphaned_redirects
from locale_redirects.config import Config, ConfigurationError
from locale_redirects.documents import ContentTreeLocator, DocumentLocator
from locale_redirects.graph import flatten_redirects
from locale_redirects.locales import VALID_LOCALES
from locale_redirects.models import MergeResult, RedirectError, RedirectPair, ValidationRule
from locale_redirects.resolver import RedirectResolver
from locale_redirects.table import (
    check_pairs,
    error_on_duplicated,
    error_on_encoded,
    load_pairs_from_file,
    read_pairs,
    save_pairs,
)
from locale_redirects.validator import RedirectValidator

logger = logging.getLogger(__name__)


class RedirectService:
    """Coordinates loading, merging, validating and persisting redirect tables.

    Owned Components:
    - DocumentLocator: Answers "is this URL a real document?"
    - RedirectResolver: Resolution cache over all locale tables
    - RedirectValidator: URL rules, resolve-checking against the resolver

    Every component can be injected, which is how tests run without a
    content tree.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        locator: Optional[DocumentLocator] = None,
        resolver: Optional[RedirectResolver] = None,
        validator: Optional[RedirectValidator] = None,
    ):
        """Initialize the service with its dependencies.

        Args:
            config: Configuration. Defaults to Config() from the working directory.
            locator: Document locator. Defaults to a ContentTreeLocator over
                the configured content roots.
            resolver: Resolution cache. Defaults to one fed by this service's tables.
            validator: URL validator. Defaults to one using locator and resolver.
        """
        self.config = config if config is not None else Config()
        self.locator: DocumentLocator = (
            locator
            if locator is not None
            else ContentTreeLocator(
                self.config.content_root,
                self.config.content_translated_root,
                self.config.content_archived_root,
            )
        )
        self.resolver = (
            resolver if resolver is not None else RedirectResolver(self.load_table_for_cache)
        )
        self.validator = (
            validator
            if validator is not None
            else RedirectValidator(self.locator, resolver=self.resolver)
        )

    # Table locations

    def table_path(self, locale: str) -> Path:
        """Path the locale's table is written to.

        Raises:
            ConfigurationError: If the root holding this locale is not configured.
        """
        locale = locale.lower()
        if locale == "en-us":
            root = self.config.content_root
            if root is None:
                raise ConfigurationError(
                    f"trying to add redirects for {locale} but CONTENT_ROOT not set"
                )
        else:
            root = self.config.content_translated_root
            if root is None:
                raise ConfigurationError(
                    f"trying to add redirects for {locale} but CONTENT_TRANSLATED_ROOT not set"
                )
        return root / locale / self.config.redirects_filename

    def find_table_path(self, locale: str) -> Optional[Path]:
        """Existing table for locale, looking in the content root first."""
        for root in (self.config.content_root, self.config.content_translated_root):
            if root is None:
                continue
            candidate = root / locale.lower() / self.config.redirects_filename
            if candidate.exists():
                return candidate
        return None

    def locales_with_tables(self) -> List[str]:
        return [locale for locale in VALID_LOCALES if self.find_table_path(locale) is not None]

    # Loading

    def load_table(
        self, locale: str, strict: bool = True, check_path: bool = False
    ) -> List[RedirectPair]:
        """Load a locale's table; an absent table is empty."""
        path = self.find_table_path(locale)
        if path is None:
            return []
        return load_pairs_from_file(path, self.validator, strict=strict, check_path=check_path)

    def load_table_for_cache(self, locale: str) -> Optional[List[RedirectPair]]:
        """Table loader used by the resolver: relaxed, None when absent."""
        path = self.find_table_path(locale)
        if path is None:
            return None
        logger.debug(f"Checking {path}")
        return load_pairs_from_file(path, self.validator, strict=False)

    # Write path

    def merge(
        self,
        locale: str,
        update_pairs: Iterable[RedirectPair],
        fix: bool = False,
        strict_cycles: Optional[bool] = None,
    ) -> MergeResult:
        """Merge update pairs into a locale's table without writing it.

        Args:
            locale: Locale whose table is updated (any casing).
            update_pairs: New pairs; must be decoded, unique and valid.
            fix: Repair mode: load relaxed and drop orphaned pairs.
            strict_cycles: Raise on cycles. Defaults to the configured value.

        Returns:
            MergeResult with the final pairs and everything that was dropped.

        Raises:
            RedirectError: If updates or the resulting table break a rule.
            ConfigurationError: If the locale's content root is not configured.
        """
        update_pairs = list(update_pairs)
        error_on_encoded(update_pairs)
        error_on_duplicated(update_pairs)
        self.validator.validate_pairs(update_pairs)

        locale = locale.lower()
        table_path = self.table_path(locale)
        previous_pairs: List[RedirectPair] = []
        old_pairs: List[RedirectPair] = []
        if table_path.exists():
            # Rows as written, before relaxed loading drops anything.
            previous_pairs = read_pairs(table_path)
            # Repair mode loads relaxed so a broken table can be rewritten.
            old_pairs = check_pairs(previous_pairs, self.validator, strict=not fix)
            logger.debug(f"Loaded {len(old_pairs)} redirects from {table_path}")

        clean_pairs = remove_conflicting_old_redirects(old_pairs, update_pairs)
        kept = set(clean_pairs)
        dropped_conflicts = [pair for pair in old_pairs if pair not in kept]
        clean_pairs.extend(update_pairs)

        if strict_cycles is None:
            strict_cycles = self.config.strict_cycles
        flattened = flatten_redirects(clean_pairs, strict_cycles=strict_cycles)
        pairs = flattened.pairs

        dropped_orphans: List[RedirectPair] = []
        if fix:
            repaired = remove_orphaned_redirects(pairs, self.locator)
            kept = set(repaired)
            dropped_orphans = [pair for pair in pairs if pair not in kept]
            pairs = repaired

        self.validator.validate_pairs(pairs)

        return MergeResult(
            locale=locale,
            table_path=table_path,
            pairs=pairs,
            previous_pairs=previous_pairs,
            dropped_conflicts=dropped_conflicts,
            dropped_orphans=dropped_orphans,
            cycles=flattened.cycles,
        )

    def add(
        self, locale: str, update_pairs: Iterable[RedirectPair], fix: bool = False
    ) -> MergeResult:
        """Merge update pairs into a locale's table and persist it."""
        result = self.merge(locale, update_pairs, fix=fix)
        save_pairs(result.table_path, result.pairs)
        return result

    def add_redirect(self, from_url: str, to_url: str) -> MergeResult:
        """Add one redirect to the locale named by from_url.

        Unlike add(), both URLs are also checked against the resolution
        table so an already redirected URL can't be registered again.
        """
        self.validate_from_url(from_url)
        self.validate_to_url(to_url)
        locale = from_url.split("/")[1]
        return self.add(locale, [(from_url, to_url)])

    def validate_locale(self, locale: str, strict: bool = False) -> None:
        """Raise if the locale's table is not in canonical form.

        Non-strict loads the table strictly and checks it is flattened and
        sorted. Strict loads relaxed and also requires it to be orphan-free;
        encoded or duplicated rows dropped by the relaxed load make the table
        differ from the stored rows, so they are flaws in both modes.

        Raises:
            RedirectError: If the table is flawed.
        """
        result = self.merge(locale, [], fix=strict)
        if result.changed:
            raise RedirectError(
                f"{self.config.redirects_filename} for {locale} is flawed",
                url=str(result.table_path),
                rule=ValidationRule.TABLE_NOT_CANONICAL,
            )

    # Read path

    def load(self, locales: Optional[Iterable[str]] = None) -> None:
        """Eagerly populate or refresh the resolution cache."""
        self.resolver.load(locales)

    def reload(self) -> None:
        self.resolver.reload()

    def resolve(self, url: str) -> str:
        return self.resolver.resolve(url)

    def validate_from_url(self, url: str, check_resolve: bool = True) -> None:
        self.validator.validate_from_url(url, check_resolve=check_resolve)

    def validate_to_url(
        self, url: str, check_resolve: bool = True, check_path: bool = True
    ) -> None:
        self.validator.validate_to_url(url, check_resolve=check_resolve, check_path=check_path)
