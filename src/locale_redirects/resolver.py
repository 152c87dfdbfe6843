# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Resolution cache for single-shot URL lookups across all locales.

Key Features:
- Lazily built on first lookup from every locale's persisted table
- Explicit load()/reload() for eager population and refresh
- Fundamental rewrites applied before the lookup
- Exactly one lookup per resolve(): stored targets are already flattened
- resolve() never raises; failures fall back to the input URL

Thread Safety:
- Single _lock protects _redirects, _by_locale, _loaded and _stats
- Re-entrant so reload() and resolve() can call load() under the lock
"""

import logging
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional, Set

from locale_redirects.fundamental import FundamentalRedirect, resolve_fundamental
from locale_redirects.locales import VALID_LOCALES
from locale_redirects.models import RedirectError, RedirectPair, ResolverStatistics
from locale_redirects.slugs import decode_path

logger = logging.getLogger(__name__)

# Loads one locale's table; returns None when the locale has no table.
TableLoader = Callable[[str], Optional[List[RedirectPair]]]

FundamentalResolver = Callable[[str], FundamentalRedirect]


class RedirectResolver:
    """Process-wide lookup table from lowercase source URL to target URL.

    Constructed once and injected wherever lookups are needed.

    Usage:
        resolver = RedirectResolver(table_loader=service.load_table_for_cache)
        resolver.resolve("/en-US/docs/Old")   # lazily loads every table
        resolver.reload()                    # drop and rebuild
    """

    def __init__(
        self,
        table_loader: TableLoader,
        locales: Optional[Iterable[str]] = None,
        fundamental: FundamentalResolver = resolve_fundamental,
    ) -> None:
        """Initialize resolver.

        Args:
            table_loader: Loads the pairs of one (lowercase) locale.
            locales: Locales covered by a full load. Defaults to every valid locale.
            fundamental: Fixed rewrite table applied before each lookup.
        """
        self._table_loader = table_loader
        self._locales: List[str] = [
            locale.lower() for locale in (locales if locales is not None else VALID_LOCALES)
        ]
        self._fundamental = fundamental

        self._redirects: Dict[str, str] = {}
        self._by_locale: Dict[str, Set[str]] = {}
        self._loaded = False
        self._stats = ResolverStatistics()
        self._lock = RLock()

    @property
    def locales(self) -> List[str]:
        return list(self._locales)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._redirects)

    def _load_locale(self, locale: str) -> None:
        pairs = self._table_loader(locale)

        # Refreshing a locale replaces only its own entries.
        for key in self._by_locale.pop(locale, set()):
            self._redirects.pop(key, None)
        if pairs is None:
            return

        keys: Set[str] = set()
        for from_url, to_url in pairs:
            key = from_url.lower()
            if key in self._redirects:
                logger.warning(f"{from_url} already loaded from another table, keeping first")
                continue
            self._redirects[key] = to_url
            keys.add(key)
        self._by_locale[locale] = keys
        self._stats.loaded_tables += 1
        logger.debug(f"Loaded {len(keys)} redirects for {locale}")

    def load(self, locales: Optional[Iterable[str]] = None, raise_on_error: bool = True) -> None:
        """Populate or refresh the cache for the given locales (default: all).

        Args:
            locales: Locales to (re)load.
            raise_on_error: Propagate table errors. When False, a failing
                locale is logged and skipped.

        Raises:
            RedirectError, OSError, ValueError: If a table can't be loaded
                and raise_on_error is set.
        """
        targets = self._locales
        if locales is not None:
            targets = [locale.lower() for locale in locales]
        with self._lock:
            for locale in targets:
                try:
                    self._load_locale(locale)
                except (RedirectError, OSError, ValueError) as e:
                    if raise_on_error:
                        raise
                    logger.error(f"Failed to load redirects for {locale}: {e}")
            self._loaded = True
        logger.info(f"Resolution cache holds {len(self._redirects)} redirects")

    def reload(self, locales: Optional[Iterable[str]] = None) -> None:
        """Drop the whole cache and load it again."""
        with self._lock:
            self._redirects.clear()
            self._by_locale.clear()
            self._loaded = False
            self._stats.reloads += 1
            self.load(locales)

    def clear(self) -> None:
        """Forget everything; the next resolve() loads lazily again."""
        with self._lock:
            self._redirects.clear()
            self._by_locale.clear()
            self._loaded = False

    def resolve(self, url: str) -> str:
        """Translate url to its final destination.

        Returns:
            The stored target, or the (possibly fundamentally rewritten)
            input when no redirect applies.
        """
        with self._lock:
            if not self._loaded:
                self.load(raise_on_error=False)

            fundamental_or_url = self._fundamental(url).url or url
            target = self._redirects.get(decode_path(fundamental_or_url).lower())
            if target is None:
                self._stats.misses += 1
                return fundamental_or_url
            self._stats.hits += 1
            return target

    def get_statistics(self) -> ResolverStatistics:
        with self._lock:
            return ResolverStatistics(
                hits=self._stats.hits,
                misses=self._stats.misses,
                entries=len(self._redirects),
                loaded_tables=self._stats.loaded_tables,
                reloads=self._stats.reloads,
            )
