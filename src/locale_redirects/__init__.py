# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Per-locale URL redirect tables: validation, flattening, persistence and lookup."""

from .cleanup import remove_conflicting_old_redirects, remove_orphaned_redirects
from .config import Config, ConfigurationError
from .documents import ContentTreeLocator, DocumentLocator, KnownDocumentsLocator
from .fundamental import FUNDAMENTAL_REDIRECTS_VERSION, FundamentalRedirect, resolve_fundamental
from .graph import RedirectGraph, flatten_redirects
from .locales import VALID_LOCALE_CODES, VALID_LOCALES
from .models import (
    Cycle,
    Flattened,
    FlattenResult,
    MergeResult,
    RedirectError,
    RedirectPair,
    ResolverStatistics,
    ValidationRule,
)
from .resolver import RedirectResolver
from .service import RedirectService
from .table import load_pairs_from_file, save_pairs
from .validator import RedirectValidator
from .watcher import RedirectTableWatcher

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ConfigurationError",
    "ContentTreeLocator",
    "Cycle",
    "DocumentLocator",
    "FUNDAMENTAL_REDIRECTS_VERSION",
    "FlattenResult",
    "Flattened",
    "FundamentalRedirect",
    "KnownDocumentsLocator",
    "MergeResult",
    "RedirectError",
    "RedirectGraph",
    "RedirectPair",
    "RedirectResolver",
    "RedirectService",
    "RedirectTableWatcher",
    "RedirectValidator",
    "ResolverStatistics",
    "VALID_LOCALES",
    "VALID_LOCALE_CODES",
    "ValidationRule",
    "flatten_redirects",
    "load_pairs_from_file",
    "remove_conflicting_old_redirects",
    "remove_orphaned_redirects",
    "resolve_fundamental",
    "save_pairs",
]
