# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Core data models for locale redirect tables.

This module defines the data structures shared by the redirect engine:
- RedirectPair: A (from, to) URL mapping
- ValidationRule: Enum-like class naming every rule a URL or table can break
- RedirectError: Raised on any rule violation, carrying the URL and the rule
- Flattened / Cycle: Tagged outcomes of walking one redirect chain
- FlattenResult: Output of flattening a whole pair set
- MergeResult: Output of merging updates into a locale table
- ResolverStatistics: Counters for the resolution cache

All models use JSON-compatible primitives for serialization.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

RedirectPair = Tuple[str, str]


class ValidationRule:
    """Rules a redirect URL or table can violate.

    Design: Using class constants (not Enum) for JSON-compatible strings.
    """

    MALFORMED_URL = "malformed_url"  # wrong shape, e.g. missing /docs/
    FORBIDDEN_CHARACTER = "forbidden_character"  # newline or tab
    UNKNOWN_LOCALE = "unknown_locale"
    SOURCE_IS_DOCUMENT = "source_is_document"  # from-URL is live content
    ALREADY_REDIRECTED = "already_redirected"
    UNRESOLVABLE_TARGET = "unresolvable_target"
    INSECURE_TARGET = "insecure_target"  # external target not https
    ENCODED_URL = "encoded_url"
    DUPLICATE_SOURCE = "duplicate_source"
    REDIRECT_CYCLE = "redirect_cycle"
    MULTIPLE_TARGETS = "multiple_targets"  # two edges from one source
    TABLE_NOT_CANONICAL = "table_not_canonical"


class RedirectError(Exception):
    """Raised when a redirect URL, pair or table breaks a rule."""

    def __init__(self, message: str, url: Optional[str] = None, rule: Optional[str] = None):
        super().__init__(message)
        self.url = url
        self.rule = rule

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {"message": str(self), "url": self.url, "rule": self.rule}


@dataclass(frozen=True)
class Flattened:
    """A chain that ends at a node without an outgoing edge.

    Every node in path redirects (directly or not) to target. An empty path
    means the walk started on a node that does not redirect at all.
    """

    path: Tuple[str, ...]
    target: str


@dataclass(frozen=True)
class Cycle:
    """A chain whose next hop (closing) is already on its own path."""

    path: Tuple[str, ...]
    closing: str

    def describe(self) -> str:
        return f"redirect cycle [{', '.join(self.path)}] → {self.closing}"


ChainOutcome = Union[Flattened, Cycle]


@dataclass
class FlattenResult:
    """Flattened pairs plus every cycle met along the way."""

    pairs: List[RedirectPair]
    cycles: List[Cycle] = field(default_factory=list)


@dataclass
class MergeResult:
    """Result of merging update pairs into a locale table.

    Attributes:
        locale: Lowercase locale the table belongs to
        table_path: Where the table lives (or will be written)
        pairs: Final flattened, validated pairs
        previous_pairs: Rows of the existing table as written
        dropped_conflicts: Old pairs removed because an update targets their source
        dropped_orphans: Pairs removed in repair mode
        cycles: Cycles dropped during flattening
    """

    locale: str
    table_path: Path
    pairs: List[RedirectPair]
    previous_pairs: List[RedirectPair]
    dropped_conflicts: List[RedirectPair] = field(default_factory=list)
    dropped_orphans: List[RedirectPair] = field(default_factory=list)
    cycles: List[Cycle] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Whether the merged table differs from the stored one."""
        return self.pairs != self.previous_pairs

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "locale": self.locale,
            "table_path": str(self.table_path),
            "pair_count": len(self.pairs),
            "previous_pair_count": len(self.previous_pairs),
            "changed": self.changed,
            "dropped_conflicts": [list(pair) for pair in self.dropped_conflicts],
            "dropped_orphans": [list(pair) for pair in self.dropped_orphans],
            "cycles": [cycle.describe() for cycle in self.cycles],
        }


@dataclass
class ResolverStatistics:
    """Counters for the resolution cache."""

    hits: int = 0
    misses: int = 0
    entries: int = 0
    loaded_tables: int = 0
    reloads: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "entries": self.entries,
            "loaded_tables": self.loaded_tables,
            "reloads": self.reloads,
        }
