# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Redirect graph flattening with cycle detection.

Algorithm Overview:
1. Record the first-seen casing of every URL (source or target)
2. Lowercase all pairs and build a graph with one outgoing edge per node
3. Walk every source forward until a node without an outgoing edge is
   reached, or until the next hop is already on the current path (cycle)
4. Point every node of a completed walk directly at its final target
5. Restore first-seen casing and sort by (from, to)

Example:
    A -> B, B -> C           becomes  A -> C, B -> C
    A -> B, B -> A           becomes  nothing (cycle reported)

Cycle detection is local to a walk: a node fails only when its own chain
loops back on itself. Chains that merely end on a cyclic node fail too,
since they have no final target.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set

from locale_redirects.models import (
    ChainOutcome,
    Cycle,
    Flattened,
    FlattenResult,
    RedirectError,
    RedirectPair,
    ValidationRule,
)

logger = logging.getLogger(__name__)


class RedirectGraph:
    """Directed graph of lowercased URLs with at most one edge per source.

    NOT thread-safe: built and walked by a single flattening pass.
    """

    def __init__(self) -> None:
        self._edges: Dict[str, str] = {}

    @classmethod
    def from_pairs(cls, pairs: Iterable[RedirectPair]) -> "RedirectGraph":
        graph = cls()
        for from_url, to_url in pairs:
            graph.add_edge(from_url, to_url)
        return graph

    def add_edge(self, source: str, target: str) -> None:
        """Add source -> target.

        Re-adding the same edge is a no-op.

        Raises:
            RedirectError: If source already points somewhere else.
        """
        existing = self._edges.get(source)
        if existing is not None and existing != target:
            raise RedirectError(
                f"{source} already redirects to {existing}, refusing second target {target}",
                url=source,
                rule=ValidationRule.MULTIPLE_TARGETS,
            )
        self._edges[source] = target

    def target_of(self, node: str) -> Optional[str]:
        return self._edges.get(node)

    def sources(self) -> Iterator[str]:
        return iter(self._edges)

    def __contains__(self, node: object) -> bool:
        return node in self._edges

    def __len__(self) -> int:
        return len(self._edges)

    def walk(self, start: str) -> ChainOutcome:
        """Follow outgoing edges from start.

        Returns:
            Flattened(path, target) when the chain ends, where path holds
            every redirecting node visited in order. Cycle(path, closing)
            when the next hop is already on the path.
        """
        path: List[str] = []
        visited: Set[str] = set()
        node = start

        while True:
            next_node = self._edges.get(node)
            if next_node is None:
                return Flattened(path=tuple(path), target=node)
            path.append(node)
            visited.add(node)
            if next_node in visited:
                return Cycle(path=tuple(path), closing=next_node)
            node = next_node


def flatten_redirects(pairs: Iterable[RedirectPair], strict_cycles: bool = False) -> FlattenResult:
    """Collapse redirect chains into direct single-hop pairs.

    Args:
        pairs: Pairs possibly containing chains and inconsistent casing.
        strict_cycles: Raise on the first cycle instead of dropping it.

    Returns:
        FlattenResult with pairs sorted by (from, to) and the cycles dropped.

    Raises:
        RedirectError: On a source with two different targets, or on a
            cycle when strict_cycles is set.
    """
    pairs = list(pairs)

    # Mixed casing like /en-US/docs/window.document vs /en-US/docs/Window.document
    # means the graph works on lowercase keys; output restores the first spelling.
    casing: Dict[str, str] = {}
    for from_url, to_url in pairs:
        casing.setdefault(from_url.lower(), from_url)
        casing.setdefault(to_url.lower(), to_url)

    lowercase_pairs = [(from_url.lower(), to_url.lower()) for from_url, to_url in pairs]
    graph = RedirectGraph.from_pairs(lowercase_pairs)

    transitive: Dict[str, str] = {}
    cycles: List[Cycle] = []
    for source, _ in lowercase_pairs:
        if source in transitive:
            continue
        outcome = graph.walk(source)
        if isinstance(outcome, Cycle):
            message = outcome.describe()
            if strict_cycles:
                raise RedirectError(message, url=source, rule=ValidationRule.REDIRECT_CYCLE)
            logger.warning(message)
            cycles.append(outcome)
            continue
        for node in outcome.path:
            transitive[node] = outcome.target

    flattened = sorted((casing[source], casing[target]) for source, target in transitive.items())
    return FlattenResult(pairs=flattened, cycles=cycles)
