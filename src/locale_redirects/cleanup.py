# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Removal of stale redirects when merging or repairing a table."""

import logging
from typing import List, Sequence

from locale_redirects.documents import DocumentLocator
from locale_redirects.models import RedirectPair

logger = logging.getLogger(__name__)


def remove_conflicting_old_redirects(
    old_pairs: Sequence[RedirectPair], update_pairs: Sequence[RedirectPair]
) -> List[RedirectPair]:
    """Drop old pairs whose source is the target of an update.

    An old redirect away from a URL that an update now redirects *to* would
    turn the update into a redirect-to-a-redirect.
    """
    if not old_pairs:
        return list(old_pairs)
    new_targets = {to_url.lower() for _, to_url in update_pairs}

    kept: List[RedirectPair] = []
    for from_url, to_url in old_pairs:
        if from_url.lower() in new_targets:
            logger.info(f"removing conflicting redirect {from_url}\t{to_url}")
            continue
        kept.append((from_url, to_url))
    return kept


def remove_orphaned_redirects(
    pairs: Sequence[RedirectPair], locator: DocumentLocator
) -> List[RedirectPair]:
    """Drop redirects made moot by the current content tree.

    A pair is orphaned when its source is a real document again, or when its
    internal target no longer exists.
    """
    kept: List[RedirectPair] = []
    for from_url, to_url in pairs:
        if locator.locate(from_url):
            logger.info(f"removing orphaned redirect (from exists): {from_url}\t{to_url}")
            continue
        if to_url.startswith("/") and not locator.locate(to_url):
            logger.info(f"removing orphaned redirect (to doesn't exist): {from_url}\t{to_url}")
            continue
        kept.append((from_url, to_url))
    return kept
