# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Unit tests for conflicting and orphaned redirect removal."""

import logging

import pytest

from locale_redirects.cleanup import remove_conflicting_old_redirects, remove_orphaned_redirects
from locale_redirects.documents import KnownDocumentsLocator


class TestRemoveConflictingOldRedirects:
    """Tests for remove_conflicting_old_redirects."""

    def test_old_source_equal_to_new_target_dropped(self) -> None:
        """Moving a page back drops the redirect that pointed away from it."""
        old = [("/en-US/docs/New", "/en-US/docs/Old"), ("/en-US/docs/X", "/en-US/docs/Y")]
        updates = [("/en-US/docs/Old", "/en-US/docs/New")]

        assert remove_conflicting_old_redirects(old, updates) == [
            ("/en-US/docs/X", "/en-US/docs/Y")
        ]

    def test_match_is_case_insensitive(self) -> None:
        old = [("/en-US/docs/new", "/en-US/docs/Old")]
        updates = [("/en-US/docs/Old", "/en-US/docs/New")]

        assert remove_conflicting_old_redirects(old, updates) == []

    def test_old_target_collision_kept(self) -> None:
        """Only an old source matching an update target counts as a conflict."""
        old = [("/en-US/docs/Z", "/en-US/docs/X")]
        updates = [("/en-US/docs/X", "/en-US/docs/Y")]

        assert remove_conflicting_old_redirects(old, updates) == old

    def test_empty_old_pairs(self) -> None:
        assert remove_conflicting_old_redirects([], [("/en-US/docs/A", "/en-US/docs/B")]) == []

    def test_no_updates(self) -> None:
        old = [("/en-US/docs/A", "/en-US/docs/B")]
        assert remove_conflicting_old_redirects(old, []) == old

    def test_removal_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="locale_redirects.cleanup")

        remove_conflicting_old_redirects(
            [("/en-US/docs/New", "/en-US/docs/Old")], [("/en-US/docs/Old", "/en-US/docs/New")]
        )

        assert "removing conflicting redirect /en-US/docs/New" in caplog.text


class TestRemoveOrphanedRedirects:
    """Tests for remove_orphaned_redirects."""

    @pytest.fixture
    def locator(self) -> KnownDocumentsLocator:
        return KnownDocumentsLocator(["/en-US/docs/Web/HTML", "/en-US/docs/Revived"])

    def test_source_exists_dropped(self, locator: KnownDocumentsLocator) -> None:
        """Real content at the source makes the redirect moot."""
        pairs = [
            ("/en-US/docs/Revived", "/en-US/docs/Web/HTML"),
            ("/en-US/docs/Old", "/en-US/docs/Web/HTML"),
        ]

        assert remove_orphaned_redirects(pairs, locator) == [
            ("/en-US/docs/Old", "/en-US/docs/Web/HTML")
        ]

    def test_missing_target_dropped(self, locator: KnownDocumentsLocator) -> None:
        pairs = [
            ("/en-US/docs/Old", "/en-US/docs/Deleted"),
            ("/en-US/docs/Other", "/en-US/docs/Web/HTML"),
        ]

        assert remove_orphaned_redirects(pairs, locator) == [
            ("/en-US/docs/Other", "/en-US/docs/Web/HTML")
        ]

    def test_external_and_vanity_targets_kept(self, locator: KnownDocumentsLocator) -> None:
        pairs = [
            ("/en-US/docs/Gone", "https://example.com/"),
            ("/en-US/docs/Home", "/en-US/"),
        ]

        assert remove_orphaned_redirects(pairs, locator) == pairs

    def test_removal_logged(
        self, locator: KnownDocumentsLocator, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger="locale_redirects.cleanup")

        remove_orphaned_redirects(
            [
                ("/en-US/docs/Revived", "/en-US/docs/Web/HTML"),
                ("/en-US/docs/Old", "/en-US/docs/Deleted"),
            ],
            locator,
        )

        assert "(from exists): /en-US/docs/Revived" in caplog.text
        assert "(to doesn't exist): /en-US/docs/Old" in caplog.text
