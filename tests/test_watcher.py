# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for RedirectTableWatcher."""

import time
from pathlib import Path
from typing import Callable, List, Optional

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from locale_redirects.models import RedirectError
from locale_redirects.watcher import RedirectTableWatcher


class RecordingResolver:
    """Stands in for RedirectResolver, recording load() calls."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.loads: List[List[str]] = []
        self.error = error

    def load(self, locales=None, raise_on_error: bool = True) -> None:
        self.loads.append(list(locales))
        if self.error is not None:
            raise self.error


def _wait_for(condition: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        if condition():
            return True
        time.sleep(0.05)
    return condition()


@pytest.fixture
def roots(tmp_path: Path) -> List[Path]:
    content = tmp_path / "content"
    translated = tmp_path / "translated"
    (content / "en-us").mkdir(parents=True)
    (translated / "fr").mkdir(parents=True)
    return [content.resolve(), translated.resolve()]


@pytest.fixture
def resolver() -> RecordingResolver:
    return RecordingResolver()


@pytest.fixture
def watcher(resolver: RecordingResolver, roots: List[Path]) -> RedirectTableWatcher:
    return RedirectTableWatcher(resolver, roots)  # type: ignore[arg-type]


class TestLocaleFor:
    """Tests for mapping file paths to locales."""

    def test_table_file(self, watcher: RedirectTableWatcher, roots: List[Path]) -> None:
        assert watcher.locale_for(str(roots[0] / "en-us" / "_redirects.txt")) == "en-us"
        assert watcher.locale_for(str(roots[1] / "fr" / "_redirects.txt")) == "fr"

    def test_other_files_ignored(self, watcher: RedirectTableWatcher, roots: List[Path]) -> None:
        assert watcher.locale_for(str(roots[0] / "en-us" / "index.md")) is None
        assert watcher.locale_for(str(roots[0] / "en-us" / ".redirects_x.tmp")) is None

    def test_nested_table_ignored(self, watcher: RedirectTableWatcher, roots: List[Path]) -> None:
        nested = roots[0] / "en-us" / "web" / "fr" / "_redirects.txt"
        assert watcher.locale_for(str(nested)) is None

    def test_unknown_locale_ignored(
        self, watcher: RedirectTableWatcher, roots: List[Path]
    ) -> None:
        assert watcher.locale_for(str(roots[0] / "xx" / "_redirects.txt")) is None

    def test_unset_roots_skipped(self, resolver: RecordingResolver, roots: List[Path]) -> None:
        watcher = RedirectTableWatcher(resolver, [roots[0], None])  # type: ignore[arg-type]
        assert watcher.roots == [roots[0]]

    def test_custom_filename(self, resolver: RecordingResolver, roots: List[Path]) -> None:
        watcher = RedirectTableWatcher(
            resolver, roots, filename="redirects.tsv"  # type: ignore[arg-type]
        )
        assert watcher.locale_for(str(roots[0] / "en-us" / "redirects.tsv")) == "en-us"
        assert watcher.locale_for(str(roots[0] / "en-us" / "_redirects.txt")) is None


class TestEventHandling:
    """Tests for event dispatch, without a running observer."""

    def test_modified_reloads_locale(
        self, watcher: RedirectTableWatcher, resolver: RecordingResolver, roots: List[Path]
    ) -> None:
        handler = watcher._event_handler
        handler.on_modified(FileModifiedEvent(str(roots[1] / "fr" / "_redirects.txt")))

        assert resolver.loads == [["fr"]]

    def test_created_and_deleted(
        self, watcher: RedirectTableWatcher, resolver: RecordingResolver, roots: List[Path]
    ) -> None:
        handler = watcher._event_handler
        table = str(roots[0] / "en-us" / "_redirects.txt")

        handler.on_created(FileCreatedEvent(table))
        handler.on_deleted(FileDeletedEvent(table))

        assert resolver.loads == [["en-us"], ["en-us"]]

    def test_directory_events_ignored(
        self, watcher: RedirectTableWatcher, resolver: RecordingResolver, roots: List[Path]
    ) -> None:
        watcher._event_handler.on_created(DirCreatedEvent(str(roots[0] / "en-us" / "web")))
        assert resolver.loads == []

    def test_atomic_replace(
        self, watcher: RedirectTableWatcher, resolver: RecordingResolver, roots: List[Path]
    ) -> None:
        """A temp file renamed onto the table reloads the table's locale."""
        folder = roots[0] / "en-us"
        event = FileMovedEvent(str(folder / ".redirects_abc.tmp"), str(folder / "_redirects.txt"))

        watcher._event_handler.on_moved(event)

        assert resolver.loads == [["en-us"]]

    def test_move_between_locales(
        self, watcher: RedirectTableWatcher, resolver: RecordingResolver, roots: List[Path]
    ) -> None:
        event = FileMovedEvent(
            str(roots[0] / "en-us" / "_redirects.txt"), str(roots[1] / "fr" / "_redirects.txt")
        )

        watcher._event_handler.on_moved(event)

        assert resolver.loads == [["en-us"], ["fr"]]

    def test_reload_errors_logged(
        self, roots: List[Path], caplog: pytest.LogCaptureFixture
    ) -> None:
        resolver = RecordingResolver(error=RedirectError("broken table"))
        watcher = RedirectTableWatcher(resolver, roots)  # type: ignore[arg-type]

        watcher.table_changed(str(roots[1] / "fr" / "_redirects.txt"))

        assert resolver.loads == [["fr"]]
        assert "Failed to reload redirects for fr: broken table" in caplog.text


class TestObserver:
    """Tests with a running watchdog observer."""

    def test_start_and_stop(self, watcher: RedirectTableWatcher) -> None:
        assert not watcher.is_running()

        watcher.start()
        assert watcher.is_running()

        watcher.stop()
        assert _wait_for(lambda: not watcher.is_running())

    def test_start_already_running(self, watcher: RedirectTableWatcher) -> None:
        watcher.start()
        try:
            with pytest.raises(RuntimeError, match="already running"):
                watcher.start()
        finally:
            watcher.stop()

    def test_table_write_triggers_reload(
        self, watcher: RedirectTableWatcher, resolver: RecordingResolver, roots: List[Path]
    ) -> None:
        watcher.start()
        try:
            (roots[1] / "fr" / "_redirects.txt").write_text(
                "# FROM-URL\tTO-URL\n", encoding="utf-8"
            )
            assert _wait_for(lambda: ["fr"] in resolver.loads)
        finally:
            watcher.stop()
