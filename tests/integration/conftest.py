# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Shared fixtures for integration tests.

Provides a representative content tree on disk:

    content/files/en-us/<slug folders>/index.md
    translated-content/files/fr/<slug folders>/index.md
    archived-content/files/en-us/<slug folders>/index.html
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import pytest
import yaml

from locale_redirects.slugs import slug_to_folder

EN_US_DOCUMENTS = (
    "Web/HTML",
    "Web/HTML/Element/a",
    "Web/CSS",
    "Web/CSS/:hover",
    "Web/JavaScript",
    "Glossary/API",
)

FR_DOCUMENTS = (
    "Web/HTML",
    "Web/CSS",
)

ARCHIVED_DOCUMENTS = ("Mozilla/Old_Project",)


@dataclass
class ContentTree:
    """Roots of a temporary content tree."""

    root: Path
    content_root: Path
    translated_root: Path
    archived_root: Path
    config_path: Path

    def table(self, locale: str) -> Path:
        locale = locale.lower()
        base = self.content_root if locale == "en-us" else self.translated_root
        return base / locale / "_redirects.txt"

    def add_document(self, url: str) -> Path:
        """Create the document a /<locale>/docs/<slug> URL names."""
        locale, _, slug = url.lstrip("/").split("/", 2)
        locale = locale.lower()
        base = self.content_root if locale == "en-us" else self.translated_root
        path = base / locale / slug_to_folder(slug) / "index.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"---\ntitle: {slug}\nslug: {slug}\n---\n", encoding="utf-8")
        return path

    def remove_document(self, url: str) -> None:
        locale, _, slug = url.lstrip("/").split("/", 2)
        locale = locale.lower()
        base = self.content_root if locale == "en-us" else self.translated_root
        (base / locale / slug_to_folder(slug) / "index.md").unlink()

    def write_table(self, locale: str, *rows: str) -> Path:
        path = self.table(locale)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(("# FROM-URL\tTO-URL",) + rows) + "\n", encoding="utf-8")
        return path

    def rows(self, locale: str) -> list:
        return self.table(locale).read_text(encoding="utf-8").splitlines()[1:]


def _make_documents(base: Path, locale: str, slugs: Iterable[str], filename: str) -> None:
    for slug in slugs:
        path = base / locale / slug_to_folder(slug) / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"---\ntitle: {slug}\nslug: {slug}\n---\n", encoding="utf-8")


@pytest.fixture
def content_tree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ContentTree:
    """Create a content tree plus a .locale_redirects.yml pointing at it.

    The CONTENT_* environment variables are cleared so the host
    environment can't redirect tests to real content.

    Returns:
        ContentTree describing the created roots
    """
    for variable in ("CONTENT_ROOT", "CONTENT_TRANSLATED_ROOT", "CONTENT_ARCHIVED_ROOT"):
        monkeypatch.delenv(variable, raising=False)

    content_root = tmp_path / "content" / "files"
    translated_root = tmp_path / "translated-content" / "files"
    archived_root = tmp_path / "archived-content" / "files"

    _make_documents(content_root, "en-us", EN_US_DOCUMENTS, "index.md")
    _make_documents(translated_root, "fr", FR_DOCUMENTS, "index.md")
    _make_documents(archived_root, "en-us", ARCHIVED_DOCUMENTS, "index.html")

    config_path = tmp_path / ".locale_redirects.yml"
    config_path.write_text(
        yaml.dump(
            {
                "content_root": str(content_root),
                "content_translated_root": str(translated_root),
                "content_archived_root": str(archived_root),
            }
        ),
        encoding="utf-8",
    )

    return ContentTree(
        root=tmp_path,
        content_root=content_root,
        translated_root=translated_root,
        archived_root=archived_root,
        config_path=config_path,
    )
