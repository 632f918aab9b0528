"""Tests for the LessonBook facade."""

from __future__ import annotations

import os
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from lessonbook import Lesson, LessonBook, LessonExistsError, Severity
from lessonbook.config import Settings
from lessonbook.store.memory import MemoryStore


def _book(tmp_path: Path, **settings_kw) -> LessonBook:
    return LessonBook(root=tmp_path / "micro-lessons", settings=Settings(**settings_kw))


class TestNew:
    def test_creates_file(self, tmp_path: Path) -> None:
        book = _book(tmp_path)
        lesson = book.new("Pin tool versions", rule="Pin exact versions.", tags=["ci"])
        assert lesson.slug == "pin-tool-versions"
        path = tmp_path / "micro-lessons" / "pin-tool-versions.md"
        assert path.is_file()
        got = book.get("pin-tool-versions")
        assert got is not None
        assert got.rule == "Pin exact versions."
        assert got.tags == ["ci"]
        assert got.date == lesson.date

    def test_duplicate_raises(self, tmp_path: Path) -> None:
        book = _book(tmp_path)
        book.new("Pin tool versions")
        with pytest.raises(LessonExistsError):
            book.new("Pin tool versions")

    def test_custom_slug_and_severity(self) -> None:
        book = LessonBook(store=MemoryStore(), settings=Settings())
        book.new("Anything", slug="custom", severity="high")
        got = book.get("custom")
        assert got is not None
        assert got.severity is Severity.HIGH

    def test_reserved_slug_from_title_rejected(self, tmp_path: Path) -> None:
        book = _book(tmp_path)
        with pytest.raises(ValueError):
            book.new("Template literal types in TypeScript")
        assert not (tmp_path / "micro-lessons").exists()
        lesson = book.new("Template literal types in TypeScript", slug="ts-literal-types")
        assert [l.slug for l in book.list()] == [lesson.slug]

    def test_existing_unparseable_slug_raises_exists(self) -> None:
        store = MemoryStore()
        store.save(Lesson(slug="broken"), text="---\nSeverity: critical\n---\n")
        book = LessonBook(store=store, settings=Settings())
        with pytest.raises(LessonExistsError):
            book.new("Broken")

    def test_root_and_store_conflict(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            LessonBook(root=tmp_path, store=MemoryStore())


class TestReading:
    def test_lint_all(self) -> None:
        store = MemoryStore()
        book = LessonBook(store=store, settings=Settings())
        book.new("A lesson")
        book.store.save(book.get("a-lesson"), text="no front matter\n")  # type: ignore[arg-type]
        results = book.lint()
        assert list(results) == ["a-lesson"]
        assert "missing-front-matter" in [i.code for i in results["a-lesson"]]

    def test_analyze(self) -> None:
        book = LessonBook(store=MemoryStore(), settings=Settings())
        book.new("Quote args", tags=["bash"], severity="high")
        (item,) = book.analyze()
        assert item["file"] == "quote-args.md"
        assert item["title"] == "Quote args"
        assert item["tags"] == ["bash"]
        assert item["severity"] == "high"
        assert item["category"] == "bash"
        assert item["usedBy"] == 0
        assert item["relatedIssues"] == []


class TestIndexAndRetention:
    def test_write_index_adds_template(self, tmp_path: Path) -> None:
        book = _book(tmp_path)
        book.new("Pin tool versions")
        path = book.write_index()
        root = tmp_path / "micro-lessons"
        assert path == root / "INDEX.md"
        assert (root / "template.md").is_file()
        assert "[Pin tool versions](pin-tool-versions.md)" in path.read_text(encoding="utf-8")

    def test_write_template_keeps_existing(self, tmp_path: Path) -> None:
        book = _book(tmp_path)
        path = book.write_template()
        path.write_text("custom", encoding="utf-8")
        book.write_template()
        assert path.read_text(encoding="utf-8") == "custom"
        book.write_template(overwrite=True)
        assert path.read_text(encoding="utf-8") != "custom"

    def test_rank_uses_settings(self) -> None:
        book = LessonBook(store=MemoryStore(), settings=Settings(heat_threshold=1, index_limit=1))
        book.new("One")
        book.new("Two")
        book.record_reuse(["one"])
        ranking = book.rank()
        assert ranking.use_heat is True
        assert [r.lesson.slug for r in ranking.lessons] == ["one"]

    def test_archive_uses_retention_setting(self, tmp_path: Path) -> None:
        book = _book(tmp_path, retention_days=10)
        book.new("Old one")
        path = tmp_path / "micro-lessons" / "old-one.md"
        stamp = time.time() - 20 * 86400
        os.utime(path, (stamp, stamp))
        moved = book.archive()
        assert [m.lesson.slug for m in moved] == ["old-one"]
        assert book.list() == []

    def test_directory_only_operations(self) -> None:
        book = LessonBook(store=MemoryStore(), settings=Settings())
        with pytest.raises(TypeError):
            book.doctor()


class TestReuse:
    def test_sync_reuse_with_client(self) -> None:
        book = LessonBook(store=MemoryStore(), settings=Settings())
        book.new("Quote args")
        client = MagicMock()
        client.merged_pull_request_bodies.return_value = [
            "Used Micro-Lesson: quote-args",
            "Used Micro-Lesson: missing-one",
        ]
        report = book.sync_reuse(limit=50, client=client)
        client.merged_pull_request_bodies.assert_called_once_with(limit=50)
        assert report.bumped == {"quote-args": 1}
        assert report.missing == ["missing-one"]

    def test_index_reference_is_not_bumped(self, tmp_path: Path) -> None:
        book = _book(tmp_path)
        book.new("Quote args")
        index = book.write_index()
        before = index.read_text(encoding="utf-8")
        report = book.record_reuse(["INDEX", "quote-args"])
        assert report.bumped == {"quote-args": 1}
        assert report.missing == ["INDEX"]
        assert index.read_text(encoding="utf-8") == before

    def test_sync_reuse_no_references(self) -> None:
        book = LessonBook(store=MemoryStore(), settings=Settings())
        client = MagicMock()
        client.merged_pull_request_bodies.return_value = ["nothing here"]
        report = book.sync_reuse(client=client)
        assert report.bumped == {}

    def test_sync_reuse_needs_repository(self) -> None:
        book = LessonBook(store=MemoryStore(), settings=Settings())
        with pytest.raises(ValueError):
            book.sync_reuse()

    def test_github_client_built_from_settings(self) -> None:
        settings = Settings(github_repository="acme/widgets", github_token="t")
        with LessonBook(store=MemoryStore(), settings=settings) as book:
            client = book._github_client()
            assert client.repository == "acme/widgets"
            assert book._github_client() is client
        assert book._github is None
