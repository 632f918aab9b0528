"""Health checks for a micro-lessons folder."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import unquote

from lessonbook.archive import DEFAULT_RETENTION_DAYS, find_stale
from lessonbook.lint import has_errors, lint_text
from lessonbook.store.directory import DirectoryStore
from lessonbook.types import CheckResult

# An index shorter than this is treated as empty or truncated.
_MIN_INDEX_CHARS = 50
_LINK_RE = re.compile(r"\]\((?P<target>[^)\s]+)\)")


def check_index(store: DirectoryStore) -> CheckResult:
    """INDEX.md exists and is newer than every lesson."""
    name = "Learning Index"
    if not store.root.is_dir():
        return CheckResult(name, "pass", "No micro-lessons directory found")
    files = store.lesson_files()
    if not files:
        return CheckResult(name, "pass", "No micro-lessons found")
    if not store.index_path.is_file():
        return CheckResult(
            name, "fail", f"Found {len(files)} micro-lesson(s) but no INDEX.md",
            fix="Run `lessonbook index` to generate the index",
        )
    try:
        index_mtime = store.index_path.stat().st_mtime
        newest = max(f.stat().st_mtime for f in files)
        content = store.index_path.read_text(encoding="utf-8")
    except OSError as exc:
        return CheckResult(
            name, "fail", f"Error reading INDEX.md: {exc}",
            fix="Check file permissions or run `lessonbook index`",
        )
    if index_mtime < newest:
        return CheckResult(
            name, "warn", "INDEX.md is older than some lesson files",
            fix="Run `lessonbook index` to refresh the index",
        )
    if len(content) < _MIN_INDEX_CHARS:
        return CheckResult(
            name, "fail", "INDEX.md appears empty or corrupted",
            fix="Run `lessonbook index` to regenerate the index",
        )
    return CheckResult(name, "pass", f"Learnings index present with {len(files)} lessons")


def check_index_links(store: DirectoryStore) -> CheckResult:
    """Every relative link in INDEX.md still points at a file."""
    name = "Top-10 Link Validity"
    if not store.index_path.is_file():
        return CheckResult(
            name, "warn", "Top-10 index file does not exist",
            fix="Run `lessonbook index` to generate the index",
        )
    try:
        content = store.index_path.read_text(encoding="utf-8")
    except OSError as exc:
        return CheckResult(
            name, "warn", f"Cannot read Top-10 index: {exc}",
            fix="Check file permissions or regenerate with `lessonbook index`",
        )
    if len(content.strip()) < _MIN_INDEX_CHARS:
        return CheckResult(
            name, "warn", "Top-10 index appears empty or too short",
            fix="Run `lessonbook index` to regenerate the index",
        )

    broken: List[str] = []
    for match in _LINK_RE.finditer(content):
        target = match.group("target")
        if "://" in target or target.startswith(("#", "mailto:")):
            continue
        path = store.root / unquote(target.split("#", 1)[0])
        if not path.exists():
            broken.append(target)
    if broken:
        return CheckResult(
            name, "warn", f"{len(broken)} broken link(s) in INDEX.md: {', '.join(broken)}",
            fix="Run `lessonbook index` to refresh the index",
        )
    return CheckResult(name, "pass", "Top-10 index links resolve")


def check_retention(
    store: DirectoryStore,
    now: Optional[datetime] = None,
    older_than_days: int = DEFAULT_RETENTION_DAYS,
) -> CheckResult:
    name = "Micro-Lesson Retention"
    if not store.root.is_dir():
        return CheckResult(name, "pass", "No micro-lessons directory found")
    stale = find_stale(store.list(), now=now, older_than_days=older_than_days)
    if stale:
        files = ", ".join(item.lesson.file_name for item in stale)
        return CheckResult(
            name, "warn",
            f"{len(stale)} lessons untouched for {older_than_days}+ days with 0 usage: {files}",
            fix="Consider archiving: run `lessonbook archive` or remove if truly obsolete",
        )
    return CheckResult(name, "pass", "All micro-lessons are recent or actively used")


def check_lint(store: DirectoryStore) -> CheckResult:
    name = "Micro-Lesson Format"
    failing: List[str] = []
    warned: List[str] = []
    for path in store.lesson_files():
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            failing.append(path.name)
            continue
        issues = lint_text(text, path.stem)
        if has_errors(issues):
            failing.append(path.name)
        elif issues:
            warned.append(path.name)
    if failing:
        return CheckResult(
            name, "fail", f"{len(failing)} lesson(s) do not follow the template: {', '.join(failing)}",
            fix="Run `lessonbook lint` for details",
        )
    if warned:
        return CheckResult(
            name, "warn", f"{len(warned)} lesson(s) have lint warnings: {', '.join(warned)}",
            fix="Run `lessonbook lint` for details",
        )
    return CheckResult(name, "pass", "All micro-lessons follow the template")


def run_checks(
    store: DirectoryStore,
    now: Optional[datetime] = None,
    older_than_days: int = DEFAULT_RETENTION_DAYS,
) -> List[CheckResult]:
    return [
        check_index(store),
        check_index_links(store),
        check_retention(store, now=now, older_than_days=older_than_days),
        check_lint(store),
    ]


def learning_stats(store: DirectoryStore) -> str:
    """One ``LEARNINGS_STATS=<json>`` line for log scraping."""
    updated_at = None
    if store.index_path.is_file():
        mtime = store.index_path.stat().st_mtime
        updated_at = datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat()
    stats = {
        "micro_lessons_total": len(store.lesson_files()),
        "top10_updated_at": updated_at,
    }
    return f"LEARNINGS_STATS={json.dumps(stats)}"
