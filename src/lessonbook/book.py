"""Main LessonBook class: entry point for the library."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from lessonbook import doctor as _doctor
from lessonbook.archive import StaleLesson, archive_stale
from lessonbook.config import Settings
from lessonbook.exceptions import LessonExistsError
from lessonbook.heat import rank as _rank
from lessonbook.index import write_index as _write_index
from lessonbook.lint import lint_text
from lessonbook.reuse import ReuseReport, bump_reuse, extract_slugs
from lessonbook.store.base import Store, check_slug
from lessonbook.store.directory import DirectoryStore
from lessonbook.template import render_template, slugify
from lessonbook.types import CheckResult, Lesson, LintIssue, Ranking, Severity

logger = logging.getLogger(__name__)


class LessonBook:
    """A folder of micro-lessons and the tooling around it.

    Usage::

        book = LessonBook("docs/micro-lessons")
        book.new("Quote $@ in bash", rule="Always write \"$@\".", tags=["bash"])
        book.write_index()
    """

    def __init__(
        self,
        root: Optional[Union[str, Path]] = None,
        store: Optional[Store] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        if store is not None and root is not None:
            raise ValueError("pass either root or store, not both")
        if store is None:
            store = DirectoryStore(root if root is not None else self.settings.lessons_dir)
        self._store = store
        self._github: Optional[Any] = None

    @property
    def store(self) -> Store:
        return self._store

    def close(self) -> None:
        """Close the GitHub client if one was opened."""
        if self._github is not None:
            self._github.close()
            self._github = None

    def __enter__(self) -> "LessonBook":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _directory(self) -> DirectoryStore:
        if not isinstance(self._store, DirectoryStore):
            raise TypeError("this operation needs a DirectoryStore")
        return self._store

    # -- authoring -----------------------------------------------------

    def new(
        self,
        title: str,
        context: str = "",
        rule: str = "",
        example: str = "",
        guardrails: str = "",
        tags: Optional[List[str]] = None,
        severity: Union[Severity, str] = Severity.NORMAL,
        category: Optional[str] = None,
        slug: Optional[str] = None,
    ) -> Lesson:
        """Create a lesson from the template. Returns the new Lesson.

        Raises ValueError when the slug (derived from *title* unless given)
        would not be picked up as a lesson, e.g. one containing "template".
        """
        slug = check_slug(slug or slugify(title))
        if slug in self._store.slugs():
            raise LessonExistsError(slug)
        lesson = Lesson(
            slug=slug,
            title=title,
            context=context,
            rule=rule,
            example=example,
            guardrails=guardrails,
            tags=list(tags or []),
            severity=Severity.parse(severity),
            category=category,
            date=datetime.now(timezone.utc).date().isoformat(),
        )
        self._store.save(lesson)
        logger.info("Created lesson %s", slug, extra={"slug": slug})
        return lesson

    def write_template(self, overwrite: bool = False) -> Path:
        """Write ``template.md`` into the lessons folder."""
        store = self._directory()
        path = store.template_path
        if path.exists() and not overwrite:
            return path
        store.root.mkdir(parents=True, exist_ok=True)
        path.write_text(render_template(), encoding="utf-8")
        return path

    # -- reading -------------------------------------------------------

    def get(self, slug: str) -> Optional[Lesson]:
        """Get a lesson by slug."""
        return self._store.get(slug)

    def list(self) -> List[Lesson]:
        return self._store.list()

    def lint(self, slugs: Optional[Iterable[str]] = None) -> Dict[str, List[LintIssue]]:
        """Lint the given lessons (default: all). Maps slug to its issues."""
        results: Dict[str, List[LintIssue]] = {}
        for slug in slugs if slugs is not None else self._store.slugs():
            results[slug] = lint_text(self._store.read_text(slug), slug)
        return results

    def analyze(self) -> List[Dict[str, Any]]:
        """Metadata for every readable lesson as JSON-serializable dicts."""
        return [
            {
                "file": lesson.file_name,
                "title": lesson.title,
                "tags": lesson.tags,
                "severity": lesson.severity.value,
                "category": lesson.category,
                "usedBy": lesson.used_by,
                "relatedIssues": lesson.related_issues,
                "date": lesson.date,
            }
            for lesson in self._store.list()
        ]

    # -- index & retention ----------------------------------------------

    def rank(self, now: Optional[datetime] = None) -> Ranking:
        return _rank(
            self._store.list(),
            now=now,
            limit=self.settings.index_limit,
            heat_threshold=self.settings.heat_threshold,
        )

    def write_index(
        self, now: Optional[datetime] = None, ranking: Optional[Ranking] = None,
    ) -> Path:
        """Regenerate ``INDEX.md`` (and ``template.md`` if missing)."""
        store = self._directory()
        if ranking is None:
            ranking = self.rank(now=now)
        self.write_template()
        return _write_index(store, ranking, heat_threshold=self.settings.heat_threshold)

    def archive(
        self,
        now: Optional[datetime] = None,
        older_than_days: Optional[int] = None,
        unused_only: bool = True,
        dry_run: bool = False,
    ) -> List[StaleLesson]:
        days = older_than_days if older_than_days is not None else self.settings.retention_days
        return archive_stale(
            self._store, now=now, older_than_days=days,
            unused_only=unused_only, dry_run=dry_run,
        )

    # -- reuse -----------------------------------------------------------

    def record_reuse(self, slugs: Iterable[str]) -> ReuseReport:
        """Increment UsedBy once for each slug."""
        return bump_reuse(self._store, slugs)

    def sync_reuse(self, limit: int = 200, client: Optional[Any] = None) -> ReuseReport:
        """Scan merged PRs for ``Used Micro-Lesson: <slug>`` and bump counts."""
        if client is None:
            client = self._github_client()
        slugs = extract_slugs(client.merged_pull_request_bodies(limit=limit))
        if not slugs:
            logger.info("No micro-lesson references found in merged PRs")
            return ReuseReport()
        return self.record_reuse(slugs)

    def _github_client(self) -> Any:
        if self._github is None:
            if not self.settings.github_repository:
                raise ValueError("GITHUB_REPOSITORY is required to sync reuse")
            from lessonbook.github import GitHubClient

            self._github = GitHubClient(
                repository=self.settings.github_repository,
                token=self.settings.github_token,
                api_url=self.settings.github_api_url,
            )
        return self._github

    # -- health ----------------------------------------------------------

    def doctor(self, now: Optional[datetime] = None) -> List[CheckResult]:
        return _doctor.run_checks(
            self._directory(), now=now, older_than_days=self.settings.retention_days,
        )

    def stats(self) -> str:
        return _doctor.learning_stats(self._directory())
