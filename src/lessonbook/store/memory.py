"""In-memory store implementation for testing."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from lessonbook.exceptions import LessonNotFoundError, LessonParseError
from lessonbook.parser import parse_lesson
from lessonbook.store.base import Store, check_slug
from lessonbook.template import render_lesson
from lessonbook.types import Lesson

logger = logging.getLogger(__name__)


class MemoryStore(Store):
    """In-memory store backed by dicts of markdown text. Useful for testing."""

    def __init__(self) -> None:
        self._texts: Dict[str, str] = {}
        self._modified: Dict[str, datetime] = {}
        self.archived: Dict[str, str] = {}

    def _load(self, slug: str) -> Lesson:
        lesson = parse_lesson(self._texts[slug], slug)
        lesson.modified_at = self._modified[slug]
        return lesson

    def get(self, slug: str) -> Optional[Lesson]:
        check_slug(slug)
        if slug not in self._texts:
            return None
        return self._load(slug)

    def list(self) -> List[Lesson]:
        lessons: List[Lesson] = []
        for slug in sorted(self._texts):
            try:
                lessons.append(self._load(slug))
            except LessonParseError as exc:
                logger.warning("Skipping lesson: %s", exc, extra={"slug": slug})
        return lessons

    def slugs(self) -> List[str]:
        return sorted(self._texts)

    def read_text(self, slug: str) -> str:
        check_slug(slug)
        try:
            return self._texts[slug]
        except KeyError:
            raise LessonNotFoundError(slug) from None

    def save(self, lesson: Lesson, text: Optional[str] = None) -> None:
        check_slug(lesson.slug)
        self._texts[lesson.slug] = text if text is not None else render_lesson(lesson)
        self._modified[lesson.slug] = lesson.modified_at or datetime.now(timezone.utc)

    def delete(self, slug: str) -> bool:
        self._modified.pop(slug, None)
        return self._texts.pop(slug, None) is not None

    def archive(self, slug: str) -> str:
        check_slug(slug)
        if slug not in self._texts:
            raise LessonNotFoundError(slug)
        self.archived[slug] = self._texts.pop(slug)
        self._modified.pop(slug, None)
        return f"archive/{slug}.md"
