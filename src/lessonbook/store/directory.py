"""Directory-backed store: one markdown file per lesson."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from lessonbook.exceptions import LessonNotFoundError, LessonParseError
from lessonbook.parser import parse_lesson
from lessonbook.store.base import INDEX_FILE, TEMPLATE_FILE, Store, check_slug, is_lesson_file
from lessonbook.template import render_lesson
from lessonbook.types import Lesson

logger = logging.getLogger(__name__)

ARCHIVE_DIR = "archive"


class DirectoryStore(Store):
    """Lessons stored as ``<slug>.md`` files in a single folder."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    @property
    def index_path(self) -> Path:
        return self.root / INDEX_FILE

    @property
    def template_path(self) -> Path:
        return self.root / TEMPLATE_FILE

    @property
    def archive_dir(self) -> Path:
        return self.root / ARCHIVE_DIR

    def path_for(self, slug: str) -> Path:
        return self.root / f"{check_slug(slug)}.md"

    def lesson_files(self) -> List[Path]:
        if not self.root.is_dir():
            return []
        return sorted(
            p for p in self.root.iterdir() if p.is_file() and is_lesson_file(p.name)
        )

    def _load(self, path: Path) -> Lesson:
        text = path.read_text(encoding="utf-8")
        lesson = parse_lesson(text, path.stem)
        lesson.path = str(path)
        lesson.modified_at = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        return lesson

    def get(self, slug: str) -> Optional[Lesson]:
        path = self.path_for(slug)
        if not path.is_file():
            return None
        return self._load(path)

    def list(self) -> List[Lesson]:
        lessons: List[Lesson] = []
        for path in self.lesson_files():
            try:
                lessons.append(self._load(path))
            except (OSError, UnicodeDecodeError, LessonParseError) as exc:
                logger.warning("Skipping unreadable lesson: %s", exc, extra={"path": str(path)})
        return lessons

    def slugs(self) -> List[str]:
        return [p.stem for p in self.lesson_files()]

    def read_text(self, slug: str) -> str:
        path = self.path_for(slug)
        if not path.is_file():
            raise LessonNotFoundError(slug)
        return path.read_text(encoding="utf-8")

    def save(self, lesson: Lesson, text: Optional[str] = None) -> None:
        path = self.path_for(lesson.slug)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text if text is not None else render_lesson(lesson), encoding="utf-8")
        lesson.path = str(path)

    def delete(self, slug: str) -> bool:
        path = self.path_for(slug)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def archive(self, slug: str) -> str:
        path = self.path_for(slug)
        if not path.is_file():
            raise LessonNotFoundError(slug)
        self.archive_dir.mkdir(parents=True, exist_ok=True)
        target = self.archive_dir / path.name
        path.replace(target)
        logger.info("Archived %s", path.name, extra={"slug": slug, "path": str(target)})
        return str(target)
