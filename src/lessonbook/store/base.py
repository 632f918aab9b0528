"""Abstract store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from lessonbook.exceptions import LessonNotFoundError
from lessonbook.parser import update_front_matter
from lessonbook.types import Lesson

INDEX_FILE = "INDEX.md"
TEMPLATE_FILE = "template.md"


def is_lesson_file(name: str) -> bool:
    """Lesson files are ``*.md`` other than the index, templates and ``_`` drafts."""
    lower = name.lower()
    return (
        lower.endswith(".md")
        and lower != INDEX_FILE.lower()
        and "template" not in lower
        and not name.startswith("_")
    )


def check_slug(slug: str) -> str:
    """Return *slug* if it names an ordinary lesson file, else raise ValueError."""
    if not slug or "/" in slug or "\\" in slug or slug.startswith("."):
        raise ValueError(f"Invalid lesson slug: {slug!r}")
    if not is_lesson_file(f"{slug}.md"):
        raise ValueError(
            f"Reserved lesson slug: {slug!r} (INDEX, names containing 'template'"
            " and '_' drafts are not lessons)"
        )
    return slug


class Store(ABC):
    """Abstract base class for places micro-lessons live."""

    @abstractmethod
    def get(self, slug: str) -> Optional[Lesson]:
        """Get a lesson by slug, or None if not found."""

    @abstractmethod
    def list(self) -> List[Lesson]:
        """List readable lessons ordered by slug."""

    @abstractmethod
    def slugs(self) -> List[str]:
        """Slugs of every lesson document, readable or not."""

    @abstractmethod
    def read_text(self, slug: str) -> str:
        """Return the raw markdown of a lesson. Raises LessonNotFoundError."""

    @abstractmethod
    def save(self, lesson: Lesson, text: Optional[str] = None) -> None:
        """Write a lesson. *text* overrides rendering from the template."""

    @abstractmethod
    def delete(self, slug: str) -> bool:
        """Delete a lesson by slug. Returns True if it existed."""

    @abstractmethod
    def archive(self, slug: str) -> str:
        """Move a lesson out of the active set. Returns its new location."""

    def bump_used_by(self, slug: str, by: int = 1) -> int:
        """Increment the UsedBy counter in place. Returns the new count."""
        lesson = self.get(slug)
        if lesson is None:
            raise LessonNotFoundError(slug)
        count = lesson.used_by + by
        text = update_front_matter(self.read_text(slug), {"UsedBy": count})
        self.save(lesson, text=text)
        return count
