"""Retention: move old, unused lessons into ``archive/``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from lessonbook.heat import age_days
from lessonbook.store.base import Store
from lessonbook.types import Lesson

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 90


@dataclass
class StaleLesson:
    lesson: Lesson
    days_since: int


def find_stale(
    lessons: Iterable[Lesson],
    now: Optional[datetime] = None,
    older_than_days: int = DEFAULT_RETENTION_DAYS,
    unused_only: bool = True,
) -> List[StaleLesson]:
    """Lessons untouched for more than *older_than_days*.

    With *unused_only* a lesson must also have ``UsedBy: 0``. Lessons with
    no known modification time are never stale.
    """
    now = now or datetime.now(timezone.utc)
    stale: List[StaleLesson] = []
    for lesson in lessons:
        if lesson.modified_at is None:
            continue
        if (now - lesson.modified_at).total_seconds() <= older_than_days * 86400:
            continue
        if unused_only and lesson.used_by > 0:
            continue
        stale.append(StaleLesson(lesson=lesson, days_since=age_days(lesson, now) or 0))
    return stale


def archive_stale(
    store: Store,
    now: Optional[datetime] = None,
    older_than_days: int = DEFAULT_RETENTION_DAYS,
    unused_only: bool = True,
    dry_run: bool = False,
) -> List[StaleLesson]:
    """Archive stale lessons from *store*. Returns what was (or would be) moved."""
    stale = find_stale(store.list(), now=now, older_than_days=older_than_days, unused_only=unused_only)
    if dry_run:
        return stale
    for item in stale:
        store.archive(item.lesson.slug)
    if stale:
        logger.info("Archived %d micro-lessons", len(stale), extra={"count": len(stale)})
    return stale
