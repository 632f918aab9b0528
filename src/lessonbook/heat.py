"""Heat scoring: recency + reuse + severity.

Heat ranking only switches on once the lesson set has collected enough
``UsedBy`` events to mean something. Until then the index is ordered by
recency alone.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from lessonbook.types import Lesson, RankedLesson, Ranking

RECENCY_WINDOW_DAYS = 30
REUSE_WEIGHT = 5
DEFAULT_HEAT_THRESHOLD = 8
DEFAULT_INDEX_LIMIT = 10


def age_days(lesson: Lesson, now: Optional[datetime] = None) -> Optional[int]:
    """Whole days since the lesson was last modified, or None if unknown."""
    if lesson.modified_at is None:
        return None
    now = now or datetime.now(timezone.utc)
    seconds = (now - lesson.modified_at).total_seconds()
    return max(0, int(seconds // 86400))


def recency_score(days: Optional[int]) -> int:
    if days is None:
        return 0
    return max(0, RECENCY_WINDOW_DAYS - days)


def heat_score(lesson: Lesson, now: Optional[datetime] = None) -> int:
    return (
        recency_score(age_days(lesson, now))
        + lesson.used_by * REUSE_WEIGHT
        + lesson.severity.heat
    )


def total_usage(lessons: Iterable[Lesson]) -> int:
    return sum(l.used_by for l in lessons)


def rank(
    lessons: Iterable[Lesson],
    now: Optional[datetime] = None,
    limit: Optional[int] = DEFAULT_INDEX_LIMIT,
    heat_threshold: int = DEFAULT_HEAT_THRESHOLD,
) -> Ranking:
    """Order lessons for the index and keep the top *limit*.

    Ties break on slug so the output is stable across runs.
    """
    now = now or datetime.now(timezone.utc)
    candidates = list(lessons)
    events = total_usage(candidates)
    use_heat = events >= heat_threshold

    ranked = [
        RankedLesson(lesson=l, heat=heat_score(l, now), days_since=age_days(l, now) or 0)
        for l in candidates
    ]
    if use_heat:
        ranked.sort(key=lambda r: (-r.heat, r.lesson.slug))
    else:
        ranked.sort(
            key=lambda r: (
                r.lesson.modified_at is None,
                -(r.lesson.modified_at.timestamp() if r.lesson.modified_at else 0.0),
                r.lesson.slug,
            )
        )
    if limit is not None:
        ranked = ranked[:limit]
    return Ranking(lessons=ranked, use_heat=use_heat, total_usage_events=events)
