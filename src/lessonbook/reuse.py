"""Count reuse of micro-lessons referenced from merged pull requests."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from lessonbook.exceptions import LessonParseError
from lessonbook.store.base import Store, check_slug

logger = logging.getLogger(__name__)

_USED_RE = re.compile(r"Used Micro-Lesson(?::[ \t]*|[ \t]+)(?P<slug>[A-Za-z0-9_-]+)", re.I)


@dataclass
class ReuseReport:
    bumped: Dict[str, int] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def extract_slugs(bodies: Iterable[Optional[str]]) -> List[str]:
    """Sorted unique slugs named by ``Used Micro-Lesson: <slug>`` lines."""
    slugs = set()
    for body in bodies:
        if not body:
            continue
        slugs.update(m.group("slug") for m in _USED_RE.finditer(body))
    return sorted(slugs)


def bump_reuse(store: Store, slugs: Iterable[str]) -> ReuseReport:
    """Add one to ``UsedBy`` for every slug.

    Unknown or reserved slugs land in ``missing``; lessons that cannot be
    parsed land in ``failed``. Neither stops the remaining slugs.
    """
    report = ReuseReport()
    for slug in slugs:
        try:
            known = store.get(check_slug(slug)) is not None
        except (LessonParseError, OSError, UnicodeDecodeError) as exc:
            logger.error("Cannot bump %s: %s", slug, exc, extra={"slug": slug})
            report.failed.append(slug)
            continue
        except ValueError:
            known = False
        if not known:
            logger.warning("Micro-lesson not found: %s (skipping)", slug, extra={"slug": slug})
            report.missing.append(slug)
            continue
        report.bumped[slug] = store.bump_used_by(slug)
        logger.info("%s: UsedBy is now %d", slug, report.bumped[slug], extra={"slug": slug})
    return report
