"""Structural checks for micro-lesson documents.

The template is an authoring convention, so nothing here rejects a file
outright. Each problem comes back as a :class:`LintIssue` and callers
decide what an error means for them (the CLI exits non-zero).
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from lessonbook.exceptions import InvalidSeverityError, LessonParseError
from lessonbook.parser import (
    find_title,
    normalize_key,
    parse_used_by,
    split_front_matter,
    split_sections,
)
from lessonbook.template import SECTIONS, TIPS_MARKER
from lessonbook.types import LintIssue, Severity

# ~90 seconds of reading at 200 words per minute.
MAX_WORDS = 300

_PLACEHOLDER_RE = re.compile(r"^(?:[#\s]*<[^<>\n]+>)+\s*$")
_WORD_RE = re.compile(r"\S+")


def _lookup(front_matter: Dict[str, Any], key: str) -> Any:
    for k, v in front_matter.items():
        if normalize_key(k) == key:
            return v
    return None


def is_placeholder(text: str) -> bool:
    return bool(_PLACEHOLDER_RE.match(text.strip()))


def lint_text(text: str, slug: str) -> List[LintIssue]:
    """Lint one lesson document."""
    issues: List[LintIssue] = []

    def add(level: str, code: str, message: str) -> None:
        issues.append(LintIssue(slug=slug, level=level, code=code, message=message))

    try:
        front_matter, body = split_front_matter(text, slug)
    except LessonParseError as exc:
        add("error", "invalid-front-matter", exc.reason)
        return issues

    if front_matter is None:
        add("error", "missing-front-matter", "no '---' front-matter block with UsedBy and Severity")
        front_matter = {}
    else:
        _lint_front_matter(front_matter, slug, add)

    title = _lookup(front_matter, "title")
    if not title:
        title = find_title(body)
    if not title:
        add("error", "missing-title", "no title in front-matter and no '# ' heading")
    elif is_placeholder(str(title)):
        add("warning", "placeholder-title", "title still holds the template placeholder")

    if TIPS_MARKER not in body:
        add("warning", "missing-tips", "no tips callout ('> **Tips**')")

    sections = split_sections(body)
    for name in SECTIONS:
        content = sections.get(name.lower())
        if content is None:
            add("error", "missing-section", f"missing '## {name}' section")
        elif not content:
            add("warning", "empty-section", f"'## {name}' section is empty")
        elif is_placeholder(content):
            add("warning", "placeholder-section", f"'## {name}' still holds the template placeholder")

    words = len(_WORD_RE.findall(body))
    if words > MAX_WORDS:
        add("warning", "too-long", f"{words} words; keep lessons under {MAX_WORDS} (~90 seconds)")

    return issues


def _lint_front_matter(front_matter: Dict[str, Any], slug: str, add: Any) -> None:
    keys = {normalize_key(k) for k in front_matter}

    if "usedby" not in keys:
        add("warning", "missing-used-by", "front-matter has no UsedBy counter")
    else:
        try:
            parse_used_by(_lookup(front_matter, "usedby"), slug)
        except LessonParseError as exc:
            add("error", "invalid-used-by", exc.reason)

    if "severity" not in keys:
        add("warning", "missing-severity", "front-matter has no Severity")
        return
    raw: Optional[Any] = _lookup(front_matter, "severity")
    try:
        Severity.parse(raw)
    except InvalidSeverityError as exc:
        add("error", "invalid-severity", str(exc))
        return
    if str(raw).strip().lower() == "medium":
        add("warning", "deprecated-severity", "Severity 'medium' is read as 'normal'")


def has_errors(issues: List[LintIssue]) -> bool:
    return any(i.level == "error" for i in issues)
