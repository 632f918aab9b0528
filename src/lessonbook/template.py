"""The micro-lesson template and rendering of lessons into it."""

from __future__ import annotations

import re
from typing import Any, Dict, List

import yaml

from lessonbook.types import Lesson, Severity

# Required ``## `` section headers, in document order.
SECTIONS = ("Context", "Rule", "Example", "Guardrails", "Tags")

TIPS_MARKER = "> **Tips**"

TIPS = (
    f"{TIPS_MARKER}: keep it under 90 seconds to read. One insight per lesson.\n"
    "> Reference it in a PR body as `Used Micro-Lesson: <slug>` so reuse gets counted.\n"
    "> Promote it to a recipe once the pattern repeats twice or has a high blast radius."
)

PLACEHOLDERS = {
    "Title": "<One line naming the insight>",
    "Context": "<What were you doing, and what went wrong?>",
    "Rule": "<The one-sentence rule to follow next time.>",
    "Example": "<A minimal snippet or command showing the rule applied.>",
    "Guardrails": "<Checks, lint rules or tests that stop it from happening again.>",
    "Tags": "#<tag> #<tag>",
}

_SEVERITY_COMMENT = "  # low | normal | high -> heat +0 / +1 / +2"


def slugify(title: str) -> str:
    """``"Quote $@ in bash!"`` -> ``"quote-in-bash"``."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "lesson"


def render_template() -> str:
    """Return the blank micro-lesson template."""
    sections = "\n\n".join(f"## {name}\n\n{PLACEHOLDERS[name]}" for name in SECTIONS)
    return (
        "---\n"
        "UsedBy: 0\n"
        f"Severity: normal{_SEVERITY_COMMENT}\n"
        "---\n\n"
        f"# {PLACEHOLDERS['Title']}\n\n"
        f"{TIPS}\n\n"
        f"{sections}\n"
    )


def _front_matter(lesson: Lesson) -> str:
    data: Dict[str, Any] = {"UsedBy": lesson.used_by, "Severity": Severity.parse(lesson.severity).value}
    if lesson.title:
        data["title"] = lesson.title
    if lesson.date:
        data["date"] = lesson.date
    if lesson.category:
        data["category"] = lesson.category
    if lesson.related_issues:
        data["related_issues"] = list(lesson.related_issues)
    for key, value in lesson.meta.items():
        data.setdefault(key, value)
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=None)


def render_lesson(lesson: Lesson) -> str:
    """Render *lesson* in template shape. Empty sections keep their placeholder."""
    bodies: Dict[str, str] = {
        "Context": lesson.context,
        "Rule": lesson.rule,
        "Example": lesson.example,
        "Guardrails": lesson.guardrails,
        "Tags": " ".join(f"#{t}" for t in lesson.tags),
    }
    parts: List[str] = []
    for name in SECTIONS:
        parts.append(f"## {name}\n\n{bodies[name].strip() or PLACEHOLDERS[name]}")
    title = lesson.title or PLACEHOLDERS["Title"]
    return (
        "---\n"
        f"{_front_matter(lesson)}"
        "---\n\n"
        f"# {title}\n\n"
        f"{TIPS}\n\n"
        + "\n\n".join(parts)
        + "\n"
    )
