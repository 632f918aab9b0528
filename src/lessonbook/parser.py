"""Read micro-lesson markdown into :class:`~lessonbook.types.Lesson` objects."""

from __future__ import annotations

import datetime as _dt
import re
from typing import Any, Dict, List, Optional, Tuple

import yaml

from lessonbook.exceptions import InvalidSeverityError, LessonParseError
from lessonbook.types import Lesson, Severity

_FRONT_MATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(?P<block>.*?)^---[ \t]*\r?$\n?",
    re.S | re.M,
)
_SECTION_RE = re.compile(r"^##[ \t]+(?P<name>.+?)[ \t]*$", re.M)
_H1_RE = re.compile(r"^#[ \t]+(?P<title>.+?)[ \t]*$", re.M)
_FENCE_RE = re.compile(r"^[ \t]{0,3}(?P<fence>`{3,}|~{3,})")
_TAGS_FOOTER_RE = re.compile(r"^\s*\*\*Tags[:.]\*\*\s*(?P<tags>.+)$", re.M | re.I)
_LEGACY_USED_BY_RE = re.compile(r"^\s*\*\*UsedBy[:.]\*\*\s*(?P<n>\d+)", re.M | re.I)
_LEGACY_SEVERITY_RE = re.compile(r"^\s*\*\*Severity[:.]\*\*\s*(?P<s>[A-Za-z]+)", re.M | re.I)
_FM_LINE_RE = re.compile(
    r"^(?P<key>[A-Za-z0-9_-]+)(?P<sep>[ \t]*:[ \t]*)(?P<value>.*?)(?P<comment>[ \t]+#.*)?$"
)

# Normalized front-matter keys the parser understands.
_KNOWN_KEYS = {"usedby", "severity", "title", "category", "date", "created", "tags", "relatedissues"}

# First matching rule wins; checked against the first tag only.
_CATEGORY_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("bash", "shell"), "bash"),
    (("git",), "git"),
    (("test",), "testing"),
    (("security",), "security"),
    (("react", "nextjs"), "react"),
    (("typescript",), "typescript"),
    (("postgres", "supabase", "database"), "database"),
    (("accessibility", "aria"), "accessibility"),
    (("ci", "github-actions"), "ci-cd"),
    (("pnpm", "monorepo"), "monorepo"),
]


def normalize_key(key: Any) -> str:
    """``UsedBy``, ``used_by`` and ``used-by`` all normalize to ``usedby``."""
    return re.sub(r"[-_\s]", "", str(key)).lower()


def fenced_spans(body: str) -> List[Tuple[int, int]]:
    """``(start, end)`` offsets of fenced code blocks (```` ``` ```` or ``~~~``).

    An unclosed fence runs to the end of *body*.
    """
    spans: List[Tuple[int, int]] = []
    start: Optional[int] = None
    marker = ""
    pos = 0
    for line in body.splitlines(keepends=True):
        match = _FENCE_RE.match(line)
        if start is None:
            if match:
                start, marker = pos, match.group("fence")
        elif match and match.group("fence").startswith(marker) and not line.strip().strip(marker[0]):
            spans.append((start, pos + len(line)))
            start = None
        pos += len(line)
    if start is not None:
        spans.append((start, len(body)))
    return spans


def _headings(pattern: re.Pattern, body: str) -> List[re.Match]:
    spans = fenced_spans(body)
    return [
        m for m in pattern.finditer(body)
        if not any(s <= m.start() < e for s, e in spans)
    ]


def find_title(body: str) -> Optional[str]:
    """First ``# `` heading outside code fences."""
    matches = _headings(_H1_RE, body)
    return matches[0].group("title") if matches else None


def split_front_matter(text: str, slug: str = "<text>") -> Tuple[Optional[Dict[str, Any]], str]:
    """Split *text* into ``(front_matter, body)``.

    ``front_matter`` is ``None`` when the document has no leading ``---``
    block. An empty block yields ``{}``.
    """
    match = _FRONT_MATTER_RE.match(text)
    if match is None:
        return None, text
    try:
        data = yaml.safe_load(match.group("block"))
    except yaml.YAMLError as exc:
        raise LessonParseError(slug, f"invalid front-matter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise LessonParseError(slug, "front-matter must be a mapping")
    return data, text[match.end():]


def split_sections(body: str) -> Dict[str, str]:
    """Map lower-cased ``## `` heading names to their stripped content."""
    sections: Dict[str, str] = {}
    matches = _headings(_SECTION_RE, body)
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(body)
        name = match.group("name").strip().rstrip(".:").strip().lower()
        sections.setdefault(name, body[match.end():end].strip())
    return sections


def split_tags(raw: Any) -> List[str]:
    """Turn a tag list or ``#a, #b`` string into clean, unique tags."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        tokens = [str(t) for t in raw]
    else:
        tokens = re.split(r"[,\s]+", str(raw))
    tags: List[str] = []
    for token in tokens:
        tag = token.strip().strip("`").lstrip("#").strip()
        if not tag or "<" in tag or ">" in tag:
            continue
        if tag not in tags:
            tags.append(tag)
    return tags


def split_list(raw: Any) -> List[str]:
    """Comma string or YAML list to a list of trimmed strings."""
    if raw is None:
        return []
    items = raw if isinstance(raw, (list, tuple)) else str(raw).split(",")
    return [str(i).strip() for i in items if str(i).strip()]


def infer_category(tags: List[str]) -> Optional[str]:
    if not tags:
        return None
    first = tags[0].lower()
    for needles, category in _CATEGORY_RULES:
        if any(n in first for n in needles):
            return category
    return None


def parse_used_by(value: Any, slug: str) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise LessonParseError(slug, f"UsedBy must be a non-negative integer, got {value!r}")
    try:
        count = int(str(value).strip())
    except ValueError:
        raise LessonParseError(
            slug, f"UsedBy must be a non-negative integer, got {value!r}"
        ) from None
    if count < 0:
        raise LessonParseError(slug, f"UsedBy must be a non-negative integer, got {value!r}")
    return count


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (_dt.date, _dt.datetime)):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def parse_lesson(text: str, slug: str) -> Lesson:
    """Parse a micro-lesson document.

    Raises :class:`LessonParseError` when the front-matter is not valid YAML
    or holds an unusable ``UsedBy``/``Severity`` value.
    """
    front_matter, body = split_front_matter(text, slug)
    fm: Dict[str, Any] = {}
    meta: Dict[str, Any] = {}
    for key, value in (front_matter or {}).items():
        norm = normalize_key(key)
        if norm in _KNOWN_KEYS:
            fm.setdefault(norm, value)
        else:
            meta[str(key)] = value

    sections = split_sections(body)

    title = _as_text(fm.get("title"))
    if not title:
        title = find_title(body) or slug

    tags = split_tags(fm.get("tags"))
    if not tags and "tags" in sections:
        tags = split_tags(sections["tags"])
    if not tags:
        footer = _TAGS_FOOTER_RE.search(body)
        if footer:
            tags = split_tags(footer.group("tags"))

    raw_used_by = fm.get("usedby")
    if raw_used_by is None:
        legacy = _LEGACY_USED_BY_RE.search(body)
        raw_used_by = legacy.group("n") if legacy else None
    used_by = parse_used_by(raw_used_by, slug)

    raw_severity = fm.get("severity")
    if raw_severity is None:
        legacy = _LEGACY_SEVERITY_RE.search(body)
        raw_severity = legacy.group("s") if legacy else None
    try:
        severity = Severity.parse(raw_severity)
    except InvalidSeverityError as exc:
        raise LessonParseError(slug, str(exc)) from exc

    date = _as_text(fm.get("date")) or _as_text(fm.get("created"))
    category = _as_text(fm.get("category")) or infer_category(tags)

    return Lesson(
        slug=slug,
        title=title,
        context=sections.get("context", ""),
        rule=sections.get("rule", ""),
        example=sections.get("example", ""),
        guardrails=sections.get("guardrails", ""),
        tags=tags,
        used_by=used_by,
        severity=severity,
        category=category,
        date=date,
        related_issues=split_list(fm.get("relatedissues")),
        meta=meta,
    )


def _yaml_scalar(value: Any) -> str:
    if isinstance(value, Severity):
        value = value.value
    return yaml.safe_dump([value], default_flow_style=True, allow_unicode=True).strip()[1:-1]


def update_front_matter(text: str, updates: Dict[str, Any]) -> str:
    """Set front-matter keys in *text*, leaving the body untouched.

    Existing keys are matched by :func:`normalize_key` and keep their
    spelling and trailing comments. Missing keys are appended to the block.
    A document without front-matter gets a new block prepended.
    """
    match = _FRONT_MATTER_RE.match(text)
    if match is None:
        lines = [f"{key}: {_yaml_scalar(value)}" for key, value in updates.items()]
        return "---\n" + "\n".join(lines) + "\n---\n\n" + text

    pending = {normalize_key(k): (k, v) for k, v in updates.items()}
    out: List[str] = []
    for line in match.group("block").splitlines():
        fm_line = _FM_LINE_RE.match(line)
        if fm_line is not None and normalize_key(fm_line.group("key")) in pending:
            _, value = pending.pop(normalize_key(fm_line.group("key")))
            line = (
                fm_line.group("key")
                + fm_line.group("sep")
                + _yaml_scalar(value)
                + (fm_line.group("comment") or "")
            )
        out.append(line)
    for key, value in pending.values():
        out.append(f"{key}: {_yaml_scalar(value)}")

    block = "\n".join(out)
    return "---\n" + block + ("\n" if block else "") + "---\n" + text[match.end():]
