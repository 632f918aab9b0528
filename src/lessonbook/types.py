"""Core data types for lessonbook."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from lessonbook.exceptions import InvalidSeverityError


class Severity(str, Enum):
    """How much a lesson should weigh in heat ranking."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"

    @property
    def heat(self) -> int:
        return _SEVERITY_HEAT[self]

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Parse a front-matter value. ``medium`` is read as ``normal``."""
        if value is None:
            return cls.NORMAL
        if isinstance(value, Severity):
            return value
        text = str(value).strip().lower()
        if not text:
            return cls.NORMAL
        if text == "medium":
            return cls.NORMAL
        try:
            return cls(text)
        except ValueError:
            raise InvalidSeverityError(
                f"Severity must be one of low, normal, high; got {value!r}"
            ) from None


_SEVERITY_HEAT = {Severity.LOW: 0, Severity.NORMAL: 1, Severity.HIGH: 2}


@dataclass
class Lesson:
    """A single micro-lesson."""

    slug: str
    title: str = ""
    context: str = ""
    rule: str = ""
    example: str = ""
    guardrails: str = ""
    tags: List[str] = field(default_factory=list)
    used_by: int = 0
    severity: Severity = Severity.NORMAL
    category: Optional[str] = None
    date: Optional[str] = None
    related_issues: List[str] = field(default_factory=list)
    path: Optional[str] = None
    modified_at: Optional[datetime] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def file_name(self) -> str:
        return f"{self.slug}.md"


@dataclass
class LintIssue:
    """A problem found in one lesson document."""

    slug: str
    level: str  # "error" or "warning"
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.slug}: {self.level} [{self.code}] {self.message}"


@dataclass
class CheckResult:
    """Outcome of one doctor check."""

    name: str
    status: str  # "pass" | "warn" | "fail"
    message: str
    fix: Optional[str] = None


@dataclass
class RankedLesson:
    """A lesson with its computed heat."""

    lesson: Lesson
    heat: int
    days_since: int


@dataclass
class Ranking:
    """Result of ranking a set of lessons for the index."""

    lessons: List[RankedLesson]
    use_heat: bool
    total_usage_events: int
