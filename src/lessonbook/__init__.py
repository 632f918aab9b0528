"""lessonbook: tooling for a folder of micro-lessons."""

from lessonbook.book import LessonBook
from lessonbook.exceptions import (
    LessonbookError,
    LessonExistsError,
    LessonNotFoundError,
    LessonParseError,
)
from lessonbook.parser import parse_lesson
from lessonbook.template import render_lesson, render_template
from lessonbook.types import Lesson, Severity

__all__ = [
    "LessonBook",
    "Lesson",
    "Severity",
    "LessonbookError",
    "LessonExistsError",
    "LessonNotFoundError",
    "LessonParseError",
    "parse_lesson",
    "render_lesson",
    "render_template",
]
