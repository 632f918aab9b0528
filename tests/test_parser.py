"""Tests for reading micro-lesson markdown."""

from __future__ import annotations

import pytest

from lessonbook.exceptions import LessonParseError
from lessonbook.parser import (
    fenced_spans,
    find_title,
    infer_category,
    parse_lesson,
    split_front_matter,
    split_tags,
    update_front_matter,
)
from lessonbook.template import render_template
from lessonbook.types import Severity

DOC = """---
UsedBy: 3
Severity: high  # low | normal | high
category: git
date: 2025-03-01
related_issues: ["#12", "#40"]
owner: platform
---

# Rebase before force-push

> **Tips**: keep it short.

## Context

Force-pushed over a teammate's commit.

## Rule

Always `git pull --rebase` first.

## Example

git pull --rebase && git push --force-with-lease

## Guardrails

Branch protection on main.

## Tags

#git #workflow
"""


class TestParseLesson:
    def test_full_document(self) -> None:
        lesson = parse_lesson(DOC, "rebase-before-force-push")
        assert lesson.slug == "rebase-before-force-push"
        assert lesson.title == "Rebase before force-push"
        assert lesson.used_by == 3
        assert lesson.severity is Severity.HIGH
        assert lesson.category == "git"
        assert lesson.date == "2025-03-01"
        assert lesson.related_issues == ["#12", "#40"]
        assert lesson.tags == ["git", "workflow"]
        assert lesson.context == "Force-pushed over a teammate's commit."
        assert lesson.rule == "Always `git pull --rebase` first."
        assert lesson.example == "git pull --rebase && git push --force-with-lease"
        assert lesson.guardrails == "Branch protection on main."
        assert lesson.meta == {"owner": "platform"}

    def test_keys_are_case_insensitive(self) -> None:
        lesson = parse_lesson("---\nusedBy: 2\nseverity: LOW\n---\n# T\n", "t")
        assert lesson.used_by == 2
        assert lesson.severity is Severity.LOW

    def test_snake_case_used_by(self) -> None:
        assert parse_lesson("---\nused_by: 4\n---\n", "t").used_by == 4

    def test_medium_reads_as_normal(self) -> None:
        assert parse_lesson("---\nSeverity: medium\n---\n", "t").severity is Severity.NORMAL

    def test_defaults_without_front_matter(self) -> None:
        lesson = parse_lesson("Just some notes.\n", "loose-notes")
        assert lesson.used_by == 0
        assert lesson.severity is Severity.NORMAL
        assert lesson.title == "loose-notes"
        assert lesson.tags == []

    def test_title_from_front_matter_wins(self) -> None:
        lesson = parse_lesson("---\ntitle: 'From FM'\n---\n# From heading\n", "t")
        assert lesson.title == "From FM"

    def test_created_aliases_date(self) -> None:
        assert parse_lesson("---\ncreated: 2024-12-24\n---\n", "t").date == "2024-12-24"

    def test_invalid_severity_raises(self) -> None:
        with pytest.raises(LessonParseError) as exc_info:
            parse_lesson("---\nSeverity: critical\n---\n", "bad")
        assert exc_info.value.slug == "bad"

    @pytest.mark.parametrize("value", ["-1", "many", "true", "1.5"])
    def test_invalid_used_by_raises(self, value: str) -> None:
        with pytest.raises(LessonParseError):
            parse_lesson(f"---\nUsedBy: {value}\n---\n", "bad")

    def test_invalid_yaml_raises(self) -> None:
        with pytest.raises(LessonParseError):
            parse_lesson("---\nUsedBy: [\n---\n", "bad")

    def test_non_mapping_front_matter_raises(self) -> None:
        with pytest.raises(LessonParseError):
            parse_lesson("---\n- a\n- b\n---\n", "bad")

    def test_legacy_body_fields(self) -> None:
        lesson = parse_lesson("# T\n\n**UsedBy:** 4\n**Severity:** high\n", "t")
        assert lesson.used_by == 4
        assert lesson.severity is Severity.HIGH

    def test_front_matter_beats_legacy_fields(self) -> None:
        lesson = parse_lesson("---\nUsedBy: 1\n---\n**UsedBy:** 9\n", "t")
        assert lesson.used_by == 1

    def test_tags_from_footer(self) -> None:
        lesson = parse_lesson("# T\n\n**Tags.** #bash, #quoting\n", "t")
        assert lesson.tags == ["bash", "quoting"]
        assert lesson.category == "bash"

    def test_front_matter_tags_win(self) -> None:
        lesson = parse_lesson("---\ntags: [ci, git]\n---\n## Tags\n\n#other\n", "t")
        assert lesson.tags == ["ci", "git"]
        assert lesson.category == "ci-cd"

    def test_template_placeholders_are_not_tags(self) -> None:
        lesson = parse_lesson(render_template(), "template")
        assert lesson.tags == []
        assert lesson.used_by == 0
        assert lesson.severity is Severity.NORMAL

    def test_headings_inside_code_fences_are_content(self) -> None:
        fenced = "```md\n## Setup\nrun it\n```"
        text = DOC.replace(
            "git pull --rebase && git push --force-with-lease", fenced
        )
        lesson = parse_lesson(text, "t")
        assert lesson.example == fenced
        assert lesson.guardrails == "Branch protection on main."

    def test_title_ignores_fenced_comment(self) -> None:
        text = "~~~bash\n# install deps\nnpm ci\n~~~\n\n## Rule\n\nPin.\n"
        assert parse_lesson(text, "pin-deps").title == "pin-deps"


class TestHelpers:
    def test_split_front_matter_none(self) -> None:
        assert split_front_matter("# T\n") == (None, "# T\n")

    def test_split_front_matter_empty_block(self) -> None:
        assert split_front_matter("---\n---\nbody") == ({}, "body")

    def test_fenced_spans(self) -> None:
        body = "a\n```\nx\n```\nb\n~~~~\nopen"
        assert fenced_spans(body) == [(2, 12), (14, len(body))]

    def test_fenced_spans_needs_matching_marker(self) -> None:
        body = "```\n~~~\n# still code\n```\n# Title\n"
        assert find_title(body) == "Title"

    def test_split_tags_dedupes(self) -> None:
        assert split_tags("#a, #b #a `c`") == ["a", "b", "c"]

    def test_split_tags_list(self) -> None:
        assert split_tags(["#x", "y"]) == ["x", "y"]

    @pytest.mark.parametrize(
        "tag,category",
        [
            ("shell-quoting", "bash"),
            ("testing", "testing"),
            ("supabase-rls", "database"),
            ("aria-labels", "accessibility"),
            ("github-actions", "ci-cd"),
            ("pnpm", "monorepo"),
            ("cooking", None),
        ],
    )
    def test_infer_category(self, tag: str, category: str) -> None:
        assert infer_category([tag]) == category

    def test_infer_category_no_tags(self) -> None:
        assert infer_category([]) is None


class TestUpdateFrontMatter:
    def test_replaces_value_and_keeps_comment(self) -> None:
        text = "---\nUsedBy: 2  # bumped by CI\nSeverity: low\n---\n\n# T\n"
        assert update_front_matter(text, {"UsedBy": 3}) == (
            "---\nUsedBy: 3  # bumped by CI\nSeverity: low\n---\n\n# T\n"
        )

    def test_keeps_existing_key_spelling(self) -> None:
        text = "---\nusedBy: 1\n---\nbody\n"
        assert update_front_matter(text, {"UsedBy": 2}) == "---\nusedBy: 2\n---\nbody\n"

    def test_appends_missing_key(self) -> None:
        text = "---\nSeverity: low\n---\nbody"
        assert update_front_matter(text, {"UsedBy": 1}) == "---\nSeverity: low\nUsedBy: 1\n---\nbody"

    def test_adds_block_when_missing(self) -> None:
        assert update_front_matter("# T\n", {"UsedBy": 1}) == "---\nUsedBy: 1\n---\n\n# T\n"

    def test_result_parses(self) -> None:
        updated = update_front_matter(DOC, {"UsedBy": 10, "Severity": Severity.LOW})
        lesson = parse_lesson(updated, "t")
        assert lesson.used_by == 10
        assert lesson.severity is Severity.LOW
        assert lesson.guardrails == "Branch protection on main."
