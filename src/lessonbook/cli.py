"""Minimal CLI for lessonbook using argparse."""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional, Sequence

from lessonbook.exceptions import LessonbookError

_STATUS_ICONS = {"pass": "✅", "warn": "⚠️ ", "fail": "❌"}


def _get_book(args: argparse.Namespace) -> "LessonBook":  # noqa: F821
    from lessonbook import LessonBook

    return LessonBook(root=args.dir)


def _split_tags(raw: Optional[str]) -> List[str]:
    return [t.strip().lstrip("#") for t in raw.split(",") if t.strip()] if raw else []


def cmd_new(args: argparse.Namespace) -> None:
    book = _get_book(args)
    lesson = book.new(
        title=args.title,
        context=args.context or "",
        rule=args.rule or "",
        example=args.example or "",
        guardrails=args.guardrails or "",
        tags=_split_tags(args.tags),
        severity=args.severity,
        category=args.category,
        slug=args.slug,
    )
    print(lesson.path or lesson.slug)


def cmd_template(args: argparse.Namespace) -> None:
    from lessonbook.template import render_template

    if args.write:
        path = _get_book(args).write_template(overwrite=True)
        print(f"Wrote {path}")
    else:
        sys.stdout.write(render_template())


def cmd_list(args: argparse.Namespace) -> None:
    lessons = _get_book(args).list()
    if args.limit is not None:
        lessons = lessons[: args.limit]
    if not lessons:
        print("No lessons.")
        return
    print(f"{'Slug':<36} {'Severity':<9} {'UsedBy':>6}  {'Title'}")
    print("-" * 80)
    for l in lessons:
        print(f"{l.slug[:36]:<36} {l.severity.value:<9} {l.used_by:>6}  {l.title[:50]}")


def cmd_lint(args: argparse.Namespace) -> None:
    results = _get_book(args).lint(args.slugs or None)
    errors = warnings = 0
    for issues in results.values():
        for issue in issues:
            print(issue)
            if issue.level == "error":
                errors += 1
            else:
                warnings += 1
    print(f"Checked {len(results)} lessons: {errors} error(s), {warnings} warning(s)")
    if errors:
        sys.exit(1)


def cmd_index(args: argparse.Namespace) -> None:
    book = _get_book(args)
    ranking = book.rank()
    path = book.write_index(ranking=ranking)
    mode = "🔥 heat ranking" if ranking.use_heat else "📅 recency ranking"
    print(f"✅ Generated learnings index with {len(ranking.lessons)} entries ({mode})")
    print(f"📄 Index file: {path}")
    if not ranking.use_heat:
        print(
            f"📅 Using recency ranking ({ranking.total_usage_events}/"
            f"{book.settings.heat_threshold} usage events for heat ranking)"
        )
    if ranking.lessons:
        print()
        print("📚 Top learnings:")
        for n, item in enumerate(ranking.lessons[:3], start=1):
            usage = f" ({item.lesson.used_by}×)" if item.lesson.used_by > 0 else ""
            print(f"   {n}. {item.lesson.title}{usage}")


def cmd_archive(args: argparse.Namespace) -> None:
    book = _get_book(args)
    days = args.older_than if args.older_than is not None else book.settings.retention_days
    stale = book.archive(older_than_days=days, unused_only=not args.all, dry_run=args.dry_run)
    if not stale:
        suffix = "" if args.all else " with 0 usage"
        print(f"No lessons found older than {days} days{suffix}")
        return
    verb = "Would archive" if args.dry_run else "Archived"
    for item in stale:
        print(f"  - {item.lesson.file_name} ({item.days_since} days old, {item.lesson.used_by} uses)")
    print(f"{verb} {len(stale)} micro-lessons")
    if not args.dry_run:
        print("💡 Run `lessonbook index` to refresh the index")


def _print_reuse(report: "ReuseReport") -> None:  # noqa: F821
    for slug, count in report.bumped.items():
        print(f"  ✅ {slug}: UsedBy {count}")
    for slug in report.missing:
        print(f"  ⚠️  Micro-lesson not found: {slug} (skipping)")
    for slug in report.failed:
        print(f"  ❌ {slug}: cannot parse front-matter (skipping)")
    if not report.bumped and not report.missing and not report.failed:
        print("ℹ️  No micro-lesson references found")


def cmd_reuse_bump(args: argparse.Namespace) -> None:
    _print_reuse(_get_book(args).record_reuse(args.slugs))


def cmd_reuse_sync(args: argparse.Namespace) -> None:
    with _get_book(args) as book:
        _print_reuse(book.sync_reuse(limit=args.limit))


def cmd_doctor(args: argparse.Namespace) -> None:
    book = _get_book(args)
    results = book.doctor()
    for r in results:
        print(f"{_STATUS_ICONS.get(r.status, '?')} {r.name}: {r.message}")
        if r.fix and r.status != "pass":
            print(f"   Fix: {r.fix}")
    if args.stats:
        print(book.stats())
    if any(r.status == "fail" for r in results):
        sys.exit(1)


def cmd_stats(args: argparse.Namespace) -> None:
    print(_get_book(args).stats())


def cmd_analyze(args: argparse.Namespace) -> None:
    print(json.dumps(_get_book(args).analyze(), indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lessonbook",
        description="Micro-lesson tooling: lint, rank, archive and track reuse",
    )
    parser.add_argument(
        "--dir", default=None,
        help="Micro-lessons folder (or LESSONBOOK_DIR, default docs/micro-lessons)",
    )

    sub = parser.add_subparsers(dest="command")

    # new
    p = sub.add_parser("new", help="Create a lesson from the template")
    p.add_argument("title")
    p.add_argument("--context", default=None)
    p.add_argument("--rule", default=None)
    p.add_argument("--example", default=None)
    p.add_argument("--guardrails", default=None)
    p.add_argument("--tags", default=None, help="Comma-separated tags")
    p.add_argument("--severity", choices=["low", "normal", "high"], default="normal")
    p.add_argument("--category", default=None)
    p.add_argument("--slug", default=None, help="File name without .md (default: from title)")

    # template
    p = sub.add_parser("template", help="Print the micro-lesson template")
    p.add_argument("--write", action="store_true", help="Write template.md into the folder")

    # list
    p = sub.add_parser("list", help="List lessons")
    p.add_argument("--limit", type=int, default=None)

    # lint
    p = sub.add_parser("lint", help="Check lessons against the template")
    p.add_argument("slugs", nargs="*", help="Lessons to check (default: all)")

    # index
    sub.add_parser("index", help="Regenerate INDEX.md")

    # archive
    p = sub.add_parser("archive", help="Move stale lessons to archive/")
    p.add_argument("--older-than", type=int, default=None, help="Age in days")
    p.add_argument("--all", action="store_true", help="Include lessons with UsedBy > 0")
    p.add_argument("--dry-run", action="store_true")

    # reuse
    reuse_parser = sub.add_parser("reuse", help="Track micro-lesson reuse")
    reuse_sub = reuse_parser.add_subparsers(dest="reuse_command")
    rb = reuse_sub.add_parser("bump", help="Increment UsedBy for lessons")
    rb.add_argument("slugs", nargs="+")
    rs = reuse_sub.add_parser("sync", help="Scan merged PRs on GitHub for 'Used Micro-Lesson:'")
    rs.add_argument("--limit", type=int, default=200, help="Max merged PRs to scan")

    # doctor
    p = sub.add_parser("doctor", help="Run health checks")
    p.add_argument("--stats", action="store_true", help="Also print LEARNINGS_STATS")

    sub.add_parser("stats", help="Print LEARNINGS_STATS JSON line")
    sub.add_parser("analyze", help="Dump lesson metadata as JSON")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    from lessonbook.logging_config import setup_logging

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging()

    if args.command == "reuse":
        if not args.reuse_command:
            parser.parse_args(["reuse", "--help"])
            return
        handler = {"bump": cmd_reuse_bump, "sync": cmd_reuse_sync}[args.reuse_command]
    else:
        handler = {
            "new": cmd_new,
            "template": cmd_template,
            "list": cmd_list,
            "lint": cmd_lint,
            "index": cmd_index,
            "archive": cmd_archive,
            "doctor": cmd_doctor,
            "stats": cmd_stats,
            "analyze": cmd_analyze,
        }[args.command]

    try:
        handler(args)
    except (LessonbookError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
