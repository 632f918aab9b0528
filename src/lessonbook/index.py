"""Render the Top-10 ``INDEX.md`` for a lessons folder."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from lessonbook.heat import DEFAULT_HEAT_THRESHOLD
from lessonbook.store.directory import TEMPLATE_FILE, DirectoryStore
from lessonbook.types import Ranking

logger = logging.getLogger(__name__)

GUIDELINES = (
    "**Guidelines:**\n"
    "- Micro-lessons should be ≤90 seconds to read\n"
    "- Promote to Recipe when pattern repeats ≥2× or has high blast radius\n"
    "- Keep agent context lean by linking to this index instead of inlining large blocks\n"
)


def render_index(ranking: Ranking, heat_threshold: int = DEFAULT_HEAT_THRESHOLD) -> str:
    lines = [
        "# Top-10 Learning Index",
        "",
        "_Generated automatically. Run `lessonbook index` to update. Do not edit by hand._",
        "",
    ]
    if ranking.use_heat:
        lines.append(
            f"_🔥 Heat ranking active ({ranking.total_usage_events} usage events)"
            ", sorted by recency + reuse + severity_"
        )
    else:
        lines.append(
            f"_📅 Recency ranking ({ranking.total_usage_events}/{heat_threshold}"
            " usage events needed for heat ranking)_"
        )
    lines.append("")

    if not ranking.lessons:
        lines.append("No micro-lessons yet. Add your first learning using the template below.")
    else:
        for n, item in enumerate(ranking.lessons, start=1):
            lesson = item.lesson
            entry = f"{n}. **[{lesson.title}]({quote(lesson.file_name)})**"
            if lesson.tags:
                entry += " `" + " ".join(f"#{t}" for t in lesson.tags) + "`"
            if ranking.use_heat and lesson.used_by > 0:
                entry += f" ({lesson.used_by}×)"
            lines.append(entry)
    lines.extend(["", "---", "", f"**Template:** [{TEMPLATE_FILE}]({TEMPLATE_FILE})", ""])
    return "\n".join(lines) + "\n" + GUIDELINES


def write_index(
    store: DirectoryStore,
    ranking: Ranking,
    heat_threshold: int = DEFAULT_HEAT_THRESHOLD,
) -> Path:
    """Write ``INDEX.md`` into the store's folder. Returns its path."""
    store.root.mkdir(parents=True, exist_ok=True)
    path = store.index_path
    path.write_text(render_index(ranking, heat_threshold=heat_threshold), encoding="utf-8")
    logger.info(
        "Generated index with %d entries", len(ranking.lessons),
        extra={"path": str(path), "count": len(ranking.lessons)},
    )
    return path
