"""Settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Lessonbook settings loaded from environment."""

    lessons_dir: str = "docs/micro-lessons"
    heat_threshold: int = 8
    index_limit: int = 10
    retention_days: int = 90

    # Reuse tracking
    github_token: Optional[str] = None
    github_repository: Optional[str] = None
    github_api_url: str = "https://api.github.com"

    # Observability
    log_format: str = "pretty"  # "json" or "pretty"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            lessons_dir=os.environ.get("LESSONBOOK_DIR", "docs/micro-lessons"),
            heat_threshold=int(os.environ.get("LESSONBOOK_HEAT_THRESHOLD", "8")),
            index_limit=int(os.environ.get("LESSONBOOK_INDEX_LIMIT", "10")),
            retention_days=int(os.environ.get("LESSONBOOK_RETENTION_DAYS", "90")),
            github_token=os.environ.get("GITHUB_TOKEN"),
            github_repository=os.environ.get("GITHUB_REPOSITORY"),
            github_api_url=os.environ.get("GITHUB_API_URL", "https://api.github.com"),
            log_format=os.environ.get("LOG_FORMAT", "pretty"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )
