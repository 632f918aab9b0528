"""Lessonbook exceptions."""


class LessonbookError(Exception):
    """Base class for errors raised by lessonbook."""


class LessonNotFoundError(LessonbookError):
    """Raised when an operation targets a lesson slug that does not exist."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Lesson not found: {slug}")


class LessonParseError(LessonbookError):
    """Raised when a lesson document cannot be read."""

    def __init__(self, slug: str, reason: str) -> None:
        self.slug = slug
        self.reason = reason
        super().__init__(f"Cannot parse lesson {slug}: {reason}")


class InvalidSeverityError(LessonbookError, ValueError):
    """Raised for a Severity value outside low/normal/high."""


class GitHubConnectionError(LessonbookError):
    """Raised when the GitHub API cannot be reached."""


class GitHubAuthError(LessonbookError):
    """Raised when GitHub rejects the token (401/403)."""


class LessonExistsError(LessonbookError):
    """Raised when creating a lesson whose slug is already taken."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Lesson already exists: {slug}")
