"""Storage backends for lessonbook."""

from lessonbook.store.base import Store, check_slug, is_lesson_file
from lessonbook.store.directory import DirectoryStore
from lessonbook.store.memory import MemoryStore

__all__ = ["Store", "check_slug", "is_lesson_file", "MemoryStore", "DirectoryStore"]
