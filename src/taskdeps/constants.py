"""Shared constants for taskdeps."""

from enum import Enum


class TaskStatus(str, Enum):
    """Built-in task statuses.

    The allowed set is configurable (see ``Settings.statuses``); these are
    the defaults. Only ``done`` carries the completion invariant.
    """

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    DEFERRED = "deferred"
    CANCELLED = "cancelled"
    REVIEW = "review"


DONE = TaskStatus.DONE.value
PENDING = TaskStatus.PENDING.value

DEFAULT_STATUSES = [status.value for status in TaskStatus]

# Status icons for display
STATUS_ICONS = {
    TaskStatus.PENDING.value: "☐",
    TaskStatus.IN_PROGRESS.value: "◐",
    TaskStatus.DONE.value: "✓",
    TaskStatus.DEFERRED.value: "⊝",
    TaskStatus.CANCELLED.value: "✗",
    TaskStatus.REVIEW.value: "◎",
}

DEFAULT_TASKS_FILE = "tasks/tasks.json"

# Title truncation in rendered output
TITLE_PREVIEW_LENGTH = 40


def truncate(text: str, max_length: int = TITLE_PREVIEW_LENGTH) -> str:
    """Truncate text with ellipsis if it exceeds max_length."""
    if len(text) > max_length:
        return text[: max_length - 1] + "…"
    return text
