"""Settings mixins for project layout, graph policy and logging.

ProjectSettingsMixin: Where the project and its tasks file live.
GraphSettingsMixin: Status set and repair policy for the dependency graph.
LoggingSettingsMixin: Log verbosity and output format.

Each mixin is composed into Settings via multiple inheritance.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator

from taskdeps.constants import DEFAULT_STATUSES, DEFAULT_TASKS_FILE, DONE, PENDING


class ProjectSettingsMixin:
    """Settings for locating the project and its tasks file.

    Should be composed with Settings via multiple inheritance.
    """

    app_name: str = Field(
        default="taskdeps",
        title="App Name",
        description="Application name, used for config directories",
    )

    project_root: Path = Field(
        default_factory=Path.cwd,
        title="Project Root",
        description="Root directory of the project",
    )

    tasks_file: Path = Field(
        default=Path(DEFAULT_TASKS_FILE),
        title="Tasks File",
        description="Path to tasks.json, absolute or relative to the project root",
    )

    @field_validator("project_root", "tasks_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Expand ~ in paths."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @property
    def tasks_path(self) -> Path:
        """Resolved location of the tasks file."""
        if self.tasks_file.is_absolute():
            return self.tasks_file
        return self.project_root / self.tasks_file


class GraphSettingsMixin:
    """Settings for status handling and repair policy.

    Should be composed with Settings via multiple inheritance.
    """

    statuses: list[str] = Field(
        default_factory=lambda: list(DEFAULT_STATUSES),
        title="Statuses",
        description="Allowed task and subtask statuses",
    )
    reset_status: str = Field(
        default=PENDING,
        title="Reset Status",
        description="Status given to prematurely completed nodes when they are reverted",
    )
    revert_premature_completion: bool = Field(
        default=False,
        title="Revert Premature Completion",
        description="Let repairs reset done nodes whose dependencies are not done",
    )

    @field_validator("statuses")
    @classmethod
    def require_done(cls, v: list[str]) -> list[str]:
        """The done status carries the completion invariant and must exist."""
        if DONE not in v:
            raise ValueError(f"statuses must include '{DONE}'")
        return v


class LoggingSettingsMixin:
    """Settings for logging output.

    Should be composed with Settings via multiple inheritance.
    """

    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        title="Log Level",
        description="Logging verbosity level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        title="Log Format",
        description="Log output format (console for dev, json for production)",
    )
