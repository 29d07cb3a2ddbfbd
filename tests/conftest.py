"""Shared test fixtures and utilities for taskdeps tests.

Provides:
- MockContext for isolating tests from global state
- Temporary project fixtures with a tasks file
- Document builders for graph tests
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest

from taskdeps.config import (
    Settings,
    reload_settings,
    set_context_settings,
    set_settings,
)
from taskdeps.graph.model import TaskDocument


class MockContext:
    """Context manager for isolating tests from global state.

    Handles:
    - Resetting global settings singleton
    - Providing a temporary project root
    - Cleaning up after tests

    Usage:
        with MockContext() as ctx:
            ctx.write_tasks([...])
            result = fix_dependencies()
    """

    def __init__(self, **settings_kwargs):
        self._settings_kwargs = settings_kwargs
        self._temp_dir: tempfile.TemporaryDirectory | None = None
        self._settings: Settings | None = None
        self._original_env: dict[str, str] = {}

    def __enter__(self) -> "MockContext":
        self._temp_dir = tempfile.TemporaryDirectory()
        project_root = Path(self._temp_dir.name)

        # Keep developer environment overrides out of the tests
        for var in list(os.environ):
            if var.startswith("TASKDEPS_"):
                self._original_env[var] = os.environ.pop(var)

        self._settings = Settings(project_root=project_root, **self._settings_kwargs)
        set_settings(self._settings)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        set_context_settings(None)
        os.environ.update(self._original_env)
        reload_settings()
        if self._temp_dir:
            self._temp_dir.cleanup()

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            raise RuntimeError("MockContext not entered")
        return self._settings

    @property
    def project_root(self) -> Path:
        if self._temp_dir is None:
            raise RuntimeError("MockContext not entered")
        return Path(self._temp_dir.name)

    @property
    def tasks_path(self) -> Path:
        return self.settings.tasks_path

    def write_tasks(self, tasks: list[dict[str, Any]], **extra: Any) -> Path:
        """Write a tasks file at the configured location."""
        path = self.tasks_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"tasks": tasks, **extra}, indent=2))
        return path

    def read_tasks(self) -> dict[str, Any]:
        return json.loads(self.tasks_path.read_text())


def make_task(
    task_id: int,
    status: str = "pending",
    dependencies: list | None = None,
    subtasks: list[dict[str, Any]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a task dict as it appears in tasks.json."""
    return {
        "id": task_id,
        "title": extra.pop("title", f"Task {task_id}"),
        "status": status,
        "dependencies": list(dependencies or []),
        "subtasks": list(subtasks or []),
        **extra,
    }


def make_subtask(
    subtask_id: int,
    status: str = "pending",
    dependencies: list | None = None,
    **extra: Any,
) -> dict[str, Any]:
    return {
        "id": subtask_id,
        "title": extra.pop("title", f"Subtask {subtask_id}"),
        "status": status,
        "dependencies": list(dependencies or []),
        **extra,
    }


def build_document(*tasks: dict[str, Any]) -> TaskDocument:
    return TaskDocument.from_dict({"tasks": list(tasks)})


@pytest.fixture
def mock_context() -> Generator[MockContext, None, None]:
    """Fixture providing an isolated test context."""
    with MockContext() as ctx:
        yield ctx


@pytest.fixture
def chain_document() -> TaskDocument:
    """Tasks 1 <- 2 <- 3: task 3 depends on 2, task 2 depends on 1."""
    return build_document(
        make_task(1),
        make_task(2, dependencies=[1]),
        make_task(3, dependencies=[2]),
    )


@pytest.fixture
def subtask_document() -> TaskDocument:
    """Task 4 with subtasks 4.1 and 4.2, plus tasks 1 and 2."""
    return build_document(
        make_task(1, status="done"),
        make_task(2),
        make_task(
            4,
            dependencies=[1],
            subtasks=[
                make_subtask(1),
                make_subtask(2, dependencies=[1]),
            ],
        ),
    )
