"""File-backed loader and saver for task documents.

The dependency core never touches storage. This store is the thin layer
around it: it locates ``tasks.json``, parses it into a TaskDocument, and
writes the next version back atomically.
"""

import json
from pathlib import Path

from taskdeps.config import Settings
from taskdeps.errors import DuplicateNodeId, TasksFileError
from taskdeps.graph.model import TaskDocument
from taskdeps.logging import Loggers
from taskdeps.persistence._utils import atomic_write_json

logger = Loggers.persistence()


def find_tasks_path(
    settings: Settings,
    project_root: str | Path | None = None,
    file: str | Path | None = None,
) -> Path:
    """Work out which tasks file a call refers to.

    An explicit ``file`` wins; relative paths are taken from the project
    root. Without a file, the configured tasks file is used.

    Args:
        settings: Settings providing defaults.
        project_root: Overrides ``settings.project_root``.
        file: Explicit tasks file path.
    """
    root = Path(project_root).expanduser() if project_root else settings.project_root
    if file:
        path = Path(file).expanduser()
        return path if path.is_absolute() else root / path
    if settings.tasks_file.is_absolute():
        return settings.tasks_file
    return root / settings.tasks_file


class TaskFileStore:
    """Loads and saves one tasks file.

    Example:
        >>> store = TaskFileStore(settings.tasks_path)
        >>> document = store.load()
        >>> store.save(repair(document).document)
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TaskFileStore":
        return cls(settings.tasks_path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> TaskDocument:
        """Read and parse the tasks file.

        Raises:
            TasksFileError: If the file is missing, unreadable, or not a
                tasks document.
        """
        if not self._path.exists():
            raise TasksFileError(
                f"Tasks file not found: {self._path}",
                details={"path": str(self._path)},
            )
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise TasksFileError(
                f"Tasks file is not valid JSON: {self._path} ({e.msg} at line {e.lineno})",
                details={"path": str(self._path)},
            ) from e
        except OSError as e:
            raise TasksFileError(
                f"Could not read tasks file: {self._path} ({e})",
                details={"path": str(self._path)},
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get("tasks", []), list):
            raise TasksFileError(
                f"Tasks file has no task list: {self._path}",
                details={"path": str(self._path)},
            )
        try:
            document = TaskDocument.from_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise TasksFileError(
                f"Tasks file contains a malformed task: {self._path} ({e})",
                details={"path": str(self._path)},
            ) from e
        except DuplicateNodeId as e:
            raise TasksFileError(
                f"Tasks file contains a duplicate id: {self._path} ({e.message})",
                details={"path": str(self._path), **e.details},
            ) from e

        logger.debug("tasks_loaded", path=str(self._path), nodes=len(document))
        return document

    def save(self, document: TaskDocument) -> None:
        """Write the document back atomically."""
        atomic_write_json(self._path, document.to_dict())
        logger.debug("tasks_saved", path=str(self._path), nodes=len(document))
