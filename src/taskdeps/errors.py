"""Error types for dependency operations.

Data-quality problems found while validating or repairing a document are
returned as findings, not raised. The classes here cover the other cases:

- ToolError: the base of every refusal a tool reports in its result dict.
  The tool registry turns it into a failed result envelope.
- DependencyError and its subclasses: a requested mutation was refused
  (unknown node, self edge, cycle, premature completion). These carry a
  machine-readable error code and serialize like tool errors.
- ForeignNodeError: a caller handed a graph primitive a node that belongs to
  a different document. This is a programming error and is not meant to be
  caught by tool-level error handling.
"""

from typing import Any


class ToolError(Exception):
    """A refusal that a tool reports in its result instead of raising.

    Attributes:
        message: Human-readable explanation.
        error_code: Machine-readable code.
        recoverable: Whether retrying with different input can succeed.
        details: Extra context (ids, paths, the offending cycle).
        tool_name: Set by the result wrapper to the failing tool.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "TOOL_ERROR",
        recoverable: bool = False,
        details: dict[str, Any] | None = None,
        tool_name: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.recoverable = recoverable
        self.details = details or {}
        self.tool_name = tool_name

    def payload(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.error_code,
            "recoverable": self.recoverable,
            "details": self.details,
            "tool_name": self.tool_name,
        }

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.payload()}


class ErrorCode:
    """Machine-readable codes for refused operations."""

    NODE_NOT_FOUND = "NODE_NOT_FOUND"
    INVALID_DEPENDENCY = "INVALID_DEPENDENCY"
    WOULD_CREATE_CYCLE = "WOULD_CREATE_CYCLE"
    PREMATURE_COMPLETION = "PREMATURE_COMPLETION"
    INVALID_STATUS = "INVALID_STATUS"
    TASKS_FILE_ERROR = "TASKS_FILE_ERROR"
    DUPLICATE_NODE_ID = "DUPLICATE_NODE_ID"


class DependencyError(ToolError):
    """Base class for refused graph operations."""

    default_code = ErrorCode.INVALID_DEPENDENCY

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code or self.default_code,
            recoverable=True,
            details=details,
        )


class NodeNotFound(DependencyError):
    """An identifier did not resolve, or the requested edge is absent."""

    default_code = ErrorCode.NODE_NOT_FOUND


class InvalidDependency(DependencyError):
    """Self edge, duplicate edge, or an ambiguous reference."""

    default_code = ErrorCode.INVALID_DEPENDENCY


class WouldCreateCycle(DependencyError):
    """Adding the edge would close a dependency cycle."""

    default_code = ErrorCode.WOULD_CREATE_CYCLE


class PrematureCompletionError(DependencyError):
    """A node cannot be marked done while a dependency is unfinished."""

    default_code = ErrorCode.PREMATURE_COMPLETION


class InvalidStatus(DependencyError):
    """Status is not part of the configured status set."""

    default_code = ErrorCode.INVALID_STATUS


class TasksFileError(DependencyError):
    """The tasks file is missing or cannot be parsed."""

    default_code = ErrorCode.TASKS_FILE_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details=details)
        self.recoverable = False


class DuplicateNodeId(DependencyError):
    """Two tasks, or two subtasks of one parent, share an id."""

    default_code = ErrorCode.DUPLICATE_NODE_ID

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details=details)
        self.recoverable = False


class ForeignNodeError(RuntimeError):
    """A node handle from another document was passed to a graph primitive."""

    fatal = True
