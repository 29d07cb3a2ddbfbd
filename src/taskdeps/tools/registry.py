"""Registry and result envelope for dependency tools.

Tools are plain functions that load a tasks file, run one graph operation
and return a dict. ``with_result_wrapper`` turns their return values and
refusals into one envelope shape::

    {"success": True, "data": {...}, "execution_time_ms": 1.2}
    {"success": False, "error": {"message": ..., "code": ...}, "execution_time_ms": 0.4}

``register_tool`` records each tool with its category and whether it writes
the tasks file, so a protocol server can list and expose them.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from functools import wraps
from typing import Any, Callable, ParamSpec, TypeVar

from taskdeps.errors import ToolError

INTERNAL_ERROR = "INTERNAL_ERROR"


class ToolCategory(Enum):
    """Groups of dependency tools."""

    DEPENDENCIES = "dependencies"
    STATUS = "status"
    QUERY = "query"
    OTHER = "other"


@dataclass
class ToolDefinition:
    """A registered tool.

    Attributes:
        name: Public tool name.
        description: One-line description shown to callers.
        func: The wrapped tool function.
        category: Tool group.
        writes: True if the tool may save the tasks file.
    """

    name: str
    description: str
    func: Callable[..., Any]
    category: ToolCategory = ToolCategory.OTHER
    writes: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolResult:
    """Outcome of one tool call, before it is turned into a dict."""

    success: bool
    data: Any = None
    error: ToolError | None = None
    execution_time_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any, **metadata) -> "ToolResult":
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: ToolError, **metadata) -> "ToolResult":
        return cls(success=False, error=error, metadata=metadata)

    def to_dict(self) -> dict[str, Any]:
        envelope: dict[str, Any] = {
            "success": self.success,
            "execution_time_ms": round(self.execution_time_ms, 2),
        }
        if self.success:
            envelope["data"] = self.data
        else:
            envelope["error"] = self.error.payload() if self.error else None
        if self.metadata:
            envelope["metadata"] = self.metadata
        return envelope


class ToolRegistry:
    """Name-indexed collection of tool definitions."""

    def __init__(self):
        self._tools: dict[str, ToolDefinition] = {}

    def register(
        self,
        func: Callable[..., Any] | None = None,
        *,
        name: str | None = None,
        description: str | None = None,
        category: ToolCategory = ToolCategory.OTHER,
        writes: bool = False,
        **metadata,
    ) -> Callable[..., Any]:
        """Add a tool, either directly or as a decorator.

        Without ``description`` the first docstring line is used.
        """

        def add(f: Callable[..., Any]) -> Callable[..., Any]:
            summary = description or (f.__doc__ or "").strip().split("\n")[0].strip()
            definition = ToolDefinition(
                name=name or f.__name__,
                description=summary,
                func=f,
                category=category,
                writes=writes,
                metadata=metadata,
            )
            self._tools[definition.name] = definition
            return f

        return add(func) if func is not None else add

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def get_function(self, name: str) -> Callable[..., Any] | None:
        definition = self.get(name)
        return definition.func if definition else None

    def list_tools(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def list_by_category(self, category: ToolCategory) -> list[ToolDefinition]:
        return [tool for tool in self._tools.values() if tool.category == category]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools


_default_registry = ToolRegistry()


def get_registry() -> ToolRegistry:
    """Registry that ``register_tool`` adds to."""
    return _default_registry


def register_tool(
    func: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    category: ToolCategory = ToolCategory.OTHER,
    writes: bool = False,
    **metadata,
) -> Callable[..., Any]:
    """Register a tool with the default registry.

    Example:
        @register_tool(category=ToolCategory.DEPENDENCIES, writes=True)
        @with_result_wrapper
        def fix_dependencies(file: str = "") -> dict:
            ...
    """
    return _default_registry.register(
        func,
        name=name,
        description=description,
        category=category,
        writes=writes,
        **metadata,
    )


P = ParamSpec("P")
T = TypeVar("T")


def _elapsed_ms(start: float) -> float:
    return (time.time() - start) * 1000


def with_result_wrapper(func: Callable[P, T]) -> Callable[P, dict[str, Any]]:
    """Run a tool and return its result envelope.

    ToolError (and every DependencyError) becomes a failed envelope carrying
    its code. Other exceptions become ``INTERNAL_ERROR`` envelopes, except
    those with a true ``fatal`` attribute, which propagate.
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> dict[str, Any]:
        start = time.time()
        try:
            data = func(*args, **kwargs)
        except ToolError as e:
            e.tool_name = e.tool_name or func.__name__
            return ToolResult(False, error=e, execution_time_ms=_elapsed_ms(start)).to_dict()
        except Exception as e:
            if getattr(e, "fatal", False):
                raise
            error = ToolError(
                message=str(e),
                error_code=INTERNAL_ERROR,
                tool_name=func.__name__,
            )
            return ToolResult(False, error=error, execution_time_ms=_elapsed_ms(start)).to_dict()
        return ToolResult(True, data=data, execution_time_ms=_elapsed_ms(start)).to_dict()

    return wrapper
