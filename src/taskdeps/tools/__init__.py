"""Tools module for taskdeps.

Provides result-dict tools that wrap the dependency core for protocol
servers and scripts.

Tool System:
    - ToolDefinition: Metadata-rich tool definitions
    - ToolError: Standard error class for consistent error handling
    - ToolResult: Standard result wrapper
    - ToolRegistry: Registry for tool management and discovery
    - register_tool: Decorator for easy tool registration

Dependency Tools (registered on first access):
    - validate_dependencies, fix_dependencies
    - add_dependency, remove_dependency
    - set_task_status, list_tasks, next_tasks

Note: the tool functions are lazy-loaded so that importing the registry
does not pull in the graph core, settings and persistence layers.
"""

from taskdeps.tools.registry import (
    ToolCategory,
    ToolDefinition,
    ToolError,
    ToolResult,
    ToolRegistry,
    get_registry,
    register_tool,
    with_result_wrapper,
)

_lazy_tools = {
    "validate_dependencies",
    "fix_dependencies",
    "add_dependency",
    "remove_dependency",
    "set_task_status",
    "list_tasks",
    "next_tasks",
}


def __getattr__(name: str):
    """Lazy import for the dependency tools."""
    if name in _lazy_tools:
        import importlib

        module = importlib.import_module("taskdeps.tools.dependency_tools")
        value = getattr(module, name)
        globals()[name] = value  # Cache for future access
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Registry classes
    "ToolCategory",
    "ToolDefinition",
    "ToolError",
    "ToolResult",
    "ToolRegistry",
    "get_registry",
    "register_tool",
    "with_result_wrapper",
    # Dependency tools (lazy)
    "validate_dependencies",
    "fix_dependencies",
    "add_dependency",
    "remove_dependency",
    "set_task_status",
    "list_tasks",
    "next_tasks",
]
