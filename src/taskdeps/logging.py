"""structlog setup for taskdeps.

Graph operations emit events such as ``dependency_added`` or
``dependencies_repaired`` with key/value context. ``configure_logging``
decides how those events are rendered: readable console lines while
developing, one JSON object per line when the output is collected.
Everything goes to stderr so tool results on stdout stay clean.
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from taskdeps.config import Settings


def _renderer_chain(log_format: str) -> list[Processor]:
    if log_format == "json":
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def configure_logging(settings: "Settings | None" = None) -> None:
    """Configure structlog from ``log_level`` and ``log_format``.

    Without settings, warnings and above are printed in console format.
    """
    level_name = settings.log_level if settings is not None else "warning"
    log_format = settings.log_format if settings is not None else "console"
    level = getattr(logging, level_name.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *_renderer_chain(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging from libraries through the same level and stream
    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name) if name else structlog.get_logger()


def bind_context(**kwargs: object) -> None:
    """Attach key/value pairs to every later event in this context.

    Example:
        bind_context(tasks_file="tasks/tasks.json")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


class Loggers:
    """Named loggers for the taskdeps components."""

    @staticmethod
    def graph() -> structlog.stdlib.BoundLogger:
        """Identifier resolution, validation, repair and mutations."""
        return get_logger("taskdeps.graph")

    @staticmethod
    def persistence() -> structlog.stdlib.BoundLogger:
        """Tasks file loading and saving."""
        return get_logger("taskdeps.persistence")

    @staticmethod
    def config() -> structlog.stdlib.BoundLogger:
        return get_logger("taskdeps.config")

    @staticmethod
    def tools() -> structlog.stdlib.BoundLogger:
        return get_logger("taskdeps.tools")
