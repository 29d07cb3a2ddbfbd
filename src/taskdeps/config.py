"""Settings for taskdeps.

``Settings`` says where the tasks file lives, which statuses are allowed,
how repairs treat premature completions, and how logging looks. Values are
layered, highest priority first:

    1. Constructor arguments
    2. ``TASKDEPS_*`` environment variables
    3. ``./.taskdeps/settings.json`` (project)
    4. ``~/.taskdeps/settings.json`` (user)
    5. ``.env``
    6. Field defaults

Tools read settings through ``get_settings()``. A ``SettingsContext`` wins
over the process-wide instance, which keeps tests and embedded callers
isolated:

    with SettingsContext(Settings(project_root=tmp)):
        fix_dependencies()
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from pathlib import Path
from typing import Generator, Tuple, Type

from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from taskdeps.logging import Loggers
from taskdeps.settings_mixins import (
    GraphSettingsMixin,
    LoggingSettingsMixin,
    ProjectSettingsMixin,
)

__all__ = [
    "Settings",
    "SettingsContext",
    "get_settings",
    "set_settings",
    "set_context_settings",
    "get_context_settings",
    "reload_settings",
]

APP_NAME = "taskdeps"

logger = Loggers.config()


def settings_files() -> list[Path]:
    """Candidate JSON settings files, project before user."""
    return [
        Path.cwd() / f".{APP_NAME}" / "settings.json",
        Path.home() / f".{APP_NAME}" / "settings.json",
    ]


class Settings(ProjectSettingsMixin, GraphSettingsMixin, LoggingSettingsMixin, BaseSettings):
    """taskdeps settings, assembled from the mixins in ``settings_mixins``."""

    model_config = SettingsConfigDict(
        env_prefix="TASKDEPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Insert the JSON settings files between env vars and ``.env``."""
        json_sources: list[PydanticBaseSettingsSource] = []
        for path in settings_files():
            if path.exists():
                logger.debug("settings_file_found", path=str(path))
                json_sources.append(JsonConfigSettingsSource(settings_cls, json_file=path))
        return (init_settings, env_settings, *json_sources, dotenv_settings)


_settings_context: ContextVar[Settings | None] = ContextVar(
    "settings_context", default=None
)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Context settings if set, else the process-wide instance (created lazily)."""
    context_settings = _settings_context.get()
    if context_settings is not None:
        return context_settings

    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def set_settings(settings: Settings) -> None:
    global _settings_instance
    _settings_instance = settings


def set_context_settings(settings: Settings | None) -> Token:
    """Set (or clear, with None) the settings of the current context."""
    return _settings_context.set(settings)


def get_context_settings() -> Settings | None:
    return _settings_context.get()


@contextmanager
def SettingsContext(settings: Settings) -> Generator[Settings, None, None]:
    """Use ``settings`` for every ``get_settings()`` call inside the block."""
    token = _settings_context.set(settings)
    try:
        yield settings
    finally:
        _settings_context.reset(token)


def reload_settings() -> Settings:
    """Drop cached and context settings and build a fresh instance."""
    global _settings_instance
    _settings_instance = None
    _settings_context.set(None)
    return get_settings()
