"""Logging configuration with structlog integration.

Two logging channels are used:
1. loguru: general diagnostic logging
2. structlog: structured logging of key business events

Both write to stderr; stdout belongs to command output.
"""

import sys
from typing import Any

import structlog
from loguru import logger
from structlog.typing import Processor

from bingers.core.config import settings


def setup_logging(level: str | None = None) -> None:
    """Configure both channels at ``level`` (``settings.LOG_LEVEL`` by default)."""
    level_name = (level or settings.LOG_LEVEL).upper()
    _configure_structlog(_log_level_number(level_name))
    _configure_loguru(level_name)

    logger.debug(f"Logging configured with level: {level_name}")


def _configure_structlog(level_number: int) -> None:
    structlog.configure(
        processors=_business_processors(settings.ENVIRONMENT, sys.stderr.isatty()),
        wrapper_class=structlog.make_filtering_bound_logger(level_number),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _business_processors(environment: str, colors: bool) -> list[Processor]:
    """Readable lines for local runs, one JSON object per event elsewhere."""
    if environment == "local":
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=colors)
    else:
        renderer = structlog.processors.JSONRenderer()
    return [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        renderer,
    ]


def _configure_loguru(level_name: str) -> None:
    logger.remove()

    location = "<cyan>{name}</cyan>:<cyan>{line}</cyan> - " if level_name == "DEBUG" else ""
    logger.add(
        sys.stderr,
        level=level_name,
        format=f"<level>{{level: <8}}</level> | {location}<level>{{message}}</level>",
    )

    if settings.ENVIRONMENT != "local":
        logger.add(
            str(settings.LOG_DIR / "bingers_{time:YYYY-MM-DD}.log"),
            rotation="00:00",
            retention="30 days",
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


def _log_level_number(level_name: str) -> int:
    """Numeric value of a loguru level; unknown names raise ValueError."""
    return logger.level(level_name).no


# ============================================================================
# Business event logger
# ============================================================================


class BusinessEvents:
    """Helpers that keep business event names and fields consistent.

    Usage:
        from bingers.core.infrastructure.logging import BusinessEvents

        BusinessEvents.show_subscribed(show_id=20263, name="The Orville")
    """

    _log = structlog.get_logger("business.events")

    @classmethod
    def show_subscribed(
        cls,
        show_id: int,
        name: str,
        episodes_added: int = 0,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "show_subscribed",
            event_type="subscription",
            show_id=show_id,
            name=name,
            episodes_added=episodes_added,
            **extra,
        )

    @classmethod
    def show_unsubscribed(cls, show_id: int, name: str, **extra: Any) -> None:
        cls._log.info(
            "show_unsubscribed",
            event_type="subscription",
            show_id=show_id,
            name=name,
            **extra,
        )

    @classmethod
    def episodes_marked_watched(
        cls,
        show_id: int,
        last_marked: tuple[int, int],
        watch_pointer: tuple[int, int],
        **extra: Any,
    ) -> None:
        cls._log.info(
            "episodes_marked_watched",
            event_type="progress",
            show_id=show_id,
            last_marked=list(last_marked),
            watch_pointer=list(watch_pointer),
            **extra,
        )

    @classmethod
    def sync_completed(
        cls,
        checked_shows: int,
        changed_shows: int,
        new_episodes: int,
        refreshed_episodes: int,
        forced: bool,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "sync_completed",
            event_type="sync",
            checked_shows=checked_shows,
            changed_shows=changed_shows,
            new_episodes=new_episodes,
            refreshed_episodes=refreshed_episodes,
            forced=forced,
            **extra,
        )

    @classmethod
    def catalog_rate_limited(
        cls,
        url: str,
        attempt: int,
        wait_sec: float,
        **extra: Any,
    ) -> None:
        cls._log.warning(
            "catalog_rate_limited",
            event_type="catalog",
            url=url,
            attempt=attempt,
            wait_sec=wait_sec,
            **extra,
        )

    @classmethod
    def catalog_request_failed(
        cls,
        operation: str,
        error: str,
        error_code: str,
        **extra: Any,
    ) -> None:
        cls._log.warning(
            "catalog_request_failed",
            event_type="catalog_error",
            operation=operation,
            error=error,
            error_code=error_code,
            **extra,
        )

    @classmethod
    def user_data_saved(
        cls,
        path: str,
        shows: int,
        unwatched_episodes: int,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "user_data_saved",
            event_type="persistence",
            path=path,
            shows=shows,
            unwatched_episodes=unwatched_episodes,
            **extra,
        )
