"""Filesystem-based progress repository.

User data is one versioned JSON document:

    {"version": 1, "subscribed_shows": [...], "unwatched_episodes": [...]}

The version is read on its own before the full document is decoded, so data
written by a newer build is rejected instead of being misread. Saves go to a
temporary sibling file which is then renamed over the canonical file.
"""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from bingers.core.config import settings
from bingers.core.infrastructure.logging import BusinessEvents
from bingers.modules.progress.domain.exceptions import (
    UserDataDecodeError,
    UserDataReadError,
    UserDataVersionMismatchError,
    UserDataWriteError,
)
from bingers.modules.progress.domain.repository import ProgressRepository
from bingers.modules.progress.domain.store import CURRENT_VERSION, ProgressStore
from bingers.modules.shows.domain.entities import Episode, Show


class _VersionHeader(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: int


class UserDataDocument(BaseModel):
    """On-disk user data, version 1."""

    model_config = ConfigDict(extra="forbid")

    version: int
    subscribed_shows: list[Show]
    unwatched_episodes: list[Episode]


class JsonFileProgressRepository(ProgressRepository):
    """Store user data in a single JSON file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or settings.user_data_path

    @property
    def tmp_path(self) -> Path:
        return self.path.with_suffix(".tmp")

    def load(self) -> ProgressStore:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"No user data found at {self.path}, creating new")
            return ProgressStore()
        except OSError as exc:
            raise UserDataReadError(self.path, str(exc)) from exc

        try:
            header = _VersionHeader.model_validate_json(content)
        except ValidationError as exc:
            raise UserDataDecodeError(self.path, "unable to parse version") from exc

        if header.version > CURRENT_VERSION:
            raise UserDataVersionMismatchError(self.path, CURRENT_VERSION, header.version)

        try:
            document = UserDataDocument.model_validate_json(content)
        except ValidationError as exc:
            raise UserDataDecodeError(
                self.path, f"{exc.error_count()} validation errors"
            ) from exc

        store = ProgressStore(
            subscribed_shows=document.subscribed_shows,
            unwatched_episodes=document.unwatched_episodes,
            version=document.version,
        )
        logger.debug(
            f"Loaded {len(document.subscribed_shows)} shows and "
            f"{len(document.unwatched_episodes)} unwatched episodes from {self.path}"
        )
        return store

    def save(self, store: ProgressStore) -> None:
        document = UserDataDocument(
            version=CURRENT_VERSION,
            subscribed_shows=store.subscribed_shows,
            unwatched_episodes=store.unwatched_episodes,
        )
        content = document.model_dump_json()

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.tmp_path.open("w", encoding="utf-8") as tmp_file:
                tmp_file.write(content)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            self.tmp_path.replace(self.path)
        except OSError as exc:
            raise UserDataWriteError(self.path, str(exc)) from exc

        store.version = CURRENT_VERSION
        BusinessEvents.user_data_saved(
            path=str(self.path),
            shows=len(document.subscribed_shows),
            unwatched_episodes=len(document.unwatched_episodes),
        )
