"""Show tracking application service.

Coordinates the catalog client, the progress store and its repository:
- search the catalog and subscribe to a show
- unsubscribe
- mark episodes as watched
- sync with the catalog

Every mutation is applied to the in-memory store first and saved last. If the
save fails the store keeps the mutation, and ``save`` can simply be retried.
"""

from __future__ import annotations

from loguru import logger

from bingers.core.domain.exceptions import EntityNotFoundError
from bingers.core.infrastructure.logging import BusinessEvents
from bingers.modules.catalog.domain.client import CatalogClient, SearchMatch
from bingers.modules.progress.domain.repository import ProgressRepository
from bingers.modules.progress.domain.store import ProgressStore
from bingers.modules.shows.domain.entities import (
    NO_EPISODE,
    EpisodeNumber,
    Show,
    ShowStatus,
)
from bingers.modules.sync.application.sync_service import SyncResult, SyncService


class TrackingService:
    """Use cases of the bingers command line."""

    def __init__(
        self,
        repository: ProgressRepository,
        catalog: CatalogClient,
        sync_service: SyncService | None = None,
    ) -> None:
        self.repository = repository
        self.catalog = catalog
        self.sync_service = sync_service or SyncService(catalog)
        self._store: ProgressStore | None = None

    @property
    def store(self) -> ProgressStore:
        """Progress store (loaded on first use)."""
        if self._store is None:
            self._store = self.repository.load()
        return self._store

    def save(self) -> None:
        self.repository.save(self.store)

    async def search(
        self,
        query: str,
        *,
        running_only: bool = False,
        language: str | None = None,
    ) -> list[SearchMatch]:
        """Search the catalog, optionally keeping only running shows in one language."""
        matches = await self.catalog.search(query)
        if running_only:
            matches = [m for m in matches if m.show.status == ShowStatus.RUNNING]
        if language:
            wanted = language.casefold()
            matches = [
                m
                for m in matches
                if m.show.language is not None and m.show.language.casefold() == wanted
            ]
        return matches

    def find_shows(self, name: str) -> list[Show]:
        return self.store.find_shows_by_name(name)

    async def subscribe(
        self, show_id: int, last_watched: EpisodeNumber | None = None
    ) -> Show:
        """Subscribe to a show.

        ``last_watched`` sets the initial watch pointer; only aired episodes
        strictly after it are added as unwatched.
        """
        existing = self.store.find_show(show_id)
        if existing is not None:
            logger.info(f"Already subscribed to {existing}")
            return existing

        shows = await self.catalog.fetch_shows({show_id})
        show = next((fetched for fetched in shows if fetched.id == show_id), None)
        if show is None:
            raise EntityNotFoundError("Show", show_id)
        episodes = await self.catalog.fetch_episodes({show_id})

        pointer = last_watched or NO_EPISODE
        show.last_watched_episode = pointer
        self.store.add_show(show)
        merge = self.sync_service.apply_episodes(self.store, episodes)
        self.save()

        BusinessEvents.show_subscribed(
            show_id=show.id,
            name=show.name,
            episodes_added=len(merge.new_episodes),
            last_watched=list(pointer),
        )
        return show

    def unsubscribe(self, show_id: int) -> Show | None:
        """Drop a show and its unwatched episodes; returns the removed show."""
        show = self.store.find_show(show_id)
        if show is None:
            logger.debug(f"Show {show_id} is not subscribed")
            return None

        self.store.remove_show(show_id)
        self.store.remove_episodes(show_id)
        self.save()

        BusinessEvents.show_unsubscribed(show_id=show.id, name=show.name)
        return show

    def mark_as_watched(
        self,
        show_id: int,
        season: int | None = None,
        episode: int | None = None,
    ) -> EpisodeNumber | None:
        last_marked = self.store.mark_as_watched(show_id, season, episode)
        if last_marked is None:
            return None

        self.save()
        BusinessEvents.episodes_marked_watched(
            show_id=show_id,
            last_marked=last_marked,
            watch_pointer=self.store.watch_pointer(show_id) or NO_EPISODE,
        )
        return last_marked

    async def sync(self, force: bool = False) -> SyncResult:
        result = await self.sync_service.sync(self.store, force=force)
        self.save()
        return result
