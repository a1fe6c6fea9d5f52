"""Reconcile subscribed shows with fresh catalog data."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from loguru import logger

from bingers.core.infrastructure.logging import BusinessEvents
from bingers.modules.catalog.domain.client import CatalogClient
from bingers.modules.progress.domain.store import ProgressStore, oldest_first
from bingers.modules.shows.domain.entities import Episode, Show


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class EpisodeMergeResult:
    new_episodes: list[Episode] = field(default_factory=list)
    refreshed_episodes: int = 0
    skipped_unaired: int = 0
    skipped_watched: int = 0


@dataclass(frozen=True)
class SyncResult:
    checked_shows: int
    changed_show_ids: tuple[int, ...]
    new_episodes: list[Episode] = field(default_factory=list)
    refreshed_episodes: int = 0
    skipped_unaired: int = 0
    skipped_watched: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_show_ids or self.new_episodes)


class SyncService:
    """Merge freshly fetched shows and episodes into a ProgressStore.

    Only the in-memory store is mutated; saving is left to the caller so a
    failed save can be retried without fetching again.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.catalog = catalog
        self.now = now

    async def sync(self, store: ProgressStore, force: bool = False) -> SyncResult:
        """Refresh metadata of every subscribed show and ingest new episodes.

        Episode lists are fetched only for shows whose catalog update marker
        changed, or for all shows when ``force`` is set. The store is only
        touched once every fetch has succeeded, so a failed fetch leaves the
        old markers in place and the next sync asks again.
        """
        show_ids = {show.id for show in store.subscribed_shows}
        if not show_ids:
            logger.info("No subscribed shows, nothing to sync")
            return SyncResult(checked_shows=0, changed_show_ids=())

        shows = await self.catalog.fetch_shows(show_ids)
        changed_ids = self.changed_show_ids(store, shows, force=force)

        episodes: list[Episode] = []
        if changed_ids:
            episodes = await self.catalog.fetch_episodes(changed_ids)

        self.apply_shows(store, shows)
        merge = EpisodeMergeResult()
        if changed_ids:
            merge = self.apply_episodes(store, episodes)

        result = SyncResult(
            checked_shows=len(shows),
            changed_show_ids=tuple(sorted(changed_ids)),
            new_episodes=merge.new_episodes,
            refreshed_episodes=merge.refreshed_episodes,
            skipped_unaired=merge.skipped_unaired,
            skipped_watched=merge.skipped_watched,
        )
        BusinessEvents.sync_completed(
            checked_shows=result.checked_shows,
            changed_shows=len(result.changed_show_ids),
            new_episodes=len(result.new_episodes),
            refreshed_episodes=result.refreshed_episodes,
            forced=force,
        )
        logger.info(
            f"Sync completed: checked={result.checked_shows}, "
            f"changed={len(result.changed_show_ids)}, "
            f"new={len(result.new_episodes)}, refreshed={result.refreshed_episodes}"
        )
        return result

    @staticmethod
    def changed_show_ids(
        store: ProgressStore, shows: Iterable[Show], force: bool = False
    ) -> set[int]:
        """Ids of subscribed shows whose update marker differs (or all if forced).

        Read-only; the store is not modified.
        """
        changed: set[int] = set()
        for show in shows:
            stored = store.find_show(show.id)
            if stored is None:
                continue
            if force or stored.last_updated != show.last_updated:
                changed.add(show.id)
        return changed

    @staticmethod
    def apply_shows(store: ProgressStore, shows: Iterable[Show]) -> set[int]:
        """Copy show metadata into the store; return ids whose marker changed."""
        return {show.id for show in shows if store.update_show(show)}

    def apply_episodes(
        self, store: ProgressStore, episodes: Iterable[Episode]
    ) -> EpisodeMergeResult:
        """Filter fetched episodes and insert the new arrivals.

        Dropped: episodes not aired yet (or with no air time), episodes at or
        behind the show's watch pointer, and episodes the store already knows
        (those only get their metadata refreshed).
        """
        now = self.now()
        arrivals: list[Episode] = []
        refreshed = 0
        skipped_unaired = 0
        skipped_watched = 0

        seen: set[tuple[int, int]] = set()

        for episode in episodes:
            pointer = store.watch_pointer(episode.show_id)
            if pointer is None or episode.key in seen:
                continue
            seen.add(episode.key)

            if not episode.has_aired(now):
                skipped_unaired += 1
                continue

            if episode.episode_number <= pointer:
                skipped_watched += 1
                continue

            if store.update_episode(episode):
                refreshed += 1
                continue

            arrivals.append(episode)

        new_episodes = oldest_first(arrivals)
        store.add_episodes(new_episodes)
        return EpisodeMergeResult(
            new_episodes=new_episodes,
            refreshed_episodes=refreshed,
            skipped_unaired=skipped_unaired,
            skipped_watched=skipped_watched,
        )
