"""Progress store: subscribed shows and their unwatched episodes.

The store is the single owner of watch progress. Per show it keeps a watch
pointer, the (season, number) of the highest contiguously watched episode.
Episodes behind the pointer are dropped, so the unwatched list stays bounded.

Episodes marked out of order stay in the list, flagged ``watched``, until the
gap of unwatched episodes before them is closed; the pointer then advances over
the whole contiguous run and the run is dropped in one pass.
"""

from collections.abc import Iterable
from datetime import datetime

from loguru import logger

from bingers.modules.shows.domain.entities import (
    NO_EPISODE,
    Episode,
    EpisodeNumber,
    Show,
    ShowStatus,
)

CURRENT_VERSION = 1

_STATUS_RANK = {
    ShowStatus.RUNNING: 0,
    ShowStatus.TO_BE_DETERMINED: 1,
}


def presentation_key(show: Show) -> tuple[int, int, int]:
    """Running shows first, then To Be Determined, then the rest.

    Within a group the most recently updated show comes first; ties by id.
    """
    return (_STATUS_RANK.get(show.status, 2), -show.last_updated, show.id)


def oldest_first(episodes: Iterable[Episode]) -> list[Episode]:
    """Order episodes by air time; unknown air times last, ties in reverse input order."""
    indexed = list(enumerate(episodes))
    indexed.sort(
        key=lambda pair: (
            pair[1].airstamp is None,
            pair[1].airstamp or datetime.min,
            -pair[0],
        )
    )
    return [episode for _, episode in indexed]


def _show_id(show: Show | int) -> int:
    return show.id if isinstance(show, Show) else show


class ProgressStore:
    """In-memory model of one user's subscriptions and unwatched episodes.

    Accessors hand out copies; every mutation goes through a store method.
    """

    def __init__(
        self,
        subscribed_shows: Iterable[Show] = (),
        unwatched_episodes: Iterable[Episode] = (),
        version: int = CURRENT_VERSION,
    ) -> None:
        self.version = version
        self._shows: list[Show] = []
        self._episodes: list[Episode] = []
        self._episode_keys: set[tuple[int, int]] = set()

        for show in subscribed_shows:
            self.add_show(show)
        self.add_episodes(unwatched_episodes)

    # ============================================
    # Queries
    # ============================================

    @property
    def subscribed_shows(self) -> list[Show]:
        return [show.model_copy() for show in self._shows]

    @property
    def unwatched_episodes(self) -> list[Episode]:
        return [episode.model_copy() for episode in self._episodes]

    def find_show(self, show_id: int) -> Show | None:
        show = self._find_show(show_id)
        return show.model_copy() if show is not None else None

    def find_shows_by_name(self, text: str) -> list[Show]:
        """Subscribed shows whose name contains ``text`` (case-insensitive).

        An exact name match wins over partial matches.
        """
        needle = text.strip().casefold()
        if not needle:
            return []

        exact = [show for show in self._shows if show.name.casefold() == needle]
        if exact:
            return [show.model_copy() for show in exact]
        return [
            show.model_copy() for show in self._shows if needle in show.name.casefold()
        ]

    def watch_pointer(self, show_id: int) -> EpisodeNumber | None:
        show = self._find_show(show_id)
        return show.last_watched_episode if show is not None else None

    def episodes_of(self, show_id: int) -> list[Episode]:
        return [
            episode.model_copy()
            for episode in self._episodes
            if episode.show_id == show_id
        ]

    def contains_episode(self, episode: Episode) -> bool:
        return episode.key in self._episode_keys

    def subscribed_shows_by_most_recent(self) -> list[Show]:
        return [show.model_copy() for show in sorted(self._shows, key=presentation_key)]

    def unwatched_episodes_oldest_first(self) -> list[Episode]:
        return [episode.model_copy() for episode in oldest_first(self._episodes)]

    # ============================================
    # Subscriptions
    # ============================================

    def add_show(self, show: Show) -> bool:
        """Subscribe to ``show``; returns False if it was already subscribed."""
        if self._find_show(show.id) is not None:
            return False

        self._shows.append(show.model_copy())
        self._shows.sort(key=presentation_key)
        return True

    def remove_show(self, show: Show | int) -> bool:
        show_id = _show_id(show)
        before = len(self._shows)
        self._shows = [stored for stored in self._shows if stored.id != show_id]
        return len(self._shows) != before

    def remove_episodes(self, show: Show | int) -> int:
        show_id = _show_id(show)
        kept = [episode for episode in self._episodes if episode.show_id != show_id]
        removed = len(self._episodes) - len(kept)
        self._replace_episodes(kept)
        return removed

    def set_watch_pointer(self, show_id: int, pointer: EpisodeNumber) -> bool:
        """Set the pointer of a freshly subscribed show.

        Unwatched episodes at or behind the new pointer are dropped.
        """
        show = self._find_show(show_id)
        if show is None:
            return False

        show.last_watched_episode = pointer
        self._replace_episodes(
            [
                episode
                for episode in self._episodes
                if episode.show_id != show_id or episode.episode_number > pointer
            ]
        )
        return True

    # ============================================
    # Episodes
    # ============================================

    def add_episodes(self, episodes: Iterable[Episode]) -> int:
        """Insert episodes not yet known by (episode id, show id).

        Returns the number of inserted episodes.
        """
        added = 0
        for episode in episodes:
            if episode.key in self._episode_keys:
                continue
            self._episodes.append(episode.model_copy())
            self._episode_keys.add(episode.key)
            added += 1

        if added:
            self._episodes.sort()
        return added

    def mark_as_watched(
        self,
        show_id: int,
        season: int | None = None,
        episode: int | None = None,
    ) -> EpisodeNumber | None:
        """Mark episode(s) of a show as watched.

        - neither season nor episode: the next unwatched episode
        - season only: every unwatched episode of that season
        - season and episode: exactly that episode
        - episode without season: nothing (invalid combination)

        Returns the (season, number) of the last episode marked, or None.
        """
        if season is None and episode is None:
            last_marked = self._mark_next_episode(show_id)
        elif season is not None and episode is None:
            last_marked = self._mark_season(show_id, season)
        elif season is not None and episode is not None:
            last_marked = self._mark_episode(show_id, season, episode)
        else:
            logger.debug(f"Ignoring episode {episode} of show {show_id} without season")
            return None

        if last_marked is None:
            return None

        show = self._find_show(show_id)
        pointer = show.last_watched_episode if show is not None else NO_EPISODE

        if self._has_gap(show_id, pointer, last_marked):
            logger.debug(
                f"Show {show_id}: unwatched episodes between {pointer} and "
                f"{last_marked}, keeping pointer"
            )
            return last_marked

        pointer = self._collapse_watched(show_id, pointer)
        if show is not None:
            show.last_watched_episode = pointer

        return last_marked

    def _mark_next_episode(self, show_id: int) -> EpisodeNumber | None:
        for episode in self._episodes:
            if episode.show_id == show_id and not episode.watched:
                episode.watched = True
                return episode.episode_number
        return None

    def _mark_season(self, show_id: int, season: int) -> EpisodeNumber | None:
        marked = None
        for episode in self._episodes:
            if (
                episode.show_id == show_id
                and episode.season == season
                and not episode.watched
            ):
                episode.watched = True
                marked = episode.episode_number
        return marked

    def _mark_episode(
        self, show_id: int, season: int, number: int
    ) -> EpisodeNumber | None:
        for episode in self._episodes:
            if (
                episode.show_id == show_id
                and episode.episode_number == (season, number)
                and not episode.watched
            ):
                episode.watched = True
                return episode.episode_number
        return None

    def _has_gap(
        self, show_id: int, pointer: EpisodeNumber, last_marked: EpisodeNumber
    ) -> bool:
        return any(
            episode.show_id == show_id
            and not episode.watched
            and pointer < episode.episode_number < last_marked
            for episode in self._episodes
        )

    def _collapse_watched(self, show_id: int, pointer: EpisodeNumber) -> EpisodeNumber:
        """Drop the contiguous run of watched episodes after ``pointer``.

        Relies on ``self._episodes`` being sorted: the scan walks forward and
        stops advancing at the first episode that is still unwatched.
        """
        kept: list[Episode] = []
        advancing = True
        for episode in self._episodes:
            if episode.show_id != show_id or episode.episode_number <= pointer:
                kept.append(episode)
                continue
            if advancing and episode.watched:
                pointer = episode.episode_number
                continue
            advancing = False
            kept.append(episode)

        self._replace_episodes(kept)
        return pointer

    # ============================================
    # Metadata refresh
    # ============================================

    def update_show(self, show: Show) -> bool:
        """Copy catalog metadata onto the subscribed show.

        Returns whether the catalog update marker changed. Unknown shows are
        ignored and return False. The watch pointer is never touched.
        """
        stored = self._find_show(show.id)
        if stored is None:
            return False

        if stored.name != show.name:
            logger.info(f'"{stored.name}" changed to "{show.name}"')
            stored.name = show.name

        if stored.status != show.status:
            logger.info(f"{stored.name}: changed from {stored.status} to {show.status}")
            stored.status = show.status

        stored.language = show.language
        stored.network = show.network
        stored.web_channel = show.web_channel
        stored.runtime = show.runtime
        stored.schedule = show.schedule

        changed = stored.last_updated != show.last_updated
        if changed:
            stored.last_updated = show.last_updated

        self._shows.sort(key=presentation_key)
        return changed

    def update_episode(self, episode: Episode) -> bool:
        """Copy catalog metadata onto a stored unwatched episode.

        Returns whether the episode is known to the store. The watched flag is
        never touched.
        """
        stored = self._find_episode(episode)
        if stored is None:
            return False

        if stored.name != episode.name:
            logger.info(f'"{stored.name}" changed to "{episode.name}"')
            stored.name = episode.name

        moved = stored.episode_number != episode.episode_number
        if moved:
            logger.info(
                f"{stored.name}: changed from being season {stored.season} episode "
                f"{stored.number} to season {episode.season} episode {episode.number}"
            )
            stored.season = episode.season
            stored.number = episode.number

        stored.airstamp = episode.airstamp
        stored.runtime = episode.runtime

        if moved:
            self._episodes.sort()
        return True

    # ============================================
    # Internals
    # ============================================

    def _find_show(self, show_id: int) -> Show | None:
        for show in self._shows:
            if show.id == show_id:
                return show
        return None

    def _find_episode(self, episode: Episode) -> Episode | None:
        if episode.key not in self._episode_keys:
            return None
        for stored in self._episodes:
            if stored.key == episode.key:
                return stored
        return None

    def _replace_episodes(self, episodes: list[Episode]) -> None:
        self._episodes = episodes
        self._episode_keys = {episode.key for episode in episodes}
