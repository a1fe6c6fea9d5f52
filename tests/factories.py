"""Builders and in-memory fakes shared by the unit tests."""

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

import httpx

from bingers.modules.catalog.domain.client import SearchMatch
from bingers.modules.progress.domain.store import ProgressStore
from bingers.modules.shows.domain.entities import (
    Episode,
    Network,
    Schedule,
    Show,
    ShowStatus,
    Weekday,
)

THE_ORVILLE_ID = 20263
DISCOVERY_ID = 7480

NOW = datetime(2018, 1, 1, tzinfo=UTC)


# ============================================
# Domain objects
# ============================================


def make_show(
    show_id: int = THE_ORVILLE_ID,
    name: str = "The Orville",
    status: ShowStatus = ShowStatus.RUNNING,
    last_updated: int = 1512864391,
    **overrides: Any,
) -> Show:
    data: dict[str, Any] = {
        "id": show_id,
        "name": name,
        "language": "English",
        "network": Network(id=4, name="FOX"),
        "status": status,
        "runtime": 60,
        "schedule": Schedule(days=(Weekday.THURSDAY,)),
        "last_updated": last_updated,
    }
    data.update(overrides)
    return Show(**data)


def make_episode(
    episode_id: int,
    season: int,
    number: int,
    show_id: int = THE_ORVILLE_ID,
    airstamp: datetime | None = datetime(2017, 9, 11, tzinfo=UTC),
    **overrides: Any,
) -> Episode:
    data: dict[str, Any] = {
        "episode_id": episode_id,
        "show_id": show_id,
        "name": f"Episode {season}x{number}",
        "season": season,
        "number": number,
        "airstamp": airstamp,
        "runtime": 60,
    }
    data.update(overrides)
    return Episode(**data)


# ============================================
# Catalog payloads
# ============================================


def show_payload(
    show_id: int = THE_ORVILLE_ID,
    name: str = "The Orville",
    status: str = "Running",
    updated: int = 1512864391,
) -> dict[str, Any]:
    return {
        "id": show_id,
        "url": f"https://www.tvmaze.com/shows/{show_id}",
        "name": name,
        "type": "Scripted",
        "language": "English",
        "genres": ["Comedy", "Science-Fiction"],
        "status": status,
        "runtime": 60,
        "schedule": {"time": "21:00", "days": ["Thursday"]},
        "network": {"id": 4, "name": "FOX", "country": {"code": "US"}},
        "webChannel": None,
        "updated": updated,
    }


def episode_payload(
    episode_id: int,
    season: int,
    number: int | None,
    airstamp: str | None = "2017-09-11T01:00:00+00:00",
) -> dict[str, Any]:
    return {
        "id": episode_id,
        "url": f"https://www.tvmaze.com/episodes/{episode_id}",
        "name": f"Episode {season}x{number}",
        "season": season,
        "number": number,
        "airdate": "2017-09-10",
        "airstamp": airstamp,
        "runtime": 60,
    }


def mock_http_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ============================================
# Fakes
# ============================================


class FakeCatalogClient:
    """In-memory catalog keyed by show id."""

    def __init__(
        self,
        shows: Iterable[Show] = (),
        episodes: Iterable[Episode] = (),
        matches: Iterable[SearchMatch] = (),
    ) -> None:
        self.shows = {show.id: show for show in shows}
        self.episodes = list(episodes)
        self.matches = list(matches)
        self.fetched_show_ids: list[set[int]] = []
        self.fetched_episode_ids: list[set[int]] = []

    async def search(self, query: str) -> list[SearchMatch]:
        return list(self.matches)

    async def fetch_shows(self, ids: Iterable[int]) -> list[Show]:
        wanted = set(ids)
        self.fetched_show_ids.append(wanted)
        return [
            show.model_copy() for show_id, show in self.shows.items() if show_id in wanted
        ]

    async def fetch_episodes(self, ids: Iterable[int]) -> list[Episode]:
        wanted = set(ids)
        self.fetched_episode_ids.append(wanted)
        return [
            episode.model_copy()
            for episode in self.episodes
            if episode.show_id in wanted
        ]


class InMemoryProgressRepository:
    def __init__(self, store: ProgressStore | None = None) -> None:
        self.stored = store or ProgressStore()
        self.saves = 0

    def load(self) -> ProgressStore:
        return self.stored

    def save(self, store: ProgressStore) -> None:
        self.stored = store
        self.saves += 1
