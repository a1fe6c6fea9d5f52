"""Catalog client port and result models."""

from collections.abc import Iterable
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from bingers.modules.shows.domain.entities import Episode, Show


class SearchMatch(BaseModel):
    """A search hit: relevance score plus the matched show."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(..., description="Relevance score")
    show: Show = Field(..., description="Matched show")


class CatalogClient(Protocol):
    """Port for querying the show catalog.

    Batch methods issue one request per id and return only when every request
    has settled; any failure fails the whole batch.
    """

    async def search(self, query: str) -> list[SearchMatch]: ...

    async def fetch_shows(self, ids: Iterable[int]) -> list[Show]: ...

    async def fetch_episodes(self, ids: Iterable[int]) -> list[Episode]: ...
