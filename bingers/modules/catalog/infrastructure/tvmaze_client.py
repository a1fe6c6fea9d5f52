"""TVmaze catalog client.

Talks to the public TVmaze API (https://www.tvmaze.com/api):
- search shows by name
- fetch shows by id (one request per id, fanned out concurrently)
- fetch episode lists by show id (same fan-out)

Only HTTP 429 responses are retried, with a Fibonacci-shaped backoff; every
other failure is terminal for its request and fails the whole batch.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any, Self, TypeVar

import httpx
from loguru import logger
from pydantic import TypeAdapter, ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_chain,
    wait_fixed,
)

from bingers.core.config import settings
from bingers.core.infrastructure.logging import BusinessEvents
from bingers.modules.catalog.domain.client import CatalogClient, SearchMatch
from bingers.modules.catalog.domain.exceptions import (
    CatalogBatchTimeoutError,
    CatalogDecodeError,
    CatalogHttpStatusError,
    CatalogRateLimitError,
    CatalogTransportError,
)
from bingers.modules.catalog.infrastructure.mappers import EpisodeMapper, ShowMapper
from bingers.modules.catalog.infrastructure.schemas import (
    TvMazeEpisode,
    TvMazeSearchResult,
    TvMazeShow,
)
from bingers.modules.shows.domain.entities import Episode, Show

S = TypeVar("S")
T = TypeVar("T")

_SEARCH_RESULTS = TypeAdapter(list[TvMazeSearchResult])
_SHOW = TypeAdapter(TvMazeShow)
_EPISODES = TypeAdapter(list[TvMazeEpisode])


class TvMazeCatalogClient(CatalogClient):
    """Catalog client backed by one shared ``httpx.AsyncClient``.

    Use it as an async context manager so the connection pool is closed:

        async with TvMazeCatalogClient() as catalog:
            shows = await catalog.fetch_shows({20263, 7480})
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_sec: float | None = None,
        max_concurrency: int | None = None,
        max_attempts: int | None = None,
        backoff_sec: Sequence[float] | None = None,
        batch_timeout_sec: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.CATALOG_API_BASE_URL).rstrip("/")
        self.timeout_sec = timeout_sec or settings.CATALOG_TIMEOUT_SEC
        self.max_concurrency = max_concurrency or settings.CATALOG_MAX_CONCURRENCY
        self.max_attempts = max_attempts or settings.CATALOG_MAX_ATTEMPTS
        self.backoff_sec = list(
            backoff_sec if backoff_sec is not None else settings.CATALOG_BACKOFF_SEC
        )
        self.batch_timeout_sec = (
            batch_timeout_sec
            if batch_timeout_sec is not None
            else settings.CATALOG_BATCH_TIMEOUT_SEC
        )
        self.show_mapper = ShowMapper()
        self.episode_mapper = EpisodeMapper()
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Shared HTTP client (created lazily)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout_sec,
                follow_redirects=True,
                headers={
                    "User-Agent": settings.CATALOG_USER_AGENT,
                    "Accept": "application/json",
                },
            )
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ============================================
    # Queries
    # ============================================

    async def search(self, query: str) -> list[SearchMatch]:
        """Search shows by free-text name."""
        matches = await self._get(
            "/search/shows",
            _SEARCH_RESULTS,
            lambda results: [self.show_mapper.to_search_match(r) for r in results],
            {"q": query},
        )
        logger.debug(f"Search for {query!r} returned {len(matches)} matches")
        return matches

    async def fetch_shows(self, ids: Iterable[int]) -> list[Show]:
        """Fetch full show records, one request per id."""
        return await self._fan_out("fetch_shows", ids, self._fetch_show)

    async def fetch_episodes(self, ids: Iterable[int]) -> list[Episode]:
        """Fetch the episode lists of the given shows, one request per show."""
        per_show = await self._fan_out("fetch_episodes", ids, self._fetch_show_episodes)
        return [episode for episodes in per_show for episode in episodes]

    async def _fetch_show(self, show_id: int) -> Show:
        return await self._get(f"/shows/{show_id}", _SHOW, self.show_mapper.to_domain)

    async def _fetch_show_episodes(self, show_id: int) -> list[Episode]:
        return await self._get(
            f"/shows/{show_id}/episodes",
            _EPISODES,
            lambda schemas: self.episode_mapper.to_domain_list(schemas, show_id),
        )

    # ============================================
    # Fan-out
    # ============================================

    async def _fan_out(
        self,
        operation: str,
        ids: Iterable[int],
        fetch_one: Callable[[int], Awaitable[T]],
    ) -> list[T]:
        """Run ``fetch_one`` for every id concurrently and wait for all of them.

        Results are merged only after every request has settled. The first
        failure (in id order) is raised; the batch never returns partial data.
        """
        show_ids = sorted(set(ids))
        if not show_ids:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(show_id: int) -> T:
            async with semaphore:
                return await fetch_one(show_id)

        gathered = asyncio.gather(
            *(_bounded(show_id) for show_id in show_ids),
            return_exceptions=True,
        )
        if self.batch_timeout_sec is None:
            results: list[Any] = await gathered
        else:
            try:
                results = await asyncio.wait_for(gathered, timeout=self.batch_timeout_sec)
            except TimeoutError as exc:
                error = CatalogBatchTimeoutError(operation, self.batch_timeout_sec)
                BusinessEvents.catalog_request_failed(
                    operation=operation,
                    error=str(error),
                    error_code=error.error_code,
                    total=len(show_ids),
                )
                raise error from exc

        failures = [
            (show_id, result)
            for show_id, result in zip(show_ids, results, strict=True)
            if isinstance(result, BaseException)
        ]
        if failures:
            for show_id, error in failures:
                logger.warning(f"{operation} failed for show {show_id}: {error}")
            show_id, first_error = failures[0]
            BusinessEvents.catalog_request_failed(
                operation=operation,
                error=str(first_error),
                error_code=getattr(first_error, "error_code", type(first_error).__name__),
                show_id=show_id,
                failed=len(failures),
                total=len(show_ids),
            )
            raise first_error

        logger.debug(f"{operation} completed for {len(show_ids)} shows")
        return results

    # ============================================
    # Single requests
    # ============================================

    async def _get(
        self,
        path: str,
        adapter: TypeAdapter[S],
        to_domain: Callable[[S], T],
        params: dict[str, str] | None = None,
    ) -> T:
        """GET ``path`` and decode it; wire and domain validation both raise CatalogDecodeError."""
        payload, url = await self._retrying()(self._request_json, path, params)
        try:
            return to_domain(adapter.validate_python(payload))
        except ValidationError as exc:
            raise CatalogDecodeError(
                f"Unable to deserialize HTTP response ({exc.error_count()} errors)",
                url,
            ) from exc

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(CatalogRateLimitError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_chain(*(wait_fixed(seconds) for seconds in self.backoff_sec)),
            before_sleep=self._log_rate_limited,
            reraise=True,
        )

    async def _request_json(
        self, path: str, params: dict[str, str] | None
    ) -> tuple[Any, str]:
        url = f"{self.base_url}{path}"
        try:
            response = await self.client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise CatalogTransportError(f"Request timed out: {exc}", url) from exc
        except httpx.HTTPError as exc:
            raise CatalogTransportError(f"HTTP request failed: {exc}", url) from exc

        request_url = str(response.request.url)
        logger.debug(f"{response.status_code} {request_url}")

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise CatalogRateLimitError(request_url)
        if not response.is_success:
            raise CatalogHttpStatusError(response.status_code, request_url)

        try:
            return response.json(), request_url
        except ValueError as exc:
            raise CatalogDecodeError("Response body is not valid JSON", request_url) from exc

    def _log_rate_limited(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        url = getattr(error, "url", None) or "unknown"
        wait_sec = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"Rate limited by catalog, retrying in {wait_sec}s "
            f"(attempt {retry_state.attempt_number}/{self.max_attempts}): {url}"
        )
        BusinessEvents.catalog_rate_limited(
            url=url,
            attempt=retry_state.attempt_number,
            wait_sec=wait_sec,
        )
