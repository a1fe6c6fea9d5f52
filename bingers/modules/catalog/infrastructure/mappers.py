"""TVmaze schema to domain mappers."""

from loguru import logger

from bingers.modules.catalog.domain.client import SearchMatch
from bingers.modules.catalog.infrastructure.schemas import (
    TvMazeEpisode,
    TvMazeNetwork,
    TvMazeSearchResult,
    TvMazeShow,
)
from bingers.modules.shows.domain.entities import Episode, Network, Schedule, Show


class ShowMapper:
    """TVmaze show to Show mapper."""

    def to_domain(self, schema: TvMazeShow) -> Show:
        return Show(
            id=schema.id,
            name=schema.name,
            language=schema.language,
            network=self._network(schema.network),
            web_channel=self._network(schema.web_channel),
            status=schema.status,
            runtime=schema.runtime,
            schedule=Schedule(days=tuple(schema.schedule.days)),
            last_updated=schema.updated,
        )

    def to_search_match(self, schema: TvMazeSearchResult) -> SearchMatch:
        return SearchMatch(score=schema.score, show=self.to_domain(schema.show))

    @staticmethod
    def _network(schema: TvMazeNetwork | None) -> Network | None:
        if schema is None:
            return None
        return Network(id=schema.id, name=schema.name)


class EpisodeMapper:
    """TVmaze episode to Episode mapper.

    The episode payload does not name its show, so the show id of the request
    is injected here.
    """

    def to_domain(self, schema: TvMazeEpisode, show_id: int) -> Episode | None:
        if schema.number is None:
            logger.debug(
                f"Skipping unnumbered episode {schema.id} of show {show_id}"
            )
            return None

        return Episode(
            episode_id=schema.id,
            show_id=show_id,
            name=schema.name or "",
            season=schema.season,
            number=schema.number,
            airstamp=schema.airstamp,
            runtime=schema.runtime or 0,
            watched=False,
        )

    def to_domain_list(
        self, schemas: list[TvMazeEpisode], show_id: int
    ) -> list[Episode]:
        episodes: list[Episode] = []
        for schema in schemas:
            episode = self.to_domain(schema, show_id)
            if episode is not None:
                episodes.append(episode)
        return episodes
