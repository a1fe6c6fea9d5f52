"""
pytest configuration and shared fixtures.

Usage:
    # run everything
    pytest

    # with coverage
    pytest --cov=bingers --cov-report=html
"""

from datetime import UTC, datetime

import pytest

from bingers.modules.progress.domain.store import ProgressStore
from bingers.modules.shows.domain.entities import Episode, Network, Show
from tests.factories import DISCOVERY_ID, make_episode, make_show


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# ============================================
# Domain object fixtures
# ============================================


@pytest.fixture
def the_orville() -> Show:
    return make_show()


@pytest.fixture
def discovery() -> Show:
    return make_show(
        DISCOVERY_ID,
        "Star Trek: Discovery",
        network=None,
        web_channel=Network(id=107, name="CBS All Access"),
        last_updated=1512500000,
    )


@pytest.fixture
def orville_episodes() -> list[Episode]:
    """Season 1 episodes 1-4 plus the first episode of season 2."""
    return [
        make_episode(1172410, 1, 1, airstamp=datetime(2017, 9, 11, tzinfo=UTC)),
        make_episode(1201556, 1, 2, airstamp=datetime(2017, 9, 18, tzinfo=UTC)),
        make_episode(1201557, 1, 3, airstamp=datetime(2017, 9, 22, tzinfo=UTC)),
        make_episode(1201558, 1, 4, airstamp=datetime(2017, 10, 6, tzinfo=UTC)),
        make_episode(15151515, 2, 1, airstamp=datetime(2017, 12, 28, tzinfo=UTC)),
    ]


@pytest.fixture
def discovery_episode() -> Episode:
    return make_episode(
        892064, 1, 1, show_id=DISCOVERY_ID, airstamp=datetime(2017, 9, 25, tzinfo=UTC)
    )


@pytest.fixture
def store(
    the_orville: Show,
    discovery: Show,
    orville_episodes: list[Episode],
    discovery_episode: Episode,
) -> ProgressStore:
    return ProgressStore(
        subscribed_shows=[the_orville, discovery],
        unwatched_episodes=[*orville_episodes, discovery_episode],
    )
