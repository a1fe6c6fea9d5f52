"""JSON user data persistence tests."""

import json
from pathlib import Path

import pytest

from bingers.modules.progress.domain.exceptions import (
    UserDataDecodeError,
    UserDataReadError,
    UserDataVersionMismatchError,
    UserDataWriteError,
)
from bingers.modules.progress.domain.store import CURRENT_VERSION, ProgressStore
from bingers.modules.progress.infrastructure.file_repository import (
    JsonFileProgressRepository,
)
from tests.factories import THE_ORVILLE_ID


@pytest.fixture
def repository(tmp_path: Path) -> JsonFileProgressRepository:
    return JsonFileProgressRepository(tmp_path / "bingers" / "user_data.json")


class TestLoad:
    def test_missing_file_gives_empty_store(
        self, repository: JsonFileProgressRepository
    ) -> None:
        store = repository.load()

        assert store.version == CURRENT_VERSION
        assert store.subscribed_shows == []
        assert store.unwatched_episodes == []
        assert not repository.path.exists()

    def test_newer_version_is_rejected(
        self, repository: JsonFileProgressRepository
    ) -> None:
        repository.path.parent.mkdir(parents=True)
        repository.path.write_text(
            json.dumps({"version": CURRENT_VERSION + 1, "whatever": []}),
            encoding="utf-8",
        )

        with pytest.raises(UserDataVersionMismatchError) as exc_info:
            repository.load()

        assert exc_info.value.expected == CURRENT_VERSION
        assert exc_info.value.actual == CURRENT_VERSION + 1
        assert exc_info.value.path == repository.path
        assert str(repository.path) in exc_info.value.message

    @pytest.mark.parametrize(
        "content",
        [
            "not json",
            '{"subscribed_shows": []}',
            '{"version": 1, "subscribed_shows": [{"id": 1}], "unwatched_episodes": []}',
        ],
    )
    def test_corrupt_file_is_a_decode_error(
        self, repository: JsonFileProgressRepository, content: str
    ) -> None:
        repository.path.parent.mkdir(parents=True)
        repository.path.write_text(content, encoding="utf-8")

        with pytest.raises(UserDataDecodeError):
            repository.load()

    def test_unreadable_path_is_a_read_error(self, tmp_path: Path) -> None:
        repository = JsonFileProgressRepository(tmp_path)

        with pytest.raises(UserDataReadError):
            repository.load()


class TestSave:
    def test_round_trip(
        self, repository: JsonFileProgressRepository, store: ProgressStore
    ) -> None:
        store.mark_as_watched(THE_ORVILLE_ID, 1, 3)
        store.mark_as_watched(THE_ORVILLE_ID)

        repository.save(store)
        loaded = repository.load()

        assert loaded.subscribed_shows == store.subscribed_shows
        assert [s.model_dump() for s in loaded.subscribed_shows] == [
            s.model_dump() for s in store.subscribed_shows
        ]
        assert [e.model_dump() for e in loaded.unwatched_episodes] == [
            e.model_dump() for e in store.unwatched_episodes
        ]
        assert loaded.watch_pointer(THE_ORVILLE_ID) == (1, 1)

    def test_round_trip_empty_store(
        self, repository: JsonFileProgressRepository
    ) -> None:
        repository.save(ProgressStore())

        document = json.loads(repository.path.read_text(encoding="utf-8"))
        assert document == {
            "version": CURRENT_VERSION,
            "subscribed_shows": [],
            "unwatched_episodes": [],
        }
        assert repository.load().subscribed_shows == []

    def test_temporary_file_is_replaced(
        self, repository: JsonFileProgressRepository, store: ProgressStore
    ) -> None:
        repository.save(store)
        repository.save(store)

        assert repository.path.exists()
        assert not repository.tmp_path.exists()
        assert list(repository.path.parent.iterdir()) == [repository.path]

    def test_write_failure(self, tmp_path: Path, store: ProgressStore) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        repository = JsonFileProgressRepository(blocker / "user_data.json")

        with pytest.raises(UserDataWriteError):
            repository.save(store)
