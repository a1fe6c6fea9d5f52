"""Progress repository port."""

from typing import Protocol

from bingers.modules.progress.domain.store import ProgressStore


class ProgressRepository(Protocol):
    """Loads and saves a whole ProgressStore.

    ``load`` returns an empty store when nothing has been saved yet. ``save``
    must never leave a half-written document behind.
    """

    def load(self) -> ProgressStore: ...

    def save(self, store: ProgressStore) -> None: ...
