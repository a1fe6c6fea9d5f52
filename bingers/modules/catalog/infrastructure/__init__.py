"""Catalog client infrastructure."""

from bingers.modules.catalog.infrastructure.mappers import EpisodeMapper, ShowMapper
from bingers.modules.catalog.infrastructure.tvmaze_client import TvMazeCatalogClient

__all__ = [
    "EpisodeMapper",
    "ShowMapper",
    "TvMazeCatalogClient",
]
