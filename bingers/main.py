"""bingers - manage your TV shows from the command line.

Usage:
    bingers add "the orville" [--pick 0] [--last-watched 1 12]
    bingers list [--shows]
    bingers watched orville [--season 1 [--episode 2]]
    bingers remove orville
    bingers update [--force]

Data provided by TVmaze.com
"""

import argparse
import asyncio
import sys

from bingers.core.domain.exceptions import DomainException
from bingers.core.infrastructure.logging import setup_logging
from bingers.modules.catalog.infrastructure import TvMazeCatalogClient
from bingers.modules.progress.application.services import TrackingService
from bingers.modules.progress.infrastructure.file_repository import (
    JsonFileProgressRepository,
)
from bingers.modules.shows.domain.entities import Show


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bingers",
        description="Manage your TV shows from the command line",
        epilog="Data provided by TVmaze.com",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Add TV show")
    add.add_argument("tv_show", metavar="SHOW")
    add.add_argument("--pick", type=int, default=None, help="Index of the search match to add")
    add.add_argument(
        "--last-watched",
        type=int,
        nargs=2,
        metavar=("SEASON", "EPISODE"),
        default=None,
        help="Last episode already watched",
    )
    add.add_argument("--all", action="store_true", help="Include ended and non-English shows")

    list_ = subparsers.add_parser("list", help="List TV shows or episodes (default)")
    list_.add_argument("-s", "--shows", action="store_true", help="List shows")

    remove = subparsers.add_parser("remove", help="Remove TV show")
    remove.add_argument("tv_show", metavar="SHOW")

    watched = subparsers.add_parser(
        "watched",
        help="Mark episode as watched",
        description=(
            "Mark the next unwatched episode as watched. Use --season to mark "
            "a whole season, --season and --episode for one episode."
        ),
    )
    watched.add_argument("tv_show", metavar="SHOW")
    watched.add_argument("-s", "--season", type=int, default=None)
    watched.add_argument("-e", "--episode", type=int, default=None)

    update = subparsers.add_parser("update", help="Update TV shows and episodes")
    update.add_argument("-f", "--force", action="store_true", help="Force update of all shows")

    args = parser.parse_args(argv)
    if args.command == "watched" and args.episode is not None and args.season is None:
        parser.error("--episode requires --season")
    return args


def _resolve_show(service: TrackingService, name: str) -> Show | None:
    matches = service.find_shows(name)
    if len(matches) == 1:
        return matches[0]
    if not matches:
        print(f'No subscribed show matches "{name}"')
    else:
        print(f'"{name}" is ambiguous:')
        for show in matches:
            print(f"  {show}")
    return None


async def _add(service: TrackingService, args: argparse.Namespace) -> int:
    matches = await service.search(
        args.tv_show,
        running_only=not args.all,
        language=None if args.all else "English",
    )
    if not matches:
        print(f'No shows found for "{args.tv_show}"')
        return 1

    if args.pick is None and len(matches) > 1:
        for index, match in enumerate(matches):
            print(f"[{index}] {match.show}")
        print("Run again with --pick INDEX to choose a show")
        return 1

    pick = args.pick or 0
    if not 0 <= pick < len(matches):
        print(f"--pick must be between 0 and {len(matches) - 1}")
        return 1

    last_watched = tuple(args.last_watched) if args.last_watched else None
    show = await service.subscribe(matches[pick].show.id, last_watched)
    print(f"Added {show}")
    return 0


def _list(service: TrackingService, args: argparse.Namespace) -> int:
    store = service.store
    if args.shows:
        for show in store.subscribed_shows_by_most_recent():
            print(f"{show.name} ({show.network_name}, {show.status})")
        return 0

    names = {show.id: show.name for show in store.subscribed_shows}
    for episode in store.unwatched_episodes_oldest_first():
        if episode.watched:
            continue
        aired = episode.airstamp.date().isoformat() if episode.airstamp else "TBA"
        print(f"{names.get(episode.show_id, episode.show_id)} {episode} ({aired})")
    return 0


def _remove(service: TrackingService, args: argparse.Namespace) -> int:
    show = _resolve_show(service, args.tv_show)
    if show is None:
        return 1
    service.unsubscribe(show.id)
    print(f"Removed {show}")
    return 0


def _watched(service: TrackingService, args: argparse.Namespace) -> int:
    show = _resolve_show(service, args.tv_show)
    if show is None:
        return 1
    marked = service.mark_as_watched(show.id, args.season, args.episode)
    if marked is None:
        print(f"Nothing to mark for {show.name}")
        return 1
    print(f"{show.name}: watched up to S{marked[0]:02d}E{marked[1]:02d}")
    return 0


async def _update(service: TrackingService, args: argparse.Namespace) -> int:
    result = await service.sync(force=args.force)
    names = {show.id: show.name for show in service.store.subscribed_shows}
    for episode in result.new_episodes:
        print(f"New: {names.get(episode.show_id, episode.show_id)} {episode}")
    print(
        f"Checked {result.checked_shows} shows, "
        f"{len(result.new_episodes)} new episodes"
    )
    return 0


async def _run(args: argparse.Namespace) -> int:
    async with TvMazeCatalogClient() as catalog:
        service = TrackingService(JsonFileProgressRepository(), catalog)
        if args.command == "add":
            return await _add(service, args)
        if args.command == "list":
            return _list(service, args)
        if args.command == "remove":
            return _remove(service, args)
        if args.command == "watched":
            return _watched(service, args)
        return await _update(service, args)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)
    try:
        return asyncio.run(_run(args))
    except DomainException as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
