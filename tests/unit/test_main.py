"""Command line argument parsing tests."""

import pytest

from bingers.main import _parse_args


def test_add_with_last_watched() -> None:
    args = _parse_args(["add", "the orville", "--pick", "1", "--last-watched", "1", "12"])

    assert args.command == "add"
    assert args.tv_show == "the orville"
    assert args.pick == 1
    assert args.last_watched == [1, 12]


def test_watched_defaults_to_next_episode() -> None:
    args = _parse_args(["watched", "orville"])

    assert args.season is None
    assert args.episode is None


def test_watched_episode_requires_season() -> None:
    with pytest.raises(SystemExit):
        _parse_args(["watched", "orville", "--episode", "2"])


def test_update_force() -> None:
    assert _parse_args(["update", "-f"]).force is True
    assert _parse_args(["list"]).shows is False


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        _parse_args([])


def test_verbose_flag() -> None:
    assert _parse_args(["-v", "list"]).verbose is True
    assert _parse_args(["list"]).verbose is False
