"""Logging configuration tests."""

import json
from typing import Any

import pytest
import structlog

from bingers.core.infrastructure.logging import _business_processors, _log_level_number


def _render(environment: str) -> Any:
    event_dict: Any = {"event": "show_subscribed", "show_id": 20263}
    for processor in _business_processors(environment, colors=False):
        event_dict = processor(None, "info", event_dict)
    return event_dict


class TestLevels:
    @pytest.mark.parametrize(
        ("level_name", "number"),
        [("DEBUG", 10), ("INFO", 20), ("SUCCESS", 25), ("WARNING", 30), ("CRITICAL", 50)],
    )
    def test_known_levels(self, level_name: str, number: int) -> None:
        assert _log_level_number(level_name) == number

    def test_unknown_level_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            _log_level_number("CHATTY")


class TestBusinessProcessors:
    def test_local_renders_console_lines(self) -> None:
        processors = _business_processors("local", colors=False)
        rendered = _render("local")

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert "show_subscribed" in rendered
        assert "show_id=20263" in rendered

    def test_production_renders_json(self) -> None:
        document = json.loads(_render("production"))

        assert document["event"] == "show_subscribed"
        assert document["show_id"] == 20263
        assert document["level"] == "info"
        assert "timestamp" in document
        assert set(document) == {"event", "show_id", "level", "timestamp"}
