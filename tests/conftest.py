"""Shared test fixtures for desmos-text."""

import json
from pathlib import Path
from typing import Any, Callable

import pytest


def _state(*items: dict[str, Any], **graph: Any) -> dict[str, Any]:
    viewport = {"xmin": -10, "xmax": 10, "ymin": -5, "ymax": 5}
    return {
        "version": 8,
        "graph": {"viewport": viewport, **graph},
        "expressions": {"list": list(items)},
    }


@pytest.fixture
def make_state() -> Callable[..., dict[str, Any]]:
    """Return a builder for version 8 graph states with a fixed viewport."""
    return _state


@pytest.fixture
def sample_state() -> dict[str, Any]:
    """Return a graph state exercising settings, folders and most item kinds."""
    return {
        "version": 8,
        "randomSeed": "abc",
        "graph": {
            "viewport": {"xmin": -10, "xmax": 10, "ymin": -5, "ymax": 5},
            "xAxisStep": 2,
            "showYAxis": False,
        },
        "expressions": {
            "list": [
                {"type": "folder", "id": "f1", "title": "Lines"},
                {
                    "type": "expression",
                    "id": "1",
                    "folderId": "f1",
                    "latex": "y=x",
                    "color": "#c74440",
                },
                {
                    "type": "expression",
                    "id": "2",
                    "folderId": "f1",
                    "latex": "y=2x",
                    "lineStyle": "DASHED",
                },
                {"type": "text", "id": "3", "text": "A note"},
                {
                    "type": "table",
                    "id": "4",
                    "columns": [
                        {"values": ["1", "2"], "latex": "x_1"},
                        {"values": ["3", "4"], "latex": "y_1", "hidden": True},
                    ],
                },
            ]
        },
    }


@pytest.fixture
def sample_state_json(sample_state: dict[str, Any]) -> str:
    return json.dumps(sample_state)


@pytest.fixture
def sample_state_file(tmp_path: Path, sample_state_json: str) -> Path:
    """Write the sample state to a file and return the path."""
    path = tmp_path / "graph.json"
    path.write_text(sample_state_json)
    return path
