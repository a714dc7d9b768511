import importlib
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Ensure the package under test is importable without installation
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from reelmatch.models import Item, Rating  # noqa: E402

NOW = datetime(2026, 6, 1, 12, 0, 0)


def make_item(item_id: str, genres=None, moods=None, tags=None, year=None, rating=None, director=None):
    return Item(
        id=item_id,
        title=item_id.replace("-", " ").title(),
        year=year,
        average_rating=rating,
        genres=tuple(genres or ()),
        moods=tuple(moods or ()),
        tags=tuple(tags or ()),
        director=director,
    )


def make_rating(user_id: str, item_id: str, value: int, days_ago: float = 1.0):
    return Rating(user_id=user_id, item_id=item_id, value=value, created_at=NOW - timedelta(days=days_ago))


@pytest.fixture
def fresh_config(monkeypatch, tmp_path):
    """
    Reload config with a temporary data directory to keep tests isolated.
    """
    monkeypatch.setenv("REELMATCH_DATA_DIR", str(tmp_path))
    import reelmatch.config as config

    importlib.reload(config)
    yield config
    monkeypatch.undo()
    importlib.reload(config)


@pytest.fixture
def era_catalog():
    """Two close dramas and an older comedy."""
    return [
        make_item("a", genres=["Drama"], year=2000, rating=4.5),
        make_item("b", genres=["Drama"], year=2001, rating=4.0),
        make_item("c", genres=["Comedy"], year=1990, rating=3.0),
    ]
