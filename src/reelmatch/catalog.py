"""
JSON-backed loading of items, ratings and preferences for the CLI.

Records may use the camelCase keys written by the web front end or
snake_case keys; see the ``from_dict`` constructors in ``models``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from .models import Item, Rating, UserPreferences

logger = logging.getLogger(__name__)


def _read_records(path: Path) -> list[dict[str, Any]]:
    """Read a JSON array of objects; a missing file counts as empty."""
    if not path.exists():
        logger.warning(f"{path} not found; treating as empty")
        return []
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse {path}: {e}") from e
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON array, got {type(payload).__name__}")
    return payload


def load_items(path: str | Path) -> list[Item]:
    return [Item.from_dict(record) for record in _read_records(Path(path))]


def load_ratings(path: str | Path) -> list[Rating]:
    return [Rating.from_dict(record) for record in _read_records(Path(path))]


def load_preferences(path: str | Path) -> UserPreferences | None:
    path = Path(path)
    if not path.exists():
        logger.debug(f"No preferences at {path}")
        return None
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse {path}: {e}") from e
    return UserPreferences.from_dict(payload)


def with_rating_stats(items: list[Item], ratings: list[Rating]) -> list[Item]:
    """
    Return copies of ``items`` with average rating and count taken from ``ratings``.

    Items nobody rated are returned unchanged.
    """
    totals: dict[str, int] = {}
    counts: dict[str, int] = {}
    for rating in ratings:
        totals[rating.item_id] = totals.get(rating.item_id, 0) + rating.value
        counts[rating.item_id] = counts.get(rating.item_id, 0) + 1

    updated = []
    for item in items:
        n = counts.get(item.id)
        if not n:
            updated.append(item)
            continue
        updated.append(replace(item, average_rating=totals[item.id] / n, ratings_count=n))
    return updated
