"""
Candidate filtering.

Each rule narrows the candidate list independently; rules are AND-combined,
so their order only matters for logging.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .models import Item, RecommendationFilter

logger = logging.getLogger(__name__)

# A rule returns None when its filter field is unset, otherwise a per-item predicate
FilterRule = Callable[[RecommendationFilter], Optional[Callable[[Item], bool]]]


def _any_of(values: list[str] | None, attr: str) -> Optional[Callable[[Item], bool]]:
    if not values:
        return None
    wanted = set(values)
    return lambda item: any(v in wanted for v in getattr(item, attr))


def _genre_rule(f: RecommendationFilter) -> Optional[Callable[[Item], bool]]:
    return _any_of(f.genres, "genres")


def _mood_rule(f: RecommendationFilter) -> Optional[Callable[[Item], bool]]:
    return _any_of(f.moods, "moods")


def _tag_rule(f: RecommendationFilter) -> Optional[Callable[[Item], bool]]:
    return _any_of(f.tags, "tags")


def _min_rating_rule(f: RecommendationFilter) -> Optional[Callable[[Item], bool]]:
    """Unrated items never pass a minimum rating."""
    if not f.min_rating:
        return None
    threshold = f.min_rating
    return lambda item: item.average_rating is not None and item.average_rating >= threshold


def _year_range_rule(f: RecommendationFilter) -> Optional[Callable[[Item], bool]]:
    """Any year range, even an open one, drops items without a year."""
    if f.year_range is None:
        return None
    low, high = f.year_range.min, f.year_range.max

    def _predicate(item: Item) -> bool:
        if not item.year:
            return False
        if low is not None and item.year < low:
            return False
        if high is not None and item.year > high:
            return False
        return True

    return _predicate


DEFAULT_FILTER_RULES: list[FilterRule] = [
    _genre_rule,
    _mood_rule,
    _tag_rule,
    _min_rating_rule,
    _year_range_rule,
]


def apply_filter(items: list[Item], f: RecommendationFilter | None) -> list[Item]:
    """Return the items that satisfy every constraint set on ``f``."""
    candidates = list(items)
    if f is None:
        return candidates

    for rule in DEFAULT_FILTER_RULES:
        predicate = rule(f)
        if predicate is None:
            continue
        before = len(candidates)
        candidates = [item for item in candidates if predicate(item)]
        logger.debug(f"{rule.__name__.strip('_')}: {before} -> {len(candidates)} candidates")

    return candidates
