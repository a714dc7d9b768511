"""
Hybrid recommendation entry points.

``recommend`` filters the catalog, gathers collaborative and content-based
candidates, tops the list up with popular items and merges duplicates.
``trending`` and ``top_rated`` are standalone popularity lenses.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from .collaborative import rank_for_user
from .config import (
    POPULAR_DEFAULT_SCORE,
    TOP_RATED_MIN_RATING,
    TRENDING_RECENT_WEIGHT,
    TRENDING_TOTAL_WEIGHT,
    TRENDING_WINDOW_DAYS,
)
from .content import rank_by_preferences, rank_similar_to
from .filters import apply_filter
from .models import Item, Rating, Recommendation, RecommendationFilter, UserPreferences, to_naive_utc, utc_now

logger = logging.getLogger(__name__)


def _rating_label(item: Item) -> str:
    return f"{item.average_rating:.1f}" if item.average_rating else "N/A"


def _popular_fill(candidates: list[Item], exclude: set[str], n: int) -> list[Recommendation]:
    """Highest-rated candidates not already recommended; unrated items rank as 0."""
    if n <= 0:
        return []
    remaining = [item for item in candidates if item.id not in exclude]
    remaining.sort(key=lambda item: -(item.average_rating or 0))
    return [
        Recommendation(
            item=item,
            score=item.average_rating or POPULAR_DEFAULT_SCORE,
            reasons=["Popular choice", f"Rating: {_rating_label(item)}"],
        )
        for item in remaining[:n]
    ]


def _merge_duplicates(recs: list[Recommendation]) -> list[Recommendation]:
    """
    Collapse repeated items into one entry.

    Each duplicate is averaged pairwise into the entry built so far, so with
    three sources the first two contribute a quarter each and the last a half.
    """
    merged: dict[str, Recommendation] = {}
    for rec in recs:
        existing = merged.get(rec.item.id)
        if existing is None:
            merged[rec.item.id] = Recommendation(item=rec.item, score=rec.score, reasons=list(rec.reasons))
            continue
        existing.score = (existing.score + rec.score) / 2
        existing.reasons = list(dict.fromkeys(existing.reasons + rec.reasons))
    return list(merged.values())


def recommend(
    all_items: list[Item],
    all_ratings: list[Rating],
    user_preferences: UserPreferences | None,
    filter: RecommendationFilter | None = None,
    count: int = 10,
) -> list[Recommendation]:
    """
    Hybrid recommendations for a user.

    A filter naming a known ``similar_to_item_id`` short-circuits to plain
    item similarity over the filtered catalog.
    """
    if count <= 0:
        return []

    candidates = apply_filter(all_items, filter)

    if filter is not None and filter.similar_to_item_id:
        target = next((i for i in all_items if i.id == filter.similar_to_item_id), None)
        if target is not None:
            return rank_similar_to(target, candidates, count)
        logger.debug(f"similar_to_item_id '{filter.similar_to_item_id}' not in catalog; ignoring")

    if not candidates:
        return []

    recs: list[Recommendation] = []

    if user_preferences is not None and user_preferences.ratings:
        collaborative = rank_for_user(
            user_preferences.ratings,
            all_ratings,
            candidates,
            math.ceil(count / 2),
        )
        logger.debug(f"Collaborative: {len(collaborative)} recommendations")
        recs.extend(collaborative)

    if user_preferences is not None and user_preferences.has_taste:
        content = rank_by_preferences(user_preferences, candidates, count)
        logger.debug(f"Content-based: {len(content)} recommendations")
        recs.extend(content)

    if len(recs) < count:
        existing_ids = {r.item.id for r in recs}
        recs.extend(_popular_fill(candidates, existing_ids, count - len(recs)))

    merged = _merge_duplicates(recs)
    merged.sort(key=lambda r: -r.score)
    return merged[:count]


def trending(
    all_items: list[Item],
    all_ratings: list[Rating],
    count: int = 10,
    now: datetime | None = None,
) -> list[Recommendation]:
    """
    Rank items by recent and overall rating activity.

    score = recent_count * 0.7 + total_count * 0.3, where a rating is recent
    when it is at most TRENDING_WINDOW_DAYS old at ``now``. Items nobody rated
    never appear.
    """
    if count <= 0:
        return []

    now = to_naive_utc(now) if now is not None else utc_now()
    window = timedelta(days=TRENDING_WINDOW_DAYS)

    recent_counts: dict[str, int] = {}
    total_counts: dict[str, int] = {}
    for rating in all_ratings:
        total_counts[rating.item_id] = total_counts.get(rating.item_id, 0) + 1
        recent_counts.setdefault(rating.item_id, 0)
        if now - to_naive_utc(rating.created_at) <= window:
            recent_counts[rating.item_id] += 1

    items_by_id: dict[str, Item] = {}
    for item in all_items:
        items_by_id.setdefault(item.id, item)

    results = []
    for item_id, total in total_counts.items():
        item = items_by_id.get(item_id)
        if item is None:
            continue
        recent = recent_counts[item_id]
        if recent > 0:
            reasons = ["Trending now", f"{recent} recent ratings", f"{total} total ratings"]
        else:
            reasons = ["Popular", f"{total} total ratings"]
        results.append(Recommendation(
            item=item,
            score=recent * TRENDING_RECENT_WEIGHT + total * TRENDING_TOTAL_WEIGHT,
            reasons=reasons,
        ))

    results.sort(key=lambda r: -r.score)
    return results[:count]


def top_rated(
    all_items: list[Item],
    count: int = 10,
    min_rating: float = TOP_RATED_MIN_RATING,
) -> list[Recommendation]:
    """Items rated at least ``min_rating``, best first."""
    if count <= 0:
        return []
    rated = [i for i in all_items if i.average_rating and i.average_rating >= min_rating]
    rated.sort(key=lambda i: -i.average_rating)
    return [
        Recommendation(item=item, score=item.average_rating, reasons=[f"Rating: {item.average_rating:.1f}"])
        for item in rated[:count]
    ]
