"""
User-based collaborative filtering.

Neighbors are found with a sparse user-item matrix: one sparse product tells
which users share at least one rated item with the current user, and only
those users are scored with cosine similarity over the shared items.
"""

from __future__ import annotations

import logging
from collections import defaultdict

import numpy as np
from scipy.sparse import csr_matrix

from .config import MAX_NEIGHBORS, NEIGHBOR_MIN_RATING
from .models import Item, Rating, Recommendation
from .similarity import cosine_similarity

logger = logging.getLogger(__name__)

NEIGHBOR_REASON = "Recommended by similar users"


def _group_by_user(ratings: list[Rating], exclude_user: str) -> dict[str, dict[str, int]]:
    """Map user -> {item_id: value}, keeping first-seen user order; a repeated pair keeps the last value."""
    grouped: dict[str, dict[str, int]] = {}
    for rating in ratings:
        if rating.user_id == exclude_user:
            continue
        grouped.setdefault(rating.user_id, {})[rating.item_id] = rating.value
    return grouped


def _overlapping_users(
    target: dict[str, int],
    others: dict[str, dict[str, int]],
) -> list[str]:
    """Return users who rated at least one item the target rated, in input order."""
    usernames = list(others.keys())
    item_index: dict[str, int] = {}
    for item_id in target:
        item_index.setdefault(item_id, len(item_index))
    for user_ratings in others.values():
        for item_id in user_ratings:
            item_index.setdefault(item_id, len(item_index))

    row_indices = []
    col_indices = []
    for row, username in enumerate(usernames):
        for item_id in others[username]:
            row_indices.append(row)
            col_indices.append(item_index[item_id])

    # Binary "has rated" matrix (users × items)
    rated = csr_matrix(
        (np.ones(len(row_indices), dtype=np.float32), (row_indices, col_indices)),
        shape=(len(usernames), len(item_index)),
    )
    target_mask = np.zeros(len(item_index), dtype=np.float32)
    for item_id in target:
        target_mask[item_index[item_id]] = 1.0

    overlap_counts = rated @ target_mask
    return [username for username, n in zip(usernames, overlap_counts) if n > 0]


def user_similarity(ratings_a: dict[str, int], ratings_b: dict[str, int]) -> float:
    """Cosine similarity over the items both users rated; 0.0 without overlap."""
    common = [item_id for item_id in ratings_a if item_id in ratings_b]
    if not common:
        return 0.0
    return cosine_similarity(
        [ratings_a[item_id] for item_id in common],
        [ratings_b[item_id] for item_id in common],
    )


def find_neighbors(
    current_user_ratings: list[Rating],
    all_ratings: list[Rating],
    k: int = MAX_NEIGHBORS,
) -> list[tuple[str, float, dict[str, int]]]:
    """
    Find the ``k`` most similar users with positive similarity.

    Returns (user_id, similarity, ratings) tuples sorted by descending
    similarity; ties keep the order users first appear in ``all_ratings``.
    """
    if not current_user_ratings:
        return []

    current_user_id = current_user_ratings[0].user_id
    target = {r.item_id: r.value for r in current_user_ratings}
    others = _group_by_user(all_ratings, exclude_user=current_user_id)
    if not others:
        return []

    neighbors = []
    for username in _overlapping_users(target, others):
        similarity = user_similarity(target, others[username])
        if similarity > 0:
            neighbors.append((username, similarity, others[username]))

    neighbors.sort(key=lambda x: -x[1])
    logger.debug(f"Found {len(neighbors)} users similar to '{current_user_id}', keeping {min(k, len(neighbors))}")
    return neighbors[:k]


def rank_for_user(
    current_user_ratings: list[Rating],
    all_ratings: list[Rating],
    candidates: list[Item],
    count: int,
    max_neighbors: int = MAX_NEIGHBORS,
) -> list[Recommendation]:
    """
    Recommend items that similar users rated highly.

    Each item's score is the similarity-weighted average of the qualifying
    neighbor ratings (value >= 4) it received. Items the current user already
    rated, and ids missing from ``candidates``, are left out.
    """
    if not current_user_ratings or count <= 0:
        return []

    neighbors = find_neighbors(current_user_ratings, all_ratings, k=max_neighbors)
    if not neighbors:
        return []

    seen = {r.item_id for r in current_user_ratings}
    totals: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)

    for _, similarity, ratings in neighbors:
        for item_id, value in ratings.items():
            if item_id in seen or value < NEIGHBOR_MIN_RATING:
                continue
            totals[item_id] += value * similarity
            counts[item_id] += 1

    items_by_id: dict[str, Item] = {}
    for item in candidates:
        items_by_id.setdefault(item.id, item)

    results = []
    for item_id, total in totals.items():
        item = items_by_id.get(item_id)
        if item is None:
            continue
        results.append(Recommendation(item=item, score=total / counts[item_id], reasons=[NEIGHBOR_REASON]))

    results.sort(key=lambda r: -r.score)
    return results[:count]
