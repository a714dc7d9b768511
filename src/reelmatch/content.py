"""
Content-based ranking.

Scores come from cosine similarity between feature vectors; reasons are
derived separately from raw attribute overlap and never affect the score.
"""

from __future__ import annotations

import logging

import numpy as np

from .config import (
    HIGHLY_RATED_THRESHOLD,
    PREFERENCE_MATCH_WEIGHT,
    PREFERENCE_RATING_TARGET,
    PREFERENCE_TAG_WEIGHT,
    PREFERENCE_YEAR_TARGET,
    SIMILAR_ERA_YEARS,
)
from .models import Item, Recommendation, UserPreferences
from .similarity import cosine_similarity
from .vectorizer import FeatureVocabulary, build_vocabulary, vectorize

logger = logging.getLogger(__name__)


def _rank(recs: list[Recommendation], count: int) -> list[Recommendation]:
    # sorted() is stable, so equal scores keep candidate order
    return sorted(recs, key=lambda r: -r.score)[:count]


def _similarity_reasons(item: Item, target: Item) -> list[str]:
    reasons = []

    common_genres = [g for g in item.genres if g in target.genres]
    if common_genres:
        reasons.append(f"Similar genres: {', '.join(common_genres)}")

    common_moods = [m for m in item.moods if m in target.moods]
    if common_moods:
        reasons.append(f"Similar mood: {', '.join(common_moods)}")

    if item.director and target.director and item.director == target.director:
        reasons.append(f"Same director: {item.director}")

    if item.year and target.year and abs(item.year - target.year) <= SIMILAR_ERA_YEARS:
        reasons.append(f"Similar era ({item.year})")

    return reasons


def rank_similar_to(target: Item, candidates: list[Item], count: int) -> list[Recommendation]:
    """
    Rank ``candidates`` by feature similarity to ``target``.

    The vocabulary is built from the candidates alone. The target never
    appears in its own results.
    """
    if count <= 0:
        return []

    vocabulary = build_vocabulary(candidates)
    target_vector = vectorize(target, vocabulary)

    recs = []
    for item in candidates:
        if item.id == target.id:
            continue
        score = cosine_similarity(target_vector, vectorize(item, vocabulary))
        recs.append(Recommendation(item=item, score=score, reasons=_similarity_reasons(item, target)))

    logger.debug(f"Scored {len(recs)} candidates against '{target.id}'")
    return _rank(recs, count)


def preference_vector(prefs: UserPreferences, vocabulary: FeatureVocabulary) -> np.ndarray:
    """
    Build the "ideal item" vector for a user.

    Favorite genres and moods get double the weight of a binary item slot so
    cosine similarity leans toward those matches; tags are held neutral.
    """
    favorite_genres = set(prefs.favorite_genres)
    favorite_moods = set(prefs.favorite_moods)

    slots = [PREFERENCE_MATCH_WEIGHT if g in favorite_genres else 0.0 for g in vocabulary.genres]
    slots += [PREFERENCE_MATCH_WEIGHT if m in favorite_moods else 0.0 for m in vocabulary.moods]
    slots += [PREFERENCE_TAG_WEIGHT] * len(vocabulary.tags)
    slots += [PREFERENCE_YEAR_TARGET, PREFERENCE_RATING_TARGET]
    return np.array(slots, dtype=np.float64)


def _preference_reasons(item: Item, prefs: UserPreferences) -> list[str]:
    reasons = []

    matched_genres = [g for g in item.genres if g in prefs.favorite_genres]
    if matched_genres:
        reasons.append(f"Matches your favorite genres: {', '.join(matched_genres)}")

    matched_moods = [m for m in item.moods if m in prefs.favorite_moods]
    if matched_moods:
        reasons.append(f"Matches your preferred mood: {', '.join(matched_moods)}")

    if item.average_rating and item.average_rating >= HIGHLY_RATED_THRESHOLD:
        reasons.append(f"Highly rated ({item.average_rating:.1f})")

    return reasons


def rank_by_preferences(prefs: UserPreferences, candidates: list[Item], count: int) -> list[Recommendation]:
    """Rank ``candidates`` by similarity to the user's ideal preference vector."""
    if count <= 0:
        return []

    vocabulary = build_vocabulary(candidates)
    ideal = preference_vector(prefs, vocabulary)

    recs = [
        Recommendation(
            item=item,
            score=cosine_similarity(ideal, vectorize(item, vocabulary)),
            reasons=_preference_reasons(item, prefs),
        )
        for item in candidates
    ]
    return _rank(recs, count)
