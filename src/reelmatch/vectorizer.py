"""
Feature vectors for content-based scoring.

Vector layout for a vocabulary with G genres, M moods and T tags:

    [genre_0 .. genre_G-1, mood_0 .. mood_M-1, tag_0 .. tag_T-1, year, rating]

Categorical slots are binary. The year slot maps 1900-2030 onto 0-1 and the
rating slot maps 0-5 onto 0-1; missing values become a neutral 0.5 so sparse
metadata is not punished as if it were the worst possible value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .config import NEUTRAL_SLOT_VALUE, RATING_SCALE, YEAR_BASE, YEAR_SPAN
from .models import Item


@dataclass(frozen=True)
class FeatureVocabulary:
    """Sorted, duplicate-free attribute values that fix vector slot meaning."""

    genres: tuple[str, ...] = ()
    moods: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()

    @property
    def size(self) -> int:
        """Length of vectors built against this vocabulary."""
        return len(self.genres) + len(self.moods) + len(self.tags) + 2


def _sorted_union(items: Iterable[Item], attr: str) -> tuple[str, ...]:
    values: set[str] = set()
    for item in items:
        values.update(getattr(item, attr))
    return tuple(sorted(values))


def build_vocabulary(items: Iterable[Item]) -> FeatureVocabulary:
    items = list(items)
    return FeatureVocabulary(
        genres=_sorted_union(items, "genres"),
        moods=_sorted_union(items, "moods"),
        tags=_sorted_union(items, "tags"),
    )


def all_genres(items: Iterable[Item]) -> list[str]:
    return list(_sorted_union(items, "genres"))


def all_moods(items: Iterable[Item]) -> list[str]:
    return list(_sorted_union(items, "moods"))


def all_tags(items: Iterable[Item]) -> list[str]:
    return list(_sorted_union(items, "tags"))


def normalized_year(item: Item) -> float:
    # A year of 0 is as good as missing
    if item.year:
        return (item.year - YEAR_BASE) / YEAR_SPAN
    return NEUTRAL_SLOT_VALUE


def normalized_rating(item: Item) -> float:
    if item.average_rating:
        return item.average_rating / RATING_SCALE
    return NEUTRAL_SLOT_VALUE


def vectorize(item: Item, vocabulary: FeatureVocabulary) -> np.ndarray:
    """Encode an item as a fixed-length vector over ``vocabulary``."""
    genres = set(item.genres)
    moods = set(item.moods)
    tags = set(item.tags)

    vector = np.empty(vocabulary.size, dtype=np.float64)
    pos = 0
    for values, present in (
        (vocabulary.genres, genres),
        (vocabulary.moods, moods),
        (vocabulary.tags, tags),
    ):
        for value in values:
            vector[pos] = 1.0 if value in present else 0.0
            pos += 1

    vector[pos] = normalized_year(item)
    vector[pos + 1] = normalized_rating(item)
    return vector
