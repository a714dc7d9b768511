"""
Data model consumed and produced by the recommendation engine.

Items, ratings and preferences are treated as read-only inputs; every
ranking function returns freshly built Recommendation objects.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _pick(payload: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, accepting both camelCase and snake_case records."""
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def to_naive_utc(dt: datetime) -> datetime:
    """Normalize a datetime to naive UTC so aware and naive values compare safely."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: str | datetime) -> datetime:
    """
    Parse an ISO-8601 timestamp to a naive UTC datetime.

    A trailing ``Z`` (as emitted by JavaScript's ``toISOString``) is accepted.
    """
    if isinstance(value, datetime):
        return to_naive_utc(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_naive_utc(datetime.fromisoformat(text))


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class Item:
    id: str
    title: str
    year: int | None = None
    average_rating: float | None = None
    genres: tuple[str, ...] = ()
    moods: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    director: str | None = None
    ratings_count: int | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Item":
        if "id" not in payload:
            raise ValueError(f"Item record without id: {payload!r}")
        year = _pick(payload, "year")
        avg = _pick(payload, "averageRating", "average_rating")
        count = _pick(payload, "ratingsCount", "ratings_count")
        return cls(
            id=str(payload["id"]),
            title=str(_pick(payload, "title", default=payload["id"])),
            year=int(year) if year is not None else None,
            average_rating=float(avg) if avg is not None else None,
            genres=tuple(_pick(payload, "genres", default=())),
            moods=tuple(_pick(payload, "moods", default=())),
            tags=tuple(_pick(payload, "tags", default=())),
            director=_pick(payload, "director"),
            ratings_count=int(count) if count is not None else None,
        )


@dataclass(frozen=True)
class Rating:
    user_id: str
    item_id: str
    value: int
    created_at: datetime

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Rating":
        try:
            user_id = _pick(payload, "userId", "user_id")
            item_id = _pick(payload, "itemId", "item_id")
            value = int(_pick(payload, "rating", "value"))
            created = _pick(payload, "createdAt", "created_at")
        except TypeError as exc:
            raise ValueError(f"Incomplete rating record: {payload!r}") from exc
        if user_id is None or item_id is None or created is None:
            raise ValueError(f"Incomplete rating record: {payload!r}")
        if not 1 <= value <= 5:
            raise ValueError(f"Rating value must be between 1 and 5, got {value}")
        return cls(
            user_id=str(user_id),
            item_id=str(item_id),
            value=value,
            created_at=parse_timestamp(created),
        )


@dataclass
class UserPreferences:
    user_id: str
    favorite_genres: list[str] = field(default_factory=list)
    favorite_moods: list[str] = field(default_factory=list)
    ratings: list[Rating] = field(default_factory=list)

    @property
    def has_taste(self) -> bool:
        """True when at least one favorite genre or mood is set."""
        return bool(self.favorite_genres or self.favorite_moods)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "UserPreferences":
        return cls(
            user_id=str(_pick(payload, "userId", "user_id", default="")),
            favorite_genres=list(_pick(payload, "favoriteGenres", "favorite_genres", default=[])),
            favorite_moods=list(_pick(payload, "favoriteMoods", "favorite_moods", default=[])),
            ratings=[Rating.from_dict(r) for r in _pick(payload, "ratings", default=[])],
        )


@dataclass(frozen=True)
class YearRange:
    min: int | None = None
    max: int | None = None


@dataclass
class RecommendationFilter:
    """Optional constraints; a field left as None does not narrow the candidates."""

    genres: list[str] | None = None
    moods: list[str] | None = None
    tags: list[str] | None = None
    min_rating: float | None = None
    year_range: YearRange | None = None
    similar_to_item_id: str | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "RecommendationFilter":
        years = _pick(payload, "yearRange", "year_range")
        min_rating = _pick(payload, "minRating", "min_rating")
        return cls(
            genres=_pick(payload, "genres"),
            moods=_pick(payload, "moods"),
            tags=_pick(payload, "tags"),
            min_rating=float(min_rating) if min_rating is not None else None,
            year_range=YearRange(min=years.get("min"), max=years.get("max")) if years else None,
            similar_to_item_id=_pick(payload, "similarToItemId", "similar_to_item_id"),
        )


@dataclass
class Recommendation:
    item: Item
    score: float
    reasons: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not math.isfinite(self.score):
            self.score = 0.0
        self.reasons = list(dict.fromkeys(self.reasons))  # dedupe preserving order

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.item.id,
            "title": self.item.title,
            "year": self.item.year,
            "score": round(self.score, 4),
            "reasons": self.reasons,
            "genres": list(self.item.genres),
            "moods": list(self.item.moods),
            "averageRating": self.item.average_rating,
        }
