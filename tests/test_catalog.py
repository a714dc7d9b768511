import json

import pytest

from conftest import make_item, make_rating
from reelmatch.catalog import load_items, load_preferences, load_ratings, with_rating_stats


def test_load_items_and_ratings(tmp_path):
    (tmp_path / "items.json").write_text(json.dumps([
        {"id": "m1", "title": "Alien", "year": 1979, "genres": ["Horror", "Sci-Fi"], "moods": [], "tags": []},
    ]))
    (tmp_path / "ratings.json").write_text(json.dumps([
        {"userId": "u1", "itemId": "m1", "rating": 5, "createdAt": "2026-03-01T00:00:00Z"},
    ]))

    items = load_items(tmp_path / "items.json")
    ratings = load_ratings(tmp_path / "ratings.json")

    assert items[0].genres == ("Horror", "Sci-Fi")
    assert ratings[0].value == 5


def test_missing_files_are_empty(tmp_path):
    assert load_items(tmp_path / "nope.json") == []
    assert load_ratings(tmp_path / "nope.json") == []
    assert load_preferences(tmp_path / "nope.json") is None


def test_malformed_files_raise(tmp_path):
    broken = tmp_path / "items.json"
    broken.write_text("{not json")
    with pytest.raises(ValueError):
        load_items(broken)

    not_a_list = tmp_path / "ratings.json"
    not_a_list.write_text(json.dumps({"ratings": []}))
    with pytest.raises(ValueError):
        load_ratings(not_a_list)


def test_load_preferences(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text(json.dumps({"userId": "u1", "favoriteGenres": ["Drama"], "favoriteMoods": ["dark"]}))

    prefs = load_preferences(path)

    assert prefs.user_id == "u1"
    assert prefs.favorite_moods == ["dark"]
    assert prefs.ratings == []


def test_with_rating_stats_recomputes_averages():
    items = [make_item("a", rating=1.0), make_item("b", rating=4.0)]
    ratings = [make_rating("u1", "a", 5), make_rating("u2", "a", 4), make_rating("u1", "ghost", 1)]

    updated = with_rating_stats(items, ratings)

    assert updated[0].average_rating == pytest.approx(4.5)
    assert updated[0].ratings_count == 2
    assert updated[1] is items[1]
    assert items[0].average_rating == 1.0
