import json
import logging
import sys

import pytest

from reelmatch import cli


@pytest.fixture
def data_dir(tmp_path):
    items = [
        {"id": "a", "title": "A", "year": 2000, "averageRating": 4.5, "genres": ["Drama"], "moods": [], "tags": []},
        {"id": "b", "title": "B", "year": 2001, "averageRating": 4.0, "genres": ["Drama"], "moods": [], "tags": []},
        {"id": "c", "title": "C", "year": 1990, "averageRating": 3.0, "genres": ["Comedy"], "moods": ["silly"],
         "tags": ["cult"]},
    ]
    ratings = [
        {"userId": "u1", "itemId": "c", "rating": 5, "createdAt": "2020-01-01T00:00:00Z"},
    ]
    (tmp_path / "items.json").write_text(json.dumps(items))
    (tmp_path / "ratings.json").write_text(json.dumps(ratings))
    return tmp_path


def _json_output(caplog):
    for record in caplog.records:
        message = record.getMessage()
        if message.startswith(("[", "{")):
            return json.loads(message)
    raise AssertionError("no JSON output logged")


def test_validate_item_id():
    assert cli._validate_item_id(" movie-42 ") == "movie-42"
    with pytest.raises(ValueError):
        cli._validate_item_id("../etc/passwd")
    with pytest.raises(ValueError):
        cli._validate_item_id("")


def test_main_dispatches_to_subcommand(monkeypatch):
    called = {}

    def fake_trending(args):
        called["command"] = args.command
        called["limit"] = args.limit

    monkeypatch.setattr(cli, "cmd_trending", fake_trending)
    monkeypatch.setattr(sys, "argv", ["prog", "trending", "--limit", "3"])

    cli.main()

    assert called == {"command": "trending", "limit": 3}


def test_cli_parses_recommend_filters(monkeypatch):
    captured = {}

    def fake_recommend(args):
        captured["filter"] = cli._build_filter(args)

    monkeypatch.setattr(cli, "cmd_recommend", fake_recommend)
    monkeypatch.setattr(
        sys,
        "argv",
        ["prog", "recommend", "--genres", "Horror", "Drama", "--min-rating", "3.5", "--min-year", "1980"],
    )

    cli.main()

    f = captured["filter"]
    assert f.genres == ["Horror", "Drama"]
    assert f.min_rating == 3.5
    assert f.year_range.min == 1980
    assert f.year_range.max is None


def test_similar_command_outputs_json(monkeypatch, caplog, data_dir):
    caplog.set_level(logging.INFO)
    monkeypatch.setattr(sys, "argv", ["prog", "--data-dir", str(data_dir), "similar", "a", "--format", "json"])

    cli.main()

    output = _json_output(caplog)
    assert [r["id"] for r in output] == ["b", "c"]
    assert output[0]["reasons"] == ["Similar genres: Drama", "Similar era (2001)"]


def test_similar_command_unknown_item(monkeypatch, caplog, data_dir):
    caplog.set_level(logging.INFO)
    monkeypatch.setattr(sys, "argv", ["prog", "--data-dir", str(data_dir), "similar", "zzz"])

    cli.main()

    assert "No item found with id 'zzz'" in caplog.text


def test_recommend_without_preferences_uses_popularity(monkeypatch, caplog, data_dir):
    caplog.set_level(logging.INFO)
    monkeypatch.setattr(sys, "argv", ["prog", "--data-dir", str(data_dir), "recommend", "--format", "json"])

    cli.main()

    output = _json_output(caplog)
    assert [r["id"] for r in output] == ["a", "b", "c"]
    assert output[0]["reasons"][0] == "Popular choice"


def test_trending_falls_back_to_highest_rated(monkeypatch, caplog, tmp_path):
    (tmp_path / "items.json").write_text(json.dumps([
        {"id": "low", "averageRating": 2.0}, {"id": "high", "averageRating": 4.9},
    ]))
    caplog.set_level(logging.INFO)
    monkeypatch.setattr(sys, "argv", ["prog", "--data-dir", str(tmp_path), "trending", "--format", "json"])

    cli.main()

    output = _json_output(caplog)
    assert [r["id"] for r in output] == ["high", "low"]
    assert output[0]["reasons"] == ["Highly rated"]


def test_recompute_stats_feeds_top_rated(monkeypatch, caplog, data_dir):
    caplog.set_level(logging.INFO)
    monkeypatch.setattr(
        sys, "argv",
        ["prog", "--data-dir", str(data_dir), "--recompute-stats", "top-rated", "--format", "json"],
    )

    cli.main()

    output = _json_output(caplog)
    # c is recomputed from its single 5-star rating
    assert [r["id"] for r in output] == ["c", "a", "b"]


def test_vocabulary_command(monkeypatch, caplog, data_dir):
    caplog.set_level(logging.INFO)
    monkeypatch.setattr(sys, "argv", ["prog", "--data-dir", str(data_dir), "vocabulary", "--format", "json"])

    cli.main()

    assert _json_output(caplog) == {"genres": ["Comedy", "Drama"], "moods": ["silly"], "tags": ["cult"]}
