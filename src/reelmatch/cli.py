import argparse
import json
import logging
import re
from pathlib import Path

from .catalog import load_items, load_preferences, load_ratings, with_rating_stats
from .config import DATA_DIR, DEFAULT_COUNT, ITEMS_FILE, PREFERENCES_FILE, RATINGS_FILE, TOP_RATED_MIN_RATING
from .hybrid import recommend, top_rated, trending
from .models import Item, Rating, Recommendation, RecommendationFilter, YearRange
from .vectorizer import all_genres, all_moods, all_tags

logger = logging.getLogger(__name__)


def _validate_item_id(item_id: str) -> str:
    """
    Validate an item id given on the command line.
    Raises ValueError if the id contains characters outside [A-Za-z0-9_-].
    """
    cleaned = item_id.strip()
    if not cleaned or not re.match(r'^[A-Za-z0-9_-]+$', cleaned):
        raise ValueError(f"Invalid item id: {item_id}")
    return cleaned


def _load_catalog(args: argparse.Namespace) -> tuple[list[Item], list[Rating]]:
    data_dir = Path(args.data_dir)
    items = load_items(data_dir / ITEMS_FILE)
    ratings = load_ratings(data_dir / RATINGS_FILE)
    if getattr(args, 'recompute_stats', False):
        items = with_rating_stats(items, ratings)
    return items, ratings


def _build_filter(args: argparse.Namespace) -> RecommendationFilter | None:
    year_range = None
    if args.min_year is not None or args.max_year is not None:
        year_range = YearRange(min=args.min_year, max=args.max_year)

    f = RecommendationFilter(
        genres=args.genres,
        moods=args.moods,
        tags=args.tags,
        min_rating=args.min_rating,
        year_range=year_range,
        similar_to_item_id=_validate_item_id(args.similar_to) if args.similar_to else None,
    )
    if f == RecommendationFilter():
        return None
    return f


def _output_recommendations(recs: list[Recommendation], args: argparse.Namespace, heading: str) -> None:
    """Format and log recommendations in the requested format."""
    if getattr(args, 'format', 'text') == 'json':
        logger.info(json.dumps([r.to_dict() for r in recs], indent=2))
        return

    logger.info(f"\n{heading}:")
    for i, r in enumerate(recs, 1):
        year = f" ({r.item.year})" if r.item.year else ""
        logger.info(f"{i}. {r.item.title}{year} - Score: {r.score:.2f}")
        if r.reasons:
            logger.info(f"   Why: {', '.join(r.reasons)}")


def cmd_recommend(args: argparse.Namespace) -> None:
    """Hybrid recommendations for the user in preferences.json."""
    items, ratings = _load_catalog(args)
    if not items:
        logger.error(f"No items found in {args.data_dir}.")
        return

    try:
        rec_filter = _build_filter(args)
    except ValueError as e:
        logger.error(str(e))
        return

    prefs = load_preferences(Path(args.data_dir) / PREFERENCES_FILE)
    recs = recommend(items, ratings, prefs, rec_filter, count=args.limit)

    if not recs:
        logger.error("No items match the given filters.")
        return

    who = f"for {prefs.user_id}" if prefs and prefs.user_id else "(no preferences)"
    _output_recommendations(recs, args, f"Top {len(recs)} recommendations {who}")


def cmd_similar(args: argparse.Namespace) -> None:
    """Find items similar to a specific item."""
    try:
        item_id = _validate_item_id(args.item_id)
    except ValueError as e:
        logger.error(str(e))
        return

    items, ratings = _load_catalog(args)
    if not any(i.id == item_id for i in items):
        logger.error(f"No item found with id '{item_id}'")
        return

    recs = recommend(items, ratings, None, RecommendationFilter(similar_to_item_id=item_id), count=args.limit)
    _output_recommendations(recs, args, f"Items similar to {item_id}")


def cmd_trending(args: argparse.Namespace) -> None:
    """Trending items, falling back to the best-rated ones when nothing was rated."""
    items, ratings = _load_catalog(args)
    recs = trending(items, ratings, count=args.limit)

    if not recs:
        logger.debug("No rating activity; falling back to highest rated")
        ranked = sorted(items, key=lambda i: -(i.average_rating or 0))[:args.limit]
        recs = [Recommendation(item=i, score=i.average_rating or 0.0, reasons=["Highly rated"]) for i in ranked]

    _output_recommendations(recs, args, "Trending now")


def cmd_top_rated(args: argparse.Namespace) -> None:
    """Highest rated items of all time."""
    items, _ = _load_catalog(args)
    recs = top_rated(items, count=args.limit, min_rating=args.min_rating)
    if not recs:
        logger.error(f"No items rated {args.min_rating} or higher.")
        return
    _output_recommendations(recs, args, "Top rated")


def cmd_vocabulary(args: argparse.Namespace) -> None:
    """List the genres, moods and tags available for filtering."""
    items, _ = _load_catalog(args)
    vocab = {
        "genres": all_genres(items),
        "moods": all_moods(items),
        "tags": all_tags(items),
    }
    if args.format == 'json':
        logger.info(json.dumps(vocab, indent=2))
        return
    for name, values in vocab.items():
        logger.info(f"{name.capitalize()} ({len(values)}): {', '.join(values) or '-'}")


def _add_output_args(parser: argparse.ArgumentParser, with_limit: bool = True) -> None:
    if with_limit:
        parser.add_argument("--limit", type=int, default=DEFAULT_COUNT, help="Number of results")
    parser.add_argument("--format", choices=['text', 'json'], default='text', help="Output format")


def main():
    parser = argparse.ArgumentParser(description="Hybrid movie recommender")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--data-dir", default=str(DATA_DIR),
                        help="Directory holding items.json, ratings.json and preferences.json")
    parser.add_argument("--recompute-stats", action="store_true",
                        help="Recompute item average ratings from ratings.json")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Recommend command
    rec_parser = subparsers.add_parser("recommend", help="Generate personalized recommendations")
    rec_parser.add_argument("--genres", nargs="+", help="Keep items with any of these genres")
    rec_parser.add_argument("--moods", nargs="+", help="Keep items with any of these moods")
    rec_parser.add_argument("--tags", nargs="+", help="Keep items with any of these tags")
    rec_parser.add_argument("--min-rating", type=float, help="Minimum average rating")
    rec_parser.add_argument("--min-year", type=int, help="Minimum release year")
    rec_parser.add_argument("--max-year", type=int, help="Maximum release year")
    rec_parser.add_argument("--similar-to", help="Rank by similarity to this item id instead")
    _add_output_args(rec_parser)
    rec_parser.set_defaults(func=cmd_recommend)

    # Similar command
    similar_parser = subparsers.add_parser("similar", help="Find items similar to a specific item")
    similar_parser.add_argument("item_id", help="Item id")
    _add_output_args(similar_parser)
    similar_parser.set_defaults(func=cmd_similar)

    trending_parser = subparsers.add_parser("trending", help="Most rated items in the last month")
    _add_output_args(trending_parser)
    trending_parser.set_defaults(func=cmd_trending)

    top_parser = subparsers.add_parser("top-rated", help="Highest rated items")
    top_parser.add_argument("--min-rating", type=float, default=TOP_RATED_MIN_RATING, help="Minimum average rating")
    _add_output_args(top_parser)
    top_parser.set_defaults(func=cmd_top_rated)

    vocab_parser = subparsers.add_parser("vocabulary", help="List genres, moods and tags")
    _add_output_args(vocab_parser, with_limit=False)
    vocab_parser.set_defaults(func=cmd_vocabulary)

    args = parser.parse_args()

    # Configure logging based on verbosity
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    args.func(args)
