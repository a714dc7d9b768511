"""
Configuration constants for the reelmatch recommendation engine.

This module centralizes all magic numbers and tunable parameters.
A handful of values can be overridden via environment variables.
"""
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def _get_float_env(key: str, default: float, min_val: float = 0) -> float:
    """
    Safely parse float from environment variable with validation.

    Args:
        key: Environment variable name
        default: Default value if not set or invalid
        min_val: Minimum allowed value

    Returns:
        Validated float value
    """
    try:
        val = float(os.environ.get(key, default))
        if val < min_val:
            logger.warning(f"{key}={val} is below minimum {min_val}, using {min_val}")
            return min_val
        return val
    except ValueError:
        logger.warning(f"Invalid {key}='{os.environ.get(key)}', using default {default}")
        return default


def _get_int_env(key: str, default: int, min_val: int = 1) -> int:
    """
    Safely parse integer from environment variable with validation.

    Args:
        key: Environment variable name
        default: Default value if not set or invalid
        min_val: Minimum allowed value

    Returns:
        Validated integer value
    """
    try:
        val = int(os.environ.get(key, default))
        if val < min_val:
            logger.warning(f"{key}={val} is below minimum {min_val}, using {min_val}")
            return min_val
        return val
    except ValueError:
        logger.warning(f"Invalid {key}='{os.environ.get(key)}', using default {default}")
        return default


# Data files read by the CLI
DATA_DIR = Path(os.environ.get("REELMATCH_DATA_DIR", "data"))
ITEMS_FILE = "items.json"
RATINGS_FILE = "ratings.json"
PREFERENCES_FILE = "preferences.json"

DEFAULT_COUNT = _get_int_env("REELMATCH_DEFAULT_COUNT", 10, min_val=1)

# Feature vector normalization (years mapped from 1900-2030 onto 0-1)
YEAR_BASE = 1900
YEAR_SPAN = 130
RATING_SCALE = 5.0
NEUTRAL_SLOT_VALUE = 0.5  # Missing year / rating

# Ideal preference vector
PREFERENCE_MATCH_WEIGHT = 2.0
PREFERENCE_TAG_WEIGHT = 0.5
PREFERENCE_YEAR_TARGET = 0.8  # Mild recency bias
PREFERENCE_RATING_TARGET = 1.0

# Reason thresholds
SIMILAR_ERA_YEARS = 5
HIGHLY_RATED_THRESHOLD = 4.5

# Collaborative filtering
MAX_NEIGHBORS = _get_int_env("REELMATCH_MAX_NEIGHBORS", 10, min_val=1)
NEIGHBOR_MIN_RATING = 4

# Popularity fallback
POPULAR_DEFAULT_SCORE = 3.5  # Score for fill items without an average rating
TOP_RATED_MIN_RATING = 4.0

# Trending
TRENDING_WINDOW_DAYS = _get_float_env("REELMATCH_TRENDING_WINDOW_DAYS", 30.0, min_val=0.0)
TRENDING_RECENT_WEIGHT = 0.7
TRENDING_TOTAL_WEIGHT = 0.3
