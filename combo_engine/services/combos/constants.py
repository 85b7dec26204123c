"""Tunable constants for combo generation, classification and scoring."""

from __future__ import annotations

# Relative indexing weight per metadata field.
FIELD_WEIGHTS = {
    "title": 1.0,
    "subtitle": 0.5,
    "keywords": 0.5,
    "promo_text": 0.3,
}

# Strength tier scores, strongest first.
TIER_SCORES = {
    "title_consecutive": 100,
    "title_non_consecutive": 85,
    "title_keywords_cross": 70,
    "title_subtitle_cross": 70,
    "keywords_consecutive": 50,
    "subtitle_consecutive": 50,
    "keywords_subtitle_cross": 35,
    "keywords_non_consecutive": 30,
    "subtitle_non_consecutive": 30,
    "three_way_cross": 20,
    "missing": 0,
}

# Coarse tier numbers used by comparisons (equal-score siblings share one).
TIER_NUMBERS = {
    "title_consecutive": 1,
    "title_non_consecutive": 2,
    "title_keywords_cross": 2,
    "title_subtitle_cross": 3,
    "keywords_consecutive": 4,
    "subtitle_consecutive": 4,
    "keywords_subtitle_cross": 5,
    "keywords_non_consecutive": 6,
    "subtitle_non_consecutive": 6,
    "three_way_cross": 7,
    "missing": 8,
}

STRENGTHENING_SUGGESTIONS = {
    "title_non_consecutive": "Make words consecutive in title for maximum ranking power",
    "title_keywords_cross": "Move all keywords to title to strengthen",
    "title_subtitle_cross": "Move all keywords to title to strengthen",
    "keywords_consecutive": "Move to title to strengthen",
    "subtitle_consecutive": "Move to title to strengthen",
    "keywords_subtitle_cross": "Move all keywords to title",
    "keywords_non_consecutive": "Move to title and make consecutive",
    "subtitle_non_consecutive": "Move to title and make consecutive",
    "three_way_cross": "Consolidate all keywords into title",
}

# Priority component weights (normalized by their sum when scoring).
PRIORITY_WEIGHTS = {
    "strength": 0.30,
    "popularity": 0.25,
    "opportunity": 0.20,
    "trend": 0.15,
    "intent": 0.10,
}

NEUTRAL_POPULARITY_SCORE = 50.0
NEUTRAL_INTENT_SCORE = 0.5
NEUTRAL_OPPORTUNITY_SCORE = 50.0
NEUTRAL_TREND_SCORE = 50.0

SCORE_MIN = 0.0
SCORE_MAX = 100.0

# Opportunity breakpoints.
OPPORTUNITY_THRESHOLDS = {
    "ranked_position_max": 100,
    "low_competition_max": 30,
    "medium_competition_max": 60,
    "top_position_max": 10,
    "headroom_position_max": 30,
    "uphill_position_max": 50,
    "uphill_competition_min": 80,
}
OPPORTUNITY_SCORES = {
    "blue_ocean": 100.0,
    "unranked_medium_competition": 80.0,
    "unranked_high_competition": 60.0,
    "top_ranked": 40.0,
    "headroom": 70.0,
    "uphill": 20.0,
    "neutral": NEUTRAL_OPPORTUNITY_SCORE,
}

# Trend breakpoints (absolute position change).
TREND_THRESHOLDS = {
    "strong_change_min": 10,
    "moderate_change_min": 5,
}
TREND_SCORES = {
    "strong_up": 100.0,
    "moderate_up": 85.0,
    "mild_up": 70.0,
    "new": 80.0,
    "stable": NEUTRAL_TREND_SCORE,
    "mild_down": 35.0,
    "strong_down": 20.0,
}

PRIORITY_BANDS = {
    "high_min": 70,
    "medium_min": 40,
}

# Articles, conjunctions, prepositions, auxiliaries and App Store noise words.
DEFAULT_STOPWORDS = frozenset(
    {
        "a",
        "an",
        "the",
        "and",
        "or",
        "but",
        "nor",
        "in",
        "on",
        "at",
        "to",
        "for",
        "of",
        "with",
        "by",
        "from",
        "as",
        "into",
        "your",
        "you",
        "my",
        "our",
        "is",
        "are",
        "was",
        "be",
        "been",
        "it",
        "its",
        "that",
        "this",
        "has",
        "have",
        "had",
        "do",
        "does",
        "did",
        "will",
        "would",
        "should",
        "could",
        "may",
        "might",
        "can",
        "must",
        "shall",
        "app",
        "apps",
        "application",
        "free",
        "new",
        "best",
        "top",
        "pro",
        "plus",
        "lite",
        "hd",
        "official",
    }
)
