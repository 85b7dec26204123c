"""Priority scoring for classified combos.

Priority = weighted blend of five 0-100 components:

- strength (30%): tier score from metadata placement
- popularity (25%): mean token popularity, unseen tokens neutral (50)
- opportunity (20%): ranking position versus competition ("blue ocean")
- trend (15%): ranking momentum
- intent (10%): mean token intent, unseen tokens neutral (0.5)

Weights and breakpoints come from ``ScoringConfig`` so product tuning never
touches the formulas below.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from combo_engine.core.exceptions import InvalidWeightsError
from combo_engine.schemas.combo import PopularitySignal, RankingSignal, ScoringWeights
from combo_engine.services.combos.constants import (
    NEUTRAL_INTENT_SCORE,
    NEUTRAL_POPULARITY_SCORE,
    OPPORTUNITY_SCORES,
    OPPORTUNITY_THRESHOLDS,
    PRIORITY_BANDS,
    PRIORITY_WEIGHTS,
    SCORE_MAX,
    SCORE_MIN,
    TREND_SCORES,
    TREND_THRESHOLDS,
)
from combo_engine.services.combos.types import ClassifiedCombo, DataQuality, PriorityScore

COMPONENTS = ("strength", "popularity", "opportunity", "trend", "intent")
WEIGHT_SUM_TOLERANCE = 1e-9


@dataclass(slots=True)
class ScoringConfig:
    """Weights, breakpoints and neutral defaults for priority scoring."""

    weights: dict[str, float] = field(default_factory=lambda: dict(PRIORITY_WEIGHTS))
    opportunity_thresholds: dict[str, int] = field(default_factory=lambda: dict(OPPORTUNITY_THRESHOLDS))
    opportunity_scores: dict[str, float] = field(default_factory=lambda: dict(OPPORTUNITY_SCORES))
    trend_thresholds: dict[str, int] = field(default_factory=lambda: dict(TREND_THRESHOLDS))
    trend_scores: dict[str, float] = field(default_factory=lambda: dict(TREND_SCORES))
    neutral_popularity: float = NEUTRAL_POPULARITY_SCORE
    neutral_intent: float = NEUTRAL_INTENT_SCORE

    @classmethod
    def from_weights(cls, weights: ScoringWeights | None) -> "ScoringConfig":
        if weights is None:
            return cls()
        return cls(weights=weights.model_dump())

    def normalized_weights(self) -> dict[str, float]:
        """Return weights scaled to sum to 1."""
        values = {name: max(0.0, float(self.weights.get(name, 0.0))) for name in COMPONENTS}
        total = sum(values.values())
        if total <= 0:
            raise InvalidWeightsError(values)
        if abs(total - 1.0) <= WEIGHT_SUM_TOLERANCE:
            return values
        return {name: value / total for name, value in values.items()}


def clamp(value: float, lower: float = SCORE_MIN, upper: float = SCORE_MAX) -> float:
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    # Tolerance absorbs float error such as 76.49999999999999 for 76.5.
    return int(math.floor(value + 0.5 + 1e-9))


def calculate_popularity_score(
    tokens: Sequence[str],
    popularity: Mapping[str, PopularitySignal],
    config: ScoringConfig,
) -> float:
    """Average token popularity; tokens without data count as neutral."""
    if not tokens:
        return config.neutral_popularity
    scores = [
        popularity[token].popularity_score if token in popularity else config.neutral_popularity
        for token in tokens
    ]
    return clamp(sum(scores) / len(scores))


def calculate_intent_score(
    tokens: Sequence[str],
    popularity: Mapping[str, PopularitySignal],
    config: ScoringConfig,
) -> float:
    """Average token intent scaled to 0-100; tokens without data count as neutral."""
    if not tokens:
        return config.neutral_intent * 100
    scores = [
        popularity[token].intent_score if token in popularity else config.neutral_intent
        for token in tokens
    ]
    return clamp(100 * sum(scores) / len(scores))


def calculate_opportunity_score(ranking: RankingSignal | None, config: ScoringConfig) -> float:
    """Score headroom: unranked low-competition combos first, top-10 combos last."""
    scores = config.opportunity_scores
    if ranking is None:
        return scores["neutral"]

    limits = config.opportunity_thresholds
    position = ranking.position
    competition = ranking.total_results

    # Position 0 or below means the app is not ranking for the combo.
    if position is None or position < 1 or position > limits["ranked_position_max"]:
        if competition is not None and competition < limits["low_competition_max"]:
            return scores["blue_ocean"]
        if competition is not None and competition < limits["medium_competition_max"]:
            return scores["unranked_medium_competition"]
        return scores["unranked_high_competition"]

    if position <= limits["top_position_max"]:
        return scores["top_ranked"]
    if position <= limits["headroom_position_max"]:
        return scores["headroom"]
    if (
        position <= limits["uphill_position_max"]
        and competition is not None
        and competition > limits["uphill_competition_min"]
    ):
        return scores["uphill"]
    return scores["neutral"]


def calculate_trend_score(ranking: RankingSignal | None, config: ScoringConfig) -> float:
    """Score ranking momentum; missing or stable trends are neutral."""
    scores = config.trend_scores
    if ranking is None or ranking.trend is None:
        return scores["stable"]

    change = abs(ranking.position_change or 0)
    strong = config.trend_thresholds["strong_change_min"]
    moderate = config.trend_thresholds["moderate_change_min"]

    if ranking.trend == "up":
        if change > strong:
            return scores["strong_up"]
        if change >= moderate:
            return scores["moderate_up"]
        return scores["mild_up"]
    if ranking.trend == "down":
        if change > strong:
            return scores["strong_down"]
        return scores["mild_down"]
    if ranking.trend == "new":
        return scores["new"]
    return scores["stable"]


def resolve_data_quality(has_ranking: bool, has_popularity: bool) -> DataQuality:
    if has_ranking and has_popularity:
        return "complete"
    if has_ranking or has_popularity:
        return "partial"
    return "estimated"


class PriorityScorer:
    """Scores classified combos against immutable signal maps."""

    def __init__(
        self,
        *,
        rankings: Mapping[str, RankingSignal] | None = None,
        popularity: Mapping[str, PopularitySignal] | None = None,
        config: ScoringConfig | None = None,
    ) -> None:
        self.rankings = rankings or {}
        self.popularity = popularity or {}
        self.config = config or ScoringConfig()
        self.weights = self.config.normalized_weights()

    def score(self, combo: ClassifiedCombo) -> PriorityScore:
        tokens = combo.tokens
        ranking = self.rankings.get(combo.text)
        components = {
            "strength": float(combo.tier.score),
            "popularity": calculate_popularity_score(tokens, self.popularity, self.config),
            "opportunity": calculate_opportunity_score(ranking, self.config),
            "trend": calculate_trend_score(ranking, self.config),
            "intent": calculate_intent_score(tokens, self.popularity, self.config),
        }
        weighted = sum(components[name] * self.weights[name] for name in COMPONENTS)
        total = int(clamp(round_half_up(weighted)))

        return PriorityScore(
            strength=round(components["strength"], 2),
            popularity=round(components["popularity"], 2),
            opportunity=round(components["opportunity"], 2),
            trend=round(components["trend"], 2),
            intent=round(components["intent"], 2),
            total=total,
            data_quality=resolve_data_quality(
                ranking is not None,
                any(token in self.popularity for token in tokens),
            ),
        )


def priority_band(total: int) -> str:
    """Bucket a total priority into high / medium / low."""
    if total >= PRIORITY_BANDS["high_min"]:
        return "high"
    if total >= PRIORITY_BANDS["medium_min"]:
        return "medium"
    return "low"


def format_priority_breakdown(score: PriorityScore, weights: Mapping[str, float] | None = None) -> str:
    """Render a score as a multi-line breakdown for tooltips and CLI output."""
    resolved = dict(weights) if weights is not None else dict(PRIORITY_WEIGHTS)
    lines = [f"Priority Score: {score.total}/100", ""]
    for index, name in enumerate(COMPONENTS):
        value = getattr(score, name)
        weight = resolved.get(name, 0.0)
        branch = "└─" if index == len(COMPONENTS) - 1 else "├─"
        lines.append(
            f"{branch} {name.capitalize()}: {value:g}/100 x {weight:.0%} = {value * weight:.1f} pts"
        )
    lines.append("")
    lines.append(f"Data Quality: {score.data_quality}")
    return "\n".join(lines)
