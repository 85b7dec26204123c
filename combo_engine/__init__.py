"""Keyword-combination generation, strength classification and priority scoring."""

from combo_engine.core.exceptions import ComboEngineError, ValidationError
from combo_engine.schemas.combo import (
    AnalysisOptions,
    AppMetadata,
    PopularitySignal,
    RankingSignal,
    ScoringWeights,
)
from combo_engine.services.combos.engine import analyze, analyze_async
from combo_engine.services.combos.types import ComboAnalysis, MetadataField, StrengthTier

__all__ = [
    "AnalysisOptions",
    "AppMetadata",
    "ComboAnalysis",
    "ComboEngineError",
    "MetadataField",
    "PopularitySignal",
    "RankingSignal",
    "ScoringWeights",
    "StrengthTier",
    "ValidationError",
    "analyze",
    "analyze_async",
]
