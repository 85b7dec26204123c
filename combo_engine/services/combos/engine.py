"""Combo analysis entry points.

``analyze`` is a pure function of (metadata, signals, options): it performs
no I/O and shares no mutable state, so it is safe to call concurrently for
different apps. ``analyze_async`` runs the same pipeline but yields to the
event loop between chunks; both produce identical output.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from combo_engine.config import Settings, get_settings
from combo_engine.core.exceptions import ValidationError
from combo_engine.schemas.combo import AnalysisOptions, AppMetadata
from combo_engine.services.combos.classifier import StrengthClassifier
from combo_engine.services.combos.constants import DEFAULT_STOPWORDS
from combo_engine.services.combos.generator import ComboGenerator
from combo_engine.services.combos.scoring import PriorityScorer, ScoringConfig
from combo_engine.services.combos.selection import (
    calculate_stats,
    recommend_missing,
    select_top_combos,
)
from combo_engine.services.combos.signals import (
    normalize_popularity_signals,
    normalize_ranking_signals,
)
from combo_engine.services.combos.tokenizer import FieldTokenizer
from combo_engine.services.combos.types import (
    ClassifiedCombo,
    ComboAnalysis,
    GenerationResult,
    ScoredCombo,
    TokenizedMetadata,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _AnalysisPlan:
    tokenized: TokenizedMetadata
    generator: ComboGenerator
    scorer: PriorityScorer
    top_n: int
    recommendation_limit: int
    chunk_size: int


def _validate_model(model: type[Any], payload: Any, label: str) -> Any:
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload or {})
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {label}",
            {"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def _prepare(
    metadata: AppMetadata | Mapping[str, Any],
    signals: Mapping[str, Any] | None,
    options: AnalysisOptions | Mapping[str, Any] | None,
    settings: Settings | None,
    scoring_config: ScoringConfig | None,
) -> _AnalysisPlan:
    resolved_settings = settings or get_settings()
    app_metadata: AppMetadata = _validate_model(AppMetadata, metadata, "metadata")
    resolved_options: AnalysisOptions = _validate_model(AnalysisOptions, options, "options")

    stopwords = set(DEFAULT_STOPWORDS if resolved_options.stopwords is None else resolved_options.stopwords)
    stopwords.update(resolved_options.extra_stopwords)
    tokenizer = FieldTokenizer(
        stopwords=stopwords,
        brand_names=[app_metadata.brand_name, *resolved_options.brand_names],
        min_token_length=resolved_settings.min_token_length,
    )
    tokenized = tokenizer.tokenize(
        title=app_metadata.title,
        subtitle=app_metadata.subtitle,
        keywords_field=app_metadata.keywords_field,
        promo_text=app_metadata.promo_text,
    )

    generator = ComboGenerator(
        lengths=resolved_settings.combo_lengths,
        max_per_source=resolved_options.max_combos_per_source or resolved_settings.max_combos_per_source,
        max_total=resolved_options.max_total_combos or resolved_settings.max_total_combos,
    )

    signal_maps = signals or {}
    if not isinstance(signal_maps, Mapping):
        logger.warning("Ignoring non-mapping signals payload", extra={"type": type(signal_maps).__name__})
        signal_maps = {}
    config = scoring_config or ScoringConfig.from_weights(resolved_options.weights)
    scorer = PriorityScorer(
        rankings=normalize_ranking_signals(signal_maps.get("rankings")),
        popularity=normalize_popularity_signals(signal_maps.get("popularity")),
        config=config,
    )

    recommendation_limit = resolved_options.recommendation_limit
    if recommendation_limit is None:
        recommendation_limit = resolved_settings.recommendation_limit

    return _AnalysisPlan(
        tokenized=tokenized,
        generator=generator,
        scorer=scorer,
        top_n=resolved_options.top_n or resolved_settings.top_n,
        recommendation_limit=recommendation_limit,
        chunk_size=resolved_settings.chunk_size,
    )


def _finalize(
    plan: _AnalysisPlan,
    generation: GenerationResult,
    classified: list[ClassifiedCombo],
    scored: list[ScoredCombo],
) -> ComboAnalysis:
    selection = select_top_combos(scored, limit=plan.top_n)
    stats = calculate_stats(
        classified,
        duplicated_tokens=plan.tokenized.duplicated_tokens(),
        generation_capped=generation.cap_reached,
    )
    limit_reached = selection.limit_reached or generation.cap_reached

    logger.info(
        "Combo analysis complete",
        extra={
            "total_possible": stats.total_possible,
            "existing": stats.existing,
            "coverage": stats.coverage,
            "returned": len(selection.results),
            "generation_capped": generation.cap_reached,
            "capped_sources": list(generation.capped_sources),
            "limit_reached": limit_reached,
        },
    )

    return ComboAnalysis(
        combos=selection.results,
        stats=stats,
        total_generated=selection.total_generated,
        limit_reached=limit_reached,
        recommended_to_add=recommend_missing(scored, limit=plan.recommendation_limit),
    )


def analyze(
    metadata: AppMetadata | Mapping[str, Any],
    signals: Mapping[str, Any] | None = None,
    options: AnalysisOptions | Mapping[str, Any] | None = None,
    *,
    settings: Settings | None = None,
    scoring_config: ScoringConfig | None = None,
) -> ComboAnalysis:
    """Generate, classify, score and rank keyword combos for one metadata snapshot.

    Args:
        metadata: Title (required), subtitle, keywords field, promo text, brand name.
        signals: ``{"rankings": {combo_text: RankingSignal}, "popularity": {token: PopularitySignal}}``,
            already fetched by the caller. Malformed entries are ignored.
        options: Per-call overrides (caps, top_n, weights, stopwords, brand names).
        settings: Engine settings; defaults to the cached environment settings.
        scoring_config: Full scoring configuration; overrides ``options.weights``.

    Returns:
        Ranked combos, aggregate stats, truncation flag and missing-combo recommendations.

    Raises:
        ValidationError: If the title is empty or metadata/options are malformed.
    """
    plan = _prepare(metadata, signals, options, settings, scoring_config)

    generation = plan.generator.generate(plan.tokenized)
    classifier = StrengthClassifier(plan.tokenized)
    classified = classifier.classify_all(generation.combos)
    scored = [ScoredCombo(classified=combo, priority=plan.scorer.score(combo)) for combo in classified]

    return _finalize(plan, generation, classified, scored)


async def analyze_async(
    metadata: AppMetadata | Mapping[str, Any],
    signals: Mapping[str, Any] | None = None,
    options: AnalysisOptions | Mapping[str, Any] | None = None,
    *,
    settings: Settings | None = None,
    scoring_config: ScoringConfig | None = None,
) -> ComboAnalysis:
    """Cooperative variant of ``analyze`` that yields every ``chunk_size`` combos."""
    plan = _prepare(metadata, signals, options, settings, scoring_config)
    chunk_size = plan.chunk_size

    generation = GenerationResult(combos=[])
    for index, _ in enumerate(plan.generator.iter_combos(plan.tokenized, generation), start=1):
        if index % chunk_size == 0:
            await asyncio.sleep(0)

    classifier = StrengthClassifier(plan.tokenized)
    classified: list[ClassifiedCombo] = []
    scored: list[ScoredCombo] = []
    for start in range(0, len(generation.combos), chunk_size):
        chunk = classifier.classify_all(generation.combos[start : start + chunk_size])
        classified.extend(chunk)
        scored.extend(ScoredCombo(classified=combo, priority=plan.scorer.score(combo)) for combo in chunk)
        await asyncio.sleep(0)

    return _finalize(plan, generation, classified, scored)
