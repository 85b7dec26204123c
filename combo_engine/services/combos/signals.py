"""Normalization of pre-fetched ranking and popularity signal maps.

Signals arrive from upstream services as loosely typed mappings. Each entry
is coerced independently; an entry that fails validation is dropped and the
affected combo falls back to neutral component scores.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from combo_engine.schemas.combo import PopularitySignal, RankingSignal
from combo_engine.services.combos.tokenizer import normalize_combo_text

logger = logging.getLogger(__name__)

SignalT = TypeVar("SignalT", bound=BaseModel)


def _coerce_entries(
    raw: Mapping[Any, Any] | None,
    model: type[SignalT],
    kind: str,
) -> dict[str, SignalT]:
    if not raw:
        return {}
    if not isinstance(raw, Mapping):
        logger.warning("Ignoring non-mapping signal payload", extra={"kind": kind, "type": type(raw).__name__})
        return {}

    coerced: dict[str, SignalT] = {}
    for raw_key, value in raw.items():
        if not isinstance(raw_key, str):
            logger.warning("Ignoring signal with non-string key", extra={"kind": kind, "key": repr(raw_key)})
            continue
        key = normalize_combo_text(raw_key)
        if not key:
            continue
        if isinstance(value, model):
            coerced[key] = value
            continue
        if not isinstance(value, Mapping):
            logger.warning(
                "Ignoring malformed signal entry",
                extra={"kind": kind, "key": raw_key, "reason": f"expected mapping, got {type(value).__name__}"},
            )
            continue
        try:
            coerced[key] = model.model_validate(dict(value))
        except PydanticValidationError as e:
            logger.warning(
                "Ignoring malformed signal entry",
                extra={"kind": kind, "key": raw_key, "reason": str(e.errors(include_url=False))},
            )
    return coerced


def normalize_ranking_signals(raw: Mapping[Any, Any] | None) -> dict[str, RankingSignal]:
    """Coerce a combo-text → ranking map, keyed by normalized combo text."""
    return _coerce_entries(raw, RankingSignal, "ranking")


def normalize_popularity_signals(raw: Mapping[Any, Any] | None) -> dict[str, PopularitySignal]:
    """Coerce a token → popularity map, keyed by normalized token."""
    return _coerce_entries(raw, PopularitySignal, "popularity")
