"""Unit tests for signal map normalization."""

import logging

import pytest

from combo_engine.schemas.combo import PopularitySignal, RankingSignal
from combo_engine.services.combos.signals import (
    normalize_popularity_signals,
    normalize_ranking_signals,
)


def test_ranking_keys_are_normalized_like_combo_text() -> None:
    rankings = normalize_ranking_signals(
        {
            "  Meditation   SLEEP! ": {"position": 12, "totalResults": 40, "trend": "up", "positionChange": 6},
        }
    )

    assert list(rankings) == ["meditation sleep"]
    signal = rankings["meditation sleep"]
    assert signal.position == 12
    assert signal.total_results == 40
    assert signal.trend == "up"
    assert signal.position_change == 6


def test_popularity_accepts_field_names_and_aliases() -> None:
    popularity = normalize_popularity_signals(
        {
            "Sleep": {"popularityScore": 72},
            "rain": {"popularity_score": 30, "intent_score": 0.9},
        }
    )

    assert popularity["sleep"].popularity_score == 72
    assert popularity["sleep"].intent_score == 0.5
    assert popularity["sleep"].autocomplete_score == 0.0
    assert popularity["rain"].intent_score == 0.9


def test_model_instances_pass_through() -> None:
    signal = RankingSignal(position=3)

    assert normalize_ranking_signals({"sleep sounds": signal})["sleep sounds"] is signal


@pytest.mark.parametrize("payload", [None, {}, [], "rankings"])
def test_empty_or_non_mapping_payload_yields_nothing(payload: object) -> None:
    assert normalize_ranking_signals(payload) == {}  # type: ignore[arg-type]


def test_malformed_entries_are_dropped_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="combo_engine.services.combos.signals"):
        popularity = normalize_popularity_signals(
            {
                "sleep": {"popularityScore": 150},
                "rain": {"intentScore": 0.3},
                "timer": "high",
                "focus": {"popularityScore": 40, "intentScore": 0.6},
                "!!!": {"popularityScore": 10},
            }
        )

    assert list(popularity) == ["focus"]
    assert isinstance(popularity["focus"], PopularitySignal)

    warnings = [record for record in caplog.records if record.message == "Ignoring malformed signal entry"]
    assert sorted(record.key for record in warnings) == ["rain", "sleep", "timer"]
    assert all(record.kind == "popularity" for record in warnings)


def test_invalid_trend_is_rejected() -> None:
    rankings = normalize_ranking_signals(
        {
            "sleep sounds": {"position": 4, "trend": "sideways"},
            "rain sounds": {"position": "7"},
        }
    )

    assert "sleep sounds" not in rankings
    assert rankings["rain sounds"].position == 7
