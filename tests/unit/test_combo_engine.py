"""End-to-end tests for the combo analysis entry points."""

import json

import pytest

from combo_engine import analyze, analyze_async
from combo_engine.config import Settings
from combo_engine.core.exceptions import InvalidWeightsError, MissingTitleError, ValidationError
from combo_engine.schemas.combo import AppMetadata
from combo_engine.services.combos.scoring import ScoringConfig
from combo_engine.services.combos.types import StrengthTier

HEADSPACE = {
    "title": "Headspace: Meditation & Sleep",
    "subtitle": "Mindfulness Timer",
    "brandName": "Headspace",
}

SLEEP_APP = {
    "title": "Sleep Sounds: Rain & Noise",
    "subtitle": "Relax Deeply Tonight",
    "keywordsField": "white,noise,storm,ocean,relax",
    "promoText": "Yoga and pilates sessions now included",
}


@pytest.fixture
def engine_settings() -> Settings:
    return Settings(_env_file=None)


def _by_text(analysis) -> dict:
    return {combo.text: combo for combo in analysis.combos}


def test_analyze_headspace_listing(engine_settings: Settings) -> None:
    analysis = analyze(HEADSPACE, settings=engine_settings)
    combos = _by_text(analysis)

    assert combos["meditation sleep"].tier is StrengthTier.TITLE_CONSECUTIVE
    assert combos["meditation sleep"].classified.strength_score == 100
    assert combos["meditation mindfulness"].tier is StrengthTier.TITLE_SUBTITLE_CROSS
    assert combos["meditation mindfulness"].classified.strength_score == 70
    assert not any("headspace" in text.split() for text in combos)

    assert analysis.total_generated == 11
    assert analysis.limit_reached is False
    assert analysis.stats.total_possible == 11
    assert analysis.stats.existing == 11
    assert analysis.stats.coverage == 100.0
    assert analysis.recommended_to_add == []


def test_metadata_model_is_accepted(engine_settings: Settings) -> None:
    metadata = AppMetadata(title="Meditation Timer & Sleep Aid")

    combos = _by_text(analyze(metadata, settings=engine_settings))

    assert combos["meditation sleep"].tier is StrengthTier.TITLE_NON_CONSECUTIVE


@pytest.mark.parametrize("title", ["", "   ", "!!!"])
def test_empty_title_is_rejected(title: str, engine_settings: Settings) -> None:
    with pytest.raises(MissingTitleError) as exc_info:
        analyze({"title": title}, settings=engine_settings)

    assert exc_info.value.details == {"field": "title"}


def test_malformed_metadata_and_options_raise_validation_error(engine_settings: Settings) -> None:
    with pytest.raises(ValidationError) as metadata_error:
        analyze({"subtitle": "No title here"}, settings=engine_settings)
    assert metadata_error.value.message == "Invalid metadata"
    assert metadata_error.value.details["errors"]

    with pytest.raises(ValidationError) as options_error:
        analyze({"title": "Calm"}, options={"top_n": 0}, settings=engine_settings)
    assert options_error.value.message == "Invalid options"


def test_output_invariants(engine_settings: Settings) -> None:
    analysis = analyze(SLEEP_APP, settings=engine_settings)

    totals = [combo.total for combo in analysis.combos]
    assert totals == sorted(totals, reverse=True)
    for combo in analysis.combos:
        tokens = combo.classified.tokens
        assert 2 <= len(tokens) <= 4
        assert len(set(tokens)) == len(tokens)
        assert combo.exists == (combo.tier is not StrengthTier.MISSING)
        assert 0 <= combo.total <= 100
    assert sum(analysis.stats.by_tier.values()) == analysis.stats.total_possible
    assert analysis.stats.existing + analysis.stats.missing == analysis.stats.total_possible


def test_analysis_is_deterministic_and_json_serializable(engine_settings: Settings) -> None:
    first = json.dumps(analyze(SLEEP_APP, settings=engine_settings).to_dict(), sort_keys=True)
    second = json.dumps(analyze(SLEEP_APP, settings=engine_settings).to_dict(), sort_keys=True)

    assert first == second


def test_top_n_truncation_sets_limit_reached(engine_settings: Settings) -> None:
    analysis = analyze(HEADSPACE, options={"top_n": 3}, settings=engine_settings)

    assert len(analysis.combos) == 3
    assert analysis.total_generated == 11
    assert analysis.limit_reached is True
    assert analysis.stats.total_possible == 11


def test_generation_cap_sets_limit_reached(engine_settings: Settings) -> None:
    analysis = analyze(HEADSPACE, options={"max_total_combos": 5}, settings=engine_settings)

    assert analysis.total_generated == 5
    assert analysis.limit_reached is True
    assert analysis.stats.generation_capped is True


def test_settings_control_defaults() -> None:
    analysis = analyze(HEADSPACE, settings=Settings(_env_file=None, top_n=4, max_combo_length=2))

    assert len(analysis.combos) == 4
    assert analysis.total_generated == 6
    assert analysis.limit_reached is True


def test_signals_are_normalized_and_malformed_entries_ignored(engine_settings: Settings) -> None:
    signals = {
        "rankings": {"MEDITATION   sleep": {"position": None, "totalResults": 10}},
        "popularity": {"meditation": {"popularityScore": "lots"}, "Sleep": {"popularityScore": 90}},
    }

    combos = _by_text(analyze(HEADSPACE, signals=signals, settings=engine_settings))

    priority = combos["meditation sleep"].priority
    assert priority.opportunity == 100
    assert priority.popularity == 70
    assert priority.data_quality == "complete"
    assert combos["mindfulness timer"].priority.data_quality == "estimated"


def test_non_mapping_signals_are_ignored(engine_settings: Settings) -> None:
    analysis = analyze(HEADSPACE, signals=["not", "a", "mapping"], settings=engine_settings)  # type: ignore[arg-type]

    assert {combo.priority.data_quality for combo in analysis.combos} == {"estimated"}


def test_recommendations_cover_missing_combos(engine_settings: Settings) -> None:
    analysis = analyze(SLEEP_APP, options={"recommendation_limit": 3}, settings=engine_settings)

    assert len(analysis.recommended_to_add) == 3
    for combo in analysis.recommended_to_add:
        assert combo.exists is False
        assert combo.recommendation == f'Consider adding "{combo.text}" - priority {combo.total}/100'
    totals = [combo.total for combo in analysis.recommended_to_add]
    assert totals == sorted(totals, reverse=True)


def test_strength_only_weights(engine_settings: Settings) -> None:
    weights = {"strength": 1, "popularity": 0, "opportunity": 0, "trend": 0, "intent": 0}

    analysis = analyze(SLEEP_APP, options={"weights": weights}, settings=engine_settings)

    assert all(combo.total == combo.tier.score for combo in analysis.combos)


def test_zero_weights_are_rejected(engine_settings: Settings) -> None:
    weights = {"strength": 0, "popularity": 0, "opportunity": 0, "trend": 0, "intent": 0}

    with pytest.raises(InvalidWeightsError):
        analyze(SLEEP_APP, options={"weights": weights}, settings=engine_settings)


def test_scoring_config_overrides_option_weights(engine_settings: Settings) -> None:
    config = ScoringConfig(weights={"strength": 0, "popularity": 0, "opportunity": 1, "trend": 0, "intent": 0})

    analysis = analyze(
        HEADSPACE,
        options={"weights": {"strength": 1, "popularity": 0, "opportunity": 0, "trend": 0, "intent": 0}},
        settings=engine_settings,
        scoring_config=config,
    )

    assert {combo.total for combo in analysis.combos} == {50}


def test_brand_names_and_stopwords_options(engine_settings: Settings) -> None:
    metadata = {"title": "Calm Sleep Timer", "subtitle": "Rain Sounds"}

    analysis = analyze(
        metadata,
        options={"brand_names": ["Calm"], "extra_stopwords": ["timer"]},
        settings=engine_settings,
    )

    tokens = {token for combo in analysis.combos for token in combo.classified.tokens}
    assert tokens == {"sleep", "rain", "sounds"}


def test_replacement_stopwords_drop_the_default_list(engine_settings: Settings) -> None:
    analysis = analyze({"title": "The Best Sleep"}, options={"stopwords": ["sleep"]}, settings=engine_settings)

    assert [combo.text for combo in analysis.combos] == ["the best"]


@pytest.mark.asyncio
async def test_analyze_async_matches_analyze() -> None:
    settings = Settings(_env_file=None, chunk_size=2)

    expected = analyze(SLEEP_APP, options={"top_n": 50}, settings=settings)
    result = await analyze_async(SLEEP_APP, options={"top_n": 50}, settings=settings)

    assert result.to_dict() == expected.to_dict()


@pytest.mark.asyncio
async def test_analyze_async_propagates_validation_errors() -> None:
    with pytest.raises(MissingTitleError):
        await analyze_async({"title": ""}, settings=Settings(_env_file=None))


def test_output_carries_field_provenance_and_weight(engine_settings: Settings) -> None:
    analysis = analyze(SLEEP_APP, options={"top_n": 5000}, settings=engine_settings)
    payload = {combo["text"]: combo for combo in analysis.to_dict()["combos"]}

    assert payload["sleep sounds"]["source_fields"] == ["title"]
    assert payload["sleep sounds"]["field_weight"] == 1.0
    assert payload["deeply tonight"]["source_fields"] == ["subtitle"]
    assert payload["deeply tonight"]["field_weight"] == 0.5
