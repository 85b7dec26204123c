"""Combo analysis input schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from combo_engine.services.combos.constants import PRIORITY_WEIGHTS


class AppMetadata(BaseModel):
    """Metadata snapshot of one app listing."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    title: str
    subtitle: str = ""
    keywords_field: str = Field(default="", alias="keywordsField")
    promo_text: str = Field(default="", alias="promoText")
    brand_name: str | None = Field(default=None, alias="brandName")

    @field_validator("subtitle", "keywords_field", "promo_text", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value


class RankingSignal(BaseModel):
    """Current ranking of the app for one combo text."""

    model_config = ConfigDict(populate_by_name=True)

    position: int | None = None
    total_results: int | None = Field(default=None, alias="totalResults")
    trend: Literal["up", "down", "stable", "new"] | None = None
    position_change: int | None = Field(default=None, alias="positionChange")


class PopularitySignal(BaseModel):
    """Search popularity signals for one token."""

    model_config = ConfigDict(populate_by_name=True)

    popularity_score: float = Field(alias="popularityScore", ge=0, le=100)
    intent_score: float = Field(default=0.5, alias="intentScore", ge=0, le=1)
    autocomplete_score: float = Field(default=0.0, alias="autocompleteScore", ge=0, le=1)


class ScoringWeights(BaseModel):
    """Relative weight of each priority component."""

    strength: float = Field(default=PRIORITY_WEIGHTS["strength"], ge=0)
    popularity: float = Field(default=PRIORITY_WEIGHTS["popularity"], ge=0)
    opportunity: float = Field(default=PRIORITY_WEIGHTS["opportunity"], ge=0)
    trend: float = Field(default=PRIORITY_WEIGHTS["trend"], ge=0)
    intent: float = Field(default=PRIORITY_WEIGHTS["intent"], ge=0)


class AnalysisOptions(BaseModel):
    """Per-call overrides of engine settings."""

    model_config = ConfigDict(populate_by_name=True)

    max_combos_per_source: int | None = Field(default=None, alias="maxCombosPerSource", ge=1)
    max_total_combos: int | None = Field(default=None, alias="maxTotalCombos", ge=1)
    top_n: int | None = Field(default=None, alias="topN", ge=1)
    recommendation_limit: int | None = Field(default=None, alias="recommendationLimit", ge=0)
    weights: ScoringWeights | None = None
    stopwords: list[str] | None = None
    extra_stopwords: list[str] = Field(default_factory=list, alias="extraStopwords")
    brand_names: list[str] = Field(default_factory=list, alias="brandNames")
