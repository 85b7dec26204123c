"""Domain types for combo analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from combo_engine.services.combos.constants import (
    FIELD_WEIGHTS,
    STRENGTHENING_SUGGESTIONS,
    TIER_NUMBERS,
    TIER_SCORES,
)

DataQuality = Literal["complete", "partial", "estimated"]


class MetadataField(str, Enum):
    """Metadata fields in canonical (indexing) order."""

    TITLE = "title"
    SUBTITLE = "subtitle"
    KEYWORDS = "keywords"
    PROMO_TEXT = "promo_text"

    @property
    def weight(self) -> float:
        return FIELD_WEIGHTS[self.value]


CANONICAL_FIELD_ORDER: tuple[MetadataField, ...] = (
    MetadataField.TITLE,
    MetadataField.SUBTITLE,
    MetadataField.KEYWORDS,
    MetadataField.PROMO_TEXT,
)

# Fields the App Store indexes for search; promo text is tracked only.
INDEXED_FIELDS: tuple[MetadataField, ...] = (
    MetadataField.TITLE,
    MetadataField.SUBTITLE,
    MetadataField.KEYWORDS,
)


class StrengthTier(Enum):
    """Closed set of ranking-strength tiers, strongest first."""

    TITLE_CONSECUTIVE = "title_consecutive"
    TITLE_NON_CONSECUTIVE = "title_non_consecutive"
    TITLE_KEYWORDS_CROSS = "title_keywords_cross"
    TITLE_SUBTITLE_CROSS = "title_subtitle_cross"
    KEYWORDS_CONSECUTIVE = "keywords_consecutive"
    SUBTITLE_CONSECUTIVE = "subtitle_consecutive"
    KEYWORDS_SUBTITLE_CROSS = "keywords_subtitle_cross"
    KEYWORDS_NON_CONSECUTIVE = "keywords_non_consecutive"
    SUBTITLE_NON_CONSECUTIVE = "subtitle_non_consecutive"
    THREE_WAY_CROSS = "three_way_cross"
    MISSING = "missing"

    @property
    def score(self) -> int:
        return TIER_SCORES[self.value]

    @property
    def tier_number(self) -> int:
        return TIER_NUMBERS[self.value]

    @property
    def can_strengthen(self) -> bool:
        return self.value in STRENGTHENING_SUGGESTIONS

    @property
    def strengthening_suggestion(self) -> str | None:
        return STRENGTHENING_SUGGESTIONS.get(self.value)


@dataclass(slots=True)
class FieldTokens:
    """Tokenized view of one metadata field."""

    metadata_field: MetadataField
    raw_text: str
    stream: list[str]
    keywords: list[str]

    @property
    def is_empty(self) -> bool:
        return not self.stream


@dataclass(slots=True)
class TokenizedMetadata:
    """All metadata fields tokenized for one analysis run."""

    fields: dict[MetadataField, FieldTokens]
    brand_tokens: frozenset[str] = frozenset()

    def get(self, metadata_field: MetadataField) -> FieldTokens:
        return self.fields[metadata_field]

    def keywords(self, metadata_field: MetadataField) -> list[str]:
        return self.fields[metadata_field].keywords

    def stream(self, metadata_field: MetadataField) -> list[str]:
        return self.fields[metadata_field].stream

    def duplicated_tokens(self) -> list[str]:
        """Keyword tokens that appear in more than one indexed field."""
        seen_in: dict[str, int] = {}
        for metadata_field in INDEXED_FIELDS:
            for token in set(self.fields[metadata_field].keywords):
                seen_in[token] = seen_in.get(token, 0) + 1
        return sorted(token for token, count in seen_in.items() if count > 1)


@dataclass(frozen=True, slots=True)
class GeneratedCombo:
    """Order-preserving keyword combination, identified by its text."""

    text: str
    tokens: tuple[str, ...]

    @classmethod
    def from_tokens(cls, tokens: tuple[str, ...] | list[str]) -> "GeneratedCombo":
        token_tuple = tuple(tokens)
        return cls(text=" ".join(token_tuple), tokens=token_tuple)

    @property
    def length(self) -> int:
        return len(self.tokens)


@dataclass(slots=True)
class GenerationResult:
    """Unique combos plus cap bookkeeping from one generation run."""

    combos: list[GeneratedCombo]
    capped_sources: list[str] = field(default_factory=list)
    global_cap_reached: bool = False

    @property
    def cap_reached(self) -> bool:
        return self.global_cap_reached or bool(self.capped_sources)


@dataclass(slots=True)
class ClassifiedCombo:
    """Generated combo with its strength tier and field provenance."""

    combo: GeneratedCombo
    tier: StrengthTier
    exists: bool
    source_fields: tuple[MetadataField, ...] = ()

    @property
    def text(self) -> str:
        return self.combo.text

    @property
    def tokens(self) -> tuple[str, ...]:
        return self.combo.tokens

    @property
    def length(self) -> int:
        return self.combo.length

    @property
    def strength_score(self) -> int:
        return self.tier.score

    @property
    def field_weight(self) -> float:
        """Highest indexing weight among the fields contributing tokens."""
        if not self.source_fields:
            return 0.0
        return max(metadata_field.weight for metadata_field in self.source_fields)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "tokens": list(self.tokens),
            "length": self.length,
            "tier": self.tier.value,
            "tier_number": self.tier.tier_number,
            "strength_score": self.strength_score,
            "exists": self.exists,
            "source_fields": [metadata_field.value for metadata_field in self.source_fields],
            "field_weight": self.field_weight,
            "can_strengthen": self.tier.can_strengthen,
            "strengthening_suggestion": self.tier.strengthening_suggestion,
        }


@dataclass(slots=True)
class PriorityScore:
    """Weighted priority with its per-component breakdown."""

    strength: float
    popularity: float
    opportunity: float
    trend: float
    intent: float
    total: int
    data_quality: DataQuality

    def to_dict(self) -> dict[str, Any]:
        return {
            "strength": self.strength,
            "popularity": self.popularity,
            "opportunity": self.opportunity,
            "trend": self.trend,
            "intent": self.intent,
            "total": self.total,
            "data_quality": self.data_quality,
        }


@dataclass(slots=True)
class ScoredCombo:
    """Classified combo paired with its priority score."""

    classified: ClassifiedCombo
    priority: PriorityScore
    recommendation: str | None = None

    @property
    def text(self) -> str:
        return self.classified.text

    @property
    def tier(self) -> StrengthTier:
        return self.classified.tier

    @property
    def exists(self) -> bool:
        return self.classified.exists

    @property
    def total(self) -> int:
        return self.priority.total

    def to_dict(self) -> dict[str, Any]:
        payload = self.classified.to_dict()
        payload["priority"] = self.priority.to_dict()
        if self.recommendation is not None:
            payload["recommendation"] = self.recommendation
        return payload


@dataclass(slots=True)
class ComboStats:
    """Aggregate statistics over every possible combo of one run."""

    total_possible: int
    existing: int
    missing: int
    coverage: float
    by_tier: dict[str, int]
    by_length: dict[int, int]
    duplicated_tokens: list[str] = field(default_factory=list)
    generation_capped: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_possible": self.total_possible,
            "existing": self.existing,
            "missing": self.missing,
            "coverage": self.coverage,
            "by_tier": dict(self.by_tier),
            "by_length": {str(length): count for length, count in self.by_length.items()},
            "duplicated_tokens": list(self.duplicated_tokens),
            "generation_capped": self.generation_capped,
        }


@dataclass(slots=True)
class SelectionResult:
    """Ordered, truncated combo list."""

    results: list[ScoredCombo]
    total_generated: int
    limit_reached: bool


@dataclass(slots=True)
class ComboAnalysis:
    """Full engine output for one metadata snapshot."""

    combos: list[ScoredCombo]
    stats: ComboStats
    total_generated: int
    limit_reached: bool
    recommended_to_add: list[ScoredCombo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "combos": [combo.to_dict() for combo in self.combos],
            "stats": self.stats.to_dict(),
            "total_generated": self.total_generated,
            "limit_reached": self.limit_reached,
            "recommended_to_add": [combo.to_dict() for combo in self.recommended_to_add],
        }
