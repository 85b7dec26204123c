"""Strength classification of generated combos.

Presence is checked against each field's full token stream (stopwords and
brand words included). Tiers are tried strongest first and the first
matching rule wins, so a combo that qualifies for several tiers always
lands in the strongest one. Equal-score siblings resolve by declaration
order (title+keywords before title+subtitle, keywords before subtitle).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from enum import Enum

from combo_engine.services.combos.generator import compositions
from combo_engine.services.combos.types import (
    CANONICAL_FIELD_ORDER,
    ClassifiedCombo,
    GeneratedCombo,
    MetadataField,
    StrengthTier,
    TokenizedMetadata,
)

logger = logging.getLogger(__name__)

TITLE = MetadataField.TITLE
SUBTITLE = MetadataField.SUBTITLE
KEYWORDS = MetadataField.KEYWORDS


class Presence(Enum):
    ABSENT = "absent"
    CONSECUTIVE = "consecutive"
    NON_CONSECUTIVE = "non_consecutive"


def is_subsequence(tokens: Sequence[str], stream: Sequence[str]) -> bool:
    """True when ``tokens`` appear in ``stream`` in order, gaps allowed."""
    if not tokens:
        return False
    position = 0
    for token in stream:
        if token == tokens[position]:
            position += 1
            if position == len(tokens):
                return True
    return False


def is_contiguous(tokens: Sequence[str], stream: Sequence[str]) -> bool:
    size = len(tokens)
    if size == 0 or size > len(stream):
        return False
    target = list(tokens)
    return any(stream[i : i + size] == target for i in range(len(stream) - size + 1))


def presence_in_stream(tokens: Sequence[str], stream: Sequence[str]) -> Presence:
    if is_contiguous(tokens, stream):
        return Presence.CONSECUTIVE
    if is_subsequence(tokens, stream):
        return Presence.NON_CONSECUTIVE
    return Presence.ABSENT


def spans_fields(tokens: Sequence[str], streams: Sequence[Sequence[str]]) -> bool:
    """True when ``tokens`` split into one ordered, non-empty run per stream.

    Streams are given in canonical field order, so the field boundary acts as
    an ordinary separator: earlier-field tokens must precede later-field ones.
    """
    if len(tokens) < len(streams) or any(not stream for stream in streams):
        return False
    for split in compositions(len(tokens), len(streams)):
        start = 0
        for size, stream in zip(split, streams):
            if not is_subsequence(tokens[start : start + size], stream):
                break
            start += size
        else:
            return True
    return False


class StrengthClassifier:
    """Assigns exactly one StrengthTier to each combo for a metadata snapshot."""

    def __init__(self, metadata: TokenizedMetadata) -> None:
        self.metadata = metadata
        self._streams = {
            metadata_field: metadata.stream(metadata_field) for metadata_field in CANONICAL_FIELD_ORDER
        }
        self._vocabularies = {
            metadata_field: frozenset(stream) for metadata_field, stream in self._streams.items()
        }

    def membership(self, tokens: Iterable[str]) -> tuple[MetadataField, ...]:
        """Fields containing at least one of the tokens, in canonical order."""
        token_set = set(tokens)
        return tuple(
            metadata_field
            for metadata_field in CANONICAL_FIELD_ORDER
            if token_set & self._vocabularies[metadata_field]
        )

    def tier_for(self, tokens: Sequence[str]) -> StrengthTier:
        if len(tokens) < 2:
            return StrengthTier.MISSING

        streams = self._streams
        title = presence_in_stream(tokens, streams[TITLE])
        if title is Presence.CONSECUTIVE:
            return StrengthTier.TITLE_CONSECUTIVE
        if title is Presence.NON_CONSECUTIVE:
            return StrengthTier.TITLE_NON_CONSECUTIVE

        if spans_fields(tokens, (streams[TITLE], streams[KEYWORDS])):
            return StrengthTier.TITLE_KEYWORDS_CROSS
        if spans_fields(tokens, (streams[TITLE], streams[SUBTITLE])):
            return StrengthTier.TITLE_SUBTITLE_CROSS

        keywords = presence_in_stream(tokens, streams[KEYWORDS])
        subtitle = presence_in_stream(tokens, streams[SUBTITLE])
        if keywords is Presence.CONSECUTIVE:
            return StrengthTier.KEYWORDS_CONSECUTIVE
        if subtitle is Presence.CONSECUTIVE:
            return StrengthTier.SUBTITLE_CONSECUTIVE

        if spans_fields(tokens, (streams[SUBTITLE], streams[KEYWORDS])):
            return StrengthTier.KEYWORDS_SUBTITLE_CROSS

        if keywords is Presence.NON_CONSECUTIVE:
            return StrengthTier.KEYWORDS_NON_CONSECUTIVE
        if subtitle is Presence.NON_CONSECUTIVE:
            return StrengthTier.SUBTITLE_NON_CONSECUTIVE

        if spans_fields(tokens, (streams[TITLE], streams[SUBTITLE], streams[KEYWORDS])):
            return StrengthTier.THREE_WAY_CROSS

        # Promo text is not indexed, so a promo-only match stays missing.
        return StrengthTier.MISSING

    def classify(self, combo: GeneratedCombo) -> ClassifiedCombo:
        tier = self.tier_for(combo.tokens)
        return ClassifiedCombo(
            combo=combo,
            tier=tier,
            exists=tier is not StrengthTier.MISSING,
            source_fields=self.membership(combo.tokens),
        )

    def classify_all(self, combos: Iterable[GeneratedCombo]) -> list[ClassifiedCombo]:
        return [self.classify(combo) for combo in combos]
