"""Order-preserving combo generation over tokenized metadata.

Sources are visited in a fixed order so capped runs are reproducible:

1. indexed fields only: title, subtitle, keywords, then their pairs, then
   the title+subtitle+keywords triple
2. sources that include promo text: promo alone, then its pairs, then its
   triples, in canonical field order

Within a source, lengths run shortest first and index tuples run in
lexicographic order. A combo never reorders words: tokens taken from an
earlier field always precede tokens taken from a later one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from itertools import combinations, product

from combo_engine.core.exceptions import ConfigurationError
from combo_engine.services.combos.types import (
    CANONICAL_FIELD_ORDER,
    INDEXED_FIELDS,
    GeneratedCombo,
    GenerationResult,
    MetadataField,
    TokenizedMetadata,
)

logger = logging.getLogger(__name__)

MAX_FIELDS_PER_SOURCE = 3


def source_key(fields: Sequence[MetadataField]) -> str:
    return "+".join(metadata_field.value for metadata_field in fields)


def iter_sources(
    field_order: Sequence[MetadataField] = CANONICAL_FIELD_ORDER,
) -> Iterator[tuple[MetadataField, ...]]:
    """Yield indexed-only sources, then sources that include a non-indexed field.

    Each group runs single fields, then pairs, then triples. Promo-bearing
    combos are only generated once every indexed source is exhausted.
    """
    indexed = [metadata_field for metadata_field in field_order if metadata_field in INDEXED_FIELDS]
    for group_size in range(1, MAX_FIELDS_PER_SOURCE + 1):
        yield from combinations(indexed, group_size)
    for group_size in range(1, MAX_FIELDS_PER_SOURCE + 1):
        for fields in combinations(field_order, group_size):
            if any(metadata_field not in INDEXED_FIELDS for metadata_field in fields):
                yield fields


def compositions(total: int, parts: int) -> Iterator[tuple[int, ...]]:
    """Yield ways to split ``total`` into ``parts`` positive integers, lexicographically."""
    if parts == 1:
        if total >= 1:
            yield (total,)
        return
    for head in range(1, total - parts + 2):
        for tail in compositions(total - head, parts - 1):
            yield (head, *tail)


def iter_source_token_tuples(
    token_lists: Sequence[Sequence[str]],
    length: int,
) -> Iterator[tuple[str, ...]]:
    """Yield token tuples taking at least one token from every list, in list order."""
    if any(not tokens for tokens in token_lists):
        return
    for split in compositions(length, len(token_lists)):
        if any(size > len(tokens) for size, tokens in zip(split, token_lists)):
            continue
        pools = [combinations(tokens, size) for tokens, size in zip(token_lists, split)]
        for parts in product(*pools):
            yield tuple(token for part in parts for token in part)


class ComboGenerator:
    """Enumerates unique, brand-free combos subject to per-source and global caps."""

    def __init__(
        self,
        *,
        lengths: Sequence[int] = (2, 3, 4),
        max_per_source: int = 1500,
        max_total: int = 5000,
    ) -> None:
        self.lengths = tuple(sorted(length for length in lengths if 2 <= length <= 4))
        if not self.lengths:
            raise ConfigurationError("No combo length between 2 and 4 configured", {"lengths": list(lengths)})
        self.max_per_source = max_per_source
        self.max_total = max_total

    def iter_combos(
        self,
        metadata: TokenizedMetadata,
        result: GenerationResult,
    ) -> Iterator[GeneratedCombo]:
        """Yield combos lazily, appending each one to ``result.combos``."""
        seen: set[str] = {combo.text for combo in result.combos}
        brand_tokens = metadata.brand_tokens

        for fields in iter_sources():
            if result.global_cap_reached:
                return
            token_lists = [metadata.keywords(metadata_field) for metadata_field in fields]
            if any(not tokens for tokens in token_lists):
                continue

            key = source_key(fields)
            accepted = 0
            source_capped = False
            for length in self.lengths:
                if source_capped:
                    break
                for tokens in iter_source_token_tuples(token_lists, length):
                    if len(set(tokens)) != len(tokens):
                        continue
                    if brand_tokens and any(token in brand_tokens for token in tokens):
                        continue
                    combo = GeneratedCombo.from_tokens(tokens)
                    if combo.text in seen:
                        continue

                    # Caps trip only when another unique combo is actually pending.
                    if len(result.combos) >= self.max_total:
                        result.global_cap_reached = True
                        logger.warning(
                            "Global combo generation cap reached",
                            extra={"cap": self.max_total, "source": key},
                        )
                        return
                    if accepted >= self.max_per_source:
                        source_capped = True
                        result.capped_sources.append(key)
                        logger.warning(
                            "Per-source combo generation cap reached",
                            extra={"cap": self.max_per_source, "source": key},
                        )
                        break

                    seen.add(combo.text)
                    result.combos.append(combo)
                    accepted += 1
                    yield combo

    def generate(self, metadata: TokenizedMetadata) -> GenerationResult:
        """Generate every combo in one pass."""
        result = GenerationResult(combos=[])
        for _ in self.iter_combos(metadata, result):
            pass
        return result
