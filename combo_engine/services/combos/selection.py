"""Top-N selection, aggregate stats and combo list utilities."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from combo_engine.services.combos.types import (
    ClassifiedCombo,
    ComboStats,
    ScoredCombo,
    SelectionResult,
    StrengthTier,
)


def priority_sort_key(combo: ScoredCombo) -> tuple[int, int, str]:
    """Total desc, then tier score desc, then combo text asc."""
    return (-combo.priority.total, -combo.tier.score, combo.text)


def select_top_combos(combos: Sequence[ScoredCombo], limit: int = 500) -> SelectionResult:
    """Order scored combos deterministically and truncate to ``limit``."""
    ordered = sorted(combos, key=priority_sort_key)
    return SelectionResult(
        results=ordered[: max(0, limit)],
        total_generated=len(combos),
        limit_reached=len(combos) > limit,
    )


def recommend_missing(combos: Sequence[ScoredCombo], limit: int = 10) -> list[ScoredCombo]:
    """Highest-priority combos the metadata does not contain yet."""
    missing = sorted((combo for combo in combos if not combo.exists), key=priority_sort_key)
    recommended: list[ScoredCombo] = []
    for combo in missing[: max(0, limit)]:
        recommended.append(
            ScoredCombo(
                classified=combo.classified,
                priority=combo.priority,
                recommendation=(
                    f'Consider adding "{combo.text}" - priority {combo.priority.total}/100'
                ),
            )
        )
    return recommended


def calculate_stats(
    combos: Sequence[ClassifiedCombo],
    *,
    duplicated_tokens: Sequence[str] = (),
    generation_capped: bool = False,
) -> ComboStats:
    """Aggregate tier, existence and length counts over every possible combo."""
    by_tier = {tier.value: 0 for tier in StrengthTier}
    by_length: dict[int, int] = {}
    existing = 0
    for combo in combos:
        by_tier[combo.tier.value] += 1
        by_length[combo.length] = by_length.get(combo.length, 0) + 1
        if combo.exists:
            existing += 1

    total = len(combos)
    coverage = round(existing / total * 100, 1) if total else 0.0
    return ComboStats(
        total_possible=total,
        existing=existing,
        missing=total - existing,
        coverage=coverage,
        by_tier=by_tier,
        by_length=dict(sorted(by_length.items())),
        duplicated_tokens=list(duplicated_tokens),
        generation_capped=generation_capped,
    )


def filter_combos_by_keyword(combos: Iterable[ClassifiedCombo], keyword: str) -> list[ClassifiedCombo]:
    """Combos with at least one token containing ``keyword`` (case-insensitive)."""
    needle = keyword.strip().lower()
    if not needle:
        return list(combos)
    return [combo for combo in combos if any(needle in token for token in combo.tokens)]


def group_combos_by_length(combos: Iterable[ClassifiedCombo]) -> dict[int, list[ClassifiedCombo]]:
    groups: dict[int, list[ClassifiedCombo]] = defaultdict(list)
    for combo in combos:
        groups[combo.length].append(combo)
    return dict(sorted(groups.items()))


def count_combos_with_keyword(combos: Iterable[ClassifiedCombo], keyword: str) -> int:
    return len(filter_combos_by_keyword(combos, keyword))
