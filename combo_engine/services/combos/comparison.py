"""Baseline vs draft comparison of classified combos.

Pure transformation over two combo lists (for example the live listing and an
edited draft). Combos are matched by text; tier changes use the coarse tier
numbers where lower is better.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from combo_engine.services.combos.types import ClassifiedCombo, StrengthTier


@dataclass(slots=True)
class ComboTierChange:
    text: str
    baseline_tier: StrengthTier
    draft_tier: StrengthTier

    @property
    def improvement(self) -> int:
        """Positive when the draft moved the combo to a better tier."""
        return self.baseline_tier.tier_number - self.draft_tier.tier_number

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "baseline_tier": self.baseline_tier.value,
            "draft_tier": self.draft_tier.value,
            "baseline_tier_number": self.baseline_tier.tier_number,
            "draft_tier_number": self.draft_tier.tier_number,
            "baseline_score": self.baseline_tier.score,
            "draft_score": self.draft_tier.score,
            "improvement": self.improvement,
        }


@dataclass(slots=True)
class ComboDiff:
    added: list[ClassifiedCombo] = field(default_factory=list)
    removed: list[ClassifiedCombo] = field(default_factory=list)
    tier_upgrades: list[ComboTierChange] = field(default_factory=list)
    tier_downgrades: list[ComboTierChange] = field(default_factory=list)
    unchanged: list[ClassifiedCombo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "added": [combo.text for combo in self.added],
            "removed": [combo.text for combo in self.removed],
            "tier_upgrades": [change.to_dict() for change in self.tier_upgrades],
            "tier_downgrades": [change.to_dict() for change in self.tier_downgrades],
            "unchanged": [combo.text for combo in self.unchanged],
        }


def _existing_by_text(combos: Sequence[ClassifiedCombo]) -> dict[str, ClassifiedCombo]:
    return {combo.text: combo for combo in combos if combo.exists}


def _strongest_first(combo: ClassifiedCombo) -> tuple[int, str]:
    return (-combo.strength_score, combo.text)


def diff_combos(baseline: Sequence[ClassifiedCombo], draft: Sequence[ClassifiedCombo]) -> ComboDiff:
    """Compare the combos present in two metadata versions."""
    baseline_map = _existing_by_text(baseline)
    draft_map = _existing_by_text(draft)
    diff = ComboDiff()

    for text, combo in draft_map.items():
        if text not in baseline_map:
            diff.added.append(combo)

    for text, combo in baseline_map.items():
        draft_combo = draft_map.get(text)
        if draft_combo is None:
            diff.removed.append(combo)
            continue
        change = ComboTierChange(text=text, baseline_tier=combo.tier, draft_tier=draft_combo.tier)
        if change.improvement > 0:
            diff.tier_upgrades.append(change)
        elif change.improvement < 0:
            diff.tier_downgrades.append(change)
        else:
            diff.unchanged.append(draft_combo)

    diff.added.sort(key=_strongest_first)
    diff.removed.sort(key=_strongest_first)
    diff.unchanged.sort(key=_strongest_first)
    diff.tier_upgrades.sort(key=lambda change: (-change.improvement, change.text))
    diff.tier_downgrades.sort(key=lambda change: (change.improvement, change.text))
    return diff


def _bucket_counts(combos: Sequence[ClassifiedCombo]) -> dict[str, int]:
    counts = {"excellent": 0, "good": 0, "other": 0}
    for combo in combos:
        if not combo.exists:
            continue
        tier_number = combo.tier.tier_number
        if tier_number == 1:
            counts["excellent"] += 1
        elif tier_number == 2:
            counts["good"] += 1
        else:
            counts["other"] += 1
    return counts


def tier_distribution(
    baseline: Sequence[ClassifiedCombo],
    draft: Sequence[ClassifiedCombo],
) -> dict[str, dict[str, int]]:
    """Existing-combo counts per quality bucket, with draft minus baseline deltas."""
    before = _bucket_counts(baseline)
    after = _bucket_counts(draft)
    return {
        bucket: {
            "baseline": before[bucket],
            "draft": after[bucket],
            "delta": after[bucket] - before[bucket],
        }
        for bucket in ("excellent", "good", "other")
    }
