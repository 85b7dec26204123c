"""Run keyword combo analysis on a JSON or YAML metadata document."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import yaml

from combo_engine.core.exceptions import ComboEngineError
from combo_engine.core.logging import setup_logging
from combo_engine.services.combos.engine import analyze
from combo_engine.services.combos.scoring import format_priority_breakdown, priority_band
from combo_engine.services.combos.types import ComboAnalysis


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="Path to a JSON/YAML document with metadata, signals and options (default: stdin)",
    )
    parser.add_argument(
        "--top-n",
        type=int,
        default=None,
        help="Override the number of combos returned",
    )
    parser.add_argument(
        "--format",
        choices=["json", "table"],
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Engine log level (default: COMBO_ENGINE_LOG_LEVEL or INFO)",
    )
    return parser.parse_args(argv)


def load_document(source: str) -> dict[str, Any]:
    """Load the input document; YAML is a superset of JSON so one loader covers both."""
    if source == "-":
        raw = sys.stdin.read()
    else:
        raw = Path(source).read_text(encoding="utf-8")
    document = yaml.safe_load(raw) or {}
    if not isinstance(document, dict):
        raise ValueError("Input document must be a mapping with a 'metadata' key")
    return document


def render_table(result: ComboAnalysis) -> str:
    """Render results as an aligned plain-text table."""
    lines = [
        f"{'#':>4}  {'combo':<40} {'tier':<26} {'total':>5}  band",
        "-" * 86,
    ]
    for index, combo in enumerate(result.combos, start=1):
        lines.append(
            f"{index:>4}  {combo.text:<40} {combo.tier.value:<26} "
            f"{combo.total:>5}  {priority_band(combo.total)}"
        )
    stats = result.stats
    lines.append("")
    lines.append(
        f"possible={stats.total_possible} existing={stats.existing} "
        f"missing={stats.missing} coverage={stats.coverage}% "
        f"limit_reached={result.limit_reached}"
    )
    if result.combos:
        lines.append("")
        lines.append(f"Top combo: {result.combos[0].text}")
        lines.append(format_priority_breakdown(result.combos[0].priority))
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        document = load_document(args.input)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Failed to load input document: {exc}", file=sys.stderr)
        return 1

    options = dict(document.get("options") or {})
    if args.top_n is not None:
        options.pop("topN", None)
        options["top_n"] = args.top_n

    try:
        result = analyze(
            document.get("metadata") or {},
            document.get("signals") or {},
            options,
        )
    except ComboEngineError as exc:
        print(f"Combo analysis failed: {exc.message}", file=sys.stderr)
        if exc.details:
            print(json.dumps(exc.details, default=str, indent=2), file=sys.stderr)
        return 2

    if args.format == "table":
        print(render_table(result))
    else:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
