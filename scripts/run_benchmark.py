#!/usr/bin/env python3

"""Run the sampler benchmark from the command line."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

if __package__ is None:
    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))

from realorai.analysis.benchmark import BenchmarkConfig, run_benchmark
from realorai.core.settings import SamplerSettings
from realorai.data.catalog import AssetCatalog, CatalogConfig


def _synthetic_catalog(per_side: int) -> AssetCatalog:
    files = [f"{idx}.jpg" for idx in range(1, per_side + 1)]
    return AssetCatalog.from_filenames(
        {category: {"real": files, "ai": files} for category in ("people", "nature", "city", "interior")}
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run deterministic sampler benchmark")
    parser.add_argument("--root", type=str, default=None, help="Image root; a synthetic catalog is used if omitted")
    parser.add_argument("--per-side", type=int, default=12, help="Synthetic images per category partition")
    parser.add_argument("--rounds", type=int, default=10_000, help="Pairs to draw")
    parser.add_argument("--advances", type=int, default=2_000, help="Sequence advances to walk")
    parser.add_argument("--seed", type=int, default=101, help="RNG seed (default: 101)")
    parser.add_argument("--primary-weight", type=int, default=3, help="Weight of the primary category")
    parser.add_argument("--history", type=int, default=50, help="History window length")
    args = parser.parse_args(argv)

    if args.root:
        catalog = AssetCatalog.from_directory(CatalogConfig(root=Path(args.root)))
    else:
        catalog = _synthetic_catalog(args.per_side)

    config = BenchmarkConfig(
        rounds=args.rounds,
        advances=args.advances,
        seed=args.seed,
        settings=SamplerSettings(history_length=args.history, primary_weight=args.primary_weight),
    )
    result = run_benchmark(catalog, config)
    payload = {
        "chi_square": result.chi_square,
        "degrees_of_freedom": result.degrees_of_freedom,
        "pair_repeat_rate": result.pair_repeat_rate,
        "identical_pairs": result.identical_pairs,
        "sequence_reshuffles": result.sequence_reshuffles,
        "coverage_ok": result.coverage_ok,
        "coverage_window": result.coverage_window,
        "frequencies": [
            {
                "category": freq.category,
                "draws": freq.draws,
                "observed": freq.observed,
                "expected": freq.expected,
            }
            for freq in result.frequencies
        ],
    }

    json.dump(payload, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
