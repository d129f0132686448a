"""Deterministic benchmark harness for the content samplers.

Drives a :class:`PairSampler` and a :class:`SequencePlanner` with a seeded RNG
and reports how the observed behaviour compares to the intended policy:
category weighting, repeat avoidance and sequence coverage. Cheap enough to
run on every tweak to the sampler constants.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field

import numpy as np

from ..core.models import ALL
from ..core.settings import SamplerSettings
from ..data.catalog import AssetCatalog
from ..dynamic.history import SessionHistory
from ..dynamic.pair_sampler import PairSampler, resolve_categories
from ..dynamic.sampling import category_weights
from ..dynamic.sequence import SequencePlanner

__all__ = [
    "BenchmarkConfig",
    "BenchmarkResult",
    "CategoryFrequency",
    "run_benchmark",
]


@dataclass(frozen=True)
class BenchmarkConfig:
    rounds: int = 10_000
    advances: int = 2_000
    seed: int = 101
    category: str = ALL
    settings: SamplerSettings = field(default_factory=SamplerSettings)

    def __post_init__(self) -> None:
        if self.rounds <= 0:
            raise ValueError("rounds must be positive")
        if self.advances <= 0:
            raise ValueError("advances must be positive")


@dataclass(frozen=True)
class CategoryFrequency:
    category: str
    draws: int
    observed: float
    expected: float


@dataclass(frozen=True)
class BenchmarkResult:
    frequencies: tuple[CategoryFrequency, ...]
    chi_square: float
    degrees_of_freedom: int
    pair_repeat_rate: float
    identical_pairs: int
    sequence_reshuffles: int
    min_repeat_gap: int | None
    coverage_window: int

    @property
    def coverage_ok(self) -> bool:
        return self.min_repeat_gap is None


def _expected_shares(categories: tuple[str, ...], settings: SamplerSettings) -> np.ndarray:
    weights = category_weights(categories, settings.primary_category, settings.primary_weight)
    raw = np.array([weights[cat] for cat in categories], dtype=float)
    return raw / raw.sum()


def _pair_stats(
    catalog: AssetCatalog,
    config: BenchmarkConfig,
) -> tuple[tuple[CategoryFrequency, ...], float, int, float, int]:
    categories = resolve_categories(catalog, config.category)
    history = SessionHistory(config.settings.history_length)
    sampler = PairSampler(catalog, rng=random.Random(config.seed), settings=config.settings, history=history)
    index = {cat: pos for pos, cat in enumerate(categories)}
    counts = np.zeros(len(categories), dtype=float)
    repeats = 0
    identical = 0
    for _ in range(config.rounds):
        seen_before = set(history.snapshot())
        pair = sampler.next_pair(config.category)
        counts[index[pair.category]] += 1
        repeats += int(pair.real.id in seen_before) + int(pair.ai.id in seen_before)
        identical += int(pair.real.id == pair.ai.id)

    expected_shares = _expected_shares(categories, config.settings)
    expected_counts = expected_shares * config.rounds
    chi_square = float(np.sum((counts - expected_counts) ** 2 / expected_counts))
    frequencies = tuple(
        CategoryFrequency(
            category=cat,
            draws=int(counts[pos]),
            observed=float(counts[pos] / config.rounds),
            expected=float(expected_shares[pos]),
        )
        for cat, pos in index.items()
    )
    repeat_rate = repeats / (2.0 * config.rounds)
    return frequencies, chi_square, max(0, len(categories) - 1), repeat_rate, identical


def _sequence_stats(catalog: AssetCatalog, config: BenchmarkConfig) -> tuple[int, int | None, int]:
    planner = SequencePlanner(catalog, rng=random.Random(config.seed + 1), settings=config.settings)
    planner.initialize(config.category)
    pool_size = len(planner.sequence.order)
    window = min(config.settings.unique_target, pool_size)
    passes: list[list[str]] = [[]]
    reshuffles = planner.reshuffles
    first = planner.current()
    if first is not None:
        passes[-1].append(first.id)
    for _ in range(config.advances):
        image = planner.advance()
        if image is None:
            break
        if planner.reshuffles != reshuffles:
            reshuffles = planner.reshuffles
            passes.append([])
        passes[-1].append(image.id)

    # Smallest distance between two showings of the same id inside one pass.
    min_gap: int | None = None
    for ids in passes:
        last_seen: dict[str, int] = {}
        for position, image_id in enumerate(ids):
            if image_id in last_seen:
                gap = position - last_seen[image_id]
                min_gap = gap if min_gap is None else min(min_gap, gap)
            last_seen[image_id] = position
    return planner.reshuffles, min_gap, window


def run_benchmark(catalog: AssetCatalog, config: BenchmarkConfig | None = None) -> BenchmarkResult:
    cfg = config or BenchmarkConfig()
    frequencies, chi_square, dof, repeat_rate, identical = _pair_stats(catalog, cfg)
    reshuffles, min_gap, window = _sequence_stats(catalog, cfg)
    return BenchmarkResult(
        frequencies=frequencies,
        chi_square=chi_square,
        degrees_of_freedom=dof,
        pair_repeat_rate=repeat_rate,
        identical_pairs=identical,
        sequence_reshuffles=reshuffles,
        min_repeat_gap=min_gap,
        coverage_window=window,
    )
