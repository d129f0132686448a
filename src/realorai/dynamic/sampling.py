"""Random selection helpers shared by the pair sampler and the sequence planner.

Keeping the draw primitives here lets both modes (and the benchmark) share one
consistent notion of weighting and bounded retries.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from typing import TypeVar

__all__ = [
    "category_weights",
    "draw_avoiding",
    "shuffled",
    "weighted_category_choice",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def category_weights(available: Sequence[str], primary: str, primary_weight: int) -> dict[str, int]:
    """Return the replication count of each category in the virtual draw list.

    The primary category is only boosted when it is available alongside at least
    one other category; otherwise every category weighs one.
    """

    boost = primary in available and len(available) > 1
    return {cat: (primary_weight if boost and cat == primary else 1) for cat in available}


def weighted_category_choice(
    available: Sequence[str],
    rng: random.Random,
    *,
    primary: str,
    primary_weight: int,
) -> str:
    if not available:
        raise ValueError("available categories cannot be empty")
    weights = category_weights(available, primary, primary_weight)
    if weights.get(primary, 1) == 1:
        return available[rng.randrange(len(available))]
    weighted_list: list[str] = []
    for category in available:
        weighted_list.extend([category] * weights[category])
    return weighted_list[rng.randrange(len(weighted_list))]


def draw_avoiding(
    pool: Sequence[T],
    rng: random.Random,
    reject: Callable[[T], bool],
    *,
    max_attempts: int,
) -> tuple[T, bool]:
    """Draw uniformly from ``pool``, retrying while ``reject`` holds.

    Returns the accepted item and whether it satisfied ``reject``'s constraints.
    After ``max_attempts`` draws the last one is accepted regardless, so a tiny
    pool can repeat instead of blocking.
    """

    if not pool:
        raise ValueError("pool cannot be empty")
    attempts = max(1, max_attempts)
    candidate = pool[rng.randrange(len(pool))]
    for _ in range(attempts - 1):
        if not reject(candidate):
            return candidate, True
        candidate = pool[rng.randrange(len(pool))]
    if reject(candidate):
        logger.debug("Exhausted %d attempts; accepting a repeat.", attempts)
        return candidate, False
    return candidate, True


def shuffled(items: Sequence[T], rng: random.Random) -> list[T]:
    result = list(items)
    rng.shuffle(result)
    return result
