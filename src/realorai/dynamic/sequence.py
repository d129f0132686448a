"""Shuffled walk over a category pool for the single-image mode.

A master ordering is a random permutation of the pool. The planner walks it
with a cursor and reshuffles when either the end of the ordering is reached or
``unique_target`` advances have happened since the last target-triggered
reshuffle. Within any ``min(unique_target, len(pool))`` consecutive results
no image is shown twice, which neither uniform draws nor round-robin give.
"""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass, field

from ..core.errors import DataUnavailable
from ..core.models import ALL, Image, normalize_filter
from ..core.settings import SamplerSettings
from ..data.catalog import AssetCatalog
from .history import SessionHistory
from .pair_sampler import resolve_categories
from .sampling import shuffled

__all__ = ["MasterSequence", "PlannerState", "ReshuffleReason", "SequencePlanner"]

logger = logging.getLogger(__name__)


class PlannerState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class ReshuffleReason(enum.Enum):
    END_OF_ORDER = "end_of_order"
    UNIQUE_TARGET = "unique_target"


@dataclass
class MasterSequence:
    order: list[Image] = field(default_factory=list)
    cursor: int = 0
    unique_seen_since_shuffle: int = 0

    def current(self) -> Image | None:
        if not self.order:
            return None
        return self.order[self.cursor]


class SequencePlanner:
    def __init__(
        self,
        catalog: AssetCatalog,
        *,
        rng: random.Random | None = None,
        settings: SamplerSettings | None = None,
        history: SessionHistory | None = None,
    ) -> None:
        self.catalog = catalog
        self.settings = settings or SamplerSettings()
        self.rng = rng or random.Random()
        self.history = history
        self.sequence = MasterSequence()
        self.category_filter: str | None = None
        self.reshuffles = 0
        self._state = PlannerState.UNINITIALIZED

    @property
    def state(self) -> PlannerState:
        return self._state

    def initialize(self, category_filter: str = ALL) -> None:
        key = normalize_filter(category_filter)
        resolve_categories(self.catalog, key)
        pool = self.catalog.pool_for(key)
        if not pool:
            raise DataUnavailable(f"no images available for '{key}'")
        order = shuffled(pool, self.rng)
        self.sequence = MasterSequence(order=order)
        self.category_filter = key
        self.reshuffles = 0
        self._state = PlannerState.READY
        self._remember(self.sequence.current())
        logger.debug("sequence initialised", extra={"filter": key, "pool": len(order)})

    def current(self) -> Image | None:
        return self.sequence.current()

    def advance(self) -> Image | None:
        seq = self.sequence
        if self._state is PlannerState.UNINITIALIZED or not seq.order:
            return None
        seq.cursor += 1
        seq.unique_seen_since_shuffle += 1
        reason = self._reshuffle_reason()
        if reason is not None:
            self.rng.shuffle(seq.order)
            seq.cursor = 0
            if reason is ReshuffleReason.UNIQUE_TARGET:
                seq.unique_seen_since_shuffle = 0
            self.reshuffles += 1
            logger.debug(
                "sequence reshuffled",
                extra={"reason": reason.value, "pool": len(seq.order), "reshuffles": self.reshuffles},
            )
        image = seq.current()
        self._remember(image)
        return image

    def reset(self) -> None:
        """Drop the master ordering; ``initialize`` must be called again."""

        self.sequence = MasterSequence()
        self.category_filter = None
        self.reshuffles = 0
        self._state = PlannerState.UNINITIALIZED

    def _reshuffle_reason(self) -> ReshuffleReason | None:
        seq = self.sequence
        if seq.unique_seen_since_shuffle >= self.settings.unique_target:
            return ReshuffleReason.UNIQUE_TARGET
        if seq.cursor >= len(seq.order):
            return ReshuffleReason.END_OF_ORDER
        return None

    def _remember(self, image: Image | None) -> None:
        if image is not None and self.history is not None:
            self.history.record(image.id)
