from __future__ import annotations

import logging
import random

from ..core.errors import DataUnavailable, StructuralInconsistency
from ..core.models import ALL, CATEGORIES, ImagePair, normalize_filter
from ..core.settings import SamplerSettings
from ..data.catalog import AssetCatalog
from .history import SessionHistory
from .sampling import draw_avoiding, weighted_category_choice

__all__ = ["PairSampler", "resolve_categories"]

logger = logging.getLogger(__name__)


def resolve_categories(catalog: AssetCatalog, category_filter: str) -> tuple[str, ...]:
    """Return the working category set for a filter, or raise :class:`DataUnavailable`."""

    available = catalog.available_categories()
    if not available:
        raise DataUnavailable("no categories available")
    key = normalize_filter(category_filter)
    if key == ALL:
        return available
    if key not in CATEGORIES:
        raise DataUnavailable(f"unknown category '{category_filter}'")
    if key not in available:
        raise DataUnavailable(f"category unavailable: {key}")
    return (key,)


class PairSampler:
    """Draws one real and one AI image per round for the comparison mode."""

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
        self.history = history if history is not None else SessionHistory(self.settings.history_length)

    def choose_category(self, category_filter: str) -> str:
        categories = resolve_categories(self.catalog, category_filter)
        if len(categories) == 1:
            return categories[0]
        return weighted_category_choice(
            categories,
            self.rng,
            primary=self.settings.primary_category,
            primary_weight=self.settings.primary_weight,
        )

    def next_pair(self, category_filter: str = ALL) -> ImagePair:
        category = self.choose_category(category_filter)
        images = self.catalog.images_for(category)
        if not images.real or not images.ai:
            logger.error(
                "Data mismatch: empty partition for available category",
                extra={"category": category, "real": len(images.real), "ai": len(images.ai)},
            )
            raise StructuralInconsistency(f"empty image partition for available category '{category}'")

        history = self.history
        max_attempts = self.settings.max_attempts
        real, real_fresh = draw_avoiding(
            images.real,
            self.rng,
            lambda image: image.id in history,
            max_attempts=max_attempts,
        )
        several_ai = len(images.ai) > 1
        ai, ai_fresh = draw_avoiding(
            images.ai,
            self.rng,
            lambda image: image.id in history or (several_ai and image.id == real.id),
            max_attempts=max_attempts,
        )

        history.record_many((real.id, ai.id))
        logger.debug(
            "pair selected",
            extra={
                "category": category,
                "real": real.id,
                "ai": ai.id,
                "real_repeat": not real_fresh,
                "ai_repeat": not ai_fresh,
            },
        )
        return ImagePair(real=real, ai=ai, category=category)

    def reset(self) -> None:
        self.history.clear()
