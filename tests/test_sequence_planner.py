from __future__ import annotations

import random

import pytest

from realorai.core.errors import DataUnavailable
from realorai.core.models import Image
from realorai.core.settings import SamplerSettings
from realorai.data.catalog import AssetCatalog
from realorai.dynamic.history import SessionHistory
from realorai.dynamic.sequence import PlannerState, SequencePlanner


def _planner(catalog: AssetCatalog, *, seed: int = 1, **settings: object) -> SequencePlanner:
    return SequencePlanner(catalog, rng=random.Random(seed), settings=SamplerSettings(**settings))


def _passes(planner: SequencePlanner, advances: int) -> list[list[str]]:
    """Group shown ids by reshuffle boundary."""

    passes: list[list[str]] = [[planner.current().id]]
    reshuffles = planner.reshuffles
    for _ in range(advances):
        image = planner.advance()
        if planner.reshuffles != reshuffles:
            reshuffles = planner.reshuffles
            passes.append([])
        passes[-1].append(image.id)
    return passes


def test_uninitialized_planner_returns_none(full_catalog):
    planner = _planner(full_catalog)
    assert planner.state is PlannerState.UNINITIALIZED
    assert planner.current() is None
    assert planner.advance() is None


def test_four_image_pool_full_pass_then_reshuffle(catalog_factory):
    catalog = catalog_factory({"nature": (2, 2)})
    planner = _planner(catalog, seed=4)
    planner.initialize("nature")
    pool = {image.id for image in catalog.pool_for("nature")}

    shown = [planner.current().id] + [planner.advance().id for _ in range(3)]

    assert planner.state is PlannerState.READY
    assert sorted(shown) == sorted(pool)
    assert planner.reshuffles == 0

    fifth = planner.advance()
    assert planner.reshuffles == 1
    assert fifth.id in pool
    assert planner.sequence.cursor == 0


def test_no_repeats_within_each_pass(full_catalog):
    planner = _planner(full_catalog, seed=17, unique_target=50)
    planner.initialize("all")
    pool_size = len(planner.sequence.order)

    passes = _passes(planner, 500)

    assert len(passes[0]) == pool_size
    for ids in passes:
        assert len(set(ids)) == len(ids)


def test_unique_target_triggers_reshuffle_before_end(full_catalog):
    planner = _planner(full_catalog, seed=3, unique_target=5)
    planner.initialize("people")

    for _ in range(4):
        planner.advance()
    assert planner.reshuffles == 0
    assert planner.sequence.unique_seen_since_shuffle == 4

    planner.advance()
    assert planner.reshuffles == 1
    assert planner.sequence.cursor == 0
    assert planner.sequence.unique_seen_since_shuffle == 0


def test_end_of_order_keeps_unique_counter(catalog_factory):
    catalog = catalog_factory({"city": (1, 2)})
    planner = _planner(catalog, seed=2, unique_target=50)
    planner.initialize("city")

    for _ in range(3):
        planner.advance()

    assert planner.reshuffles == 1
    assert planner.sequence.cursor == 0
    assert planner.sequence.unique_seen_since_shuffle == 3


def test_cursor_stays_in_bounds(full_catalog):
    planner = _planner(full_catalog, seed=8, unique_target=7)
    planner.initialize("interior")
    for _ in range(300):
        planner.advance()
        assert 0 <= planner.sequence.cursor < len(planner.sequence.order)
        assert planner.sequence.unique_seen_since_shuffle < 7


class _SingleImageCatalog(AssetCatalog):
    def pool_for(self, category_filter: str) -> list[Image]:
        return super().pool_for(category_filter)[:1]


def test_single_image_pool_repeats(catalog_factory):
    healthy = catalog_factory({"people": (1, 1)})
    catalog = _SingleImageCatalog({"people": healthy.images_for("people")})
    planner = _planner(catalog)
    planner.initialize("people")
    only = planner.current()

    for expected_reshuffles in range(1, 4):
        assert planner.advance() == only
        assert planner.reshuffles == expected_reshuffles


def test_pool_merges_real_and_ai_with_metadata(full_catalog):
    planner = _planner(full_catalog)
    planner.initialize("city")
    order = planner.sequence.order

    assert len(order) == 10
    assert sum(image.is_ai for image in order) == 5
    assert {image.category for image in order} == {"city"}


def test_all_filter_spans_available_categories(small_catalog):
    planner = _planner(small_catalog)
    planner.initialize("all")

    categories = {image.category for image in planner.sequence.order}
    assert categories == {"people", "nature"}
    assert len(planner.sequence.order) == 3 + 4


def test_initialize_rejects_unavailable_category(small_catalog):
    planner = _planner(small_catalog)
    with pytest.raises(DataUnavailable):
        planner.initialize("city")
    assert planner.state is PlannerState.UNINITIALIZED


def test_reinitialize_switches_pool(full_catalog):
    planner = _planner(full_catalog)
    planner.initialize("people")
    planner.advance()
    planner.initialize("nature")

    assert planner.sequence.cursor == 0
    assert planner.category_filter == "nature"
    assert {image.category for image in planner.sequence.order} == {"nature"}


def test_shown_images_feed_shared_history(full_catalog):
    history = SessionHistory(5)
    planner = SequencePlanner(full_catalog, rng=random.Random(6), history=history)
    planner.initialize("people")
    shown = [planner.current().id] + [planner.advance().id for _ in range(2)]

    assert history.snapshot()[:3] == tuple(reversed(shown))


def test_reset_returns_to_uninitialized(full_catalog):
    planner = _planner(full_catalog)
    planner.initialize("people")
    planner.reset()
    assert planner.state is PlannerState.UNINITIALIZED
    assert planner.current() is None


def test_stem_collisions_do_not_repeat_within_a_pass():
    catalog = AssetCatalog.from_filenames(
        {"nature": {"real": ["1.jpg", "1.png", "2.jpg"], "ai": ["1.jpg", "2.jpg", "2.gif"]}}
    )
    planner = _planner(catalog, seed=13)
    planner.initialize("nature")

    shown = [planner.current().id] + [planner.advance().id for _ in range(len(planner.sequence.order) - 1)]

    assert planner.reshuffles == 0
    assert len(shown) == len(set(shown)) == 4
