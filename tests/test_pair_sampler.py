from __future__ import annotations

import random
from collections import Counter

import pytest

from realorai.core.errors import DataUnavailable, StructuralInconsistency
from realorai.core.models import CategoryImages, Image
from realorai.core.settings import SamplerSettings
from realorai.data.catalog import AssetCatalog
from realorai.dynamic.pair_sampler import PairSampler, resolve_categories


def _sampler(catalog: AssetCatalog, *, seed: int = 1, **settings: object) -> PairSampler:
    return PairSampler(catalog, rng=random.Random(seed), settings=SamplerSettings(**settings))


def test_pair_has_one_real_and_one_ai(full_catalog):
    sampler = _sampler(full_catalog)
    for _ in range(200):
        pair = sampler.next_pair("all")
        assert pair.real.is_ai is False
        assert pair.ai.is_ai is True
        assert pair.real.category == pair.ai.category == pair.category
        assert pair.real.id != pair.ai.id


def test_single_ai_image_is_forced_and_real_alternates(catalog_factory):
    catalog = catalog_factory({"people": (2, 1)})
    sampler = _sampler(catalog, seed=5, history_length=2)

    pairs = [sampler.next_pair("people") for _ in range(5)]

    assert all(pair.ai.id == "ai-people-1" for pair in pairs)
    reals = [pair.real.id for pair in pairs]
    assert set(reals) == {"real-people-1", "real-people-2"}
    assert all(first != second for first, second in zip(reals, reals[1:]))


def test_real_avoids_repeat_while_history_allows(catalog_factory):
    catalog = catalog_factory({"people": (2, 1)})
    sampler = _sampler(catalog, seed=9)

    first = sampler.next_pair("people")
    second = sampler.next_pair("people")

    assert first.real.id != second.real.id
    # Both real images are now in the window, so the third round must repeat rather than block.
    third = sampler.next_pair("people")
    assert third.real.id in {first.real.id, second.real.id}


def test_history_records_pair_newest_first(full_catalog):
    sampler = _sampler(full_catalog, history_length=4)
    first = sampler.next_pair("nature")
    second = sampler.next_pair("nature")

    assert sampler.history.snapshot() == (second.real.id, second.ai.id, first.real.id, first.ai.id)
    sampler.next_pair("nature")
    assert len(sampler.history) == 4


def test_fresh_images_preferred_over_recent(full_catalog):
    sampler = _sampler(full_catalog, seed=21, history_length=50, max_attempts=200)
    seen: list[str] = []
    for _ in range(4):
        pair = sampler.next_pair("interior")
        seen.extend([pair.real.id, pair.ai.id])

    # Interior has four images per side: four rounds should exhaust them without repeats.
    assert len(seen) == len(set(seen)) == 8


def test_ai_avoids_colliding_id_when_pool_allows():
    real = Image(id="shared", category="city", is_ai=False, src="/r.jpg")
    ai_same = Image(id="shared", category="city", is_ai=True, src="/a1.jpg")
    ai_other = Image(id="other", category="city", is_ai=True, src="/a2.jpg")
    catalog = AssetCatalog({"city": CategoryImages(real=(real,), ai=(ai_same, ai_other))})
    sampler = _sampler(catalog, seed=3, history_length=1)

    for _ in range(100):
        pair = sampler.next_pair("city")
        assert pair.ai.id != pair.real.id


def test_primary_category_weighting(catalog_factory):
    catalog = catalog_factory({"people": (10, 10), "nature": (10, 10)})
    sampler = _sampler(catalog, seed=1234)

    counts = Counter(sampler.next_pair("all").category for _ in range(10_000))

    assert counts["people"] / 10_000 == pytest.approx(3 / 4, abs=0.02)


def test_uniform_draw_when_primary_absent(catalog_factory):
    catalog = catalog_factory({"nature": (5, 5), "city": (5, 5), "interior": (5, 5)})
    sampler = _sampler(catalog, seed=77)

    counts = Counter(sampler.next_pair("all").category for _ in range(9_000))

    for category in ("nature", "city", "interior"):
        assert counts[category] / 9_000 == pytest.approx(1 / 3, abs=0.03)


def test_concrete_category_is_respected(full_catalog):
    sampler = _sampler(full_catalog)
    assert {sampler.next_pair("city").category for _ in range(50)} == {"city"}


def test_category_without_ai_images_is_unavailable(small_catalog):
    sampler = _sampler(small_catalog)
    with pytest.raises(DataUnavailable):
        sampler.next_pair("city")
    assert len(sampler.history) == 0


def test_unknown_category_is_unavailable(full_catalog):
    with pytest.raises(DataUnavailable):
        _sampler(full_catalog).next_pair("animals")


def test_empty_catalog_reports_no_categories():
    with pytest.raises(DataUnavailable, match="no categories available"):
        _sampler(AssetCatalog({})).next_pair("all")


def test_all_filter_skips_unavailable_categories(small_catalog):
    assert resolve_categories(small_catalog, "all") == ("people", "nature")
    sampler = _sampler(small_catalog)
    assert {sampler.next_pair("all").category for _ in range(100)} <= {"people", "nature"}


class _CorruptCatalog(AssetCatalog):
    def images_for(self, category: str) -> CategoryImages:
        return CategoryImages(real=(), ai=())


def test_empty_partition_after_availability_is_structural(catalog_factory, caplog):
    healthy = catalog_factory({"people": (2, 2)})
    corrupt = _CorruptCatalog({"people": healthy.images_for("people")})

    with caplog.at_level("ERROR"):
        with pytest.raises(StructuralInconsistency):
            _sampler(corrupt).next_pair("people")
    assert any("Data mismatch" in record.message for record in caplog.records)


def test_reset_clears_history(full_catalog):
    sampler = _sampler(full_catalog)
    sampler.next_pair("all")
    sampler.reset()
    assert len(sampler.history) == 0


def test_same_seed_reproduces_pairs(full_catalog):
    a = _sampler(full_catalog, seed=8)
    b = _sampler(full_catalog, seed=8)
    left = [(pair.real.id, pair.ai.id) for pair in (a.next_pair("all") for _ in range(25))]
    right = [(pair.real.id, pair.ai.id) for pair in (b.next_pair("all") for _ in range(25))]
    assert left == right
