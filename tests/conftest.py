from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure "src" is on sys.path for imports in tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from realorai.data.catalog import AssetCatalog  # noqa: E402


def make_catalog(listing: dict[str, tuple[int, int]]) -> AssetCatalog:
    """Build a catalog with ``real`` and ``ai`` image counts per category."""

    return AssetCatalog.from_filenames(
        {
            category: {
                "real": [f"{idx}.jpg" for idx in range(1, real + 1)],
                "ai": [f"{idx}.jpg" for idx in range(1, ai + 1)],
            }
            for category, (real, ai) in listing.items()
        }
    )


@pytest.fixture
def full_catalog() -> AssetCatalog:
    return make_catalog({"people": (8, 8), "nature": (6, 6), "city": (5, 5), "interior": (4, 4)})


@pytest.fixture
def small_catalog() -> AssetCatalog:
    return make_catalog({"people": (2, 1), "nature": (2, 2), "city": (3, 0)})


@pytest.fixture
def catalog_factory():
    return make_catalog
