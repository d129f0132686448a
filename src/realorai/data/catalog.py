from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.errors import DataUnavailable
from ..core.models import ALL, CATEGORIES, KINDS, CategoryImages, Image, image_id, normalize_filter

__all__ = [
    "IMAGE_EXTENSIONS",
    "AssetCatalog",
    "CatalogConfig",
    "default_image_root",
    "get_catalog",
]

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS: frozenset[str] = frozenset({".jpg", ".jpeg", ".png", ".webp", ".gif"})
_LQIP_MARKER = ".lqip"
_ENV_ROOT = "REALORAI_IMAGE_ROOT"
_EMPTY = CategoryImages(real=(), ai=())


@dataclass(slots=True)
class CatalogConfig:
    """Where images live on disk and the URL prefix they are served under."""

    root: Path
    url_prefix: str = "/images"


def default_image_root() -> Path:
    raw = os.environ.get(_ENV_ROOT)
    if raw:
        return Path(raw).expanduser()
    return Path.cwd() / "public" / "images"


def _file_index(stem: str) -> int | str:
    return int(stem) if stem.isdigit() else stem


def _sort_key(image: Image) -> tuple[int, int, str]:
    index = image.id.rsplit("-", 1)[-1]
    if index.isdigit():
        return 0, int(index), ""
    return 1, 0, index


def _unique_by_id(images: Iterable[Image]) -> tuple[Image, ...]:
    """Keep the first image per id; ids are unique within a partition."""

    seen: set[str] = set()
    kept: list[Image] = []
    for image in images:
        if image.id in seen:
            logger.warning("Skipping duplicate image id %s (%s)", image.id, image.src)
            continue
        seen.add(image.id)
        kept.append(image)
    return tuple(kept)


def _build_image(category: str, kind: str, filename: str, url_prefix: str) -> Image:
    stem = filename.rsplit(".", 1)[0] if "." in filename else filename
    base = f"{url_prefix.rstrip('/')}/{category}/{kind}/"
    return Image(
        id=image_id(kind, category, _file_index(stem)),
        category=category,
        is_ai=kind == "ai",
        src=base + filename,
        lqip_src=f"{base}{stem}.lqip.jpg",
    )


class AssetCatalog:
    """Immutable category -> {real, ai} index of the playable images.

    Built once (from a directory tree, a JSON manifest or an in-memory mapping)
    and then only read. A category is *available* when both of its partitions
    are non-empty.
    """

    def __init__(self, partitions: Mapping[str, CategoryImages]) -> None:
        cleaned: dict[str, CategoryImages] = {}
        for category, images in partitions.items():
            if category not in CATEGORIES:
                logger.warning("Skipping unknown category %r", category)
                continue
            cleaned[category] = CategoryImages(
                real=_unique_by_id(sorted(images.real, key=_sort_key)),
                ai=_unique_by_id(sorted(images.ai, key=_sort_key)),
            )
        self._partitions = cleaned
        self._available = tuple(cat for cat in CATEGORIES if cat in cleaned and cleaned[cat].available)

    # ------------------------------------------------------------ constructors
    @classmethod
    def from_images(cls, images: Iterable[Image]) -> AssetCatalog:
        real: dict[str, list[Image]] = {}
        ai: dict[str, list[Image]] = {}
        for image in images:
            bucket = ai if image.is_ai else real
            bucket.setdefault(image.category, []).append(image)
        categories = set(real) | set(ai)
        return cls(
            {cat: CategoryImages(real=tuple(real.get(cat, ())), ai=tuple(ai.get(cat, ()))) for cat in categories}
        )

    @classmethod
    def from_filenames(
        cls,
        listing: Mapping[str, Mapping[str, Iterable[str]]],
        *,
        url_prefix: str = "/images",
    ) -> AssetCatalog:
        """Build from ``{category: {"real": [file, ...], "ai": [file, ...]}}``."""

        images: list[Image] = []
        for category, kinds in listing.items():
            if not isinstance(kinds, Mapping):
                raise ValueError(f"Invalid catalog entry for category {category!r}")
            for kind, filenames in kinds.items():
                if kind not in KINDS:
                    logger.warning("Skipping unknown image kind %r in category %r", kind, category)
                    continue
                for filename in filenames:
                    if not _is_playable(filename):
                        continue
                    images.append(_build_image(category, kind, filename, url_prefix))
        return cls.from_images(images)

    @classmethod
    def from_manifest(cls, path: Path, *, url_prefix: str = "/images") -> AssetCatalog:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError("Invalid catalog manifest payload")
        return cls.from_filenames(data, url_prefix=url_prefix)

    @classmethod
    def from_directory(cls, config: CatalogConfig | None = None) -> AssetCatalog:
        """Scan ``root/<category>/<real|ai>/<file>`` for playable images."""

        cfg = config or CatalogConfig(root=default_image_root())
        listing: dict[str, dict[str, list[str]]] = {}
        if not cfg.root.is_dir():
            logger.warning("Image root %s does not exist; catalog is empty", cfg.root)
            return cls({})
        for category_dir in sorted(p for p in cfg.root.iterdir() if p.is_dir()):
            if category_dir.name not in CATEGORIES:
                logger.warning("Skipping unknown category directory %s", category_dir)
                continue
            for kind_dir in sorted(p for p in category_dir.iterdir() if p.is_dir()):
                files = sorted(p.name for p in kind_dir.iterdir() if p.is_file())
                listing.setdefault(category_dir.name, {})[kind_dir.name] = files
        return cls.from_filenames(listing, url_prefix=cfg.url_prefix)

    # ----------------------------------------------------------------- queries
    def available_categories(self) -> tuple[str, ...]:
        return self._available

    def is_available(self, category: str) -> bool:
        return category in self._available

    def images_for(self, category: str) -> CategoryImages:
        """Return both partitions; empty partitions for an unavailable category."""

        if category in self._available:
            return self._partitions[category]
        logger.warning("images_for called for unavailable or empty category: %s", category)
        return _EMPTY

    def pool_for(self, category_filter: str) -> list[Image]:
        """Combined real + AI pool for a category filter (``all`` merges every available category)."""

        key = normalize_filter(category_filter)
        if key == ALL:
            return self.all_unique_images(available_only=True)
        if key not in CATEGORIES:
            raise DataUnavailable(f"unknown category '{category_filter}'")
        if key not in self._available:
            raise DataUnavailable(f"category unavailable: {key}")
        return self._partitions[key].combined()

    def all_unique_images(self, *, available_only: bool = False) -> list[Image]:
        seen: set[str] = set()
        images: list[Image] = []
        for category in CATEGORIES:
            entry = self._partitions.get(category)
            if entry is None or (available_only and category not in self._available):
                continue
            for image in entry.combined():
                if image.id in seen:
                    continue
                seen.add(image.id)
                images.append(image)
        return images

    def describe(self) -> dict[str, dict[str, object]]:
        return {
            category: {
                "real": len(entry.real),
                "ai": len(entry.ai),
                "available": category in self._available,
            }
            for category, entry in ((cat, self._partitions[cat]) for cat in CATEGORIES if cat in self._partitions)
        }

    def __len__(self) -> int:
        return sum(len(entry.real) + len(entry.ai) for entry in self._partitions.values())


def _is_playable(filename: str) -> bool:
    lowered = filename.lower()
    if "." not in lowered:
        return False
    stem, ext = lowered.rsplit(".", 1)
    if f".{ext}" not in IMAGE_EXTENSIONS:
        return False
    return not stem.endswith(_LQIP_MARKER)


_CATALOG: Optional[AssetCatalog] = None
_CATALOG_STAMP: Optional[tuple[str, float]] = None


def get_catalog() -> AssetCatalog:
    """Return the process-wide catalog for the configured image root, rebuilding on change."""

    global _CATALOG, _CATALOG_STAMP
    root = default_image_root()
    try:
        stamp = (str(root), root.stat().st_mtime)
    except FileNotFoundError:
        stamp = (str(root), 0.0)
    if _CATALOG is None or _CATALOG_STAMP != stamp:
        _CATALOG = AssetCatalog.from_directory(CatalogConfig(root=root))
        _CATALOG_STAMP = stamp
        logger.debug("catalog loaded", extra={"root": str(root), "images": len(_CATALOG)})
    return _CATALOG
