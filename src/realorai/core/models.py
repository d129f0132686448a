from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

__all__ = [
    "ALL",
    "CATEGORIES",
    "KINDS",
    "Category",
    "CategoryImages",
    "FilterCategory",
    "Image",
    "ImagePair",
    "image_id",
    "normalize_filter",
]

Category = Literal["people", "nature", "city", "interior"]
FilterCategory = Literal["all", "people", "nature", "city", "interior"]

CATEGORIES: tuple[str, ...] = ("people", "nature", "city", "interior")
ALL = "all"

REAL = "real"
AI = "ai"
KINDS: tuple[str, ...] = (REAL, AI)


def image_id(kind: str, category: str, index: int | str) -> str:
    """Return the type-namespaced identifier used for equality and history."""

    return f"{kind}-{category}-{index}"


def normalize_filter(raw: str | None) -> str:
    """Lower-case and strip a filter value; empty input means ``all``."""

    value = (raw or "").strip().lower()
    return value or ALL


@dataclass(frozen=True, slots=True)
class Image:
    id: str
    category: str
    is_ai: bool
    src: str
    # Low-quality placeholder rendered while ``src`` loads.
    lqip_src: str | None = None

    @property
    def kind(self) -> str:
        return AI if self.is_ai else REAL


@dataclass(frozen=True, slots=True)
class ImagePair:
    """One round of the two-image comparison mode."""

    real: Image
    ai: Image
    category: str

    def __post_init__(self) -> None:
        if self.real.is_ai or not self.ai.is_ai:
            raise ValueError("pair must hold one real image and one AI image")

    def images(self) -> tuple[Image, Image]:
        return self.real, self.ai


@dataclass(frozen=True, slots=True)
class CategoryImages:
    """Real and AI partitions of a single category."""

    real: tuple[Image, ...]
    ai: tuple[Image, ...]

    @property
    def available(self) -> bool:
        return bool(self.real) and bool(self.ai)

    def combined(self) -> list[Image]:
        return [*self.real, *self.ai]
