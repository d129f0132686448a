"""Recently-shown image window shared by both sampling modes.

The window is a soft "do not repeat" set: samplers consult it to prefer fresh
images but are free to fall back to a repeat when a pool is too small. It is
scoped to one play session and never persisted.
"""

from __future__ import annotations

from collections.abc import Iterable

__all__ = ["SessionHistory"]


class SessionHistory:
    """Bounded, most-recent-first record of image ids."""

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("history limit must be positive")
        self._limit = limit
        self._ids: list[str] = []

    @property
    def limit(self) -> int:
        return self._limit

    def record(self, image_id: str) -> None:
        ids = [image_id]
        ids.extend(existing for existing in self._ids if existing != image_id)
        self._ids = ids[: self._limit]

    def record_many(self, image_ids: Iterable[str]) -> None:
        """Record several ids at once; the first id ends up newest."""

        for image_id in reversed(list(image_ids)):
            self.record(image_id)

    def contains(self, image_id: str) -> bool:
        return image_id in self._ids

    def __contains__(self, image_id: object) -> bool:
        return image_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self._ids)

    def clear(self) -> None:
        self._ids.clear()
