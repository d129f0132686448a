"""Exception taxonomy for the content sampler.

Nothing in the sampler is transient: every input is already resident in
memory, so none of these errors is worth retrying.
"""

from __future__ import annotations

__all__ = ["DataUnavailable", "RealOrAIError", "StructuralInconsistency"]


class RealOrAIError(Exception):
    """Base class for errors raised by the game backend."""


class DataUnavailable(RealOrAIError, LookupError):
    """No usable category exists, or the requested one lacks a partition."""


class StructuralInconsistency(RealOrAIError, RuntimeError):
    """A category passed the availability check but a partition reads empty."""
