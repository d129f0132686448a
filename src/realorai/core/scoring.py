from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

__all__ = [
    "FEEDBACK_TIERS",
    "ScoreBoard",
    "SummaryFeedback",
    "SummaryStats",
    "accuracy_pct",
    "share_text",
    "summarize_records",
    "summary_feedback",
]

GAME_TITLE = "Real or AI?"


@dataclass(frozen=True)
class SummaryFeedback:
    title: str
    message: str
    tip: str
    emoji: str


# Ordered by descending accuracy floor; the last tier catches everything below.
FEEDBACK_TIERS: tuple[tuple[int, SummaryFeedback], ...] = (
    (
        90,
        SummaryFeedback(
            title="AI Detection Master! 🎯",
            message="You're practically a human lie detector! Your ability to spot AI-generated content is exceptional.",
            tip="Try switching to a different category to test your skills across various image types.",
            emoji="🏆",
        ),
    ),
    (
        80,
        SummaryFeedback(
            title="Sharp Eye! 👁️",
            message="Great job! You have a keen eye for spotting the subtle differences between real and AI-generated images.",
            tip="Challenge yourself with a new category to expand your detection skills.",
            emoji="🎉",
        ),
    ),
    (
        70,
        SummaryFeedback(
            title="Getting There! 📈",
            message="Not bad! You're developing a good sense for AI-generated content, but there's room to improve.",
            tip="Pay attention to lighting inconsistencies and unnatural details in AI images.",
            emoji="👍",
        ),
    ),
    (
        60,
        SummaryFeedback(
            title="Learning! 🧠",
            message="You're on the right track! AI detection takes practice - keep observing the details.",
            tip="Look for overly perfect compositions and unnatural textures in AI-generated images.",
            emoji="💡",
        ),
    ),
    (
        0,
        SummaryFeedback(
            title="Keep Practicing! 🌱",
            message="Don't worry, AI detection is tricky! The more you practice, the better you'll get.",
            tip="Focus on facial features, hand details, and background consistency - these are often AI giveaways.",
            emoji="🌱",
        ),
    ),
)


def accuracy_pct(score: int, attempts: int) -> int:
    """Rounded percentage of correct answers; zero before the first attempt."""

    if attempts <= 0:
        return 0
    # Round half up, matching how the score card has always displayed it.
    return int(100.0 * score / attempts + 0.5)


def summary_feedback(accuracy: int) -> SummaryFeedback:
    for floor, feedback in FEEDBACK_TIERS:
        if accuracy >= floor:
            return feedback
    return FEEDBACK_TIERS[-1][1]


def share_text(score: int, attempts: int) -> str:
    return f"I scored {score}/{attempts} ({accuracy_pct(score, attempts)}%) in {GAME_TITLE}"


class ScoreBoard:
    """Score, attempts and streak for the game in progress."""

    def __init__(self) -> None:
        self.score = 0
        self.total_attempts = 0
        self.correct_streak = 0
        self.best_streak = 0
        self.last_correct: bool | None = None

    def register(self, correct: bool) -> None:
        self.total_attempts += 1
        self.last_correct = correct
        if correct:
            self.score += 1
            self.correct_streak += 1
            self.best_streak = max(self.best_streak, self.correct_streak)
        else:
            self.correct_streak = 0

    def milestone_reached(self, every: int) -> bool:
        """True when the latest answer was correct and landed on a streak milestone."""

        if not self.last_correct or every <= 0:
            return False
        return self.correct_streak > 0 and self.correct_streak % every == 0

    @property
    def accuracy(self) -> int:
        return accuracy_pct(self.score, self.total_attempts)

    def reset(self) -> None:
        self.score = 0
        self.total_attempts = 0
        self.correct_streak = 0
        self.best_streak = 0
        self.last_correct = None


@dataclass(frozen=True)
class SummaryStats:
    rounds: int
    correct: int
    accuracy_pct: int
    best_streak: int
    by_category: dict[str, tuple[int, int]]


def _as_bool(value: Any) -> bool:
    return value is True


def summarize_records(records: Sequence[Mapping[str, Any]]) -> SummaryStats:
    """Aggregate per-round records (``category``, ``correct``) into summary stats."""

    correct = 0
    streak = 0
    best_streak = 0
    by_category: dict[str, tuple[int, int]] = {}
    for record in records:
        hit = _as_bool(record.get("correct"))
        category = str(record.get("category") or "unknown")
        hits, total = by_category.get(category, (0, 0))
        by_category[category] = (hits + int(hit), total + 1)
        if hit:
            correct += 1
            streak += 1
            best_streak = max(best_streak, streak)
        else:
            streak = 0
    rounds = len(records)
    return SummaryStats(
        rounds=rounds,
        correct=correct,
        accuracy_pct=accuracy_pct(correct, rounds),
        best_streak=best_streak,
        by_category=by_category,
    )
