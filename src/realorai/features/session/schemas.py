from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "AdvanceResult",
    "CategoryScorePayload",
    "FeedbackPayload",
    "GuessResult",
    "ImagePayload",
    "RoundPayload",
    "RoundResponse",
    "ScorePayload",
    "SummaryPayload",
]


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ImagePayload(_APIModel):
    id: str
    src: str
    category: str
    lqip_src: str | None = None


class RoundPayload(_APIModel):
    round_id: int
    mode: str
    category_filter: str
    category: str
    images: list[ImagePayload]
    round_no: int
    total_rounds: int
    answered: bool = False


class ScorePayload(_APIModel):
    score: int
    total_attempts: int
    correct_streak: int
    best_streak: int
    accuracy_pct: int


class CategoryScorePayload(_APIModel):
    correct: int
    rounds: int


class SummaryPayload(_APIModel):
    rounds: int
    correct: int
    accuracy_pct: int
    best_streak: int
    title: str
    message: str
    tip: str
    emoji: str
    share_text: str
    by_category: dict[str, CategoryScorePayload] = Field(default_factory=dict)


class RoundResponse(_APIModel):
    done: bool
    round: RoundPayload | None = None
    score: ScorePayload | None = None
    summary: SummaryPayload | None = None


class FeedbackPayload(_APIModel):
    correct: bool
    answer: str
    # Pair mode reveals which image was AI; single-image mode reveals the truth for the shown image.
    ai_image_id: str | None = None
    is_ai: bool | None = None
    score: ScorePayload
    milestone: bool = False
    game_over: bool = False
    reveal_delay_ms: int


class GuessResult(_APIModel):
    feedback: FeedbackPayload
    summary: SummaryPayload | None = None


class AdvanceResult(_APIModel):
    stale: bool = False
    next_payload: RoundResponse = Field(..., alias="next")
