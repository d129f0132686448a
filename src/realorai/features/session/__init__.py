"""Session feature: service layer, schemas, and API router."""

from .router import create_session_router
from .schemas import (
    AdvanceResult,
    FeedbackPayload,
    GuessResult,
    ImagePayload,
    RoundPayload,
    RoundResponse,
    ScorePayload,
    SummaryPayload,
)
from .service import SessionConfig, SessionManager

__all__ = [
    "AdvanceResult",
    "FeedbackPayload",
    "GuessResult",
    "ImagePayload",
    "RoundPayload",
    "RoundResponse",
    "ScorePayload",
    "SessionConfig",
    "SessionManager",
    "SummaryPayload",
    "create_session_router",
]
