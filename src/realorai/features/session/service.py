from __future__ import annotations

import logging
import random
import secrets
import string
import threading
from dataclasses import dataclass, field
from typing import Any

from ...core.errors import DataUnavailable, StructuralInconsistency
from ...core.models import Image, ImagePair, normalize_filter
from ...core.scoring import ScoreBoard, share_text, summarize_records, summary_feedback
from ...core.settings import GameSettings, SamplerSettings
from ...data.catalog import AssetCatalog, get_catalog
from ...dynamic.history import SessionHistory
from ...dynamic.pair_sampler import PairSampler
from ...dynamic.sequence import SequencePlanner
from .concurrency import run_blocking
from .schemas import (
    AdvanceResult,
    CategoryScorePayload,
    FeedbackPayload,
    GuessResult,
    ImagePayload,
    RoundPayload,
    RoundResponse,
    ScorePayload,
    SummaryPayload,
)

__all__ = [
    "MODES",
    "SessionConfig",
    "SessionManager",
    "SessionState",
]

logger = logging.getLogger(__name__)

PAIR = "pair"
SEQUENCE = "sequence"
MODES: tuple[str, ...] = (PAIR, SEQUENCE)
_GUESSES = {"real", "ai"}


@dataclass(frozen=True)
class SessionConfig:
    """Configuration for a play session."""

    mode: str = PAIR
    category: str = "all"
    seed: int | None = None


@dataclass
class SessionState:
    config: SessionConfig
    rng: random.Random
    history: SessionHistory
    pair_sampler: PairSampler
    planner: SequencePlanner
    category_filter: str
    scoreboard: ScoreBoard = field(default_factory=ScoreBoard)
    records: list[dict[str, Any]] = field(default_factory=list)
    round_id: int = 0
    pair: ImagePair | None = None
    display: list[Image] = field(default_factory=list)
    answered: bool = False


class SessionManager:
    """Owns session lifecycle independent of the presentation layer.

    Every call into a session's samplers happens under one lock, so the
    single-writer assumption of the samplers holds for a multi-threaded host.
    """

    def __init__(
        self,
        catalog: AssetCatalog | None = None,
        *,
        settings: SamplerSettings | None = None,
        game: GameSettings | None = None,
    ) -> None:
        self._catalog = catalog
        self.settings = settings or SamplerSettings()
        self.game = game or GameSettings()
        self._sessions: dict[str, SessionState] = {}
        self._lock = threading.Lock()

    @property
    def catalog(self) -> AssetCatalog:
        if self._catalog is None:
            self._catalog = get_catalog()
        return self._catalog

    def create_session(self, config: SessionConfig) -> str:
        mode = (config.mode or PAIR).strip().lower()
        if mode not in MODES:
            raise ValueError(f"Unknown mode '{config.mode}'. Options: {', '.join(MODES)}")
        category = normalize_filter(config.category)
        seed = config.seed if config.seed is not None else secrets.SystemRandom().getrandbits(32)
        rng = random.Random(seed)
        history = SessionHistory(self.settings.history_length)
        catalog = self.catalog
        state = SessionState(
            config=SessionConfig(mode=mode, category=category, seed=seed),
            rng=rng,
            history=history,
            pair_sampler=PairSampler(catalog, rng=rng, settings=self.settings, history=history),
            planner=SequencePlanner(catalog, rng=rng, settings=self.settings, history=history),
            category_filter=category,
        )
        _begin_game(state, category)
        session_id = _sid()
        with self._lock:
            self._sessions[session_id] = state
        logger.debug("session created", extra={"session_id": session_id, "mode": mode, "category": category})
        return session_id

    async def create_session_async(self, config: SessionConfig) -> str:
        return await run_blocking(self.create_session, config)

    def get_round(self, session_id: str) -> RoundResponse:
        with self._lock:
            state = self._require_session(session_id)
            return self._round_response(state)

    async def get_round_async(self, session_id: str) -> RoundResponse:
        return await run_blocking(self.get_round, session_id)

    def guess(self, session_id: str, answer: str) -> GuessResult:
        with self._lock:
            state = self._require_session(session_id)
            if self._game_over(state):
                raise ValueError("game already complete")
            if state.answered:
                raise ValueError("round already answered")
            normalized = (answer or "").strip()
            feedback_extra: dict[str, Any]
            if state.config.mode == PAIR:
                pair = state.pair
                if pair is None:
                    raise StructuralInconsistency(f"session '{session_id}' has no pair on display")
                if normalized not in {image.id for image in state.display}:
                    raise ValueError(f"'{answer}' is not one of the images in this round")
                correct = normalized == pair.ai.id
                category = pair.category
                feedback_extra = {"ai_image_id": pair.ai.id}
            else:
                image = state.planner.current()
                if image is None:
                    raise StructuralInconsistency(f"session '{session_id}' has no image on display")
                normalized = normalized.lower()
                if normalized not in _GUESSES:
                    raise ValueError("guess must be 'real' or 'ai'")
                correct = (normalized == "ai") == image.is_ai
                category = image.category
                feedback_extra = {"is_ai": image.is_ai}

            state.scoreboard.register(correct)
            state.answered = True
            state.records.append(
                {
                    "round_id": state.round_id,
                    "mode": state.config.mode,
                    "category": category,
                    "answer": normalized,
                    "correct": correct,
                    "image_ids": [image.id for image in state.display],
                }
            )
            game_over = self._game_over(state)
            feedback = FeedbackPayload(
                correct=correct,
                answer=normalized,
                score=_score_payload(state.scoreboard),
                milestone=state.scoreboard.milestone_reached(self.game.streak_milestone),
                game_over=game_over,
                reveal_delay_ms=self.game.reveal_delay_ms,
                **feedback_extra,
            )
            summary = _summary_payload(state.records) if game_over else None
        return GuessResult(feedback=feedback, summary=summary)

    async def guess_async(self, session_id: str, answer: str) -> GuessResult:
        return await run_blocking(self.guess, session_id, answer)

    def advance(self, session_id: str, round_id: int) -> AdvanceResult:
        """Move past an answered round.

        ``round_id`` identifies the round the caller's reveal timer was started
        for; if the session has moved on since (category switch, reset), the
        request is stale and is discarded without touching sampler state.
        """

        with self._lock:
            state = self._require_session(session_id)
            if round_id != state.round_id:
                logger.debug(
                    "stale advance discarded",
                    extra={"session_id": session_id, "round_id": round_id, "current": state.round_id},
                )
                return AdvanceResult(stale=True, next_payload=self._round_response(state))
            if not state.answered:
                raise ValueError("round has not been answered yet")
            if not self._game_over(state):
                _next_round(state)
            return AdvanceResult(stale=False, next_payload=self._round_response(state))

    async def advance_async(self, session_id: str, round_id: int) -> AdvanceResult:
        return await run_blocking(self.advance, session_id, round_id)

    def set_category(self, session_id: str, category: str) -> RoundResponse:
        key = normalize_filter(category)
        with self._lock:
            state = self._require_session(session_id)
            _begin_game(state, key)
            return self._round_response(state)

    async def set_category_async(self, session_id: str, category: str) -> RoundResponse:
        return await run_blocking(self.set_category, session_id, category)

    def reset(self, session_id: str) -> RoundResponse:
        with self._lock:
            state = self._require_session(session_id)
            state.history.clear()
            _begin_game(state, state.category_filter)
            return self._round_response(state)

    async def reset_async(self, session_id: str) -> RoundResponse:
        return await run_blocking(self.reset, session_id)

    def summary(self, session_id: str) -> SummaryPayload:
        with self._lock:
            state = self._require_session(session_id)
            return _summary_payload(state.records)

    async def summary_async(self, session_id: str) -> SummaryPayload:
        return await run_blocking(self.summary, session_id)

    def end_session(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise KeyError(f"session '{session_id}' not found")

    def _require_session(self, session_id: str) -> SessionState:
        state = self._sessions.get(session_id)
        if state is None:
            raise KeyError(f"session '{session_id}' not found")
        return state

    def _game_over(self, state: SessionState) -> bool:
        return state.answered and state.scoreboard.total_attempts >= self.game.rounds_per_game

    def _round_response(self, state: SessionState) -> RoundResponse:
        score = _score_payload(state.scoreboard)
        if self._game_over(state):
            return RoundResponse(done=True, score=score, summary=_summary_payload(state.records))
        return RoundResponse(done=False, round=self._round_payload(state), score=score)

    def _round_payload(self, state: SessionState) -> RoundPayload:
        if state.config.mode == PAIR and state.pair is not None:
            category = state.pair.category
        else:
            current = state.display[0] if state.display else None
            category = current.category if current else state.category_filter
        attempts = state.scoreboard.total_attempts
        return RoundPayload(
            round_id=state.round_id,
            mode=state.config.mode,
            category_filter=state.category_filter,
            category=category,
            images=[_image_payload(image) for image in state.display],
            round_no=attempts if state.answered else attempts + 1,
            total_rounds=self.game.rounds_per_game,
            answered=state.answered,
        )


def _sid(length: int = 10) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _begin_game(state: SessionState, category_filter: str) -> None:
    """Start a fresh game for ``category_filter``; raises before mutating on bad input."""

    if state.config.mode == PAIR:
        pair = state.pair_sampler.next_pair(category_filter)
        _show_pair(state, pair)
    else:
        state.planner.initialize(category_filter)
        _show_single(state, state.planner.current())
    state.category_filter = category_filter
    state.scoreboard.reset()
    state.records.clear()


def _next_round(state: SessionState) -> None:
    if state.config.mode == PAIR:
        _show_pair(state, state.pair_sampler.next_pair(state.category_filter))
    else:
        _show_single(state, state.planner.advance())


def _show_pair(state: SessionState, pair: ImagePair) -> None:
    display = [pair.real, pair.ai]
    state.rng.shuffle(display)
    state.pair = pair
    state.display = display
    state.round_id += 1
    state.answered = False


def _show_single(state: SessionState, image: Image | None) -> None:
    if image is None:
        raise DataUnavailable("no image available for the current round")
    state.pair = None
    state.display = [image]
    state.round_id += 1
    state.answered = False


def _image_payload(image: Image) -> ImagePayload:
    return ImagePayload(id=image.id, src=image.src, category=image.category, lqip_src=image.lqip_src)


def _score_payload(board: ScoreBoard) -> ScorePayload:
    return ScorePayload(
        score=board.score,
        total_attempts=board.total_attempts,
        correct_streak=board.correct_streak,
        best_streak=board.best_streak,
        accuracy_pct=board.accuracy,
    )


def _summary_payload(records: list[dict[str, Any]]) -> SummaryPayload:
    stats = summarize_records(records)
    feedback = summary_feedback(stats.accuracy_pct)
    return SummaryPayload(
        rounds=stats.rounds,
        correct=stats.correct,
        accuracy_pct=stats.accuracy_pct,
        best_streak=stats.best_streak,
        title=feedback.title,
        message=feedback.message,
        tip=feedback.tip,
        emoji=feedback.emoji,
        share_text=share_text(stats.correct, stats.rounds),
        by_category={
            category: CategoryScorePayload(correct=hits, rounds=total)
            for category, (hits, total) in stats.by_category.items()
        },
    )
