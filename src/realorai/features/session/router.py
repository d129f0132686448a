from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, model_validator

from ...core.errors import DataUnavailable, StructuralInconsistency
from ...core.models import normalize_filter
from .service import MODES, SessionConfig, SessionManager

__all__ = [
    "AdvanceRequest",
    "CategoryRequest",
    "CreateSessionRequest",
    "GuessRequest",
    "create_session_router",
]


class CreateSessionRequest(BaseModel):
    mode: str | None = None
    category: str | None = None
    seed: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: dict[str, object]) -> dict[str, object]:
        if not isinstance(data, dict):
            return data
        cleaned: dict[str, object] = dict(data)
        value = cleaned.get("seed")
        if value in (None, ""):
            cleaned["seed"] = None
        elif isinstance(value, str):
            try:
                cleaned["seed"] = int(value)
            except ValueError:
                cleaned["seed"] = None
        return cleaned

    @model_validator(mode="after")
    def _normalize(self) -> CreateSessionRequest:
        mode = (self.mode or "pair").strip().lower()
        if mode not in MODES:
            mode = "pair"
        self.mode = mode
        self.category = normalize_filter(self.category)
        return self


class GuessRequest(BaseModel):
    answer: str


class AdvanceRequest(BaseModel):
    round_id: int


class CategoryRequest(BaseModel):
    category: str


class _SessionController:
    def __init__(self, manager: SessionManager) -> None:
        self.manager = manager

    # ------------------------------------------------------------------ helpers
    def _json_response(self, data: dict[str, object]) -> JSONResponse:
        response = JSONResponse(data)
        response.headers.setdefault("Cache-Control", "no-store")
        return response

    def _translate(self, exc: Exception) -> HTTPException:
        if isinstance(exc, KeyError):
            return HTTPException(404, exc.args[0] if exc.args else "session not found")
        if isinstance(exc, DataUnavailable):
            return HTTPException(404, str(exc))
        if isinstance(exc, StructuralInconsistency):
            return HTTPException(500, str(exc))
        return HTTPException(400, str(exc))

    # ------------------------------------------------------------------ actions
    async def create(self, body: CreateSessionRequest) -> Response:
        config = SessionConfig(mode=body.mode or "pair", category=body.category or "all", seed=body.seed)
        try:
            session_id = await self.manager.create_session_async(config)
            payload = await self.manager.get_round_async(session_id)
        except (DataUnavailable, StructuralInconsistency, ValueError) as exc:
            raise self._translate(exc) from exc
        return self._json_response({"session": session_id, **payload.to_dict()})

    async def round(self, sid: str) -> Response:
        try:
            payload = await self.manager.get_round_async(sid)
        except KeyError as exc:
            raise self._translate(exc) from exc
        return self._json_response(payload.to_dict())

    async def guess(self, sid: str, body: GuessRequest) -> Response:
        try:
            result = await self.manager.guess_async(sid, body.answer)
        except (KeyError, StructuralInconsistency, ValueError) as exc:
            raise self._translate(exc) from exc
        return self._json_response(result.to_dict())

    async def advance(self, sid: str, body: AdvanceRequest) -> Response:
        try:
            result = await self.manager.advance_async(sid, body.round_id)
        except (KeyError, DataUnavailable, StructuralInconsistency, ValueError) as exc:
            raise self._translate(exc) from exc
        return self._json_response(result.to_dict())

    async def category(self, sid: str, body: CategoryRequest) -> Response:
        try:
            payload = await self.manager.set_category_async(sid, body.category)
        except (KeyError, DataUnavailable, StructuralInconsistency) as exc:
            raise self._translate(exc) from exc
        return self._json_response(payload.to_dict())

    async def reset(self, sid: str) -> Response:
        try:
            payload = await self.manager.reset_async(sid)
        except (KeyError, DataUnavailable, StructuralInconsistency) as exc:
            raise self._translate(exc) from exc
        return self._json_response(payload.to_dict())

    async def summary(self, sid: str) -> Response:
        try:
            summary = await self.manager.summary_async(sid)
        except KeyError as exc:
            raise self._translate(exc) from exc
        return self._json_response(summary.to_dict())

    def end(self, sid: str) -> Response:
        try:
            self.manager.end_session(sid)
        except KeyError as exc:
            raise self._translate(exc) from exc
        return Response(status_code=204)


def create_session_router(manager: SessionManager) -> APIRouter:
    controller = _SessionController(manager)
    router = APIRouter(prefix="/api/v1/session", tags=["session"])

    @router.post("")
    async def create_session(body: CreateSessionRequest) -> Response:
        return await controller.create(body)

    @router.get("/{sid}/round")
    async def get_round(sid: str) -> Response:
        return await controller.round(sid)

    @router.post("/{sid}/guess")
    async def post_guess(sid: str, body: GuessRequest) -> Response:
        return await controller.guess(sid, body)

    @router.post("/{sid}/advance")
    async def post_advance(sid: str, body: AdvanceRequest) -> Response:
        return await controller.advance(sid, body)

    @router.post("/{sid}/category")
    async def post_category(sid: str, body: CategoryRequest) -> Response:
        return await controller.category(sid, body)

    @router.post("/{sid}/reset")
    async def post_reset(sid: str) -> Response:
        return await controller.reset(sid)

    @router.get("/{sid}/summary")
    async def get_summary(sid: str) -> Response:
        return await controller.summary(sid)

    @router.delete("/{sid}")
    async def delete_session(sid: str) -> Response:
        return controller.end(sid)

    return router
