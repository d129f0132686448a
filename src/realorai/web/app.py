from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .. import __version__
from ..core.settings import game_settings_from_env, settings_from_env
from ..data.catalog import AssetCatalog, default_image_root
from ..features.session import SessionManager, create_session_router

__all__ = ["app", "create_app"]

logger = logging.getLogger(__name__)


def create_app(
    manager: SessionManager | None = None,
    *,
    catalog: AssetCatalog | None = None,
    image_root: Path | None = None,
) -> FastAPI:
    """Build the JSON API. Images are served from ``image_root`` when it exists."""

    session_manager = manager or SessionManager(
        catalog,
        settings=settings_from_env(),
        game=game_settings_from_env(),
    )
    application = FastAPI(title="Real or AI?", version=__version__)
    application.state.manager = session_manager
    application.include_router(create_session_router(session_manager))

    @application.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @application.get("/api/v1/catalog")
    def catalog_overview() -> dict[str, object]:
        current = session_manager.catalog
        return {
            "available": list(current.available_categories()),
            "categories": current.describe(),
            "images": len(current),
        }

    root = image_root if image_root is not None else default_image_root()
    if root.is_dir():
        application.mount("/images", StaticFiles(directory=str(root)), name="images")
    else:
        logger.debug("image root %s missing; static images not mounted", root)
    return application


app = create_app()
