from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from playroom.api.routes import router
from playroom.config import get_log_level
from playroom.protocol import SessionProtocol

__version__ = "0.1.0"

# Configure logging
logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)

_app_dir = Path(__file__).resolve().parent


def create_app(*, session: SessionProtocol | None = None) -> FastAPI:
    app = FastAPI(title="playroom", version=__version__)

    # Hosts are not authenticated; any origin may connect.
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    app.state.session = session or SessionProtocol()
    app.include_router(router)

    # Client pages are optional; don't fail when the directory is absent.
    static_dir = _app_dir / "static"
    if static_dir.exists():
        app.mount("/ui", StaticFiles(directory=str(static_dir), html=True), name="ui")

    @app.get("/")
    async def _root() -> RedirectResponse:
        return RedirectResponse(url="/ui/player.html")

    @app.get("/info")
    async def info() -> dict[str, str]:
        return {"name": "playroom", "version": __version__}

    return app


app = create_app()
