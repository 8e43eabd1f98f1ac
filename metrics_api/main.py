from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from metrics_api.api.routes import router
from metrics_api.config import Settings
from metrics_api.engine.service import BackgroundService

logger = logging.getLogger(__name__)


def _mount_frontend(app: FastAPI, dist: Path) -> None:
    """Serve a pre-built dashboard; API routes are registered first and still win."""
    assets = dist / "assets"
    if assets.is_dir():
        app.mount("/assets", StaticFiles(directory=str(assets)), name="static-assets")

    root = dist.resolve()

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_spa(full_path: str):
        file_path = (root / full_path).resolve()
        if full_path and file_path.is_relative_to(root) and file_path.is_file():
            return FileResponse(str(file_path))
        return FileResponse(str(dist / "index.html"))


def create_app(service: BackgroundService, settings: Settings | None = None) -> FastAPI:
    settings = settings or service.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ── startup ───────────────────────────────────────
        await service.start()
        logger.info("Metrics API started on http://%s:%d", settings.host, settings.port)

        yield

        # ── shutdown ──────────────────────────────────────
        await service.stop()
        logger.info("Metrics API shut down")

    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(router)

    if settings.frontend_dist:
        dist = Path(settings.frontend_dist)
        if dist.is_dir():
            _mount_frontend(app, dist)
        else:
            logger.warning("Frontend directory %s not found, serving API only", dist)

    return app
