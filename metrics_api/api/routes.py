from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response

from metrics_api.engine.service import BackgroundService
from metrics_api.models import CacheKey

logger = logging.getLogger(__name__)

router = APIRouter()


def _service(request: Request) -> BackgroundService:
    return request.app.state.service


def _document(request: Request, key: CacheKey) -> Response:
    return Response(content=_service(request).get(key), media_type="application/json")


# ── metric documents ─────────────────────────────────


@router.get("/metric/dynamic")
async def get_dynamic_metric(request: Request) -> Response:
    return _document(request, CacheKey.DYNAMIC)


@router.get("/metric/static")
async def get_static_metric(request: Request) -> Response:
    return _document(request, CacheKey.STATIC)


@router.get("/metric/network_connection")
async def get_network_connection_metric(request: Request) -> Response:
    return _document(request, CacheKey.NETWORK_CONNECTION)


# ── service status ───────────────────────────────────


@router.get("/api/status")
async def get_status(request: Request) -> dict:
    return _service(request).status()
