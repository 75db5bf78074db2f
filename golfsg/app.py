from __future__ import annotations

import os

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from golfsg.api.health import health as _health_handler
from golfsg.api.routers.sg import router as sg_router
from golfsg.metrics import MetricsMiddleware, metrics_app

app = FastAPI(title="golfsg")

allow = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost,http://127.0.0.1").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in allow if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(MetricsMiddleware)

app.include_router(sg_router)
app.add_api_route(
    "/health",
    _health_handler,
    methods=["GET"],
    response_model=None,
    tags=["health"],
)


_metrics_router = APIRouter()


@_metrics_router.get("/metrics", include_in_schema=False)
async def _metrics_endpoint(request: Request):
    return await metrics_app(request)


app.include_router(_metrics_router)


__all__ = ["app"]
