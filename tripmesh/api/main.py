"""FastAPI application exposing plan, rank and learn."""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from tripmesh import __version__
from tripmesh.api.schemas import (
    HealthResponse,
    LearnRequest,
    LearnResponse,
    PlanRequest,
    PlanResponse,
    RankRequest,
    RankResponse,
)
from tripmesh.application.engine import PlanningEngine, build_engine
from tripmesh.domain.exceptions import DomainError
from tripmesh.domain.models import Preferences
from tripmesh.security.key_manager import get_key_manager
from tripmesh.sources import PlanningContext

_api_logger = logging.getLogger("tripmesh.api")

load_dotenv()

app = FastAPI(
    title="tripmesh",
    version=__version__,
    docs_url="/docs" if os.getenv("ENABLE_DOCS", "false").lower() == "true" else None,
    redoc_url=None,
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["*"],
)

_engine: Optional[PlanningEngine] = None


def get_engine() -> PlanningEngine:
    global _engine
    if _engine is None:
        _engine = build_engine()
    return _engine


def set_engine(engine: Optional[PlanningEngine]) -> None:
    global _engine
    _engine = engine


def _safe_log_exception(context: str, exc: Exception) -> None:
    _api_logger.error("%s: %s", context, get_key_manager().scrub_text(str(exc)))


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", version=__version__)


@app.get("/diagnostics")
def diagnostics():
    """Active tools, sources and in-process metrics (put behind auth in production)."""
    return get_engine().diagnostics()


@app.post("/plan", response_model=PlanResponse)
def plan(req: PlanRequest):
    engine = get_engine()
    prefs = req.preferences or engine.get_preferences()
    context_kwargs = {
        "origin_text": req.origin_text,
        "destination_text": req.destination_text,
        "city_hint": req.city_hint,
    }
    if req.departure_ms is not None:
        context_kwargs["departure_ms"] = req.departure_ms
    try:
        result = engine.plan(req.origin, req.destination, prefs, PlanningContext(**context_kwargs))
    except DomainError as exc:
        _safe_log_exception("plan rejected", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from None

    return PlanResponse(
        recommendations=engine.recommend(result.itineraries, prefs),
        degraded=result.degraded,
        warnings=result.warnings,
        source_reports=result.source_reports,
        trace_id=result.trace_id,
    )


@app.post("/rank", response_model=RankResponse)
def rank(req: RankRequest):
    return RankResponse(recommendations=get_engine().recommend(req.itineraries, req.preferences))


@app.post("/learn", response_model=LearnResponse)
def learn(req: LearnRequest):
    outcome = get_engine().learn_from_selection(req.selected, req.candidates)
    return LearnResponse(
        preferences=outcome.preferences,
        message=outcome.message,
        adjusted=outcome.adjusted,
    )


@app.get("/preferences", response_model=Preferences)
def get_preferences():
    return get_engine().get_preferences()


@app.put("/preferences", response_model=Preferences)
def put_preferences(prefs: Preferences):
    return get_engine().set_preferences(prefs)
