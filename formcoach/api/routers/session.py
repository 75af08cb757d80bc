"""Session control endpoints.

Provides start/play/pause/resume/stop controls, rep and tick events,
persistence of finished sessions, and history endpoints.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger
from sqlalchemy.orm import Session

from formcoach.api.routers.catalog import catalog
from formcoach.api.schemas import Envelope, SessionResultOutput, SessionStartInput
from formcoach.core.config import get_settings
from formcoach.core.dal import add_session_result, get_last_session_result, get_session_results
from formcoach.core.db import SessionLocal, get_db, init_db
from formcoach.session.clock import SessionClock
from formcoach.session.engine import CoachingEngine
from formcoach.session.models import SessionResult

router = APIRouter()

# Ensure tables exist at import time (idempotent)
init_db()


def _persist_result(result: SessionResult) -> None:
    db = SessionLocal()
    try:
        row = add_session_result(db, result)
        logger.info("Session result stored id={} duration={}", row.id, row.total_duration_sec)
    finally:
        db.close()


settings = get_settings()
engine = CoachingEngine(on_result=_persist_result)
clock = SessionClock(engine, interval=settings.tick_interval_sec)


def _state_envelope(ok: bool) -> Envelope:
    data = engine.snapshot().to_dict()
    if not ok:
        return Envelope(success=False, data=data, error="invalid_transition")
    return Envelope(success=True, data=data)


@router.post("/session/start", response_model=Envelope)
def session_start(payload: Optional[SessionStartInput] = None) -> Envelope:
    data = payload or SessionStartInput()
    if data.plan:
        target = catalog.plan(data.plan)
    elif data.exercise:
        target = catalog.exercise(data.exercise)
    else:
        return Envelope(success=False, error="missing_exercise")

    ok = engine.start(target)
    if ok and data.autoplay:
        ok = engine.play()
    return _state_envelope(ok)


@router.post("/session/play", response_model=Envelope)
def session_play() -> Envelope:
    return _state_envelope(engine.play())


@router.post("/session/pause", response_model=Envelope)
def session_pause() -> Envelope:
    return _state_envelope(engine.pause())


@router.post("/session/resume", response_model=Envelope)
def session_resume() -> Envelope:
    return _state_envelope(engine.resume())


@router.post("/session/skip", response_model=Envelope)
def session_skip() -> Envelope:
    return _state_envelope(engine.skip())


@router.post("/session/restart", response_model=Envelope)
def session_restart() -> Envelope:
    return _state_envelope(engine.restart())


@router.post("/session/rep", response_model=Envelope)
def session_rep() -> Envelope:
    return _state_envelope(engine.rep_completed())


@router.post("/session/tick", response_model=Envelope)
def session_tick(seconds: int = Query(1, ge=1, le=3600)) -> Envelope:
    applied = clock.advance(seconds)
    envelope = _state_envelope(True)
    envelope.data["ticks_applied"] = applied
    return envelope


@router.post("/session/stop", response_model=Envelope)
def session_stop() -> Envelope:
    result = engine.stop()
    if result is None:
        return Envelope(success=False, error="no_active_session")
    summary = result.to_dict()
    summary["status"] = engine.snapshot().status.value
    logger.info(
        "Session stopped duration={} reps={} calories={}",
        result.total_duration_seconds,
        result.total_reps,
        result.calories_burned,
    )
    return Envelope(success=True, data=summary)


@router.get("/session/status", response_model=Envelope)
def session_status() -> Envelope:
    data = engine.snapshot().to_dict()
    last = engine.last_result
    data["session_summary"] = last.to_dict() if last else None
    return Envelope(success=True, data=data)


@router.get("/session/last", response_model=Envelope)
def session_last(db: Session = Depends(get_db)) -> Envelope:
    row = get_last_session_result(db)
    if not row:
        return Envelope(success=True, data=None)
    payload = SessionResultOutput.model_validate(row)
    return Envelope(success=True, data=payload.model_dump(mode="json"))


@router.get("/session/history", response_model=Envelope)
def session_history(
    db: Session = Depends(get_db),
    limit: int = Query(10, ge=1, le=100),
) -> Envelope:
    rows = get_session_results(db, limit=limit)
    items = [
        SessionResultOutput.model_validate(row).model_dump(mode="json")
        for row in rows
    ]
    return Envelope(success=True, data={"sessions": items, "count": len(items)})
