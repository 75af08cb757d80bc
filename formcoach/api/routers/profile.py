"""Profile endpoint router for reading/writing the user's goal and timezone."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from formcoach.api.schemas import Envelope, ProfileInput, ProfileOutput
from formcoach.core.dal import get_user_profile, save_user_profile
from formcoach.core.db import get_db, init_db

router = APIRouter()

# Ensure tables exist at import time (idempotent)
init_db()


@router.get("/profile", response_model=Envelope)
async def get_profile(db: Session = Depends(get_db)) -> Envelope:
    profile = get_user_profile(db)
    return Envelope(success=True, data=ProfileOutput.model_validate(profile).model_dump())


@router.post("/profile", response_model=Envelope)
async def set_profile(payload: ProfileInput, db: Session = Depends(get_db)) -> Envelope:
    profile = save_user_profile(
        db,
        name=payload.name,
        weekly_goal_minutes=payload.weekly_goal_minutes,
        timezone=payload.timezone,
    )
    return Envelope(success=True, data=ProfileOutput.model_validate(profile).model_dump())
