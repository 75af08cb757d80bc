"""Exercise catalog endpoints."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from formcoach.api.schemas import Envelope
from formcoach.core.config import get_settings
from formcoach.session.models import Category, Difficulty
from formcoach.trainer.catalog import Catalog

router = APIRouter()

catalog = Catalog.default() if get_settings().seed_catalog else Catalog()


@router.get("/catalog/exercises", response_model=Envelope)
async def list_exercises(
    category: Optional[Category] = None,
    difficulty: Optional[Difficulty] = None,
    search: Optional[str] = Query(None, max_length=100),
) -> Envelope:
    items = [ex.to_dict() for ex in catalog.exercises(category, difficulty, search)]
    return Envelope(success=True, data={"exercises": items, "count": len(items)})


@router.get("/catalog/plans", response_model=Envelope)
async def list_plans(
    category: Optional[Category] = None,
    difficulty: Optional[Difficulty] = None,
    search: Optional[str] = Query(None, max_length=100),
) -> Envelope:
    items = [plan.to_dict() for plan in catalog.plans(category, difficulty, search)]
    return Envelope(success=True, data={"plans": items, "count": len(items)})
