"""Posture scoring endpoint router.

Accepts detector keypoints for one camera frame and returns the form score,
or ``skipped`` when the frame falls between strides.
"""
from __future__ import annotations

from fastapi import APIRouter
from loguru import logger

from formcoach.api.routers.session import engine
from formcoach.api.schemas import Envelope, PostureInput
from formcoach.core.config import get_settings
from formcoach.vision.keypoints import KeypointFrame

router = APIRouter()


@router.post("/posture", response_model=Envelope)
async def posture_endpoint(payload: PostureInput) -> Envelope:
    frame = KeypointFrame.from_detections(
        [j.model_dump() for j in payload.joints],
        min_confidence=get_settings().extraction_threshold,
    )
    result = engine.submit_frame(frame, frame_index=payload.frame_index)
    if result is None:
        return Envelope(success=True, data={"skipped": True})
    logger.info("posture score={} feedback={} joints={}", result.score, result.feedback.value, len(frame))
    data = {"skipped": False, "visible_joints": len(frame)}
    data.update(result.to_dict())
    return Envelope(success=True, data=data)
