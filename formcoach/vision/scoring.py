"""Form-quality scoring from a single keypoint frame.

The score starts at 1.0 and loses a fixed penalty for each visibly
misaligned left/right pair (shoulders, hips). Frames where the body is not
sufficiently in view are gated to 0.0 instead of being penalized.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
from loguru import logger

from formcoach.core.config import get_settings
from formcoach.vision.keypoints import Joint, KeypointFrame, POSTURAL_JOINTS


class Feedback(str, Enum):
    EXCELLENT = "excellent"
    GREAT = "great"
    GOOD = "good"
    NEEDS_ADJUSTMENT = "needs_adjustment"
    CHECK_FORM = "check_form"
    INSUFFICIENT_VISIBILITY = "insufficient_visibility"
    NO_POSE = "no_pose"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    Feedback.EXCELLENT: "Perfect form!",
    Feedback.GREAT: "Great form! Keep it up!",
    Feedback.GOOD: "Good! Watch your posture",
    Feedback.NEEDS_ADJUSTMENT: "Adjust your position",
    Feedback.CHECK_FORM: "Check your form",
    Feedback.INSUFFICIENT_VISIBILITY: "Make sure your full body is visible",
    Feedback.NO_POSE: "Position yourself in frame",
}

# Evaluated high to low; first band whose floor the score reaches wins.
_BANDS = (
    (0.9, Feedback.EXCELLENT),
    (0.8, Feedback.GREAT),
    (0.7, Feedback.GOOD),
    (0.5, Feedback.NEEDS_ADJUSTMENT),
)


def feedback_for_score(score: float) -> Feedback:
    for floor, feedback in _BANDS:
        if score >= floor:
            return feedback
    return Feedback.CHECK_FORM


@dataclass(frozen=True)
class FormScore:
    score: float
    feedback: Feedback

    @property
    def message(self) -> str:
        return self.feedback.message

    @property
    def band_color(self) -> str:
        if self.score >= 0.8:
            return "green"
        if self.score >= 0.6:
            return "yellow"
        if self.score >= 0.4:
            return "orange"
        return "red"

    @classmethod
    def none(cls) -> "FormScore":
        return cls(0.0, Feedback.NO_POSE)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "feedback": self.feedback.value,
            "message": self.message,
            "color": self.band_color,
        }


@dataclass(frozen=True)
class ScoringConfig:
    visibility_threshold: float = 0.5
    min_visible: int = 4
    alignment_threshold: float = 0.1
    alignment_penalty: float = 0.2

    @classmethod
    def from_settings(cls) -> "ScoringConfig":
        s = get_settings()
        return cls(
            visibility_threshold=float(s.visibility_threshold),
            min_visible=int(s.min_visible_postural),
            alignment_threshold=float(s.alignment_threshold),
            alignment_penalty=float(s.alignment_penalty),
        )


_PAIRS = (
    (Joint.LEFT_SHOULDER, Joint.RIGHT_SHOULDER),
    (Joint.LEFT_HIP, Joint.RIGHT_HIP),
)


class FormScorer:
    """Pure scorer; safe to call from a worker thread."""

    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self.config = config or ScoringConfig.from_settings()

    def score(self, frame: KeypointFrame) -> FormScore:
        cfg = self.config
        arr = frame.as_array()
        conf = np.nan_to_num(arr[:, 3], nan=0.0)
        visible = conf > cfg.visibility_threshold

        n_visible = int(visible[list(POSTURAL_JOINTS)].sum())
        if n_visible < cfg.min_visible:
            return FormScore(0.0, Feedback.INSUFFICIENT_VISIBILITY)

        score = 1.0
        for left, right in _PAIRS:
            if not (visible[left] and visible[right]):
                continue
            if abs(arr[left, 1] - arr[right, 1]) > cfg.alignment_threshold:
                score -= cfg.alignment_penalty
        score = round(max(0.0, min(1.0, score)), 6)
        result = FormScore(score, feedback_for_score(score))
        logger.debug("form score={} visible={} feedback={}", score, n_visible, result.feedback.value)
        return result
